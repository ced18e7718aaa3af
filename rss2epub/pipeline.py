"""Main entry point for rss2epub: feeds in, one e-book out by email."""

import os
from datetime import UTC, datetime
from typing import Any

from .book import BookAssembler
from .config import CONFIG_FILE, load_config
from .content import SOURCE_ARTICLE, ContentResolver
from .errors import Rss2EpubError
from .logging_config import create_execution_logger, setup_structured_logging
from .mailer import EmailPublisher
from .rss import FeedProcessor, create_session


def run(config_path: str = CONFIG_FILE, execution_id: str | None = None) -> dict[str, Any]:
    """
    Run the whole pipeline once.

    Load config, turn every item of every feed into a chapter, write the book
    and email it. The first failure aborts the run; nothing is retried.

    Args:
        config_path: Path to the YAML configuration file
        execution_id: Optional execution ID for logging context

    Returns:
        Run metrics

    Raises:
        Rss2EpubError: On any configuration, network, parse, assembly or
            delivery failure
    """
    if not execution_id:
        execution_id = f"run_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)

    # Config errors must surface before any network activity
    config = load_config(config_path, execution_id=execution_id)

    metrics = {
        "feeds_processed": 0,
        "items_found": 0,
        "articles_fetched": 0,
        "chapters_added": 0,
        "output_path": config.output_path,
    }

    session = create_session()
    feed_processor = FeedProcessor(
        timeout=config.request_timeout, execution_id=execution_id, session=session
    )
    resolver = ContentResolver(
        session, timeout=config.request_timeout, execution_id=execution_id
    )
    assembler = BookAssembler(
        config.book_title, config.book_author, execution_id=execution_id
    )

    for feed_url in config.rss_feeds:
        items = feed_processor.parse_feed(feed_url)
        metrics["feeds_processed"] += 1
        metrics["items_found"] += len(items)
        main_logger.log_feed_processing(feed_url, len(items))

        for item in items:
            content, source = resolver.resolve_with_source(item)
            if source == SOURCE_ARTICLE:
                metrics["articles_fetched"] += 1
            chapter = assembler.add_item(item, content)
            metrics["chapters_added"] += 1
            main_logger.log_chapter_added(item.title, chapter.file_name, source)

    assembler.write(config.output_path)

    publisher = EmailPublisher(
        config.email, timeout=config.request_timeout, execution_id=execution_id
    )
    publisher.send_book(config.output_path)

    main_logger.log_metrics(metrics)
    return metrics


def main() -> int:
    """Process entry point; returns the exit status."""
    setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))

    execution_id = f"run_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)
    main_logger.log_execution_start()

    try:
        metrics = run(execution_id=execution_id)
    except Rss2EpubError as e:
        main_logger.error(
            f"Run failed: {e}", error=str(e), error_type=type(e).__name__
        )
        main_logger.log_execution_end(success=False, error_type=type(e).__name__)
        return 1
    except Exception as e:
        main_logger.error(f"Unexpected error: {e}", exc_info=True)
        main_logger.log_execution_end(success=False, error=str(e))
        return 1

    main_logger.log_execution_end(success=True, metrics=metrics)
    return 0
