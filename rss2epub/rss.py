"""RSS Feed Processing module for rss2epub."""

from urllib.parse import urlparse

import feedparser
import requests

from .errors import FeedFetchError, FeedParseError
from .logging_config import create_execution_logger
from .models import FeedItem

USER_AGENT = "rss2epub/1.0 (RSS to EPUB mailer)"

ALLOWED_SCHEMES = ("http", "https")


def create_session() -> requests.Session:
    """Create the HTTP session shared by feed and article downloads."""
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


class FeedProcessor:
    """Downloads RSS/Atom feeds and turns their entries into FeedItems."""

    def __init__(
        self,
        timeout: float = 30,
        execution_id: str | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize FeedProcessor with configuration.

        Args:
            timeout: HTTP request timeout in seconds
            execution_id: Execution ID for logging context
            session: Optional shared HTTP session
        """
        self.timeout = timeout
        self.logger = create_execution_logger("feed_processor", execution_id)
        self.session = session or create_session()

        self.logger.debug("FeedProcessor initialized", timeout=timeout)

    def parse_feed(self, feed_url: str) -> list[FeedItem]:
        """Download and parse a single RSS/Atom feed.

        Args:
            feed_url: URL of the RSS/Atom feed

        Returns:
            FeedItems in document order

        Raises:
            FeedFetchError: If the URL is not HTTP(S) or the download fails
            FeedParseError: If the body is not a recognizable feed
        """
        scheme = urlparse(feed_url).scheme
        if scheme not in ALLOWED_SCHEMES:
            error_msg = f"Feed URL must use HTTP or HTTPS: {feed_url}"
            self.logger.error(error_msg, feed_url=feed_url, scheme=scheme)
            raise FeedFetchError(error_msg)

        try:
            self.logger.info("Downloading feed content", feed_url=feed_url)
            response = self.session.get(feed_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(
                f"Failed to download feed {feed_url}: {e}",
                feed_url=feed_url,
                error=str(e),
            )
            raise FeedFetchError(f"Failed to download feed {feed_url}: {e}") from e

        self.logger.debug(
            "Feed downloaded successfully",
            feed_url=feed_url,
            status_code=response.status_code,
            content_length=len(response.content),
        )

        feed = feedparser.parse(response.content)

        if not feed.entries and not feed.get("version"):
            reason = feed.get("bozo_exception", "unknown feed format")
            error_msg = f"Not a recognizable feed document at {feed_url}: {reason}"
            self.logger.error(error_msg, feed_url=feed_url)
            raise FeedParseError(error_msg)

        if feed.bozo:
            self.logger.warning(
                f"Feed parsing warning for {feed_url}: {feed.get('bozo_exception')}",
                feed_url=feed_url,
            )

        items = []
        for entry in feed.entries:
            item = self.normalize_item(entry, feed_url)
            if item is None:
                self.logger.debug("Skipping entry without title", feed_url=feed_url)
                continue
            items.append(item)

        self.logger.info(
            "Successfully parsed feed",
            feed_url=feed_url,
            items_count=len(items),
            total_entries=len(feed.entries),
        )
        return items

    def normalize_item(self, raw_item, feed_url: str) -> FeedItem | None:
        """Normalize a feedparser entry into a FeedItem.

        Only the full content body (RSS content:encoded or Atom content) counts
        as inline content; the summary/description is ignored.

        Returns:
            FeedItem, or None if the entry has no title
        """
        title = raw_item.get("title")
        if not title:
            return None

        content = None
        content_list = raw_item.get("content")
        if content_list:
            value = content_list[0].get("value")
            if value:
                content = value

        link = raw_item.get("link") or None

        return FeedItem(title=title, content=content, link=link, feed_url=feed_url)
