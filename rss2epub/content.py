"""Content resolution: decide the HTML body of each chapter."""

import requests
from bs4 import BeautifulSoup

from .errors import ArticleFetchError
from .logging_config import create_execution_logger
from .models import FeedItem
from .sanitize import sanitize_html

PLACEHOLDER = "No content available"

# Where a chapter body came from, reported in logs and metrics
SOURCE_INLINE = "inline"
SOURCE_ARTICLE = "article"
SOURCE_PLACEHOLDER = "placeholder"


def extract_paragraphs(html: str) -> str:
    """Extract every <p> of a page as paragraph HTML, hyperlinks unwrapped.

    Each anchor is replaced by its own text, so links disappear but their
    labels stay. Paragraphs keep document order.
    """
    soup = BeautifulSoup(html, "html.parser")
    paragraphs = []

    for paragraph in soup.find_all("p"):
        for anchor in paragraph.find_all("a"):
            anchor.replace_with(anchor.get_text())
        paragraphs.append(f"<p>{paragraph.decode_contents()}</p>")

    return "".join(paragraphs)


class ContentResolver:
    """Picks inline content, fetched article text or a placeholder per item."""

    def __init__(
        self,
        session: requests.Session,
        timeout: float = 30,
        execution_id: str | None = None,
    ):
        self.session = session
        self.timeout = timeout
        self.logger = create_execution_logger("content_resolver", execution_id)

    def resolve(self, item: FeedItem) -> str:
        """Return the sanitized chapter content for an item."""
        content, _ = self.resolve_with_source(item)
        return content

    def resolve_with_source(self, item: FeedItem) -> tuple[str, str]:
        """Return the sanitized chapter content and where it came from.

        Raises:
            ArticleFetchError: If the linked article cannot be downloaded
        """
        if item.content:
            return sanitize_html(item.content), SOURCE_INLINE

        if item.link:
            return self.fetch_full_content(item.link), SOURCE_ARTICLE

        self.logger.debug(
            "Item has neither content nor link, using placeholder",
            item_title=item.title,
        )
        return sanitize_html(PLACEHOLDER), SOURCE_PLACEHOLDER

    def fetch_full_content(self, url: str) -> str:
        """Download an article page and return its sanitized paragraphs."""
        try:
            self.logger.info(f"Fetching article: {url}", article_url=url)
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(
                f"Failed to download article {url}: {e}",
                article_url=url,
                error=str(e),
            )
            raise ArticleFetchError(f"Failed to download article {url}: {e}") from e

        return sanitize_html(extract_paragraphs(response.text))
