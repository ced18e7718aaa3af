"""Exception hierarchy for rss2epub.

Every failure aborts the whole run, so these exist to tell the operator which
stage failed, not to drive recovery.
"""


class Rss2EpubError(Exception):
    """Base class for all rss2epub failures."""


class ConfigError(Rss2EpubError):
    """Configuration file missing, unreadable or malformed."""


class FetchError(Rss2EpubError):
    """Network failure while retrieving a feed or an article."""


class FeedFetchError(FetchError):
    """Feed document could not be downloaded."""


class ArticleFetchError(FetchError):
    """Linked article page could not be downloaded."""


class FeedParseError(Rss2EpubError):
    """Downloaded body is not a recognizable feed document."""


class SanitizationError(Rss2EpubError):
    """HTML sanitizer failed internally."""


class BookError(Rss2EpubError):
    """E-book could not be assembled or written."""


class BookAssemblyError(BookError):
    """Container library rejected a chapter or the book structure."""


class BookWriteError(BookError):
    """Output file could not be created or written."""


class DeliveryError(Rss2EpubError):
    """E-book could not be emailed."""


class InvalidAddressError(DeliveryError):
    """Sender or recipient is not a valid email address."""


class EmailTransportError(DeliveryError):
    """SMTP connection, authentication or send failed."""
