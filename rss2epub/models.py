"""Data models for rss2epub."""

from dataclasses import dataclass


@dataclass
class FeedItem:
    """Represents a single RSS/Atom feed item."""

    title: str
    content: str | None  # Full inline HTML, if the feed carries it
    link: str | None
    feed_url: str


@dataclass
class Chapter:
    """Represents one chapter added to the e-book."""

    file_name: str
    title: str
    body: str
