"""Unit tests for RSS Feed Processor."""

from unittest.mock import Mock

import pytest
import requests

from rss2epub.errors import FeedFetchError, FeedParseError, FetchError
from rss2epub.models import FeedItem
from rss2epub.rss import USER_AGENT, FeedProcessor, create_session

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Example</title>
    <link>https://example.com/</link>
    <description>Example feed</description>
    <item>
      <title>First post</title>
      <link>https://example.com/first</link>
      <content:encoded><![CDATA[<p>Full body</p>]]></content:encoded>
    </item>
    <item>
      <title>Second post</title>
      <link>https://example.com/second</link>
      <description>Only a teaser</description>
    </item>
    <item>
      <description>No title here</description>
    </item>
    <item>
      <title>Third post</title>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom example</title>
  <id>urn:example:feed</id>
  <updated>2024-01-01T10:00:00Z</updated>
  <entry>
    <title>Atom entry</title>
    <id>urn:example:entry</id>
    <updated>2024-01-01T10:00:00Z</updated>
    <link href="https://example.com/atom-entry"/>
    <content type="html">&lt;p&gt;Atom body&lt;/p&gt;</content>
  </entry>
</feed>
"""


def make_processor(body: bytes = RSS_FEED) -> tuple[FeedProcessor, Mock]:
    session = Mock()
    response = Mock(status_code=200, content=body)
    response.raise_for_status.return_value = None
    session.get.return_value = response
    return FeedProcessor(timeout=5, session=session), session


class TestFeedProcessorUnit:
    """Unit tests for FeedProcessor.parse_feed."""

    def test_rss_items_in_document_order(self):
        processor, session = make_processor()

        items = processor.parse_feed("https://example.com/feed.xml")

        session.get.assert_called_once_with("https://example.com/feed.xml", timeout=5)
        assert [item.title for item in items] == [
            "First post",
            "Second post",
            "Third post",
        ]
        assert all(isinstance(item, FeedItem) for item in items)
        assert all(item.feed_url == "https://example.com/feed.xml" for item in items)

    def test_inline_content_from_content_encoded_only(self):
        processor, _ = make_processor()

        first, second, third = processor.parse_feed("https://example.com/feed.xml")

        assert first.content == "<p>Full body</p>"
        assert first.link == "https://example.com/first"
        # A description is a teaser, not inline content
        assert second.content is None
        assert second.link == "https://example.com/second"
        assert third.content is None
        assert third.link is None

    def test_atom_content(self):
        processor, _ = make_processor(ATOM_FEED)

        items = processor.parse_feed("https://example.com/atom.xml")

        assert len(items) == 1
        assert items[0].title == "Atom entry"
        assert items[0].content == "<p>Atom body</p>"
        assert items[0].link == "https://example.com/atom-entry"

    def test_plain_http_is_accepted(self):
        processor, session = make_processor()

        items = processor.parse_feed("http://example.com/feed.xml")

        assert len(items) == 3
        session.get.assert_called_once()

    def test_non_http_scheme_rejected(self):
        processor, session = make_processor()

        with pytest.raises(FeedFetchError, match="HTTP or HTTPS"):
            processor.parse_feed("ftp://example.com/feed.xml")
        session.get.assert_not_called()

    def test_timeout_raises_fetch_error(self):
        processor, session = make_processor()
        session.get.side_effect = requests.Timeout("timed out")

        with pytest.raises(FetchError) as exc_info:
            processor.parse_feed("https://example.com/feed.xml")

        assert isinstance(exc_info.value, FeedFetchError)
        assert isinstance(exc_info.value.__cause__, requests.Timeout)

    def test_http_error_status_raises_fetch_error(self):
        processor, session = make_processor()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError(
            "404 Client Error"
        )

        with pytest.raises(FeedFetchError, match="404"):
            processor.parse_feed("https://example.com/feed.xml")

    def test_non_feed_body_raises_parse_error(self):
        processor, _ = make_processor(b"<html><body><p>Not a feed</p></body></html>")

        with pytest.raises(FeedParseError):
            processor.parse_feed("https://example.com/page.html")

    def test_session_user_agent(self):
        session = create_session()

        assert session.headers["User-Agent"] == USER_AGENT
