"""Unit tests for Email Publisher."""

import smtplib
from unittest.mock import patch

import pytest

from rss2epub.config import EmailConfig
from rss2epub.errors import EmailTransportError, InvalidAddressError
from rss2epub.mailer import SUBJECT, EmailPublisher, parse_address

EPUB_BYTES = b"PK\x03\x04fake-epub-bytes"


def make_config(**overrides) -> EmailConfig:
    values = {
        "sender": "RSS Bot <sender@example.com>",
        "recipient": "reader@example.com",
        "smtp_server": "smtp.example.com",
        "username": "sender",
        "password": "secret",
    }
    values.update(overrides)
    return EmailConfig(**values)


class TestParseAddress:
    """Unit tests for address validation."""

    def test_valid_addresses(self):
        assert parse_address("reader@example.com") == "reader@example.com"
        assert (
            parse_address("RSS Bot <sender@example.com>")
            == "RSS Bot <sender@example.com>"
        )

    @pytest.mark.parametrize(
        "value",
        ["", "not an address", "reader", "@example.com", "reader@", "a@b@c.com", "x@.com"],
    )
    def test_invalid_addresses(self, value):
        with pytest.raises(InvalidAddressError):
            parse_address(value)


class TestEmailPublisherUnit:
    """Unit tests for EmailPublisher."""

    def setup_method(self):
        self.publisher = EmailPublisher(make_config(), timeout=10)

    @pytest.fixture
    def book_path(self, tmp_path):
        path = tmp_path / "rss_feed.epub"
        path.write_bytes(EPUB_BYTES)
        return str(path)

    def test_build_message(self, book_path):
        message = self.publisher.build_message(book_path)

        assert message["Subject"] == SUBJECT
        assert message["From"] == "RSS Bot <sender@example.com>"
        assert message["To"] == "reader@example.com"

        attachments = list(message.iter_attachments())
        assert len(attachments) == 1
        assert attachments[0].get_content_type() == "application/epub+zip"
        assert attachments[0].get_filename() == "rss_feed.epub"
        assert attachments[0].get_content() == EPUB_BYTES

    def test_send_book_over_ssl(self, book_path):
        with patch("rss2epub.mailer.smtplib.SMTP_SSL") as mock_smtp_ssl:
            smtp = mock_smtp_ssl.return_value.__enter__.return_value

            self.publisher.send_book(book_path)

        args, kwargs = mock_smtp_ssl.call_args
        assert args == ("smtp.example.com", 465)
        assert kwargs["timeout"] == 10
        smtp.login.assert_called_once_with("sender", "secret")
        smtp.send_message.assert_called_once()
        sent = smtp.send_message.call_args[0][0]
        assert sent["Subject"] == SUBJECT

    def test_send_book_with_starttls(self, book_path):
        publisher = EmailPublisher(make_config(smtp_port=587, starttls=True))

        with patch("rss2epub.mailer.smtplib.SMTP") as mock_smtp:
            smtp = mock_smtp.return_value
            smtp.__enter__.return_value = smtp

            publisher.send_book(book_path)

        assert mock_smtp.call_args[0] == ("smtp.example.com", 587)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("sender", "secret")
        smtp.send_message.assert_called_once()

    def test_invalid_sender_fails_before_connecting(self, book_path):
        publisher = EmailPublisher(make_config(sender="not an address"))

        with patch("rss2epub.mailer.smtplib.SMTP_SSL") as mock_smtp_ssl:
            with pytest.raises(InvalidAddressError):
                publisher.send_book(book_path)

        mock_smtp_ssl.assert_not_called()

    def test_invalid_recipient_fails(self, book_path):
        publisher = EmailPublisher(make_config(recipient="reader@"))

        with pytest.raises(InvalidAddressError):
            publisher.build_message(book_path)

    def test_authentication_failure_raises_transport_error(self, book_path):
        with patch("rss2epub.mailer.smtplib.SMTP_SSL") as mock_smtp_ssl:
            smtp = mock_smtp_ssl.return_value.__enter__.return_value
            smtp.login.side_effect = smtplib.SMTPAuthenticationError(
                535, b"Authentication failed"
            )

            with pytest.raises(EmailTransportError) as exc_info:
                self.publisher.send_book(book_path)

        assert isinstance(exc_info.value.__cause__, smtplib.SMTPAuthenticationError)

    def test_connection_failure_raises_transport_error(self, book_path):
        with patch(
            "rss2epub.mailer.smtplib.SMTP_SSL",
            side_effect=ConnectionRefusedError("refused"),
        ):
            with pytest.raises(EmailTransportError, match="refused"):
                self.publisher.send_book(book_path)

    def test_book_left_on_disk_after_failure(self, book_path, tmp_path):
        with patch(
            "rss2epub.mailer.smtplib.SMTP_SSL", side_effect=OSError("unreachable")
        ):
            with pytest.raises(EmailTransportError):
                self.publisher.send_book(book_path)

        assert (tmp_path / "rss_feed.epub").read_bytes() == EPUB_BYTES
