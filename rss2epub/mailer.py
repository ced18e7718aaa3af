"""Email Publisher for rss2epub."""

import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, parseaddr
from pathlib import Path

from .config import EmailConfig
from .errors import EmailTransportError, InvalidAddressError
from .logging_config import create_execution_logger

SUBJECT = "Your RSS Feed Compilation"
EPUB_MAINTYPE = "application"
EPUB_SUBTYPE = "epub+zip"


def parse_address(value: str) -> str:
    """Validate a mailbox ("user@host" or "Name <user@host>") and normalize it.

    Raises:
        InvalidAddressError: If value is not a single valid address
    """
    name, addr = parseaddr(value)
    local, at, domain = addr.rpartition("@")
    if (
        not at
        or not local
        or not domain
        or "@" in local
        or any(c.isspace() for c in addr)
        or "." in (domain[0], domain[-1])
    ):
        raise InvalidAddressError(f"Invalid email address: {value!r}")
    return formataddr((name, addr))


class EmailPublisher:
    """Sends the generated e-book through an authenticated SMTP relay."""

    def __init__(
        self,
        config: EmailConfig,
        timeout: float = 30,
        execution_id: str | None = None,
    ):
        """Initialize the publisher with relay settings."""
        self.config = config
        self.timeout = timeout
        self.logger = create_execution_logger("email_publisher", execution_id)

        self.logger.debug(
            "EmailPublisher initialized",
            smtp_server=config.smtp_server,
            smtp_port=config.smtp_port,
            starttls=config.starttls,
        )

    def build_message(self, file_path: str) -> EmailMessage:
        """Build the message carrying the e-book as attachment.

        Args:
            file_path: Path to the generated EPUB file

        Returns:
            Message ready to send

        Raises:
            InvalidAddressError: If the sender or recipient is malformed
        """
        sender = parse_address(self.config.sender)
        recipient = parse_address(self.config.recipient)

        data = Path(file_path).read_bytes()

        message = EmailMessage()
        message["From"] = sender
        message["To"] = recipient
        message["Subject"] = SUBJECT
        message.add_attachment(
            data,
            maintype=EPUB_MAINTYPE,
            subtype=EPUB_SUBTYPE,
            filename=Path(file_path).name,
        )
        return message

    def send_book(self, file_path: str) -> None:
        """Email the e-book to the configured recipient.

        Raises:
            InvalidAddressError: If the sender or recipient is malformed
            EmailTransportError: If connecting, authenticating or sending fails
        """
        message = self.build_message(file_path)

        self.logger.info(
            "Sending e-book",
            smtp_server=self.config.smtp_server,
            recipient=message["To"],
            attachment=Path(file_path).name,
        )

        try:
            with self._connect() as smtp:
                smtp.login(self.config.username, self.config.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(
                f"Failed to send e-book via {self.config.smtp_server}: {e}",
                smtp_server=self.config.smtp_server,
                error=str(e),
            )
            raise EmailTransportError(
                f"Failed to send e-book via {self.config.smtp_server}: {e}"
            ) from e

        self.logger.info("E-book sent successfully", recipient=message["To"])

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.config.starttls:
            smtp = smtplib.SMTP(
                self.config.smtp_server, self.config.smtp_port, timeout=self.timeout
            )
            try:
                smtp.starttls(context=context)
            except (smtplib.SMTPException, OSError):
                smtp.close()
                raise
            return smtp
        return smtplib.SMTP_SSL(
            self.config.smtp_server,
            self.config.smtp_port,
            timeout=self.timeout,
            context=context,
        )
