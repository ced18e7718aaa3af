"""Configuration management for rss2epub."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .logging_config import create_execution_logger

# Default config file path, relative to the working directory
CONFIG_FILE = "config.yml"

DEFAULT_OUTPUT_PATH = "rss_feed.epub"
DEFAULT_BOOK_TITLE = "RSS Feed Compilation"
DEFAULT_BOOK_AUTHOR = "RSS to EPUB Generator"
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_SMTP_PORT = 465

REQUIRED_EMAIL_FIELDS = ("from", "to", "smtp_server", "username", "password")


@dataclass(frozen=True)
class EmailConfig:
    """Configuration for the outgoing SMTP relay."""

    sender: str
    recipient: str
    smtp_server: str
    username: str
    password: str = field(repr=False)
    smtp_port: int = DEFAULT_SMTP_PORT
    starttls: bool = False


@dataclass(frozen=True)
class Config:
    """Main configuration, loaded once per run."""

    rss_feeds: list[str]
    email: EmailConfig
    output_path: str = DEFAULT_OUTPUT_PATH
    book_title: str = DEFAULT_BOOK_TITLE
    book_author: str = DEFAULT_BOOK_AUTHOR
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def load_config(
    path: str | Path = CONFIG_FILE, execution_id: str | None = None
) -> Config:
    """Load and validate the YAML configuration file.

    Args:
        path: Path to the YAML file
        execution_id: Execution ID for logging context

    Returns:
        Validated Config

    Raises:
        ConfigError: If the file is missing, unreadable or does not match the
            expected schema
    """
    logger = create_execution_logger("config", execution_id)
    config_file = Path(path)

    if not config_file.exists():
        logger.error(f"Config file not found: {config_file}")
        raise ConfigError(f"Config file not found: {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in config file: {e}")
        raise ConfigError(f"Invalid YAML in config file {config_file}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading config file: {e}")
        raise ConfigError(f"Error reading config file {config_file}: {e}") from e

    config = parse_config(data)
    logger.info(
        "Configuration loaded",
        config_file=str(config_file),
        feed_count=len(config.rss_feeds),
        smtp_server=config.email.smtp_server,
    )
    return config


def parse_config(data: Any) -> Config:
    """Build a Config from already-decoded YAML data."""
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping at the top level")

    feeds = data.get("rss_feeds")
    if feeds is None:
        raise ConfigError("Missing required field: rss_feeds")
    if not isinstance(feeds, list):
        raise ConfigError("Field rss_feeds must be a list of URLs")
    for index, url in enumerate(feeds):
        if not isinstance(url, str) or not url.strip():
            raise ConfigError(f"rss_feeds[{index}] must be a non-empty string")

    email = data.get("email")
    if email is None:
        raise ConfigError("Missing required block: email")
    if not isinstance(email, dict):
        raise ConfigError("Block email must be a mapping")

    for key in REQUIRED_EMAIL_FIELDS:
        if key not in email:
            raise ConfigError(f"Missing required field: email.{key}")
        if not isinstance(email[key], str):
            raise ConfigError(f"Field email.{key} must be a string")

    email_config = EmailConfig(
        sender=email["from"],
        recipient=email["to"],
        smtp_server=email["smtp_server"],
        username=email["username"],
        password=email["password"],
        smtp_port=_optional(email, "smtp_port", int, DEFAULT_SMTP_PORT, "email."),
        starttls=_optional(email, "starttls", bool, False, "email."),
    )

    return Config(
        rss_feeds=[url.strip() for url in feeds],
        email=email_config,
        output_path=_optional(data, "output_path", str, DEFAULT_OUTPUT_PATH),
        book_title=_optional(data, "book_title", str, DEFAULT_BOOK_TITLE),
        book_author=_optional(data, "book_author", str, DEFAULT_BOOK_AUTHOR),
        request_timeout=_optional(
            data, "request_timeout", (int, float), DEFAULT_REQUEST_TIMEOUT
        ),
    )


def _optional(block: dict, key: str, types, default, prefix: str = ""):
    value = block.get(key)
    if value is None:
        return default
    # bool is an int subclass; only accept it where bool is asked for
    if isinstance(value, bool) and types is not bool:
        raise ConfigError(f"Field {prefix}{key} has the wrong type")
    if not isinstance(value, types):
        raise ConfigError(f"Field {prefix}{key} has the wrong type")
    return value
