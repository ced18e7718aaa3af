"""EPUB assembly for rss2epub."""

import io
import uuid

from ebooklib import epub

from .errors import BookAssemblyError, BookWriteError
from .logging_config import create_execution_logger
from .models import Chapter, FeedItem
from .sanitize import wrap_paragraph

# Keeps entry names starting with a letter whatever the title looks like
CHAPTER_PREFIX = "aa"
CHAPTER_SUFFIX = ".xhtml"

FORBIDDEN_TITLE_CHARS = frozenset(":?%")
UNDERSCORED_TITLE_CHARS = str.maketrans({" ": "_", "/": "_", "'": "_"})


def clean_title(title: str) -> str:
    """Make a title safe for use as a container entry name.

    Drops ':', '?', '%' and non-ASCII characters, then replaces spaces,
    slashes and apostrophes with underscores.
    """
    kept = "".join(
        c for c in title if c.isascii() and c not in FORBIDDEN_TITLE_CHARS
    )
    return kept.translate(UNDERSCORED_TITLE_CHARS)


def chapter_file_name(title: str) -> str:
    return f"{CHAPTER_PREFIX}{clean_title(title)}{CHAPTER_SUFFIX}"


class BookAssembler:
    """Accumulates chapters in an EpubBook and writes it to disk."""

    def __init__(
        self,
        title: str,
        author: str,
        language: str = "en",
        execution_id: str | None = None,
    ):
        self.logger = create_execution_logger("book_assembler", execution_id)
        self.book = epub.EpubBook()
        self.book.set_identifier(f"urn:uuid:{uuid.uuid4()}")
        self.book.set_title(title)
        self.book.set_language(language)
        self.book.add_author(author)

        self._chapters: list[Chapter] = []
        self._items: list[epub.EpubHtml] = []
        self._used_names: set[str] = set()
        self._navigation_added = False

    @property
    def chapters(self) -> list[Chapter]:
        return list(self._chapters)

    def _unique_file_name(self, title: str) -> str:
        file_name = chapter_file_name(title)
        if file_name not in self._used_names:
            return file_name

        stem = file_name[: -len(CHAPTER_SUFFIX)]
        sequence = 2
        while f"{stem}_{sequence}{CHAPTER_SUFFIX}" in self._used_names:
            sequence += 1
        unique = f"{stem}_{sequence}{CHAPTER_SUFFIX}"
        self.logger.warning(
            f"Chapter name {file_name} already used, renamed to {unique}",
            chapter=unique,
        )
        return unique

    def add_item(self, item: FeedItem, content: str) -> Chapter:
        """Add one resolved item as a chapter.

        Args:
            item: Source feed item, used for the chapter name
            content: Sanitized HTML produced by the content resolver

        Returns:
            The Chapter that was added
        """
        file_name = self._unique_file_name(item.title)
        body = wrap_paragraph(content)

        html_item = epub.EpubHtml(
            uid=file_name,
            title=file_name,
            file_name=file_name,
            lang=self.book.language,
            content=body,
        )
        self.book.add_item(html_item)

        chapter = Chapter(file_name=file_name, title=file_name, body=body)
        self._used_names.add(file_name)
        self._chapters.append(chapter)
        self._items.append(html_item)
        return chapter

    def write(self, path: str) -> str:
        """Serialize the book to path, overwriting any existing file.

        May be called again after more chapters are added; the navigation
        documents are only added once.

        Raises:
            BookWriteError: If the file cannot be created or written
            BookAssemblyError: If the container library rejects the book
        """
        self.book.toc = list(self._items)
        self.book.spine = ["nav", *self._items]
        if not self._navigation_added:
            self.book.add_item(epub.EpubNcx())
            self.book.add_item(epub.EpubNav())
            self._navigation_added = True

        # write_epub ignores IOError on the target, so render in memory first
        buffer = io.BytesIO()
        try:
            epub.write_epub(buffer, self.book, {})
        except (epub.EpubException, ValueError, TypeError) as e:
            self.logger.error(f"Failed to assemble book: {e}", error=str(e))
            raise BookAssemblyError(f"Failed to assemble book: {e}") from e

        try:
            with open(path, "wb") as f:
                f.write(buffer.getvalue())
        except OSError as e:
            self.logger.error(f"Failed to write book to {path}: {e}", error=str(e))
            raise BookWriteError(f"Failed to write book to {path}: {e}") from e

        self.logger.info(
            f"Book written to {path}",
            output_path=path,
            chapters_count=len(self._chapters),
        )
        return path
