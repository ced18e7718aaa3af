"""HTML sanitization for chapter content."""

import bleach
from bs4 import BeautifulSoup, NavigableString, Tag

from .errors import SanitizationError

ALLOWED_TAGS = frozenset(bleach.sanitizer.ALLOWED_TAGS) | {
    "p",
    "br",
    "hr",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "pre",
    "div",
    "span",
    "img",
    "figure",
    "figcaption",
    "table",
    "thead",
    "tbody",
    "tr",
    "th",
    "td",
}

ALLOWED_ATTRIBUTES = {
    **bleach.sanitizer.ALLOWED_ATTRIBUTES,
    "a": ["href", "title"],
    "img": ["src", "alt"],
}

ALLOWED_PROTOCOLS = ["http", "https", "mailto"]

# Elements dropped together with their text
REMOVED_ELEMENTS = ["script", "style"]


def sanitize_html(content: str) -> str:
    """Strip markup outside the allow-list.

    Script and style elements are removed with their content; every other
    disallowed tag is stripped and its text kept.

    Raises:
        SanitizationError: If the sanitizer fails internally
    """
    if not content:
        return ""

    try:
        soup = BeautifulSoup(content, "html.parser")
        for element in soup(REMOVED_ELEMENTS):
            element.decompose()

        return bleach.clean(
            str(soup),
            tags=ALLOWED_TAGS,
            attributes=ALLOWED_ATTRIBUTES,
            protocols=ALLOWED_PROTOCOLS,
            strip=True,
            strip_comments=True,
        )
    except (TypeError, ValueError) as e:
        raise SanitizationError(f"Failed to sanitize HTML: {e}") from e


def is_paragraph_sequence(content: str) -> bool:
    """Return True if content is made only of top-level <p> elements."""
    soup = BeautifulSoup(content, "html.parser")
    found = False
    for node in soup.contents:
        if isinstance(node, Tag):
            if node.name != "p":
                return False
            found = True
        elif isinstance(node, NavigableString) and node.strip():
            return False
    return found


def wrap_paragraph(content: str) -> str:
    """Wrap chapter content in exactly one paragraph.

    Content that is already a sequence of paragraphs is returned as is, since
    nesting <p> inside <p> is not valid XHTML.
    """
    if is_paragraph_sequence(content):
        return content
    return f"<p>{content}</p>"
