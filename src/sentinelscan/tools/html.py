"""HTML parsing helpers built on BeautifulSoup."""

from bs4 import BeautifulSoup, Tag


def parse_document(markup: str) -> BeautifulSoup:
    """Parse markup into a queryable element tree."""
    return BeautifulSoup(markup or "", "html.parser")


def attr(element: Tag, name: str, default: str = "") -> str:
    """Return an attribute as a single string (class-like lists are joined)."""
    value = element.get(name)
    if value is None:
        return default
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def form_method(form: Tag, default: str) -> str:
    """Upper-cased form method, or *default* when the attribute is absent or empty."""
    return (attr(form, "method") or default).upper()


def script_text(document: BeautifulSoup) -> str:
    """Concatenated text of every inline <script> element."""
    return "".join(script.get_text() for script in document.find_all("script"))
