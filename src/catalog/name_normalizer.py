"""Title canonicalization for cross-provider matching.

Normalized names are comparison keys only and are never displayed.
"""

import re

_DISALLOWED_CHARS = re.compile(r"[^\w\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_LEADING_ARTICLE = re.compile(r"^(the|a|an)\s+")
_TRAILING_MARKER = re.compile(r"\s+(episode|ep|series|season|s)\s*\d*$")


def normalize_name(name: str | None) -> str:
    """Canonicalize a title for comparison.

    Steps (order matters): lowercase, drop everything except word
    characters, whitespace and hyphens, collapse whitespace, strip a
    leading article, strip a trailing episode/season marker, trim.

    Args:
        name: Raw title, may be None or empty.

    Returns:
        Normalized title, empty string for empty input.

    Example:
        >>> normalize_name("The Foo: Season 2")
        'foo'
    """
    if not name or not isinstance(name, str):
        return ""

    text = _DISALLOWED_CHARS.sub("", name.lower())
    text = _WHITESPACE_RUN.sub(" ", text).strip()
    text = _LEADING_ARTICLE.sub("", text)
    text = _TRAILING_MARKER.sub("", text)
    return text.strip()
