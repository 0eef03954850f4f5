"""Small text helpers shared by extraction and search."""

from __future__ import annotations

import re


_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def normalize_whitespace(text: str | None) -> str:
    """Collapse every whitespace run to a single space and trim."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def slugify(text: str, max_length: int = 50) -> str:
    """Convert text to a URL path slug.

    Non-alphanumeric runs become a single hyphen; the result is cut to
    ``max_length`` characters.

    Examples:
        >>> slugify("Edge AI: What's Next?")
        'edge-ai-what-s-next-'
    """
    return _SLUG_RE.sub("-", text.lower())[:max_length]
