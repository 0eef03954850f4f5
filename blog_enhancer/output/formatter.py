"""
Markdown-like LLM output to styled HTML.

The conversion is a fixed sequence of regex passes, and the order matters:
headings from ``###`` down to ``#``, bold before italic, list items, a list
container around the first run of items, paragraphs for the remaining
blocks, then cleanup of paragraphs wrapped around block elements. A
References section is appended when references are given.

Only the first contiguous run of list items gets a ``<ul>``; later runs
render as bare ``<li>`` elements.
"""

from __future__ import annotations

import html
import re
from typing import Any, Iterable

H1_STYLE = "font-size: 2em; font-weight: 700; margin: 1em 0 0.8em 0; color: #111;"
H2_STYLE = "font-size: 1.6em; font-weight: 700; margin: 1.8em 0 1em 0; color: #222;"
H3_STYLE = "font-size: 1.3em; font-weight: 700; margin: 1.5em 0 0.8em 0; color: #333;"
STRONG_STYLE = "font-weight: 700; color: #333;"
EM_STYLE = "font-style: italic; color: #555;"
LI_STYLE = "margin: 0.5em 0; line-height: 1.6;"
UL_STYLE = "margin: 1em 0; padding-left: 2em;"
P_STYLE = "margin: 1em 0; line-height: 1.7; color: #444; font-size: 1em;"
REFERENCES_H2_STYLE = (
    "font-size: 1.6em; font-weight: 700; margin: 2em 0 1em 0; color: #222; "
    "border-top: 2px solid #FF8C42; padding-top: 1em;"
)
LINK_STYLE = "color: #FF8C42; text-decoration: none; font-weight: 500;"

_INLINE_PASSES = [
    (re.compile(r"^### (.*?)$", re.M), rf'<h3 style="{H3_STYLE}">\1</h3>'),
    (re.compile(r"^## (.*?)$", re.M), rf'<h2 style="{H2_STYLE}">\1</h2>'),
    (re.compile(r"^# (.*?)$", re.M), rf'<h1 style="{H1_STYLE}">\1</h1>'),
    (re.compile(r"\*\*(.*?)\*\*"), rf'<strong style="{STRONG_STYLE}">\1</strong>'),
    (re.compile(r"__(.+?)__"), rf'<strong style="{STRONG_STYLE}">\1</strong>'),
    (re.compile(r"\*(.*?)\*"), rf'<em style="{EM_STYLE}">\1</em>'),
    (re.compile(r"_(.+?)_"), rf'<em style="{EM_STYLE}">\1</em>'),
    (re.compile(r"^\* (.*?)$", re.M), rf'<li style="{LI_STYLE}">\1</li>'),
    (re.compile(r"^- (.*?)$", re.M), rf'<li style="{LI_STYLE}">\1</li>'),
    (re.compile(r"^\d+\. (.*?)$", re.M), rf'<li style="{LI_STYLE}">\1</li>'),
]

_LIST_RUN_RE = re.compile(r"(<li[^>]*>.*?</li>(?:\n<li[^>]*>.*?</li>)*)")
_BLOCK_SPLIT_RE = re.compile(r"\n\n+")
_BLOCK_ELEMENT_RE = re.compile(r"<h[1-6]|<ul|<ol|<blockquote")
_STARTS_WITH_TAG_RE = re.compile(r"^<[a-z]")

_CLEANUP_PASSES = [
    (re.compile(r"<p[^>]*>(<h[1-6])"), r"\1"),
    (re.compile(r"(</h[1-6]>)</p>"), r"\1"),
    (re.compile(r"<p[^>]*>(<ul|<ol)"), r"\1"),
    (re.compile(r"(</ul>|</ol>)</p>"), r"\1"),
]


def format_enhanced_content(text: str | None, references: Iterable[Any] | None = None) -> str:
    """Convert LLM output to styled HTML.

    Args:
        text: Markdown-like text; empty or None yields an empty string
        references: Items with ``title`` and ``url`` (attributes or dict keys)

    Returns:
        The HTML, trimmed of surrounding whitespace
    """
    if not text:
        return ""

    out = text
    for pattern, replacement in _INLINE_PASSES:
        out = pattern.sub(replacement, out)

    out = _LIST_RUN_RE.sub(lambda m: f'<ul style="{UL_STYLE}">{m.group(1)}</ul>', out, count=1)
    out = "\n".join(_wrap_block(block) for block in _BLOCK_SPLIT_RE.split(out))

    for pattern, replacement in _CLEANUP_PASSES:
        out = pattern.sub(replacement, out)

    refs = list(references or [])
    if refs:
        out += _references_section(refs)

    return out.strip()


def _wrap_block(block: str) -> str:
    block = block.strip()
    if not block:
        return ""
    if _BLOCK_ELEMENT_RE.search(block) or _STARTS_WITH_TAG_RE.match(block):
        return block
    return f'<p style="{P_STYLE}">{block}</p>'


def _references_section(references: list[Any]) -> str:
    items = []
    for ref in references:
        title = html.escape(_field(ref, "title") or "Reference")
        url = html.escape(_field(ref, "url") or "#", quote=True)
        items.append(
            f'<li style="{LI_STYLE}"><a href="{url}" target="_blank" rel="noopener noreferrer" '
            f'style="{LINK_STYLE}">{title}</a></li>'
        )
    item_block = "\n".join(items)
    return (
        f'\n<h2 style="{REFERENCES_H2_STYLE}">References</h2>\n'
        f'<ul style="{UL_STYLE}">\n{item_block}\n</ul>'
    )


def _field(ref: Any, name: str) -> str | None:
    if isinstance(ref, dict):
        return ref.get(name)
    return getattr(ref, name, None)
