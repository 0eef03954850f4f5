"""
Core data types for the blog enhancer.

This module defines the request-scoped records passed between pipeline stages:
- SourceDocument: Page content produced by the Content Extractor
- ReferenceCandidate / Reference: Related articles before and after scraping
- OriginalArticle: The article being enhanced
- EnhancementResult: The workflow's output contract
- ScrapedArticle: One article produced by the bulk listing scrape
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SourceDocument:
    """Title and normalized body text extracted from one page.

    Attributes:
        url: The URL that was extracted
        title: Page title (first h1, else the document title)
        text: Whitespace-normalized body text, at least the configured minimum length
        raw_html: The HTML the text was extracted from, when kept
        strategy: Name of the extraction strategy that produced the text
        fetch_mode: "browser" or "static"
    """

    url: str
    title: str
    text: str
    raw_html: str | None = None
    strategy: str | None = None
    fetch_mode: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "text": self.text,
            "strategy": self.strategy,
            "fetch_mode": self.fetch_mode,
        }


@dataclass
class ReferenceCandidate:
    """A pointer to a potentially related article, not yet fetched."""

    url: str
    title: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "title": self.title}


@dataclass
class Reference:
    """A reference candidate with its scraped (or substituted) content."""

    url: str
    title: str
    content: str = ""

    def to_candidate(self) -> ReferenceCandidate:
        return ReferenceCandidate(url=self.url, title=self.title)


@dataclass(frozen=True)
class OriginalArticle:
    """The article being enhanced, supplied inline or resolved from the store."""

    id: Any
    title: str
    content: str
    source_url: str | None = None
    author: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OriginalArticle":
        """Build from a store record or request payload (snake or camel case keys)."""
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            content=data.get("content") or "",
            source_url=data.get("source_url") or data.get("sourceUrl"),
            author=data.get("author"),
        )


@dataclass
class ArticleRef:
    id: Any
    title: str


@dataclass
class EnhancedArticle:
    id: Any
    title: str
    content: str
    source_url: str
    author: str | None = None


@dataclass
class EnhancementResult:
    """Output contract of the enhancement workflow.

    The store persists ``enhanced`` as a new record whose parent is
    ``original.id``.
    """

    success: bool
    original: ArticleRef
    references: list[ReferenceCandidate]
    enhanced: EnhancedArticle

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "original": {"id": self.original.id, "title": self.original.title},
            "references": [ref.to_dict() for ref in self.references],
            "enhanced": {
                "id": self.enhanced.id,
                "title": self.enhanced.title,
                "content": self.enhanced.content,
                "source_url": self.enhanced.source_url,
                "author": self.enhanced.author,
            },
        }


@dataclass
class ScrapedArticle:
    """One article extracted from a blog listing page."""

    title: str
    content: str
    source_url: str
    raw_html: str | None = None
    author: str | None = None
    published_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "raw_html": self.raw_html,
            "source_url": self.source_url,
            "author": self.author,
            "published_at": self.published_at,
        }


@dataclass
class StrategyOutcome:
    """Uniform result of one attempt in a fallback chain.

    Either ``result`` is set (success) or ``reason`` explains the failure.
    """

    strategy: str
    success: bool
    result: Any = None
    reason: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
