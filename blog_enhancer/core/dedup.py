"""
Scraped-article deduplication using URL matching and fuzzy title comparison.

Bulk scrapes are filtered before persistence:
1. Articles whose URL is already stored are dropped
2. Repeated URLs within the batch are dropped
3. Articles whose title is nearly identical to a kept one are dropped
"""

from __future__ import annotations

from typing import Iterable

from rapidfuzz import fuzz

from .types import ScrapedArticle


def dedup_scraped(
    articles: list[ScrapedArticle],
    known_urls: Iterable[str] = (),
    threshold: int = 92,
) -> list[ScrapedArticle]:
    """Remove articles that are already stored or duplicated within the batch.

    Args:
        articles: Articles in scrape order
        known_urls: Source URLs already present in the article store
        threshold: Similarity threshold (0-100) for fuzzy title matching

    Returns:
        Deduplicated list of articles, preserving original order
    """
    seen_urls: set[str] = {_canonical(url) for url in known_urls if url}
    kept: list[ScrapedArticle] = []
    titles: list[str] = []

    for article in articles:
        url = _canonical(article.source_url)
        if url in seen_urls:
            continue
        if _is_similar_title(article.title, titles, threshold):
            continue
        seen_urls.add(url)
        titles.append(article.title)
        kept.append(article)

    return kept


def _canonical(url: str) -> str:
    return url.strip().rstrip("/")


def _is_similar_title(title: str, titles: list[str], threshold: int) -> bool:
    """Check if a title is similar to any title in the given list.

    Uses rapidfuzz's ratio function which calculates the Levenshtein
    distance as a similarity percentage.
    """
    for existing in titles:
        if fuzz.ratio(title, existing) >= threshold:
            return True
    return False
