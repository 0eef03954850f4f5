"""Tests for scraped-article deduplication."""

from blog_enhancer.core.dedup import dedup_scraped
from blog_enhancer.core.types import ScrapedArticle


def _article(title: str, url: str) -> ScrapedArticle:
    return ScrapedArticle(title=title, content="x" * 120, source_url=url)


def test_dedup_drops_known_and_repeated_urls():
    articles = [
        _article("First post", "https://ex.com/a/"),
        _article("Second post", "https://ex.com/b"),
        _article("Another title entirely", "https://ex.com/b/"),
    ]

    kept = dedup_scraped(articles, known_urls={"https://ex.com/a"})

    assert [a.source_url for a in kept] == ["https://ex.com/b"]


def test_dedup_drops_near_duplicate_titles():
    articles = [
        _article("How Chatbots Improve Customer Support", "https://ex.com/1"),
        _article("How Chatbots Improve Customer Support!", "https://ex.com/2"),
        _article("Pricing strategies for SaaS", "https://ex.com/3"),
    ]

    kept = dedup_scraped(articles)

    assert [a.source_url for a in kept] == ["https://ex.com/1", "https://ex.com/3"]
