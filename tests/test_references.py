"""Tests for reference discovery and the synthetic fallback."""

import asyncio
import random

import httpx
import pytest

from blog_enhancer.config import SearchConfig
from blog_enhancer.core.errors import SearchError
from blog_enhancer.search.references import ReferenceFinder, filter_results, generate_synthetic


@pytest.fixture(autouse=True)
def _no_env_keys(monkeypatch):
    monkeypatch.delenv("SERPAPI_KEY", raising=False)
    monkeypatch.delenv("SERP_API_KEY", raising=False)


def _find(cfg: SearchConfig, handler, query="Edge AI", limit=2, seed=1):
    async def main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            finder = ReferenceFinder(cfg, client=client, rng=random.Random(seed))
            return await finder.find_references(query, limit)

    return asyncio.run(main())


def _no_network(request):
    raise AssertionError("search provider should not be called")


def test_generate_synthetic_builds_numbered_candidates():
    candidates = generate_synthetic("Edge AI", 2, ["dev.to"])

    assert [c.url for c in candidates] == ["https://dev.to/edge-ai-1", "https://dev.to/edge-ai-2"]
    assert candidates[1].title == "Edge AI - Part 2 - Guide & Best Practices"


def test_generate_synthetic_slug_is_capped():
    query = "A very long query about machine learning operations in production systems"
    candidate = generate_synthetic(query, 1, ["medium.com"])[0]
    slug = candidate.url[len("https://medium.com/") : -len("-1")]
    assert len(slug) == 50


def test_synthetic_is_deterministic_with_seeded_rng():
    domains = SearchConfig().synthetic_domains
    first = generate_synthetic("Edge AI", 3, domains, random.Random(7))
    second = generate_synthetic("Edge AI", 3, domains, random.Random(7))
    assert first == second


def test_missing_key_uses_synthetic_without_network():
    candidates = _find(SearchConfig(), _no_network)

    assert len(candidates) == 2
    domains = SearchConfig().synthetic_domains
    for n, candidate in enumerate(candidates, start=1):
        assert any(candidate.url == f"https://{d}/edge-ai-{n}" for d in domains)


def test_placeholder_key_uses_synthetic():
    candidates = _find(SearchConfig(api_key="your_serpapi_key_here"), _no_network, limit=3)
    assert len(candidates) == 3


def test_search_results_are_filtered_and_limited():
    seen = {}

    def handler(request):
        seen.update(dict(request.url.params))
        return httpx.Response(
            200,
            json={
                "organic_results": [
                    {"link": "https://shop.example.com/edge", "title": "Buy edge devices"},
                    {"link": "https://ex.com/blog/edge-ai", "title": "Edge AI explained"},
                    {"title": "No link here blog"},
                    {"link": "https://ex.com/edge", "title": "How to deploy Edge AI"},
                    {"link": "https://ex.com/guide/edge", "title": "Edge guide"},
                ]
            },
        )

    candidates = _find(SearchConfig(api_key="real-key"), handler)

    assert [c.url for c in candidates] == ["https://ex.com/blog/edge-ai", "https://ex.com/edge"]
    assert seen["engine"] == "google"
    assert seen["q"] == "Edge AI"
    assert seen["num"] == "2"
    assert seen["hl"] == "en"
    assert seen["api_key"] == "real-key"


def test_provider_error_degrades_to_synthetic():
    candidates = _find(SearchConfig(api_key="real-key"), lambda request: httpx.Response(500))
    assert len(candidates) == 2
    assert all(c.title.startswith("Edge AI - Part") for c in candidates)


def test_no_matching_results_degrades_to_synthetic():
    def handler(request):
        return httpx.Response(200, json={"organic_results": [{"link": "https://x.com/shop", "title": "Shop"}]})

    candidates = _find(SearchConfig(api_key="real-key"), handler, limit=1)
    assert len(candidates) == 1
    assert candidates[0].url.endswith("/edge-ai-1")


def test_provider_error_raises_when_fallback_disabled():
    cfg = SearchConfig(api_key="real-key", fallback_to_synthetic=False)
    with pytest.raises(SearchError):
        _find(cfg, lambda request: httpx.Response(503))


def test_filter_results_matches_title_terms_case_insensitively():
    results = [{"link": "https://ex.com/x", "title": "A CASE STUDY of edge"}]
    assert filter_results(results, 2)[0].title == "A CASE STUDY of edge"
