"""Tests for the article store client."""

import asyncio
import json

import httpx
import pytest

from blog_enhancer.config import StoreConfig
from blog_enhancer.core.errors import StoreError
from blog_enhancer.core.types import ArticleRef, EnhancedArticle, EnhancementResult, ScrapedArticle
from blog_enhancer.store import ArticleStore


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    monkeypatch.delenv("BACKEND_BASE_URL", raising=False)
    monkeypatch.delenv("LARAVEL_API_URL", raising=False)


def _call(handler, method, *args, cfg=None):
    async def main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            store = ArticleStore(cfg or StoreConfig(base_url="http://store.test/api/"), client=client)
            return await getattr(store, method)(*args)

    return asyncio.run(main())


def test_fetch_latest_returns_first_article():
    def handler(request):
        assert str(request.url) == "http://store.test/api/articles"
        return httpx.Response(200, json={"data": [{"id": 3, "title": "Newest"}, {"id": 1, "title": "Old"}]})

    assert _call(handler, "fetch_latest", 1) == {"id": 3, "title": "Newest"}


def test_fetch_latest_accepts_bare_list():
    assert _call(lambda r: httpx.Response(200, json=[{"id": 9}]), "fetch_latest")["id"] == 9


def test_fetch_latest_empty_store():
    with pytest.raises(StoreError, match="No articles found"):
        _call(lambda r: httpx.Response(200, json={"data": []}), "fetch_latest")


def test_http_error_maps_to_store_error():
    with pytest.raises(StoreError, match="HTTP 503"):
        _call(lambda r: httpx.Response(503, text="maintenance"), "list_articles")


def test_transport_error_maps_to_store_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(StoreError, match="Store request failed: ConnectError"):
        _call(handler, "list_articles")


def test_invalid_json_maps_to_store_error():
    with pytest.raises(StoreError, match="Invalid JSON"):
        _call(lambda r: httpx.Response(200, text="<html>"), "list_articles")


def test_base_url_from_env(monkeypatch):
    monkeypatch.setenv("LARAVEL_API_URL", "http://env.test/api/")

    def handler(request):
        assert request.url.host == "env.test"
        return httpx.Response(200, json=[])

    assert _call(handler, "list_articles", cfg=StoreConfig()) == []


def test_save_enhanced_links_parent():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"data": {"id": 42, **seen["body"]}})

    result = EnhancementResult(
        success=True,
        original=ArticleRef(id=7, title="Chatbots"),
        references=[],
        enhanced=EnhancedArticle(
            id=7,
            title="Chatbots (Enhanced)",
            content="<p>Body</p>",
            source_url="https://ex.com/c#enhanced",
            author="Jane",
        ),
    )

    created = _call(handler, "save_enhanced", result)

    assert created["id"] == 42
    assert seen["method"] == "POST"
    body = seen["body"]
    assert body["parent_id"] == 7
    assert body["version"] == "enhanced"
    assert body["status"] == "published"
    assert body["raw_html"] is None
    assert body["source_url"] == "https://ex.com/c#enhanced"
    assert body["published_at"]


def test_save_scraped_marks_original_version():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"id": 5})

    article = ScrapedArticle(title="T", content="C", source_url="https://ex.com/t", raw_html="<p>C</p>")

    assert _call(handler, "save_scraped", article) == {"id": 5}
    assert seen["body"]["version"] == "original"
    assert seen["body"]["raw_html"] == "<p>C</p>"


def test_known_source_urls():
    data = {"data": [{"source_url": "https://ex.com/a"}, {"source_url": None}, {"id": 3}]}
    assert _call(lambda r: httpx.Response(200, json=data), "known_source_urls") == {"https://ex.com/a"}
