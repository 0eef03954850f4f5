"""
Client for the external article store's REST API.

Only the calls the pipeline relies on are implemented: list articles
(latest first), and create an article record. Enhanced articles are saved
as new records linked to the original through ``parent_id``.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

import httpx

from .config import StoreConfig, get_store_url
from .core.errors import StoreError
from .core.types import EnhancementResult, ScrapedArticle
from .utils.logging import log_event


class ArticleStore:
    """Async client for ``{base}/articles``."""

    def __init__(
        self,
        cfg: StoreConfig,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ):
        self.cfg = cfg
        self.base_url = get_store_url(cfg)
        self._client = client
        self.logger = logger or logging.getLogger(__name__)

    async def list_articles(self) -> list[dict[str, Any]]:
        """Return stored articles, latest first."""
        data = await self._request("GET", "/articles", timeout=self.cfg.read_timeout_seconds)
        items = data.get("data") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise StoreError("Unexpected article list response")
        return items

    async def fetch_latest(self, article_id: Any = None) -> dict[str, Any]:
        """Return the most recent article.

        ``article_id`` is accepted for callers that resolve by ID, but the
        latest record is always returned.

        Raises:
            StoreError: request failure or an empty store
        """
        items = await self.list_articles()
        if not items:
            raise StoreError("No articles found in backend")
        log_event(
            self.logger,
            "Latest article fetched",
            event="store_fetch_latest",
            requested_id=article_id,
            article_id=items[0].get("id"),
            total=len(items),
        )
        return items[0]

    async def known_source_urls(self) -> set[str]:
        return {item["source_url"] for item in await self.list_articles() if item.get("source_url")}

    async def create_article(self, body: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", "/articles", json=body, timeout=self.cfg.write_timeout_seconds)
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            return data["data"]
        return data

    async def save_enhanced(self, result: EnhancementResult) -> dict[str, Any]:
        """Persist the enhanced article as a child of the original."""
        body = {
            "title": result.enhanced.title,
            "content": result.enhanced.content,
            "raw_html": None,
            "source_url": result.enhanced.source_url,
            "author": result.enhanced.author,
            "published_at": _now_iso(),
            "version": "enhanced",
            "status": "published",
            "parent_id": result.original.id,
        }
        created = await self.create_article(body)
        log_event(
            self.logger,
            "Enhanced article saved",
            event="store_save_enhanced",
            parent_id=result.original.id,
            source_url=result.enhanced.source_url,
        )
        return created

    async def save_scraped(self, article: ScrapedArticle) -> dict[str, Any]:
        body = article.to_dict()
        body.update({"version": "original", "status": "published"})
        return await self.create_article(body)

    async def _request(self, method: str, path: str, timeout: float, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        try:
            if self._client is not None:
                resp = await self._client.request(method, url, json=json, headers=headers, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    resp = await client.request(method, url, json=json, headers=headers)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise StoreError(f"HTTP {exc.response.status_code}: {exc.response.text[:500]}") from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"Store request failed: {type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise StoreError(f"Invalid JSON from {url}") from exc


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
