"""
Reference discovery for article enhancement.

Related articles are looked up with SerpAPI's Google engine and filtered to
blog/article-like results. Without a usable credential, or when the search
fails or finds nothing suitable, plausible synthetic candidates are
generated so the pipeline stays runnable.
"""

from __future__ import annotations

from functools import partial
import logging
import random
import re
from typing import Any

import httpx

from ..config import SearchConfig, get_search_key
from ..core.errors import SearchError
from ..core.strategy import failure, run_async_strategies, success
from ..core.text import slugify
from ..core.types import ReferenceCandidate, StrategyOutcome
from ..utils.logging import log_event

_LINK_RE = re.compile(r"blog|article|posts|stories|guide|tutorial", re.IGNORECASE)
_TITLE_RE = re.compile(r"blog|article|guide|tutorial|how to|tips|case study|analysis", re.IGNORECASE)


def generate_synthetic(
    query: str,
    limit: int,
    domains: list[str],
    rng: random.Random | None = None,
) -> list[ReferenceCandidate]:
    """Build ``limit`` plausible reference candidates for ``query``.

    Examples:
        >>> [c.url for c in generate_synthetic("Edge AI", 1, ["dev.to"])]
        ['https://dev.to/edge-ai-1']
    """
    rng = rng or random.Random()
    slug = slugify(query)
    candidates = []
    for n in range(1, limit + 1):
        domain = rng.choice(domains)
        candidates.append(
            ReferenceCandidate(
                url=f"https://{domain}/{slug}-{n}",
                title=f"{query} - Part {n} - Guide & Best Practices",
            )
        )
    return candidates


def filter_results(results: list[dict[str, Any]], limit: int) -> list[ReferenceCandidate]:
    """Keep organic results that look like blog posts or articles."""
    picked: list[ReferenceCandidate] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        link = item.get("link")
        title = item.get("title")
        if not link or not title:
            continue
        if not (_LINK_RE.search(link) or _TITLE_RE.search(title)):
            continue
        picked.append(ReferenceCandidate(url=link, title=title))
        if len(picked) >= limit:
            break
    return picked


class ReferenceFinder:
    """Finds related articles for a topic.

    Attributes:
        cfg: Search provider settings
    """

    def __init__(
        self,
        cfg: SearchConfig,
        client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ):
        self.cfg = cfg
        self._client = client
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)

    def has_credentials(self) -> bool:
        key = get_search_key(self.cfg)
        return bool(key) and key not in self.cfg.placeholder_keys

    async def find_references(self, query: str, limit: int = 2) -> list[ReferenceCandidate]:
        """Return up to ``limit`` reference candidates for ``query``.

        Raises:
            SearchError: only when the provider fails and synthetic
                fallback is disabled
        """
        if not self.has_credentials():
            log_event(self.logger, "No search credential, using synthetic references", event="search_synthetic", query=query)
            return self.synthetic(query, limit)

        outcome, attempts = await run_async_strategies(
            [
                partial(self._search, query, limit),
                partial(self._synthetic_strategy, query, limit),
            ]
        )
        first = attempts[0]
        if not first.success:
            log_event(
                self.logger,
                "Search degraded to synthetic references",
                level=logging.WARNING,
                event="search_degraded",
                query=query,
                reason=first.reason,
                error=first.details.get("error"),
            )
        return outcome.result

    def synthetic(self, query: str, limit: int) -> list[ReferenceCandidate]:
        return generate_synthetic(query, limit, self.cfg.synthetic_domains, self.rng)

    async def _synthetic_strategy(self, query: str, limit: int) -> StrategyOutcome:
        return success("synthetic", self.synthetic(query, limit))

    async def _search(self, query: str, limit: int) -> StrategyOutcome:
        try:
            data = await self._request(query, limit)
        except httpx.HTTPError as exc:
            if not self.cfg.fallback_to_synthetic:
                raise SearchError(f"Search failed for {query!r}: {exc}") from exc
            return failure("serpapi", "provider_error", error=f"{type(exc).__name__}: {exc}")
        except ValueError as exc:
            if not self.cfg.fallback_to_synthetic:
                raise SearchError(f"Invalid search response for {query!r}") from exc
            return failure("serpapi", "invalid_response", error=str(exc))

        results = filter_results(data.get("organic_results") or [], limit)
        if not results:
            return failure("serpapi", "no_matches")
        log_event(self.logger, "Search results found", event="search_ok", query=query, count=len(results))
        return success("serpapi", results)

    async def _request(self, query: str, limit: int) -> dict[str, Any]:
        params = {
            "engine": "google",
            "q": query,
            "api_key": get_search_key(self.cfg),
            "num": str(max(2, limit)),
            "hl": self.cfg.language,
        }
        if self._client is not None:
            resp = await self._client.get(self.cfg.base_url, params=params, timeout=self.cfg.timeout_seconds)
        else:
            async with httpx.AsyncClient(timeout=self.cfg.timeout_seconds) as client:
                resp = await client.get(self.cfg.base_url, params=params)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("Search response is not a JSON object")
        return data
