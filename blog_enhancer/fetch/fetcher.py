"""
Page fetching in two modes.

1. browser: Playwright rendering through a shared :class:`BrowserPool`, so
   client-side content is loaded. Images, stylesheets, fonts and media are
   blocked for speed.
2. static: a plain ``httpx`` GET with a desktop browser User-Agent. No
   scripts run, so client-rendered content is invisible in this mode.

Both return a :class:`FetchResult` instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx

from ..config import FetchConfig
from .browser import BrowserPool

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Result of a fetch operation.

    Either html will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        mode: "browser" or "static"
        status_code: HTTP status code, or None if no response was received
        html: The page HTML, or None on error
        error: Error message if fetch failed, None on success
    """

    url: str
    mode: str
    status_code: int | None
    html: str | None
    error: str | None


def build_client(cfg: FetchConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=cfg.static_timeout_seconds,
        headers={"User-Agent": cfg.user_agent},
        follow_redirects=True,
        trust_env=cfg.trust_env,
    )


async def fetch_static(
    url: str,
    cfg: FetchConfig,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Fetch a URL with a plain HTTP GET.

    Args:
        url: The URL to fetch
        cfg: Fetch configuration (timeout, User-Agent, proxy settings)
        client: Optional shared client; a short-lived one is created otherwise

    Returns:
        FetchResult with html on a 2xx response, or an error message
    """
    try:
        if client is not None:
            resp = await client.get(url, headers={"User-Agent": cfg.user_agent})
        else:
            async with build_client(cfg) as own_client:
                resp = await own_client.get(url)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        return FetchResult(
            url=url,
            mode="static",
            status_code=exc.response.status_code,
            html=None,
            error=f"HTTP {exc.response.status_code}",
        )
    except httpx.HTTPError as exc:
        return FetchResult(url=url, mode="static", status_code=None, html=None, error=f"{type(exc).__name__}: {exc}")
    return FetchResult(url=url, mode="static", status_code=resp.status_code, html=resp.text, error=None)


async def render_page(url: str, cfg: FetchConfig, pool: BrowserPool) -> FetchResult:
    """Render a URL in the shared browser and return the resulting DOM.

    The page and its context are closed before returning, including on
    navigation errors and timeouts.
    """
    try:
        async with pool.page() as page:
            response = await page.goto(
                url,
                wait_until=cfg.wait_until,
                timeout=cfg.render_timeout_seconds * 1000,
            )
            html = await page.content()
            status_code = response.status if response else None
    except Exception as exc:  # noqa: BLE001
        logger.warning("Browser render failed for %s: %s", url, exc)
        return FetchResult(url=url, mode="browser", status_code=None, html=None, error=f"{type(exc).__name__}: {exc}")
    return FetchResult(url=url, mode="browser", status_code=status_code, html=html, error=None)
