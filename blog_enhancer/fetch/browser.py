"""
Shared headless Chromium instance for page rendering.

A :class:`BrowserPool` owns one Playwright browser that is launched lazily
on first use and reused across calls. Before every reuse the browser is
checked with ``is_connected()`` and relaunched if it died. Each caller gets
its own isolated browser context and page through :meth:`BrowserPool.page`,
which is always closed on exit, so concurrent callers never share
navigation state.

Install Playwright and download the Chromium browser binary::

    pip install playwright
    playwright install chromium
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import logging
import signal
from typing import AsyncIterator

from playwright.async_api import Browser, Page, Playwright, Route, async_playwright

from ..config import FetchConfig

logger = logging.getLogger(__name__)


class BrowserPool:
    """Lazily launched, health-checked, shared browser.

    Attributes:
        cfg: Fetch configuration (headless flag, launch args, blocked resources)
    """

    def __init__(self, cfg: FetchConfig):
        self.cfg = cfg
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()
        self._blocked = frozenset(cfg.blocked_resource_types)

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def acquire(self) -> Browser:
        """Return a connected browser, launching or relaunching it if needed."""
        async with self._lock:
            if self.is_running:
                return self._browser
            if self._browser is not None:
                logger.warning("Browser disconnected, relaunching")
                await self._discard_browser()
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.cfg.headless,
                args=list(self.cfg.browser_args),
            )
            logger.info("Browser launched", extra={"event": "browser_launched"})
            return self._browser

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Open an isolated context and page, closed on every exit path."""
        browser = await self.acquire()
        context = await browser.new_context(user_agent=self.cfg.user_agent)
        try:
            page = await context.new_page()
            if self._blocked:
                await page.route("**/*", self._route)
            yield page
        finally:
            await context.close()

    async def _route(self, route: Route) -> None:
        if route.request.resource_type in self._blocked:
            await route.abort()
        else:
            await route.continue_()

    async def close(self) -> None:
        """Close the browser and stop the Playwright driver."""
        async with self._lock:
            await self._discard_browser()
            if self._playwright is not None:
                playwright, self._playwright = self._playwright, None
                await playwright.stop()

    async def _discard_browser(self) -> None:
        browser, self._browser = self._browser, None
        if browser is None:
            return
        try:
            await browser.close()
        except Exception as exc:  # noqa: BLE001
            # A crashed browser cannot be closed cleanly; the handle is dropped either way.
            logger.debug("Browser close failed: %s", exc)

    def install_signal_handlers(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Close the browser gracefully when the process receives SIGTERM."""
        try:
            loop = loop or asyncio.get_running_loop()
            loop.add_signal_handler(signal.SIGTERM, lambda: loop.create_task(self._on_signal()))
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handlers unsupported on this platform")

    async def _on_signal(self) -> None:
        logger.info("SIGTERM received, closing browser", extra={"event": "browser_shutdown"})
        await self.close()


_SHARED_POOL: BrowserPool | None = None


def shared_pool(cfg: FetchConfig) -> BrowserPool:
    """Return the process-wide pool, creating it on first use."""
    global _SHARED_POOL  # noqa: PLW0603
    if _SHARED_POOL is None:
        _SHARED_POOL = BrowserPool(cfg)
        _SHARED_POOL.install_signal_handlers()
    return _SHARED_POOL


async def close_shared_pool() -> None:
    global _SHARED_POOL  # noqa: PLW0603
    pool, _SHARED_POOL = _SHARED_POOL, None
    if pool is not None:
        await pool.close()
