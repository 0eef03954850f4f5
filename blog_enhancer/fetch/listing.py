"""
Bulk scraping of blog index pages.

A listing scrape opens the index page, optionally jumps to the last
pagination page, collects the article containers and extracts each linked
article with the content cascade from :mod:`.extractor`. Single-article
failures are logged and skipped.

Pages are driven through a small :class:`PageSession` interface so the same
walk runs on a rendered browser tab or on plain HTTP responses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import partial
import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup
import httpx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import FetchConfig, ListingConfig
from ..core.errors import EnhancerError, ExtractionError, NavigationTimeoutError
from ..core.strategy import failure, run_async_strategies, success
from ..core.text import normalize_whitespace
from ..core.types import ScrapedArticle, StrategyOutcome
from ..utils.logging import log_event
from .browser import BrowserPool, shared_pool
from .extractor import best_length, extract_body
from .fetcher import build_client

_TITLE_SUFFIX_RE = re.compile(r"\s+[|–—-]\s+.*$")
_AUTHOR_SELECTORS = [".author", '[rel="author"]', ".entry-author"]


class PageSession(ABC):
    """One navigable page: go somewhere, wait for an element, read the HTML."""

    @abstractmethod
    async def goto(self, url: str) -> None:
        """Navigate to ``url``.

        Raises:
            ExtractionError: reason "fetch_failed" when the page cannot be loaded
        """

    @abstractmethod
    async def content(self) -> str:
        """Return the current page HTML.

        Raises:
            ExtractionError: reason "fetch_failed" when the page cannot be read
        """

    @abstractmethod
    async def wait_for(self, selector: str, timeout_seconds: float) -> None:
        """Wait until ``selector`` matches.

        Raises:
            NavigationTimeoutError: when nothing matches within the timeout
            ExtractionError: reason "fetch_failed" when the page breaks while waiting
        """


class BrowserSession(PageSession):
    """A Playwright page."""

    def __init__(self, page: Page, cfg: FetchConfig, navigation_timeout_seconds: float):
        self.page = page
        self.cfg = cfg
        self.navigation_timeout_seconds = navigation_timeout_seconds
        self.url: str | None = None

    async def goto(self, url: str) -> None:
        try:
            await self.page.goto(
                url,
                wait_until=self.cfg.wait_until,
                timeout=self.navigation_timeout_seconds * 1000,
            )
        except PlaywrightError as exc:
            raise ExtractionError(url, "fetch_failed", detail=str(exc)) from exc
        self.url = url

    async def content(self) -> str:
        try:
            return await self.page.content()
        except PlaywrightError as exc:
            raise ExtractionError(self.url or "", "fetch_failed", detail=str(exc)) from exc

    async def wait_for(self, selector: str, timeout_seconds: float) -> None:
        try:
            await self.page.wait_for_selector(selector, timeout=timeout_seconds * 1000)
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeoutError(f"Timed out waiting for {selector!r}") from exc
        except PlaywrightError as exc:
            raise ExtractionError(self.url or "", "fetch_failed", detail=str(exc)) from exc


class StaticSession(PageSession):
    """Plain HTTP pages; waiting only checks the already fetched HTML."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.url: str | None = None
        self._html = ""

    async def goto(self, url: str) -> None:
        try:
            resp = await self.client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ExtractionError(url, "fetch_failed", detail=f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ExtractionError(url, "fetch_failed", detail=f"{type(exc).__name__}: {exc}") from exc
        self.url = url
        self._html = resp.text

    async def content(self) -> str:
        return self._html

    async def wait_for(self, selector: str, timeout_seconds: float) -> None:
        if BeautifulSoup(self._html, "html.parser").select_one(selector) is None:
            raise NavigationTimeoutError(f"No element matches {selector!r} on {self.url}")


def find_last_page(html: str, selector: str) -> int | None:
    """Return the highest numeric pagination label, or None without pagination."""
    soup = BeautifulSoup(html, "html.parser")
    numbers = []
    for node in soup.select(selector):
        text = node.get_text(strip=True)
        if text.isdigit():
            numbers.append(int(text))
    return max(numbers) if numbers else None


def oldest_page_url(listing_url: str, page: int) -> str:
    """Build the WordPress-style URL of pagination page ``page``.

    Examples:
        >>> oldest_page_url("https://ex.com/blogs", 7)
        'https://ex.com/blogs/page/7/'
    """
    return listing_url.rstrip("/") + f"/page/{page}/"


def collect_article_links(html: str, base_url: str, selector: str, count: int) -> list[str]:
    """Return absolute article links from the first ``count`` containers.

    A container's link is its own ``href`` or that of its first descendant
    link. Containers without one are skipped, as are repeated links.
    """
    soup = BeautifulSoup(html, "html.parser")
    links: list[str] = []
    for container in soup.select(selector)[:count]:
        href = container.get("href")
        if not href:
            anchor = container.select_one("a[href]")
            href = anchor.get("href") if anchor is not None else None
        if not href or not href.strip():
            continue
        link = urljoin(base_url, href.strip())
        if link not in links:
            links.append(link)
    return links


def extract_article_title(soup: BeautifulSoup) -> str:
    for selector in ("h1", ".entry-title"):
        node = soup.select_one(selector)
        if node is not None:
            text = normalize_whitespace(node.get_text(" "))
            if text:
                return text
    if soup.title is not None:
        text = _TITLE_SUFFIX_RE.sub("", normalize_whitespace(soup.title.get_text(" ")))
        if text:
            return text
    return "Untitled"


def extract_author(soup: BeautifulSoup) -> str | None:
    for selector in _AUTHOR_SELECTORS:
        node = soup.select_one(selector)
        if node is not None:
            text = normalize_whitespace(node.get_text(" "))
            if text:
                return text
    return None


def extract_published_at(soup: BeautifulSoup) -> str | None:
    """Return the publish date from ``time[datetime]``, ``.published`` or ``.entry-date``."""
    for selector in ("time", ".published"):
        node = soup.select_one(selector)
        if node is not None and node.get("datetime"):
            return node["datetime"].strip()
    node = soup.select_one(".entry-date")
    if node is not None:
        text = normalize_whitespace(node.get_text(" "))
        if text:
            return text
    return None


def extract_listing_article(html: str, url: str, cfg: ListingConfig) -> ScrapedArticle:
    """Extract one article page reached from a listing.

    Raises:
        ExtractionError: reason "insufficient_content" when the body text
            stays below ``cfg.min_chars``
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    outcome, attempts = extract_body(
        soup,
        cfg.content_selectors,
        selector_min_chars=cfg.selector_min_chars,
        min_chars=cfg.min_chars,
        paragraph_min_chars=cfg.paragraph_min_chars,
        strip_selectors=cfg.strip_selectors,
    )
    if outcome is None:
        raise ExtractionError(url, "insufficient_content", length=best_length(attempts))

    text, node = outcome.result
    raw_html = node.decode_contents() if node is not None and node.name != "[document]" else None
    return ScrapedArticle(
        title=extract_article_title(soup),
        content=text,
        source_url=url,
        raw_html=raw_html,
        author=extract_author(soup),
        published_at=extract_published_at(soup),
    )


class ListingExtractor:
    """Scrapes up to ``count`` articles from a blog index page.

    The walk runs in a browser tab first; if it fails outright, it is
    repeated once over plain HTTP.
    """

    def __init__(
        self,
        fetch_cfg: FetchConfig,
        listing_cfg: ListingConfig,
        pool: BrowserPool | None = None,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ):
        self.fetch_cfg = fetch_cfg
        self.cfg = listing_cfg
        self._pool = pool
        self._client = client
        self.logger = logger or logging.getLogger(__name__)

    async def scrape_listing(self, url: str, count: int, oldest: bool = False) -> list[ScrapedArticle]:
        """Scrape articles linked from ``url``.

        Args:
            url: Listing page URL
            count: Maximum number of articles to return
            oldest: Jump to the last pagination page first

        Returns:
            Scraped articles in listing order, possibly fewer than ``count``
        """
        strategies = []
        if self.fetch_cfg.mode != "static":
            strategies.append(partial(self._browser_walk, url, count, oldest))
        if self.fetch_cfg.mode == "static" or self.fetch_cfg.fallback_to_static:
            strategies.append(partial(self._static_walk, url, count, oldest))

        outcome, attempts = await run_async_strategies(strategies)
        if outcome is None:
            raise attempts[-1].details["error"]

        articles: list[ScrapedArticle] = outcome.result
        log_event(
            self.logger,
            "Listing scraped",
            event="listing_done",
            url=url,
            fetch_mode=outcome.strategy,
            requested=count,
            scraped=len(articles),
        )
        return articles

    async def _browser_walk(self, url: str, count: int, oldest: bool) -> StrategyOutcome:
        pool = self._pool or shared_pool(self.fetch_cfg)
        try:
            async with pool.page() as page:
                session = BrowserSession(page, self.fetch_cfg, self.cfg.navigation_timeout_seconds)
                articles = await self.walk(session, url, count, oldest)
        except Exception as exc:  # noqa: BLE001
            log_event(
                self.logger,
                "Browser listing scrape failed",
                level=logging.WARNING,
                event="listing_browser_failed",
                url=url,
                error=f"{type(exc).__name__}: {exc}",
            )
            return failure("browser", "browser_failed", error=exc)
        return success("browser", articles)

    async def _static_walk(self, url: str, count: int, oldest: bool) -> StrategyOutcome:
        try:
            if self._client is not None:
                articles = await self.walk(StaticSession(self._client), url, count, oldest)
            else:
                async with build_client(self.fetch_cfg) as client:
                    articles = await self.walk(StaticSession(client), url, count, oldest)
        except EnhancerError as exc:
            return failure("static", "static_failed", error=exc)
        return success("static", articles)

    async def walk(self, session: PageSession, url: str, count: int, oldest: bool) -> list[ScrapedArticle]:
        """Run one listing scrape over ``session``."""
        await session.goto(url)
        page_url = url
        if oldest:
            page_url = await self._goto_oldest(session, url)

        try:
            await session.wait_for(self.cfg.article_selector, self.cfg.wait_timeout_seconds)
        except NavigationTimeoutError as exc:
            log_event(
                self.logger,
                "No articles found on listing page",
                level=logging.WARNING,
                event="listing_empty",
                url=page_url,
                error=str(exc),
            )
            return []

        links = collect_article_links(await session.content(), page_url, self.cfg.article_selector, count)
        articles: list[ScrapedArticle] = []
        for index, link in enumerate(links, start=1):
            if len(articles) >= count:
                break
            try:
                article = await self._scrape_article(session, link)
            except EnhancerError as exc:
                log_event(
                    self.logger,
                    "Article skipped",
                    level=logging.WARNING,
                    event="listing_article_skipped",
                    url=link,
                    position=index,
                    error=str(exc),
                )
                continue
            articles.append(article)
            log_event(
                self.logger,
                "Article scraped",
                event="listing_article_ok",
                url=link,
                position=index,
                length=len(article.content),
            )
        return articles

    async def _goto_oldest(self, session: PageSession, url: str) -> str:
        try:
            last_page = find_last_page(await session.content(), self.cfg.pagination_selector)
            if last_page is None or last_page <= 1:
                return url
            target = oldest_page_url(url, last_page)
            await session.goto(target)
        except EnhancerError as exc:
            log_event(
                self.logger,
                "Pagination jump failed, staying on the first page",
                level=logging.WARNING,
                event="listing_oldest_failed",
                url=url,
                error=str(exc),
            )
            await session.goto(url)
            return url
        log_event(self.logger, "Jumped to oldest page", event="listing_oldest", url=target, page=last_page)
        return target

    async def _scrape_article(self, session: PageSession, link: str) -> ScrapedArticle:
        await session.goto(link)
        try:
            await session.wait_for(self.cfg.title_selector, self.cfg.title_wait_timeout_seconds)
        except NavigationTimeoutError:
            self.logger.debug("Title selector not found on %s", link)
        return extract_listing_article(await session.content(), link, self.cfg)
