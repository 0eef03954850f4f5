"""
HTML content extraction with a layered fallback cascade.

Body text is taken from the first strategy that yields enough text:
1. selector:<css>: each configured content selector in order, accepted when
   its text is longer than ``selector_min_chars``
2. paragraphs: every ``<p>`` text joined by blank lines
3. body: the whole page body

The winning text is whitespace-normalized. Anything shorter than
``min_chars`` is reported as an :class:`ExtractionError` rather than
returned.
"""

from __future__ import annotations

import copy
from functools import partial
import logging
from typing import Iterable

from bs4 import BeautifulSoup, Tag
import httpx

from ..config import ExtractConfig, FetchConfig
from ..core.errors import ExtractionError
from ..core.strategy import failure, run_async_strategies, run_strategies, success
from ..core.text import normalize_whitespace
from ..core.types import SourceDocument, StrategyOutcome
from ..utils.logging import log_event
from .browser import BrowserPool, shared_pool
from .fetcher import fetch_static, render_page

_NON_CONTENT_TAGS = ["script", "style", "noscript"]


def extract_document(
    html: str,
    url: str,
    cfg: ExtractConfig,
    fetch_mode: str | None = None,
) -> SourceDocument:
    """Extract title and body text from a page.

    Args:
        html: The page HTML
        url: The page URL, carried into the result and errors
        cfg: Selector cascade and length thresholds
        fetch_mode: How the HTML was obtained, recorded on the result

    Returns:
        SourceDocument whose text is at least ``cfg.min_chars`` long

    Raises:
        ExtractionError: reason "insufficient_content" when every strategy
            falls short
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()

    title = extract_title(soup)
    outcome, attempts = extract_body(
        soup,
        cfg.content_selectors,
        selector_min_chars=cfg.selector_min_chars,
        min_chars=cfg.min_chars,
    )
    if outcome is None:
        raise ExtractionError(url, "insufficient_content", length=best_length(attempts))

    text, _node = outcome.result
    return SourceDocument(
        url=url,
        title=title,
        text=text,
        raw_html=html,
        strategy=outcome.strategy,
        fetch_mode=fetch_mode,
    )


def extract_title(soup: BeautifulSoup) -> str:
    """Return the first h1 text, else the document title, else an empty string."""
    for name in ("h1", "title"):
        node = soup.find(name)
        if node is None:
            continue
        text = normalize_whitespace(node.get_text(" "))
        if text:
            return text
    return ""


def extract_body(
    soup: BeautifulSoup,
    selectors: Iterable[str],
    selector_min_chars: int,
    min_chars: int,
    paragraph_min_chars: int = 0,
    strip_selectors: Iterable[str] = (),
) -> tuple[StrategyOutcome | None, list[StrategyOutcome]]:
    """Run the body-text cascade over a parsed page.

    Successful outcomes carry ``(text, node)`` where ``node`` is the element
    the text came from (None for the paragraph strategy).

    Args:
        soup: Parsed page
        selectors: Content selectors tried in order
        selector_min_chars: A selector wins only with more text than this
        min_chars: Minimum text length for the paragraph and body strategies
        paragraph_min_chars: Paragraphs at or below this length are ignored
        strip_selectors: Subtrees removed (from a copy) before measuring text
    """
    strip = list(strip_selectors)
    strategies = [
        partial(_selector_strategy, soup, selector, max(selector_min_chars, min_chars), strip)
        for selector in selectors
    ]
    strategies.append(partial(_paragraph_strategy, soup, min_chars, paragraph_min_chars))
    strategies.append(partial(_body_strategy, soup, min_chars, strip))
    return run_strategies(strategies)


def best_length(attempts: list[StrategyOutcome]) -> int:
    return max((attempt.details.get("length", 0) for attempt in attempts), default=0)


def _selector_strategy(
    soup: BeautifulSoup,
    selector: str,
    threshold: int,
    strip: list[str],
) -> StrategyOutcome:
    name = f"selector:{selector}"
    node = soup.select_one(selector)
    if node is None:
        return failure(name, "no_match", length=0)
    node = _stripped(node, strip)
    text = normalize_whitespace(node.get_text(" "))
    if len(text) > threshold:
        return success(name, (text, node), length=len(text))
    return failure(name, "too_short", length=len(text))


def _paragraph_strategy(soup: BeautifulSoup, min_chars: int, paragraph_min_chars: int) -> StrategyOutcome:
    paragraphs = []
    for node in soup.find_all("p"):
        text = node.get_text(" ").strip()
        if len(text) > paragraph_min_chars:
            paragraphs.append(text)
    text = normalize_whitespace("\n\n".join(paragraphs))
    if len(text) >= min_chars:
        return success("paragraphs", (text, None), length=len(text))
    return failure("paragraphs", "too_short", length=len(text))


def _body_strategy(soup: BeautifulSoup, min_chars: int, strip: list[str]) -> StrategyOutcome:
    node = soup.body or soup
    if strip:
        node = _stripped(node, strip)
    text = normalize_whitespace(node.get_text(" "))
    if len(text) >= min_chars:
        return success("body", (text, node), length=len(text))
    return failure("body", "too_short", length=len(text))


def _stripped(node: Tag, strip: list[str]) -> Tag:
    if not strip:
        return node
    clone = copy.copy(node)
    for selector in strip:
        for child in clone.select(selector):
            child.decompose()
    return clone


class ContentExtractor:
    """Fetches a URL and extracts its main content.

    The browser mode is tried first (unless configured off); any failure in
    it retries the whole extraction once in static mode.
    """

    def __init__(
        self,
        fetch_cfg: FetchConfig,
        extract_cfg: ExtractConfig,
        pool: BrowserPool | None = None,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ):
        self.fetch_cfg = fetch_cfg
        self.extract_cfg = extract_cfg
        self._pool = pool
        self._client = client
        self.logger = logger or logging.getLogger(__name__)

    def modes(self) -> list[str]:
        if self.fetch_cfg.mode == "static":
            return ["static"]
        if self.fetch_cfg.fallback_to_static:
            return ["browser", "static"]
        return ["browser"]

    async def extract(self, url: str) -> SourceDocument:
        """Extract a SourceDocument from ``url``.

        Raises:
            ExtractionError: when no mode yields at least ``min_chars`` of text
        """
        strategies = [partial(self._attempt, url, mode) for mode in self.modes()]
        outcome, attempts = await run_async_strategies(strategies)
        if outcome is not None:
            document: SourceDocument = outcome.result
            log_event(
                self.logger,
                "Extraction succeeded",
                event="extract_ok",
                url=url,
                fetch_mode=document.fetch_mode,
                strategy=document.strategy,
                length=len(document.text),
            )
            return document
        raise _pick_error(attempts)

    async def _attempt(self, url: str, mode: str) -> StrategyOutcome:
        if mode == "browser":
            fetched = await render_page(url, self.fetch_cfg, self._browser_pool())
        else:
            fetched = await fetch_static(url, self.fetch_cfg, client=self._client)

        if fetched.error or fetched.html is None:
            error = ExtractionError(url, "fetch_failed", detail=fetched.error)
            log_event(
                self.logger,
                "Fetch failed",
                level=logging.WARNING,
                event="extract_fetch_failed",
                url=url,
                fetch_mode=mode,
                error=fetched.error,
            )
            return failure(mode, "fetch_failed", error=error)

        try:
            document = extract_document(fetched.html, url, self.extract_cfg, fetch_mode=mode)
        except ExtractionError as exc:
            log_event(
                self.logger,
                "Insufficient content",
                level=logging.WARNING,
                event="extract_insufficient",
                url=url,
                fetch_mode=mode,
                length=exc.length,
            )
            return failure(mode, exc.reason, error=exc)
        return success(mode, document)

    def _browser_pool(self) -> BrowserPool:
        if self._pool is None:
            self._pool = shared_pool(self.fetch_cfg)
        return self._pool


def _pick_error(attempts: list[StrategyOutcome]) -> ExtractionError:
    errors = [attempt.details["error"] for attempt in attempts if "error" in attempt.details]
    for error in errors:
        if error.reason == "insufficient_content":
            return error
    return errors[-1]
