"""
Enhancement workflow orchestration.

One enhancement runs these stages in order, each with its own recovery
policy:
1. Resolve the original article (inline, or the latest from the store)
2. Discover reference candidates (search failure falls back to the
   original's own URL)
3. Gather reference content (failed extractions are dropped or replaced by
   the original's inline content)
4. Guarantee at least one reference (the original itself)
5. Synthesize enhanced text with the LLM (failures propagate)
6. Format the text as styled HTML
7. Assemble the result

The bulk scrape path runs the listing extractor alone. Both paths have an
overall deadline and a dict-returning entry point for request handlers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from .config import AppConfig
from .core.errors import EnhancerError, SearchError, StoreError, WorkflowTimeoutError
from .core.types import (
    ArticleRef,
    EnhancedArticle,
    EnhancementResult,
    OriginalArticle,
    Reference,
    ReferenceCandidate,
    ScrapedArticle,
)
from .fetch.extractor import ContentExtractor
from .fetch.listing import ListingExtractor
from .llm.providers.factory import create_provider
from .llm.synthesizer import Synthesizer
from .llm.tracing import record_span_error, set_span_output, start_span
from .output.formatter import format_enhanced_content
from .search.references import ReferenceFinder
from .store import ArticleStore
from .utils.logging import get_logger, log_event


class EnhancementWorkflow:
    """Sequences search, extraction, synthesis and formatting for one article."""

    def __init__(
        self,
        cfg: AppConfig,
        finder: ReferenceFinder,
        extractor: ContentExtractor,
        synthesizer: Synthesizer,
        store: ArticleStore | None = None,
        logger: logging.Logger | None = None,
    ):
        self.cfg = cfg
        self.finder = finder
        self.extractor = extractor
        self.synthesizer = synthesizer
        self.store = store
        self.logger = logger or get_logger("workflow")

    async def run(
        self,
        original: OriginalArticle | dict[str, Any] | None = None,
        article_id: Any = None,
    ) -> EnhancementResult:
        """Enhance one article.

        Raises:
            EnhancerError: a fatal stage failure (store, search without a
                fallback URL, or synthesis)
        """
        with start_span("enhance.workflow", kind="chain", attributes={"article.id": article_id}) as span:
            try:
                article = await self.resolve(original, article_id)
                candidates = await self.discover(article)
                references = self.ensure_minimum(article, await self.gather(article, candidates))
                text = await self.synthesize(article, references)
                content = format_enhanced_content(text, references)
            except EnhancerError as exc:
                record_span_error(span, exc)
                raise
            result = self.assemble(article, references, content)
            set_span_output(span, {"title": result.enhanced.title, "references": len(references)})
        log_event(
            self.logger,
            "Enhancement completed",
            event="enhance_done",
            article_id=article.id,
            references=len(references),
            content_chars=len(content),
        )
        return result

    async def resolve(self, original: OriginalArticle | dict[str, Any] | None, article_id: Any) -> OriginalArticle:
        if isinstance(original, OriginalArticle):
            article = original
        elif original:
            article = OriginalArticle.from_dict(original)
        else:
            if self.store is None:
                raise StoreError("No article supplied and no article store configured")
            article = OriginalArticle.from_dict(await self.store.fetch_latest(article_id))
        log_event(self.logger, "Article ready", event="enhance_resolved", article_id=article.id, title=article.title)
        return article

    async def discover(self, article: OriginalArticle) -> list[ReferenceCandidate]:
        query = article.title or self.cfg.enhance.fallback_query
        with start_span("enhance.discover", kind="retriever", input_value=query) as span:
            try:
                candidates = await self.finder.find_references(query, self.cfg.enhance.reference_limit)
            except SearchError as exc:
                record_span_error(span, exc)
                if not article.source_url:
                    raise
                log_event(
                    self.logger,
                    "Search failed, using the original source",
                    level=logging.WARNING,
                    event="enhance_search_fallback",
                    error=str(exc),
                )
                candidates = [ReferenceCandidate(url=article.source_url, title=article.title or "Source")]
            set_span_output(span, [c.to_dict() for c in candidates])
        log_event(self.logger, "References discovered", event="enhance_discovered", count=len(candidates))
        return candidates

    async def gather(self, article: OriginalArticle, candidates: list[ReferenceCandidate]) -> list[Reference]:
        """Extract each candidate in order; failures are substituted or dropped."""
        references: list[Reference] = []
        for candidate in candidates:
            with start_span("enhance.gather", kind="tool", input_value=candidate.url) as span:
                try:
                    document = await self.extractor.extract(candidate.url)
                except EnhancerError as exc:
                    record_span_error(span, exc)
                    if candidate.url == article.source_url and article.content:
                        log_event(
                            self.logger,
                            "Reference extraction failed, using original content",
                            level=logging.WARNING,
                            event="enhance_reference_substituted",
                            url=candidate.url,
                            error=str(exc),
                        )
                        references.append(Reference(candidate.url, candidate.title, article.content))
                    else:
                        log_event(
                            self.logger,
                            "Reference dropped",
                            level=logging.WARNING,
                            event="enhance_reference_dropped",
                            url=candidate.url,
                            error=str(exc),
                        )
                    continue
                references.append(Reference(candidate.url, candidate.title, document.text))
                set_span_output(span, {"chars": len(document.text), "strategy": document.strategy})
        return references

    def ensure_minimum(self, article: OriginalArticle, references: list[Reference]) -> list[Reference]:
        if references:
            return references
        log_event(
            self.logger,
            "No references gathered, using the original article",
            level=logging.WARNING,
            event="enhance_reference_floor",
        )
        return [
            Reference(
                url=article.source_url or "original",
                title=article.title or "Original Article",
                content=article.content,
            )
        ]

    async def synthesize(self, article: OriginalArticle, references: list[Reference]) -> str:
        with start_span("enhance.synthesize", kind="llm") as span:
            try:
                text = await self.synthesizer.synthesize(article.content, references)
            except EnhancerError as exc:
                record_span_error(span, exc)
                raise
            set_span_output(span, text)
        return text

    def assemble(self, article: OriginalArticle, references: list[Reference], content: str) -> EnhancementResult:
        return EnhancementResult(
            success=True,
            original=ArticleRef(id=article.id, title=article.title),
            references=[ref.to_candidate() for ref in references],
            enhanced=EnhancedArticle(
                id=article.id,
                title=f"{article.title}{self.cfg.enhance.title_suffix}",
                content=content,
                source_url=(article.source_url or "") + self.cfg.enhance.url_suffix,
                author=article.author,
            ),
        )


def build_workflow(
    cfg: AppConfig,
    llm_logger: logging.Logger | None = None,
    logger: logging.Logger | None = None,
) -> EnhancementWorkflow:
    """Wire the default components.

    Raises:
        LLMConfigError: unknown provider or no LLM credential configured
    """
    provider = create_provider(cfg.provider)
    return EnhancementWorkflow(
        cfg,
        finder=ReferenceFinder(cfg.search, logger=logger),
        extractor=ContentExtractor(cfg.fetch, cfg.extract, logger=logger),
        synthesizer=Synthesizer(provider, cfg.enhance, cfg.logging, llm_logger=llm_logger, logger=logger),
        store=ArticleStore(cfg.store, logger=logger),
        logger=logger,
    )


async def run_enhancement(
    cfg: AppConfig,
    article: OriginalArticle | dict[str, Any] | None = None,
    article_id: Any = None,
    workflow: EnhancementWorkflow | None = None,
) -> EnhancementResult:
    """Run one enhancement under ``cfg.enhance.deadline_seconds``.

    Raises:
        WorkflowTimeoutError: the deadline expired
    """
    workflow = workflow or build_workflow(cfg)
    deadline = cfg.enhance.deadline_seconds
    try:
        return await asyncio.wait_for(workflow.run(article, article_id), timeout=deadline)
    except asyncio.TimeoutError as exc:
        raise WorkflowTimeoutError(f"Enhancement exceeded {deadline:g}s deadline") from exc


async def run_bulk_scrape(
    cfg: AppConfig,
    url: str,
    count: int,
    oldest: bool = False,
    listing: ListingExtractor | None = None,
) -> list[ScrapedArticle]:
    """Scrape a listing page under ``cfg.listing.deadline_seconds``.

    Raises:
        WorkflowTimeoutError: the deadline expired
    """
    listing = listing or ListingExtractor(cfg.fetch, cfg.listing)
    deadline = cfg.listing.deadline_seconds
    try:
        return await asyncio.wait_for(listing.scrape_listing(url, count, oldest), timeout=deadline)
    except asyncio.TimeoutError as exc:
        raise WorkflowTimeoutError(f"Bulk scrape exceeded {deadline:g}s deadline") from exc


async def enhance_entry(
    payload: dict[str, Any],
    cfg: AppConfig,
    workflow: EnhancementWorkflow | None = None,
) -> dict[str, Any]:
    """Request-handler entry point: ``{article?, articleId?}`` in, result dict out."""
    logger = get_logger("entry")
    start = time.perf_counter()
    article = payload.get("article")
    article_id = payload.get("articleId", payload.get("article_id"))
    try:
        result = await run_enhancement(cfg, article=article, article_id=article_id, workflow=workflow)
    except EnhancerError as exc:
        log_event(logger, "Enhancement failed", level=logging.ERROR, event="enhance_failed", error=str(exc))
        return {"success": False, "error": str(exc), "duration": _duration(start)}
    return {**result.to_dict(), "duration": _duration(start)}


async def scrape_entry(
    payload: dict[str, Any],
    cfg: AppConfig,
    listing: ListingExtractor | None = None,
) -> dict[str, Any]:
    """Request-handler entry point: ``{url?, count?, oldest?}`` in, articles out."""
    logger = get_logger("entry")
    start = time.perf_counter()
    url = payload.get("url") or cfg.listing.default_url
    count = payload.get("count", cfg.listing.default_count)
    if not isinstance(count, int) or isinstance(count, bool) or not 1 <= count <= cfg.listing.max_count:
        return {"success": False, "error": f"Count must be between 1 and {cfg.listing.max_count}"}
    try:
        articles = await run_bulk_scrape(cfg, url, count, bool(payload.get("oldest")), listing=listing)
    except EnhancerError as exc:
        log_event(logger, "Bulk scrape failed", level=logging.ERROR, event="scrape_failed", url=url, error=str(exc))
        return {"success": False, "error": str(exc), "duration": _duration(start)}
    return {
        "success": True,
        "articles": [article.to_dict() for article in articles],
        "count": len(articles),
        "duration": _duration(start),
    }


def _duration(start: float) -> str:
    return f"{time.perf_counter() - start:.2f}s"
