"""
Command-line interface for the blog enhancer.

Uses Typer to expose the enhancement workflow, the bulk listing scrape and
single-page extraction. Results are printed to stdout as JSON; progress
and summaries go to stderr. Loads .env files for API key configuration.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from rich.console import Console
import typer

from .config import AppConfig, load_config
from .core.dedup import dedup_scraped
from .core.errors import EnhancerError, StoreError
from .fetch.browser import close_shared_pool
from .fetch.extractor import ContentExtractor
from .llm.tracing import flush, setup_langfuse
from .output.renderer import render_preview
from .runner import build_workflow, run_bulk_scrape, run_enhancement
from .store import ArticleStore
from .utils.logging import log_event, setup_llm_logger, setup_logging

app = typer.Typer(add_completion=False, help="Scrape blog articles and produce AI-enhanced rewrites.")
console = Console(stderr=True)


def _prepare(
    config: Path | None,
    log_level: str | None,
    log_dir: Path | None,
    static: bool,
) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    if static:
        cfg.fetch.mode = "static"
    setup_logging(cfg.logging, log_dir)
    setup_langfuse(cfg.langfuse)
    return cfg


def _emit(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def _fail(exc: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {exc}")
    raise typer.Exit(code=1)


@app.command()
def enhance(
    article: Path | None = typer.Option(
        None, "--article", "-a", exists=True, readable=True, help="JSON file with the article to enhance."
    ),
    article_id: str | None = typer.Option(None, "--article-id", help="Store article ID (the latest article is used)."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    save: bool = typer.Option(False, "--save", help="Persist the enhanced article to the store."),
    html: Path | None = typer.Option(None, "--html", help="Write an HTML preview to this path."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_dir: Path | None = typer.Option(None, "--log-dir", help="Directory for JSONL run and LLM logs."),
    static: bool = typer.Option(False, "--static", help="Fetch references without a browser."),
    api_key: str | None = typer.Option(None, "--api-key", help="Override the LLM API key."),
):
    """Enhance an article with references and an LLM rewrite.

    Uses the article in ``--article`` when given, otherwise the latest
    article from the store.
    """
    cfg = _prepare(config, log_level, log_dir, static)
    if api_key:
        cfg.provider.api_key = api_key
    payload = json.loads(article.read_text(encoding="utf-8")) if article else None
    llm_logger = setup_llm_logger(cfg.logging, log_dir)

    try:
        result, saved = asyncio.run(_enhance(cfg, payload, article_id, save, llm_logger))
    except EnhancerError as exc:
        _fail(exc)
    finally:
        flush()

    data = result.to_dict()
    if saved is not None:
        data["saved"] = saved
    _emit(data)
    if html:
        render_preview(result, html)
        console.print(f"Preview written: {html}")
    console.print(f"Enhanced [bold]{result.enhanced.title}[/bold] with {len(result.references)} reference(s)")


async def _enhance(cfg: AppConfig, payload, article_id, save: bool, llm_logger):
    try:
        workflow = build_workflow(cfg, llm_logger=llm_logger)
        result = await run_enhancement(cfg, article=payload, article_id=article_id, workflow=workflow)
        saved = await ArticleStore(cfg.store).save_enhanced(result) if save else None
        return result, saved
    finally:
        await close_shared_pool()


@app.command()
def scrape(
    url: str | None = typer.Option(None, "--url", "-u", help="Blog listing URL."),
    count: int = typer.Option(5, "--count", "-n", min=1, max=50, help="Number of articles (1-50)."),
    oldest: bool = typer.Option(False, "--oldest", help="Start from the last pagination page."),
    save: bool = typer.Option(False, "--save", help="Persist new articles to the store."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_dir: Path | None = typer.Option(None, "--log-dir", help="Directory for JSONL run logs."),
    static: bool = typer.Option(False, "--static", help="Scrape without a browser."),
):
    """Scrape articles from a blog listing page."""
    cfg = _prepare(config, log_level, log_dir, static)
    target = url or cfg.listing.default_url

    try:
        articles, saved = asyncio.run(_scrape(cfg, target, count, oldest, save))
    except EnhancerError as exc:
        _fail(exc)

    data: dict[str, Any] = {
        "success": True,
        "articles": [a.to_dict() for a in articles],
        "count": len(articles),
    }
    if saved is not None:
        data["saved"] = saved
    _emit(data)
    console.print(f"Scraped {len(articles)}/{count} article(s) from {target}")


async def _scrape(cfg: AppConfig, url: str, count: int, oldest: bool, save: bool):
    try:
        articles = await run_bulk_scrape(cfg, url, count, oldest)
        saved = await _save_scraped(cfg, articles) if save else None
        return articles, saved
    finally:
        await close_shared_pool()


async def _save_scraped(cfg: AppConfig, articles) -> int:
    store = ArticleStore(cfg.store)
    fresh = dedup_scraped(articles, await store.known_source_urls())
    saved = 0
    for article in fresh:
        try:
            await store.save_scraped(article)
        except StoreError as exc:
            log_event(
                store.logger,
                "Article not saved",
                level=logging.WARNING,
                event="store_save_failed",
                url=article.source_url,
                error=str(exc),
            )
            continue
        saved += 1
    return saved


@app.command()
def extract(
    url: str = typer.Argument(..., help="Page URL."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    static: bool = typer.Option(False, "--static", help="Fetch without a browser."),
):
    """Extract the title and main text of a single page."""
    cfg = _prepare(config, log_level, None, static)
    try:
        document = asyncio.run(_extract(cfg, url))
    except EnhancerError as exc:
        _fail(exc)
    _emit(document.to_dict())


async def _extract(cfg: AppConfig, url: str):
    try:
        return await ContentExtractor(cfg.fetch, cfg.extract).extract(url)
    finally:
        await close_shared_pool()


if __name__ == "__main__":
    app()
