"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: Page rendering and static HTTP fetching settings
- ExtractConfig: Content extraction selector cascade
- ListingConfig: Bulk listing scrape settings
- SearchConfig: Reference search provider settings
- ProviderConfig: LLM provider settings
- EnhanceConfig: Enhancement workflow settings
- StoreConfig: External article store settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class FetchConfig:
    """Configuration for page fetching.

    Attributes:
        mode: "browser" renders with headless Chromium, "static" uses a plain HTTP GET
        fallback_to_static: If True, a failed browser extraction is retried once in static mode
        render_timeout_seconds: Navigation timeout for browser rendering
        static_timeout_seconds: HTTP request timeout for static fetching
        wait_until: Playwright load state to wait for after navigation
        blocked_resource_types: Request types aborted while rendering
        headless: Launch the browser without a window
        browser_args: Extra Chromium command-line switches
        user_agent: User-Agent header for static fetching and browser contexts
        trust_env: Whether to respect system proxy settings
    """

    mode: str = "browser"
    fallback_to_static: bool = True
    render_timeout_seconds: float = 60.0
    static_timeout_seconds: float = 30.0
    wait_until: str = "domcontentloaded"
    blocked_resource_types: list[str] = field(
        default_factory=lambda: ["image", "stylesheet", "font", "media"]
    )
    headless: bool = True
    browser_args: list[str] = field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-accelerated-2d-canvas",
            "--disable-gpu",
        ]
    )
    user_agent: str = DESKTOP_USER_AGENT
    trust_env: bool = True


@dataclass
class ExtractConfig:
    """Configuration for HTML content extraction.

    Attributes:
        content_selectors: CSS selectors tried in order for the main body
        selector_min_chars: A selector wins only when its text is longer than this
        min_chars: Extraction fails when the final text is shorter than this
    """

    content_selectors: list[str] = field(
        default_factory=lambda: [
            "article",
            "main",
            ".entry-content",
            ".post-content",
            "#content",
            '[role="main"]',
            ".wp-content",
            ".content",
            ".article-body",
            'div[class*="content"]',
        ]
    )
    selector_min_chars: int = 200
    min_chars: int = 100


@dataclass
class ListingConfig:
    """Configuration for bulk scraping of blog index pages.

    Attributes:
        article_selector: Selector for article containers on the listing page
        pagination_selector: Selector for numeric pagination links
        title_selector: Selector awaited on each article page
        wait_timeout_seconds: Bounded wait for the article selector
        title_wait_timeout_seconds: Bounded wait for the per-article title
        navigation_timeout_seconds: Timeout for each page navigation
        content_selectors: Content cascade used on article pages
        strip_selectors: Non-content subtrees removed before measuring text
        selector_min_chars: A content selector wins only with more text than this
        min_chars: Articles with less text than this are skipped
        paragraph_min_chars: Paragraphs at or below this length are ignored
        default_url: Listing scraped when a request names no URL
        default_count: Articles requested when a request names no count
        max_count: Upper bound accepted for the requested article count
        deadline_seconds: Overall deadline for one bulk scrape
    """

    article_selector: str = "article"
    pagination_selector: str = "a.page-numbers"
    title_selector: str = "h1, .entry-title"
    wait_timeout_seconds: float = 10.0
    title_wait_timeout_seconds: float = 5.0
    navigation_timeout_seconds: float = 30.0
    content_selectors: list[str] = field(
        default_factory=lambda: ["article .entry-content", ".post-content", "article", "main"]
    )
    strip_selectors: list[str] = field(
        default_factory=lambda: [
            "script",
            "style",
            "nav",
            "header",
            "footer",
            ".comments",
            ".sidebar",
            ".related",
            ".share",
        ]
    )
    selector_min_chars: int = 200
    min_chars: int = 100
    paragraph_min_chars: int = 20
    default_url: str = "https://beyondchats.com/blogs/"
    default_count: int = 5
    max_count: int = 50
    deadline_seconds: float = 300.0


@dataclass
class SearchConfig:
    """Configuration for the reference search provider.

    Attributes:
        provider: Search backend name ("serpapi")
        api_key: Optional inline API key (overrides env var)
        api_key_env: Environment variable names checked for the API key, in order
        base_url: Search endpoint
        timeout_seconds: Request timeout
        language: Result language hint
        placeholder_keys: Credential values treated as "not configured"
        fallback_to_synthetic: Degrade to synthetic candidates instead of raising
        synthetic_domains: Domains used to build synthetic candidates
    """

    provider: str = "serpapi"
    api_key: str | None = None
    api_key_env: list[str] = field(default_factory=lambda: ["SERPAPI_KEY", "SERP_API_KEY"])
    base_url: str = "https://serpapi.com/search.json"
    timeout_seconds: float = 30.0
    language: str = "en"
    placeholder_keys: list[str] = field(default_factory=lambda: ["your_serpapi_key_here"])
    fallback_to_synthetic: bool = True
    synthetic_domains: list[str] = field(
        default_factory=lambda: [
            "medium.com",
            "dev.to",
            "hashnode.com",
            "linkedin.com/pulse",
            "reddit.com/r",
            "stackoverflow.com",
            "quora.com",
            "forbes.com",
            "techcrunch.com",
            "wired.com",
            "theverge.com",
            "arstechnica.com",
        ]
    )


@dataclass
class ProviderConfig:
    """Configuration for LLM provider.

    Attributes:
        name: Provider name ("openai", "openai_compatible" or "gemini")
        model: Model identifier
        model_env: Environment variable that overrides the model when set
        api_key_env: Environment variable name containing the API key
        base_url: Base URL for the provider API
        api_key: Optional inline API key (overrides env var)
        temperature: Sampling temperature
        max_tokens: Output length cap
        timeout_seconds: Request timeout
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "openai"
    model: str = "gpt-4o-mini"
    model_env: str = "LLM_MODEL"
    api_key_env: str = "OPENAI_API_KEY"
    base_url: str = "https://api.openai.com/v1"
    api_key: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout_seconds: float = 120.0
    trust_env: bool = True


@dataclass
class EnhanceConfig:
    """Configuration for the enhancement workflow.

    Attributes:
        reference_limit: Number of reference candidates requested from search
        excerpt_chars: Characters of each reference included in the prompt
        fallback_query: Search query used when the article has no title
        title_suffix: Appended to the original title
        url_suffix: Appended to the original source URL
        deadline_seconds: Overall deadline for one enhancement
    """

    reference_limit: int = 2
    excerpt_chars: int = 800
    fallback_query: str = "technology trends"
    title_suffix: str = " (Enhanced)"
    url_suffix: str = "#enhanced"
    deadline_seconds: float = 300.0


@dataclass
class StoreConfig:
    """Configuration for the external article store.

    Attributes:
        base_url: Store API base URL
        base_url_env: Environment variable names checked for the base URL, in order
        read_timeout_seconds: Timeout for list requests
        write_timeout_seconds: Timeout for create requests
    """

    base_url: str = "http://localhost:8000/api"
    base_url_env: list[str] = field(default_factory=lambda: ["BACKEND_BASE_URL", "LARAVEL_API_URL"])
    read_timeout_seconds: float = 60.0
    write_timeout_seconds: float = 30.0


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls_authors"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "redact_urls_authors"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    listing: ListingConfig = field(default_factory=ListingConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    enhance: EnhanceConfig = field(default_factory=EnhanceConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


_SECTIONS: dict[str, type] = {
    "fetch": FetchConfig,
    "extract": ExtractConfig,
    "listing": ListingConfig,
    "search": SearchConfig,
    "provider": ProviderConfig,
    "enhance": EnhanceConfig,
    "store": StoreConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            known = {k: v for k, v in value.items() if k in data[key]}
            data[key].update(known)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTIONS.items()})


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get LLM API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)


def get_model(cfg: ProviderConfig) -> str:
    """Get the model name, honouring the environment override."""
    return os.getenv(cfg.model_env) or cfg.model


def get_search_key(cfg: SearchConfig) -> str | None:
    """Get search API key from inline config or the first set environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return _first_env(cfg.api_key_env)


def get_store_url(cfg: StoreConfig) -> str:
    """Get the article store base URL, environment first, without trailing slash."""
    return (_first_env(cfg.base_url_env) or cfg.base_url).rstrip("/")


def get_langfuse_settings(cfg: LangfuseConfig) -> dict[str, str | None]:
    """Get Langfuse client arguments, inline values first, then ``LANGFUSE_*`` variables."""
    fields = ("public_key", "secret_key", "host", "environment", "release")
    return {name: getattr(cfg, name) or os.getenv(f"LANGFUSE_{name.upper()}") for name in fields}


def _first_env(names: list[str]) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None
