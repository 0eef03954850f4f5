"""
Core domain models and business logic.

This package contains data types, errors and helpers that are
independent of any specific pipeline stage.
"""

from .dedup import dedup_scraped
from .errors import (
    EnhancerError,
    ExtractionError,
    LLMConfigError,
    LLMEmptyResponseError,
    LLMError,
    LLMRequestError,
    NavigationTimeoutError,
    SearchError,
    StoreError,
    WorkflowTimeoutError,
)
from .text import normalize_whitespace, slugify
from .types import (
    ArticleRef,
    EnhancedArticle,
    EnhancementResult,
    OriginalArticle,
    Reference,
    ReferenceCandidate,
    ScrapedArticle,
    SourceDocument,
    StrategyOutcome,
)

__all__ = [
    "ArticleRef",
    "EnhancedArticle",
    "EnhancementResult",
    "OriginalArticle",
    "Reference",
    "ReferenceCandidate",
    "ScrapedArticle",
    "SourceDocument",
    "StrategyOutcome",
    "EnhancerError",
    "ExtractionError",
    "LLMConfigError",
    "LLMEmptyResponseError",
    "LLMError",
    "LLMRequestError",
    "NavigationTimeoutError",
    "SearchError",
    "StoreError",
    "WorkflowTimeoutError",
    "dedup_scraped",
    "normalize_whitespace",
    "slugify",
]
