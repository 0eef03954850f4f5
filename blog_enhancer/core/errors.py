"""Exception hierarchy shared by all pipeline stages."""

from __future__ import annotations


class EnhancerError(Exception):
    """Base class for failures the entry points report to callers."""


class ExtractionError(EnhancerError):
    """No extraction path produced enough text for a URL.

    Attributes:
        url: The URL being extracted
        reason: "insufficient_content" or "fetch_failed"
        length: Length of the best text found (0 when nothing was fetched)
    """

    def __init__(self, url: str, reason: str, length: int = 0, detail: str | None = None):
        self.url = url
        self.reason = reason
        self.length = length
        self.detail = detail
        if reason == "insufficient_content":
            message = f"Insufficient content extracted from {url} ({length} chars)"
        else:
            message = f"Extraction failed for {url}: {reason}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class SearchError(EnhancerError):
    """The reference search provider failed and no fallback was allowed."""


class LLMError(EnhancerError):
    """Base class for synthesis failures."""


class LLMConfigError(LLMError):
    """No LLM credential is configured."""


class LLMRequestError(LLMError):
    """The LLM call errored or timed out."""


class LLMEmptyResponseError(LLMError):
    """The LLM returned no content."""


class StoreError(EnhancerError):
    """The external article store could not be read or written."""


class NavigationTimeoutError(EnhancerError):
    """A bounded wait for a page element expired."""


class WorkflowTimeoutError(EnhancerError):
    """A whole workflow exceeded its deadline."""
