"""
Enhancement synthesis: one grounded LLM call per article.

The synthesizer builds the prompt from the original text and the gathered
references, calls the provider once (no retries) and returns the stripped
output. Failures surface as :class:`LLMError` subclasses.
"""

from __future__ import annotations

import logging

import httpx

from ..config import EnhanceConfig, LoggingConfig
from ..core.errors import LLMEmptyResponseError, LLMRequestError
from ..core.types import Reference
from ..utils.logging import log_event, redact_text, redact_value, truncate_text
from .prompts import build_enhancement_prompt, system_prompt
from .providers.base import EnhancementProvider


class Synthesizer:
    """Produces enhanced article text with an LLM provider."""

    def __init__(
        self,
        provider: EnhancementProvider,
        enhance_cfg: EnhanceConfig,
        log_cfg: LoggingConfig | None = None,
        llm_logger: logging.Logger | None = None,
        logger: logging.Logger | None = None,
    ):
        self.provider = provider
        self.enhance_cfg = enhance_cfg
        self.log_cfg = log_cfg or LoggingConfig()
        self.llm_logger = llm_logger
        self.logger = logger or logging.getLogger(__name__)

    async def synthesize(self, original_text: str, references: list[Reference]) -> str:
        """Return enhanced markdown-like text.

        Raises:
            LLMRequestError: the call errored or timed out
            LLMEmptyResponseError: the model returned no content
        """
        prompt = build_enhancement_prompt(original_text, references, self.enhance_cfg.excerpt_chars)
        log_event(
            self.logger,
            "Calling LLM",
            event="llm_request",
            model=self.provider.model,
            references=len(references),
            prompt_chars=len(prompt),
        )
        try:
            content = await self.provider.complete(system_prompt(), prompt)
        except (httpx.HTTPError, ValueError) as exc:
            detail = f"{type(exc).__name__}: {exc}"
            self._log_llm_response("provider_error", detail, prompt, references)
            raise LLMRequestError(f"LLM enhancement failed: {detail}") from exc

        content = (content or "").strip()
        if not content:
            self._log_llm_response("empty", "", prompt, references)
            raise LLMEmptyResponseError("LLM returned empty response")

        self._log_llm_response("ok", content, prompt, references)
        log_event(self.logger, "LLM response received", event="llm_response", chars=len(content))
        return content

    def _log_llm_response(self, status: str, content: str, prompt: str, references: list[Reference]) -> None:
        if self.llm_logger is None:
            return
        detail = self.log_cfg.llm_log_detail
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": "llm_enhancement",
            "status": status,
            "model": self.provider.model,
            "provider": self.provider.name,
            "reference_urls": [redact_value(ref.url, redaction) for ref in references],
        }
        if detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
        payload["raw_response"] = truncate_text(redact_text(content, redaction))
        log_event(self.llm_logger, "LLM response", **payload)
