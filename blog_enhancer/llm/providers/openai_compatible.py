"""OpenAI chat-completions provider (also any compatible endpoint)."""

from __future__ import annotations

from typing import Any

import httpx

from ...config import ProviderConfig
from ..tracing import record_span_error, set_span_output, start_span
from .base import EnhancementProvider


class OpenAICompatibleProvider(EnhancementProvider):
    name = "openai_compatible"

    def __init__(self, cfg: ProviderConfig, api_key: str, client: httpx.AsyncClient | None = None):
        super().__init__(cfg, api_key)
        self._client = client

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.cfg.temperature,
            "max_tokens": self.cfg.max_tokens,
        }
        with start_span(
            "openai.chat_completion",
            kind="llm",
            input_value=user_prompt,
            attributes={"llm.model": self.model, "llm.provider": self.cfg.name},
        ) as span:
            try:
                data = await self._post(payload)
            except httpx.HTTPError as exc:
                record_span_error(span, exc)
                raise
            content = _extract_text(data)
            set_span_output(span, content)
            return content

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self._client is not None:
            resp = await self._client.post(url, json=payload, headers=headers, timeout=self.cfg.timeout_seconds)
        else:
            async with httpx.AsyncClient(timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env) as client:
                resp = await client.post(url, json=payload, headers=headers)
        resp.raise_for_status()
        return resp.json()


def _extract_text(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content or ""
