"""Google Gemini provider using the generateContent REST endpoint."""

from __future__ import annotations

from typing import Any

import httpx

from ...config import ProviderConfig
from ..tracing import record_span_error, set_span_output, start_span
from .base import EnhancementProvider


class GeminiProvider(EnhancementProvider):
    name = "gemini"

    def __init__(self, cfg: ProviderConfig, api_key: str, client: httpx.AsyncClient | None = None):
        super().__init__(cfg, api_key)
        self._client = client

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": self.cfg.temperature,
                "maxOutputTokens": self.cfg.max_tokens,
            },
        }
        with start_span(
            "gemini.generate_content",
            kind="llm",
            input_value=user_prompt,
            attributes={"llm.model": self.model, "llm.provider": "gemini"},
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
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{self.model}:generateContent"
        params = {"key": self.api_key}
        if self._client is not None:
            resp = await self._client.post(url, params=params, json=payload, timeout=self.cfg.timeout_seconds)
        else:
            async with httpx.AsyncClient(timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env) as client:
                resp = await client.post(url, params=params, json=payload)
        resp.raise_for_status()
        return resp.json()


def _extract_text(data: dict[str, Any]) -> str:
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""

    if not isinstance(parts, list):
        return ""

    non_thought_chunks: list[str] = []
    all_chunks: list[str] = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        text = part.get("text")
        if not text:
            continue
        chunk = str(text)
        all_chunks.append(chunk)
        if not part.get("thought"):
            non_thought_chunks.append(chunk)

    if non_thought_chunks:
        return "".join(non_thought_chunks)
    return "".join(all_chunks)
