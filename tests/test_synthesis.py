"""Tests for the synthesis module and prompt builders."""

import asyncio
import json

import httpx
import pytest

from blog_enhancer.config import EnhanceConfig, LoggingConfig, ProviderConfig
from blog_enhancer.core.errors import LLMEmptyResponseError, LLMRequestError
from blog_enhancer.core.types import Reference
from blog_enhancer.llm.prompts import build_enhancement_prompt, format_reference, system_prompt
from blog_enhancer.llm.providers.gemini import GeminiProvider
from blog_enhancer.llm.providers.openai_compatible import OpenAICompatibleProvider
from blog_enhancer.llm.synthesizer import Synthesizer

REFS = [
    Reference("https://ex.com/a", "Guide A", "A" * 1000),
    Reference("https://ex.com/b", "Guide B", "short body"),
]


@pytest.fixture(autouse=True)
def _clear_model_env(monkeypatch):
    monkeypatch.delenv("LLM_MODEL", raising=False)


def test_format_reference_truncates_excerpt():
    block = format_reference(1, REFS[0])
    assert block.startswith("Reference 1: Guide A\nURL: https://ex.com/a\nExcerpt: ")
    assert block.endswith("A" * 800 + "...")
    assert "A" * 801 not in block


def test_enhancement_prompt_contains_original_and_references():
    prompt = build_enhancement_prompt("Original body text", REFS)

    assert "ORIGINAL ARTICLE:\nOriginal body text" in prompt
    assert "Reference 1: Guide A" in prompt
    assert prompt.endswith("Reference 2: Guide B\nURL: https://ex.com/b\nExcerpt: short body...")
    assert "Do NOT invent facts" in prompt


def test_system_prompt_is_loaded():
    assert system_prompt()


def _openai_synthesize(handler, llm_logger=None):
    async def main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = OpenAICompatibleProvider(ProviderConfig(api_key="test-key"), "test-key", client=client)
            synthesizer = Synthesizer(
                provider,
                EnhanceConfig(),
                LoggingConfig(llm_log_detail="prompt_response"),
                llm_logger=llm_logger,
            )
            return await synthesizer.synthesize("Original body text", REFS)

    return asyncio.run(main())


def _chat_response(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def test_synthesize_returns_stripped_output():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["payload"] = json.loads(request.content)
        return _chat_response("  ## Enhanced\n\nBody  \n")

    text = _openai_synthesize(handler)

    assert text == "## Enhanced\n\nBody"
    assert seen["url"] == "https://api.openai.com/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["payload"]["model"] == "gpt-4o-mini"
    assert seen["payload"]["temperature"] == 0.7
    assert seen["payload"]["max_tokens"] == 2000
    assert [m["role"] for m in seen["payload"]["messages"]] == ["system", "user"]


def test_synthesize_rejects_empty_output():
    with pytest.raises(LLMEmptyResponseError, match="LLM returned empty response"):
        _openai_synthesize(lambda request: _chat_response("   "))


def test_synthesize_rejects_missing_choices():
    with pytest.raises(LLMEmptyResponseError):
        _openai_synthesize(lambda request: httpx.Response(200, json={"choices": []}))


def test_synthesize_wraps_http_errors():
    with pytest.raises(LLMRequestError, match="LLM enhancement failed: HTTPStatusError"):
        _openai_synthesize(lambda request: httpx.Response(500, text="upstream down"))


def test_synthesize_wraps_transport_errors():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(LLMRequestError, match="ReadTimeout"):
        _openai_synthesize(handler)


class _Capture:
    def __init__(self):
        self.records = []

    def log(self, level, msg, extra=None, **kwargs):
        self.records.append(extra or {})


def test_llm_log_redacts_reference_urls():
    capture = _Capture()
    _openai_synthesize(lambda request: _chat_response("See https://ex.com/a for more"), llm_logger=capture)

    payload = capture.records[-1]
    assert payload["status"] == "ok"
    assert payload["reference_urls"] == ["[REDACTED]", "[REDACTED]"]
    assert "https://ex.com/a" not in payload["raw_response"]
    assert "raw_prompt" in payload


def test_gemini_prefers_non_thought_parts():
    def handler(request):
        assert request.url.params["key"] == "test-key"
        assert request.url.path.endswith("/models/gemini-2.0-flash:generateContent")
        body = json.loads(request.content)
        assert body["systemInstruction"]["parts"][0]["text"] == "sys"
        return httpx.Response(
            200,
            json={
                "candidates": [
                    {
                        "content": {
                            "parts": [
                                {"text": "thinking...", "thought": True},
                                {"text": "Final answer"},
                            ]
                        }
                    }
                ]
            },
        )

    async def main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            cfg = ProviderConfig(
                name="gemini",
                model="gemini-2.0-flash",
                base_url="https://generativelanguage.googleapis.com",
            )
            return await GeminiProvider(cfg, "test-key", client=client).complete("sys", "user")

    assert asyncio.run(main()) == "Final answer"
