"""Tests for Langfuse tracing setup behavior."""

from __future__ import annotations

from contextlib import contextmanager
import sys
import types

import pytest

from blog_enhancer.config import LangfuseConfig
from blog_enhancer.llm import tracing


class DummySpan:
    def __init__(self):
        self.updates: list[dict] = []

    def update(self, **kwargs):
        self.updates.append(kwargs)


class DummyLangfuse:
    instances: list["DummyLangfuse"] = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.spans: list[tuple[str, dict, DummySpan]] = []
        self.flushed = False
        DummyLangfuse.instances.append(self)

    @contextmanager
    def start_as_current_span(self, name, input=None, metadata=None):
        span = DummySpan()
        self.spans.append((name, {"input": input, "metadata": metadata}, span))
        yield span

    def flush(self):
        self.flushed = True


@pytest.fixture
def fake_langfuse(monkeypatch):
    DummyLangfuse.instances = []
    monkeypatch.setitem(sys.modules, "langfuse", types.SimpleNamespace(Langfuse=DummyLangfuse))
    monkeypatch.setenv("LANGFUSE_PUBLIC_KEY", "pk-test")
    monkeypatch.setenv("LANGFUSE_SECRET_KEY", "sk-test")
    monkeypatch.setenv("LANGFUSE_HOST", "https://cloud.langfuse.com")
    yield DummyLangfuse
    tracing.setup_langfuse(LangfuseConfig(enabled=False))


def test_setup_langfuse_reads_keys_from_env(fake_langfuse):
    tracer = tracing.setup_langfuse(LangfuseConfig(enabled=True))

    client = fake_langfuse.instances[0]
    assert tracer is client
    assert client.kwargs["public_key"] == "pk-test"
    assert client.kwargs["secret_key"] == "sk-test"
    assert client.kwargs["host"] == "https://cloud.langfuse.com"


def test_setup_langfuse_disables_tracer_when_keys_missing(monkeypatch):
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    monkeypatch.delenv("LANGFUSE_SECRET_KEY", raising=False)

    assert tracing.setup_langfuse(LangfuseConfig(enabled=True)) is None


def test_spans_are_noops_when_disabled():
    tracing.setup_langfuse(LangfuseConfig(enabled=False))

    with tracing.start_span("enhance.workflow", kind="chain") as span:
        tracing.set_span_output(span, "ignored")
        tracing.record_span_error(span, RuntimeError("ignored"))

    assert span is None
    tracing.flush()


def test_span_output_is_redacted_and_errors_recorded(fake_langfuse):
    tracing.setup_langfuse(LangfuseConfig(enabled=True))

    with tracing.start_span(
        "enhance.gather",
        kind="tool",
        input_value="https://ex.com/a",
        attributes={"article.id": None, "count": 2},
    ) as span:
        tracing.set_span_output(span, {"see": "https://ex.com/b"})
        tracing.record_span_error(span, RuntimeError("boom"))
    tracing.flush()

    client = fake_langfuse.instances[0]
    name, started, recorded = client.spans[0]
    assert name == "enhance.gather"
    assert started["input"] == "[REDACTED_URL]"
    assert started["metadata"] == {"count": 2, "span.kind": "tool"}
    assert "https://ex.com/b" not in recorded.updates[0]["output"]
    assert recorded.updates[1] == {"level": "ERROR", "status_message": "boom"}
    assert client.flushed
