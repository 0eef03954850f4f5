"""
Langfuse tracing for enhancement runs.

The workflow stages and provider calls open spans through
:func:`start_span`. With tracing disabled, without the SDK or without keys,
spans are ``None`` and the helpers do nothing.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
import json
import logging
from typing import Any, Iterator

from ..config import LangfuseConfig, get_langfuse_settings
from ..utils.logging import redact_text, truncate_text

logger = logging.getLogger(__name__)

_TRACER = None
_CFG: LangfuseConfig | None = None


def setup_langfuse(cfg: LangfuseConfig):
    """Initialize the Langfuse client; return it, or None when tracing stays off."""
    global _TRACER, _CFG  # noqa: PLW0603
    _CFG = cfg
    _TRACER = None
    if not cfg.enabled:
        return None

    settings = get_langfuse_settings(cfg)
    if not settings["public_key"] or not settings["secret_key"]:
        logger.warning("Langfuse enabled but keys are missing; tracing disabled")
        return None
    try:
        from langfuse import Langfuse  # type: ignore
    except ImportError:
        logger.warning("Langfuse enabled but the SDK is not installed; tracing disabled")
        return None

    _TRACER = Langfuse(**settings)
    return _TRACER


@contextmanager
def start_span(
    name: str,
    kind: str,
    input_value: Any | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Any | None]:
    """Open a span named ``name`` for the duration of the block."""
    if _TRACER is None:
        yield None
        return

    metadata = {
        key: value if isinstance(value, (str, int, float, bool)) else str(value)
        for key, value in (attributes or {}).items()
        if value is not None
    }
    metadata["span.kind"] = kind

    with ExitStack() as stack:
        try:
            span = stack.enter_context(
                _TRACER.start_as_current_span(name=name, input=_payload(input_value), metadata=metadata)
            )
        except Exception as exc:  # noqa: BLE001
            logger.debug("Langfuse span %s not started: %s", name, exc)
            span = None
        yield span


def set_span_output(span: Any | None, output_value: Any) -> None:
    payload = _payload(output_value)
    if span is not None and payload is not None:
        _update(span, output=payload)


def record_span_error(span: Any | None, exc: Exception) -> None:
    if span is not None:
        _update(span, level="ERROR", status_message=str(exc))


def flush() -> None:
    """Send pending spans; the CLI calls this before exiting."""
    if _TRACER is None:
        return
    try:
        _TRACER.flush()
    except Exception as exc:  # noqa: BLE001
        logger.debug("Langfuse flush failed: %s", exc)


def _payload(value: Any) -> str | None:
    """Serialize a span input or output, redacted and capped per config."""
    if value is None:
        return None
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=True, default=str)
    if _CFG is None:
        return text
    return truncate_text(redact_text(text, _CFG.redaction), _CFG.max_text_chars)


def _update(span: Any, **fields: Any) -> None:
    try:
        span.update(**fields)
    except Exception as exc:  # noqa: BLE001
        logger.debug("Langfuse span update failed: %s", exc)
