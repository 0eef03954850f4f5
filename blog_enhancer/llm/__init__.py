"""LLM synthesis and observability."""

from .prompts import build_enhancement_prompt, system_prompt
from .providers.base import EnhancementProvider
from .providers.factory import available_providers, create_provider
from .providers.gemini import GeminiProvider
from .providers.openai_compatible import OpenAICompatibleProvider
from .synthesizer import Synthesizer
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "EnhancementProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "Synthesizer",
    "available_providers",
    "build_enhancement_prompt",
    "create_provider",
    "system_prompt",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
