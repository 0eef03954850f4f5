"""Abstract interface for LLM backends used by the synthesizer."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...config import ProviderConfig, get_model


class EnhancementProvider(ABC):
    """One chat-style completion call: system and user prompt in, text out.

    Implementations raise ``httpx.HTTPError`` on transport and HTTP
    failures and return an empty string when the response carries no text.
    """

    name = "base"

    def __init__(self, cfg: ProviderConfig, api_key: str):
        self.cfg = cfg
        self.api_key = api_key
        self.model = get_model(cfg)

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the model's raw text for the given prompts."""
        raise NotImplementedError
