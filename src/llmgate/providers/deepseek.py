"""DeepSeek provider implementation."""

from __future__ import annotations

from typing import ClassVar

from llmgate.providers.base import ProviderCapabilities
from llmgate.providers.openai import OpenAIProvider


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek through its OpenAI-compatible endpoint.

    ``deepseek-reasoner`` returns its chain of thought in a separate
    ``reasoning_content`` field, which surfaces as ``ChatResult.reasoning``.
    """

    provider_name: ClassVar[str] = "deepseek"
    display_name: ClassVar[str] = "DeepSeek"
    default_base_url: ClassVar[str | None] = "https://api.deepseek.com/v1"
    catalog: ClassVar[tuple[tuple[str, str], ...]] = (
        ("deepseek-chat", "DeepSeek Chat"),
        ("deepseek-reasoner", "DeepSeek Reasoner (R1)"),
    )

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Return supported feature flags."""
        return ProviderCapabilities(tools=True, embeddings=True, reasoning=True)
