"""Provider protocol: the uniform contract every upstream variant implements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from llmgate.providers.models import (
        ChatRequest,
        ChatResult,
        EmbeddingRequest,
        EmbeddingResult,
        ModelDescriptor,
    )


@dataclass(frozen=True)
class ProviderCapabilities:
    """Feature flags exposed by providers."""

    tools: bool
    embeddings: bool
    reasoning: bool = False


@runtime_checkable
class Provider(Protocol):
    """Minimal provider protocol: chat, embeddings, list_models."""

    @property
    def name(self) -> str:
        """Provider identity echoed into results (``"openai"``, ``"deepseek"``)."""
        ...

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Feature capabilities for up-front validation."""
        ...

    async def chat(self, request: ChatRequest) -> ChatResult:
        """Run a chat completion."""
        ...

    async def embeddings(self, request: EmbeddingRequest) -> EmbeddingResult:
        """Embed a batch of strings."""
        ...

    def list_models(self) -> list[ModelDescriptor]:
        """Return the curated model catalog."""
        ...

    async def aclose(self) -> None:
        """Release client resources."""
        ...
