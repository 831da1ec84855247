"""Mock provider for offline use and testing."""

from __future__ import annotations

from llmgate.providers.base import ProviderCapabilities
from llmgate.providers.models import (
    ChatRequest,
    ChatResult,
    Embedding,
    EmbeddingRequest,
    EmbeddingResult,
    ModelDescriptor,
    Usage,
)


class MockProvider:
    """Mock provider returning synthetic responses without API calls.

    It impersonates ``provider_name`` so results look like the selected
    upstream, and never requests tools.
    """

    def __init__(self, provider_name: str = "openai") -> None:
        self.provider_name = provider_name
        self._calls = 0

    @property
    def name(self) -> str:
        """Provider identity echoed into results."""
        return self.provider_name

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Return supported feature flags."""
        return ProviderCapabilities(tools=True, embeddings=True, reasoning=False)

    async def chat(self, request: ChatRequest) -> ChatResult:
        """Echo the last user message."""
        self._calls += 1
        text = next(
            (m.content for m in reversed(request.messages) if m.role == "user"), ""
        )
        return ChatResult(
            id=f"mock-{self._calls}",
            provider=self.name,
            model=request.model,
            content=f"echo: {text[:100]}",
            usage=Usage(prompt_tokens=10, completion_tokens=10, total_tokens=20),
        )

    async def embeddings(self, request: EmbeddingRequest) -> EmbeddingResult:
        """Return small deterministic vectors derived from each input."""
        data = tuple(
            Embedding(index=i, embedding=[float(len(text)), float(i)])
            for i, text in enumerate(request.input)
        )
        return EmbeddingResult(
            provider=self.name,
            model=request.model,
            data=data,
            usage=Usage(prompt_tokens=len(data), total_tokens=len(data)),
        )

    def list_models(self) -> list[ModelDescriptor]:
        """Return a single synthetic model."""
        return [ModelDescriptor(id="mock-model", provider=self.name, label="Mock")]

    async def aclose(self) -> None:
        """Nothing to release."""
        return None
