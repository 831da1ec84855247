"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, and automatic API test
skipping. All fixtures here are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
import logging
import os

import pytest

from llmgate.providers.base import ProviderCapabilities
from llmgate.providers.models import (
    ChatRequest,
    ChatResult,
    Embedding,
    EmbeddingRequest,
    EmbeddingResult,
    ModelDescriptor,
)

OPENAI_MODEL = "gpt-4o-mini"
DEEPSEEK_MODEL = "deepseek-chat"

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeProvider:
    """Provider test double that records calls and answers with fixed text."""

    provider_name: str = "openai"
    chat_requests: list[ChatRequest] = field(default_factory=list)
    closed: bool = False
    _capabilities: ProviderCapabilities = field(
        default_factory=lambda: ProviderCapabilities(tools=True, embeddings=True)
    )

    @property
    def name(self) -> str:
        return self.provider_name

    @property
    def capabilities(self) -> ProviderCapabilities:
        return self._capabilities

    async def chat(self, request: ChatRequest) -> ChatResult:
        self.chat_requests.append(request)
        return ChatResult(
            id="fake-1", provider=self.name, model=request.model, content="ok"
        )

    async def embeddings(self, request: EmbeddingRequest) -> EmbeddingResult:
        return EmbeddingResult(
            provider=self.name,
            model=request.model,
            data=tuple(
                Embedding(index=i, embedding=[0.0]) for i in range(len(request.input))
            ),
        )

    def list_models(self) -> list[ModelDescriptor]:
        return []

    async def aclose(self) -> None:
        self.closed = True


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Ensure a clean provider environment for each test.

    Clears OPENAI_* and DEEPSEEK_* env vars to prevent test pollution.
    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith(("OPENAI_", "DEEPSEEK_")):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def _api_tests_enabled() -> bool:
    return bool(os.getenv("ENABLE_API_TESTS"))


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if _api_tests_enabled():
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def openai_model() -> str:
    return OPENAI_MODEL


@pytest.fixture
def deepseek_model() -> str:
    return DEEPSEEK_MODEL


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def openai_api_key():
    """Return OPENAI_API_KEY or skip the test if unavailable."""
    key = os.getenv("OPENAI_API_KEY")
    if not key:
        pytest.skip("OPENAI_API_KEY not set")
    return key


@pytest.fixture
def deepseek_api_key():
    """Return DEEPSEEK_API_KEY or skip the test if unavailable."""
    key = os.getenv("DEEPSEEK_API_KEY")
    if not key:
        pytest.skip("DEEPSEEK_API_KEY not set")
    return key
