"""llmgate: one async contract over several LLM providers.

Public API:
    - chat(): Normalized chat completion
    - embeddings(): Index-preserving embeddings
    - list_models(): Curated static model catalog
    - agent_run(): One bounded tool-using agent run under a URL allowlist
    - code_review(): Structured code review with graceful degradation
    - Config: Configuration dataclass
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from llmgate.agent import AgentRunResult, AgentRuntime, ToolInvocationRecord
from llmgate.config import Config, normalize_provider
from llmgate.errors import (
    ConfigurationError,
    InvalidRangeError,
    InvalidRequestError,
    LLMGateError,
    MissingCredentialError,
    ProviderCallError,
    RateLimitError,
    ToolError,
    UrlNotAllowedError,
)
from llmgate.providers.models import (
    ChatRequest,
    ChatResult,
    EmbeddingRequest,
    EmbeddingResult,
    Message,
    ModelDescriptor,
    Usage,
)
from llmgate.providers.registry import PROVIDER_CLASSES, create_provider
from llmgate.request import (
    AgentRunRequest,
    CodeReviewRequest,
    normalize_agent_request,
    normalize_chat_request,
    normalize_code_review_request,
    normalize_embedding_request,
)
from llmgate.review import CodeReviewFinding, CodeReviewResult, review_code
from llmgate.tools import UrlAllowlist

if TYPE_CHECKING:
    import httpx

    from llmgate.providers.base import Provider

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("llmgate")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("llmgate").addHandler(logging.NullHandler())

logger = logging.getLogger(__name__)


async def _close(provider: Provider) -> None:
    try:
        await provider.aclose()
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        # Cleanup should never mask the primary failure.
        logger.warning("Provider cleanup failed: %s", exc)


async def chat(request: ChatRequest, *, config: Config | None = None) -> ChatResult:
    """Run one chat completion against the selected provider.

    Example:
        result = await chat(
            ChatRequest(model="gpt-4o-mini", messages=(Message("user", "Hi"),))
        )
        print(result.content)
    """
    request = normalize_chat_request(request)
    provider = create_provider(request.provider, config=config)
    try:
        return await provider.chat(request)
    finally:
        await _close(provider)


async def embeddings(
    request: EmbeddingRequest, *, config: Config | None = None
) -> EmbeddingResult:
    """Embed each input string; ``data[i].index`` ties a vector to its input."""
    request = normalize_embedding_request(request)
    provider = create_provider(request.provider, config=config)
    try:
        return await provider.embeddings(request)
    finally:
        await _close(provider)


def list_models(provider: str | None = None) -> list[ModelDescriptor]:
    """Return the curated catalog for *provider*; needs no credentials."""
    return PROVIDER_CLASSES[normalize_provider(provider)].list_models()


async def agent_run(
    request: AgentRunRequest,
    *,
    config: Config | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AgentRunResult:
    """Run the tool-using agent once.

    The allowlist is built fresh for this run: the caller's entries when any
    are given, otherwise ``config.default_url_allowlist``.
    """
    config = config or Config()
    request = normalize_agent_request(request)
    entries = request.url_allowlist or config.default_url_allowlist
    allowlist = UrlAllowlist.from_entries(entries)

    provider = create_provider(request.provider, config=config)
    try:
        runtime = AgentRuntime(
            provider, max_steps=config.agent_max_steps, http_client=http_client
        )
        return await runtime.run(
            model=request.model,
            prompt=request.prompt,
            url_allowlist=allowlist,
            temperature=config.agent_temperature
            if request.temperature is None
            else request.temperature,
            max_tokens=request.max_tokens,
        )
    finally:
        await _close(provider)


async def code_review(
    request: CodeReviewRequest, *, config: Config | None = None
) -> CodeReviewResult:
    """Review ``request.code`` and return structured findings."""
    request = normalize_code_review_request(request)
    provider = create_provider(request.provider, config=config)
    try:
        return await review_code(provider, request)
    finally:
        await _close(provider)


__all__ = [
    "AgentRunRequest",
    "AgentRunResult",
    "ChatRequest",
    "ChatResult",
    "CodeReviewFinding",
    "CodeReviewRequest",
    "CodeReviewResult",
    "Config",
    "ConfigurationError",
    "EmbeddingRequest",
    "EmbeddingResult",
    "InvalidRangeError",
    "InvalidRequestError",
    "LLMGateError",
    "Message",
    "MissingCredentialError",
    "ModelDescriptor",
    "ProviderCallError",
    "RateLimitError",
    "ToolError",
    "ToolInvocationRecord",
    "UrlNotAllowedError",
    "Usage",
    "agent_run",
    "chat",
    "code_review",
    "embeddings",
    "list_models",
]
