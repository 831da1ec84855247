"""Provider characterization tests.

These tests verify the request/response transformations for each provider
implementation. They use fake SDK clients to characterize the exact shapes
sent upstream without making real network calls.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

from llmgate.errors import MissingCredentialError, ProviderCallError, RateLimitError
from llmgate.providers._errors import extract_status_code, wrap_provider_error
from llmgate.providers.deepseek import DeepSeekProvider
from llmgate.providers.models import (
    ChatRequest,
    EmbeddingRequest,
    Message,
    ToolCall,
    Usage,
)
from llmgate.providers.openai import OpenAIProvider
from tests.conftest import DEEPSEEK_MODEL, OPENAI_MODEL

pytestmark = pytest.mark.contract


class _FakeCompletions:
    def __init__(self, response: Any = None, error: BaseException | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class _FakeClient:
    def __init__(
        self,
        *,
        chat_response: Any = None,
        embeddings_response: Any = None,
        error: BaseException | None = None,
    ) -> None:
        self.completions = _FakeCompletions(chat_response, error)
        self.chat = SimpleNamespace(completions=self.completions)
        self.embeddings = _FakeCompletions(embeddings_response, error)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def _completion(
    *,
    content: Any = "hello",
    reasoning: Any = None,
    tool_calls: Any = None,
    model: Any = OPENAI_MODEL,
    usage: Any = None,
    response_id: str = "chatcmpl-123",
) -> SimpleNamespace:
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    if reasoning is not None:
        message.reasoning_content = reasoning
    return SimpleNamespace(
        id=response_id,
        model=model,
        choices=[SimpleNamespace(message=message)],
        usage=usage,
    )


def _provider(cls: type[OpenAIProvider] = OpenAIProvider, **client_kwargs: Any):
    provider = cls("test-key")
    client = _FakeClient(**client_kwargs)
    provider._client = client
    return provider, client


def _chat(model: str = OPENAI_MODEL, **kwargs: Any) -> ChatRequest:
    return ChatRequest(
        model=model, messages=(Message(role="user", content="Hi"),), **kwargs
    )


# =============================================================================
# Chat request shape (Characterization)
# =============================================================================


@pytest.mark.asyncio
async def test_chat_forwards_normalized_fields() -> None:
    provider, client = _provider(chat_response=_completion())

    await provider.chat(
        ChatRequest(
            model=OPENAI_MODEL,
            messages=(
                Message(role="system", content="Be brief."),
                Message(role="user", content="Hi"),
            ),
            temperature=0.2,
            max_tokens=64,
        )
    )

    assert client.completions.calls == [
        {
            "model": OPENAI_MODEL,
            "messages": [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "Hi"},
            ],
            "temperature": 0.2,
            "max_tokens": 64,
        }
    ]


@pytest.mark.asyncio
async def test_chat_omits_unset_sampling_parameters() -> None:
    provider, client = _provider(chat_response=_completion())

    await provider.chat(_chat())

    sent = client.completions.calls[0]
    assert "temperature" not in sent
    assert "max_tokens" not in sent
    assert "tools" not in sent


@pytest.mark.asyncio
async def test_chat_wraps_tools_and_maps_tool_turns() -> None:
    provider, client = _provider(chat_response=_completion())
    call = ToolCall(id="call_1", name="now", arguments="{}")

    await provider.chat(
        ChatRequest(
            model=OPENAI_MODEL,
            messages=(
                Message(role="user", content="What time is it?"),
                Message(role="assistant", content="", tool_calls=(call,)),
                Message(role="tool", content='{"iso": "x"}', tool_call_id="call_1"),
            ),
            tools=({"name": "now", "description": "Current time", "parameters": {}},),
        )
    )

    sent = client.completions.calls[0]
    assert sent["tools"] == [
        {
            "type": "function",
            "function": {"name": "now", "description": "Current time", "parameters": {}},
        }
    ]
    assert sent["messages"][1] == {
        "role": "assistant",
        "content": None,
        "tool_calls": [
            {
                "id": "call_1",
                "type": "function",
                "function": {"name": "now", "arguments": "{}"},
            }
        ],
    }
    assert sent["messages"][2] == {
        "role": "tool",
        "tool_call_id": "call_1",
        "content": '{"iso": "x"}',
    }


# =============================================================================
# Chat response normalization (Characterization)
# =============================================================================


@pytest.mark.asyncio
async def test_chat_extracts_content_id_and_full_usage() -> None:
    usage = SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15)
    provider, _ = _provider(chat_response=_completion(usage=usage))

    result = await provider.chat(_chat())

    assert result.id == "chatcmpl-123"
    assert result.provider == "openai"
    assert result.content == "hello"
    assert result.reasoning is None
    assert result.tool_calls is None
    assert result.usage == Usage(prompt_tokens=10, completion_tokens=5, total_tokens=15)


@pytest.mark.asyncio
async def test_chat_usage_counters_are_independently_nullable() -> None:
    usage = SimpleNamespace(prompt_tokens=7, completion_tokens=None)
    provider, _ = _provider(chat_response=_completion(usage=usage))

    result = await provider.chat(_chat())

    assert result.usage == Usage(prompt_tokens=7, completion_tokens=None, total_tokens=None)


@pytest.mark.asyncio
async def test_chat_without_usage_reports_none() -> None:
    provider, _ = _provider(chat_response=_completion(usage=None))

    result = await provider.chat(_chat())

    assert result.usage is None


@pytest.mark.asyncio
async def test_chat_missing_content_becomes_empty_string() -> None:
    provider, _ = _provider(chat_response=_completion(content=None))

    result = await provider.chat(_chat())

    assert result.content == ""


@pytest.mark.asyncio
async def test_chat_without_choices_yields_empty_content() -> None:
    response = SimpleNamespace(id="x", model=OPENAI_MODEL, choices=[], usage=None)
    provider, _ = _provider(chat_response=response)

    result = await provider.chat(_chat())

    assert result.content == ""
    assert result.tool_calls is None


@pytest.mark.asyncio
async def test_chat_upstream_model_name_wins() -> None:
    provider, _ = _provider(chat_response=_completion(model="gpt-4o-mini-2024-07-18"))

    result = await provider.chat(_chat(model="gpt-4o-mini"))

    assert result.model == "gpt-4o-mini-2024-07-18"


@pytest.mark.asyncio
async def test_chat_falls_back_to_requested_model_when_upstream_omits_it() -> None:
    provider, _ = _provider(chat_response=_completion(model=None))

    result = await provider.chat(_chat(model="gpt-4o"))

    assert result.model == "gpt-4o"


@pytest.mark.asyncio
async def test_deepseek_surfaces_reasoning_separately_from_content() -> None:
    provider, _ = _provider(
        DeepSeekProvider,
        chat_response=_completion(
            content="42", reasoning="Six times seven.", model="deepseek-reasoner"
        ),
    )

    result = await provider.chat(_chat(model="deepseek-reasoner"))

    assert result.provider == "deepseek"
    assert result.content == "42"
    assert result.reasoning == "Six times seven."


@pytest.mark.asyncio
async def test_empty_reasoning_is_reported_as_none() -> None:
    provider, _ = _provider(DeepSeekProvider, chat_response=_completion(reasoning=""))

    result = await provider.chat(_chat(model=DEEPSEEK_MODEL))

    assert result.reasoning is None


@pytest.mark.asyncio
async def test_chat_parses_tool_calls() -> None:
    raw_calls = [
        SimpleNamespace(
            id="call_a",
            function=SimpleNamespace(name="math", arguments='{"op":"add","a":1,"b":2}'),
        ),
        SimpleNamespace(id="call_b", function=SimpleNamespace(name="now", arguments="")),
    ]
    provider, _ = _provider(chat_response=_completion(content=None, tool_calls=raw_calls))

    result = await provider.chat(_chat())

    assert result.tool_calls == (
        ToolCall(id="call_a", name="math", arguments='{"op":"add","a":1,"b":2}'),
        ToolCall(id="call_b", name="now", arguments="{}"),
    )


# =============================================================================
# Embeddings
# =============================================================================


@pytest.mark.asyncio
async def test_embeddings_preserve_index_when_upstream_reorders() -> None:
    response = SimpleNamespace(
        model="text-embedding-3-small",
        data=[
            SimpleNamespace(index=2, embedding=[0.3]),
            SimpleNamespace(index=0, embedding=[0.1]),
            SimpleNamespace(index=1, embedding=[0.2]),
        ],
        usage=SimpleNamespace(prompt_tokens=6, total_tokens=6),
    )
    provider, client = _provider(embeddings_response=response)

    result = await provider.embeddings(
        EmbeddingRequest(model="text-embedding-3-small", input=("a", "b", "c"))
    )

    assert client.embeddings.calls == [
        {"model": "text-embedding-3-small", "input": ["a", "b", "c"]}
    ]
    assert [(e.index, e.embedding) for e in result.data] == [
        (0, [0.1]),
        (1, [0.2]),
        (2, [0.3]),
    ]
    assert result.provider == "openai"
    assert result.usage == Usage(prompt_tokens=6, completion_tokens=None, total_tokens=6)


# =============================================================================
# Model catalogs
# =============================================================================


def test_openai_catalog_is_static() -> None:
    ids = [m.id for m in OpenAIProvider.list_models()]

    assert ids == ["gpt-4o-mini", "gpt-4o", "gpt-4.1-mini"]
    assert {m.provider for m in OpenAIProvider.list_models()} == {"openai"}


def test_deepseek_catalog_is_static() -> None:
    models = DeepSeekProvider.list_models()

    assert [m.id for m in models] == ["deepseek-chat", "deepseek-reasoner"]
    assert models[1].label == "DeepSeek Reasoner (R1)"
    assert {m.provider for m in models} == {"deepseek"}


# =============================================================================
# Error mapping (Contract)
# =============================================================================


class _SdkError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


@pytest.mark.asyncio
async def test_chat_upstream_auth_error_becomes_provider_call_error() -> None:
    provider, _ = _provider(error=_SdkError("Incorrect API key provided", 401))

    with pytest.raises(ProviderCallError) as exc:
        await provider.chat(_chat())

    err = exc.value
    assert not isinstance(err, MissingCredentialError)
    assert err.status_code == 401
    assert err.provider == "openai"
    assert err.phase == "chat"
    assert "Incorrect API key provided" in str(err)
    assert err.hint is not None and "OPENAI_API_KEY" in err.hint


@pytest.mark.asyncio
async def test_embeddings_rate_limit_maps_to_rate_limit_error() -> None:
    provider, _ = _provider(DeepSeekProvider, error=_SdkError("slow down", 429))

    with pytest.raises(RateLimitError) as exc:
        await provider.embeddings(EmbeddingRequest(model="m", input=("x",)))

    assert exc.value.retryable is True
    assert exc.value.provider == "deepseek"
    assert exc.value.phase == "embeddings"


def test_wrap_provider_error_marks_network_errors_retryable() -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    err = wrap_provider_error(
        httpx.ConnectError("connection refused", request=request),
        provider="openai",
        phase="chat",
    )

    assert isinstance(err, ProviderCallError)
    assert err.retryable is True
    assert err.status_code is None


def test_wrap_provider_error_enriches_existing_error_without_clobbering() -> None:
    base = ProviderCallError("bad request", retryable=False, status_code=400)
    wrapped = wrap_provider_error(base, provider="deepseek", phase="chat")

    assert wrapped is base
    assert wrapped.status_code == 400
    assert wrapped.provider == "deepseek"
    assert wrapped.phase == "chat"


def test_wrap_provider_error_reraises_cancelled_error() -> None:
    with pytest.raises(asyncio.CancelledError):
        wrap_provider_error(asyncio.CancelledError(), provider="openai", phase="chat")


def test_extract_status_code_walks_response_attribute() -> None:
    class _Resp:
        status_code = 503

    class _WithResponse(Exception):
        response = _Resp()

    assert extract_status_code(_WithResponse("down")) == 503
    assert extract_status_code(ValueError("no status")) is None


@pytest.mark.asyncio
async def test_aclose_closes_client_once() -> None:
    provider, client = _provider(chat_response=_completion())

    await provider.aclose()
    await provider.aclose()

    assert client.closed is True
    assert provider._client is None


def test_provider_repr_does_not_leak_api_key() -> None:
    provider = DeepSeekProvider("sk-very-secret")

    assert "sk-very-secret" not in repr(provider)
