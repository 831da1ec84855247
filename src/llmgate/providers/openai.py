"""OpenAI provider implementation."""

from __future__ import annotations

import asyncio
from typing import Any, ClassVar

from llmgate.errors import ProviderCallError
from llmgate.providers._errors import wrap_provider_error
from llmgate.providers.base import ProviderCapabilities
from llmgate.providers.models import (
    ChatRequest,
    ChatResult,
    Embedding,
    EmbeddingRequest,
    EmbeddingResult,
    Message,
    ModelDescriptor,
    ToolCall,
    Usage,
)


class OpenAIProvider:
    """OpenAI Chat Completions / Embeddings provider.

    Subclasses reuse the wire handling for OpenAI-compatible upstreams and
    only override identity, endpoint and catalog.
    """

    provider_name: ClassVar[str] = "openai"
    display_name: ClassVar[str] = "OpenAI"
    default_base_url: ClassVar[str | None] = None
    # Curated rather than queried so listing stays fast and deterministic.
    catalog: ClassVar[tuple[tuple[str, str], ...]] = (
        ("gpt-4o-mini", "GPT-4o mini"),
        ("gpt-4o", "GPT-4o"),
        ("gpt-4.1-mini", "GPT-4.1 mini"),
    )

    def __init__(self, api_key: str, *, base_url: str | None = None) -> None:
        """Initialize with an API key and optional endpoint override."""
        self.api_key = api_key
        self.base_url = base_url or self.default_base_url
        self._client: Any = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self.base_url!r})"

    @property
    def name(self) -> str:
        """Provider identity echoed into results."""
        return self.provider_name

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Return supported feature flags."""
        return ProviderCapabilities(tools=True, embeddings=True, reasoning=False)

    def _get_client(self) -> Any:
        """Lazily initialize and return the async SDK client."""
        if self._client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError as e:
                raise ProviderCallError(
                    "openai package not installed",
                    hint="pip install openai",
                    provider=self.name,
                ) from e
            kwargs: dict[str, Any] = {"api_key": self.api_key}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def chat(self, request: ChatRequest) -> ChatResult:
        """Run a chat completion and normalize the response."""
        client = self._get_client()

        create_kwargs: dict[str, Any] = {
            "model": request.model,
            "messages": [_to_openai_message(m) for m in request.messages],
        }
        if request.temperature is not None:
            create_kwargs["temperature"] = request.temperature
        if request.max_tokens is not None:
            create_kwargs["max_tokens"] = request.max_tokens
        if request.tools:
            create_kwargs["tools"] = [_to_openai_tool(t) for t in request.tools]

        try:
            response = await client.chat.completions.create(**create_kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="chat",
                message=f"{self.display_name} chat failed",
            ) from e

        return self._parse_chat_response(response, requested_model=request.model)

    def _parse_chat_response(self, response: Any, *, requested_model: str) -> ChatResult:
        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None

        content = getattr(message, "content", None)
        reasoning = getattr(message, "reasoning_content", None)

        tool_calls: list[ToolCall] = []
        raw_calls = getattr(message, "tool_calls", None)
        if isinstance(raw_calls, (list, tuple)):
            for tc in raw_calls:
                function = getattr(tc, "function", None)
                name = getattr(function, "name", None)
                if not isinstance(name, str):
                    continue
                arguments = getattr(function, "arguments", None)
                call_id = getattr(tc, "id", None)
                tool_calls.append(
                    ToolCall(
                        id=call_id if isinstance(call_id, str) else "",
                        name=name,
                        arguments=arguments if isinstance(arguments, str) and arguments else "{}",
                    )
                )

        response_id = getattr(response, "id", None)
        upstream_model = getattr(response, "model", None)

        return ChatResult(
            id=response_id if isinstance(response_id, str) else "",
            provider=self.name,
            # Upstream may resolve aliases; its answer wins.
            model=upstream_model
            if isinstance(upstream_model, str) and upstream_model
            else requested_model,
            content=content if isinstance(content, str) else "",
            reasoning=reasoning if isinstance(reasoning, str) and reasoning else None,
            usage=_normalize_usage(getattr(response, "usage", None)),
            tool_calls=tuple(tool_calls) if tool_calls else None,
        )

    async def embeddings(self, request: EmbeddingRequest) -> EmbeddingResult:
        """Embed ``request.input`` and return vectors ordered by input index."""
        client = self._get_client()
        try:
            response = await client.embeddings.create(
                model=request.model, input=list(request.input)
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="embeddings",
                message=f"{self.display_name} embeddings failed",
            ) from e

        items: list[Embedding] = []
        for position, item in enumerate(getattr(response, "data", None) or []):
            index = getattr(item, "index", None)
            items.append(
                Embedding(
                    index=index if isinstance(index, int) else position,
                    embedding=[float(v) for v in getattr(item, "embedding", None) or []],
                )
            )
        items.sort(key=lambda e: e.index)

        upstream_model = getattr(response, "model", None)
        return EmbeddingResult(
            provider=self.name,
            model=upstream_model
            if isinstance(upstream_model, str) and upstream_model
            else request.model,
            data=tuple(items),
            usage=_normalize_usage(getattr(response, "usage", None)),
        )

    @classmethod
    def list_models(cls) -> list[ModelDescriptor]:
        """Return the curated catalog for this provider."""
        return [
            ModelDescriptor(id=model_id, provider=cls.provider_name, label=label)
            for model_id, label in cls.catalog
        ]

    async def aclose(self) -> None:
        """Close underlying async client resources."""
        client = self._client
        if client is None:
            return
        self._client = None
        await client.close()


def _to_openai_message(message: Message) -> dict[str, Any]:
    """Convert a Message into a Chat Completions message dict."""
    if message.role == "tool":
        return {
            "role": "tool",
            "tool_call_id": message.tool_call_id or "",
            "content": message.content,
        }

    out: dict[str, Any] = {"role": message.role, "content": message.content}
    if message.role == "assistant" and message.tool_calls:
        out["content"] = message.content or None
        out["tool_calls"] = [
            {
                "id": tc.id,
                "type": "function",
                "function": {"name": tc.name, "arguments": tc.arguments},
            }
            for tc in message.tool_calls
        ]
    return out


def _to_openai_tool(tool: dict[str, Any]) -> dict[str, Any]:
    """Wrap a plain function declaration in the Chat Completions tool envelope."""
    function: dict[str, Any] = {"name": tool["name"]}
    if "description" in tool:
        function["description"] = tool["description"]
    if "parameters" in tool:
        function["parameters"] = tool["parameters"]
    return {"type": "function", "function": function}


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    return value if isinstance(value, int) else None


def _normalize_usage(usage: Any) -> Usage | None:
    """Normalize usage counters; each one defaults to None independently."""
    if usage is None:
        return None
    return Usage(
        prompt_tokens=_int_or_none(getattr(usage, "prompt_tokens", None)),
        completion_tokens=_int_or_none(getattr(usage, "completion_tokens", None)),
        total_tokens=_int_or_none(getattr(usage, "total_tokens", None)),
    )
