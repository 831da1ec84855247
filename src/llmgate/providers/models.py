"""Domain models for the provider layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["system", "user", "assistant", "tool"]


@dataclass(frozen=True)
class ToolCall:
    """A tool call requested by the model."""

    id: str
    name: str
    arguments: str


@dataclass(frozen=True)
class Message:
    """A standard conversational message turn."""

    role: Role
    content: str = ""
    tool_call_id: str | None = None
    tool_calls: tuple[ToolCall, ...] | None = None


@dataclass(frozen=True)
class ChatRequest:
    """A chat completion request.

    ``tools`` holds function declarations (``name``, ``description``,
    ``parameters``) and is only set by the agent runtime.
    """

    model: str
    messages: tuple[Message, ...]
    provider: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    tools: tuple[dict[str, Any], ...] | None = None


@dataclass(frozen=True)
class Usage:
    """Token counters; each one is *None* when the provider does not report it."""

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


@dataclass(frozen=True)
class ChatResult:
    """A normalized chat completion."""

    id: str
    provider: str
    model: str
    content: str = ""
    reasoning: str | None = None
    usage: Usage | None = None
    tool_calls: tuple[ToolCall, ...] | None = None


@dataclass(frozen=True)
class EmbeddingRequest:
    """Embed each string of ``input`` with ``model``."""

    model: str
    input: tuple[str, ...]
    provider: str | None = None


@dataclass(frozen=True)
class Embedding:
    """One vector, tied to its input position by ``index``."""

    index: int
    embedding: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class EmbeddingResult:
    """Embeddings ordered by ``index``."""

    provider: str
    model: str
    data: tuple[Embedding, ...]
    usage: Usage | None = None


@dataclass(frozen=True)
class ModelDescriptor:
    """A catalog entry for UI population."""

    id: str
    provider: str
    label: str | None = None
