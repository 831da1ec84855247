"""Request types and boundary validation for the public operations."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from llmgate.errors import InvalidRequestError
from llmgate.providers.models import ChatRequest, EmbeddingRequest, Message

if TYPE_CHECKING:
    from collections.abc import Sequence

PUBLIC_ROLES = frozenset({"system", "user", "assistant"})


@dataclass(frozen=True)
class AgentRunRequest:
    """Input for one bounded agent run."""

    model: str
    prompt: str
    provider: str | None = None
    #: Host suffixes the run may fetch; *None* or empty selects the default set.
    url_allowlist: tuple[str, ...] | None = None
    temperature: float | None = None
    max_tokens: int | None = None


@dataclass(frozen=True)
class CodeReviewRequest:
    """Input for a structured code review."""

    model: str
    code: str
    provider: str | None = None
    filename: str | None = None
    language: str | None = None
    goals: tuple[str, ...] | None = None
    guidelines: str | None = None
    #: Defaults to 0 at call time; structured recovery needs low variance.
    temperature: float | None = None
    max_tokens: int | None = None


def _require_text(value: Any, label: str, hint: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError(f"{label} must be a non-empty string", hint=hint)


def _check_sampling(temperature: float | None, max_tokens: int | None) -> None:
    if temperature is not None and (
        isinstance(temperature, bool)
        or not isinstance(temperature, (int, float))
        or temperature < 0
    ):
        raise InvalidRequestError(
            "temperature must be a non-negative number",
            hint="Pass temperature=0.2, or omit it for the provider default.",
        )
    if max_tokens is not None and (
        isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0
    ):
        raise InvalidRequestError(
            "max_tokens must be a positive integer",
            hint="Pass max_tokens=1024, or omit it for the provider default.",
        )


def _string_tuple(
    values: Sequence[str] | None, label: str, hint: str
) -> tuple[str, ...] | None:
    """Coerce a sequence of strings to a tuple; a bare string is rejected."""
    if values is None:
        return None
    if isinstance(values, (str, bytes)):
        raise InvalidRequestError(
            f"{label} must be a sequence of strings, not a single string", hint=hint
        )
    items = tuple(values)
    for i, item in enumerate(items):
        if not isinstance(item, str):
            raise InvalidRequestError(f"{label}[{i}] must be a string", hint=hint)
    return items


def normalize_chat_request(request: ChatRequest) -> ChatRequest:
    """Validate a caller-supplied chat request.

    Raises:
        InvalidRequestError: On an empty model, empty message list, a role
            outside system/user/assistant, or bad sampling parameters.
    """
    _require_text(request.model, "model", "Pass model='gpt-4o-mini'.")
    messages = tuple(request.messages or ())
    if not messages:
        raise InvalidRequestError(
            "messages must not be empty",
            hint="Pass at least one Message(role='user', content='...').",
        )
    for i, message in enumerate(messages):
        if not isinstance(message, Message):
            raise InvalidRequestError(
                f"messages[{i}] must be a Message, got {type(message).__name__}"
            )
        if message.role not in PUBLIC_ROLES:
            raise InvalidRequestError(
                f"messages[{i}] has unsupported role {message.role!r}",
                hint="Roles must be one of: system, user, assistant.",
            )
        if not isinstance(message.content, str):
            raise InvalidRequestError(f"messages[{i}].content must be a string")
    _check_sampling(request.temperature, request.max_tokens)
    return replace(request, messages=messages, tools=None)


def normalize_embedding_request(request: EmbeddingRequest) -> EmbeddingRequest:
    """Validate an embeddings request."""
    _require_text(request.model, "model", "Pass model='text-embedding-3-small'.")
    inputs = _string_tuple(
        request.input, "input", "Pass input=('first text', 'second text')."
    )
    if not inputs:
        raise InvalidRequestError(
            "input must contain at least one string",
            hint="Pass input=('first text', 'second text').",
        )
    return replace(request, input=inputs)


def normalize_agent_request(request: AgentRunRequest) -> AgentRunRequest:
    """Validate an agent run request."""
    _require_text(request.model, "model", "Pass model='gpt-4o-mini'.")
    _require_text(request.prompt, "prompt", "Describe the task in prompt='...'.")
    _check_sampling(request.temperature, request.max_tokens)
    allowlist = _string_tuple(
        request.url_allowlist,
        "url_allowlist",
        "Pass host suffixes as a tuple, e.g. url_allowlist=('example.com',).",
    )
    return replace(request, url_allowlist=allowlist)


def normalize_code_review_request(request: CodeReviewRequest) -> CodeReviewRequest:
    """Validate a code review request."""
    _require_text(request.model, "model", "Pass model='gpt-4o-mini'.")
    _require_text(request.code, "code", "Pass the source to review in code='...'.")
    _check_sampling(request.temperature, request.max_tokens)
    goals = _string_tuple(
        request.goals, "goals", "Pass goals as a tuple, e.g. goals=('Security',)."
    )
    return replace(request, goals=goals)
