"""Exception hierarchy for llmgate."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class LLMGateError(Exception):
    """Base exception for all llmgate errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(LLMGateError):
    """Configuration validation or resolution failed."""


class MissingCredentialError(ConfigurationError):
    """The resolved provider has no API key configured.

    Raised before any network contact and never retried.
    """

    def __init__(
        self, message: str, *, hint: str | None = None, provider: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.provider = provider


class InvalidRequestError(LLMGateError):
    """Caller input failed validation."""


class ProviderCallError(LLMGateError):
    """Upstream provider call failed.

    ``retryable`` is informational: llmgate itself never retries, but callers
    with their own backoff policy can use it.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        provider: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.provider = provider
        self.phase = phase


class RateLimitError(ProviderCallError):
    """Rate limit exceeded (HTTP 429)."""


class ToolError(LLMGateError):
    """A tool invocation failed."""

    def __init__(
        self, message: str, *, hint: str | None = None, tool: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.tool = tool


class UnknownToolError(ToolError):
    """The requested tool id is not in the catalog."""


class ToolInputError(ToolError):
    """Tool arguments failed input schema validation."""


class ToolOutputError(ToolError):
    """Tool result failed output schema validation."""


class InvalidRangeError(ToolError):
    """A numeric range has its lower bound above its upper bound."""


class UrlNotAllowedError(ToolError):
    """The target host is outside the run's URL allowlist."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        tool: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint, tool=tool)
        self.url = url


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
