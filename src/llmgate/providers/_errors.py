"""Shared provider-side error helpers.

Upstream SDK exceptions are mapped into ProviderCallError with structured
metadata so callers never have to match on substrings.
"""

from __future__ import annotations

import asyncio

import httpx

from llmgate.errors import (
    LLMGateError,
    ProviderCallError,
    RateLimitError,
    _walk_exception_chain,
)

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})

_API_KEY_ENV_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
}


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        for attr in ("status_code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def _auth_hint(provider: str, status_code: int | None) -> str | None:
    """Name the provider's key variable for auth failures."""
    if status_code in {401, 403}:
        env_var = _API_KEY_ENV_VARS.get(provider, "the provider API key")
        return f"Check credentials/permissions (try setting {env_var})."
    return None


def wrap_provider_error(
    exc: BaseException,
    *,
    provider: str,
    phase: str,
    message: str | None = None,
) -> LLMGateError:
    """Map provider SDK exceptions into ProviderCallError.

    llmgate's own errors pass through untouched apart from filling in missing
    provider/phase context.
    """
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    if isinstance(exc, ProviderCallError):
        if exc.provider is None:
            exc.provider = provider
        if exc.phase is None:
            exc.phase = phase
        return exc
    if isinstance(exc, LLMGateError):
        return exc

    status_code = extract_status_code(exc)
    retryable = isinstance(status_code, int) and status_code in RETRYABLE_STATUS_CODES
    if status_code is None:
        for e in _walk_exception_chain(exc):
            if isinstance(e, (httpx.TimeoutException, httpx.RequestError)):
                retryable = True
                break

    err_cls: type[ProviderCallError] = (
        RateLimitError if status_code == 429 else ProviderCallError
    )
    msg = message or f"{provider} {phase} failed"
    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    cause = str(exc)
    return err_cls(
        f"{msg}{status_note}: {cause}" if cause else f"{msg}{status_note}",
        hint=_auth_hint(provider, status_code),
        retryable=retryable,
        status_code=status_code,
        provider=provider,
        phase=phase,
    )
