"""Structured code review on top of chat plus structured-output recovery.

Parse failure never surfaces as an error: unparseable model output is
wrapped in a single INFO finding titled ``"Unstructured review"``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import math
from typing import TYPE_CHECKING, Any, Literal

from llmgate.errors import ProviderCallError
from llmgate.providers.models import ChatRequest, Message
from llmgate.structured import recover_json

if TYPE_CHECKING:
    from llmgate.providers.base import Provider
    from llmgate.request import CodeReviewRequest

log = logging.getLogger(__name__)

Severity = Literal["INFO", "WARN", "ERROR"]

SEVERITIES: frozenset[str] = frozenset({"INFO", "WARN", "ERROR"})

UNSTRUCTURED_TITLE = "Unstructured review"
UNSTRUCTURED_SUMMARY = "Model returned unstructured output; included as a single note."

DEFAULT_GOALS: tuple[str, ...] = (
    "Correctness and potential bugs",
    "Security pitfalls",
    "Performance issues",
    "Readability and maintainability",
    "Edge cases and error handling",
)

_SYSTEM_PROMPT = (
    "You are a meticulous senior code reviewer. Produce concise, actionable, "
    "structured feedback. Prefer precise pointers with line hints and short, "
    "concrete suggestions. Respond in English unless the code/comments are in "
    "Chinese, then respond in Chinese."
)

_FORMAT_INSTRUCTIONS = """Return ONLY a minified JSON object with this exact shape (no markdown):
{
  "summary": string,
  "score": number (0-100) optional,
  "issues": [
    {
      "severity": one of ["INFO", "WARN", "ERROR"],
      "title": string,
      "description": string,
      "location": { "path": string optional, "lineStart": number optional, "lineEnd": number optional } optional,
      "suggestion": string optional,
      "rule": string optional
    }
  ]
}"""


@dataclass(frozen=True)
class Location:
    path: str | None = None
    line_start: int | None = None
    line_end: int | None = None


@dataclass(frozen=True)
class CodeReviewFinding:
    severity: Severity
    title: str
    description: str
    location: Location | None = None
    suggestion: str | None = None
    rule: str | None = None


@dataclass(frozen=True)
class CodeReviewResult:
    summary: str
    issues: tuple[CodeReviewFinding, ...]
    score: float | None = None


def build_review_messages(request: CodeReviewRequest) -> tuple[Message, ...]:
    """Build the system + user messages for a review."""
    goals = "\n".join(
        f"{i}. {goal}" for i, goal in enumerate(request.goals or DEFAULT_GOALS, start=1)
    )
    context = ""
    if request.filename:
        context += f"\n- File: {request.filename}"
    if request.language:
        context += f"\n- Language: {request.language}"
    guidelines = (request.guidelines or "").strip()
    extra = f"\nAdditional guidelines:\n{guidelines}\n" if guidelines else ""

    user = (
        f"Please review the following code. Context:{context}\n\n"
        f"Goals:\n{goals}\n{extra}\n{_FORMAT_INSTRUCTIONS}\n\n"
        f"CODE START\n\n```\n{request.code}\n```\n\nCODE END"
    )
    return (
        Message(role="system", content=_SYSTEM_PROMPT),
        Message(role="user", content=user),
    )


def _line(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _optional_text(value: Any) -> str | None:
    return None if value is None else str(value)


def _normalize_location(raw: Any, filename: str | None) -> Location | None:
    if not isinstance(raw, dict):
        return Location(path=filename) if filename else None
    path = raw.get("path")
    return Location(
        path=path if isinstance(path, str) and path else filename,
        line_start=_line(raw.get("lineStart")),
        line_end=_line(raw.get("lineEnd")),
    )


def _normalize_severity(raw: Any) -> Severity:
    if isinstance(raw, str) and raw.strip().upper() in SEVERITIES:
        return raw.strip().upper()  # type: ignore[return-value]
    # Unknown or missing severities are never downgraded to INFO.
    return "WARN"


def _normalize_score(raw: Any) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if not math.isfinite(raw) or not 0 <= raw <= 100:
        return None
    return raw


def _normalize_finding(raw: dict[str, Any], filename: str | None) -> CodeReviewFinding:
    return CodeReviewFinding(
        severity=_normalize_severity(raw.get("severity")),
        title=str(raw.get("title") or "Issue"),
        description=str(raw.get("description") or ""),
        location=_normalize_location(raw.get("location"), filename),
        suggestion=_optional_text(raw.get("suggestion")),
        rule=_optional_text(raw.get("rule")),
    )


def unstructured_result(raw_text: str, filename: str | None = None) -> CodeReviewResult:
    """Wrap raw model text as a single INFO finding."""
    return CodeReviewResult(
        summary=UNSTRUCTURED_SUMMARY,
        score=None,
        issues=(
            CodeReviewFinding(
                severity="INFO",
                title=UNSTRUCTURED_TITLE,
                description=raw_text or "No response",
                location=Location(path=filename) if filename else None,
            ),
        ),
    )


def parse_review(raw_text: str, filename: str | None = None) -> CodeReviewResult:
    """Turn raw model text into a CodeReviewResult, degrading gracefully."""
    parsed = recover_json(raw_text)
    if parsed is None or not isinstance(parsed.get("issues"), list):
        log.debug("Review output was unstructured (%d chars)", len(raw_text or ""))
        return unstructured_result(raw_text, filename)

    issues = []
    for item in parsed["issues"]:
        if not isinstance(item, dict):
            log.debug("Skipping non-object review issue: %r", type(item).__name__)
            continue
        issues.append(_normalize_finding(item, filename))
    return CodeReviewResult(
        summary=str(parsed.get("summary") or ""),
        score=_normalize_score(parsed.get("score")),
        issues=tuple(issues),
    )


async def review_code(provider: Provider, request: CodeReviewRequest) -> CodeReviewResult:
    """Run a review through *provider*.

    Upstream failures are re-raised as ``ProviderCallError`` with a
    ``Code review failed`` prefix, chained to the original error.
    """
    chat_request = ChatRequest(
        model=request.model,
        messages=build_review_messages(request),
        provider=provider.name,
        temperature=0 if request.temperature is None else request.temperature,
        max_tokens=request.max_tokens,
    )
    try:
        result = await provider.chat(chat_request)
    except asyncio.CancelledError:
        raise
    except ProviderCallError as e:
        log.error("Code review failed: %s", e)
        raise ProviderCallError(
            f"Code review failed: {e}",
            hint=e.hint,
            retryable=e.retryable,
            status_code=e.status_code,
            provider=e.provider,
            phase=e.phase,
        ) from e

    return parse_review(result.content, request.filename)
