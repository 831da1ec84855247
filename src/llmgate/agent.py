"""Tool-using agent runtime: a bounded, sequential model <-> tool loop.

Each run is a small state machine. A model turn either returns final text
(stop) or requests tool calls; each requested call is looked up, validated,
executed and logged, and its output is fed back for the next model turn. The
loop ends on final text or when the step cap is reached. Hitting the cap is
not an error: the last text the model produced is returned, possibly empty.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
import logging
import time
from typing import TYPE_CHECKING, Any, Literal
import uuid

from llmgate.errors import ConfigurationError, ToolError, ToolInputError, UnknownToolError
from llmgate.providers.models import ChatRequest, Message
from llmgate.tools import TOOLS, ToolContext, UrlAllowlist

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from llmgate.providers.base import Provider
    from llmgate.providers.models import ToolCall
    from llmgate.tools import ToolDefinition

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 2

StopReason = Literal["final_text", "step_cap"]


@dataclass(frozen=True)
class ToolInvocationRecord:
    """One tool call as it happened; never mutated after creation."""

    name: str
    #: Arguments exactly as the model serialized them.
    args: str | None
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class AgentRunResult:
    """Terminal state of an agent run."""

    id: str
    provider: str
    model: str
    output: str
    tool_calls: tuple[ToolInvocationRecord, ...]
    duration_ms: int
    steps: int
    stop_reason: StopReason


def system_instruction(allowlist: UrlAllowlist) -> str:
    """Compose the run's system instruction."""
    hosts = ", ".join(allowlist.hosts) if allowlist else "(none)"
    return (
        "You are a helpful agent. Use tools only when needed. "
        "If a URL is not in the allowlist, do not fetch it and answer without "
        f"fetching. Allowed hosts: {hosts}."
    )


class AgentRuntime:
    """Drives one provider through a bounded tool-calling loop.

    The runtime holds no per-run state; ``run`` may be awaited concurrently
    for independent runs.
    """

    def __init__(
        self,
        provider: Provider,
        *,
        tools: Mapping[str, ToolDefinition] = TOOLS,
        max_steps: int = DEFAULT_MAX_STEPS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if max_steps < 1:
            raise ConfigurationError(
                f"max_steps must be ≥ 1, got {max_steps}",
                hint="The model needs at least one turn to answer.",
            )
        if not provider.capabilities.tools:
            raise ConfigurationError(
                f"Provider {provider.name!r} does not support tool calling",
                hint="Choose a provider with tool support for agent runs.",
            )
        self._provider = provider
        self._tools = tools
        self._max_steps = max_steps
        self._http_client = http_client

    async def run(
        self,
        *,
        model: str,
        prompt: str,
        url_allowlist: UrlAllowlist,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> AgentRunResult:
        """Run the loop for *prompt* and return final text plus the tool log.

        Provider errors abort the run; tool errors are recorded and fed back
        to the model.
        """
        run_id = f"run_{uuid.uuid4().hex}"
        start = time.perf_counter()
        context = ToolContext(url_allowlist=url_allowlist, http_client=self._http_client)
        declarations = tuple(tool.declaration() for tool in self._tools.values())

        messages: list[Message] = [
            Message(role="system", content=system_instruction(url_allowlist)),
            Message(role="user", content=prompt),
        ]
        records: list[ToolInvocationRecord] = []
        output = ""
        stop_reason: StopReason = "step_cap"
        step = 0

        while step < self._max_steps:
            step += 1
            result = await self._provider.chat(
                ChatRequest(
                    model=model,
                    messages=tuple(messages),
                    provider=self._provider.name,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    tools=declarations,
                )
            )
            output = result.content
            if not result.tool_calls:
                stop_reason = "final_text"
                break

            logger.debug(
                "%s step %d: %d tool call(s)", run_id, step, len(result.tool_calls)
            )
            messages.append(
                Message(
                    role="assistant",
                    content=result.content,
                    tool_calls=result.tool_calls,
                )
            )
            for call in result.tool_calls:
                record, payload = await self._invoke(call, context)
                records.append(record)
                messages.append(
                    Message(role="tool", content=payload, tool_call_id=call.id)
                )

        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.debug(
            "%s finished: stop=%s steps=%d tool_calls=%d duration_ms=%d",
            run_id,
            stop_reason,
            step,
            len(records),
            duration_ms,
        )
        return AgentRunResult(
            id=run_id,
            provider=self._provider.name,
            model=model,
            output=output,
            tool_calls=tuple(records),
            duration_ms=duration_ms,
            steps=step,
            stop_reason=stop_reason,
        )

    async def _invoke(
        self, call: ToolCall, context: ToolContext
    ) -> tuple[ToolInvocationRecord, str]:
        """Execute one tool call; tool failures become failed records."""
        try:
            tool = self._tools.get(call.name)
            if tool is None:
                raise UnknownToolError(f"Unknown tool: {call.name!r}", tool=call.name)
            output = await tool.invoke(_parse_arguments(call), context)
        except asyncio.CancelledError:
            raise
        except ToolError as e:
            logger.debug("Tool %s failed: %s", call.name, e)
            record = ToolInvocationRecord(
                name=call.name, args=call.arguments, ok=False, error=str(e)
            )
            return record, json.dumps({"error": str(e)})
        except Exception as e:
            logger.warning("Tool %s raised unexpectedly: %r", call.name, e)
            message = f"{call.name} failed: {type(e).__name__}: {e}"
            record = ToolInvocationRecord(
                name=call.name, args=call.arguments, ok=False, error=message
            )
            return record, json.dumps({"error": message})

        logger.debug("Tool %s ok", call.name)
        return (
            ToolInvocationRecord(name=call.name, args=call.arguments, ok=True),
            json.dumps(output),
        )


def _parse_arguments(call: ToolCall) -> dict[str, Any]:
    try:
        arguments = json.loads(call.arguments or "{}")
    except ValueError as e:
        raise ToolInputError(
            f"Arguments for {call.name} are not valid JSON", tool=call.name
        ) from e
    if not isinstance(arguments, dict):
        raise ToolInputError(
            f"Arguments for {call.name} must be a JSON object", tool=call.name
        )
    return arguments
