"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off provider subclasses as coverage expands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any

from llmgate.providers.models import ChatRequest, ChatResult, ToolCall
from tests.conftest import FakeProvider


def tool_call(name: str, arguments: dict[str, Any] | str, call_id: str = "") -> ToolCall:
    """Build a ToolCall, serializing dict arguments the way providers do."""
    raw = arguments if isinstance(arguments, str) else json.dumps(arguments)
    return ToolCall(id=call_id or f"call_{name}", name=name, arguments=raw)


@dataclass
class ScriptedProvider(FakeProvider):
    """FakeProvider that returns a scripted sequence of results/exceptions.

    Items may be plain strings (final text), tuples of ToolCall (a tool turn),
    ChatResult instances, or exceptions to raise.
    """

    script: list[Any] = field(default_factory=list)

    async def chat(self, request: ChatRequest) -> ChatResult:
        self.chat_requests.append(request)
        if not self.script:
            return ChatResult(id="done", provider=self.name, model=request.model)
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, ChatResult):
            return item
        if isinstance(item, tuple):
            return ChatResult(
                id=f"step-{len(self.chat_requests)}",
                provider=self.name,
                model=request.model,
                tool_calls=item,
            )
        return ChatResult(
            id=f"step-{len(self.chat_requests)}",
            provider=self.name,
            model=request.model,
            content=str(item),
        )
