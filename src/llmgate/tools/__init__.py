"""Fixed tool catalog.

The catalog is built once at import time; there is no dynamic registration.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from llmgate.errors import UnknownToolError

from .allowlist import UrlAllowlist
from .base import ToolContext, ToolDefinition
from .builtin import (
    echo_tool,
    extract_title,
    extract_title_tool,
    math_tool,
    now_tool,
    random_int_tool,
)
from .http_fetch import http_fetch_tool

if TYPE_CHECKING:
    from collections.abc import Mapping

TOOLS: Mapping[str, ToolDefinition] = MappingProxyType(
    {
        tool.id: tool
        for tool in (
            now_tool,
            math_tool,
            random_int_tool,
            echo_tool,
            extract_title_tool,
            http_fetch_tool,
        )
    }
)


def get_tool(tool_id: str) -> ToolDefinition:
    """Look up a catalog entry by id."""
    try:
        return TOOLS[tool_id]
    except KeyError:
        raise UnknownToolError(
            f"Unknown tool: {tool_id!r}",
            hint=f"Available tools: {', '.join(TOOLS)}",
            tool=tool_id,
        ) from None


__all__ = [
    "TOOLS",
    "ToolContext",
    "ToolDefinition",
    "UrlAllowlist",
    "extract_title",
    "get_tool",
]
