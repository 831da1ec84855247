"""Tool definitions: validate input, execute, validate output."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from llmgate.errors import ToolError, ToolInputError, ToolOutputError
from llmgate.tools.allowlist import UrlAllowlist

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    import httpx


@dataclass(frozen=True)
class ToolContext:
    """Per-run execution context handed to every tool.

    The allowlist travels here rather than on the tool definition so the same
    catalog serves runs with different security postures.
    """

    url_allowlist: UrlAllowlist = field(default_factory=UrlAllowlist)
    #: Optional shared client; ``http_fetch`` opens a short-lived one otherwise.
    http_client: httpx.AsyncClient | None = None


@dataclass(frozen=True)
class ToolDefinition:
    """An immutable catalog entry."""

    id: str
    description: str
    input_model: type[BaseModel]
    output_model: type[BaseModel]
    execute: Callable[[Any, ToolContext], Awaitable[BaseModel | dict[str, Any]]]

    def declaration(self) -> dict[str, Any]:
        """Return the function declaration advertised to the model."""
        return {
            "name": self.id,
            "description": self.description,
            "parameters": self.input_model.model_json_schema(),
        }

    async def invoke(
        self, arguments: Mapping[str, Any] | None, context: ToolContext
    ) -> dict[str, Any]:
        """Validate *arguments*, run the tool and return its validated output.

        Raises:
            ToolInputError: Arguments do not match the input model.
            ToolOutputError: The tool produced a result outside its output model.
            ToolError: Any tool-specific failure (e.g. ``UrlNotAllowedError``).
        """
        try:
            params = self.input_model.model_validate(dict(arguments or {}))
        except ValidationError as e:
            raise ToolInputError(
                f"Invalid arguments for {self.id}: {_describe(e)}", tool=self.id
            ) from e

        try:
            raw = await self.execute(params, context)
        except ToolError as e:
            if e.tool is None:
                e.tool = self.id
            raise

        payload = raw.model_dump() if isinstance(raw, BaseModel) else raw
        try:
            result = self.output_model.model_validate(payload)
        except ValidationError as e:
            raise ToolOutputError(
                f"Invalid output from {self.id}: {_describe(e)}", tool=self.id
            ) from e
        return result.model_dump()


def _describe(error: ValidationError) -> str:
    """Flatten pydantic errors into one line."""
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)
