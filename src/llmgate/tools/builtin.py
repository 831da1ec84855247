"""Side-effect-free tools: now, math, random_int, echo, extract_title."""

from __future__ import annotations

from datetime import datetime, timezone
import math
import random
import re
from typing import Literal

from pydantic import BaseModel

from llmgate.errors import InvalidRangeError
from llmgate.tools.base import ToolContext, ToolDefinition

_TITLE_RE = re.compile(r"<title>(.*?)</title>", re.IGNORECASE | re.DOTALL)


class NowInput(BaseModel):
    pass


class NowOutput(BaseModel):
    iso: str
    timestamp: int


async def _now(params: NowInput, context: ToolContext) -> NowOutput:
    current = datetime.now(timezone.utc)
    return NowOutput(
        iso=current.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        timestamp=int(current.timestamp() * 1000),
    )


class MathInput(BaseModel):
    op: Literal["add", "sub", "mul", "div"]
    a: float
    b: float


class MathOutput(BaseModel):
    op: str
    a: float
    b: float
    result: float


async def _math(params: MathInput, context: ToolContext) -> MathOutput:
    a, b = params.a, params.b
    if params.op == "add":
        result = a + b
    elif params.op == "sub":
        result = a - b
    elif params.op == "mul":
        result = a * b
    else:
        # Division by zero is NaN, not an error.
        result = math.nan if b == 0 else a / b
    return MathOutput(op=params.op, a=a, b=b, result=result)


class RandomIntInput(BaseModel):
    min: int
    max: int


class RandomIntOutput(BaseModel):
    value: int


async def _random_int(params: RandomIntInput, context: ToolContext) -> RandomIntOutput:
    if params.min > params.max:
        raise InvalidRangeError(
            f"min must be <= max (got min={params.min}, max={params.max})",
            tool="random_int",
        )
    return RandomIntOutput(value=random.randint(params.min, params.max))


class EchoInput(BaseModel):
    text: str


class EchoOutput(BaseModel):
    text: str
    length: int


async def _echo(params: EchoInput, context: ToolContext) -> EchoOutput:
    return EchoOutput(text=params.text, length=len(params.text))


class ExtractTitleInput(BaseModel):
    html: str


class ExtractTitleOutput(BaseModel):
    title: str | None


def extract_title(html: str) -> str | None:
    """Return the trimmed text of the first ``<title>`` element, if any."""
    match = _TITLE_RE.search(html)
    return match.group(1).strip() if match else None


async def _extract_title(
    params: ExtractTitleInput, context: ToolContext
) -> ExtractTitleOutput:
    return ExtractTitleOutput(title=extract_title(params.html))


now_tool = ToolDefinition(
    id="now",
    description="Get the current time as ISO string and epoch milliseconds.",
    input_model=NowInput,
    output_model=NowOutput,
    execute=_now,
)

math_tool = ToolDefinition(
    id="math",
    description="Simple math operations: add, sub, mul, div.",
    input_model=MathInput,
    output_model=MathOutput,
    execute=_math,
)

random_int_tool = ToolDefinition(
    id="random_int",
    description="Generate a random integer in [min, max] inclusive.",
    input_model=RandomIntInput,
    output_model=RandomIntOutput,
    execute=_random_int,
)

echo_tool = ToolDefinition(
    id="echo",
    description="Echo back the provided text and its length.",
    input_model=EchoInput,
    output_model=EchoOutput,
    execute=_echo,
)

extract_title_tool = ToolDefinition(
    id="extract_title",
    description="Extract the <title> from a small HTML document string.",
    input_model=ExtractTitleInput,
    output_model=ExtractTitleOutput,
    execute=_extract_title,
)
