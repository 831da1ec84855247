"""The ``http_fetch`` tool: the only tool with an outbound side effect."""

from __future__ import annotations

import logging
from typing import Literal
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, field_validator

from llmgate.errors import ToolError, UrlNotAllowedError
from llmgate.tools.base import ToolContext, ToolDefinition

log = logging.getLogger(__name__)


class HttpFetchInput(BaseModel):
    url: str
    method: Literal["GET", "POST"] = "GET"
    headers: dict[str, str] | None = None
    body: str | None = None

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            raise ValueError("url must be an absolute http(s) URL")
        return value


class HttpFetchOutput(BaseModel):
    status: int
    content_type: str | None = None
    text: str


async def _http_fetch(params: HttpFetchInput, context: ToolContext) -> HttpFetchOutput:
    if not context.url_allowlist.allows(params.url):
        host = urlparse(params.url).hostname
        raise UrlNotAllowedError(
            f"URL not in allowlist: {host}",
            hint=f"Allowed hosts: {', '.join(context.url_allowlist.hosts) or '(none)'}",
            tool="http_fetch",
            url=params.url,
        )

    content = params.body if params.method == "POST" else None
    log.debug("http_fetch %s %s", params.method, params.url)
    # Redirects are never followed: only the checked URL may be contacted.
    try:
        if context.http_client is not None:
            response = await context.http_client.request(
                params.method,
                params.url,
                headers=params.headers,
                content=content,
                follow_redirects=False,
            )
        else:
            async with httpx.AsyncClient() as client:
                response = await client.request(
                    params.method,
                    params.url,
                    headers=params.headers,
                    content=content,
                    follow_redirects=False,
                )
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
        raise ToolError(
            f"Request to {params.url} failed: {type(e).__name__}: {e}",
            tool="http_fetch",
        ) from e

    return HttpFetchOutput(
        status=response.status_code,
        content_type=response.headers.get("content-type"),
        text=response.text,
    )


http_fetch_tool = ToolDefinition(
    id="http_fetch",
    description="Fetch a URL from the allowlist and return the response text.",
    input_model=HttpFetchInput,
    output_model=HttpFetchOutput,
    execute=_http_fetch,
)
