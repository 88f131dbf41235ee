"""MCP server setup for the Mailgun tools."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from pydantic import PrivateAttr, ValidationError

from .config import Settings
from .mailgun_client import ExecutionError, MailgunClient
from .models import ToolDefinition
from .openapi import load_openapi_spec
from .request_builder import MissingParameterError
from .service import ToolService
from .tool_registry import ToolRegistry

logger = logging.getLogger(__name__)


class MailgunTool(Tool):
    """An MCP tool backed by one allow-listed Mailgun operation."""

    _definition: ToolDefinition = PrivateAttr()
    _service: ToolService = PrivateAttr()

    @classmethod
    def from_definition(cls, definition: ToolDefinition, service: ToolService) -> "MailgunTool":
        tool = cls(
            name=definition.tool_id,
            description=definition.description,
            parameters=definition.input_schema.json_schema(),
        )
        tool._definition = definition
        tool._service = service
        return tool

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        try:
            payload = self._definition.input_schema.model.model_validate(arguments)
        except ValidationError as exc:
            raise ToolError(f"Invalid arguments for {self.name}: {exc}") from exc

        try:
            result = await self._service.execute_tool(
                self._definition,
                payload.model_dump(mode="json", by_alias=True, exclude_unset=True),
            )
        except (MissingParameterError, ExecutionError) as exc:
            logger.error("Tool %s failed: %s", self.name, exc)
            raise ToolError(str(exc)) from exc

        text = result if isinstance(result, str) else json.dumps(result, indent=2)
        return ToolResult(content=text)


def build_server(
    settings: Settings, spec: Optional[Dict[str, Any]] = None
) -> tuple[FastMCP, object | None]:
    if spec is None:
        spec = load_openapi_spec(settings.mailgun_openapi_path)

    client = MailgunClient(
        base_url=settings.api_base_url(),
        api_key=settings.mailgun_api_key or "",
        timeout_seconds=settings.mailgun_api_timeout_seconds,
        max_retries=settings.mailgun_max_retries,
    )
    service = ToolService(client)

    mcp = FastMCP(settings.mcp_server_name, instructions=_instructions())
    for definition in ToolRegistry().generate_tools(spec):
        mcp.add_tool(MailgunTool.from_definition(definition, service))
        logger.info("Registered tool: %s", definition.tool_id)

    app = _get_http_app(mcp, settings)
    _attach_healthcheck(app)
    return mcp, app


def _attach_healthcheck(app) -> None:  # type: ignore[no-untyped-def]
    if not app:
        return

    async def healthcheck(_request):  # type: ignore[no-untyped-def]
        from starlette.responses import JSONResponse

        return JSONResponse({"status": "ok"})

    app.add_route("/health", healthcheck, methods=["GET"])


def _instructions() -> str:
    return (
        "Mailgun API tools. Send email, manage domains, webhooks, templates, routes, "
        "mailing lists and suppressions, and query events and analytics."
    )


def _get_http_app(mcp: FastMCP, settings: Settings):  # type: ignore[no-untyped-def]
    transport = settings.mcp_transport.lower()
    if transport == "http":
        return mcp.http_app(transport="http", stateless_http=True, json_response=True)
    if transport in {"streamable-http", "streamablehttp"}:
        return mcp.http_app(transport="streamable-http", stateless_http=True, json_response=True)
    if transport == "sse":
        return mcp.http_app(transport="sse")
    return None
