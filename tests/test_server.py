"""Tests for tool execution through the service and the MCP tool wrapper."""

import json
from urllib.parse import parse_qs

import httpx
import pytest
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from mailgun_mcp.config import Settings
from mailgun_mcp.mailgun_client import MailgunClient
from mailgun_mcp.request_builder import MissingParameterError
from mailgun_mcp.server import MailgunTool, build_server
from mailgun_mcp.service import ToolService
from mailgun_mcp.tool_registry import ToolRegistry


def _service(handler) -> ToolService:
    client = MailgunClient(
        base_url="https://api.mailgun.net",
        api_key="key-test",
        transport=httpx.MockTransport(handler),
    )
    return ToolService(client)


def _tool(spec, endpoint):
    [definition] = ToolRegistry(endpoints=[endpoint]).generate_tools(spec)
    return definition


@pytest.mark.asyncio
async def test_service_sends_message(message_spec):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"message": "Queued. Thank you."})

    result = await _service(handler).execute_tool(
        _tool(message_spec, "POST /v3/{domain_name}/messages"),
        {
            "domain_name": "mg.example.com",
            "from": "sender@example.com",
            "to": ["a@example.com", "b@example.com"],
            "o:tag": ["welcome"],
        },
    )

    assert result == {"message": "Queued. Thank you."}
    assert seen["path"] == "/v3/mg.example.com/messages"
    assert seen["form"] == {
        "from": ["sender@example.com"],
        "to": ["a@example.com", "b@example.com"],
        "o:tag": ["welcome"],
    }


@pytest.mark.asyncio
async def test_service_missing_path_parameter(message_spec):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(MissingParameterError):
        await _service(handler).execute_tool(
            _tool(message_spec, "POST /v3/{domain_name}/messages"),
            {"from": "sender@example.com", "to": ["a@example.com"]},
        )


@pytest.mark.asyncio
async def test_tool_run_returns_json_text(message_spec):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"items": [{"name": "mg.example.com"}]})

    tool = MailgunTool.from_definition(_tool(message_spec, "GET /v4/domains"), _service(handler))
    result = await tool.run({"limit": 5})

    assert seen["url"] == "https://api.mailgun.net/v4/domains?limit=5"
    assert json.loads(result.content[0].text) == {"items": [{"name": "mg.example.com"}]}


@pytest.mark.asyncio
async def test_email_and_url_arguments_are_sent_as_given(bundled_spec):
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(parse_qs(request.content.decode()))
        return httpx.Response(200, json={"message": "ok"})

    service = _service(handler)
    message_tool = MailgunTool.from_definition(
        _tool(bundled_spec, "POST /v3/{domain_name}/messages"), service
    )
    webhook_tool = MailgunTool.from_definition(
        _tool(bundled_spec, "POST /v3/domains/{domain}/webhooks"), service
    )

    await message_tool.run(
        {
            "domain_name": "mg.example.com",
            "from": "sender@example.com",
            "to": ["a@example.com"],
            "h:Reply-To": "Support@EXAMPLE.COM",
        }
    )
    await webhook_tool.run(
        {"domain": "mg.example.com", "id": "delivered", "url": ["https://example.com"]}
    )

    assert bodies[0]["h:Reply-To"] == ["Support@EXAMPLE.COM"]
    assert bodies[1]["url"] == ["https://example.com"]


@pytest.mark.asyncio
async def test_malformed_email_argument_is_rejected(bundled_spec):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    tool = MailgunTool.from_definition(
        _tool(bundled_spec, "POST /v3/{domain_name}/messages"), _service(handler)
    )
    with pytest.raises(ToolError):
        await tool.run(
            {
                "domain_name": "mg.example.com",
                "from": "sender@example.com",
                "to": ["a@example.com"],
                "h:Reply-To": "not-an-email",
            }
        )


def test_tool_schema_uses_original_argument_names(message_spec):
    tool = MailgunTool.from_definition(
        _tool(message_spec, "POST /v3/{domain_name}/messages"), _service(lambda r: None)
    )
    assert tool.name == "post--v3-domain_name-messages"
    assert {"from", "o:tag", "o:testmode"} <= set(tool.parameters["properties"])


@pytest.mark.asyncio
async def test_tool_run_rejects_invalid_arguments(message_spec):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    tool = MailgunTool.from_definition(
        _tool(message_spec, "POST /v3/{domain_name}/messages"), _service(handler)
    )
    with pytest.raises(ToolError):
        await tool.run({"domain_name": "mg.example.com", "to": ["a@example.com"]})


@pytest.mark.asyncio
async def test_tool_run_reports_api_errors(message_spec):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="Forbidden")

    tool = MailgunTool.from_definition(_tool(message_spec, "GET /v4/domains"), _service(handler))
    with pytest.raises(ToolError, match="401"):
        await tool.run({})


@pytest.mark.asyncio
async def test_one_failed_call_does_not_affect_the_next(message_spec):
    responses = iter([httpx.Response(500, text="boom"), httpx.Response(200, json={"items": []})])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    tool = MailgunTool.from_definition(_tool(message_spec, "GET /v4/domains"), _service(handler))
    with pytest.raises(ToolError):
        await tool.run({})
    result = await tool.run({})
    assert json.loads(result.content[0].text) == {"items": []}


def test_build_server_with_stdio_transport(message_spec):
    settings = Settings(mailgun_api_key="key-test", mcp_transport="stdio")
    mcp, app = build_server(settings, spec=message_spec)
    assert isinstance(mcp, FastMCP)
    assert app is None


def test_build_server_loads_bundled_spec():
    settings = Settings(mailgun_api_key="key-test", mcp_transport="stdio")
    mcp, _ = build_server(settings)
    assert isinstance(mcp, FastMCP)


def test_api_base_url_by_region():
    assert Settings(mailgun_api_region="us").api_base_url() == "https://api.mailgun.net"
    assert Settings(mailgun_api_region="EU").api_base_url() == "https://api.eu.mailgun.net"
