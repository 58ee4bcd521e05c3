"""
Integration tests for the MCP server (logsure_mcp/server.py).

These tests go through the full MCP protocol with FastMCP's in-memory
client: tools/list and tools/call requests pass through the logging
middleware, FastMCP's argument validation, the dispatcher and the operations,
with the backend replaced by the fake functions transport.
"""

import logging

import httpx
import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from logsure_mcp.operations import LOCATIONS_PROCEDURE, TASKS_PROCEDURE
from logsure_mcp.server import create_server
from logsure_mcp.tools import TOOL_DEFINITIONS


@pytest.fixture
def mcp(settings, fake_functions):
    return create_server(settings, settings.credentials(), transport=fake_functions.transport)


class TestToolListing:
    async def test_lists_registered_tools(self, mcp, fake_functions):
        async with Client(mcp) as client:
            tools = await client.list_tools()

        assert sorted(tool.name for tool in tools) == sorted(d.name for d in TOOL_DEFINITIONS)
        assert fake_functions.requests == []

    async def test_descriptions_and_arguments_match_registry(self, mcp):
        async with Client(mcp) as client:
            tools = {tool.name: tool for tool in await client.list_tools()}

        for definition in TOOL_DEFINITIONS:
            tool = tools[definition.name]
            assert tool.description == definition.description
            assert set(tool.inputSchema["properties"]) == set(definition.input_schema["properties"])
            assert not tool.inputSchema.get("required")


class TestToolCalls:
    async def test_call_returns_text_content(self, mcp, grant, fake_functions):
        grant("view_all_locations")
        fake_functions.respond(
            LOCATIONS_PROCEDURE,
            {"result": {"success": True, "locations": [{"id": "l1", "name": "Site A", "level": "site"}]}},
        )

        async with Client(mcp) as client:
            result = await client.call_tool("get_locations", {})

        assert result.content[0].type == "text"
        assert "• Site A (ID: `l1`)" in result.content[0].text

    async def test_arguments_reach_the_backend(self, mcp, grant, fake_functions):
        grant("view_all_tasks")
        fake_functions.respond(TASKS_PROCEDURE, {"result": {"success": True, "tasks": []}})

        async with Client(mcp) as client:
            result = await client.call_tool(
                "get_tasks_today", {"date": "2026-02-03", "locationId": "l7"}
            )

        assert result.content[0].text == "No tasks found for 2026-02-03 at the specified location."
        assert fake_functions.calls(TASKS_PROCEDURE)[0]["data"] == {
            "userId": "fb-uid-1",
            "orgId": "org-1",
            "date": "2026-02-03",
            "locationId": "l7",
        }

    async def test_permission_error_is_reported_as_tool_error(self, mcp, grant, fake_functions):
        grant("view_all_tasks")

        async with Client(mcp) as client:
            with pytest.raises(ToolError, match="do not have permission to view locations"):
                await client.call_tool("get_locations", {})

        assert fake_functions.calls(LOCATIONS_PROCEDURE) == []

    async def test_authentication_error_is_reported_as_tool_error(self, mcp, fake_functions):
        fake_functions.respond("directFirebaseAuthMCP", status_code=500, text="db down")

        async with Client(mcp) as client:
            with pytest.raises(ToolError, match="Authentication failed") as exc_info:
                await client.call_tool("get_task_status", {})

        assert "db down" not in str(exc_info.value)

    async def test_invalid_status_is_rejected(self, mcp, fake_functions):
        async with Client(mcp) as client:
            with pytest.raises(ToolError):
                await client.call_tool("get_task_status", {"status": "done"})

        assert fake_functions.requests == []

    async def test_calls_are_logged(self, mcp, grant, fake_functions, caplog):
        grant()

        with caplog.at_level(logging.INFO, logger="logsure-mcp"):
            async with Client(mcp) as client:
                with pytest.raises(ToolError):
                    await client.call_tool("get_locations", {})

        failed = [r for r in caplog.records if r.getMessage() == "Tool call failed"]
        assert len(failed) == 1
        assert failed[0].log_data["tool"] == "get_locations"


async def test_health_route(mcp):
    app = mcp.http_app(transport="streamable-http")

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    ) as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
