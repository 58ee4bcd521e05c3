"""
Tool definitions and dispatch.

This module is the registry of the tools advertised to the MCP host. Each
definition carries the tool's name, the description shown to the model, and
a JSON-Schema input shape:

    ToolDefinition(
        name="get_locations",
        description="List all accessible locations ...",
        input_schema={"type": "object", "properties": {...}},
    )

``ToolDispatcher`` routes a call by name to the matching operation. Listing
tools is static and never touches the network.

Argument names follow the protocol's camelCase (``locationId``); the
dispatcher maps them onto the operations' keyword arguments.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from logsure_mcp.errors import UnknownToolError, ValidationError
from logsure_mcp.models import TASK_STATUS_VALUES
from logsure_mcp.operations import FieldServiceOperations

logger = logging.getLogger("logsure-mcp.tools")


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: dict[str, Any]

    def describe_argument(self, argument: str) -> str:
        return self.input_schema["properties"][argument].get("description", "")

    def to_listing(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


TOOL_DEFINITIONS: list[ToolDefinition] = [
    ToolDefinition(
        name="get_tasks_today",
        description="Retrieve today's field service tasks with location details and status",
        input_schema={
            "type": "object",
            "properties": {
                "date": {
                    "type": "string",
                    "description": "Date in YYYY-MM-DD format (optional, defaults to today)",
                },
                "locationId": {
                    "type": "string",
                    "description": "Filter by specific location ID (optional)",
                },
                "status": {
                    "type": "string",
                    "enum": TASK_STATUS_VALUES,
                    "description": "Filter by task status (optional)",
                },
            },
        },
    ),
    ToolDefinition(
        name="get_locations",
        description="List all accessible locations in your organization hierarchy",
        input_schema={
            "type": "object",
            "properties": {
                "parentId": {
                    "type": "string",
                    "description": "Parent location ID to filter children (optional)",
                },
            },
        },
    ),
    ToolDefinition(
        name="get_task_status",
        description="Check task status and filter by completion state",
        input_schema={
            "type": "object",
            "properties": {
                "taskId": {
                    "type": "string",
                    "description": "Specific task ID to check (optional)",
                },
                "status": {
                    "type": "string",
                    "enum": TASK_STATUS_VALUES,
                    "description": "Filter by status (optional)",
                },
            },
        },
    ),
]

TOOLS_BY_NAME: dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}


def _optional_string(arguments: dict[str, Any], key: str) -> str | None:
    value = arguments.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be a string")
    return value or None


def _optional_status(arguments: dict[str, Any]) -> str | None:
    status = _optional_string(arguments, "status")
    if status is not None and status not in TASK_STATUS_VALUES:
        raise ValidationError(
            f"'status' must be one of {', '.join(TASK_STATUS_VALUES)}, got '{status}'"
        )
    return status


class ToolDispatcher:
    """Routes tool calls by name to FieldServiceOperations."""

    def __init__(self, operations: FieldServiceOperations):
        self.operations = operations
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[str]]] = {
            "get_tasks_today": self._get_tasks_today,
            "get_locations": self._get_locations,
            "get_task_status": self._get_task_status,
        }

    def list_tools(self) -> list[dict[str, Any]]:
        return [tool.to_listing() for tool in TOOL_DEFINITIONS]

    async def call(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        """
        Invoke the tool ``name`` with ``arguments`` and return its text.

        Raises:
            UnknownToolError: If no tool of that name is registered
            ValidationError: If an argument has the wrong type or value
        """
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning("Unknown tool requested", extra={"log_data": {"tool": name}})
            raise UnknownToolError(name)

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ValidationError("Tool arguments must be an object")

        return await handler(arguments)

    async def _get_tasks_today(self, arguments: dict[str, Any]) -> str:
        return await self.operations.get_tasks_today(
            date=_optional_string(arguments, "date"),
            location_id=_optional_string(arguments, "locationId"),
            status=_optional_status(arguments),
        )

    async def _get_locations(self, arguments: dict[str, Any]) -> str:
        return await self.operations.get_locations(
            parent_id=_optional_string(arguments, "parentId"),
        )

    async def _get_task_status(self, arguments: dict[str, Any]) -> str:
        return await self.operations.get_task_status(
            task_id=_optional_string(arguments, "taskId"),
            status=_optional_status(arguments),
        )
