"""
MCP server for LogSure field service data, built on FastMCP v2.

This module binds the tool dispatcher to the MCP host:

- Three read-only tools: get_tasks_today, get_locations, get_task_status
- Per-call structured logging middleware (JSON lines on stderr)
- stdio transport by default (desktop hosts), streamable-http when hosted,
  with a /health route for the latter
- Signal handling: SIGINT/SIGTERM exit promptly with status 0

Architecture:
    The flow for every tools/call request:

    1. The host sends tools/call with a tool name and argument object
    2. ToolCallLoggingMiddleware assigns a request id and logs the call
    3. FastMCP validates the arguments against the tool signature
    4. The tool function hands the arguments to ToolDispatcher.call()
    5. The matching operation authenticates, checks permissions, fetches
       data from the backend and renders markdown text
    6. FastMCP wraps the text as {"content": [{"type": "text", ...}]}, or
       reports the raised error as an error result for that call

Running the server:
    LOGSURE_CLERK_TOKEN=... LOGSURE_ORG_ID=... LOGSURE_USER_ID=... \\
        python -m logsure_mcp
"""

import logging
import os
import signal
import sys
import time
import uuid
from typing import Annotated, Literal

import httpx
from fastmcp import FastMCP
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult
from mcp.types import CallToolRequestParams
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from logsure_mcp import __version__
from logsure_mcp.client import RemoteProcedureClient
from logsure_mcp.config import Credentials, Settings, load_settings, mask
from logsure_mcp.logging_config import LOGGER_NAME, configure_logging
from logsure_mcp.models import TASK_STATUS_VALUES
from logsure_mcp.operations import FieldServiceOperations
from logsure_mcp.tools import TOOLS_BY_NAME, ToolDispatcher

logger = logging.getLogger("logsure-mcp.server")

SERVER_NAME = "logsure-field-service"

StatusFilter = Literal[tuple(TASK_STATUS_VALUES)]


class ToolCallLoggingMiddleware(Middleware):
    """
    Logs every tools/call request with a correlation id.

    Errors are logged with their type and re-raised unchanged, so FastMCP
    reports them to the host as the error result of that call.
    """

    async def on_call_tool(
        self,
        context: MiddlewareContext[CallToolRequestParams],
        call_next: CallNext[CallToolRequestParams, ToolResult],
    ) -> ToolResult:
        request_id = str(uuid.uuid4())[:8]
        tool_name = context.message.name
        started = time.monotonic()

        logger.info(
            "Tool call started",
            extra={"log_data": {"request_id": request_id, "tool": tool_name}},
        )

        try:
            result = await call_next(context)
        except Exception as e:
            # FastMCP wraps tool exceptions in ToolError; report the original.
            cause = e.__cause__ or e
            logger.warning(
                "Tool call failed",
                extra={
                    "log_data": {
                        "request_id": request_id,
                        "tool": tool_name,
                        "error_type": type(cause).__name__,
                        "error": str(cause),
                        "duration_ms": round((time.monotonic() - started) * 1000),
                    }
                },
            )
            raise

        logger.info(
            "Tool call completed",
            extra={
                "log_data": {
                    "request_id": request_id,
                    "tool": tool_name,
                    "duration_ms": round((time.monotonic() - started) * 1000),
                }
            },
        )
        return result


def create_server(
    settings: Settings,
    credentials: Credentials,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastMCP:
    """
    Build the MCP server for one configured user.

    Args:
        settings: Loaded settings (backend URL, server options)
        credentials: The configured user; validated before this is called
        transport: Optional httpx transport for backend calls (tests)
    """
    client = RemoteProcedureClient(settings.functions_base_url, transport=transport)
    operations = FieldServiceOperations(credentials, client)
    dispatcher = ToolDispatcher(operations)

    mcp = FastMCP(
        name=SERVER_NAME,
        instructions=(
            "LogSure field service management. Use these tools to look up today's "
            "scheduled tasks, the organization's location hierarchy, and task status. "
            "Results are limited to what the configured user is permitted to see."
        ),
        middleware=[ToolCallLoggingMiddleware()],
    )

    tasks_today = TOOLS_BY_NAME["get_tasks_today"]
    locations = TOOLS_BY_NAME["get_locations"]
    task_status = TOOLS_BY_NAME["get_task_status"]

    @mcp.tool(name=tasks_today.name, description=tasks_today.description)
    async def get_tasks_today(
        date: Annotated[str | None, Field(description=tasks_today.describe_argument("date"))] = None,
        locationId: Annotated[
            str | None, Field(description=tasks_today.describe_argument("locationId"))
        ] = None,
        status: Annotated[
            StatusFilter | None, Field(description=tasks_today.describe_argument("status"))
        ] = None,
    ) -> str:
        return await dispatcher.call(
            "get_tasks_today", {"date": date, "locationId": locationId, "status": status}
        )

    @mcp.tool(name=locations.name, description=locations.description)
    async def get_locations(
        parentId: Annotated[
            str | None, Field(description=locations.describe_argument("parentId"))
        ] = None,
    ) -> str:
        return await dispatcher.call("get_locations", {"parentId": parentId})

    @mcp.tool(name=task_status.name, description=task_status.description)
    async def get_task_status(
        taskId: Annotated[
            str | None, Field(description=task_status.describe_argument("taskId"))
        ] = None,
        status: Annotated[
            StatusFilter | None, Field(description=task_status.describe_argument("status"))
        ] = None,
    ) -> str:
        return await dispatcher.call("get_task_status", {"taskId": taskId, "status": status})

    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> Response:
        """Liveness probe for the streamable-http transport."""
        return JSONResponse({"status": "healthy", "version": __version__})

    return mcp


def _shutdown(signum: int, frame: object) -> None:
    logger.info(
        "Shutting down LogSure MCP server",
        extra={"log_data": {"signal": signal.Signals(signum).name}},
    )
    logging.shutdown()
    # The stdio reader thread blocks on stdin and cannot be joined; skip interpreter teardown.
    os._exit(0)


def main() -> None:
    """Process entry point: exits 1 on startup failure, 0 on shutdown."""
    configure_logging()

    try:
        settings = load_settings()
        configure_logging(settings.log_level)
        credentials = settings.credentials()
        mcp = create_server(settings, credentials)
    except Exception:
        logging.getLogger(LOGGER_NAME).exception("Failed to start LogSure MCP server")
        sys.exit(1)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    logger.info(
        "LogSure MCP server starting",
        extra={
            "log_data": {
                "version": __version__,
                "transport": settings.transport,
                "user": mask(credentials.user_id),
                "org": mask(credentials.org_id),
            }
        },
    )

    if settings.transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(transport=settings.transport, host=settings.host, port=settings.port)

    sys.exit(0)


if __name__ == "__main__":
    main()
