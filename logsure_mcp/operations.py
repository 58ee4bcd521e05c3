"""
Tool operations and the backend data calls behind them.

Every operation follows the same sequence:

    1. authenticate (fresh UserContext, never cached)
    2. check permissions (before any data request)
    3. one data call through the RemoteProcedureClient
    4. render the result as markdown text

Any failure along the way propagates to the caller; no operation returns a
partial result or retries.
"""

import datetime
import logging
from collections.abc import Callable
from typing import Any

from logsure_mcp import formatting
from logsure_mcp.auth import Authenticator
from logsure_mcp.client import RemoteProcedureClient
from logsure_mcp.config import Credentials
from logsure_mcp.errors import RemoteCallError, ValidationError
from logsure_mcp.models import (
    CompletionResult,
    Location,
    Task,
    UserContext,
    parse_collection,
)
from logsure_mcp.permissions import TOOL_PERMISSIONS, require_any_permission

logger = logging.getLogger("logsure-mcp.operations")

TASKS_PROCEDURE = "getTasksMCP"
LOCATIONS_PROCEDURE = "getLocationsMCP"
COMPLETE_TASK_PROCEDURE = "completeTask"


def utc_today() -> str:
    """Today's date in UTC as YYYY-MM-DD."""
    return datetime.datetime.now(datetime.timezone.utc).date().isoformat()


def _without_none(payload: dict[str, Any]) -> dict[str, Any]:
    # Absent filters are left out of the request entirely.
    return {key: value for key, value in payload.items() if value is not None}


class FieldServiceBackend:
    """Data procedures of the LogSure backend."""

    def __init__(self, client: RemoteProcedureClient):
        self.client = client

    async def fetch_tasks(
        self,
        context: UserContext,
        date: str,
        location_id: str | None = None,
        status: str | None = None,
    ) -> list[Task]:
        result = await self.client.invoke(
            TASKS_PROCEDURE,
            _without_none(
                {
                    "userId": context.user_id,
                    "orgId": context.org_id,
                    "date": date,
                    "locationId": location_id,
                    "status": status,
                }
            ),
        )
        return [Task.from_payload(record) for record in parse_collection(result, "tasks")]

    async def fetch_locations(
        self, context: UserContext, parent_id: str | None = None
    ) -> list[Location]:
        result = await self.client.invoke(
            LOCATIONS_PROCEDURE,
            _without_none(
                {
                    "userId": context.user_id,
                    "orgId": context.org_id,
                    "parentId": parent_id,
                }
            ),
        )
        return [
            Location.from_payload(record) for record in parse_collection(result, "locations")
        ]

    async def complete_task(
        self, context: UserContext, task_id: str, notes: str | None = None
    ) -> CompletionResult:
        """
        Mark a task complete.

        Failures are returned as ``CompletionResult(success=False)`` rather
        than raised.
        """
        try:
            result = await self.client.invoke(
                COMPLETE_TASK_PROCEDURE,
                _without_none(
                    {
                        "taskId": task_id,
                        "completionNotes": notes,
                        "userId": context.user_id,
                    }
                ),
                bearer_token=context.access_token,
            )
        except RemoteCallError as e:
            logger.error(
                "Task completion failed",
                extra={"log_data": {"task_id": task_id, "status_code": e.status_code}},
            )
            return CompletionResult(success=False, message=e.message)

        data = result.get("data") if isinstance(result, dict) else result
        return CompletionResult(success=True, data=data)


class FieldServiceOperations:
    """
    The operations exposed as tools.

    Args:
        credentials: The configured user, fixed for the process lifetime
        client: Remote procedure client shared by authentication and data calls
        today: Returns the current date as YYYY-MM-DD
    """

    def __init__(
        self,
        credentials: Credentials,
        client: RemoteProcedureClient,
        today: Callable[[], str] = utc_today,
    ):
        self.credentials = credentials
        self.authenticator = Authenticator(client)
        self.backend = FieldServiceBackend(client)
        self.today = today

    async def _authorize(self, operation: str, action: str) -> UserContext:
        context = await self.authenticator.authenticate(self.credentials)
        require_any_permission(context.permissions, *TOOL_PERMISSIONS[operation], action=action)
        return context

    async def get_tasks_today(
        self,
        date: str | None = None,
        location_id: str | None = None,
        status: str | None = None,
    ) -> str:
        context = await self._authorize("get_tasks_today", "view tasks")

        date = date or self.today()
        tasks = await self.backend.fetch_tasks(context, date, location_id, status)
        logger.info(
            "Tasks retrieved",
            extra={"log_data": {"date": date, "count": len(tasks), "filtered": bool(location_id)}},
        )
        return formatting.render_tasks_today(date, tasks, location_filtered=bool(location_id))

    async def get_locations(self, parent_id: str | None = None) -> str:
        context = await self._authorize("get_locations", "view locations")

        locations = await self.backend.fetch_locations(context, parent_id)
        logger.info("Locations retrieved", extra={"log_data": {"count": len(locations)}})
        return formatting.render_locations(locations)

    async def get_task_status(self, task_id: str | None = None, status: str | None = None) -> str:
        context = await self._authorize("get_task_status", "view tasks")

        if task_id:
            # Accepted for compatibility with existing hosts; it does not narrow the result.
            logger.debug(
                "taskId argument is not applied as a filter",
                extra={"log_data": {"task_id": task_id}},
            )

        tasks = await self.backend.fetch_tasks(context, self.today())
        if status:
            tasks = [task for task in tasks if task.status == status]
        return formatting.render_task_status(tasks, status)

    async def complete_task(self, task_id: str | None, notes: str | None = None) -> str:
        context = await self._authorize("complete_task", "complete tasks")

        if not task_id:
            raise ValidationError("Task ID is required")

        result = await self.backend.complete_task(context, task_id, notes)
        if not result.success:
            raise RemoteCallError(result.message or "Failed to complete task")
        return formatting.render_completion(notes)
