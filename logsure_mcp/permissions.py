"""
Permission checks for tool operations.

Each operation names the capabilities that allow it; holding any one of them
is enough:

    TOOL_PERMISSIONS = {
        "operation_name": ("capability", "alternative_capability"),
    }

Checks run after authentication and before the operation's data call, so a
caller without permission never causes a data request.
"""

import logging
from collections.abc import Collection

from logsure_mcp.errors import AuthorizationError

logger = logging.getLogger("logsure-mcp.permissions")

VIEW_TASKS = ("view_assigned_tasks", "view_all_tasks")
VIEW_LOCATIONS = ("view_all_locations", "manage_locations")
COMPLETE_TASKS = ("complete_tasks",)

TOOL_PERMISSIONS: dict[str, tuple[str, ...]] = {
    "get_tasks_today": VIEW_TASKS,
    "get_locations": VIEW_LOCATIONS,
    "get_task_status": VIEW_TASKS,
    "complete_task": COMPLETE_TASKS,
}


def has_permission(granted: Collection[str], required: str) -> bool:
    return required in granted


def require_any_permission(granted: Collection[str], *required: str, action: str) -> None:
    """
    Raise AuthorizationError unless ``granted`` holds one of ``required``.

    Args:
        granted: The user's permission set
        required: Accepted capabilities, combined by OR
        action: Phrase completing "You do not have permission to ..."
    """
    if any(has_permission(granted, permission) for permission in required):
        return

    logger.warning(
        "Permission denied",
        extra={
            "log_data": {
                "required_any": list(required),
                "granted": sorted(granted),
                "decision": "denied",
            }
        },
    )
    raise AuthorizationError(f"You do not have permission to {action}")
