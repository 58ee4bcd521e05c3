"""
Typed records for remote procedure results.

The backend speaks loosely typed JSON. Each record here is built by a
``from_payload()`` classmethod that checks the fields the server relies on
and raises ``RemoteCallError`` for anything malformed, so that rendering code
never sees a missing title or a path that is not a list.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from logsure_mcp.errors import RemoteCallError


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


TASK_STATUS_VALUES = [status.value for status in TaskStatus]


def _require_str(record: dict, key: str, kind: str) -> str:
    value = record.get(key)
    if not isinstance(value, str) or not value:
        raise RemoteCallError(f"Malformed {kind} in backend response: missing '{key}'")
    return value


def _optional_str(record: dict, key: str, kind: str) -> str | None:
    value = record.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise RemoteCallError(f"Malformed {kind} in backend response: '{key}' must be a string")
    return value


def _str_list(record: dict, key: str, kind: str) -> list[str]:
    value = record.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise RemoteCallError(
            f"Malformed {kind} in backend response: '{key}' must be a list of strings"
        )
    return value


@dataclass(frozen=True)
class UserContext:
    """
    The authenticated user for one tool invocation.

    Attributes:
        user_id: Resolved user id (the backend's ``firebaseUid``)
        org_id: Organization id
        role: Role ordinal; permissions are derived from it server-side
        permissions: Capabilities granted to the role
        access_token: Short-lived token for write procedures
        access_token_expires_at: Expiry decoded from the token, when available
    """

    user_id: str
    org_id: str
    role: int
    permissions: frozenset[str]
    access_token: str = field(repr=False)
    access_token_expires_at: datetime | None = None


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    status: str
    instructions: str | None = None
    assigned_to: str | None = None
    location_path: list[str] = field(default_factory=list)

    @property
    def known_status(self) -> TaskStatus | None:
        """The status as a TaskStatus, or None for an unrecognized value."""
        try:
            return TaskStatus(self.status)
        except ValueError:
            return None

    @classmethod
    def from_payload(cls, record: Any) -> "Task":
        if not isinstance(record, dict):
            raise RemoteCallError("Malformed task in backend response: expected an object")

        # Tasks without a recorded status have not been started.
        status = record.get("status") or TaskStatus.PENDING.value
        if not isinstance(status, str):
            raise RemoteCallError("Malformed task in backend response: 'status' must be a string")

        return cls(
            id=_require_str(record, "id", "task"),
            title=_require_str(record, "title", "task"),
            status=status,
            instructions=_optional_str(record, "instructions", "task"),
            assigned_to=_optional_str(record, "assignedTo", "task"),
            location_path=_str_list(record, "locationPath", "task"),
        )


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    level: str = "unknown"
    path: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, record: Any) -> "Location":
        if not isinstance(record, dict):
            raise RemoteCallError("Malformed location in backend response: expected an object")

        return cls(
            id=_require_str(record, "id", "location"),
            name=_require_str(record, "name", "location"),
            level=_optional_str(record, "level", "location") or "unknown",
            path=_str_list(record, "path", "location"),
        )


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of a task-completion call; failures are values, not exceptions."""

    success: bool
    data: Any = None
    message: str | None = None


def parse_collection(result: Any, key: str) -> list[Any]:
    """
    Extract the ``key`` list from a ``{success, <key>: [...]}`` result.

    Raises:
        RemoteCallError: If the result reports failure or has no such list
    """
    if not isinstance(result, dict):
        raise RemoteCallError(f"Malformed backend response: expected an object with '{key}'")

    if result.get("success") is False:
        message = result.get("message") or result.get("error") or "request was not successful"
        raise RemoteCallError(f"Backend request failed: {message}")

    items = result.get(key)
    if not isinstance(items, list):
        raise RemoteCallError(f"Malformed backend response: '{key}' must be a list")
    return items
