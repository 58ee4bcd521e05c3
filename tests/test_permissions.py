"""Tests for the permission gate (logsure_mcp/permissions.py)."""

import pytest

from logsure_mcp.errors import AuthorizationError
from logsure_mcp.permissions import TOOL_PERMISSIONS, has_permission, require_any_permission


class TestHasPermission:
    def test_member(self):
        assert has_permission({"view_all_tasks"}, "view_all_tasks")

    def test_non_member(self):
        assert not has_permission({"view_all_tasks"}, "manage_locations")

    def test_empty_set(self):
        assert not has_permission(frozenset(), "view_all_tasks")


class TestRequireAnyPermission:
    def test_any_alternative_is_enough(self):
        require_any_permission({"view_assigned_tasks"}, "view_assigned_tasks", "view_all_tasks", action="view tasks")
        require_any_permission({"view_all_tasks"}, "view_assigned_tasks", "view_all_tasks", action="view tasks")

    def test_none_held_raises(self):
        with pytest.raises(AuthorizationError, match="You do not have permission to view tasks"):
            require_any_permission({"manage_locations"}, "view_assigned_tasks", "view_all_tasks", action="view tasks")


def test_every_tool_has_permissions():
    for tool in ("get_tasks_today", "get_locations", "get_task_status", "complete_task"):
        assert TOOL_PERMISSIONS[tool]
