"""Markdown rendering of backend results for the conversational host."""

from collections import defaultdict

from logsure_mcp.models import Location, Task, TaskStatus

UNKNOWN_LOCATION = "Unknown Location"

STATUS_GLYPHS = {
    TaskStatus.COMPLETED: "✅",
    TaskStatus.IN_PROGRESS: "🔄",
    TaskStatus.PENDING: "⏳",
}
UNKNOWN_STATUS_GLYPH = "❔"


def location_label(path: list[str]) -> str:
    return " > ".join(path) if path else UNKNOWN_LOCATION


def _detailed_entry(task: Task) -> list[str]:
    lines = [f"• {task.title} — {location_label(task.location_path)}"]
    details = f"  Task ID: {task.id}"
    if task.assigned_to:
        details += f" | Assigned: {task.assigned_to}"
    lines.append(details)
    if task.instructions:
        lines.append(f"  Instructions: {task.instructions}")
    lines.append("")
    return lines


def render_tasks_today(date: str, tasks: list[Task], location_filtered: bool = False) -> str:
    """
    Render the day's tasks: pending first, then in progress, then completed.

    Tasks whose status is not one of the known values are listed last with
    the raw status shown.
    """
    if not tasks:
        where = " at the specified location" if location_filtered else ""
        return f"No tasks found for {date}{where}."

    groups: dict[TaskStatus | None, list[Task]] = defaultdict(list)
    for task in tasks:
        groups[task.known_status].append(task)

    lines = [f"📅 **Field Service Tasks for {date}**", ""]

    pending = groups[TaskStatus.PENDING]
    if pending:
        lines.append(f"⏳ **Pending Tasks ({len(pending)}):**")
        for task in pending:
            lines.extend(_detailed_entry(task))

    in_progress = groups[TaskStatus.IN_PROGRESS]
    if in_progress:
        lines.append(f"🔄 **In Progress Tasks ({len(in_progress)}):**")
        for task in in_progress:
            lines.extend(_detailed_entry(task))

    completed = groups[TaskStatus.COMPLETED]
    if completed:
        lines.append(f"✅ **Completed Tasks ({len(completed)}):**")
        for task in completed:
            lines.append(f"• {task.title} — {location_label(task.location_path)}")
        lines.append("")

    other = groups[None]
    if other:
        lines.append(f"{UNKNOWN_STATUS_GLYPH} **Other Status ({len(other)}):**")
        for task in other:
            lines.append(
                f"• {task.title} — {location_label(task.location_path)} (status: {task.status})"
            )
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def render_locations(locations: list[Location]) -> str:
    if not locations:
        return "No locations found for your organization."

    by_level: dict[str, list[Location]] = defaultdict(list)
    for location in locations:
        by_level[location.level].append(location)

    lines = [f"📍 **Your Organization Locations ({len(locations)} total)**", ""]
    for level in sorted(by_level):
        lines.append(f"**{level.upper()}:**")
        for location in by_level[level]:
            lines.append(f"• {location.name} (ID: `{location.id}`)")
            path = " > ".join(location.path) if location.path else location.name
            if path != location.name:
                lines.append(f"  Path: {path}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def render_task_status(tasks: list[Task], status: str | None = None) -> str:
    if not tasks:
        status_text = f' with status "{status}"' if status else ""
        return f"No tasks found{status_text} for today."

    status_text = f" ({status})" if status else ""
    lines = [f"📊 **Task Status{status_text}** - {len(tasks)} tasks", ""]

    for task in tasks:
        known = task.known_status
        if known is None:
            lines.append(f"{UNKNOWN_STATUS_GLYPH} **{task.title}** (status: {task.status})")
        else:
            lines.append(f"{STATUS_GLYPHS[known]} **{task.title}**")
        lines.append(f"   Location: {location_label(task.location_path)}")
        lines.append(f"   Task ID: `{task.id}`")
        if task.assigned_to:
            lines.append(f"   Assigned: {task.assigned_to}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def render_completion(notes: str | None = None) -> str:
    text = "✅ **Task completed successfully!**"
    if notes:
        text += f"\n\n**Notes:** {notes}"
    return text
