"""Operator commands — pure text responders.

Each function takes a point-in-time snapshot and returns the Markdown
reply. Nothing here touches the bot or mutates state; the channel wires
these to CommandHandlers.
"""

from datetime import datetime
from typing import Iterable, Mapping, Optional

from ..models import RegisteredGroup, ScheduledTask, SystemStatus, make_jid

PREVIEW_LENGTH = 50

COMMANDS = [
    ("help", "List all available commands"),
    ("ping", "Check if the bot is online"),
    ("status", "Uptime, containers, groups, tasks"),
    ("groups", "List registered groups"),
    ("tasks", "List active scheduled tasks"),
    ("chatid", "Get this chat's registration ID"),
]


def format_ping(assistant_name: str) -> str:
    return f"{assistant_name} is online."


def format_help(assistant_name: str) -> str:
    lines = [f"*{assistant_name} Commands*", ""]
    lines += [f"/{name} — {desc}" for name, desc in COMMANDS]
    return "\n".join(lines)


def format_status(assistant_name: str, status: Optional[SystemStatus]) -> str:
    if status is None:
        return "Status not available."
    uptime_h = status.uptime / 3600
    containers = f"Containers: {status.active_containers}/{status.max_containers} active"
    if status.waiting_containers > 0:
        containers += f" ({status.waiting_containers} waiting)"
    return "\n".join([
        f"*{assistant_name} Status*",
        "",
        f"Uptime: {uptime_h:.1f}h",
        containers,
        f"Channels: {status.channel_count}",
        f"Groups: {status.group_count}",
        f"Tasks: {status.task_count}",
    ])


def format_groups(groups: Mapping[str, RegisteredGroup]) -> str:
    entries = list(groups.values())
    if not entries:
        return "No registered groups."
    lines = [f"• {g.name} — `{g.folder}`" for g in entries]
    return "\n".join([f"*Registered Groups ({len(entries)})*", "", *lines])


def _preview(prompt: Optional[str]) -> str:
    prompt = prompt or ""
    if len(prompt) > PREVIEW_LENGTH:
        return prompt[:PREVIEW_LENGTH - 3] + "..."
    return prompt


def _format_next_run(next_run: Optional[str]) -> str:
    if not next_run:
        return "N/A"
    try:
        dt = datetime.fromisoformat(next_run.replace("Z", "+00:00"))
    except ValueError:
        return next_run
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_tasks(tasks: Iterable[ScheduledTask]) -> str:
    active = [t for t in tasks if t.status == "active"]
    if not active:
        return "No active scheduled tasks."
    lines = [
        f"• *{t.schedule_type}* — {_preview(t.prompt)}\n  Next: {_format_next_run(t.next_run)}"
        for t in active
    ]
    return "\n".join([f"*Active Tasks ({len(active)})*", "", *lines])


def format_chatid(chat, user=None) -> str:
    """Registration info for the current chat."""
    chat_type = getattr(chat, "type", None) or "unknown"
    if chat_type == "private":
        chat_name = getattr(user, "first_name", None) or "Private"
    else:
        chat_name = getattr(chat, "title", None) or "Unknown"
    return f"Chat ID: `{make_jid(getattr(chat, 'id', ''))}`\nName: {chat_name}\nType: {chat_type}"
