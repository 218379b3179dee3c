"""JSON-file snapshots of registered groups and scheduled tasks.

The backend owns these records; the runner only reads them. Files are
re-read on every call so edits take effect without a restart.

registered_groups.json:
    {"tg:-1001234": {"name": "Team", "folder": "team"}}

tasks.json:
    [{"id": "1", "prompt": "...", "schedule_type": "cron",
      "status": "active", "next_run": "2026-01-01T09:00:00Z"}]
"""

import json
import logging
import os
from typing import Any

from .models import RegisteredGroup, ScheduledTask

logger = logging.getLogger("courier.store")


def _read_json(path: str, default: Any) -> Any:
    if not os.path.exists(path):
        return default
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return default


def load_registered_groups(path: str) -> dict[str, RegisteredGroup]:
    data = _read_json(path, {})
    if not isinstance(data, dict):
        logger.warning(f"{path}: expected an object keyed by jid")
        return {}
    groups = {}
    for jid, entry in data.items():
        if not isinstance(entry, dict):
            continue
        groups[jid] = RegisteredGroup(
            jid=jid,
            name=entry.get("name") or jid,
            folder=entry.get("folder") or "",
        )
    return groups


def load_tasks(path: str) -> list[ScheduledTask]:
    data = _read_json(path, [])
    if not isinstance(data, list):
        logger.warning(f"{path}: expected a list of tasks")
        return []
    tasks = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        tasks.append(ScheduledTask(
            id=str(entry.get("id", "")),
            prompt=entry.get("prompt") or "",
            schedule_type=entry.get("schedule_type") or "",
            status=entry.get("status") or "",
            next_run=entry.get("next_run"),
        ))
    return tasks
