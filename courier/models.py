"""Canonical records exchanged between the channel and the backend."""

from dataclasses import dataclass
from typing import Optional

JID_PREFIX = "tg:"
PLATFORM_TAG = "telegram"


def make_jid(chat_id) -> str:
    """Build the canonical jid for a Telegram chat id."""
    return f"{JID_PREFIX}{chat_id}"


def native_chat_id(jid: str) -> str:
    """Strip the platform prefix, leaving the id the Bot API expects."""
    if jid.startswith(JID_PREFIX):
        return jid[len(JID_PREFIX):]
    return jid


def owns_jid(jid: str) -> bool:
    return jid.startswith(JID_PREFIX)


@dataclass(frozen=True)
class InboundMessage:
    id: str
    chat_jid: str
    sender: str
    sender_name: str
    content: str
    timestamp: str     # ISO-8601, UTC
    is_from_me: bool = False


@dataclass(frozen=True)
class ChatMetadata:
    """Discovery record, emitted for every observed chat event."""
    chat_jid: str
    timestamp: str
    display_name: Optional[str]
    platform_tag: str = PLATFORM_TAG
    is_group: bool = False


@dataclass(frozen=True)
class RegisteredGroup:
    jid: str
    name: str
    folder: str


@dataclass(frozen=True)
class ScheduledTask:
    id: str
    prompt: str
    schedule_type: str
    status: str
    next_run: Optional[str] = None


@dataclass(frozen=True)
class SystemStatus:
    uptime: float               # seconds
    active_containers: int
    max_containers: int
    waiting_containers: int
    channel_count: int
    group_count: int
    task_count: int
