"""Inbound message processing — Telegram updates to canonical records.

Handles:
- Sender and chat display-name resolution
- @bot_username mention → trigger rewriting
- Reply-to context folding
- Non-text placeholders (photo, document, sticker, ...)
- Registration gating

Everything here is pure: no network, no storage. The channel feeds in
python-telegram-bot objects (or anything shaped like them) and gets back
records ready for the backend callbacks.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Mapping, Optional

from ..models import (
    ChatMetadata,
    InboundMessage,
    PLATFORM_TAG,
    RegisteredGroup,
    make_jid,
)

logger = logging.getLogger("courier.inbound")

GROUP_CHAT_TYPES = ("group", "supergroup")
NON_TEXT_REPLY = "[non-text message]"


@dataclass(frozen=True)
class NormalizedEvent:
    """Result of normalizing one inbound update.

    ``metadata`` is always present. ``message`` is None when the chat is
    not registered (metadata-only observation).
    """
    metadata: ChatMetadata
    message: Optional[InboundMessage] = None


# ============================================================
# NAMES AND TIMESTAMPS
# ============================================================

def sender_display_name(user) -> str:
    """first_name → username → numeric id → "Unknown"."""
    if user is None:
        return "Unknown"
    first_name = getattr(user, "first_name", None)
    if first_name:
        return first_name
    username = getattr(user, "username", None)
    if username:
        return username
    user_id = getattr(user, "id", None)
    if user_id is not None:
        return str(user_id)
    return "Unknown"


def sender_id(user) -> str:
    user_id = getattr(user, "id", None) if user is not None else None
    return str(user_id) if user_id is not None else ""


def chat_display_name(chat, sender_name: str, chat_jid: str) -> str:
    """Private chats are named after the sender, everything else by title."""
    if getattr(chat, "type", None) == "private":
        return sender_name
    return getattr(chat, "title", None) or chat_jid


def is_group_chat(chat) -> bool:
    return getattr(chat, "type", None) in GROUP_CHAT_TYPES


def format_timestamp(date) -> str:
    """Render a message date as ISO-8601 UTC with millisecond precision.

    Accepts an aware/naive datetime (naive is taken as UTC) or epoch
    seconds. A missing date falls back to the current time.
    """
    if date is None:
        dt = datetime.now(timezone.utc)
    elif isinstance(date, (int, float)):
        dt = datetime.fromtimestamp(date, tz=timezone.utc)
    elif date.tzinfo is None:
        dt = date.replace(tzinfo=timezone.utc)
    else:
        dt = date.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ============================================================
# MENTION → TRIGGER REWRITING
# ============================================================
# Telegram @mentions (e.g. @andy_ai_bot) never match a trigger like
# ^@Andy\b, so a mention of the bot gets the trigger prepended.

def _entity_text(content: str, offset: int, length: int) -> str:
    # Entity offsets are UTF-16 code units
    encoded = content.encode("utf-16-le")
    return encoded[offset * 2:(offset + length) * 2].decode("utf-16-le", errors="ignore")


def is_bot_mentioned(content: str, entities: Optional[Iterable], self_username: Optional[str]) -> bool:
    if not self_username:
        return False
    target = f"@{self_username}".lower()
    for entity in entities or ():
        if getattr(entity, "type", None) != "mention":
            continue
        offset = getattr(entity, "offset", 0) or 0
        length = getattr(entity, "length", 0) or 0
        if _entity_text(content, offset, length).lower() == target:
            return True
    return False


def rewrite_mentions(
    content: str,
    entities: Optional[Iterable],
    self_username: Optional[str],
    trigger_pattern: re.Pattern,
    assistant_name: str,
) -> str:
    """Prepend "@<assistant_name> " when the bot is @mentioned.

    Args:
        content: Message text
        entities: Telegram message entities (type/offset/length)
        self_username: The bot's own username, without "@"
        trigger_pattern: Backend trigger; a match means nothing to do
        assistant_name: Name used to build the trigger token

    Returns:
        The content, with the trigger token prepended at most once.
    """
    if trigger_pattern.search(content):
        return content
    if is_bot_mentioned(content, entities, self_username):
        return f"@{assistant_name} {content}"
    return content


# ============================================================
# REPLY CONTEXT
# ============================================================

def fold_reply_context(content: str, reply) -> str:
    """Prefix the content with a single line describing the replied-to message."""
    if reply is None:
        return content
    reply_from = sender_display_name(getattr(reply, "from_user", None))
    reply_text = getattr(reply, "text", None) or getattr(reply, "caption", None) or NON_TEXT_REPLY
    return f'[Replying to {reply_from}: "{reply_text}"]\n{content}'


# ============================================================
# NON-TEXT PLACEHOLDERS
# ============================================================

class MediaKind(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"
    VOICE = "voice"
    AUDIO = "audio"
    DOCUMENT = "document"
    STICKER = "sticker"
    LOCATION = "location"
    CONTACT = "contact"


_PLACEHOLDERS = {
    MediaKind.PHOTO: "[Photo]",
    MediaKind.VIDEO: "[Video]",
    MediaKind.VOICE: "[Voice message]",
    MediaKind.AUDIO: "[Audio]",
    MediaKind.DOCUMENT: "[Document: {detail}]",
    MediaKind.STICKER: "[Sticker {detail}]",
    MediaKind.LOCATION: "[Location]",
    MediaKind.CONTACT: "[Contact]",
}

_DETAIL_DEFAULTS = {
    MediaKind.DOCUMENT: "file",
}


def media_placeholder(kind: MediaKind, detail: Optional[str] = None, caption: Optional[str] = None) -> str:
    """Build the bracketed placeholder for a non-text message.

    ``detail`` is the document file name or the sticker emoji; kinds
    without a detail slot ignore it.
    """
    template = _PLACEHOLDERS[kind]
    if "{detail}" in template:
        detail = detail or _DETAIL_DEFAULTS.get(kind)
        if detail:
            text = template.format(detail=detail)
        else:
            text = template.replace(" {detail}", "")
    else:
        text = template
    if caption:
        text = f"{text} {caption}"
    return text


def detect_media(message) -> Optional[tuple[MediaKind, Optional[str]]]:
    """Return (kind, detail) for a non-text message, None if there is no media."""
    for kind in MediaKind:
        value = getattr(message, kind.value, None)
        if not value:
            continue
        if kind is MediaKind.DOCUMENT:
            return kind, getattr(value, "file_name", None)
        if kind is MediaKind.STICKER:
            return kind, getattr(value, "emoji", None)
        return kind, None
    return None


# ============================================================
# NORMALIZATION
# ============================================================

def _gate(
    message: InboundMessage,
    chat_name: Optional[str],
    registered_groups: Mapping[str, RegisteredGroup],
) -> Optional[InboundMessage]:
    if message.chat_jid not in registered_groups:
        logger.debug(f"Message from unregistered Telegram chat {message.chat_jid} ({chat_name})")
        return None
    return message


def normalize_text_message(
    message,
    registered_groups: Mapping[str, RegisteredGroup],
    *,
    self_username: Optional[str],
    trigger_pattern: re.Pattern,
    assistant_name: str,
) -> Optional[NormalizedEvent]:
    """Normalize a text message.

    Order matters: the mention rewrite runs before reply folding so the
    trigger token stays at the very start of the content.

    Returns:
        None for commands and empty text, otherwise the event. The
        event's message is None when the chat is not registered.
    """
    text = getattr(message, "text", None)
    if not text or text.startswith("/"):
        return None

    chat = getattr(message, "chat", None)
    user = getattr(message, "from_user", None)
    chat_jid = make_jid(getattr(chat, "id", ""))
    timestamp = format_timestamp(getattr(message, "date", None))
    sender_name = sender_display_name(user)
    chat_name = chat_display_name(chat, sender_name, chat_jid)

    content = rewrite_mentions(
        text,
        getattr(message, "entities", None),
        self_username,
        trigger_pattern,
        assistant_name,
    )
    content = fold_reply_context(content, getattr(message, "reply_to_message", None))

    metadata = ChatMetadata(
        chat_jid=chat_jid,
        timestamp=timestamp,
        display_name=chat_name,
        platform_tag=PLATFORM_TAG,
        is_group=is_group_chat(chat),
    )
    inbound = InboundMessage(
        id=str(getattr(message, "message_id", "")),
        chat_jid=chat_jid,
        sender=sender_id(user),
        sender_name=sender_name,
        content=content,
        timestamp=timestamp,
        is_from_me=False,
    )
    return NormalizedEvent(metadata=metadata, message=_gate(inbound, chat_name, registered_groups))


def normalize_media_message(
    message,
    registered_groups: Mapping[str, RegisteredGroup],
) -> Optional[NormalizedEvent]:
    """Normalize a non-text message into a placeholder.

    The placeholder is only built for registered chats; unregistered chats
    get the metadata record alone.
    """
    media = detect_media(message)
    if media is None:
        return None

    chat = getattr(message, "chat", None)
    chat_jid = make_jid(getattr(chat, "id", ""))
    timestamp = format_timestamp(getattr(message, "date", None))
    metadata = ChatMetadata(
        chat_jid=chat_jid,
        timestamp=timestamp,
        display_name=None,
        platform_tag=PLATFORM_TAG,
        is_group=is_group_chat(chat),
    )
    if chat_jid not in registered_groups:
        logger.debug(f"Non-text message from unregistered Telegram chat {chat_jid}")
        return NormalizedEvent(metadata=metadata)

    kind, detail = media
    user = getattr(message, "from_user", None)
    inbound = InboundMessage(
        id=str(getattr(message, "message_id", "")),
        chat_jid=chat_jid,
        sender=sender_id(user),
        sender_name=sender_display_name(user),
        content=media_placeholder(kind, detail, getattr(message, "caption", None)),
        timestamp=timestamp,
        is_from_me=False,
    )
    return NormalizedEvent(metadata=metadata, message=inbound)
