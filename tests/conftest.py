"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from courier.channels.base import ChannelOptions
from courier.models import RegisteredGroup

MESSAGE_DATE = datetime(2026, 3, 1, 12, 30, 45, tzinfo=timezone.utc)


def make_user(user_id=42, first_name="Alice", username="alice", is_bot=False):
    return SimpleNamespace(id=user_id, first_name=first_name, username=username, is_bot=is_bot)


def make_chat(chat_id=-1001, chat_type="group", title="Team Chat"):
    return SimpleNamespace(id=chat_id, type=chat_type, title=title)


def make_message(text=None, chat=None, from_user=None, message_id=7, **extra):
    """Duck-typed stand-in for telegram.Message; unset media fields are None."""
    fields = dict(
        message_id=message_id,
        date=MESSAGE_DATE,
        chat=chat or make_chat(),
        from_user=from_user if from_user is not None else make_user(),
        text=text,
        entities=(),
        caption=None,
        reply_to_message=None,
        photo=(),
        video=None,
        voice=None,
        audio=None,
        document=None,
        sticker=None,
        location=None,
        contact=None,
    )
    fields.update(extra)
    return SimpleNamespace(**fields)


def mention(offset, length):
    return SimpleNamespace(type="mention", offset=offset, length=length)


@pytest.fixture
def registered():
    """Mutable registered-groups snapshot."""
    return {"tg:-1001": RegisteredGroup(jid="tg:-1001", name="Team Chat", folder="team")}


@pytest.fixture
def options(registered):
    return ChannelOptions(
        on_message=MagicMock(),
        on_chat_metadata=MagicMock(),
        registered_groups=lambda: registered,
        get_system_status=None,
        get_tasks=lambda: [],
    )


@pytest.fixture
def fake_bot():
    """Bot double: every API coroutine is an AsyncMock."""
    return AsyncMock()
