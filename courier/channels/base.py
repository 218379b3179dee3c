"""Channel adapter protocol and backend callback contract."""

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Union, runtime_checkable

from ..models import InboundMessage, RegisteredGroup, ScheduledTask, SystemStatus

OnInboundMessage = Callable[[str, InboundMessage], Union[None, Awaitable[None]]]
# (chat_jid, timestamp, display_name, platform_tag, is_group)
OnChatMetadata = Callable[[str, str, Optional[str], str, bool], Union[None, Awaitable[None]]]


@runtime_checkable
class Channel(Protocol):
    """Protocol that the multi-channel coordinator drives."""

    name: str

    async def connect(self) -> None:
        """Start receiving; idempotent."""
        ...

    async def send_message(self, jid: str, text: str) -> None:
        """Best-effort send; never raises."""
        ...

    async def set_typing(self, jid: str, is_typing: bool) -> None:
        ...

    def is_connected(self) -> bool:
        ...

    def owns_jid(self, jid: str) -> bool:
        """True if outbound sends for this jid belong to this channel."""
        ...

    async def disconnect(self) -> None:
        ...


@dataclass
class ChannelOptions:
    """Backend hooks handed to a channel.

    ``registered_groups`` and ``get_tasks`` are called on every use so
    registration changes made at runtime are picked up immediately.
    """
    on_message: OnInboundMessage
    on_chat_metadata: OnChatMetadata
    registered_groups: Callable[[], Mapping[str, RegisteredGroup]]
    get_system_status: Optional[Callable[[], Optional[SystemStatus]]] = None
    get_tasks: Optional[Callable[[], list[ScheduledTask]]] = None


async def invoke(callback: Callable[..., Any], *args) -> None:
    """Call a backend callback that may be sync or async."""
    result = callback(*args)
    if inspect.isawaitable(result):
        await result
