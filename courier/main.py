"""Courier — Main entry point.

Runs the Telegram channel on its own, with the registered groups and
tasks read from JSON snapshots and inbound traffic written to the log.
A real deployment hands ChannelOptions wired to its own backend instead.
"""

import asyncio
import logging
import time
from typing import Optional

from .channels.base import ChannelOptions
from .channels.pool import close_bot_pool, init_bot_pool
from .channels.telegram import TelegramChannel
from .config import CourierSettings, load_settings
from .models import InboundMessage, SystemStatus
from .store import load_registered_groups, load_tasks

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("courier")


def configure_logging(settings: CourierSettings):
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=_log_format,
        handlers=handlers,
    )
    # httpx logs every Bot API request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_options(settings: CourierSettings, started_at: float) -> ChannelOptions:
    """Wire the channel to the JSON snapshots and a logging sink."""

    def registered_groups():
        return load_registered_groups(settings.groups_file)

    def get_tasks():
        return load_tasks(settings.tasks_file)

    def get_system_status() -> SystemStatus:
        tasks = get_tasks()
        return SystemStatus(
            uptime=time.monotonic() - started_at,
            active_containers=0,
            max_containers=0,
            waiting_containers=0,
            channel_count=1,
            group_count=len(registered_groups()),
            task_count=sum(1 for t in tasks if t.status == "active"),
        )

    def on_message(chat_jid: str, message: InboundMessage):
        logger.info(f"[{chat_jid}] {message.sender_name}: {message.content[:100]}")

    def on_chat_metadata(chat_jid: str, timestamp: str, display_name: Optional[str], platform: str, is_group: bool):
        logger.debug(f"Chat seen: {chat_jid} ({display_name or '?'}, {platform}, group={is_group}) at {timestamp}")

    return ChannelOptions(
        on_message=on_message,
        on_chat_metadata=on_chat_metadata,
        registered_groups=registered_groups,
        get_system_status=get_system_status,
        get_tasks=get_tasks,
    )


async def run(settings: Optional[CourierSettings] = None):
    """Main run loop."""
    settings = settings or load_settings()
    configure_logging(settings)

    if not settings.telegram_bot_token:
        logger.error("Cannot start: COURIER_TELEGRAM_BOT_TOKEN is not set.")
        return

    telegram = TelegramChannel(
        settings.telegram_bot_token,
        build_options(settings, time.monotonic()),
        assistant_name=settings.assistant_name,
        trigger_pattern=settings.trigger_pattern,
    )

    try:
        await telegram.connect()
        logger.info("Telegram channel active. Send /chatid to the bot to get a chat's registration ID.")

        if settings.pool_tokens:
            await init_bot_pool(settings.pool_tokens, settle_delay=settings.pool_settle_delay)

        logger.info("Courier is running. Press Ctrl+C to stop.")
        while telegram.is_connected():
            await asyncio.sleep(1)

    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    except Exception as e:
        logger.critical(f"Fatal error: {type(e).__name__}: {e}", exc_info=True)
    finally:
        await close_bot_pool()
        await telegram.disconnect()


def main():
    """Entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
