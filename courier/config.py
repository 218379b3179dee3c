"""Courier configuration management."""

import logging
import re
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_ASSISTANT_NAME = "Andy"


def build_trigger_pattern(assistant_name: str) -> re.Pattern:
    """Trigger used by the backend: "@<name>" at the start of the message."""
    return re.compile(rf"^@{re.escape(assistant_name)}\b", re.IGNORECASE)


class CourierSettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Telegram
    telegram_bot_token: Optional[str] = Field(default=None, description="Telegram bot token")
    telegram_bot_pool: str = Field(
        default="",
        description="Comma-separated tokens of send-only pool bots (agent teams)",
    )
    pool_settle_delay: float = Field(
        default=2.0,
        description="Seconds to wait after renaming a pool bot before its first send",
    )

    # Assistant
    assistant_name: str = Field(default=DEFAULT_ASSISTANT_NAME, description="Name used in the trigger")

    # Snapshots read by the runner
    groups_file: str = Field(default="data/registered_groups.json", description="Registered groups JSON")
    tasks_file: str = Field(default="data/tasks.json", description="Scheduled tasks JSON")

    # Logging
    debug: bool = Field(default=False, description="Debug mode")
    log_file: Optional[str] = Field(default=None, description="Also log to this file")

    model_config = {"env_prefix": "COURIER_", "env_file": ".env", "extra": "ignore"}

    @property
    def pool_tokens(self) -> list[str]:
        return [t.strip() for t in self.telegram_bot_pool.split(",") if t.strip()]

    @property
    def trigger_pattern(self) -> re.Pattern:
        return build_trigger_pattern(self.assistant_name)


def load_settings() -> CourierSettings:
    """Load settings from environment."""
    settings = CourierSettings()

    logger = logging.getLogger("courier.config")
    if not settings.telegram_bot_token:
        logger.warning("No Telegram bot token configured. Set COURIER_TELEGRAM_BOT_TOKEN.")

    return settings
