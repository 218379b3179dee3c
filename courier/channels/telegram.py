"""Telegram channel adapter."""

import asyncio
import logging
import re
from typing import Optional

from telegram import BotCommand, Update
from telegram.constants import ChatAction, ParseMode
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from ..communication import commands
from ..communication.inbound import (
    NormalizedEvent,
    normalize_media_message,
    normalize_text_message,
)
from ..communication.outbound import send_chunked
from ..config import DEFAULT_ASSISTANT_NAME, build_trigger_pattern
from ..models import native_chat_id, owns_jid
from .base import ChannelOptions, invoke

logger = logging.getLogger("courier.telegram")

MEDIA_FILTER = (
    filters.PHOTO
    | filters.VIDEO
    | filters.VOICE
    | filters.AUDIO
    | filters.Document.ALL
    | filters.Sticker.ALL
    | filters.LOCATION
    | filters.CONTACT
)


class TelegramChannel:
    """Telegram bot adapter: polls for updates, forwards them to the backend."""

    name = "telegram"

    def __init__(
        self,
        bot_token: str,
        options: ChannelOptions,
        assistant_name: str = DEFAULT_ASSISTANT_NAME,
        trigger_pattern: Optional[re.Pattern] = None,
    ):
        self.bot_token = bot_token
        self.options = options
        self.assistant_name = assistant_name
        self.trigger_pattern = trigger_pattern or build_trigger_pattern(assistant_name)
        self.app: Optional[Application] = None
        self._self_username: Optional[str] = None
        self._connect_lock = asyncio.Lock()

    # ── Lifecycle ────────────────────────────────────────────

    async def connect(self):
        """Start the bot. Returns once polling is running; no-op if already connected."""
        async with self._connect_lock:
            if self.app is not None:
                return

            app = Application.builder().token(self.bot_token).build()

            app.add_handler(CommandHandler("chatid", self._cmd_chatid))
            app.add_handler(CommandHandler("ping", self._cmd_ping))
            app.add_handler(CommandHandler("help", self._cmd_help))
            app.add_handler(CommandHandler("status", self._cmd_status))
            app.add_handler(CommandHandler("groups", self._cmd_groups))
            app.add_handler(CommandHandler("tasks", self._cmd_tasks))

            app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self._handle_text))
            app.add_handler(MessageHandler(MEDIA_FILTER, self._handle_media))

            app.add_error_handler(self._handle_error)

            logger.info("Starting Telegram bot...")
            started = False
            try:
                await app.initialize()
                await app.start()
                started = True
                await app.updater.start_polling()
            except Exception:
                if started:
                    await app.stop()
                await app.shutdown()
                raise

            self.app = app
            self._self_username = app.bot.username
            logger.info(f"Telegram bot connected: @{app.bot.username} (id {app.bot.id})")

            # Register command menu (the "/" button in Telegram)
            try:
                await app.bot.set_my_commands(
                    [BotCommand(name, description) for name, description in commands.COMMANDS]
                )
            except Exception as e:
                logger.warning(f"Failed to register Telegram command menu: {e}")

    async def disconnect(self):
        """Stop polling and shut the application down."""
        if self.app is None:
            return
        app, self.app = self.app, None
        await app.updater.stop()
        await app.stop()
        await app.shutdown()
        logger.info("Telegram bot stopped.")

    def is_connected(self) -> bool:
        return self.app is not None

    def owns_jid(self, jid: str) -> bool:
        return owns_jid(jid)

    # ── Outbound ─────────────────────────────────────────────

    async def send_message(self, jid: str, text: str):
        """Send text to a chat, split into 4096-character chunks.

        Failures are logged, never raised. A failed chunk stops the rest
        of that message.
        """
        if self.app is None:
            logger.warning("Telegram bot not initialized")
            return
        try:
            await send_chunked(self.app.bot, native_chat_id(jid), text)
            logger.info(f"Telegram message sent to {jid} ({len(text)} chars)")
        except Exception as e:
            logger.error(f"Failed to send Telegram message to {jid}: {e}")

    async def set_typing(self, jid: str, is_typing: bool):
        if self.app is None or not is_typing:
            return
        try:
            await self.app.bot.send_chat_action(chat_id=native_chat_id(jid), action=ChatAction.TYPING)
        except Exception as e:
            logger.debug(f"Failed to send Telegram typing indicator to {jid}: {e}")

    # ── Inbound ──────────────────────────────────────────────

    async def _handle_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle incoming text messages."""
        message = update.message
        if not message or not message.text:
            return
        event = normalize_text_message(
            message,
            self.options.registered_groups(),
            self_username=self._self_username,
            trigger_pattern=self.trigger_pattern,
            assistant_name=self.assistant_name,
        )
        if event is not None:
            await self._dispatch(event)

    async def _handle_media(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle non-text messages with placeholders so the agent knows something was sent."""
        message = update.message
        if not message:
            return
        event = normalize_media_message(message, self.options.registered_groups())
        if event is not None:
            await self._dispatch(event)

    async def _dispatch(self, event: NormalizedEvent):
        meta = event.metadata
        await invoke(
            self.options.on_chat_metadata,
            meta.chat_jid,
            meta.timestamp,
            meta.display_name,
            meta.platform_tag,
            meta.is_group,
        )
        if event.message is None:
            return
        await invoke(self.options.on_message, meta.chat_jid, event.message)
        logger.info(
            f"Telegram message stored: {meta.chat_jid} ({meta.display_name}) from {event.message.sender_name}"
        )

    # ── Commands ─────────────────────────────────────────────

    async def _cmd_chatid(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /chatid — the jid to use when registering this chat."""
        text = commands.format_chatid(update.effective_chat, update.effective_user)
        await update.effective_message.reply_text(text, parse_mode=ParseMode.MARKDOWN)

    async def _cmd_ping(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        await update.effective_message.reply_text(commands.format_ping(self.assistant_name))

    async def _cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        await update.effective_message.reply_text(
            commands.format_help(self.assistant_name), parse_mode=ParseMode.MARKDOWN
        )

    async def _cmd_status(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /status — uptime, containers, channel/group/task counts."""
        getter = self.options.get_system_status
        status = getter() if getter else None
        await update.effective_message.reply_text(
            commands.format_status(self.assistant_name, status), parse_mode=ParseMode.MARKDOWN
        )

    async def _cmd_groups(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        await update.effective_message.reply_text(
            commands.format_groups(self.options.registered_groups()), parse_mode=ParseMode.MARKDOWN
        )

    async def _cmd_tasks(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /tasks — active scheduled tasks only."""
        tasks = self.options.get_tasks() if self.options.get_tasks else []
        await update.effective_message.reply_text(
            commands.format_tasks(tasks), parse_mode=ParseMode.MARKDOWN
        )

    async def _handle_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Handle errors."""
        logger.error(f"Telegram bot error: {context.error}", exc_info=context.error)
