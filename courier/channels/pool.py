"""Bot pool for agent teams — send-only bots, no polling.

Each (group folder, sender name) pair is pinned to one pool bot, picked
round-robin the first time that pair speaks. On first use the bot is
renamed to the sender and given a moment for the rename to propagate
before the message goes out. Assignments live for the whole process.
"""

import asyncio
import logging
from typing import Iterable, Optional

from telegram import Bot

from ..communication.outbound import send_chunked
from ..models import native_chat_id

logger = logging.getLogger("courier.pool")

RENAME_SETTLE_DELAY = 2.0


class BotPool:
    """Fixed, ordered set of send-only bots with stable sender assignment."""

    def __init__(self, settle_delay: float = RENAME_SETTLE_DELAY):
        self.settle_delay = settle_delay
        self._bots: list[Bot] = []
        # (group_folder, sender) → index into self._bots
        self._assignments: dict[tuple[str, str], int] = {}
        self._bootstraps: dict[tuple[str, str], asyncio.Future] = {}
        self._next_index = 0

    def __len__(self) -> int:
        return len(self._bots)

    def has_bots(self) -> bool:
        return bool(self._bots)

    def add_bot(self, bot: Bot):
        """Append an already initialized bot to the pool."""
        self._bots.append(bot)

    async def init(self, tokens: Iterable[str]):
        """Create and initialize one bot per token.

        A token that fails (bad token, network) is logged and left out;
        the rest of the pool still comes up.
        """
        for token in tokens:
            try:
                bot = Bot(token)
                await bot.initialize()
                self._bots.append(bot)
                logger.info(
                    f"Pool bot initialized: @{bot.username} (id {bot.id}), pool size {len(self._bots)}"
                )
            except Exception as e:
                logger.error(f"Failed to initialize pool bot: {e}")
        if self._bots:
            logger.info(f"Telegram bot pool ready ({len(self._bots)} bots)")

    def assign(self, group_folder: str, sender: str) -> tuple[int, bool]:
        """Resolve the pool index for a sender, assigning one on first use.

        Never awaits: the mapping is stored before the caller reaches an
        await, so two sends for the same new sender take one slot.

        Returns:
            Tuple of (pool_index, newly_assigned)
        """
        key = (group_folder, sender)
        idx = self._assignments.get(key)
        if idx is not None:
            return idx, False
        idx = self._next_index % len(self._bots)
        self._next_index += 1
        self._assignments[key] = idx
        return idx, True

    async def _bootstrap(self, idx: int, sender: str, group_folder: str):
        try:
            await self._bots[idx].set_my_name(sender)
            await asyncio.sleep(self.settle_delay)
            logger.info(f"Assigned and renamed pool bot {idx} to {sender} ({group_folder})")
        except Exception as e:
            logger.warning(f"Failed to rename pool bot {idx} to {sender} (sending anyway): {e}")

    async def send(self, chat_jid: str, text: str, sender: str, group_folder: str):
        """Send text as ``sender`` through its pool bot.

        No-op on an empty pool. Failures are logged, never raised.
        """
        if not self._bots:
            return

        key = (group_folder, sender)
        idx, is_new = self.assign(group_folder, sender)
        if is_new:
            self._bootstraps[key] = asyncio.ensure_future(self._bootstrap(idx, sender, group_folder))

        # Later sends for the same sender wait for the rename to settle too
        bootstrap = self._bootstraps.get(key)
        if bootstrap is not None:
            await asyncio.shield(bootstrap)
            if self._bootstraps.get(key) is bootstrap:
                del self._bootstraps[key]

        try:
            await send_chunked(self._bots[idx], native_chat_id(chat_jid), text)
            logger.info(f"Pool message sent to {chat_jid} as {sender} (pool bot {idx}, {len(text)} chars)")
        except Exception as e:
            logger.error(f"Failed to send pool message to {chat_jid} as {sender}: {e}")

    async def close(self):
        for bot in self._bots:
            try:
                await bot.shutdown()
            except Exception as e:
                logger.debug(f"Pool bot shutdown failed: {e}")
        self._bots.clear()


# Process-wide pool used by the module-level helpers
_pool = BotPool()


def get_bot_pool() -> BotPool:
    return _pool


async def init_bot_pool(tokens: Iterable[str], settle_delay: Optional[float] = None):
    """Initialize the process-wide pool from bot tokens."""
    if settle_delay is not None:
        _pool.settle_delay = settle_delay
    await _pool.init(tokens)


async def send_pool_message(chat_jid: str, text: str, sender: str, group_folder: str):
    await _pool.send(chat_jid, text, sender, group_folder)


def has_pool_bots() -> bool:
    return _pool.has_bots()


async def close_bot_pool():
    await _pool.close()
