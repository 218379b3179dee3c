"""Outbound message delivery — length-limited chunked sends.

Telegram rejects messages longer than 4096 UTF-16 code units. Long replies
are cut into consecutive slices that fit and sent one after another, so
the recipient sees them in order and concatenating them gives back the
original text.
"""

import logging

logger = logging.getLogger("courier.outbound")

MAX_MESSAGE_LENGTH = 4096


def utf16_length(text: str) -> int:
    """Length of text as Telegram counts it (UTF-16 code units)."""
    return len(text.encode("utf-16-le")) // 2


def chunk_text(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split text into consecutive slices of at most ``limit`` UTF-16 units.

    Slices are filled up to ``limit``; a character outside the BMP that
    would straddle the boundary starts the next slice instead, so no
    surrogate pair is ever split. Text that already fits (including the
    empty string) is returned as a single chunk.

    Args:
        text: Message text to split
        limit: Maximum UTF-16 length per chunk (default: 4096 for Telegram)

    Returns:
        List of message chunks
    """
    if limit <= 0:
        raise ValueError("limit must be positive")
    if utf16_length(text) <= limit:
        return [text]

    chunks = []
    start = 0
    units = 0
    for i, ch in enumerate(text):
        width = 2 if ord(ch) > 0xFFFF else 1
        if units + width > limit and i > start:
            chunks.append(text[start:i])
            start = i
            units = 0
        units += width
    chunks.append(text[start:])
    return chunks


async def send_chunked(bot, chat_id: str, text: str, limit: int = MAX_MESSAGE_LENGTH) -> int:
    """Send text through ``bot`` in order, one chunk at a time.

    Each chunk is awaited before the next starts. The first failure stops
    the remaining chunks and is re-raised; chunks already delivered cannot
    be taken back.

    Returns:
        Number of chunks sent.
    """
    chunks = chunk_text(text, limit)
    sent = 0
    for chunk in chunks:
        try:
            await bot.send_message(chat_id=chat_id, text=chunk)
        except Exception:
            if sent:
                logger.warning(
                    f"Partial delivery to {chat_id}: {sent}/{len(chunks)} chunks sent before failure"
                )
            raise
        sent += 1
    return sent
