"""Communication sub-core — Telegram message handling without the transport.

- Inbound: display names, mention rewriting, reply folding, placeholders, gating
- Outbound: chunked delivery under the 4096-character limit
- Commands: operator command replies
"""

from .inbound import (
    MediaKind,
    NormalizedEvent,
    fold_reply_context,
    media_placeholder,
    normalize_media_message,
    normalize_text_message,
    rewrite_mentions,
    sender_display_name,
)
from .outbound import MAX_MESSAGE_LENGTH, chunk_text, send_chunked, utf16_length

__all__ = [
    # Inbound
    "MediaKind",
    "NormalizedEvent",
    "fold_reply_context",
    "media_placeholder",
    "normalize_media_message",
    "normalize_text_message",
    "rewrite_mentions",
    "sender_display_name",
    # Outbound
    "MAX_MESSAGE_LENGTH",
    "chunk_text",
    "send_chunked",
    "utf16_length",
]
