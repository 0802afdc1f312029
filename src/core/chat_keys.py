"""Helpers for matching Telegram chat ids across their equivalent forms."""

from __future__ import annotations

CHANNEL_PREFIX = "-100"
CHANNEL_OFFSET = 1000000000000


def _expand_chat_id_variants(raw_chat_id: int) -> set[int]:
    """Return equivalent chat id variants (peer id, chat id, channel id)."""

    variants: set[int] = {raw_chat_id}
    if raw_chat_id < 0:
        raw_text = str(raw_chat_id)
        if raw_text.startswith(CHANNEL_PREFIX):
            # Channel/supergroup peer id: -100<channel_id>
            channel_part = raw_text[len(CHANNEL_PREFIX):]
            if channel_part.isdigit():
                variants.add(int(channel_part))
        else:
            variants.add(abs(raw_chat_id))
        return variants

    # raw_chat_id is positive: add PeerChat and PeerChannel-style ids.
    variants.add(-raw_chat_id)
    variants.add(-CHANNEL_OFFSET - raw_chat_id)
    return variants


def expand_chat_key_variants(chat_id: str) -> set[str]:
    """Expand a configured chat id to every equivalent string form.

    Non-numeric ids (e.g. usernames) are returned unchanged.
    """

    text = str(chat_id).strip()
    try:
        raw_chat_id = int(text)
    except ValueError:
        return {text}
    return {str(variant) for variant in _expand_chat_id_variants(raw_chat_id)}
