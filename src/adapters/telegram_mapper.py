"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the guard engine.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message
from telethon.tl.types import MessageEntityTextUrl, MessageEntityUrl, MessageMediaWebPage

from core.models import (
    AUDIO,
    CONTEXT_INFO,
    DOCUMENT,
    DOCUMENT_WITH_CAPTION,
    EXTENDED_TEXT,
    IMAGE,
    STICKER,
    TEXT,
    VIDEO,
    ContentPart,
    IncomingMessage,
)


def _matched_link(message: Message) -> Optional[str]:
    """Return the first link Telegram itself detected in the text, if any."""

    if not getattr(message, "entities", None):
        return None
    # get_entities_text handles Telegram's UTF-16 offsets for us.
    for entity, inner_text in message.get_entities_text():
        if isinstance(entity, MessageEntityTextUrl):
            return entity.url
        if isinstance(entity, MessageEntityUrl):
            return inner_text
    return None


def _media_part(message: Message, text: str, forwarded: bool) -> Optional[tuple[str, ContentPart]]:
    media = getattr(message, "media", None)
    # Telethon's photo/document/video helpers fall back to the link preview,
    # so a text message with a preview would otherwise read as media.
    if media is None or isinstance(media, MessageMediaWebPage):
        return None

    caption = text or None
    # Stickers, voice notes, videos and audio are all documents underneath,
    # so the specific kinds are checked before the generic one.
    if getattr(message, "sticker", None):
        return STICKER, ContentPart(is_forwarded=forwarded)
    if getattr(message, "voice", None):
        return AUDIO, ContentPart(is_forwarded=forwarded, push_to_talk=True)
    if getattr(message, "video_note", None) or getattr(message, "video", None) or getattr(message, "gif", None):
        return VIDEO, ContentPart(caption=caption, is_forwarded=forwarded)
    if getattr(message, "audio", None):
        return AUDIO, ContentPart(caption=caption, is_forwarded=forwarded)
    if getattr(message, "photo", None):
        return IMAGE, ContentPart(caption=caption, is_forwarded=forwarded)
    if getattr(message, "document", None):
        if caption:
            return DOCUMENT_WITH_CAPTION, ContentPart(caption=caption, is_forwarded=forwarded)
        return DOCUMENT, ContentPart(is_forwarded=forwarded)
    return None


def build_message(message: Message) -> IncomingMessage:
    """Build a core IncomingMessage from a Telethon Message."""

    text = message.raw_text or ""
    forwarded = getattr(message, "fwd_from", None) is not None

    content: dict[str, ContentPart] = {}
    if getattr(message, "reply_to", None) is not None:
        content[CONTEXT_INFO] = ContentPart()

    media = _media_part(message, text, forwarded)
    if media is not None:
        kind, part = media
        content[kind] = part
    elif text:
        if getattr(message, "entities", None):
            content[EXTENDED_TEXT] = ContentPart(
                text=text,
                is_forwarded=forwarded,
                matched_text=_matched_link(message),
            )
        else:
            # Telegram keeps no forward flag on bare text parts; the extended
            # form is used whenever a forward header is present.
            kind = EXTENDED_TEXT if forwarded else TEXT
            content[kind] = ContentPart(text=text, is_forwarded=forwarded)
    else:
        # Polls, locations, service messages: nothing the guards moderate.
        content.pop(CONTEXT_INFO, None)

    sender_id = message.sender_id if message.sender_id is not None else message.chat_id

    return IncomingMessage(
        message_id=str(message.id),
        chat_id=str(message.chat_id),
        sender_id=str(sender_id),
        from_self=bool(getattr(message, "out", False)),
        is_group=bool(getattr(message, "is_group", False)),
        content=content,
        date=message.date,
    )
