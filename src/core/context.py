"""Evaluation context builder (core domain)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.guards.base import GuardContext
from core.models import (
    EXTENDED_TEXT,
    IMAGE,
    TEXT,
    VIDEO,
    WRAPPER_KINDS,
    ContentType,
    IncomingMessage,
)


def content_type_of(message: IncomingMessage) -> Optional[ContentType]:
    """Return the content type of the first populated, non-wrapper payload."""

    for kind in message.content:
        if kind in WRAPPER_KINDS:
            continue
        try:
            return ContentType(kind)
        except ValueError:
            return None
    return None


def extract_text(message: IncomingMessage) -> str:
    """Return the message text or caption, or "" when there is none.

    Priority: plain text, extended text, image caption, video caption.
    """

    candidates = (
        (TEXT, "text"),
        (EXTENDED_TEXT, "text"),
        (IMAGE, "caption"),
        (VIDEO, "caption"),
    )
    for kind, attr in candidates:
        part = message.part(kind)
        value = getattr(part, attr, None) if part is not None else None
        if value:
            return value
    return ""


def now_local() -> datetime:
    return datetime.now().astimezone()


def build_context(
    message: IncomingMessage,
    chat_id: str,
    sender_id: str,
    is_admin: bool = False,
    now: Optional[datetime] = None,
) -> GuardContext:
    """Build the per-pass context; the guard config slice is left unset."""

    return GuardContext(
        message=message,
        chat_id=chat_id,
        sender_id=sender_id,
        content_type=content_type_of(message),
        text=extract_text(message),
        now=now if now is not None else now_local(),
        is_admin=is_admin,
    )
