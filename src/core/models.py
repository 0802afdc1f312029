"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific message types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional

# Payload kinds an adapter may put into IncomingMessage.content.
TEXT = "text"
EXTENDED_TEXT = "extended_text"
IMAGE = "image"
VIDEO = "video"
AUDIO = "audio"
DOCUMENT = "document"
DOCUMENT_WITH_CAPTION = "document_with_caption"
STICKER = "sticker"

# Envelope kinds that travel next to the real payload but carry no content.
CONTEXT_INFO = "context_info"
SENDER_KEY_DISTRIBUTION = "sender_key_distribution"
WRAPPER_KINDS = frozenset({CONTEXT_INFO, SENDER_KEY_DISTRIBUTION})


class ContentType(str, Enum):
    """Closed set of content kinds a guard can reason about."""

    TEXT = TEXT
    EXTENDED_TEXT = EXTENDED_TEXT
    IMAGE = IMAGE
    VIDEO = VIDEO
    AUDIO = AUDIO
    DOCUMENT = DOCUMENT
    DOCUMENT_WITH_CAPTION = DOCUMENT_WITH_CAPTION
    STICKER = STICKER


TEXT_TYPES = frozenset({ContentType.TEXT, ContentType.EXTENDED_TEXT})
MEDIA_TYPES = frozenset(
    {
        ContentType.IMAGE,
        ContentType.VIDEO,
        ContentType.AUDIO,
        ContentType.DOCUMENT,
        ContentType.DOCUMENT_WITH_CAPTION,
        ContentType.STICKER,
    }
)


@dataclass(frozen=True)
class ContentPart:
    """One populated payload kind of a message plus its metadata."""

    text: Optional[str] = None
    caption: Optional[str] = None
    is_forwarded: bool = False
    # Link the provider already detected in the text (e.g. a URL entity).
    matched_text: Optional[str] = None
    push_to_talk: bool = False


@dataclass(frozen=True)
class IncomingMessage:
    """Transport-neutral view of a chat message."""

    message_id: str
    chat_id: str
    sender_id: str
    from_self: bool = False
    is_group: bool = True
    content: Mapping[str, ContentPart] = field(default_factory=dict)
    date: Optional[datetime] = None

    def part(self, kind: str) -> Optional[ContentPart]:
        return self.content.get(kind)
