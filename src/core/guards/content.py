"""Content-type guards: which kinds of message a group accepts."""

from __future__ import annotations

from core.guards.base import PASS, Guard, GuardContext, GuardResult
from core.models import AUDIO, MEDIA_TYPES, TEXT_TYPES, ContentType


class TextOnlyGuard(Guard):
    id = "text-only"
    name = "Text Only"
    description = "Only text messages allowed. Blocks media, stickers, documents, etc."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        # Messages without content are system events; they are never moderated.
        if ctx.content_type is None or ctx.content_type in TEXT_TYPES:
            return PASS
        return self.block("Only text messages are allowed in this group.")


class VideoOnlyGuard(Guard):
    id = "video-only"
    name = "Video Only"
    description = "Only video messages allowed."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        if ctx.content_type is None or ctx.content_type == ContentType.VIDEO:
            return PASS
        return self.block("Only video messages are allowed in this group.")


class VoiceOnlyGuard(Guard):
    id = "voice-only"
    name = "Voice Only"
    description = "Only voice notes allowed."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        if ctx.content_type is None:
            return PASS
        if ctx.content_type == ContentType.AUDIO:
            audio = ctx.message.part(AUDIO)
            if audio is not None and audio.push_to_talk:
                return PASS
        return self.block("Only voice notes are allowed in this group.")


class MediaOnlyGuard(Guard):
    id = "media-only"
    name = "Media Only"
    description = "Only media messages (images, videos, audio, documents) allowed. Blocks text."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        if ctx.content_type is None or ctx.content_type in MEDIA_TYPES:
            return PASS
        return self.block("Only media messages are allowed in this group.")


class NoStickersGuard(Guard):
    id = "no-stickers"
    name = "No Stickers"
    description = "Block sticker messages."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        if ctx.content_type == ContentType.STICKER:
            return self.block("Stickers are not allowed in this group.")
        return PASS


class NoImagesGuard(Guard):
    id = "no-images"
    name = "No Images"
    description = "Block image messages."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        if ctx.content_type == ContentType.IMAGE:
            return self.block("Images are not allowed in this group.")
        return PASS


def content_guards() -> list[Guard]:
    return [
        TextOnlyGuard(),
        VideoOnlyGuard(),
        VoiceOnlyGuard(),
        MediaOnlyGuard(),
        NoStickersGuard(),
        NoImagesGuard(),
    ]
