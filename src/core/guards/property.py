"""Message-property guards: links, forwards, length."""

from __future__ import annotations

import re

from core.guards.base import PASS, Guard, GuardContext, GuardResult, int_param
from core.models import AUDIO, DOCUMENT, EXTENDED_TEXT, IMAGE, STICKER, VIDEO

URL_PATTERN = re.compile(
    r"https?://\S+|www\.\S+|\S+\.(com|org|net|io|co|me|info|xyz)\b",
    re.IGNORECASE,
)

# Payload kinds that carry a forwarded flag.
FORWARDABLE_KINDS = (EXTENDED_TEXT, IMAGE, VIDEO, AUDIO, DOCUMENT, STICKER)


class NoLinksGuard(Guard):
    id = "no-links"
    name = "No Links"
    description = "Block messages containing URLs."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        if ctx.text and URL_PATTERN.search(ctx.text):
            return self.block("Links are not allowed in this group.")
        extended = ctx.message.part(EXTENDED_TEXT)
        if extended is not None and extended.matched_text:
            return self.block("Links are not allowed in this group.")
        return PASS


class NoForwardedGuard(Guard):
    id = "no-forwarded"
    name = "No Forwarded Messages"
    description = "Block forwarded messages."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        for kind in FORWARDABLE_KINDS:
            part = ctx.message.part(kind)
            if part is not None and part.is_forwarded:
                return self.block("Forwarded messages are not allowed in this group.")
        return PASS


class MaxTextLengthGuard(Guard):
    id = "max-text-length"
    name = "Max Text Length"
    description = "Block text messages exceeding a character limit. Set params.maxLength (default: 2000)."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        if not ctx.text:
            return PASS
        max_length = int_param(ctx.params, "maxLength", 2000)
        if len(ctx.text) > max_length:
            return self.block(f"Messages over {max_length} characters are not allowed.")
        return PASS


def property_guards() -> list[Guard]:
    return [NoLinksGuard(), NoForwardedGuard(), MaxTextLengthGuard()]
