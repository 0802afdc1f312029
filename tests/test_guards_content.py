from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from core.config import GuardConfig
from core.context import build_context
from core.guards.base import GuardContext
from core.guards.content import (
    MediaOnlyGuard,
    NoImagesGuard,
    NoStickersGuard,
    TextOnlyGuard,
    VideoOnlyGuard,
    VoiceOnlyGuard,
)
from core.guards.property import MaxTextLengthGuard, NoForwardedGuard, NoLinksGuard
from core.models import (
    AUDIO,
    DOCUMENT,
    EXTENDED_TEXT,
    IMAGE,
    STICKER,
    TEXT,
    VIDEO,
    ContentPart,
    IncomingMessage,
)

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _ctx(content: dict, guard_id: str = "", params: Optional[dict] = None) -> GuardContext:
    message = IncomingMessage(message_id="1", chat_id="group", sender_id="alice", content=content)
    base = build_context(message, "group", "alice", now=NOW)
    return replace(base, config=GuardConfig(guard_id=guard_id, params=params or {}))


def test_text_only_guard() -> None:
    guard = TextOnlyGuard()
    assert not guard.evaluate(_ctx({TEXT: ContentPart(text="hi")})).blocked
    assert not guard.evaluate(_ctx({EXTENDED_TEXT: ContentPart(text="hi")})).blocked

    result = guard.evaluate(_ctx({IMAGE: ContentPart()}))
    assert result.blocked
    assert result.guard_id == "text-only"
    assert result.reason == "Only text messages are allowed in this group."


def test_content_type_guards_pass_unset_content() -> None:
    ctx = _ctx({})
    for guard in (TextOnlyGuard(), VideoOnlyGuard(), VoiceOnlyGuard(), MediaOnlyGuard()):
        assert not guard.evaluate(ctx).blocked


def test_video_only_guard() -> None:
    guard = VideoOnlyGuard()
    assert not guard.evaluate(_ctx({VIDEO: ContentPart()})).blocked
    assert guard.evaluate(_ctx({TEXT: ContentPart(text="hi")})).blocked


def test_voice_only_requires_push_to_talk() -> None:
    guard = VoiceOnlyGuard()
    assert not guard.evaluate(_ctx({AUDIO: ContentPart(push_to_talk=True)})).blocked
    assert guard.evaluate(_ctx({AUDIO: ContentPart(push_to_talk=False)})).blocked
    assert guard.evaluate(_ctx({TEXT: ContentPart(text="hi")})).blocked


def test_media_only_guard() -> None:
    guard = MediaOnlyGuard()
    for kind in (IMAGE, VIDEO, AUDIO, DOCUMENT, STICKER):
        assert not guard.evaluate(_ctx({kind: ContentPart()})).blocked
    result = guard.evaluate(_ctx({TEXT: ContentPart(text="hi")}))
    assert result.blocked
    assert result.guard_id == "media-only"


def test_no_stickers_and_no_images() -> None:
    assert NoStickersGuard().evaluate(_ctx({STICKER: ContentPart()})).blocked
    assert not NoStickersGuard().evaluate(_ctx({IMAGE: ContentPart()})).blocked
    assert NoImagesGuard().evaluate(_ctx({IMAGE: ContentPart()})).blocked
    assert not NoImagesGuard().evaluate(_ctx({STICKER: ContentPart()})).blocked
    assert not NoImagesGuard().evaluate(_ctx({})).blocked


def test_no_links_heuristic() -> None:
    guard = NoLinksGuard()
    assert guard.evaluate(_ctx({TEXT: ContentPart(text="visit http://example.com")})).blocked
    assert guard.evaluate(_ctx({TEXT: ContentPart(text="example.com no scheme but has tld")})).blocked
    assert guard.evaluate(_ctx({TEXT: ContentPart(text="go to www.example")})).blocked
    assert not guard.evaluate(_ctx({TEXT: ContentPart(text="hello world")})).blocked


def test_no_links_checks_image_caption() -> None:
    result = NoLinksGuard().evaluate(_ctx({IMAGE: ContentPart(caption="see https://x.org/a")}))
    assert result.blocked
    assert result.reason == "Links are not allowed in this group."


def test_no_links_uses_provider_matched_link() -> None:
    ctx = _ctx({EXTENDED_TEXT: ContentPart(text="click here", matched_text="https://t.me/joinchat/x")})
    assert NoLinksGuard().evaluate(ctx).blocked


def test_no_forwarded_guard() -> None:
    guard = NoForwardedGuard()
    assert guard.evaluate(_ctx({EXTENDED_TEXT: ContentPart(text="fwd", is_forwarded=True)})).blocked
    assert guard.evaluate(_ctx({VIDEO: ContentPart(is_forwarded=True)})).blocked
    assert not guard.evaluate(_ctx({EXTENDED_TEXT: ContentPart(text="own words")})).blocked
    assert not guard.evaluate(_ctx({})).blocked


def test_max_text_length_guard() -> None:
    guard = MaxTextLengthGuard()
    assert not guard.evaluate(_ctx({TEXT: ContentPart(text="x" * 2000)})).blocked
    assert guard.evaluate(_ctx({TEXT: ContentPart(text="x" * 2001)})).blocked

    result = guard.evaluate(_ctx({TEXT: ContentPart(text="abcdef")}, params={"maxLength": 5}))
    assert result.blocked
    assert result.reason == "Messages over 5 characters are not allowed."


def test_max_text_length_bad_param_uses_default() -> None:
    guard = MaxTextLengthGuard()
    assert not guard.evaluate(_ctx({TEXT: ContentPart(text="short")}, params={"maxLength": "lots"})).blocked
    assert not guard.evaluate(_ctx({TEXT: ContentPart(text="short")}, params={"maxLength": 0})).blocked


def test_stateless_guard_is_idempotent() -> None:
    guard = MaxTextLengthGuard()
    ctx = _ctx({TEXT: ContentPart(text="abcdef")}, params={"maxLength": 3})
    assert guard.evaluate(ctx) == guard.evaluate(ctx)
