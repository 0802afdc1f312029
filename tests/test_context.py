from __future__ import annotations

from datetime import datetime, timezone

from core.context import build_context, content_type_of, extract_text
from core.models import (
    AUDIO,
    CONTEXT_INFO,
    EXTENDED_TEXT,
    IMAGE,
    SENDER_KEY_DISTRIBUTION,
    STICKER,
    TEXT,
    VIDEO,
    ContentPart,
    ContentType,
    IncomingMessage,
)


def _message(content: dict) -> IncomingMessage:
    return IncomingMessage(message_id="1", chat_id="group", sender_id="alice", content=content)


def test_content_type_skips_wrapper_kinds() -> None:
    message = _message(
        {
            CONTEXT_INFO: ContentPart(),
            SENDER_KEY_DISTRIBUTION: ContentPart(),
            STICKER: ContentPart(),
        }
    )
    assert content_type_of(message) == ContentType.STICKER


def test_content_type_unset_without_payload() -> None:
    assert content_type_of(_message({})) is None
    assert content_type_of(_message({CONTEXT_INFO: ContentPart()})) is None


def test_content_type_unknown_kind_is_unset() -> None:
    assert content_type_of(_message({"poll": ContentPart()})) is None


def test_extract_text_priority() -> None:
    assert extract_text(_message({TEXT: ContentPart(text="plain")})) == "plain"
    assert extract_text(_message({EXTENDED_TEXT: ContentPart(text="extended")})) == "extended"
    assert extract_text(_message({IMAGE: ContentPart(caption="photo caption")})) == "photo caption"
    assert extract_text(_message({VIDEO: ContentPart(caption="clip caption")})) == "clip caption"


def test_extract_text_first_non_empty_wins() -> None:
    message = _message(
        {
            TEXT: ContentPart(text=""),
            IMAGE: ContentPart(caption="caption"),
        }
    )
    assert extract_text(message) == "caption"


def test_extract_text_defaults_to_empty_string() -> None:
    assert extract_text(_message({})) == ""
    assert extract_text(_message({AUDIO: ContentPart(push_to_talk=True)})) == ""


def test_build_context_uses_given_instant() -> None:
    now = datetime(2024, 1, 1, 12, 30, tzinfo=timezone.utc)
    ctx = build_context(_message({TEXT: ContentPart(text="hi")}), "group", "alice", is_admin=True, now=now)

    assert ctx.now == now
    assert ctx.text == "hi"
    assert ctx.content_type == ContentType.TEXT
    assert ctx.is_admin is True
    assert ctx.config is None
    assert ctx.params == {}


def test_build_context_defaults_to_aware_now() -> None:
    ctx = build_context(_message({}), "group", "alice")
    assert ctx.now.tzinfo is not None
    assert ctx.text == ""
    assert ctx.content_type is None
