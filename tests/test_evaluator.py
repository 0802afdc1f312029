from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from core.config import GuardConfig, ModerationConfig
from core.evaluator import GuardEngine
from core.guards.base import PASS, Guard, GuardContext, GuardResult
from core.guards.registry import GuardRegistry, build_default_registry
from core.models import STICKER, TEXT, ContentPart, IncomingMessage
from core.pattern_cache import PatternCache
from core.rate_state import RateStore

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class SpyGuard(Guard):
    """Records every context it sees and returns a fixed verdict."""

    def __init__(self, guard_id: str, blocked: bool) -> None:
        self.id = guard_id
        self.name = guard_id
        self.description = "test guard"
        self._blocked = blocked
        self.seen: list[GuardContext] = []

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        self.seen.append(ctx)
        if self._blocked:
            return self.block(f"{self.id} says no")
        return PASS


class ExplodingGuard(Guard):
    id = "exploding"
    name = "Exploding"
    description = "always raises"

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        raise RuntimeError("boom")


def _message(text: str = "hello") -> IncomingMessage:
    return IncomingMessage(
        message_id="1",
        chat_id="group",
        sender_id="alice",
        content={TEXT: ContentPart(text=text)},
    )


def _evaluate(engine: GuardEngine, configs, is_admin: bool = False, moderation=None, now=NOW, message=None):
    return engine.evaluate(
        message or _message(),
        "group",
        "alice",
        configs,
        moderation or ModerationConfig(),
        is_admin,
        now=now,
    )


def test_disabled_guard_is_never_invoked() -> None:
    spy = SpyGuard("spy", blocked=True)
    engine = GuardEngine(GuardRegistry([spy]))

    result = _evaluate(engine, [GuardConfig(guard_id="spy", enabled=False)])

    assert not result.blocked
    assert spy.seen == []


def test_admin_exemption_short_circuits_everything() -> None:
    spy = SpyGuard("spy", blocked=True)
    engine = GuardEngine(GuardRegistry([spy]))

    result = _evaluate(engine, [GuardConfig(guard_id="spy")], is_admin=True)

    assert result == PASS
    assert spy.seen == []


def test_admin_not_exempt_when_disabled() -> None:
    spy = SpyGuard("spy", blocked=True)
    engine = GuardEngine(GuardRegistry([spy]))

    result = _evaluate(
        engine,
        [GuardConfig(guard_id="spy")],
        is_admin=True,
        moderation=ModerationConfig(admin_exempt=False),
    )

    assert result.blocked
    assert spy.seen[0].is_admin is True


def test_admin_messages_do_not_consume_rate_budget() -> None:
    store = RateStore()
    engine = GuardEngine(build_default_registry(store, PatternCache()))
    configs = [GuardConfig(guard_id="slow-mode")]

    for offset in range(3):
        assert not _evaluate(engine, configs, is_admin=True, now=NOW + timedelta(seconds=offset)).blocked

    assert len(store) == 0
    assert not _evaluate(engine, configs, now=NOW + timedelta(seconds=5)).blocked


def test_first_blocking_guard_in_config_order_wins() -> None:
    guard_a = SpyGuard("guard-a", blocked=True)
    guard_b = SpyGuard("guard-b", blocked=True)
    engine = GuardEngine(GuardRegistry([guard_a, guard_b]))

    forward = _evaluate(engine, [GuardConfig(guard_id="guard-a"), GuardConfig(guard_id="guard-b")])
    reverse = _evaluate(engine, [GuardConfig(guard_id="guard-b"), GuardConfig(guard_id="guard-a")])

    assert forward.guard_id == "guard-a"
    assert reverse.guard_id == "guard-b"


def test_guards_after_a_block_are_not_invoked() -> None:
    store = RateStore()
    engine = GuardEngine(build_default_registry(store, PatternCache()))
    configs = [GuardConfig(guard_id="no-links"), GuardConfig(guard_id="no-spam")]

    result = _evaluate(engine, configs, message=_message("see example.com"))

    assert result.guard_id == "no-links"
    assert len(store) == 0


def test_passing_stateful_guard_still_records() -> None:
    store = RateStore()
    engine = GuardEngine(build_default_registry(store, PatternCache()))
    configs = [GuardConfig(guard_id="no-spam"), GuardConfig(guard_id="no-links")]

    result = _evaluate(engine, configs, message=_message("see example.com"))

    assert result.guard_id == "no-links"
    assert store.recent_count("group", "alice", 10, NOW.timestamp()) == 1


def test_unknown_guard_is_skipped_and_logged(caplog) -> None:
    spy = SpyGuard("spy", blocked=True)
    engine = GuardEngine(GuardRegistry([spy]))

    with caplog.at_level(logging.WARNING, logger="core.evaluator"):
        result = _evaluate(engine, [GuardConfig(guard_id="does-not-exist"), GuardConfig(guard_id="spy")])

    assert result.guard_id == "spy"
    assert "does-not-exist" in caplog.text


def test_failing_guard_fails_open_for_itself_only() -> None:
    spy = SpyGuard("spy", blocked=True)
    engine = GuardEngine(GuardRegistry([ExplodingGuard(), spy]))

    result = _evaluate(engine, [GuardConfig(guard_id="exploding"), GuardConfig(guard_id="spy")])

    assert result.guard_id == "spy"


def test_no_configs_pass() -> None:
    engine = GuardEngine(GuardRegistry())
    assert _evaluate(engine, []) == PASS


def test_all_guards_share_one_instant_and_get_their_own_config() -> None:
    first = SpyGuard("first", blocked=False)
    second = SpyGuard("second", blocked=False)
    calls = []

    def clock() -> datetime:
        calls.append(1)
        return NOW + timedelta(seconds=len(calls))

    engine = GuardEngine(GuardRegistry([first, second]), clock=clock)
    configs = [
        GuardConfig(guard_id="first", params={"n": 1}),
        GuardConfig(guard_id="second", params={"n": 2}),
    ]

    result = engine.evaluate(_message(), "group", "alice", configs, ModerationConfig(), False)

    assert not result.blocked
    assert len(calls) == 1
    assert first.seen[0].now == second.seen[0].now
    assert first.seen[0].params == {"n": 1}
    assert second.seen[0].params == {"n": 2}


def test_content_guard_through_engine() -> None:
    engine = GuardEngine(build_default_registry(RateStore(), PatternCache()))
    sticker = IncomingMessage(message_id="2", chat_id="group", sender_id="alice", content={STICKER: ContentPart()})

    result = _evaluate(engine, [GuardConfig(guard_id="no-stickers")], message=sticker)

    assert result.blocked
    assert result.reason == "Stickers are not allowed in this group."


def test_catalog_and_lookup() -> None:
    engine = GuardEngine(build_default_registry(RateStore(), PatternCache()))
    assert engine.lookup_guard("keyword-filter") is not None
    assert engine.lookup_guard("missing") is None
    assert engine.list_guards()[0].id == "text-only"
