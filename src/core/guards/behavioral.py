"""Behavioral guards: time of day, posting rate, sender allowlist."""

from __future__ import annotations

from core.guards.base import (
    PASS,
    Guard,
    GuardContext,
    GuardResult,
    format_number,
    int_param,
    list_param,
    number_param,
)
from core.rate_state import RateStore


def in_quiet_hours(hour: int, start_hour: int, end_hour: int) -> bool:
    """Return True if ``hour`` falls in [start, end), wrapping past midnight."""

    if start_hour < end_hour:
        return start_hour <= hour < end_hour
    return hour >= start_hour or hour < end_hour


class QuietHoursGuard(Guard):
    id = "quiet-hours"
    name = "Quiet Hours"
    description = (
        "Block messages during specified hours. "
        "Set params.startHour and params.endHour (0-23, default: 22-07)."
    )

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        start_hour = int_param(ctx.params, "startHour", 22, allow_zero=True)
        end_hour = int_param(ctx.params, "endHour", 7, allow_zero=True)
        if in_quiet_hours(ctx.now.hour, start_hour, end_hour):
            return self.block(
                f"This group is in quiet hours ({start_hour}:00 - {end_hour}:00). Please try again later."
            )
        return PASS


class SlowModeGuard(Guard):
    id = "slow-mode"
    name = "Slow Mode"
    description = "Limit users to 1 message per N minutes. Set params.intervalMinutes (default: 5)."

    def __init__(self, rate_store: RateStore) -> None:
        self._rate_store = rate_store

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        interval_minutes = number_param(ctx.params, "intervalMinutes", 5)
        # The message is recorded whether or not it ends up blocked.
        recent = self._rate_store.count_and_record(
            ctx.chat_id, ctx.sender_id, interval_minutes * 60, ctx.now.timestamp()
        )
        if recent >= 1:
            return self.block(
                f"Slow mode is active. You can send 1 message every {format_number(interval_minutes)} minutes."
            )
        return PASS


class NoSpamGuard(Guard):
    id = "no-spam"
    name = "No Spam (Rate Limit)"
    description = (
        "Block rapid-fire messages. "
        "Set params.maxMessages (default: 5) and params.windowSeconds (default: 10)."
    )

    def __init__(self, rate_store: RateStore) -> None:
        self._rate_store = rate_store

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        max_messages = int_param(ctx.params, "maxMessages", 5)
        window_seconds = number_param(ctx.params, "windowSeconds", 10)
        recent = self._rate_store.count_and_record(
            ctx.chat_id, ctx.sender_id, window_seconds, ctx.now.timestamp()
        )
        if recent >= max_messages:
            return self.block(
                f"You're sending messages too quickly. Max {max_messages} messages per {format_number(window_seconds)} seconds."
            )
        return PASS


class ApprovedSendersGuard(Guard):
    id = "approved-senders"
    name = "Approved Senders Only"
    description = "Only whitelisted senders can post. Set params.allowedJids as string array."

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        allowed = list_param(ctx.params, "allowedJids")
        if not allowed:
            return PASS
        if ctx.sender_id not in allowed:
            return self.block("You are not on the approved senders list for this group.")
        return PASS


def behavioral_guards(rate_store: RateStore) -> list[Guard]:
    return [
        QuietHoursGuard(),
        SlowModeGuard(rate_store),
        NoSpamGuard(rate_store),
        ApprovedSendersGuard(),
    ]
