"""Enforcement coordinator.

This module is integration-agnostic. It evaluates a message through the
guard engine and enforces the verdict through the transport and violation
log ports: log, then (outside observation mode) delete and DM the sender.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from core.config import (
    ACTION_DELETED,
    ACTION_LOGGED,
    DEFAULT_MODERATION_CONFIG,
    GroupPolicy,
    ViolationRecord,
)
from core.context import extract_text
from core.evaluator import GuardEngine
from core.models import IncomingMessage
from core.ports import TransportPort, ViolationLogPort

LOGGER = logging.getLogger(__name__)

DEFAULT_REASON = "Message blocked by group rules."


class Moderator:
    """Owns the admin cache and DM cooldowns around the guard engine."""

    def __init__(
        self,
        engine: GuardEngine,
        transport: TransportPort,
        violation_log: ViolationLogPort,
        assistant_name: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._engine = engine
        self._transport = transport
        self._violation_log = violation_log
        self._assistant_name = assistant_name
        self._clock = clock
        self._admins: dict[str, set[str]] = {}
        self._dm_sent_at: dict[str, float] = {}
        self._longest_cooldown = 0.0

    def update_admin_cache(self, chat_id: str, admin_ids: Iterable[str]) -> None:
        self._admins[chat_id] = set(admin_ids)

    def has_admin_cache(self, chat_id: str) -> bool:
        return chat_id in self._admins

    def is_admin(self, chat_id: str, sender_id: str) -> bool:
        return sender_id in self._admins.get(chat_id, ())

    async def refresh_admin_cache(self, chat_id: str) -> None:
        """Fetch and cache the admin list; on failure the old cache stays."""

        try:
            admin_ids = await self._transport.get_admin_ids(chat_id)
        except Exception:
            LOGGER.warning("Failed to refresh admin cache for %s", chat_id, exc_info=True)
            return
        self.update_admin_cache(chat_id, admin_ids)
        LOGGER.debug("Admin cache refreshed for %s (%s admins)", chat_id, len(admin_ids))

    def prune_dm_cooldowns(self) -> int:
        """Forget DM stamps that no longer hold back any cooldown seen so far."""

        cutoff = self._clock() - self._longest_cooldown
        expired = [sender for sender, sent_at in self._dm_sent_at.items() if sent_at <= cutoff]
        for sender in expired:
            del self._dm_sent_at[sender]
        if expired:
            LOGGER.debug("Pruned %s expired DM cooldowns", len(expired))
        return len(expired)

    def dm_cooldown_count(self) -> int:
        return len(self._dm_sent_at)

    def _is_own_reply(self, message: IncomingMessage) -> bool:
        # from_self is true for everything the account sends, including the
        # owner's own messages; only prefixed assistant replies are skipped.
        if not message.from_self:
            return False
        return extract_text(message).startswith(f"{self._assistant_name}:")

    async def moderate(self, message: IncomingMessage, policy: Optional[GroupPolicy]) -> bool:
        """Evaluate and enforce one message. Returns True if it was removed."""

        if not message.content:
            return False
        if self._is_own_reply(message):
            return False
        if not message.is_group:
            return False
        if policy is None or not policy.guards:
            return False

        config = policy.moderation or DEFAULT_MODERATION_CONFIG
        chat_id = message.chat_id
        sender_id = message.sender_id
        result = self._engine.evaluate(
            message,
            chat_id,
            sender_id,
            policy.guards,
            config,
            self.is_admin(chat_id, sender_id),
        )
        if not result.blocked:
            return False

        guard_id = result.guard_id or "unknown"
        reason = result.reason or DEFAULT_REASON

        # Violations are always logged, whether or not they are enforced.
        record = ViolationRecord(
            chat_id=chat_id,
            sender_id=sender_id,
            guard_id=guard_id,
            action=ACTION_LOGGED if config.observation_mode else ACTION_DELETED,
            reason=reason,
            message_id=message.message_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        try:
            self._violation_log.log_violation(record)
        except Exception:
            LOGGER.exception("Failed to log violation for %s in %s", sender_id, chat_id)

        if config.observation_mode:
            LOGGER.info(
                "Guard violation in %s by %s (%s: %s); observation mode, not enforcing",
                chat_id,
                sender_id,
                guard_id,
                reason,
            )
            return False

        try:
            await self._transport.delete_message(chat_id, message.message_id)
            LOGGER.info("Message %s in %s deleted by %s", message.message_id, chat_id, guard_id)
        except Exception:
            LOGGER.error("Failed to delete message %s in %s", message.message_id, chat_id, exc_info=True)

        await self._dm_sender(sender_id, reason, config.dm_cooldown_seconds)
        return True

    async def _dm_sender(self, sender_id: str, reason: str, cooldown_seconds: int) -> None:
        now = self._clock()
        self._longest_cooldown = max(self._longest_cooldown, cooldown_seconds)
        last_dm = self._dm_sent_at.get(sender_id)
        if last_dm is not None and now - last_dm < cooldown_seconds:
            LOGGER.debug("DM cooldown active for %s, skipping", sender_id)
            return

        try:
            await self._transport.send_message(sender_id, f"{self._assistant_name}: {reason}")
        except Exception:
            LOGGER.warning("Failed to DM %s", sender_id, exc_info=True)
            return
        self._dm_sent_at[sender_id] = now
        LOGGER.debug("Violation DM sent to %s", sender_id)
