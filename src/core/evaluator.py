"""Guard evaluation pipeline.

Runs the configured guards of a group in order against one message and
returns the first blocking verdict. The pipeline never raises: unknown
guards and failing guards are logged and contribute no constraint.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from core.config import GuardConfig, ModerationConfig
from core.context import build_context, now_local
from core.guards.base import PASS, Guard, GuardResult
from core.guards.registry import GuardInfo, GuardRegistry
from core.models import IncomingMessage

LOGGER = logging.getLogger(__name__)


class GuardEngine:
    """Evaluates ordered guard configs against messages."""

    def __init__(self, registry: GuardRegistry, clock: Callable[[], datetime] = now_local) -> None:
        self._registry = registry
        self._clock = clock

    @property
    def registry(self) -> GuardRegistry:
        return self._registry

    def list_guards(self) -> List[GuardInfo]:
        return self._registry.list_all()

    def lookup_guard(self, guard_id: str) -> Optional[Guard]:
        return self._registry.lookup(guard_id)

    def evaluate(
        self,
        message: IncomingMessage,
        chat_id: str,
        sender_id: str,
        guard_configs: Iterable[GuardConfig],
        moderation_config: ModerationConfig,
        is_admin: bool,
        now: Optional[datetime] = None,
    ) -> GuardResult:
        """Return the first blocking result among enabled guards, else PASS."""

        # Admins skip every guard, so they never consume rate-limit budget either.
        if moderation_config.admin_exempt and is_admin:
            return PASS

        base = build_context(
            message,
            chat_id,
            sender_id,
            is_admin=is_admin,
            now=now if now is not None else self._clock(),
        )

        for config in guard_configs:
            if not config.enabled:
                continue
            guard = self._registry.lookup(config.guard_id)
            if guard is None:
                LOGGER.warning("Unknown guard %r configured for %s; skipping", config.guard_id, chat_id)
                continue

            try:
                result = guard.evaluate(replace(base, config=config))
            except Exception:
                # A broken rule fails open for itself only.
                LOGGER.exception("Guard %s failed for %s; treating as pass", guard.id, chat_id)
                continue

            if result.blocked:
                return result

        return PASS
