"""In-memory rate state for the behavioral guards.

The store is best-effort auxiliary state: it lives in process memory, is
swept periodically, and starts empty after a restart.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Callable, Optional, Tuple

LOGGER = logging.getLogger(__name__)

RETENTION_SECONDS = 10 * 60
SWEEP_INTERVAL_SECONDS = 10 * 60

RateKey = Tuple[str, str]


class RateStore:
    """Recent message instants per (chat_id, sender_id)."""

    def __init__(self, retention_seconds: float = RETENTION_SECONDS) -> None:
        self._retention = retention_seconds
        self._times: dict[RateKey, list[float]] = {}
        self._lock = threading.Lock()

    def count_and_record(self, chat_id: str, sender_id: str, window_seconds: float, now: float) -> int:
        """Count entries newer than ``now - window_seconds``, then record ``now``.

        Both steps happen under one lock so concurrent passes for the same key
        never lose an append or double count.
        """

        key = (chat_id, sender_id)
        cutoff = now - window_seconds
        with self._lock:
            times = self._times.setdefault(key, [])
            recent = sum(1 for ts in times if ts > cutoff)
            times.append(now)
        return recent

    def recent_count(self, chat_id: str, sender_id: str, window_seconds: float, now: float) -> int:
        cutoff = now - window_seconds
        with self._lock:
            times = self._times.get((chat_id, sender_id), [])
            return sum(1 for ts in times if ts > cutoff)

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop entries older than the retention window; return keys removed."""

        if now is None:
            now = time.time()
        cutoff = now - self._retention
        removed = 0
        with self._lock:
            for key in list(self._times):
                kept = [ts for ts in self._times[key] if ts > cutoff]
                if kept:
                    self._times[key] = kept
                else:
                    del self._times[key]
                    removed += 1
        return removed

    def clear(self) -> None:
        with self._lock:
            self._times.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._times)


async def run_sweeper(
    store: RateStore,
    interval_seconds: float = SWEEP_INTERVAL_SECONDS,
    on_sweep: Optional[Callable[[], object]] = None,
) -> None:
    """Sweep ``store`` forever; cancel the task to stop it.

    ``on_sweep`` runs after every pass so other in-memory maps (the DM
    cooldowns) can be pruned on the same schedule.
    """

    while True:
        await asyncio.sleep(interval_seconds)
        removed = store.sweep()
        if removed:
            LOGGER.debug("Rate state sweep removed %s idle keys", removed)
        if on_sweep is not None:
            try:
                on_sweep()
            except Exception:
                LOGGER.exception("Sweep callback failed")
