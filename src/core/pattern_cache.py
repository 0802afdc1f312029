"""Compiled matcher cache for the keyword filter."""

from __future__ import annotations

import logging
import re
import threading
from typing import Hashable, Iterable, List, Sequence

LOGGER = logging.getLogger(__name__)

# "length" reproduces the historical key: only the list sizes are compared,
# so an edit that keeps the sizes reuses stale matchers. "content" keys on the
# lists themselves.
KEY_POLICIES = ("length", "content")


class PatternCache:
    """Cache of compiled keyword/pattern matchers keyed per chat."""

    def __init__(self, key_policy: str = "length") -> None:
        if key_policy not in KEY_POLICIES:
            raise ValueError(f"Unsupported keyword cache key policy: {key_policy}")
        self.key_policy = key_policy
        self._compiled: dict[Hashable, List[re.Pattern]] = {}
        self._lock = threading.Lock()

    def cache_key(self, chat_id: str, patterns: Sequence[str], keywords: Sequence[str]) -> Hashable:
        if self.key_policy == "content":
            return (chat_id, tuple(patterns), tuple(keywords))
        return (chat_id, len(patterns), len(keywords))

    def get(self, chat_id: str, patterns: Sequence[str], keywords: Sequence[str]) -> List[re.Pattern]:
        key = self.cache_key(chat_id, patterns, keywords)
        with self._lock:
            cached = self._compiled.get(key)
            if cached is not None:
                return cached
            compiled = compile_matchers(patterns, keywords)
            self._compiled[key] = compiled
            return compiled

    def clear(self) -> None:
        with self._lock:
            self._compiled.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._compiled)


def compile_matchers(patterns: Iterable[str], keywords: Iterable[str]) -> List[re.Pattern]:
    """Compile regex patterns and whole-word keywords, case-insensitive.

    Invalid patterns are skipped so one bad entry does not disable the rule.
    """

    compiled: List[re.Pattern] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            LOGGER.warning("Skipping invalid keyword pattern %r: %s", pattern, exc)
    for keyword in keywords:
        compiled.append(re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE))
    return compiled
