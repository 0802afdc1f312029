"""Keyword and regex content filter."""

from __future__ import annotations

from core.guards.base import PASS, Guard, GuardContext, GuardResult, list_param
from core.pattern_cache import PatternCache


class KeywordFilterGuard(Guard):
    id = "keyword-filter"
    name = "Keyword Filter"
    description = (
        "Block messages matching keyword/regex patterns. "
        "Set params.keywords (string[]) and/or params.patterns (regex string[])."
    )

    def __init__(self, pattern_cache: PatternCache) -> None:
        self._cache = pattern_cache

    def evaluate(self, ctx: GuardContext) -> GuardResult:
        if not ctx.text:
            return PASS
        patterns = list_param(ctx.params, "patterns")
        keywords = list_param(ctx.params, "keywords")
        for matcher in self._cache.get(ctx.chat_id, patterns, keywords):
            if matcher.search(ctx.text):
                return self.block("Your message was blocked by a content filter.")
        return PASS


def keyword_guards(pattern_cache: PatternCache) -> list[Guard]:
    return [KeywordFilterGuard(pattern_cache)]
