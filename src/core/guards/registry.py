"""Guard registry: id -> guard lookup plus the catalog for config UIs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from core.guards.base import Guard
from core.guards.behavioral import behavioral_guards
from core.guards.content import content_guards
from core.guards.keyword import keyword_guards
from core.guards.property import property_guards
from core.pattern_cache import PatternCache
from core.rate_state import RateStore


@dataclass(frozen=True)
class GuardInfo:
    """Catalog entry shown to whoever configures guards."""

    id: str
    name: str
    description: str


class GuardRegistry:
    """Append-only mapping of guard ids to guards, in registration order."""

    def __init__(self, guards: Iterable[Guard] = ()) -> None:
        self._guards: dict[str, Guard] = {}
        for guard in guards:
            self.register(guard)

    def register(self, guard: Guard) -> None:
        if guard.id in self._guards:
            raise ValueError(f"Guard already registered: {guard.id}")
        self._guards[guard.id] = guard

    def lookup(self, guard_id: str) -> Optional[Guard]:
        return self._guards.get(guard_id)

    def list_all(self) -> List[GuardInfo]:
        return [GuardInfo(id=g.id, name=g.name, description=g.description) for g in self._guards.values()]

    def __contains__(self, guard_id: object) -> bool:
        return guard_id in self._guards

    def __len__(self) -> int:
        return len(self._guards)


def build_default_registry(rate_store: RateStore, pattern_cache: PatternCache) -> GuardRegistry:
    """Register every built-in guard, wiring in the shared state stores."""

    return GuardRegistry(
        [
            *content_guards(),
            *property_guards(),
            *behavioral_guards(rate_store),
            *keyword_guards(pattern_cache),
        ]
    )
