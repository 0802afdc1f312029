"""Guard contract shared by every rule family."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from core.config import GuardConfig
from core.models import ContentType, IncomingMessage


@dataclass(frozen=True)
class GuardResult:
    """Verdict of a guard; guard_id and reason are only set when blocked."""

    blocked: bool
    guard_id: Optional[str] = None
    reason: Optional[str] = None


PASS = GuardResult(blocked=False)


def block(guard_id: str, reason: str) -> GuardResult:
    return GuardResult(blocked=True, guard_id=guard_id, reason=reason)


@dataclass(frozen=True)
class GuardContext:
    """Read-only evaluation view of one message.

    Built once per evaluation pass. Only ``config`` differs between the
    guards of a pass; ``now`` is the same instant for all of them.
    """

    message: IncomingMessage
    chat_id: str
    sender_id: str
    content_type: Optional[ContentType]
    text: str
    now: datetime
    is_admin: bool = False
    config: Optional[GuardConfig] = None

    @property
    def params(self) -> Mapping[str, Any]:
        if self.config is None:
            return {}
        return self.config.params or {}


class Guard(ABC):
    """A named moderation rule: context in, verdict out."""

    id: str
    name: str
    description: str

    @abstractmethod
    def evaluate(self, ctx: GuardContext) -> GuardResult:
        ...

    def block(self, reason: str) -> GuardResult:
        return block(self.id, reason)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


def int_param(params: Mapping[str, Any], name: str, default: int, allow_zero: bool = False) -> int:
    """Read a numeric parameter, falling back to ``default`` when unusable."""

    raw = params.get(name)
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value == 0 and not allow_zero:
        return default
    return value


def number_param(params: Mapping[str, Any], name: str, default: float) -> float:
    """Read a positive numeric parameter that may be fractional (e.g. 0.5 minutes)."""

    raw = params.get(name)
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value <= 0:
        return default
    return value


def format_number(value: float) -> str:
    """Render 5.0 as "5" and 0.5 as "0.5" for user-facing reasons."""

    return f"{value:g}"


def list_param(params: Mapping[str, Any], name: str) -> list[str]:
    """Read a list-of-strings parameter; a bare string counts as one item."""

    raw = params.get(name)
    if not raw:
        return []
    if isinstance(raw, str):
        return [raw]
    try:
        return [str(item) for item in raw if item is not None]
    except TypeError:
        return []
