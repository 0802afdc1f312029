"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

ACTION_LOGGED = "logged"
ACTION_DELETED = "deleted"


@dataclass(frozen=True)
class GuardConfig:
    """One guard enabled (or not) on a group, with its parameters."""

    guard_id: str
    enabled: bool = True
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModerationConfig:
    """Group-level enforcement switches."""

    observation_mode: bool = True
    admin_exempt: bool = True
    dm_cooldown_seconds: int = 60


DEFAULT_MODERATION_CONFIG = ModerationConfig()


@dataclass(frozen=True)
class GroupPolicy:
    """Ordered guard list plus moderation switches for a single chat."""

    chat_id: str
    guards: Tuple[GuardConfig, ...] = ()
    moderation: ModerationConfig = DEFAULT_MODERATION_CONFIG


@dataclass(frozen=True)
class ViolationRecord:
    """Persisted representation of a single guard violation."""

    chat_id: str
    sender_id: str
    guard_id: str
    action: str
    reason: str
    message_id: str
    timestamp: str
