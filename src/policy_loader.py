"""Translate the raw config.json group entries into core policies."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from core.chat_keys import expand_chat_key_variants
from core.config import DEFAULT_MODERATION_CONFIG, GroupPolicy, GuardConfig, ModerationConfig

LOGGER = logging.getLogger(__name__)


def parse_guard_config(raw: Mapping[str, Any]) -> GuardConfig:
    guard_id = raw.get("guard_id") or raw.get("guardId")
    if not guard_id:
        raise ValueError(f"Guard entry without guard_id: {raw!r}")
    params = raw.get("params") or {}
    if not isinstance(params, Mapping):
        raise ValueError(f"Guard {guard_id} params must be an object")
    return GuardConfig(guard_id=str(guard_id), enabled=bool(raw.get("enabled", True)), params=dict(params))


def parse_moderation_config(raw: Mapping[str, Any] | None) -> ModerationConfig:
    if not raw:
        return DEFAULT_MODERATION_CONFIG
    defaults = DEFAULT_MODERATION_CONFIG
    return ModerationConfig(
        observation_mode=bool(raw.get("observation_mode", defaults.observation_mode)),
        admin_exempt=bool(raw.get("admin_exempt", defaults.admin_exempt)),
        dm_cooldown_seconds=int(raw.get("dm_cooldown_seconds", defaults.dm_cooldown_seconds)),
    )


def parse_group_policies(
    raw_groups: Iterable[Mapping[str, Any]],
    known_guard_ids: Iterable[str] = (),
) -> tuple[dict[str, GroupPolicy], dict[str, str]]:
    """Build a policy map keyed by every chat id variant, plus an alias map.

    Unknown guard ids are kept (the engine skips them at evaluation time) but
    reported here so typos surface at startup.
    """

    known = set(known_guard_ids)
    policies: dict[str, GroupPolicy] = {}
    aliases: dict[str, str] = {}
    for entry in raw_groups:
        chat_id = entry.get("chat_id")
        if chat_id is None:
            continue
        if not entry.get("enabled", True):
            continue
        chat_id = str(chat_id)
        guards = tuple(parse_guard_config(item) for item in entry.get("guards", []) or [])
        if known:
            for guard in guards:
                if guard.guard_id not in known:
                    LOGGER.warning("Group %s references unknown guard %r", chat_id, guard.guard_id)
        policy = GroupPolicy(
            chat_id=chat_id,
            guards=guards,
            moderation=parse_moderation_config(entry.get("moderation")),
        )
        alias = entry.get("alias")
        # Telegram reports the same chat as -100<id>, -<id> or <id> depending
        # on the API path, so every form maps to the same policy.
        for key in expand_chat_key_variants(chat_id):
            policies[key] = policy
            if alias:
                aliases.setdefault(key, str(alias))
    return policies, aliases
