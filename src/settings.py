"""Static configuration for groupguard.

All user-editable settings (groups, guards, moderation switches, logging)
live in a single JSON file for quick edits without touching Python.
"""

import json
import os

from core.pattern_cache import KEY_POLICIES
from core.rate_state import RETENTION_SECONDS, SWEEP_INTERVAL_SECONDS

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Where to store the SQLite violation log.
DB_PATH = os.getenv("GROUPGUARD_DB", os.path.join(PROJECT_ROOT, "groupguard.db"))

# Groups and their guards are loaded from config.json so policies can be
# changed without editing code.
CONFIG_PATH = os.getenv("GROUPGUARD_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Prefix of every message the assistant sends; used for DMs and to
# recognise our own replies so they are never moderated.
ASSISTANT_NAME = _CONFIG.get("assistant_name", "GroupGuard")

# Raw group entries; parsed into GroupPolicy objects by policy_loader.
GROUPS_CONFIG = _CONFIG.get("groups", [])

# Rate state housekeeping for slow-mode / no-spam.
_rate_state = _CONFIG.get("rate_state", {})
RATE_RETENTION_SECONDS = int(_rate_state.get("retention_seconds", RETENTION_SECONDS))
RATE_SWEEP_INTERVAL_SECONDS = int(_rate_state.get("sweep_interval_seconds", SWEEP_INTERVAL_SECONDS))

# Keyword filter cache key: "length" (historical) or "content".
KEYWORD_CACHE_KEY = _CONFIG.get("keyword_cache_key", "length")
if KEYWORD_CACHE_KEY not in KEY_POLICIES:
    raise ValueError(f"keyword_cache_key must be one of {KEY_POLICIES}, got {KEYWORD_CACHE_KEY!r}")

# Violation log retention; 0 keeps everything.
_violation_log = _CONFIG.get("violation_log", {})
VIOLATION_TTL_DAYS = int(_violation_log.get("ttl_days", 90))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
