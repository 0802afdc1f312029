"""Telethon client construction for groupguard."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv
from telethon import TelegramClient

LOGGER = logging.getLogger(__name__)

DEFAULT_SESSION_NAME = "groupguard"


@dataclass(frozen=True)
class Credentials:
    api_id: int
    api_hash: str
    session_name: str


def load_credentials(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """Read API_ID, API_HASH and SESSION_NAME.

    With no mapping given, ``.env`` is loaded into the process environment
    first so secrets stay out of config.json.
    """

    if environ is None:
        load_dotenv()
        environ = os.environ

    api_id = (environ.get("API_ID") or "").strip()
    api_hash = (environ.get("API_HASH") or "").strip()
    missing = [name for name, value in (("API_ID", api_id), ("API_HASH", api_hash)) if not value]
    if missing:
        raise RuntimeError(f"Missing {', '.join(missing)} in environment")
    if not api_id.isdigit():
        raise RuntimeError("API_ID must be the numeric app id from my.telegram.org")

    session_name = (environ.get("SESSION_NAME") or "").strip() or DEFAULT_SESSION_NAME
    return Credentials(api_id=int(api_id), api_hash=api_hash, session_name=session_name)


def build_client(credentials: Optional[Credentials] = None) -> TelegramClient:
    """Create the moderator's client; connecting and login are left to the caller."""

    credentials = credentials or load_credentials()
    LOGGER.info("Initializing Telegram client (session %s)", credentials.session_name)
    # One update at a time: rate windows then see messages in delivery order.
    return TelegramClient(
        credentials.session_name,
        credentials.api_id,
        credentials.api_hash,
        sequential_updates=True,
    )
