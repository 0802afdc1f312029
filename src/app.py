"""Application entry point for the groupguard moderator."""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from art import tprint
from rich.console import Console
from telethon import events

import settings
from adapters.notification_formatting import guards_table, violations_table
from adapters.sqlite_storage import SQLiteStorage
from adapters.telegram_mapper import build_message
from adapters.telegram_transport import TelegramTransport
from client import build_client
from core.evaluator import GuardEngine
from core.guards.registry import GuardRegistry, build_default_registry
from core.moderator import Moderator
from core.pattern_cache import PatternCache
from core.rate_state import RateStore, run_sweeper
from get_session import authorize, login_and_exit
from log_setup import configure_logging
from policy_loader import parse_group_policies

NAME = "GROUPGUARD"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _build_registry(rate_store: Optional[RateStore] = None) -> GuardRegistry:
    return build_default_registry(
        rate_store or RateStore(settings.RATE_RETENTION_SECONDS),
        PatternCache(settings.KEYWORD_CACHE_KEY),
    )


def _run() -> None:
    _print_banner()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    logger = logging.getLogger(__name__)

    logger.info("Starting groupguard")

    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    if settings.VIOLATION_TTL_DAYS > 0:
        removed = storage.cleanup_violations(settings.VIOLATION_TTL_DAYS)
        logger.info("Violation log cleanup removed %s rows", removed)

    rate_store = RateStore(settings.RATE_RETENTION_SECONDS)
    registry = _build_registry(rate_store)
    policies, _ = parse_group_policies(settings.GROUPS_CONFIG, (guard.id for guard in registry.list_all()))
    engine = GuardEngine(registry)
    logger.info("%s guards registered, %s groups configured", len(registry), len({p.chat_id for p in policies.values()}))

    client = build_client()
    client.loop.run_until_complete(client.connect())
    client.loop.run_until_complete(authorize(client))

    moderator = Moderator(
        engine=engine,
        transport=TelegramTransport(client),
        violation_log=storage,
        assistant_name=settings.ASSISTANT_NAME,
    )

    # Outgoing messages are included: the owner's own posts are moderated too.
    @client.on(events.NewMessage())
    async def handler(event) -> None:
        try:
            message = build_message(event.message)
            policy = policies.get(message.chat_id)
            if policy is None:
                return
            if not moderator.has_admin_cache(message.chat_id):
                await moderator.refresh_admin_cache(message.chat_id)
            await moderator.moderate(message, policy)
        except Exception:
            logger.exception("Error while moderating message")

    # Membership changes may add or remove admins.
    @client.on(events.ChatAction())
    async def on_chat_action(event) -> None:
        chat_id = str(event.chat_id)
        if chat_id in policies:
            await moderator.refresh_admin_cache(chat_id)

    sweeper = client.loop.create_task(
        run_sweeper(rate_store, settings.RATE_SWEEP_INTERVAL_SECONDS, on_sweep=moderator.prune_dm_cooldowns)
    )

    logger.info("Client connected. Moderating incoming messages...")
    try:
        client.run_until_disconnected()
    finally:
        sweeper.cancel()
        rate_store.clear()
        logger.info("groupguard stopped")


def _list_guards() -> None:
    Console().print(guards_table(_build_registry().list_all()))


def _show_log(chat_id: Optional[str], limit: int) -> None:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    _, aliases = parse_group_policies(settings.GROUPS_CONFIG)
    records = storage.recent_violations(chat_id=chat_id, limit=limit)
    if not records:
        print("No violations recorded.")
        return
    Console().print(violations_table(records, aliases))


def _login() -> None:
    _print_banner()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    client = build_client()
    client.loop.run_until_complete(login_and_exit(client))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="groupguard")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start moderating configured groups")
    subparsers.add_parser("guards", help="List the available guards")
    log_parser = subparsers.add_parser("log", help="Show recent violations")
    log_parser.add_argument("--chat", dest="chat_id", default=None, help="Only show this chat id")
    log_parser.add_argument("--limit", type=int, default=50)
    subparsers.add_parser("login", help="Authorize the Telegram session and exit")

    args = parser.parse_args(argv)
    if args.command == "guards":
        _list_guards()
        return
    if args.command == "log":
        _show_log(args.chat_id, args.limit)
        return
    if args.command == "login":
        _login()
        return
    _run()


if __name__ == "__main__":
    main()
