"""Console formatting helpers for guards and violations.

Keeping formatting here keeps the CLI output consistent and the core free
of presentation concerns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from rich.table import Table
from rich.text import Text

from core.config import ViolationRecord
from core.guards.registry import GuardInfo


def format_chat_label(chat_id: str, chat_aliases: dict[str, str]) -> str:
    """Return a human-friendly chat label, using configured aliases."""

    alias = chat_aliases.get(chat_id)
    if not alias:
        return chat_id
    return f"{alias} ({chat_id})"


def format_timestamp(timestamp: str) -> str:
    """Render an ISO timestamp in local time; unparsable values pass through."""

    try:
        parsed = datetime.fromisoformat(timestamp)
    except ValueError:
        return timestamp
    return parsed.astimezone().strftime("%H:%M:%S %d-%m-%Y")


def guards_table(guards: Iterable[GuardInfo]) -> Table:
    table = Table(title="Available guards")
    table.add_column("ID", style="bold cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Description")
    for guard in guards:
        table.add_row(guard.id, guard.name, guard.description)
    return table


def violations_table(records: Iterable[ViolationRecord], chat_aliases: dict[str, str]) -> Table:
    table = Table(title="Recent violations")
    table.add_column("Time", no_wrap=True)
    table.add_column("Chat")
    table.add_column("Sender")
    table.add_column("Guard", style="bold")
    table.add_column("Action")
    table.add_column("Reason")
    for record in records:
        action_style = "red" if record.action == "deleted" else "yellow"
        table.add_row(
            format_timestamp(record.timestamp),
            format_chat_label(record.chat_id, chat_aliases),
            record.sender_id,
            record.guard_id,
            Text(record.action, style=action_style),
            Text(record.reason or ""),
        )
    return table
