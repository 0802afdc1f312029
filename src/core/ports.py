"""Ports (interfaces) used by the enforcement coordinator.

Ports define the minimal contracts for transport and persistence adapters so
that the core can be reused with different chat networks and backends.
"""

from __future__ import annotations

from typing import List, Protocol

from core.config import ViolationRecord


class TransportPort(Protocol):
    """Chat operations required to enforce a verdict."""

    async def delete_message(self, chat_id: str, message_id: str) -> None:
        ...

    async def send_message(self, recipient_id: str, text: str) -> None:
        ...

    async def get_admin_ids(self, chat_id: str) -> List[str]:
        ...


class ViolationLogPort(Protocol):
    """Append-only sink for guard violations."""

    def log_violation(self, record: ViolationRecord) -> None:
        ...
