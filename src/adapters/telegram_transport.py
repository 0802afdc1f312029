"""Telethon transport adapter.

Implements the core TransportPort on top of a connected TelegramClient.
"""

from __future__ import annotations

from typing import List

from telethon import TelegramClient
from telethon.tl.types import ChannelParticipantsAdmins


def _peer(chat_id: str):
    # Numeric ids must be passed as ints or Telethon treats them as usernames.
    try:
        return int(chat_id)
    except ValueError:
        return chat_id


class TelegramTransport:
    """Delete, DM and admin lookups through the user's Telegram account."""

    def __init__(self, client: TelegramClient) -> None:
        self._client = client

    async def delete_message(self, chat_id: str, message_id: str) -> None:
        await self._client.delete_messages(_peer(chat_id), [int(message_id)])

    async def send_message(self, recipient_id: str, text: str) -> None:
        await self._client.send_message(_peer(recipient_id), text)

    async def get_admin_ids(self, chat_id: str) -> List[str]:
        admin_ids: List[str] = []
        async for user in self._client.iter_participants(_peer(chat_id), filter=ChannelParticipantsAdmins):
            admin_ids.append(str(user.id))
        return admin_ids
