"""Interactive login for the moderator account.

Run ``groupguard login`` (or this module directly) once. The session file
it leaves behind is reused by ``groupguard run``.
"""

from __future__ import annotations

import asyncio
import logging
import os
from getpass import getpass
from typing import Any, Callable

import qrcode
from dotenv import load_dotenv
from telethon import TelegramClient, errors

from client import build_client

LOGGER = logging.getLogger(__name__)

LOGIN_METHODS = {"1": "qr", "2": "phone"}
EXIT_CHOICES = {"3", "q", "exit"}
QR_TIMEOUT_SECONDS = 120
QR_ATTEMPTS = 3


def _print_qr(url: str) -> None:
    print("Scan in Telegram: Settings > Devices > Link Desktop Device")
    code = qrcode.QRCode(border=1)
    code.add_data(url)
    code.make(fit=True)
    code.print_ascii(invert=True)


def _env_or_prompt(name: str, prompt: str, secret: bool = False) -> str:
    value = os.getenv(name)
    if value:
        return value
    return getpass(prompt) if secret else input(prompt).strip()


async def _login_with_qr(client: TelegramClient) -> None:
    login = await client.qr_login()
    for attempt in range(1, QR_ATTEMPTS + 1):
        _print_qr(login.url)
        try:
            await login.wait(timeout=QR_TIMEOUT_SECONDS)
            return
        except asyncio.TimeoutError:
            if attempt == QR_ATTEMPTS:
                raise RuntimeError("QR code was not scanned in time") from None
            LOGGER.info("QR code expired, showing a new one (%s/%s)", attempt + 1, QR_ATTEMPTS)
            await login.recreate()


async def _login_with_phone(client: TelegramClient) -> None:
    phone = _env_or_prompt("PHONE", "Phone number (international format): ")
    await client.send_code_request(phone)
    await client.sign_in(phone=phone, code=input("Login code: ").strip())


def choose_login_method(ask: Callable[[str], str] = input) -> str:
    """Return "qr" or "phone", from LOGIN_METHOD or an interactive menu."""

    method = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if method in LOGIN_METHODS.values():
        return method

    print("")
    print("How should groupguard log in?")
    print("[1] QR code")
    print("[2] Phone code")
    print("[3] Exit")
    while True:
        choice = ask("groupguard login > ").strip().lower()
        if choice in LOGIN_METHODS:
            return LOGIN_METHODS[choice]
        if choice in EXIT_CHOICES:
            raise SystemExit(0)
        print("Choose 1, 2 or 3.")


def describe_account(me: Any) -> str:
    name = " ".join(part for part in (getattr(me, "first_name", None), getattr(me, "last_name", None)) if part)
    username = getattr(me, "username", None)
    label = name or (f"@{username}" if username else "unknown account")
    if name and username:
        label = f"{label} (@{username})"
    return f"{label}, id {getattr(me, 'id', '?')}"


async def authorize(client: TelegramClient) -> Any:
    """Log ``client`` in unless its session already is; return the account."""

    load_dotenv()
    if not await client.is_user_authorized():
        method = choose_login_method()
        try:
            if method == "phone":
                await _login_with_phone(client)
            else:
                await _login_with_qr(client)
        except errors.SessionPasswordNeededError:
            await client.sign_in(password=_env_or_prompt("2FA", "2FA password: ", secret=True))

    me = await client.get_me()
    LOGGER.info("Moderating as %s", describe_account(me))
    return me


async def login_and_exit(client: TelegramClient) -> Any:
    """Connect, make sure the session is authorized, then disconnect."""

    await client.connect()
    try:
        return await authorize(client)
    finally:
        await client.disconnect()


if __name__ == "__main__":
    session_client = build_client()
    session_client.loop.run_until_complete(login_and_exit(session_client))
