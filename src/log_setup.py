"""Logging setup driven by the ``logging`` section of config.json."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, Iterable, Mapping, Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_PATH = "logs/groupguard.log"
MASK = "***"

# Telethon reports every reconnect and update gap at INFO.
DEFAULT_LOGGER_LEVELS = {"telethon": "WARNING"}


def _level(name: Any, default: int = logging.INFO) -> int:
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else default


class ScrubbingFormatter(logging.Formatter):
    """Masks secret values anywhere in the rendered record, tracebacks included."""

    def __init__(self, secrets: Iterable[str], fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        # Longest first, so a secret containing another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def scrub(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, MASK)
        return text

    def format(self, record: logging.LogRecord) -> str:
        return self.scrub(super().format(record))


def secret_values(config: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> list[str]:
    """Resolve the env var names under ``redact.patterns`` to their values."""

    redact = config.get("redact") or {}
    if not redact.get("enabled", False):
        return []
    environ = os.environ if environ is None else environ
    return [environ[name] for name in redact.get("patterns", []) if environ.get(name)]


def _file_handler(file_cfg: Mapping[str, Any], project_root: str) -> RotatingFileHandler:
    path = file_cfg.get("path") or DEFAULT_LOG_PATH
    if not os.path.isabs(path):
        path = os.path.join(project_root, path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def configure_logging(
    config: Optional[Mapping[str, Any]],
    project_root: str,
    root: Optional[logging.Logger] = None,
) -> bool:
    """Install handlers on ``root`` (the root logger by default).

    Returns False when logging is disabled or no handler is configured, in
    which case nothing is touched.
    """

    config = config or {}
    if not config.get("enabled", False):
        return False

    load_dotenv()
    level = _level(config.get("level", "INFO"))
    formatter = ScrubbingFormatter(secret_values(config))

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file") or {}
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg, project_root))
    if not handlers:
        return False

    root = root or logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)

    levels = {**DEFAULT_LOGGER_LEVELS, **(config.get("levels") or {})}
    for logger_name, logger_level in levels.items():
        logging.getLogger(logger_name).setLevel(_level(logger_level, level))
    return True
