"""Built-in moderation guards and their registry."""

from core.guards.base import PASS, Guard, GuardContext, GuardResult, block
from core.guards.registry import GuardInfo, GuardRegistry, build_default_registry

__all__ = [
    "PASS",
    "Guard",
    "GuardContext",
    "GuardInfo",
    "GuardRegistry",
    "GuardResult",
    "block",
    "build_default_registry",
]
