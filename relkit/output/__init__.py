"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .log import ReleaseLog

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "ReleaseLog",
    "RichConsole",
    "Style",
]
