"""Level-filtered debug output to a terminal or to the system log."""

from __future__ import annotations

import logging
import sys

try:
    import syslog as _syslog
except ImportError:  # platforms without a syslog facility
    _syslog = None

__all__ = [
    "DEBUG",
    "ERROR",
    "SYSLOG_MESSAGE_LIMIT",
    "set_debug_level",
    "get_debug_level",
    "debug_print",
]

DEBUG = 1
ERROR = -1

# Messages sent to the system log are cut to this many characters.
SYSLOG_MESSAGE_LIMIT = 99

_GREEN_DEBUG = "\033[32mDEBUG"
_RED_ERROR = "\033[31mERROR"
_RESET = "\033[0m"

_debug_level = 0
_logger = logging.getLogger(__name__)


def set_debug_level(level: int) -> None:
    """Set the current debug level."""
    global _debug_level
    _debug_level = int(level)


def get_debug_level() -> int:
    """Return the current debug level."""
    return _debug_level


def _stdout_is_tty() -> bool:
    stream = sys.stdout
    if stream is None:
        return False
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except (ValueError, OSError):
        return False


def _to_syslog(message: str) -> None:
    if _syslog is not None:
        _syslog.syslog(_syslog.LOG_INFO, message)
    else:
        _logger.info(message)


def debug_print(level: int, file: str, line: int, fmt: str, *args: object) -> str | None:
    """Emit a printf-style message if the current debug level reaches ``level``.

    On a terminal the message is written to stdout with a coloured preamble
    naming ``file`` and ``line``; otherwise it goes to the system log, cut to
    ``SYSLOG_MESSAGE_LIMIT`` characters. Returns the text that was emitted,
    or None if the message was filtered out.
    """
    if _debug_level < level:
        return None
    message = fmt % args if args else fmt
    if _stdout_is_tty():
        tag = _RED_ERROR if level == ERROR else _GREEN_DEBUG
        sys.stdout.write(f"{tag}:{file}:{line}: {message}{_RESET}\n")
        sys.stdout.flush()
        return message
    message = message[:SYSLOG_MESSAGE_LIMIT]
    _to_syslog(message)
    return message