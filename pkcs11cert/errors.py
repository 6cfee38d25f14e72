"""Package-wide error type and the last-error message store."""

from __future__ import annotations

__all__ = ["ERROR_BUFFER_SIZE", "Pkcs11CertError", "set_error", "get_error"]

ERROR_BUFFER_SIZE = 512

_last_error = ""


class Pkcs11CertError(Exception):
    """Base class for errors raised by this package."""


def set_error(fmt: str, *args: object) -> str:
    """Store a printf-style formatted error message and return it.

    Messages longer than ``ERROR_BUFFER_SIZE - 1`` characters are truncated.
    """
    global _last_error
    message = fmt % args if args else fmt
    _last_error = message[: ERROR_BUFFER_SIZE - 1]
    return _last_error


def get_error() -> str:
    """Return the most recently stored error message."""
    return _last_error