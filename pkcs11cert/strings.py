"""Small string helpers used across the certificate tools."""

from __future__ import annotations

import re

__all__ = ["is_empty_str", "bin2hex", "hex2bin", "split", "trim", "strndup"]

_HEX_BYTE = re.compile(r"[ \t\n\r\f\v]*([0-9A-Fa-f]{1,2})")


def is_empty_str(text: str | None) -> bool:
    """Return True if ``text`` is None, empty, or holds only whitespace."""
    return text is None or text.strip() == ""


def bin2hex(data: bytes) -> str:
    """Render bytes as upper-case hex pairs separated by colons."""
    return ":".join(f"{byte:02X}" for byte in data)


def hex2bin(hexstr: str) -> bytes:
    """Parse a colon-separated hex string such as ``01:AB:FF`` into bytes.

    A single leading colon is ignored. Every field that does not start with a
    hex digit yields a zero byte.
    """
    size = (1 + len(hexstr)) // 3
    out = bytearray(size)
    start = 1 if hexstr.startswith(":") else 0
    for index, pos in zip(range(size), range(start, len(hexstr), 3)):
        match = _HEX_BYTE.match(hexstr, pos)
        if match:
            out[index] = int(match.group(1), 16)
    return bytes(out)


def split(text: str, sep: str, nelems: int) -> list[str | None]:
    """Split ``text`` on ``sep`` into exactly ``nelems`` fields.

    The last field keeps the rest of the string; fields that the input does
    not provide are None.
    """
    if nelems < 1:
        raise ValueError("nelems must be at least 1")
    parts: list[str | None] = list(text.split(sep, nelems - 1))
    parts.extend([None] * (nelems - len(parts)))
    return parts


def trim(text: str) -> str:
    """Collapse whitespace runs to one space and drop leading/trailing blanks."""
    return " ".join(text.split())


def strndup(data: bytes, size: int) -> bytes:
    """Return the NUL-terminated prefix of ``data`` found within ``size`` bytes.

    Raises ValueError if no NUL byte occurs in the first ``size`` bytes.
    """
    end = data.find(b"\0", 0, size)
    if end < 0:
        raise ValueError(f"no NUL terminator within the first {size} bytes")
    return data[:end]