"""Base64 encoding and a lenient, line-break aware decoder."""

from __future__ import annotations

import base64

from pkcs11cert.errors import Pkcs11CertError

__all__ = ["Base64Error", "base64_encode", "base64_decode"]

_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_PAD = -1
_NEWLINE = -2
_TABLE: dict[str, int] = {char: value for value, char in enumerate(_ALPHABET)}
_TABLE.update({"=": _PAD, "\n": _NEWLINE, "\r": _NEWLINE})


class Base64Error(Pkcs11CertError, ValueError):
    """Raised when base64 input is malformed or does not fit the limit."""


def base64_encode(data: bytes) -> str:
    """Encode bytes as padded standard base64 text."""
    return base64.b64encode(bytes(data)).decode("ascii")


def _read_group(text: str, pos: int) -> tuple[int, int, int]:
    """Read one 4-symbol group; return (byte count, packed value, chars consumed)."""
    value = 0
    count = 0
    shift = 18
    index = pos
    while count < 4:
        char = text[index] if index < len(text) else "\0"
        if char == "\0" and count == 0:
            return 0, 0, index - pos
        code = _TABLE.get(char)
        if code is None:
            raise Base64Error(f"invalid base64 character {char!r} at offset {index}")
        if code == _PAD:
            break
        index += 1
        if code == _NEWLINE:
            continue
        value |= code << shift
        shift -= 6
        count += 1
    return count * 6 // 8, value, index - pos


def base64_decode(text: str | bytes, limit: int | None = None) -> bytes:
    """Decode base64 text, skipping CR/LF and stopping at padding or NUL.

    If ``limit`` is given, more decoded bytes than that raise Base64Error.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("latin-1")
    out = bytearray()
    pos = 0
    while True:
        count, value, skip = _read_group(text, pos)
        if count == 0:
            return bytes(out)
        for shift in (16, 8, 0)[:count]:
            if limit is not None and len(out) >= limit:
                raise Base64Error(f"decoded data exceeds {limit} bytes")
            out.append((value >> shift) & 0xFF)
        pos += skip
        if count < 3 or pos >= len(text) or text[pos] == "\0":
            return bytes(out)