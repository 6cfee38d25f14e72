"""Lookup of message digest algorithms by name."""

from __future__ import annotations

from typing import Callable

from cryptography.hazmat.primitives import hashes

__all__ = ["get_alg_from_string", "get_digest_by_name"]

_DIGESTS: dict[str, Callable[[], hashes.HashAlgorithm]] = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha-1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha2-224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha2-256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha2-384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha2-512": hashes.SHA512,
    "sha512-224": hashes.SHA512_224,
    "sha2-512/224": hashes.SHA512_224,
    "sha512-256": hashes.SHA512_256,
    "sha2-512/256": hashes.SHA512_256,
    "sha3-224": hashes.SHA3_224,
    "sha3-256": hashes.SHA3_256,
    "sha3-384": hashes.SHA3_384,
    "sha3-512": hashes.SHA3_512,
    "sm3": hashes.SM3,
    "blake2b512": lambda: hashes.BLAKE2b(64),
    "blake2s256": lambda: hashes.BLAKE2s(32),
}


def get_alg_from_string(name: str | None) -> str | None:
    """Return ``name`` if it names a known digest algorithm, else None."""
    if not name or name.lower() not in _DIGESTS:
        return None
    return name


def get_digest_by_name(name: str | None) -> hashes.HashAlgorithm | None:
    """Return a fresh hash algorithm object for ``name``, or None if unknown."""
    if not name:
        return None
    factory = _DIGESTS.get(name.lower())
    return factory() if factory is not None else None