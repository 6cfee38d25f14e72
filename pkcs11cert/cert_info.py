"""Information requests on X.509 certificates: keys, encodings and digests."""

from __future__ import annotations

from enum import IntEnum
from typing import Callable

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import dsa, rsa

from pkcs11cert.algorithm import get_digest_by_name
from pkcs11cert.base64codec import base64_encode
from pkcs11cert.cert_names import (
    CERT_INFO_MAX_ENTRIES,
    cert_cn,
    cert_email,
    cert_issuer,
    cert_kpn,
    cert_serial,
    cert_subject,
    cert_uid,
    cert_upn,
)
from pkcs11cert.strings import bin2hex

__all__ = [
    "CERT_INFO_SIZE",
    "CERT_INFO_MAX_ENTRIES",
    "CertInfo",
    "cert_puk",
    "cert_sshpuk",
    "cert_pem",
    "cert_digest",
    "cert_key_alg",
    "cert_info",
]

# Size of the fixed result arrays; one slot more than the entries returned.
CERT_INFO_SIZE = CERT_INFO_MAX_ENTRIES + 1


class CertInfo(IntEnum):
    """Kinds of information that can be requested from a certificate."""

    CN = 1
    SUBJECT = 2
    KPN = 3
    EMAIL = 4
    UPN = 5
    UID = 6
    PUK = 7
    DIGEST = 8
    SSHPUK = 9
    PEM = 10
    ISSUER = 11
    SERIAL = 12
    KEY_ALG = 13


_KEY_ALGORITHM_NAMES: dict[str, str] = {
    "1.2.840.113549.1.1.1": "rsaEncryption",
    "1.2.840.113549.1.1.10": "rsassaPss",
    "1.2.840.10040.4.1": "dsaEncryption",
    "1.2.840.10045.2.1": "id-ecPublicKey",
    "1.2.840.113549.1.3.1": "dhKeyAgreement",
    "1.2.840.10046.2.1": "X9.42 DH",
    "1.3.101.110": "X25519",
    "1.3.101.111": "X448",
    "1.3.101.112": "ED25519",
    "1.3.101.113": "ED448",
}

_UNDEFINED_ALGORITHM = "undefined"


def _ssh_string(data: bytes) -> bytes:
    return len(data).to_bytes(4, "big") + data


def _ssh_mpint(value: int) -> bytes:
    """Encode a non-negative integer as an SSH mpint (zero has no content)."""
    if value == 0:
        return _ssh_string(b"")
    body = value.to_bytes((value.bit_length() + 7) // 8, "big")
    if body[0] & 0x80:
        body = b"\0" + body
    return _ssh_string(body)


def cert_puk(cert: x509.Certificate) -> list[str]:
    """Return the certificate's public key in PEM format."""
    pem = cert.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return [pem.decode("ascii")]


def cert_sshpuk(cert: x509.Certificate) -> list[str] | None:
    """Return the public key as an OpenSSH key line, or None for other key types.

    The first e-mail address of the certificate, if any, is used as comment.
    """
    key = cert.public_key()
    if isinstance(key, dsa.DSAPublicKey):
        numbers = key.public_numbers()
        params = numbers.parameter_numbers
        key_type = "ssh-dss"
        fields = (params.p, params.q, params.g, numbers.y)
    elif isinstance(key, rsa.RSAPublicKey):
        numbers = key.public_numbers()
        key_type = "ssh-rsa"
        fields = (numbers.e, numbers.n)
    else:
        return None
    blob = _ssh_string(key_type.encode("ascii")) + b"".join(
        _ssh_mpint(value) for value in fields
    )
    parts = [key_type, base64_encode(blob)]
    emails = cert_email(cert)
    if emails:
        parts.append(emails[0])
    return [" ".join(parts)]


def cert_pem(cert: x509.Certificate) -> list[str]:
    """Return the certificate in PEM format."""
    return [cert.public_bytes(serialization.Encoding.PEM).decode("ascii")]


def cert_digest(cert: x509.Certificate, algorithm: str | None) -> list[str]:
    """Return the certificate fingerprint as colon-separated hex.

    An unknown algorithm name falls back to SHA-1.
    """
    digest = get_digest_by_name(algorithm)
    if digest is None:
        digest = hashes.SHA1()
    return [bin2hex(cert.fingerprint(digest))]


def cert_key_alg(cert: x509.Certificate) -> list[str]:
    """Return the long name of the certificate's public key algorithm."""
    oid = cert.public_key_algorithm_oid.dotted_string
    return [_KEY_ALGORITHM_NAMES.get(oid, _UNDEFINED_ALGORITHM)]


_HANDLERS: dict[CertInfo, Callable[[x509.Certificate], list[str] | None]] = {
    CertInfo.CN: cert_cn,
    CertInfo.SUBJECT: cert_subject,
    CertInfo.ISSUER: cert_issuer,
    CertInfo.SERIAL: cert_serial,
    CertInfo.KPN: cert_kpn,
    CertInfo.EMAIL: cert_email,
    CertInfo.UPN: cert_upn,
    CertInfo.UID: cert_uid,
    CertInfo.PUK: cert_puk,
    CertInfo.SSHPUK: cert_sshpuk,
    CertInfo.PEM: cert_pem,
    CertInfo.KEY_ALG: cert_key_alg,
}


def cert_info(
    cert: x509.Certificate | None,
    info_type: int,
    algorithm: str | None = None,
) -> list[str] | None:
    """Return the requested information on ``cert``.

    Raises ValueError for a missing certificate, an unknown information type,
    or a digest request without an algorithm.
    """
    if cert is None:
        raise ValueError("no certificate provided")
    try:
        kind = CertInfo(info_type)
    except ValueError:
        raise ValueError(f"invalid info type requested: {info_type}") from None
    if kind is CertInfo.DIGEST:
        if not algorithm:
            raise ValueError("a digest algorithm must be specified")
        return cert_digest(cert, algorithm)
    return _HANDLERS[kind](cert)