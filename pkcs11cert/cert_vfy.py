"""Certificate chain verification, CRL revocation checks and signature checks."""

from __future__ import annotations

import logging
import re
import urllib.request
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Callable

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dsa, ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from pkcs11cert.base64codec import base64_decode
from pkcs11cert.errors import Pkcs11CertError, set_error

__all__ = [
    "CrlPolicy",
    "OcspPolicy",
    "VerifyResult",
    "CertPolicy",
    "load_crl",
    "download_crl",
    "verify_certificate",
    "verify_signature",
]

_log = logging.getLogger(__name__)

_PEM_CRL_BEGIN = "-----BEGIN X509 CRL-----"
_PEM_CRL_END = "-----END X509 CRL-----"
_PEM_BLOCK = re.compile(
    rb"-----BEGIN (CERTIFICATE|X509 CRL)-----.*?-----END \1-----", re.DOTALL
)
_FILE_URL_PREFIX = "file://"
_MAX_CHAIN_DEPTH = 100
_FETCH_TIMEOUT = 30

Fetcher = Callable[[str], bytes]


class CrlPolicy(IntEnum):
    """How certificate revocation lists are consulted."""

    NONE = 0
    ONLINE = 1
    OFFLINE = 2
    AUTO = 3


class OcspPolicy(IntEnum):
    """Whether OCSP checks are requested."""

    NONE = 0
    ON = 1


class VerifyResult(IntEnum):
    """Outcome of a certificate verification."""

    VALID = 1
    INVALID = 0
    EXPIRED = -2
    NOT_YET_VALID = -3
    UNKNOWN_ISSUER = -4


@dataclass
class CertPolicy:
    """Verification settings: which checks to run and where trust material lives."""

    ca_policy: bool = False
    crl_policy: CrlPolicy = CrlPolicy.NONE
    no_signature_policy: bool = False
    ca_dir: str | None = None
    crl_dir: str | None = None
    nss_dir: str | None = None
    ocsp_policy: OcspPolicy = OcspPolicy.NONE


def _fail(message: str) -> Pkcs11CertError:
    """Record ``message`` as the last error and return an exception carrying it."""
    return Pkcs11CertError(set_error(message))


def _aware_time(obj: object, name: str) -> datetime | None:
    try:
        return getattr(obj, f"{name}_utc")
    except AttributeError:
        value = getattr(obj, name)
        return None if value is None else value.replace(tzinfo=timezone.utc)


@dataclass
class _Store:
    """Trusted certificates and CRLs gathered from the policy's locations."""

    certs: list[x509.Certificate] = field(default_factory=list)
    crls: list[x509.CertificateRevocationList] = field(default_factory=list)

    def _add_pem(self, data: bytes) -> bool:
        found = False
        for match in _PEM_BLOCK.finditer(data):
            block = match.group(0)
            try:
                if match.group(1) == b"CERTIFICATE":
                    self.certs.append(x509.load_pem_x509_certificate(block))
                else:
                    self.crls.append(x509.load_pem_x509_crl(block))
            except ValueError:
                continue
            found = True
        return found

    def _add_der_cert(self, data: bytes) -> bool:
        try:
            self.certs.append(x509.load_der_x509_certificate(data))
        except ValueError:
            return False
        return True

    def add_file(self, path: Path) -> None:
        data = path.read_bytes()
        if self._add_pem(data):
            return
        _log.debug("file format is not PEM: trying ASN1")
        if not self._add_der_cert(data):
            raise _fail(f"cannot load '{path}': neither PEM nor ASN1 format")

    def add_directory(self, path: Path) -> None:
        for entry in sorted(path.iterdir()):
            if not entry.is_file():
                continue
            try:
                data = entry.read_bytes()
            except OSError:
                continue
            if not self._add_pem(data):
                self._add_der_cert(data)

    def find_cert(self, name: x509.Name) -> x509.Certificate | None:
        return next((cert for cert in self.certs if cert.subject == name), None)

    def find_crl(self, name: x509.Name) -> x509.CertificateRevocationList | None:
        return next((crl for crl in self.crls if crl.issuer == name), None)


def _local_path(location: str) -> Path:
    if location.startswith(_FILE_URL_PREFIX):
        location = location[len(_FILE_URL_PREFIX):]
    return Path(location)


def _setup_store(policy: CertPolicy) -> _Store:
    store = _Store()
    sources: list[tuple[str, str]] = []
    if policy.ca_policy and policy.ca_dir:
        sources.append(("CACERT", policy.ca_dir))
    if policy.crl_policy != CrlPolicy.NONE and policy.crl_dir:
        sources.append(("CRL", policy.crl_dir))
    for label, location in sources:
        path = _local_path(location)
        if path.is_dir():
            _log.debug("adding hash dir '%s' to %s checks", location, label)
            store.add_directory(path)
        elif path.is_file():
            _log.debug("adding file '%s' to %s checks", location, label)
            store.add_file(path)
    return store


def load_crl(data: bytes) -> x509.CertificateRevocationList:
    """Parse a CRL given either in PEM (base64) or in DER form."""
    data = bytes(data)
    text = data.decode("latin-1")
    begin = text.find(_PEM_CRL_BEGIN)
    end = text.find(_PEM_CRL_END)
    if begin >= 0 and end >= 0 and begin < end:
        _log.debug("crl is base64 encoded")
        try:
            der = base64_decode(text[begin + len(_PEM_CRL_BEGIN):end])
        except Pkcs11CertError:
            der = b""
        if not der:
            raise _fail("invalid base64 (pem) format")
    else:
        _log.debug("crl is der encoded")
        der = data
    try:
        return x509.load_der_x509_crl(der)
    except ValueError:
        raise _fail("cannot parse the crl") from None


def _default_fetch(uri: str) -> bytes:
    with urllib.request.urlopen(uri, timeout=_FETCH_TIMEOUT) as response:
        return response.read()


def download_crl(uri: str, fetch: Fetcher | None = None) -> x509.CertificateRevocationList:
    """Retrieve a CRL from ``uri`` using ``fetch`` and parse it."""
    fetcher = fetch if fetch is not None else _default_fetch
    try:
        data = fetcher(uri)
    except (OSError, ValueError) as exc:
        raise _fail(f"cannot retrieve '{uri}': {exc}") from exc
    return load_crl(data)


def _issued_by(cert: x509.Certificate, issuer: x509.Certificate) -> bool:
    try:
        cert.verify_directly_issued_by(issuer)
    except (InvalidSignature, ValueError, TypeError):
        return False
    return True


def _find_issuer(store: _Store, cert: x509.Certificate) -> x509.Certificate | None:
    candidates = [item for item in store.certs if item.subject == cert.issuer]
    for candidate in candidates:
        if _issued_by(cert, candidate):
            return candidate
    return candidates[0] if candidates else None


def _verify_chain(cert: x509.Certificate, store: _Store, now: datetime) -> VerifyResult:
    chain = [cert]
    current = cert
    while current.subject != current.issuer and len(chain) < _MAX_CHAIN_DEPTH:
        issuer = _find_issuer(store, current)
        if issuer is None:
            set_error("certificate is invalid: unable to get local issuer certificate")
            return VerifyResult.UNKNOWN_ISSUER
        if issuer in chain:
            break
        chain.append(issuer)
        current = issuer
    if chain[-1] not in store.certs:
        set_error("certificate is invalid: self signed certificate is not trusted")
        return VerifyResult.INVALID
    for depth in range(len(chain) - 1, -1, -1):
        item = chain[depth]
        if depth + 1 < len(chain) and not _issued_by(item, chain[depth + 1]):
            set_error("certificate is invalid: certificate signature failure")
            return VerifyResult.INVALID
        if _aware_time(item, "not_valid_before") > now:
            set_error("certificate is invalid: certificate is not yet valid")
            return VerifyResult.NOT_YET_VALID
        if _aware_time(item, "not_valid_after") < now:
            set_error("certificate is invalid: certificate has expired")
            return VerifyResult.EXPIRED
    _log.debug("certificate is valid")
    return VerifyResult.VALID


def _verify_crl(crl: x509.CertificateRevocationList, store: _Store, now: datetime) -> bool:
    issuer = store.find_cert(crl.issuer)
    if issuer is None:
        raise _fail("getting the certificate of the crl-issuer failed")
    try:
        valid = crl.is_signature_valid(issuer.public_key())
    except (TypeError, ValueError) as exc:
        raise _fail(f"crl signature check failed: {exc}") from exc
    if not valid:
        _log.debug("crl is invalid")
        return False
    last_update = _aware_time(crl, "last_update")
    if last_update is None:
        raise _fail("crl has an invalid last update field")
    if last_update > now:
        _log.debug("crl is not yet valid")
        return False
    next_update = _aware_time(crl, "next_update")
    if next_update is None:
        raise _fail("crl has an invalid next update field")
    if next_update < now:
        _log.debug("crl has expired")
        return False
    return True


def _distribution_uris(cert: x509.Certificate) -> list[str] | None:
    try:
        points = cert.extensions.get_extension_for_class(x509.CRLDistributionPoints).value
    except x509.ExtensionNotFound:
        return None
    return [
        name.value
        for point in points
        if point.full_name
        for name in point.full_name
        if isinstance(name, x509.UniformResourceIdentifier)
    ]


def _online_crl(
    cert: x509.Certificate, store: _Store, fetch: Fetcher | None
) -> x509.CertificateRevocationList:
    uris = _distribution_uris(cert)
    if uris is None:
        ca_cert = store.find_cert(cert.issuer)
        if ca_cert is None:
            raise _fail("no dedicated ca certificate available")
        uris = _distribution_uris(ca_cert)
        if uris is None:
            raise _fail(
                "neither the user nor the ca certificate does contain "
                "a crl distribution point"
            )
    for uri in uris:
        _log.debug("downloading crl from %s", uri)
        try:
            return download_crl(uri, fetch)
        except Pkcs11CertError as exc:
            _log.debug("download_crl() failed: %s", exc)
    raise _fail("downloading the crl failed for all distribution points")


def _check_for_revocation(
    cert: x509.Certificate,
    store: _Store,
    policy: CrlPolicy,
    fetch: Fetcher | None,
    now: datetime,
) -> bool:
    """Return True if the certificate is not revoked, False otherwise."""
    if policy is CrlPolicy.NONE:
        return True
    if policy is CrlPolicy.AUTO:
        try:
            return _check_for_revocation(cert, store, CrlPolicy.ONLINE, fetch, now)
        except Pkcs11CertError as exc:
            _log.debug("online revocation check failed: %s", exc)
            return _check_for_revocation(cert, store, CrlPolicy.OFFLINE, fetch, now)
    if policy is CrlPolicy.OFFLINE:
        crl = store.find_crl(cert.issuer)
        if crl is None:
            raise _fail("no dedicated crl available")
    else:
        crl = _online_crl(cert, store, fetch)
    try:
        crl_valid = _verify_crl(crl, store, now)
    except Pkcs11CertError as exc:
        raise _fail(f"verify_crl() failed: {exc}") from exc
    if not crl_valid:
        return False
    if crl.issuer != cert.issuer:
        return True
    return crl.get_revoked_certificate_by_serial_number(cert.serial_number) is None


def verify_certificate(
    cert: x509.Certificate, policy: CertPolicy, fetch: Fetcher | None = None
) -> VerifyResult:
    """Verify ``cert`` against the CA and CRL settings of ``policy``.

    ``fetch`` retrieves the bytes behind a CRL distribution point URI.
    Raises Pkcs11CertError when the check itself cannot be carried out.
    """
    if not policy.ca_policy and policy.crl_policy == CrlPolicy.NONE:
        _log.debug("neither CA nor CRL check requested")
        return VerifyResult.VALID
    try:
        crl_policy = CrlPolicy(policy.crl_policy)
    except ValueError:
        raise _fail(f"policy {policy.crl_policy} is not supported") from None
    store = _setup_store(policy)
    now = datetime.now(timezone.utc)
    if policy.ca_policy:
        result = _verify_chain(cert, store, now)
        if result is not VerifyResult.VALID:
            return result
    try:
        not_revoked = _check_for_revocation(cert, store, crl_policy, fetch, now)
    except Pkcs11CertError as exc:
        raise _fail(f"check_for_revocation() failed: {exc}") from exc
    if not not_revoked:
        _log.debug("certificate has been revoked")
        return VerifyResult.INVALID
    return VerifyResult.VALID


def verify_signature(cert: x509.Certificate, data: bytes, signature: bytes) -> bool:
    """Check a SHA-256 signature over ``data`` with the certificate's public key.

    EC signatures are given as the raw concatenation of r and s.
    Returns True on success; raises Pkcs11CertError otherwise.
    """
    key = cert.public_key()
    algorithm = hashes.SHA256()
    data = bytes(data)
    signature = bytes(signature)
    try:
        if isinstance(key, ec.EllipticCurvePublicKey):
            half = len(signature) // 2
            if half == 0:
                raise _fail("unable to parse r+s EC signature numbers")
            r = int.from_bytes(signature[:half], "big")
            s = int.from_bytes(signature[half:2 * half], "big")
            key.verify(encode_dss_signature(r, s), data, ec.ECDSA(algorithm))
        elif isinstance(key, rsa.RSAPublicKey):
            key.verify(signature, data, padding.PKCS1v15(), algorithm)
        elif isinstance(key, dsa.DSAPublicKey):
            key.verify(signature, data, algorithm)
        else:
            raise _fail(f"unsupported public key type {type(key).__name__}")
    except (InvalidSignature, ValueError) as exc:
        raise _fail(f"signature verification failed: {exc}") from exc
    _log.debug("signature is valid")
    return True