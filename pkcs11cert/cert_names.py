"""Extraction of names and identifiers from X.509 certificates."""

from __future__ import annotations

from cryptography import x509
from cryptography.x509.oid import NameOID, ObjectIdentifier

from pkcs11cert.strings import bin2hex

__all__ = [
    "CERT_INFO_MAX_ENTRIES",
    "NAME_ONELINE_LIMIT",
    "KERBEROS_PRINCIPAL_NAME_OID",
    "MS_UPN_OID",
    "cert_cn",
    "cert_subject",
    "cert_issuer",
    "cert_serial",
    "cert_kpn",
    "cert_email",
    "cert_upn",
    "cert_uid",
]

# Most entries any multi-valued lookup returns.
CERT_INFO_MAX_ENTRIES = 15

# Longest one-line rendering of a distinguished name.
NAME_ONELINE_LIMIT = 255

KERBEROS_PRINCIPAL_NAME_OID = ObjectIdentifier("1.3.6.1.5.2.2")
MS_UPN_OID = ObjectIdentifier("1.3.6.1.4.1.311.20.2.3")

_UTF8_STRING = 12

# ASN.1 universal string tags that convert to text, with their codec.
_STRING_CODECS: dict[int, str] = {
    _UTF8_STRING: "utf-8",
    18: "latin-1",  # NumericString
    19: "latin-1",  # PrintableString
    20: "latin-1",  # T61String
    21: "latin-1",  # VideotexString
    22: "latin-1",  # IA5String
    23: "latin-1",  # UTCTime
    24: "latin-1",  # GeneralizedTime
    25: "latin-1",  # GraphicString
    26: "latin-1",  # VisibleString
    27: "latin-1",  # GeneralString
    28: "utf-32-be",  # UniversalString
    30: "utf-16-be",  # BMPString
}

_SHORT_NAMES: dict[str, str] = {
    "2.5.4.3": "CN",
    "2.5.4.4": "SN",
    "2.5.4.5": "serialNumber",
    "2.5.4.6": "C",
    "2.5.4.7": "L",
    "2.5.4.8": "ST",
    "2.5.4.9": "street",
    "2.5.4.10": "O",
    "2.5.4.11": "OU",
    "2.5.4.12": "title",
    "2.5.4.13": "description",
    "2.5.4.15": "businessCategory",
    "2.5.4.17": "postalCode",
    "2.5.4.41": "name",
    "2.5.4.42": "GN",
    "2.5.4.43": "initials",
    "2.5.4.44": "generationQualifier",
    "2.5.4.45": "x500UniqueIdentifier",
    "2.5.4.46": "dnQualifier",
    "2.5.4.65": "pseudonym",
    "2.5.4.97": "organizationIdentifier",
    "1.2.840.113549.1.9.1": "emailAddress",
    "0.9.2342.19200300.100.1.1": "UID",
    "0.9.2342.19200300.100.1.25": "DC",
    "1.3.6.1.4.1.311.60.2.1.1": "jurisdictionL",
    "1.3.6.1.4.1.311.60.2.1.2": "jurisdictionST",
    "1.3.6.1.4.1.311.60.2.1.3": "jurisdictionC",
}


def _parse_der(data: bytes) -> tuple[int, bytes] | None:
    """Split a DER TLV into (tag byte, content); None if malformed."""
    if len(data) < 2:
        return None
    tag = data[0]
    first = data[1]
    pos = 2
    if first & 0x80:
        count = first & 0x7F
        if count == 0 or pos + count > len(data):
            return None
        length = int.from_bytes(data[pos:pos + count], "big")
        pos += count
    else:
        length = first
    if pos + length > len(data):
        return None
    return tag, data[pos:pos + length]


def _der_string_to_text(data: bytes) -> str | None:
    """Convert a DER-encoded ASN.1 string to text; None if it is no string."""
    parsed = _parse_der(data)
    if parsed is None:
        return None
    tag, content = parsed
    codec = _STRING_CODECS.get(tag)
    if codec is None:
        return None
    try:
        return content.decode(codec)
    except UnicodeDecodeError:
        return None


def _attribute_texts(name: x509.Name, oid: ObjectIdentifier, limit: int) -> list[str]:
    """Collect text values of ``oid`` attributes, stopping at a non-text one."""
    results: list[str] = []
    for attribute in name.get_attributes_for_oid(oid):
        if len(results) >= limit:
            break
        if not isinstance(attribute.value, str):
            break
        results.append(attribute.value)
    return results


def _oneline(name: x509.Name) -> str:
    """Render a name as ``/K=V/K=V`` with non-printable bytes as ``\\xHH``."""
    parts: list[str] = []
    total = 0
    for attribute in name:
        key = _SHORT_NAMES.get(attribute.oid.dotted_string, attribute.oid.dotted_string)
        raw = attribute.value
        data = raw if isinstance(raw, bytes) else raw.encode("utf-8")
        value = "".join(
            chr(byte) if 0x20 <= byte <= 0x7E else f"\\x{byte:02X}" for byte in data
        )
        piece = f"/{key}={value}"
        if total + len(piece) > NAME_ONELINE_LIMIT:
            break
        parts.append(piece)
        total += len(piece)
    return "".join(parts)


def _alt_names(cert: x509.Certificate) -> x509.SubjectAlternativeName | None:
    try:
        extension = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return None
    return extension.value


def _other_names(cert: x509.Certificate, oid: ObjectIdentifier) -> list[bytes] | None:
    alt = _alt_names(cert)
    if alt is None:
        return None
    return [item.value for item in alt.get_values_for_type(x509.OtherName)
            if item.type_id == oid]


def cert_cn(cert: x509.Certificate) -> list[str] | None:
    """Return the subject's common names, or None if it has none."""
    if not cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME):
        return None
    return _attribute_texts(cert.subject, NameOID.COMMON_NAME, CERT_INFO_MAX_ENTRIES)


def cert_subject(cert: x509.Certificate) -> list[str]:
    """Return the subject as a one-line distinguished name."""
    return [_oneline(cert.subject)]


def cert_issuer(cert: x509.Certificate) -> list[str]:
    """Return the issuer as a one-line distinguished name."""
    return [_oneline(cert.issuer)]


def cert_serial(cert: x509.Certificate) -> list[str]:
    """Return the serial number's DER content bytes as colon-separated hex."""
    serial = cert.serial_number
    magnitude = serial if serial >= 0 else -serial - 1
    length = (magnitude.bit_length() + 8) // 8
    return [bin2hex(serial.to_bytes(length, "big", signed=True))]


def cert_kpn(cert: x509.Certificate) -> list[str] | None:
    """Return Kerberos principal names held as strings in the alternative names."""
    values = _other_names(cert, KERBEROS_PRINCIPAL_NAME_OID)
    if values is None:
        return None
    results: list[str] = []
    for value in values:
        if len(results) >= CERT_INFO_MAX_ENTRIES:
            break
        text = _der_string_to_text(value)
        if text is not None:
            results.append(text)
    return results or None


def cert_email(cert: x509.Certificate) -> list[str] | None:
    """Return the e-mail addresses from the alternative names, or None."""
    alt = _alt_names(cert)
    if alt is None:
        return None
    emails = alt.get_values_for_type(x509.RFC822Name)[:CERT_INFO_MAX_ENTRIES]
    return list(emails) or None


def cert_upn(cert: x509.Certificate) -> list[str] | None:
    """Return Microsoft universal principal names stored as UTF8String, or None."""
    values = _other_names(cert, MS_UPN_OID)
    if values is None:
        return None
    results: list[str] = []
    for value in values:
        if len(results) >= CERT_INFO_MAX_ENTRIES:
            break
        parsed = _parse_der(value)
        if parsed is None or parsed[0] != _UTF8_STRING:
            continue
        results.append(parsed[1].decode("utf-8", errors="replace"))
    return results or None


def cert_uid(cert: x509.Certificate) -> list[str] | None:
    """Return the subject's unique identifiers, or None if it has none.

    Without an x500UniqueIdentifier attribute, only the first user id is used.
    """
    subject = cert.subject
    if subject.get_attributes_for_oid(NameOID.X500_UNIQUE_IDENTIFIER):
        return _attribute_texts(subject, NameOID.X500_UNIQUE_IDENTIFIER,
                                CERT_INFO_MAX_ENTRIES)
    if subject.get_attributes_for_oid(NameOID.USER_ID):
        return _attribute_texts(subject, NameOID.USER_ID, 1)
    return None