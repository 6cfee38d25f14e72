from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature
from cryptography.x509.oid import NameOID

from pkcs11cert.cert_vfy import (
    CertPolicy,
    CrlPolicy,
    VerifyResult,
    download_crl,
    load_crl,
    verify_certificate,
    verify_signature,
)
from pkcs11cert.errors import Pkcs11CertError, get_error

NOW = datetime.now(timezone.utc)
CRL_URI = "http://crl.example.com/ca.crl"


def _name(cn):
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)])


def _key():
    return ec.generate_private_key(ec.SECP256R1())


def _cert(subject, issuer, key, signing_key, *, before=None, after=None, extensions=()):
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(before or NOW - timedelta(days=1))
        .not_valid_after(after or NOW + timedelta(days=30))
    )
    for ext in extensions:
        builder = builder.add_extension(ext, critical=False)
    return builder.sign(signing_key, hashes.SHA256())


def _crl(issuer, key, revoked=(), last=None, nxt=None):
    builder = (
        x509.CertificateRevocationListBuilder()
        .issuer_name(issuer)
        .last_update(last or NOW - timedelta(days=1))
        .next_update(nxt or NOW + timedelta(days=7))
    )
    for serial in revoked:
        builder = builder.add_revoked_certificate(
            x509.RevokedCertificateBuilder()
            .serial_number(serial)
            .revocation_date(NOW - timedelta(days=1))
            .build()
        )
    return builder.sign(key, hashes.SHA256())


def _pem(obj):
    return obj.public_bytes(serialization.Encoding.PEM)


def _write(path, *objs):
    path.write_bytes(b"".join(_pem(obj) for obj in objs))
    return str(path)


@pytest.fixture
def pki(tmp_path):
    ca_key = _key()
    ca_name = _name("Test CA")
    ca = _cert(ca_name, ca_name, ca_key, ca_key)
    leaf_key = _key()
    leaf = _cert(_name("user"), ca_name, leaf_key, ca_key)
    ca_file = _write(tmp_path / "ca.pem", ca)
    return SimpleNamespace(
        ca_key=ca_key, ca_name=ca_name, ca=ca, leaf_key=leaf_key, leaf=leaf,
        ca_file=ca_file, tmp=tmp_path,
    )


def test_load_crl_pem_and_der_roundtrip(pki):
    crl = _crl(pki.ca_name, pki.ca_key, revoked=[7])
    der = crl.public_bytes(serialization.Encoding.DER)
    assert load_crl(_pem(crl)).public_bytes(serialization.Encoding.DER) == der
    assert load_crl(der).public_bytes(serialization.Encoding.DER) == der


def test_load_crl_pem_with_surrounding_text(pki):
    crl = _crl(pki.ca_name, pki.ca_key)
    data = b"header text\n" + _pem(crl) + b"trailer\n"
    loaded = load_crl(data)
    assert loaded.issuer == pki.ca_name


def test_load_crl_garbage_raises():
    with pytest.raises(Pkcs11CertError):
        load_crl(b"not a crl at all")


def test_load_crl_bad_base64_raises():
    with pytest.raises(Pkcs11CertError):
        load_crl(b"-----BEGIN X509 CRL-----\n!!!!\n-----END X509 CRL-----\n")


def test_download_crl_uses_fetch(pki):
    crl = _crl(pki.ca_name, pki.ca_key)
    calls = []

    def fetch(uri):
        calls.append(uri)
        return crl.public_bytes(serialization.Encoding.DER)

    loaded = download_crl(CRL_URI, fetch)
    assert calls == [CRL_URI]
    assert loaded.issuer == pki.ca_name


def test_download_crl_fetch_failure_raises():
    def fetch(uri):
        raise OSError("unreachable")

    with pytest.raises(Pkcs11CertError):
        download_crl(CRL_URI, fetch)


def test_no_checks_requested_is_valid(pki):
    assert verify_certificate(pki.leaf, CertPolicy()) is VerifyResult.VALID


def test_result_codes_match_source(pki):
    policy = CertPolicy(ca_policy=True, ca_dir=pki.ca_file)
    expired = _cert(_name("old"), pki.ca_name, pki.leaf_key, pki.ca_key,
                    before=NOW - timedelta(days=10), after=NOW - timedelta(days=1))
    future = _cert(_name("future"), pki.ca_name, pki.leaf_key, pki.ca_key,
                   before=NOW + timedelta(days=1), after=NOW + timedelta(days=10))
    assert int(verify_certificate(expired, policy)) == -2
    assert int(verify_certificate(future, policy)) == -3
    missing = CertPolicy(ca_policy=True, ca_dir=str(pki.tmp / "absent"))
    assert int(verify_certificate(pki.leaf, missing)) == -4


def test_ca_file_valid(pki):
    policy = CertPolicy(ca_policy=True, ca_dir=pki.ca_file)
    assert verify_certificate(pki.leaf, policy) is VerifyResult.VALID


def test_ca_file_url_valid(pki):
    policy = CertPolicy(ca_policy=True, ca_dir="file://" + pki.ca_file)
    assert verify_certificate(pki.leaf, policy) is VerifyResult.VALID


def test_ca_directory_valid(pki):
    cadir = pki.tmp / "cacerts"
    cadir.mkdir()
    _write(cadir / "root.pem", pki.ca)
    policy = CertPolicy(ca_policy=True, ca_dir=str(cadir))
    assert verify_certificate(pki.leaf, policy) is VerifyResult.VALID


def test_missing_issuer(pki):
    policy = CertPolicy(ca_policy=True, ca_dir=str(pki.tmp / "absent"))
    assert verify_certificate(pki.leaf, policy) is VerifyResult.UNKNOWN_ISSUER


def test_expired_leaf(pki):
    leaf = _cert(_name("old"), pki.ca_name, pki.leaf_key, pki.ca_key,
                 before=NOW - timedelta(days=10), after=NOW - timedelta(days=1))
    policy = CertPolicy(ca_policy=True, ca_dir=pki.ca_file)
    assert verify_certificate(leaf, policy) is VerifyResult.EXPIRED


def test_not_yet_valid_leaf(pki):
    leaf = _cert(_name("future"), pki.ca_name, pki.leaf_key, pki.ca_key,
                 before=NOW + timedelta(days=1), after=NOW + timedelta(days=10))
    policy = CertPolicy(ca_policy=True, ca_dir=pki.ca_file)
    assert verify_certificate(leaf, policy) is VerifyResult.NOT_YET_VALID


def test_wrong_ca_key_is_invalid(pki):
    other_key = _key()
    impostor = _cert(pki.ca_name, pki.ca_name, other_key, other_key)
    path = _write(pki.tmp / "impostor.pem", impostor)
    policy = CertPolicy(ca_policy=True, ca_dir=path)
    assert verify_certificate(pki.leaf, policy) is VerifyResult.INVALID


def test_untrusted_self_signed_is_invalid(pki):
    key = _key()
    name = _name("self")
    selfsigned = _cert(name, name, key, key)
    policy = CertPolicy(ca_policy=True, ca_dir=pki.ca_file)
    assert verify_certificate(selfsigned, policy) is VerifyResult.INVALID


def test_offline_crl_revoked(pki):
    crl = _crl(pki.ca_name, pki.ca_key, revoked=[pki.leaf.serial_number])
    crl_file = _write(pki.tmp / "crl.pem", pki.ca, crl)
    policy = CertPolicy(ca_policy=True, ca_dir=pki.ca_file,
                        crl_policy=CrlPolicy.OFFLINE, crl_dir=crl_file)
    assert verify_certificate(pki.leaf, policy) is VerifyResult.INVALID


def test_offline_crl_not_revoked(pki):
    crl = _crl(pki.ca_name, pki.ca_key, revoked=[pki.leaf.serial_number + 1])
    crl_file = _write(pki.tmp / "crl.pem", pki.ca, crl)
    policy = CertPolicy(crl_policy=CrlPolicy.OFFLINE, crl_dir=crl_file)
    assert verify_certificate(pki.leaf, policy) is VerifyResult.VALID


def test_offline_without_crl_raises(pki):
    policy = CertPolicy(crl_policy=CrlPolicy.OFFLINE, crl_dir=pki.ca_file)
    with pytest.raises(Pkcs11CertError):
        verify_certificate(pki.leaf, policy)
    assert "no dedicated crl available" in get_error()


def test_crl_issuer_missing_raises(pki):
    crl = _crl(pki.ca_name, pki.ca_key)
    crl_file = _write(pki.tmp / "only_crl.pem", crl)
    policy = CertPolicy(crl_policy=CrlPolicy.OFFLINE, crl_dir=crl_file)
    with pytest.raises(Pkcs11CertError):
        verify_certificate(pki.leaf, policy)


def test_expired_crl_is_invalid(pki):
    crl = _crl(pki.ca_name, pki.ca_key, last=NOW - timedelta(days=10),
               nxt=NOW - timedelta(days=1))
    crl_file = _write(pki.tmp / "crl.pem", pki.ca, crl)
    policy = CertPolicy(crl_policy=CrlPolicy.OFFLINE, crl_dir=crl_file)
    assert verify_certificate(pki.leaf, policy) is VerifyResult.INVALID


def test_crl_with_bad_signature_is_invalid(pki):
    crl = _crl(pki.ca_name, _key())
    crl_file = _write(pki.tmp / "crl.pem", pki.ca, crl)
    policy = CertPolicy(crl_policy=CrlPolicy.OFFLINE, crl_dir=crl_file)
    assert verify_certificate(pki.leaf, policy) is VerifyResult.INVALID


def _cdp():
    return x509.CRLDistributionPoints([
        x509.DistributionPoint(
            full_name=[x509.UniformResourceIdentifier(CRL_URI)],
            relative_name=None, reasons=None, crl_issuer=None,
        )
    ])


def test_online_crl_from_leaf_distribution_point(pki):
    leaf = _cert(_name("user"), pki.ca_name, pki.leaf_key, pki.ca_key,
                 extensions=[_cdp()])
    crl = _crl(pki.ca_name, pki.ca_key, revoked=[leaf.serial_number])
    calls = []

    def fetch(uri):
        calls.append(uri)
        return _pem(crl)

    policy = CertPolicy(ca_policy=True, ca_dir=pki.ca_file, crl_policy=CrlPolicy.ONLINE)
    assert verify_certificate(leaf, policy, fetch) is VerifyResult.INVALID
    assert calls == [CRL_URI]


def test_online_crl_from_ca_distribution_point(pki):
    ca = _cert(pki.ca_name, pki.ca_name, pki.ca_key, pki.ca_key, extensions=[_cdp()])
    ca_file = _write(pki.tmp / "ca_cdp.pem", ca)
    crl = _crl(pki.ca_name, pki.ca_key)
    policy = CertPolicy(ca_policy=True, ca_dir=ca_file, crl_policy=CrlPolicy.ONLINE)
    result = verify_certificate(pki.leaf, policy, lambda uri: _pem(crl))
    assert result is VerifyResult.VALID


def test_online_without_distribution_points_raises(pki):
    policy = CertPolicy(ca_policy=True, ca_dir=pki.ca_file, crl_policy=CrlPolicy.ONLINE)
    with pytest.raises(Pkcs11CertError):
        verify_certificate(pki.leaf, policy, lambda uri: b"")


def test_auto_falls_back_to_offline(pki):
    leaf = _cert(_name("user"), pki.ca_name, pki.leaf_key, pki.ca_key,
                 extensions=[_cdp()])
    crl = _crl(pki.ca_name, pki.ca_key, revoked=[leaf.serial_number])
    crl_file = _write(pki.tmp / "crl.pem", pki.ca, crl)

    def fetch(uri):
        raise OSError("offline")

    policy = CertPolicy(crl_policy=CrlPolicy.AUTO, crl_dir=crl_file)
    assert verify_certificate(leaf, policy, fetch) is VerifyResult.INVALID


def test_verify_signature_ec_raw(pki):
    data = b"challenge data"
    der = pki.leaf_key.sign(data, ec.ECDSA(hashes.SHA256()))
    r, s = decode_dss_signature(der)
    raw = r.to_bytes(32, "big") + s.to_bytes(32, "big")
    assert verify_signature(pki.leaf, data, raw) is True
    with pytest.raises(Pkcs11CertError):
        verify_signature(pki.leaf, b"other data", raw)


def test_verify_signature_rsa(pki):
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    cert = _cert(_name("rsa user"), pki.ca_name, key, pki.ca_key)
    data = b"challenge data"
    signature = key.sign(data, padding.PKCS1v15(), hashes.SHA256())
    assert verify_signature(cert, data, signature) is True
    tampered = bytes([signature[0] ^ 1]) + signature[1:]
    with pytest.raises(Pkcs11CertError):
        verify_signature(cert, data, tampered)