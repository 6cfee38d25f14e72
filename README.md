# pkcs11cert

Helpers for looking inside X.509 certificates and for checking them.
It covers name and alternative-name extraction, fingerprints, OpenSSH
public-key lines, CA chain and CRL verification, and signature checks.
It also has the small string, base64, error and debug utilities these
helpers use. Certificates are `cryptography.x509.Certificate` objects.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Reading certificate contents

```python
from cryptography import x509
from pkcs11cert.cert_info import CertInfo, cert_info
from pkcs11cert.cert_names import cert_cn, cert_email

with open("user.pem", "rb") as fh:
    cert = x509.load_pem_x509_certificate(fh.read())

print(cert_cn(cert))        # list of common names, or None
print(cert_email(cert))     # e-mail entries from subjectAltName, or None
print(cert_info(cert, CertInfo.DIGEST, "sha256"))  # ["AB:CD:..."]
print(cert_info(cert, CertInfo.SSHPUK, None))      # ["ssh-rsa AAAA... user@example.com"]
```

`cert_info(cert, info_type, algorithm)` sends each `CertInfo` member to the
function that answers it. Each answer is a list of strings. The lookups that
can find nothing return `None`. The functions are:

- `pkcs11cert.cert_names`:
  - `cert_cn`: common names.
  - `cert_subject` and `cert_issuer`: one-line `/K=V/...` names.
  - `cert_serial`: serial as colon-separated hex.
  - `cert_kpn`: Kerberos principal names.
  - `cert_email`: e-mail addresses.
  - `cert_upn`: Microsoft UPNs.
  - `cert_uid`: unique identifiers.
- `pkcs11cert.cert_info`:
  - `cert_puk`: the public key in PEM.
  - `cert_sshpuk`: an OpenSSH line, for RSA and DSA keys only.
  - `cert_pem`: the certificate in PEM.
  - `cert_digest`: the fingerprint. An unknown algorithm falls back to SHA-1.
  - `cert_key_alg`: the key algorithm name.

Multi-valued lookups return at most `CERT_INFO_MAX_ENTRIES` (15) entries.

`cert_info` raises `ValueError` in three cases:

- the certificate is `None`;
- the information type is unknown;
- `CertInfo.DIGEST` is requested without an algorithm.

## Verifying certificates and signatures

```python
from pkcs11cert.cert_vfy import CertPolicy, CrlPolicy, verify_certificate, verify_signature

policy = CertPolicy(ca_policy=True, crl_policy=CrlPolicy.OFFLINE,
                    ca_dir="/etc/pki/cacerts", crl_dir="/etc/pki/crls")
result = verify_certificate(cert, policy)
```

`ca_dir` and `crl_dir` may each be a single file or a directory. A `file://`
prefix is accepted. Every file in a directory is read as PEM or DER.

`verify_certificate` returns a `VerifyResult`:

- `VALID`
- `INVALID`
- `EXPIRED`
- `NOT_YET_VALID`
- `UNKNOWN_ISSUER`

If the check itself cannot be carried out, it raises `Pkcs11CertError`.

`CrlPolicy` sets how revocation is checked:

- `NONE`: no CRL check.
- `OFFLINE`: use a local CRL.
- `ONLINE`: download from the CRL distribution points.
- `AUTO`: try online, then offline.

Downloads go through an optional `fetch` callable that takes a URI and returns
bytes. If you do not pass one, `urllib.request` is used.

`load_crl(data)` parses a CRL in PEM or DER. `download_crl(uri, fetch)`
retrieves a CRL and parses it.

`verify_signature(cert, data, signature)` checks a SHA-256 signature made with
the certificate's RSA, DSA or EC key. EC signatures are given as raw `r || s`.
It returns `True` on success and raises `Pkcs11CertError` otherwise.

## Utilities

- `pkcs11cert.strings`: `bin2hex`, `hex2bin`, `split`, `trim`,
  `is_empty_str`, `strndup`.
- `pkcs11cert.base64codec`:
  - `base64_encode`.
  - `base64_decode`, a lenient decoder that skips CR/LF and takes an optional
    output limit.
  - `Base64Error`.
- `pkcs11cert.algorithm`: `get_alg_from_string`, `get_digest_by_name`.
- `pkcs11cert.sslerrs`: `SSLErrorCode`, `ssl_error_name`, `ssl_error_text`.
- `pkcs11cert.errors`: `Pkcs11CertError`, plus `set_error` and `get_error`
  for the last error message.
- `pkcs11cert.debug`: `set_debug_level`, `get_debug_level` and
  `debug_print`. `debug_print` writes to a terminal or to the system log.

## What this package does not do

- It does not talk to smart cards or PKCS#11 tokens.
- It does not log users in.
- It does not map certificates to accounts.
- It provides no command-line tool.
- It performs no OCSP checks. `OcspPolicy` is accepted in `CertPolicy` but is
  not acted on.