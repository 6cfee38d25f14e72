"""SSL error codes and their descriptive messages."""

from __future__ import annotations

from enum import IntEnum

__all__ = ["SSL_ERROR_BASE", "SSLErrorCode", "ssl_error_name", "ssl_error_text"]

SSL_ERROR_BASE = -0x3000

_PREFIX = "SSL_ERROR_"

# offset from SSL_ERROR_BASE -> (short name, message); offsets 5, 10 and 13 are unused.
_TABLE: dict[int, tuple[str, str]] = {
    0: ("EXPORT_ONLY_SERVER", "Unable to communicate securely.  Peer does not support high-grade encryption."),
    1: ("US_ONLY_SERVER", "Unable to communicate securely.  Peer requires high-grade encryption which is not supported."),
    2: ("NO_CYPHER_OVERLAP", "Cannot communicate securely with peer: no common encryption algorithm(s)."),
    3: ("NO_CERTIFICATE", "Unable to find the certificate or key necessary for authentication."),
    4: ("BAD_CERTIFICATE", "Unable to communicate securely with peer: peers's certificate was rejected."),
    6: ("BAD_CLIENT", "The server has encountered bad data from the client."),
    7: ("BAD_SERVER", "The client has encountered bad data from the server."),
    8: ("UNSUPPORTED_CERTIFICATE_TYPE", "Unsupported certificate type."),
    9: ("UNSUPPORTED_VERSION", "Peer using unsupported version of security protocol."),
    11: ("WRONG_CERTIFICATE", "Client authentication failed: private key in key database does not match public key in certificate database."),
    12: ("BAD_CERT_DOMAIN", "Unable to communicate securely with peer: requested domain name does not match the server's certificate."),
    14: ("SSL2_DISABLED", "Peer only supports SSL version 2, which is locally disabled."),
    15: ("BAD_MAC_READ", "SSL received a record with an incorrect Message Authentication Code."),
    16: ("BAD_MAC_ALERT", "SSL peer reports incorrect Message Authentication Code."),
    17: ("BAD_CERT_ALERT", "SSL peer cannot verify your certificate."),
    18: ("REVOKED_CERT_ALERT", "SSL peer rejected your certificate as revoked."),
    19: ("EXPIRED_CERT_ALERT", "SSL peer rejected your certificate as expired."),
    20: ("SSL_DISABLED", "Cannot connect: SSL is disabled."),
    21: ("FORTEZZA_PQG", "Cannot connect: SSL peer is in another FORTEZZA domain."),
    22: ("UNKNOWN_CIPHER_SUITE", "An unknown SSL cipher suite has been requested."),
    23: ("NO_CIPHERS_SUPPORTED", "No cipher suites are present and enabled in this program."),
    24: ("BAD_BLOCK_PADDING", "SSL received a record with bad block padding."),
    25: ("RX_RECORD_TOO_LONG", "SSL received a record that exceeded the maximum permissible length."),
    26: ("TX_RECORD_TOO_LONG", "SSL attempted to send a record that exceeded the maximum permissible length."),
    27: ("RX_MALFORMED_HELLO_REQUEST", "SSL received a malformed Hello Request handshake message."),
    28: ("RX_MALFORMED_CLIENT_HELLO", "SSL received a malformed Client Hello handshake message."),
    29: ("RX_MALFORMED_SERVER_HELLO", "SSL received a malformed Server Hello handshake message."),
    30: ("RX_MALFORMED_CERTIFICATE", "SSL received a malformed Certificate handshake message."),
    31: ("RX_MALFORMED_SERVER_KEY_EXCH", "SSL received a malformed Server Key Exchange handshake message."),
    32: ("RX_MALFORMED_CERT_REQUEST", "SSL received a malformed Certificate Request handshake message."),
    33: ("RX_MALFORMED_HELLO_DONE", "SSL received a malformed Server Hello Done handshake message."),
    34: ("RX_MALFORMED_CERT_VERIFY", "SSL received a malformed Certificate Verify handshake message."),
    35: ("RX_MALFORMED_CLIENT_KEY_EXCH", "SSL received a malformed Client Key Exchange handshake message."),
    36: ("RX_MALFORMED_FINISHED", "SSL received a malformed Finished handshake message."),
    37: ("RX_MALFORMED_CHANGE_CIPHER", "SSL received a malformed Change Cipher Spec record."),
    38: ("RX_MALFORMED_ALERT", "SSL received a malformed Alert record."),
    39: ("RX_MALFORMED_HANDSHAKE", "SSL received a malformed Handshake record."),
    40: ("RX_MALFORMED_APPLICATION_DATA", "SSL received a malformed Application Data record."),
    41: ("RX_UNEXPECTED_HELLO_REQUEST", "SSL received an unexpected Hello Request handshake message."),
    42: ("RX_UNEXPECTED_CLIENT_HELLO", "SSL received an unexpected Client Hello handshake message."),
    43: ("RX_UNEXPECTED_SERVER_HELLO", "SSL received an unexpected Server Hello handshake message."),
    44: ("RX_UNEXPECTED_CERTIFICATE", "SSL received an unexpected Certificate handshake message."),
    45: ("RX_UNEXPECTED_SERVER_KEY_EXCH", "SSL received an unexpected Server Key Exchange handshake message."),
    46: ("RX_UNEXPECTED_CERT_REQUEST", "SSL received an unexpected Certificate Request handshake message."),
    47: ("RX_UNEXPECTED_HELLO_DONE", "SSL received an unexpected Server Hello Done handshake message."),
    48: ("RX_UNEXPECTED_CERT_VERIFY", "SSL received an unexpected Certificate Verify handshake message."),
    49: ("RX_UNEXPECTED_CLIENT_KEY_EXCH", "SSL received an unexpected Cllient Key Exchange handshake message."),
    50: ("RX_UNEXPECTED_FINISHED", "SSL received an unexpected Finished handshake message."),
    51: ("RX_UNEXPECTED_CHANGE_CIPHER", "SSL received an unexpected Change Cipher Spec record."),
    52: ("RX_UNEXPECTED_ALERT", "SSL received an unexpected Alert record."),
    53: ("RX_UNEXPECTED_HANDSHAKE", "SSL received an unexpected Handshake record."),
    54: ("RX_UNEXPECTED_APPLICATION_DATA", "SSL received an unexpected Application Data record."),
    55: ("RX_UNKNOWN_RECORD_TYPE", "SSL received a record with an unknown content type."),
    56: ("RX_UNKNOWN_HANDSHAKE", "SSL received a handshake message with an unknown message type."),
    57: ("RX_UNKNOWN_ALERT", "SSL received an alert record with an unknown alert description."),
    58: ("CLOSE_NOTIFY_ALERT", "SSL peer has closed this connection."),
    59: ("HANDSHAKE_UNEXPECTED_ALERT", "SSL peer was not expecting a handshake message it received."),
    60: ("DECOMPRESSION_FAILURE_ALERT", "SSL peer was unable to successfully decompress an SSL record it received."),
    61: ("HANDSHAKE_FAILURE_ALERT", "SSL peer was unable to negotiate an acceptable set of security parameters."),
    62: ("ILLEGAL_PARAMETER_ALERT", "SSL peer rejected a handshake message for unacceptable content."),
    63: ("UNSUPPORTED_CERT_ALERT", "SSL peer does not support certificates of the type it received."),
    64: ("CERTIFICATE_UNKNOWN_ALERT", "SSL peer had some unspecified issue with the certificate it received."),
    65: ("GENERATE_RANDOM_FAILURE", "SSL experienced a failure of its random number generator."),
    66: ("SIGN_HASHES_FAILURE", "Unable to digitally sign data required to verify your certificate."),
    67: ("EXTRACT_PUBLIC_KEY_FAILURE", "SSL was unable to extract the public key from the peer's certificate."),
    68: ("SERVER_KEY_EXCHANGE_FAILURE", "Unspecified failure while processing SSL Server Key Exchange handshake."),
    69: ("CLIENT_KEY_EXCHANGE_FAILURE", "Unspecified failure while processing SSL Client Key Exchange handshake."),
    70: ("ENCRYPTION_FAILURE", "Bulk data encryption algorithm failed in selected cipher suite."),
    71: ("DECRYPTION_FAILURE", "Bulk data decryption algorithm failed in selected cipher suite."),
    72: ("SOCKET_WRITE_FAILURE", "Attempt to write encrypted data to underlying socket failed."),
    73: ("MD5_DIGEST_FAILURE", "MD5 digest function failed."),
    74: ("SHA_DIGEST_FAILURE", "SHA-1 digest function failed."),
    75: ("MAC_COMPUTATION_FAILURE", "MAC computation failed."),
    76: ("SYM_KEY_CONTEXT_FAILURE", "Failure to create Symmetric Key context."),
    77: ("SYM_KEY_UNWRAP_FAILURE", "Failure to unwrap the Symmetric key in Client Key Exchange message."),
    78: ("PUB_KEY_SIZE_LIMIT_EXCEEDED", "SSL Server attempted to use domestic-grade public key with export cipher suite."),
    79: ("IV_PARAM_FAILURE", "PKCS11 code failed to translate an IV into a param."),
    80: ("INIT_CIPHER_SUITE_FAILURE", "Failed to initialize the selected cipher suite."),
    81: ("SESSION_KEY_GEN_FAILURE", "Client failed to generate session keys for SSL session."),
    82: ("NO_SERVER_KEY_FOR_ALG", "Server has no key for the attempted key exchange algorithm."),
    83: ("TOKEN_INSERTION_REMOVAL", "PKCS#11 token was inserted or removed while operation was in progress."),
    84: ("TOKEN_SLOT_NOT_FOUND", "No PKCS#11 token could be found to do a required operation."),
    85: ("NO_COMPRESSION_OVERLAP", "Cannot communicate securely with peer: no common compression algorithm(s)."),
    86: ("HANDSHAKE_NOT_COMPLETED", "Cannot initiate another SSL handshake until current handshake is complete."),
    87: ("BAD_HANDSHAKE_HASH_VALUE", "Received incorrect handshakes hash values from peer."),
    88: ("CERT_KEA_MISMATCH", "The certificate provided cannot be used with the selected key exchange algorithm."),
    89: ("NO_TRUSTED_SSL_CLIENT_CA", "No certificate authority is trusted for SSL client authentication."),
    90: ("SESSION_NOT_FOUND", "Client's SSL session ID not found in server's session cache."),
    91: ("DECRYPTION_FAILED_ALERT", "Peer was unable to decrypt an SSL record it received."),
    92: ("RECORD_OVERFLOW_ALERT", "Peer received an SSL record that was longer than is permitted."),
    93: ("UNKNOWN_CA_ALERT", "Peer does not recognize and trust the CA that issued your certificate."),
    94: ("ACCESS_DENIED_ALERT", "Peer received a valid certificate, but access was denied."),
    95: ("DECODE_ERROR_ALERT", "Peer could not decode an SSL handshake message."),
    96: ("DECRYPT_ERROR_ALERT", "Peer reports failure of signature verification or key exchange."),
    97: ("EXPORT_RESTRICTION_ALERT", "Peer reports negotiation not in compliance with export regulations."),
    98: ("PROTOCOL_VERSION_ALERT", "Peer reports incompatible or unsupported protocol version."),
    99: ("INSUFFICIENT_SECURITY_ALERT", "Server requires ciphers more secure than those supported by client."),
    100: ("INTERNAL_ERROR_ALERT", "Peer reports it experienced an internal error."),
    101: ("USER_CANCELED_ALERT", "Peer user canceled handshake."),
    102: ("NO_RENEGOTIATION_ALERT", "Peer does not permit renegotiation of SSL security parameters."),
    103: ("SERVER_CACHE_NOT_CONFIGURED", "SSL server cache not configured and not disabled for this socket."),
}

SSLErrorCode = IntEnum(
    "SSLErrorCode",
    [(_PREFIX + short, SSL_ERROR_BASE + offset) for offset, (short, _) in _TABLE.items()],
    module=__name__,
)
SSLErrorCode.__doc__ = "SSL-specific security error codes."

_MESSAGES: dict[int, str] = {
    SSL_ERROR_BASE + offset: text for offset, (_, text) in _TABLE.items()
}


def ssl_error_name(code: int) -> str:
    """Return the symbolic name of an SSL error code.

    Raises ValueError for a code that is not defined.
    """
    return SSLErrorCode(code).name


def ssl_error_text(code: int) -> str:
    """Return the descriptive message of an SSL error code.

    Raises ValueError for a code that is not defined.
    """
    return _MESSAGES[int(SSLErrorCode(code))]