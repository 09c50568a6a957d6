"""Verify RSA PKCS#1 v1.5 / SHA-256 signatures against rotating public certificates.

During key rotation several certificates can be valid at once. A signature is
accepted as soon as any certificate's key validates it; certificates are
tried in the order the source returns them. When nothing matches, the failure
recorded for the last certificate tried is reported.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import re

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa, utils

from signedrequest.certificates import CertificateSource
from signedrequest.errors import ErrorKind
from signedrequest.types import VerifyResult

logger = logging.getLogger(__name__)

_PEM_BLOCK = re.compile(
    rb"-----BEGIN ([A-Z0-9 ]+)-----[ \t]*\r?\n(.*?)-----END \1-----",
    re.DOTALL,
)


def decode_pem(data: bytes) -> bytes | None:
    """Return the DER bytes of the first PEM block in ``data``, or None."""
    match = _PEM_BLOCK.search(data)
    if match is None:
        return None
    try:
        return base64.b64decode(b"".join(match.group(2).split()), validate=True)
    except (binascii.Error, ValueError):
        return None


def _public_key(data: bytes) -> tuple[rsa.RSAPublicKey | None, ErrorKind | None, str | None]:
    der = decode_pem(data)
    if der is None:
        return None, ErrorKind.PEM_DECODE_FAILURE, "failed to decode PEM certificate"

    try:
        certificate = x509.load_der_x509_certificate(der)
        public_key = certificate.public_key()
    except (ValueError, TypeError, UnsupportedAlgorithm) as error:
        return None, ErrorKind.CERTIFICATE_PARSE_ERROR, f"failed to parse X.509 certificate: {error}"

    if not isinstance(public_key, rsa.RSAPublicKey):
        return None, ErrorKind.NOT_RSA_PUBLIC_KEY, "certificate public key is not an RSA key"
    return public_key, None, None


def verify_bytes(payload: bytes, signature: bytes, source: CertificateSource) -> VerifyResult:
    try:
        certificates = source.current_public_certificates()
    except Exception as error:  # noqa: BLE001
        logger.error("Error getting public certificates: %s", error)
        return VerifyResult.fail(
            ErrorKind.CERTIFICATE_FETCH_FAILED,
            f"failed to fetch public certificates: {error}",
        )

    last = VerifyResult.fail(ErrorKind.NO_PUBLIC_CERTIFICATES, "no public certificates available")
    digest = hashlib.sha256(payload).digest()

    for index, certificate in enumerate(certificates):
        public_key, error, reason = _public_key(certificate.data)
        if public_key is None:
            logger.warning("Skipping certificate %d (%s): %s", index, certificate.key_name, reason)
            last = VerifyResult.fail(error, reason)  # type: ignore[arg-type]
            continue

        try:
            public_key.verify(
                signature,
                digest,
                padding.PKCS1v15(),
                utils.Prehashed(hashes.SHA256()),
            )
        except InvalidSignature:
            logger.debug("Failed to verify signature with key %d named %s", index, certificate.key_name)
            last = VerifyResult.fail(ErrorKind.SIGNATURE_MISMATCH, "signature does not match any public certificate")
            continue

        logger.debug("Signature verified with key %d named %s", index, certificate.key_name)
        return VerifyResult.ok(certificate.key_name)

    return last
