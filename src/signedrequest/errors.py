"""Classified failures for signing, parsing, and verifying signed requests."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    SIGNING_FAILED = "signing_failed"
    CERTIFICATE_FETCH_FAILED = "certificate_fetch_failed"
    NO_PUBLIC_CERTIFICATES = "no_public_certificates"
    PEM_DECODE_FAILURE = "pem_decode_failure"
    CERTIFICATE_PARSE_ERROR = "certificate_parse_error"
    NOT_RSA_PUBLIC_KEY = "not_rsa_public_key"
    SIGNATURE_MISMATCH = "signature_mismatch"
    INVALID_SIGNATURE_ENCODING = "invalid_signature_encoding"
    EXPIRED = "expired"
    MALFORMED_ENVELOPE = "malformed_envelope"


class SignedRequestError(ValueError):
    """Raised by operations that produce a value (signing, parsing)."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind

    def __repr__(self) -> str:
        return f"SignedRequestError({self.kind.name}, {str(self)!r})"
