"""Signed requests: canonical signing with expirations, verified against rotating certificates."""

from signedrequest.canonical import canonical_header_key, canonicalize, expiration_seconds
from signedrequest.certificates import (
    CachingCertificateSource,
    CertificateSource,
    DirectoryCertificateSource,
    StaticCertificateSource,
)
from signedrequest.errors import ErrorKind, SignedRequestError
from signedrequest.handler import signed_handler
from signedrequest.request import sign_request, verify_request
from signedrequest.signature import verify_bytes
from signedrequest.signer import PrivateKeySigner, Signer
from signedrequest.types import PublicCertificate, SignedRequest, VerifyResult, WireRequest
from signedrequest.wire import (
    parse_http_request,
    parse_wire_request,
    request_from_dict,
    request_from_json,
    request_to_dict,
    request_to_json,
    to_http_headers,
    to_urllib_request,
    to_wire_request,
)

__all__ = [
    "CachingCertificateSource",
    "CertificateSource",
    "DirectoryCertificateSource",
    "ErrorKind",
    "PrivateKeySigner",
    "PublicCertificate",
    "SignedRequest",
    "SignedRequestError",
    "Signer",
    "StaticCertificateSource",
    "VerifyResult",
    "WireRequest",
    "canonical_header_key",
    "canonicalize",
    "expiration_seconds",
    "parse_http_request",
    "parse_wire_request",
    "request_from_dict",
    "request_from_json",
    "request_to_dict",
    "request_to_json",
    "sign_request",
    "signed_handler",
    "to_http_headers",
    "to_urllib_request",
    "to_wire_request",
    "verify_bytes",
    "verify_request",
]

__version__ = "0.0.1"
