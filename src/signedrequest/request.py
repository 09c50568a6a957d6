"""Sign and verify request envelopes with expirations."""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime, timezone

from signedrequest.canonical import canonicalize
from signedrequest.certificates import CertificateSource
from signedrequest.errors import ErrorKind, SignedRequestError
from signedrequest.signature import verify_bytes
from signedrequest.signer import Signer
from signedrequest.types import SignedRequest, VerifyResult

logger = logging.getLogger(__name__)


def signing_string(request: SignedRequest) -> bytes:
    return canonicalize(request.method, request.url, request.expiration, request.headers)


def sign_request(request: SignedRequest, signer: Signer) -> SignedRequest:
    """Sign ``request`` in place and return it.

    The oracle is called once; a failure is not retried.
    """
    payload = signing_string(request)
    try:
        _, signature = signer.sign(payload)
    except Exception as error:  # noqa: BLE001
        raise SignedRequestError(ErrorKind.SIGNING_FAILED, f"Failed to sign request: {error}") from error

    request.signature = base64.b64encode(signature).decode("ascii")
    return request


def decode_signature(value: str) -> bytes | None:
    if not value:
        return None
    try:
        decoded = base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError):
        return None
    return decoded or None


def verify_request(
    request: SignedRequest,
    source: CertificateSource,
    now: datetime | None = None,
) -> VerifyResult:
    signature = decode_signature(request.signature)
    if signature is None:
        return VerifyResult.fail(ErrorKind.INVALID_SIGNATURE_ENCODING, "Signature is missing or not valid base64")

    result = verify_bytes(signing_string(request), signature, source)
    if not result.valid:
        return result

    now_value = now if now is not None else datetime.now(timezone.utc)
    if now_value.tzinfo is None:
        now_value = now_value.replace(tzinfo=timezone.utc)
    expiration = request.expiration
    if expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=timezone.utc)
    if now_value > expiration:
        logger.debug("Signed request for %s expired at %s", request.url, expiration.isoformat())
        return VerifyResult(
            valid=False,
            error=ErrorKind.EXPIRED,
            reason="Signed request expired",
            key_name=result.key_name,
        )
    return result
