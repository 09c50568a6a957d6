"""Move signed requests on and off the wire.

Three dedicated headers carry the envelope alongside the message's own
method and URL:

* ``Signature``: base64 signature
* ``Signature-Expiration``: RFC 3339 timestamp, second precision
* ``Signed-Headers``: comma-separated names of the headers that were signed

The receiver re-canonicalizes exactly the listed headers, never every header
the message happens to carry.
"""

from __future__ import annotations

import json
import re
import urllib.request
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from signedrequest.canonical import canonical_header_key
from signedrequest.errors import ErrorKind, SignedRequestError
from signedrequest.types import HeaderInput, JsonDict, SignedRequest, WireRequest

SIGNATURE_HEADER = "Signature"
EXPIRATION_HEADER = "Signature-Expiration"
SIGNED_HEADERS_HEADER = "Signed-Headers"

_RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$",
)


def format_expiration(expiration: datetime) -> str:
    if expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=timezone.utc)
    value = expiration.replace(microsecond=0).isoformat()
    return value.replace("+00:00", "Z")


def parse_expiration(value: str) -> datetime:
    match = _RFC3339.match(value.strip())
    if not match:
        raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, f"Invalid RFC 3339 expiration: {value!r}")

    date, clock, fraction, offset = match.groups()
    # fromisoformat accepts only millisecond or microsecond fractions before 3.11
    fraction = "." + (fraction[1:] + "000000")[:6] if fraction else ""
    offset = "+00:00" if offset in ("Z", "z") else offset
    try:
        return datetime.fromisoformat(f"{date}T{clock}{fraction}{offset}")
    except ValueError as error:
        raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, f"Invalid RFC 3339 expiration: {error}") from error


def _message_headers(headers: HeaderInput | None) -> dict[str, list[str]]:
    """Case-insensitive view of a transport message's headers."""
    out: dict[str, list[str]] = {}
    if headers is None:
        return out
    items = headers.items() if isinstance(headers, Mapping) else headers
    for entry in items:
        if len(entry) != 2:
            raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, "Header entries must be [name, value]")
        name, value = entry
        values = [value] if isinstance(value, str) else [str(item) for item in value]
        out.setdefault(canonical_header_key(str(name)), []).extend(values)
    return out


def to_http_headers(request: SignedRequest) -> dict[str, str]:
    headers = {name: ",".join(values) for name, values in request.headers.items()}
    headers[SIGNATURE_HEADER] = request.signature
    headers[EXPIRATION_HEADER] = format_expiration(request.expiration)
    headers[SIGNED_HEADERS_HEADER] = ", ".join(request.headers)
    return headers


def to_wire_request(request: SignedRequest, body: bytes | str | None = None) -> WireRequest:
    """The body travels with the request but is not covered by the signature."""
    return WireRequest(method=request.method, url=request.url, headers=to_http_headers(request), body=body)


def to_urllib_request(request: SignedRequest, body: bytes | str | None = None) -> urllib.request.Request:
    data = body.encode("utf-8") if isinstance(body, str) else body
    return urllib.request.Request(
        request.url,
        method=request.method,
        headers=to_http_headers(request),
        data=data,
    )


def _signed_header_names(values: list[str]) -> list[str]:
    names: list[str] = []
    for value in values:
        for name in value.split(","):
            name = name.strip()
            if name:
                names.append(canonical_header_key(name))
    return names


def parse_wire_request(method: str, url: str, headers: HeaderInput | None) -> SignedRequest:
    message_headers = _message_headers(headers)

    expiration_values = message_headers.get(EXPIRATION_HEADER)
    if not expiration_values or not expiration_values[0].strip():
        raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, f"Missing {EXPIRATION_HEADER} header")
    expiration = parse_expiration(expiration_values[0])

    signed_headers: dict[str, list[str]] = {}
    for name in _signed_header_names(message_headers.get(SIGNED_HEADERS_HEADER, [])):
        signed_headers[name] = list(message_headers.get(name, []))

    signature_values = message_headers.get(SIGNATURE_HEADER) or [""]
    return SignedRequest(
        method=method,
        url=url,
        expiration=expiration,
        headers=signed_headers,
        signature=signature_values[0],
    )


def parse_http_request(wire: WireRequest) -> SignedRequest:
    return parse_wire_request(wire.method, wire.url, wire.headers)


def request_to_dict(request: SignedRequest) -> JsonDict:
    return JsonDict({
        "method": request.method,
        "url": request.url,
        "expiration": format_expiration(request.expiration),
        "headers": {name: list(values) for name, values in request.headers.items()},
        "signature": request.signature,
    })


def request_from_dict(value: Mapping[str, Any]) -> SignedRequest:
    method = value.get("method")
    url = value.get("url")
    expiration = value.get("expiration")
    if not isinstance(method, str) or not isinstance(url, str):
        raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, "Envelope method and url must be strings")
    if not isinstance(expiration, str):
        raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, "Envelope expiration is missing")

    headers = value.get("headers") or {}
    if not isinstance(headers, Mapping):
        raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, "Envelope headers must be an object")
    for name, values in headers.items():
        if isinstance(values, str):
            continue
        if not isinstance(values, list) or not all(isinstance(item, str) for item in values):
            raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, f"Envelope header {name!r} must be a list of strings")
    signature = value.get("signature") or ""
    if not isinstance(signature, str):
        raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, "Envelope signature must be a string")

    return SignedRequest(
        method=method,
        url=url,
        expiration=parse_expiration(expiration),
        headers=dict(headers),
        signature=signature,
    )


def request_to_json(request: SignedRequest) -> str:
    return json.dumps(request_to_dict(request), sort_keys=True)


def request_from_json(value: str | bytes) -> SignedRequest:
    try:
        raw = json.loads(value)
    except ValueError as error:
        raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, f"Envelope is not valid JSON: {error}") from error
    if not isinstance(raw, dict):
        raise SignedRequestError(ErrorKind.MALFORMED_ENVELOPE, "Envelope must be a JSON object")
    return request_from_dict(raw)
