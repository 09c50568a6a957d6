"""WSGI adapter that only lets correctly signed, unexpired requests through."""

from __future__ import annotations

import functools
import logging
from datetime import datetime
from typing import Any, Callable, Iterable
from urllib.parse import quote

from signedrequest.certificates import CertificateSource
from signedrequest.errors import ErrorKind, SignedRequestError
from signedrequest.request import verify_request
from signedrequest.types import SignedRequest
from signedrequest.wire import parse_wire_request

logger = logging.getLogger(__name__)

StartResponse = Callable[..., Any]
SignedView = Callable[[dict[str, Any], StartResponse, SignedRequest], Iterable[bytes]]
WSGIApp = Callable[[dict[str, Any], StartResponse], Iterable[bytes]]

_RESPONSES: dict[ErrorKind, tuple[str, bytes]] = {
    ErrorKind.MALFORMED_ENVELOPE: ("400 Bad Request", b"Not a valid signed request."),
    ErrorKind.EXPIRED: ("400 Bad Request", b"Signed URL expired."),
    ErrorKind.CERTIFICATE_FETCH_FAILED: ("503 Service Unavailable", b"Signature verification unavailable."),
}
_DEFAULT_RESPONSE = ("401 Unauthorized", b"Invalid request signature.")


def environ_headers(environ: dict[str, Any]) -> list[tuple[str, str]]:
    headers: list[tuple[str, str]] = []
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            headers.append((key[5:].replace("_", "-"), str(value)))
        elif key in ("CONTENT_TYPE", "CONTENT_LENGTH") and value:
            headers.append((key.replace("_", "-"), str(value)))
    return headers


_PATH_SAFE = "/:@!$&'()*+,;=~"


def request_url(environ: dict[str, Any]) -> str:
    """Rebuild the URL the client sent, keeping its escaping where the server exposes it."""
    scheme = environ.get("wsgi.url_scheme", "http")
    host = environ.get("HTTP_HOST")
    if not host:
        host = environ.get("SERVER_NAME", "")
        port = str(environ.get("SERVER_PORT", ""))
        if port and (scheme, port) not in (("http", "80"), ("https", "443")):
            host = f"{host}:{port}"

    target = environ.get("REQUEST_URI") or environ.get("RAW_URI")
    if target:
        if "://" in target.split("?", 1)[0]:
            return target
        return f"{scheme}://{host}{target}"

    path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "") or "/"
    url = f"{scheme}://{host}{quote(path, safe=_PATH_SAFE, encoding='latin-1')}"
    query = environ.get("QUERY_STRING")
    if query:
        url = f"{url}?{query}"
    return url


def _reject(start_response: StartResponse, kind: ErrorKind) -> list[bytes]:
    status, body = _RESPONSES.get(kind, _DEFAULT_RESPONSE)
    logger.info("Rejected signed request: %s", kind.value)
    start_response(status, [("Content-Type", "text/plain; charset=utf-8"), ("Content-Length", str(len(body)))])
    return [body]


def signed_handler(
    source: CertificateSource,
    *,
    clock: Callable[[], datetime] | None = None,
) -> Callable[[SignedView], WSGIApp]:
    """Wrap a view so it is only called once the request signature checks out.

    The view receives the verified ``SignedRequest`` as its third argument.
    """

    def decorator(view: SignedView) -> WSGIApp:
        @functools.wraps(view)
        def app(environ: dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
            try:
                signed = parse_wire_request(
                    method=environ.get("REQUEST_METHOD", "GET"),
                    url=request_url(environ),
                    headers=environ_headers(environ),
                )
            except SignedRequestError as error:
                return _reject(start_response, error.kind)

            result = verify_request(signed, source, now=clock() if clock is not None else None)
            if not result.valid:
                return _reject(start_response, result.error or ErrorKind.SIGNATURE_MISMATCH)

            return view(environ, start_response, signed)

        return app

    return decorator
