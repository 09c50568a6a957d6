"""Shared datatypes for signed requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Tuple, Union

from signedrequest.errors import ErrorKind


HeaderInput = Union[
    Dict[str, str],
    Dict[str, Sequence[str]],
    List[Tuple[str, str]],
    List[List[str]],
]


@dataclass
class SignedRequest:
    """A request descriptor whose method, URL, expiration and selected headers are signed.

    ``headers`` holds only the headers chosen for signing, not every header
    of the HTTP message. ``signature`` stays empty until the request is signed.
    """

    method: str
    url: str
    expiration: datetime
    headers: dict[str, list[str]] = field(default_factory=dict)
    signature: str = ""

    def __post_init__(self) -> None:
        from signedrequest.canonical import normalize_headers

        if self.expiration.tzinfo is None:
            self.expiration = self.expiration.replace(tzinfo=timezone.utc)
        self.headers = normalize_headers(self.headers)


@dataclass(frozen=True)
class PublicCertificate:
    key_name: str
    data: bytes


@dataclass(frozen=True)
class VerifyResult:
    valid: bool
    error: ErrorKind | None = None
    reason: str | None = None
    key_name: str | None = None

    @classmethod
    def ok(cls, key_name: str) -> "VerifyResult":
        return cls(valid=True, key_name=key_name)

    @classmethod
    def fail(cls, error: ErrorKind, reason: str) -> "VerifyResult":
        return cls(valid=False, error=error, reason=reason)


@dataclass(frozen=True)
class WireRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes | str | None = None


class JsonDict(dict[str, Any]):
    """Typed alias for JSON dictionaries used in envelope serialization."""
