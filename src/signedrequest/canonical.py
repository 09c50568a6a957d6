"""Canonical string construction for signed requests.

The canonical string is what actually gets signed, so it must come out the
same for the same logical request no matter how its headers were stored or
how precisely its expiration was recorded::

    {method}\\n{url}\\n{expiration unix seconds}\\n{Header-A: v1,v2}\\n{Header-B: v}

Header lines are sorted as whole strings. Method and URL are used verbatim.
"""

from __future__ import annotations

import calendar
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

from signedrequest.types import HeaderInput

# RFC 7230 tchar
_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~0123456789"
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


def canonical_header_key(name: str) -> str:
    if not name or any(char not in _TOKEN_CHARS for char in name):
        return name
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def _values(value: str | Sequence[str]) -> list[str]:
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def normalize_headers(headers: HeaderInput | None) -> dict[str, list[str]]:
    if headers is None:
        return {}

    out: dict[str, list[str]] = {}
    if isinstance(headers, Mapping):
        for key, value in headers.items():
            out.setdefault(canonical_header_key(str(key)), []).extend(_values(value))
        return out

    for entry in headers:
        if len(entry) != 2:
            raise ValueError("Header entries must be [name, value]")
        out.setdefault(canonical_header_key(str(entry[0])), []).append(str(entry[1]))
    return out


def expiration_seconds(expiration: datetime) -> int:
    if expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=timezone.utc)
    # utctimetuple() drops microseconds, which floors toward the earlier second.
    return calendar.timegm(expiration.utctimetuple())


def header_lines(headers: HeaderInput | None) -> list[str]:
    lines = [f"{name}: {','.join(values)}" for name, values in normalize_headers(headers).items()]
    lines.sort()
    return lines


def canonicalize(
    method: str,
    url: str,
    expiration: datetime,
    headers: HeaderInput | None = None,
) -> bytes:
    components = [method, url, str(expiration_seconds(expiration))]
    components.extend(header_lines(headers))
    return "\n".join(components).encode("utf-8")
