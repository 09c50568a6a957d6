from __future__ import annotations

from datetime import datetime, timedelta, timezone

from signedrequest import SignedRequest, canonical_header_key, canonicalize, expiration_seconds

EXPIRATION = datetime(2030, 1, 1, tzinfo=timezone.utc)


def test_canonical_string_matches_documented_layout() -> None:
    value = canonicalize(
        "PUT",
        "https://example.com/upload",
        EXPIRATION,
        {"Content-Type": ["text/plain"]},
    )

    assert value == b"PUT\nhttps://example.com/upload\n1893456000\nContent-Type: text/plain"


def test_canonical_string_without_headers_has_no_trailing_separator() -> None:
    assert canonicalize("GET", "/", EXPIRATION) == b"GET\n/\n1893456000"


def test_header_insertion_order_does_not_matter() -> None:
    first = canonicalize("POST", "https://howdy", EXPIRATION, {"X-B": "2", "x-a": "1", "Content-Type": "a/b"})
    second = canonicalize("POST", "https://howdy", EXPIRATION, [("content-type", "a/b"), ("X-A", "1"), ("x-b", "2")])

    assert first == second
    assert first.split(b"\n")[3:] == [b"Content-Type: a/b", b"X-A: 1", b"X-B: 2"]


def test_multiple_values_are_joined_with_commas_in_order() -> None:
    value = canonicalize("GET", "/", EXPIRATION, [("Accept", "text/html"), ("accept", "application/json")])

    assert value.endswith(b"\nAccept: text/html,application/json")


def test_sub_second_precision_is_truncated() -> None:
    base = canonicalize("GET", "/", EXPIRATION)

    assert canonicalize("GET", "/", EXPIRATION + timedelta(microseconds=999_999)) == base
    assert canonicalize("GET", "/", EXPIRATION + timedelta(microseconds=1)) == base
    assert canonicalize("GET", "/", EXPIRATION + timedelta(seconds=1)) != base


def test_expiration_seconds_handles_offsets_and_naive_values() -> None:
    offset = datetime(2030, 1, 1, 1, 0, 0, 500_000, tzinfo=timezone(timedelta(hours=1)))

    assert expiration_seconds(offset) == 1893456000
    assert expiration_seconds(datetime(2030, 1, 1)) == 1893456000
    assert expiration_seconds(datetime(1969, 12, 31, 23, 59, 59, 500_000, tzinfo=timezone.utc)) == -1


def test_method_and_url_are_not_normalized() -> None:
    assert canonicalize("put", "https://Example.com/A", EXPIRATION).startswith(b"put\nhttps://Example.com/A\n")


def test_canonical_header_key() -> None:
    assert canonical_header_key("content-type") == "Content-Type"
    assert canonical_header_key("X-FORWARDED-FOR") == "X-Forwarded-For"
    assert canonical_header_key("etag") == "Etag"
    assert canonical_header_key("bad header") == "bad header"


def test_envelope_merges_headers_differing_only_in_case() -> None:
    request = SignedRequest(
        method="GET",
        url="/",
        expiration=EXPIRATION,
        headers={"x-tag": "a", "X-Tag": ["b", "c"]},
    )

    assert request.headers == {"X-Tag": ["a", "b", "c"]}
