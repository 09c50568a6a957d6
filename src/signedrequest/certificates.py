"""Sources of the currently valid public certificates."""

from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, Protocol

from signedrequest.types import PublicCertificate

logger = logging.getLogger(__name__)

CERTS_DIR_ENV = "SIGNEDREQUEST_CERTS_DIR"
DEFAULT_CACHE_TTL_SECONDS = 60.0


class CertificateSource(Protocol):
    def current_public_certificates(self) -> list[PublicCertificate]:
        ...


class StaticCertificateSource:
    def __init__(self, certificates: Iterable[PublicCertificate]):
        self._certificates = list(certificates)

    def current_public_certificates(self) -> list[PublicCertificate]:
        return list(self._certificates)


def _resolve_certs_dir(explicit: str | os.PathLike[str] | None) -> Path:
    value = explicit or os.environ.get(CERTS_DIR_ENV)
    if not value:
        raise ValueError(f"No certificate directory given. Pass directory or set {CERTS_DIR_ENV}.")
    return Path(value)


class DirectoryCertificateSource:
    """Reads every ``*.pem`` file in a directory, on every call.

    Publishing a new certificate is a matter of dropping a file into the
    directory; retiring one is deleting it.
    """

    def __init__(self, directory: str | os.PathLike[str] | None = None):
        self.directory = _resolve_certs_dir(directory)

    def current_public_certificates(self) -> list[PublicCertificate]:
        if not self.directory.is_dir():
            raise FileNotFoundError(f"Certificate directory {self.directory} does not exist")

        certificates: list[PublicCertificate] = []
        for path in sorted(self.directory.glob("*.pem")):
            if path.is_file():
                certificates.append(PublicCertificate(key_name=path.stem, data=path.read_bytes()))
        return certificates


class CachingCertificateSource:
    """Serves the last fetched certificate set for at most ``ttl_seconds``.

    Failed fetches are not cached, so the next call retries the wrapped source.
    """

    def __init__(
        self,
        source: CertificateSource,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self._source = source
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._certificates: list[PublicCertificate] | None = None
        self._fetched_at = 0.0

    def invalidate(self) -> None:
        with self._lock:
            self._certificates = None

    def current_public_certificates(self) -> list[PublicCertificate]:
        with self._lock:
            now = self._clock()
            if self._certificates is not None and now - self._fetched_at < self._ttl_seconds:
                return list(self._certificates)

            certificates = self._source.current_public_certificates()
            logger.debug("Fetched %d public certificates", len(certificates))
            self._certificates = list(certificates)
            self._fetched_at = now
            return list(self._certificates)
