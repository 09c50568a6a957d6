"""Sign oracles: things that turn bytes into an RSA PKCS#1 v1.5 / SHA-256 signature."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

PRIVATE_KEY_ENV = "SIGNEDREQUEST_PRIVATE_KEY"


class Signer(Protocol):
    def sign(self, payload: bytes) -> tuple[str, bytes]:
        """Return ``(key_name, signature)`` for ``payload``."""
        ...


def _resolve_key_path(explicit: str | os.PathLike[str] | None) -> Path:
    value = explicit or os.environ.get(PRIVATE_KEY_ENV)
    if not value:
        raise ValueError(f"No private key path given. Pass path or set {PRIVATE_KEY_ENV}.")
    return Path(value)


class PrivateKeySigner:
    def __init__(self, private_key: rsa.RSAPrivateKey, key_name: str):
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise ValueError("PrivateKeySigner requires an RSA private key")
        self._private_key = private_key
        self.key_name = key_name

    @classmethod
    def from_pem(cls, data: bytes, key_name: str, password: bytes | None = None) -> "PrivateKeySigner":
        private_key = serialization.load_pem_private_key(data, password=password)
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise ValueError("PEM private key is not an RSA key")
        return cls(private_key, key_name)

    @classmethod
    def from_pem_file(
        cls,
        path: str | os.PathLike[str] | None = None,
        key_name: str | None = None,
        password: bytes | None = None,
    ) -> "PrivateKeySigner":
        key_path = _resolve_key_path(path)
        return cls.from_pem(key_path.read_bytes(), key_name or key_path.stem, password=password)

    def sign(self, payload: bytes) -> tuple[str, bytes]:
        signature = self._private_key.sign(payload, padding.PKCS1v15(), hashes.SHA256())
        return self.key_name, signature
