from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from signedrequest import PrivateKeySigner


def test_sign_returns_key_name_and_pkcs1v15_signature(current_key) -> None:
    key_name, signature = PrivateKeySigner(current_key, "current").sign(b"payload")

    assert key_name == "current"
    current_key.public_key().verify(signature, b"payload", padding.PKCS1v15(), hashes.SHA256())


def test_from_pem_file_defaults_key_name_to_file_stem(tmp_path, private_key_pem) -> None:
    path = tmp_path / "key-2026-10.pem"
    path.write_bytes(private_key_pem)

    signer = PrivateKeySigner.from_pem_file(path)

    assert signer.key_name == "key-2026-10"


def test_from_pem_file_reads_environment(tmp_path, monkeypatch, private_key_pem) -> None:
    path = tmp_path / "signing.pem"
    path.write_bytes(private_key_pem)
    monkeypatch.setenv("SIGNEDREQUEST_PRIVATE_KEY", str(path))

    signer = PrivateKeySigner.from_pem_file(key_name="primary")

    assert signer.key_name == "primary"


def test_from_pem_file_requires_a_path(monkeypatch) -> None:
    monkeypatch.delenv("SIGNEDREQUEST_PRIVATE_KEY", raising=False)

    with pytest.raises(ValueError):
        PrivateKeySigner.from_pem_file()


def test_rejects_non_rsa_keys(ec_key) -> None:
    with pytest.raises(ValueError):
        PrivateKeySigner(ec_key, "ec")
