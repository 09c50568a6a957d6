from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from signedrequest import PrivateKeySigner, PublicCertificate, StaticCertificateSource


def _self_signed_pem(private_key, common_name: str) -> bytes:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(private_key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.PEM)


@pytest.fixture(scope="session")
def current_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def retired_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def current_cert(current_key) -> PublicCertificate:
    return PublicCertificate(key_name="current", data=_self_signed_pem(current_key, "current"))


@pytest.fixture(scope="session")
def retired_cert(retired_key) -> PublicCertificate:
    return PublicCertificate(key_name="retired", data=_self_signed_pem(retired_key, "retired"))


@pytest.fixture(scope="session")
def ec_cert(ec_key) -> PublicCertificate:
    return PublicCertificate(key_name="ec", data=_self_signed_pem(ec_key, "ec"))


@pytest.fixture
def signer(current_key) -> PrivateKeySigner:
    return PrivateKeySigner(current_key, "current")


@pytest.fixture
def source(current_cert) -> StaticCertificateSource:
    return StaticCertificateSource([current_cert])


@pytest.fixture
def private_key_pem(current_key) -> bytes:
    return current_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def make_cert() -> Callable[..., bytes]:
    return _self_signed_pem
