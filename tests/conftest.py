from datetime import datetime, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.x509.oid import NameOID

from certkit.keygen import ECDSA, RSA, Curve, Ed25519, generate

TEST_NAME = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "certkit.example.com")])


def _signing_hash(private_key):
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return None
    return hashes.SHA256()


def _make_certificate(private_key, extensions=(), serial=1000):
    builder = (
        x509.CertificateBuilder()
        .subject_name(TEST_NAME)
        .issuer_name(TEST_NAME)
        .public_key(private_key.public_key())
        .serial_number(serial)
        .not_valid_before(datetime(2024, 1, 1, tzinfo=timezone.utc))
        .not_valid_after(datetime(2034, 1, 1, tzinfo=timezone.utc))
    )
    for ext in extensions:
        builder = builder.add_extension(ext, critical=False)
    return builder.sign(private_key, _signing_hash(private_key))


def _make_csr(private_key):
    builder = x509.CertificateSigningRequestBuilder().subject_name(TEST_NAME)
    return builder.sign(private_key, _signing_hash(private_key))


@pytest.fixture
def make_certificate():
    return _make_certificate


@pytest.fixture
def make_csr():
    return _make_csr


@pytest.fixture(scope="session")
def rsa_pair():
    return generate(RSA(2048))


@pytest.fixture(scope="session")
def ec_pair():
    return generate(ECDSA(Curve.P256))


@pytest.fixture(scope="session")
def ed25519_pair():
    return generate(Ed25519())


@pytest.fixture
def pem_private_key():
    def _pem(private_key, fmt=serialization.PrivateFormat.PKCS8):
        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=fmt,
            encryption_algorithm=serialization.NoEncryption()
        )
    return _pem


@pytest.fixture
def write_file(tmp_path):
    def _write(name, data):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return _write
