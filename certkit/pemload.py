"""Turn PEM or DER bytes into certificate, CSR and private key objects."""

import logging
import re
from typing import Any, List, Optional, Tuple

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm as UnsupportedKeyType
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from .errors import LoadError, UnsupportedAlgorithm

logger = logging.getLogger("certkit")

SOURCE_CERTIFICATE = "certificate"
SOURCE_PRIVATE_KEY = "private key"
SOURCE_CSR         = "CSR"

PRIVATE_KEY_PEM_TYPES = ("PRIVATE KEY", "RSA PRIVATE KEY", "EC PRIVATE KEY")
CSR_PEM_TYPES = ("CERTIFICATE REQUEST", "NEW CERTIFICATE REQUEST")

PEM_BLOCK_RE = re.compile(
    rb"-----BEGIN ([A-Z0-9 ]+)-----\r?\n.*?-----END \1-----\r?\n?",
    re.DOTALL
)


def split_pem(data: bytes) -> Tuple[Optional[str], bytes, bytes]:
    """Find the first PEM block in data.

    Returns: (block type, the whole block, whatever follows it); the type is
             None when no block was found
    """
    match = PEM_BLOCK_RE.search(data)
    if match is None:
        return None, b"", data

    return match.group(1).decode("ascii"), match.group(0), data[match.end():]


def _is_pem(data: bytes) -> bool:
    return data.lstrip().startswith(b"-----BEGIN")


def read_certificate(data: bytes) -> Tuple[x509.Certificate, bytes]:
    """Read one PEM or DER certificate.

    Returns: the certificate and any bytes left after it (always empty for DER)
    """
    data = data.strip()
    if not data:
        raise LoadError(SOURCE_CERTIFICATE, "empty certificate")

    if not _is_pem(data):
        try:
            return x509.load_der_x509_certificate(data), b""
        except ValueError as e:
            raise LoadError(SOURCE_CERTIFICATE, "invalid DER", e) from e

    pem_type, block, rest = split_pem(data)
    if pem_type is None:
        raise LoadError(SOURCE_CERTIFICATE, "invalid PEM file")
    if pem_type != "CERTIFICATE":
        raise LoadError(SOURCE_CERTIFICATE, f"expected a CERTIFICATE PEM file, but have {pem_type}")

    try:
        return x509.load_pem_x509_certificate(block), rest
    except ValueError as e:
        raise LoadError(SOURCE_CERTIFICATE, "invalid PEM certificate", e) from e


def read_certificates(data: bytes) -> List[x509.Certificate]:
    """Read every certificate in a PEM bundle, in file order."""
    certs = []
    rest = data
    while rest.strip():
        cert, rest = read_certificate(rest)
        certs.append(cert)

    if not certs:
        raise LoadError(SOURCE_CERTIFICATE, "no certificates found")

    logger.debug(f"Read {len(certs)} certificate(s)")
    return certs


def read_private_key(data: bytes) -> Any:
    """Read an unencrypted PEM or DER private key (PKCS#8, PKCS#1 or SEC 1)."""
    data = data.strip()
    if not data:
        raise LoadError(SOURCE_PRIVATE_KEY, "empty private key")

    if _is_pem(data):
        pem_type, block, _ = split_pem(data)
        if pem_type not in PRIVATE_KEY_PEM_TYPES:
            raise LoadError(SOURCE_PRIVATE_KEY, f"invalid private key file type {pem_type}")
        loader, data = serialization.load_pem_private_key, block
    else:
        loader = serialization.load_der_private_key

    try:
        return loader(data, password=None)
    except (ValueError, TypeError, UnsupportedKeyType) as e:
        raise LoadError(SOURCE_PRIVATE_KEY, "could not parse private key", e) from e


def read_csr(data: bytes) -> x509.CertificateSigningRequest:
    """Read a PEM or DER certificate signing request."""
    data = data.strip()
    if not data:
        raise LoadError(SOURCE_CSR, "empty CSR")

    try:
        if not _is_pem(data):
            return x509.load_der_x509_csr(data)

        pem_type, block, _ = split_pem(data)
        if pem_type not in CSR_PEM_TYPES:
            raise LoadError(SOURCE_CSR, f"expected a CERTIFICATE REQUEST PEM file, but have {pem_type}")
        return x509.load_pem_x509_csr(block)
    except ValueError as e:
        raise LoadError(SOURCE_CSR, "could not parse CSR", e) from e


def _read_file(path: str, source: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise LoadError(source, f"could not read {path}", e) from e


def load_certificate(path: str) -> x509.Certificate:
    """Load the first certificate in a file."""
    cert, _ = read_certificate(_read_file(path, SOURCE_CERTIFICATE))
    return cert


def load_certificates(path: str) -> List[x509.Certificate]:
    return read_certificates(_read_file(path, SOURCE_CERTIFICATE))


def load_private_key(path: str) -> Any:
    return read_private_key(_read_file(path, SOURCE_PRIVATE_KEY))


def load_csr(path: str) -> x509.CertificateSigningRequest:
    return read_csr(_read_file(path, SOURCE_CSR))


def csr_public_pem(csr: x509.CertificateSigningRequest) -> bytes:
    """PEM-wrap the SubjectPublicKeyInfo of a CSR's public key.

    RSA and EC keys get the "RSA PUBLIC KEY" / "EC PUBLIC KEY" block types
    the dump tools have always written; Ed25519 keys use "PUBLIC KEY".
    """
    public_key = csr.public_key()

    if isinstance(public_key, rsa.RSAPublicKey):
        pem_type = "RSA PUBLIC KEY"
    elif isinstance(public_key, ec.EllipticCurvePublicKey):
        pem_type = "EC PUBLIC KEY"
    elif isinstance(public_key, ed25519.Ed25519PublicKey):
        pem_type = "PUBLIC KEY"
    else:
        raise UnsupportedAlgorithm(f"unrecognised public key type {type(public_key).__name__}")

    pem = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )
    return pem.replace(b"PUBLIC KEY-----", f"{pem_type}-----".encode("ascii"))
