"""Decide whether a private key belongs to a certificate."""

import logging
from typing import Any, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import constant_time, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from .errors import UnsupportedAlgorithm

logger = logging.getLogger("certkit")

ALGORITHM_MISMATCH = "algorithm mismatch"
PARAMETER_MISMATCH = "parameter mismatch"
MATERIAL_MISMATCH  = "key material mismatch"

SUPPORTED_FAMILIES = ("RSA", "ECDSA", "Ed25519")


def _key_family(public_key: Any) -> str:
    """Algorithm family name; unrecognised keys report their class name."""
    if isinstance(public_key, rsa.RSAPublicKey):
        return "RSA"
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return "ECDSA"
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return "Ed25519"

    return type(public_key).__name__


def _key_parameters(public_key: Any) -> Any:
    """Curve name or modulus size; Ed25519 has no parameters."""
    if isinstance(public_key, rsa.RSAPublicKey):
        return public_key.key_size
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return public_key.curve.name
    return None


def _key_material(public_key: Any) -> bytes:
    """The bytes that identify the key: n and e, the curve point, or the raw Ed25519 key."""
    if isinstance(public_key, rsa.RSAPublicKey):
        return public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.PKCS1
        )
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint
        )
    return public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw
    )


def match_keys(cert_public_key: Any, private_key: Any) -> Tuple[bool, str]:
    """Check a private key against a certificate's public key.

    Args:
        cert_public_key: public key, or a certificate/CSR carrying one
        private_key:     candidate private key

    Returns: (True, "") on an exact match, otherwise (False, reason)

    Raises: UnsupportedAlgorithm if both keys are of the same type and it is
            not RSA, ECDSA or Ed25519
    """
    if isinstance(cert_public_key, (x509.Certificate, x509.CertificateSigningRequest)):
        cert_public_key = cert_public_key.public_key()

    key_public_key = private_key.public_key()

    cert_family = _key_family(cert_public_key)
    key_family = _key_family(key_public_key)
    if cert_family != key_family:
        logger.debug(f"Private key is {key_family}, certificate key is {cert_family}")
        return False, ALGORITHM_MISMATCH
    if cert_family not in SUPPORTED_FAMILIES:
        raise UnsupportedAlgorithm(f"unrecognised public key type: {cert_family}")

    cert_params = _key_parameters(cert_public_key)
    key_params = _key_parameters(key_public_key)
    if cert_params != key_params:
        logger.debug(f"{key_family} parameters differ: {key_params} != {cert_params}")
        return False, PARAMETER_MISMATCH

    if not constant_time.bytes_eq(_key_material(cert_public_key), _key_material(key_public_key)):
        return False, MATERIAL_MISMATCH

    return True, ""
