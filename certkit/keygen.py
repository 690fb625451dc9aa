"""Key pair generation for RSA, ECDSA and Ed25519."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from .errors import UnsupportedAlgorithm, UnsupportedParameter

logger = logging.getLogger("certkit")

RSA_PUBLIC_EXPONENT = 65537


class Curve(Enum):
    """NIST curves usable with ECDSA, keyed by bit size."""
    P256 = 256
    P384 = 384
    P521 = 521


CURVES = {
    Curve.P256: ec.SECP256R1,
    Curve.P384: ec.SECP384R1,
    Curve.P521: ec.SECP521R1,
}


@dataclass(frozen=True)
class RSA:
    bit_size: int


@dataclass(frozen=True)
class ECDSA:
    curve: Curve

    @classmethod
    def from_size(cls, bits: int) -> "ECDSA":
        """Pick the curve for a bit size; no fallback for unknown sizes."""
        try:
            return cls(Curve(bits))
        except ValueError:
            raise UnsupportedParameter(f"unsupported curve size {bits}") from None


@dataclass(frozen=True)
class Ed25519:
    pass


Algorithm = Union[RSA, ECDSA, Ed25519]


@dataclass(frozen=True)
class KeyPair:
    """A freshly generated key pair."""
    algorithm:   Algorithm
    public_key:  Any
    private_key: Any

    def public_bytes(self) -> bytes:
        """SubjectPublicKeyInfo DER of the public half."""
        return public_key_bytes(self.public_key)

    def private_pem(self) -> bytes:
        """Unencrypted PKCS#8 PEM of the private half."""
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        )

    def public_pem(self) -> bytes:
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo
        )


def algorithm_from_name(name: str, size: Optional[int] = None) -> Algorithm:
    """Build an Algorithm from a front-end selector such as "rsa" or "ecdsa".

    Args:
        name: algorithm name (case-insensitive)
        size: RSA modulus bits or ECDSA curve bits; ignored for Ed25519

    Returns: the Algorithm variant
    """
    key = name.strip().lower()

    if key == "rsa":
        return RSA(2048 if size is None else size)
    if key in ("ecdsa", "ec"):
        return ECDSA.from_size(256 if size is None else size)
    if key == "ed25519":
        return Ed25519()

    raise UnsupportedAlgorithm(f"unsupported algorithm '{name}'")


def generate(algorithm: Algorithm) -> KeyPair:
    """Generate a key pair for the requested algorithm.

    Raises:
        UnsupportedAlgorithm: algorithm is not one of the Algorithm variants
        UnsupportedParameter: the size or curve is not usable
    """
    if isinstance(algorithm, RSA):
        if algorithm.bit_size <= 0:
            raise UnsupportedParameter(f"invalid RSA key size {algorithm.bit_size}")
        try:
            private_key = rsa.generate_private_key(
                public_exponent=RSA_PUBLIC_EXPONENT,
                key_size=algorithm.bit_size
            )
        except ValueError as e:
            raise UnsupportedParameter(f"unsupported RSA key size {algorithm.bit_size}: {e}") from e

    elif isinstance(algorithm, ECDSA):
        curve = CURVES.get(algorithm.curve)
        if curve is None:
            raise UnsupportedParameter(f"unsupported curve {algorithm.curve!r}")
        private_key = ec.generate_private_key(curve())

    elif isinstance(algorithm, Ed25519):
        private_key = ed25519.Ed25519PrivateKey.generate()

    else:
        raise UnsupportedAlgorithm(f"unsupported algorithm {algorithm!r}")

    logger.debug(f"Generated {algorithm} key pair")
    return KeyPair(algorithm=algorithm, public_key=private_key.public_key(), private_key=private_key)


def public_key_bytes(key: Any) -> bytes:
    """SubjectPublicKeyInfo DER for a public key, or for the public half of a private key."""
    if hasattr(key, "private_bytes"):
        key = key.public_key()

    return key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )
