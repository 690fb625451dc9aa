"""Subject Key Identifiers (RFC 5280 section 4.2.1.2, method 1).

The SKI is the SHA-1 digest of the subjectPublicKey BIT STRING contents,
not of the whole SubjectPublicKeyInfo. The unused-bits octet that leads the
BIT STRING contents is not hashed either.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Union

from asn1crypto import keys as asn1_keys
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from . import pemload
from .errors import EncodingError, LoadError
from .hexenc import HexEncodeMode, hex_encode, parse_display_mode
from .keygen import public_key_bytes

logger = logging.getLogger("certkit")

KEY_TYPE_RSA     = "RSA"
KEY_TYPE_ECDSA   = "ECDSA"
KEY_TYPE_ED25519 = "Ed25519"

# asn1crypto algorithm name -> key type
SPKI_ALGORITHMS = {
    "rsa":     KEY_TYPE_RSA,
    "ec":      KEY_TYPE_ECDSA,
    "ed25519": KEY_TYPE_ED25519,
}

SKI_LENGTH = 20


def key_type(public_key: Any) -> str:
    """Name the algorithm of a cryptography public key object."""
    if isinstance(public_key, rsa.RSAPublicKey):
        return KEY_TYPE_RSA
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return KEY_TYPE_ECDSA
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return KEY_TYPE_ED25519

    raise EncodingError(f"unknown public key type {type(public_key).__name__}")


def spki_der(key: Any) -> bytes:
    """SubjectPublicKeyInfo DER for anything that carries a public key.

    Accepts a certificate, a CSR, a private or public key object, or SPKI DER
    bytes (returned as-is).
    """
    if isinstance(key, (bytes, bytearray)):
        return bytes(key)

    if isinstance(key, (x509.Certificate, x509.CertificateSigningRequest)):
        key = key.public_key()
    elif hasattr(key, "private_bytes"):
        key = key.public_key()

    key_type(key)
    return public_key_bytes(key)


def subject_public_key(der: bytes) -> bytes:
    """Pull the subjectPublicKey bit pattern out of SPKI DER."""
    try:
        info = asn1_keys.PublicKeyInfo.load(der, strict=True)
        algorithm = info["algorithm"]["algorithm"].native
        if algorithm not in SPKI_ALGORITHMS:
            raise EncodingError(f"serializing SKI: unrecognized public key algorithm {algorithm}")
        contents = info["public_key"].contents
    except (ValueError, TypeError) as e:
        raise EncodingError(f"serializing SKI: {e}") from e

    if not contents or contents[0] != 0:
        raise EncodingError("serializing SKI: subjectPublicKey is not a whole number of octets")

    return contents[1:]


def ski_digest(public_key: Any) -> bytes:
    """The raw 20-byte SKI."""
    return hashlib.sha1(subject_public_key(spki_der(public_key))).digest()


def compute_ski(public_key: Any, display_mode: Union[str, HexEncodeMode] = HexEncodeMode.LOWER_COLON) -> str:
    """Compute and render the SKI of a public key.

    Args:
        public_key:   key, certificate, CSR or SPKI DER
        display_mode: HexEncodeMode or its name

    Returns: the digest rendered in display_mode
    """
    mode = parse_display_mode(display_mode)
    return hex_encode(ski_digest(public_key), mode)


@dataclass
class KeyInfo:
    """Public key found in a PEM file, as reported by the SKI printer."""
    public_key: bytes  # SubjectPublicKeyInfo DER
    key_type:   str
    file_type:  str

    def __str__(self) -> str:
        return f"{hex_encode(self.public_key, HexEncodeMode.LOWER_COLON)} ({self.key_type})"

    def ski(self, display_mode: Union[str, HexEncodeMode] = HexEncodeMode.LOWER_COLON) -> str:
        return compute_ski(self.public_key, display_mode)


def parse_pem(data: bytes) -> KeyInfo:
    """Build a KeyInfo from the first PEM block of a key, certificate or CSR file."""
    pem_type, block, rest = pemload.split_pem(data.strip())
    if pem_type is None:
        raise LoadError("PEM", "no PEM data")

    if rest.strip():
        logger.warning("trailing data in PEM file")

    if pem_type in pemload.PRIVATE_KEY_PEM_TYPES:
        public_key = pemload.read_private_key(block).public_key()
        file_type = "private key"
    elif pem_type == "CERTIFICATE":
        public_key = pemload.read_certificate(block)[0].public_key()
        file_type = "certificate"
    elif pem_type in pemload.CSR_PEM_TYPES:
        public_key = pemload.read_csr(block).public_key()
        file_type = "certificate request"
    else:
        raise LoadError("PEM", f"unknown PEM type {pem_type}")

    return KeyInfo(
        public_key=public_key_bytes(public_key),
        key_type=key_type(public_key),
        file_type=file_type
    )


def load_key_info(path: str) -> KeyInfo:
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise LoadError("PEM", f"could not read {path}", e) from e

    return parse_pem(data)
