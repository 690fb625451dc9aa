"""Embedded Signed Certificate Timestamps (RFC 6962 section 3.3).

The extension value is a DER OCTET STRING holding a TLS-encoded
SignedCertificateTimestampList:

    opaque SerializedSCT<1..2^16-1>;
    struct { SerializedSCT sct_list<1..2^16-1>; } SignedCertificateTimestampList;

Each SerializedSCT is a v1 SignedCertificateTimestamp. Offsets reported in
MalformedSCT are byte positions within the TLS-encoded list.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from asn1crypto import core as asn1_core
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from .errors import LoadError, MalformedSCT, UnsupportedSCTVersion
from .hexenc import HexEncodeMode, hex_encode

logger = logging.getLogger("certkit")

SCT_LIST_OID = "1.3.6.1.4.1.11129.2.4.2"

SCT_VERSION_V1 = 0
LOG_ID_LENGTH = 32

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class HashAlgorithm(IntEnum):
    """TLS HashAlgorithm registry (RFC 5246 section 7.4.1.4.1)."""
    NONE   = 0
    MD5    = 1
    SHA1   = 2
    SHA224 = 3
    SHA256 = 4
    SHA384 = 5
    SHA512 = 6


class SignatureAlgorithm(IntEnum):
    """TLS SignatureAlgorithm registry (RFC 5246 section 7.4.1.4.1)."""
    ANONYMOUS = 0
    RSA       = 1
    DSA       = 2
    ECDSA     = 3


def _algorithm_name(registry: Any, value: int) -> str:
    try:
        return registry(value).name.lower()
    except ValueError:
        return f"unknown({value})"


@dataclass(frozen=True)
class DigitallySigned:
    hash_algorithm:      int
    signature_algorithm: int
    signature:           bytes

    @property
    def hash_algorithm_name(self) -> str:
        return _algorithm_name(HashAlgorithm, self.hash_algorithm)

    @property
    def signature_algorithm_name(self) -> str:
        return _algorithm_name(SignatureAlgorithm, self.signature_algorithm)


@dataclass(frozen=True)
class SCTEntry:
    """One signed certificate timestamp."""
    version:    int
    log_id:     bytes
    timestamp:  int     # milliseconds since the Unix epoch
    extensions: bytes
    signature:  DigitallySigned

    @property
    def issued_at(self) -> datetime:
        return EPOCH + timedelta(milliseconds=self.timestamp)

    def to_dict(self, mode: HexEncodeMode = HexEncodeMode.LOWER_COLON) -> Dict[str, Any]:
        """Display form, binary fields rendered in the given mode."""
        return {
            "version":              self.version,
            "log_id":               hex_encode(self.log_id, mode),
            "timestamp":            self.timestamp,
            "issued_at":            self.issued_at.isoformat(),
            "extensions":           hex_encode(self.extensions, mode),
            "hash_algorithm":       self.signature.hash_algorithm_name,
            "signature_algorithm":  self.signature.signature_algorithm_name,
            "signature":            hex_encode(self.signature.signature, mode),
        }


class _Reader:
    """Bounds-checked cursor over data[start:end]; positions stay absolute."""

    def __init__(self, data: bytes, start: int = 0, end: Optional[int] = None):
        self.data = data
        self.pos = start
        self.end = len(data) if end is None else end

    def remaining(self) -> int:
        return self.end - self.pos

    def read(self, n: int, what: str) -> bytes:
        if n > self.remaining():
            raise MalformedSCT(self.pos, f"truncated {what}: need {n} bytes, have {self.remaining()}")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def uint(self, n: int, what: str) -> int:
        return int.from_bytes(self.read(n, what), "big")

    def vector(self, length_bytes: int, what: str) -> bytes:
        """A length-prefixed opaque vector."""
        start = self.pos
        length = self.uint(length_bytes, f"{what} length")
        if length > self.remaining():
            raise MalformedSCT(start, f"{what} length {length} overruns buffer ({self.remaining()} bytes left)")
        return self.read(length, what)


def _parse_sct(reader: _Reader) -> SCTEntry:
    version_offset = reader.pos
    version = reader.uint(1, "version")
    if version != SCT_VERSION_V1:
        raise UnsupportedSCTVersion(version_offset, version)

    log_id = reader.read(LOG_ID_LENGTH, "log ID")
    timestamp = reader.uint(8, "timestamp")
    extensions = reader.vector(2, "extensions")
    hash_algorithm = reader.uint(1, "hash algorithm")
    signature_algorithm = reader.uint(1, "signature algorithm")
    signature = reader.vector(2, "signature")

    if reader.remaining():
        raise MalformedSCT(reader.pos, f"{reader.remaining()} trailing bytes in SCT")

    return SCTEntry(
        version=version,
        log_id=log_id,
        timestamp=timestamp,
        extensions=extensions,
        signature=DigitallySigned(hash_algorithm, signature_algorithm, signature)
    )


def parse_sct_list(data: bytes) -> List[SCTEntry]:
    """Decode a TLS-encoded SignedCertificateTimestampList."""
    reader = _Reader(data)
    total = reader.uint(2, "SCT list length")
    if total != reader.remaining():
        raise MalformedSCT(0, f"SCT list length {total} does not match the {reader.remaining()} bytes that follow")
    if total == 0:
        raise MalformedSCT(0, "empty SCT list")

    entries = []
    while reader.remaining():
        start = reader.pos
        length = reader.uint(2, "SCT length")
        if length > reader.remaining():
            raise MalformedSCT(start, f"SCT length {length} overruns buffer ({reader.remaining()} bytes left)")

        entries.append(_parse_sct(_Reader(data, reader.pos, reader.pos + length)))
        reader.pos += length

    return entries


def unwrap_extension_value(value: bytes) -> bytes:
    """Strip the DER OCTET STRING around the TLS-encoded list."""
    try:
        return asn1_core.OctetString.load(value, strict=True).native
    except (ValueError, TypeError) as e:
        raise MalformedSCT(0, f"extension value is not a DER OCTET STRING: {e}") from e


def extract_scts_from_extensions(extensions: Iterable[Tuple[str, bytes]]) -> List[SCTEntry]:
    """Decode every SCT list extension among (OID, raw value) pairs, in order."""
    scts = []
    for oid, value in extensions:
        if oid != SCT_LIST_OID:
            continue

        entries = parse_sct_list(unwrap_extension_value(value))
        logger.debug(f"Found {len(entries)} SCT(s) in extension {oid}")
        scts.extend(entries)

    return scts


def certificate_extensions(certificate: Union[x509.Certificate, bytes]) -> List[Tuple[str, bytes]]:
    """The (OID, raw value) pairs of a certificate's extensions, in encoding order.

    The raw DER is walked directly so that a malformed extension value does
    not stop the certificate from being read.
    """
    if isinstance(certificate, x509.Certificate):
        der = certificate.public_bytes(serialization.Encoding.DER)
    else:
        der = bytes(certificate)

    try:
        cert = asn1_x509.Certificate.load(der, strict=True)
        extensions = cert["tbs_certificate"]["extensions"]
        if not isinstance(extensions, asn1_x509.Extensions):
            return []
        return [(ext["extn_id"].dotted, ext["extn_value"].contents) for ext in extensions]
    except (ValueError, TypeError) as e:
        raise LoadError("certificate", "could not read extensions", e) from e


def extract_scts(certificate: Union[x509.Certificate, bytes]) -> List[SCTEntry]:
    """All SCTs embedded in a certificate; empty when it carries none.

    Raises: MalformedSCT if any SCT list extension does not decode
    """
    return extract_scts_from_extensions(certificate_extensions(certificate))
