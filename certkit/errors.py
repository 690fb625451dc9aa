"""Typed errors raised by certkit.

Every failure in the library surfaces as a subclass of CertkitError so front
ends can map them to messages and exit codes in one place.
"""

from typing import Optional


class CertkitError(Exception):
    """Base class for all certkit errors."""


class UnsupportedAlgorithm(CertkitError):
    """The requested key algorithm is not RSA, ECDSA or Ed25519."""


class UnsupportedParameter(CertkitError):
    """The algorithm is known but its size or curve is not."""


class EncodingError(CertkitError):
    """A key could not be rendered to the DER form needed for an SKI."""


class UnsupportedDisplayMode(CertkitError):
    """A display mode selector was not recognized."""

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"unsupported display mode '{mode}'")


class MalformedSCT(CertkitError):
    """SCT extension bytes violate the RFC 6962 structure.

    Args:
        offset: byte position in the SCT list where decoding failed
        reason: what was wrong at that position
    """

    def __init__(self, offset: int, reason: str):
        self.offset = offset
        self.reason = reason
        super().__init__(f"malformed SCT list at offset {offset}: {reason}")


class UnsupportedSCTVersion(MalformedSCT):
    """An SCT entry carries a version other than v1."""

    def __init__(self, offset: int, version: int):
        self.version = version
        super().__init__(offset, f"unsupported SCT version {version}")


class LoadError(CertkitError):
    """Certificate, CSR or key material could not be decoded."""

    def __init__(self, source: str, message: str, cause: Optional[BaseException] = None):
        self.source = source
        self.message = message
        self.cause = cause
        detail = f"{message}: {cause}" if cause is not None else message
        super().__init__(f"failed to load {source}: {detail}")
