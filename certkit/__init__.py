"""Certificate and key material introspection."""

from .errors import (
    CertkitError,
    EncodingError,
    LoadError,
    MalformedSCT,
    UnsupportedAlgorithm,
    UnsupportedDisplayMode,
    UnsupportedParameter,
    UnsupportedSCTVersion,
)
from .hexenc import HexEncodeMode, format_serial, hex_decode, hex_encode, parse_display_mode
from .keygen import ECDSA, RSA, Algorithm, Curve, Ed25519, KeyPair, algorithm_from_name, generate, public_key_bytes
from .keymatch import match_keys
from .sct import DigitallySigned, SCTEntry, extract_scts, extract_scts_from_extensions, parse_sct_list
from .ski import KeyInfo, compute_ski, parse_pem, ski_digest

__version__ = "0.1.0"
