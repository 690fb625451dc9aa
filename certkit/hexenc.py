"""Textual display of digests, key material and serial numbers."""

from enum import Enum
from typing import Union

from .errors import UnsupportedDisplayMode


class HexEncodeMode(Enum):
    """Recognized display modes."""
    LOWER       = "lower"
    UPPER       = "upper"
    LOWER_COLON = "colon-lower"
    UPPER_COLON = "colon-upper"
    INTEGER     = "integer"


# selector -> mode; the short names are what the serial printer has always taken
MODE_NAMES = {
    "lower":        HexEncodeMode.LOWER,
    "upper":        HexEncodeMode.UPPER,
    "colon-lower":  HexEncodeMode.LOWER_COLON,
    "colon-upper":  HexEncodeMode.UPPER_COLON,
    "integer":      HexEncodeMode.INTEGER,
    "hex":          HexEncodeMode.LOWER,
    "uhex":         HexEncodeMode.UPPER,
    "int":          HexEncodeMode.INTEGER,
}


def parse_display_mode(mode: Union[str, HexEncodeMode]) -> HexEncodeMode:
    """Turn a selector into a HexEncodeMode.

    Args:    mode: mode name (case-insensitive) or an existing HexEncodeMode
    Returns: the matching HexEncodeMode
    Raises:  UnsupportedDisplayMode for anything unrecognized
    """
    if isinstance(mode, HexEncodeMode):
        return mode

    if not isinstance(mode, str):
        raise UnsupportedDisplayMode(repr(mode))

    try:
        return MODE_NAMES[mode.strip().lower()]
    except KeyError:
        raise UnsupportedDisplayMode(mode) from None


def hex_encode(data: bytes, mode: HexEncodeMode) -> str:
    """Render bytes in the given display mode."""
    if mode == HexEncodeMode.INTEGER:
        return str(int.from_bytes(data, "big"))

    if mode == HexEncodeMode.LOWER:
        return data.hex()
    if mode == HexEncodeMode.UPPER:
        return data.hex().upper()
    if mode == HexEncodeMode.LOWER_COLON:
        return data.hex(":")
    if mode == HexEncodeMode.UPPER_COLON:
        return data.hex(":").upper()

    raise UnsupportedDisplayMode(str(mode))


def hex_decode(text: str) -> bytes:
    """Reverse any of the hex display modes; colons and case are ignored."""
    return bytes.fromhex(text.replace(":", ""))


def format_serial(serial: int, mode: HexEncodeMode) -> str:
    """Render a certificate serial number.

    Hex modes encode the magnitude in the fewest big-endian bytes (a zero
    serial is a single zero byte) and prefix "-" to a negative serial.
    """
    if mode == HexEncodeMode.INTEGER:
        return str(serial)

    magnitude = abs(serial)
    length = max(1, (magnitude.bit_length() + 7) // 8)
    sign = "-" if serial < 0 else ""
    return sign + hex_encode(magnitude.to_bytes(length, "big"), mode)
