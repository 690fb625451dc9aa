"""Settings shared by the certkit front ends."""

import logging

import pydantic

from .hexenc import HexEncodeMode, parse_display_mode
from .keygen import Algorithm, algorithm_from_name

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(pydantic.BaseModel):
    """Application settings."""
    verbose:        bool = False
    debug:          bool = False
    display_mode:   HexEncodeMode = HexEncodeMode.LOWER_COLON
    key_algorithm:  str  = "ecdsa"
    rsa_bits:       int  = 2048
    ec_curve:       int  = 256

    @pydantic.field_validator("display_mode", mode="before")
    @classmethod
    def _parse_display_mode(cls, value):
        # UnsupportedDisplayMode is not a ValueError, so it escapes pydantic unwrapped
        return parse_display_mode(value)

    def algorithm(self) -> Algorithm:
        """The key generation Algorithm these settings select."""
        name = self.key_algorithm.lower()
        if name == "rsa":
            return algorithm_from_name(name, self.rsa_bits)
        if name in ("ecdsa", "ec"):
            return algorithm_from_name(name, self.ec_curve)
        return algorithm_from_name(name)

    def log_level(self) -> int:
        if self.debug:
            return logging.DEBUG
        if self.verbose:
            return logging.INFO
        return logging.WARNING


def configure_logging(settings: Settings) -> logging.Logger:
    """Set up console logging for a front end and return the package logger."""
    logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)

    logger = logging.getLogger("certkit")
    logger.setLevel(settings.log_level())
    return logger
