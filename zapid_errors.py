"""
Error hierarchy shared by `secure_random.py`, `zapid.py`, and `random_id_maker.py`.
"""


class ZapidError(Exception):
    """Base class; the cli catches this to report a clean one-line message."""


class ZapidValidationError(ZapidError):
    """Raised for a malformed ID length, before any entropy is consumed."""


class CryptoGenerationError(ZapidError):
    """Raised when secure random bytes cannot be produced, or a draw is requested with bad parameters."""
