"""
Cryptographically secure random bytes, and unbiased random integers built on them.

Provider selection:
- Under Pyodide (python-in-the-browser) the `js` bridge exposes `crypto.getRandomValues`; that's used when present.
- Otherwise `secrets.token_bytes()` is used, which reads the OS CSPRNG via `os.urandom()`.
- The probe runs once per call; callers drawing many values (e.g. `zapid.generate()`) probe once and pass the provider down.
- Exactly one provider serves a given call; sources are never mixed.

Integer sampling:
`random_int()` masks each draw to the minimum bit-width that holds `max_value - 1` and rejects out-of-range values,
  so every result in `[0, max_value)` is equally likely (no modulo bias).
"""

import decimal
import logging
import math
import numbers
import secrets
from typing import Any, Protocol

from zapid_errors import CryptoGenerationError

log = logging.getLogger(__name__)


## -- integer checks ------------------------------------------------


def as_integer(value: Any) -> int | None:
    """
    Returns `value` as an int when it is a mathematical integer; otherwise None.

    Bools are rejected. Integral-valued finite floats and Decimals (e.g. `8.0`, `Decimal('8')`) are accepted and normalized.

    Called by `random_bytes()`, `random_int()`, and `zapid.validate_length()`.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        as_float = float(value)
        if math.isfinite(as_float) and as_float.is_integer():
            return int(as_float)
    if isinstance(value, decimal.Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
    return None


## -- providers -----------------------------------------------------


class RandomProvider(Protocol):
    """A source of secure random bytes."""

    name: str

    def random_bytes(self, n: int) -> bytes: ...


class BrowserRandomProvider:
    """Wraps the browser's `crypto.getRandomValues()`, reached through Pyodide's `js` module."""

    name = 'browser'

    def __init__(self, js_module: Any) -> None:
        self.js = js_module

    def random_bytes(self, n: int) -> bytes:
        buffer = self.js.Uint8Array.new(n)
        self.js.crypto.getRandomValues(buffer)
        return bytes(buffer.to_py())


class NativeRandomProvider:
    """Wraps the OS CSPRNG via `secrets.token_bytes()`."""

    name = 'native'

    def random_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)


def detect_browser_crypto() -> Any | None:
    """
    Returns Pyodide's `js` module if it exposes `crypto.getRandomValues` and `Uint8Array`; otherwise None.

    Called by `get_provider()`.
    """
    try:
        import js  # only importable under Pyodide
    except ImportError:
        return None
    crypto = getattr(js, 'crypto', None)
    if crypto is None or not callable(getattr(crypto, 'getRandomValues', None)):
        return None
    if getattr(js, 'Uint8Array', None) is None:
        return None
    return js


def get_provider() -> RandomProvider:
    """
    Picks the provider for this call: browser crypto when detectable, else the native OS source.

    Called by `random_bytes()`.
    """
    js_module = detect_browser_crypto()
    if js_module is not None:
        log.debug('using browser crypto provider')
        return BrowserRandomProvider(js_module)
    log.debug('using native crypto provider')
    return NativeRandomProvider()


## -- public api ----------------------------------------------------


def random_bytes(n: int, provider: RandomProvider | None = None) -> bytes:
    """
    Returns `n` independent, uniformly distributed random bytes from a secure source.

    `provider` defaults to the result of `get_provider()`, probed for this call.

    Raises CryptoGenerationError if `n` is not a positive integer, or if the underlying source fails.
    """
    size: int | None = as_integer(n)
    if size is None or size < 1:
        raise CryptoGenerationError('Random bytes length must be a positive integer')
    try:
        if provider is None:
            provider = get_provider()
        data: bytes = provider.random_bytes(size)
    except NotImplementedError as e:
        # os.urandom() raises this when the platform has no randomness source
        raise CryptoGenerationError(
            'No secure crypto implementation available. Ensure you are in a supported environment.'
        ) from e
    except Exception as e:
        raise CryptoGenerationError(f'Failed to generate random bytes: {e}') from e
    if len(data) != size:
        raise CryptoGenerationError(
            f'Failed to generate random bytes: expected {size} bytes, provider returned {len(data)}'
        )
    return data


def random_int(max_value: int, provider: RandomProvider | None = None) -> int:
    """
    Returns an integer uniformly distributed over `[0, max_value)`, using bit-masked rejection sampling.

    Every draw uses `provider`; when None, each draw probes on its own via `random_bytes()`.

    The loop has no iteration cap; each draw is rejected with probability below 1/2.
    """
    bound: int | None = as_integer(max_value)
    if bound is None or bound < 1:
        raise CryptoGenerationError('Maximum value must be a positive integer')
    if bound == 1:
        return 0

    bits_needed: int = (bound - 1).bit_length()  # ceil(log2(bound)), exact for big ints
    bytes_needed: int = math.ceil(bits_needed / 8)
    mask: int = (1 << bits_needed) - 1

    attempts = 0
    while True:
        attempts += 1
        num: int = int.from_bytes(random_bytes(bytes_needed, provider), 'big') & mask
        if num < bound:
            if attempts > 1:
                log.debug(f'random_int: max={bound} accepted after {attempts} draws')
            return num
