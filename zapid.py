"""
Generates short random IDs from a fixed 62-character alphabet, and reports the collision risk for a given length.

Usage (as a library):
    import zapid
    zapid.generate()          # e.g. 'aB2x9qL' (default length is 7)
    zapid.generate(12)
    zapid.generate_with_info(12)

Collision risk:
Uses the birthday-bound approximation for a fixed reference population of 100_000 IDs:
    space = 62 ** length
    P(collision) ≈ 1 - exp(-N(N-1) / (2 * space))
and classifies the result:
    p < 0.001          -> 'safe'
    0.001 <= p < 0.1   -> 'moderate'
    p >= 0.1           -> 'high-risk'

Uniqueness is never enforced; no record of issued IDs is kept.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Literal

from secure_random import RandomProvider, as_integer, get_provider, random_int
from zapid_errors import ZapidValidationError

log = logging.getLogger(__name__)


CHARSET: str = 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'
DEFAULT_LENGTH: int = 7
MIN_LENGTH: int = 7
MAX_LENGTH: int = 32

# Safety tiers are calibrated against this population; not a parameter.
REFERENCE_POPULATION: int = 100_000
SAFE_THRESHOLD: float = 0.001  # 0.1%
MODERATE_THRESHOLD: float = 0.1  # 10%

SafetyLevel = Literal['safe', 'moderate', 'high-risk']


@dataclass(frozen=True)
class ZapidConfig:
    """Read-only snapshot of the generator's settings."""

    default_length: int
    min_length: int
    max_length: int
    charset: str

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ZapidResult:
    """An ID plus the collision-risk assessment for its length."""

    id: str
    safety: SafetyLevel
    collision_probability: str
    recommendation: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


CONFIG = ZapidConfig(
    default_length=DEFAULT_LENGTH,
    min_length=MIN_LENGTH,
    max_length=MAX_LENGTH,
    charset=CHARSET,
)


## -- validation ----------------------------------------------------


def validate_length(length: Any) -> int:
    """
    Checks a requested ID length and returns it as an int.

    Checks run in order: integer-ness, then the minimum, then the maximum.

    Called by `generate()` and `generate_with_info()`.
    """
    value: int | None = as_integer(length)
    if value is None:
        raise ZapidValidationError('ID length must be an integer')
    if value < MIN_LENGTH:
        raise ZapidValidationError(f'ID length must be at least {MIN_LENGTH} characters')
    if value > MAX_LENGTH:
        raise ZapidValidationError(f'ID length cannot exceed {MAX_LENGTH} characters')
    return value


## -- risk model ----------------------------------------------------


def total_combinations(length: int) -> int:
    return len(CHARSET) ** length


def calculate_collision_probability(length: int) -> float:
    """
    Returns the approximate probability that at least two of `REFERENCE_POPULATION` IDs of `length` collide.

    Called by `generate_with_info()` and `risk_table()`.
    """
    space: int = total_combinations(length)
    exponent: float = -(REFERENCE_POPULATION * (REFERENCE_POPULATION - 1)) / (2 * space)
    return 1 - math.exp(exponent)


def get_safety_level(probability: float) -> SafetyLevel:
    if probability >= MODERATE_THRESHOLD:
        return 'high-risk'
    if probability >= SAFE_THRESHOLD:
        return 'moderate'
    return 'safe'


def get_recommendation(length: int, safety: SafetyLevel) -> str:
    """
    Returns advice text for the given safety tier.

    Only the 'safe' message depends on `length`, via the total-combinations count.
    """
    if safety == 'safe':
        combinations: int = total_combinations(length)
        return f'Safe for up to 100k IDs. Total possible combinations: {combinations:.2e}'
    if safety == 'moderate':
        return 'Moderate collision risk. Consider increasing length for large-scale use.'
    return 'High collision risk. Increase length or reduce number of IDs.'


def format_probability(probability: float) -> str:
    """Formats a probability as a percentage with exactly 3 decimals, e.g. `0.142%`."""
    return f'{probability * 100:.3f}%'


def risk_table() -> list[dict[str, Any]]:
    """
    Returns the collision-risk assessment for every supported length; consumes no entropy.

    Called by `random_id_maker.main()`.
    """
    rows: list[dict[str, Any]] = []
    for length in range(MIN_LENGTH, MAX_LENGTH + 1):
        probability: float = calculate_collision_probability(length)
        rows.append(
            {
                'length': length,
                'combinations': f'{total_combinations(length):.2e}',
                'collision_probability': format_probability(probability),
                'safety': get_safety_level(probability),
            }
        )
    return rows


## -- public api ----------------------------------------------------


def generate(length: int = DEFAULT_LENGTH) -> str:
    """
    Returns a random ID of `length` characters, each drawn independently and uniformly from `CHARSET`.

    Raises ZapidValidationError for a bad length, before any random draw.
    The secure source is probed once per ID; every character is drawn from that provider.
    """
    size: int = validate_length(length)
    provider: RandomProvider = get_provider()
    charset_size: int = len(CHARSET)
    id_value: str = ''.join(CHARSET[random_int(charset_size, provider)] for _ in range(size))
    log.debug(f'generated id of length {size}')
    return id_value


def generate_with_info(length: int = DEFAULT_LENGTH) -> ZapidResult:
    """
    Returns a random ID along with the collision-risk assessment for its length.

    The probability depends only on `length`, never on the generated value.
    """
    size: int = validate_length(length)
    id_value: str = generate(size)
    probability: float = calculate_collision_probability(size)
    safety: SafetyLevel = get_safety_level(probability)
    return ZapidResult(
        id=id_value,
        safety=safety,
        collision_probability=format_probability(probability),
        recommendation=get_recommendation(size, safety),
    )


def get_charset() -> str:
    return CHARSET


def get_config() -> ZapidConfig:
    return CONFIG
