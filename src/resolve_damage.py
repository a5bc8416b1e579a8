"""
Turn (amount, exponent code) pairs into dollar magnitudes.

Damage is recorded as a 3 significant figure amount plus a letter giving
the power of 1000 to scale it by. The codes must already be normalized
(see normalize_events.py); a missing code means the original code was
invalid, and the resolved damage is missing too, not zero.
"""
import numpy as np
import pandas as pd
from typing import Dict, Optional

from load_events import (
    PROPERTY_AMOUNT,
    PROPERTY_EXPONENT,
    CROP_AMOUNT,
    CROP_EXPONENT,
)
from normalize_events import EXPONENT_CODES

PROPERTY_DAMAGE = 'PROPERTY_DAMAGE'
CROP_DAMAGE = 'CROP_DAMAGE'
ECONOMIC_DAMAGE = 'ECONOMIC_DAMAGE'

# '' -> 1, K -> 1e3, M -> 1e6, B -> 1e9
EXPONENT_MULTIPLIERS: Dict[str, float] = dict(
    zip(EXPONENT_CODES, np.power(1000.0, np.arange(len(EXPONENT_CODES))).tolist())
)


def _is_missing(value) -> bool:
    return value is None or value is pd.NA or (isinstance(value, float) and np.isnan(value))


def exponent_multiplier(code) -> Optional[float]:
    """Multiplier for a normalized exponent code, None if the code is missing or unknown."""
    if _is_missing(code):
        return None
    return EXPONENT_MULTIPLIERS.get(code)


def resolve_magnitude(amount, code) -> Optional[float]:
    """
    Resolve a single amount and exponent code.

    Returns None when the code is invalid or missing, or when the amount
    is missing or not a number.
    """
    multiplier = exponent_multiplier(code)
    if multiplier is None or _is_missing(amount):
        return None
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        return None
    if np.isnan(amount):
        return None
    return amount * multiplier


def resolve_magnitudes(amounts: pd.Series, codes: pd.Series) -> pd.Series:
    """Vectorized resolve_magnitude over two aligned columns."""
    multipliers = codes.astype(object).map(EXPONENT_MULTIPLIERS)
    multipliers = pd.to_numeric(multipliers, errors='coerce').astype('Float64')
    amounts = pd.to_numeric(amounts, errors='coerce').astype('Float64')
    return amounts * multipliers


def resolve_damage(events: pd.DataFrame, missing_as_zero: bool = False) -> pd.DataFrame:
    """
    Return a copy of the events with resolved damage columns added.

    PROPERTY_DAMAGE and CROP_DAMAGE are resolved independently.
    ECONOMIC_DAMAGE is their sum, missing when either side is missing
    unless missing_as_zero is set, in which case a missing side counts
    as 0 (the combined value is still missing if both sides are).
    """
    missing = [
        col for col in (PROPERTY_AMOUNT, PROPERTY_EXPONENT, CROP_AMOUNT, CROP_EXPONENT)
        if col not in events.columns
    ]
    if missing:
        raise ValueError(f"Cannot resolve damage, missing columns: {missing}")

    resolved = events.copy()
    resolved[PROPERTY_DAMAGE] = resolve_magnitudes(events[PROPERTY_AMOUNT], events[PROPERTY_EXPONENT])
    resolved[CROP_DAMAGE] = resolve_magnitudes(events[CROP_AMOUNT], events[CROP_EXPONENT])

    if missing_as_zero:
        both_missing = resolved[PROPERTY_DAMAGE].isna() & resolved[CROP_DAMAGE].isna()
        combined = resolved[PROPERTY_DAMAGE].fillna(0) + resolved[CROP_DAMAGE].fillna(0)
        resolved[ECONOMIC_DAMAGE] = combined.mask(both_missing, pd.NA)
    else:
        resolved[ECONOMIC_DAMAGE] = resolved[PROPERTY_DAMAGE] + resolved[CROP_DAMAGE]

    return resolved
