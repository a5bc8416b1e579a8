"""
Tests for damage magnitude resolution.

Tests cover:
- Multipliers for each allowed exponent code
- Missing results for invalid codes and missing amounts
- Vectorized resolution over columns
- Combined economic damage with and without missing-as-zero
"""

import pandas as pd
import pytest

from normalize_events import normalize_events
from resolve_damage import (
    CROP_DAMAGE,
    ECONOMIC_DAMAGE,
    EXPONENT_MULTIPLIERS,
    PROPERTY_DAMAGE,
    exponent_multiplier,
    resolve_damage,
    resolve_magnitude,
    resolve_magnitudes,
)


# =============================================================
# TEST: Scalar resolution
# =============================================================

class TestResolveMagnitude:
    """resolve_magnitude on single values."""

    def test_multiplier_table(self):
        assert EXPONENT_MULTIPLIERS == {'': 1.0, 'K': 1e3, 'M': 1e6, 'B': 1e9}

    @pytest.mark.parametrize('code,multiplier', [
        ('', 1),
        ('K', 1_000),
        ('M', 1_000_000),
        ('B', 1_000_000_000),
    ])
    def test_valid_codes(self, code, multiplier):
        assert resolve_magnitude(2.5, code) == pytest.approx(2.5 * multiplier)

    def test_units_code(self):
        assert resolve_magnitude(7, '') == 7

    @pytest.mark.parametrize('code', ['?', '5', 'H', None])
    def test_invalid_code_is_missing(self, code):
        assert exponent_multiplier(code) is None
        assert resolve_magnitude(10, code) is None

    @pytest.mark.parametrize('amount', [None, float('nan'), pd.NA, 'abc'])
    def test_missing_amount_is_missing(self, amount):
        assert resolve_magnitude(amount, 'K') is None

    def test_zero_amount_is_zero_not_missing(self):
        assert resolve_magnitude(0, 'M') == 0


# =============================================================
# TEST: Column resolution
# =============================================================

class TestResolveMagnitudes:
    """resolve_magnitudes on aligned columns."""

    def test_matches_scalar_resolution(self):
        amounts = pd.Series([1.5, 2.0, 10.0, 7.0, None])
        codes = pd.Series(['K', 'M', None, '', 'B'], dtype='string')

        result = resolve_magnitudes(amounts, codes)

        assert result.iloc[0] == 1500
        assert result.iloc[1] == 2_000_000
        assert pd.isna(result.iloc[2])
        assert result.iloc[3] == 7
        assert pd.isna(result.iloc[4])

    def test_result_is_nullable_float(self):
        result = resolve_magnitudes(pd.Series([1.0]), pd.Series(['K']))
        assert str(result.dtype) == 'Float64'


# =============================================================
# TEST: Damage columns on an events table
# =============================================================

def make_events():
    return normalize_events(pd.DataFrame({
        'EVTYPE': ['TORNADO', 'tornado', 'FLOOD', 'HAIL'],
        'FATALITIES': [0.0, 0.0, 0.0, 0.0],
        'INJURIES': [0.0, 0.0, 0.0, 0.0],
        'PROPDMG': [1.5, 2.0, 10.0, 3.0],
        'PROPDMGEXP': ['K', 'm', '?', ''],
        'CROPDMG': [1.0, 0.0, 5.0, 1.0],
        'CROPDMGEXP': ['K', '', 'K', '+'],
    }))


class TestResolveDamage:
    """resolve_damage adds property, crop and economic damage."""

    def test_property_and_crop_resolved_independently(self):
        result = resolve_damage(make_events())

        assert result[PROPERTY_DAMAGE].iloc[0] == 1500
        assert result[PROPERTY_DAMAGE].iloc[1] == 2_000_000
        assert pd.isna(result[PROPERTY_DAMAGE].iloc[2])
        assert result[CROP_DAMAGE].iloc[2] == 5000
        assert pd.isna(result[CROP_DAMAGE].iloc[3])

    def test_economic_damage_sums_resolved_amounts(self):
        """Combined damage is amount x multiplier summed, not multipliers summed."""
        result = resolve_damage(make_events())

        assert result[ECONOMIC_DAMAGE].iloc[0] == 2500
        assert result[ECONOMIC_DAMAGE].iloc[1] == 2_000_000

    def test_economic_damage_missing_if_either_side_missing(self):
        result = resolve_damage(make_events())

        assert pd.isna(result[ECONOMIC_DAMAGE].iloc[2])
        assert pd.isna(result[ECONOMIC_DAMAGE].iloc[3])

    def test_missing_as_zero(self):
        result = resolve_damage(make_events(), missing_as_zero=True)

        assert result[ECONOMIC_DAMAGE].iloc[2] == 5000
        assert result[ECONOMIC_DAMAGE].iloc[3] == 3
        # only the combined measure changes
        assert pd.isna(result[PROPERTY_DAMAGE].iloc[2])

    def test_missing_as_zero_keeps_both_missing_as_missing(self):
        events = make_events()
        events['CROPDMGEXP'] = pd.Series([pd.NA] * 4, dtype='string')
        events['PROPDMGEXP'] = pd.Series([pd.NA] * 4, dtype='string')

        result = resolve_damage(events, missing_as_zero=True)

        assert result[ECONOMIC_DAMAGE].isna().all()

    def test_does_not_modify_input(self):
        events = make_events()
        before = events.copy()

        resolve_damage(events)

        pd.testing.assert_frame_equal(events, before)
        assert PROPERTY_DAMAGE not in events.columns

    def test_missing_column_is_an_error(self):
        with pytest.raises(ValueError, match='PROPDMG'):
            resolve_damage(make_events().drop(columns=['PROPDMG']))
