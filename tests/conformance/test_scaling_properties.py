"""
Decimal Scaling Conformance Tests

INVARIANTS, for 0 <= d <= 18 and amounts a >= 0:

    scale_wei_to_decimals(scale_decimals_to_wei(a, d), d) = a
    0 <= x - scale_decimals_to_wei(scale_wei_to_decimals(x, d), d) < 10**(18 - d)
    quantize_to_decimals(quantize_to_decimals(x, d), d) = quantize_to_decimals(x, d)

Scaling down truncates; scaling up is exact.
"""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from vesting import (
    ether, from_wei, quantize_to_decimals, scale_decimals_to_wei, scale_wei_to_decimals,
)


decimals = st.integers(min_value=0, max_value=18)
amounts = st.integers(min_value=0, max_value=10 ** 40)


class TestScalingProperties:
    """Property-based tests of decimal conversion."""

    @given(amount=amounts, d=decimals)
    @settings(max_examples=50)
    def test_up_then_down_is_exact(self, amount, d):
        assert scale_wei_to_decimals(scale_decimals_to_wei(amount, d), d) == amount

    @given(amount=amounts, d=decimals)
    @settings(max_examples=50)
    def test_down_then_up_loses_less_than_one_unit(self, amount, d):
        """
        PROPERTY: Truncation loses strictly less than one token unit.
        """
        restored = scale_decimals_to_wei(scale_wei_to_decimals(amount, d), d)
        assert 0 <= amount - restored < 10 ** (18 - d)

    @given(amount=amounts, d=decimals)
    @settings(max_examples=50)
    def test_quantize_is_idempotent(self, amount, d):
        once = quantize_to_decimals(amount, d)
        assert quantize_to_decimals(once, d) == once
        assert once <= amount

    @given(a=amounts, b=amounts, d=decimals)
    @settings(max_examples=50)
    def test_scale_down_is_monotone(self, a, b, d):
        lo, hi = sorted((a, b))
        assert scale_wei_to_decimals(lo, d) <= scale_wei_to_decimals(hi, d)

    @given(st.decimals(min_value=0, max_value=10 ** 12, places=18, allow_nan=False, allow_infinity=False))
    @settings(max_examples=50)
    def test_ether_from_wei_roundtrip(self, value):
        assert from_wei(ether(value)) == value
        assert isinstance(from_wei(ether(value)), Decimal)
