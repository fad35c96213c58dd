"""
test_scaling.py - Unit tests for canonical/token decimal conversion

Tests:
- Scaling down truncates dust
- Scaling up is exact
- Decimals range checks
- ether() / from_wei() parsing and formatting
"""

import pytest
from decimal import Decimal

from vesting import (
    ValidationError, ether, from_wei, quantize_to_decimals,
    scale_decimals_to_wei, scale_wei_to_decimals,
)


class TestScaleWeiToDecimals:
    """Tests for scale_wei_to_decimals."""

    def test_six_decimals(self):
        assert scale_wei_to_decimals(ether("1.234567"), 6) == 1_234_567

    def test_truncates_dust(self):
        """Digits below token precision are dropped, never rounded up."""
        assert scale_wei_to_decimals(1_999_999_999_999, 6) == 1
        assert scale_wei_to_decimals(ether("5.9"), 0) == 5

    def test_eighteen_decimals_is_identity(self):
        assert scale_wei_to_decimals(123_456_789, 18) == 123_456_789

    def test_zero(self):
        assert scale_wei_to_decimals(0, 0) == 0

    def test_decimals_above_18_raises(self):
        with pytest.raises(ValidationError, match="decimals exceed 18"):
            scale_wei_to_decimals(1, 19)

    def test_negative_decimals_raises(self):
        with pytest.raises(ValidationError, match="negative decimals"):
            scale_wei_to_decimals(1, -1)


class TestScaleDecimalsToWei:
    """Tests for scale_decimals_to_wei."""

    def test_zero_decimals(self):
        assert scale_decimals_to_wei(5, 0) == 5 * 10 ** 18

    def test_six_decimals(self):
        assert scale_decimals_to_wei(1_234_567, 6) == ether("1.234567")

    def test_decimals_above_18_raises(self):
        with pytest.raises(ValidationError, match="decimals exceed 18"):
            scale_decimals_to_wei(1, 19)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            scale_decimals_to_wei(1, 42)


class TestQuantize:
    """Down-then-up loses what the token cannot hold."""

    def test_down_then_up_drops_dust(self):
        amount = ether("1.0000001234567")
        assert quantize_to_decimals(amount, 6) == ether("1")
        assert quantize_to_decimals(amount, 6) != amount

    def test_exact_at_18(self):
        assert quantize_to_decimals(ether("1.0000001234567"), 18) == ether("1.0000001234567")


class TestEther:
    """Tests for ether() and from_wei()."""

    def test_whole(self):
        assert ether("1") == 10 ** 18

    def test_fraction(self):
        assert ether("12.5") == 12_500_000_000_000_000_000

    def test_grant_sized_amount(self):
        assert ether("524938.489797848038147") == 524_938_489_797_848_038_147_000

    def test_int_and_decimal_inputs(self):
        assert ether(3) == 3 * 10 ** 18
        assert ether(Decimal("0.000000000000000001")) == 1

    def test_too_many_decimals_raises(self):
        with pytest.raises(ValidationError, match="more than 18 decimals"):
            ether("0.0000000000000000001")

    def test_negative_raises(self):
        with pytest.raises(ValidationError, match="negative amount"):
            ether("-1")

    def test_garbage_raises(self):
        with pytest.raises(ValidationError, match="invalid amount"):
            ether("ten")

    def test_float_rejected(self):
        with pytest.raises(ValidationError, match="float"):
            ether(0.1)

    def test_from_wei(self):
        assert from_wei(ether("1.5")) == Decimal("1.5")
        assert from_wei(1) == Decimal("1E-18")
