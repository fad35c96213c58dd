"""
scaling.py - Conversion between canonical units and token-native decimals

All vesting accounting happens in a canonical 18-decimal fixed-point unit.
Tokens may use any precision from 0 to 18 decimals. This module converts
between the two:

    scale_wei_to_decimals(amount, d)   floor(amount / 10**(18 - d))
    scale_decimals_to_wei(amount, d)   amount * 10**(18 - d)

Scaling down truncates. Dust below the token's precision is dropped, never
rounded up. Scaling up is exact, so up-then-down always returns the input,
while down-then-up may lose the low 18 - d digits.

ether() and from_wei() convert between human-readable decimal strings and
canonical ints using Decimal arithmetic.
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, getcontext
from typing import Union

from .core import WEI, WEI_DECIMALS, ValidationError


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# 78 significant digits cover every uint256 value, so parsing and formatting
# canonical amounts through Decimal never rounds.
#
_VESTING_DECIMAL_CONTEXT = getcontext()
_VESTING_DECIMAL_CONTEXT.prec = max(_VESTING_DECIMAL_CONTEXT.prec, 80)


def _check_decimals(decimals: int) -> None:
    if decimals < 0:
        raise ValidationError("Vesting: negative decimals")
    if decimals > WEI_DECIMALS:
        raise ValidationError("Vesting: decimals exceed 18")


def scale_wei_to_decimals(amount: int, decimals: int) -> int:
    """
    Convert a canonical amount to token-native decimals, truncating.

    Args:
        amount: Non-negative canonical amount
        decimals: Token precision, 0 to 18

    Returns:
        floor(amount / 10**(18 - decimals))

    Raises:
        ValidationError: If decimals is out of range
    """
    _check_decimals(decimals)
    if decimals == WEI_DECIMALS:
        return amount
    return amount // 10 ** (WEI_DECIMALS - decimals)


def scale_decimals_to_wei(amount: int, decimals: int) -> int:
    """
    Convert a token-native amount to canonical units. Exact.

    Raises:
        ValidationError: If decimals is out of range
    """
    _check_decimals(decimals)
    if decimals == WEI_DECIMALS:
        return amount
    return amount * 10 ** (WEI_DECIMALS - decimals)


def quantize_to_decimals(amount: int, decimals: int) -> int:
    """Drop the part of a canonical amount the token cannot represent."""
    return scale_decimals_to_wei(scale_wei_to_decimals(amount, decimals), decimals)


def ether(value: Union[str, int, Decimal]) -> int:
    """
    Parse a decimal value into canonical units.

    ether("12.5") == 12_500_000_000_000_000_000. Percentages use the same
    scale, so ether("10") is 10%.

    Raises:
        ValidationError: If the value is not a number, is negative, or has
            more than 18 fractional digits
    """
    if isinstance(value, float):
        raise ValidationError("Vesting: float amounts are not accepted, use str or Decimal")
    try:
        d = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"Vesting: invalid amount {value!r}")
    if not d.is_finite():
        raise ValidationError(f"Vesting: invalid amount {value!r}")
    if d < 0:
        raise ValidationError(f"Vesting: negative amount {value!r}")
    scaled = d * WEI
    if scaled != scaled.to_integral_value():
        raise ValidationError(f"Vesting: more than 18 decimals in {value!r}")
    return int(scaled)


def from_wei(amount: int) -> Decimal:
    """Express a canonical amount as a Decimal in whole units."""
    return Decimal(amount) / Decimal(WEI)
