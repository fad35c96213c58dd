"""
calculator.py - Vested, unvested and releasable amounts

Pure read-side math over a VestingView:

    vested     = vested_percent(now) * grant_amount / 100%
    unvested   = grant_amount - vested
    releasable = quantize(vested - released_amount, token_decimals)

A revoked grant is frozen: vested == released_amount and unvested == 0
for every later time.

releasable is truncated to what the token can represent, then expressed
again in canonical units, so dust below token precision never becomes
releasable.
"""

from __future__ import annotations

from .admin import require_nonzero_account, require_schedule_started
from .core import (
    PERCENT_100, Address, VestingGrant, VestingView, WeiAmount,
    StateError, mul_div,
)
from .scaling import quantize_to_decimals
from .schedule import vested_percent


def get_active_grant(view: VestingView, account: Address) -> VestingGrant:
    """
    Return the grant for ``account``.

    Raises:
        ValidationError: account is the zero address
        StateError: no grant was ever added for account
    """
    require_nonzero_account(account)
    grant = view.get_grant(account)
    if not grant.is_active:
        raise StateError("Vesting: inactive")
    return grant


def vested_amount_of(view: VestingView, grant: VestingGrant) -> WeiAmount:
    if grant.is_revoked:
        return grant.released_amount
    percent = vested_percent(view.schedule, view.schedule_start_timestamp, view.current_time)
    return mul_div(percent, grant.grant_amount, PERCENT_100)


def compute_vested_amount(view: VestingView, account: Address) -> WeiAmount:
    """Canonical amount vested for ``account`` at the view's current time."""
    return vested_amount_of(view, get_active_grant(view, account))


def compute_unvested_amount(view: VestingView, account: Address) -> WeiAmount:
    """Canonical amount not yet vested. Always 0 once revoked."""
    grant = get_active_grant(view, account)
    if grant.is_revoked:
        return 0
    return grant.grant_amount - vested_amount_of(view, grant)


def compute_releasable_amount(view: VestingView, account: Address) -> WeiAmount:
    """
    Canonical amount ``account`` could release now.

    Raises:
        ValidationError: zero account
        StateError: start unset, not started, inactive grant, revoked grant
    """
    require_nonzero_account(account)
    require_schedule_started(view)
    grant = get_active_grant(view, account)
    if grant.is_revoked:
        raise StateError("Vesting: revoked")
    unreleased = vested_amount_of(view, grant) - grant.released_amount
    return quantize_to_decimals(unreleased, view.token_decimals)
