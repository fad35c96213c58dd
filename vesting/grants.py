"""
grants.py - Grant creation and revocation

This module provides the grant lifecycle mutations:
1. compute_add_vesting_grant() - create one grant before the schedule starts
2. compute_add_vesting_grants_batch() - create up to BATCH_MAX_NUM grants atomically
3. compute_revoke_vesting_grant() - freeze one revocable grant
4. compute_revoke_vesting_grants_batch() - freeze up to BATCH_MAX_NUM grants atomically

Adding a grant raises total_grant_amount by its amount and must stay within
the token balance held (in canonical units). Revoking lowers
total_grant_amount by the unreleased remainder, freeing that capacity for
transfer_unused_tokens(). A grant is never deleted: a revoked beneficiary
stays active and cannot be added again.

Batches are planned entry by entry against staged state, so a duplicate
inside one batch is caught like a duplicate against stored state. Any
failing entry fails the whole batch before anything is produced. One event
is emitted per entry, in input order.

All functions take a VestingView (read-only) and return a PendingTransaction.
"""

from __future__ import annotations
from typing import Dict, List, Sequence, Tuple

from .admin import (
    require_nonzero_account, require_schedule_not_started, require_vesting_admin,
)
from .core import (
    BATCH_MAX_NUM, MAX_UINT256, PERCENT_100,
    Address, VestingGrant, VestingView, WeiAmount,
    ConservationError, StateError, ValidationError,
    GrantStateChange, PendingTransaction, SettingChange, TransactionOrigin,
    VestingGrantAdded, VestingGrantRevoked,
    build_transaction,
)
from .scaling import scale_decimals_to_wei


# Largest grant whose vested-amount product stays within 256 bits.
MAX_GRANT_AMOUNT = MAX_UINT256 // PERCENT_100


def _check_batch_size(size: int) -> None:
    if size == 0:
        raise ValidationError("Vesting: empty")
    if size > BATCH_MAX_NUM:
        raise ValidationError("Vesting: exceed max")


# ============================================================================
# ADD
# ============================================================================

def _plan_additions(
    view: VestingView,
    entries: Sequence[Tuple[Address, WeiAmount, bool]],
) -> Tuple[List[GrantStateChange], List[VestingGrantAdded], WeiAmount]:
    """Validate every entry against stored and staged state. Return changes, events, new total."""
    balance = scale_decimals_to_wei(view.token_balance(), view.token_decimals)
    total = view.total_grant_amount
    staged: Dict[Address, VestingGrant] = {}
    changes: List[GrantStateChange] = []
    events: List[VestingGrantAdded] = []

    for beneficiary, grant_amount, is_revocable in entries:
        require_nonzero_account(beneficiary)
        if isinstance(grant_amount, bool) or not isinstance(grant_amount, int):
            raise ValidationError("Vesting: grant amount must be an int")
        if grant_amount <= 0:
            raise ValidationError("Vesting: zero grant amount")
        if grant_amount > MAX_GRANT_AMOUNT:
            raise ValidationError("Vesting: grant amount overflow")

        existing = staged.get(beneficiary) or view.get_grant(beneficiary)
        if existing.is_active:
            raise StateError("Vesting: already added")

        if balance == 0:
            raise ConservationError("Vesting: zero balance")
        if total + grant_amount > balance:
            raise ConservationError("Vesting: total grant amount exceed balance")

        new_grant = VestingGrant(
            grant_amount=grant_amount,
            is_revocable=bool(is_revocable),
            is_revoked=False,
            is_active=True,
            released_amount=0,
        )
        staged[beneficiary] = new_grant
        total += grant_amount
        changes.append(GrantStateChange(beneficiary, existing, new_grant))
        events.append(VestingGrantAdded(beneficiary, grant_amount, bool(is_revocable)))

    return changes, events, total


def compute_add_vesting_grant(
    view: VestingView,
    sender: Address,
    beneficiary: Address,
    grant_amount: WeiAmount,
    is_revocable: bool,
) -> PendingTransaction:
    """
    Create a grant for ``beneficiary``.

    Args:
        view: Read-only vesting access
        sender: Must be the vesting admin
        beneficiary: Grant owner
        grant_amount: Entitlement in canonical units
        is_revocable: Whether the grant may later be revoked

    Returns:
        PendingTransaction creating the grant and raising total_grant_amount

    Raises:
        AuthorizationError: Sender is not the vesting admin
        StateError: Schedule already started, or beneficiary already added
        ValidationError: Zero account, non-int or zero amount
        ConservationError: No balance held, or total would exceed it
    """
    require_vesting_admin(view, sender)
    require_schedule_not_started(view)
    changes, events, total = _plan_additions(view, [(beneficiary, grant_amount, is_revocable)])
    return build_transaction(
        view,
        TransactionOrigin(sender, "add_vesting_grant"),
        grant_changes=changes,
        setting_changes=[SettingChange('total_grant_amount', view.total_grant_amount, total)],
        events=events,
    )


def compute_add_vesting_grants_batch(
    view: VestingView,
    sender: Address,
    beneficiaries: Sequence[Address],
    grant_amounts: Sequence[WeiAmount],
    is_revocables: Sequence[bool],
) -> PendingTransaction:
    """
    Create one grant per entry, all or nothing.

    Raises:
        ValidationError: Empty batch, more than BATCH_MAX_NUM entries, or
            parallel sequences of different lengths; plus any per-entry error
            of compute_add_vesting_grant()
    """
    require_vesting_admin(view, sender)
    require_schedule_not_started(view)
    _check_batch_size(len(beneficiaries))
    if len(grant_amounts) != len(beneficiaries):
        raise ValidationError("Vesting: grant amounts length different")
    if len(is_revocables) != len(beneficiaries):
        raise ValidationError("Vesting: is revocables length different")

    changes, events, total = _plan_additions(
        view, list(zip(beneficiaries, grant_amounts, is_revocables))
    )
    return build_transaction(
        view,
        TransactionOrigin(sender, "add_vesting_grants_batch"),
        grant_changes=changes,
        setting_changes=[SettingChange('total_grant_amount', view.total_grant_amount, total)],
        events=events,
    )


# ============================================================================
# REVOKE
# ============================================================================

def _plan_revocations(
    view: VestingView,
    beneficiaries: Sequence[Address],
) -> Tuple[List[GrantStateChange], List[VestingGrantRevoked], WeiAmount]:
    total = view.total_grant_amount
    staged: Dict[Address, VestingGrant] = {}
    changes: List[GrantStateChange] = []
    events: List[VestingGrantRevoked] = []

    for beneficiary in beneficiaries:
        require_nonzero_account(beneficiary)
        grant = staged.get(beneficiary) or view.get_grant(beneficiary)
        if not grant.is_active:
            raise StateError("Vesting: inactive")
        if not grant.is_revocable:
            raise StateError("Vesting: not revocable")
        if grant.is_revoked:
            raise StateError("Vesting: already revoked")

        remainder = grant.grant_amount - grant.released_amount
        revoked = VestingGrant(
            grant_amount=grant.grant_amount,
            is_revocable=grant.is_revocable,
            is_revoked=True,
            is_active=grant.is_active,
            released_amount=grant.released_amount,
        )
        staged[beneficiary] = revoked
        total -= remainder
        changes.append(GrantStateChange(beneficiary, grant, revoked))
        events.append(VestingGrantRevoked(
            account=beneficiary,
            remainder_amount=remainder,
            grant_amount=grant.grant_amount,
            released_amount=grant.released_amount,
        ))

    return changes, events, total


def compute_revoke_vesting_grant(
    view: VestingView,
    sender: Address,
    beneficiary: Address,
) -> PendingTransaction:
    """
    Revoke a grant, before or after the schedule starts.

    The unreleased remainder leaves total_grant_amount. What was already
    released stays released, and the grant vests no further.

    Raises:
        AuthorizationError: Sender is not the vesting admin
        ValidationError: Zero account
        StateError: Inactive, not revocable, or already revoked
    """
    require_vesting_admin(view, sender)
    changes, events, total = _plan_revocations(view, [beneficiary])
    return build_transaction(
        view,
        TransactionOrigin(sender, "revoke_vesting_grant"),
        grant_changes=changes,
        setting_changes=[SettingChange('total_grant_amount', view.total_grant_amount, total)],
        events=events,
    )


def compute_revoke_vesting_grants_batch(
    view: VestingView,
    sender: Address,
    beneficiaries: Sequence[Address],
) -> PendingTransaction:
    """Revoke every listed grant, all or nothing."""
    require_vesting_admin(view, sender)
    _check_batch_size(len(beneficiaries))
    changes, events, total = _plan_revocations(view, beneficiaries)
    return build_transaction(
        view,
        TransactionOrigin(sender, "revoke_vesting_grants_batch"),
        grant_changes=changes,
        setting_changes=[SettingChange('total_grant_amount', view.total_grant_amount, total)],
        events=events,
    )
