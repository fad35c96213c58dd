"""
release.py - Paying out vested tokens and sweeping unused ones

1. compute_release() - pay a beneficiary everything releasable now
2. compute_transfer_unused_tokens() - return unallocated tokens to governance

Accounting is updated in the same transaction as the transfer and is applied
before the transfer is made, so a re-entrant call sees released amounts that
already include this payout.
"""

from __future__ import annotations

from .admin import require_governance, require_not_paused
from .calculator import compute_releasable_amount, get_active_grant
from .core import (
    Address, VestingGrant, VestingView,
    ConservationError,
    GrantStateChange, PendingTransaction, SettingChange, TokenTransfer,
    TokensReleased, TransactionOrigin,
    build_transaction,
)
from .scaling import scale_wei_to_decimals


def compute_release(view: VestingView, sender: Address) -> PendingTransaction:
    """
    Release everything currently releasable to ``sender``.

    Args:
        view: Read-only vesting access
        sender: The beneficiary; tokens are paid to this account

    Returns:
        PendingTransaction that raises the grant's released_amount and
        total_released_amount by the quantized canonical amount, transfers the
        token-decimal amount and emits TokensReleased with that amount.

    Raises:
        StateError: Paused, start unset, not started, inactive or revoked grant
        ConservationError: Nothing releasable after quantization
    """
    require_not_paused(view)
    releasable = compute_releasable_amount(view, sender)
    if releasable == 0:
        raise ConservationError("Vesting: zero amount")

    grant = get_active_grant(view, sender)
    token_amount = scale_wei_to_decimals(releasable, view.token_decimals)
    updated = VestingGrant(
        grant_amount=grant.grant_amount,
        is_revocable=grant.is_revocable,
        is_revoked=grant.is_revoked,
        is_active=grant.is_active,
        released_amount=grant.released_amount + releasable,
    )
    total_released = view.total_released_amount
    return build_transaction(
        view,
        TransactionOrigin(sender, "release"),
        grant_changes=[GrantStateChange(sender, grant, updated)],
        setting_changes=[
            SettingChange('total_released_amount', total_released, total_released + releasable),
        ],
        transfers=[TokenTransfer(recipient=sender, amount=token_amount)],
        events=[TokensReleased(account=sender, amount=token_amount)],
    )


def unused_token_amount(view: VestingView) -> int:
    """
    Token-decimal balance not needed to cover outstanding grants.

    Outstanding is total_grant_amount - total_released_amount, truncated to
    token decimals.
    """
    outstanding = view.total_grant_amount - view.total_released_amount
    return view.token_balance() - scale_wei_to_decimals(outstanding, view.token_decimals)


def compute_transfer_unused_tokens(view: VestingView, sender: Address) -> PendingTransaction:
    """
    Send every unallocated token to governance.

    Raises:
        AuthorizationError: Sender is not governance
        ConservationError: Nothing unused to transfer
    """
    require_governance(view, sender)
    unused = unused_token_amount(view)
    if unused <= 0:
        raise ConservationError("Vesting: nothing to transfer")
    return build_transaction(
        view,
        TransactionOrigin(sender, "transfer_unused_tokens"),
        transfers=[TokenTransfer(recipient=view.governance_account, amount=unused)],
    )
