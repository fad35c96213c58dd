"""
admin.py - Access control, pause control and schedule-start timekeeping

Guards are plain functions called at the top of each compute_* function:

    require_governance(view, sender)
    require_vesting_admin(view, sender)
    require_not_paused(view) / require_paused(view)
    require_schedule_started(view) / require_schedule_not_started(view)

Admin operations:
1. compute_set_schedule_start_timestamp() - set or move the start before it passes
2. compute_pause() / compute_unpause() - gate release()
3. compute_set_governance_account() / compute_set_vesting_admin() - rotate roles

All functions take a VestingView (read-only) and return a PendingTransaction.
"""

from __future__ import annotations

from .core import (
    ZERO_ADDRESS, Address, Timestamp, VestingView,
    AuthorizationError, StateError, ValidationError,
    PendingTransaction, SettingChange, TransactionOrigin,
    Paused, ScheduleStartTimestampSet, Unpaused,
    build_transaction,
)


# ============================================================================
# GUARDS
# ============================================================================

def require_governance(view: VestingView, sender: Address) -> None:
    if sender != view.governance_account:
        raise AuthorizationError("Vesting: sender unauthorized")


def require_vesting_admin(view: VestingView, sender: Address) -> None:
    if sender != view.vesting_admin:
        raise AuthorizationError("Vesting: sender unauthorized")


def require_not_paused(view: VestingView) -> None:
    if view.paused:
        raise StateError("Pausable: paused")


def require_paused(view: VestingView) -> None:
    if not view.paused:
        raise StateError("Pausable: not paused")


def require_nonzero_account(account: Address) -> None:
    if not account or account == ZERO_ADDRESS:
        raise ValidationError("Vesting: zero account")


def schedule_started(view: VestingView) -> bool:
    """True once a start time is set and has been reached."""
    start = view.schedule_start_timestamp
    return start != 0 and view.current_time >= start


def require_schedule_started(view: VestingView) -> None:
    if view.schedule_start_timestamp == 0:
        raise StateError("Vesting: undefined start time")
    if view.current_time < view.schedule_start_timestamp:
        raise StateError("Vesting: not started")


def require_schedule_not_started(view: VestingView) -> None:
    if schedule_started(view):
        raise StateError("Vesting: already started")


# ============================================================================
# ADMIN OPERATIONS
# ============================================================================

def compute_set_schedule_start_timestamp(
    view: VestingView,
    sender: Address,
    timestamp: Timestamp,
) -> PendingTransaction:
    """
    Set the schedule start. Repeatable until the start is reached.

    Args:
        view: Read-only vesting access
        sender: Must be the vesting admin
        timestamp: New start, strictly after the current time

    Raises:
        AuthorizationError: Sender is not the vesting admin
        StateError: The current start has already been reached
        ValidationError: timestamp is zero or not in the future
    """
    require_vesting_admin(view, sender)
    require_schedule_not_started(view)
    if timestamp <= 0 or timestamp <= view.current_time:
        raise ValidationError("Vesting: start before current timestamp")

    old_value = view.schedule_start_timestamp
    return build_transaction(
        view,
        TransactionOrigin(sender, "set_schedule_start_timestamp"),
        setting_changes=[SettingChange('schedule_start_timestamp', old_value, timestamp)],
        events=[ScheduleStartTimestampSet(account=sender, new_value=timestamp, old_value=old_value)],
    )


def compute_pause(view: VestingView, sender: Address) -> PendingTransaction:
    require_vesting_admin(view, sender)
    require_not_paused(view)
    return build_transaction(
        view,
        TransactionOrigin(sender, "pause"),
        setting_changes=[SettingChange('paused', False, True)],
        events=[Paused(account=sender)],
    )


def compute_unpause(view: VestingView, sender: Address) -> PendingTransaction:
    require_vesting_admin(view, sender)
    require_paused(view)
    return build_transaction(
        view,
        TransactionOrigin(sender, "unpause"),
        setting_changes=[SettingChange('paused', True, False)],
        events=[Unpaused(account=sender)],
    )


def compute_set_governance_account(
    view: VestingView,
    sender: Address,
    account: Address,
) -> PendingTransaction:
    """Hand governance to ``account``. Governance-only."""
    require_governance(view, sender)
    require_nonzero_account(account)
    return build_transaction(
        view,
        TransactionOrigin(sender, "set_governance_account"),
        setting_changes=[SettingChange('governance_account', view.governance_account, account)],
    )


def compute_set_vesting_admin(
    view: VestingView,
    sender: Address,
    account: Address,
) -> PendingTransaction:
    """Appoint ``account`` as vesting admin. Governance-only."""
    require_governance(view, sender)
    require_nonzero_account(account)
    return build_transaction(
        view,
        TransactionOrigin(sender, "set_vesting_admin"),
        setting_changes=[SettingChange('vesting_admin', view.vesting_admin, account)],
    )
