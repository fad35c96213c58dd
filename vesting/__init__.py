"""
vesting - Token Vesting System

Time-based, pro-rata release of a fixed token allocation to many
beneficiaries under one shared schedule (cliff, intervals, gaps).

Usage:
    from vesting import Vesting, VestingSchedule, ReleaseMethod, ether, SECONDS_IN_DAY

    schedule = VestingSchedule(
        cliff_duration_days=30,
        percent_release_for_each_interval=ether("10"),
        interval_days=30,
        number_of_intervals=10,
        release_method=ReleaseMethod.LINEARLY_PER_SECOND,
    )
    vesting = Vesting(token, token_decimals=18, governance_account="gov",
                      schedule=schedule, initial_time=1_700_000_000)

    # Fund first: token.transfer("treasury", vesting.address, amount)
    vesting.add_vesting_grant("gov", "alice", ether("1000"), is_revocable=True)
    vesting.set_schedule_start_timestamp("gov", vesting.current_time + 3600)

    vesting.advance_time(vesting.current_time + 90 * SECONDS_IN_DAY)
    vesting.release("alice")
"""

# Core types
from .core import (
    VestingView,
    Token,
    VestingGrant,
    GrantStateChange,
    SettingChange,
    TokenTransfer,
    PendingTransaction,
    Transaction,
    TransactionOrigin,
    build_transaction,
    VestingGrantAdded,
    VestingGrantRevoked,
    TokensReleased,
    ScheduleStartTimestampSet,
    Paused,
    Unpaused,
    VestingEvent,
    VestingError,
    AuthorizationError,
    ValidationError,
    StateError,
    ConservationError,
    TokenTransferError,
    ZERO_ADDRESS,
    WEI_DECIMALS,
    PERCENT_100,
    BATCH_MAX_NUM,
    SECONDS_IN_DAY,
    mul_div,
)

# Scaling
from .scaling import (
    scale_wei_to_decimals,
    scale_decimals_to_wei,
    quantize_to_decimals,
    ether,
    from_wei,
)

# Schedule
from .schedule import (
    ReleaseMethod,
    VestingSchedule,
    vested_percent,
    completed_intervals,
    cliff_end_timestamp,
    interval_end_timestamp,
    schedule_end_timestamp,
    load_schedule_from_env,
)

# Pure operations
from .calculator import (
    compute_vested_amount,
    compute_unvested_amount,
    compute_releasable_amount,
)
from .grants import (
    compute_add_vesting_grant,
    compute_add_vesting_grants_batch,
    compute_revoke_vesting_grant,
    compute_revoke_vesting_grants_batch,
)
from .release import (
    compute_release,
    compute_transfer_unused_tokens,
)
from .admin import (
    compute_set_schedule_start_timestamp,
    compute_pause,
    compute_unpause,
    compute_set_governance_account,
    compute_set_vesting_admin,
)

# Stateful instance
from .vesting import Vesting

# Reporting
from .projection import (
    vested_fraction_curve,
    release_timeline,
    cumulative_vested_amounts,
    release_increments,
    days_to_seconds,
)

__all__ = [
    # Core
    'VestingView', 'Token', 'VestingGrant', 'GrantStateChange', 'SettingChange',
    'TokenTransfer', 'PendingTransaction', 'Transaction', 'TransactionOrigin',
    'build_transaction', 'mul_div',
    # Events
    'VestingGrantAdded', 'VestingGrantRevoked', 'TokensReleased',
    'ScheduleStartTimestampSet', 'Paused', 'Unpaused', 'VestingEvent',
    # Exceptions
    'VestingError', 'AuthorizationError', 'ValidationError', 'StateError',
    'ConservationError', 'TokenTransferError',
    # Constants
    'ZERO_ADDRESS', 'WEI_DECIMALS', 'PERCENT_100', 'BATCH_MAX_NUM', 'SECONDS_IN_DAY',
    # Scaling
    'scale_wei_to_decimals', 'scale_decimals_to_wei', 'quantize_to_decimals',
    'ether', 'from_wei',
    # Schedule
    'ReleaseMethod', 'VestingSchedule', 'vested_percent', 'completed_intervals',
    'cliff_end_timestamp', 'interval_end_timestamp', 'schedule_end_timestamp',
    'load_schedule_from_env',
    # Operations
    'compute_vested_amount', 'compute_unvested_amount', 'compute_releasable_amount',
    'compute_add_vesting_grant', 'compute_add_vesting_grants_batch',
    'compute_revoke_vesting_grant', 'compute_revoke_vesting_grants_batch',
    'compute_release', 'compute_transfer_unused_tokens',
    'compute_set_schedule_start_timestamp', 'compute_pause', 'compute_unpause',
    'compute_set_governance_account', 'compute_set_vesting_admin',
    # Vesting
    'Vesting',
    # Projection
    'vested_fraction_curve', 'release_timeline', 'cumulative_vested_amounts',
    'release_increments', 'days_to_seconds',
]

__version__ = '1.0.0'
