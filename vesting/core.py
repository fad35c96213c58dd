"""
Core types and pure helpers for the token vesting system.

This module provides the foundational data structures and protocols:
1. Protocols: VestingView for read-only access, Token for the external token
2. Immutable data structures: VestingGrant, GrantStateChange, SettingChange,
   TokenTransfer, events, PendingTransaction, Transaction
3. Exceptions: VestingError and the domain-specific error types
4. Constants: canonical precision, percent scale, batch bound

All amounts and percentages are plain ints in the canonical 18-decimal unit
("wei"). Timestamps are ints in Unix seconds.

All functions in this module are pure and operate on read-only views.
No function can mutate vesting state directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING, Any, Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable
)

if TYPE_CHECKING:
    from .schedule import VestingSchedule


# ============================================================================
# CONSTANTS
# ============================================================================

# The null account. Never a valid beneficiary, governor, admin or token.
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Canonical precision used for all internal accounting.
WEI_DECIMALS = 18
WEI = 10 ** WEI_DECIMALS

# 100% expressed as an 18-decimal fixed-point percentage.
PERCENT_100 = 100 * WEI

# Upper bound on entries per batch call.
BATCH_MAX_NUM = 100

SECONDS_IN_DAY = 86400

# Fixed-point products must stay within 256 bits.
MAX_UINT256 = 2 ** 256 - 1


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Account identifier (address string).
Address = str

# Canonical 18-decimal amount.
WeiAmount = int

# Unix timestamp in seconds.
Timestamp = int


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class Token(Protocol):
    """
    The fungible token a vesting instance pays out.

    Only balance lookup and transfer are consumed. Decimals are supplied to
    the vesting instance at construction and never queried. The caller of
    transfer() is passed explicitly as ``sender``.
    """

    @property
    def address(self) -> Address:
        ...

    def balance_of(self, account: Address) -> int:
        """Return the balance of ``account`` in token-native decimals."""
        ...

    def transfer(self, sender: Address, recipient: Address, amount: int) -> bool:
        """Move ``amount`` from ``sender`` to ``recipient``. Return False on failure."""
        ...


@runtime_checkable
class VestingView(Protocol):
    """
    Read-only interface to vesting state.

    The compute_* functions accept a VestingView to declare that they only
    read. The Vesting class implements this protocol but also provides
    mutation methods. For testing, FakeView provides a static implementation.
    """

    @property
    def current_time(self) -> Timestamp:
        """Return the current logical time in Unix seconds."""
        ...

    @property
    def address(self) -> Address:
        """Return the account that holds the vested tokens."""
        ...

    @property
    def token_decimals(self) -> int:
        ...

    @property
    def schedule(self) -> 'VestingSchedule':
        ...

    @property
    def schedule_start_timestamp(self) -> Timestamp:
        """Return the schedule start, or 0 while unset."""
        ...

    @property
    def total_grant_amount(self) -> WeiAmount:
        ...

    @property
    def total_released_amount(self) -> WeiAmount:
        ...

    @property
    def paused(self) -> bool:
        ...

    @property
    def governance_account(self) -> Address:
        ...

    @property
    def vesting_admin(self) -> Address:
        ...

    def get_grant(self, account: Address) -> 'VestingGrant':
        """
        Return the grant record for ``account``.

        Returns an inactive, all-zero VestingGrant if none was ever added.
        """
        ...

    def token_balance(self) -> int:
        """Return the token balance held by this instance, in token decimals."""
        ...


# ============================================================================
# EXCEPTIONS
# ============================================================================

class VestingError(Exception):
    """
    Base exception for all vesting errors.

    Every error carries a fixed reason string so callers can branch on it.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AuthorizationError(VestingError):
    """Raised when the caller is not allowed to perform a gated action."""
    pass


class ValidationError(VestingError, ValueError):
    """Raised for malformed arguments: zero address or amount, bad sizes, bad schedule."""
    pass


class StateError(VestingError):
    """Raised when an action is not valid in the current grant or schedule state."""
    pass


class ConservationError(VestingError):
    """Raised when an action would break the funding or accounting invariants."""
    pass


class TokenTransferError(VestingError):
    """Raised when the token collaborator refuses a transfer."""
    pass


# ============================================================================
# GRANT RECORD
# ============================================================================

@dataclass(frozen=True, slots=True)
class VestingGrant:
    """
    One beneficiary's grant.

    Attributes:
        grant_amount: Total entitlement in canonical units.
        is_revocable: Whether the admin may revoke. Fixed at creation.
        is_revoked: Set once by revocation, never cleared.
        is_active: True once added. Never reset, so a grant is never deleted.
        released_amount: Cumulative amount paid out, in canonical units.
    """
    grant_amount: WeiAmount = 0
    is_revocable: bool = False
    is_revoked: bool = False
    is_active: bool = False
    released_amount: WeiAmount = 0

    def __post_init__(self):
        if self.grant_amount < 0:
            raise ValueError(f"grant_amount must be non-negative, got {self.grant_amount}")
        if self.released_amount < 0:
            raise ValueError(f"released_amount must be non-negative, got {self.released_amount}")
        if self.released_amount > self.grant_amount:
            raise ValueError(
                f"released_amount {self.released_amount} exceeds grant_amount {self.grant_amount}"
            )

    def as_dict(self) -> Dict[str, Any]:
        return {
            'grant_amount': self.grant_amount,
            'is_revocable': self.is_revocable,
            'is_revoked': self.is_revoked,
            'is_active': self.is_active,
            'released_amount': self.released_amount,
        }


EMPTY_GRANT = VestingGrant()


# ============================================================================
# STATE CHANGES
# ============================================================================

@dataclass(frozen=True, slots=True)
class GrantStateChange:
    """
    Record of a grant change for transaction logging and rollback.

    Stores complete before/after records. The ledger refuses to apply the
    change if the current record no longer equals ``old_grant``.
    """
    account: Address
    old_grant: VestingGrant
    new_grant: VestingGrant

    def changed_fields(self) -> Dict[str, Tuple[Any, Any]]:
        """Map each field that differs to its (old_value, new_value)."""
        old = self.old_grant.as_dict()
        new = self.new_grant.as_dict()
        return {k: (old[k], new[k]) for k in old if old[k] != new[k]}


# Names of the global values a SettingChange may touch.
SETTING_NAMES = (
    'schedule_start_timestamp',
    'total_grant_amount',
    'total_released_amount',
    'paused',
    'governance_account',
    'vesting_admin',
)


@dataclass(frozen=True, slots=True)
class SettingChange:
    """Before/after record of one global value."""
    name: str
    old_value: Any
    new_value: Any

    def __post_init__(self):
        if self.name not in SETTING_NAMES:
            raise ValueError(f"Unknown setting: {self.name}")


@dataclass(frozen=True, slots=True)
class TokenTransfer:
    """An outbound token transfer, in token-native decimals."""
    recipient: Address
    amount: int

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"Transfer amount must be positive, got {self.amount}")

    def __repr__(self) -> str:
        return f"TokenTransfer({self.amount} → {self.recipient})"


# ============================================================================
# EVENTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class VestingGrantAdded:
    account: Address
    grant_amount: WeiAmount
    is_revocable: bool


@dataclass(frozen=True, slots=True)
class VestingGrantRevoked:
    account: Address
    remainder_amount: WeiAmount
    grant_amount: WeiAmount
    released_amount: WeiAmount


@dataclass(frozen=True, slots=True)
class TokensReleased:
    """Amount is in token-native decimals, as actually transferred."""
    account: Address
    amount: int


@dataclass(frozen=True, slots=True)
class ScheduleStartTimestampSet:
    account: Address
    new_value: Timestamp
    old_value: Timestamp


@dataclass(frozen=True, slots=True)
class Paused:
    account: Address


@dataclass(frozen=True, slots=True)
class Unpaused:
    account: Address


VestingEvent = Union[
    VestingGrantAdded, VestingGrantRevoked, TokensReleased,
    ScheduleStartTimestampSet, Paused, Unpaused,
]


# ============================================================================
# TRANSACTIONS
# ============================================================================

@dataclass(frozen=True, slots=True)
class TransactionOrigin:
    """Who asked for a transaction, and through which operation."""
    sender: Address
    operation: str

    def __repr__(self) -> str:
        return f"Origin({self.operation}:{self.sender})"


@dataclass(frozen=True, slots=True)
class PendingTransaction:
    """
    A transaction description before execution - represents INTENT.

    Created by compute_* functions and submitted to Vesting.execute().

    Attributes:
        grant_changes: Per-beneficiary record changes (old and new)
        setting_changes: Global value changes (old and new)
        transfers: Outbound token transfers, performed after state is updated
        events: Events to emit on success, in order
        origin: Who/what created this transaction
        timestamp: The view's time when this was computed
    """
    grant_changes: Tuple[GrantStateChange, ...]
    setting_changes: Tuple[SettingChange, ...]
    transfers: Tuple[TokenTransfer, ...]
    events: Tuple[VestingEvent, ...]
    origin: TransactionOrigin
    timestamp: Timestamp

    def is_empty(self) -> bool:
        """Return True if this pending transaction changes nothing and emits nothing."""
        return not (self.grant_changes or self.setting_changes or self.transfers or self.events)

    def __repr__(self) -> str:
        return (
            f"PendingTransaction({len(self.grant_changes)} grants, "
            f"{len(self.setting_changes)} settings, {len(self.transfers)} transfers, {self.origin})"
        )


def build_transaction(
    view: VestingView,
    origin: TransactionOrigin,
    grant_changes: Optional[List[GrantStateChange]] = None,
    setting_changes: Optional[List[SettingChange]] = None,
    transfers: Optional[List[TokenTransfer]] = None,
    events: Optional[List[VestingEvent]] = None,
) -> PendingTransaction:
    """
    Build a PendingTransaction stamped with the view's current time.

    This is the standard way for compute_* functions to return their result.
    """
    return PendingTransaction(
        grant_changes=tuple(grant_changes or ()),
        setting_changes=tuple(setting_changes or ()),
        transfers=tuple(transfers or ()),
        events=tuple(events or ()),
        origin=origin,
        timestamp=view.current_time,
    )


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    An executed, immutable record of vesting state changes - represents FACT.

    Created by Vesting.execute() from a PendingTransaction.
    """
    grant_changes: Tuple[GrantStateChange, ...]
    setting_changes: Tuple[SettingChange, ...]
    transfers: Tuple[TokenTransfer, ...]
    events: Tuple[VestingEvent, ...]
    origin: TransactionOrigin
    timestamp: Timestamp
    exec_id: str
    vesting_name: str
    sequence_number: int

    def __repr__(self) -> str:
        w = 100
        bar = "─" * w

        def pad(text: str) -> str:
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        lines = [
            "",
            f"┌{bar}┐",
            f"│{pad(' Transaction: ' + self.exec_id)}│",
            f"├{bar}┤",
            f"│{pad('   timestamp      : ' + str(self.timestamp))}│",
            f"│{pad('   vesting_name   : ' + self.vesting_name)}│",
            f"│{pad('   sequence       : ' + str(self.sequence_number))}│",
            f"│{pad('   origin         : ' + repr(self.origin))}│",
        ]
        if self.grant_changes:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' Grant Changes (' + str(len(self.grant_changes)) + '):')}│")
            for gc in self.grant_changes:
                lines.append(f"│{pad('   [' + gc.account + ']')}│")
                for field_name, (old_val, new_val) in gc.changed_fields().items():
                    lines.append(f"│{pad(f'      {field_name}: {old_val!r} → {new_val!r}')}│")
        if self.setting_changes:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' Setting Changes (' + str(len(self.setting_changes)) + '):')}│")
            for sc in self.setting_changes:
                lines.append(f"│{pad(f'   {sc.name}: {sc.old_value!r} → {sc.new_value!r}')}│")
        if self.transfers:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' Transfers (' + str(len(self.transfers)) + '):')}│")
            for i, t in enumerate(self.transfers):
                lines.append(f"│{pad(f'   [{i}] {t.amount} → {t.recipient}')}│")
        if self.events:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' Events (' + str(len(self.events)) + '):')}│")
            for event in self.events:
                lines.append(f"│{pad('   ' + repr(event))}│")
        lines.append(f"└{bar}┘")
        return "\n".join(lines)


# ============================================================================
# FIXED-POINT ARITHMETIC
# ============================================================================

def mul_div(a: int, b: int, denominator: int) -> int:
    """
    Compute floor(a * b / denominator) on non-negative ints.

    Raises:
        ValidationError: If the intermediate product exceeds 256 bits.
    """
    product = a * b
    if product > MAX_UINT256:
        raise ValidationError("Vesting: multiplication overflow")
    return product // denominator
