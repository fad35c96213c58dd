"""
vesting.py - Stateful Token Vesting Instance

The Vesting class is the central state manager for one vesting schedule.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Implements VestingView protocol for safe read-only access by pure functions
    - Executes transactions atomically (all changes and transfers succeed or none do)
    - Holds grant records and global totals, and checks conservation after every change
    - Tracks a logical clock that never moves backwards
    - Always logs - every applied transaction lands in transaction_log
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .admin import (
    compute_pause, compute_set_governance_account, compute_set_schedule_start_timestamp,
    compute_set_vesting_admin, compute_unpause, require_nonzero_account,
)
from .calculator import (
    compute_releasable_amount, compute_unvested_amount, compute_vested_amount,
)
from .core import (
    # Types
    Address, Timestamp, Token, VestingEvent, VestingGrant, WeiAmount,
    PendingTransaction, Transaction,
    # Constants
    EMPTY_GRANT, SETTING_NAMES, WEI_DECIMALS, ZERO_ADDRESS,
    # Exceptions
    ConservationError, StateError, TokenTransferError, ValidationError, VestingError,
)
from .grants import (
    compute_add_vesting_grant, compute_add_vesting_grants_batch,
    compute_revoke_vesting_grant, compute_revoke_vesting_grants_batch,
)
from .release import compute_release, compute_transfer_unused_tokens, unused_token_amount
from . import scaling
from .schedule import (
    VestingSchedule, cliff_end_timestamp, schedule_end_timestamp,
)


class Vesting:
    """
    One vesting schedule shared by many beneficiaries, paying out one token.

    Implements the VestingView protocol, allowing the instance to be passed to
    pure compute_* functions that access only read-only members.

    Design Principles:
        - Always validates: every pending transaction is checked against the
          current state it was computed from, and conservation is verified
          before any token leaves.
        - Always logs: every applied transaction is recorded in the audit trail.

    Thread Safety:
        Not thread-safe. Calls are expected to be serialized by the caller.

    Example:
        vesting = Vesting(token, token_decimals=18, governance_account="gov")
        vesting.add_vesting_grant("gov", "alice", ether("1000"), True)
        vesting.set_schedule_start_timestamp("gov", vesting.current_time + 3600)
        vesting.advance_time(vesting.current_time + 90 * SECONDS_IN_DAY)
        vesting.release("alice")
    """

    def __init__(
        self,
        token: Token,
        token_decimals: int,
        governance_account: Address,
        schedule: Optional[VestingSchedule] = None,
        vesting_admin: Optional[Address] = None,
        address: Address = "vesting",
        name: str = "vesting",
        initial_time: Timestamp = 0,
        verbose: bool = True,
    ):
        """
        Create a vesting instance.

        Args:
            token: Token paid out; its balance_of(address) funds the grants
            token_decimals: Token precision, 0 to 18
            governance_account: Account allowed to rotate roles and sweep unused tokens
            schedule: Schedule parameters (default: VestingSchedule())
            vesting_admin: Account allowed to manage grants (default: governance_account)
            address: Account under which this instance holds tokens
            name: Instance identifier used in execution ids
            initial_time: Starting logical time in Unix seconds
            verbose: Print each applied or rejected transaction (default: True)

        Raises:
            ValidationError: Zero token address, zero account, or decimals out of range
        """
        if not token.address or token.address == ZERO_ADDRESS:
            raise ValidationError("Vesting: zero token address")
        if isinstance(token_decimals, bool) or not isinstance(token_decimals, int):
            raise ValidationError("Vesting: token decimals must be an int")
        if token_decimals < 0:
            raise ValidationError("Vesting: negative decimals")
        if token_decimals > WEI_DECIMALS:
            raise ValidationError("Vesting: token decimals exceed 18")
        require_nonzero_account(governance_account)
        if vesting_admin is None:
            vesting_admin = governance_account
        require_nonzero_account(vesting_admin)

        self.name = name
        self._address = address
        self._token = token
        self._token_decimals = token_decimals
        self._schedule = schedule if schedule is not None else VestingSchedule()
        self._grants: Dict[Address, VestingGrant] = {}
        self._settings: Dict[str, Any] = {
            'schedule_start_timestamp': 0,
            'total_grant_amount': 0,
            'total_released_amount': 0,
            'paused': False,
            'governance_account': governance_account,
            'vesting_admin': vesting_admin,
        }
        self.transaction_log: List[Transaction] = []
        self.events: List[VestingEvent] = []
        self._current_time: Timestamp = initial_time
        self.verbose = verbose
        self._next_sequence: int = 0

        if self.verbose:
            print(f"📝 Vesting {self.name} at {self._address}: token {token.address} "
                  f"({token_decimals} decimals), governance={governance_account}, admin={vesting_admin}")

    # ========================================================================
    # VestingView PROTOCOL IMPLEMENTATION (read-only members)
    # ========================================================================

    @property
    def current_time(self) -> Timestamp:
        """Current logical time in Unix seconds."""
        return self._current_time

    @property
    def address(self) -> Address:
        return self._address

    @property
    def token(self) -> Token:
        return self._token

    @property
    def token_address(self) -> Address:
        return self._token.address

    @property
    def token_decimals(self) -> int:
        return self._token_decimals

    @property
    def schedule(self) -> VestingSchedule:
        return self._schedule

    @property
    def schedule_start_timestamp(self) -> Timestamp:
        return self._settings['schedule_start_timestamp']

    @property
    def total_grant_amount(self) -> WeiAmount:
        """
        Sum of added grants, less the remainders of revoked ones. Not lowered by releases.

        Conservation holds for total_grant_amount - total_released_amount
        (see outstanding_grant_amount()), not for this total alone.
        """
        return self._settings['total_grant_amount']

    @property
    def total_released_amount(self) -> WeiAmount:
        return self._settings['total_released_amount']

    @property
    def paused(self) -> bool:
        return self._settings['paused']

    @property
    def governance_account(self) -> Address:
        return self._settings['governance_account']

    @property
    def vesting_admin(self) -> Address:
        return self._settings['vesting_admin']

    def get_grant(self, account: Address) -> VestingGrant:
        return self._grants.get(account, EMPTY_GRANT)

    def token_balance(self) -> int:
        return self._token.balance_of(self._address)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def vesting_grant_for(self, account: Address) -> VestingGrant:
        """Return the grant record for ``account`` (inactive and all-zero if none)."""
        require_nonzero_account(account)
        return self.get_grant(account)

    def revoked(self, account: Address) -> bool:
        require_nonzero_account(account)
        return self.get_grant(account).is_revoked

    def released_amount_for(self, account: Address) -> WeiAmount:
        require_nonzero_account(account)
        return self.get_grant(account).released_amount

    def releasable_amount_for(self, account: Address) -> WeiAmount:
        return compute_releasable_amount(self, account)

    def vested_amount_for(self, account: Address) -> WeiAmount:
        return compute_vested_amount(self, account)

    def unvested_amount_for(self, account: Address) -> WeiAmount:
        return compute_unvested_amount(self, account)

    def get_vesting_schedule(self) -> VestingSchedule:
        return self._schedule

    def allow_accumulate(self) -> bool:
        return self._schedule.allow_accumulate

    def outstanding_grant_amount(self) -> WeiAmount:
        """Granted but not yet released, across all non-revoked grants."""
        return self.total_grant_amount - self.total_released_amount

    def unused_token_amount(self) -> int:
        """Token-decimal balance that transfer_unused_tokens() would sweep."""
        return unused_token_amount(self)

    def cliff_end_timestamp(self) -> Optional[Timestamp]:
        """Return the cliff end, or None while the start is unset."""
        if self.schedule_start_timestamp == 0:
            return None
        return cliff_end_timestamp(self._schedule, self.schedule_start_timestamp)

    def schedule_end_timestamp(self) -> Optional[Timestamp]:
        """Return when everything is vested, or None while the start is unset."""
        if self.schedule_start_timestamp == 0:
            return None
        return schedule_end_timestamp(self._schedule, self.schedule_start_timestamp)

    @staticmethod
    def scale_wei_to_decimals(amount: int, decimals: int) -> int:
        return scaling.scale_wei_to_decimals(amount, decimals)

    @staticmethod
    def scale_decimals_to_wei(amount: int, decimals: int) -> int:
        return scaling.scale_decimals_to_wei(amount, decimals)

    def list_beneficiaries(self) -> List[Address]:
        """All accounts that ever received a grant, in insertion order."""
        return list(self._grants.keys())

    def verify_conservation(self) -> Dict[str, Any]:
        """
        Verify the accounting invariants over all grants.

        Checks:
        - total_released_amount equals the sum of released amounts
        - total_grant_amount - total_released_amount equals the sum of
          grant_amount - released_amount over non-revoked grants

        Returns:
            Dict with keys:
            - 'valid': bool - True if all invariants hold
            - 'total_grant_amount', 'total_released_amount': stored totals
            - 'outstanding': stored total_grant_amount - total_released_amount
            - 'expected_outstanding': recomputed from grant records
            - 'discrepancies': List[Dict] with check, expected, actual

        Example:
            result = vesting.verify_conservation()
            assert result['valid'], f"Conservation violated: {result['discrepancies']}"
        """
        released_sum = 0
        expected_outstanding = 0
        for grant in self._grants.values():
            released_sum += grant.released_amount
            if grant.is_active and not grant.is_revoked:
                expected_outstanding += grant.grant_amount - grant.released_amount

        outstanding = self.total_grant_amount - self.total_released_amount
        discrepancies = []
        if released_sum != self.total_released_amount:
            discrepancies.append({
                'check': 'total_released_amount',
                'expected': released_sum,
                'actual': self.total_released_amount,
            })
        if expected_outstanding != outstanding:
            discrepancies.append({
                'check': 'outstanding',
                'expected': expected_outstanding,
                'actual': outstanding,
            })

        return {
            'valid': len(discrepancies) == 0,
            'total_grant_amount': self.total_grant_amount,
            'total_released_amount': self.total_released_amount,
            'outstanding': outstanding,
            'expected_outstanding': expected_outstanding,
            'discrepancies': discrepancies,
        }

    # ========================================================================
    # TIME MANAGEMENT
    # ========================================================================

    def advance_time(self, new_time: Timestamp) -> None:
        """
        Advance the logical clock. Time can only move forward.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    # ========================================================================
    # TRANSACTION EXECUTION (Mutating)
    # ========================================================================

    def _generate_exec_id(self, sequence: int) -> str:
        """Format: exec:{name}:{sequence:012d}:{timestamp}"""
        return f"exec:{self.name}:{sequence:012d}:{self._current_time}"

    def _snapshot(self) -> Tuple[Dict[Address, VestingGrant], Dict[str, Any]]:
        # Grants are frozen, so shallow copies are enough.
        return dict(self._grants), dict(self._settings)

    def _restore(self, snapshot: Tuple[Dict[Address, VestingGrant], Dict[str, Any]]) -> None:
        self._grants, self._settings = dict(snapshot[0]), dict(snapshot[1])

    def execute(self, pending: PendingTransaction) -> Optional[Transaction]:
        """
        Execute a PendingTransaction atomically.

        Steps:
        1. Reject if the pending was computed at a different time
        2. Apply grant and setting changes, each checked against its old value
        3. Verify conservation
        4. Perform token transfers (state is already updated)
        5. Log the transaction and its events

        Any failure restores the state from before step 2 and re-raises.

        Args:
            pending: PendingTransaction to execute

        Returns:
            The Transaction record, or None if pending was empty

        Raises:
            StateError: Stale pending transaction
            ConservationError: Accounting invariant would break
            TokenTransferError: Token refused a transfer
        """
        if pending.is_empty():
            return None

        if pending.timestamp != self._current_time:
            if self.verbose:
                print(f"✗ REJECTED: computed at {pending.timestamp}, now {self._current_time}")
            raise StateError("Vesting: stale transaction")

        snapshot = self._snapshot()
        try:
            for gc in pending.grant_changes:
                current = self._grants.get(gc.account, EMPTY_GRANT)
                if current != gc.old_grant:
                    raise StateError(f"Vesting: stale grant for {gc.account}")
                self._grants[gc.account] = gc.new_grant

            for sc in pending.setting_changes:
                if sc.name not in SETTING_NAMES:
                    raise StateError(f"Vesting: unknown setting {sc.name}")
                if self._settings[sc.name] != sc.old_value:
                    raise StateError(f"Vesting: stale {sc.name}")
                self._settings[sc.name] = sc.new_value

            check = self.verify_conservation()
            if not check['valid']:
                raise ConservationError("Vesting: conservation violated")

            for transfer in pending.transfers:
                try:
                    ok = self._token.transfer(self._address, transfer.recipient, transfer.amount)
                except Exception as exc:
                    raise TokenTransferError("Vesting: token transfer failed") from exc
                if not ok:
                    raise TokenTransferError("Vesting: token transfer failed")
        except VestingError as e:
            self._restore(snapshot)
            if self.verbose:
                print(f"✗ REJECTED: {pending.origin!r}: {e.reason}")
            raise

        sequence = self._next_sequence
        self._next_sequence += 1
        tx = Transaction(
            grant_changes=pending.grant_changes,
            setting_changes=pending.setting_changes,
            transfers=pending.transfers,
            events=pending.events,
            origin=pending.origin,
            timestamp=pending.timestamp,
            exec_id=self._generate_exec_id(sequence),
            vesting_name=self.name,
            sequence_number=sequence,
        )
        self.transaction_log.append(tx)
        self.events.extend(pending.events)

        if self.verbose:
            self._print_tx_result(tx, "APPLIED", "✓")
        return tx

    def _print_tx_result(self, tx: Transaction, result: str, icon: str) -> None:
        """Print the transaction box with a result line in place of its closing bar."""
        lines = repr(tx).split('\n')
        w = 100
        bar = "─" * w
        text = f" {icon} {result}"
        lines[-1] = f"├{bar}┤"
        lines.append(f"│{text[:w].ljust(w)}│")
        lines.append(f"└{bar}┘")
        print("\n".join(lines))

    # ========================================================================
    # MUTATORS
    # ========================================================================

    def set_governance_account(self, sender: Address, account: Address) -> Transaction:
        return self.execute(compute_set_governance_account(self, sender, account))

    def set_vesting_admin(self, sender: Address, account: Address) -> Transaction:
        return self.execute(compute_set_vesting_admin(self, sender, account))

    def pause(self, sender: Address) -> Transaction:
        return self.execute(compute_pause(self, sender))

    def unpause(self, sender: Address) -> Transaction:
        return self.execute(compute_unpause(self, sender))

    def set_schedule_start_timestamp(self, sender: Address, timestamp: Timestamp) -> Transaction:
        return self.execute(compute_set_schedule_start_timestamp(self, sender, timestamp))

    def add_vesting_grant(
        self,
        sender: Address,
        beneficiary: Address,
        grant_amount: WeiAmount,
        is_revocable: bool,
    ) -> Transaction:
        return self.execute(
            compute_add_vesting_grant(self, sender, beneficiary, grant_amount, is_revocable)
        )

    def add_vesting_grants_batch(
        self,
        sender: Address,
        beneficiaries: Sequence[Address],
        grant_amounts: Sequence[WeiAmount],
        is_revocables: Sequence[bool],
    ) -> Transaction:
        return self.execute(compute_add_vesting_grants_batch(
            self, sender, beneficiaries, grant_amounts, is_revocables
        ))

    def revoke_vesting_grant(self, sender: Address, beneficiary: Address) -> Transaction:
        return self.execute(compute_revoke_vesting_grant(self, sender, beneficiary))

    def revoke_vesting_grants_batch(
        self,
        sender: Address,
        beneficiaries: Sequence[Address],
    ) -> Transaction:
        return self.execute(compute_revoke_vesting_grants_batch(self, sender, beneficiaries))

    def release(self, sender: Address) -> Transaction:
        """Release everything vested and unreleased to ``sender``."""
        return self.execute(compute_release(self, sender))

    def transfer_unused_tokens(self, sender: Address) -> Transaction:
        """Send tokens not backing any outstanding grant to governance."""
        return self.execute(compute_transfer_unused_tokens(self, sender))

    # ========================================================================
    # VESTING OPERATIONS
    # ========================================================================

    def clone(self) -> Vesting:
        """
        Create an independent copy of this instance's state.

        Grants, settings, the transaction log, events, the clock and the
        sequence counter are copied. The token is external and is shared,
        not copied.

        Returns:
            A new Vesting instance with identical state
        """
        cloned = Vesting.__new__(Vesting)
        cloned.name = self.name
        cloned._address = self._address
        cloned._token = self._token
        cloned._token_decimals = self._token_decimals
        cloned._schedule = self._schedule
        cloned._grants = dict(self._grants)
        cloned._settings = dict(self._settings)
        cloned.transaction_log = list(self.transaction_log)
        cloned.events = list(self.events)
        cloned._current_time = self._current_time
        cloned.verbose = self.verbose
        cloned._next_sequence = self._next_sequence
        return cloned
