"""
test_vesting_instance.py - Unit tests for the stateful Vesting class

Tests:
- Construction and configuration checks
- Time management
- execute(): stale pendings, empty pendings, sequencing, rollback
- Query surface
- clone() independence
- verbose output
"""

import pytest

from vesting import (
    ZERO_ADDRESS,
    StateError, TokenTransferError, ValidationError, VestingGrant, VestingSchedule, Vesting,
    TransactionOrigin, build_transaction, compute_add_vesting_grant,
    compute_release, ether,
)
from tests.fake_token import (
    ADMIN, GOVERNANCE, HOUR, T0, TOKEN_ADDRESS, FakeToken, deploy_vesting, start_schedule,
)


class TestVestingCreation:
    """Tests for Vesting initialization."""

    def test_create_minimal(self, token):
        v = Vesting(token, 18, governance_account=GOVERNANCE, verbose=False)
        assert v.token_address == TOKEN_ADDRESS
        assert v.token_decimals == 18
        assert v.get_vesting_schedule() == VestingSchedule()
        assert v.current_time == 0
        assert v.schedule_start_timestamp == 0
        assert v.total_grant_amount == 0
        assert v.total_released_amount == 0
        assert v.paused is False

    def test_zero_token_address(self):
        with pytest.raises(ValidationError, match="zero token address"):
            Vesting(FakeToken(address=ZERO_ADDRESS), 18, GOVERNANCE, verbose=False)

    def test_token_decimals_above_18(self, token):
        with pytest.raises(ValidationError, match="token decimals exceed 18"):
            Vesting(token, 19, GOVERNANCE, verbose=False)

    @pytest.mark.parametrize("decimals", [6.0, True, "6"])
    def test_non_int_token_decimals(self, token, decimals):
        with pytest.raises(ValidationError, match="token decimals must be an int"):
            Vesting(token, decimals, GOVERNANCE, verbose=False)

    def test_zero_governance(self, token):
        with pytest.raises(ValidationError, match="zero account"):
            Vesting(token, 18, ZERO_ADDRESS, verbose=False)

    def test_allow_accumulate_is_reported(self, token):
        schedule = VestingSchedule(allow_accumulate=True)
        v = Vesting(token, 18, GOVERNANCE, schedule=schedule, verbose=False)
        assert v.allow_accumulate() is True


class TestTime:
    """Tests for advance_time."""

    def test_advance(self, vesting):
        vesting.advance_time(T0 + 10)
        assert vesting.current_time == T0 + 10

    def test_backwards_raises(self, vesting):
        with pytest.raises(ValueError, match="backwards"):
            vesting.advance_time(T0 - 1)


class TestExecute:
    """Tests for Vesting.execute."""

    def test_sequence_and_log(self, funded):
        v, _ = funded
        tx1 = v.add_vesting_grant(ADMIN, "alice", ether("1"), True)
        tx2 = v.add_vesting_grant(ADMIN, "bob", ether("1"), True)
        assert (tx1.sequence_number, tx2.sequence_number) == (0, 1)
        assert tx1.exec_id == f"exec:test:{0:012d}:{T0}"
        assert v.transaction_log == [tx1, tx2]
        assert tx1.origin == TransactionOrigin(ADMIN, "add_vesting_grant")

    def test_empty_pending_is_noop(self, vesting):
        pending = build_transaction(vesting, TransactionOrigin(ADMIN, "noop"))
        assert pending.is_empty()
        assert vesting.execute(pending) is None
        assert vesting.transaction_log == []

    def test_stale_timestamp_rejected(self, started):
        v, _, start = started
        v.advance_time(start + 45 * 86400)
        pending = compute_release(v, "alice")
        v.advance_time(start + 46 * 86400)
        with pytest.raises(StateError, match="stale transaction"):
            v.execute(pending)
        assert v.released_amount_for("alice") == 0

    def test_stale_grant_rejected(self, funded):
        v, _ = funded
        first = compute_add_vesting_grant(v, ADMIN, "alice", ether("1"), True)
        second = compute_add_vesting_grant(v, ADMIN, "alice", ether("2"), True)
        v.execute(first)
        with pytest.raises(StateError, match="stale grant for alice"):
            v.execute(second)
        assert v.vesting_grant_for("alice").grant_amount == ether("1")
        assert v.total_grant_amount == ether("1")

    def test_stale_setting_rolls_back_grant_changes(self, funded):
        v, _ = funded
        first = compute_add_vesting_grant(v, ADMIN, "alice", ether("1"), True)
        second = compute_add_vesting_grant(v, ADMIN, "bob", ether("2"), True)
        v.execute(first)
        with pytest.raises(StateError, match="stale total_grant_amount"):
            v.execute(second)
        assert v.vesting_grant_for("bob") == VestingGrant()
        assert v.verify_conservation()['valid']


class TestQueries:
    """Tests for the read-only query surface."""

    def test_zero_account_queries(self, granted):
        v, _ = granted
        for query in (v.vesting_grant_for, v.revoked, v.released_amount_for,
                      v.releasable_amount_for, v.vested_amount_for, v.unvested_amount_for):
            with pytest.raises(ValidationError, match="zero account"):
                query(ZERO_ADDRESS)

    def test_unknown_account_grant_is_inactive(self, granted):
        v, _ = granted
        assert v.vesting_grant_for("nobody").is_active is False
        assert v.revoked("nobody") is False
        assert v.released_amount_for("nobody") == 0

    def test_scaling_helpers(self, vesting):
        assert vesting.scale_wei_to_decimals(ether("1.5"), 6) == 1_500_000
        assert vesting.scale_decimals_to_wei(1_500_000, 6) == ether("1.5")
        with pytest.raises(ValidationError, match="decimals exceed 18"):
            vesting.scale_wei_to_decimals(1, 19)

    def test_outstanding(self, started):
        v, _, start = started
        v.advance_time(start + 45 * 86400)
        v.release("alice")
        assert v.outstanding_grant_amount() == ether("1700")
        assert v.total_grant_amount == ether("1750")
        assert v.outstanding_grant_amount() == v.total_grant_amount - v.total_released_amount

    def test_list_beneficiaries(self, granted):
        v, _ = granted
        assert v.list_beneficiaries() == ["alice", "bob", "carol"]

    def test_verify_conservation_report(self, granted):
        v, _ = granted
        report = v.verify_conservation()
        assert report['valid'] is True
        assert report['outstanding'] == ether("1750")
        assert report['expected_outstanding'] == ether("1750")
        assert report['discrepancies'] == []


class TestClone:
    """Tests for clone()."""

    def test_clone_is_independent(self, granted):
        v, _ = granted
        cloned = v.clone()
        cloned.revoke_vesting_grant(ADMIN, "alice")
        assert cloned.revoked("alice")
        assert not v.revoked("alice")
        assert len(cloned.transaction_log) == len(v.transaction_log) + 1
        assert v.total_grant_amount == ether("1750")

    def test_clone_copies_clock(self, granted):
        v, _ = granted
        v.advance_time(T0 + 5)
        cloned = v.clone()
        cloned.advance_time(T0 + 100)
        assert v.current_time == T0 + 5


class TestVerbose:
    """Tests for verbose printing."""

    def test_applied_transaction_printed(self, capsys):
        token = FakeToken()
        token.mint("vesting", ether("10"))
        v = Vesting(token, 18, GOVERNANCE, vesting_admin=ADMIN, initial_time=T0, verbose=True)
        v.add_vesting_grant(ADMIN, "alice", ether("1"), True)
        out = capsys.readouterr().out
        assert "Vesting vesting" in out
        assert "APPLIED" in out
        assert "Grant Changes (1)" in out
        assert "VestingGrantAdded" in out

    def test_guard_failure_not_printed(self, capsys):
        v, _ = deploy_vesting()
        start = start_schedule(v, HOUR)
        v.advance_time(start)
        v.verbose = True
        with pytest.raises(StateError):
            v.set_schedule_start_timestamp(ADMIN, start + HOUR)
        assert "REJECTED" not in capsys.readouterr().out

    def test_stale_rejection_printed(self, capsys, funded):
        v, _ = funded
        pending = compute_add_vesting_grant(v, ADMIN, "alice", ether("1"), True)
        v.advance_time(T0 + 1)
        v.verbose = True
        with pytest.raises(StateError):
            v.execute(pending)
        assert "REJECTED" in capsys.readouterr().out

    def test_transfer_rejection_printed(self, capsys, started):
        v, token, start = started
        v.advance_time(start + 45 * 86400)
        v.verbose = True
        token.refuse_transfers = True
        with pytest.raises(TokenTransferError):
            v.release("alice")
        assert "REJECTED" in capsys.readouterr().out

    def test_transaction_repr(self, funded):
        v, _ = funded
        tx = v.add_vesting_grant(ADMIN, "alice", ether("1"), True)
        text = repr(tx)
        assert "Transaction: exec:test:" in text
        assert "grant_amount: 0 → 1000000000000000000" in text
        assert "total_grant_amount: 0 → 1000000000000000000" in text
