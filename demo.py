#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Token Vesting Step by Step

A walkthrough of one vesting schedule from funding to the final sweep.
Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:  Setup       - The schedule, the vesting instance, funding
  4-5:  Grants      - Adding grants, what a rejection looks like
  6-8:  Vesting     - Starting the clock, the cliff, releasing
  9-10: Control     - Pausing, revoking
  11:   Wrap-up     - Sweeping unused tokens, conservation, projection

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple
import sys

from vesting import (
    SECONDS_IN_DAY,
    Vesting, VestingError, VestingSchedule, ReleaseMethod,
    ether, from_wei, release_timeline,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    start_time: int = 1_735_722_000          # 2025-01-01 09:00 UTC
    token_decimals: int = 6
    funding_tokens: int = 1_000_000

    alice_grant: str = "120000"
    bob_grant: str = "60000"
    carol_grant: str = "20000.1234567"


CONFIG = DemoConfig()
DAY = SECONDS_IN_DAY

QUICK_MODE = "--quick" in sys.argv

GOVERNANCE = "governance"
ADMIN = "vesting_admin"


class DemoToken:
    """In-memory token with a fixed supply held by the treasury."""

    def __init__(self, address: str, decimals: int, supply: int):
        self.address = address
        self.decimals = decimals
        self.balances: Dict[str, int] = {"treasury": supply}
        self.transfers: List[Tuple[str, str, int]] = []

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        if self.balance_of(sender) < amount:
            return False
        self.balances[sender] -= amount
        self.balances[recipient] = self.balance_of(recipient) + amount
        self.transfers.append((sender, recipient, amount))
        return True

    def fmt(self, amount: int) -> str:
        return f"{amount / 10 ** self.decimals:,.{self.decimals}f}"


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def show_beneficiaries(v: Vesting):
    print(f"{'account':<10}{'grant':>22}{'vested':>22}{'released':>22}  revoked")
    for account in v.list_beneficiaries():
        grant = v.get_grant(account)
        vested = v.vested_amount_for(account)
        print(f"{account:<10}{from_wei(grant.grant_amount):>22,}{from_wei(vested):>22,}"
              f"{from_wei(grant.released_amount):>22,}  {grant.is_revoked}")


# ============================================================================
# SETUP (Steps 1-3)
# ============================================================================

def step_01_schedule() -> VestingSchedule:
    step_header(1, "The Schedule",
        "A schedule turns elapsed time into a vested percentage.")

    print("""
    Every grant on one vesting instance shares a single schedule:

    - cliff:      nothing vests for the first N days
    - at start:   a lump percentage that vests when the cliff ends
    - intervals:  N windows, each vesting a fixed percentage
    - gaps:       frozen stretches between intervals
    - method:     step at interval end, or linear within the interval

    Percentages are 18-decimal fixed point: ether("10") means 10%.
    """)

    print('>>> schedule = VestingSchedule(cliff_duration_days=90, ...)')
    schedule = VestingSchedule(
        cliff_duration_days=90,
        percent_release_at_schedule_start=ether("10"),
        percent_release_for_each_interval=ether("7.5"),
        interval_days=30,
        gap_days=0,
        number_of_intervals=12,
        release_method=ReleaseMethod.LINEARLY_PER_SECOND,
    )
    print(schedule)
    return schedule


def step_02_deploy(schedule: VestingSchedule) -> Tuple[Vesting, DemoToken]:
    step_header(2, "Deploying",
        "A vesting instance holds the ledger; the token is an external collaborator.")

    token = DemoToken("0x00000000000000000000000000000000000ab0c1",
                      CONFIG.token_decimals,
                      CONFIG.funding_tokens * 10 ** CONFIG.token_decimals)
    print(">>> v = Vesting(token, token_decimals=6, governance_account=GOVERNANCE, ...)")
    v = Vesting(
        token,
        token_decimals=CONFIG.token_decimals,
        governance_account=GOVERNANCE,
        schedule=schedule,
        vesting_admin=ADMIN,
        address="vesting_contract",
        name="demo",
        initial_time=CONFIG.start_time,
        verbose=True,
    )
    return v, token


def step_03_fund(v: Vesting, token: DemoToken):
    step_header(3, "Funding",
        "Grants can only promise tokens the instance actually holds.")

    token.transfer("treasury", v.address, token.balances["treasury"])
    print(f"Vesting balance: {token.fmt(v.token_balance())} tokens")
    print(f"Unused:          {token.fmt(v.unused_token_amount())} tokens")


# ============================================================================
# GRANTS (Steps 4-5)
# ============================================================================

def step_04_add_grants(v: Vesting):
    step_header(4, "Adding Grants",
        "A batch creates every grant or none; one event per entry.")

    v.add_vesting_grants_batch(
        ADMIN,
        ["alice", "bob"],
        [ether(CONFIG.alice_grant), ether(CONFIG.bob_grant)],
        [True, True],
    )
    v.add_vesting_grant(ADMIN, "carol", ether(CONFIG.carol_grant), False)
    show_beneficiaries(v)


def step_05_rejections(v: Vesting):
    step_header(5, "Rejections",
        "Invalid operations raise and leave the state untouched.")

    attempts = [
        ("bob again", lambda: v.add_vesting_grant(ADMIN, "bob", ether("1"), True)),
        ("over balance", lambda: v.add_vesting_grant(ADMIN, "dave", ether("5000000"), True)),
        ("wrong sender", lambda: v.add_vesting_grant("mallory", "dave", ether("1"), True)),
    ]
    for label, attempt in attempts:
        try:
            attempt()
        except VestingError as e:
            print(f"  {label:<14} -> {type(e).__name__}: {e.reason}")
    print(f"\nTotal granted is still {from_wei(v.total_grant_amount):,}")


# ============================================================================
# VESTING (Steps 6-8)
# ============================================================================

def step_06_start(v: Vesting) -> int:
    step_header(6, "Starting the Clock",
        "The start can be moved until it is reached, then it is locked.")

    start = CONFIG.start_time + 7 * DAY
    v.set_schedule_start_timestamp(ADMIN, start)
    print(f"Cliff ends:    {v.cliff_end_timestamp()}")
    print(f"Schedule ends: {v.schedule_end_timestamp()}")
    return start


def step_07_cliff(v: Vesting, start: int):
    step_header(7, "The Cliff",
        "Before the cliff ends nothing is releasable.")

    v.advance_time(start + 60 * DAY)
    try:
        v.release("alice")
    except VestingError as e:
        print(f"Day 60 release -> {e.reason}")


def step_08_release(v: Vesting, token: DemoToken, start: int):
    step_header(8, "Releasing",
        "Releases pay out vested minus released, in the token's own decimals.")

    v.advance_time(start + 135 * DAY)
    for account in ("alice", "carol"):
        print(f"{account} releasable: {from_wei(v.releasable_amount_for(account)):,}")
        v.release(account)
    print(f"\nalice holds {token.fmt(token.balance_of('alice'))}, "
          f"carol holds {token.fmt(token.balance_of('carol'))}")
    show_beneficiaries(v)


# ============================================================================
# CONTROL (Steps 9-10)
# ============================================================================

def step_09_pause(v: Vesting):
    step_header(9, "Pausing",
        "A pause blocks releases only.")

    v.pause(ADMIN)
    try:
        v.release("bob")
    except VestingError as e:
        print(f"bob's release while paused -> {e.reason}")
    v.unpause(ADMIN)


def step_10_revoke(v: Vesting, start: int):
    step_header(10, "Revoking",
        "Revocation freezes a grant at what was already released.")

    v.advance_time(start + 200 * DAY)
    v.revoke_vesting_grant(ADMIN, "bob")
    print(f"bob vested now:   {from_wei(v.vested_amount_for('bob')):,}")
    print(f"bob unvested now: {from_wei(v.unvested_amount_for('bob')):,}")


# ============================================================================
# WRAP-UP (Step 11)
# ============================================================================

def step_11_wrap_up(v: Vesting, token: DemoToken, start: int):
    step_header(11, "Sweep, Conservation, Projection",
        "Governance recovers what no grant needs; the books still balance.")

    v.transfer_unused_tokens(GOVERNANCE)
    print(f"Governance received {token.fmt(token.balance_of(GOVERNANCE))} tokens")

    report = v.verify_conservation()
    section_header("Conservation")
    print(f"valid:       {report['valid']}")
    print(f"outstanding: {from_wei(report['outstanding']):,}")

    section_header("Vested fraction every 60 days")
    days, fraction = release_timeline(v.get_vesting_schedule(), start, step_days=60)
    for day, f in zip(days, fraction):
        print(f"  day {int(day):>4}: {f:6.1%}")


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       TOKEN VESTING - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")
    wait_for_enter()

    schedule = step_01_schedule()
    wait_for_enter()
    v, token = step_02_deploy(schedule)
    wait_for_enter()
    step_03_fund(v, token)
    wait_for_enter()

    step_04_add_grants(v)
    wait_for_enter()
    step_05_rejections(v)
    wait_for_enter()

    start = step_06_start(v)
    wait_for_enter()
    step_07_cliff(v, start)
    wait_for_enter()
    step_08_release(v, token, start)
    wait_for_enter()

    step_09_pause(v)
    wait_for_enter()
    step_10_revoke(v, start)
    wait_for_enter()

    step_11_wrap_up(v, token, start)
    print(f"\n{len(v.transaction_log)} transactions, {len(v.events)} events.")


if __name__ == "__main__":
    main()
