"""
conftest.py - Shared pytest fixtures for vesting tests

Provides common fixtures used across unit, conformance and functional tests:
- Tokens (18 and 6 decimals)
- Vesting instances (unfunded, funded, funded with grants, started)
- Standard schedules
"""

import pytest

from vesting import (
    PERCENT_100, ReleaseMethod, VestingSchedule, ether,
)

from tests.fake_token import ADMIN, FakeToken, deploy_vesting, start_schedule


# =============================================================================
# SCHEDULES
# =============================================================================

@pytest.fixture
def default_schedule():
    """30-day cliff, then 10 linear 30-day intervals of 10% each."""
    return VestingSchedule()


@pytest.fixture
def immediate_schedule():
    """Everything vests at schedule start."""
    return VestingSchedule(
        cliff_duration_days=0,
        percent_release_at_schedule_start=PERCENT_100,
        percent_release_for_each_interval=0,
        interval_days=0,
        gap_days=0,
        number_of_intervals=0,
        release_method=ReleaseMethod.INTERVAL_END,
    )


@pytest.fixture
def stepped_schedule():
    """10% at cliff end, then 3 steps of 20% every 15 days (10-day interval, 5-day gap)."""
    return VestingSchedule(
        cliff_duration_days=10,
        percent_release_at_schedule_start=ether("10"),
        percent_release_for_each_interval=ether("20"),
        interval_days=10,
        gap_days=5,
        number_of_intervals=3,
        release_method=ReleaseMethod.INTERVAL_END,
    )


# =============================================================================
# TOKENS AND INSTANCES
# =============================================================================

@pytest.fixture
def token():
    return FakeToken()


@pytest.fixture
def vesting():
    """Unfunded vesting instance with the default schedule."""
    v, _ = deploy_vesting()
    return v


@pytest.fixture
def funded():
    """Default-schedule vesting holding 1,000,000 tokens (18 decimals). Returns (vesting, token)."""
    return deploy_vesting(funding=ether("1000000"))


@pytest.fixture
def funded_6dp():
    """Default-schedule vesting holding 2,000 tokens of a 6-decimal token."""
    return deploy_vesting(decimals=6, funding=2_000 * 10 ** 6)


@pytest.fixture
def granted(funded):
    """
    Funded vesting with three grants, not yet started:
    alice 1000 (revocable), bob 500 (revocable), carol 250 (irrevocable).
    """
    v, token = funded
    v.add_vesting_grants_batch(
        ADMIN,
        ["alice", "bob", "carol"],
        [ether("1000"), ether("500"), ether("250")],
        [True, True, False],
    )
    return v, token


@pytest.fixture
def started(granted):
    """Granted vesting whose schedule started. Returns (vesting, token, start)."""
    v, token = granted
    start = start_schedule(v)
    v.advance_time(start)
    return v, token, start
