"""
schedule.py - Vesting schedule parameters and phase math

A schedule is shared by every grant of a vesting instance and never changes
after construction. Relative to the schedule start it has five phases:

    start ──── cliff ────┬ interval 0 ┬ gap ┬ interval 1 ┬ gap ┬ ... ┬ end
                        cliff_end                                  100%

- Before start, or while the start is unset (0): nothing is vested.
- During the cliff: nothing is vested.
- From cliff end: percent_release_at_schedule_start, plus one
  percent_release_for_each_interval per completed interval. An interval k
  completes at cliff_end + k * (interval + gap) + interval.
- LINEARLY_PER_SECOND additionally accrues the current interval's percent
  pro rata while inside it. INTERVAL_END accrues only when it completes.
  The percent stays flat through each gap.
- Once the last interval completes (or at cliff end when there are none):
  100%.

Percentages are 18-decimal fixed point, so PERCENT_100 == 100 * 10**18.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional
import os

from .core import PERCENT_100, SECONDS_IN_DAY, Timestamp, ValidationError
from .scaling import ether


class ReleaseMethod(Enum):
    """
    Shape of the vesting curve inside an interval.

    INTERVAL_END: the interval's percent vests as a step when it ends.
    LINEARLY_PER_SECOND: the interval's percent vests continuously.
    """
    INTERVAL_END = 0
    LINEARLY_PER_SECOND = 1


@dataclass(frozen=True, slots=True)
class VestingSchedule:
    """
    Immutable vesting curve parameters, validated once at construction.

    Attributes:
        cliff_duration_days: Delay between schedule start and the first interval.
        percent_release_at_schedule_start: Percent vested at cliff end (fixed18).
        percent_release_for_each_interval: Percent vested per interval (fixed18).
        interval_days: Length of each interval.
        gap_days: Flat period after each interval.
        number_of_intervals: Number of intervals.
        release_method: Curve shape inside an interval.
        allow_accumulate: Accepted and reported, no effect on vesting math.
    """
    cliff_duration_days: int = 30
    percent_release_at_schedule_start: int = 0
    percent_release_for_each_interval: int = 10 * 10 ** 18
    interval_days: int = 30
    gap_days: int = 0
    number_of_intervals: int = 10
    release_method: ReleaseMethod = ReleaseMethod.LINEARLY_PER_SECOND
    allow_accumulate: bool = False

    def __post_init__(self):
        for name in (
            'cliff_duration_days', 'percent_release_at_schedule_start',
            'percent_release_for_each_interval', 'interval_days', 'gap_days',
            'number_of_intervals',
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"Vesting: {name} must be an int, got {type(value).__name__}")
            if value < 0:
                raise ValidationError(f"Vesting: negative {name}")
        if not isinstance(self.release_method, ReleaseMethod):
            raise ValidationError(f"Vesting: invalid release method {self.release_method!r}")

        if self.percent_release_at_schedule_start > PERCENT_100:
            raise ValidationError("Vesting: percent release at grant start > 100%")
        if self.percent_release_for_each_interval > PERCENT_100:
            raise ValidationError("Vesting: percent release for each interval > 100%")
        total = (
            self.percent_release_at_schedule_start
            + self.percent_release_for_each_interval * self.number_of_intervals
        )
        if total > PERCENT_100:
            raise ValidationError("Vesting: total percent release > 100%")
        if self.number_of_intervals > 0 and self.interval_days == 0 and self.gap_days == 0:
            raise ValidationError("Vesting: zero interval and gap")

    @property
    def interval_seconds(self) -> int:
        return self.interval_days * SECONDS_IN_DAY

    @property
    def block_seconds(self) -> int:
        """Length of one interval plus its trailing gap."""
        return (self.interval_days + self.gap_days) * SECONDS_IN_DAY


# ============================================================================
# PHASE MATH
# ============================================================================

def cliff_end_timestamp(schedule: VestingSchedule, start: Timestamp) -> Timestamp:
    return start + schedule.cliff_duration_days * SECONDS_IN_DAY


def interval_end_timestamp(schedule: VestingSchedule, start: Timestamp, k: int) -> Timestamp:
    """Return when interval ``k`` (0-based) completes."""
    return cliff_end_timestamp(schedule, start) + k * schedule.block_seconds + schedule.interval_seconds


def schedule_end_timestamp(schedule: VestingSchedule, start: Timestamp) -> Timestamp:
    """Return the first timestamp at which everything is vested."""
    if schedule.number_of_intervals == 0:
        return cliff_end_timestamp(schedule, start)
    return interval_end_timestamp(schedule, start, schedule.number_of_intervals - 1)


def completed_intervals(schedule: VestingSchedule, start: Timestamp, now: Timestamp) -> int:
    """Count intervals whose end is at or before ``now``."""
    elapsed = now - cliff_end_timestamp(schedule, start)
    interval = schedule.interval_seconds
    if elapsed < interval or schedule.number_of_intervals == 0:
        return 0
    return min(
        schedule.number_of_intervals,
        (elapsed - interval) // schedule.block_seconds + 1,
    )


def vested_percent(schedule: VestingSchedule, start: Timestamp, now: Timestamp) -> int:
    """
    Return the fixed18 percent vested at ``now`` for a schedule starting at ``start``.

    Args:
        schedule: Schedule parameters
        start: Schedule start timestamp (0 = unset)
        now: Time to evaluate

    Returns:
        Percent in [0, PERCENT_100], non-decreasing in ``now``
    """
    if start == 0 or now < start:
        return 0
    cliff_end = cliff_end_timestamp(schedule, start)
    if now < cliff_end:
        return 0
    if now >= schedule_end_timestamp(schedule, start):
        return PERCENT_100

    completed = completed_intervals(schedule, start, now)
    percent = (
        schedule.percent_release_at_schedule_start
        + completed * schedule.percent_release_for_each_interval
    )

    if schedule.release_method == ReleaseMethod.LINEARLY_PER_SECOND:
        # Inside interval `completed`, before its end.
        into = now - (cliff_end + completed * schedule.block_seconds)
        if 0 <= into < schedule.interval_seconds:
            percent += schedule.percent_release_for_each_interval * into // schedule.interval_seconds

    return percent


# ============================================================================
# CONFIGURATION
# ============================================================================

ENV_PREFIX = "VESTING_"

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


def _env_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(ENV_PREFIX + key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ValidationError(f"Vesting: {ENV_PREFIX + key} must be an integer, got {raw!r}")


def _env_percent(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(ENV_PREFIX + key)
    if raw is None or raw.strip() == "":
        return default
    return ether(raw)


def load_schedule_from_env(environ: Optional[Mapping[str, str]] = None) -> VestingSchedule:
    """
    Build a VestingSchedule from VESTING_* environment variables.

    Percent variables are decimal strings ("12.5" means 12.5%). Missing or
    empty variables fall back to the VestingSchedule defaults.

    Recognized variables:
        VESTING_CLIFF_DURATION_DAYS
        VESTING_PERCENT_RELEASE_AT_SCHEDULE_START
        VESTING_PERCENT_RELEASE_FOR_EACH_INTERVAL
        VESTING_INTERVAL_DAYS
        VESTING_GAP_DAYS
        VESTING_NUMBER_OF_INTERVALS
        VESTING_RELEASE_METHOD       0 = interval end, 1 = linearly per second
        VESTING_ALLOW_ACCUMULATE     "true" / "false"

    Raises:
        ValidationError: If a variable is malformed or the schedule is invalid
    """
    if environ is None:
        environ = os.environ
    defaults = VestingSchedule()

    method_value = _env_int(environ, "RELEASE_METHOD", defaults.release_method.value)
    try:
        release_method = ReleaseMethod(method_value)
    except ValueError:
        raise ValidationError(f"Vesting: invalid release method {method_value!r}")

    raw_accumulate = environ.get(ENV_PREFIX + "ALLOW_ACCUMULATE")
    if raw_accumulate is None or raw_accumulate.strip() == "":
        allow_accumulate = defaults.allow_accumulate
    elif raw_accumulate.strip().lower() in _TRUE_VALUES:
        allow_accumulate = True
    elif raw_accumulate.strip().lower() in _FALSE_VALUES:
        allow_accumulate = False
    else:
        raise ValidationError(
            f"Vesting: {ENV_PREFIX}ALLOW_ACCUMULATE must be true or false, got {raw_accumulate!r}"
        )

    return VestingSchedule(
        cliff_duration_days=_env_int(environ, "CLIFF_DURATION_DAYS", defaults.cliff_duration_days),
        percent_release_at_schedule_start=_env_percent(
            environ, "PERCENT_RELEASE_AT_SCHEDULE_START", defaults.percent_release_at_schedule_start
        ),
        percent_release_for_each_interval=_env_percent(
            environ, "PERCENT_RELEASE_FOR_EACH_INTERVAL", defaults.percent_release_for_each_interval
        ),
        interval_days=_env_int(environ, "INTERVAL_DAYS", defaults.interval_days),
        gap_days=_env_int(environ, "GAP_DAYS", defaults.gap_days),
        number_of_intervals=_env_int(environ, "NUMBER_OF_INTERVALS", defaults.number_of_intervals),
        release_method=release_method,
        allow_accumulate=allow_accumulate,
    )
