"""
projection.py - Vectorized vesting curves for reporting

Evaluates a schedule over many timestamps at once with numpy, for charts and
issuer-side supply projections. Results are float64 fractions of the grant
(0.0 to 1.0), not fixed-point amounts. Accounting never uses this module.
vesting.schedule.vested_percent() is the exact reference.

Example:
    days, fraction = release_timeline(schedule, start, step_days=1)
    supply = cumulative_vested_amounts(schedule, start, grant_amounts, days_to_seconds(days, start))
"""

from __future__ import annotations
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .core import PERCENT_100, SECONDS_IN_DAY, Timestamp
from .schedule import (
    ReleaseMethod, VestingSchedule, cliff_end_timestamp, schedule_end_timestamp,
)


def vested_fraction_curve(
    schedule: VestingSchedule,
    start: Timestamp,
    timestamps: Iterable[int],
) -> np.ndarray:
    """
    Return the vested fraction at each timestamp.

    Args:
        schedule: Schedule parameters
        start: Schedule start (0 = unset, giving all zeros)
        timestamps: Unix seconds, any order

    Returns:
        float64 array, same length as timestamps
    """
    if not isinstance(timestamps, np.ndarray):
        timestamps = list(timestamps)
    ts = np.asarray(timestamps, dtype=np.int64)
    if start == 0:
        return np.zeros(ts.shape, dtype=np.float64)

    cliff_end = cliff_end_timestamp(schedule, start)
    end = schedule_end_timestamp(schedule, start)
    n = schedule.number_of_intervals

    if n == 0:
        return (ts >= cliff_end).astype(np.float64)

    start_fraction = schedule.percent_release_at_schedule_start / PERCENT_100
    each_fraction = schedule.percent_release_for_each_interval / PERCENT_100
    interval = schedule.interval_seconds
    block = schedule.block_seconds

    elapsed = ts - cliff_end
    completed = np.where(
        elapsed >= interval,
        np.minimum(n, np.floor_divide(np.maximum(elapsed - interval, 0), block) + 1),
        0,
    )
    fraction = start_fraction + completed * each_fraction

    if schedule.release_method == ReleaseMethod.LINEARLY_PER_SECOND and interval > 0:
        into = elapsed - completed * block
        inside = (completed < n) & (into >= 0) & (into < interval)
        fraction = fraction + np.where(inside, each_fraction * into / interval, 0.0)

    fraction = np.where(ts < cliff_end, 0.0, fraction)
    fraction = np.where(ts >= end, 1.0, fraction)
    return fraction.astype(np.float64)


def release_timeline(
    schedule: VestingSchedule,
    start: Timestamp,
    step_days: int = 1,
    horizon_days: Optional[int] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample the curve every ``step_days`` from the schedule start.

    Args:
        schedule: Schedule parameters
        start: Schedule start (must be set)
        step_days: Sampling step in days
        horizon_days: Days to cover (default: until everything is vested)

    Returns:
        (days since start, vested fraction) as two arrays of equal length
    """
    if start <= 0:
        raise ValueError("start must be set to sample a timeline")
    if step_days <= 0:
        raise ValueError(f"step_days must be positive, got {step_days}")
    if horizon_days is None:
        total_seconds = schedule_end_timestamp(schedule, start) - start
        horizon_days = -(-total_seconds // SECONDS_IN_DAY)
    days = np.arange(0, horizon_days + 1, step_days, dtype=np.int64)
    return days, vested_fraction_curve(schedule, start, start + days * SECONDS_IN_DAY)


def days_to_seconds(days: np.ndarray, start: Timestamp) -> np.ndarray:
    return start + np.asarray(days, dtype=np.int64) * SECONDS_IN_DAY


def cumulative_vested_amounts(
    schedule: VestingSchedule,
    start: Timestamp,
    grant_amounts: Sequence[int],
    timestamps: Iterable[int],
) -> np.ndarray:
    """
    Project total vested supply across grants at each timestamp.

    All grants share the schedule, so the total is the curve scaled by the
    summed grant amount.
    """
    fraction = vested_fraction_curve(schedule, start, timestamps)
    return fraction * float(sum(grant_amounts))


def release_increments(cumulative: np.ndarray) -> np.ndarray:
    """Newly vested amount per step; the first entry is the initial value."""
    cumulative = np.asarray(cumulative, dtype=np.float64)
    if cumulative.size == 0:
        return cumulative
    return np.diff(cumulative, prepend=0.0)
