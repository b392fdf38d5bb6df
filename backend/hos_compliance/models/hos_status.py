"""
HOS Status type for HOS compliance.

HosStatus holds the hours a driver has accumulated as of a point in time.
It is derived from the duty log on every call and never patched in place.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from .rest_break import RestPeriod, SplitSleeperPairing

ZERO_HOURS = Decimal("0")


@dataclass(frozen=True)
class CycleDay:
    """
    On-duty totals for one calendar day of the rolling cycle.

    remaining_hours is the cycle limit minus the running total through
    this day, floored at zero.
    """

    date: date
    total_hours: Decimal
    driving_hours: Decimal
    on_duty_hours: Decimal
    remaining_hours: Decimal


@dataclass(frozen=True)
class HosStatus:
    """
    Accumulated HOS hours for a driver.

    Attributes:
        current_cycle_hours: Driving + on-duty hours in the trailing cycle
        driving_hours_today: Driving since the most recent qualifying reset
        on_duty_hours_today: Driving + on-duty since that reset
        hours_since_last_break: Driving + on-duty since the last 30-minute break
        hours_in_current_window: Elapsed time in the current 14-hour window
        last_rest_period: Rest run immediately preceding the current window
        cycle_hours_last_8_days: Per-day totals, oldest day first
        as_of: Instant the status was computed for
        reset_boundary: Start of the current duty period
        window_start: First on-duty instant after the reset, if any
        last_break_end: End of the most recent qualifying break, if any
        split_pairing: Sleeper berth pairing that produced the reset, if any
    """

    current_cycle_hours: Decimal = ZERO_HOURS
    driving_hours_today: Decimal = ZERO_HOURS
    on_duty_hours_today: Decimal = ZERO_HOURS
    hours_since_last_break: Decimal = ZERO_HOURS
    hours_in_current_window: Decimal = ZERO_HOURS
    last_rest_period: Optional[RestPeriod] = None
    cycle_hours_last_8_days: Tuple[CycleDay, ...] = field(default_factory=tuple)
    as_of: Optional[datetime] = None
    reset_boundary: Optional[datetime] = None
    window_start: Optional[datetime] = None
    last_break_end: Optional[datetime] = None
    split_pairing: Optional[SplitSleeperPairing] = None
