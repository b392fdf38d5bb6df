"""
Cycle Tracker Service.

Rolling 70-hour/8-day accounting. The cycle is a window of calendar days
ending on the day of the as-of instant, recomputed every time rather than
bucketed by week. Calendar days are taken in the driver's home terminal
time zone.

Single Responsibility: multi-day cycle accounting only.
"""

import logging
from datetime import datetime, time, timedelta, timezone as dt_timezone, tzinfo
from typing import Iterator, Optional, Tuple

from common.validators import hours_from_timedelta, timedelta_from_hours
from ..models import CycleDay, HosLimits

logger = logging.getLogger(__name__)


class CycleTrackerService:
    """
    Service for calculating on-duty hours over the rolling cycle.

    Args:
        home_timezone: Time zone used to split the timeline into calendar days
    """

    def __init__(self, home_timezone: Optional[tzinfo] = None):
        """Initialize cycle tracker."""
        self.home_timezone = home_timezone or dt_timezone.utc
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def day_start(self, day) -> datetime:
        return datetime.combine(day, time.min, tzinfo=self.home_timezone)

    def local_date(self, t: datetime):
        return t.astimezone(self.home_timezone).date()

    def cycle_start(self, t: datetime, limits: HosLimits) -> datetime:
        """Midnight opening the rolling cycle that contains t."""
        first_day = self.local_date(t) - timedelta(days=limits.cycle_days - 1)
        return self.day_start(first_day)

    def restart_end(self, timeline, limits: HosLimits, t: datetime) -> Optional[datetime]:
        """End of the latest 34-hour restart completed by t, if restarts apply."""
        if not limits.apply_cycle_restart:
            return None
        restart = limits.cycle_restart_delta
        for run in reversed(timeline.rest_runs):
            if run.end_time <= t and run.duration >= restart:
                return run.end_time
        return None

    def cycle_used(self, timeline, limits: HosLimits, t: datetime) -> timedelta:
        """On-duty time counted against the cycle at instant t."""
        start = self.cycle_start(t, limits)
        restart = self.restart_end(timeline, limits, t)
        if restart is not None and restart > start:
            start = restart
        return timeline.on_duty_between(start, t)

    def cycle_days(self, timeline, limits: HosLimits, as_of: datetime) -> Tuple[CycleDay, ...]:
        """
        Per-day on-duty totals for the rolling cycle ending at as_of.

        Args:
            timeline: DutyTimeline clipped to as_of
            limits: HOS limits (cycle_limit, cycle_days)
            as_of: End of the cycle window

        Returns:
            Tuple of CycleDay, oldest day first
        """
        last_day = self.local_date(as_of)
        restart = self.restart_end(timeline, limits, as_of)
        cycle_limit = timedelta_from_hours(limits.cycle_limit)
        running_total = timedelta(0)
        days = []

        for offset in range(limits.cycle_days - 1, -1, -1):
            day = last_day - timedelta(days=offset)
            start = self.day_start(day)
            end = min(self.day_start(day + timedelta(days=1)), as_of)
            if restart is not None and restart > start:
                start = min(restart, end)

            driving = timeline.driving_between(start, end)
            on_duty = timeline.on_duty_between(start, end)
            running_total += on_duty

            days.append(
                CycleDay(
                    date=day,
                    total_hours=hours_from_timedelta(on_duty),
                    driving_hours=hours_from_timedelta(driving),
                    on_duty_hours=hours_from_timedelta(on_duty - driving),
                    remaining_hours=hours_from_timedelta(
                        max(cycle_limit - running_total, timedelta(0))
                    ),
                )
            )

        return tuple(days)

    def day_pieces(self, start: datetime, end: datetime) -> Iterator[Tuple[datetime, datetime]]:
        """Split [start, end) at local midnights."""
        piece_start = start
        while piece_start < end:
            next_midnight = self.day_start(self.local_date(piece_start) + timedelta(days=1))
            piece_end = min(next_midnight, end)
            yield piece_start, piece_end
            piece_start = piece_end
