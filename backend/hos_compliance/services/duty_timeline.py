"""
Duty Timeline.

Read-only view of a validated duty log up to an as-of instant. Provides
the building blocks every HOS rule needs:
- Rest runs (merged contiguous off duty / sleeper berth time)
- Cumulative driving and on-duty time via prefix sums, so that the time
  between any two instants is an O(log n) lookup
- Duty periods: the qualifying resets (10-hour rest or split sleeper
  pairing) that start each new 11/14-hour period

Nothing here mutates the intervals it is given.
"""

import logging
from bisect import bisect_right
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from common.validators import hours_from_timedelta, timedelta_from_hours
from ..models import DutyInterval, DutyStatus, HosLimits, RestPeriod, SplitSleeperPairing

logger = logging.getLogger(__name__)

NO_TIME = timedelta(0)


@dataclass(frozen=True)
class RestRun:
    """Maximal contiguous run of off duty and sleeper berth intervals."""

    intervals: Tuple[DutyInterval, ...]

    @property
    def start_time(self) -> datetime:
        return self.intervals[0].start_time

    @property
    def end_time(self) -> datetime:
        return self.intervals[-1].end_time

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def is_all_sleeper(self):
        return all(i.status == DutyStatus.SLEEPER_BERTH for i in self.intervals)

    @property
    def longest_sleeper(self) -> timedelta:
        """Longest unbroken sleeper berth stretch inside the run."""
        longest = current = NO_TIME
        for interval in self.intervals:
            if interval.status == DutyStatus.SLEEPER_BERTH:
                current += interval.duration
                longest = max(longest, current)
            else:
                current = NO_TIME
        return longest

    @property
    def rest_type(self) -> str:
        if self.is_all_sleeper:
            return DutyStatus.SLEEPER_BERTH.value
        return DutyStatus.OFF_DUTY.value

    @property
    def location(self) -> str:
        return self.intervals[0].location

    def as_rest_period(self) -> RestPeriod:
        return RestPeriod(
            start_time=self.start_time,
            end_time=self.end_time,
            duration=hours_from_timedelta(self.duration),
            type=self.rest_type,
        )


@dataclass(frozen=True)
class ResetPoint:
    """
    A qualifying reset of the daily driving and window limits.

    Attributes:
        boundary: Start of the new duty period
        effective_at: When the reset was complete (end of the qualifying rest)
        run: Rest run that completed the reset
        pairing: Sleeper berth pairing, for split resets
        excluded: Rest inside the new period that does not count against the window
    """

    boundary: datetime
    effective_at: datetime
    run: RestRun
    pairing: Optional[SplitSleeperPairing] = None
    excluded: timedelta = NO_TIME

    @property
    def is_split(self):
        return self.pairing is not None


class DutyTimeline:
    """
    Duty intervals clipped to an as-of instant, with cumulative sums.

    Args:
        intervals: Validated, contiguous intervals in chronological order
        as_of: Instant the timeline ends; later time is ignored
    """

    def __init__(self, intervals: Sequence[DutyInterval], as_of: datetime):
        self.as_of = as_of
        segments = []
        for interval in intervals:
            if interval.start_time >= as_of:
                break
            clipped = interval.clipped(interval.start_time, as_of)
            if clipped is not None:
                segments.append(clipped)
        self.segments: Tuple[DutyInterval, ...] = tuple(segments)
        self.rest_runs: Tuple[RestRun, ...] = self._build_rest_runs()

        self._starts = [s.start_time for s in self.segments]
        self._driving_prefix = [NO_TIME]
        self._on_duty_prefix = [NO_TIME]
        for segment in self.segments:
            status = DutyStatus(segment.status)
            driving = segment.duration if status == DutyStatus.DRIVING else NO_TIME
            on_duty = segment.duration if status.is_on_duty else NO_TIME
            self._driving_prefix.append(self._driving_prefix[-1] + driving)
            self._on_duty_prefix.append(self._on_duty_prefix[-1] + on_duty)

    @property
    def is_empty(self):
        return not self.segments

    @property
    def start_time(self) -> Optional[datetime]:
        return self.segments[0].start_time if self.segments else None

    def _build_rest_runs(self) -> Tuple[RestRun, ...]:
        runs = []
        current: List[DutyInterval] = []
        for segment in self.segments:
            if segment.is_rest_record():
                current.append(segment)
            elif current:
                runs.append(RestRun(tuple(current)))
                current = []
        if current:
            runs.append(RestRun(tuple(current)))
        return tuple(runs)

    def _cumulative(self, prefix, t: datetime, counts) -> timedelta:
        index = bisect_right(self._starts, t) - 1
        if index < 0:
            return NO_TIME
        segment = self.segments[index]
        total = prefix[index]
        if counts(DutyStatus(segment.status)):
            total += min(t, segment.end_time) - segment.start_time
        return total

    def driving_until(self, t: datetime) -> timedelta:
        """Driving time from the start of the timeline to t."""
        return self._cumulative(
            self._driving_prefix, t, lambda s: s == DutyStatus.DRIVING
        )

    def on_duty_until(self, t: datetime) -> timedelta:
        """Driving plus on-duty time from the start of the timeline to t."""
        return self._cumulative(self._on_duty_prefix, t, lambda s: s.is_on_duty)

    def driving_between(self, start: datetime, end: datetime) -> timedelta:
        if end <= start:
            return NO_TIME
        return self.driving_until(end) - self.driving_until(start)

    def on_duty_between(self, start: datetime, end: datetime) -> timedelta:
        if end <= start:
            return NO_TIME
        return self.on_duty_until(end) - self.on_duty_until(start)

    def first_on_duty_at_or_after(self, t: datetime) -> Optional[datetime]:
        """First instant at or after t at which the driver is on duty."""
        index = max(bisect_right(self._starts, t) - 1, 0)
        for segment in self.segments[index:]:
            if DutyStatus(segment.status).is_on_duty and segment.end_time > t:
                return max(segment.start_time, t)
        return None

    def rest_run_ending_by(self, t: datetime) -> Optional[RestRun]:
        """Latest rest run that has ended at or before t."""
        for run in reversed(self.rest_runs):
            if run.end_time <= t:
                return run
        return None


class DutyPeriods:
    """
    Qualifying resets found in a timeline, in chronological order.

    A reset is either a rest run of at least off_duty_required hours
    (boundary at its end) or a split sleeper berth pairing (boundary at
    the end of the first period, with the second period excluded from the
    14-hour window).
    """

    def __init__(self, timeline: DutyTimeline, limits: HosLimits, split_service=None):
        self.timeline = timeline
        self.limits = limits
        self.split_service = split_service
        self.resets: List[ResetPoint] = []
        self._effective_times: List[datetime] = []
        self._break_ends: List[datetime] = [
            run.end_time
            for run in timeline.rest_runs
            if run.duration >= limits.break_duration_delta
        ]
        self._find_resets()

    def _add_reset(self, reset: ResetPoint):
        self.resets.append(reset)
        self._effective_times.append(reset.effective_at)

    def _find_resets(self):
        off_duty_required = self.limits.off_duty_required_delta
        candidates: List[RestRun] = []

        for run in self.timeline.rest_runs:
            if run.duration >= off_duty_required:
                self._add_reset(
                    ResetPoint(boundary=run.end_time, effective_at=run.end_time, run=run)
                )
            elif self.split_service is not None and self.split_service.is_candidate(run):
                pairing_run = self.split_service.find_pairing(run, candidates, self)
                if pairing_run is not None:
                    earlier, pairing = pairing_run
                    self._add_reset(
                        ResetPoint(
                            boundary=earlier.end_time,
                            effective_at=run.end_time,
                            run=run,
                            pairing=pairing,
                            excluded=run.duration,
                        )
                    )

            if self.split_service is not None and self.split_service.is_candidate(run):
                candidates.append(run)

        logger.debug(f"Found {len(self.resets)} qualifying resets")

    def reset_at(self, t: datetime) -> Optional[ResetPoint]:
        """Latest reset completed at or before t."""
        index = bisect_right(self._effective_times, t) - 1
        return self.resets[index] if index >= 0 else None

    def boundary_at(self, t: datetime) -> Optional[datetime]:
        """Start of the duty period in force at t (log start if no reset)."""
        reset = self.reset_at(t)
        return reset.boundary if reset else self.timeline.start_time

    @property
    def last_boundary(self) -> Optional[datetime]:
        return self.resets[-1].boundary if self.resets else self.timeline.start_time

    def last_break_end(self, t: datetime) -> Optional[datetime]:
        """End of the latest rest of at least break_duration ending by t."""
        index = bisect_right(self._break_ends, t) - 1
        return self._break_ends[index] if index >= 0 else None

    def pairing_enclosing(self, start: datetime, end: datetime) -> Optional[SplitSleeperPairing]:
        """Split pairing completed after start whose two periods enclose start..end."""
        index = bisect_right(self._effective_times, start)
        if index >= len(self.resets) or not self.resets[index].is_split:
            return None
        pairing = self.resets[index].pairing
        if pairing.first_period.end_time <= start and end <= pairing.second_period.start_time:
            return pairing
        return None

    def window_deadline(
        self,
        reset: Optional[ResetPoint],
        window_start: datetime,
        segment: Optional[DutyInterval] = None,
    ) -> datetime:
        """
        Instant the 14-hour window opened at window_start closes.

        Neither sleeper period of a split pairing counts against the window:
        the second period of the reset in force is excluded, and so is the
        first period of a pairing that encloses segment.
        """
        deadline = window_start + timedelta_from_hours(self.limits.window_limit)
        if reset is not None and reset.is_split:
            if reset.pairing.second_period.start_time >= window_start:
                deadline += reset.excluded
        if segment is not None:
            pairing = self.pairing_enclosing(segment.start_time, segment.end_time)
            if pairing is not None and pairing.first_period.start_time >= window_start:
                deadline += pairing.first_period.end_time - pairing.first_period.start_time
        return deadline

    def window_elapsed(self, reset: Optional[ResetPoint], window_start: datetime, t: datetime) -> timedelta:
        """Window time used at t, excluding split sleeper rest."""
        elapsed = t - window_start
        if reset is not None and reset.is_split:
            if reset.pairing.second_period.start_time >= window_start:
                elapsed -= reset.excluded
        return max(elapsed, NO_TIME)

    def latest_pairing(self, t: datetime, lookback: timedelta) -> Optional[SplitSleeperPairing]:
        """Most recent split pairing completed by t whose first period is within lookback."""
        for reset in reversed(self.resets):
            if reset.effective_at > t or not reset.is_split:
                continue
            if reset.pairing.first_period.start_time >= t - lookback:
                return reset.pairing
            break
        return None
