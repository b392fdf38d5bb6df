"""
Compliance Validator Service.

Detects HOS violations in a driver's recorded duty history. Violations
are found, not projected: a single chronological pass over the driving
segments compares running totals against each limit and records the
instant the limit was crossed.

Limits checked:
- 11-hour driving limit per duty period (reaching the limit counts)
- 14-hour duty window (driving after the window closes)
- 30-minute break after 8 hours on duty (driving past the 8th hour)
- 70-hour/8-day cycle (driving past the 70th hour)

Single Responsibility: HOS violation detection only.
"""

import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from common.validators import format_duration_for_eld, timedelta_from_hours
from ..models import HosLimits, Violation, ViolationType
from .cycle_tracker import CycleTrackerService
from .duty_timeline import DutyPeriods, DutyTimeline

logger = logging.getLogger(__name__)

NO_TIME = timedelta(0)


class ComplianceValidatorService:
    """
    Service for detecting HOS violations in a duty timeline.

    Emits at most one violation per limit per duty period (per break
    period for the 30-minute break, per continuous exceedance for the
    cycle).
    """

    def __init__(self, cycle_tracker: Optional[CycleTrackerService] = None):
        """Initialize compliance validator with cycle tracker."""
        self.cycle_tracker = cycle_tracker or CycleTrackerService()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def detect_violations(
        self, timeline: DutyTimeline, periods: DutyPeriods, limits: HosLimits
    ) -> Tuple[Violation, ...]:
        """
        Walk the timeline once and record every limit crossing.

        Args:
            timeline: DutyTimeline clipped to the as-of instant
            periods: Qualifying resets found in that timeline
            limits: HOS limits to check against

        Returns:
            Tuple of Violation ordered by timestamp
        """
        violations: List[Violation] = []
        flagged_driving = set()
        flagged_window = set()
        window_starts = {}
        flagged_break = set()
        in_cycle_violation = False

        for segment in timeline.segments:
            if not segment.is_driving_record():
                continue

            reset = periods.reset_at(segment.start_time)
            boundary = reset.boundary if reset else timeline.start_time

            if boundary not in flagged_driving:
                violation = self._check_driving_limit(timeline, segment, boundary, limits)
                if violation:
                    violations.append(violation)
                    flagged_driving.add(boundary)

            if boundary not in flagged_window:
                if boundary not in window_starts:
                    window_starts[boundary] = timeline.first_on_duty_at_or_after(boundary)
                violation = self._check_window_limit(
                    periods, reset, segment, window_starts[boundary], limits
                )
                if violation:
                    violations.append(violation)
                    flagged_window.add(boundary)

            break_end = periods.last_break_end(segment.start_time)
            anchor = max(break_end, boundary) if break_end else boundary
            if anchor not in flagged_break:
                violation = self._check_break(timeline, segment, anchor, limits)
                if violation:
                    violations.append(violation)
                    flagged_break.add(anchor)

            for piece_start, piece_end in self.cycle_tracker.day_pieces(
                segment.start_time, segment.end_time
            ):
                violation = self._check_cycle(timeline, piece_start, piece_end, limits)
                if violation is None:
                    in_cycle_violation = False
                elif not in_cycle_violation:
                    violations.append(violation)
                    in_cycle_violation = True

        violations.sort(key=lambda v: v.timestamp)
        if violations:
            self.logger.info(f"Detected {len(violations)} HOS violations")
        return tuple(violations)

    def _check_driving_limit(self, timeline, segment, boundary, limits) -> Optional[Violation]:
        limit = timedelta_from_hours(limits.driving_limit)
        driven = timeline.driving_between(boundary, segment.start_time)
        if driven + segment.duration < limit:
            return None
        crossed_at = segment.start_time + max(limit - driven, NO_TIME)
        return self._violation(
            ViolationType.DRIVING_LIMIT,
            f"Driving time reached the {format_duration_for_eld(limits.driving_limit)} "
            f"limit since the last qualifying rest",
            crossed_at,
            limits.driving_limit,
        )

    def _check_window_limit(
        self, periods, reset, segment, window_start, limits
    ) -> Optional[Violation]:
        if window_start is None:
            return None
        deadline = periods.window_deadline(reset, window_start, segment)
        if segment.end_time <= deadline:
            return None
        return self._violation(
            ViolationType.WINDOW_LIMIT,
            f"Driving after the {format_duration_for_eld(limits.window_limit)} "
            f"duty window that opened at {window_start.isoformat()}",
            max(segment.start_time, deadline),
            limits.window_limit,
        )

    def _check_break(self, timeline, segment, anchor, limits) -> Optional[Violation]:
        limit = timedelta_from_hours(limits.break_required)
        on_duty = timeline.on_duty_between(anchor, segment.start_time)
        if on_duty + segment.duration <= limit:
            return None
        return self._violation(
            ViolationType.BREAK_REQUIRED,
            f"Driving after {format_duration_for_eld(limits.break_required)} on duty "
            f"without a {int(limits.break_duration * 60)}-minute break",
            segment.start_time + max(limit - on_duty, NO_TIME),
            limits.break_required,
        )

    def _check_cycle(self, timeline, piece_start, piece_end, limits) -> Optional[Violation]:
        limit = timedelta_from_hours(limits.cycle_limit)
        used = self.cycle_tracker.cycle_used(timeline, limits, piece_start)
        if used + (piece_end - piece_start) <= limit:
            return None
        return self._violation(
            ViolationType.CYCLE_LIMIT,
            f"Driving after {limits.cycle_limit.normalize():f} hours on duty "
            f"in {limits.cycle_days} days",
            piece_start + max(limit - used, NO_TIME),
            limits.cycle_limit,
        )

    def _violation(self, violation_type, description, timestamp, limit_hours) -> Violation:
        self.logger.debug(f"{violation_type.value} crossed at {timestamp.isoformat()}")
        return Violation(
            type=violation_type,
            description=description,
            timestamp=timestamp,
            regulation=violation_type.regulation,
            limit_hours=limit_hours,
        )
