"""
Duty Log Validator Service.

Validates a driver's duty log before any HOS calculation runs. The engine
assumes a contiguous, non-overlapping, chronologically ordered log; this
service rejects anything else with a specific error so that callers can
report exactly which interval is wrong.

This service handles:
- Interval validation (status, timestamps, positive duration)
- Personal conveyance / yard move flag consistency
- Overlap and ordering detection
- Gap handling according to the configured GapPolicy

Single Responsibility: duty log validation only.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from django.core.exceptions import ValidationError

from common.validators import validate_aware_datetime
from ..models import DutyInterval, DutyLog, DutyStatus

logger = logging.getLogger(__name__)


class GapPolicy:
    """How uncovered time between two intervals is handled."""

    REJECT = "reject"
    SYNTHESIZE_OFF_DUTY = "synthesize_off_duty"

    CHOICES = [
        (REJECT, "Reject logs with gaps"),
        (SYNTHESIZE_OFF_DUTY, "Treat gaps as off duty"),
    ]

    @classmethod
    def validate(cls, value):
        if value not in (cls.REJECT, cls.SYNTHESIZE_OFF_DUTY):
            raise ValueError(f"Invalid gap policy: {value}")
        return value


class DutyLogValidatorService:
    """
    Service for validating duty logs.

    Returns the intervals the engine should use: the log's own intervals
    under GapPolicy.REJECT, or the intervals with assumed off-duty records
    inserted under GapPolicy.SYNTHESIZE_OFF_DUTY.
    """

    ASSUMED_REMARKS = "Assumed (gap filling)"

    def __init__(self, gap_policy: str = GapPolicy.REJECT):
        """Initialize validator with the gap handling policy."""
        self.gap_policy = GapPolicy.validate(gap_policy)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def validate(
        self, log: DutyLog, as_of: Optional[datetime] = None
    ) -> Tuple[DutyInterval, ...]:
        """
        Validate a duty log.

        Args:
            log: Duty log to validate
            as_of: Instant the log must cover; time between the last
                interval and as_of is a gap

        Returns:
            Tuple of intervals covering a continuous timeline

        Raises:
            InvalidInterval: An interval is malformed
            OverlapError: Two intervals overlap or are out of order
            GapError: The log has uncovered time and gaps are rejected
        """
        intervals: List[DutyInterval] = []
        previous: Optional[DutyInterval] = None

        for index, interval in enumerate(log):
            self._validate_interval(index, interval)

            if previous is not None:
                if interval.start_time < previous.end_time:
                    raise OverlapError(
                        f"Interval {index} starts at {interval.start_time.isoformat()} "
                        f"before interval {index - 1} ends at {previous.end_time.isoformat()}",
                        interval_index=index,
                    )
                if interval.start_time > previous.end_time:
                    intervals.append(self._handle_gap(index, previous, interval))

            intervals.append(interval)
            previous = interval

        if previous is not None and as_of is not None and as_of > previous.end_time:
            intervals.append(self._handle_trailing_gap(len(log), previous, as_of))

        self.logger.debug(f"Validated duty log with {len(intervals)} intervals")
        return tuple(intervals)

    def prepare(
        self, log: DutyLog, as_of: Optional[datetime] = None
    ) -> Tuple[DutyInterval, ...]:
        """
        Intervals for a log that has already been validated.

        Applies the gap policy without re-checking the intervals.
        """
        if self.gap_policy != GapPolicy.SYNTHESIZE_OFF_DUTY:
            return tuple(log)

        intervals: List[DutyInterval] = []
        for interval in log:
            if intervals and interval.start_time > intervals[-1].end_time:
                intervals.append(
                    self._assumed_off_duty(intervals[-1], interval.start_time)
                )
            intervals.append(interval)
        if intervals and as_of is not None and as_of > intervals[-1].end_time:
            intervals.append(self._assumed_off_duty(intervals[-1], as_of))
        return tuple(intervals)

    def _validate_interval(self, index: int, interval: DutyInterval):
        """Validate a single interval."""
        if not isinstance(interval, DutyInterval):
            raise InvalidInterval(
                f"Interval {index} is not a duty interval", interval_index=index
            )

        if interval.status not in DutyStatus.values:
            raise InvalidInterval(
                f"Interval {index} has invalid duty status: {interval.status}",
                interval_index=index,
            )

        for name in ("start_time", "end_time"):
            value = getattr(interval, name)
            if value is None:
                raise InvalidInterval(
                    f"Interval {index} is missing {name}", interval_index=index
                )
            try:
                validate_aware_datetime(value)
            except ValidationError as e:
                raise InvalidInterval(
                    f"Interval {index} {name}: {e.messages[0]}", interval_index=index
                ) from e

        if interval.end_time <= interval.start_time:
            raise InvalidInterval(
                f"Interval {index} must end after it starts", interval_index=index
            )

        status = DutyStatus(interval.status)
        if interval.personal_conveyance and status != DutyStatus.OFF_DUTY:
            raise InvalidInterval(
                f"Interval {index}: personal conveyance must be recorded as off duty",
                interval_index=index,
            )
        if interval.yard_move and status != DutyStatus.ON_DUTY_NOT_DRIVING:
            raise InvalidInterval(
                f"Interval {index}: yard moves must be recorded as on duty (not driving)",
                interval_index=index,
            )

    def _handle_gap(
        self, index: int, previous: DutyInterval, interval: DutyInterval
    ) -> DutyInterval:
        """Reject a gap or fill it with an assumed off-duty interval."""
        gap_minutes = (interval.start_time - previous.end_time).total_seconds() / 60

        if self.gap_policy == GapPolicy.REJECT:
            raise GapError(
                f"Gap of {gap_minutes:.0f} minutes between intervals {index - 1} and {index}",
                interval_index=index,
            )

        self.logger.info(
            f"Filling {gap_minutes:.0f} minute gap before interval {index} with off duty"
        )
        return self._assumed_off_duty(previous, interval.start_time)

    def _handle_trailing_gap(
        self, index: int, previous: DutyInterval, as_of: datetime
    ) -> DutyInterval:
        """Reject or fill the time between the last interval and as_of."""
        gap_minutes = (as_of - previous.end_time).total_seconds() / 60

        if self.gap_policy == GapPolicy.REJECT:
            raise GapError(
                f"Gap of {gap_minutes:.0f} minutes between the last interval "
                f"and {as_of.isoformat()}",
                interval_index=index,
            )

        self.logger.info(f"Filling {gap_minutes:.0f} minutes up to as_of with off duty")
        return self._assumed_off_duty(previous, as_of)

    def _assumed_off_duty(self, previous: DutyInterval, end_time: datetime) -> DutyInterval:
        return DutyInterval(
            status=DutyStatus.OFF_DUTY,
            start_time=previous.end_time,
            end_time=end_time,
            location=previous.location,
            remarks=self.ASSUMED_REMARKS,
        )


class DutyLogValidationError(Exception):
    """Exception raised when a duty log cannot be used for HOS calculations."""

    def __init__(self, message, interval_index=None):
        super().__init__(message)
        self.interval_index = interval_index


class InvalidInterval(DutyLogValidationError):
    """An interval has missing timestamps or a non-positive duration."""

    pass


class OverlapError(DutyLogValidationError):
    """Two intervals in the log overlap in time."""

    pass


class GapError(DutyLogValidationError):
    """The log leaves a span of time uncovered."""

    pass
