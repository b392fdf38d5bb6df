"""
HOS Calculator Service.

Provides the core Hours of Service calculations based on FMCSA
regulations for property-carrying commercial vehicles.

This service turns a driver's duty log into:
- HosStatus: hours accumulated since the last reset, last break and
  across the rolling 70-hour/8-day cycle
- HosCalculation: remaining driving/window/cycle hours, the next break
  and rest times, detected violations and split sleeper eligibility

Both results are recomputed from the full log on every call. The service
holds configuration only, so one instance may be shared between threads.

Single Responsibility: HOS calculations only.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from common.validators import hours_from_timedelta
from ..models import DutyLog, HosCalculation, HosLimits, HosStatus, RestOption, ViolationType
from ..models.hos_status import ZERO_HOURS
from .compliance_validator import ComplianceValidatorService
from .cycle_tracker import CycleTrackerService
from .duty_log_validator import DutyLogValidatorService, GapPolicy
from .duty_timeline import DutyPeriods, DutyTimeline
from .rest_break_planner import RestBreakPlannerService
from .split_sleeper_service import SplitSleeperPolicy, SplitSleeperService

logger = logging.getLogger(__name__)


class HOSCalculatorService:
    """
    Service for calculating Hours of Service compliance.

    Args:
        limits: HOS limits (defaults to the property-carrying limits)
        gap_policy: GapPolicy for uncovered time in the log
        split_policy: SplitSleeperPolicy for sleeper berth pairings
        home_timezone: Time zone for calendar days in the cycle
    """

    def __init__(
        self,
        limits: Optional[HosLimits] = None,
        gap_policy: str = GapPolicy.REJECT,
        split_policy: Optional[SplitSleeperPolicy] = None,
        home_timezone=None,
    ):
        """Initialize HOS calculator with limits and policies."""
        self.limits = limits or HosLimits.property_carrying()
        self.log_validator = DutyLogValidatorService(gap_policy)
        self.split_service = SplitSleeperService(split_policy)
        self.cycle_tracker = CycleTrackerService(home_timezone)
        self.compliance_validator = ComplianceValidatorService(self.cycle_tracker)
        self.break_planner = RestBreakPlannerService()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def compute_status(self, log: DutyLog, as_of: datetime) -> HosStatus:
        """
        Calculate accumulated HOS hours as of an instant.

        Args:
            log: Driver's duty log
            as_of: Instant to calculate for; may fall inside an interval

        Returns:
            HosStatus for the driver at as_of

        Raises:
            DutyLogValidationError: The log is malformed
            HOSCalculationError: The calculation failed unexpectedly
        """
        intervals = self.log_validator.validate(log, as_of)
        try:
            timeline, periods = self._build(intervals, as_of)
            status = self._status_from_timeline(timeline, periods, as_of)
        except Exception as e:
            self.logger.error(f"HOS status calculation failed: {str(e)}")
            raise HOSCalculationError(f"Failed to calculate HOS status: {str(e)}") from e

        self.logger.debug(
            f"HOS status at {as_of.isoformat()}: driving={status.driving_hours_today}h "
            f"window={status.hours_in_current_window}h cycle={status.current_cycle_hours}h"
        )
        return status

    def compute_availability(
        self,
        status: HosStatus,
        limits: Optional[HosLimits],
        log: DutyLog,
        as_of: datetime,
    ) -> HosCalculation:
        """
        Derive remaining hours, next break/rest times and violations.

        Assumes status came from compute_status for the same log and as_of.
        The log is not re-validated, only re-walked for violation detection
        and split sleeper pairing.

        Args:
            status: HosStatus from compute_status for the same log and as_of
            limits: HOS limits (defaults to this service's limits)
            log: The same duty log
            as_of: The same as-of instant

        Returns:
            HosCalculation for the driver at as_of
        """
        limits = limits or self.limits
        try:
            timeline, periods = self._build(self.log_validator.prepare(log, as_of), as_of, limits)

            available_window = max(
                ZERO_HOURS, limits.window_limit - status.hours_in_current_window
            )
            cycle_remaining = max(ZERO_HOURS, limits.cycle_limit - status.current_cycle_hours)
            available_driving = min(
                max(ZERO_HOURS, limits.driving_limit - status.driving_hours_today),
                available_window,
                cycle_remaining,
            )

            violations = self.compliance_validator.detect_violations(timeline, periods, limits)
            pairing = periods.latest_pairing(as_of, self.split_service.policy.lookback)

            calculation = HosCalculation(
                available_driving_hours=available_driving,
                available_window_hours=available_window,
                cycle_hours_remaining=cycle_remaining,
                next_break_time=self.break_planner.next_break_time(
                    status, limits, available_driving, as_of
                ),
                next_rest_time=self.break_planner.next_rest_time(
                    available_driving, available_window, as_of
                ),
                violations=violations,
                split_berth_eligible=pairing is not None,
                personal_conveyance_available=self._personal_conveyance_available(
                    status, violations
                ),
                split_sleeper=pairing,
                as_of=as_of,
            )
        except Exception as e:
            self.logger.error(f"HOS availability calculation failed: {str(e)}")
            raise HOSCalculationError(f"Failed to calculate available hours: {str(e)}") from e

        self.logger.debug(
            f"HOS availability at {as_of.isoformat()}: driving={available_driving}h "
            f"violations={len(violations)}"
        )
        return calculation

    def calculate(self, log: DutyLog, as_of: datetime) -> Tuple[HosStatus, HosCalculation]:
        """Compute status and availability in one call."""
        status = self.compute_status(log, as_of)
        return status, self.compute_availability(status, self.limits, log, as_of)

    def plan_required_rest(self, log: DutyLog, as_of: datetime) -> List[RestOption]:
        """Rest options that restore driving eligibility at as_of."""
        status, calculation = self.calculate(log, as_of)
        return self.break_planner.plan_required_rest(status, calculation, self.limits)

    def _build(self, intervals, as_of: datetime, limits: Optional[HosLimits] = None):
        limits = limits or self.limits
        timeline = DutyTimeline(intervals, as_of)
        periods = DutyPeriods(timeline, limits, self.split_service)
        return timeline, periods

    def _status_from_timeline(
        self, timeline: DutyTimeline, periods: DutyPeriods, as_of: datetime
    ) -> HosStatus:
        """Walk back from as_of to the last reset and last break."""
        limits = self.limits
        cycle_days = self.cycle_tracker.cycle_days(timeline, limits, as_of)

        if timeline.is_empty:
            # as_of precedes the log: the driver is treated as fresh
            return HosStatus(cycle_hours_last_8_days=cycle_days, as_of=as_of)

        reset = periods.reset_at(as_of)
        boundary = reset.boundary if reset else timeline.start_time

        driving = timeline.driving_between(boundary, as_of)
        on_duty = timeline.on_duty_between(boundary, as_of)

        window_start = timeline.first_on_duty_at_or_after(boundary)
        if window_start is not None:
            window_elapsed = periods.window_elapsed(reset, window_start, as_of)
        else:
            window_elapsed = timedelta(0)

        break_end = periods.last_break_end(as_of)
        if break_end is not None and break_end > boundary:
            since_break = timeline.on_duty_between(break_end, as_of)
        else:
            break_end = None
            since_break = on_duty

        last_rest = timeline.rest_run_ending_by(window_start or as_of)

        return HosStatus(
            current_cycle_hours=sum((day.total_hours for day in cycle_days), ZERO_HOURS),
            driving_hours_today=hours_from_timedelta(driving),
            on_duty_hours_today=hours_from_timedelta(on_duty),
            hours_since_last_break=hours_from_timedelta(since_break),
            hours_in_current_window=hours_from_timedelta(window_elapsed),
            last_rest_period=last_rest.as_rest_period() if last_rest else None,
            cycle_hours_last_8_days=cycle_days,
            as_of=as_of,
            reset_boundary=boundary,
            window_start=window_start,
            last_break_end=break_end,
            split_pairing=reset.pairing if reset else None,
        )

    def _personal_conveyance_available(self, status: HosStatus, violations) -> bool:
        """Personal conveyance is withheld while a driving or window violation is open."""
        if status.reset_boundary is None:
            return True
        blocking = (ViolationType.DRIVING_LIMIT, ViolationType.WINDOW_LIMIT)
        return not any(
            v.type in blocking and v.timestamp >= status.reset_boundary for v in violations
        )


class HOSCalculationError(Exception):
    """Exception raised when HOS calculations fail."""

    pass
