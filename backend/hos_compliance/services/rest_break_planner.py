"""
Rest Break Planner Service.

Projects when a driver will next need a 30-minute break or a full rest,
assuming driving continues from the as-of instant, and lists the rest
options that restore driving eligibility.

Single Responsibility: break and rest projection only.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from common.validators import timedelta_from_hours
from ..models import HosCalculation, HosLimits, HosStatus, RestOption

logger = logging.getLogger(__name__)


class RestBreakPlannerService:
    """
    Service for projecting required breaks and rest periods.

    Projections assume the driver keeps driving or working without
    interruption from the as-of instant.
    """

    # Within this many hours of the cycle limit a 34-hour restart is offered
    RESTART_SUGGESTION_MARGIN_HOURS = Decimal("10")

    def __init__(self):
        """Initialize rest break planner."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def next_break_time(
        self,
        status: HosStatus,
        limits: HosLimits,
        available_driving_hours: Decimal,
        as_of: datetime,
    ) -> Optional[datetime]:
        """
        When the 30-minute break becomes mandatory.

        Returns as_of if the break is already due, None if driving time
        runs out before the break threshold is reached.
        """
        hours_until_break = limits.break_required - status.hours_since_last_break
        if hours_until_break <= 0:
            return as_of
        if available_driving_hours <= hours_until_break:
            return None
        return as_of + timedelta_from_hours(hours_until_break)

    def next_rest_time(
        self,
        available_driving_hours: Decimal,
        available_window_hours: Decimal,
        as_of: datetime,
    ) -> datetime:
        """When the driving limit or the 14-hour window is exhausted."""
        hours = min(available_driving_hours, available_window_hours)
        return as_of + timedelta_from_hours(hours)

    def plan_required_rest(
        self, status: HosStatus, calculation: HosCalculation, limits: HosLimits
    ) -> List[RestOption]:
        """
        Calculate rest options that restore driving eligibility.

        Args:
            status: Current HOS status
            calculation: Availability derived from that status
            limits: HOS limits in force

        Returns:
            Rest options, shortest first
        """
        options = []

        if status.hours_since_last_break >= limits.break_required:
            options.append(
                RestOption(
                    type=RestOption.BreakType.THIRTY_MINUTE,
                    duration_hours=limits.break_duration,
                    description=f"{int(limits.break_duration * 60)}-minute rest break required "
                    f"after {limits.break_required.normalize():f} hours on duty",
                    regulation="395.3(a)(3)(ii)",
                    restores=("driving_eligibility",),
                )
            )

        if calculation.available_driving_hours <= 0 or calculation.available_window_hours <= 0:
            options.append(
                RestOption(
                    type=RestOption.BreakType.TEN_HOUR,
                    duration_hours=limits.off_duty_required,
                    description=f"{limits.off_duty_required.normalize():f} consecutive hours "
                    f"off duty to reset daily limits",
                    regulation="395.3(a)(1)",
                    restores=("duty_period", "driving_hours"),
                )
            )
            options.append(
                RestOption(
                    type=RestOption.BreakType.SPLIT_SLEEPER,
                    duration_hours=limits.off_duty_required,
                    description="Sleeper berth split (7/3 or 8/2) in place of "
                    "a continuous off-duty period",
                    regulation="395.1(g)(1)(ii)",
                    restores=("duty_period", "driving_hours"),
                )
            )

        if calculation.cycle_hours_remaining <= self.RESTART_SUGGESTION_MARGIN_HOURS:
            options.append(
                RestOption(
                    type=RestOption.BreakType.RESTART,
                    duration_hours=limits.cycle_restart_hours,
                    description=f"{limits.cycle_restart_hours.normalize():f} consecutive hours "
                    f"off duty to restart the {limits.cycle_days}-day cycle",
                    regulation="395.3(c)",
                    restores=("cycle_hours", "duty_period", "driving_hours"),
                )
            )

        self.logger.debug(f"Planned {len(options)} rest options")
        return options
