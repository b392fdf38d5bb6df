"""
Split Sleeper Berth Service.

Decides when two rest periods together satisfy the sleeper berth
provision (49 CFR 395.1(g)(1)(ii)) and can stand in for one continuous
10-hour off-duty period.

The regulation leaves room for interpretation on adjacency, ordering and
driving between the two periods. Each of those choices is a field on
SplitSleeperPolicy rather than a hard-coded rule.

Single Responsibility: split sleeper berth pairing only.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional, Tuple

from common.validators import timedelta_from_hours
from ..models import SplitSleeperPairing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitSleeperPolicy:
    """
    Pairing rules for the sleeper berth provision.

    Attributes:
        enabled: Whether split pairings are recognised at all
        qualifying_splits: (long sleeper minimum, short minimum) hour pairs
        allow_off_duty_short_period: Short period may be off duty, not only sleeper berth
        require_adjacent_periods: No other qualifying rest may sit between the two periods
        long_period_first: Only accept pairings where the long period comes first
        check_intervening_driving: Driving between the periods must fit the unused driving limit
        lookback_hours: Maximum span from the start of the first to the end of the second
    """

    enabled: bool = True
    qualifying_splits: Tuple[Tuple[int, int], ...] = ((7, 3), (8, 2))
    allow_off_duty_short_period: bool = True
    require_adjacent_periods: bool = True
    long_period_first: bool = False
    check_intervening_driving: bool = True
    lookback_hours: int = 24

    @property
    def lookback(self) -> timedelta:
        return timedelta_from_hours(self.lookback_hours)

    @property
    def minimum_period(self) -> timedelta:
        return timedelta_from_hours(min(short for _, short in self.qualifying_splits))


class SplitSleeperService:
    """
    Service for pairing rest periods under the sleeper berth provision.

    Used by DutyPeriods while it walks the rest runs of a timeline in
    chronological order.
    """

    def __init__(self, policy: Optional[SplitSleeperPolicy] = None):
        """Initialize split sleeper service with pairing policy."""
        self.policy = policy or SplitSleeperPolicy()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def is_candidate(self, run) -> bool:
        """Whether a rest run is long enough to be half of a pairing."""
        return self.policy.enabled and run.duration >= self.policy.minimum_period

    def find_pairing(self, run, candidates: List, periods):
        """
        Find an earlier rest run that pairs with run.

        Args:
            run: Rest run that just ended (the second period)
            candidates: Earlier candidate rest runs, oldest first
            periods: DutyPeriods being built, for resets found so far

        Returns:
            (earlier run, SplitSleeperPairing) or None
        """
        if not self.is_candidate(run) or not candidates:
            return None

        pool = candidates[-1:] if self.policy.require_adjacent_periods else candidates
        for earlier in reversed(pool):
            if run.end_time - earlier.start_time > self.policy.lookback:
                break
            if earlier.end_time < periods.last_boundary:
                break
            if not self._periods_qualify(earlier, run, periods.limits):
                continue
            if self.policy.check_intervening_driving and not self._driving_fits(
                earlier, run, periods
            ):
                continue

            pairing = SplitSleeperPairing(
                first_period=earlier.as_rest_period(),
                second_period=run.as_rest_period(),
                location=run.location,
            )
            self.logger.debug(
                f"Split sleeper pairing {pairing.combination} ending {run.end_time.isoformat()}"
            )
            return earlier, pairing

        return None

    def _periods_qualify(self, first, second, limits) -> bool:
        """Check the two periods against the qualifying split combinations."""
        orders = [(first, second)]
        if not self.policy.long_period_first:
            orders.append((second, first))

        for long_hours, short_hours in self.policy.qualifying_splits:
            long_minimum = timedelta_from_hours(long_hours)
            short_minimum = timedelta_from_hours(short_hours)
            for long_run, short_run in orders:
                long_amount = long_run.longest_sleeper
                short_amount = self._short_amount(short_run)
                if (
                    long_amount >= long_minimum
                    and short_amount >= short_minimum
                    and long_amount + short_amount >= limits.off_duty_required_delta
                ):
                    return True
        return False

    def _short_amount(self, run) -> timedelta:
        if self.policy.allow_off_duty_short_period:
            return run.duration
        return run.longest_sleeper

    def _driving_fits(self, first, second, periods) -> bool:
        """Driving between the periods must fit the limit unused when the first began."""
        timeline = periods.timeline
        boundary = periods.boundary_at(first.start_time)
        used = timeline.driving_between(boundary, first.start_time)
        unused = timedelta_from_hours(periods.limits.driving_limit) - used
        between = timeline.driving_between(first.end_time, second.start_time)
        return between <= unused
