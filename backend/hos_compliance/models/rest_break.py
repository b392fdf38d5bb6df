"""
Rest period types for HOS compliance.

Contains the RestPeriod record reported in HOS status, the split sleeper
berth pairing that can stand in for a 10-hour reset, and the rest options
offered to a driver who has run out of hours.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.db import models

from common.validators import round_hours


@dataclass(frozen=True)
class RestPeriod:
    """
    A contiguous run of off duty and/or sleeper berth time.

    Attributes:
        start_time: When the rest began
        end_time: When the rest ended (or the as-of time if still resting)
        duration: Length of the rest in hours
        type: "sleeper_berth" if the whole run was in the berth, else "off_duty"
    """

    start_time: datetime
    end_time: datetime
    duration: Decimal
    type: str


@dataclass(frozen=True)
class SplitSleeperPairing:
    """
    Two rest periods that together satisfy the sleeper berth provision.

    The first period is the earlier of the two; the regulation does not
    require the longer one to come first.
    """

    first_period: RestPeriod
    second_period: RestPeriod
    location: str = ""

    @property
    def start_time(self) -> datetime:
        return self.first_period.start_time

    @property
    def end_time(self) -> datetime:
        return self.second_period.end_time

    @property
    def combination(self) -> str:
        """Hours of the long and short period, e.g. "8/2"."""
        durations = sorted(
            (self.first_period.duration, self.second_period.duration), reverse=True
        )
        return "/".join(f"{round_hours(d).normalize():f}" for d in durations)


@dataclass(frozen=True)
class RestOption:
    """A rest the driver can take to regain driving eligibility."""

    class BreakType(models.TextChoices):
        THIRTY_MINUTE = "30_minute", "30-Minute Rest Break"
        TEN_HOUR = "10_hour", "10-Hour Off Duty"
        SPLIT_SLEEPER = "split_sleeper", "Sleeper Berth Split"
        RESTART = "34_hour_restart", "34-Hour Restart"

    type: str
    duration_hours: Decimal
    description: str
    regulation: str
    restores: tuple
