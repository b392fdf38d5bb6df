"""
Duty log data types for HOS compliance.

Contains the DutyStatus enumeration, the DutyInterval record for one
contiguous period in a single status, and the DutyLog sequence that the
rule engine consumes.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterator, Optional, Tuple

from django.db import models

from common.validators import hours_from_timedelta


class DutyStatus(models.TextChoices):
    """Duty status (matches grid rows on the log sheet)."""

    OFF_DUTY = "off_duty", "Off Duty"
    SLEEPER_BERTH = "sleeper_berth", "Sleeper Berth"
    DRIVING = "driving", "Driving"
    ON_DUTY_NOT_DRIVING = "on_duty_not_driving", "On Duty (Not Driving)"

    @property
    def is_rest(self):
        """Off duty and sleeper berth time both count as rest."""
        return self in (DutyStatus.OFF_DUTY, DutyStatus.SLEEPER_BERTH)

    @property
    def is_on_duty(self):
        return self in (DutyStatus.DRIVING, DutyStatus.ON_DUTY_NOT_DRIVING)

    @classmethod
    def from_code(cls, value):
        """
        Resolve a status from either its value or its ELD grid code.

        Accepts "driving" as well as "D", "OFF", "SB" and "ON".
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip()
        if key.upper() in _STATUS_BY_ELD_CODE:
            return _STATUS_BY_ELD_CODE[key.upper()]
        return cls(key.lower())


_ELD_CODES_BY_STATUS = {
    DutyStatus.OFF_DUTY: "OFF",
    DutyStatus.SLEEPER_BERTH: "SB",
    DutyStatus.DRIVING: "D",
    DutyStatus.ON_DUTY_NOT_DRIVING: "ON",
}
_STATUS_BY_ELD_CODE = {code: status for status, code in _ELD_CODES_BY_STATUS.items()}


@dataclass(frozen=True)
class DutyInterval:
    """
    One contiguous period in a single duty status.

    Attributes:
        status: Duty status for this period
        start_time: When this period started (aware datetime)
        end_time: When this period ended (aware datetime, after start_time)
        location: Location description, informational only
        remarks: Additional remarks for this duty status change
        personal_conveyance: Off-duty movement of the vehicle for personal use
        yard_move: On-duty movement within a yard or terminal
    """

    status: DutyStatus
    start_time: datetime
    end_time: datetime
    location: str = ""
    remarks: str = ""
    personal_conveyance: bool = False
    yard_move: bool = False

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def duration_hours(self) -> Decimal:
        return hours_from_timedelta(self.duration)

    def is_driving_record(self):
        """Check if this is a driving duty status record."""
        return self.status == DutyStatus.DRIVING

    def is_rest_record(self):
        """Check if this is a rest/off-duty record."""
        return DutyStatus(self.status).is_rest

    def clipped(self, start: datetime, end: datetime) -> Optional["DutyInterval"]:
        """Return the part of this interval inside [start, end), or None."""
        new_start = max(self.start_time, start)
        new_end = min(self.end_time, end)
        if new_end <= new_start:
            return None
        return replace(self, start_time=new_start, end_time=new_end)


@dataclass(frozen=True)
class DutyLog:
    """
    Ordered duty intervals for one driver.

    The log is append-only and immutable: append() returns a new log and
    the engine never modifies the log it is given.
    """

    intervals: Tuple[DutyInterval, ...] = field(default_factory=tuple)
    driver_name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "intervals", tuple(self.intervals))

    def __iter__(self) -> Iterator[DutyInterval]:
        return iter(self.intervals)

    def __len__(self):
        return len(self.intervals)

    def __getitem__(self, index):
        return self.intervals[index]

    @property
    def start_time(self) -> Optional[datetime]:
        return self.intervals[0].start_time if self.intervals else None

    @property
    def end_time(self) -> Optional[datetime]:
        return self.intervals[-1].end_time if self.intervals else None

    def append(self, interval: DutyInterval) -> "DutyLog":
        """Return a new log with interval added at the end."""
        return replace(self, intervals=self.intervals + (interval,))
