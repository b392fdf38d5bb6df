"""
HOS Limits configuration.

Regulatory thresholds for property-carrying commercial vehicle drivers
(49 CFR 395.3). Limits are injected into the engine so that tests and
other jurisdictions can supply their own values.
"""

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from common.validators import timedelta_from_hours


@dataclass(frozen=True)
class HosLimits:
    """
    Immutable HOS limit table, all values in hours.

    Attributes:
        driving_limit: Maximum driving after a qualifying reset (11)
        window_limit: Duty window length after coming on duty (14)
        break_required: On-duty time allowed before a 30-minute break (8)
        break_duration: Minimum rest that counts as a break (0.5)
        off_duty_required: Consecutive rest that resets the day (10)
        cycle_limit: On-duty hours allowed in the rolling cycle (70)
        cycle_days: Length of the rolling cycle in calendar days (8)
        cycle_restart_hours: Consecutive rest that restarts the cycle (34)
        apply_cycle_restart: Whether the 34-hour restart is honoured
    """

    driving_limit: Decimal = Decimal("11")
    window_limit: Decimal = Decimal("14")
    break_required: Decimal = Decimal("8")
    break_duration: Decimal = Decimal("0.5")
    off_duty_required: Decimal = Decimal("10")
    cycle_limit: Decimal = Decimal("70")
    cycle_days: int = 8
    cycle_restart_hours: Decimal = Decimal("34")
    apply_cycle_restart: bool = False

    def __post_init__(self):
        for name in (
            "driving_limit",
            "window_limit",
            "break_required",
            "break_duration",
            "off_duty_required",
            "cycle_limit",
            "cycle_restart_hours",
        ):
            value = Decimal(str(getattr(self, name)))
            if value <= 0:
                raise ValueError(f"Invalid {name}: {value}")
            object.__setattr__(self, name, value)
        if self.cycle_days < 1:
            raise ValueError(f"Invalid cycle_days: {self.cycle_days}")

    @classmethod
    def property_carrying(cls):
        """Default FMCSA limits for property-carrying drivers (70h/8 days)."""
        return cls()

    @property
    def break_duration_delta(self) -> timedelta:
        return timedelta_from_hours(self.break_duration)

    @property
    def off_duty_required_delta(self) -> timedelta:
        return timedelta_from_hours(self.off_duty_required)

    @property
    def cycle_restart_delta(self) -> timedelta:
        return timedelta_from_hours(self.cycle_restart_hours)

    def as_dict(self):
        return {
            "driving_limit": float(self.driving_limit),
            "window_limit": float(self.window_limit),
            "break_required": float(self.break_required),
            "break_duration": float(self.break_duration),
            "off_duty_required": float(self.off_duty_required),
            "cycle_limit": float(self.cycle_limit),
            "cycle_days": self.cycle_days,
        }
