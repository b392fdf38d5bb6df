"""
HOS Calculation type for HOS compliance.

Forward-looking availability derived from a HosStatus and the HOS limits.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from .compliance_violation import Violation
from .rest_break import SplitSleeperPairing


@dataclass(frozen=True)
class HosCalculation:
    """
    Remaining hours, upcoming break/rest times and detected violations.

    next_break_time is None when no 30-minute break will be needed before
    the driver runs out of driving time anyway.
    """

    available_driving_hours: Decimal
    available_window_hours: Decimal
    cycle_hours_remaining: Decimal
    next_break_time: Optional[datetime]
    next_rest_time: Optional[datetime]
    violations: Tuple[Violation, ...] = field(default_factory=tuple)
    split_berth_eligible: bool = False
    personal_conveyance_available: bool = True
    split_sleeper: Optional[SplitSleeperPairing] = None
    as_of: Optional[datetime] = None

    @property
    def can_drive(self):
        """Driving time is left and no 30-minute break is due right now."""
        if self.available_driving_hours <= 0:
            return False
        return self.next_break_time is None or self.next_break_time != self.as_of
