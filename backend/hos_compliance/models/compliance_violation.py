"""
Compliance Violation type for HOS compliance.

Violations are detected from the historical duty log, never projected:
each record marks the instant a regulatory limit was crossed.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db import models


class ViolationType(models.TextChoices):
    DRIVING_LIMIT = "driving_limit", "11-Hour Driving Limit"
    WINDOW_LIMIT = "window_limit", "14-Hour Duty Window Limit"
    BREAK_REQUIRED = "break_required", "30-Minute Rest Break Required"
    CYCLE_LIMIT = "cycle_limit", "70-Hour/8-Day Cycle Limit"

    @property
    def regulation(self):
        return _REGULATIONS[self]


_REGULATIONS = {
    ViolationType.DRIVING_LIMIT: "395.3(a)(3)",
    ViolationType.WINDOW_LIMIT: "395.3(a)(2)",
    ViolationType.BREAK_REQUIRED: "395.3(a)(3)(ii)",
    ViolationType.CYCLE_LIMIT: "395.3(b)",
}


@dataclass(frozen=True)
class Violation:
    """
    A limit crossed in the recorded duty history.

    Attributes:
        type: Violation type (driving_limit, window_limit, break_required, cycle_limit)
        description: Human readable description
        timestamp: Instant the threshold was crossed
        regulation: FMCSA regulation reference (e.g., '395.3(a)(2)')
        limit_hours: Regulatory limit value that was crossed
    """

    type: ViolationType
    description: str
    timestamp: datetime
    regulation: str = ""
    limit_hours: Optional[Decimal] = None
