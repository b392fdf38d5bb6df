"""
HOS Compliance models package.

Plain, immutable data types consumed and produced by the HOS rule engine.
Nothing here is persisted; callers own storage of their duty logs.
"""

from .duty_log import DutyStatus, DutyInterval, DutyLog
from .hos_limits import HosLimits
from .rest_break import RestPeriod, SplitSleeperPairing, RestOption
from .compliance_violation import ViolationType, Violation
from .hos_status import CycleDay, HosStatus
from .hos_calculation import HosCalculation

__all__ = [
    "DutyStatus",
    "DutyInterval",
    "DutyLog",
    "HosLimits",
    "RestPeriod",
    "SplitSleeperPairing",
    "RestOption",
    "ViolationType",
    "Violation",
    "CycleDay",
    "HosStatus",
    "HosCalculation",
]
