"""
HOS Compliance Services Package.

This package contains the business logic for Hours of Service
compliance: duty log validation, status and availability calculation,
violation detection and rest planning.

Services:
- HOSCalculatorService: Core HOS calculations (status and availability)
- DutyLogValidatorService: Duty log validation and gap handling
- ComplianceValidatorService: Violation detection
- CycleTrackerService: Rolling 70-hour/8-day accounting
- SplitSleeperService: Sleeper berth split pairing
- RestBreakPlannerService: Break and rest projection
"""

from .hos_calculator import HOSCalculatorService, HOSCalculationError
from .duty_log_validator import (
    DutyLogValidatorService,
    DutyLogValidationError,
    GapError,
    GapPolicy,
    InvalidInterval,
    OverlapError,
)
from .compliance_validator import ComplianceValidatorService
from .cycle_tracker import CycleTrackerService
from .split_sleeper_service import SplitSleeperPolicy, SplitSleeperService
from .rest_break_planner import RestBreakPlannerService

__all__ = [
    'HOSCalculatorService',
    'HOSCalculationError',
    'DutyLogValidatorService',
    'DutyLogValidationError',
    'GapError',
    'GapPolicy',
    'InvalidInterval',
    'OverlapError',
    'ComplianceValidatorService',
    'CycleTrackerService',
    'SplitSleeperPolicy',
    'SplitSleeperService',
    'RestBreakPlannerService',
]
