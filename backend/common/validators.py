"""
Common validators and utilities for the HOS compliance service.

This module contains shared validation logic and duration helpers used
by the engine, the serializers and the API layer.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.core.validators import BaseValidator

SECONDS_PER_HOUR = Decimal("3600")


class HoursValidator(BaseValidator):
    """
    Validator for hours values in HOS context.

    Ensures hours are positive and within reasonable limits.
    """

    def __init__(self, max_hours=24, allow_decimal=True):
        self.limit_value = max_hours
        self.allow_decimal = allow_decimal
        self.message = f"Hours must be between 0 and {max_hours}."

    def compare(self, value, limit_value):
        try:
            hours = float(value)
            return not (0 < hours <= limit_value)
        except (ValueError, TypeError):
            return True

    def clean(self, value):
        if self.allow_decimal:
            return Decimal(str(value))
        else:
            return int(value)


def validate_limit_hours(value):
    """Validate a daily HOS limit (1 minute to 24 hours)."""
    validator = HoursValidator(max_hours=24)
    validator(value)


def validate_cycle_hours(value):
    """Validate cycle hours (at most 8 days of clock time)."""
    validator = HoursValidator(max_hours=192)
    validator(value)


def validate_aware_datetime(value):
    """Reject naive datetimes; every duty timestamp is an absolute instant."""
    if not isinstance(value, datetime):
        raise ValidationError(f"Expected a datetime, got {type(value).__name__}.")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"Timestamp {value.isoformat()} has no timezone.")


def hours_from_timedelta(delta: timedelta) -> Decimal:
    """Convert a timedelta to Decimal hours without float rounding."""
    seconds = Decimal(delta.days * 86400 + delta.seconds) + (
        Decimal(delta.microseconds) / Decimal("1000000")
    )
    return seconds / SECONDS_PER_HOUR


def timedelta_from_hours(hours: Decimal) -> timedelta:
    """Convert Decimal hours back to a timedelta, rounded to the second."""
    seconds = (Decimal(hours) * SECONDS_PER_HOUR).to_integral_value()
    return timedelta(seconds=int(seconds))


def round_hours(hours, places=2):
    """Round Decimal hours for display."""
    return Decimal(hours).quantize(Decimal(1).scaleb(-places))


def format_duration_for_eld(hours):
    """
    Format a duration given in hours as HH:MM for log remarks.

    ELD regulations require time to be recorded in 15-minute increments.
    """
    minutes = int((Decimal(hours) * 60).to_integral_value())
    # Round to nearest 15 minutes
    rounded_minutes = round(minutes / 15) * 15

    hours_part = rounded_minutes // 60
    mins = rounded_minutes % 60

    return f"{hours_part:02d}:{mins:02d}"
