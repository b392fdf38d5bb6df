from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from common.validators import (
    format_duration_for_eld,
    hours_from_timedelta,
    round_hours,
    timedelta_from_hours,
    validate_aware_datetime,
    validate_cycle_hours,
    validate_limit_hours,
)


def test_hours_from_timedelta_is_exact():
    assert hours_from_timedelta(timedelta(hours=2, minutes=15)) == Decimal("2.25")


def test_timedelta_from_hours_rounds_to_second():
    assert timedelta_from_hours(Decimal("0.5")) == timedelta(minutes=30)
    assert timedelta_from_hours(Decimal("11")) == timedelta(hours=11)


def test_round_hours():
    assert round_hours(Decimal(1) / 3) == Decimal("0.33")


@pytest.mark.parametrize(
    "hours, expected",
    [(Decimal("11"), "11:00"), (Decimal("0.5"), "00:30"), (Decimal("8.1"), "08:00")],
)
def test_format_duration_for_eld(hours, expected):
    assert format_duration_for_eld(hours) == expected


def test_limit_hours_must_be_positive():
    validate_limit_hours(Decimal("11"))
    with pytest.raises(ValidationError):
        validate_limit_hours(0)
    with pytest.raises(ValidationError):
        validate_limit_hours(25)


def test_cycle_hours_allow_multi_day_values():
    validate_cycle_hours(Decimal("70"))
    with pytest.raises(ValidationError):
        validate_cycle_hours(200)


def test_aware_datetime_required():
    validate_aware_datetime(datetime(2024, 1, 15, tzinfo=timezone.utc))
    with pytest.raises(ValidationError):
        validate_aware_datetime(datetime(2024, 1, 15))
    with pytest.raises(ValidationError):
        validate_aware_datetime("2024-01-15T00:00:00Z")
