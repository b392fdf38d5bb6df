from datetime import datetime, timedelta, timezone

import factory
import pytest
from factory.faker import Faker
from rest_framework.test import APIClient

from hos_compliance.models import DutyInterval, DutyLog, DutyStatus, HosLimits
from hos_compliance.services import HOSCalculatorService

DAY_START = datetime(2024, 1, 15, tzinfo=timezone.utc)


def instant(hours, minutes=0):
    """Instant relative to midnight UTC on the first log day."""
    return DAY_START + timedelta(hours=hours, minutes=minutes)


class DutyIntervalFactory(factory.Factory):
    class Meta:
        model = DutyInterval

    status = DutyStatus.DRIVING
    start_time = factory.LazyFunction(lambda: DAY_START)
    end_time = factory.LazyAttribute(lambda o: o.start_time + timedelta(hours=2))
    location = Faker("city")
    remarks = ""


class DutyLogFactory(factory.Factory):
    class Meta:
        model = DutyLog

    intervals = factory.LazyFunction(tuple)
    driver_name = Faker("name")


@pytest.fixture
def duty_interval_factory():
    return DutyIntervalFactory


@pytest.fixture
def duty_log():
    """
    Build a contiguous log from (status, hours) pairs.

    Statuses may be DutyStatus members or ELD codes ("OFF", "SB", "D", "ON").
    """

    def make_log(*entries, start=DAY_START):
        intervals = []
        current = start
        for code, hours in entries:
            end = current + timedelta(hours=hours)
            intervals.append(
                DutyIntervalFactory(
                    status=DutyStatus.from_code(code), start_time=current, end_time=end
                )
            )
            current = end
        return DutyLogFactory(intervals=tuple(intervals))

    return make_log


@pytest.fixture
def limits():
    return HosLimits.property_carrying()


@pytest.fixture
def calculator():
    return HOSCalculatorService()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def at():
    return instant
