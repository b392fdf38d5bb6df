from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from hos_compliance.models import (
    DutyInterval,
    DutyLog,
    DutyStatus,
    HosLimits,
    HosStatus,
    ViolationType,
)
from hos_compliance.services import HOSCalculatorService


def of_type(violations, violation_type):
    return [v for v in violations if v.type == violation_type]


class TestComputeStatus:
    @pytest.mark.parametrize("off_hours", [10, 12, 30])
    def test_long_off_duty_resets_everything(self, calculator, duty_log, at, off_hours):
        log = duty_log(("OFF", off_hours))
        status = calculator.compute_status(log, at(off_hours))

        assert status.driving_hours_today == 0
        assert status.on_duty_hours_today == 0
        assert status.hours_in_current_window == 0
        assert status.hours_since_last_break == 0
        assert status.window_start is None

    def test_scenario_eight_hours_driving(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 8))
        status, calculation = calculator.calculate(log, at(18))

        assert status.driving_hours_today == 8
        assert status.on_duty_hours_today == 8
        assert status.hours_in_current_window == 8
        assert status.reset_boundary == at(10)
        assert status.window_start == at(10)
        assert calculation.available_driving_hours == 3
        assert calculation.available_window_hours == 6
        assert calculation.cycle_hours_remaining == 62
        assert calculation.violations == ()

    def test_last_rest_period_precedes_window(self, calculator, duty_log, at):
        log = duty_log(("OFF", 4), ("SB", 6), ("D", 8))
        status = calculator.compute_status(log, at(18))

        rest = status.last_rest_period
        assert (rest.start_time, rest.end_time) == (at(0), at(10))
        assert rest.duration == 10
        assert rest.type == DutyStatus.OFF_DUTY.value

    def test_break_resets_hours_since_last_break(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 8), ("SB", 0.5), ("ON", 0.5))
        status, calculation = calculator.calculate(log, at(19))

        assert status.hours_since_last_break == Decimal("0.5")
        assert status.last_break_end == at(18, 30)
        assert status.driving_hours_today == 8
        assert status.hours_in_current_window == 9
        assert of_type(calculation.violations, ViolationType.BREAK_REQUIRED) == []

    def test_short_rest_does_not_count_as_break(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 4), ("OFF", 0.25), ("D", 2))
        status = calculator.compute_status(log, at(16, 15))

        assert status.hours_since_last_break == 6
        assert status.last_break_end is None

    def test_as_of_inside_interval_counts_partial_time(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 8))
        status = calculator.compute_status(log, at(12, 30))

        assert status.driving_hours_today == Decimal("2.5")
        assert status.hours_in_current_window == Decimal("2.5")

    def test_status_is_idempotent(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 5), ("ON", 1), ("OFF", 1), ("D", 3))
        assert calculator.compute_status(log, at(20)) == calculator.compute_status(log, at(20))

    def test_appending_driving_adds_its_duration(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 2), ("ON", 1))
        before = calculator.compute_status(log, at(13))

        extended = log.append(
            DutyInterval(status=DutyStatus.DRIVING, start_time=at(13), end_time=at(15))
        )
        after = calculator.compute_status(extended, at(15))

        assert after.driving_hours_today - before.driving_hours_today == 2
        assert after.hours_since_last_break - before.hours_since_last_break == 2
        assert len(log) == 3

    def test_as_of_before_log_gives_fresh_driver(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 8))
        status = calculator.compute_status(log, at(-2))

        assert status.driving_hours_today == 0
        assert status.current_cycle_hours == 0
        assert status.reset_boundary is None
        assert len(status.cycle_hours_last_8_days) == 8

    def test_empty_log_gives_fresh_driver(self, calculator, at):
        status, calculation = calculator.calculate(DutyLog(), at(8))

        assert status.driving_hours_today == 0
        assert calculation.available_driving_hours == 11
        assert calculation.available_window_hours == 14
        assert calculation.cycle_hours_remaining == 70
        assert calculation.can_drive is True

    def test_log_without_reset_counts_from_log_start(self, calculator, duty_log, at):
        log = duty_log(("ON", 1), ("D", 3))
        status = calculator.compute_status(log, at(4))

        assert status.reset_boundary == at(0)
        assert status.driving_hours_today == 3
        assert status.on_duty_hours_today == 4
        assert status.hours_in_current_window == 4

    def test_cycle_days_are_oldest_first(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 8), ("OFF", 16), ("ON", 2))
        status = calculator.compute_status(log, at(36))

        days = status.cycle_hours_last_8_days
        assert len(days) == 8
        assert days[-1].date == at(36).date()
        assert days[-2].total_hours == 8
        assert days[-2].driving_hours == 8
        assert days[-1].on_duty_hours == 2
        assert days[-1].remaining_hours == 60
        assert status.current_cycle_hours == 10


class TestComputeAvailability:
    def test_driving_limit_reached(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 11))
        status, calculation = calculator.calculate(log, at(21))

        assert status.driving_hours_today == 11
        assert calculation.available_driving_hours == 0
        assert calculation.can_drive is False
        driving = of_type(calculation.violations, ViolationType.DRIVING_LIMIT)
        assert len(driving) == 1
        assert driving[0].timestamp == at(21)

    @pytest.mark.parametrize("driving_hours", [1, 6, 11, 12, 15])
    def test_available_driving_never_exceeds_cap(self, calculator, duty_log, at, driving_hours):
        log = duty_log(("OFF", 10), ("D", driving_hours))
        status, calculation = calculator.calculate(log, at(10 + driving_hours))

        assert calculation.available_driving_hours >= 0
        assert (
            calculation.available_driving_hours + min(status.driving_hours_today, 11) <= 11
        )

    def test_window_caps_available_driving(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("ON", 6), ("OFF", 1), ("D", 5))
        status, calculation = calculator.calculate(log, at(22))

        assert status.hours_in_current_window == 12
        assert calculation.available_window_hours == 2
        assert calculation.available_driving_hours == 2

    def test_next_break_time_projects_from_as_of(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 5))
        calculation = calculator.calculate(log, at(15))[1]

        assert calculation.next_break_time == at(18)
        assert calculation.next_rest_time == at(21)

    def test_next_break_time_is_as_of_when_break_due(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 8))
        calculation = calculator.calculate(log, at(18))[1]

        assert calculation.next_break_time == at(18)
        assert calculation.can_drive is False

    def test_next_break_time_is_none_when_limit_comes_first(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 7), ("OFF", 0.5), ("D", 2))
        calculation = calculator.calculate(log, at(19, 30))[1]

        assert calculation.available_driving_hours == 2
        assert calculation.next_break_time is None
        assert calculation.next_rest_time == at(21, 30)

    def test_personal_conveyance_blocked_after_window_violation(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("ON", 10), ("OFF", 1), ("D", 4))
        status, calculation = calculator.calculate(log, at(25))

        window = of_type(calculation.violations, ViolationType.WINDOW_LIMIT)
        assert [v.timestamp for v in window] == [at(24)]
        assert calculation.available_window_hours == 0
        assert calculation.personal_conveyance_available is False

    def test_personal_conveyance_restored_by_reset(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 12), ("OFF", 10))
        calculation = calculator.calculate(log, at(32))[1]

        assert of_type(calculation.violations, ViolationType.DRIVING_LIMIT)
        assert calculation.personal_conveyance_available is True
        assert calculation.available_driving_hours == 11

    def test_custom_limits_are_respected(self, duty_log, at):
        calculator = HOSCalculatorService(limits=HosLimits(driving_limit=Decimal("10")))
        log = duty_log(("OFF", 10), ("D", 4))
        calculation = calculator.calculate(log, at(14))[1]

        assert calculation.available_driving_hours == 6

    def test_availability_uses_given_status(self, calculator, duty_log, at):
        log = duty_log(("OFF", 10), ("D", 3))
        status = calculator.compute_status(log, at(13))
        calculation = calculator.compute_availability(status, None, log, at(13))

        assert calculation.available_driving_hours == 8
        assert calculation.as_of == at(13)


class TestCycleRestart:
    def test_restart_ignored_by_default(self, calculator, duty_log, at):
        log = duty_log(("ON", 10), ("OFF", 34), ("D", 2))
        status = calculator.compute_status(log, at(46))

        assert status.current_cycle_hours == 12

    def test_restart_clears_cycle_when_enabled(self, duty_log, at):
        calculator = HOSCalculatorService(limits=HosLimits(apply_cycle_restart=True))
        log = duty_log(("ON", 10), ("OFF", 34), ("D", 2))
        status = calculator.compute_status(log, at(46))

        assert status.current_cycle_hours == 2
        assert status.cycle_hours_last_8_days[-2].total_hours == 0


def test_calculator_accepts_home_timezone(duty_log, at):
    calculator = HOSCalculatorService(home_timezone=ZoneInfo("America/Chicago"))
    log = duty_log(("OFF", 10), ("D", 8))
    status = calculator.compute_status(log, at(18))

    # 10:00-18:00 UTC is 04:00-12:00 in Chicago, all on 2024-01-15
    assert status.cycle_hours_last_8_days[-1].date == at(18).date()
    assert status.cycle_hours_last_8_days[-1].driving_hours == 8


def test_availability_does_not_revalidate_log(calculator, duty_interval_factory, at):
    log = DutyLog(
        intervals=(
            duty_interval_factory(status=DutyStatus.OFF_DUTY, start_time=at(0), end_time=at(10)),
            duty_interval_factory(status=DutyStatus.DRIVING, start_time=at(11), end_time=at(13)),
        )
    )
    status = HosStatus(driving_hours_today=Decimal("2"), as_of=at(13))
    calculation = calculator.compute_availability(status, None, log, at(13))

    assert calculation.available_driving_hours == 9
