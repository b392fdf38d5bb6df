from datetime import datetime

import pytest

from hos_compliance.models import DutyLog, DutyStatus
from hos_compliance.services import (
    DutyLogValidatorService,
    DutyLogValidationError,
    GapError,
    GapPolicy,
    HOSCalculatorService,
    InvalidInterval,
    OverlapError,
)


def test_contiguous_log_is_returned_unchanged(duty_log):
    log = duty_log(("OFF", 10), ("D", 8))
    assert DutyLogValidatorService().validate(log) == log.intervals


def test_empty_log_is_valid():
    assert DutyLogValidatorService().validate(DutyLog()) == ()


def test_gap_is_rejected_by_default(duty_interval_factory, at):
    log = DutyLog(
        intervals=(
            duty_interval_factory(status=DutyStatus.OFF_DUTY, start_time=at(0), end_time=at(6)),
            duty_interval_factory(status=DutyStatus.DRIVING, start_time=at(10), end_time=at(12)),
        )
    )
    with pytest.raises(GapError) as exc_info:
        DutyLogValidatorService().validate(log)
    assert exc_info.value.interval_index == 1
    assert "240 minutes" in str(exc_info.value)


def test_gap_is_filled_with_assumed_off_duty(duty_interval_factory, at):
    log = DutyLog(
        intervals=(
            duty_interval_factory(status=DutyStatus.OFF_DUTY, start_time=at(0), end_time=at(6)),
            duty_interval_factory(status=DutyStatus.DRIVING, start_time=at(10), end_time=at(12)),
        )
    )
    intervals = DutyLogValidatorService(GapPolicy.SYNTHESIZE_OFF_DUTY).validate(log)

    assert len(intervals) == 3
    filler = intervals[1]
    assert filler.status == DutyStatus.OFF_DUTY
    assert (filler.start_time, filler.end_time) == (at(6), at(10))
    assert filler.remarks == DutyLogValidatorService.ASSUMED_REMARKS
    # the caller's log is untouched
    assert len(log) == 2


def test_time_after_last_interval_is_rejected_by_default(calculator, duty_log, at):
    log = duty_log(("OFF", 10), ("D", 8))
    with pytest.raises(GapError) as exc_info:
        calculator.compute_status(log, at(30))
    assert exc_info.value.interval_index == 2
    assert "720 minutes" in str(exc_info.value)


def test_time_after_last_interval_is_filled_with_off_duty(duty_log, at):
    log = duty_log(("OFF", 10), ("D", 8))
    intervals = DutyLogValidatorService(GapPolicy.SYNTHESIZE_OFF_DUTY).validate(log, at(30))

    filler = intervals[-1]
    assert filler.status == DutyStatus.OFF_DUTY
    assert (filler.start_time, filler.end_time) == (at(18), at(30))
    assert filler.remarks == DutyLogValidatorService.ASSUMED_REMARKS


def test_off_duty_after_last_interval_resets_limits(duty_log, at):
    log = duty_log(("OFF", 10), ("D", 8))
    calculator = HOSCalculatorService(gap_policy=GapPolicy.SYNTHESIZE_OFF_DUTY)
    status, calculation = calculator.calculate(log, at(30))

    assert status.reset_boundary == at(30)
    assert status.driving_hours_today == 0
    assert status.hours_in_current_window == 0
    assert status.last_rest_period.start_time == at(18)
    assert calculation.available_driving_hours == 11


def test_synthesized_gap_counts_toward_reset(duty_interval_factory, at):
    log = DutyLog(
        intervals=(
            duty_interval_factory(status=DutyStatus.OFF_DUTY, start_time=at(0), end_time=at(6)),
            duty_interval_factory(status=DutyStatus.DRIVING, start_time=at(10), end_time=at(12)),
        )
    )
    calculator = HOSCalculatorService(gap_policy=GapPolicy.SYNTHESIZE_OFF_DUTY)
    status = calculator.compute_status(log, at(12))

    assert status.reset_boundary == at(10)
    assert status.driving_hours_today == 2


def test_overlap_is_rejected(duty_interval_factory, at):
    log = DutyLog(
        intervals=(
            duty_interval_factory(start_time=at(10), end_time=at(12)),
            duty_interval_factory(start_time=at(11), end_time=at(13)),
        )
    )
    with pytest.raises(OverlapError) as exc_info:
        DutyLogValidatorService().validate(log)
    assert exc_info.value.interval_index == 1


def test_out_of_order_intervals_are_rejected(duty_interval_factory, at):
    log = DutyLog(
        intervals=(
            duty_interval_factory(start_time=at(12), end_time=at(14)),
            duty_interval_factory(start_time=at(8), end_time=at(10)),
        )
    )
    with pytest.raises(OverlapError):
        DutyLogValidatorService().validate(log)


def test_non_positive_duration_is_rejected(duty_interval_factory, at):
    log = DutyLog(intervals=(duty_interval_factory(start_time=at(10), end_time=at(10)),))
    with pytest.raises(InvalidInterval) as exc_info:
        DutyLogValidatorService().validate(log)
    assert exc_info.value.interval_index == 0


def test_missing_timestamp_is_rejected(duty_interval_factory, at):
    log = DutyLog(intervals=(duty_interval_factory(start_time=at(10), end_time=None),))
    with pytest.raises(InvalidInterval, match="missing end_time"):
        DutyLogValidatorService().validate(log)


def test_naive_timestamp_is_rejected(duty_interval_factory):
    log = DutyLog(
        intervals=(
            duty_interval_factory(
                start_time=datetime(2024, 1, 15, 10), end_time=datetime(2024, 1, 15, 12)
            ),
        )
    )
    with pytest.raises(InvalidInterval, match="no timezone"):
        DutyLogValidatorService().validate(log)


def test_unknown_status_is_rejected(duty_interval_factory):
    log = DutyLog(intervals=(duty_interval_factory(status="resting"),))
    with pytest.raises(InvalidInterval, match="invalid duty status"):
        DutyLogValidatorService().validate(log)


@pytest.mark.parametrize(
    "status, flags",
    [
        (DutyStatus.DRIVING, {"personal_conveyance": True}),
        (DutyStatus.DRIVING, {"yard_move": True}),
    ],
)
def test_special_driving_flags_require_matching_status(duty_interval_factory, status, flags):
    log = DutyLog(intervals=(duty_interval_factory(status=status, **flags),))
    with pytest.raises(InvalidInterval):
        DutyLogValidatorService().validate(log)


def test_compute_status_raises_validation_errors(calculator, duty_interval_factory, at):
    log = DutyLog(
        intervals=(
            duty_interval_factory(start_time=at(10), end_time=at(12)),
            duty_interval_factory(start_time=at(11), end_time=at(13)),
        )
    )
    with pytest.raises(DutyLogValidationError):
        calculator.compute_status(log, at(13))


def test_invalid_gap_policy_is_rejected():
    with pytest.raises(ValueError):
        DutyLogValidatorService("ignore")
