from datetime import timedelta
from zoneinfo import ZoneInfo

from hos_compliance.services import CycleTrackerService
from hos_compliance.services.duty_timeline import DutyTimeline


def test_cycle_window_spans_eight_calendar_days(limits, at):
    tracker = CycleTrackerService()
    assert tracker.cycle_start(at(36), limits) == at(-6 * 24)


def test_cycle_used_drops_days_outside_window(limits, duty_log, at):
    log = duty_log(("ON", 10), ("OFF", 8 * 24 - 10), ("D", 2))
    as_of = at(8 * 24 + 2)
    timeline = DutyTimeline(log.intervals, as_of)

    used = CycleTrackerService().cycle_used(timeline, limits, as_of)

    assert used == timedelta(hours=2)


def test_cycle_days_remaining_is_running_total(limits, duty_log, at):
    entries = []
    for _ in range(3):
        entries.extend([("ON", 4), ("D", 8), ("OFF", 12)])
    log = duty_log(*entries)
    as_of = at(3 * 24)
    timeline = DutyTimeline(log.intervals, as_of)

    days = CycleTrackerService().cycle_days(timeline, limits, as_of)

    assert [day.total_hours for day in days[-4:-1]] == [12, 12, 12]
    assert [day.remaining_hours for day in days[-4:-1]] == [58, 46, 34]
    assert days[-1].total_hours == 0
    assert days[-1].date == as_of.date()


def test_day_pieces_split_at_local_midnight(at):
    tracker = CycleTrackerService(ZoneInfo("America/New_York"))
    # local midnight on 2024-01-16 is 05:00 UTC
    pieces = list(tracker.day_pieces(at(22), at(31)))

    assert pieces == [(at(22), at(29)), (at(29), at(31))]


def test_home_timezone_moves_day_boundaries(limits, duty_log, at):
    log = duty_log(("OFF", 22), ("D", 4))
    as_of = at(26)
    timeline = DutyTimeline(log.intervals, as_of)

    utc_days = CycleTrackerService().cycle_days(timeline, limits, as_of)
    tokyo_days = CycleTrackerService(ZoneInfo("Asia/Tokyo")).cycle_days(timeline, limits, as_of)

    assert [d.driving_hours for d in utc_days[-2:]] == [2, 2]
    # 22:00-02:00 UTC is 07:00-11:00 on 2024-01-16 in Tokyo
    assert [d.driving_hours for d in tokyo_days[-2:]] == [0, 4]
