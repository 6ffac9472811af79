from __future__ import annotations

import threading
from datetime import date, time

import pytest

from src.hr_schedule.hr_schedule.common.periods import DateRange, TimeInterval
from src.hr_schedule.hr_schedule.core.enums import ConflictReason
from src.hr_schedule.hr_schedule.core.exceptions import NotFoundError, ScheduleConflictError, ValidationError
from src.hr_schedule.hr_schedule.database.memory import InMemoryScheduleRepository
from src.hr_schedule.hr_schedule.holidays.model import PublicHoliday
from src.hr_schedule.hr_schedule.holidays.service import HolidayCalendar
from src.hr_schedule.hr_schedule.locking.keyed_lock import KeyedLock
from src.hr_schedule.hr_schedule.schedules.service import ScheduleStore

OFFICE = TimeInterval(time(9, 0), time(17, 0))
WEEKDAYS = {weekday: OFFICE for weekday in range(5)}


def _store() -> ScheduleStore:
    return ScheduleStore(InMemoryScheduleRepository(), KeyedLock(default_timeout=1.0))


def test_adjacent_schedules_are_allowed():
    store = _store()
    store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, 1, 1), effective_to=date(2024, 6, 30))
    store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, 7, 1))

    assert store.active_schedule_for(1, date(2024, 6, 30)).effective_to == date(2024, 6, 30)
    assert store.active_schedule_for(1, date(2024, 7, 1)).effective_from == date(2024, 7, 1)


def test_overlapping_schedule_is_rejected_and_not_saved():
    repo = InMemoryScheduleRepository()
    store = ScheduleStore(repo, KeyedLock(default_timeout=1.0))
    store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, 1, 1), effective_to=date(2024, 6, 30))

    with pytest.raises(ScheduleConflictError) as exc:
        store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, 6, 30))

    assert exc.value.reason == ConflictReason.SCHEDULE_OVERLAP
    assert len(repo.load_schedules(employee_id=1)) == 1


def test_open_ended_schedule_blocks_later_ones():
    store = _store()
    store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, 1, 1))

    with pytest.raises(ScheduleConflictError):
        store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2030, 1, 1))


def test_schedules_of_different_employees_do_not_conflict():
    store = _store()
    store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, 1, 1))
    store.add_schedule(employee_id=2, weekly_pattern=WEEKDAYS, effective_from=date(2024, 1, 1))

    assert store.active_schedule_for(2, date(2024, 3, 1)).employee_id == 2


def test_no_active_schedule_is_not_found():
    store = _store()
    store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, 1, 1), effective_to=date(2024, 1, 31))

    with pytest.raises(NotFoundError):
        store.active_schedule_for(1, date(2024, 2, 1))
    with pytest.raises(NotFoundError):
        store.active_schedule_for(99, date(2024, 1, 15))


def test_invalid_schedule_input():
    store = _store()
    with pytest.raises(ValidationError):
        store.add_schedule(
            employee_id=1,
            weekly_pattern=WEEKDAYS,
            effective_from=date(2024, 2, 1),
            effective_to=date(2024, 1, 1),
        )
    with pytest.raises(ValidationError):
        store.add_schedule(
            employee_id=1,
            weekly_pattern={0: TimeInterval(time(17, 0), time(9, 0))},
            effective_from=date(2024, 1, 1),
        )
    with pytest.raises(ValidationError):
        store.add_schedule(employee_id=1, weekly_pattern={7: OFFICE}, effective_from=date(2024, 1, 1))


def test_working_day_excludes_rest_days_and_holidays():
    store = _store()
    store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, 1, 1))
    calendar = HolidayCalendar(
        [PublicHoliday(holiday_id=1, date_range=DateRange.single(date(2024, 7, 4)), label="Independence")]
    )

    assert store.is_working_day(1, date(2024, 7, 3), calendar)  # Wednesday
    assert not store.is_working_day(1, date(2024, 7, 4), calendar)  # holiday
    assert not store.is_working_day(1, date(2024, 7, 6), calendar)  # Saturday
    assert not store.is_working_day(1, date(2023, 12, 29), calendar)  # before any schedule


def test_leave_days_skip_rest_days_but_count_unscheduled_days():
    store = _store()
    store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, 1, 1))
    calendar = HolidayCalendar(
        [PublicHoliday(holiday_id=1, date_range=DateRange.single(date(2024, 7, 4)), label="Independence")]
    )

    scheduled = store.timetable_for(1).leave_days_in(DateRange(date(2024, 7, 1), date(2024, 7, 7)), calendar)
    unscheduled = store.timetable_for(2).leave_days_in(DateRange(date(2024, 7, 1), date(2024, 7, 7)), calendar)

    assert scheduled == [date(2024, 7, 1), date(2024, 7, 2), date(2024, 7, 3), date(2024, 7, 5)]
    assert len(unscheduled) == 6  # every day but the holiday


def test_concurrent_overlapping_adds_store_exactly_one():
    repo = InMemoryScheduleRepository()
    store = ScheduleStore(repo, KeyedLock(default_timeout=5.0))
    barrier = threading.Barrier(4)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def add(start_month: int):
        barrier.wait()
        try:
            store.add_schedule(employee_id=1, weekly_pattern=WEEKDAYS, effective_from=date(2024, start_month, 1))
            result = "ok"
        except ScheduleConflictError:
            result = "conflict"
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=add, args=(m,)) for m in (1, 2, 3, 4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["conflict", "conflict", "conflict", "ok"]
    assert len(repo.load_schedules(employee_id=1)) == 1
