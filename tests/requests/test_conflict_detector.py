from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timezone

from src.hr_schedule.hr_schedule.common.periods import DateRange, TimeInterval
from src.hr_schedule.hr_schedule.core.enums import ConflictReason, RequestStatus
from src.hr_schedule.hr_schedule.holidays.model import PublicHoliday
from src.hr_schedule.hr_schedule.holidays.service import HolidayCalendar
from src.hr_schedule.hr_schedule.requests.conflicts import ConflictDetector, EmployeeSnapshot
from src.hr_schedule.hr_schedule.requests.model import LeaveRequest, OvertimeDeclaration
from src.hr_schedule.hr_schedule.schedules.model import EmployeeTimetable, WorkSchedule

EMPLOYEE = 42
OFFICE = TimeInterval(time(9, 0), time(17, 0))
AS_OF = date(2024, 6, 20)


def _timetable() -> EmployeeTimetable:
    schedule = WorkSchedule(
        schedule_id=1,
        employee_id=EMPLOYEE,
        effective_from=date(2024, 1, 1),
        weekly_pattern={weekday: OFFICE for weekday in range(5)},
    )
    return EmployeeTimetable(employee_id=EMPLOYEE, schedules=(schedule,))


def _calendar() -> HolidayCalendar:
    return HolidayCalendar(
        [PublicHoliday(holiday_id=1, date_range=DateRange.single(date(2024, 7, 4)), label="Independence Day")]
    )


def _snapshot(leaves=(), overtime=()) -> EmployeeSnapshot:
    return EmployeeSnapshot(
        employee_id=EMPLOYEE,
        timetable=_timetable(),
        calendar=_calendar(),
        leaves=tuple(leaves),
        overtime=tuple(overtime),
    )


def _leave(request_id, start, end, status=RequestStatus.PENDING, minute=0) -> LeaveRequest:
    return LeaveRequest(
        request_id=request_id,
        employee_id=EMPLOYEE,
        date_range=DateRange(start, end),
        reason="Trip",
        status=status,
        created_at=datetime(2024, 6, 20, 9, minute, tzinfo=timezone.utc),
        requested_by=EMPLOYEE,
    )


def _overtime(request_id, work_date, start, end, status=RequestStatus.PENDING, minute=0) -> OvertimeDeclaration:
    return OvertimeDeclaration(
        request_id=request_id,
        employee_id=EMPLOYEE,
        work_date=work_date,
        interval=TimeInterval(start, end),
        reason="Release",
        status=status,
        created_at=datetime(2024, 6, 20, 9, minute, tzinfo=timezone.utc),
        requested_by=EMPLOYEE,
    )


# Leave


def test_leave_with_inverted_range_is_rejected():
    check = ConflictDetector().validate_leave(_snapshot(), DateRange(date(2024, 7, 5), date(2024, 7, 1)), AS_OF)
    assert not check.ok
    assert check.reason == ConflictReason.INVERTED_RANGE


def test_retroactive_leave_needs_backfill_flag():
    detector = ConflictDetector()
    past = DateRange(date(2024, 6, 17), date(2024, 6, 18))

    check = detector.validate_leave(_snapshot(), past, AS_OF)
    assert check.reason == ConflictReason.RETROACTIVE

    assert detector.validate_leave(_snapshot(), past, AS_OF, backfill=True).ok


def test_leave_starting_today_is_not_retroactive():
    check = ConflictDetector().validate_leave(_snapshot(), DateRange.single(AS_OF), AS_OF)
    assert check.ok


def test_leave_overlapping_active_leave_on_boundary_day_conflicts():
    existing = _leave(1, date(2024, 7, 1), date(2024, 7, 3), status=RequestStatus.APPROVED)

    check = ConflictDetector().validate_leave(
        _snapshot(leaves=[existing]), DateRange(date(2024, 7, 3), date(2024, 7, 5)), AS_OF
    )

    assert check.reason == ConflictReason.OVERLAPPING_LEAVE


def test_pending_leave_also_blocks_overlapping_submission():
    existing = _leave(1, date(2024, 7, 1), date(2024, 7, 5))
    check = ConflictDetector().validate_leave(_snapshot(leaves=[existing]), DateRange.single(date(2024, 7, 2)), AS_OF)
    assert check.reason == ConflictReason.OVERLAPPING_LEAVE


def test_rejected_and_cancelled_leave_do_not_block():
    leaves = [
        _leave(1, date(2024, 7, 1), date(2024, 7, 5), status=RequestStatus.REJECTED),
        _leave(2, date(2024, 7, 1), date(2024, 7, 5), status=RequestStatus.CANCELLED),
    ]
    check = ConflictDetector().validate_leave(_snapshot(leaves=leaves), DateRange.single(date(2024, 7, 2)), AS_OF)
    assert check.ok


def test_leave_on_rest_days_and_holidays_is_allowed():
    detector = ConflictDetector()

    weekend = detector.validate_leave(_snapshot(), DateRange(date(2024, 7, 6), date(2024, 7, 7)), AS_OF)
    holiday = detector.validate_leave(_snapshot(), DateRange.single(date(2024, 7, 4)), AS_OF)

    assert weekend.ok
    assert holiday.ok


def test_recheck_leave_on_rest_days_passes():
    weekend = _leave(1, date(2024, 7, 6), date(2024, 7, 7))
    assert ConflictDetector().recheck_leave(_snapshot(leaves=[weekend]), weekend).ok


def test_recheck_leave_supersedes_later_pending_request():
    earlier = _leave(1, date(2024, 7, 1), date(2024, 7, 5), minute=0)
    later = _leave(2, date(2024, 7, 3), date(2024, 7, 3), minute=5)
    detector = ConflictDetector()
    snapshot = _snapshot(leaves=[earlier, later])

    assert detector.recheck_leave(snapshot, later).reason == ConflictReason.SUPERSEDED
    assert detector.recheck_leave(snapshot, earlier).ok


def test_recheck_leave_fails_against_approved_sibling():
    approved = _leave(1, date(2024, 7, 1), date(2024, 7, 5), status=RequestStatus.APPROVED, minute=5)
    pending = _leave(2, date(2024, 7, 2), date(2024, 7, 2), minute=0)

    check = ConflictDetector().recheck_leave(_snapshot(leaves=[approved, pending]), pending)

    assert check.reason == ConflictReason.OVERLAPPING_LEAVE


# Overtime


def test_overtime_inside_regular_hours_is_rejected():
    detector = ConflictDetector()
    snapshot = _snapshot()

    inside = detector.validate_overtime(snapshot, date(2024, 7, 3), TimeInterval(time(10, 0), time(11, 0)), AS_OF)
    straddling = detector.validate_overtime(snapshot, date(2024, 7, 3), TimeInterval(time(16, 0), time(18, 0)), AS_OF)

    assert inside.reason == ConflictReason.INSIDE_WORKING_HOURS
    assert straddling.reason == ConflictReason.INSIDE_WORKING_HOURS


def test_overtime_right_after_regular_hours_is_allowed():
    check = ConflictDetector().validate_overtime(
        _snapshot(), date(2024, 7, 3), TimeInterval(time(17, 0), time(19, 0)), AS_OF
    )
    assert check.ok


def test_overtime_with_inverted_interval_is_rejected():
    check = ConflictDetector().validate_overtime(
        _snapshot(), date(2024, 7, 3), TimeInterval(time(20, 0), time(18, 0)), AS_OF
    )
    assert check.reason == ConflictReason.INVERTED_RANGE


def test_non_working_day_requires_holiday_overtime_flag():
    detector = ConflictDetector()
    daytime = TimeInterval(time(10, 0), time(12, 0))

    saturday = detector.validate_overtime(_snapshot(), date(2024, 7, 6), daytime, AS_OF)
    assert saturday.reason == ConflictReason.NON_WORKING_DAY

    assert detector.validate_overtime(_snapshot(), date(2024, 7, 6), daytime, AS_OF, holiday_overtime=True).ok
    assert detector.validate_overtime(_snapshot(), date(2024, 7, 4), daytime, AS_OF, holiday_overtime=True).ok


def test_retroactive_overtime_needs_backfill_flag():
    detector = ConflictDetector()
    evening = TimeInterval(time(18, 0), time(19, 0))

    assert detector.validate_overtime(_snapshot(), date(2024, 6, 19), evening, AS_OF).reason == ConflictReason.RETROACTIVE
    assert detector.validate_overtime(_snapshot(), date(2024, 6, 19), evening, AS_OF, backfill=True).ok


def test_overtime_overlapping_approved_declaration_conflicts():
    approved = _overtime(1, date(2024, 7, 3), time(17, 0), time(19, 0), status=RequestStatus.APPROVED)

    check = ConflictDetector().validate_overtime(
        _snapshot(overtime=[approved]), date(2024, 7, 3), TimeInterval(time(18, 0), time(20, 0)), AS_OF
    )

    assert check.reason == ConflictReason.OVERLAPPING_OVERTIME


def test_overlapping_pending_overtime_may_coexist_at_submission():
    pending = _overtime(1, date(2024, 7, 3), time(17, 0), time(19, 0))

    check = ConflictDetector().validate_overtime(
        _snapshot(overtime=[pending]), date(2024, 7, 3), TimeInterval(time(18, 0), time(19, 0)), AS_OF
    )

    assert check.ok


def test_daily_cap_counts_pending_and_approved_minutes():
    existing = [
        _overtime(1, date(2024, 7, 3), time(6, 0), time(8, 0), status=RequestStatus.APPROVED),
        _overtime(2, date(2024, 7, 3), time(17, 0), time(19, 0)),
        _overtime(3, date(2024, 7, 3), time(19, 0), time(23, 0), status=RequestStatus.REJECTED),
    ]
    detector = ConflictDetector(daily_overtime_cap_minutes=240)

    over = detector.validate_overtime(
        _snapshot(overtime=existing), date(2024, 7, 3), TimeInterval(time(19, 0), time(20, 0)), AS_OF
    )
    assert over.reason == ConflictReason.DAILY_CAP_EXCEEDED

    other_day = detector.validate_overtime(
        _snapshot(overtime=existing), date(2024, 7, 2), TimeInterval(time(19, 0), time(20, 0)), AS_OF
    )
    assert other_day.ok


def test_recheck_overtime_cap_counts_only_approved():
    approved = _overtime(1, date(2024, 7, 3), time(6, 0), time(8, 0), status=RequestStatus.APPROVED, minute=0)
    other_pending = _overtime(2, date(2024, 7, 3), time(17, 0), time(19, 0), minute=1)
    candidate = _overtime(3, date(2024, 7, 3), time(19, 0), time(21, 0), minute=2)

    check = ConflictDetector(daily_overtime_cap_minutes=240).recheck_overtime(
        _snapshot(overtime=[approved, other_pending, candidate]), candidate
    )

    assert check.ok



def test_recheck_overtime_cap_uses_granted_minutes():
    approved = replace(
        _overtime(1, date(2024, 7, 3), time(6, 0), time(9, 0), status=RequestStatus.APPROVED), approved_minutes=60
    )
    candidate = _overtime(2, date(2024, 7, 3), time(17, 0), time(21, 0), minute=1)
    detector = ConflictDetector(daily_overtime_cap_minutes=240)
    snapshot = _snapshot(overtime=[approved, candidate])

    # 60 + 240 declared is over the cap; granting 180 of them fits.
    assert detector.recheck_overtime(snapshot, candidate).reason == ConflictReason.DAILY_CAP_EXCEEDED
    assert detector.recheck_overtime(snapshot, candidate, approved_minutes=180).ok

def test_recheck_overtime_supersedes_later_overlapping_pending():
    first = _overtime(1, date(2024, 7, 3), time(17, 0), time(19, 0), minute=0)
    second = _overtime(2, date(2024, 7, 3), time(18, 0), time(20, 0), minute=1)
    detector = ConflictDetector()
    snapshot = _snapshot(overtime=[first, second])

    assert detector.recheck_overtime(snapshot, second).reason == ConflictReason.SUPERSEDED
    assert detector.recheck_overtime(snapshot, first).ok
