from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Mapping, Optional, Sequence

from ..common.periods import DateRange, TimeInterval

if TYPE_CHECKING:
    from ..holidays.service import HolidayCalendar

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class WorkSchedule:
    """Recurring weekly pattern for one employee.

    ``weekly_pattern`` maps ``date.weekday()`` (0 = Monday) to the working
    interval of that day; a missing key or ``None`` means a rest day.
    ``effective_to`` of ``None`` is open-ended.
    """

    schedule_id: Optional[int]
    employee_id: int
    effective_from: date
    weekly_pattern: Mapping[int, Optional[TimeInterval]] = field(default_factory=dict)
    effective_to: Optional[date] = None
    name: str = ""

    @property
    def effective_range(self) -> DateRange:
        return DateRange(self.effective_from, self.effective_to or date.max)

    def is_effective_on(self, day: date) -> bool:
        return self.effective_range.contains(day)

    def overlaps(self, other: "WorkSchedule") -> bool:
        return self.employee_id == other.employee_id and self.effective_range.overlaps(other.effective_range)

    def interval_for_weekday(self, weekday: int) -> Optional[TimeInterval]:
        return self.weekly_pattern.get(int(weekday))

    def to_dict(self) -> dict:
        pattern: dict[str, Optional[str]] = {}
        for weekday, day_name in enumerate(WEEKDAY_NAMES):
            interval = self.weekly_pattern.get(weekday)
            pattern[day_name] = interval.label() if interval else None

        return {
            "schedule_id": self.schedule_id,
            "employee_id": self.employee_id,
            "name": self.name,
            "effective_from": self.effective_from.isoformat(),
            "effective_to": self.effective_to.isoformat() if self.effective_to else None,
            "weekly_pattern": pattern,
        }


@dataclass(frozen=True)
class EmployeeTimetable:
    """All schedules of one employee, loaded once per evaluation."""

    employee_id: int
    schedules: Sequence[WorkSchedule] = ()

    def active_on(self, day: date) -> Optional[WorkSchedule]:
        matches = [s for s in self.schedules if s.is_effective_on(day)]
        if not matches:
            return None
        # Writes forbid overlap; a legacy overlap resolves to the latest start.
        matches.sort(key=lambda s: (s.effective_from, s.schedule_id or 0), reverse=True)
        return matches[0]

    def regular_interval(self, day: date) -> Optional[TimeInterval]:
        schedule = self.active_on(day)
        if schedule is None:
            return None
        interval = schedule.interval_for_weekday(day.weekday())
        if interval is None or interval.is_empty:
            return None
        return interval

    def is_working_day(self, day: date, calendar: "HolidayCalendar") -> bool:
        return self.regular_interval(day) is not None and not calendar.is_holiday(day)

    def leave_days_in(self, date_range: DateRange, calendar: "HolidayCalendar") -> list[date]:
        """Days a leave over ``date_range`` actually takes off.

        Scheduled working days count; a day with no schedule in force counts
        unless it is a public holiday.
        """
        holidays = calendar.holiday_days_in(date_range)
        out: list[date] = []
        for day in date_range.days():
            if day in holidays:
                continue
            if self.active_on(day) is None or self.regular_interval(day) is not None:
                out.append(day)
        return out
