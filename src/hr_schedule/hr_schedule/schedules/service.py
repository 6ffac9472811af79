from __future__ import annotations

import logging
from datetime import date
from typing import Mapping, Optional

from ..common.periods import TimeInterval
from ..core.exceptions import NotFoundError, ScheduleConflictError, ValidationError
from ..holidays.service import HolidayCalendar
from ..locking.keyed_lock import KeyedLock
from .model import EmployeeTimetable, WorkSchedule
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleStore:
    def __init__(self, schedules: ScheduleRepository, locks: KeyedLock):
        self._schedules = schedules
        self._locks = locks

    def timetable_for(self, employee_id: int) -> EmployeeTimetable:
        return EmployeeTimetable(
            employee_id=int(employee_id),
            schedules=tuple(self._schedules.load_schedules(employee_id=int(employee_id))),
        )

    def active_schedule_for(self, employee_id: int, day: date) -> WorkSchedule:
        schedule = self.timetable_for(employee_id).active_on(day)
        if schedule is None:
            raise NotFoundError(f"No active work schedule for employee {employee_id} on {day.isoformat()}")
        return schedule

    def is_working_day(self, employee_id: int, day: date, calendar: HolidayCalendar) -> bool:
        return self.timetable_for(employee_id).is_working_day(day, calendar)

    def add_schedule(
        self,
        *,
        employee_id: int,
        weekly_pattern: Mapping[int, Optional[TimeInterval]],
        effective_from: date,
        effective_to: Optional[date] = None,
        name: str = "",
        timeout: Optional[float] = None,
    ) -> WorkSchedule:
        if int(employee_id) <= 0:
            raise ValidationError("Employee is not valid")
        if effective_to is not None and effective_to < effective_from:
            raise ValidationError("Schedule end date must be on or after its start date")

        pattern: dict[int, Optional[TimeInterval]] = {}
        for weekday, interval in weekly_pattern.items():
            if not 0 <= int(weekday) <= 6:
                raise ValidationError(f"Weekday {weekday} is out of range (0-6)")
            if interval is not None:
                interval.require_valid("Working interval")
            pattern[int(weekday)] = interval

        candidate = WorkSchedule(
            schedule_id=None,
            employee_id=int(employee_id),
            effective_from=effective_from,
            weekly_pattern=pattern,
            effective_to=effective_to,
            name=(name or "").strip(),
        )

        with self._locks.hold(int(employee_id), timeout=timeout):
            for existing in self._schedules.load_schedules(employee_id=int(employee_id)):
                if existing.overlaps(candidate):
                    raise ScheduleConflictError(
                        f"Schedule overlaps schedule {existing.schedule_id} "
                        f"({existing.effective_from.isoformat()} - "
                        f"{existing.effective_to.isoformat() if existing.effective_to else 'open'})"
                    )
            saved = self._schedules.save_schedule(candidate)

        logger.info(
            "work_schedule_added",
            extra={"employee_id": saved.employee_id, "schedule_id": saved.schedule_id},
        )
        return saved
