from __future__ import annotations

from typing import Protocol, Sequence

from .model import WorkSchedule


class ScheduleRepository(Protocol):
    def load_schedules(self, *, employee_id: int) -> Sequence[WorkSchedule]:
        """All schedules of the employee, any effective range."""

        raise NotImplementedError

    def save_schedule(self, schedule: WorkSchedule) -> WorkSchedule:
        """Insert a schedule; returns it with ``schedule_id`` assigned."""

        raise NotImplementedError
