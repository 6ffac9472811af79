from __future__ import annotations

from typing import Optional, Sequence

from ..common.periods import TimeInterval
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_time
from .model import WEEKDAY_NAMES, WorkSchedule
from .repository import ScheduleRepository

_DAY_COLUMNS = ", ".join(f"{day}_start, {day}_end" for day in WEEKDAY_NAMES)


def _row_to_schedule(r: dict) -> WorkSchedule:
    pattern: dict[int, Optional[TimeInterval]] = {}
    for weekday, day in enumerate(WEEKDAY_NAMES):
        start = normalize_mysql_time(r.get(f"{day}_start"))
        end = normalize_mysql_time(r.get(f"{day}_end"))
        pattern[weekday] = TimeInterval(start, end) if start is not None and end is not None else None

    return WorkSchedule(
        schedule_id=int(r["schedule_id"]),
        employee_id=int(r["employee_id"]),
        effective_from=r["effective_from"],
        weekly_pattern=pattern,
        effective_to=r.get("effective_to"),
        name=r.get("name") or "",
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load_schedules(self, *, employee_id: int) -> Sequence[WorkSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT schedule_id, employee_id, name, effective_from, effective_to, {_DAY_COLUMNS}
                FROM work_schedules
                WHERE employee_id=%s
                ORDER BY effective_from ASC, schedule_id ASC
                """,
                (int(employee_id),),
            )
            return [_row_to_schedule(r) for r in fetchall(cur)]

    def save_schedule(self, schedule: WorkSchedule) -> WorkSchedule:
        day_values: list[object] = []
        for weekday in range(7):
            interval = schedule.weekly_pattern.get(weekday)
            day_values.extend([interval.start if interval else None, interval.end if interval else None])

        placeholders = ", ".join(["%s"] * (4 + len(day_values)))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO work_schedules(employee_id, name, effective_from, effective_to, {_DAY_COLUMNS})
                VALUES({placeholders})
                """,
                (
                    int(schedule.employee_id),
                    schedule.name,
                    schedule.effective_from,
                    schedule.effective_to,
                    *day_values,
                ),
            )
            new_id = int(cur.lastrowid)

        return WorkSchedule(
            schedule_id=new_id,
            employee_id=schedule.employee_id,
            effective_from=schedule.effective_from,
            weekly_pattern=dict(schedule.weekly_pattern),
            effective_to=schedule.effective_to,
            name=schedule.name,
        )
