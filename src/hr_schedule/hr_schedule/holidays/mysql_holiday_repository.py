from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ..common.periods import DateRange
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import PublicHoliday
from .repository import HolidayRepository


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load_holidays(self) -> Sequence[PublicHoliday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, start_date, end_date, label, is_recurring
                FROM public_holidays
                ORDER BY start_date ASC, holiday_id ASC
                """
            )
            return [
                PublicHoliday(
                    holiday_id=int(r["holiday_id"]),
                    date_range=DateRange(r["start_date"], r["end_date"]),
                    label=r["label"],
                    is_recurring=bool(r.get("is_recurring")),
                )
                for r in fetchall(cur)
            ]

    def save_holiday(self, holiday: PublicHoliday) -> PublicHoliday:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO public_holidays(start_date, end_date, label, is_recurring)
                VALUES(%s,%s,%s,%s)
                """,
                (holiday.date_range.start, holiday.date_range.end, holiday.label, int(holiday.is_recurring)),
            )
            return replace(holiday, holiday_id=int(cur.lastrowid))
