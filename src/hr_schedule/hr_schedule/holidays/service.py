from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from ..common.periods import DateRange
from .model import PublicHoliday
from .repository import HolidayRepository


class HolidayCalendar:
    """Read-only view over the global holiday list.

    Overlapping holidays are allowed and behave as a union. Built once per
    request so that every lookup in one evaluation sees the same calendar.
    """

    def __init__(self, holidays: Iterable[PublicHoliday] = ()):
        self._holidays: tuple[PublicHoliday, ...] = tuple(holidays)

    @classmethod
    def load(cls, repository: HolidayRepository) -> "HolidayCalendar":
        return cls(repository.load_holidays())

    def is_holiday(self, day: date) -> bool:
        return any(h.occurs_on(day) for h in self._holidays)

    def holidays_overlapping(self, date_range: DateRange) -> Sequence[PublicHoliday]:
        hits = [h for h in self._holidays if h.occurrences(date_range)]
        hits.sort(key=lambda h: (h.occurrences(date_range)[0].start, h.label))
        return hits

    def holiday_days_in(self, date_range: DateRange) -> set[date]:
        days: set[date] = set()
        for holiday in self._holidays:
            for span in holiday.occurrences(date_range):
                clipped = DateRange(max(span.start, date_range.start), min(span.end, date_range.end))
                days.update(clipped.days())
        return days
