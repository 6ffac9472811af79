from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.periods import DateRange


def _in_year(day: date, year: int) -> date:
    try:
        return day.replace(year=year)
    except ValueError:
        # Feb 29 in a non-leap year.
        return day.replace(year=year, day=28)


@dataclass(frozen=True)
class PublicHoliday:
    holiday_id: Optional[int]
    date_range: DateRange
    label: str
    is_recurring: bool = False

    def occurrences(self, window: DateRange) -> list[DateRange]:
        """Concrete spans of this holiday intersecting ``window`` (inclusive)."""
        if not self.is_recurring:
            return [self.date_range] if self.date_range.overlaps(window) else []

        span_years = self.date_range.end.year - self.date_range.start.year
        out: list[DateRange] = []
        # Start one year early so a span crossing New Year still hits January;
        # stop where the shifted end would pass date.max.
        first = max(window.start.year - 1 - span_years, self.date_range.start.year)
        last = min(window.end.year, date.max.year - span_years)
        for year in range(first, last + 1):
            shifted = DateRange(
                _in_year(self.date_range.start, year),
                _in_year(self.date_range.end, year + span_years),
            )
            if shifted.overlaps(window):
                out.append(shifted)
        return out

    def occurs_on(self, day: date) -> bool:
        return bool(self.occurrences(DateRange.single(day)))

    def to_dict(self) -> dict:
        return {
            "holiday_id": self.holiday_id,
            "start_date": self.date_range.start.isoformat(),
            "end_date": self.date_range.end.isoformat(),
            "label": self.label,
            "is_recurring": self.is_recurring,
        }
