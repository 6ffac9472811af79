from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class DateRange:
    """Closed calendar range: both ``start`` and ``end`` are included."""

    start: date
    end: date

    @classmethod
    def single(cls, day: date) -> "DateRange":
        return cls(day, day)

    @property
    def is_inverted(self) -> bool:
        return self.end < self.start

    def require_valid(self, field_name: str = "Date range") -> "DateRange":
        if self.is_inverted:
            raise ValidationError(f"{field_name}: end date must be on or after start date")
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, other: "DateRange") -> bool:
        # Inclusive: sharing a single boundary day counts.
        return self.start <= other.end and other.start <= self.end

    def days(self) -> Iterator[date]:
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)


@dataclass(frozen=True)
class TimeInterval:
    """Half-open wall-clock interval ``[start, end)`` within one day."""

    start: time
    end: time

    @property
    def is_inverted(self) -> bool:
        return self.end < self.start

    @property
    def is_empty(self) -> bool:
        return self.end == self.start

    @property
    def minutes(self) -> int:
        anchor = date(2000, 1, 1)
        delta = datetime.combine(anchor, self.end) - datetime.combine(anchor, self.start)
        return max(0, int(delta.total_seconds() // 60))

    def require_valid(self, field_name: str = "Interval") -> "TimeInterval":
        if self.is_empty:
            raise ValidationError(f"{field_name} is empty")
        if self.is_inverted:
            raise ValidationError(f"{field_name}: end time must be after start time")
        return self

    def overlaps(self, other: "TimeInterval") -> bool:
        return self.start < other.end and other.start < self.end

    def label(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"
