from __future__ import annotations

from typing import Protocol, Sequence

from .model import PublicHoliday


class HolidayRepository(Protocol):
    def load_holidays(self) -> Sequence[PublicHoliday]:
        raise NotImplementedError

    def save_holiday(self, holiday: PublicHoliday) -> PublicHoliday:
        """Insert a holiday; returns it with ``holiday_id`` assigned."""

        raise NotImplementedError
