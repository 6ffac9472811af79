from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.exceptions import ValidationError


def parse_iso_date(value: str, field_name: str = "Date") -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date (YYYY-MM-DD)")


def parse_hhmm(value: str, field_name: str = "Time") -> time:
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid time (HH:MM)")


def parse_iso_datetime(value: str, field_name: str = "Timestamp") -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat((value or "").strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid ISO-8601 timestamp")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def local_date(instant: datetime, tz_name: str) -> date:
    """Calendar date of ``instant`` in the configured business timezone."""
    return instant.astimezone(ZoneInfo(tz_name)).date()


def format_instant(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
