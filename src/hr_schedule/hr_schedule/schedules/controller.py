from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import local_date, parse_hhmm, parse_iso_date
from ..common.periods import TimeInterval
from ..container import Container
from ..core.exceptions import ValidationError
from ..holidays.service import HolidayCalendar
from ..web.auth import SCHEDULES_MANAGE, SCHEDULES_VIEW, require_capability, require_self_or_capability
from ..web.payload import json_body, optional_timeout, required_int
from .model import WEEKDAY_NAMES


def _parse_weekly_pattern(raw) -> dict[int, Optional[TimeInterval]]:
    """Accepts ``{"monday": {"start": "09:00", "end": "17:00"}, "sunday": null, ...}``."""
    if not isinstance(raw, dict) or not raw:
        raise ValidationError("'weekly_pattern' must be a non-empty object")

    pattern: dict[int, Optional[TimeInterval]] = {}
    for day_name, hours in raw.items():
        key = str(day_name).strip().lower()
        if key not in WEEKDAY_NAMES:
            raise ValidationError(f"Unknown weekday '{day_name}'")
        if hours is None:
            pattern[WEEKDAY_NAMES.index(key)] = None
            continue
        if not isinstance(hours, dict):
            raise ValidationError(f"Hours for {key} must be an object with 'start' and 'end'")
        pattern[WEEKDAY_NAMES.index(key)] = TimeInterval(
            parse_hhmm(str(hours.get("start") or ""), f"{key} start"),
            parse_hhmm(str(hours.get("end") or ""), f"{key} end"),
        )
    return pattern


def register(app: Flask, container: Container) -> None:
    @app.route("/api/schedules", methods=["POST"], endpoint="schedules_create")
    def schedules_create():
        require_capability(container.capabilities, SCHEDULES_MANAGE)
        payload = json_body()

        effective_to_raw = payload.get("effective_to")
        schedule = container.schedule_store.add_schedule(
            employee_id=required_int(payload, "employee_id"),
            weekly_pattern=_parse_weekly_pattern(payload.get("weekly_pattern")),
            effective_from=parse_iso_date(str(payload.get("effective_from") or ""), "effective_from"),
            effective_to=parse_iso_date(str(effective_to_raw), "effective_to") if effective_to_raw else None,
            name=str(payload.get("name") or ""),
            timeout=optional_timeout(payload),
        )
        return jsonify({"schedule": schedule.to_dict()}), 201

    @app.route("/api/employees/<int:employee_id>/schedule", methods=["GET"], endpoint="employee_schedule")
    def employee_schedule(employee_id: int):
        require_self_or_capability(container.capabilities, employee_id, SCHEDULES_VIEW)

        raw_day = request.args.get("date")
        if raw_day:
            day = parse_iso_date(raw_day, "date")
        else:
            day = local_date(container.clock.get_system_time(), container.timezone_name)

        schedule = container.schedule_store.active_schedule_for(employee_id, day)
        calendar = HolidayCalendar.load(container.holidays_repo)
        interval = schedule.interval_for_weekday(day.weekday())
        return jsonify(
            {
                "date": day.isoformat(),
                "schedule": schedule.to_dict(),
                "regular_hours": interval.label() if interval else None,
                "is_holiday": calendar.is_holiday(day),
                "is_working_day": container.schedule_store.is_working_day(employee_id, day, calendar),
            }
        )
