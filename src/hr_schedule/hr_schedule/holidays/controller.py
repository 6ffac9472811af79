from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.periods import DateRange
from ..common.validators import require_non_empty
from ..container import Container
from ..web.auth import SCHEDULES_MANAGE, require_actor, require_capability
from ..web.payload import flag, json_body, required_str
from .model import PublicHoliday
from .service import HolidayCalendar


def register(app: Flask, container: Container) -> None:
    @app.route("/api/holidays", methods=["GET"], endpoint="holidays_list")
    def holidays_list():
        require_actor(container.capabilities)
        window = DateRange(
            parse_iso_date(request.args.get("start", ""), "start"),
            parse_iso_date(request.args.get("end", ""), "end"),
        ).require_valid("Holiday window")

        calendar = HolidayCalendar.load(container.holidays_repo)
        items = []
        for holiday in calendar.holidays_overlapping(window):
            for span in holiday.occurrences(window):
                item = holiday.to_dict()
                item["start_date"] = span.start.isoformat()
                item["end_date"] = span.end.isoformat()
                items.append(item)
        items.sort(key=lambda h: (h["start_date"], h["label"]))
        return jsonify({"holidays": items})

    @app.route("/api/holidays", methods=["POST"], endpoint="holidays_create")
    def holidays_create():
        require_capability(container.capabilities, SCHEDULES_MANAGE)
        payload = json_body()
        holiday = PublicHoliday(
            holiday_id=None,
            date_range=DateRange(
                parse_iso_date(required_str(payload, "start_date"), "start_date"),
                parse_iso_date(required_str(payload, "end_date"), "end_date"),
            ).require_valid("Holiday dates"),
            label=require_non_empty(str(payload.get("label") or ""), "Label"),
            is_recurring=flag(payload, "is_recurring"),
        )
        saved = container.holidays_repo.save_holiday(holiday)
        return jsonify({"holiday": saved.to_dict()}), 201
