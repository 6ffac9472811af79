from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.periods import DateRange, TimeInterval
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_PENDING_LIMIT
from ..core.enums import Decision
from ..core.exceptions import AuthorizationError, ValidationError
from ..web.auth import (
    REQUESTS_ADMIN,
    REQUESTS_DECIDE,
    REQUESTS_SUBMIT_FOR_OTHERS,
    REQUESTS_VIEW_ALL,
    require_actor,
    require_capability,
    require_self_or_capability,
)
from ..web.payload import flag, json_body, optional_int, optional_timeout, query_int, required_int, required_str


def _parse_decision(payload: dict) -> Decision:
    raw = required_str(payload, "decision").strip().upper()
    try:
        return Decision(raw)
    except ValueError:
        raise ValidationError("'decision' must be APPROVE or REJECT")


def register(app: Flask, container: Container) -> None:
    service = container.integrity_service
    checker = container.capabilities

    def _admin_override_for(payload: dict, actor) -> bool:
        if not flag(payload, "admin_override"):
            return False
        if not checker.allows(actor, REQUESTS_ADMIN):
            raise AuthorizationError("Admin override requires the requests.admin capability")
        return True

    # Leave

    @app.route("/api/leaves", methods=["POST"], endpoint="leave_submit")
    def leave_submit():
        payload = json_body()
        employee_id = required_int(payload, "employee_id")
        actor = require_self_or_capability(checker, employee_id, REQUESTS_SUBMIT_FOR_OTHERS)

        leave = service.submit_leave(
            employee_id=employee_id,
            date_range=DateRange(
                parse_iso_date(required_str(payload, "start_date"), "start_date"),
                parse_iso_date(required_str(payload, "end_date"), "end_date"),
            ),
            reason=str(payload.get("reason") or ""),
            requested_by=actor.actor_id,
            leave_type_id=optional_int(payload, "leave_type_id"),
            start_half_day=flag(payload, "start_half_day"),
            end_half_day=flag(payload, "end_half_day"),
            backfill=flag(payload, "backfill"),
            timeout=optional_timeout(payload),
        )
        return jsonify({"leave": leave.to_dict()}), 201

    @app.route("/api/leaves/<int:request_id>/decision", methods=["POST"], endpoint="leave_decide")
    def leave_decide(request_id: int):
        actor = require_capability(checker, REQUESTS_DECIDE)
        payload = json_body()
        leave = service.decide_leave(
            request_id=request_id,
            decision=_parse_decision(payload),
            decider_id=actor.actor_id,
            comment=payload.get("comment"),
            timeout=optional_timeout(payload),
        )
        return jsonify({"leave": leave.to_dict()})

    @app.route("/api/leaves/<int:request_id>/cancel", methods=["POST"], endpoint="leave_cancel")
    def leave_cancel(request_id: int):
        actor = require_actor(checker)
        payload = json_body()
        leave = service.cancel_leave(
            request_id=request_id,
            actor_id=actor.actor_id,
            admin_override=_admin_override_for(payload, actor),
            timeout=optional_timeout(payload),
        )
        return jsonify({"leave": leave.to_dict()})

    # Overtime

    @app.route("/api/overtime", methods=["POST"], endpoint="overtime_submit")
    def overtime_submit():
        payload = json_body()
        employee_id = required_int(payload, "employee_id")
        actor = require_self_or_capability(checker, employee_id, REQUESTS_SUBMIT_FOR_OTHERS)

        declaration = service.submit_overtime(
            employee_id=employee_id,
            work_date=parse_iso_date(required_str(payload, "work_date"), "work_date"),
            interval=TimeInterval(
                parse_hhmm(required_str(payload, "start_time"), "start_time"),
                parse_hhmm(required_str(payload, "end_time"), "end_time"),
            ),
            reason=str(payload.get("reason") or ""),
            requested_by=actor.actor_id,
            holiday_overtime=flag(payload, "holiday_overtime"),
            backfill=flag(payload, "backfill"),
            timeout=optional_timeout(payload),
        )
        return jsonify({"overtime": declaration.to_dict()}), 201

    @app.route("/api/overtime/<int:request_id>/decision", methods=["POST"], endpoint="overtime_decide")
    def overtime_decide(request_id: int):
        actor = require_capability(checker, REQUESTS_DECIDE)
        payload = json_body()
        declaration = service.decide_overtime(
            request_id=request_id,
            decision=_parse_decision(payload),
            decider_id=actor.actor_id,
            comment=payload.get("comment"),
            approved_minutes=optional_int(payload, "approved_minutes"),
            timeout=optional_timeout(payload),
        )
        return jsonify({"overtime": declaration.to_dict()})

    @app.route("/api/overtime/<int:request_id>", methods=["DELETE"], endpoint="overtime_withdraw")
    def overtime_withdraw(request_id: int):
        actor = require_actor(checker)
        payload = json_body()
        declaration = service.withdraw_overtime(
            request_id=request_id,
            actor_id=actor.actor_id,
            admin_override=_admin_override_for(payload, actor),
            timeout=optional_timeout(payload),
        )
        return jsonify({"overtime": declaration.to_dict(), "withdrawn": True})

    # Queues

    @app.route("/api/employees/<int:employee_id>/requests", methods=["GET"], endpoint="employee_requests")
    def employee_requests(employee_id: int):
        require_self_or_capability(checker, employee_id, REQUESTS_VIEW_ALL)
        data = service.list_for_employee(
            employee_id=employee_id,
            limit=query_int("limit", DEFAULT_HISTORY_LIMIT),
        )
        return jsonify(
            {
                "leaves": [r.to_dict() for r in data["leaves"]],
                "overtime": [o.to_dict() for o in data["overtime"]],
            }
        )

    @app.route("/api/requests/pending", methods=["GET"], endpoint="pending_requests")
    def pending_requests():
        require_capability(checker, REQUESTS_DECIDE)
        data = service.list_pending(limit=query_int("limit", DEFAULT_PENDING_LIMIT))
        return jsonify(
            {
                "leaves": [r.to_dict() for r in data["leaves"]],
                "overtime": [o.to_dict() for o in data["overtime"]],
            }
        )
