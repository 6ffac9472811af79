from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import local_date
from ..container import Container
from ..web.auth import REQUESTS_ADMIN, REQUESTS_VIEW_ALL, require_actor, require_capability, require_self_or_capability
from ..web.payload import json_body, optional_int, query_int, required_int, required_number, required_str


def register(app: Flask, container: Container) -> None:
    ledger = container.leave_ledger
    checker = container.capabilities

    def _current_year() -> int:
        return local_date(container.clock.get_system_time(), container.timezone_name).year

    @app.route("/api/leave-types", methods=["GET"], endpoint="leave_types_list")
    def leave_types_list():
        require_actor(checker)
        return jsonify({"leave_types": [t.to_dict() for t in ledger.list_types()]})

    @app.route("/api/leave-types", methods=["POST"], endpoint="leave_types_create")
    def leave_types_create():
        require_capability(checker, REQUESTS_ADMIN)
        payload = json_body()
        leave_type = ledger.add_type(
            code=required_str(payload, "code"),
            name=required_str(payload, "name"),
            color=payload.get("color"),
            sort_order=optional_int(payload, "sort_order") or 0,
        )
        return jsonify({"leave_type": leave_type.to_dict()}), 201

    @app.route("/api/employees/<int:employee_id>/leave-balances", methods=["GET"], endpoint="leave_balances_list")
    def leave_balances_list(employee_id: int):
        require_self_or_capability(checker, employee_id, REQUESTS_VIEW_ALL)
        year = query_int("year", _current_year())
        balances = ledger.balances_for(employee_id=employee_id, year=year)
        return jsonify({"employee_id": employee_id, "year": year, "balances": [b.to_dict() for b in balances]})

    @app.route("/api/employees/<int:employee_id>/leave-balances", methods=["PUT"], endpoint="leave_balances_set")
    def leave_balances_set(employee_id: int):
        require_capability(checker, REQUESTS_ADMIN)
        payload = json_body()
        balance = ledger.set_entitlement(
            employee_id=employee_id,
            leave_type_id=required_int(payload, "leave_type_id"),
            year=optional_int(payload, "year") or _current_year(),
            entitled=required_number(payload, "entitled"),
        )
        return jsonify({"balance": balance.to_dict()})
