from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import format_instant, parse_iso_datetime
from ..container import Container
from ..web.auth import CLOCK_MANAGE, require_capability
from ..web.payload import json_body


def register(app: Flask, container: Container) -> None:
    def _clock_payload() -> dict:
        return {
            "config": container.clock.get_config().to_dict(),
            "system_time": format_instant(container.clock.get_system_time()),
        }

    @app.route("/api/admin/system-clock", methods=["GET"], endpoint="system_clock_get")
    def system_clock_get():
        require_capability(container.capabilities, CLOCK_MANAGE)
        return jsonify(_clock_payload())

    @app.route("/api/admin/system-clock", methods=["PUT"], endpoint="system_clock_put")
    def system_clock_put():
        actor = require_capability(container.capabilities, CLOCK_MANAGE)
        payload = json_body()
        raw = payload.get("override")
        if raw:
            container.clock.set_override(parse_iso_datetime(str(raw), "override"), updated_by=actor.actor_id)
        else:
            container.clock.reset(updated_by=actor.actor_id)
        return jsonify(_clock_payload())
