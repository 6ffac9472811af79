from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.logging_utils import setup_json_logging
from .core.constants import DEFAULT_DAILY_OVERTIME_CAP_MINUTES, DEFAULT_LOCK_TIMEOUT_SECONDS, DEFAULT_TIMEZONE
from .database.bootstrap import apply_schema, list_tables
from .web.errors import register_error_handlers

from .container import Container, build_container
from .clock.controller import register as register_clock
from .holidays.controller import register as register_holidays
from .leaves.controller import register as register_leaves
from .schedules.controller import register as register_schedules
from .requests.controller import register as register_requests

logger = logging.getLogger("hr_schedule")


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    setup_json_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        storage = str(getattr(settings, "STORAGE", "mysql")).lower()

        if storage == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema_ready", extra={"tables": len(list_tables(db_config))})

        container = build_container(
            db_config=db_config,
            storage=storage,
            timezone_name=getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE),
            daily_overtime_cap_minutes=int(
                getattr(settings, "DAILY_OVERTIME_CAP_MINUTES", DEFAULT_DAILY_OVERTIME_CAP_MINUTES)
            ),
            lock_timeout_seconds=float(getattr(settings, "LOCK_TIMEOUT_SECONDS", DEFAULT_LOCK_TIMEOUT_SECONDS)),
        )

    logger.info(
        "app_started",
        extra={"settings": settings_module, "storage": "mysql" if container.conn else "memory"},
    )

    register_error_handlers(app)
    register_clock(app, container)
    register_holidays(app, container)
    register_schedules(app, container)
    register_requests(app, container)
    register_leaves(app, container)
    app.extensions["hr_schedule"] = container

    return app
