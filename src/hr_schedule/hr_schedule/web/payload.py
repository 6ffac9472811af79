from __future__ import annotations

import math
from typing import Any, Optional

from flask import request

from ..core.constants import MAX_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import ValidationError


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def required_str(payload: dict, key: str) -> str:
    value = payload.get(key)
    if value is None or not str(value).strip():
        raise ValidationError(f"'{key}' is required")
    return str(value)


def optional_int(payload: dict, key: str) -> Optional[int]:
    value = payload.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{key}' must be an integer")


def required_int(payload: dict, key: str) -> int:
    value = optional_int(payload, key)
    if value is None:
        raise ValidationError(f"'{key}' is required")
    return value


def required_number(payload: dict, key: str) -> float:
    value = payload.get(key)
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(f"'{key}' is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{key}' must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"'{key}' must be a finite number")
    return number


def flag(payload: dict, key: str) -> bool:
    value: Any = payload.get(key, False)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def query_int(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer")


def optional_timeout(payload: dict) -> Optional[float]:
    value = payload.get("timeout_seconds")
    if value is None:
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ValidationError("'timeout_seconds' must be a number")
    if not math.isfinite(timeout) or timeout < 0 or timeout > MAX_LOCK_TIMEOUT_SECONDS:
        raise ValidationError(f"'timeout_seconds' must be between 0 and {MAX_LOCK_TIMEOUT_SECONDS:g}")
    return timeout
