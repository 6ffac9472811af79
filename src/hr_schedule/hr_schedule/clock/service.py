from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .model import VirtualClockConfig

logger = logging.getLogger(__name__)


def _wall_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class _ClockState:
    config: VirtualClockConfig
    base: datetime
    monotonic_at_set: float


class VirtualClock:
    """Process-wide time source with an optional administrative override.

    Every reading is ``base + elapsed`` where ``base`` is either the override
    instant or the real time captured when the current mode was entered, and
    ``elapsed`` comes from a monotonic counter. Readings therefore never go
    backward within a mode, and a simulated "now" keeps flowing at real speed.

    Reads are lock-free: the state is an immutable snapshot swapped in one
    assignment. ``set_override`` is serialized by its own lock.
    """

    def __init__(
        self,
        *,
        wall: Callable[[], datetime] = _wall_now,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._wall = wall
        self._monotonic = monotonic
        self._write_lock = threading.Lock()
        real_now = self._as_utc(wall())
        self._state = _ClockState(
            config=VirtualClockConfig(
                is_overridden=False,
                override_instant=None,
                real_time_at_override_set=real_now,
            ),
            base=real_now,
            monotonic_at_set=monotonic(),
        )

    @staticmethod
    def _as_utc(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def get_system_time(self) -> datetime:
        state = self._state
        elapsed = max(0.0, self._monotonic() - state.monotonic_at_set)
        return state.base + timedelta(seconds=elapsed)

    def get_config(self) -> VirtualClockConfig:
        return self._state.config

    def set_override(self, instant: Optional[datetime], *, updated_by: Optional[int] = None) -> VirtualClockConfig:
        """Set (``instant``) or clear (``None``) the override."""
        with self._write_lock:
            real_now = self._as_utc(self._wall())
            mono = self._monotonic()
            if instant is None:
                config = VirtualClockConfig(
                    is_overridden=False,
                    override_instant=None,
                    real_time_at_override_set=real_now,
                    updated_at=real_now,
                    updated_by=updated_by,
                )
                base = real_now
            else:
                override = self._as_utc(instant)
                config = VirtualClockConfig(
                    is_overridden=True,
                    override_instant=override,
                    real_time_at_override_set=real_now,
                    updated_at=real_now,
                    updated_by=updated_by,
                )
                base = override
            self._state = _ClockState(config=config, base=base, monotonic_at_set=mono)

        if config.is_overridden:
            logger.info(
                "system_clock_override_set",
                extra={"override_instant": config.override_instant, "updated_by": updated_by},
            )
        else:
            logger.info("system_clock_override_cleared", extra={"updated_by": updated_by})
        return config

    def reset(self, *, updated_by: Optional[int] = None) -> VirtualClockConfig:
        return self.set_override(None, updated_by=updated_by)

    def is_overridden(self) -> bool:
        return self._state.config.is_overridden
