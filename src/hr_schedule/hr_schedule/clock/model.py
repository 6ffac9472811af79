from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import format_instant


@dataclass(frozen=True)
class VirtualClockConfig:
    """Snapshot of the process-wide time override.

    ``override_instant`` is meaningless while ``is_overridden`` is false.
    ``real_time_at_override_set`` is the real instant the current mode was
    entered (process start, override set, or override cleared).
    """

    is_overridden: bool
    override_instant: Optional[datetime]
    real_time_at_override_set: datetime
    updated_at: Optional[datetime] = None
    updated_by: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "is_overridden": self.is_overridden,
            "override_instant": format_instant(self.override_instant) if self.is_overridden else None,
            "real_time_at_override_set": format_instant(self.real_time_at_override_set),
            "updated_at": format_instant(self.updated_at),
            "updated_by": self.updated_by,
        }
