from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LeaveType:
    leave_type_id: Optional[int]
    code: str
    name: str
    color: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0

    def to_dict(self) -> dict:
        return {
            "leave_type_id": self.leave_type_id,
            "code": self.code,
            "name": self.name,
            "color": self.color,
            "is_active": self.is_active,
            "sort_order": self.sort_order,
        }


@dataclass(frozen=True)
class LeaveBalance:
    """Yearly entitlement of one employee for one leave type.

    Amounts are in days and move in half-day steps.
    """

    employee_id: int
    leave_type_id: int
    year: int
    entitled: float
    taken: float = 0.0

    @property
    def remaining(self) -> float:
        return self.entitled - self.taken

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "leave_type_id": self.leave_type_id,
            "year": self.year,
            "entitled": self.entitled,
            "taken": self.taken,
            "remaining": self.remaining,
        }
