from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_instant
from ..common.periods import DateRange, TimeInterval
from ..core.enums import RequestKind, RequestStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: Optional[int]
    employee_id: int
    date_range: DateRange
    reason: str
    status: RequestStatus
    created_at: datetime
    requested_by: int
    days_requested: float = 0.0
    leave_type_id: Optional[int] = None
    start_half_day: bool = False
    end_half_day: bool = False
    is_backfill: bool = False
    decided_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decision_comment: Optional[str] = None

    kind = RequestKind.LEAVE

    @property
    def is_active(self) -> bool:
        """Pending or approved leave still claims its days."""
        return self.status in (RequestStatus.PENDING, RequestStatus.APPROVED)

    @property
    def precedence(self) -> tuple[datetime, int]:
        return (self.created_at, self.request_id or 0)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "start_date": self.date_range.start.isoformat(),
            "end_date": self.date_range.end.isoformat(),
            "days_requested": self.days_requested,
            "leave_type_id": self.leave_type_id,
            "start_half_day": self.start_half_day,
            "end_half_day": self.end_half_day,
            "reason": self.reason,
            "status": self.status.value,
            "is_backfill": self.is_backfill,
            "requested_by": self.requested_by,
            "created_at": format_instant(self.created_at),
            "decided_at": format_instant(self.decided_at),
            "decided_by": self.decided_by,
            "decision_comment": self.decision_comment,
        }


@dataclass(frozen=True)
class OvertimeDeclaration:
    request_id: Optional[int]
    employee_id: int
    work_date: date
    interval: TimeInterval
    reason: str
    status: RequestStatus
    created_at: datetime
    requested_by: int
    is_holiday_overtime: bool = False
    is_backfill: bool = False
    approved_minutes: Optional[int] = None
    decided_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decision_comment: Optional[str] = None

    kind = RequestKind.OVERTIME

    @property
    def minutes(self) -> int:
        return self.interval.minutes

    @property
    def credited_minutes(self) -> int:
        """Minutes that count once approved; a decider may grant less than declared."""
        return self.approved_minutes if self.approved_minutes is not None else self.minutes

    @property
    def is_active(self) -> bool:
        return self.status in (RequestStatus.PENDING, RequestStatus.APPROVED)

    @property
    def precedence(self) -> tuple[datetime, int]:
        return (self.created_at, self.request_id or 0)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "work_date": self.work_date.isoformat(),
            "start_time": self.interval.start.strftime("%H:%M"),
            "end_time": self.interval.end.strftime("%H:%M"),
            "minutes": self.minutes,
            "approved_minutes": self.approved_minutes,
            "reason": self.reason,
            "status": self.status.value,
            "is_holiday_overtime": self.is_holiday_overtime,
            "is_backfill": self.is_backfill,
            "requested_by": self.requested_by,
            "created_at": format_instant(self.created_at),
            "decided_at": format_instant(self.decided_at),
            "decided_by": self.decided_by,
            "decision_comment": self.decision_comment,
        }
