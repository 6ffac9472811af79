from __future__ import annotations

from enum import Enum


class RequestStatus(str, Enum):
    """Lifecycle of leave requests and overtime declarations."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class Decision(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class RequestKind(str, Enum):
    LEAVE = "LEAVE"
    OVERTIME = "OVERTIME"


class ConflictReason(str, Enum):
    """Machine-readable codes for business-rule rejections."""

    INVERTED_RANGE = "inverted_range"
    RETROACTIVE = "retroactive"
    OVERLAPPING_LEAVE = "overlapping_leave"
    INSIDE_WORKING_HOURS = "inside_working_hours"
    NON_WORKING_DAY = "non_working_day"
    DAILY_CAP_EXCEEDED = "daily_cap_exceeded"
    OVERLAPPING_OVERTIME = "overlapping_overtime"
    SUPERSEDED = "superseded"
    SCHEDULE_OVERLAP = "schedule_overlap"
