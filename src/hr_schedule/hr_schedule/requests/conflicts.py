"""Conflict detection for leave requests and overtime declarations.

Everything here is pure: inputs are an ``EmployeeSnapshot`` loaded once under
the employee's exclusive section plus the resolved "today", outputs are
``ConflictCheck`` values. Nothing reads the clock or touches persistence.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..common.periods import DateRange, TimeInterval
from ..core.constants import DEFAULT_DAILY_OVERTIME_CAP_MINUTES
from ..core.enums import ConflictReason, RequestStatus
from ..holidays.service import HolidayCalendar
from ..schedules.model import EmployeeTimetable
from .model import LeaveRequest, OvertimeDeclaration


@dataclass(frozen=True)
class ConflictCheck:
    ok: bool
    reason: Optional[ConflictReason] = None
    message: str = ""

    @classmethod
    def passed(cls) -> "ConflictCheck":
        return cls(ok=True)

    @classmethod
    def failed(cls, reason: ConflictReason, message: str) -> "ConflictCheck":
        return cls(ok=False, reason=reason, message=message)


@dataclass(frozen=True)
class EmployeeSnapshot:
    """Everything the detector needs about one employee for one evaluation."""

    employee_id: int
    timetable: EmployeeTimetable
    calendar: HolidayCalendar
    leaves: Sequence[LeaveRequest] = ()
    overtime: Sequence[OvertimeDeclaration] = ()

    def other_leaves(self, exclude_request_id: Optional[int]) -> list[LeaveRequest]:
        return [r for r in self.leaves if exclude_request_id is None or r.request_id != exclude_request_id]

    def other_overtime(self, work_date: date, exclude_request_id: Optional[int]) -> list[OvertimeDeclaration]:
        return [
            o
            for o in self.overtime
            if o.work_date == work_date and (exclude_request_id is None or o.request_id != exclude_request_id)
        ]


class ConflictDetector:
    def __init__(self, *, daily_overtime_cap_minutes: int = DEFAULT_DAILY_OVERTIME_CAP_MINUTES):
        self._daily_cap = int(daily_overtime_cap_minutes)

    # Leave

    def validate_leave(
        self,
        snapshot: EmployeeSnapshot,
        date_range: DateRange,
        as_of: date,
        *,
        backfill: bool = False,
        exclude_request_id: Optional[int] = None,
    ) -> ConflictCheck:
        """Submission-time check.

        ``as_of`` is the calendar date of the request's resolved "now".
        Any other Pending or Approved leave overlapping the range blocks it.
        """
        if date_range.is_inverted:
            return ConflictCheck.failed(ConflictReason.INVERTED_RANGE, "Leave end date is before its start date")

        if date_range.start < as_of and not backfill:
            return ConflictCheck.failed(
                ConflictReason.RETROACTIVE,
                f"Leave starts on {date_range.start.isoformat()}, before {as_of.isoformat()}; "
                "past leave must be submitted as backfill",
            )

        for other in snapshot.other_leaves(exclude_request_id):
            if other.is_active and other.date_range.overlaps(date_range):
                return ConflictCheck.failed(
                    ConflictReason.OVERLAPPING_LEAVE,
                    f"Overlaps {other.status.value.lower()} leave request {other.request_id} "
                    f"({other.date_range.start.isoformat()} - {other.date_range.end.isoformat()})",
                )

        return ConflictCheck.passed()

    def recheck_leave(self, snapshot: EmployeeSnapshot, request: LeaveRequest) -> ConflictCheck:
        """Decision-time check for approving ``request``.

        An overlapping approved sibling is a stale conflict. An overlapping
        pending sibling created earlier wins; this one is superseded until
        that sibling is rejected or cancelled.
        """
        earlier_pending: Optional[LeaveRequest] = None
        for other in snapshot.other_leaves(request.request_id):
            if not other.date_range.overlaps(request.date_range):
                continue
            if other.status == RequestStatus.APPROVED:
                return ConflictCheck.failed(
                    ConflictReason.OVERLAPPING_LEAVE,
                    f"Leave request {other.request_id} covering overlapping days was approved in the meantime",
                )
            if other.status == RequestStatus.PENDING and other.precedence < request.precedence:
                if earlier_pending is None or other.precedence < earlier_pending.precedence:
                    earlier_pending = other

        if earlier_pending is not None:
            return ConflictCheck.failed(
                ConflictReason.SUPERSEDED,
                f"Superseded by earlier pending leave request {earlier_pending.request_id}",
            )

        return ConflictCheck.passed()

    # Overtime

    def validate_overtime(
        self,
        snapshot: EmployeeSnapshot,
        work_date: date,
        interval: TimeInterval,
        as_of: date,
        *,
        holiday_overtime: bool = False,
        backfill: bool = False,
        exclude_request_id: Optional[int] = None,
    ) -> ConflictCheck:
        """Submission-time check.

        Overlapping *pending* overtime is allowed to coexist; the tie is
        settled at decision time by ``recheck_overtime``.
        """
        if interval.is_inverted or interval.is_empty:
            return ConflictCheck.failed(ConflictReason.INVERTED_RANGE, "Overtime end time must be after its start time")

        if work_date < as_of and not backfill:
            return ConflictCheck.failed(
                ConflictReason.RETROACTIVE,
                f"Overtime dated {work_date.isoformat()} is in the past; submit it as backfill",
            )

        hours_check = self._check_regular_hours(snapshot, work_date, interval, holiday_overtime=holiday_overtime)
        if not hours_check.ok:
            return hours_check

        siblings = snapshot.other_overtime(work_date, exclude_request_id)
        for other in siblings:
            if other.status == RequestStatus.APPROVED and other.interval.overlaps(interval):
                return self._overlap_failure(other)

        declared = sum(o.credited_minutes for o in siblings if o.is_active)
        return self._check_cap(declared, interval.minutes, work_date)

    def recheck_overtime(
        self,
        snapshot: EmployeeSnapshot,
        declaration: OvertimeDeclaration,
        *,
        approved_minutes: Optional[int] = None,
    ) -> ConflictCheck:
        """Decision-time check; ``approved_minutes`` is what the decider grants, if less than declared."""
        hours_check = self._check_regular_hours(
            snapshot,
            declaration.work_date,
            declaration.interval,
            holiday_overtime=declaration.is_holiday_overtime,
        )
        if not hours_check.ok:
            return hours_check

        siblings = snapshot.other_overtime(declaration.work_date, declaration.request_id)
        earlier_pending: Optional[OvertimeDeclaration] = None
        for other in siblings:
            if not other.interval.overlaps(declaration.interval):
                continue
            if other.status == RequestStatus.APPROVED:
                return self._overlap_failure(other)
            if other.status == RequestStatus.PENDING and other.precedence < declaration.precedence:
                if earlier_pending is None or other.precedence < earlier_pending.precedence:
                    earlier_pending = other

        if earlier_pending is not None:
            return ConflictCheck.failed(
                ConflictReason.SUPERSEDED,
                f"Superseded by earlier pending overtime declaration {earlier_pending.request_id}",
            )

        approved = sum(o.credited_minutes for o in siblings if o.status == RequestStatus.APPROVED)
        granted = declaration.minutes if approved_minutes is None else int(approved_minutes)
        return self._check_cap(approved, granted, declaration.work_date)

    def _check_regular_hours(
        self,
        snapshot: EmployeeSnapshot,
        work_date: date,
        interval: TimeInterval,
        *,
        holiday_overtime: bool,
    ) -> ConflictCheck:
        if snapshot.timetable.is_working_day(work_date, snapshot.calendar):
            regular = snapshot.timetable.regular_interval(work_date)
            if regular is not None and interval.overlaps(regular):
                return ConflictCheck.failed(
                    ConflictReason.INSIDE_WORKING_HOURS,
                    f"Overtime {interval.label()} overlaps regular hours {regular.label()}",
                )
            return ConflictCheck.passed()

        if not holiday_overtime:
            return ConflictCheck.failed(
                ConflictReason.NON_WORKING_DAY,
                f"{work_date.isoformat()} is not a working day; declare it as holiday overtime",
            )
        return ConflictCheck.passed()

    def _check_cap(self, already_minutes: int, minutes: int, work_date: date) -> ConflictCheck:
        total = already_minutes + minutes
        if total > self._daily_cap:
            return ConflictCheck.failed(
                ConflictReason.DAILY_CAP_EXCEEDED,
                f"Overtime on {work_date.isoformat()} would total {total} min, above the daily cap of {self._daily_cap} min",
            )
        return ConflictCheck.passed()

    @staticmethod
    def _overlap_failure(other: OvertimeDeclaration) -> ConflictCheck:
        return ConflictCheck.failed(
            ConflictReason.OVERLAPPING_OVERTIME,
            f"Overlaps approved overtime declaration {other.request_id} ({other.interval.label()})",
        )
