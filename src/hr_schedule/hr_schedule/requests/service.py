from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..clock.service import VirtualClock
from ..common.datetime_utils import local_date
from ..common.periods import DateRange, TimeInterval
from ..common.validators import require_non_empty, require_positive_id
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_PENDING_LIMIT, DEFAULT_TIMEZONE
from ..core.enums import Decision, RequestStatus
from ..core.exceptions import ConflictError, NotFoundError, PersistenceError, StaleConflictError, ValidationError
from ..holidays.repository import HolidayRepository
from ..holidays.service import HolidayCalendar
from ..leaves.service import LeaveLedger
from ..locking.keyed_lock import KeyedLock
from ..schedules.service import ScheduleStore
from .conflicts import ConflictCheck, ConflictDetector, EmployeeSnapshot
from .model import LeaveRequest, OvertimeDeclaration
from .repository import RequestRepository
from .workflow import ApprovalWorkflow

logger = logging.getLogger(__name__)


class ScheduleIntegrityService:
    """Orchestrates validation, workflow transitions and persistence.

    Each mutating call resolves "now" once, then runs load -> validate ->
    transition -> save inside the employee's exclusive section. The new
    record is computed in memory before it is written. When a leave balance
    update follows and fails, the stored record is put back, so a failed call
    leaves nothing half-applied.
    """

    def __init__(
        self,
        requests: RequestRepository,
        schedules: ScheduleStore,
        holidays: HolidayRepository,
        clock: VirtualClock,
        locks: KeyedLock,
        *,
        detector: Optional[ConflictDetector] = None,
        workflow: Optional[ApprovalWorkflow] = None,
        ledger: Optional[LeaveLedger] = None,
        timezone_name: str = DEFAULT_TIMEZONE,
    ):
        self._requests = requests
        self._schedules = schedules
        self._holidays = holidays
        self._clock = clock
        self._locks = locks
        self._detector = detector or ConflictDetector()
        self._workflow = workflow or ApprovalWorkflow()
        self._ledger = ledger
        self._tz = timezone_name

    def _now(self) -> tuple[datetime, date]:
        now = self._clock.get_system_time()
        return now, local_date(now, self._tz)

    def _snapshot(self, employee_id: int) -> EmployeeSnapshot:
        return EmployeeSnapshot(
            employee_id=employee_id,
            timetable=self._schedules.timetable_for(employee_id),
            calendar=HolidayCalendar.load(self._holidays),
            leaves=tuple(self._requests.list_leaves_for_employee(employee_id=employee_id)),
            overtime=tuple(self._requests.list_overtime_for_employee(employee_id=employee_id)),
        )

    @staticmethod
    def _reject_on_conflict(check: ConflictCheck, *, employee_id: int, kind: str) -> None:
        if check.ok:
            return
        logger.info(
            "request_conflict",
            extra={"employee_id": employee_id, "kind": kind, "reason": check.reason.value if check.reason else None},
        )
        raise ConflictError(check.message, reason=check.reason)

    # Leave

    def submit_leave(
        self,
        *,
        employee_id: int,
        date_range: DateRange,
        reason: str,
        requested_by: Optional[int] = None,
        leave_type_id: Optional[int] = None,
        start_half_day: bool = False,
        end_half_day: bool = False,
        backfill: bool = False,
        timeout: Optional[float] = None,
    ) -> LeaveRequest:
        employee_id = require_positive_id(employee_id, "Employee")
        requester = require_positive_id(requested_by, "Requester") if requested_by is not None else employee_id
        date_range.require_valid("Leave dates")
        reason = require_non_empty(reason, "Reason")
        if start_half_day and end_half_day and date_range.start == date_range.end:
            raise ValidationError("A single-day leave cannot be a half day at both ends")
        if leave_type_id is not None:
            if self._ledger is None:
                raise ValidationError("Leave types are not configured")
            leave_type_id = self._ledger.require_active_type(leave_type_id).leave_type_id

        now, today = self._now()
        with self._locks.hold(employee_id, timeout=timeout):
            snapshot = self._snapshot(employee_id)
            check = self._detector.validate_leave(snapshot, date_range, today, backfill=backfill)
            self._reject_on_conflict(check, employee_id=employee_id, kind="leave")

            record = LeaveRequest(
                request_id=None,
                employee_id=employee_id,
                date_range=date_range,
                reason=reason,
                status=RequestStatus.PENDING,
                created_at=now,
                requested_by=requester,
                days_requested=self._days_requested(
                    snapshot, date_range, start_half_day=start_half_day, end_half_day=end_half_day
                ),
                leave_type_id=leave_type_id,
                start_half_day=bool(start_half_day),
                end_half_day=bool(end_half_day),
                is_backfill=bool(backfill),
            )
            saved = self._requests.save_leave(record)

        logger.info(
            "leave_submitted",
            extra={"employee_id": employee_id, "request_id": saved.request_id, "days": saved.days_requested},
        )
        return saved

    @staticmethod
    def _days_requested(
        snapshot: EmployeeSnapshot,
        date_range: DateRange,
        *,
        start_half_day: bool,
        end_half_day: bool,
    ) -> float:
        days = snapshot.timetable.leave_days_in(date_range, snapshot.calendar)
        total = float(len(days))
        if start_half_day and date_range.start in days:
            total -= 0.5
        if end_half_day and date_range.end in days:
            total -= 0.5
        return total

    def _charge_balance(self, previous: LeaveRequest, saved: LeaveRequest, *, credit: bool) -> None:
        """Move ``saved`` through the ledger; on failure put ``previous`` back and re-raise."""
        if self._ledger is None:
            return
        try:
            if credit:
                self._ledger.credit(saved)
            else:
                self._ledger.debit(saved)
        except PersistenceError:
            logger.error(
                "leave_balance_update_failed",
                extra={"request_id": saved.request_id, "employee_id": saved.employee_id},
            )
            self._requests.save_leave(previous)
            raise

    def _load_leave(self, request_id: int) -> LeaveRequest:
        request = self._requests.get_leave(request_id=int(request_id))
        if request is None:
            raise NotFoundError(f"Leave request {request_id} not found")
        return request

    def decide_leave(
        self,
        *,
        request_id: int,
        decision: Decision,
        decider_id: int,
        comment: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> LeaveRequest:
        request_id = require_positive_id(request_id, "Request")
        employee_id = self._load_leave(request_id).employee_id

        now, _ = self._now()
        with self._locks.hold(employee_id, timeout=timeout):
            request = self._load_leave(request_id)
            if decision == Decision.APPROVE:
                self._workflow.ensure_pending(request)
                recheck = self._detector.recheck_leave(self._snapshot(employee_id), request)
                try:
                    updated = self._workflow.approve(
                        request, decider_id=decider_id, decided_at=now, recheck=recheck, comment=comment
                    )
                except StaleConflictError as exc:
                    logger.warning(
                        "leave_stale_conflict",
                        extra={"request_id": request_id, "employee_id": employee_id, "reason": exc.reason},
                    )
                    raise
            else:
                updated = self._workflow.reject(request, decider_id=decider_id, decided_at=now, comment=comment or "")
            saved = self._requests.save_leave(updated)
            if saved.status == RequestStatus.APPROVED:
                self._charge_balance(request, saved, credit=False)

        logger.info(
            "leave_decided",
            extra={"request_id": request_id, "status": saved.status.value, "decided_by": saved.decided_by},
        )
        return saved

    def cancel_leave(
        self,
        *,
        request_id: int,
        actor_id: int,
        admin_override: bool = False,
        timeout: Optional[float] = None,
    ) -> LeaveRequest:
        request_id = require_positive_id(request_id, "Request")
        actor_id = require_positive_id(actor_id, "Actor")
        employee_id = self._load_leave(request_id).employee_id

        now, _ = self._now()
        with self._locks.hold(employee_id, timeout=timeout):
            request = self._load_leave(request_id)
            updated = self._workflow.cancel(request, actor_id=actor_id, cancelled_at=now, admin_override=admin_override)
            saved = self._requests.save_leave(updated)
            if request.status == RequestStatus.APPROVED:
                self._charge_balance(request, saved, credit=True)

        logger.info("leave_cancelled", extra={"request_id": request_id, "actor_id": actor_id})
        return saved

    # Overtime

    def submit_overtime(
        self,
        *,
        employee_id: int,
        work_date: date,
        interval: TimeInterval,
        reason: str,
        requested_by: Optional[int] = None,
        holiday_overtime: bool = False,
        backfill: bool = False,
        timeout: Optional[float] = None,
    ) -> OvertimeDeclaration:
        employee_id = require_positive_id(employee_id, "Employee")
        requester = require_positive_id(requested_by, "Requester") if requested_by is not None else employee_id
        interval.require_valid("Overtime interval")
        reason = require_non_empty(reason, "Reason")

        now, today = self._now()
        with self._locks.hold(employee_id, timeout=timeout):
            snapshot = self._snapshot(employee_id)
            check = self._detector.validate_overtime(
                snapshot,
                work_date,
                interval,
                today,
                holiday_overtime=holiday_overtime,
                backfill=backfill,
            )
            self._reject_on_conflict(check, employee_id=employee_id, kind="overtime")

            record = OvertimeDeclaration(
                request_id=None,
                employee_id=employee_id,
                work_date=work_date,
                interval=interval,
                reason=reason,
                status=RequestStatus.PENDING,
                created_at=now,
                requested_by=requester,
                is_holiday_overtime=bool(holiday_overtime),
                is_backfill=bool(backfill),
            )
            saved = self._requests.save_overtime(record)

        logger.info(
            "overtime_submitted",
            extra={"employee_id": employee_id, "request_id": saved.request_id, "minutes": saved.minutes},
        )
        return saved

    def _load_overtime(self, request_id: int) -> OvertimeDeclaration:
        declaration = self._requests.get_overtime(request_id=int(request_id))
        if declaration is None:
            raise NotFoundError(f"Overtime declaration {request_id} not found")
        return declaration

    def decide_overtime(
        self,
        *,
        request_id: int,
        decision: Decision,
        decider_id: int,
        comment: Optional[str] = None,
        approved_minutes: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> OvertimeDeclaration:
        request_id = require_positive_id(request_id, "Request")
        employee_id = self._load_overtime(request_id).employee_id

        now, _ = self._now()
        with self._locks.hold(employee_id, timeout=timeout):
            declaration = self._load_overtime(request_id)
            if decision == Decision.APPROVE:
                self._workflow.ensure_pending(declaration)
                granted = self._workflow.require_grantable(declaration, approved_minutes)
                recheck = self._detector.recheck_overtime(
                    self._snapshot(employee_id), declaration, approved_minutes=granted
                )
                try:
                    updated = self._workflow.approve(
                        declaration, decider_id=decider_id, decided_at=now, recheck=recheck, comment=comment
                    )
                    updated = replace(updated, approved_minutes=granted)
                except StaleConflictError as exc:
                    logger.warning(
                        "overtime_stale_conflict",
                        extra={"request_id": request_id, "employee_id": employee_id, "reason": exc.reason},
                    )
                    raise
            else:
                updated = self._workflow.reject(
                    declaration, decider_id=decider_id, decided_at=now, comment=comment or ""
                )
            saved = self._requests.save_overtime(updated)

        logger.info(
            "overtime_decided",
            extra={
                "request_id": request_id,
                "status": saved.status.value,
                "decided_by": saved.decided_by,
                "approved_minutes": saved.approved_minutes,
            },
        )
        return saved

    def withdraw_overtime(
        self,
        *,
        request_id: int,
        actor_id: int,
        admin_override: bool = False,
        timeout: Optional[float] = None,
    ) -> OvertimeDeclaration:
        request_id = require_positive_id(request_id, "Request")
        actor_id = require_positive_id(actor_id, "Actor")
        employee_id = self._load_overtime(request_id).employee_id

        with self._locks.hold(employee_id, timeout=timeout):
            declaration = self._load_overtime(request_id)
            self._workflow.ensure_withdrawable(declaration, actor_id=actor_id, admin_override=admin_override)
            if not self._requests.delete_overtime(request_id=request_id):
                raise NotFoundError(f"Overtime declaration {request_id} not found")

        logger.info("overtime_withdrawn", extra={"request_id": request_id, "actor_id": actor_id})
        return declaration

    # Queries

    def list_for_employee(self, *, employee_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> dict:
        employee_id = require_positive_id(employee_id, "Employee")
        if int(limit) <= 0:
            raise ValidationError("Limit must be positive")
        limit = int(limit)
        leaves = sorted(
            self._requests.list_leaves_for_employee(employee_id=employee_id),
            key=lambda r: r.precedence,
            reverse=True,
        )
        overtime = sorted(
            self._requests.list_overtime_for_employee(employee_id=employee_id),
            key=lambda r: r.precedence,
            reverse=True,
        )
        return {"leaves": leaves[:limit], "overtime": overtime[:limit]}

    def list_pending(self, *, limit: int = DEFAULT_PENDING_LIMIT) -> dict:
        if int(limit) <= 0:
            raise ValidationError("Limit must be positive")
        leaves, overtime = self._requests.list_pending(limit=int(limit))
        return {"leaves": list(leaves), "overtime": list(overtime)}
