from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, TypeVar, Union

from ..core.enums import RequestStatus
from ..core.exceptions import AuthorizationError, StaleConflictError, TerminalStateError, ValidationError
from .conflicts import ConflictCheck
from .model import LeaveRequest, OvertimeDeclaration

Record = TypeVar("Record", LeaveRequest, OvertimeDeclaration)


class ApprovalWorkflow:
    """State machine: Pending -> Approved | Rejected | Cancelled.

    Transitions are pure and return a new record; a failed transition raises
    and leaves the input untouched (no ``decided_at`` change).
    """

    @staticmethod
    def ensure_pending(record: Union[LeaveRequest, OvertimeDeclaration]) -> None:
        if record.status.is_terminal:
            raise TerminalStateError(
                f"{record.kind.value.title()} request {record.request_id} is already {record.status.value}"
            )

    def approve(
        self,
        record: Record,
        *,
        decider_id: int,
        decided_at: datetime,
        recheck: ConflictCheck,
        comment: Optional[str] = None,
    ) -> Record:
        self.ensure_pending(record)
        self._require_decider(decider_id)
        if not recheck.ok:
            raise StaleConflictError(recheck.message, reason=recheck.reason)

        return replace(
            record,
            status=RequestStatus.APPROVED,
            decided_at=decided_at,
            decided_by=int(decider_id),
            decision_comment=(comment or "").strip() or None,
        )

    @staticmethod
    def require_grantable(declaration: OvertimeDeclaration, approved_minutes: Optional[int]) -> Optional[int]:
        if approved_minutes is None:
            return None
        minutes = int(approved_minutes)
        if minutes <= 0 or minutes > declaration.minutes:
            raise ValidationError(f"Approved minutes must be between 1 and the {declaration.minutes} declared")
        return minutes

    def reject(self, record: Record, *, decider_id: int, decided_at: datetime, comment: str) -> Record:
        self.ensure_pending(record)
        self._require_decider(decider_id)
        note = (comment or "").strip()
        if not note:
            raise ValidationError("A comment is required to reject a request")

        return replace(
            record,
            status=RequestStatus.REJECTED,
            decided_at=decided_at,
            decided_by=int(decider_id),
            decision_comment=note,
        )

    def cancel(
        self,
        record: LeaveRequest,
        *,
        actor_id: int,
        cancelled_at: datetime,
        admin_override: bool = False,
    ) -> LeaveRequest:
        """Requester cancels while Pending; an admin may also withdraw approved leave."""
        if not (admin_override and record.status == RequestStatus.APPROVED):
            self.ensure_pending(record)
        self.ensure_owner(record, actor_id=actor_id, admin_override=admin_override)
        return replace(
            record,
            status=RequestStatus.CANCELLED,
            decided_at=cancelled_at,
            decided_by=int(actor_id),
        )

    def ensure_withdrawable(
        self,
        record: OvertimeDeclaration,
        *,
        actor_id: int,
        admin_override: bool = False,
    ) -> None:
        """Overtime has no Cancelled state: a pending declaration is withdrawn by deletion."""
        self.ensure_pending(record)
        self.ensure_owner(record, actor_id=actor_id, admin_override=admin_override)

    @staticmethod
    def ensure_owner(
        record: Union[LeaveRequest, OvertimeDeclaration],
        *,
        actor_id: int,
        admin_override: bool,
    ) -> None:
        if admin_override:
            return
        if int(actor_id) != record.requested_by:
            raise AuthorizationError("Only the original requester can cancel this request")

    @staticmethod
    def _require_decider(decider_id: int) -> None:
        if decider_id is None or int(decider_id) <= 0:
            raise ValidationError("A decider identity is required")
