from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from src.hr_schedule.hr_schedule.common.periods import DateRange
from src.hr_schedule.hr_schedule.core.enums import ConflictReason, RequestStatus
from src.hr_schedule.hr_schedule.core.exceptions import (
    AuthorizationError,
    StaleConflictError,
    TerminalStateError,
    ValidationError,
)
from src.hr_schedule.hr_schedule.requests.conflicts import ConflictCheck
from src.hr_schedule.hr_schedule.requests.model import LeaveRequest
from src.hr_schedule.hr_schedule.requests.workflow import ApprovalWorkflow

CREATED = datetime(2024, 6, 20, 9, 0, tzinfo=timezone.utc)
DECIDED = datetime(2024, 6, 21, 10, 0, tzinfo=timezone.utc)
LATER = datetime(2024, 6, 22, 10, 0, tzinfo=timezone.utc)


def _pending() -> LeaveRequest:
    return LeaveRequest(
        request_id=1,
        employee_id=42,
        date_range=DateRange(date(2024, 7, 1), date(2024, 7, 5)),
        reason="Holiday",
        status=RequestStatus.PENDING,
        created_at=CREATED,
        requested_by=42,
    )


def test_approve_sets_decider_and_timestamp():
    approved = ApprovalWorkflow().approve(_pending(), decider_id=7, decided_at=DECIDED, recheck=ConflictCheck.passed())

    assert approved.status == RequestStatus.APPROVED
    assert approved.decided_by == 7
    assert approved.decided_at == DECIDED


def test_failed_recheck_raises_stale_conflict_and_keeps_pending():
    workflow = ApprovalWorkflow()
    request = _pending()
    recheck = ConflictCheck.failed(ConflictReason.SUPERSEDED, "Superseded by earlier pending leave request 9")

    with pytest.raises(StaleConflictError) as exc:
        workflow.approve(request, decider_id=7, decided_at=DECIDED, recheck=recheck)

    assert exc.value.reason == ConflictReason.SUPERSEDED
    assert request.status == RequestStatus.PENDING
    assert request.decided_at is None


@pytest.mark.parametrize("status", [RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED])
def test_terminal_records_cannot_be_approved_again(status):
    workflow = ApprovalWorkflow()
    decided = replace(_pending(), status=status, decided_at=DECIDED, decided_by=7)

    with pytest.raises(TerminalStateError):
        workflow.approve(decided, decider_id=8, decided_at=LATER, recheck=ConflictCheck.passed())
    with pytest.raises(TerminalStateError):
        workflow.reject(decided, decider_id=8, decided_at=LATER, comment="No")

    assert decided.decided_at == DECIDED


def test_reject_requires_comment():
    workflow = ApprovalWorkflow()

    with pytest.raises(ValidationError):
        workflow.reject(_pending(), decider_id=7, decided_at=DECIDED, comment="   ")

    rejected = workflow.reject(_pending(), decider_id=7, decided_at=DECIDED, comment="Team is short-staffed")
    assert rejected.status == RequestStatus.REJECTED
    assert rejected.decision_comment == "Team is short-staffed"


def test_decider_identity_is_required():
    with pytest.raises(ValidationError):
        ApprovalWorkflow().approve(_pending(), decider_id=0, decided_at=DECIDED, recheck=ConflictCheck.passed())


def test_only_requester_may_cancel_without_override():
    workflow = ApprovalWorkflow()

    with pytest.raises(AuthorizationError):
        workflow.cancel(_pending(), actor_id=99, cancelled_at=DECIDED)

    cancelled = workflow.cancel(_pending(), actor_id=42, cancelled_at=DECIDED)
    assert cancelled.status == RequestStatus.CANCELLED
    assert cancelled.decided_by == 42

    by_admin = workflow.cancel(_pending(), actor_id=99, cancelled_at=DECIDED, admin_override=True)
    assert by_admin.status == RequestStatus.CANCELLED


def test_approved_leave_can_only_be_cancelled_by_admin_override():
    workflow = ApprovalWorkflow()
    approved = workflow.approve(_pending(), decider_id=7, decided_at=DECIDED, recheck=ConflictCheck.passed())

    with pytest.raises(TerminalStateError):
        workflow.cancel(approved, actor_id=42, cancelled_at=LATER)

    cancelled = workflow.cancel(approved, actor_id=7, cancelled_at=LATER, admin_override=True)
    assert cancelled.status == RequestStatus.CANCELLED

    with pytest.raises(TerminalStateError):
        workflow.cancel(cancelled, actor_id=7, cancelled_at=LATER, admin_override=True)
