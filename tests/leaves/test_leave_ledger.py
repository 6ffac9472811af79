from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from src.hr_schedule.hr_schedule.common.periods import DateRange
from src.hr_schedule.hr_schedule.core.enums import RequestStatus
from src.hr_schedule.hr_schedule.core.exceptions import NotFoundError, ValidationError
from src.hr_schedule.hr_schedule.database.memory import InMemoryLeaveBalanceRepository, InMemoryLeaveTypeRepository
from src.hr_schedule.hr_schedule.leaves.model import LeaveType
from src.hr_schedule.hr_schedule.leaves.service import LeaveLedger
from src.hr_schedule.hr_schedule.requests.model import LeaveRequest


def _ledger() -> LeaveLedger:
    types = InMemoryLeaveTypeRepository(
        [
            LeaveType(leave_type_id=None, code="SICK", name="Sick leave", sort_order=2),
            LeaveType(leave_type_id=None, code="ANNUAL", name="Annual leave", sort_order=1),
            LeaveType(leave_type_id=None, code="OLD", name="Retired", is_active=False),
        ]
    )
    return LeaveLedger(types, InMemoryLeaveBalanceRepository())


def _leave(days: float, *, leave_type_id=2, start=date(2024, 12, 30)) -> LeaveRequest:
    return LeaveRequest(
        request_id=1,
        employee_id=5,
        date_range=DateRange(start, date(2025, 1, 2)),
        reason="Holidays",
        status=RequestStatus.APPROVED,
        created_at=datetime(2024, 6, 20, 9, 0, tzinfo=timezone.utc),
        requested_by=5,
        days_requested=days,
        leave_type_id=leave_type_id,
    )


def test_active_types_are_listed_in_sort_order():
    ledger = _ledger()

    assert [t.code for t in ledger.list_types()] == ["ANNUAL", "SICK"]
    assert len(ledger.list_types(active_only=False)) == 3


def test_add_type_normalises_code_and_rejects_duplicates():
    ledger = _ledger()

    added = ledger.add_type(code=" unpaid ", name="Unpaid leave")
    assert added.code == "UNPAID"
    with pytest.raises(ValidationError):
        ledger.add_type(code="Annual", name="Annual again")


def test_require_active_type():
    ledger = _ledger()

    assert ledger.require_active_type(2).code == "ANNUAL"
    with pytest.raises(NotFoundError):
        ledger.require_active_type(40)
    with pytest.raises(ValidationError):
        ledger.require_active_type(3)


def test_entitlement_keeps_taken_days_and_rejects_bad_amounts():
    ledger = _ledger()
    ledger.set_entitlement(employee_id=5, leave_type_id=2, year=2024, entitled=20)
    ledger.debit(_leave(3.5))

    updated = ledger.set_entitlement(employee_id=5, leave_type_id=2, year=2024, entitled=25)
    assert updated.taken == 3.5
    assert updated.remaining == 21.5

    for bad in (-1, 2.25):
        with pytest.raises(ValidationError):
            ledger.set_entitlement(employee_id=5, leave_type_id=2, year=2024, entitled=bad)


def test_leave_is_charged_to_the_year_it_starts_in():
    ledger = _ledger()
    ledger.set_entitlement(employee_id=5, leave_type_id=2, year=2024, entitled=20)
    ledger.set_entitlement(employee_id=5, leave_type_id=2, year=2025, entitled=20)

    ledger.debit(_leave(2.0))

    [this_year] = ledger.balances_for(employee_id=5, year=2024)
    [next_year] = ledger.balances_for(employee_id=5, year=2025)
    assert this_year.taken == 2.0
    assert next_year.taken == 0.0

    ledger.credit(_leave(2.0))
    assert ledger.balances_for(employee_id=5, year=2024)[0].taken == 0.0


def test_untracked_leave_changes_nothing():
    ledger = _ledger()

    assert ledger.debit(_leave(2.0, leave_type_id=None)) is None
    assert ledger.debit(_leave(2.0)) is None  # no entitlement row for 2024
    assert ledger.balances_for(employee_id=5, year=2024) == []
