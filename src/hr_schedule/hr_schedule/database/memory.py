"""In-process repositories for the ``memory`` storage mode and tests.

Each store guards its dicts with its own lock; cross-record invariants are
the caller's job (the per-employee section in the services).
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Dict, Iterable, Optional, Sequence

from ..core.enums import RequestStatus
from ..holidays.model import PublicHoliday
from ..leaves.model import LeaveBalance, LeaveType
from ..requests.model import LeaveRequest, OvertimeDeclaration
from ..schedules.model import WorkSchedule


class InMemoryScheduleRepository:
    def __init__(self, schedules: Iterable[WorkSchedule] = ()):
        self._lock = threading.Lock()
        self._rows: Dict[int, WorkSchedule] = {}
        self._next_id = 1
        for schedule in schedules:
            self.save_schedule(schedule)

    def load_schedules(self, *, employee_id: int) -> Sequence[WorkSchedule]:
        with self._lock:
            rows = [s for s in self._rows.values() if s.employee_id == int(employee_id)]
        rows.sort(key=lambda s: (s.effective_from, s.schedule_id or 0))
        return rows

    def save_schedule(self, schedule: WorkSchedule) -> WorkSchedule:
        with self._lock:
            saved = replace(schedule, schedule_id=self._next_id)
            self._rows[self._next_id] = saved
            self._next_id += 1
            return saved


class InMemoryHolidayRepository:
    def __init__(self, holidays: Iterable[PublicHoliday] = ()):
        self._lock = threading.Lock()
        self._rows: Dict[int, PublicHoliday] = {}
        self._next_id = 1
        for holiday in holidays:
            self.save_holiday(holiday)

    def load_holidays(self) -> Sequence[PublicHoliday]:
        with self._lock:
            return list(self._rows.values())

    def save_holiday(self, holiday: PublicHoliday) -> PublicHoliday:
        with self._lock:
            saved = replace(holiday, holiday_id=self._next_id)
            self._rows[self._next_id] = saved
            self._next_id += 1
            return saved


class InMemoryRequestRepository:
    def __init__(self):
        self._lock = threading.Lock()
        self._leaves: Dict[int, LeaveRequest] = {}
        self._overtime: Dict[int, OvertimeDeclaration] = {}
        # One sequence for both kinds keeps ids unambiguous in logs.
        self._next_id = 1

    def _allocate_id(self) -> int:
        rid = self._next_id
        self._next_id += 1
        return rid

    # Leave requests
    def get_leave(self, *, request_id: int) -> Optional[LeaveRequest]:
        with self._lock:
            return self._leaves.get(int(request_id))

    def list_leaves_for_employee(self, *, employee_id: int) -> Sequence[LeaveRequest]:
        with self._lock:
            rows = [r for r in self._leaves.values() if r.employee_id == int(employee_id)]
        rows.sort(key=lambda r: r.precedence)
        return rows

    def save_leave(self, request: LeaveRequest) -> LeaveRequest:
        with self._lock:
            if request.request_id is None:
                request = replace(request, request_id=self._allocate_id())
            self._leaves[int(request.request_id)] = request
            return request

    # Overtime declarations
    def get_overtime(self, *, request_id: int) -> Optional[OvertimeDeclaration]:
        with self._lock:
            return self._overtime.get(int(request_id))

    def list_overtime_for_employee(self, *, employee_id: int) -> Sequence[OvertimeDeclaration]:
        with self._lock:
            rows = [r for r in self._overtime.values() if r.employee_id == int(employee_id)]
        rows.sort(key=lambda r: r.precedence)
        return rows

    def save_overtime(self, declaration: OvertimeDeclaration) -> OvertimeDeclaration:
        with self._lock:
            if declaration.request_id is None:
                declaration = replace(declaration, request_id=self._allocate_id())
            self._overtime[int(declaration.request_id)] = declaration
            return declaration

    def delete_overtime(self, *, request_id: int) -> bool:
        with self._lock:
            current = self._overtime.get(int(request_id))
            if current is None or current.status != RequestStatus.PENDING:
                return False
            del self._overtime[int(request_id)]
            return True

    # Queues
    def list_pending(self, *, limit: int = 500) -> tuple[Sequence[LeaveRequest], Sequence[OvertimeDeclaration]]:
        with self._lock:
            leaves = [r for r in self._leaves.values() if r.status == RequestStatus.PENDING]
            overtime = [r for r in self._overtime.values() if r.status == RequestStatus.PENDING]
        leaves.sort(key=lambda r: r.precedence)
        overtime.sort(key=lambda r: r.precedence)
        return leaves[:limit], overtime[:limit]


class InMemoryLeaveTypeRepository:
    def __init__(self, leave_types: Iterable[LeaveType] = ()):
        self._lock = threading.Lock()
        self._rows: Dict[int, LeaveType] = {}
        self._next_id = 1
        for leave_type in leave_types:
            self.save_type(leave_type)

    def list_types(self, *, active_only: bool = True) -> Sequence[LeaveType]:
        with self._lock:
            rows = [t for t in self._rows.values() if t.is_active or not active_only]
        rows.sort(key=lambda t: (t.sort_order, t.name))
        return rows

    def get_type(self, *, leave_type_id: int) -> Optional[LeaveType]:
        with self._lock:
            return self._rows.get(int(leave_type_id))

    def save_type(self, leave_type: LeaveType) -> LeaveType:
        with self._lock:
            saved = replace(leave_type, leave_type_id=self._next_id)
            self._rows[self._next_id] = saved
            self._next_id += 1
            return saved


class InMemoryLeaveBalanceRepository:
    def __init__(self):
        self._lock = threading.Lock()
        self._rows: Dict[tuple[int, int, int], LeaveBalance] = {}

    def get_balance(self, *, employee_id: int, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        with self._lock:
            return self._rows.get((int(employee_id), int(leave_type_id), int(year)))

    def list_balances(self, *, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        with self._lock:
            rows = [b for b in self._rows.values() if b.employee_id == int(employee_id) and b.year == int(year)]
        rows.sort(key=lambda b: b.leave_type_id)
        return rows

    def save_balance(self, balance: LeaveBalance) -> LeaveBalance:
        with self._lock:
            self._rows[(balance.employee_id, balance.leave_type_id, balance.year)] = balance
            return balance

    def adjust_taken(self, *, employee_id: int, leave_type_id: int, year: int, delta: float) -> Optional[LeaveBalance]:
        key = (int(employee_id), int(leave_type_id), int(year))
        with self._lock:
            current = self._rows.get(key)
            if current is None:
                return None
            updated = replace(current, taken=current.taken + float(delta))
            self._rows[key] = updated
            return updated
