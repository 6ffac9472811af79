from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty, require_positive_id
from ..core.exceptions import NotFoundError, ValidationError
from ..requests.model import LeaveRequest
from .model import LeaveBalance, LeaveType
from .repository import LeaveBalanceRepository, LeaveTypeRepository

logger = logging.getLogger(__name__)


class LeaveLedger:
    """Leave types and the yearly balances approved leave is charged against.

    A leave is charged to the year its first day falls in. Employees without
    an entitlement row for that year are not tracked, so nothing is charged.
    """

    def __init__(self, types: LeaveTypeRepository, balances: LeaveBalanceRepository):
        self._types = types
        self._balances = balances

    # Types

    def list_types(self, *, active_only: bool = True) -> Sequence[LeaveType]:
        return self._types.list_types(active_only=active_only)

    def add_type(self, *, code: str, name: str, color: Optional[str] = None, sort_order: int = 0) -> LeaveType:
        code = require_non_empty(code, "Code").upper()
        name = require_non_empty(name, "Name")
        if any(t.code == code for t in self._types.list_types(active_only=False)):
            raise ValidationError(f"Leave type {code} already exists")
        saved = self._types.save_type(
            LeaveType(leave_type_id=None, code=code, name=name, color=color, sort_order=int(sort_order))
        )
        logger.info("leave_type_added", extra={"leave_type_id": saved.leave_type_id, "code": code})
        return saved

    def require_active_type(self, leave_type_id: int) -> LeaveType:
        leave_type_id = require_positive_id(leave_type_id, "Leave type")
        leave_type = self._types.get_type(leave_type_id=leave_type_id)
        if leave_type is None:
            raise NotFoundError(f"Leave type {leave_type_id} not found")
        if not leave_type.is_active:
            raise ValidationError(f"Leave type {leave_type.code} is no longer offered")
        return leave_type

    # Balances

    def balances_for(self, *, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        employee_id = require_positive_id(employee_id, "Employee")
        return self._balances.list_balances(employee_id=employee_id, year=int(year))

    def set_entitlement(self, *, employee_id: int, leave_type_id: int, year: int, entitled: float) -> LeaveBalance:
        employee_id = require_positive_id(employee_id, "Employee")
        self.require_active_type(leave_type_id)
        if entitled < 0 or (entitled * 2) != int(entitled * 2):
            raise ValidationError("Entitlement must be a non-negative number of half days")

        current = self._balances.get_balance(employee_id=employee_id, leave_type_id=int(leave_type_id), year=int(year))
        balance = LeaveBalance(
            employee_id=employee_id,
            leave_type_id=int(leave_type_id),
            year=int(year),
            entitled=float(entitled),
            taken=current.taken if current else 0.0,
        )
        return self._balances.save_balance(balance)

    def debit(self, leave: LeaveRequest) -> Optional[LeaveBalance]:
        return self._adjust(leave, leave.days_requested)

    def credit(self, leave: LeaveRequest) -> Optional[LeaveBalance]:
        return self._adjust(leave, -leave.days_requested)

    def _adjust(self, leave: LeaveRequest, delta: float) -> Optional[LeaveBalance]:
        if leave.leave_type_id is None or not delta:
            return None
        balance = self._balances.adjust_taken(
            employee_id=leave.employee_id,
            leave_type_id=leave.leave_type_id,
            year=leave.date_range.start.year,
            delta=delta,
        )
        if balance is not None:
            logger.info(
                "leave_balance_adjusted",
                extra={
                    "employee_id": leave.employee_id,
                    "leave_type_id": leave.leave_type_id,
                    "year": balance.year,
                    "delta": delta,
                    "taken": balance.taken,
                },
            )
        return balance
