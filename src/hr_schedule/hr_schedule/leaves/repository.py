from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import LeaveBalance, LeaveType


class LeaveTypeRepository(Protocol):
    def list_types(self, *, active_only: bool = True) -> Sequence[LeaveType]:
        """Ordered by ``sort_order`` then name."""

        raise NotImplementedError

    def get_type(self, *, leave_type_id: int) -> Optional[LeaveType]:
        raise NotImplementedError

    def save_type(self, leave_type: LeaveType) -> LeaveType:
        raise NotImplementedError


class LeaveBalanceRepository(Protocol):
    def get_balance(self, *, employee_id: int, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def list_balances(self, *, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    def save_balance(self, balance: LeaveBalance) -> LeaveBalance:
        """Insert or replace the entitlement row for (employee, type, year)."""

        raise NotImplementedError

    def adjust_taken(self, *, employee_id: int, leave_type_id: int, year: int, delta: float) -> Optional[LeaveBalance]:
        """Add ``delta`` days to ``taken`` atomically; None when no row exists."""

        raise NotImplementedError
