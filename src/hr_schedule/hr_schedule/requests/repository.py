from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import LeaveRequest, OvertimeDeclaration


class RequestRepository(Protocol):
    # Leave requests
    def get_leave(self, *, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_leaves_for_employee(self, *, employee_id: int) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def save_leave(self, request: LeaveRequest) -> LeaveRequest:
        """Insert when ``request_id`` is None, otherwise update; returns the stored record."""

        raise NotImplementedError

    # Overtime declarations
    def get_overtime(self, *, request_id: int) -> Optional[OvertimeDeclaration]:
        raise NotImplementedError

    def list_overtime_for_employee(self, *, employee_id: int) -> Sequence[OvertimeDeclaration]:
        raise NotImplementedError

    def save_overtime(self, declaration: OvertimeDeclaration) -> OvertimeDeclaration:
        raise NotImplementedError

    def delete_overtime(self, *, request_id: int) -> bool:
        raise NotImplementedError

    # Queues
    def list_pending(self, *, limit: int = 500) -> tuple[Sequence[LeaveRequest], Sequence[OvertimeDeclaration]]:
        """Pending leaves and overtime across all employees, oldest first."""

        raise NotImplementedError
