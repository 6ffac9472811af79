from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.periods import DateRange, TimeInterval
from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_datetime,
    normalize_mysql_time,
    to_db_datetime,
)
from .model import LeaveRequest, OvertimeDeclaration
from .repository import RequestRepository

_LEAVE_COLUMNS = """
    request_id, employee_id, leave_type_id, start_date, end_date, start_half_day, end_half_day,
    days_requested, reason, status, is_backfill, requested_by, created_at, decided_at, decided_by, decision_comment
"""

_OVERTIME_COLUMNS = """
    request_id, employee_id, work_date, start_time, end_time, reason, status,
    is_holiday_overtime, is_backfill, approved_minutes, requested_by, created_at, decided_at, decided_by,
    decision_comment
"""


def _row_to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        date_range=DateRange(r["start_date"], r["end_date"]),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=from_db_datetime(r["created_at"]),
        requested_by=int(r["requested_by"]),
        days_requested=float(r.get("days_requested") or 0),
        leave_type_id=int(r["leave_type_id"]) if r.get("leave_type_id") is not None else None,
        start_half_day=bool(r.get("start_half_day")),
        end_half_day=bool(r.get("end_half_day")),
        is_backfill=bool(r.get("is_backfill")),
        decided_at=from_db_datetime(r.get("decided_at")),
        decided_by=int(r["decided_by"]) if r.get("decided_by") is not None else None,
        decision_comment=r.get("decision_comment"),
    )


def _row_to_overtime(r: dict) -> OvertimeDeclaration:
    return OvertimeDeclaration(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        interval=TimeInterval(normalize_mysql_time(r["start_time"]), normalize_mysql_time(r["end_time"])),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=from_db_datetime(r["created_at"]),
        requested_by=int(r["requested_by"]),
        is_holiday_overtime=bool(r.get("is_holiday_overtime")),
        is_backfill=bool(r.get("is_backfill")),
        approved_minutes=int(r["approved_minutes"]) if r.get("approved_minutes") is not None else None,
        decided_at=from_db_datetime(r.get("decided_at")),
        decided_by=int(r["decided_by"]) if r.get("decided_by") is not None else None,
        decision_comment=r.get("decision_comment"),
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # Leave requests
    def get_leave(self, *, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_LEAVE_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def list_leaves_for_employee(self, *, employee_id: int) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LEAVE_COLUMNS}
                FROM leave_requests
                WHERE employee_id=%s
                ORDER BY created_at ASC, request_id ASC
                """,
                (int(employee_id),),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def save_leave(self, request: LeaveRequest) -> LeaveRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            if request.request_id is None:
                cur.execute(
                    """
                    INSERT INTO leave_requests(
                        employee_id, leave_type_id, start_date, end_date, start_half_day, end_half_day,
                        days_requested, reason, status, is_backfill, requested_by, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        request.employee_id,
                        request.leave_type_id,
                        request.date_range.start,
                        request.date_range.end,
                        int(request.start_half_day),
                        int(request.end_half_day),
                        request.days_requested,
                        request.reason,
                        request.status.value,
                        int(request.is_backfill),
                        request.requested_by,
                        to_db_datetime(request.created_at),
                    ),
                )
                return replace(request, request_id=int(cur.lastrowid))

            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_at=%s, decided_by=%s, decision_comment=%s
                WHERE request_id=%s
                """,
                (
                    request.status.value,
                    to_db_datetime(request.decided_at),
                    request.decided_by,
                    request.decision_comment,
                    int(request.request_id),
                ),
            )
            return request

    # Overtime declarations
    def get_overtime(self, *, request_id: int) -> Optional[OvertimeDeclaration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_OVERTIME_COLUMNS} FROM overtime_declarations WHERE request_id=%s",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _row_to_overtime(r) if r else None

    def list_overtime_for_employee(self, *, employee_id: int) -> Sequence[OvertimeDeclaration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_OVERTIME_COLUMNS}
                FROM overtime_declarations
                WHERE employee_id=%s
                ORDER BY created_at ASC, request_id ASC
                """,
                (int(employee_id),),
            )
            return [_row_to_overtime(r) for r in fetchall(cur)]

    def save_overtime(self, declaration: OvertimeDeclaration) -> OvertimeDeclaration:
        with db_cursor(self._conn_factory) as (_, cur):
            if declaration.request_id is None:
                cur.execute(
                    """
                    INSERT INTO overtime_declarations(
                        employee_id, work_date, start_time, end_time, reason, status,
                        is_holiday_overtime, is_backfill, requested_by, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        declaration.employee_id,
                        declaration.work_date,
                        declaration.interval.start,
                        declaration.interval.end,
                        declaration.reason,
                        declaration.status.value,
                        int(declaration.is_holiday_overtime),
                        int(declaration.is_backfill),
                        declaration.requested_by,
                        to_db_datetime(declaration.created_at),
                    ),
                )
                return replace(declaration, request_id=int(cur.lastrowid))

            cur.execute(
                """
                UPDATE overtime_declarations
                SET status=%s, approved_minutes=%s, decided_at=%s, decided_by=%s, decision_comment=%s
                WHERE request_id=%s
                """,
                (
                    declaration.status.value,
                    declaration.approved_minutes,
                    to_db_datetime(declaration.decided_at),
                    declaration.decided_by,
                    declaration.decision_comment,
                    int(declaration.request_id),
                ),
            )
            return declaration

    def delete_overtime(self, *, request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM overtime_declarations WHERE request_id=%s AND status=%s",
                (int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    # Queues
    def list_pending(self, *, limit: int = 500) -> tuple[Sequence[LeaveRequest], Sequence[OvertimeDeclaration]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LEAVE_COLUMNS}
                FROM leave_requests
                WHERE status=%s
                ORDER BY created_at ASC, request_id ASC
                LIMIT %s
                """,
                (RequestStatus.PENDING.value, int(limit)),
            )
            leaves = [_row_to_leave(r) for r in fetchall(cur)]

            cur.execute(
                f"""
                SELECT {_OVERTIME_COLUMNS}
                FROM overtime_declarations
                WHERE status=%s
                ORDER BY created_at ASC, request_id ASC
                LIMIT %s
                """,
                (RequestStatus.PENDING.value, int(limit)),
            )
            overtime = [_row_to_overtime(r) for r in fetchall(cur)]
            return leaves, overtime
