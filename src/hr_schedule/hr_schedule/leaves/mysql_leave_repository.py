from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveBalance, LeaveType
from .repository import LeaveBalanceRepository, LeaveTypeRepository

_TYPE_COLUMNS = "leave_type_id, code, name, color, is_active, sort_order"
_BALANCE_COLUMNS = "employee_id, leave_type_id, year, entitled, taken"


def _row_to_type(r: dict) -> LeaveType:
    return LeaveType(
        leave_type_id=int(r["leave_type_id"]),
        code=r["code"],
        name=r["name"],
        color=r.get("color"),
        is_active=bool(r.get("is_active")),
        sort_order=int(r.get("sort_order") or 0),
    )


def _row_to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        employee_id=int(r["employee_id"]),
        leave_type_id=int(r["leave_type_id"]),
        year=int(r["year"]),
        entitled=float(r["entitled"]),
        taken=float(r["taken"]),
    )


class MySQLLeaveTypeRepository(LeaveTypeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_types(self, *, active_only: bool = True) -> Sequence[LeaveType]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TYPE_COLUMNS} FROM leave_types {where} ORDER BY sort_order ASC, name ASC")
            return [_row_to_type(r) for r in fetchall(cur)]

    def get_type(self, *, leave_type_id: int) -> Optional[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TYPE_COLUMNS} FROM leave_types WHERE leave_type_id=%s", (int(leave_type_id),))
            r = fetchone(cur)
            return _row_to_type(r) if r else None

    def save_type(self, leave_type: LeaveType) -> LeaveType:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_types(code, name, color, is_active, sort_order)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    leave_type.code,
                    leave_type.name,
                    leave_type.color,
                    int(leave_type.is_active),
                    leave_type.sort_order,
                ),
            )
            return replace(leave_type, leave_type_id=int(cur.lastrowid))


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_balance(self, *, employee_id: int, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_BALANCE_COLUMNS}
                FROM leave_balances
                WHERE employee_id=%s AND leave_type_id=%s AND year=%s
                """,
                (int(employee_id), int(leave_type_id), int(year)),
            )
            r = fetchone(cur)
            return _row_to_balance(r) if r else None

    def list_balances(self, *, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_BALANCE_COLUMNS}
                FROM leave_balances
                WHERE employee_id=%s AND year=%s
                ORDER BY leave_type_id ASC
                """,
                (int(employee_id), int(year)),
            )
            return [_row_to_balance(r) for r in fetchall(cur)]

    def save_balance(self, balance: LeaveBalance) -> LeaveBalance:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(employee_id, leave_type_id, year, entitled, taken)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE entitled=VALUES(entitled), taken=VALUES(taken)
                """,
                (balance.employee_id, balance.leave_type_id, balance.year, balance.entitled, balance.taken),
            )
            return balance

    def adjust_taken(self, *, employee_id: int, leave_type_id: int, year: int, delta: float) -> Optional[LeaveBalance]:
        key = (int(employee_id), int(leave_type_id), int(year))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET taken = taken + %s
                WHERE employee_id=%s AND leave_type_id=%s AND year=%s
                """,
                (float(delta), *key),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(
                f"""
                SELECT {_BALANCE_COLUMNS}
                FROM leave_balances
                WHERE employee_id=%s AND leave_type_id=%s AND year=%s
                """,
                key,
            )
            r = fetchone(cur)
            return _row_to_balance(r) if r else None
