from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .clock.service import VirtualClock
from .core.constants import DEFAULT_DAILY_OVERTIME_CAP_MINUTES, DEFAULT_LOCK_TIMEOUT_SECONDS, DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .database.memory import (
    InMemoryHolidayRepository,
    InMemoryLeaveBalanceRepository,
    InMemoryLeaveTypeRepository,
    InMemoryRequestRepository,
    InMemoryScheduleRepository,
)
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .leaves.mysql_leave_repository import MySQLLeaveBalanceRepository, MySQLLeaveTypeRepository
from .leaves.repository import LeaveBalanceRepository, LeaveTypeRepository
from .leaves.service import LeaveLedger
from .locking.keyed_lock import KeyedLock
from .requests.conflicts import ConflictDetector
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import ScheduleIntegrityService
from .requests.workflow import ApprovalWorkflow
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleStore
from .web.auth import CapabilityChecker, HeaderCapabilityChecker


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    schedules_repo: ScheduleRepository
    holidays_repo: HolidayRepository
    requests_repo: RequestRepository
    leave_types_repo: LeaveTypeRepository
    leave_balances_repo: LeaveBalanceRepository

    clock: VirtualClock
    locks: KeyedLock
    schedule_store: ScheduleStore
    leave_ledger: LeaveLedger
    integrity_service: ScheduleIntegrityService
    capabilities: CapabilityChecker
    timezone_name: str


def build_container(
    *,
    db_config: Optional[dict] = None,
    storage: str = "mysql",
    timezone_name: str = DEFAULT_TIMEZONE,
    daily_overtime_cap_minutes: int = DEFAULT_DAILY_OVERTIME_CAP_MINUTES,
    lock_timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    clock: Optional[VirtualClock] = None,
    capabilities: Optional[CapabilityChecker] = None,
) -> Container:
    conn: Optional[DatabaseConnection] = None
    if storage == "memory":
        schedules_repo: ScheduleRepository = InMemoryScheduleRepository()
        holidays_repo: HolidayRepository = InMemoryHolidayRepository()
        requests_repo: RequestRepository = InMemoryRequestRepository()
        leave_types_repo: LeaveTypeRepository = InMemoryLeaveTypeRepository()
        leave_balances_repo: LeaveBalanceRepository = InMemoryLeaveBalanceRepository()
    elif storage == "mysql":
        if not db_config:
            raise ValueError("db_config is required for mysql storage")
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
        schedules_repo = MySQLScheduleRepository(conn)
        holidays_repo = MySQLHolidayRepository(conn)
        requests_repo = MySQLRequestRepository(conn)
        leave_types_repo = MySQLLeaveTypeRepository(conn)
        leave_balances_repo = MySQLLeaveBalanceRepository(conn)
    else:
        raise ValueError(f"Unknown storage backend: {storage!r}")

    clock = clock or VirtualClock()
    locks = KeyedLock(default_timeout=lock_timeout_seconds)
    schedule_store = ScheduleStore(schedules_repo, locks)
    leave_ledger = LeaveLedger(leave_types_repo, leave_balances_repo)
    integrity_service = ScheduleIntegrityService(
        requests_repo,
        schedule_store,
        holidays_repo,
        clock,
        locks,
        detector=ConflictDetector(daily_overtime_cap_minutes=daily_overtime_cap_minutes),
        workflow=ApprovalWorkflow(),
        ledger=leave_ledger,
        timezone_name=timezone_name,
    )

    return Container(
        conn=conn,
        schedules_repo=schedules_repo,
        holidays_repo=holidays_repo,
        requests_repo=requests_repo,
        leave_types_repo=leave_types_repo,
        leave_balances_repo=leave_balances_repo,
        clock=clock,
        locks=locks,
        schedule_store=schedule_store,
        leave_ledger=leave_ledger,
        integrity_service=integrity_service,
        capabilities=capabilities or HeaderCapabilityChecker(),
        timezone_name=timezone_name,
    )
