"""Example: drive the service layer directly (no Flask).

Uses the in-memory storage so it runs without MySQL.
"""

from datetime import date, datetime, time, timezone

from src.hr_schedule.hr_schedule.common.periods import DateRange, TimeInterval
from src.hr_schedule.hr_schedule.container import build_container
from src.hr_schedule.hr_schedule.core.enums import Decision


def main():
    container = build_container(storage="memory")
    container.clock.set_override(datetime(2024, 6, 20, 9, 0, tzinfo=timezone.utc), updated_by=1)

    office_hours = TimeInterval(time(9, 0), time(17, 0))
    container.schedule_store.add_schedule(
        employee_id=42,
        weekly_pattern={weekday: office_hours for weekday in range(5)},
        effective_from=date(2024, 1, 1),
        name="Office",
    )

    annual = container.leave_ledger.add_type(code="ANNUAL", name="Annual leave")
    container.leave_ledger.set_entitlement(employee_id=42, leave_type_id=annual.leave_type_id, year=2024, entitled=20)

    service = container.integrity_service
    leave = service.submit_leave(
        employee_id=42,
        date_range=DateRange(date(2024, 7, 1), date(2024, 7, 5)),
        reason="Summer break",
        leave_type_id=annual.leave_type_id,
        end_half_day=True,
    )
    leave = service.decide_leave(request_id=leave.request_id, decision=Decision.APPROVE, decider_id=7)
    print(leave.to_dict())
    for balance in container.leave_ledger.balances_for(employee_id=42, year=2024):
        print(balance.to_dict())


if __name__ == "__main__":
    main()
