"""
Data access for the rules engine: loads the snapshot a validation needs.

The engine itself never touches the database; these helpers fetch the
sibling shifts, approved absences and contract before it runs.
"""
import uuid
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.enums import AbsenceStatus
from app.models.absence import EmployeeAbsence
from app.models.contract import Contract
from app.models.leave_balance import LeaveBalanceEntry
from app.models.shift import Shift
from app.services.leave_service import LeaveBalance, leave_balance, leave_year_bounds, taken_days


async def get_contract(db: AsyncSession, contract_id: uuid.UUID) -> Contract | None:
    result = await db.execute(select(Contract).where(Contract.id == contract_id))
    return result.scalar_one_or_none()


async def get_existing_shifts(
    db: AsyncSession, employee_id: uuid.UUID, from_date: date, to_date: date
) -> list[Shift]:
    """All shifts of a worker in a date range (inclusive), any status."""
    result = await db.execute(
        select(Shift)
        .where(
            Shift.employee_id == employee_id,
            Shift.date >= from_date,
            Shift.date <= to_date,
        )
        .order_by(Shift.date, Shift.start_time)
    )
    return list(result.scalars().all())


async def get_window_shifts(db: AsyncSession, employee_id: uuid.UUID, around: date) -> list[Shift]:
    """Shifts in the validation window around a date (whole ISO weeks included)."""
    days = max(settings.VALIDATION_WINDOW_DAYS, 7)
    return await get_existing_shifts(
        db, employee_id, around - timedelta(days=days), around + timedelta(days=days)
    )


async def get_absences(db: AsyncSession, employee_id: uuid.UUID) -> list[EmployeeAbsence]:
    result = await db.execute(
        select(EmployeeAbsence)
        .where(EmployeeAbsence.employee_id == employee_id)
        .order_by(EmployeeAbsence.start_date)
    )
    return list(result.scalars().all())


async def get_approved_absences(db: AsyncSession, employee_id: uuid.UUID) -> list[EmployeeAbsence]:
    result = await db.execute(
        select(EmployeeAbsence)
        .where(
            EmployeeAbsence.employee_id == employee_id,
            EmployeeAbsence.status == AbsenceStatus.APPROVED.value,
        )
        .order_by(EmployeeAbsence.start_date)
    )
    return list(result.scalars().all())


async def get_leave_balance(
    db: AsyncSession, contract_id: uuid.UUID, leave_year: str, as_of: date | None = None
) -> LeaveBalance | None:
    """
    Balance of a contract for a leave year. Taken days come from approved
    vacation absences; adjustments and manual month counts from the stored
    leave balance row, when present. Returns None for an unknown contract.
    """
    contract = await get_contract(db, contract_id)
    if contract is None:
        return None
    year_start, year_end = leave_year_bounds(leave_year)

    entry_result = await db.execute(
        select(LeaveBalanceEntry).where(
            LeaveBalanceEntry.contract_id == contract_id,
            LeaveBalanceEntry.leave_year == leave_year,
        )
    )
    entry = entry_result.scalar_one_or_none()

    absences_result = await db.execute(
        select(EmployeeAbsence).where(
            EmployeeAbsence.employee_id == contract.employee_id,
            EmployeeAbsence.status == AbsenceStatus.APPROVED.value,
            EmployeeAbsence.start_date <= year_end,
            EmployeeAbsence.end_date >= year_start,
        )
    )
    taken = taken_days(absences_result.scalars().all(), leave_year)

    return leave_balance(
        contract,
        leave_year,
        taken=taken,
        adjustment=float(entry.adjustment_days or 0) if entry else 0.0,
        as_of=as_of,
        worked_months=float(entry.months_worked) if entry and entry.months_worked is not None else None,
    )
