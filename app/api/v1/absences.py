import logging

from fastapi import APIRouter, HTTPException, status

from app.api.deps import DB
from app.core.enums import AbsenceType
from app.models.absence import EmployeeAbsence
from app.schemas.absence import AbsenceCreate, AbsenceOut, AbsenceRequest, AbsenceValidationOut
from app.services.data_service import get_absences, get_leave_balance
from app.services.leave_service import (
    AbsenceValidationResult,
    count_business_days,
    leave_year_for,
    validate_absence_request,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/absences", tags=["absences"])


async def _check_request(payload: AbsenceRequest, db) -> AbsenceValidationResult:
    existing = await get_absences(db, payload.employee_id)
    balance = None
    if payload.absence_type == AbsenceType.VACATION and payload.contract_id:
        balance = await get_leave_balance(db, payload.contract_id, leave_year_for(payload.start_date))
    return validate_absence_request(payload, existing, balance)


@router.post("/validate", response_model=AbsenceValidationOut)
async def validate_absence(payload: AbsenceRequest, db: DB):
    result = await _check_request(payload, db)
    return AbsenceValidationOut(
        is_ok=result.is_ok,
        errors=result.errors,
        warnings=result.warnings,
        business_days=count_business_days(payload.start_date, payload.end_date),
    )


@router.post("", response_model=AbsenceOut, status_code=status.HTTP_201_CREATED)
async def create_absence(payload: AbsenceCreate, db: DB):
    result = await _check_request(payload, db)
    if not result.is_ok:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Demande d'absence refusée", "errors": result.errors},
        )

    absence = EmployeeAbsence(
        employee_id=payload.employee_id,
        absence_type=payload.absence_type.value,
        family_event_type=payload.family_event_type.value if payload.family_event_type else None,
        start_date=payload.start_date,
        end_date=payload.end_date,
        business_days=count_business_days(payload.start_date, payload.end_date),
        status=payload.status.value,
        reason=payload.reason,
    )
    db.add(absence)
    await db.commit()
    await db.refresh(absence)
    logger.info("Absence %s saved (%s, %s)", absence.id, absence.absence_type, absence.status)
    return absence
