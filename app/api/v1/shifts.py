import logging
import uuid
from datetime import date

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select

from app.api.deps import DB
from app.core.enums import ShiftType
from app.models.shift import Shift
from app.schemas.compliance import ComplianceIssueOut
from app.schemas.shift import (
    ClassificationOut, GuardDecomposeRequest, GuardDecompositionOut,
    ShiftCreate, ShiftDraft, ShiftOut,
)
from app.services.classification_service import classify, is_requalified
from app.services.compliance_result import ComplianceRules
from app.services.data_service import get_contract
from app.services.evaluation_service import evaluate_shift
from app.services.guard_service import as_segments, decompose_guard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shifts", tags=["shifts"])


def _issues(issues) -> list[dict]:
    return [ComplianceIssueOut.model_validate(i).model_dump(mode="json") for i in issues]


@router.post("/classify", response_model=ClassificationOut)
async def classify_shift(payload: ShiftDraft):
    classification = classify(payload, ComplianceRules.from_settings())
    return ClassificationOut.model_validate(classification, from_attributes=True)


@router.post("/guard/decompose", response_model=GuardDecompositionOut)
async def decompose_guard_segments(payload: GuardDecomposeRequest):
    rules = ComplianceRules.from_settings()
    requalified = is_requalified(
        ShiftType.GUARD_24H, payload.night_interventions_count, rules.requalification_threshold
    )
    decomposition = decompose_guard(payload.segments, requalified=requalified, rules=rules)
    return GuardDecompositionOut.model_validate(decomposition, from_attributes=True)


@router.get("", response_model=list[ShiftOut])
async def list_shifts(
    db: DB,
    employee_id: uuid.UUID = Query(...),
    from_date: date = Query(...),
    to_date: date = Query(...),
):
    result = await db.execute(
        select(Shift)
        .where(
            Shift.employee_id == employee_id,
            Shift.date >= from_date,
            Shift.date <= to_date,
        )
        .order_by(Shift.date, Shift.start_time)
    )
    return result.scalars().all()


@router.post("", response_model=ShiftOut, status_code=status.HTTP_201_CREATED)
async def create_shift(payload: ShiftCreate, db: DB):
    contract = await get_contract(db, payload.contract_id)
    if not contract:
        raise HTTPException(status_code=404, detail="Contrat introuvable")
    if payload.employee_id and payload.employee_id != contract.employee_id:
        raise HTTPException(status_code=422, detail="Le salarié ne correspond pas au contrat")
    candidate = payload.model_copy(update={"employee_id": contract.employee_id})

    evaluation = await evaluate_shift(db, candidate, contract)
    compliance = evaluation.compliance
    if compliance.has_errors:
        logger.info("Shift refused for contract %s: %d violation(s)", contract.id, len(compliance.violations))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Intervention non conforme", "issues": _issues(compliance.violations)},
        )
    if not compliance.can_submit(payload.acknowledge_warnings):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Avertissements à confirmer", "issues": _issues(compliance.warnings)},
        )

    classification = evaluation.classification
    segments = as_segments(candidate.guard_segments)
    shift = Shift(
        contract_id=contract.id,
        employee_id=contract.employee_id,
        date=candidate.date,
        start_time=candidate.start_time,
        end_time=candidate.end_time,
        break_minutes=candidate.break_minutes,
        shift_type=candidate.shift_type.value,
        has_night_action=candidate.has_night_action,
        night_interventions_count=candidate.night_interventions_count,
        guard_segments=[s.to_dict() for s in segments] if segments else None,
        status=candidate.status.value,
        notes=candidate.notes,
        is_requalified=classification.is_requalified,
        effective_hours=(
            round(classification.effective_hours, 2)
            if classification.effective_hours is not None else None
        ),
        computed_pay=evaluation.pay.as_dict(precision=2),
    )
    db.add(shift)
    await db.commit()
    await db.refresh(shift)
    logger.info("Shift %s saved (%s, %s)", shift.id, shift.shift_type, shift.date)
    return shift
