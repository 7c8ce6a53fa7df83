"""
Compliance endpoints: validation of a candidate shift and daily capacity.
"""
import uuid
from datetime import date

from fastapi import APIRouter, HTTPException, Query

from app.api.deps import DB
from app.schemas.compliance import AlternativeSlotOut, ComplianceResultOut, ComplianceSummaryOut
from app.schemas.payroll import ComputedPayOut, PayLineOut
from app.schemas.shift import ClassificationOut, ShiftCheck
from app.schemas.validation import ShiftValidationOut
from app.services.compliance_result import ComplianceRules
from app.services.compliance_service import compliance_summary
from app.services.data_service import get_contract, get_window_shifts
from app.services.evaluation_service import evaluate_shift
from app.services.payroll_service import pay_breakdown

router = APIRouter(prefix="/compliance", tags=["compliance"])


@router.post("/validate", response_model=ShiftValidationOut)
async def validate_shift(payload: ShiftCheck, db: DB):
    """Classification, compliance verdict and pay of a shift, without saving it."""
    contract = await get_contract(db, payload.contract_id)
    if not contract:
        raise HTTPException(status_code=404, detail="Contrat introuvable")
    candidate = payload.model_copy(update={"employee_id": contract.employee_id})

    evaluation = await evaluate_shift(db, candidate, contract)
    return ShiftValidationOut(
        classification=ClassificationOut.model_validate(evaluation.classification, from_attributes=True),
        compliance=ComplianceResultOut.model_validate(evaluation.compliance, from_attributes=True),
        pay=ComputedPayOut(**evaluation.pay.as_dict(precision=2)),
        pay_lines=[PayLineOut.model_validate(line, from_attributes=True) for line in pay_breakdown(evaluation.pay)],
        alternatives=[
            AlternativeSlotOut.model_validate(slot, from_attributes=True) for slot in evaluation.alternatives
        ],
        can_submit=evaluation.compliance.can_submit(warnings_acknowledged=True),
    )


@router.get("/summary", response_model=ComplianceSummaryOut)
async def get_summary(
    db: DB,
    employee_id: uuid.UUID = Query(...),
    day: date = Query(...),
):
    shifts = await get_window_shifts(db, employee_id, day)
    summary = compliance_summary(day, employee_id, shifts, ComplianceRules.from_settings())
    return ComplianceSummaryOut.model_validate(summary, from_attributes=True)
