"""
Runs the full engine pipeline for a candidate shift:
classification → compliance → pay (→ alternative slots on blocking errors).
"""
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.contract import Contract
from app.services.classification_service import Classification, classify
from app.services.compliance_result import ComplianceResult, ComplianceRules
from app.services.compliance_service import AlternativeSlot, ComplianceService, suggest_alternatives
from app.services.data_service import get_approved_absences, get_window_shifts
from app.services.payroll_service import ComputedPay, compute_pay


@dataclass
class ShiftEvaluation:
    classification: Classification
    compliance: ComplianceResult
    pay: ComputedPay
    alternatives: list[AlternativeSlot] = field(default_factory=list)


async def evaluate_shift(
    db: AsyncSession, candidate, contract: Contract, rules: ComplianceRules | None = None
) -> ShiftEvaluation:
    rules = rules or ComplianceRules.from_settings()
    window = await get_window_shifts(db, contract.employee_id, candidate.date)
    absences = await get_approved_absences(db, contract.employee_id)

    classification = classify(candidate, rules)
    result = ComplianceService(rules).validate(
        candidate, contract, window, absences, classification=classification
    )
    pay = compute_pay(
        candidate,
        classification,
        contract,
        week_shifts=window,
        habitual_holiday_work=contract.habitual_holiday_work,
        rules=rules,
    )
    alternatives = suggest_alternatives(candidate, window, result, rules) if result.has_errors else []
    return ShiftEvaluation(classification, result, pay, alternatives)
