from app.schemas.shift import (
    GuardSegmentIn, ShiftDraft, ShiftCheck, ShiftCreate, ShiftOut,
    GuardDecomposeRequest, GuardDecompositionOut, ClassificationOut,
)
from app.schemas.compliance import (
    ComplianceIssueOut, ComplianceResultOut, AlternativeSlotOut, ComplianceSummaryOut,
)
from app.schemas.payroll import ComputedPayOut, PayLineOut
from app.schemas.validation import ShiftValidationOut
from app.schemas.absence import AbsenceRequest, AbsenceCreate, AbsenceOut, AbsenceValidationOut
from app.schemas.leave import LeaveBalanceOut, FamilyEventOut

__all__ = [
    "GuardSegmentIn", "ShiftDraft", "ShiftCheck", "ShiftCreate", "ShiftOut",
    "GuardDecomposeRequest", "GuardDecompositionOut", "ClassificationOut",
    "ComplianceIssueOut", "ComplianceResultOut", "AlternativeSlotOut", "ComplianceSummaryOut",
    "ComputedPayOut", "PayLineOut",
    "ShiftValidationOut",
    "AbsenceRequest", "AbsenceCreate", "AbsenceOut", "AbsenceValidationOut",
    "LeaveBalanceOut", "FamilyEventOut",
]
