from pydantic import BaseModel

from app.schemas.compliance import AlternativeSlotOut, ComplianceResultOut
from app.schemas.payroll import ComputedPayOut, PayLineOut
from app.schemas.shift import ClassificationOut


class ShiftValidationOut(BaseModel):
    """Everything the planning dialog shows for a candidate shift."""
    classification: ClassificationOut
    compliance: ComplianceResultOut
    pay: ComputedPayOut
    pay_lines: list[PayLineOut]
    alternatives: list[AlternativeSlotOut] = []
    can_submit: bool
