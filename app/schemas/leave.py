from pydantic import BaseModel

from app.core.enums import FamilyEventType


class LeaveBalanceOut(BaseModel):
    leave_year: str
    acquired_days: float
    taken_days: float
    adjustment_days: float
    remaining_days: float

    model_config = {"from_attributes": True}


class FamilyEventOut(BaseModel):
    kind: FamilyEventType
    label: str
    days: int
