from pydantic import BaseModel, model_validator
import uuid
from datetime import date, datetime
from typing import Optional

from app.core.enums import AbsenceStatus, AbsenceType, FamilyEventType


class AbsenceRequest(BaseModel):
    employee_id: uuid.UUID
    contract_id: Optional[uuid.UUID] = None  # for the leave balance of vacations
    absence_type: AbsenceType
    family_event_type: Optional[FamilyEventType] = None
    start_date: date
    end_date: date
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("La date de fin doit être postérieure à la date de début")
        if self.family_event_type and self.absence_type != AbsenceType.FAMILY_EVENT:
            raise ValueError("Type d'événement familial réservé aux absences family_event")
        return self


class AbsenceCreate(AbsenceRequest):
    status: AbsenceStatus = AbsenceStatus.PENDING


class AbsenceOut(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    absence_type: AbsenceType
    family_event_type: Optional[FamilyEventType]
    start_date: date
    end_date: date
    business_days: Optional[float]
    status: AbsenceStatus
    reason: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class AbsenceValidationOut(BaseModel):
    is_ok: bool
    errors: list[str]
    warnings: list[str]
    business_days: int
