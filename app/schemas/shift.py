from pydantic import BaseModel, field_validator, model_validator
import uuid
from datetime import date as Date, datetime as DateTime, time as Time
from typing import Optional

from app.core.enums import SegmentType, ShiftStatus, ShiftType
from app.schemas.compliance import ComplianceIssueOut
from app.services.guard_service import default_segments, validate_segments


class GuardSegmentIn(BaseModel):
    start_time: Time
    type: SegmentType
    break_minutes: int = 0

    @field_validator("start_time")
    @classmethod
    def minute_precision(cls, v: Time) -> Time:
        return v.replace(second=0, microsecond=0)


class ShiftDraft(BaseModel):
    """Shift fields the classifier needs; used for on-the-fly recomputation."""
    date: Date
    start_time: Time
    end_time: Time
    break_minutes: int = 0
    shift_type: ShiftType = ShiftType.EFFECTIVE
    has_night_action: bool = False
    night_interventions_count: int = 0
    guard_segments: Optional[list[GuardSegmentIn]] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def minute_precision(cls, v: Time) -> Time:
        return v.replace(second=0, microsecond=0)

    @field_validator("break_minutes", "night_interventions_count")
    @classmethod
    def not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Doit être positif ou nul")
        return v

    @model_validator(mode="after")
    def check_times_and_segments(self):
        if self.shift_type == ShiftType.GUARD_24H:
            if self.end_time != self.start_time:
                raise ValueError("Une garde 24h se termine à son heure de début")
            if not self.guard_segments:
                self.guard_segments = [
                    GuardSegmentIn(start_time=s.start_time, type=s.type, break_minutes=s.break_minutes)
                    for s in default_segments(self.start_time)
                ]
            validate_segments(self.guard_segments)
            if self.guard_segments[0].start_time != self.start_time:
                raise ValueError("Le premier segment doit commencer à l'heure de début de la garde")
        else:
            if self.end_time == self.start_time:
                raise ValueError("L'heure de fin doit différer de l'heure de début")
            if self.guard_segments:
                raise ValueError("Seule une garde 24h comporte des segments")
        return self


class ShiftCheck(ShiftDraft):
    """Candidate shift for validation; ``id`` excludes the stored version of an edited shift."""
    id: Optional[uuid.UUID] = None
    contract_id: uuid.UUID
    employee_id: Optional[uuid.UUID] = None  # default: employee of the contract
    status: ShiftStatus = ShiftStatus.PLANNED


class ShiftCreate(ShiftCheck):
    notes: Optional[str] = None
    acknowledge_warnings: bool = False


class GuardSegmentOut(BaseModel):
    start_time: Time
    type: SegmentType
    break_minutes: int

    model_config = {"from_attributes": True}


class ShiftOut(BaseModel):
    id: uuid.UUID
    contract_id: uuid.UUID
    employee_id: uuid.UUID
    date: Date
    start_time: Time
    end_time: Time
    break_minutes: int
    shift_type: ShiftType
    has_night_action: bool
    night_interventions_count: int
    guard_segments: Optional[list[GuardSegmentOut]]
    status: ShiftStatus
    notes: Optional[str]
    is_requalified: bool
    effective_hours: Optional[float]
    computed_pay: Optional[dict]
    validated_by_employer: bool
    validated_by_employee: bool
    created_at: DateTime
    updated_at: DateTime

    model_config = {"from_attributes": True}


# ── Classification / guard decomposition ─────────────────────────────────────

class GuardDecomposeRequest(BaseModel):
    segments: list[GuardSegmentIn]
    night_interventions_count: int = 0

    @model_validator(mode="after")
    def check_segments(self):
        validate_segments(self.segments)
        return self


class SegmentBreakdownOut(BaseModel):
    index: int
    start_time: Time
    end_time: Time
    type: SegmentType
    break_minutes: int
    duration_minutes: int
    effective_minutes: float
    night_minutes: int
    minimum_break_minutes: int = 0

    model_config = {"from_attributes": True}


class GuardDecompositionOut(BaseModel):
    segments: list[SegmentBreakdownOut]
    total_effective_hours: float
    requalified: bool
    warnings: list[ComplianceIssueOut]

    model_config = {"from_attributes": True}


class ClassificationOut(BaseModel):
    shift_type: ShiftType
    raw_minutes: int
    night_minutes: int
    effective_hours: Optional[float]
    is_requalified: bool
    guard: Optional[GuardDecompositionOut] = None

    model_config = {"from_attributes": True}
