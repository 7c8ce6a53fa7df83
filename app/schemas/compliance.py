"""
Schemas for the compliance endpoints.
"""
from datetime import date, time
from typing import Optional

from pydantic import BaseModel

from app.core.enums import ComplianceRule, Severity


class ComplianceIssueOut(BaseModel):
    kind: ComplianceRule
    severity: Severity
    message: str
    metric: Optional[str] = None
    threshold: Optional[float] = None
    observed: Optional[float] = None

    model_config = {"from_attributes": True}


class ComplianceResultOut(BaseModel):
    has_errors: bool
    has_warnings: bool
    issues: list[ComplianceIssueOut]

    model_config = {"from_attributes": True}


class AlternativeSlotOut(BaseModel):
    date: date
    start_time: time
    end_time: time
    reason: str

    model_config = {"from_attributes": True}


class ComplianceSummaryOut(BaseModel):
    date: date
    daily_hours: float
    weekly_hours: float
    remaining_daily_hours: float
    remaining_weekly_hours: float
    longest_weekly_rest_hours: float
    weekly_rest_ok: bool
    recommendations: list[str]

    model_config = {"from_attributes": True}
