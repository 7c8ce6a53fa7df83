"""
Tests for ComplianceService – overlaps, hour ceilings, rest periods, breaks,
presence nights and guard duty. Pure engine tests on SimpleNamespace stubs.
"""
import uuid
from datetime import date, time
from types import SimpleNamespace

import pytest

from app.core.enums import ComplianceRule, Severity
from app.services.compliance_result import ComplianceRules
from app.services.compliance_service import (
    ComplianceService,
    compliance_summary,
    recommended_break,
    suggest_alternatives,
    validate,
)
from tests.conftest import EMPLOYEE_ID, make_contract, make_segment, make_shift

MON = date(2025, 9, 1)
TUE = date(2025, 9, 2)
WED = date(2025, 9, 3)
THU = date(2025, 9, 4)
FRI = date(2025, 9, 5)
SAT = date(2025, 9, 6)
WEEK = [MON, TUE, WED, THU, FRI]


def make_absence(start: date, end: date, status: str = "approved", employee_id=EMPLOYEE_ID):
    return SimpleNamespace(
        id=uuid.uuid4(),
        employee_id=employee_id,
        absence_type="vacation",
        start_date=start,
        end_date=end,
        status=status,
    )


def violation_kinds(result) -> set:
    return {i.kind for i in result.violations}


def warning_kinds(result) -> set:
    return {i.kind for i in result.warnings}


# ── Baseline ─────────────────────────────────────────────────────────────────

def test_isolated_shift_is_clean():
    result = validate(make_shift(MON, "08:00", "16:00", break_minutes=30), make_contract())
    assert result.issues == []
    assert result.is_ok
    assert not result.has_warnings


def test_result_flags_and_submission_gate():
    shift = make_shift(MON, "08:00", "17:30", break_minutes=30)   # 9h → warning
    result = validate(shift, make_contract())
    assert not result.has_errors
    assert result.has_warnings
    assert not result.can_submit(warnings_acknowledged=False)
    assert result.can_submit(warnings_acknowledged=True)


# ── Overlap ──────────────────────────────────────────────────────────────────

def test_overlap_is_a_violation():
    existing = make_shift(MON, "08:00", "12:00")
    result = validate(make_shift(MON, "11:00", "15:00"), make_contract(), [existing])
    assert ComplianceRule.SHIFT_OVERLAP in violation_kinds(result)
    issue = result.violations[0]
    assert issue.severity == Severity.VIOLATION
    assert issue.observed == 60


def test_overlap_detection_is_commutative():
    a = make_shift(MON, "22:00", "06:00")
    b = make_shift(TUE, "05:00", "09:00")
    ab = validate(a, make_contract(), [b])
    ba = validate(b, make_contract(), [a])
    assert ComplianceRule.SHIFT_OVERLAP in violation_kinds(ab)
    assert ComplianceRule.SHIFT_OVERLAP in violation_kinds(ba)


def test_touching_shifts_do_not_overlap():
    existing = make_shift(MON, "08:00", "12:00")
    result = validate(make_shift(MON, "12:00", "14:00"), make_contract(), [existing])
    assert ComplianceRule.SHIFT_OVERLAP not in violation_kinds(result)


def test_other_employee_is_ignored():
    existing = make_shift(MON, "08:00", "12:00", employee_id=uuid.uuid4())
    result = validate(make_shift(MON, "09:00", "11:00"), make_contract(), [existing])
    assert result.issues == []


def test_cancelled_shift_is_ignored():
    existing = make_shift(MON, "08:00", "12:00", status="cancelled")
    result = validate(make_shift(MON, "09:00", "11:00"), make_contract(), [existing])
    assert result.issues == []


def test_edited_shift_does_not_conflict_with_itself():
    stored = make_shift(MON, "08:00", "12:00")
    edited = make_shift(MON, "09:00", "13:00")
    edited.id = stored.id
    result = validate(edited, make_contract(), [stored])
    assert ComplianceRule.SHIFT_OVERLAP not in violation_kinds(result)


# ── Absences ─────────────────────────────────────────────────────────────────

def test_approved_absence_blocks_shift():
    result = validate(
        make_shift(TUE, "08:00", "12:00"), make_contract(),
        approved_absences=[make_absence(MON, WED)],
    )
    assert ComplianceRule.ABSENCE_CONFLICT in violation_kinds(result)


def test_night_shift_running_into_absence_day_conflicts():
    result = validate(
        make_shift(MON, "22:00", "06:00"), make_contract(),
        approved_absences=[make_absence(TUE, TUE)],
    )
    assert ComplianceRule.ABSENCE_CONFLICT in violation_kinds(result)


def test_pending_absence_is_ignored():
    result = validate(
        make_shift(TUE, "08:00", "12:00"), make_contract(),
        approved_absences=[make_absence(MON, WED, status="pending")],
    )
    assert result.issues == []


# ── Daily / weekly ceilings ──────────────────────────────────────────────────

def test_daily_max_violation_above_10h():
    result = validate(make_shift(MON, "07:00", "18:30", break_minutes=30), make_contract())
    assert ComplianceRule.DAILY_MAX_HOURS in violation_kinds(result)


def test_daily_warning_above_8h():
    result = validate(make_shift(MON, "08:00", "17:30", break_minutes=30), make_contract())
    assert ComplianceRule.DAILY_MAX_HOURS in warning_kinds(result)
    assert ComplianceRule.DAILY_MAX_HOURS not in violation_kinds(result)


def test_daily_ceiling_uses_effective_hours():
    """presence_day 12h → 8h effectives: no daily violation."""
    result = validate(make_shift(MON, "08:00", "20:00", shift_type="presence_day"), make_contract())
    assert ComplianceRule.DAILY_MAX_HOURS not in violation_kinds(result)


def test_daily_ceiling_is_configurable():
    rules = ComplianceRules(daily_max_hours=7, daily_warning_hours=6)
    result = validate(make_shift(MON, "08:00", "16:00", break_minutes=30), make_contract(), rules=rules)
    assert ComplianceRule.DAILY_MAX_HOURS in violation_kinds(result)


def test_weekly_max_violation_above_48h():
    existing = [make_shift(d, "08:00", "18:00", break_minutes=30) for d in WEEK]   # 5 × 9.5h
    result = validate(make_shift(SAT, "08:00", "12:00"), make_contract(), existing)
    assert ComplianceRule.WEEKLY_MAX_HOURS in violation_kinds(result)
    assert result.violations[0].observed == pytest.approx(51.5)


def test_weekly_warning_between_44_and_48h():
    existing = [make_shift(d, "08:00", "17:30", break_minutes=30) for d in [MON, TUE, WED, THU]]
    result = validate(make_shift(FRI, "08:00", "17:30", break_minutes=30), make_contract(), existing)
    assert ComplianceRule.WEEKLY_MAX_HOURS in warning_kinds(result)
    assert ComplianceRule.WEEKLY_MAX_HOURS not in violation_kinds(result)


def test_contract_hours_exceeded_is_a_warning():
    existing = [make_shift(d, "08:00", "16:30", break_minutes=30) for d in [MON, TUE, WED, THU]]
    result = validate(make_shift(FRI, "08:00", "16:30", break_minutes=30), make_contract(), existing)
    assert warning_kinds(result) == {ComplianceRule.CONTRACT_WEEKLY_HOURS}
    assert not result.has_errors


def test_next_week_is_not_counted():
    existing = [make_shift(d, "08:00", "18:00", break_minutes=30) for d in WEEK]
    result = validate(make_shift(date(2025, 9, 8), "08:00", "12:00"), make_contract(), existing)
    assert ComplianceRule.WEEKLY_MAX_HOURS not in violation_kinds(result)


# ── Rest periods ─────────────────────────────────────────────────────────────

def test_daily_rest_before_shift():
    existing = make_shift(MON, "14:00", "22:00", break_minutes=30)
    result = validate(make_shift(TUE, "07:00", "12:00"), make_contract(), [existing])
    rest = [i for i in result.violations if i.kind == ComplianceRule.DAILY_REST]
    assert len(rest) == 1
    assert rest[0].observed == pytest.approx(9.0)


def test_daily_rest_after_shift():
    existing = make_shift(TUE, "07:00", "12:00")
    result = validate(make_shift(MON, "14:00", "22:00", break_minutes=30), make_contract(), [existing])
    assert ComplianceRule.DAILY_REST in violation_kinds(result)


def test_daily_rest_respected():
    existing = make_shift(MON, "08:00", "16:00", break_minutes=30)
    result = validate(make_shift(TUE, "08:00", "16:00", break_minutes=30), make_contract(), [existing])
    assert ComplianceRule.DAILY_REST not in violation_kinds(result)


def test_presence_night_is_exempt_from_daily_rest():
    night = make_shift(MON, "21:00", "07:00", shift_type="presence_night")
    result = validate(make_shift(TUE, "07:00", "12:00"), make_contract(), [night])
    assert ComplianceRule.DAILY_REST not in violation_kinds(result)


def test_weekly_rest_warning():
    days = [date(2025, 8, 31)] + WEEK + [SAT, date(2025, 9, 7), date(2025, 9, 8)]
    existing = [make_shift(d, "08:00", "16:00", break_minutes=30) for d in days if d != WED]
    result = validate(make_shift(WED, "08:00", "16:00", break_minutes=30), make_contract(), existing)
    weekly_rest = [i for i in result.warnings if i.kind == ComplianceRule.WEEKLY_REST]
    assert len(weekly_rest) == 1
    assert weekly_rest[0].observed == pytest.approx(16.0)


def test_weekly_rest_ok_with_free_weekend():
    existing = [make_shift(d, "08:00", "16:00", break_minutes=30) for d in [MON, TUE, THU, FRI]]
    result = validate(make_shift(WED, "08:00", "16:00", break_minutes=30), make_contract(), existing)
    assert ComplianceRule.WEEKLY_REST not in warning_kinds(result)


# ── Breaks ───────────────────────────────────────────────────────────────────

def test_break_required_after_6h():
    result = validate(make_shift(MON, "08:00", "15:00"), make_contract())
    assert ComplianceRule.MANDATORY_BREAK in warning_kinds(result)


def test_no_break_required_for_exactly_6h():
    result = validate(make_shift(MON, "08:00", "14:00"), make_contract())
    assert result.issues == []


def test_20min_break_is_enough():
    result = validate(make_shift(MON, "08:00", "15:00", break_minutes=20), make_contract())
    assert ComplianceRule.MANDATORY_BREAK not in warning_kinds(result)


# ── Presence nights and guard duty ───────────────────────────────────────────

def test_guard_warnings_are_reported():
    segments = [make_segment("09:00", "effective"), make_segment("22:00", "presence_night")]
    shift = make_shift(MON, "09:00", "09:00", shift_type="guard_24h", guard_segments=segments)
    result = validate(shift, make_contract())
    assert {ComplianceRule.GUARD_SEGMENT_BREAK, ComplianceRule.GUARD_EFFECTIVE_MAX} <= warning_kinds(result)
    assert ComplianceRule.DAILY_MAX_HOURS not in violation_kinds(result)


def test_night_presence_over_12h_is_a_violation():
    result = validate(make_shift(MON, "20:00", "09:00", shift_type="presence_night"), make_contract())
    assert ComplianceRule.NIGHT_PRESENCE_MAX_DURATION in violation_kinds(result)


def test_six_consecutive_presence_nights_rejected():
    existing = [make_shift(d, "21:00", "07:00", shift_type="presence_night") for d in WEEK]
    result = validate(make_shift(SAT, "21:00", "07:00", shift_type="presence_night"), make_contract(), existing)
    assert ComplianceRule.CONSECUTIVE_NIGHTS_MAX in violation_kinds(result)


def test_five_consecutive_presence_nights_allowed():
    existing = [make_shift(d, "21:00", "07:00", shift_type="presence_night") for d in WEEK[:4]]
    result = validate(make_shift(FRI, "21:00", "07:00", shift_type="presence_night"), make_contract(), existing)
    assert ComplianceRule.CONSECUTIVE_NIGHTS_MAX not in violation_kinds(result)


def test_chained_presence_over_24h_rejected():
    existing = [
        make_shift(MON, "08:00", "20:00", break_minutes=30),
        make_shift(TUE, "08:00", "12:00"),
    ]
    result = validate(make_shift(MON, "21:00", "07:00", shift_type="presence_night"), make_contract(), existing)
    amplitude = [i for i in result.violations if i.kind == ComplianceRule.GUARD_MAX_AMPLITUDE]
    assert len(amplitude) == 1
    assert amplitude[0].observed == pytest.approx(28.0)


def test_chained_presence_within_24h_allowed():
    existing = [make_shift(MON, "08:00", "20:00", break_minutes=30)]
    result = validate(make_shift(MON, "21:00", "07:00", shift_type="presence_night"), make_contract(), existing)
    assert ComplianceRule.GUARD_MAX_AMPLITUDE not in violation_kinds(result)


# ── Aggregation ──────────────────────────────────────────────────────────────

def test_evaluation_order_does_not_change_the_findings():
    existing = [
        make_shift(MON, "14:00", "22:00", break_minutes=30),
        make_shift(TUE, "10:00", "11:00"),
    ]
    candidate = make_shift(TUE, "07:00", "14:00")
    forward = ComplianceService().validate(candidate, make_contract(), existing)
    backward = ComplianceService().validate(candidate, make_contract(), list(reversed(existing)))
    assert sorted(i.message for i in forward.issues) == sorted(i.message for i in backward.issues)


# ── Summary, alternatives, breaks ─────────────────────────────────────────────

def test_compliance_summary_remaining_hours():
    existing = [make_shift(MON, "08:00", "16:30", break_minutes=30)]
    summary = compliance_summary(MON, EMPLOYEE_ID, existing)
    assert summary.daily_hours == pytest.approx(8.0)
    assert summary.remaining_daily_hours == pytest.approx(2.0)
    assert summary.remaining_weekly_hours == pytest.approx(40.0)
    assert summary.weekly_rest_ok
    assert len(summary.recommendations) == 1


def test_suggest_alternatives_after_rest_violation():
    existing = [make_shift(MON, "14:00", "22:00", break_minutes=30)]
    candidate = make_shift(TUE, "07:00", "12:00")
    slots = suggest_alternatives(candidate, existing)
    assert 0 < len(slots) <= 3
    assert (slots[0].date, slots[0].start_time, slots[0].end_time) == (TUE, time(9, 0), time(14, 0))
    assert all(s.date != MON for s in slots)


def test_no_alternatives_without_blocking_errors():
    assert suggest_alternatives(make_shift(MON, "08:00", "12:00"), []) == []


@pytest.mark.parametrize("minutes,expected", [
    (240, 0), (300, 15), (360, 15), (420, 20), (480, 20), (540, 30), (600, 30), (660, 45),
])
def test_recommended_break(minutes, expected):
    assert recommended_break(minutes) == expected
