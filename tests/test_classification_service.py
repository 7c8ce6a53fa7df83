"""
Tests for the shift classification (effective hours, requalification).
"""
from datetime import date

import pytest

from app.core.enums import ShiftType
from app.services.classification_service import classify, is_requalified
from app.services.compliance_result import ComplianceRules
from tests.conftest import make_segment, make_shift

D = date(2025, 9, 2)


def test_effective_counts_full_duration_minus_break():
    c = classify(make_shift(D, "08:00", "16:00", break_minutes=30))
    assert c.effective_hours == pytest.approx(7.5)
    assert c.raw_minutes == 450
    assert not c.is_requalified


def test_presence_day_counts_two_thirds():
    """presence_day 6h → 4h effectives."""
    c = classify(make_shift(D, "08:00", "14:00", shift_type="presence_day"))
    assert c.raw_minutes == 360
    assert c.effective_hours == pytest.approx(4.0)


def test_presence_night_not_requalified_has_no_effective_hours():
    c = classify(make_shift(D, "21:00", "07:00", shift_type="presence_night", night_interventions_count=3))
    assert c.effective_hours is None
    assert c.counted_hours == 0.0
    assert not c.is_requalified


def test_presence_night_requalified_counts_fully():
    c = classify(make_shift(D, "21:00", "07:00", shift_type="presence_night", night_interventions_count=4))
    assert c.is_requalified
    assert c.effective_hours == pytest.approx(10.0)


@pytest.mark.parametrize("count,expected", [(0, False), (3, False), (4, True), (9, True)])
def test_requalification_is_a_step_function(count, expected):
    assert is_requalified(ShiftType.PRESENCE_NIGHT, count) is expected


def test_requalification_only_for_night_presence_and_guard():
    assert not is_requalified(ShiftType.EFFECTIVE, 10)
    assert not is_requalified(ShiftType.PRESENCE_DAY, 10)
    assert is_requalified(ShiftType.GUARD_24H, 4)


def test_requalification_threshold_is_configurable():
    rules = ComplianceRules(requalification_threshold=2)
    c = classify(
        make_shift(D, "21:00", "07:00", shift_type="presence_night", night_interventions_count=2),
        rules,
    )
    assert c.is_requalified


GUARD_SEGMENTS = [
    make_segment("08:00", "effective", 30),
    make_segment("14:00", "presence_day"),
    make_segment("18:00", "presence_night"),
]


def test_guard_sums_segments():
    """5.5h + 2.67h + 0h ≈ 8.17h."""
    c = classify(make_shift(D, "08:00", "08:00", shift_type="guard_24h", guard_segments=GUARD_SEGMENTS))
    assert c.effective_hours == pytest.approx(5.5 + 4 * 2 / 3)
    assert round(c.effective_hours, 2) == 8.17
    assert c.raw_minutes == 1440
    assert c.guard is not None
    assert len(c.guard.segments) == 3


def test_guard_requalified_counts_presence_night_segments():
    c = classify(make_shift(
        D, "08:00", "08:00", shift_type="guard_24h",
        guard_segments=GUARD_SEGMENTS, night_interventions_count=4,
    ))
    assert c.is_requalified
    assert c.effective_hours == pytest.approx(5.5 + 4 * 2 / 3 + 14)


def test_guard_without_segments_has_no_effective_hours():
    c = classify(make_shift(D, "08:00", "08:00", shift_type="guard_24h"))
    assert c.effective_hours is None
    assert c.guard is None


def test_night_minutes_are_reported():
    c = classify(make_shift(D, "22:00", "06:00"))
    assert c.night_minutes == 480
