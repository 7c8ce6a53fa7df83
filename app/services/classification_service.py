"""
Shift classification: raw duration → legally weighted effective hours.

| shift_type                          | effective hours          |
|-------------------------------------|--------------------------|
| effective                           | raw duration             |
| presence_day                        | raw duration × 2/3       |
| presence_night, not requalified     | None (flat allowance)    |
| presence_night, requalified         | raw duration             |
| guard_24h                           | sum over segments        |
"""
from dataclasses import dataclass

from app.core.enums import ShiftType
from app.services.compliance_result import DEFAULT_RULES, ComplianceRules
from app.services.guard_service import GuardDecomposition, as_segments, decompose_guard
from app.utils.time_utils import duration, night_overlap

PRESENCE_DAY_COEFFICIENT = 2 / 3


@dataclass(frozen=True)
class Classification:
    shift_type: ShiftType
    raw_minutes: int
    night_minutes: int
    effective_hours: float | None
    is_requalified: bool
    guard: GuardDecomposition | None = None

    @property
    def raw_hours(self) -> float:
        return self.raw_minutes / 60

    @property
    def counted_hours(self) -> float:
        """Hours counted against the daily/weekly ceilings."""
        return self.effective_hours or 0.0


def shift_type_of(shift) -> ShiftType:
    return ShiftType(getattr(shift, "shift_type", None) or ShiftType.EFFECTIVE)


def is_requalified(
    shift_type: ShiftType, night_interventions_count: int | None, threshold: int = 4
) -> bool:
    """
    All-or-nothing switch: from ``threshold`` interventions on, a presence
    night (or a guard's presence nights) is paid as effective work.
    """
    if shift_type not in (ShiftType.PRESENCE_NIGHT, ShiftType.GUARD_24H):
        return False
    return (night_interventions_count or 0) >= threshold


def classify(shift, rules: ComplianceRules = DEFAULT_RULES) -> Classification:
    """
    Computes effective hours and the requalification flag for a shift.

    ``shift`` only needs the attributes of the Shift model (an ORM row, a
    schema or a SimpleNamespace all work). A guard_24h shift without
    segments has no effective hours.
    """
    shift_type = shift_type_of(shift)
    raw = duration(shift.start_time, shift.end_time, getattr(shift, "break_minutes", 0) or 0)
    night = night_overlap(getattr(shift, "date", None), shift.start_time, shift.end_time)
    requalified = is_requalified(
        shift_type,
        getattr(shift, "night_interventions_count", 0),
        rules.requalification_threshold,
    )

    guard = None
    if shift_type == ShiftType.EFFECTIVE:
        effective = raw / 60
    elif shift_type == ShiftType.PRESENCE_DAY:
        effective = raw * PRESENCE_DAY_COEFFICIENT / 60
    elif shift_type == ShiftType.PRESENCE_NIGHT:
        effective = raw / 60 if requalified else None
    elif shift_type == ShiftType.GUARD_24H:
        segments = as_segments(getattr(shift, "guard_segments", None))
        if segments:
            guard = decompose_guard(segments, requalified=requalified, rules=rules)
            effective = guard.total_effective_hours
        else:
            effective = None
    else:
        raise ValueError(f"Unknown shift type: {shift_type}")

    return Classification(
        shift_type=shift_type,
        raw_minutes=raw,
        night_minutes=night,
        effective_hours=effective,
        is_requalified=requalified,
        guard=guard,
    )
