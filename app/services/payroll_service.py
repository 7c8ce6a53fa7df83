"""
PayrollService: pay of a single shift with IDCC 3239 majorations.

Components are kept unrounded; only ``ComputedPay.as_dict(precision=2)``
rounds, for display and storage.
"""
from dataclasses import dataclass, fields
from datetime import date, timedelta

from app.core.enums import ACTIVE_SHIFT_STATUSES, SegmentType, ShiftType, status_of
from app.services.classification_service import Classification, classify
from app.services.compliance_result import DEFAULT_RULES, ComplianceRules
from app.utils.french_holidays import is_holiday, is_sunday
from app.utils.time_utils import bounds_of, minutes_by_day, night_overlap, week_bounds


MAJORATION_RATES = {
    "night":               0.20,  # travail effectif 21:00–06:00 avec action de nuit
    "sunday":              0.30,
    "holiday_habitual":    0.60,  # jour férié travaillé habituellement
    "holiday_exceptional": 1.00,  # jour férié travaillé exceptionnellement
    "overtime_first":      0.25,  # 8 premières heures supplémentaires
    "overtime_beyond":     0.50,
    "night_presence":      0.25,  # indemnité forfaitaire de présence de nuit
}

OVERTIME_FIRST_TIER_HOURS = 8.0

PAY_LABELS = {
    "base_pay": "Salaire de base",
    "presence_responsible_pay": "Présence responsable (jour)",
    "night_presence_allowance": "Indemnité présence de nuit",
    "night_majoration": "Majoration de nuit",
    "sunday_majoration": "Majoration dimanche",
    "holiday_majoration": "Majoration jour férié",
    "overtime_majoration": "Majoration heures supplémentaires",
}


@dataclass(frozen=True)
class ComputedPay:
    base_pay: float = 0.0
    night_majoration: float = 0.0
    sunday_majoration: float = 0.0
    holiday_majoration: float = 0.0
    overtime_majoration: float = 0.0
    presence_responsible_pay: float = 0.0
    night_presence_allowance: float = 0.0

    @property
    def total_pay(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def __add__(self, other: "ComputedPay") -> "ComputedPay":
        return ComputedPay(**{
            f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)
        })

    def as_dict(self, precision: int | None = None) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["total_pay"] = self.total_pay
        if precision is not None:
            data = {k: round(v, precision) for k, v in data.items()}
        return data


@dataclass(frozen=True)
class PayLine:
    key: str
    label: str
    amount: float


def overtime_hours(
    prior_week_hours: float, shift_hours: float, contract_weekly_hours: float
) -> tuple[float, float]:
    """
    Overtime this shift adds to its week, split into (first tier, beyond).

    ``prior_week_hours`` are the hours already worked earlier in the same ISO
    week; only the increment beyond the contract is attributed to this shift.
    """
    before = max(0.0, prior_week_hours - contract_weekly_hours)
    after = max(0.0, prior_week_hours + shift_hours - contract_weekly_hours)
    first = max(0.0, min(after, OVERTIME_FIRST_TIER_HOURS) - min(before, OVERTIME_FIRST_TIER_HOURS))
    beyond = (after - before) - first
    return first, beyond


def _split_hours(shift, classification: Classification) -> tuple[float, float, float]:
    """(base hours, presence_day hours, raw presence-night hours without requalification)."""
    shift_type = classification.shift_type
    if shift_type == ShiftType.EFFECTIVE:
        return classification.effective_hours or 0.0, 0.0, 0.0
    if shift_type == ShiftType.PRESENCE_DAY:
        return 0.0, classification.effective_hours or 0.0, 0.0
    if shift_type == ShiftType.PRESENCE_NIGHT:
        if classification.is_requalified:
            return classification.effective_hours or 0.0, 0.0, 0.0
        return 0.0, 0.0, classification.raw_hours
    if shift_type == ShiftType.GUARD_24H:
        guard = classification.guard
        if guard is None:
            return 0.0, 0.0, 0.0
        base = guard.effective_minutes_by_type(SegmentType.EFFECTIVE)
        unpaid_night = 0.0
        if classification.is_requalified:
            base += guard.effective_minutes_by_type(SegmentType.PRESENCE_NIGHT)
        else:
            unpaid_night = guard.minutes_by_type(SegmentType.PRESENCE_NIGHT)
        presence = guard.effective_minutes_by_type(SegmentType.PRESENCE_DAY)
        return base / 60, presence / 60, unpaid_night / 60
    raise ValueError(f"Unknown shift type: {shift_type}")


def _day_fractions(shift) -> tuple[float, float]:
    """Share of the shift's wall-clock minutes falling on Sundays and on public holidays."""
    by_day = minutes_by_day(shift.date, shift.start_time, shift.end_time)
    total = sum(by_day.values())
    if not total:
        return 0.0, 0.0
    sunday = sum(m for d, m in by_day.items() if is_sunday(d))
    holiday = sum(m for d, m in by_day.items() if is_holiday(d)[0])
    return sunday / total, holiday / total


def _prior_week_hours(shift, week_shifts, rules: ComplianceRules) -> float:
    monday, sunday = week_bounds(shift.date)
    start, _ = bounds_of(shift)
    shift_id = getattr(shift, "id", None)
    employee_id = getattr(shift, "employee_id", None)
    total = 0.0
    for other in week_shifts:
        if shift_id is not None and getattr(other, "id", None) == shift_id:
            continue
        if employee_id is not None and getattr(other, "employee_id", employee_id) != employee_id:
            continue
        if status_of(other) not in ACTIVE_SHIFT_STATUSES:
            continue
        if not monday <= other.date <= sunday:
            continue
        if bounds_of(other)[0] < start:
            total += classify(other, rules).counted_hours
    return total


def compute_pay(
    shift,
    classification: Classification | None = None,
    contract=None,
    week_shifts=(),
    habitual_holiday_work: bool = False,
    rules: ComplianceRules = DEFAULT_RULES,
) -> ComputedPay:
    """
    Pay breakdown of one shift.

    ``week_shifts`` are the worker's other shifts; those earlier in the same
    ISO week decide whether this shift's hours are overtime against the
    contract's weekly hours.
    """
    classification = classification or classify(shift, rules)
    rate = float(contract.hourly_rate) if contract is not None else 0.0

    base_hours, presence_hours, unpaid_night_hours = _split_hours(shift, classification)
    paid_hours = base_hours + presence_hours

    night = 0.0
    if classification.shift_type == ShiftType.EFFECTIVE and getattr(shift, "has_night_action", False):
        night_hours = night_overlap(shift.date, shift.start_time, shift.end_time) / 60
        night = night_hours * rate * MAJORATION_RATES["night"]

    sunday_share, holiday_share = _day_fractions(shift)
    holiday_rate = MAJORATION_RATES[
        "holiday_habitual" if habitual_holiday_work else "holiday_exceptional"
    ]

    overtime = 0.0
    weekly_hours = getattr(contract, "weekly_hours", None)
    if weekly_hours is not None:
        prior = _prior_week_hours(shift, week_shifts, rules)
        first, beyond = overtime_hours(prior, classification.counted_hours, float(weekly_hours))
        overtime = rate * (
            first * MAJORATION_RATES["overtime_first"]
            + beyond * MAJORATION_RATES["overtime_beyond"]
        )

    return ComputedPay(
        base_pay=base_hours * rate,
        night_majoration=night,
        sunday_majoration=paid_hours * sunday_share * rate * MAJORATION_RATES["sunday"],
        holiday_majoration=paid_hours * holiday_share * rate * holiday_rate,
        overtime_majoration=overtime,
        presence_responsible_pay=presence_hours * rate,
        night_presence_allowance=unpaid_night_hours * rate * MAJORATION_RATES["night_presence"],
    )


def pay_breakdown(pay: ComputedPay, precision: int = 2) -> list[PayLine]:
    """Non-zero pay components as labelled lines, in payslip order."""
    values = pay.as_dict(precision)
    return [
        PayLine(key, label, values[key])
        for key, label in PAY_LABELS.items()
        if values[key]
    ]


@dataclass
class MonthlyEstimate:
    month: date
    shift_count: int
    effective_hours: float
    pay: ComputedPay

    @property
    def total_pay(self) -> float:
        return self.pay.total_pay


def monthly_estimate(
    shifts,
    contract,
    month: date,
    habitual_holiday_work: bool = False,
    rules: ComplianceRules = DEFAULT_RULES,
) -> MonthlyEstimate:
    """
    Sums the pay of the active shifts of a calendar month.

    Pass shifts from the surrounding weeks as well; they are only used as
    overtime context.
    """
    month_start = month.replace(day=1)
    month_end = (month_start.replace(day=28) + timedelta(days=4)).replace(day=1) - timedelta(days=1)
    in_month = [
        s for s in shifts
        if month_start <= s.date <= month_end
        and status_of(s) in ACTIVE_SHIFT_STATUSES
    ]

    total = ComputedPay()
    hours = 0.0
    for shift in in_month:
        classification = classify(shift, rules)
        hours += classification.counted_hours
        total = total + compute_pay(
            shift, classification, contract,
            week_shifts=shifts,
            habitual_holiday_work=habitual_holiday_work,
            rules=rules,
        )
    return MonthlyEstimate(
        month=month_start,
        shift_count=len(in_month),
        effective_hours=hours,
        pay=total,
    )
