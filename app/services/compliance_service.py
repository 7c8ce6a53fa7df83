"""
Compliance-Service: validation of a shift against IDCC 3239.

Checks rest periods, hour ceilings, breaks, overlaps with other shifts and
approved absences, presence nights and guard duty. Every check appends to a
single ComplianceResult; violations block persistence, warnings need an
explicit acknowledgment.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from types import SimpleNamespace

from app.core.enums import (
    ACTIVE_SHIFT_STATUSES,
    AbsenceStatus,
    ComplianceRule,
    ShiftType,
    status_of,
)
from app.services.classification_service import Classification, classify, shift_type_of
from app.services.compliance_result import (
    DEFAULT_RULES,
    ComplianceResult,
    ComplianceRules,
    violation,
    warning,
)
from app.utils.time_utils import (
    bounds_of,
    format_time,
    hours_between,
    intervals_overlap,
    span_minutes,
    week_bounds,
)

logger = logging.getLogger(__name__)

MAX_ALTERNATIVES = 3


def _same_employee(a, b) -> bool:
    a_id = getattr(a, "employee_id", None)
    b_id = getattr(b, "employee_id", None)
    return a_id is None or b_id is None or a_id == b_id


def _is_other_active(shift, other) -> bool:
    shift_id = getattr(shift, "id", None)
    if shift_id is not None and getattr(other, "id", None) == shift_id:
        return False
    if status_of(other, "planned") not in ACTIVE_SHIFT_STATUSES:
        return False
    return _same_employee(shift, other)


def _absence_bounds(absence) -> tuple[datetime, datetime]:
    start = datetime.combine(absence.start_date, time(0, 0))
    end = datetime.combine(absence.end_date + timedelta(days=1), time(0, 0))
    return start, end


def _label(shift) -> str:
    return (
        f"{shift.date.strftime('%d/%m/%Y')} "
        f"{format_time(shift.start_time)}-{format_time(shift.end_time)}"
    )


def longest_rest_hours(intervals, window_start: datetime, window_end: datetime) -> float:
    """Longest gap without work inside a window, given work intervals."""
    clipped = sorted(
        (max(s, window_start), min(e, window_end))
        for s, e in intervals
        if intervals_overlap(s, e, window_start, window_end)
    )
    longest = 0.0
    cursor = window_start
    for start, end in clipped:
        if start > cursor:
            longest = max(longest, hours_between(cursor, start))
        cursor = max(cursor, end)
    if window_end > cursor:
        longest = max(longest, hours_between(cursor, window_end))
    return longest


def weekly_rest_window(d: date) -> tuple[datetime, datetime]:
    """From the Sunday before the ISO week to the end of the Monday after."""
    monday, sunday = week_bounds(d)
    start = datetime.combine(monday - timedelta(days=1), time(0, 0))
    end = datetime.combine(sunday + timedelta(days=2), time(0, 0))
    return start, end


class ComplianceService:

    def __init__(self, rules: ComplianceRules | None = None):
        self.rules = rules or DEFAULT_RULES

    def validate(
        self,
        shift,
        contract=None,
        existing_shifts=(),
        approved_absences=(),
        classification: Classification | None = None,
    ) -> ComplianceResult:
        result = ComplianceResult()
        others = [s for s in existing_shifts if _is_other_active(shift, s)]
        absences = [
            a for a in approved_absences
            if _same_employee(shift, a)
            and status_of(a, AbsenceStatus.APPROVED.value) == AbsenceStatus.APPROVED.value
        ]
        classification = classification or classify(shift, self.rules)
        counted = {id(o): classify(o, self.rules).counted_hours for o in others}
        counted[id(shift)] = classification.counted_hours

        # 1. Overlaps (shifts and approved absences)
        self._check_overlap(shift, others, result)
        self._check_absences(shift, absences, result)

        # 2. Hour ceilings
        self._check_daily_hours(shift, others, counted, result)
        self._check_weekly_hours(shift, contract, others, counted, result)

        # 3. Daily and weekly rest
        self._check_daily_rest(shift, others, result)
        self._check_weekly_rest(shift, others, result)

        # 4. Breaks and guard duty
        self._check_break(shift, classification, result)

        # 5. Presence nights and guard amplitude
        self._check_night_presence_duration(shift, result)
        self._check_consecutive_nights(shift, others, result)
        self._check_guard_amplitude(shift, others, result)

        logger.debug(
            "Validated shift %s: %d violation(s), %d warning(s)",
            _label(shift), len(result.violations), len(result.warnings),
        )
        return result

    def _check_overlap(self, shift, others, result: ComplianceResult) -> None:
        start, end = bounds_of(shift)
        for other in others:
            o_start, o_end = bounds_of(other)
            if intervals_overlap(start, end, o_start, o_end):
                result.add(violation(
                    ComplianceRule.SHIFT_OVERLAP,
                    f"Chevauchement avec l'intervention du {_label(other)}",
                    metric="overlap_minutes",
                    threshold=0,
                    observed=(min(end, o_end) - max(start, o_start)).total_seconds() / 60,
                ))

    def _check_absences(self, shift, absences, result: ComplianceResult) -> None:
        start, end = bounds_of(shift)
        for absence in absences:
            a_start, a_end = _absence_bounds(absence)
            if intervals_overlap(start, end, a_start, a_end):
                kind = getattr(absence, "absence_type", "")
                result.add(violation(
                    ComplianceRule.ABSENCE_CONFLICT,
                    f"Absence approuvée ({getattr(kind, 'value', kind)}) du "
                    f"{absence.start_date.strftime('%d/%m/%Y')} au "
                    f"{absence.end_date.strftime('%d/%m/%Y')}",
                ))

    def _check_daily_hours(self, shift, others, counted, result: ComplianceResult) -> None:
        # A guard has its own 12h effective cap
        if shift_type_of(shift) == ShiftType.GUARD_24H:
            return
        total = counted[id(shift)] + sum(
            counted[id(o)] for o in others if o.date == shift.date
        )
        if total > self.rules.daily_max_hours:
            result.add(violation(
                ComplianceRule.DAILY_MAX_HOURS,
                f"Durée quotidienne dépassée: {total:.2f}h (max. {self.rules.daily_max_hours:g}h)",
                metric="daily_hours",
                threshold=self.rules.daily_max_hours,
                observed=total,
            ))
        elif total > self.rules.daily_warning_hours:
            result.add(warning(
                ComplianceRule.DAILY_MAX_HOURS,
                f"Durée quotidienne élevée: {total:.2f}h "
                f"(maximum légal {self.rules.daily_max_hours:g}h)",
                metric="daily_hours",
                threshold=self.rules.daily_warning_hours,
                observed=total,
            ))

    def _check_weekly_hours(
        self, shift, contract, others, counted, result: ComplianceResult
    ) -> None:
        monday, sunday = week_bounds(shift.date)
        total = counted[id(shift)] + sum(
            counted[id(o)] for o in others if monday <= o.date <= sunday
        )
        if total > self.rules.weekly_max_hours:
            result.add(violation(
                ComplianceRule.WEEKLY_MAX_HOURS,
                f"Durée hebdomadaire dépassée: {total:.2f}h (max. {self.rules.weekly_max_hours:g}h)",
                metric="weekly_hours",
                threshold=self.rules.weekly_max_hours,
                observed=total,
            ))
        elif total > self.rules.weekly_warning_hours:
            result.add(warning(
                ComplianceRule.WEEKLY_MAX_HOURS,
                f"Durée hebdomadaire élevée: {total:.2f}h "
                f"(maximum légal {self.rules.weekly_max_hours:g}h)",
                metric="weekly_hours",
                threshold=self.rules.weekly_warning_hours,
                observed=total,
            ))

        weekly_hours = getattr(contract, "weekly_hours", None)
        if weekly_hours is not None and total > float(weekly_hours):
            result.add(warning(
                ComplianceRule.CONTRACT_WEEKLY_HOURS,
                f"Heures supplémentaires: {total:.2f}h pour un contrat de {float(weekly_hours):g}h",
                metric="weekly_hours",
                threshold=float(weekly_hours),
                observed=total,
            ))

    def _check_daily_rest(self, shift, others, result: ComplianceResult) -> None:
        """
        Rest against the nearest previous and next shift. A pair involving a
        presence period is exempt (chaining effective work and presence).
        """
        if shift_type_of(shift).is_presence:
            return
        start, end = bounds_of(shift)
        previous = next_ = None
        for other in others:
            o_start, o_end = bounds_of(other)
            if o_end <= start and (previous is None or o_end > bounds_of(previous)[1]):
                previous = other
            if o_start >= end and (next_ is None or o_start < bounds_of(next_)[0]):
                next_ = other

        minimum = self.rules.min_daily_rest_hours
        if previous is not None and not shift_type_of(previous).is_presence:
            previous_end = bounds_of(previous)[1]
            rest = hours_between(previous_end, start)
            if rest < minimum:
                result.add(violation(
                    ComplianceRule.DAILY_REST,
                    f"Repos quotidien insuffisant avant l'intervention: {rest:.1f}h (min. {minimum:g}h)",
                    metric="rest_hours",
                    threshold=minimum,
                    observed=rest,
                ))
        if next_ is not None and not shift_type_of(next_).is_presence:
            rest = hours_between(end, bounds_of(next_)[0])
            if rest < minimum:
                result.add(violation(
                    ComplianceRule.DAILY_REST,
                    f"Repos quotidien insuffisant après l'intervention: {rest:.1f}h (min. {minimum:g}h)",
                    metric="rest_hours",
                    threshold=minimum,
                    observed=rest,
                ))

    def _check_weekly_rest(self, shift, others, result: ComplianceResult) -> None:
        window_start, window_end = weekly_rest_window(shift.date)
        intervals = [bounds_of(shift)] + [bounds_of(o) for o in others]
        longest = longest_rest_hours(intervals, window_start, window_end)
        minimum = self.rules.min_weekly_rest_hours
        if longest < minimum:
            result.add(warning(
                ComplianceRule.WEEKLY_REST,
                f"Repos hebdomadaire insuffisant: {longest:.1f}h consécutives (min. {minimum:g}h)",
                metric="weekly_rest_hours",
                threshold=minimum,
                observed=longest,
            ))

    def _check_break(self, shift, classification: Classification, result: ComplianceResult) -> None:
        shift_type = shift_type_of(shift)
        if shift_type == ShiftType.GUARD_24H:
            if classification.guard is not None:
                result.extend(classification.guard.warnings)
            return
        if shift_type != ShiftType.EFFECTIVE:
            return

        span = span_minutes(shift.start_time, shift.end_time)
        break_minutes = getattr(shift, "break_minutes", 0) or 0
        if span > self.rules.break_threshold_minutes and break_minutes < self.rules.min_break_minutes:
            result.add(warning(
                ComplianceRule.MANDATORY_BREAK,
                f"Pause de {self.rules.min_break_minutes} min obligatoire au-delà de "
                f"{self.rules.break_threshold_minutes // 60}h de travail",
                metric="break_minutes",
                threshold=self.rules.min_break_minutes,
                observed=break_minutes,
            ))

    def _check_night_presence_duration(self, shift, result: ComplianceResult) -> None:
        if shift_type_of(shift) != ShiftType.PRESENCE_NIGHT:
            return
        hours = span_minutes(shift.start_time, shift.end_time) / 60
        if hours > self.rules.night_presence_max_hours:
            result.add(violation(
                ComplianceRule.NIGHT_PRESENCE_MAX_DURATION,
                f"Présence de nuit de {hours:.1f}h (max. {self.rules.night_presence_max_hours:g}h)",
                metric="presence_hours",
                threshold=self.rules.night_presence_max_hours,
                observed=hours,
            ))

    def _check_consecutive_nights(self, shift, others, result: ComplianceResult) -> None:
        if shift_type_of(shift) != ShiftType.PRESENCE_NIGHT:
            return
        nights = {o.date for o in others if shift_type_of(o) == ShiftType.PRESENCE_NIGHT}
        nights.add(shift.date)

        count = 1
        day = shift.date - timedelta(days=1)
        while day in nights:
            count += 1
            day -= timedelta(days=1)
        day = shift.date + timedelta(days=1)
        while day in nights:
            count += 1
            day += timedelta(days=1)

        if count > self.rules.max_consecutive_nights:
            result.add(violation(
                ComplianceRule.CONSECUTIVE_NIGHTS_MAX,
                f"{count} nuits de présence consécutives "
                f"(max. {self.rules.max_consecutive_nights})",
                metric="consecutive_nights",
                threshold=self.rules.max_consecutive_nights,
                observed=count,
            ))

    def _check_guard_amplitude(self, shift, others, result: ComplianceResult) -> None:
        """
        Effective and presence periods chained with short gaps form one guard;
        its amplitude may not exceed 24h when a presence period is involved.
        """
        if shift_type_of(shift) == ShiftType.GUARD_24H:
            return
        gap = timedelta(hours=self.rules.guard_chain_gap_hours)
        pool = [o for o in others if shift_type_of(o) != ShiftType.GUARD_24H]
        chain_start, chain_end = bounds_of(shift)
        chained = [shift]
        seen = {id(shift)}

        extended = True
        while extended:
            extended = False
            for other in pool:
                if id(other) in seen:
                    continue
                o_start, o_end = bounds_of(other)
                if o_start <= chain_end + gap and o_end >= chain_start - gap:
                    chained.append(other)
                    seen.add(id(other))
                    chain_start = min(chain_start, o_start)
                    chain_end = max(chain_end, o_end)
                    extended = True

        if len(chained) < 2 or not any(shift_type_of(s).is_presence for s in chained):
            return
        amplitude = hours_between(chain_start, chain_end)
        if amplitude > self.rules.guard_max_amplitude_hours:
            result.add(violation(
                ComplianceRule.GUARD_MAX_AMPLITUDE,
                f"Amplitude de garde de {amplitude:.1f}h "
                f"(max. {self.rules.guard_max_amplitude_hours:g}h)",
                metric="amplitude_hours",
                threshold=self.rules.guard_max_amplitude_hours,
                observed=amplitude,
            ))


def validate(
    shift,
    contract=None,
    existing_shifts=(),
    approved_absences=(),
    rules: ComplianceRules | None = None,
) -> ComplianceResult:
    return ComplianceService(rules).validate(shift, contract, existing_shifts, approved_absences)


# ── Helpers for the planning screen ───────────────────────────────────────────

@dataclass
class ComplianceSummary:
    date: date
    daily_hours: float
    weekly_hours: float
    remaining_daily_hours: float
    remaining_weekly_hours: float
    longest_weekly_rest_hours: float
    weekly_rest_ok: bool
    recommendations: list[str] = field(default_factory=list)


def compliance_summary(
    day: date,
    employee_id=None,
    existing_shifts=(),
    rules: ComplianceRules | None = None,
) -> ComplianceSummary:
    """Remaining daily/weekly capacity of a worker for a given day."""
    rules = rules or DEFAULT_RULES
    shifts = [
        s for s in existing_shifts
        if (employee_id is None or getattr(s, "employee_id", employee_id) == employee_id)
        and status_of(s, "planned") in ACTIVE_SHIFT_STATUSES
    ]
    monday, sunday = week_bounds(day)
    daily = sum(classify(s, rules).counted_hours for s in shifts if s.date == day)
    weekly = sum(classify(s, rules).counted_hours for s in shifts if monday <= s.date <= sunday)
    remaining_daily = max(0.0, rules.daily_max_hours - daily)
    remaining_weekly = max(0.0, rules.weekly_max_hours - weekly)

    window_start, window_end = weekly_rest_window(day)
    longest = longest_rest_hours([bounds_of(s) for s in shifts], window_start, window_end)

    recommendations = []
    if remaining_daily <= 2:
        recommendations.append(
            f"Attention: il ne reste que {remaining_daily:.1f}h disponibles ce jour"
        )
    if remaining_weekly <= 8:
        recommendations.append(
            f"Attention: il ne reste que {remaining_weekly:.1f}h disponibles cette semaine"
        )
    if longest < rules.min_weekly_rest_hours:
        recommendations.append(
            f"Prévoir un repos hebdomadaire d'au moins {rules.min_weekly_rest_hours:g}h consécutives"
        )

    return ComplianceSummary(
        date=day,
        daily_hours=daily,
        weekly_hours=weekly,
        remaining_daily_hours=remaining_daily,
        remaining_weekly_hours=remaining_weekly,
        longest_weekly_rest_hours=longest,
        weekly_rest_ok=longest >= rules.min_weekly_rest_hours,
        recommendations=recommendations,
    )


@dataclass(frozen=True)
class AlternativeSlot:
    date: date
    start_time: time
    end_time: time
    reason: str


def _moved(shift, new_date: date, start: time, end: time):
    attrs = {
        name: getattr(shift, name, None)
        for name in (
            "id", "employee_id", "contract_id", "shift_type", "break_minutes",
            "has_night_action", "night_interventions_count", "guard_segments", "status",
        )
    }
    return SimpleNamespace(**attrs, date=new_date, start_time=start, end_time=end)


def suggest_alternatives(
    shift,
    existing_shifts=(),
    result: ComplianceResult | None = None,
    rules: ComplianceRules | None = None,
) -> list[AlternativeSlot]:
    """
    Proposes up to three slots of the same length that avoid the overlap and
    daily-rest violations of ``result``.
    """
    rules = rules or DEFAULT_RULES
    service = ComplianceService(rules)
    if result is None:
        result = service.validate(shift, existing_shifts=existing_shifts)
    blocking = {ComplianceRule.DAILY_REST, ComplianceRule.SHIFT_OVERLAP}
    if not blocking & {i.kind for i in result.violations}:
        return []

    others = [s for s in existing_shifts if _is_other_active(shift, s)]
    start, end = bounds_of(shift)
    length = end - start

    candidates: list[tuple[datetime, str]] = []
    prior_ends = [bounds_of(o)[1] for o in others if bounds_of(o)[1] <= end]
    if prior_ends:
        candidates.append((
            max(prior_ends) + timedelta(hours=rules.min_daily_rest_hours),
            "Début après le repos quotidien minimal",
        ))
    later_starts = [bounds_of(o)[0] for o in others if bounds_of(o)[0] >= start]
    if later_starts:
        candidates.append((
            min(later_starts) - timedelta(hours=rules.min_daily_rest_hours) - length,
            "Fin avant le repos quotidien minimal",
        ))
    candidates.append((start + timedelta(days=1), "Même horaire le lendemain"))
    candidates.append((start - timedelta(days=1), "Même horaire la veille"))

    slots: list[AlternativeSlot] = []
    for candidate_start, reason in candidates:
        candidate_end = candidate_start + length
        moved = _moved(shift, candidate_start.date(), candidate_start.time(), candidate_end.time())
        check = ComplianceResult()
        service._check_overlap(moved, others, check)
        service._check_daily_rest(moved, others, check)
        if check.has_errors:
            continue
        slot = AlternativeSlot(moved.date, moved.start_time, moved.end_time, reason)
        if slot not in slots:
            slots.append(slot)
        if len(slots) == MAX_ALTERNATIVES:
            break
    return slots


def recommended_break(duration_minutes: int) -> int:
    """Suggested break (minutes) for a working period of the given length."""
    if duration_minutes <= 4 * 60:
        return 0
    if duration_minutes <= 6 * 60:
        return 15
    if duration_minutes <= 8 * 60:
        return 20
    if duration_minutes <= 10 * 60:
        return 30
    return 45
