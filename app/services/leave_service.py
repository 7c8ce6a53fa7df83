"""
Congés payés and family-event leave (IDCC 3239).

- Acquisition period: June 1st of year N to May 31st of year N+1 ("N-N+1")
- 2.5 days per month of effective work, at most 30 days per leave year
- 24 working days (Monday to Saturday) count as one month of work
- Fractionnement: +1 day for 3-5 days taken outside May-October, +2 for 6+
"""
from dataclasses import dataclass, field
from datetime import date, timedelta

from app.core.enums import AbsenceStatus, AbsenceType, FamilyEventType, status_of
from app.utils.french_holidays import is_holiday

DAYS_PER_MONTH = 30 / 12
MAX_ACQUIRED_DAYS = 30.0
MAX_MONTHS = 12
WORKING_DAYS_PER_MONTH = 24
LEAVE_YEAR_START_MONTH = 6
MAIN_PERIOD_MONTHS = range(5, 11)   # mai à octobre
MAIN_LEAVE_MIN_DAYS = 12
SICK_LEAVE_MAX_DAYS_AHEAD = 30

FAMILY_EVENT_DAYS = {
    FamilyEventType.MARRIAGE: 4,
    FamilyEventType.PACS: 4,
    FamilyEventType.BIRTH: 3,
    FamilyEventType.ADOPTION: 3,
    FamilyEventType.DEATH_SPOUSE: 3,
    FamilyEventType.DEATH_PARENT: 3,
    FamilyEventType.DEATH_CHILD: 5,
    FamilyEventType.DEATH_SIBLING: 3,
    FamilyEventType.DEATH_IN_LAW: 3,
    FamilyEventType.CHILD_MARRIAGE: 1,
    FamilyEventType.DISABILITY_ANNOUNCEMENT: 2,
}

FAMILY_EVENT_LABELS = {
    FamilyEventType.MARRIAGE: "Mariage",
    FamilyEventType.PACS: "PACS",
    FamilyEventType.BIRTH: "Naissance",
    FamilyEventType.ADOPTION: "Adoption",
    FamilyEventType.DEATH_SPOUSE: "Décès du conjoint",
    FamilyEventType.DEATH_PARENT: "Décès d'un parent",
    FamilyEventType.DEATH_CHILD: "Décès d'un enfant",
    FamilyEventType.DEATH_SIBLING: "Décès d'un frère/sœur",
    FamilyEventType.DEATH_IN_LAW: "Décès d'un beau-parent",
    FamilyEventType.CHILD_MARRIAGE: "Mariage d'un enfant",
    FamilyEventType.DISABILITY_ANNOUNCEMENT: "Annonce handicap d'un enfant",
}


@dataclass(frozen=True)
class LeaveBalance:
    leave_year: str
    acquired_days: float
    taken_days: float = 0.0
    adjustment_days: float = 0.0

    @property
    def remaining_days(self) -> float:
        return self.acquired_days + self.adjustment_days - self.taken_days


# ── Leave year ────────────────────────────────────────────────────────────────

def leave_year_for(today: date | None = None) -> str:
    """Leave year containing ``today``, e.g. 2025-09-01 → "2025-2026"."""
    today = today or date.today()
    start = today.year if today.month >= LEAVE_YEAR_START_MONTH else today.year - 1
    return f"{start}-{start + 1}"


def leave_year_bounds(leave_year: str) -> tuple[date, date]:
    """"2025-2026" → (2025-06-01, 2026-05-31). Raises ValueError when malformed."""
    parts = leave_year.split("-")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid leave year: {leave_year!r}")
    first, second = int(parts[0]), int(parts[1])
    if second != first + 1:
        raise ValueError(f"Invalid leave year: {leave_year!r}")
    return date(first, LEAVE_YEAR_START_MONTH, 1), date(second, LEAVE_YEAR_START_MONTH, 1) - timedelta(days=1)


# ── Day counting ──────────────────────────────────────────────────────────────

def _days(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_working_days(start: date, end: date) -> int:
    """Jours ouvrables (Monday to Saturday), both bounds included."""
    return sum(1 for d in _days(start, end) if d.weekday() != 6)


def count_business_days(start: date, end: date, exclude_holidays: bool = True) -> int:
    """Weekdays between two dates (inclusive), public holidays excluded by default."""
    count = 0
    for d in _days(start, end):
        if d.weekday() >= 5:
            continue
        if exclude_holidays and is_holiday(d)[0]:
            continue
        count += 1
    return count


# ── Accrual ───────────────────────────────────────────────────────────────────

def acquired_days(months_worked: float) -> float:
    """2.5 days per month worked, to the nearest tenth, capped at 30."""
    if months_worked <= 0:
        return 0.0
    return min(round(months_worked * DAYS_PER_MONTH, 1), MAX_ACQUIRED_DAYS)


def months_worked(contract_start: date, leave_year: str, as_of: date | None = None) -> int:
    """Full months of work (24 working days each) within a leave year."""
    year_start, year_end = leave_year_bounds(leave_year)
    as_of = min(as_of or date.today(), year_end)
    effective_start = max(contract_start, year_start)
    if effective_start > as_of:
        return 0
    return min(count_working_days(effective_start, as_of) // WORKING_DAYS_PER_MONTH, MAX_MONTHS)


def fractionnement_days(days_outside_main_period: int) -> int:
    if days_outside_main_period >= 6:
        return 2
    if days_outside_main_period >= 3:
        return 1
    return 0


def is_in_main_leave_period(d: date) -> bool:
    return d.month in MAIN_PERIOD_MONTHS


def family_event_days(kind: FamilyEventType | str) -> int:
    """Days granted for a family event; raises ValueError for an unknown kind."""
    return FAMILY_EVENT_DAYS[FamilyEventType(kind)]


def taken_days(absences, leave_year: str) -> float:
    """Business days of approved vacation falling inside the leave year."""
    year_start, year_end = leave_year_bounds(leave_year)
    total = 0
    for absence in absences:
        if getattr(absence.absence_type, "value", absence.absence_type) != AbsenceType.VACATION.value:
            continue
        if status_of(absence, AbsenceStatus.APPROVED.value) != AbsenceStatus.APPROVED.value:
            continue
        start = max(absence.start_date, year_start)
        end = min(absence.end_date, year_end)
        if start <= end:
            total += count_business_days(start, end)
    return float(total)


def leave_balance(
    contract,
    leave_year: str | None = None,
    taken: float = 0.0,
    adjustment: float = 0.0,
    as_of: date | None = None,
    worked_months: float | None = None,
) -> LeaveBalance:
    """
    Balance of a contract for a leave year.

    ``worked_months`` overrides the accrual computed from the contract start
    (manual history takeover).
    """
    leave_year = leave_year or leave_year_for(as_of)
    if worked_months is None:
        worked_months = months_worked(contract.start_date, leave_year, as_of)
    return LeaveBalance(
        leave_year=leave_year,
        acquired_days=acquired_days(worked_months),
        taken_days=taken,
        adjustment_days=adjustment,
    )


# ── Absence requests ──────────────────────────────────────────────────────────

@dataclass
class AbsenceValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return len(self.errors) == 0


class AbsenceValidator:
    """Business rules for an absence request; errors block, warnings inform."""

    def __init__(self, today: date | None = None):
        self.today = today or date.today()

    def validate(self, request, existing_absences=(), balance: LeaveBalance | None = None) -> AbsenceValidationResult:
        result = AbsenceValidationResult()
        absence_type = AbsenceType(request.absence_type)

        if request.end_date < request.start_date:
            result.errors.append("La date de fin doit être postérieure à la date de début.")
            return result

        self._check_overlap(request, existing_absences, result)
        if absence_type == AbsenceType.VACATION:
            self._check_balance(request, balance, result)
            self._check_main_period(request, result)
        elif absence_type == AbsenceType.SICK:
            self._check_sick_leave(request, result)
        elif absence_type == AbsenceType.FAMILY_EVENT:
            self._check_family_event(request, result)
        return result

    def _check_overlap(self, request, existing_absences, result: AbsenceValidationResult) -> None:
        active = (AbsenceStatus.PENDING.value, AbsenceStatus.APPROVED.value)
        request_id = getattr(request, "id", None)
        for absence in existing_absences:
            if request_id is not None and getattr(absence, "id", None) == request_id:
                continue
            if status_of(absence, AbsenceStatus.PENDING.value) not in active:
                continue
            if request.start_date <= absence.end_date and absence.start_date <= request.end_date:
                result.errors.append(
                    "Une absence est déjà déclarée sur cette période. "
                    "Veuillez choisir des dates différentes."
                )
                return

    def _check_balance(self, request, balance: LeaveBalance | None, result: AbsenceValidationResult) -> None:
        if balance is None:
            result.errors.append("Le solde de congés n'a pas encore été initialisé.")
            return
        requested = count_business_days(request.start_date, request.end_date)
        if requested > balance.remaining_days:
            result.errors.append(
                f"Solde de congés insuffisant: {requested} jour(s) demandé(s), "
                f"{balance.remaining_days:.1f} jour(s) disponible(s)."
            )

    def _check_main_period(self, request, result: AbsenceValidationResult) -> None:
        days = count_business_days(request.start_date, request.end_date)
        if days < MAIN_LEAVE_MIN_DAYS:
            return
        if not (is_in_main_leave_period(request.start_date) and is_in_main_leave_period(request.end_date)):
            result.warnings.append(
                f"Le congé principal (≥{MAIN_LEAVE_MIN_DAYS} jours) devrait être pris entre mai "
                "et octobre. Des jours de fractionnement peuvent s'appliquer."
            )

    def _check_sick_leave(self, request, result: AbsenceValidationResult) -> None:
        if (request.start_date - self.today).days > SICK_LEAVE_MAX_DAYS_AHEAD:
            result.errors.append(
                f"Un arrêt maladie ne peut pas être déclaré plus de "
                f"{SICK_LEAVE_MAX_DAYS_AHEAD} jours à l'avance."
            )

    def _check_family_event(self, request, result: AbsenceValidationResult) -> None:
        kind = getattr(request, "family_event_type", None)
        if not kind:
            result.errors.append("Veuillez sélectionner le type d'événement familial.")
            return
        try:
            kind = FamilyEventType(kind)
        except ValueError:
            result.errors.append("Type d'événement familial non reconnu.")
            return
        max_days = FAMILY_EVENT_DAYS[kind]
        requested = count_business_days(request.start_date, request.end_date)
        if requested > max_days:
            result.errors.append(
                f"{FAMILY_EVENT_LABELS[kind]}: {max_days} jour(s) accordé(s) maximum, "
                f"{requested} jour(s) demandé(s)."
            )


def validate_absence_request(
    request,
    existing_absences=(),
    balance: LeaveBalance | None = None,
    today: date | None = None,
) -> AbsenceValidationResult:
    return AbsenceValidator(today).validate(request, existing_absences, balance)
