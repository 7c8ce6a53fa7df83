"""
Result and rule-set types shared by the compliance checks.
"""
from dataclasses import dataclass, field

from app.core.config import Settings, settings as app_settings
from app.core.enums import ComplianceRule, Severity


@dataclass(frozen=True)
class ComplianceIssue:
    kind: ComplianceRule
    severity: Severity
    message: str
    metric: str | None = None
    threshold: float | None = None
    observed: float | None = None

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.VIOLATION


@dataclass
class ComplianceResult:
    issues: list[ComplianceIssue] = field(default_factory=list)

    def add(self, issue: ComplianceIssue) -> None:
        self.issues.append(issue)

    def extend(self, issues) -> None:
        self.issues.extend(issues)

    @property
    def violations(self) -> list[ComplianceIssue]:
        return [i for i in self.issues if i.severity == Severity.VIOLATION]

    @property
    def warnings(self) -> list[ComplianceIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return len(self.violations) > 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def is_ok(self) -> bool:
        return not self.has_errors

    def kinds(self) -> set[ComplianceRule]:
        return {i.kind for i in self.issues}

    def can_submit(self, warnings_acknowledged: bool) -> bool:
        """A shift may be persisted without violations and with warnings acknowledged."""
        return not self.has_errors and (warnings_acknowledged or not self.has_warnings)


def violation(kind: ComplianceRule, message: str, **details) -> ComplianceIssue:
    return ComplianceIssue(kind=kind, severity=Severity.VIOLATION, message=message, **details)


def warning(kind: ComplianceRule, message: str, **details) -> ComplianceIssue:
    return ComplianceIssue(kind=kind, severity=Severity.WARNING, message=message, **details)


@dataclass(frozen=True)
class ComplianceRules:
    """Legal thresholds applied by the engine. Defaults follow IDCC 3239."""
    daily_max_hours: float = 10.0
    daily_warning_hours: float = 8.0
    weekly_max_hours: float = 48.0
    weekly_warning_hours: float = 44.0
    min_daily_rest_hours: float = 11.0
    min_weekly_rest_hours: float = 35.0
    break_threshold_minutes: int = 360
    min_break_minutes: int = 20
    guard_effective_max_hours: float = 12.0
    night_presence_max_hours: float = 12.0
    max_consecutive_nights: int = 5
    guard_max_amplitude_hours: float = 24.0
    guard_chain_gap_hours: float = 2.0
    requalification_threshold: int = 4

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "ComplianceRules":
        s = s or app_settings
        return cls(
            daily_max_hours=s.DAILY_MAX_HOURS,
            daily_warning_hours=s.DAILY_WARNING_HOURS,
            weekly_max_hours=s.WEEKLY_MAX_HOURS,
            weekly_warning_hours=s.WEEKLY_WARNING_HOURS,
            min_daily_rest_hours=s.MIN_DAILY_REST_HOURS,
            min_weekly_rest_hours=s.MIN_WEEKLY_REST_HOURS,
            break_threshold_minutes=s.BREAK_THRESHOLD_MINUTES,
            min_break_minutes=s.MIN_BREAK_MINUTES,
            guard_effective_max_hours=s.GUARD_EFFECTIVE_MAX_HOURS,
            night_presence_max_hours=s.NIGHT_PRESENCE_MAX_HOURS,
            max_consecutive_nights=s.MAX_CONSECUTIVE_NIGHTS,
            guard_max_amplitude_hours=s.GUARD_MAX_AMPLITUDE_HOURS,
            guard_chain_gap_hours=s.GUARD_CHAIN_GAP_HOURS,
            requalification_threshold=s.REQUALIFICATION_THRESHOLD,
        )


DEFAULT_RULES = ComplianceRules()
