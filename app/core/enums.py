"""
Closed value sets shared by the models, the schemas and the rules engine.

Every engine component branches over these exhaustively; adding a member
means touching each ``if``/``elif`` chain that handles them.
"""
import enum


class ShiftType(str, enum.Enum):
    EFFECTIVE = "effective"
    PRESENCE_DAY = "presence_day"
    PRESENCE_NIGHT = "presence_night"
    GUARD_24H = "guard_24h"

    @property
    def is_presence(self) -> bool:
        return self in (ShiftType.PRESENCE_DAY, ShiftType.PRESENCE_NIGHT)


class SegmentType(str, enum.Enum):
    """Work category of one guard-duty segment."""
    EFFECTIVE = "effective"
    PRESENCE_DAY = "presence_day"
    PRESENCE_NIGHT = "presence_night"


class ShiftStatus(str, enum.Enum):
    PLANNED = "planned"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ABSENT = "absent"


# Shifts in these states take part in compliance and overtime computations
ACTIVE_SHIFT_STATUSES = (ShiftStatus.PLANNED.value, ShiftStatus.COMPLETED.value)


class AbsenceStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AbsenceType(str, enum.Enum):
    SICK = "sick"
    VACATION = "vacation"
    TRAINING = "training"
    UNAVAILABLE = "unavailable"
    EMERGENCY = "emergency"
    FAMILY_EVENT = "family_event"


class FamilyEventType(str, enum.Enum):
    MARRIAGE = "marriage"
    PACS = "pacs"
    BIRTH = "birth"
    ADOPTION = "adoption"
    DEATH_SPOUSE = "death_spouse"
    DEATH_PARENT = "death_parent"
    DEATH_CHILD = "death_child"
    DEATH_SIBLING = "death_sibling"
    DEATH_IN_LAW = "death_in_law"
    CHILD_MARRIAGE = "child_marriage"
    DISABILITY_ANNOUNCEMENT = "disability_announcement"


class Severity(str, enum.Enum):
    VIOLATION = "violation"   # blocks persistence
    WARNING = "warning"       # requires acknowledgment


class ComplianceRule(str, enum.Enum):
    SHIFT_OVERLAP = "SHIFT_OVERLAP"
    ABSENCE_CONFLICT = "ABSENCE_CONFLICT"
    DAILY_MAX_HOURS = "DAILY_MAX_HOURS"
    WEEKLY_MAX_HOURS = "WEEKLY_MAX_HOURS"
    CONTRACT_WEEKLY_HOURS = "CONTRACT_WEEKLY_HOURS"
    DAILY_REST = "DAILY_REST"
    WEEKLY_REST = "WEEKLY_REST"
    MANDATORY_BREAK = "MANDATORY_BREAK"
    GUARD_SEGMENT_BREAK = "GUARD_SEGMENT_BREAK"
    GUARD_EFFECTIVE_MAX = "GUARD_EFFECTIVE_MAX"
    GUARD_NIGHT_SEGMENT = "GUARD_NIGHT_SEGMENT"
    GUARD_MAX_AMPLITUDE = "GUARD_MAX_AMPLITUDE"
    NIGHT_PRESENCE_MAX_DURATION = "NIGHT_PRESENCE_MAX_DURATION"
    CONSECUTIVE_NIGHTS_MAX = "CONSECUTIVE_NIGHTS_MAX"


def status_of(obj, default: str = ShiftStatus.PLANNED.value) -> str:
    """Plain status string of an ORM row, schema or stub (enum or str)."""
    status = getattr(obj, "status", None) or default
    return getattr(status, "value", status)
