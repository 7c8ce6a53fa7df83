"""
Garde 24h: decomposition of a 24-hour guard into work segments.

A guard shift is a cyclic list of segments anchored at the shift start.
Segment n ends where segment n+1 starts; the last one wraps to segment 0
on the next day, so the list always covers exactly 24 hours.

Edit operations never mutate their input; they return a new tuple.
"""
from dataclasses import dataclass, field, replace
from datetime import time

from app.core.enums import ComplianceRule, SegmentType
from app.services.compliance_result import (
    DEFAULT_RULES,
    ComplianceIssue,
    ComplianceRules,
    warning,
)
from app.utils.time_utils import (
    MINUTES_PER_DAY,
    format_time,
    minutes_to_time,
    night_overlap,
    parse_hhmm,
    span_minutes,
    to_minutes,
)

MIN_SEGMENTS = 2


class GuardSegmentError(ValueError):
    """Raised when an edit would break the segment list invariants."""


@dataclass(frozen=True)
class GuardSegment:
    start_time: time
    type: SegmentType
    break_minutes: int = 0

    def to_dict(self) -> dict:
        return {
            "start_time": format_time(self.start_time),
            "type": self.type.value,
            "break_minutes": self.break_minutes,
        }


@dataclass(frozen=True)
class SegmentBreakdown:
    index: int
    start_time: time
    end_time: time
    type: SegmentType
    break_minutes: int
    duration_minutes: int
    effective_minutes: float
    night_minutes: int
    minimum_break_minutes: int = 0


@dataclass
class GuardDecomposition:
    segments: list[SegmentBreakdown]
    total_effective_hours: float
    requalified: bool = False
    warnings: list[ComplianceIssue] = field(default_factory=list)

    def minutes_by_type(self, segment_type: SegmentType) -> int:
        return sum(s.duration_minutes for s in self.segments if s.type == segment_type)

    def effective_minutes_by_type(self, segment_type: SegmentType) -> float:
        return sum(s.effective_minutes for s in self.segments if s.type == segment_type)


def _coerce_segment(raw) -> GuardSegment:
    if isinstance(raw, GuardSegment):
        return raw
    if isinstance(raw, dict):
        start, seg_type, brk = raw.get("start_time"), raw.get("type"), raw.get("break_minutes")
    else:
        start, seg_type, brk = raw.start_time, raw.type, getattr(raw, "break_minutes", 0)
    if isinstance(start, str):
        start = parse_hhmm(start)
    return GuardSegment(start_time=start, type=SegmentType(seg_type), break_minutes=brk or 0)


def as_segments(raw) -> tuple[GuardSegment, ...]:
    """Normalises dicts (JSON column), schema objects or GuardSegments."""
    return tuple(_coerce_segment(s) for s in raw or ())


def default_segments(start: time = time(9, 0)) -> tuple[GuardSegment, ...]:
    """12h effective day followed by a 12h presence night."""
    night_start = minutes_to_time(to_minutes(start) + 12 * 60)
    return (
        GuardSegment(start, SegmentType.EFFECTIVE, 20),
        GuardSegment(night_start, SegmentType.PRESENCE_NIGHT, 0),
    )


def segment_end(segments, index: int) -> time:
    return segments[(index + 1) % len(segments)].start_time


def segment_duration(segments, index: int) -> int:
    return span_minutes(segments[index].start_time, segment_end(segments, index))


def validate_segments(segments) -> tuple[GuardSegment, ...]:
    """
    Checks the boundary invariants and returns the normalised tuple.

    Start times must run chronologically from the anchor and the durations
    must add up to exactly 24 hours. Breaks only exist on effective segments
    and must be shorter than the segment itself.
    """
    segs = as_segments(segments)
    if len(segs) < MIN_SEGMENTS:
        raise GuardSegmentError(f"Une garde 24h doit comporter au moins {MIN_SEGMENTS} segments")

    total = sum(segment_duration(segs, i) for i in range(len(segs)))
    if total != MINUTES_PER_DAY:
        raise GuardSegmentError("Les segments doivent être chronologiques et couvrir 24h")

    for i, seg in enumerate(segs):
        if seg.break_minutes < 0:
            raise GuardSegmentError(f"Segment {i + 1}: pause négative")
        if seg.break_minutes and seg.type != SegmentType.EFFECTIVE:
            raise GuardSegmentError(
                f"Segment {i + 1}: seule une période effective peut comporter une pause"
            )
        if seg.break_minutes >= segment_duration(segs, i):
            raise GuardSegmentError(f"Segment {i + 1}: pause plus longue que le segment")
    return segs


def _check_index(segments, index: int) -> None:
    if not 0 <= index < len(segments):
        raise GuardSegmentError(f"Segment inexistant: {index}")


# ── Edit operations ───────────────────────────────────────────────────────────

def split_segment(segments, index: int, at: time | None = None) -> tuple[GuardSegment, ...]:
    """
    Inserts a split point inside a segment (its midpoint unless ``at`` is
    given). The new second half inherits type and break.
    """
    segs = as_segments(segments)
    _check_index(segs, index)
    seg = segs[index]
    length = segment_duration(segs, index)
    start = to_minutes(seg.start_time)

    if at is None:
        offset = length // 2
    else:
        offset = (to_minutes(at) - start) % MINUTES_PER_DAY
    if not 0 < offset < length:
        raise GuardSegmentError("Le point de découpe doit se situer à l'intérieur du segment")

    new_seg = replace(seg, start_time=minutes_to_time(start + offset))
    return segs[: index + 1] + (new_seg,) + segs[index + 1:]


def remove_segment(segments, index: int) -> tuple[GuardSegment, ...]:
    """
    Deletes a segment; its time is absorbed by the previous segment. Removing
    the first segment hands the anchor to the next one so the guard keeps its
    start time.
    """
    segs = as_segments(segments)
    _check_index(segs, index)
    if len(segs) - 1 < MIN_SEGMENTS:
        raise GuardSegmentError(f"Une garde 24h doit conserver au moins {MIN_SEGMENTS} segments")

    if index == 0:
        anchor = segs[0].start_time
        successor = replace(segs[1], start_time=anchor)
        return (successor,) + segs[2:]
    return segs[:index] + segs[index + 1:]


def set_segment_type(segments, index: int, segment_type: SegmentType) -> tuple[GuardSegment, ...]:
    segs = as_segments(segments)
    _check_index(segs, index)
    segment_type = SegmentType(segment_type)
    brk = segs[index].break_minutes if segment_type == SegmentType.EFFECTIVE else 0
    updated = replace(segs[index], type=segment_type, break_minutes=brk)
    return segs[:index] + (updated,) + segs[index + 1:]


def set_segment_break(segments, index: int, break_minutes: int) -> tuple[GuardSegment, ...]:
    segs = as_segments(segments)
    _check_index(segs, index)
    if segs[index].type != SegmentType.EFFECTIVE:
        raise GuardSegmentError("Seule une période effective peut comporter une pause")
    if not 0 <= break_minutes < segment_duration(segs, index):
        raise GuardSegmentError("Durée de pause invalide pour ce segment")
    updated = replace(segs[index], break_minutes=break_minutes)
    return segs[:index] + (updated,) + segs[index + 1:]


def move_segment_end(segments, index: int, new_end: time) -> tuple[GuardSegment, ...]:
    """Moves the boundary between segment ``index`` and its successor."""
    segs = as_segments(segments)
    _check_index(segs, index)
    if index == len(segs) - 1:
        raise GuardSegmentError("La fin du dernier segment est fixée par le début de la garde")

    nxt = segs[index + 1]
    updated = segs[: index + 1] + (replace(nxt, start_time=new_end),) + segs[index + 2:]
    # The successor must keep a positive length and stay behind this segment
    length = segment_duration(segs, index) + segment_duration(segs, index + 1)
    offset = (to_minutes(new_end) - to_minutes(segs[index].start_time)) % MINUTES_PER_DAY
    if not 0 < offset < length:
        raise GuardSegmentError("La nouvelle fin doit rester entre les segments voisins")
    return updated


# ── Decomposition ─────────────────────────────────────────────────────────────

def minimum_break_for_segment(
    segments, index: int, rules: ComplianceRules = DEFAULT_RULES
) -> int:
    segs = as_segments(segments)
    if segs[index].type != SegmentType.EFFECTIVE:
        return 0
    if segment_duration(segs, index) > rules.break_threshold_minutes:
        return rules.min_break_minutes
    return 0


def _effective_minutes(seg: GuardSegment, length: int, requalified: bool) -> float:
    if seg.type == SegmentType.EFFECTIVE:
        return max(0, length - seg.break_minutes)
    if seg.type == SegmentType.PRESENCE_DAY:
        return length * 2 / 3
    if seg.type == SegmentType.PRESENCE_NIGHT:
        return length if requalified else 0
    raise ValueError(f"Unknown segment type: {seg.type}")


def decompose_guard(
    segments, requalified: bool = False, rules: ComplianceRules = DEFAULT_RULES
) -> GuardDecomposition:
    """
    Computes each segment's duration, effective and night minutes and sums
    the effective hours of the guard.

    Effective segments count their duration minus the break, presence_day
    segments count 2/3, presence_night segments count fully only when the
    guard is requalified. Missing breaks and the 12h caps are reported as
    warnings, never corrected.
    """
    segs = as_segments(segments)
    rows: list[SegmentBreakdown] = []
    warnings: list[ComplianceIssue] = []

    for i, seg in enumerate(segs):
        end = segment_end(segs, i)
        length = segment_duration(segs, i)
        rows.append(SegmentBreakdown(
            index=i,
            start_time=seg.start_time,
            end_time=end,
            type=seg.type,
            break_minutes=seg.break_minutes,
            duration_minutes=length,
            effective_minutes=_effective_minutes(seg, length, requalified),
            night_minutes=night_overlap(None, seg.start_time, end),
            minimum_break_minutes=minimum_break_for_segment(segs, i, rules),
        ))

        if seg.type == SegmentType.EFFECTIVE and length > rules.break_threshold_minutes:
            if seg.break_minutes < rules.min_break_minutes:
                warnings.append(warning(
                    ComplianceRule.GUARD_SEGMENT_BREAK,
                    f"Segment {i + 1} ({format_time(seg.start_time)}-{format_time(end)}): "
                    f"pause de {rules.min_break_minutes} min requise au-delà de "
                    f"{rules.break_threshold_minutes // 60}h de travail effectif",
                    metric="break_minutes",
                    threshold=rules.min_break_minutes,
                    observed=seg.break_minutes,
                ))

        if seg.type == SegmentType.PRESENCE_NIGHT and length > rules.night_presence_max_hours * 60:
            warnings.append(warning(
                ComplianceRule.GUARD_NIGHT_SEGMENT,
                f"Segment {i + 1}: présence de nuit de {length / 60:.1f}h "
                f"(maximum conseillé {rules.night_presence_max_hours:g}h)",
                metric="segment_hours",
                threshold=rules.night_presence_max_hours,
                observed=length / 60,
            ))

    total_hours = sum(r.effective_minutes for r in rows) / 60
    if total_hours > rules.guard_effective_max_hours:
        warnings.append(warning(
            ComplianceRule.GUARD_EFFECTIVE_MAX,
            f"Travail effectif de la garde: {total_hours:.2f}h "
            f"(plafond {rules.guard_effective_max_hours:g}h)",
            metric="effective_hours",
            threshold=rules.guard_effective_max_hours,
            observed=total_hours,
        ))

    return GuardDecomposition(
        segments=rows,
        total_effective_hours=total_hours,
        requalified=requalified,
        warnings=warnings,
    )
