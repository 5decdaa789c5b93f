# services/ledger_service.py
"""
Registration / attendance / balance rules for trips.

Everything here is a pure function over the domain models: callers (TripStore,
the Streamlit pages) decide when to apply the results.
"""
from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from domain.models import (
    AttendanceRecord,
    AttendanceSummary,
    AttentionLevel,
    CancellationDecision,
    DashboardStats,
    Event,
    EventStatus,
    RegistrationState,
    RegistrationStatus,
    Student,
)

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────
# Policy constants
# ─────────────────────────────────────────────────────────────
CANCELLATION_WINDOW = timedelta(hours=48)
MIN_REGISTRATIONS = 15
ATTENTION_WINDOW_DAYS = 14
URGENT_WINDOW_DAYS = 7

# A registered student with no attendance mark counts as absent.
ABSENT_BY_DEFAULT = False

ALLOWED_TRANSITIONS: Dict[RegistrationState, frozenset] = {
    RegistrationState.PENDING: frozenset({RegistrationState.CONFIRMED, RegistrationState.CANCELLED}),
    RegistrationState.CONFIRMED: frozenset({RegistrationState.CANCELLED}),
    RegistrationState.CANCELLED: frozenset(),
}


class InvalidTransitionError(ValueError):
    """Raised when a registration is moved along an edge the lifecycle does not have."""

    def __init__(self, current: RegistrationState, target: RegistrationState):
        super().__init__(f"Cannot move a registration from {current.value} to {target.value}")
        self.current = current
        self.target = target


def _time_left(start: datetime, now: datetime) -> timedelta:
    """Elapsed time until `start`; aware values are compared in UTC so DST shifts count."""
    if start.tzinfo is not None and now.tzinfo is not None:
        return start.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    return start - now


# ─────────────────────────────────────────────────────────────
# Cancellation and charges
# ─────────────────────────────────────────────────────────────
def evaluate_cancellation(event: Event, now: datetime) -> CancellationDecision:
    """
    Free cancellation is allowed up to and including exactly 48h before start.
    Inside the window (or after the start) the normal flow must block the
    cancellation; forcing it costs the full price.
    """
    allowed = _time_left(event.start, now) >= CANCELLATION_WINDOW
    fee = 0.0 if allowed else float(event.price)
    return CancellationDecision(allowed=allowed, fee_if_forced=fee)


def compute_attendance_charges(
    event: Event, attendance: Optional[Mapping[str, bool]] = None
) -> List[AttendanceRecord]:
    """One record per registered student; every non-attendee owes the full price."""
    marks = event.attendance if attendance is None else attendance
    records: List[AttendanceRecord] = []
    for student_id in event.registrations:
        attended = bool(marks.get(student_id, ABSENT_BY_DEFAULT))
        charge = 0.0 if attended else float(event.price)
        records.append(AttendanceRecord(student_id=student_id, attended=attended, charge=charge))
    return records


def summarize_attendance(records: Iterable[AttendanceRecord]) -> AttendanceSummary:
    records = list(records)
    attended = sum(1 for r in records if r.attended)
    return AttendanceSummary(
        attended_count=attended,
        absent_count=len(records) - attended,
        total_charges=sum(r.charge for r in records),
    )


def apply_charges(
    students: Sequence[Student], records: Iterable[AttendanceRecord], reason: str
) -> List[Student]:
    """
    Return copies of `students` with each positive charge subtracted from the
    matching balance and `reason` appended to its notes.

    There is no double-charge guard here: calling this twice with the same
    records charges twice. Callers track whether an event was already processed.
    """
    charges: Dict[str, float] = {}
    for r in records:
        if r.charge > 0:
            charges[r.student_id] = charges.get(r.student_id, 0.0) + r.charge

    updated: List[Student] = []
    for s in students:
        amount = charges.get(s.id)
        if not amount:
            updated.append(s)
            continue
        logger.info("Charging student %s %.2f (%s)", s.id, amount, reason)
        updated.append(replace(s, balance=s.balance - amount, notes=[*s.notes, reason]))
    return updated


def find_charge_conflicts(
    event: Event,
    statuses: Iterable[RegistrationStatus],
    records: Iterable[AttendanceRecord],
) -> List[str]:
    """Students who would be charged although their registration is cancelled."""
    cancelled = {
        s.student_id for s in statuses
        if s.event_id == event.id and s.status == RegistrationState.CANCELLED
    }
    return [r.student_id for r in records if r.charge > 0 and r.student_id in cancelled]


# ─────────────────────────────────────────────────────────────
# Registration lifecycle
# ─────────────────────────────────────────────────────────────
def can_transition(current: RegistrationState, target: RegistrationState) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def invite(event_id: str, student_id: str) -> RegistrationStatus:
    return RegistrationStatus(event_id=event_id, student_id=student_id, status=RegistrationState.PENDING)


def transition(
    registration: RegistrationStatus, target: RegistrationState, now: datetime
) -> RegistrationStatus:
    if not can_transition(registration.status, target):
        raise InvalidTransitionError(registration.status, target)
    return replace(registration, status=target, response_date=now)


def is_full(event: Event) -> bool:
    return bool(event.max_participants) and len(event.registrations) >= event.max_participants


# ─────────────────────────────────────────────────────────────
# Dashboard aggregation
# ─────────────────────────────────────────────────────────────
def days_until(start: datetime, now: datetime) -> int:
    """Calendar-day ceiling of the time left until `start` (negative once past)."""
    return math.ceil(_time_left(start, now) / timedelta(days=1))


def needs_attention(event: Event, now: datetime) -> bool:
    if event.status != EventStatus.UPCOMING:
        return False
    days = days_until(event.start, now)
    return len(event.registrations) < MIN_REGISTRATIONS and 0 < days <= ATTENTION_WINDOW_DAYS


def attention_level(event: Event, now: datetime) -> AttentionLevel:
    if event.status != EventStatus.UPCOMING:
        return AttentionLevel.NORMAL
    if len(event.registrations) >= MIN_REGISTRATIONS:
        return AttentionLevel.CONFIRMED
    days = days_until(event.start, now)
    if 0 < days <= URGENT_WINDOW_DAYS:
        return AttentionLevel.URGENT
    if 0 < days <= ATTENTION_WINDOW_DAYS:
        return AttentionLevel.NEEDS_ATTENTION
    return AttentionLevel.NORMAL


def total_debt(students: Iterable[Student]) -> float:
    return sum(abs(s.balance) for s in students if s.balance < 0)


def total_credit(students: Iterable[Student]) -> float:
    return sum(s.balance for s in students if s.balance > 0)


def events_needing_attention(events: Iterable[Event], now: datetime) -> int:
    return sum(1 for e in events if needs_attention(e, now))


def dashboard_stats(students: Sequence[Student], events: Sequence[Event], now: datetime) -> DashboardStats:
    return DashboardStats(
        total_students=len(students),
        upcoming_events=sum(1 for e in events if e.status == EventStatus.UPCOMING),
        total_debt=total_debt(students),
        total_credit=total_credit(students),
        events_needing_attention=events_needing_attention(events, now),
    )
