# services/trip_store.py
"""
In-memory session for one browser tab.

Pages call these methods instead of editing entities; every mutation goes
through ledger_service. User-facing failures come back as (False, message)
rather than exceptions.
"""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from domain.models import (
    AttendanceRecord,
    AttendanceReport,
    DashboardStats,
    Delivery,
    Event,
    EventStatus,
    NotificationKind,
    RegistrationState,
    RegistrationStatus,
    Student,
    StudentNotification,
)
from services import ledger_service as ledger
from services import notification_service
from services.report_service import absent_students, build_attendance_report
from utils.format import format_currency

logger = logging.getLogger(__name__)

Result = Tuple[bool, str]
Notifier = Callable[[Delivery], List[str]]


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


class TripStore:
    def __init__(
        self,
        students: Iterable[Student] = (),
        events: Iterable[Event] = (),
        statuses: Iterable[RegistrationStatus] = (),
        notifications: Iterable[StudentNotification] = (),
        notifier: Optional[Notifier] = None,
        charges_processed: Iterable[str] = (),
    ):
        self.students: List[Student] = list(students)
        self.events: List[Event] = list(events)
        self.statuses: Dict[Tuple[str, str], RegistrationStatus] = {
            (s.event_id, s.student_id): s for s in statuses
        }
        self.notifications: List[StudentNotification] = list(notifications)
        self.notifier: Notifier = notifier or notification_service.deliver
        # Events whose no-show charges were already applied
        self.charges_processed: Set[str] = set(charges_processed)

    @classmethod
    def seeded(cls, now: dt.datetime, notifier: Optional[Notifier] = None) -> "TripStore":
        from services.sample_data import sample_dataset

        students, events, statuses, notifications = sample_dataset(now)
        return cls(students, events, statuses, notifications, notifier=notifier, charges_processed={"2"})

    # ─────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────
    def get_student(self, student_id: str) -> Optional[Student]:
        return next((s for s in self.students if s.id == student_id), None)

    def get_event(self, event_id: str) -> Optional[Event]:
        return next((e for e in self.events if e.id == event_id), None)

    def registration_for(self, event_id: str, student_id: str) -> Optional[RegistrationStatus]:
        return self.statuses.get((event_id, student_id))

    def statuses_for_event(self, event_id: str) -> List[RegistrationStatus]:
        return [s for (eid, _), s in self.statuses.items() if eid == event_id]

    def registered_students(self, event: Event) -> List[Student]:
        by_id = {s.id: s for s in self.students}
        return [by_id[sid] for sid in event.registrations if sid in by_id]

    def _notify_student(self, student_id: str, title: str, message: str,
                        kind: NotificationKind, now: dt.datetime) -> None:
        self.notifications.insert(0, StudentNotification(
            id=_new_id(), student_id=student_id, title=title, message=message, kind=kind, date=now,
        ))

    # ─────────────────────────────────────────────────────────
    # Students
    # ─────────────────────────────────────────────────────────
    def add_student(self, name: str, email: str, phone: str = "", balance: float = 0.0) -> Result:
        name, email = (name or "").strip(), (email or "").strip()
        if not name or not email:
            return False, "Name and email are required."
        self.students.append(Student(id=_new_id(), name=name, email=email,
                                     phone=(phone or "").strip(), balance=float(balance or 0)))
        logger.info("Added student %s", email)
        return True, "Student added successfully."

    def update_student(self, student_id: str, name: str, email: str, phone: str, balance: float) -> Result:
        """Explicit edit; the only path that overwrites a balance outside charging."""
        name, email = (name or "").strip(), (email or "").strip()
        if not name or not email:
            return False, "Name and email are required."
        student = self.get_student(student_id)
        if student is None:
            return False, "Student not found."
        updated = replace(student, name=name, email=email, phone=(phone or "").strip(), balance=float(balance or 0))
        self.students = [updated if s.id == student_id else s for s in self.students]
        return True, "Student details updated successfully."

    def delete_student(self, student_id: str) -> Result:
        if self.get_student(student_id) is None:
            return False, "Student not found."
        self.students = [s for s in self.students if s.id != student_id]
        for event in self.events:
            event.registrations = [sid for sid in event.registrations if sid != student_id]
            event.attendance.pop(student_id, None)
        self.statuses = {k: v for k, v in self.statuses.items() if k[1] != student_id}
        self.notifications = [n for n in self.notifications if n.student_id != student_id]
        logger.info("Deleted student %s", student_id)
        return True, "Student deleted."

    def existing_emails(self) -> Set[str]:
        return {s.email.strip().lower() for s in self.students}

    def import_students(self, rows: Iterable[Mapping]) -> Tuple[int, int]:
        """Add previewed rows, skipping emails that already exist. Returns (added, skipped)."""
        seen = self.existing_emails()
        added = skipped = 0
        for row in rows:
            key = str(row.get("email", "")).strip().lower()
            if not key or key in seen:
                skipped += 1
                continue
            ok, _ = self.add_student(row.get("name", ""), row.get("email", ""),
                                     row.get("phone", ""), row.get("balance", 0.0))
            if ok:
                seen.add(key)
                added += 1
            else:
                skipped += 1
        logger.info("Imported %d student(s), skipped %d", added, skipped)
        return added, skipped

    # ─────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────
    @staticmethod
    def _validate_event(title: str, start: Optional[dt.datetime], location: str,
                        price: float, max_participants: Optional[int]) -> Optional[str]:
        if not (title or "").strip() or start is None or not (location or "").strip():
            return "Title, date and location are required."
        if float(price or 0) < 0:
            return "Price cannot be negative."
        if max_participants is not None and int(max_participants) < 1:
            return "Maximum participants must be at least 1."
        return None

    def add_event(self, title: str, description: str, start: Optional[dt.datetime], location: str,
                  price: float = 0.0, max_participants: Optional[int] = None) -> Result:
        error = self._validate_event(title, start, location, price, max_participants)
        if error:
            return False, error
        self.events.append(Event(
            id=_new_id(), title=title.strip(), description=(description or "").strip(), start=start,
            location=location.strip(), price=float(price or 0),
            max_participants=int(max_participants) if max_participants else None,
        ))
        logger.info("Added event %s", title)
        return True, "Event added successfully."

    def update_event(self, event_id: str, title: str, description: str, start: Optional[dt.datetime],
                     location: str, price: float = 0.0, max_participants: Optional[int] = None,
                     status: Optional[EventStatus] = None) -> Result:
        error = self._validate_event(title, start, location, price, max_participants)
        if error:
            return False, error
        event = self.get_event(event_id)
        if event is None:
            return False, "Event not found."
        event.title = title.strip()
        event.description = (description or "").strip()
        event.start = start
        event.location = location.strip()
        event.price = float(price or 0)
        event.max_participants = int(max_participants) if max_participants else None
        if status is not None:
            event.status = EventStatus(status)
        return True, "Event details updated successfully."

    def delete_event(self, event_id: str) -> Result:
        if self.get_event(event_id) is None:
            return False, "Event not found."
        self.events = [e for e in self.events if e.id != event_id]
        self.statuses = {k: v for k, v in self.statuses.items() if k[0] != event_id}
        self.charges_processed.discard(event_id)
        logger.info("Deleted event %s", event_id)
        return True, "Event deleted."

    # ─────────────────────────────────────────────────────────
    # Registrations (administrator)
    # ─────────────────────────────────────────────────────────
    def send_invitations(self, event_id: str, student_ids: Sequence[str], message: str,
                         now: dt.datetime) -> Result:
        event = self.get_event(event_id)
        if event is None:
            return False, "Event not found."
        if event.status != EventStatus.UPCOMING:
            return False, "Invitations can only be sent for upcoming events."
        if not student_ids:
            return False, "Select at least one student."
        if not (message or "").strip():
            return False, "Enter an invitation message."

        invited: List[Student] = []
        skipped = 0
        for sid in dict.fromkeys(student_ids):
            student = self.get_student(sid)
            current = self.registration_for(event_id, sid)
            if student is None or (current and current.status == RegistrationState.CANCELLED):
                skipped += 1
                continue
            invited.append(student)

        if not invited:
            return False, "None of the selected students can be invited."
        if not self._deliver(notification_service.build_invitation(event, invited, message)):
            return False, "Could not send the invitations. No registrations were changed."

        for student in invited:
            if self.registration_for(event_id, student.id) is None:
                self.statuses[(event_id, student.id)] = ledger.invite(event_id, student.id)
            if student.id not in event.registrations:
                event.registrations.append(student.id)
        msg = f"Invitations sent to {len(invited)} student(s)."
        if skipped:
            msg += f" {skipped} skipped (cancelled or unknown)."
        return True, msg

    def _deliver(self, delivery: Delivery) -> bool:
        try:
            self.notifier(delivery)
        except Exception:
            logger.exception("Delivery failed: %s", delivery.subject)
            return False
        return True

    def _set_state(self, event: Event, student_id: str, target: RegistrationState,
                   now: dt.datetime) -> Result:
        current = self.registration_for(event.id, student_id) or ledger.invite(event.id, student_id)
        try:
            updated = ledger.transition(current, target, now)
        except ledger.InvalidTransitionError as e:
            logger.warning("Rejected transition for %s on %s: %s", student_id, event.id, e)
            return False, str(e)
        self.statuses[(event.id, student_id)] = updated
        if target == RegistrationState.CANCELLED:
            event.registrations = [sid for sid in event.registrations if sid != student_id]
            event.attendance.pop(student_id, None)
        elif student_id not in event.registrations:
            event.registrations.append(student_id)
        logger.info("Registration %s/%s → %s", event.id, student_id, target.value)
        return True, f"Registration {target.value}."

    def update_registration(self, event_id: str, student_id: str, target: RegistrationState,
                            now: dt.datetime) -> Result:
        """Administrator confirm / cancel. Capacity is not checked here."""
        event = self.get_event(event_id)
        if event is None or self.get_student(student_id) is None:
            return False, "Event or student not found."
        return self._set_state(event, student_id, RegistrationState(target), now)

    def force_cancel(self, event_id: str, student_id: str, now: dt.datetime) -> Result:
        """Cancel inside the free window and charge the full price."""
        event = self.get_event(event_id)
        if event is None or self.get_student(student_id) is None:
            return False, "Event or student not found."
        decision = ledger.evaluate_cancellation(event, now)
        ok, msg = self._set_state(event, student_id, RegistrationState.CANCELLED, now)
        if not ok:
            return ok, msg
        if decision.fee_if_forced > 0:
            record = AttendanceRecord(student_id=student_id, attended=False, charge=decision.fee_if_forced)
            self.students = ledger.apply_charges(self.students, [record], f"Late cancellation: {event.title}")
            return True, f"Registration cancelled; charged {format_currency(decision.fee_if_forced)}."
        return True, "Registration cancelled free of charge."

    # ─────────────────────────────────────────────────────────
    # Registrations (student)
    # ─────────────────────────────────────────────────────────
    def register_student(self, event_id: str, student_id: str, now: dt.datetime) -> Result:
        event = self.get_event(event_id)
        if event is None or self.get_student(student_id) is None:
            return False, "Event or student not found."
        if event.status != EventStatus.UPCOMING:
            return False, "Registration is closed for this trip."
        current = self.registration_for(event_id, student_id)
        if current and current.status == RegistrationState.CANCELLED:
            return False, "You cancelled this trip; contact the department to re-register."
        if student_id in event.registrations:
            return False, "You are already registered for this trip."
        if ledger.is_full(event):
            logger.warning("Registration rejected for %s: %s is full", student_id, event.id)
            return False, "Trip is full – no seats available."

        event.registrations.append(student_id)
        self.statuses[(event_id, student_id)] = replace(
            current or ledger.invite(event_id, student_id), registration_date=now,
        )
        self._notify_student(student_id, "Trip registration",
                             f"You registered for {event.title}. Awaiting department approval.",
                             NotificationKind.INFO, now)
        return True, f"You registered for {event.title}."

    def cancel_registration(self, event_id: str, student_id: str, now: dt.datetime) -> Result:
        event = self.get_event(event_id)
        if event is None:
            return False, "Event not found."
        current = self.registration_for(event_id, student_id)
        if current is None or current.status == RegistrationState.CANCELLED:
            return False, "You are not registered for this trip."
        decision = ledger.evaluate_cancellation(event, now)
        if not decision.allowed:
            logger.warning("Cancellation blocked for %s on %s (inside window)", student_id, event_id)
            return False, ("Cannot cancel less than two days before the trip. "
                           f"The full price ({format_currency(decision.fee_if_forced)}) will be charged.")
        ok, msg = self._set_state(event, student_id, RegistrationState.CANCELLED, now)
        if ok:
            self._notify_student(student_id, "Registration cancelled",
                                 f"Your registration for {event.title} was cancelled free of charge.",
                                 NotificationKind.SUCCESS, now)
            return True, f"Your registration for {event.title} was cancelled."
        return ok, msg

    # ─────────────────────────────────────────────────────────
    # Attendance and charges
    # ─────────────────────────────────────────────────────────
    def update_attendance(self, event_id: str, attendance: Mapping[str, bool]) -> Result:
        event = self.get_event(event_id)
        if event is None:
            return False, "Event not found."
        event.attendance = {sid: bool(v) for sid, v in attendance.items() if sid in event.registrations}
        return True, "Attendance saved."

    def attendance_records(self, event_id: str) -> List[AttendanceRecord]:
        event = self.get_event(event_id)
        return ledger.compute_attendance_charges(event) if event else []

    def charge_conflicts(self, event_id: str) -> List[str]:
        event = self.get_event(event_id)
        if event is None:
            return []
        return ledger.find_charge_conflicts(event, self.statuses_for_event(event_id),
                                            self.attendance_records(event_id))

    def process_charges(self, event_id: str) -> Result:
        """Charge every no-show once per event."""
        event = self.get_event(event_id)
        if event is None:
            return False, "Event not found."
        if event_id in self.charges_processed:
            return False, "Charges for this event were already processed."
        records = [r for r in self.attendance_records(event_id) if r.charge > 0]
        if not records:
            return False, "No charges to process."
        self.students = ledger.apply_charges(self.students, records, f"No-show at event: {event.title}")
        self.charges_processed.add(event_id)
        return True, f"{len(records)} student(s) charged."

    def build_report(self, event_id: str) -> Optional[AttendanceReport]:
        event = self.get_event(event_id)
        if event is None:
            return None
        return build_attendance_report(event, self.students, self.attendance_records(event_id))

    def send_report(self, event_id: str, email: str) -> Result:
        if not (email or "").strip():
            return False, "An email address is required."
        report = self.build_report(event_id)
        if report is None:
            return False, "Event not found."
        if not self._deliver(notification_service.build_report_delivery(report, email)):
            return False, f"Could not send the report to {email.strip()}."
        return True, f"Report sent to {email.strip()} with {report.absent_count} absent student(s)."

    def send_absentee_message(self, event_id: str, message: str) -> Result:
        if not (message or "").strip():
            return False, "Enter a message."
        event = self.get_event(event_id)
        report = self.build_report(event_id)
        if event is None or report is None:
            return False, "Event not found."
        absentees = absent_students(report, self.students)
        if not absentees:
            return False, "No absent students."
        if not self._deliver(notification_service.build_absentee_delivery(event, absentees, message)):
            return False, "Could not send the message to absent students."
        return True, f"Message sent to {len(absentees)} absent student(s)."

    # ─────────────────────────────────────────────────────────
    # Dashboards / student portal
    # ─────────────────────────────────────────────────────────
    def dashboard(self, now: dt.datetime) -> DashboardStats:
        return ledger.dashboard_stats(self.students, self.events, now)

    def notifications_for(self, student_id: str) -> List[StudentNotification]:
        return [n for n in self.notifications if n.student_id == student_id]

    def unread_count(self, student_id: str) -> int:
        return sum(1 for n in self.notifications_for(student_id) if not n.read)

    def mark_notification_read(self, notification_id: str) -> None:
        for n in self.notifications:
            if n.id == notification_id:
                n.read = True

    def student_trips(self, student_id: str) -> List[Tuple[Event, RegistrationStatus]]:
        """Events the student holds a non-cancelled registration for."""
        out = []
        for event in self.events:
            reg = self.registration_for(event.id, student_id)
            if reg and reg.status != RegistrationState.CANCELLED:
                out.append((event, reg))
        return out
