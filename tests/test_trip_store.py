import datetime as dt

from domain.models import EventStatus, NotificationKind, RegistrationState, RegistrationStatus
from services.trip_store import TripStore


def _add_event(store, now, days=10, price=120.0, cap=None, title="Trip to Jerusalem"):
    ok, _ = store.add_event(title, "", now + dt.timedelta(days=days), "Jerusalem", price, cap)
    assert ok
    return store.events[-1]


# ── students ─────────────────────────────────────────────────
def test_add_student_requires_name_and_email(store):
    ok, msg = store.add_student("", "x@example.com")
    assert not ok and msg == "Name and email are required."
    ok, _ = store.add_student("Dana", "dana@example.com", "050", 10)
    assert ok
    assert store.students[-1].balance == 10.0


def test_delete_student_cascades(store, now):
    event = _add_event(store, now)
    store.register_student(event.id, "A", now)
    event.attendance["A"] = True
    ok, _ = store.delete_student("A")
    assert ok
    assert store.get_student("A") is None
    assert "A" not in event.registrations
    assert "A" not in event.attendance
    assert store.registration_for(event.id, "A") is None
    assert store.notifications_for("A") == []


def test_import_skips_existing_emails_case_insensitively(store):
    rows = [
        {"name": "Alice again", "email": "ALICE@example.com", "phone": "", "balance": 0},
        {"name": "Dana", "email": "dana@example.com", "phone": "", "balance": 5},
        {"name": "Dana twin", "email": "Dana@Example.com", "phone": "", "balance": 0},
    ]
    assert store.import_students(rows) == (1, 2)
    assert len(store.students) == 4


# ── events ───────────────────────────────────────────────────
def test_event_validation(store, now):
    assert store.add_event("", "", now, "X") == (False, "Title, date and location are required.")
    assert store.add_event("T", "", None, "X")[0] is False
    assert store.add_event("T", "", now, "X", price=-1)[0] is False
    assert store.add_event("T", "", now, "X", max_participants=0) == (False, "Maximum participants must be at least 1.")


def test_update_event_keeps_registrations(store, now):
    event = _add_event(store, now)
    store.register_student(event.id, "A", now)
    ok, _ = store.update_event(event.id, "New title", "", event.start, "Haifa", 90, None,
                               EventStatus.ONGOING)
    assert ok
    assert event.title == "New title"
    assert event.status == EventStatus.ONGOING
    assert event.registrations == ["A"]


def test_delete_event_drops_statuses(store, now):
    event = _add_event(store, now)
    store.register_student(event.id, "A", now)
    store.delete_event(event.id)
    assert store.get_event(event.id) is None
    assert store.statuses_for_event(event.id) == []


# ── student registration ─────────────────────────────────────
def test_register_then_full(store, now):
    event = _add_event(store, now, cap=1)
    ok, _ = store.register_student(event.id, "A", now)
    assert ok
    assert store.registration_for(event.id, "A").status == RegistrationState.PENDING
    assert store.registration_for(event.id, "A").registration_date == now

    ok, msg = store.register_student(event.id, "B", now)
    assert not ok
    assert msg == "Trip is full – no seats available."
    assert event.registrations == ["A"]


def test_register_twice_rejected(store, now):
    event = _add_event(store, now)
    store.register_student(event.id, "A", now)
    ok, _ = store.register_student(event.id, "A", now)
    assert not ok
    assert event.registrations == ["A"]


def test_register_adds_notification(store, now):
    event = _add_event(store, now)
    store.register_student(event.id, "A", now)
    notes = store.notifications_for("A")
    assert len(notes) == 1
    assert notes[0].kind == NotificationKind.INFO
    assert store.unread_count("A") == 1
    store.mark_notification_read(notes[0].id)
    assert store.unread_count("A") == 0


def test_cancel_inside_window_is_blocked(store, now):
    start = now + dt.timedelta(hours=47, minutes=59)
    store.add_event("Late", "", start, "X", 120)
    event = store.events[-1]
    store.register_student(event.id, "A", now - dt.timedelta(days=3))
    ok, msg = store.cancel_registration(event.id, "A", now)
    assert not ok
    assert "₪120.00" in msg
    assert event.registrations == ["A"]
    assert store.registration_for(event.id, "A").status == RegistrationState.PENDING


def test_cancel_outside_window_is_free(store, now):
    start = now + dt.timedelta(hours=48, minutes=1)
    store.add_event("Early", "", start, "X", 120)
    event = store.events[-1]
    store.register_student(event.id, "A", now)
    ok, _ = store.cancel_registration(event.id, "A", now)
    assert ok
    assert event.registrations == []
    assert store.registration_for(event.id, "A").status == RegistrationState.CANCELLED
    assert store.get_student("A").balance == 0.0
    assert store.notifications_for("A")[0].kind == NotificationKind.SUCCESS


def test_cancelled_student_cannot_reregister(store, now):
    event = _add_event(store, now)
    store.register_student(event.id, "A", now)
    store.cancel_registration(event.id, "A", now)
    ok, _ = store.register_student(event.id, "A", now)
    assert not ok
    assert store.student_trips("A") == []


# ── admin registration ───────────────────────────────────────
def test_send_invitations_validation(store, now, sent):
    event = _add_event(store, now)
    assert store.send_invitations(event.id, [], "hi", now)[0] is False
    assert store.send_invitations(event.id, ["A"], "   ", now)[0] is False
    event.status = EventStatus.COMPLETED
    assert store.send_invitations(event.id, ["A"], "hi", now)[0] is False
    assert sent == []


def test_send_invitations_creates_pending_and_notifies(store, now, sent):
    event = _add_event(store, now)
    store.statuses[(event.id, "C")] = RegistrationStatus(event.id, "C", RegistrationState.CANCELLED)
    ok, msg = store.send_invitations(event.id, ["A", "B", "C"], "Join us", now)
    assert ok
    assert "1 skipped" in msg
    assert event.registrations == ["A", "B"]
    assert store.registration_for(event.id, "A").status == RegistrationState.PENDING
    assert len(sent) == 1
    assert sent[0].recipients == ("alice@example.com", "bob@example.com")
    assert sent[0].subject == "Invitation: Trip to Jerusalem"


def test_admin_confirm_then_cancel(store, now):
    event = _add_event(store, now)
    store.send_invitations(event.id, ["A"], "hi", now)
    assert store.update_registration(event.id, "A", RegistrationState.CONFIRMED, now)[0]
    assert store.update_registration(event.id, "A", RegistrationState.CANCELLED, now)[0]
    ok, msg = store.update_registration(event.id, "A", RegistrationState.CONFIRMED, now)
    assert not ok
    assert msg == "Cannot move a registration from cancelled to confirmed"
    assert "A" not in event.registrations


def test_force_cancel_charges_full_price(store, now):
    store.add_event("Soon", "", now + dt.timedelta(hours=10), "X", 120)
    event = store.events[-1]
    store.register_student(event.id, "B", now - dt.timedelta(days=5))
    ok, _ = store.force_cancel(event.id, "B", now)
    assert ok
    student = store.get_student("B")
    assert student.balance == -70.0
    assert student.notes == ["Late cancellation: Soon"]


# ── attendance and charges ───────────────────────────────────
def test_attendance_scenario(store, now):
    event = _add_event(store, now, price=120)
    store.register_student(event.id, "A", now)
    store.register_student(event.id, "B", now)
    store.update_attendance(event.id, {"A": True, "Z": True})
    assert event.attendance == {"A": True}

    ok, msg = store.process_charges(event.id)
    assert ok and msg == "1 student(s) charged."
    assert store.get_student("A").balance == 0.0
    assert store.get_student("B").balance == -70.0

    ok, msg = store.process_charges(event.id)
    assert not ok
    assert msg == "Charges for this event were already processed."
    assert store.get_student("B").balance == -70.0


def test_process_charges_nothing_to_charge(store, now):
    event = _add_event(store, now, price=0)
    store.register_student(event.id, "A", now)
    assert store.process_charges(event.id) == (False, "No charges to process.")


def test_send_report_and_absentee_message(store, now, sent):
    event = _add_event(store, now, price=60)
    store.register_student(event.id, "A", now)
    store.register_student(event.id, "C", now)
    store.update_attendance(event.id, {"A": True})

    assert store.send_report(event.id, "")[0] is False
    ok, _ = store.send_report(event.id, "office@example.edu")
    assert ok
    assert sent[-1].recipients == ("office@example.edu",)
    assert "Carol" in sent[-1].body

    assert store.send_absentee_message(event.id, "")[0] is False
    ok, _ = store.send_absentee_message(event.id, "We missed you")
    assert ok
    assert sent[-1].recipients == ("carol@example.com",)


def test_absentee_message_without_absentees(store, now):
    event = _add_event(store, now)
    store.register_student(event.id, "A", now)
    store.update_attendance(event.id, {"A": True})
    assert store.send_absentee_message(event.id, "hi") == (False, "No absent students.")


# ── seeded session ───────────────────────────────────────────
def test_seeded_store(now):
    store = TripStore.seeded(now, notifier=lambda d: [])
    assert len(store.students) == 3
    assert len(store.events) == 4
    assert "2" in store.charges_processed
    stats = store.dashboard(now)
    assert stats.total_debt == 100.0
    assert stats.total_credit == 50.0
    # Jerusalem (10 days, 2 registrations) needs attention; Haifa is 15 days out.
    assert stats.events_needing_attention == 1
    assert store.process_charges("2")[0] is False


# ── capacity applies to self-registration only ───────────────
def test_admin_can_invite_and_confirm_past_capacity(store, now, sent):
    event = _add_event(store, now, cap=1)
    assert store.register_student(event.id, "A", now)[0]
    assert store.register_student(event.id, "B", now)[0] is False

    ok, _ = store.send_invitations(event.id, ["B"], "Join us", now)
    assert ok
    ok, _ = store.update_registration(event.id, "C", RegistrationState.CONFIRMED, now)
    assert ok
    assert event.registrations == ["A", "B", "C"]
    assert store.registration_for(event.id, "C").status == RegistrationState.CONFIRMED


# ── failed deliveries ────────────────────────────────────────
def _refusing_store(students):
    def notifier(delivery):
        raise OSError("SMTP connection refused")
    return TripStore(students=students, notifier=notifier)


def test_failed_invitation_changes_nothing(students, now):
    store = _refusing_store(students)
    event = _add_event(store, now)
    ok, msg = store.send_invitations(event.id, ["A"], "Join us", now)
    assert not ok
    assert msg.startswith("Could not send")
    assert event.registrations == []
    assert store.registration_for(event.id, "A") is None


def test_failed_report_and_absentee_message(students, now, caplog):
    store = _refusing_store(students)
    event = _add_event(store, now, price=60)
    store.register_student(event.id, "A", now)

    ok, msg = store.send_report(event.id, "office@example.edu")
    assert not ok and msg.startswith("Could not send")
    ok, msg = store.send_absentee_message(event.id, "We missed you")
    assert not ok and msg.startswith("Could not send")
    assert any("Delivery failed" in r.getMessage() for r in caplog.records)
