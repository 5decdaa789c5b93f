import logging

import config
from domain.models import Delivery
from services import notification_service as ns
from services.report_service import absent_students, build_attendance_report


def test_invitation_message_mentions_details(make_event):
    event = make_event(price=120, max_participants=30, description="Old City tour")
    text = ns.default_invitation_message(event)
    assert "Trip to Jerusalem" in text
    assert "Jerusalem" in text
    assert "₪120.00" in text
    assert "30 participants" in text
    assert "2 days" in text
    assert text.rstrip().endswith(config.DEPARTMENT_NAME)


def test_invitation_message_for_free_trip(make_event):
    assert "Price: Free" in ns.default_invitation_message(make_event(price=0))


def test_absentee_message_appeal_only_when_priced(make_event):
    assert "appeal" in ns.default_absentee_message(make_event(price=60))
    assert "appeal" not in ns.default_absentee_message(make_event(price=0))


def test_builders(make_event, students):
    event = make_event(price=60, registrations=["A", "C"], attendance={"A": True})
    invite = ns.build_invitation(event, students[:2], "Join us")
    assert invite.recipients == ("alice@example.com", "bob@example.com")
    assert invite.body == "Join us"

    report = build_attendance_report(event, students)
    assert report.attended_count == 1 and report.absent_count == 1
    assert [s.id for s in absent_students(report, students)] == ["C"]

    delivery = ns.build_report_delivery(report, " office@example.edu ")
    assert delivery.recipients == ("office@example.edu",)
    assert "Carol <carol@example.com>" in delivery.body
    assert "Total charges: ₪60.00" in delivery.body

    absentee = ns.build_absentee_delivery(event, absent_students(report, students), "msg")
    assert absentee.subject == "Trip attendance – Trip to Jerusalem"
    assert absentee.recipients == ("carol@example.com",)


def test_deliver_dry_run_logs(monkeypatch, caplog):
    monkeypatch.setattr(config, "EMAIL_DRY_RUN", True)
    monkeypatch.setattr(config, "SMTP_HOST", "smtp.example.edu")
    monkeypatch.setattr(config, "SMTP_PORT", 587)
    monkeypatch.setattr(config, "SMTP_SECURITY", "starttls")
    monkeypatch.setattr(config, "SMTP_USERNAME", None)
    monkeypatch.setattr(config, "SMTP_PASSWORD", None)
    monkeypatch.setattr(config, "SENDER_EMAIL", "trips@example.edu")

    delivery = Delivery(channel="email", recipients=("a@example.com", "b@example.com"),
                        subject="Hello", body="Body")
    with caplog.at_level(logging.INFO):
        handled = ns.deliver(delivery)
    assert handled == ["a@example.com", "b@example.com"]
    assert sum("[DRY-RUN]" in r.getMessage() for r in caplog.records) == 2
