# services/notification_service.py
import logging
import textwrap
from typing import Iterable, List

from config import DEPARTMENT_NAME, INSTITUTION_NAME
from domain.models import AttendanceReport, Delivery, Event, Student
from services.ledger_service import CANCELLATION_WINDOW
from utils.email_utils import send_plain_email
from utils.format import format_currency, format_date, format_price

logger = logging.getLogger(__name__)

_WINDOW_DAYS = int(CANCELLATION_WINDOW.total_seconds() // 86400)


# ──────────────────────────────────────────────────────────────
# Default message bodies
# ──────────────────────────────────────────────────────────────
def default_invitation_message(event: Event) -> str:
    lines = [
        "Hello,",
        "",
        f"You are invited to the trip: {event.title}",
        "",
        f"📅 Date: {format_date(event.start)}",
        f"📍 Location: {event.location}",
    ]
    if event.description:
        lines.append(f"📝 Description: {event.description}")
    lines.append(f"💰 Price: {format_price(event.price)}")
    if event.max_participants:
        lines.append(f"👥 Limited seats: {event.max_participants} participants")
    lines += [
        "",
        "⚠️ Important:",
        f"- Please confirm your participation at least {_WINDOW_DAYS} days before the date",
        f"- Cancellation up to {_WINDOW_DAYS} days before - free of charge",
        f"- Cancellation less than {_WINDOW_DAYS} days before, or not showing up - full price is charged",
        "",
        "Please confirm your participation as soon as possible.",
        "",
        "Best regards,",
        DEPARTMENT_NAME,
    ]
    return "\n".join(lines)


def default_absentee_message(event: Event) -> str:
    appeal = (
        f"You may contact the {DEPARTMENT_NAME} within 7 days to appeal the charge."
        if event.price > 0 else ""
    )
    return textwrap.dedent(f"""\
        Hello,

        This message concerns the trip: {event.title}
        Date: {format_date(event.start)}

        We are sorry to note that your attendance at the trip was not recorded.

        According to department policy, not showing up without cancelling in advance
        is charged {format_currency(event.price)} to your account.

        {appeal}

        Best regards,
        {DEPARTMENT_NAME}
        {INSTITUTION_NAME}""")


def render_report_body(report: AttendanceReport) -> str:
    ev = report.event
    lines = [
        f"Attendance report: {ev.title}",
        f"Date: {format_date(ev.start)}",
        f"Location: {ev.location}",
        f"Price: {format_price(ev.price)}",
        "",
        f"Attended: {report.attended_count}",
        f"Absent: {report.absent_count}",
        f"Total charges: {format_currency(report.total_charges)}",
    ]
    if report.absent:
        lines += ["", "Absent students:"]
        lines += [f"- {e.name} <{e.email}> {e.phone} - {format_currency(e.charge)}" for e in report.absent]
    if report.attended:
        lines += ["", "Attended students:"]
        lines += [f"- {e.name} <{e.email}> {e.phone}" for e in report.attended]
    return "\n".join(lines)


# ──────────────────────────────────────────────────────────────
# Delivery builders
# ──────────────────────────────────────────────────────────────
def _emails(students: Iterable[Student]) -> tuple:
    return tuple(s.email for s in students if s.email)


def build_invitation(event: Event, students: Iterable[Student], message: str) -> Delivery:
    return Delivery(
        channel="email",
        recipients=_emails(students),
        subject=f"Invitation: {event.title}",
        body=message,
    )


def build_report_delivery(report: AttendanceReport, email: str) -> Delivery:
    return Delivery(
        channel="email",
        recipients=(email.strip(),),
        subject=f"Attendance report – {report.event.title}",
        body=render_report_body(report),
    )


def build_absentee_delivery(event: Event, students: Iterable[Student], message: str) -> Delivery:
    return Delivery(
        channel="email",
        recipients=_emails(students),
        subject=f"Trip attendance – {event.title}",
        body=message,
    )


def deliver(delivery: Delivery) -> List[str]:
    """Send one message per recipient; returns the recipients handled."""
    results = []
    for rcpt in delivery.recipients:
        send_plain_email(recipient=rcpt, subject=delivery.subject, body_text=delivery.body)
        results.append(rcpt)
    logger.info("Delivered '%s' to %d recipient(s)", delivery.subject, len(results))
    return results
