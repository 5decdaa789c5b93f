# services/sample_data.py
"""Seed records for the demo session. Event dates are offsets from `now`."""
import datetime as dt
from typing import List, Tuple

from domain.models import (
    Event,
    EventStatus,
    NotificationKind,
    RegistrationState,
    RegistrationStatus,
    Student,
    StudentNotification,
)


def _at(now: dt.datetime, days: int, hour: int, minute: int = 0) -> dt.datetime:
    return (now + dt.timedelta(days=days)).replace(hour=hour, minute=minute, second=0, microsecond=0)


def sample_students() -> List[Student]:
    return [
        Student(id="1", name="Yosef Cohen", email="yosef@example.com", phone="052-1234567", balance=0.0),
        Student(id="2", name="Miriam Levi", email="miriam@example.com", phone="053-2345678", balance=50.0),
        Student(id="3", name="Ahmad Ali", email="ahmad@example.com", phone="054-3456789", balance=-100.0),
    ]


def sample_events(now: dt.datetime) -> List[Event]:
    return [
        Event(
            id="1",
            title="Trip to Jerusalem",
            description="Guided tour of the Old City and the Western Wall. Lunch and a professional guide included.",
            start=_at(now, 10, 9),
            location="Jerusalem - Old City",
            price=120.0,
            max_participants=30,
            registrations=["1", "2"],
        ),
        Event(
            id="2",
            title="Natural History Museum Tour",
            description="Guided tour of the Steinhardt Museum of Natural History.",
            start=_at(now, -5, 10),
            location="Tel Aviv - Natural History Museum",
            price=60.0,
            registrations=["2", "3"],
            attendance={"2": True, "3": False},
            status=EventStatus.COMPLETED,
        ),
        Event(
            id="3",
            title="Haifa and the Carmel",
            description="A day exploring Haifa: the Bahá'í Gardens, the port and the Carmel lookouts.",
            start=_at(now, 15, 8, 30),
            location="Haifa - Bahá'í Gardens",
            price=90.0,
            max_participants=25,
            registrations=["1"],
        ),
        Event(
            id="4",
            title="Falafel Cooking Workshop",
            description="Learn to make authentic falafel with a professional chef. Meal and ingredients included.",
            start=_at(now, 20, 14),
            location="Hadar Community Center",
            price=0.0,
            max_participants=15,
        ),
    ]


def sample_statuses(now: dt.datetime) -> List[RegistrationStatus]:
    return [
        RegistrationStatus("1", "1", RegistrationState.CONFIRMED, response_date=now - dt.timedelta(days=3)),
        RegistrationStatus("1", "2", RegistrationState.CONFIRMED, response_date=now - dt.timedelta(days=2)),
        RegistrationStatus("2", "2", RegistrationState.CONFIRMED, response_date=now - dt.timedelta(days=12)),
        RegistrationStatus("2", "3", RegistrationState.PENDING),
        RegistrationStatus("3", "1", RegistrationState.PENDING, registration_date=now - dt.timedelta(days=1)),
    ]


def sample_notifications(now: dt.datetime) -> List[StudentNotification]:
    return [
        StudentNotification(
            id="n1", student_id="1", title="Trip to Jerusalem approved",
            message="Your registration for the Jerusalem trip has been approved.",
            kind=NotificationKind.SUCCESS, date=now - dt.timedelta(days=3),
        ),
        StudentNotification(
            id="n2", student_id="3", title="Payment reminder",
            message="You have an open charge of ₪100.00 for not attending the museum tour.",
            kind=NotificationKind.WARNING, date=now - dt.timedelta(days=4),
        ),
        StudentNotification(
            id="n3", student_id="1", title="New trip available",
            message="A new trip to Haifa and the Carmel is open. Limited seats - register now!",
            kind=NotificationKind.INFO, date=now - dt.timedelta(days=2), read=True,
        ),
    ]


def sample_dataset(now: dt.datetime) -> Tuple[List[Student], List[Event], List[RegistrationStatus], List[StudentNotification]]:
    return sample_students(), sample_events(now), sample_statuses(now), sample_notifications(now)
