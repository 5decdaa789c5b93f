import datetime as dt
from zoneinfo import ZoneInfo

import pytest

from domain.models import Event, Student
from services.trip_store import TripStore

TZ = ZoneInfo("Asia/Jerusalem")


@pytest.fixture
def now():
    return dt.datetime(2026, 3, 1, 12, 0, tzinfo=TZ)


@pytest.fixture
def make_event(now):
    def _make(event_id="e1", days=10, price=120.0, registrations=None, max_participants=None, **kw):
        return Event(
            id=event_id,
            title=kw.pop("title", "Trip to Jerusalem"),
            description=kw.pop("description", ""),
            start=kw.pop("start", now + dt.timedelta(days=days)),
            location=kw.pop("location", "Jerusalem"),
            price=price,
            max_participants=max_participants,
            registrations=list(registrations or []),
            **kw,
        )
    return _make


@pytest.fixture
def students():
    return [
        Student(id="A", name="Alice", email="alice@example.com", balance=0.0),
        Student(id="B", name="Bob", email="bob@example.com", balance=50.0),
        Student(id="C", name="Carol", email="carol@example.com", balance=-100.0),
    ]


@pytest.fixture
def sent():
    return []


@pytest.fixture
def store(students, sent):
    def notifier(delivery):
        sent.append(delivery)
        return list(delivery.recipients)
    return TripStore(students=students, notifier=notifier)
