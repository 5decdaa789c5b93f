import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple


class EventStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class RegistrationState(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class AttentionLevel(str, enum.Enum):
    """How an upcoming event stands against the minimum-registrations policy."""
    CONFIRMED = "confirmed"
    URGENT = "urgent"
    NEEDS_ATTENTION = "needs_attention"
    NORMAL = "normal"


class NotificationKind(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Student:
    id: str
    name: str
    email: str
    phone: str = ""
    balance: float = 0.0
    notes: List[str] = field(default_factory=list)


@dataclass
class Event:
    id: str
    title: str
    description: str
    start: datetime
    location: str
    price: float = 0.0
    max_participants: Optional[int] = None
    registrations: List[str] = field(default_factory=list)
    attendance: Dict[str, bool] = field(default_factory=dict)
    status: EventStatus = EventStatus.UPCOMING


@dataclass
class RegistrationStatus:
    event_id: str
    student_id: str
    status: RegistrationState = RegistrationState.PENDING
    response_date: Optional[datetime] = None
    registration_date: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceRecord:
    student_id: str
    attended: bool
    charge: float


@dataclass(frozen=True)
class AttendanceSummary:
    attended_count: int
    absent_count: int
    total_charges: float


@dataclass(frozen=True)
class CancellationDecision:
    allowed: bool
    fee_if_forced: float


@dataclass
class StudentNotification:
    id: str
    student_id: str
    title: str
    message: str
    kind: NotificationKind
    date: datetime
    read: bool = False


@dataclass(frozen=True)
class EventSummary:
    title: str
    start: datetime
    location: str
    price: float


@dataclass(frozen=True)
class ReportEntry:
    student_id: str
    name: str
    email: str
    phone: str
    charge: float = 0.0


@dataclass(frozen=True)
class AttendanceReport:
    event: EventSummary
    attended_count: int
    absent_count: int
    total_charges: float
    attended: Tuple[ReportEntry, ...]
    absent: Tuple[ReportEntry, ...]


@dataclass(frozen=True)
class DashboardStats:
    total_students: int
    upcoming_events: int
    total_debt: float
    total_credit: float
    events_needing_attention: int


@dataclass(frozen=True)
class Delivery:
    """A message handed to the delivery collaborator (email / SMS gateway)."""
    channel: str
    recipients: Tuple[str, ...]
    subject: str
    body: str
