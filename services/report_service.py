# services/report_service.py
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from domain.models import (
    AttendanceRecord,
    AttendanceReport,
    Event,
    EventSummary,
    ReportEntry,
    Student,
)
from services.ledger_service import compute_attendance_charges, summarize_attendance


def _entry(record: AttendanceRecord, student: Optional[Student]) -> ReportEntry:
    return ReportEntry(
        student_id=record.student_id,
        name=student.name if student else "",
        email=student.email if student else "",
        phone=student.phone if student else "",
        charge=record.charge,
    )


def build_attendance_report(
    event: Event,
    students: Sequence[Student],
    records: Optional[Iterable[AttendanceRecord]] = None,
) -> AttendanceReport:
    """Event summary + attended list + absent list (with charges)."""
    records: List[AttendanceRecord] = list(records) if records is not None else compute_attendance_charges(event)
    by_id = {s.id: s for s in students}
    summary = summarize_attendance(records)

    return AttendanceReport(
        event=EventSummary(title=event.title, start=event.start, location=event.location, price=event.price),
        attended_count=summary.attended_count,
        absent_count=summary.absent_count,
        total_charges=summary.total_charges,
        attended=tuple(_entry(r, by_id.get(r.student_id)) for r in records if r.attended),
        absent=tuple(_entry(r, by_id.get(r.student_id)) for r in records if not r.attended),
    )


def absent_students(report: AttendanceReport, students: Sequence[Student]) -> List[Student]:
    by_id = {s.id: s for s in students}
    return [by_id[e.student_id] for e in report.absent if e.student_id in by_id]
