# services/export_service.py
import io
import re
from typing import List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

from domain.models import AttendanceRecord, Event, Student
from services.ledger_service import compute_attendance_charges, summarize_attendance
from utils.format import format_currency, format_date

HEADERS = ["Name", "Email", "Phone", "Attendance", "Charge", "Notes"]


def report_filename(event: Event) -> str:
    safe_title = re.sub(r"[^\w\s]", "", event.title).strip().replace(" ", "_")
    return f"attendance_report_{safe_title}_{event.start.date().isoformat()}.xlsx"


def attendance_rows(event: Event, students: Sequence[Student],
                    records: Optional[Sequence[AttendanceRecord]] = None) -> List[list]:
    """Per-student rows, a blank row, then the summary block."""
    records = list(records) if records is not None else compute_attendance_charges(event)
    by_id = {s.id: s for s in students}
    summary = summarize_attendance(records)

    rows: List[list] = []
    for r in records:
        s = by_id.get(r.student_id)
        note = "" if r.attended else ("Will be charged due to no-show" if r.charge > 0 else "")
        rows.append([
            s.name if s else "",
            s.email if s else "",
            s.phone if s else "",
            "Arrived" if r.attended else "No-show",
            r.charge or 0,
            note,
        ])

    rows.append([])
    rows.append(["Attendance summary"])
    rows.append(["Event:", event.title])
    rows.append(["Date:", format_date(event.start)])
    rows.append(["Location:", event.location])
    rows.append(["Price:", format_currency(event.price)])
    rows.append([])
    rows.append(["Total registered:", len(records)])
    rows.append(["Attended:", summary.attended_count])
    rows.append(["Absent:", summary.absent_count])
    rows.append(["Total charges:", format_currency(summary.total_charges)])
    return rows


def export_attendance_to_excel(event: Event, students: Sequence[Student],
                               records: Optional[Sequence[AttendanceRecord]] = None) -> bytes:
    """Attendance report for one event as .xlsx bytes"""
    wb = Workbook()
    ws = wb.active
    ws.title = "Attendance report"

    ws.append(HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")

    for row in attendance_rows(event, students, records):
        ws.append(row)

    summary_row = len(records if records is not None else event.registrations) + 3
    ws.cell(row=summary_row, column=1).font = Font(bold=True)

    # Column widths
    for column in ws.columns:
        max_length = max((len(str(c.value)) for c in column if c.value is not None), default=0)
        ws.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
