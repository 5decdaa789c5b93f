import io

from openpyxl import load_workbook

from services.export_service import HEADERS, attendance_rows, export_attendance_to_excel, report_filename


def test_report_filename(make_event):
    event = make_event(title="Haifa & the Carmel!")
    assert report_filename(event) == f"attendance_report_Haifa__the_Carmel_{event.start.date().isoformat()}.xlsx"


def test_attendance_rows(make_event, students):
    event = make_event(price=120, registrations=["A", "B"], attendance={"A": True})
    rows = attendance_rows(event, students)
    assert rows[0] == ["Alice", "alice@example.com", "", "Arrived", 0.0, ""]
    assert rows[1] == ["Bob", "bob@example.com", "", "No-show", 120.0, "Will be charged due to no-show"]
    assert rows[2] == []
    assert rows[3] == ["Attendance summary"]
    assert ["Total registered:", 2] in rows
    assert ["Absent:", 1] in rows
    assert rows[-1] == ["Total charges:", "₪120.00"]


def test_export_workbook(make_event, students):
    event = make_event(price=60, registrations=["A", "C"], attendance={"C": True})
    data = export_attendance_to_excel(event, students)
    ws = load_workbook(io.BytesIO(data)).active

    assert [c.value for c in ws[1]] == HEADERS
    assert ws["A1"].font.bold
    assert ws["A2"].value == "Alice"
    assert ws["D2"].value == "No-show"
    assert ws["D3"].value == "Arrived"
    assert ws["A5"].value == "Attendance summary"
    assert ws["A5"].font.bold
