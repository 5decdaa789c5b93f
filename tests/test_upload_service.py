import io

import pandas as pd

from services.upload_service import dedup_new_rows, read_student_sheet


def _xlsx(rows):
    buf = io.BytesIO()
    pd.DataFrame(rows).to_excel(buf, index=False, header=False)
    buf.seek(0)
    return buf


def test_reads_xlsx_by_position():
    f = _xlsx([
        ["Full name", "Mail", "Phone", "Balance"],
        ["Dana Katz", " dana@example.com ", "050-1", 20],
        ["Eli Bar", "eli@example.com", None, None],
    ])
    summary = read_student_sheet(f, "students.xlsx")
    assert summary["errors"] == []
    assert summary["rows"] == [
        {"name": "Dana Katz", "email": "dana@example.com", "phone": "050-1", "balance": 20.0},
        {"name": "Eli Bar", "email": "eli@example.com", "phone": "", "balance": 0.0},
    ]


def test_rows_missing_name_or_email_are_discarded():
    csv = b"name,email,phone,balance\nDana,dana@example.com,,\n,nobody@example.com,,\nEli,,,\n"
    summary = read_student_sheet(io.BytesIO(csv), "students.csv")
    assert [r["name"] for r in summary["rows"]] == ["Dana"]
    assert summary["discarded"] == 2
    assert any("missing name" in n for n in summary["notes"])
    assert any("missing email" in n for n in summary["notes"])


def test_unusual_email_is_kept_but_noted():
    csv = b"name,email\nDana,not-an-email\n"
    summary = read_student_sheet(io.BytesIO(csv), "s.csv")
    assert len(summary["rows"]) == 1
    assert any("unusual email" in n for n in summary["notes"])


def test_bad_extension():
    summary = read_student_sheet(io.BytesIO(b"x"), "students.pdf")
    assert summary["errors"] == ["Please upload an Excel (.xlsx) or CSV file."]


def test_unreadable_file():
    summary = read_student_sheet(io.BytesIO(b"not a real workbook"), "students.xlsx")
    assert summary["errors"] == ["Could not read the file. Please make sure it is a valid spreadsheet."]


def test_header_only_file():
    summary = read_student_sheet(io.BytesIO(b"name,email\n"), "students.csv")
    assert summary["errors"] == ["Uploaded file has no data rows."]


def test_dedup_new_rows():
    rows = [
        {"name": "A", "email": "Alice@Example.com"},
        {"name": "D", "email": "dana@example.com"},
        {"name": "D2", "email": "DANA@example.com"},
    ]
    fresh = dedup_new_rows(rows, {"alice@example.com"})
    assert [r["name"] for r in fresh] == ["D"]
