# services/upload_service.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Set

import pandas as pd

from config import UPLOAD_ALLOWED_EXTENSIONS
from utils.upload_utils import normalize_upload_df, validate_rows

logger = logging.getLogger(__name__)


def _read_table(file_like, filename: str) -> pd.DataFrame:
    name = (filename or "").lower()
    if name.endswith(".csv"):
        return pd.read_csv(file_like, header=None, dtype=object)
    return pd.read_excel(file_like, header=None, dtype=object)


def read_student_sheet(file_like, filename: str = "students.xlsx") -> Dict:
    """
    read → normalize → validate. Returns a preview summary; nothing is added
    to the session until the caller confirms.
    """
    summary = {"rows": [], "discarded": 0, "notes": [], "errors": []}

    if not (filename or "").lower().endswith(tuple(f".{ext}" for ext in UPLOAD_ALLOWED_EXTENSIONS)):
        summary["errors"].append("Please upload an Excel (.xlsx) or CSV file.")
        return summary

    try:
        df_raw = _read_table(file_like, filename)
    except Exception as e:
        logger.warning("Could not read uploaded file %s: %s", filename, e)
        summary["errors"].append("Could not read the file. Please make sure it is a valid spreadsheet.")
        return summary

    if df_raw.shape[0] <= 1:
        summary["errors"].append("Uploaded file has no data rows.")
        return summary

    df_norm = normalize_upload_df(df_raw)
    df_valid, notes = validate_rows(df_norm)
    summary["notes"] = notes
    summary["discarded"] = len(df_norm) - len(df_valid)
    summary["rows"] = df_valid.to_dict(orient="records")
    logger.info("Read %d student row(s) from %s (%d discarded)", len(df_valid), filename, summary["discarded"])
    return summary


def dedup_new_rows(rows: Iterable[Dict], existing_emails: Set[str]) -> List[Dict]:
    """Rows whose email is not already known, first occurrence wins."""
    seen = {e.strip().lower() for e in existing_emails}
    fresh: List[Dict] = []
    for row in rows:
        key = str(row.get("email", "")).strip().lower()
        if key and key not in seen:
            seen.add(key)
            fresh.append(row)
    return fresh
