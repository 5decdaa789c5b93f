# utils/upload_utils.py
from __future__ import annotations

from typing import List, Tuple

import pandas as pd

from config import (
    UPLOAD_COLUMNS,
    UPLOAD_DEFAULTS,
    UPLOAD_EMAIL_REGEX,
    UPLOAD_REQUIRED_COLS,
)


def _positional_cols(df_raw: pd.DataFrame) -> pd.DataFrame:
    """Map the first len(UPLOAD_COLUMNS) columns by position and drop the header row."""
    df = df_raw.iloc[1:, : len(UPLOAD_COLUMNS)].copy()
    df.columns = UPLOAD_COLUMNS[: df.shape[1]]
    for c in UPLOAD_COLUMNS:
        if c not in df.columns:
            df[c] = UPLOAD_DEFAULTS.get(c, "")
    return df.reset_index(drop=True)


def normalize_upload_df(df_raw: pd.DataFrame) -> pd.DataFrame:
    df = _positional_cols(df_raw)

    # Text columns
    for c in ["name", "email", "phone"]:
        df[c] = df[c].fillna("").astype(str).str.strip()
        df.loc[df[c].str.lower().isin(["nan", "none"]), c] = ""

    # Numerics
    df["balance"] = pd.to_numeric(df["balance"], errors="coerce").fillna(UPLOAD_DEFAULTS["balance"]).astype(float)
    return df


def validate_rows(df: pd.DataFrame) -> Tuple[pd.DataFrame, List[str]]:
    """Drop rows missing name/email. Bad emails are reported but kept."""
    notes: List[str] = []
    valid_mask = pd.Series(True, index=df.index)

    for c in UPLOAD_REQUIRED_COLS:
        empty = df[c].astype(str).str.strip() == ""
        if empty.any():
            notes.append(f"{int(empty.sum())} row(s) missing {c} were skipped")
            valid_mask &= ~empty

    bad_email = ~df["email"].astype(str).str.match(UPLOAD_EMAIL_REGEX, na=False) & valid_mask
    if bad_email.any():
        notes.append(f"{int(bad_email.sum())} row(s) have an unusual email format")

    return df.loc[valid_mask].reset_index(drop=True), notes
