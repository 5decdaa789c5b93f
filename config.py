# config.py
from __future__ import annotations
import os, re
import logging
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv, find_dotenv

# Load .env once, globally
load_dotenv(find_dotenv() or (Path(__file__).parent / ".env"))

def _clean(val: Optional[str], default: Optional[str] = None) -> Optional[str]:
    if val is None:
        return default
    v = val.strip()
    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1].strip()
    return v or default

def _maybe_int(name: str, default: Optional[int] = None) -> Optional[int]:
    v = _clean(os.getenv(name))
    try:
        return int(v) if v is not None else default
    except ValueError:
        return default

def _flag(name: str, default: bool) -> bool:
    v = _clean(os.getenv(name))
    if v is None:
        return default
    return v.lower() in {"1", "true", "yes", "y", "on"}

# App timezone (event start times, response dates, "now")
APP_TZ = _clean(os.getenv("APP_TZ"), "Asia/Jerusalem")

# ----- Branding -----
INSTITUTION_NAME = _clean(os.getenv("INSTITUTION_NAME"), "University of Haifa – International School")
DEPARTMENT_NAME  = _clean(os.getenv("DEPARTMENT_NAME"), "International Studies Department")
APP_TITLE        = _clean(os.getenv("APP_TITLE"), "Trips Management System")

# ----- Money -----
CURRENCY_SYMBOL = _clean(os.getenv("CURRENCY_SYMBOL"), "₪")

# ── SMTP / Email config ───────────────────────────────────────
SMTP_HOST = _clean(os.getenv("SMTP_HOST"), "smtp.gmail.com")
SMTP_PORT = _maybe_int("SMTP_PORT", 465) or 465
SMTP_SECURITY = _clean(os.getenv("SMTP_SECURITY"), "ssl")  # "ssl" | "starttls" | "none"

SMTP_USERNAME = _clean(os.getenv("SMTP_USERNAME"))
SMTP_PASSWORD = _clean(os.getenv("SMTP_PASSWORD"))

SENDER_EMAIL = _clean(os.getenv("SENDER_EMAIL"), "trips@example.edu")
SENDER_NAME  = _clean(os.getenv("SENDER_NAME"), DEPARTMENT_NAME)
REPLY_TO     = _clean(os.getenv("REPLY_TO"))
EMAIL_SUBJECT_PREFIX = _clean(os.getenv("EMAIL_SUBJECT_PREFIX"))
EMAIL_DRY_RUN = _flag("EMAIL_DRY_RUN", True)   # True → log instead of sending

# ----- Browser localStorage key for the remembered student -----
CURRENT_STUDENT_KEY = "currentStudentId"

# ----- Logging -----
LOG_LEVEL = _clean(os.getenv("LOG_LEVEL"), "INFO")

# Upload schema controls (positional: header row is skipped)
UPLOAD_COLUMNS = ["name", "email", "phone", "balance"]
UPLOAD_REQUIRED_COLS = ["name", "email"]
UPLOAD_DEFAULTS = {
    "phone": "",
    "balance": 0.0,
}
UPLOAD_ALLOWED_EXTENSIONS = ("xlsx", "csv")

UPLOAD_EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def configure_logging() -> None:
    if getattr(configure_logging, "_done", False):
        return
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(LOG_LEVEL).upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)s %(message)s", "%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    configure_logging._done = True

def validate_config() -> None:
    if SMTP_SECURITY not in {"ssl", "starttls", "none"}:
        raise RuntimeError("SMTP_SECURITY must be 'ssl', 'starttls', or 'none'")
    if not EMAIL_DRY_RUN and not SENDER_EMAIL:
        raise RuntimeError("SENDER_EMAIL is required when EMAIL_DRY_RUN is off")
