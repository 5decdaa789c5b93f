# utils/email_utils.py
from __future__ import annotations

import logging
import re
import smtplib
import unicodedata
from email.header import Header
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

import config

logger = logging.getLogger(__name__)

# ---------- helpers ----------
def _clean(s: str) -> str:
    """Normalize unicode and strip weird spaces."""
    if s is None:
        return ""
    s = str(s).replace("\xa0", " ")
    return unicodedata.normalize("NFC", s)

def _clean_email(e: str) -> str:
    """Normalize and remove all whitespace inside email fields."""
    e = _clean(e)
    return re.sub(r"\s+", "", e)

def _assert_smtp() -> None:
    if not (config.SMTP_HOST and config.SMTP_PORT is not None and config.SENDER_EMAIL):
        raise RuntimeError("SMTP config incomplete (host/port/sender) in config.py")
    if config.SMTP_SECURITY not in {"ssl", "starttls", "none"}:
        raise RuntimeError("SMTP_SECURITY must be 'ssl', 'starttls', or 'none'")
    if (config.SMTP_USERNAME and not config.SMTP_PASSWORD) or (config.SMTP_PASSWORD and not config.SMTP_USERNAME):
        raise RuntimeError("SMTP_USERNAME/SMTP_PASSWORD must be provided together")

def _prefix_subject(subject: str) -> str:
    subject = _clean(subject)
    prefix = config.EMAIL_SUBJECT_PREFIX
    if prefix and not subject.startswith(prefix):
        return f"{prefix}{subject}"
    return subject

def _open_smtp():
    if config.SMTP_SECURITY == "ssl":
        server = smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, timeout=30)
    else:
        server = smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=30)
        if config.SMTP_SECURITY == "starttls":
            server.starttls()
    if config.SMTP_USERNAME and config.SMTP_PASSWORD:
        server.login(config.SMTP_USERNAME, config.SMTP_PASSWORD)
    return server

def _send_message(msg) -> None:
    if config.EMAIL_DRY_RUN:
        logger.info("[DRY-RUN] Would send email → TO=%s SUBJ=%s", msg.get("To", ""), msg.get("Subject", ""))
        return
    server = _open_smtp()
    try:
        server.send_message(msg)
    finally:
        server.quit()

def _format_from(sender_name: str) -> str:
    sender_name = _clean(sender_name)
    return formataddr((str(Header(sender_name, "utf-8")), config.SENDER_EMAIL))

# ---------- plain-text sender ----------
def send_plain_email(
    recipient: str,
    subject: str,
    body_text: str,
    sender_name: str | None = None,
    reply_to: str | None = None,
) -> None:
    """
    Sends a plain-text email. In dry-run mode (the default) the message is
    built but only logged.
    """
    _assert_smtp()

    recipient   = _clean_email(recipient)
    subject     = _prefix_subject(subject)
    body_text   = _clean(body_text)
    sender_name = _clean(sender_name or config.SENDER_NAME)
    reply_to    = reply_to or config.REPLY_TO
    reply_to    = _clean_email(reply_to) if reply_to else None

    msg = MIMEMultipart("alternative")
    msg["From"] = _format_from(sender_name)
    msg["To"] = recipient
    msg["Subject"] = subject
    if reply_to:
        msg["Reply-To"] = reply_to
    msg.attach(MIMEText(body_text, "plain", "utf-8"))

    _send_message(msg)
