# utils/format.py
import datetime as dt
from zoneinfo import ZoneInfo

from config import APP_TZ, CURRENCY_SYMBOL

TZ = ZoneInfo(APP_TZ)


def now_local() -> dt.datetime:
    return dt.datetime.now(tz=TZ)


def format_currency(amount) -> str:
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(value):,.2f}"


def format_price(price) -> str:
    return format_currency(price) if float(price or 0) > 0 else "Free"


def format_balance(balance) -> str:
    value = float(balance or 0)
    if value == 0:
        return f"0 {CURRENCY_SYMBOL}"
    return f"+{format_currency(value)}" if value > 0 else format_currency(value)


def format_date(value: dt.datetime, with_time: bool = True) -> str:
    if with_time:
        return value.strftime("%A, %d %B %Y %H:%M")
    return value.strftime("%A, %d %B %Y")
