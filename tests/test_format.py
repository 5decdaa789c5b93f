import datetime as dt

import pytest

import config
from utils.format import format_balance, format_currency, format_date, format_price


def test_currency():
    assert format_currency(1234) == "₪1,234.00"
    assert format_currency(-100) == "-₪100.00"
    assert format_currency(None) == "₪0.00"


def test_price_and_balance():
    assert format_price(0) == "Free"
    assert format_price(60) == "₪60.00"
    assert format_balance(0) == "0 ₪"
    assert format_balance(50) == "+₪50.00"
    assert format_balance(-100) == "-₪100.00"


def test_format_date():
    value = dt.datetime(2026, 3, 15, 9, 0)
    assert format_date(value) == "Sunday, 15 March 2026 09:00"
    assert format_date(value, with_time=False) == "Sunday, 15 March 2026"


def test_validate_config_rejects_unknown_security(monkeypatch):
    monkeypatch.setattr(config, "SMTP_SECURITY", "tls")
    with pytest.raises(RuntimeError):
        config.validate_config()
