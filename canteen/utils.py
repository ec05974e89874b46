"""
Utility functions shared across the app:
- form parsing helpers (decimal / int / date / text)
- safe local redirect targets
- Jinja filters for money and dates
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from urllib.parse import urlparse

from flask import request, url_for

from .calculations import AMOUNT_PLACES, to_decimal

ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")
ARABIC_MONTHS = [
    "يناير", "فبراير", "مارس", "أبريل", "مايو", "يونيو",
    "يوليو", "أغسطس", "سبتمبر", "أكتوبر", "نوفمبر", "ديسمبر",
]


# ---------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------
def parse_decimal(value: str | None, places: int | None = AMOUNT_PLACES) -> Decimal | None:
    """
    Parse decimal from user input (accepts comma or dot).

    Values with more decimal places than `places` are rejected rather than
    rounded, so what is stored is exactly what was typed. places=None
    disables the check (values that are never stored).
    """
    if value is None:
        return None
    raw = str(value).strip().replace(",", ".")
    if raw == "":
        return None
    try:
        parsed = Decimal(raw)
    except (InvalidOperation, ValueError):
        return None
    if not parsed.is_finite():
        return None
    if places is not None and parsed.normalize().as_tuple().exponent < -places:
        return None
    return parsed


def parse_optional_int(value: str | None) -> int | None:
    """Parse optional int from form/query."""
    if value is None:
        return None
    raw = str(value).strip()
    if raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def parse_date(value: str | None) -> date | None:
    """Parse an ISO date (YYYY-MM-DD) as sent by <input type="date">."""
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        return None


def form_text(name: str) -> str | None:
    """Trimmed form value, None when blank."""
    return (request.form.get(name) or "").strip() or None


def parse_id_list(value: str | None) -> list[int]:
    """"1,2,x,3" -> [1, 2, 3] (order kept, duplicates dropped)."""
    ids: list[int] = []
    for part in (value or "").split(","):
        parsed = parse_optional_int(part)
        if parsed is not None and parsed not in ids:
            ids.append(parsed)
    return ids


# ---------------------------------------------------------------------
# Redirect helpers
# ---------------------------------------------------------------------
def safe_next_url(raw_next: str | None, fallback_endpoint: str, **values) -> str:
    """
    Return a safe local next URL.

    Only relative paths starting with "/" are accepted; anything else falls back
    to the given endpoint.
    """
    if not raw_next:
        return url_for(fallback_endpoint, **values)

    parsed = urlparse(raw_next)
    if (
        parsed.scheme
        or parsed.netloc
        or not raw_next.startswith("/")
        or raw_next.startswith(("//", "/\\"))
    ):
        return url_for(fallback_endpoint, **values)

    return raw_next


# ---------------------------------------------------------------------
# Template filters
# ---------------------------------------------------------------------
def format_currency(amount) -> str:
    """1234.5 -> "1,234.50" (two decimals, grouped)."""
    return f"{to_decimal(amount):,.2f}"


def format_number(value, grouping: bool = True) -> str:
    """Quantities without trailing zeros: 12.000000 -> "12", 0.125000 -> "0.125"."""
    amount = to_decimal(value)
    if amount == amount.to_integral_value():
        return f"{amount:,.0f}" if grouping else f"{amount:.0f}"
    amount = amount.normalize()
    return f"{amount:,f}" if grouping else f"{amount:f}"


def format_date(value) -> str:
    """date(2026, 3, 5) -> "5 مارس 2026"."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.day} {ARABIC_MONTHS[value.month - 1]} {value.year}"


def to_arabic_digits(value) -> str:
    return str(value).translate(ARABIC_DIGITS)


def register_template_filters(app) -> None:
    app.add_template_filter(format_currency, "currency")
    app.add_template_filter(format_number, "number")
    app.add_template_filter(format_date, "ardate")
    app.add_template_filter(to_arabic_digits, "ardigits")
