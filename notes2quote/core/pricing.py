"""
Quote arithmetic and numbering.

Pure functions only: no I/O, no shared state, safe to call from any thread.
Rounding is a formatting concern and never happens here.
"""

import uuid
from datetime import datetime, timedelta

VALIDITY_DAYS = 30


def compute_line_total(hours: float, rate: float) -> float:
    return hours * rate


def compute_subtotal(items, extras) -> float:
    """Sum of line totals plus extra prices, in the order given."""
    subtotal = 0.0
    for item in items:
        subtotal += compute_line_total(item.hours, item.price_per_hour)
    for extra in extras:
        subtotal += extra.price
    return subtotal


def compute_tax(subtotal: float, tax_rate_percent: float) -> float:
    return subtotal * (tax_rate_percent / 100.0)


def compute_total(subtotal: float, tax: float) -> float:
    return subtotal + tax


def quote_number(identifier) -> str:
    """Q-{first 8 hex chars of the UUID}, e.g. Q-1A2B3C4D."""
    if not isinstance(identifier, uuid.UUID):
        identifier = uuid.UUID(str(identifier))
    return f"Q-{identifier.hex[:8].upper()}"


def valid_until(reference_date: datetime) -> datetime:
    """reference_date + 30 days. Falls back to reference_date on overflow."""
    try:
        return reference_date + timedelta(days=VALIDITY_DAYS)
    except OverflowError:
        return reference_date


def format_date(d: datetime) -> str:
    """Abbreviated date, e.g. 'Oct 9, 2026'."""
    return f"{d:%b} {d.day}, {d.year}"


def format_title(template_label: str, d: datetime) -> str:
    return f"{template_label} – {format_date(d)}"
