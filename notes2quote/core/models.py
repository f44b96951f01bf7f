"""
Quote value types.

Every type here is a frozen dataclass. Edits produce a new value through
update_quote(), so a quote handed to the document builder or a background
thread is already a snapshot. Totals are properties, never stored.
"""

import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from notes2quote.core import pricing

DEFAULT_SYMBOL = "£"


class TemplateType(str, Enum):
    MAN_VAN = "Man + Van"
    GARAGE_WORK = "Garage Work"
    GARDEN_WORK = "Garden Work"
    SMALL_REPAIRS = "Small Repairs"
    PLUMBING = "Plumbing"
    ROOFING = "Roofing"


class Currency(str, Enum):
    GBP = "GBP"
    USD = "USD"
    EUR = "EUR"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {Currency.GBP: "£", Currency.USD: "$", Currency.EUR: "€"}


def currency_symbol(code: str) -> str:
    """Display symbol for a currency code, DEFAULT_SYMBOL when unknown."""
    try:
        return Currency(str(code).upper()).symbol
    except ValueError:
        return DEFAULT_SYMBOL


# ═══════════════════════════════════════════════════════════════════════════════
# Line items
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LineItem:
    description: str = ""
    hours: float = 0.0
    price_per_hour: float = 0.0
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def total(self) -> float:
        return pricing.compute_line_total(self.hours, self.price_per_hour)

    def to_dict(self) -> dict:
        return {"id": str(self.id), "description": self.description,
                "hours": self.hours, "pricePerHour": self.price_per_hour}

    @classmethod
    def from_dict(cls, d: dict) -> "LineItem":
        return cls(description=d.get("description", ""),
                   hours=float(d.get("hours", 0) or 0),
                   price_per_hour=float(d.get("pricePerHour", 0) or 0),
                   id=uuid.UUID(d["id"]) if d.get("id") else uuid.uuid4())


@dataclass(frozen=True)
class ExtraItem:
    """Flat-priced add-on. Its total is the price itself."""
    name: str = ""
    price: float = 0.0
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def total(self) -> float:
        return self.price

    def to_dict(self) -> dict:
        return {"id": str(self.id), "name": self.name, "price": self.price}

    @classmethod
    def from_dict(cls, d: dict) -> "ExtraItem":
        return cls(name=d.get("name", ""),
                   price=float(d.get("price", 0) or 0),
                   id=uuid.UUID(d["id"]) if d.get("id") else uuid.uuid4())


# ═══════════════════════════════════════════════════════════════════════════════
# Parties
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Customer:
    name: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "phone": self.phone,
                "email": self.email, "address": self.address}

    @classmethod
    def from_dict(cls, d: dict) -> "Customer":
        return cls(**{k: str(d.get(k, "") or "") for k in ("name", "phone", "email", "address")})


@dataclass(frozen=True)
class BusinessInfo:
    name: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    website: str = ""

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ═══════════════════════════════════════════════════════════════════════════════
# Saved quote (aggregate root)
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SavedQuote:
    template: TemplateType
    items: tuple = ()
    extras: tuple = ()
    notes: str = ""
    customer: Customer = field(default_factory=Customer)
    job_address: Optional[str] = None
    tax_rate: float = 0.0
    date: datetime = field(default_factory=datetime.now)
    is_invoice: bool = False
    currency_code: str = "GBP"
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def subtotal(self) -> float:
        return pricing.compute_subtotal(self.items, self.extras)

    @property
    def tax_amount(self) -> float:
        return pricing.compute_tax(self.subtotal, self.tax_rate)

    @property
    def total(self) -> float:
        return pricing.compute_total(self.subtotal, self.tax_amount)

    @property
    def quote_number(self) -> str:
        return pricing.quote_number(self.id)

    @property
    def title(self) -> str:
        return pricing.format_title(self.template.value, self.date)

    @property
    def valid_until(self) -> datetime:
        return pricing.valid_until(self.date)

    def to_dict(self) -> dict:
        return {
            "id":           str(self.id),
            "quote_number": self.quote_number,
            "template":     self.template.value,
            "items":        [i.to_dict() for i in self.items],
            "extras":       [e.to_dict() for e in self.extras],
            "notes":        self.notes,
            "customer":     self.customer.to_dict(),
            "job_address":  self.job_address,
            "tax_rate":     self.tax_rate,
            "date":         self.date.isoformat(),
            "is_invoice":   self.is_invoice,
            "currency_code": self.currency_code,
            "subtotal":     self.subtotal,
            "tax":          self.tax_amount,
            "total":        self.total,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SavedQuote":
        """Inverse of to_dict(). Derived keys (subtotal, total…) are ignored."""
        kwargs = _coerce_fields(d)
        if d.get("id"):
            kwargs["id"] = uuid.UUID(str(d["id"]))
        kwargs["template"] = TemplateType(d["template"])
        return cls(**kwargs)


# ═══════════════════════════════════════════════════════════════════════════════
# Editing
# ═══════════════════════════════════════════════════════════════════════════════

# Every field an edit may touch. id and template are fixed at creation.
EDITABLE_FIELDS = (
    "items", "extras", "notes", "customer", "job_address",
    "tax_rate", "date", "is_invoice", "currency_code",
)


def normalize_date(d: datetime) -> datetime:
    """Aware datetimes become naive local time, like datetime.now()."""
    if d.tzinfo is not None:
        return d.astimezone().replace(tzinfo=None)
    return d


def _coerce_list(val, item_type):
    if not isinstance(val, (list, tuple)):
        raise ValueError(f"expected a list, got {type(val).__name__}")
    out = []
    for v in val:
        if isinstance(v, item_type):
            out.append(v)
        elif isinstance(v, dict):
            out.append(item_type.from_dict(v))
        else:
            raise ValueError(f"expected an object, got {type(v).__name__}")
    return tuple(out)


def _coerce_value(key, val):
    if key == "items":
        return _coerce_list(val, LineItem)
    if key == "extras":
        return _coerce_list(val, ExtraItem)
    if key == "customer":
        if isinstance(val, Customer):
            return val
        if val is not None and not isinstance(val, dict):
            raise ValueError(f"expected an object, got {type(val).__name__}")
        return Customer.from_dict(val or {})
    if key == "job_address":
        return val if val and str(val).strip() else None
    if key == "tax_rate":
        return float(val or 0)
    if key == "date":
        return normalize_date(val if isinstance(val, datetime)
                              else datetime.fromisoformat(str(val)))
    if key == "is_invoice":
        return bool(val)
    if key == "currency_code":
        return str(val or "GBP").upper()
    return str(val or "")


def _coerce_fields(d: dict) -> dict:
    """Normalize raw (JSON or keyword) field values into model types.

    Raises ValueError naming the field when a value has the wrong shape.
    """
    out = {}
    for key, val in d.items():
        if key not in EDITABLE_FIELDS:
            continue
        try:
            out[key] = _coerce_value(key, val)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid {key}: {e}") from e
    return out


def update_quote(quote: SavedQuote, **changes) -> SavedQuote:
    """Return a copy of quote with changes applied.

    Only names in EDITABLE_FIELDS are accepted; anything else raises
    ValueError so a new field can never be silently dropped on save.
    """
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
    return replace(quote, **_coerce_fields(changes))


def can_save(quote: SavedQuote) -> bool:
    return bool(quote.customer.name.strip())
