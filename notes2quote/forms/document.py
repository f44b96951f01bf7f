"""
Document Model — renderer-agnostic description of the printable quote.

build_document() turns a quote snapshot into an ordered tuple of Blocks.
The screen renderer (api/screen.py) and the PDF renderer (forms/quote_pdf.py)
both walk the same blocks and print the same strings; only layout differs.
All number formatting for both targets happens here.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from notes2quote.core.models import BusinessInfo, SavedQuote, currency_symbol
from notes2quote.core.pricing import format_date

log = logging.getLogger("notes2quote.document")

MAX_PHOTOS = 3

FOOTER_TEXT = ("Thank you for your business! Payment due within 14 days. "
               "Questions? Contact us anytime.")

# Render order. Optional kinds are skipped when empty.
BLOCK_ORDER = ("header", "parties", "job_address", "items", "extras",
               "totals", "notes", "photos", "footer")

ITEM_COLUMNS = ("Description", "Qty/Hrs", "Rate", "Amount")
EXTRA_COLUMNS = ("Item", "Price")


# ═══════════════════════════════════════════════════════════════════════════════
# Formatting: the only place numbers become strings
# ═══════════════════════════════════════════════════════════════════════════════

def format_money(amount: float, currency_code: str) -> str:
    """£1,234.50 style. Unknown codes use the default symbol."""
    symbol = currency_symbol(currency_code)
    # + 0.0 turns a rounded -0.0 into 0.0
    value = round(float(amount), 2) + 0.0
    if value < 0:
        return f"-{symbol}{abs(value):,.2f}"
    return f"{symbol}{value:,.2f}"


def format_hours(hours: float) -> str:
    return f"{float(hours):.1f}"


def format_tax_rate(rate: float) -> str:
    return f"{float(rate):.2f}%"


# ═══════════════════════════════════════════════════════════════════════════════
# Model
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Block:
    """One section of the document.

    heading  — section title ("" for none)
    lines    — free text lines, top to bottom
    aside    — secondary lines shown beside `lines` (header metadata)
    columns  — table header cells
    rows     — table rows, each a tuple of cell strings
    images   — decoded images (photos block only)
    """
    kind: str
    heading: str = ""
    lines: tuple = ()
    aside: tuple = ()
    columns: tuple = ()
    rows: tuple = ()
    images: tuple = ()

    def text_content(self) -> list:
        out = [self.heading] if self.heading else []
        out.extend(self.lines)
        out.extend(self.aside)
        out.extend(self.columns)
        for row in self.rows:
            out.extend(row)
        return out


@dataclass(frozen=True)
class Document:
    title: str
    quote_number: str
    currency_code: str
    blocks: tuple

    def kinds(self) -> list:
        return [b.kind for b in self.blocks]

    def block(self, kind: str) -> Optional[Block]:
        for b in self.blocks:
            if b.kind == kind:
                return b
        return None

    def text_content(self) -> list:
        """Every string both renderers must print, in block order."""
        out = []
        for b in self.blocks:
            out.extend(b.text_content())
        return out


# ═══════════════════════════════════════════════════════════════════════════════
# Assembly
# ═══════════════════════════════════════════════════════════════════════════════

def _header(quote: SavedQuote, business: BusinessInfo) -> Block:
    contact = " • ".join(p for p in (business.phone, business.email) if p.strip())
    lines = [business.name.upper(), business.address, contact, business.website]
    return Block(
        kind="header",
        heading="INVOICE" if quote.is_invoice else "QUOTE",
        lines=tuple(ln for ln in lines if ln.strip()),
        aside=(
            f"No: {quote.quote_number}",
            format_date(quote.date),
            f"Valid until: {format_date(quote.valid_until)}",
        ),
    )


def _parties(quote: SavedQuote) -> Block:
    c = quote.customer
    lines = [c.name, c.address]
    if c.phone.strip():
        lines.append(f"Ph: {c.phone}")
    if c.email.strip():
        lines.append(f"Email: {c.email}")
    return Block(kind="parties", heading="Bill To:",
                 lines=tuple(ln for ln in lines if ln.strip()))


def _items(quote: SavedQuote) -> Block:
    code = quote.currency_code
    rows = tuple(
        (item.description, format_hours(item.hours),
         format_money(item.price_per_hour, code), format_money(item.total, code))
        for item in quote.items
    )
    return Block(kind="items",
                 heading="Services / Items" if quote.is_invoice else "Quoted Services",
                 columns=ITEM_COLUMNS, rows=rows)


def _extras(quote: SavedQuote) -> Block:
    code = quote.currency_code
    rows = tuple((extra.name, format_money(extra.price, code)) for extra in quote.extras)
    return Block(kind="extras", heading="Extras", columns=EXTRA_COLUMNS, rows=rows)


def _totals(quote: SavedQuote) -> Block:
    code = quote.currency_code
    return Block(kind="totals", rows=(
        ("Subtotal:", format_money(quote.subtotal, code)),
        (f"Tax ({format_tax_rate(quote.tax_rate)}):", format_money(quote.tax_amount, code)),
        ("TOTAL DUE:" if quote.is_invoice else "TOTAL QUOTE:", format_money(quote.total, code)),
    ))


def build_document(quote: SavedQuote, business: BusinessInfo, images=()) -> Document:
    """Assemble the document for one quote.

    `quote` is a frozen value, so this is safe to run while the editing
    session keeps producing new versions. Empty optional sections (job
    address, extras, notes, photos) are left out rather than rendered blank.
    """
    photos = tuple(images)[:MAX_PHOTOS]

    blocks = [_header(quote, business), _parties(quote)]
    if quote.job_address and quote.job_address.strip():
        blocks.append(Block(kind="job_address",
                            lines=(f"Job Location: {quote.job_address}",)))
    blocks.append(_items(quote))
    if quote.extras:
        blocks.append(_extras(quote))
    blocks.append(_totals(quote))
    if quote.notes.strip():
        blocks.append(Block(kind="notes", heading="Notes / Terms", lines=(quote.notes,)))
    if photos:
        blocks.append(Block(kind="photos", heading="Photos", images=photos))
    blocks.append(Block(kind="footer", lines=(FOOTER_TEXT,)))

    doc = Document(
        title="INVOICE" if quote.is_invoice else "QUOTE",
        quote_number=quote.quote_number,
        currency_code=quote.currency_code,
        blocks=tuple(blocks),
    )
    log.debug("Built document %s: %s", doc.quote_number, doc.kinds())
    return doc
