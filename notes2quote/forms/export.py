"""
Export — the (filename, pdf_bytes) pair handed to the share sheet / download.
"""

import logging
from typing import Optional, Tuple

from notes2quote.core.models import BusinessInfo, SavedQuote
from notes2quote.forms.document import build_document
from notes2quote.forms.quote_pdf import render_pdf

log = logging.getLogger("notes2quote.export")


def export_filename(quote: SavedQuote) -> str:
    """{Quote|Invoice}-{title}-{unix timestamp of the quote date}.pdf"""
    prefix = "Invoice" if quote.is_invoice else "Quote"
    return f"{prefix}-{quote.title}-{int(quote.date.timestamp())}.pdf"


def export_quote(quote: SavedQuote, business: BusinessInfo,
                 images=()) -> Optional[Tuple[str, bytes]]:
    """Build and render the quote. None when no PDF could be produced."""
    data = render_pdf(build_document(quote, business, images))
    if not data:
        log.warning("Export unavailable for %s", quote.quote_number)
        return None
    return export_filename(quote), data
