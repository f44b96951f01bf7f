"""
Quote editing session.

One session owns one quote while it is being edited. The quote itself is an
immutable value; every edit swaps in a new value via update_quote() and then
notifies subscribers, which is how the preview re-renders on each change.
Subscribers are called synchronously on the editing thread, except for photo
arrivals, which notify from the loader's worker thread.
"""

import logging
from dataclasses import replace
from typing import Callable, Optional

from notes2quote.core import db, settings
from notes2quote.core.models import (BusinessInfo, ExtraItem, LineItem,
                                     SavedQuote, TemplateType, can_save, update_quote)
from notes2quote.forms.document import Document, build_document
from notes2quote.forms.export import export_quote
from notes2quote.forms.photos import PhotoLoader

log = logging.getLogger("notes2quote.session")

ITEM_FIELDS = ("description", "hours", "price_per_hour")
EXTRA_FIELDS = ("name", "price")


class QuoteSession:

    def __init__(self, template: Optional[TemplateType] = None,
                 existing: Optional[SavedQuote] = None,
                 business: Optional[BusinessInfo] = None,
                 currency_code: Optional[str] = None):
        if existing is None and template is None:
            raise ValueError("QuoteSession needs a template or an existing quote")
        if existing is not None:
            self._quote = existing
        else:
            self._quote = SavedQuote(
                template=TemplateType(template),
                items=(LineItem(),),
                currency_code=currency_code or settings.default_currency(),
            )
        self.is_new = existing is None
        self.business = business or BusinessInfo()
        self._subscribers = []
        self.photos = PhotoLoader(on_change=lambda _imgs: self._notify())

    # ── Observation ──────────────────────────────────────────────────────────
    @property
    def quote(self) -> SavedQuote:
        return self._quote

    def subscribe(self, callback: Callable[[SavedQuote], None]) -> Callable[[], None]:
        """Call `callback(quote)` after every change. Returns an unsubscribe fn."""
        self._subscribers.append(callback)

        def _unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return _unsubscribe

    def _notify(self):
        quote = self._quote
        for cb in list(self._subscribers):
            cb(quote)

    def edit(self, **changes) -> SavedQuote:
        self._quote = update_quote(self._quote, **changes)
        self._notify()
        return self._quote

    # ── Field edits ──────────────────────────────────────────────────────────
    def set_customer(self, **fields) -> SavedQuote:
        return self.edit(customer=replace(self._quote.customer, **fields))

    def set_job_address(self, address: str) -> SavedQuote:
        return self.edit(job_address=address)

    def set_notes(self, notes: str) -> SavedQuote:
        return self.edit(notes=notes)

    def set_tax_rate(self, rate: float) -> SavedQuote:
        return self.edit(tax_rate=rate)

    def set_currency(self, code: str) -> SavedQuote:
        return self.edit(currency_code=code)

    def set_invoice(self, is_invoice: bool) -> SavedQuote:
        return self.edit(is_invoice=is_invoice)

    # ── Line items ───────────────────────────────────────────────────────────
    def add_item(self, description="", hours=0.0, price_per_hour=0.0) -> LineItem:
        item = LineItem(description=description, hours=float(hours),
                        price_per_hour=float(price_per_hour))
        self.edit(items=self._quote.items + (item,))
        return item

    def update_item(self, item_id, **fields) -> SavedQuote:
        _check_fields(fields, ITEM_FIELDS)
        return self.edit(items=_replace_by_id(self._quote.items, item_id, fields))

    def remove_item(self, item_id) -> SavedQuote:
        return self.edit(items=tuple(i for i in self._quote.items if i.id != item_id))

    # ── Extras ───────────────────────────────────────────────────────────────
    def add_extra(self, name="", price=0.0) -> ExtraItem:
        extra = ExtraItem(name=name, price=float(price))
        self.edit(extras=self._quote.extras + (extra,))
        return extra

    def update_extra(self, extra_id, **fields) -> SavedQuote:
        _check_fields(fields, EXTRA_FIELDS)
        return self.edit(extras=_replace_by_id(self._quote.extras, extra_id, fields))

    def remove_extra(self, extra_id) -> SavedQuote:
        return self.edit(extras=tuple(e for e in self._quote.extras if e.id != extra_id))

    # ── Derived ──────────────────────────────────────────────────────────────
    @property
    def totals(self) -> dict:
        q = self._quote
        return {"subtotal": q.subtotal, "tax": q.tax_amount, "total": q.total}

    @property
    def can_save(self) -> bool:
        return can_save(self._quote)

    def save(self, store=None) -> bool:
        """Hand the quote to the store. A blank customer name blocks the save."""
        if not self.can_save:
            log.info("Save disabled: customer name required")
            return False
        ok = (store or db.save_quote)(self._quote)
        if ok:
            self.is_new = False
        return ok

    def load_photos(self, sources) -> int:
        gen = self.photos.load(sources)
        self._notify()
        return gen

    def document(self) -> Document:
        return build_document(self._quote, self.business, self.photos.images)

    def export(self):
        return export_quote(self._quote, self.business, self.photos.images)


def _check_fields(fields, allowed):
    unknown = set(fields) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown field(s): {', '.join(sorted(unknown))}")


def _replace_by_id(entries: tuple, entry_id, fields) -> tuple:
    found = False
    out = []
    for e in entries:
        if e.id == entry_id:
            e = replace(e, **fields)
            found = True
        out.append(e)
    if not found:
        raise KeyError(entry_id)
    return tuple(out)
