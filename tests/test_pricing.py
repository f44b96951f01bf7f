"""
Tests for notes2quote.core.pricing and the totals SavedQuote derives from it.

    compute_line_total(hours, rate) -> float
    compute_subtotal(items, extras) -> float
    compute_tax(subtotal, pct) -> float
    compute_total(subtotal, tax) -> float
    quote_number(uuid) -> "Q-XXXXXXXX"
"""
import itertools
import uuid
from datetime import datetime

import pytest

from notes2quote.core import pricing
from notes2quote.core.models import ExtraItem, LineItem, SavedQuote, TemplateType
from notes2quote.forms.document import build_document
from notes2quote.core.models import BusinessInfo


# ═══════════════════════════════════════════════════════════════════════════════
# Arithmetic
# ═══════════════════════════════════════════════════════════════════════════════

class TestLineTotal:

    @pytest.mark.parametrize("hours,rate", [
        (0, 0), (2.0, 15.0), (1.5, 10.0), (7.25, 42.5), (0.1, 0.3), (100, 0),
    ])
    def test_is_product(self, hours, rate):
        assert pricing.compute_line_total(hours, rate) == hours * rate

    @pytest.mark.parametrize("hours,rate", [(2.0, 15.0), (3.3, 9.9), (0.5, 120.0)])
    def test_commutative(self, hours, rate):
        assert pricing.compute_line_total(hours, rate) == pricing.compute_line_total(rate, hours)

    def test_line_item_property(self):
        assert LineItem(hours=3.0, price_per_hour=12.5).total == pytest.approx(37.5)

    def test_extra_total_is_price(self):
        assert ExtraItem(name="Skip hire", price=120.0).total == 120.0


class TestSubtotal:

    def test_empty(self):
        assert pricing.compute_subtotal((), ()) == 0

    def test_items_and_extras(self):
        items = [LineItem(hours=2, price_per_hour=20), LineItem(hours=1.5, price_per_hour=10)]
        extras = [ExtraItem(price=5)]
        assert pricing.compute_subtotal(items, extras) == pytest.approx(60.0)

    def test_order_invariant(self):
        items = [LineItem(hours=h, price_per_hour=r)
                 for h, r in ((1.25, 33.0), (2.0, 17.5), (0.75, 48.0))]
        extras = [ExtraItem(price=p) for p in (5.0, 12.49)]
        expected = pricing.compute_subtotal(items, extras)
        for perm in itertools.permutations(items):
            assert pricing.compute_subtotal(perm, extras) == pytest.approx(expected)


class TestTax:

    @pytest.mark.parametrize("subtotal", [0, 1, 99.99, 12345.67])
    def test_zero_rate(self, subtotal):
        assert pricing.compute_tax(subtotal, 0) == 0

    @pytest.mark.parametrize("s,t", [(100, 20), (59.99, 17.5), (0, 10), (250, 5)])
    def test_total_identity(self, s, t):
        total = pricing.compute_total(s, pricing.compute_tax(s, t))
        assert total == pytest.approx(s + s * t / 100)

    def test_negative_rate_passes_through(self):
        assert pricing.compute_tax(100, -10) == pytest.approx(-10)


# ═══════════════════════════════════════════════════════════════════════════════
# Numbering / dates
# ═══════════════════════════════════════════════════════════════════════════════

class TestQuoteNumber:

    def test_format(self):
        qid = uuid.UUID("1a2b3c4d-5e6f-4000-8000-000000000000")
        assert pricing.quote_number(qid) == "Q-1A2B3C4D"

    def test_deterministic(self):
        qid = uuid.uuid4()
        assert pricing.quote_number(qid) == pricing.quote_number(qid)

    def test_accepts_string(self):
        qid = uuid.uuid4()
        assert pricing.quote_number(str(qid)) == pricing.quote_number(qid)

    def test_length(self):
        assert len(pricing.quote_number(uuid.uuid4())) == 10


class TestDates:

    def test_valid_until_is_30_days(self):
        assert pricing.valid_until(datetime(2026, 1, 15)) == datetime(2026, 2, 14)

    def test_valid_until_overflow_falls_back(self):
        d = datetime(9999, 12, 20)
        assert pricing.valid_until(d) == d

    def test_format_date(self):
        assert pricing.format_date(datetime(2026, 10, 9)) == "Oct 9, 2026"

    def test_title(self):
        assert pricing.format_title("Plumbing", datetime(2026, 3, 1)) == "Plumbing – Mar 1, 2026"


# ═══════════════════════════════════════════════════════════════════════════════
# End-to-end scenarios
# ═══════════════════════════════════════════════════════════════════════════════

class TestScenarios:

    def test_single_item_with_tax(self):
        q = SavedQuote(template=TemplateType.GARDEN_WORK,
                       items=(LineItem(description="Mow lawn", hours=2.0, price_per_hour=15.0),),
                       tax_rate=20, currency_code="GBP")
        assert q.subtotal == pytest.approx(30.0)
        assert q.tax_amount == pytest.approx(6.0)
        assert q.total == pytest.approx(36.0)

    def test_empty_quote(self):
        q = SavedQuote(template=TemplateType.ROOFING, tax_rate=10)
        assert q.subtotal == 0
        assert q.tax_amount == 0
        assert q.total == 0
        items = build_document(q, BusinessInfo()).block("items")
        assert items is not None
        assert items.columns
        assert items.rows == ()

    def test_two_items_one_extra(self):
        q = SavedQuote(template=TemplateType.PLUMBING,
                       items=(LineItem(hours=2, price_per_hour=20),
                              LineItem(hours=1.5, price_per_hour=10)),
                       extras=(ExtraItem(name="Washer", price=5),),
                       tax_rate=0)
        assert q.subtotal == pytest.approx(60.0)
        assert q.total == pytest.approx(60.0)

    def test_totals_follow_edits(self):
        from notes2quote.core.models import update_quote
        q = SavedQuote(template=TemplateType.MAN_VAN,
                       items=(LineItem(hours=1, price_per_hour=50),))
        q2 = update_quote(q, tax_rate=20)
        assert q.total == pytest.approx(50.0)
        assert q2.total == pytest.approx(60.0)
