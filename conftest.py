"""
Shared pytest fixtures for the Notes2Quote test suite.

Every test gets its own data directory and SQLite file; nothing touches the
project's data/ folder.
"""
import io
import os
import sys
from datetime import datetime
import uuid

import pytest
from PIL import Image

_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)


# ── Temp data directory (per-test isolation) ──────────────────────────────────

@pytest.fixture(autouse=True)
def temp_data_dir(tmp_path, monkeypatch):
    """Redirect data/log/output dirs and the DB file to an isolated tmp dir."""
    data = str(tmp_path / "data")
    os.makedirs(data, exist_ok=True)

    from notes2quote.core import paths, db
    monkeypatch.setattr(paths, "DATA_DIR", data)
    monkeypatch.setattr(paths, "LOG_DIR", os.path.join(data, "logs"))
    monkeypatch.setattr(paths, "OUTPUT_DIR", os.path.join(data, "output"))
    monkeypatch.setattr(paths, "DEFAULT_CURRENCY", "GBP")
    monkeypatch.setattr(db, "DB_PATH", os.path.join(data, "notes2quote.db"))
    db.init_db()
    return data


# ── Flask test client ─────────────────────────────────────────────────────────

@pytest.fixture
def app(temp_data_dir):
    """Create Flask app configured for testing."""
    from app import create_app
    application = create_app(init_logging=False)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


# ── Sample data factories ─────────────────────────────────────────────────────

@pytest.fixture
def sample_business():
    from notes2quote.core.models import BusinessInfo
    return BusinessInfo(
        name="Hartley Handyman",
        phone="07700 900123",
        email="jobs@hartley.example",
        address="12 Mill Lane, Leeds",
        website="hartley.example",
    )


@pytest.fixture
def sample_customer():
    from notes2quote.core.models import Customer
    return Customer(name="Jane Smith", phone="0113 496 0000",
                    email="jane@example.com", address="4 Park Row, Leeds")


@pytest.fixture
def sample_quote(sample_customer):
    """Two labour lines, one extra, 20% tax, fixed id and date."""
    from notes2quote.core.models import ExtraItem, LineItem, SavedQuote, TemplateType
    return SavedQuote(
        template=TemplateType.SMALL_REPAIRS,
        items=(
            LineItem(description="Fit new door", hours=2.5, price_per_hour=40.0),
            LineItem(description="Replace hinges", hours=1.0, price_per_hour=35.0),
        ),
        extras=(ExtraItem(name="Door furniture", price=24.99),),
        notes="Materials collected on the day.",
        customer=sample_customer,
        job_address="4 Park Row, Leeds",
        tax_rate=20.0,
        date=datetime(2026, 10, 9, 14, 30),
        currency_code="GBP",
        id=uuid.UUID("1a2b3c4d-0000-4000-8000-000000000001"),
    )


def _png_bytes(color=(200, 30, 30), size=(64, 48), mode="RGB"):
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return _png_bytes()


@pytest.fixture
def make_png():
    """Factory: make_png(color=(r,g,b), size=(w,h)) -> PNG bytes."""
    return _png_bytes
