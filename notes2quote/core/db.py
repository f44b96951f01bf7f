"""
notes2quote/core/db.py — SQLite Quote Store

Stores saved quotes and the key-value settings used by the business
profile. The pricing core never reads this module directly: it hands a
SavedQuote in and gets SavedQuote values back.

TABLES:
  quotes    — one row per saved quote; items/extras/customer as JSON
  settings  — key/value pairs (business profile, default currency)
"""

import os
import json
import sqlite3
import logging
import threading
from datetime import datetime
from contextlib import contextmanager
from typing import Optional

from notes2quote.core import paths
from notes2quote.core.models import SavedQuote, can_save, normalize_date, update_quote

log = logging.getLogger("notes2quote.db")

DB_PATH = paths.DB_PATH

_db_lock = threading.Lock()


# ── Connection factory ────────────────────────────────────────────────────────
@contextmanager
def get_db():
    """Thread-safe SQLite connection with WAL mode."""
    with _db_lock:
        os.makedirs(os.path.dirname(DB_PATH) or ".", exist_ok=True)
        conn = sqlite3.connect(DB_PATH, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


# ── Schema ────────────────────────────────────────────────────────────────────
SCHEMA = """
CREATE TABLE IF NOT EXISTS quotes (
    id              TEXT PRIMARY KEY,
    quote_number    TEXT NOT NULL,
    template        TEXT NOT NULL,
    date            TEXT NOT NULL,   -- reference date, naive local ISO 8601
    customer        TEXT NOT NULL,   -- JSON object
    items           TEXT NOT NULL,   -- JSON array, insertion order
    extras          TEXT NOT NULL,   -- JSON array, insertion order
    notes           TEXT DEFAULT '',
    job_address     TEXT,
    tax_rate        REAL DEFAULT 0,
    is_invoice      INTEGER DEFAULT 0,
    currency_code   TEXT DEFAULT 'GBP',
    created_at      TEXT NOT NULL,
    updated_at      TEXT
);

CREATE INDEX IF NOT EXISTS idx_quotes_date ON quotes(date);

CREATE TABLE IF NOT EXISTS settings (
    key             TEXT PRIMARY KEY,
    value           TEXT,            -- JSON
    updated_at      TEXT
);
"""


def init_db():
    """Create all tables if they don't exist. Safe to call multiple times."""
    with get_db() as conn:
        conn.executescript(SCHEMA)
    log.info("DB initialized at %s", DB_PATH)
    return True


def _row_to_quote(row) -> SavedQuote:
    d = dict(row)
    return SavedQuote.from_dict({
        "id":            d["id"],
        "template":      d["template"],
        "date":          d["date"],
        "customer":      json.loads(d["customer"] or "{}"),
        "items":         json.loads(d["items"] or "[]"),
        "extras":        json.loads(d["extras"] or "[]"),
        "notes":         d.get("notes") or "",
        "job_address":   d.get("job_address"),
        "tax_rate":      d.get("tax_rate") or 0,
        "is_invoice":    d.get("is_invoice"),
        "currency_code": d.get("currency_code") or "GBP",
    })


# ── Quote operations ──────────────────────────────────────────────────────────
def save_quote(quote: SavedQuote) -> bool:
    """Insert or replace a quote. Returns False (and writes nothing) when
    the customer name is blank."""
    if not can_save(quote):
        log.info("Save blocked for %s: customer name is empty", quote.quote_number)
        return False
    now = datetime.now().isoformat()
    d = quote.to_dict()
    with get_db() as conn:
        conn.execute("""
            INSERT INTO quotes
              (id, quote_number, template, date, customer, items, extras,
               notes, job_address, tax_rate, is_invoice, currency_code,
               created_at, updated_at)
            VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?)
            ON CONFLICT(id) DO UPDATE SET
              date=excluded.date, customer=excluded.customer,
              items=excluded.items, extras=excluded.extras,
              notes=excluded.notes, job_address=excluded.job_address,
              tax_rate=excluded.tax_rate, is_invoice=excluded.is_invoice,
              currency_code=excluded.currency_code,
              updated_at=excluded.updated_at
        """, (
            d["id"], d["quote_number"], d["template"], normalize_date(quote.date).isoformat(),
            json.dumps(d["customer"]), json.dumps(d["items"]),
            json.dumps(d["extras"]), d["notes"], d["job_address"],
            d["tax_rate"], 1 if d["is_invoice"] else 0, d["currency_code"],
            now, now,
        ))
    log.info("Quote %s saved (%s, total=%.2f)", quote.quote_number,
             quote.customer.name, quote.total,
             extra={"quote_number": quote.quote_number, "total": quote.total})
    return True


def get_quote(quote_id) -> Optional[SavedQuote]:
    """Fetch a quote by id, or None."""
    with get_db() as conn:
        row = conn.execute("SELECT * FROM quotes WHERE id=?",
                           (str(quote_id),)).fetchone()
    return _row_to_quote(row) if row else None


def list_quotes(limit: int = 500) -> list:
    """All saved quotes, most recent reference date first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM quotes ORDER BY date DESC LIMIT ?",
            (limit,)).fetchall()
    return [_row_to_quote(r) for r in rows]


def update_saved_quote(quote_id, **changes) -> Optional[SavedQuote]:
    """Apply changes to a stored quote through update_quote().

    Returns the updated quote, or None when it does not exist or the
    result would have a blank customer name.
    """
    existing = get_quote(quote_id)
    if existing is None:
        return None
    updated = update_quote(existing, **changes)
    if not save_quote(updated):
        return None
    return updated


def delete_quote(quote_id) -> bool:
    with get_db() as conn:
        cur = conn.execute("DELETE FROM quotes WHERE id=?", (str(quote_id),))
        deleted = cur.rowcount > 0
    if deleted:
        log.info("Quote %s deleted", quote_id)
    return deleted


# ── Settings (key/value) ──────────────────────────────────────────────────────
def get_setting(key: str, default=None):
    with get_db() as conn:
        row = conn.execute("SELECT value FROM settings WHERE key=?",
                           (key,)).fetchone()
    if row is None or row["value"] is None:
        return default
    try:
        return json.loads(row["value"])
    except json.JSONDecodeError:
        return row["value"]


def set_setting(key: str, value) -> None:
    with get_db() as conn:
        conn.execute("""
            INSERT INTO settings (key, value, updated_at) VALUES (?,?,?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value,
              updated_at=excluded.updated_at
        """, (key, json.dumps(value, default=str), datetime.now().isoformat()))


# ── DB stats / startup ────────────────────────────────────────────────────────
def get_db_stats() -> dict:
    """Row counts per table — used by /api/health."""
    stats = {"db_path": DB_PATH, "db_size_kb": 0}
    try:
        stats["db_size_kb"] = round(os.path.getsize(DB_PATH) / 1024, 1)
    except FileNotFoundError:
        pass
    with get_db() as conn:
        for table in ("quotes", "settings"):
            try:
                stats[table] = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            except sqlite3.OperationalError:
                stats[table] = 0
    return stats


def startup() -> dict:
    """Initialize DB. Call once at app start."""
    init_db()
    stats = get_db_stats()
    log.info("DB ready: %s", {k: v for k, v in stats.items()
                              if k not in ("db_path", "db_size_kb")})
    return {"ok": True, "db_path": DB_PATH, "stats": stats}
