"""
notes2quote/core/paths.py — Centralized Path Configuration

Single source of truth for directory paths. Every module imports from here
instead of computing its own DATA_DIR.
"""

import os
import logging

log = logging.getLogger("notes2quote.paths")

# ── Project Root ──────────────────────────────────────────────────────────────
_THIS_FILE = os.path.abspath(__file__)
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(_THIS_FILE)))

_DEFAULT_DATA_DIR = os.path.join(PROJECT_ROOT, "data")


# Priority: N2Q_DATA_DIR env → project data/
def _resolve_data_dir() -> str:
    """Find the data directory (SQLite store, logs, exported PDFs)."""
    env_dir = os.environ.get("N2Q_DATA_DIR", "")
    if env_dir:
        return env_dir
    return _DEFAULT_DATA_DIR


DATA_DIR = _resolve_data_dir()
LOG_DIR = os.path.join(DATA_DIR, "logs")
OUTPUT_DIR = os.path.join(DATA_DIR, "output")
DB_PATH = os.path.join(DATA_DIR, "notes2quote.db")

# Fallback when the settings store has no defaultCurrency
DEFAULT_CURRENCY = os.environ.get("N2Q_DEFAULT_CURRENCY", "GBP").upper()


def ensure_dirs():
    """Create data/log/output dirs. Called at app startup, not import."""
    for d in (DATA_DIR, LOG_DIR, OUTPUT_DIR):
        os.makedirs(d, exist_ok=True)


def validate_paths() -> dict:
    """Runtime validation — call at app startup to catch path issues early.

    Returns:
        {"ok": bool, "errors": [str], "resolved": {name: path}}
    """
    result = {"ok": True, "errors": [], "resolved": {
        "PROJECT_ROOT": PROJECT_ROOT,
        "DATA_DIR": DATA_DIR,
        "DB_PATH": DB_PATH,
    }}
    test_file = os.path.join(DATA_DIR, ".write_test")
    try:
        with open(test_file, "w") as f:
            f.write("ok")
        os.remove(test_file)
    except OSError as e:
        result["errors"].append(f"DATA_DIR not writable: {e}")
        result["ok"] = False
        log.warning("DATA_DIR %s not writable: %s", DATA_DIR, e)
    return result
