#!/usr/bin/env python3
"""
Notes2Quote — Application Entry Point
Creates Flask app and registers the dashboard Blueprint.
"""

import os
import logging

from flask import Flask


def create_app(init_logging=True):
    """Application factory."""
    app = Flask(__name__)
    app.secret_key = os.environ.get("SECRET_KEY", "notes2quote-dev")

    from notes2quote.core import paths
    paths.ensure_dirs()

    if init_logging:
        from logging_config import setup_logging
        setup_logging()

    # ── Persistent database init ──────────────────────────────────────────────
    from notes2quote.core.db import startup as db_startup
    result = db_startup()
    logging.getLogger("notes2quote").info(
        "DB: %s | quotes=%d", result["db_path"], result["stats"].get("quotes", 0))

    checks = paths.validate_paths()
    if not checks["ok"]:
        logging.getLogger("notes2quote").error(
            "STARTUP: path checks failed: %s", "; ".join(checks["errors"]))

    from notes2quote.api.dashboard import bp
    app.register_blueprint(bp)

    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    create_app().run(host="0.0.0.0", port=port, debug=False)
