"""
Notes2Quote Dashboard — Flask Blueprint
Saved-quote list, document preview, PDF export and the JSON API the
editor uses to save, update and delete quotes.
"""

import io
import logging
import time

from flask import Blueprint, Response, jsonify, request, send_file

from notes2quote.core import db, settings
from notes2quote.core.models import BusinessInfo, SavedQuote, TemplateType, can_save
from notes2quote.forms.document import build_document
from notes2quote.forms.export import export_quote
from notes2quote.forms.photos import PhotoLoader
from notes2quote.api.screen import render_quote_list, render_screen

log = logging.getLogger("notes2quote.dashboard")

bp = Blueprint("dashboard", __name__)

PHOTO_TIMEOUT = 15


# ── Request-level structured logging ────────────────────────────────────────
@bp.before_app_request
def _log_request_start():
    request._start_time = time.time()


@bp.after_app_request
def _log_request_end(response):
    if hasattr(request, "_start_time"):
        duration_ms = round((time.time() - request._start_time) * 1000, 1)
        if request.path != "/api/health":
            log.info("%s %s → %d (%.0fms)",
                     request.method, request.path, response.status_code, duration_ms,
                     extra={"route": request.path, "method": request.method,
                            "duration_ms": duration_ms})
    return response


# ── Helpers ──────────────────────────────────────────────────────────────────
def _not_found(quote_id):
    return jsonify({"ok": False, "error": f"Quote {quote_id} not found"}), 404


def _json_object():
    """Request body as a dict, or None when it is not a JSON object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _bad_request(message):
    return jsonify({"ok": False, "error": message}), 400


def _uploaded_photos():
    """Decode photos posted as multipart 'photos' files, in completion order."""
    files = request.files.getlist("photos") if request.files else []
    if not files:
        return ()
    payloads = [f.read() for f in files]
    loader = PhotoLoader()
    loader.load([(lambda data=data: data) for data in payloads])
    if not loader.wait(PHOTO_TIMEOUT):
        log.warning("Photo decode timed out; using %d of %d", len(loader.images), len(files))
    return loader.images


# ═══════════════════════════════════════════════════════════════════════════════
# Pages
# ═══════════════════════════════════════════════════════════════════════════════

@bp.route("/")
def home():
    return render_quote_list(db.list_quotes())


@bp.route("/quotes/<quote_id>", methods=["GET", "POST"])
def quote_preview(quote_id):
    quote = db.get_quote(quote_id)
    if quote is None:
        return _not_found(quote_id)
    doc = build_document(quote, settings.load_business_info(), _uploaded_photos())
    return render_screen(doc)


@bp.route("/quotes/<quote_id>/pdf", methods=["GET", "POST"])
def quote_pdf(quote_id):
    quote = db.get_quote(quote_id)
    if quote is None:
        return _not_found(quote_id)
    result = export_quote(quote, settings.load_business_info(), _uploaded_photos())
    if result is None:
        return jsonify({"ok": False, "error": "PDF rendering unavailable"}), 503
    filename, data = result
    return send_file(io.BytesIO(data), mimetype="application/pdf",
                     as_attachment=True, download_name=filename)


# ═══════════════════════════════════════════════════════════════════════════════
# JSON API
# ═══════════════════════════════════════════════════════════════════════════════

@bp.route("/api/quotes", methods=["GET"])
def api_quotes():
    return jsonify({"ok": True, "quotes": [q.to_dict() for q in db.list_quotes()]})


@bp.route("/api/quotes", methods=["POST"])
def api_create_quote():
    data = _json_object()
    if data is None:
        return _bad_request("Body must be a JSON object")
    try:
        template = TemplateType(data.get("template", ""))
    except ValueError:
        return _bad_request("template must be one of: " +
                            ", ".join(t.value for t in TemplateType))
    data = dict(data, template=template.value)
    data.pop("id", None)
    data.setdefault("currency_code", settings.default_currency())
    try:
        quote = SavedQuote.from_dict(data)
    except ValueError as e:
        return _bad_request(str(e))
    if not can_save(quote):
        return jsonify({"ok": False, "error": "Customer name is required"}), 422
    db.save_quote(quote)
    return jsonify({"ok": True, "quote": quote.to_dict()}), 201


@bp.route("/api/quotes/<quote_id>", methods=["GET"])
def api_get_quote(quote_id):
    quote = db.get_quote(quote_id)
    if quote is None:
        return _not_found(quote_id)
    return jsonify({"ok": True, "quote": quote.to_dict()})


@bp.route("/api/quotes/<quote_id>", methods=["PUT"])
def api_update_quote(quote_id):
    existing = db.get_quote(quote_id)
    if existing is None:
        return _not_found(quote_id)
    data = _json_object()
    if data is None:
        return _bad_request("Body must be a JSON object")
    try:
        updated = db.update_saved_quote(quote_id, **data)
    except ValueError as e:
        return _bad_request(str(e))
    if updated is None:
        return jsonify({"ok": False, "error": "Customer name is required"}), 422
    return jsonify({"ok": True, "quote": updated.to_dict()})


@bp.route("/api/quotes/<quote_id>", methods=["DELETE"])
def api_delete_quote(quote_id):
    if not db.delete_quote(quote_id):
        return _not_found(quote_id)
    return jsonify({"ok": True})


@bp.route("/api/profile", methods=["GET"])
def api_profile():
    return jsonify({"ok": True, "business": settings.load_business_info().to_dict(),
                    "default_currency": settings.default_currency()})


@bp.route("/api/profile", methods=["PUT"])
def api_update_profile():
    data = request.get_json(silent=True) or {}
    info = BusinessInfo(**{k: str(data.get(k, "") or "")
                           for k in ("name", "phone", "email", "address", "website")})
    settings.save_business_info(info)
    if data.get("default_currency"):
        settings.set_default_currency(data["default_currency"])
    return jsonify({"ok": True, "business": info.to_dict(),
                    "default_currency": settings.default_currency()})


@bp.route("/api/health")
def api_health():
    try:
        stats = db.get_db_stats()
        return jsonify({"status": "ok", "db": stats})
    except Exception as e:
        log.error("Health check DB error: %s", e)
        return Response('{"status": "degraded"}', 503, mimetype="application/json")
