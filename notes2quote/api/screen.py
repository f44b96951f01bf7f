"""
Screen renderer — the interactive HTML preview of a Document.

Walks the same blocks as forms/quote_pdf.py, in the same order, printing the
same strings. Photos are inlined as base64 PNG data URIs.
"""

import base64
import io
import logging

import jinja2

from notes2quote.api.templates import BASE_CSS, PAGE_DOCUMENT, PAGE_LIST
from notes2quote.forms.document import Document

log = logging.getLogger("notes2quote.screen")

_env = jinja2.Environment(
    loader=jinja2.DictLoader({"document.html": PAGE_DOCUMENT, "list.html": PAGE_LIST}),
    autoescape=True,
)

THUMB_SIZE = (200, 200)


def _data_uri(img) -> str:
    thumb = img.copy()
    thumb.thumbnail(THUMB_SIZE)
    buf = io.BytesIO()
    thumb.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode()


def render_screen(document: Document) -> str:
    photos = document.block("photos")
    photo_uris = [_data_uri(img) for img in photos.images] if photos else []
    return _env.get_template("document.html").render(
        doc=document, css=BASE_CSS, photo_uris=photo_uris)


def render_quote_list(quotes) -> str:
    return _env.get_template("list.html").render(quotes=quotes, css=BASE_CSS)
