"""
Quote PDF Renderer
==================
Draws a Document onto one fixed A4 page (595 x 842 pt) with reportlab.

Same blocks, same strings as the screen preview; only the layout engine
differs. Content that runs past the bottom margin is clipped: the remaining
blocks are skipped with a warning and no second page is started. The footer
is pinned to the bottom of the page and is always drawn.

Text is set in embedded TrueType fonts so any Unicode the user types comes
back out of the PDF unchanged. DejaVu Sans is used when installed, otherwise
the Vera faces bundled with reportlab. Characters the main face lacks are
drawn from the fallback faces (N2Q_PDF_FALLBACK_FONTS, plus common CJK fonts
when present).

Usage:
    from notes2quote.forms.quote_pdf import render_pdf
    data = render_pdf(document)   # bytes, or None if no canvas could be made
"""

import io
import logging
import os
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.colors import Color, HexColor
from reportlab.lib.utils import simpleSplit, ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError
from reportlab.pdfgen import canvas

from notes2quote.forms.document import Block, Document

log = logging.getLogger("notes2quote.quote_pdf")

# ── Colors ──
FILL    = Color(0.765, 0.765, 0.882)   # lavender header fill
TBL_BD  = Color(0.278, 0.278, 0.553)   # table grid borders
BLACK   = HexColor("#000000")
GRAY    = HexColor("#555555")
ALT_ROW = Color(0.96, 0.96, 0.98)
LOGO_BG = Color(0.80, 0.87, 1.0)

PAGE_W, PAGE_H = A4  # 595 x 842
MARGIN_L = 32
MARGIN_R = 32
MARGIN_T = 32
FOOTER_Y = 28        # footer baseline (bottom-origin)
CONTENT_BOTTOM = 48  # top-origin cursor must stay above PAGE_H - this
CONTENT_W = PAGE_W - MARGIN_L - MARGIN_R
MR = PAGE_W - MARGIN_R

PHOTO_SIZE = 100


# ═══════════════════════════════════════════════════════════════════════════════
# Fonts
# ═══════════════════════════════════════════════════════════════════════════════

_DEJAVU_DIRS = (
    "/usr/share/fonts/truetype/dejavu",
    "/usr/share/fonts/dejavu",
    "/usr/share/fonts/TTF",
    "/Library/Fonts",
)


def _dejavu(filename):
    return [os.path.join(d, filename) for d in _DEJAVU_DIRS]


# First loadable path wins. Bare Vera*.ttf names resolve from reportlab's own
# fonts directory, so every style always ends up with a face.
FONT_CANDIDATES = {
    "regular": [os.environ.get("N2Q_PDF_FONT", ""),
                *_dejavu("DejaVuSans.ttf"), "Vera.ttf"],
    "bold":    [os.environ.get("N2Q_PDF_FONT_BOLD", ""),
                *_dejavu("DejaVuSans-Bold.ttf"), "VeraBd.ttf"],
    "oblique": [os.environ.get("N2Q_PDF_FONT_OBLIQUE", ""),
                *_dejavu("DejaVuSans-Oblique.ttf"), *_dejavu("DejaVuSans.ttf"), "VeraIt.ttf"],
}

FALLBACK_CANDIDATES = [
    *[p for p in os.environ.get("N2Q_PDF_FALLBACK_FONTS", "").split(os.pathsep) if p],
    "/usr/share/fonts/truetype/droid/DroidSansFallbackFull.ttf",
    "/usr/share/fonts/truetype/wqy/wqy-microhei.ttc",
    "/usr/share/fonts/truetype/arphic/uming.ttc",
    "/usr/share/fonts/truetype/unifont/unifont.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
]

_fonts = None


def _register(name, path) -> bool:
    try:
        pdfmetrics.registerFont(TTFont(name, path))
    except (TTFError, OSError) as e:
        log.debug("Font %s not usable: %s", path, e)
        return False
    return True


def load_fonts() -> dict:
    """Register the PDF faces once.

    Returns {"regular": name, "bold": name, "oblique": name,
             "fallbacks": [name, ...]}.
    """
    global _fonts
    if _fonts is not None:
        return _fonts
    fonts = {}
    for style, candidates in FONT_CANDIDATES.items():
        name = f"N2Q-{style}"
        for path in candidates:
            if not path or (os.path.isabs(path) and not os.path.exists(path)):
                continue
            if _register(name, path):
                log.info("PDF %s font: %s", style, path)
                fonts[style] = name
                break
        else:
            fonts[style] = fonts.get("regular", "N2Q-regular")
    fallbacks = []
    for idx, path in enumerate(FALLBACK_CANDIDATES):
        name = f"N2Q-fallback-{idx}"
        if os.path.exists(path) and _register(name, path):
            fallbacks.append(name)
    fonts["fallbacks"] = fallbacks
    _fonts = fonts
    return fonts


def has_glyph(font_name: str, ch: str) -> bool:
    return ord(ch) in pdfmetrics.getFont(font_name).face.charToGlyph


def covers(text: str, style: str = "regular") -> bool:
    """True when every character of text has a glyph in some loaded face."""
    fonts = load_fonts()
    faces = [fonts[style], fonts["regular"]] + fonts["fallbacks"]
    return all(ch.isspace() or any(has_glyph(f, ch) for f in faces) for ch in text)


# ═══════════════════════════════════════════════════════════════════════════════
# Page
# ═══════════════════════════════════════════════════════════════════════════════

class _Clipped(Exception):
    """Raised when the next element would run past the bottom margin."""


class _Page:
    """Top-origin cursor over a reportlab canvas (reportlab y is bottom-up)."""

    def __init__(self, c, fonts):
        self.c = c
        self.y = MARGIN_T
        self.fonts = fonts

    def Y(self, top_y):
        return PAGE_H - top_y

    def need(self, h):
        if self.y + h > PAGE_H - CONTENT_BOTTOM:
            raise _Clipped()

    def runs(self, txt, style):
        """Split txt into (font, chunk) runs, using fallback faces per character."""
        primary = self.fonts[style]
        runs = []
        for ch in txt:
            face = primary
            if not ch.isspace() and not has_glyph(primary, ch):
                others = [self.fonts["regular"]] + self.fonts["fallbacks"]
                face = next((f for f in others if has_glyph(f, ch)), primary)
            if runs and runs[-1][0] == face:
                runs[-1][1] += ch
            else:
                runs.append([face, ch])
        return runs

    def draw(self, x, rl_y, txt, style="regular", size=9, color=BLACK, align="left"):
        """Draw one line at a reportlab (bottom-origin) baseline."""
        c = self.c
        c.setFillColor(color)
        runs = self.runs(txt, style)
        if align != "left":
            w = sum(pdfmetrics.stringWidth(chunk, face, size) for face, chunk in runs)
            x -= w if align == "right" else w / 2
        for face, chunk in runs:
            c.setFont(face, size)
            c.drawString(x, rl_y, chunk)
            x += pdfmetrics.stringWidth(chunk, face, size)

    def text(self, x, txt, style="regular", size=9, color=BLACK, align="left", dy=None):
        self.draw(x, self.Y(self.y + (size if dy is None else dy)), txt, style, size, color, align)

    def split(self, txt, style, size, width):
        return simpleSplit(txt, self.fonts[style], size, width) or [""]

    def wrapped(self, x, txt, width, style="regular", size=9, leading=12, color=BLACK):
        """Draw txt wrapped to width, honoring embedded newlines."""
        for para in str(txt).splitlines() or [""]:
            for line in self.split(para, style, size, width):
                self.need(leading)
                self.text(x, line, style, size, color)
                self.y += leading

    def rule(self, width=1.0, color=TBL_BD):
        self.c.setStrokeColor(color)
        self.c.setLineWidth(width)
        self.c.line(MARGIN_L, self.Y(self.y), MR, self.Y(self.y))


# ═══════════════════════════════════════════════════════════════════════════════
# Block painters
# ═══════════════════════════════════════════════════════════════════════════════

def _draw_header(p: _Page, b: Block):
    c = p.c
    # Logo placeholder circle (top-left)
    c.setFillColor(LOGO_BG)
    c.circle(MARGIN_L + 30, p.Y(p.y + 30), 30, fill=1, stroke=0)

    # Business lines, right-aligned
    ly = p.y
    for i, line in enumerate(b.lines):
        if i == 0:
            p.text(MR, line, "bold", 16, BLACK, "right")
            p.y += 20
        else:
            p.text(MR, line, "regular", 8, GRAY, "right")
            p.y += 11
    p.y = max(p.y, ly + 64) + 6
    p.rule(2.0, BLACK)
    p.y += 10

    # Title + number left, date + validity right
    top = p.y
    p.text(MARGIN_L, b.heading, "bold", 26, BLACK, dy=24)
    p.y += 30
    if b.aside:
        p.text(MARGIN_L, b.aside[0], "regular", 10)
    p.y = top + 4
    for i, line in enumerate(b.aside[1:]):
        p.text(MR, line, "oblique" if i == 1 else "regular", 10, BLACK, "right")
        p.y += 14
    p.y = top + 52


def _draw_lines_block(p: _Page, b: Block, style="regular", size=9):
    if b.heading:
        p.need(16)
        p.text(MARGIN_L, b.heading, "bold", 11)
        p.y += 16
    for line in b.lines:
        p.wrapped(MARGIN_L, line, CONTENT_W, style, size)
    p.y += 8


def _draw_parties(p: _Page, b: Block):
    p.need(16)
    p.text(MARGIN_L, b.heading, "bold", 11)
    p.y += 16
    for i, line in enumerate(b.lines):
        p.wrapped(MARGIN_L, line, 260, "bold" if i == 0 else "regular", 9)
    p.y += 8


def _table_layout(columns):
    """(x, width) per column: first column flexible, others fixed, right-aligned."""
    fixed = {2: [90], 4: [60, 80, 80]}[len(columns)]
    first_w = CONTENT_W - sum(fixed)
    layout = [(MARGIN_L, first_w)]
    x = MARGIN_L + first_w
    for w in fixed:
        layout.append((x, w))
        x += w
    return layout


def _draw_table(p: _Page, b: Block):
    cols = _table_layout(b.columns)
    hdr_h = 18

    p.need(18 + hdr_h)
    p.text(MARGIN_L, b.heading, "bold", 12)
    p.y += 18

    c = p.c
    c.setFillColor(FILL)
    c.rect(MARGIN_L, p.Y(p.y) - hdr_h, CONTENT_W, hdr_h, fill=1, stroke=0)
    for i, (name, (cx, cw)) in enumerate(zip(b.columns, cols)):
        if i == 0:
            p.text(cx + 4, name, "bold", 8.5, dy=12)
        else:
            p.text(cx + cw - 4, name, "bold", 8.5, align="right", dy=12)
    p.y += hdr_h

    for idx, row in enumerate(b.rows):
        desc_lines = p.split(row[0], "regular", 8.5, cols[0][1] - 8)
        row_h = max(16, len(desc_lines) * 10 + 6)
        try:
            p.need(row_h)
        except _Clipped:
            log.warning("Table '%s' clipped after %d of %d rows", b.heading, idx, len(b.rows))
            raise

        rl_row_y = p.Y(p.y) - row_h
        if idx % 2 == 1:
            c.setFillColor(ALT_ROW)
            c.rect(MARGIN_L, rl_row_y, CONTENT_W, row_h, fill=1, stroke=0)
        c.setStrokeColor(TBL_BD)
        c.setLineWidth(0.3)
        c.line(MARGIN_L, rl_row_y, MR, rl_row_y)

        dy = 11
        for dline in desc_lines:
            p.text(cols[0][0] + 4, dline, "regular", 8.5, dy=dy)
            dy += 10
        for i, ((cx, cw), cell) in enumerate(zip(cols[1:], row[1:])):
            last = i == len(row) - 2
            p.text(cx + cw - 4, cell, "bold" if last else "regular",
                   8.5, align="right", dy=11)
        p.y += row_h
    p.y += 12


def _draw_totals(p: _Page, b: Block):
    lbl_x = MR - 150
    p.need(4)
    p.rule(0.5)
    p.y += 6
    for i, (label, value) in enumerate(b.rows):
        is_total = i == len(b.rows) - 1
        size = 13 if is_total else 10
        if is_total:
            p.need(8)
            p.rule(0.5)
            p.y += 6
        p.need(size + 6)
        p.text(lbl_x - 8, label, "bold", size, align="right")
        p.text(MR, value, "bold", size, align="right")
        p.y += size + 6
    p.y += 10


def _draw_photos(p: _Page, b: Block):
    p.need(16 + PHOTO_SIZE)
    p.text(MARGIN_L, b.heading, "bold", 11)
    p.y += 16
    c = p.c
    x = MARGIN_L
    for img in b.images:
        rl_y = p.Y(p.y) - PHOTO_SIZE
        try:
            c.drawImage(ImageReader(img), x, rl_y, width=PHOTO_SIZE, height=PHOTO_SIZE,
                        preserveAspectRatio=True, anchor="c", mask="auto")
        except Exception as e:
            log.warning("Photo draw failed: %s", e)
        c.setStrokeColor(GRAY)
        c.setLineWidth(1)
        c.rect(x, rl_y, PHOTO_SIZE, PHOTO_SIZE, fill=0, stroke=1)
        x += PHOTO_SIZE + 8
    p.y += PHOTO_SIZE + 10


def _draw_footer(p: _Page, b: Block):
    for i, line in enumerate(b.lines):
        p.draw(PAGE_W / 2, FOOTER_Y - i * 10, line, "oblique", 8, GRAY, "center")


_PAINTERS = {
    "header":      _draw_header,
    "parties":     _draw_parties,
    "job_address": lambda p, b: _draw_lines_block(p, b, "oblique", 9),
    "items":       _draw_table,
    "extras":      _draw_table,
    "totals":      _draw_totals,
    "notes":       _draw_lines_block,
    "photos":      _draw_photos,
}


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN RENDERER
# ═══════════════════════════════════════════════════════════════════════════════

def render_pdf(document: Document) -> Optional[bytes]:
    """Render a Document to single-page PDF bytes.

    Returns None when the drawing canvas cannot be created; callers should
    hide the export action rather than fail.
    """
    buf = io.BytesIO()
    try:
        c = canvas.Canvas(buf, pagesize=A4)
    except Exception as e:
        log.error("PDF canvas unavailable for %s: %s", document.quote_number, e)
        return None
    c.setTitle(f"{document.title.title()} {document.quote_number}")

    page = _Page(c, load_fonts())
    body = [b for b in document.blocks if b.kind != "footer"]
    for idx, block in enumerate(body):
        try:
            _PAINTERS[block.kind](page, block)
        except _Clipped:
            log.warning("Document %s overflows one page; clipped: %s",
                        document.quote_number, ", ".join(b.kind for b in body[idx:]))
            break

    footer = document.block("footer")
    if footer is not None:
        _draw_footer(page, footer)

    c.showPage()
    c.save()
    data = buf.getvalue()
    log.info("Rendered PDF %s (%d bytes)", document.quote_number, len(data),
             extra={"quote_number": document.quote_number})
    return data
