"""Document assembly, PDF rendering and export.

Key exports:
    build_document()  — Renderer-agnostic document from a quote snapshot
    render_pdf()      — Single-page A4 PDF bytes (or None)
    export_quote()    — (filename, pdf_bytes) pair for the share sheet
    PhotoLoader       — Background image loading with supersession
"""
