"""Geometry-first page layout reconstruction.

Turns the positioned text runs of a PDF page into header, body and footer
blocks (paragraphs and borderless grid rows).  Frequently-used symbols are
re-exported here for convenience.  For stage-level functions, the
pdfplumber decoder, or exporters, import from the relevant submodule, e.g.::

    from pagelayout.layout import cluster_lines, segment_columns
    from pagelayout.ingest import extract_raw_pages
    from pagelayout.export import draw_layout_overlay
"""

# ── Core models & config ──────────────────────────────────────────────

from .config import ConfigValidationError, LayoutConfig
from .invariants import InvariantViolation
from .models import (
    Block,
    Column,
    Document,
    GridCell,
    GridRow,
    Line,
    Page,
    Paragraph,
    RawPage,
    RawToken,
    Region,
    Token,
)

# ── Pipeline ──────────────────────────────────────────────────────────

from .pipeline import (
    DocumentResult,
    PageResult,
    PipelineCancelled,
    StageResult,
    reconstruct_page,
    run_document,
    run_page,
    run_pdf,
)

# ── Ingest & export ───────────────────────────────────────────────────

from .export import draw_layout_overlay, load_raw_pages, write_document_json
from .ingest import IngestError, extract_raw_pages, ingest_pdf

__all__ = [
    # Models & config
    "LayoutConfig",
    "ConfigValidationError",
    "InvariantViolation",
    "RawToken",
    "RawPage",
    "Token",
    "Region",
    "Line",
    "Column",
    "Paragraph",
    "GridCell",
    "GridRow",
    "Block",
    "Page",
    "Document",
    # Pipeline
    "DocumentResult",
    "PageResult",
    "PipelineCancelled",
    "StageResult",
    "reconstruct_page",
    "run_document",
    "run_page",
    "run_pdf",
    # Ingest & export
    "IngestError",
    "extract_raw_pages",
    "ingest_pdf",
    "draw_layout_overlay",
    "load_raw_pages",
    "write_document_json",
]
