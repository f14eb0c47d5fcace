"""Ingest stage: PDF validation, metadata, rendering, and token extraction.

Public API
----------
- :func:`ingest_pdf`: open + validate a PDF, return :class:`PdfMeta`
- :func:`extract_raw_page`: decode an open pdfplumber page to a RawPage
- :func:`extract_raw_pages`: decode selected pages of a PDF file
- :func:`render_page_image`: render one page to PIL Image at a given DPI
- :class:`PdfMeta`: PDF-level metadata container
- :class:`PageInfo`: per-page dimensions
- :class:`IngestError`: raised on validation failures
"""

from .extract import extract_raw_page, extract_raw_pages
from .ingest import (
    IngestError,
    PageInfo,
    PdfMeta,
    ingest_pdf,
    open_pdf,
    render_page_image,
)

__all__ = [
    "IngestError",
    "PageInfo",
    "PdfMeta",
    "extract_raw_page",
    "extract_raw_pages",
    "ingest_pdf",
    "open_pdf",
    "render_page_image",
]
