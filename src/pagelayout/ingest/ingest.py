"""PDF access for the layout engine: file checks, page sizes, page images.

Everything that touches ``pdfplumber.open()`` or ``Page.to_image()`` goes
through :func:`open_pdf`, so a bad input file is reported once, as an
:class:`IngestError`, before any layout work starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pdfplumber
from PIL import Image

log = logging.getLogger(__name__)


class IngestError(Exception):
    """The PDF is missing, unreadable or does not permit text extraction."""


@dataclass
class PageInfo:
    """Size of one page in PDF points (1/72 in)."""

    index: int
    width: float
    height: float

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "width": round(self.width, 3),
            "height": round(self.height, 3),
        }


@dataclass
class PdfMeta:
    """What :func:`ingest_pdf` learned about a file.

    The PDF is closed again by the time this is returned.
    """

    path: Path
    num_pages: int
    pages: List[PageInfo] = field(default_factory=list)
    file_size_bytes: int = 0
    pdf_metadata: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    def page(self, index: int) -> PageInfo:
        """Size of the zero-based page *index* (``IndexError`` past the end)."""
        return self.pages[index]

    def to_dict(self) -> dict:
        d: dict = {
            "path": str(self.path),
            "num_pages": self.num_pages,
            "file_size_bytes": self.file_size_bytes,
            "pages": [p.to_dict() for p in self.pages],
        }
        if self.pdf_metadata:
            d["pdf_metadata"] = self.pdf_metadata
        if self.error:
            d["error"] = self.error
        return d


# ── File checks ────────────────────────────────────────────────────────


def _check_path(path: Path) -> None:
    if not path.exists():
        raise IngestError(f"File not found: {path}")
    if not path.is_file():
        raise IngestError(f"Not a file: {path}")
    if path.suffix.lower() != ".pdf":
        raise IngestError(f"Not a PDF (suffix={path.suffix!r}): {path}")
    if path.stat().st_size == 0:
        raise IngestError(f"Empty file: {path}")


def _require_text_access(pdf, path: Path) -> None:
    # pdfminer clears is_extractable on documents whose permissions forbid
    # copying text, which is the only thing this package needs.
    doc = getattr(pdf, "doc", None)
    if doc is not None and getattr(doc, "is_extractable", True) is False:
        raise IngestError(f"PDF is password-protected or copy-restricted: {path}")


def _info_to_str(info: dict) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for key, value in info.items():
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        out[str(key)] = "" if value is None else str(value)
    return out


# ── Public API ─────────────────────────────────────────────────────────


def open_pdf(pdf_path: Path | str):
    """Check *pdf_path* and open it with pdfplumber (use as a context manager)."""
    path = Path(pdf_path)
    _check_path(path)
    try:
        return pdfplumber.open(path)
    except Exception as exc:
        raise IngestError(f"Cannot open PDF: {exc}") from exc


def ingest_pdf(pdf_path: Path | str) -> PdfMeta:
    """Read page count, page sizes and the info dictionary of *pdf_path*.

    Raises
    ------
    IngestError
        When the file fails the path checks, cannot be parsed, or forbids
        text extraction.
    """
    path = Path(pdf_path)
    try:
        with open_pdf(path) as pdf:
            _require_text_access(pdf, path)
            pages = [
                PageInfo(index=i, width=float(p.width), height=float(p.height))
                for i, p in enumerate(pdf.pages)
            ]
            info = _info_to_str(pdf.metadata or {})
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"Cannot open PDF: {exc}") from exc

    meta = PdfMeta(
        path=path.resolve(),
        num_pages=len(pages),
        pages=pages,
        file_size_bytes=path.stat().st_size,
        pdf_metadata=info,
    )
    log.info("Ingested %s: %d pages", path.name, meta.num_pages)
    return meta


def render_page_image(
    pdf_path: Path | str,
    page_num: int,
    resolution: int = 150,
) -> Image.Image:
    """Rasterise zero-based page *page_num* to an RGB image at *resolution* DPI.

    Used as the background of layout overlays.
    """
    with open_pdf(pdf_path) as pdf:
        img = pdf.pages[page_num].to_image(resolution=resolution).original.copy()
    return img if img.mode == "RGB" else img.convert("RGB")
