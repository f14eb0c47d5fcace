"""pdfplumber page decoder: words on a PDF page → :class:`RawPage`.

Each pdfplumber word becomes one :class:`RawToken`.  The token transform is
the placement matrix of the word's first glyph rescaled to the word's font
size, so its ``(tx, ty)`` is the baseline origin in PDF user space and
``hypot(a, b)`` is the rendered font size.  Words whose glyphs carry no
matrix fall back to an axis-aligned matrix built from the word's font size
and bottom edge.

No filtering happens here: degenerate runs are the layout normaliser's
business.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from ..config import LayoutConfig
from ..models import RawPage, RawToken
from .ingest import IngestError, open_pdf

log = logging.getLogger(__name__)


def _build_extract_words_kwargs(cfg: LayoutConfig) -> dict[str, Any]:
    """Build ``pdfplumber.Page.extract_words`` keyword arguments."""
    return {
        "x_tolerance": cfg.tocr_x_tolerance,
        "y_tolerance": cfg.tocr_y_tolerance,
        "extra_attrs": ["size"],
        "return_chars": True,
    }


def _word_transform(w: dict, page_h: float) -> Tuple[float, ...]:
    """Placement matrix of the word's first glyph, scaled to the word's size.

    pdfplumber's glyph ``matrix`` is the text matrix times the CTM; the
    ``Tf`` font size is not in it, so ``/F1 12 Tf 1 0 0 1 x y Tm`` yields a
    unit matrix.  The direction and origin come from the matrix and the
    magnitude from the word's ``size``.
    """
    size = float(w.get("size", 0.0) or 0.0)
    chars = w.get("chars") or []
    matrix = chars[0].get("matrix") if chars else None
    if matrix is not None and len(matrix) == 6:
        a, b, c, d, tx, ty = (float(v) for v in matrix)
        norm = math.hypot(a, b)
        if size > 0 and norm > 0:
            k = size / norm
            return (a * k, b * k, c * k, d * k, tx, ty)
        if norm > 0:
            return (a, b, c, d, tx, ty)
    baseline_y = page_h - float(w.get("bottom", 0.0))
    return (size, 0.0, 0.0, size, float(w.get("x0", 0.0)), baseline_y)


def _word_to_raw_token(w: dict, page_h: float) -> RawToken:
    """Convert a pdfplumber word dict → RawToken."""
    x0 = float(w.get("x0", 0.0))
    x1 = float(w.get("x1", 0.0))
    top = float(w.get("top", 0.0))
    bottom = float(w.get("bottom", 0.0))
    return RawToken(
        text=w.get("text", ""),
        transform=_word_transform(w, page_h),
        width=x1 - x0,
        height=bottom - top,
    )


def extract_raw_page(page, page_index: int, cfg: LayoutConfig | None = None) -> RawPage:
    """Decode an open ``pdfplumber.Page`` into a :class:`RawPage`."""
    if cfg is None:
        cfg = LayoutConfig()
    page_w, page_h = float(page.width), float(page.height)
    words = page.extract_words(**_build_extract_words_kwargs(cfg))
    tokens = tuple(_word_to_raw_token(w, page_h) for w in words)
    log.debug("page %d: %d words extracted", page_index, len(tokens))
    return RawPage(
        page_index=page_index,
        page_width=page_w,
        page_height=page_h,
        tokens=tokens,
    )


def extract_raw_pages(
    pdf_path: Path | str,
    pages: Optional[Sequence[int]] = None,
    cfg: LayoutConfig | None = None,
) -> List[RawPage]:
    """Decode the selected 0-based *pages* of *pdf_path* (``None`` = all).

    Raises
    ------
    IngestError
        When the file cannot be opened or a page index is out of range.
    """
    if cfg is None:
        cfg = LayoutConfig()
    with open_pdf(pdf_path) as pdf:
        n = len(pdf.pages)
        indices = list(range(n)) if pages is None else list(pages)
        bad = [i for i in indices if not 0 <= i < n]
        if bad:
            raise IngestError(f"Page index out of range {bad} (document has {n} pages)")
        raw_pages = [extract_raw_page(pdf.pages[i], i, cfg) for i in indices]
    log.info(
        "Extracted %d page(s), %d tokens from %s",
        len(raw_pages),
        sum(len(rp.tokens) for rp in raw_pages),
        Path(pdf_path).name,
    )
    return raw_pages
