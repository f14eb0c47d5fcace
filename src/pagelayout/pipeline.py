"""Pipeline stage infrastructure: timing, cancellation, and per-page results.

Provides the canonical six-stage flow for one page:

    normalize → lines → regions → columns → blocks → assemble

Every stage produces a :class:`StageResult` that is attached to the
:class:`PageResult`.  Stages are pure in-memory transformations, so a page
can be abandoned between any two of them (see :func:`run_stage`) without
touching any other page.

:func:`run_document` fans pages out over a fixed-size thread pool, one page
per task, and reassembles the results by page index once every worker is
done.  :func:`run_pdf` adds the pdfplumber page decoder in front.
"""

from __future__ import annotations

import logging
import threading
import time
import traceback
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence

from .config import LayoutConfig
from .invariants import InvariantViolation
from .layout import (
    build_block,
    classify_lines,
    cluster_lines,
    group_blocks,
    normalize_tokens,
    segment_columns,
)
from .models import Document, GridRow, Line, Page, RawPage, Token

logger = logging.getLogger("pagelayout.pipeline")

# Canonical stage sequence.
STAGE_ORDER: List[str] = [
    "normalize",
    "lines",
    "regions",
    "columns",
    "blocks",
    "assemble",
]

ProgressCallback = Callable[[int, int, int], None]


class PipelineCancelled(Exception):
    """Raised between stages when the caller's cancel event is set."""

    def __init__(self, page_index: int, stage: str) -> None:
        super().__init__(f"page {page_index} cancelled before stage {stage!r}")
        self.page_index = page_index
        self.stage = stage


# ── Stage result ───────────────────────────────────────────────────────


@dataclass
class StageResult:
    """Outcome record for a single pipeline stage."""

    stage: str
    status: str = "success"  # "success" | "failed"
    duration_ms: int = 0
    counts: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize stage result to a JSON-compatible dict."""
        d: Dict[str, Any] = {
            "stage": self.stage,
            "status": self.status,
            "duration_ms": self.duration_ms,
        }
        if self.counts:
            d["counts"] = self.counts
        if self.error is not None:
            d["error"] = self.error
        return d


# ── Stage context manager ──────────────────────────────────────────────


@contextmanager
def run_stage(
    stage: str,
    page_index: int = 0,
    cancel_event: threading.Event | None = None,
) -> Generator[StageResult, None, None]:
    """Context manager that wraps a pipeline stage with timing + cancellation.

    Usage::

        with run_stage("lines", page_index, cancel_event) as sr:
            lines = cluster_lines(tokens, cfg)
            sr.counts["lines"] = len(lines)

    Raises :class:`PipelineCancelled` before the body runs when
    *cancel_event* is set.  Exceptions from the body mark the stage
    ``"failed"`` and propagate.
    """
    if cancel_event is not None and cancel_event.is_set():
        raise PipelineCancelled(page_index, stage)

    sr = StageResult(stage=stage)
    t0 = time.perf_counter()
    try:
        yield sr
    except Exception as exc:
        sr.status = "failed"
        sr.error = {
            "type": type(exc).__name__,
            "message": str(exc),
            "stack": traceback.format_exc(),
        }
        raise
    finally:
        sr.duration_ms = int((time.perf_counter() - t0) * 1000)


# ── Page-level result container ────────────────────────────────────────


@dataclass
class PageResult:
    """Structured result from :func:`run_page` for a single page.

    Keeps the intermediate artefacts (normalised tokens, region-tagged
    lines) next to the final :class:`Page` so overlays and diagnostics
    never have to recompute them.
    """

    page_index: int = 0
    page_width: float = 0.0
    page_height: float = 0.0

    stages: Dict[str, StageResult] = field(default_factory=dict)

    tokens: List[Token] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    page: Page = field(default_factory=Page)

    @property
    def counts(self) -> Dict[str, int]:
        """Summary counts across the whole page."""
        regions: Dict[str, int] = {}
        for line in self.lines:
            regions[line.region.value] = regions.get(line.region.value, 0) + 1
        blocks = self.page.all_blocks()
        return {
            "tokens": len(self.tokens),
            "lines": len(self.lines),
            "header_lines": regions.get("header", 0),
            "body_lines": regions.get("body", 0),
            "footer_lines": regions.get("footer", 0),
            "blocks": len(blocks),
            "grid_rows": sum(1 for b in blocks if isinstance(b, GridRow)),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible manifest entry."""
        return {
            "page_index": self.page_index,
            "page_width": round(self.page_width, 3),
            "page_height": round(self.page_height, 3),
            "counts": self.counts,
            "stages": {name: sr.to_dict() for name, sr in self.stages.items()},
            "page": self.page.to_dict(),
        }


@dataclass
class DocumentResult:
    """Per-page results in page-index order plus the run's configuration."""

    pages: List[PageResult] = field(default_factory=list)
    cancelled_pages: List[int] = field(default_factory=list)
    config: Optional[LayoutConfig] = None

    @property
    def document(self) -> Document:
        """The reconstructed pages as a :class:`Document`."""
        return Document(pages=[pr.page for pr in self.pages])

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible manifest."""
        d: Dict[str, Any] = {
            "pages": [pr.to_dict() for pr in self.pages],
            "cancelled_pages": list(self.cancelled_pages),
        }
        if self.config is not None:
            d["config"] = dict(vars(self.config))
        return d


# ── Single-page runner ─────────────────────────────────────────────────


def run_page(
    raw_page: RawPage,
    cfg: LayoutConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> PageResult:
    """Run the six layout stages on one page.

    Parameters
    ----------
    raw_page : RawPage
        Decoded tokens and page size.
    cfg : LayoutConfig, optional
        Thresholds; defaults to ``LayoutConfig()``.
    cancel_event : threading.Event, optional
        Checked before every stage.

    Returns
    -------
    PageResult

    Raises
    ------
    PipelineCancelled
        When *cancel_event* is set before a stage starts.
    InvariantViolation
        When a stage breaks token accounting (a bug, never bad data).
    """
    if cfg is None:
        cfg = LayoutConfig()

    idx = raw_page.page_index
    pr = PageResult(
        page_index=idx,
        page_width=raw_page.page_width,
        page_height=raw_page.page_height,
    )

    with run_stage("normalize", idx, cancel_event) as sr:
        tokens = normalize_tokens(raw_page, cfg)
        sr.counts = {"tokens_raw": len(raw_page.tokens), "tokens_kept": len(tokens)}
    pr.stages[sr.stage] = sr
    pr.tokens = tokens

    with run_stage("lines", idx, cancel_event) as sr:
        lines = cluster_lines(tokens, cfg)
        sr.counts = {"lines": len(lines)}
    pr.stages[sr.stage] = sr

    with run_stage("regions", idx, cancel_event) as sr:
        lines = classify_lines(lines, raw_page.page_height, cfg)
        sr.counts = {
            region: sum(1 for ln in lines if ln.region.value == region)
            for region in ("header", "body", "footer")
        }
    pr.stages[sr.stage] = sr
    pr.lines = lines

    with run_stage("columns", idx, cancel_event) as sr:
        columns = [segment_columns(ln, cfg) for ln in lines]
        sr.counts = {
            "columns": sum(len(c) for c in columns),
            "multi_column_lines": sum(1 for c in columns if len(c) > 1),
        }
    pr.stages[sr.stage] = sr

    with run_stage("blocks", idx, cancel_event) as sr:
        blocks = [build_block(cols, cfg) for cols in columns]
        sr.counts = {"blocks": sum(1 for b in blocks if b is not None)}
    pr.stages[sr.stage] = sr

    with run_stage("assemble", idx, cancel_event) as sr:
        page = group_blocks(lines, blocks, idx)
        sr.counts = {
            "header_blocks": len(page.header_blocks),
            "body_blocks": len(page.body_blocks),
            "footer_blocks": len(page.footer_blocks),
        }
    pr.stages[sr.stage] = sr
    pr.page = page

    logger.debug("run_page %d: %s", idx, pr.counts)
    return pr


def reconstruct_page(raw_page: RawPage, cfg: LayoutConfig | None = None) -> Page:
    """Shortcut for ``run_page(raw_page, cfg).page``."""
    return run_page(raw_page, cfg).page


# ── Document-level runner ──────────────────────────────────────────────


def run_document(
    raw_pages: Sequence[RawPage],
    cfg: LayoutConfig | None = None,
    max_workers: int | None = None,
    progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> DocumentResult:
    """Reconstruct many pages on a fixed-size worker pool.

    Parameters
    ----------
    raw_pages : sequence of RawPage
        Pages in any order.
    cfg : LayoutConfig, optional
        Shared, read-only configuration.
    max_workers : int, optional
        Pool size; defaults to ``cfg.max_workers``.
    progress : callable, optional
        Called as ``progress(done, total, page_index)`` after each page
        finishes.
    cancel_event : threading.Event, optional
        When set, pages still in flight stop at their next stage boundary
        and are listed in :attr:`DocumentResult.cancelled_pages`.

    Returns
    -------
    DocumentResult
        Completed pages sorted by page index.

    Raises
    ------
    InvariantViolation
        Re-raised from the first page that hits one; pages not yet started
        are cancelled.
    """
    if cfg is None:
        cfg = LayoutConfig()
    workers = max_workers or cfg.max_workers

    dr = DocumentResult(config=cfg)
    total = len(raw_pages)
    if total == 0:
        return dr

    finished: Dict[int, PageResult] = {}
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures: Dict[Future, int] = {
            pool.submit(run_page, rp, cfg, cancel_event): pos
            for pos, rp in enumerate(raw_pages)
        }
        done = 0
        for fut in as_completed(futures):
            pos = futures[fut]
            page_index = raw_pages[pos].page_index
            try:
                finished[pos] = fut.result()
            except PipelineCancelled as exc:
                logger.info("run_document: %s", exc)
                dr.cancelled_pages.append(page_index)
                continue
            except InvariantViolation:
                logger.error(
                    "run_document page %d: invariant violation", page_index
                )
                for other in futures:
                    other.cancel()
                raise
            done += 1
            if progress is not None:
                progress(done, total, page_index)

    dr.pages = [
        finished[pos]
        for pos in sorted(finished, key=lambda p: (raw_pages[p].page_index, p))
    ]
    dr.cancelled_pages.sort()

    logger.info(
        "run_document: %d/%d pages reconstructed, %d cancelled",
        len(dr.pages),
        total,
        len(dr.cancelled_pages),
    )
    return dr


def run_pdf(
    pdf_path: Path | str,
    pages: List[int] | None = None,
    cfg: LayoutConfig | None = None,
    max_workers: int | None = None,
    progress: ProgressCallback | None = None,
    cancel_event: threading.Event | None = None,
) -> DocumentResult:
    """Decode *pdf_path* with pdfplumber and reconstruct the selected pages.

    *pages* are 0-based indices; ``None`` means all pages.
    """
    from .ingest import extract_raw_pages

    if cfg is None:
        cfg = LayoutConfig()
    raw_pages = extract_raw_pages(pdf_path, pages, cfg)
    return run_document(
        raw_pages,
        cfg,
        max_workers=max_workers,
        progress=progress,
        cancel_event=cancel_event,
    )
