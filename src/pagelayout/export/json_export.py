"""JSON export: reconstructed pages out, raw decoder pages in.

The output follows the page contract consumed by document writers::

    {"pages": [{"pageIndex", "headerBlocks", "bodyBlocks", "footerBlocks"}]}

The input side reads the decoder contract, either a single page object or
a list of them (or ``{"pages": [...]}``)::

    {"pageWidth", "pageHeight", "tokens": [{"text", "transform", "width"?, "height"?}]}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from ..models import Document, RawPage
from ..pipeline import DocumentResult

log = logging.getLogger(__name__)


def document_to_dict(document: Document) -> Dict[str, Any]:
    """Serialize *document* to the output contract."""
    return document.to_dict()


def write_document_json(
    document: Document | DocumentResult,
    out_path: Path,
    include_diagnostics: bool = False,
) -> Path:
    """Write *document* as pretty-printed UTF-8 JSON and return *out_path*.

    Passing a :class:`DocumentResult` with *include_diagnostics* writes the
    full manifest (stage timings, counts, config) instead of the bare
    output contract.
    """
    if isinstance(document, DocumentResult):
        payload = document.to_dict() if include_diagnostics else document.document.to_dict()
    else:
        payload = document_to_dict(document)

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    log.info("Wrote %d page(s) to %s", len(payload.get("pages", [])), out_path)
    return out_path


def raw_pages_from_obj(obj: Any) -> List[RawPage]:
    """Build RawPages from a decoded JSON value (page, list, or wrapper)."""
    if isinstance(obj, dict) and "pages" in obj:
        obj = obj["pages"]
    if isinstance(obj, dict):
        obj = [obj]
    if not isinstance(obj, list):
        raise ValueError(f"Expected a page object or list of pages, got {type(obj).__name__}")
    return [RawPage.from_dict(d, page_index=i) for i, d in enumerate(obj)]


def load_raw_pages(path: Path) -> List[RawPage]:
    """Read decoder-contract pages from a JSON file."""
    with open(path, encoding="utf-8") as f:
        return raw_pages_from_obj(json.load(f))
