"""Export module: JSON output of reconstructed pages and debug overlays.

Usage::

    from pagelayout.export import write_document_json
    write_document_json(result.document, Path("out/layout.json"))
"""

from .json_export import (
    document_to_dict,
    load_raw_pages,
    raw_pages_from_obj,
    write_document_json,
)
from .overlay import COLUMN_COLORS, REGION_COLORS, draw_layout_overlay

__all__ = [
    "COLUMN_COLORS",
    "REGION_COLORS",
    "document_to_dict",
    "draw_layout_overlay",
    "load_raw_pages",
    "raw_pages_from_obj",
    "write_document_json",
]
