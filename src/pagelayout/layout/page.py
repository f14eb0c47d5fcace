from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from ..config import LayoutConfig
from ..models import Block, Line, Page, Region
from .blocks import build_block
from .columns import segment_columns


def line_to_block(line: Line, cfg: LayoutConfig) -> Block | None:
    """Segment *line* into columns and build its block."""
    return build_block(segment_columns(line, cfg), cfg)


def group_blocks(
    lines: Sequence[Line],
    blocks: Sequence[Optional[Block]],
    page_index: int = 0,
) -> Page:
    """Place each line's block in the header, body or footer list.

    *blocks* is parallel to *lines*; ``None`` entries (empty lines) are
    skipped.  Each list keeps the lines' top-to-bottom order and nothing
    moves or merges across list boundaries.
    """
    if len(lines) != len(blocks):
        raise ValueError(f"{len(lines)} lines but {len(blocks)} blocks")
    groups: Dict[Region, List[Block]] = {r: [] for r in Region}
    for line, block in zip(lines, blocks):
        if block is not None:
            groups[line.region].append(block)
    return Page(
        page_index=page_index,
        header_blocks=tuple(groups[Region.header]),
        body_blocks=tuple(groups[Region.body]),
        footer_blocks=tuple(groups[Region.footer]),
    )


def assemble_page(
    lines: Sequence[Line], cfg: LayoutConfig, page_index: int = 0
) -> Page:
    """Build the page record from region-tagged lines."""
    return group_blocks(lines, [line_to_block(ln, cfg) for ln in lines], page_index)
