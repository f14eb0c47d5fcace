from __future__ import annotations

from typing import List, Sequence

from ..config import LayoutConfig
from ..models import Block, Column, GridCell, GridRow, Paragraph, Token
from .columns import token_gap


def join_tokens(tokens: Sequence[Token], cfg: LayoutConfig) -> str:
    """Join tokens left to right into one text run.

    A single space goes in where the measured gap exceeds
    ``cfg.word_break_gap`` and neither side already has whitespace at the
    seam.  Tighter gaps (kerning, split ligatures) join with no space.
    """
    if not tokens:
        return ""
    parts: List[str] = [tokens[0].text]
    for prev, cur in zip(tokens, tokens[1:]):
        if (
            token_gap(prev, cur) > cfg.word_break_gap
            and not prev.text[-1:].isspace()
            and not cur.text[:1].isspace()
        ):
            parts.append(" ")
        parts.append(cur.text)
    return "".join(parts)


def paragraph_indent(x: float, cfg: LayoutConfig) -> float:
    """Map a PDF x-coordinate to output indentation units (never negative)."""
    return max(0.0, x * cfg.indent_scale)


def width_shares(columns: Sequence[Column], cfg: LayoutConfig) -> List[float]:
    """Per-column width shares for a grid row."""
    n = len(columns)
    if cfg.grid_width_mode == "proportional":
        spans = [col.span for col in columns]
        total = sum(spans)
        if total > 0 and all(s > 0 for s in spans):
            return [s / total for s in spans]
    return [1.0 / n] * n


def build_paragraph(column: Column, cfg: LayoutConfig) -> Paragraph:
    first = column.tokens[0]
    return Paragraph(
        text=join_tokens(column.tokens, cfg),
        indent=paragraph_indent(first.baseline_x, cfg),
        font_size=first.font_size,
    )


def build_grid_row(columns: Sequence[Column], cfg: LayoutConfig) -> GridRow:
    shares = width_shares(columns, cfg)
    return GridRow(
        cells=tuple(
            GridCell(
                text=join_tokens(col.tokens, cfg),
                width_share=share,
                font_size=col.tokens[0].font_size,
            )
            for col, share in zip(columns, shares)
        )
    )


def build_block(columns: Sequence[Column], cfg: LayoutConfig) -> Block | None:
    """Paragraph for a single column, GridRow for two or more.

    Returns ``None`` for a line with no columns (no tokens).
    """
    if not columns:
        return None
    if len(columns) == 1:
        return build_paragraph(columns[0], cfg)
    return build_grid_row(columns, cfg)
