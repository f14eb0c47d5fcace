from __future__ import annotations

from typing import List

from ..config import LayoutConfig
from ..invariants import check_columns_partition
from ..models import Column, Line, Token


def token_gap(prev: Token, cur: Token) -> float:
    """Horizontal whitespace between the end of *prev* and the start of *cur*."""
    return cur.baseline_x - prev.x1


def column_gap_threshold(prev: Token, cfg: LayoutConfig) -> float:
    """Gap (pts) a space after *prev* must exceed to start a new column.

    The larger of the absolute floor and a multiple of *prev*'s average
    character width: large type is governed by the multiple, small type by
    the floor.
    """
    return max(cfg.column_gap_abs, prev.char_width * cfg.column_gap_char_mult)


def segment_columns(line: Line, cfg: LayoutConfig) -> List[Column]:
    """Split a line into columns at large horizontal gaps.

    Args:
        line: Line with tokens sorted by ``baseline_x``.
        cfg: LayoutConfig with ``column_gap_abs`` and ``column_gap_char_mult``.

    Returns:
        Columns in left-to-right order that partition the line's tokens.
        A line without large gaps yields exactly one column; an empty line
        yields none.
    """
    if not line.tokens:
        return []

    columns: List[Column] = []
    current: List[Token] = [line.tokens[0]]
    for prev, cur in zip(line.tokens, line.tokens[1:]):
        if token_gap(prev, cur) > column_gap_threshold(prev, cfg):
            columns.append(Column(tokens=tuple(current)))
            current = [cur]
        else:
            current.append(cur)
    columns.append(Column(tokens=tuple(current)))

    check_columns_partition(line, columns)
    return columns
