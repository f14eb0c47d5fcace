from __future__ import annotations

from typing import List, Sequence

from ..config import LayoutConfig
from ..invariants import check_lines_conserve_tokens, check_lines_ordered
from ..models import Line, Token


def _reading_order_key(tok: Token) -> tuple:
    # Top of page first (PDF y grows upward), then left to right.
    return (-tok.baseline_y, tok.baseline_x)


def _close_line(cluster: List[Token]) -> Line:
    return Line(
        baseline_y=cluster[0].baseline_y,
        tokens=tuple(sorted(cluster, key=lambda t: t.baseline_x)),
    )


def cluster_lines(tokens: Sequence[Token], cfg: LayoutConfig) -> List[Line]:
    """Group tokens into horizontal lines, top to bottom.

    Tokens are walked in reading order.  A token joins the running cluster
    while its baseline is closer to the cluster's anchor baseline than
    ``max(font_size, previous.font_size) * cfg.line_tolerance_ratio``, so
    the snap distance follows the type size instead of a fixed pixel value.
    The anchor is the cluster's first (top-most) token.  This differs from
    snapping each token to the last one added (a running last-token snap):
    with a fixed anchor, a staircase of baselines each a little below the
    previous one splits into several lines instead of merging into one.

    Args:
        tokens: Normalised tokens of one page.
        cfg: LayoutConfig with ``line_tolerance_ratio``.

    Returns:
        Lines in non-increasing ``baseline_y`` order; tokens inside each
        line sorted by ``baseline_x``.  Every token appears in exactly one
        line.
    """
    if not tokens:
        return []

    ordered = sorted(tokens, key=_reading_order_key)

    lines: List[Line] = []
    cluster: List[Token] = [ordered[0]]
    for prev, tok in zip(ordered, ordered[1:]):
        tolerance = max(tok.font_size, prev.font_size) * cfg.line_tolerance_ratio
        if abs(tok.baseline_y - cluster[0].baseline_y) < tolerance:
            cluster.append(tok)
        else:
            lines.append(_close_line(cluster))
            cluster = [tok]
    lines.append(_close_line(cluster))

    check_lines_conserve_tokens(tokens, lines)
    check_lines_ordered(lines)
    return lines
