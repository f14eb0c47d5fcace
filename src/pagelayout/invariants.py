"""Token accounting checks between pipeline stages.

Degenerate input is never an error in this package; it is dropped or read
conservatively.  The checks here guard against *programming* defects: a
stage that loses, duplicates or reorders tokens.  A failed check raises
:class:`InvariantViolation`, which callers must not swallow.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from .models import Column, Line, Token


class InvariantViolation(RuntimeError):
    """Raised when a stage breaks token accounting (a bug, not bad data)."""


def _describe(counter: Counter) -> str:
    items = sorted(counter.items(), key=lambda kv: (kv[0].baseline_y, kv[0].baseline_x))
    return ", ".join(f"{t.text!r}x{n}" for t, n in items[:5])


def check_lines_conserve_tokens(tokens: Iterable[Token], lines: Sequence[Line]) -> None:
    """Every token must land in exactly one line."""
    expected = Counter(tokens)
    actual = Counter(t for line in lines for t in line.tokens)
    if expected == actual:
        return
    missing = expected - actual
    extra = actual - expected
    raise InvariantViolation(
        f"line clustering lost {sum(missing.values())} token(s) [{_describe(missing)}] "
        f"and duplicated {sum(extra.values())} token(s) [{_describe(extra)}]"
    )


def check_lines_ordered(lines: Sequence[Line]) -> None:
    """Lines run top to bottom; tokens inside a line run left to right."""
    for prev, cur in zip(lines, lines[1:]):
        if cur.baseline_y > prev.baseline_y:
            raise InvariantViolation(
                f"line at y={cur.baseline_y} emitted after line at y={prev.baseline_y}"
            )
    for line in lines:
        xs = [t.baseline_x for t in line.tokens]
        if xs != sorted(xs):
            raise InvariantViolation(
                f"tokens of line at y={line.baseline_y} not sorted by x: {xs}"
            )


def check_columns_partition(line: Line, columns: Sequence[Column]) -> None:
    """Columns must cover the line's tokens exactly, in order, none empty."""
    if any(not col.tokens for col in columns):
        raise InvariantViolation(f"empty column in line at y={line.baseline_y}")
    flattened = tuple(t for col in columns for t in col.tokens)
    if flattened != line.tokens:
        raise InvariantViolation(
            f"columns of line at y={line.baseline_y} do not partition its "
            f"{len(line.tokens)} token(s) (got {len(flattened)})"
        )
