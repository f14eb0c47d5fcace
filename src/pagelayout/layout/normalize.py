"""Token normalisation: raw decoder runs -> :class:`Token`.

Geometry that cannot be interpreted is treated as absent.  Nothing in here
raises for bad input; offending runs are dropped and counted.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import List, Optional, Tuple

from ..config import LayoutConfig
from ..models import RawPage, RawToken, Token

log = logging.getLogger(__name__)


def font_size_from_transform(transform) -> float:
    """Font size as the magnitude of the matrix's horizontal scale/shear.

    Returns ``nan`` when the transform is not six finite numbers.
    """
    try:
        if len(transform) != 6:
            return math.nan
        a, b = float(transform[0]), float(transform[1])
    except (TypeError, ValueError):
        return math.nan
    return math.hypot(a, b)


def _finite_origin(transform) -> Optional[Tuple[float, float]]:
    try:
        tx, ty = float(transform[4]), float(transform[5])
    except (TypeError, ValueError, IndexError):
        return None
    if not (math.isfinite(tx) and math.isfinite(ty)):
        return None
    return tx, ty


def normalize_token(
    raw: RawToken,
    cfg: LayoutConfig,
    page_index: int = 0,
    drops: Counter | None = None,
) -> Token | None:
    """Convert one raw run, or return ``None`` when it should be dropped.

    *drops*, when given, is incremented under the reason key.
    """
    text = raw.text if isinstance(raw.text, str) else ""
    if not text.strip():
        if drops is not None:
            drops["empty_text"] += 1
        return None

    font_size = font_size_from_transform(raw.transform)
    if not math.isfinite(font_size) or font_size <= 0:
        if drops is not None:
            drops["bad_font_size"] += 1
        return None

    origin = _finite_origin(raw.transform)
    if origin is None:
        if drops is not None:
            drops["bad_origin"] += 1
        return None

    width = raw.width
    if width is None or not math.isfinite(width) or width <= 0:
        width = len(text) * cfg.glyph_width_ratio * font_size
        if drops is not None:
            drops["width_estimated"] += 1

    return Token(
        text=text,
        baseline_x=origin[0],
        baseline_y=origin[1],
        width=float(width),
        font_size=font_size,
        page_index=page_index,
    )


def normalize_tokens(raw_page: RawPage, cfg: LayoutConfig) -> List[Token]:
    """Normalise every run of *raw_page*, dropping degenerate ones.

    Input order is preserved for the tokens that survive.
    """
    drops: Counter = Counter()
    tokens: List[Token] = []
    for raw in raw_page.tokens:
        tok = normalize_token(raw, cfg, raw_page.page_index, drops)
        if tok is not None:
            tokens.append(tok)

    if drops:
        log.debug(
            "page %d: %d/%d tokens kept (%s)",
            raw_page.page_index,
            len(tokens),
            len(raw_page.tokens),
            ", ".join(f"{k}={v}" for k, v in sorted(drops.items())),
        )
    return tokens
