from __future__ import annotations

import math
from dataclasses import replace
from typing import List, Sequence

from ..config import LayoutConfig
from ..models import Line, Region


def classify_region(baseline_y: float, page_height: float, cfg: LayoutConfig) -> Region:
    """Header above ``header_band``, footer below ``footer_band``, else body.

    Bands are fractions of *page_height*; an unusable page height puts
    everything in the body.
    """
    if not math.isfinite(page_height) or page_height <= 0:
        return Region.body
    if baseline_y > cfg.header_band * page_height:
        return Region.header
    if baseline_y < cfg.footer_band * page_height:
        return Region.footer
    return Region.body


def classify_lines(
    lines: Sequence[Line], page_height: float, cfg: LayoutConfig
) -> List[Line]:
    """Return copies of *lines* tagged with their region, order unchanged."""
    return [
        replace(line, region=classify_region(line.baseline_y, page_height, cfg))
        for line in lines
    ]
