"""Layout reconstruction stages.

Each stage is a pure function of the previous stage's output:

    normalize_tokens → cluster_lines → classify_lines → segment_columns
    → build_block → assemble_page
"""

from .blocks import build_block, build_grid_row, build_paragraph, join_tokens
from .columns import column_gap_threshold, segment_columns, token_gap
from .lines import cluster_lines
from .normalize import font_size_from_transform, normalize_token, normalize_tokens
from .page import assemble_page, group_blocks, line_to_block
from .regions import classify_lines, classify_region

__all__ = [
    "assemble_page",
    "build_block",
    "build_grid_row",
    "build_paragraph",
    "classify_lines",
    "classify_region",
    "cluster_lines",
    "column_gap_threshold",
    "font_size_from_transform",
    "group_blocks",
    "join_tokens",
    "line_to_block",
    "normalize_token",
    "normalize_tokens",
    "segment_columns",
    "token_gap",
]
