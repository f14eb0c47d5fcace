from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..config import LayoutConfig
from ..layout.columns import segment_columns
from ..models import Line, Region

# Line outline colour per region
REGION_COLORS = {
    Region.header: (255, 0, 0, 200),  # Red
    Region.body: (0, 180, 0, 150),  # Green
    Region.footer: (0, 0, 255, 200),  # Blue
}

# Palette for columns, cycled left to right
COLUMN_COLORS = [
    (255, 165, 0, 180),  # Orange
    (128, 0, 128, 180),  # Purple
    (0, 200, 200, 180),  # Cyan
    (255, 105, 180, 180),  # Pink
    (139, 69, 19, 180),  # Brown
]


def _to_image_rect(
    bbox: Tuple[float, float, float, float], page_height: float, scale: float
) -> Tuple[float, float, float, float]:
    """PDF user-space bbox (y up) → scaled image rect (y down)."""
    x0, yb, x1, yt = bbox
    return (x0 * scale, (page_height - yt) * scale, x1 * scale, (page_height - yb) * scale)


def _load_font(font_size: int):
    try:
        return ImageFont.truetype("arial.ttf", font_size)
    except (OSError, IOError):
        return ImageFont.load_default()


def _draw_label(
    draw: ImageDraw.ImageDraw,
    x: float,
    y: float,
    label: str,
    color: tuple,
    font,
    font_size: int,
    bg_alpha: int,
) -> None:
    """Draw *label* just above (x, y) on a white backing box."""
    pos = (x, y - font_size - 2)
    bbox = draw.textbbox(pos, label, font=font)
    draw.rectangle(
        (bbox[0] - 1, bbox[1] - 1, bbox[2] + 1, bbox[3] + 1),
        fill=(255, 255, 255, bg_alpha),
    )
    draw.text(pos, label, fill=(color[0], color[1], color[2]), font=font)


def draw_layout_overlay(
    page_width: float,
    page_height: float,
    lines: Iterable[Line],
    out_path: Path,
    scale: float = 1.0,
    background: Optional[Image.Image] = None,
    cfg: LayoutConfig | None = None,
) -> Path:
    """Render lines and columns as an overlay PNG for tuning thresholds.

    Every line is outlined in its region colour; every column of a
    multi-column line is outlined from :data:`COLUMN_COLORS` and labelled
    ``L{line}.C{column}`` so it maps back to the grid row cells.

    Args:
        page_width: Page width in PDF points
        page_height: Page height in PDF points
        lines: Region-tagged lines from the pipeline
        out_path: Destination PNG path
        scale: PDF-to-pixel scale factor
        background: Optional rendered page image
        cfg: LayoutConfig (column thresholds and overlay knobs)
    """
    if cfg is None:
        cfg = LayoutConfig()

    img_w = max(1, int(page_width * scale))
    img_h = max(1, int(page_height * scale))
    if background is not None:
        img = background.convert("RGBA")
        if img.size != (img_w, img_h):
            img = img.resize((img_w, img_h))
    else:
        img = Image.new("RGBA", (img_w, img_h), (255, 255, 255, 255))

    overlay = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay, "RGBA")

    font_size = max(cfg.overlay_label_font_floor, int(cfg.overlay_label_font_base * scale))
    font = _load_font(font_size)

    for line_no, line in enumerate(lines):
        if not line.tokens:
            continue
        color = REGION_COLORS[line.region]
        rect = _to_image_rect(line.bbox(), page_height, scale)
        draw.rectangle(rect, outline=color, width=cfg.overlay_line_outline_width)

        columns = segment_columns(line, cfg)
        if len(columns) < 2:
            continue
        for col_no, col in enumerate(columns):
            col_color = COLUMN_COLORS[col_no % len(COLUMN_COLORS)]
            crect = _to_image_rect(col.bbox(), page_height, scale)
            draw.rectangle(
                crect, outline=col_color, width=cfg.overlay_column_outline_width
            )
            _draw_label(
                draw,
                crect[0],
                crect[1],
                f"L{line_no}.C{col_no}",
                col_color,
                font,
                font_size,
                cfg.overlay_label_bg_alpha,
            )

    img = Image.alpha_composite(img, overlay)
    out_path = Path(out_path)
    img.save(out_path, format="PNG")
    return out_path
