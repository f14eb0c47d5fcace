from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union


def _opt_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _float_or_zero(value) -> float:
    v = _opt_float(value)
    return 0.0 if v is None else v


def _as_transform(value) -> Tuple:
    # Elements are checked during normalisation, which drops the token.
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return ()


@dataclass(frozen=True)
class RawToken:
    """A text run as delivered by the page decoder, before normalisation.

    ``transform`` is the placement matrix ``(a, b, c, d, tx, ty)`` in PDF
    user space (origin bottom-left, y grows upward).
    """

    text: str
    transform: Tuple[float, ...]
    width: Optional[float] = None
    height: Optional[float] = None

    def to_dict(self) -> dict:
        """Serialize to the camelCase input contract."""
        d: dict = {"text": self.text, "transform": list(self.transform)}
        if self.width is not None:
            d["width"] = self.width
        if self.height is not None:
            d["height"] = self.height
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "RawToken":
        """Deserialize from an input-contract token dict.

        A width or height that is not a number becomes ``None`` and a
        transform that is not a list becomes ``()``; normalisation then
        estimates the width or drops the run.
        """
        return cls(
            text=d.get("text", ""),
            transform=_as_transform(d.get("transform")),
            width=_opt_float(d.get("width")),
            height=_opt_float(d.get("height")),
        )


@dataclass(frozen=True)
class RawPage:
    """One page of raw tokens plus the page dimensions in points."""

    page_index: int
    page_width: float
    page_height: float
    tokens: Tuple[RawToken, ...] = ()

    def to_dict(self) -> dict:
        """Serialize to the camelCase input contract."""
        return {
            "pageIndex": self.page_index,
            "pageWidth": self.page_width,
            "pageHeight": self.page_height,
            "tokens": [t.to_dict() for t in self.tokens],
        }

    @classmethod
    def from_dict(cls, d: dict, page_index: int = 0) -> "RawPage":
        """Deserialize from an input-contract page dict.

        *page_index* is used when the dict carries no usable ``pageIndex``.
        Page sizes that are not numbers become ``0.0`` and entries of
        ``tokens`` that are not objects are skipped.
        """
        try:
            index = int(d.get("pageIndex", page_index))
        except (TypeError, ValueError):
            index = page_index
        return cls(
            page_index=index,
            page_width=_float_or_zero(d.get("pageWidth")),
            page_height=_float_or_zero(d.get("pageHeight")),
            tokens=tuple(
                RawToken.from_dict(t) for t in d.get("tokens") or [] if isinstance(t, dict)
            ),
        )


@dataclass(frozen=True)
class Token:
    """A normalised text run: baseline origin, advance width and font size."""

    text: str
    baseline_x: float
    baseline_y: float
    width: float
    font_size: float
    page_index: int = 0

    @property
    def x1(self) -> float:
        """Right edge of the run in points."""
        return self.baseline_x + self.width

    @property
    def char_width(self) -> float:
        """Average glyph advance in points."""
        return self.width / max(1, len(self.text))

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "text": self.text,
            "baseline_x": round(self.baseline_x, 3),
            "baseline_y": round(self.baseline_y, 3),
            "width": round(self.width, 3),
            "font_size": round(self.font_size, 3),
            "page_index": self.page_index,
        }


class Region(str, Enum):
    """Vertical page region a line belongs to."""

    body = "body"
    header = "header"
    footer = "footer"


@dataclass(frozen=True)
class Line:
    """Tokens sharing one baseline, ordered left to right."""

    baseline_y: float
    tokens: Tuple[Token, ...] = ()
    region: Region = Region.body

    def text(self) -> str:
        """Token text joined with single spaces (diagnostics only)."""
        return " ".join(t.text for t in self.tokens)

    def bbox(self) -> Tuple[float, float, float, float]:
        """Horizontal extent plus font-size-derived vertical extent.

        Returned as ``(x0, y_bottom, x1, y_top)`` in PDF user space.
        """
        if not self.tokens:
            return (0, 0, 0, 0)
        return _tokens_bbox(self.tokens)


@dataclass(frozen=True)
class Column:
    """A contiguous left-to-right run of a Line's tokens."""

    tokens: Tuple[Token, ...] = ()

    @property
    def x0(self) -> float:
        return self.tokens[0].baseline_x if self.tokens else 0.0

    @property
    def x1(self) -> float:
        return max(t.x1 for t in self.tokens) if self.tokens else 0.0

    @property
    def span(self) -> float:
        """Horizontal extent covered by the column's tokens."""
        return self.x1 - self.x0

    def bbox(self) -> Tuple[float, float, float, float]:
        """Bounding box as ``(x0, y_bottom, x1, y_top)`` in PDF user space."""
        if not self.tokens:
            return (0, 0, 0, 0)
        return _tokens_bbox(self.tokens)


def _tokens_bbox(tokens) -> Tuple[float, float, float, float]:
    # Descenders ~0.2em below the baseline, ascenders ~0.8em above.
    x0 = min(t.baseline_x for t in tokens)
    x1 = max(t.x1 for t in tokens)
    y0 = min(t.baseline_y - 0.2 * t.font_size for t in tokens)
    y1 = max(t.baseline_y + 0.8 * t.font_size for t in tokens)
    return (x0, y0, x1, y1)


@dataclass(frozen=True)
class Paragraph:
    """A single-column line rendered as an indented paragraph."""

    text: str
    indent: float
    font_size: float

    kind = "paragraph"

    def to_dict(self) -> dict:
        """Serialize to the output contract."""
        return {
            "kind": self.kind,
            "text": self.text,
            "indent": self.indent,
            "fontSize": self.font_size,
        }


@dataclass(frozen=True)
class GridCell:
    """One cell of a borderless grid row."""

    text: str
    width_share: float
    font_size: float = 0.0

    def to_dict(self) -> dict:
        """Serialize to the output contract."""
        return {
            "text": self.text,
            "widthShare": self.width_share,
            "fontSize": self.font_size,
        }


@dataclass(frozen=True)
class GridRow:
    """A multi-column line rendered as a one-row borderless table."""

    cells: Tuple[GridCell, ...]

    kind = "gridRow"

    def __post_init__(self) -> None:
        if len(self.cells) < 2:
            raise ValueError(
                f"GridRow needs at least 2 cells, got {len(self.cells)}"
            )

    def to_dict(self) -> dict:
        """Serialize to the output contract."""
        return {"kind": self.kind, "cells": [c.to_dict() for c in self.cells]}


Block = Union[Paragraph, GridRow]


def block_from_dict(d: dict) -> Block:
    """Rebuild a Paragraph or GridRow from its output-contract dict."""
    kind = d.get("kind")
    if kind == Paragraph.kind:
        return Paragraph(
            text=d.get("text", ""),
            indent=float(d.get("indent", 0.0)),
            font_size=float(d.get("fontSize", 0.0)),
        )
    if kind == GridRow.kind:
        return GridRow(
            cells=tuple(
                GridCell(
                    text=c.get("text", ""),
                    width_share=float(c.get("widthShare", 0.0)),
                    font_size=float(c.get("fontSize", 0.0)),
                )
                for c in d.get("cells", [])
            )
        )
    raise ValueError(f"Unknown block kind: {kind!r}")


def block_text(block: Block) -> str:
    """All text carried by *block*, cells separated by single spaces."""
    if isinstance(block, GridRow):
        return " ".join(c.text for c in block.cells)
    return block.text


@dataclass(frozen=True)
class Page:
    """Reconstructed page: header, body and footer blocks in reading order."""

    page_index: int = 0
    header_blocks: Tuple[Block, ...] = ()
    body_blocks: Tuple[Block, ...] = ()
    footer_blocks: Tuple[Block, ...] = ()

    def all_blocks(self) -> List[Block]:
        """Header, body and footer blocks concatenated."""
        return [*self.header_blocks, *self.body_blocks, *self.footer_blocks]

    def is_empty(self) -> bool:
        return not (self.header_blocks or self.body_blocks or self.footer_blocks)

    def to_dict(self) -> dict:
        """Serialize to the output contract."""
        return {
            "pageIndex": self.page_index,
            "headerBlocks": [b.to_dict() for b in self.header_blocks],
            "bodyBlocks": [b.to_dict() for b in self.body_blocks],
            "footerBlocks": [b.to_dict() for b in self.footer_blocks],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Page":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(
            page_index=int(d.get("pageIndex", 0)),
            header_blocks=tuple(block_from_dict(b) for b in d.get("headerBlocks", [])),
            body_blocks=tuple(block_from_dict(b) for b in d.get("bodyBlocks", [])),
            footer_blocks=tuple(block_from_dict(b) for b in d.get("footerBlocks", [])),
        )


@dataclass
class Document:
    """Pages in page-index order."""

    pages: List[Page] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {"pages": [p.to_dict() for p in self.pages]}

    @classmethod
    def from_dict(cls, d: dict) -> "Document":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(pages=[Page.from_dict(p) for p in d.get("pages", [])])
