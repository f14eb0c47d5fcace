"""Shared test fixtures for pagelayout."""

import pytest

from pagelayout.config import LayoutConfig
from pagelayout.models import Line, RawPage, RawToken, Region, Token

# ── Helpers ────────────────────────────────────────────────────────────


def make_token(
    text: str,
    x: float,
    y: float,
    width: float = 40.0,
    font_size: float = 12.0,
    page_index: int = 0,
) -> Token:
    """Create a normalised Token with sane defaults."""
    return Token(
        text=text,
        baseline_x=x,
        baseline_y=y,
        width=width,
        font_size=font_size,
        page_index=page_index,
    )


def make_raw_token(
    text: str,
    x: float,
    y: float,
    width: float | None = 40.0,
    font_size: float = 12.0,
    height: float | None = None,
) -> RawToken:
    """Create a RawToken with an axis-aligned transform."""
    return RawToken(
        text=text,
        transform=(font_size, 0.0, 0.0, font_size, x, y),
        width=width,
        height=height,
    )


def make_raw_page(
    tokens: list[RawToken],
    page_width: float = 612.0,
    page_height: float = 792.0,
    page_index: int = 0,
) -> RawPage:
    """Wrap raw tokens in a RawPage (US letter by default)."""
    return RawPage(
        page_index=page_index,
        page_width=page_width,
        page_height=page_height,
        tokens=tuple(tokens),
    )


def make_line(tokens: list[Token], region: Region = Region.body) -> Line:
    """Build a Line from tokens (sorted by x, baseline from the first)."""
    ordered = tuple(sorted(tokens, key=lambda t: t.baseline_x))
    return Line(baseline_y=tokens[0].baseline_y, tokens=ordered, region=region)


def write_text_pdf(path, runs, page_width=612, page_height=792):
    """Write a one-page PDF using Helvetica and return *path*.

    *runs* are ``(text, tf_size, (a, b, c, d, tx, ty))`` tuples; each one
    becomes ``BT /F1 tf_size Tf a b c d tx ty Tm (text) Tj ET``.
    """
    ops = []
    for text, tf_size, tm in runs:
        tm_str = " ".join(f"{v:g}" for v in tm)
        ops.append(f"BT /F1 {tf_size:g} Tf {tm_str} Tm ({text}) Tj ET")
    content = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {page_width} {page_height}] "
            f"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>"
        ).encode("latin-1"),
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % num + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for off in offsets:
        out += b"%010d 00000 n \n" % off
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_at,
    )
    path.write_bytes(bytes(out))
    return path


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def default_cfg() -> LayoutConfig:
    """Return a default LayoutConfig."""
    return LayoutConfig()


@pytest.fixture
def letter_page() -> RawPage:
    """A letter page with a header, a two-line body and a footer.

    Layout (PDF y up):
        y=760  "ACME" "REPORT"                header
        y=700  "Name" ... "Qty" ... "Price"   three columns
        y=686  "Hello" "World"                paragraph
        y=30   "Page" "1"                     footer
    """
    return make_raw_page(
        [
            make_raw_token("REPORT", 110, 760, width=50),
            make_raw_token("ACME", 50, 760, width=40),
            make_raw_token("Name", 50, 700, width=40),
            make_raw_token("Qty", 300, 700, width=30),
            make_raw_token("Price", 550, 700, width=40),
            make_raw_token("Hello", 50, 686, width=40),
            make_raw_token("World", 95, 686, width=40),
            make_raw_token("Page", 280, 30, width=30),
            make_raw_token("1", 315, 30, width=6),
        ]
    )
