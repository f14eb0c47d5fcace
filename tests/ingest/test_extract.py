"""Tests for pagelayout.ingest.extract: pdfplumber words → RawPage.

Covers:
- _build_extract_words_kwargs
- _word_transform (glyph matrix and bottom-edge fallback)
- _word_to_raw_token
- extract_raw_page (mock page)
- extract_raw_pages (page selection, range errors)
- a generated PDF decoded by pdfplumber and reconstructed
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from conftest import write_text_pdf

from pagelayout.config import LayoutConfig
from pagelayout.ingest import IngestError
from pagelayout.ingest.extract import (
    _build_extract_words_kwargs,
    _word_to_raw_token,
    _word_transform,
    extract_raw_page,
    extract_raw_pages,
)
from pagelayout.layout import normalize_tokens
from pagelayout.models import GridRow, Paragraph
from pagelayout.pipeline import run_pdf

# ── Helpers ────────────────────────────────────────────────────────────


def _word(
    x0: float = 50,
    top: float = 80,
    x1: float = 90,
    bottom: float = 92,
    text: str = "Hello",
    size: float = 12.0,
    matrix=None,
) -> dict:
    """Build a dict matching pdfplumber's extract_words(return_chars=True)."""
    w = {
        "x0": x0,
        "x1": x1,
        "top": top,
        "bottom": bottom,
        "text": text,
        "size": size,
        "chars": [],
    }
    if matrix is not None:
        w["chars"] = [{"text": text[:1], "matrix": matrix}]
    return w


def _page(words, width=612.0, height=792.0):
    page = MagicMock()
    page.width = width
    page.height = height
    page.extract_words.return_value = words
    return page


# ── kwargs ─────────────────────────────────────────────────────────────


class TestBuildKwargs:
    def test_defaults(self):
        kw = _build_extract_words_kwargs(LayoutConfig())
        assert kw == {
            "x_tolerance": 3.0,
            "y_tolerance": 3.0,
            "extra_attrs": ["size"],
            "return_chars": True,
        }

    def test_tolerances_from_config(self):
        kw = _build_extract_words_kwargs(LayoutConfig(tocr_x_tolerance=1.5, tocr_y_tolerance=2.0))
        assert kw["x_tolerance"] == 1.5
        assert kw["y_tolerance"] == 2.0


# ── transforms ─────────────────────────────────────────────────────────


class TestWordTransform:
    def test_unit_text_matrix_scaled_to_word_size(self):
        # "/F1 12 Tf 1 0 0 1 50 700 Tm": the glyph matrix carries no size.
        w = _word(size=12, matrix=(1, 0, 0, 1, 50.0, 700.0))
        assert _word_transform(w, 792.0) == (12.0, 0.0, 0.0, 12.0, 50.0, 700.0)

    def test_rotation_kept(self):
        w = _word(size=12, matrix=(0, 1, -1, 0, 300.5, 400.25))
        assert _word_transform(w, 792.0) == (0.0, 12.0, -12.0, 0.0, 300.5, 400.25)

    def test_scaled_text_matrix_unchanged(self):
        # "/F1 1 Tf 10 0 0 10 x y Tm" already has the size in the matrix.
        w = _word(size=10, matrix=(10, 0, 0, 10, 50.0, 650.0))
        assert _word_transform(w, 792.0) == (10.0, 0.0, 0.0, 10.0, 50.0, 650.0)

    def test_matrix_without_size_used_as_is(self):
        w = _word(size=0, matrix=(9, 0, 0, 9, 5.0, 6.0))
        assert _word_transform(w, 792.0) == (9.0, 0.0, 0.0, 9.0, 5.0, 6.0)

    def test_fallback_from_size_and_bottom(self):
        w = _word(x0=50, bottom=92, size=12)
        assert _word_transform(w, 792.0) == (12.0, 0.0, 0.0, 12.0, 50.0, 700.0)

    def test_short_matrix_ignored(self):
        w = _word(matrix=(1, 0, 0))
        assert _word_transform(w, 792.0)[4:] == (50.0, 700.0)

    def test_degenerate_matrix_ignored(self):
        w = _word(size=12, matrix=(0, 0, 0, 0, 1.0, 2.0))
        assert _word_transform(w, 792.0) == (12.0, 0.0, 0.0, 12.0, 50.0, 700.0)

    def test_missing_size(self):
        w = _word()
        del w["size"]
        assert _word_transform(w, 792.0)[0] == 0.0


class TestWordToRawToken:
    def test_geometry(self):
        tok = _word_to_raw_token(_word(x0=50, x1=90, top=80, bottom=92), 792.0)
        assert tok.text == "Hello"
        assert tok.width == 40.0
        assert tok.height == 12.0
        assert tok.transform[4:] == (50.0, 700.0)


# ── page decoding ──────────────────────────────────────────────────────


class TestExtractRawPage:
    def test_words_become_tokens(self):
        page = _page([_word(text="Hello"), _word(x0=95, x1=135, text="World")])
        rp = extract_raw_page(page, 3)
        assert rp.page_index == 3
        assert rp.page_width == 612.0
        assert rp.page_height == 792.0
        assert [t.text for t in rp.tokens] == ["Hello", "World"]
        page.extract_words.assert_called_once_with(**_build_extract_words_kwargs(LayoutConfig()))

    def test_no_filtering(self):
        page = _page([_word(text=" "), _word(size=0)])
        assert len(extract_raw_page(page, 0).tokens) == 2

    def test_empty_page(self):
        rp = extract_raw_page(_page([]), 0)
        assert rp.tokens == ()

    def test_normalises_to_baseline(self):
        rp = extract_raw_page(_page([_word(size=11, matrix=(1, 0, 0, 1, 50.0, 701.5))]), 0)
        (tok,) = normalize_tokens(rp, LayoutConfig())
        assert tok.baseline_y == 701.5
        assert tok.font_size == 11.0
        assert tok.width == 40.0


class TestExtractRawPages:
    def _pdf(self, n):
        pdf = SimpleNamespace(pages=[_page([_word(text=f"p{i}")]) for i in range(n)])
        cm = MagicMock()
        cm.__enter__ = MagicMock(return_value=pdf)
        cm.__exit__ = MagicMock(return_value=False)
        return cm

    def test_all_pages(self):
        with patch("pagelayout.ingest.extract.open_pdf", return_value=self._pdf(3)):
            pages = extract_raw_pages("doc.pdf")
        assert [p.page_index for p in pages] == [0, 1, 2]
        assert [p.tokens[0].text for p in pages] == ["p0", "p1", "p2"]

    def test_selected_pages(self):
        with patch("pagelayout.ingest.extract.open_pdf", return_value=self._pdf(3)):
            pages = extract_raw_pages("doc.pdf", pages=[2, 0])
        assert [p.page_index for p in pages] == [2, 0]

    def test_out_of_range(self):
        with patch("pagelayout.ingest.extract.open_pdf", return_value=self._pdf(2)):
            with pytest.raises(IngestError, match="out of range"):
                extract_raw_pages("doc.pdf", pages=[0, 5])


# ── real PDF through pdfplumber ────────────────────────────────────────


class TestGeneratedPdf:
    RUNS = [
        ("Hello World", 12, (1, 0, 0, 1, 50, 700)),
        ("Qty", 12, (1, 0, 0, 1, 300, 700)),
        ("Small", 1, (10, 0, 0, 10, 50, 650)),
    ]

    def test_font_size_includes_tf_operand(self, tmp_path):
        pdf_path = write_text_pdf(tmp_path / "sizes.pdf", self.RUNS)
        (raw_page,) = extract_raw_pages(pdf_path)
        tokens = {t.text: t for t in normalize_tokens(raw_page, LayoutConfig())}

        assert set(tokens) == {"Hello", "World", "Qty", "Small"}
        for text in ("Hello", "World", "Qty"):
            assert tokens[text].font_size == pytest.approx(12.0)
            assert tokens[text].baseline_y == pytest.approx(700.0)
        assert tokens["Small"].font_size == pytest.approx(10.0)
        assert tokens["Small"].baseline_y == pytest.approx(650.0)
        assert tokens["Hello"].baseline_x == pytest.approx(50.0)

    def test_run_pdf_end_to_end(self, tmp_path):
        pdf_path = write_text_pdf(tmp_path / "layout.pdf", self.RUNS)
        (pr,) = run_pdf(pdf_path).pages
        grid, para = pr.page.body_blocks

        assert isinstance(grid, GridRow)
        assert [c.text for c in grid.cells] == ["Hello World", "Qty"]
        assert [c.font_size for c in grid.cells] == pytest.approx([12.0, 12.0])
        assert isinstance(para, Paragraph)
        assert para.text == "Small"
        assert para.font_size == pytest.approx(10.0)
        assert para.indent == pytest.approx(750.0)
