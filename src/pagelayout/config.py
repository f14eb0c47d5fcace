from dataclasses import dataclass


class ConfigValidationError(ValueError):
    """Raised when a LayoutConfig field has an invalid value."""


def _check_range(
    name: str, value: float, lo: float, hi: float, *, inclusive: bool = True
) -> None:
    if inclusive:
        if not (lo <= value <= hi):
            raise ConfigValidationError(f"{name}={value} out of range [{lo}, {hi}]")
    else:
        if not (lo < value < hi):
            raise ConfigValidationError(f"{name}={value} out of range ({lo}, {hi})")


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name}={value} must be > 0")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigValidationError(f"{name}={value} must be >= 0")


GRID_WIDTH_MODES = ("equal", "proportional")


@dataclass
class LayoutConfig:
    """Tunables for layout reconstruction."""

    # ── Token normalisation ────────────────────────────────────────────
    # Average glyph width as a fraction of font size, used when a token
    # arrives without a usable width.
    glyph_width_ratio: float = 0.5

    # ── Line clustering ────────────────────────────────────────────────
    # Baseline snap distance as a fraction of the larger neighbouring font size.
    line_tolerance_ratio: float = 0.5

    # ── Region classification ──────────────────────────────────────────
    # Fractions of page height (PDF y grows upward).
    header_band: float = 0.90  # above this -> header
    footer_band: float = 0.10  # below this -> footer

    # ── Column segmentation ────────────────────────────────────────────
    # Absolute gap floor (pts); stops plain word spacing on small type
    # from splitting a line.
    column_gap_abs: float = 20.0
    # Gap threshold in average character widths of the left token.
    column_gap_char_mult: float = 3.0

    # ── Block assembly ─────────────────────────────────────────────────
    # Gaps wider than this (pts) between joined tokens get a single space.
    word_break_gap: float = 2.0
    # PDF x-coordinate -> output indentation units.
    indent_scale: float = 15.0
    # "equal" (1/n per cell) or "proportional" (column span share).
    grid_width_mode: str = "equal"

    # ── Execution ──────────────────────────────────────────────────────
    # Worker threads for multi-page runs (one page per worker).
    max_workers: int = 4

    # ── pdfplumber extraction ──────────────────────────────────────────
    tocr_x_tolerance: float = 3.0
    tocr_y_tolerance: float = 3.0

    # ── Debug overlay ──────────────────────────────────────────────────
    overlay_label_font_base: int = 10
    overlay_label_font_floor: int = 8
    overlay_label_bg_alpha: int = 200
    overlay_line_outline_width: int = 1
    overlay_column_outline_width: int = 2

    def __post_init__(self) -> None:
        """Validate field ranges to catch misconfiguration early."""
        # -- Thresholds that must be in [0, 1] --
        for name in ("header_band", "footer_band"):
            _check_range(name, getattr(self, name), 0.0, 1.0)

        # -- Strictly positive floats --
        _pos_floats = [
            "glyph_width_ratio",
            "line_tolerance_ratio",
            "column_gap_char_mult",
            "tocr_x_tolerance",
            "tocr_y_tolerance",
        ]
        for name in _pos_floats:
            _check_positive(name, getattr(self, name))

        # -- Non-negative floats --
        _nn_floats = [
            "column_gap_abs",
            "word_break_gap",
            "indent_scale",
        ]
        for name in _nn_floats:
            _check_non_negative(name, getattr(self, name))

        # -- Positive ints --
        _pos_ints = [
            "max_workers",
            "overlay_label_font_base",
            "overlay_label_font_floor",
            "overlay_line_outline_width",
            "overlay_column_outline_width",
        ]
        for name in _pos_ints:
            val = getattr(self, name)
            if val < 1:
                raise ConfigValidationError(f"{name}={val} must be >= 1")

        if self.footer_band >= self.header_band:
            raise ConfigValidationError(
                f"footer_band ({self.footer_band}) must be < "
                f"header_band ({self.header_band})"
            )

        if self.grid_width_mode not in GRID_WIDTH_MODES:
            raise ConfigValidationError(
                f"grid_width_mode={self.grid_width_mode!r} must be "
                f"'equal' or 'proportional'"
            )

        if not (0 <= self.overlay_label_bg_alpha <= 255):
            raise ConfigValidationError(
                f"overlay_label_bg_alpha={self.overlay_label_bg_alpha} "
                f"out of range [0, 255]"
            )
