"""Reconstruct page layout from a PDF (or decoded-token JSON) and write JSON.

Examples::

    python scripts/run_layout.py plan.pdf --out out/plan.json
    python scripts/run_layout.py plan.pdf --start 2 --end 5 --overlay-dir out/overlays
    python scripts/run_layout.py tokens.json --gap-abs 25 --indent-scale 20
"""

import argparse
import logging
import sys
from pathlib import Path

from pagelayout import (
    IngestError,
    LayoutConfig,
    draw_layout_overlay,
    load_raw_pages,
    run_document,
    run_pdf,
    write_document_json,
)
from pagelayout.ingest import ingest_pdf, render_page_image

log = logging.getLogger("run_layout")


def _progress(done: int, total: int, page_index: int) -> None:
    log.info("Reconstructed page %d (%d/%d)", page_index, done, total)


def main() -> None:
    parser = argparse.ArgumentParser(description="Reconstruct page layout blocks")
    parser.add_argument("input", type=Path, help="PDF file or JSON of decoded pages")
    parser.add_argument("--start", type=int, default=0, help="Start page (inclusive)")
    parser.add_argument(
        "--end", type=int, default=None, help="End page (exclusive); default = all"
    )
    parser.add_argument(
        "--out", type=Path, default=None, help="Output JSON (default: <input>.layout.json)"
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        default=False,
        help="Write stage timings and counts alongside the blocks",
    )
    parser.add_argument("--workers", type=int, default=None, help="Worker threads")
    parser.add_argument("--gap-abs", type=float, default=None, help="Column gap floor (pts)")
    parser.add_argument(
        "--gap-mult", type=float, default=None, help="Column gap in char widths"
    )
    parser.add_argument(
        "--indent-scale", type=float, default=None, help="PDF x → indent multiplier"
    )
    parser.add_argument(
        "--proportional",
        action="store_true",
        default=False,
        help="Size grid cells by column span instead of equal shares",
    )
    parser.add_argument(
        "--overlay-dir", type=Path, default=None, help="Write per-page overlay PNGs here"
    )
    parser.add_argument(
        "--resolution", type=int, default=150, help="Overlay render DPI (PDF input only)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    if args.gap_abs is not None:
        overrides["column_gap_abs"] = args.gap_abs
    if args.gap_mult is not None:
        overrides["column_gap_char_mult"] = args.gap_mult
    if args.indent_scale is not None:
        overrides["indent_scale"] = args.indent_scale
    if args.proportional:
        overrides["grid_width_mode"] = "proportional"
    cfg = LayoutConfig(**overrides)

    is_pdf = args.input.suffix.lower() == ".pdf"
    try:
        if is_pdf:
            meta = ingest_pdf(args.input)
            end = meta.num_pages if args.end is None else min(args.end, meta.num_pages)
            pages = list(range(args.start, end))
            result = run_pdf(args.input, pages, cfg, progress=_progress)
        else:
            raw_pages = load_raw_pages(args.input)
            end = len(raw_pages) if args.end is None else args.end
            result = run_document(raw_pages[args.start : end], cfg, progress=_progress)
    except IngestError as exc:
        log.error("%s", exc)
        sys.exit(1)

    out = args.out or args.input.with_suffix(".layout.json")
    write_document_json(result, out, include_diagnostics=args.diagnostics)

    if args.overlay_dir is not None:
        args.overlay_dir.mkdir(parents=True, exist_ok=True)
        scale = args.resolution / 72.0
        for pr in result.pages:
            background = (
                render_page_image(args.input, pr.page_index, args.resolution)
                if is_pdf
                else None
            )
            png = args.overlay_dir / f"page_{pr.page_index:04d}.png"
            draw_layout_overlay(
                pr.page_width, pr.page_height, pr.lines, png, scale, background, cfg
            )
            log.info("Overlay: %s", png)


if __name__ == "__main__":
    main()
