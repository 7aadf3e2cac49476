"""
Command-line entry point: ``pattern-merge``.

Commands:
    pages  INPUT.pdf                     List pages and their rendered sizes
    merge  INPUT.pdf --rows R --cols C   Rasterize, merge and export

Example:
    $ pattern-merge merge rose.pdf --rows 2 --cols 2 --pages 3,4,5,6 \\
        --overlap 3 --size-mode print --width 8 --height 10 --dpi 300 --format pdf
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import fitz

from . import __version__
from .core.errors import PatternError
from .core.models import ExportFormat, ExportSpec, GridArrangement, SizeMode
from .export import export_composite
from .logging_utils import configure_logging
from .merger import merge_grid
from .merger.config import MergeConfig
from .progress import CallbackProgress, ProgressEvent
from .renderer import RenderConfig, load_document, rasterize_document

logger = logging.getLogger(__name__)

EMPTY_CELL = "-"


def parse_page_list(value: str) -> List[Optional[int]]:
    """
    Parse "1,2,-,4" into [1, 2, None, 4]; "-" leaves a cell empty.

    Raises:
        argparse.ArgumentTypeError: On anything else
    """
    pages: List[Optional[int]] = []
    for item in value.split(","):
        item = item.strip()
        if item == EMPTY_CELL:
            pages.append(None)
            continue
        if not item.isdigit() or int(item) < 1:
            raise argparse.ArgumentTypeError(f"invalid page number: {item!r}")
        pages.append(int(item))
    return pages


def build_grid(rows: int, cols: int, pages: Sequence[Optional[int]]) -> GridArrangement:
    """Place pages into the grid in row-major order."""
    if len(pages) > rows * cols:
        raise argparse.ArgumentTypeError(
            f"{len(pages)} pages do not fit a {rows}x{cols} grid"
        )
    placements = [
        (page, index // cols, index % cols)
        for index, page in enumerate(pages)
        if page is not None
    ]
    return GridArrangement.from_cells(rows, cols, placements)


def _print_progress(event: ProgressEvent) -> None:
    print(event.stage, file=sys.stderr)


def cmd_pages(args: argparse.Namespace) -> int:
    config = RenderConfig(render_scale=args.render_scale)
    document = load_document(Path(args.input).read_bytes())
    with fitz.open(stream=document.data, filetype="pdf") as doc:
        for page in doc:
            width = int(page.rect.width * config.zoom)
            height = int(page.rect.height * config.zoom)
            print(f"page {page.number + 1}: {width}x{height}px")
    print(f"{document.page_count} pages at {config.dpi:.0f} DPI")
    return 0


def cmd_merge(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    progress = CallbackProgress(_print_progress) if not args.quiet else None

    spec = ExportSpec(
        size_mode=SizeMode(args.size_mode),
        target_width=args.width,
        target_height=args.height,
        dpi=args.dpi,
        maintain_aspect_ratio=not args.stretch,
        format=ExportFormat(args.format),
    )

    document = load_document(input_path.read_bytes())
    pages = args.pages or list(range(1, document.page_count + 1))
    grid = build_grid(args.rows, args.cols, pages)

    bitmaps = rasterize_document(
        document, RenderConfig(render_scale=args.render_scale), progress=progress,
    )
    composite = merge_grid(
        grid,
        {bitmap.page_number: bitmap for bitmap in bitmaps},
        args.overlap,
        progress=progress,
    )
    result = export_composite(composite, spec, source_name=input_path.name)

    output = Path(args.output) if args.output else input_path.with_name(result.filename)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.data)

    note = ""
    if result.size.adjusted:
        note = f" (requested {result.size.requested_width}x{result.size.requested_height}px)"
    print(f"Wrote {output} {result.size.width}x{result.size.height}px{note}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pattern-merge",
        description="Reassemble multi-page cross-stitch pattern PDFs into one image.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument(
        "--render-scale", type=float, default=RenderConfig.render_scale,
        help="Render scale over 96 DPI (default: %(default)s)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    pages = sub.add_parser("pages", help="List pages and rendered sizes")
    pages.add_argument("input", help="Pattern PDF")
    pages.set_defaults(func=cmd_pages)

    merge = sub.add_parser("merge", help="Merge pages into one image")
    merge.add_argument("input", help="Pattern PDF")
    merge.add_argument("--rows", type=int, required=True)
    merge.add_argument("--cols", type=int, required=True)
    merge.add_argument(
        "--pages", type=parse_page_list,
        help="Comma-separated pages in row-major order, '-' for an empty cell "
             "(default: all pages in order)",
    )
    merge.add_argument(
        "--overlap", type=int, default=MergeConfig.default_overlap_pixels,
        help="Pixels trimmed per internal seam (default: %(default)s)",
    )
    merge.add_argument("--size-mode", choices=[m.value for m in SizeMode], default=SizeMode.ORIGINAL.value)
    merge.add_argument("--width", type=float, help="Target width (pixels, or inches for print)")
    merge.add_argument("--height", type=float, help="Target height (pixels, or inches for print)")
    merge.add_argument("--dpi", type=int, help="Print resolution")
    merge.add_argument("--stretch", action="store_true", help="Do not keep the aspect ratio")
    merge.add_argument("--format", choices=[f.value for f in ExportFormat], default=ExportFormat.PNG.value)
    merge.add_argument("-o", "--output", help="Output file (default: <input>-merged.<format>)")
    merge.add_argument("-q", "--quiet", action="store_true", help="No progress output")
    merge.set_defaults(func=cmd_merge)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        return args.func(args)
    except PatternError as e:
        logger.debug(f"{e.kind}: {e}")
        print(f"error: {e.user_message}", file=sys.stderr)
        return 1
    except (ValueError, argparse.ArgumentTypeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
