"""
Command-line interface for PageQuill.

Usage:
    pagequill convert lesson.html --selector "#worksheet" -o worksheet.pdf
    pagequill convert deck.html --renderer multi_unit --unit-selector .slide-card --orientation landscape --margin 0
    pagequill image lesson.html --selector "#chart" -o chart.png
    pagequill version
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import ORIENTATIONS, RENDERERS, PaginationOptions
from .engine.geometry import PAGE_FORMATS
from .exceptions import ConfigurationError, DocumentGenerationError
from .render.browser import ContentSource
from .utils.filenames import build_filename
from .utils.rich_logger import get_rich_logger, setup_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pagequill",
        description="PageQuill - paginate rendered HTML content into PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pagequill convert lesson.html -o lesson.pdf
  pagequill convert lesson.html --selector "#worksheet" --title "Fractions Worksheet"
  pagequill convert deck.html --title "Fractions" --suffix slides --renderer multi_unit --unit-selector .slide-card
  pagequill convert deck.html --renderer multi_unit --unit-selector .slide-card --orientation landscape --margin 0
  pagequill image lesson.html --selector "#chart" -o chart.png
  pagequill version
        """,
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)",
    )
    parser.add_argument("--no-rich", action="store_true", help="Plain log output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    convert_parser = subparsers.add_parser("convert", help="Paginate an HTML document into PDF")
    convert_parser.add_argument("input", help="Input HTML file or URL")
    convert_parser.add_argument("-o", "--output", help="Output PDF path")
    convert_parser.add_argument("--selector", default="body", help="Root element of the content (default: body)")
    convert_parser.add_argument("--title", help="Document title, also used for the default file name")
    convert_parser.add_argument("--suffix", default="", help="Appended to the file name built from --title with a '-' (e.g. slides)")
    convert_parser.add_argument("--renderer", choices=RENDERERS, default="local", help="Pagination strategy (default: local)")
    convert_parser.add_argument("--unit-selector", help="Selector of page-sized units (multi_unit / remote)")
    convert_parser.add_argument("--block-selector", default=".print-item", help="Atomic block selector (default: .print-item)")
    convert_parser.add_argument("--format", dest="page_format", choices=sorted(PAGE_FORMATS), default="a4", help="Page format (default: a4)")
    convert_parser.add_argument("--orientation", choices=ORIENTATIONS, default="portrait")
    convert_parser.add_argument("--margin", type=float, default=40.0, help="Margin in points (default: 40)")
    convert_parser.add_argument("--oversampling", type=float, default=2.0, help="Raster pixels per CSS pixel (default: 2)")
    convert_parser.add_argument("--width", type=int, default=800, help="Logical authoring width in px (default: 800)")
    convert_parser.add_argument("--preserve-aspect", action="store_true", help="Fit units instead of stretching them")
    convert_parser.add_argument("--remote-url", help="PDF service endpoint for the remote renderer")

    image_parser = subparsers.add_parser("image", help="Export an element as PNG")
    image_parser.add_argument("input", help="Input HTML file or URL")
    image_parser.add_argument("-o", "--output", help="Output PNG path")
    image_parser.add_argument("--selector", default="body", help="Element to capture (default: body)")
    image_parser.add_argument("--width", type=int, default=800, help="Viewport width in px (default: 800)")

    subparsers.add_parser("version", help="Show version information")

    return parser


def _source(value: str, selector: str) -> ContentSource:
    if value.startswith(("http://", "https://", "file://")):
        return ContentSource(url=value, selector=selector)
    return ContentSource.from_file(value, selector=selector)


def _default_output(args, ext: str) -> Path:
    if getattr(args, "title", None):
        return Path(build_filename(args.title, args.suffix, ext))
    if args.input.startswith(("http://", "https://")):
        return Path(f"document.{ext}")
    return Path(args.input).with_suffix(f".{ext}")


def options_from_args(args) -> PaginationOptions:
    """Build pagination options from parsed ``convert`` arguments."""
    output = Path(args.output) if args.output else _default_output(args, "pdf")
    overrides = dict(
        filename=output.name,
        orientation=args.orientation,
        page_format=args.page_format,
        margin_pt=args.margin,
        oversampling=args.oversampling,
        logical_width_px=args.width,
        renderer=args.renderer,
        block_selector=args.block_selector,
        unit_selector=args.unit_selector,
        preserve_aspect=args.preserve_aspect,
        title=args.title,
    )
    if args.remote_url:
        overrides["remote_url"] = args.remote_url
    # environment covers the knobs without a flag (timeouts, quality, ...)
    return PaginationOptions.from_env().with_overrides(**overrides).validate()


def cmd_convert(args) -> int:
    """Handle convert command."""
    from .api import render_to_pdf

    console = get_rich_logger(__name__)
    output = Path(args.output) if args.output else _default_output(args, "pdf")
    try:
        options = options_from_args(args)
        source = _source(args.input, args.selector)
        path = render_to_pdf(source, output, options)
    except (ConfigurationError, DocumentGenerationError) as exc:
        console.failure(str(exc))
        return 1

    console.success(f"Saved: {path}")
    return 0


def cmd_image(args) -> int:
    """Handle image command."""
    from .api import render_to_image

    console = get_rich_logger(__name__)
    output = Path(args.output) if args.output else _default_output(args, "png")
    try:
        options = PaginationOptions(filename=output.name, logical_width_px=args.width).validate()
        source = _source(args.input, args.selector)
        path = render_to_image(source, output, options)
    except (ConfigurationError, DocumentGenerationError) as exc:
        console.failure(str(exc))
        return 1

    console.success(f"Saved: {path}")
    return 0


def cmd_version(args=None) -> int:
    """Handle version command."""
    from .version import __version__
    print(f"PageQuill v{__version__}")
    print("Paginates rendered HTML content into PDF")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level, use_rich=not args.no_rich)

    commands = {
        "convert": cmd_convert,
        "image": cmd_image,
        "version": cmd_version,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
