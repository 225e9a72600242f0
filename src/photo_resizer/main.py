"""Main module for the photo resizer CLI."""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core import (
    CropRegion,
    OutputSpec,
    PhotoResizerError,
    get_logger,
)
from .core.exceptions import describe_error
from .core.factories import PipelineFactory
from .core.models import build_model


def parse_crop(value: str) -> List[int]:
    """Parse ``X,Y,W,H`` into four integers."""
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 4:
        raise argparse.ArgumentTypeError(f"expected X,Y,W,H, got {value!r}")
    try:
        return [int(part) for part in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"crop values must be integers, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the ``photo-resizer`` argument parser.

    Commands:
        process: resize one image file to a fixed size and byte budget
        version: print version information
    """
    parser = argparse.ArgumentParser(
        prog="photo-resizer",
        description="Photo Resizer - fit photos and signatures to exact size and KB limits",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Passport-style photo, 200x230 px, 10-50 KB
  photo-resizer process photo.jpg out.jpg --width 200 --height 230 --min-kb 10 --max-kb 50

  # Signature in blue ink with a date band
  photo-resizer process sign.png sign.jpg --width 140 --height 60 \\
                        --min-kb 4 --max-kb 20 --ink-color "#0000FF" --date

  # Show version
  photo-resizer version
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser(
        "process", help="Resize one image to the given dimensions and size window"
    )
    process_parser.add_argument("input", type=Path, help="Source image file")
    process_parser.add_argument("output", type=Path, help="Destination JPEG file")
    process_parser.add_argument("--width", type=int, required=True, help="Target width in px")
    process_parser.add_argument("--height", type=int, required=True, help="Target height in px")
    process_parser.add_argument(
        "--min-kb", type=float, required=True, help="Minimum output size in KB"
    )
    process_parser.add_argument(
        "--max-kb", type=float, required=True, help="Maximum output size in KB"
    )
    process_parser.add_argument(
        "--quality",
        type=int,
        default=80,
        help="Quality preference 0-100; higher aims closer to the max size (default: 80)",
    )
    process_parser.add_argument(
        "--date", action="store_true", help="Stamp today's date in a band at the top"
    )
    process_parser.add_argument(
        "--ink-color", default=None, help="Recolor signature ink, as #RRGGBB"
    )
    process_parser.add_argument(
        "--crop", type=parse_crop, default=None, help="Crop rectangle X,Y,W,H"
    )
    process_parser.add_argument(
        "--rotate",
        type=float,
        default=0.0,
        help="Clockwise rotation in degrees (requires --crop)",
    )
    process_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers.add_parser("version", help="Show version information")

    return parser


def _crop_from_args(args: argparse.Namespace) -> Optional[CropRegion]:
    if args.crop is None:
        return None
    x, y, width, height = args.crop
    return build_model(
        CropRegion,
        {"x": x, "y": y, "width": width, "height": height, "rotation_degrees": args.rotate},
    )


def run_process(args: argparse.Namespace) -> None:
    """Execute the ``process`` command."""
    logger = get_logger("cli")
    if args.debug:
        logger.setLevel(logging.DEBUG)
        logging.getLogger().setLevel(logging.DEBUG)

    spec = build_model(
        OutputSpec,
        {
            "target_width": args.width,
            "target_height": args.height,
            "min_bytes": int(round(args.min_kb * 1024)),
            "max_bytes": int(round(args.max_kb * 1024)),
            "quality_preference": args.quality,
            "add_date_band": args.date,
            "ink_color": args.ink_color,
        },
    )

    source = args.input.read_bytes()

    service = PipelineFactory.create_service(debug=args.debug)
    crop = _crop_from_args(args)

    result = service.process(
        source,
        spec,
        crop,
        on_progress=lambda percent: logger.debug(f"Progress: {percent:.0f}%"),
    )

    args.output.write_bytes(result.data)
    logger.info(
        f"Wrote {args.output}: {result.width}x{result.height}, "
        f"{result.size_kb} KB in {result.elapsed_ms} ms"
    )


def main() -> None:
    """
    Entry point for the ``photo-resizer`` command-line interface.

    Exits with status 1 when no command is given or processing fails.
    """
    parser = build_parser()
    args = parser.parse_args()

    if getattr(args, "rotate", 0.0) and getattr(args, "crop", None) is None:
        parser.error("--rotate requires --crop")

    if args.command == "process":
        try:
            run_process(args)
        except (PhotoResizerError, OSError) as e:
            get_logger("cli").error(f"Processing failed: {describe_error(e)}")
            sys.exit(1)
        except KeyboardInterrupt:
            get_logger("cli").warning("Processing interrupted by user.")
            sys.exit(1)

    elif args.command == "version":
        print("Photo Resizer CLI")
        print(f"Version {__version__}")
        print("Fixed-size, fixed-budget JPEG output for photos and signatures")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
