"""
bordercrop — crop a Netpbm image stream to its content.

Reads one or more PBM/PGM/PPM images from a file or stdin, detects the
uniform background border of each, and writes the cropped (or padded)
images to stdout, or a one-line report per image.
"""

import argparse
import logging
import sys

from bordercrop.core.driver import run
from bordercrop.core.errors import CropError
from bordercrop.core.options import (
    BG_BLACK, BG_COLOR, BG_CORNER, BG_DEFAULT, BG_SIDES, BG_WHITE, BLANK_MODES,
    CORNERS, MODE_CROP, MODE_REPORT_FULL, MODE_REPORT_SIZE, CropOptions,
)
from bordercrop.core.pnm import PnmReader, PnmWriter, open_seekable

logger = logging.getLogger("bordercrop")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="bordercrop",
        description="Crop the uniform background border off Netpbm images.")
    parser.add_argument("input", nargs="?", default="-",
                        help="Input file (default: stdin)")

    bg = parser.add_mutually_exclusive_group()
    bg.add_argument("--black", action="store_true", help="Background is black")
    bg.add_argument("--white", action="store_true", help="Background is white")
    bg.add_argument("--sides", action="store_true",
                    help="Background from all four corners (reads the whole image)")
    bg.add_argument("--bg-color", metavar="COLOR", help="Background is this named color")
    bg.add_argument("--bg-corner", choices=sorted(CORNERS),
                    help="Background is the color of this corner")

    for edge in ("left", "right", "top", "bottom"):
        parser.add_argument(f"--{edge}", action="store_true",
                            help=f"Crop the {edge} edge (default: all edges)")

    parser.add_argument("--margin", type=int, default=0,
                        help="Leave this many pixels of border (default: 0)")
    parser.add_argument("--closeness", type=float, default=0.0,
                        help="Percent color distance still counted as background (default: 0)")
    parser.add_argument("--borderfile", metavar="FILE",
                        help="Find borders in this image instead of the input")
    parser.add_argument("--blank-image", choices=BLANK_MODES, default="abort",
                        help="What to do with an image that is all background")

    report = parser.add_mutually_exclusive_group()
    report.add_argument("--reportfull", action="store_true",
                        help="Report crop sizes, output size, background and closeness")
    report.add_argument("--reportsize", action="store_true",
                        help="Report crop sizes and output size")

    parser.add_argument("--plain", action="store_true", help="Write plain (ASCII) Netpbm")
    parser.add_argument("--verbose", action="store_true", help="Describe what is being done")
    return parser


def options_from_args(args):
    if args.black:
        background = BG_BLACK
    elif args.white:
        background = BG_WHITE
    elif args.sides:
        background = BG_SIDES
    elif args.bg_color:
        background = BG_COLOR
    elif args.bg_corner:
        background = BG_CORNER
    else:
        background = BG_DEFAULT

    want_crop = (args.left, args.right, args.top, args.bottom)
    if not any(want_crop):
        want_crop = (True, True, True, True)

    if args.reportfull:
        mode = MODE_REPORT_FULL
    elif args.reportsize:
        mode = MODE_REPORT_SIZE
    else:
        mode = MODE_CROP

    return CropOptions(
        background=background,
        bg_color=args.bg_color,
        bg_corner=args.bg_corner,
        want_crop=want_crop,
        margin=args.margin,
        closeness=args.closeness,
        blank_mode=args.blank_image,
        mode=mode,
        borderfile=args.borderfile,
        verbose=args.verbose,
        plain=args.plain,
    ).validate()


def configure_logging(verbose):
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("bordercrop: %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.INFO if verbose else logging.WARNING)


def main(argv=None, stdout=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    stdout = stdout or sys.stdout.buffer

    try:
        options = options_from_args(args)
        with open_seekable(args.input) as stream:
            border_stream = open_seekable(options.borderfile) if options.borderfile else None
            try:
                border_source = PnmReader(border_stream) if border_stream else None
                run(options, PnmReader(stream), PnmWriter(stdout, plain=options.plain),
                    border_source)
            finally:
                if border_stream:
                    border_stream.close()
        stdout.flush()
    except (CropError, OSError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
