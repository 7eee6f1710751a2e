"""
Background color resolution.

Strategies, cheapest first:
  black / white  constant, no I/O
  color          named color, no I/O
  corner         one corner pixel (reads down to the bottom row if needed)
  default        the two top corners, first row only
  sides          all four corners; reads the whole image into memory

Every strategy expects the source at the raster start and leaves it at an
arbitrary position: the caller seeks back before scanning.
"""

import logging

import numpy as np

from bordercrop.core.colors import color_from_name
from bordercrop.core.options import (
    BG_BLACK, BG_COLOR, BG_CORNER, BG_DEFAULT, BG_SIDES, BG_WHITE, CORNERS,
)
from bordercrop.core.raster import black_color, white_color

logger = logging.getLogger(__name__)


def _pixel(row, col):
    return tuple(int(s) for s in row[col])


def background_one_corner(source, header, corner):
    """The pixel in `corner` ('topleft', ..., 'bottomright')."""
    vertical, horizontal = CORNERS[corner]
    if vertical == "bottom":
        source.skip_rows(header.rows - 1)
    row = source.read_row()
    return _pixel(row, 0 if horizontal == "left" else header.cols - 1)


def background_two_corners(source, header):
    """
    Background from the two top corners.

    Equal corners win outright. Otherwise a multi-sample image takes the
    per-sample integer mean of the two; a bilevel image takes whichever of
    black and white dominates the top row, black on a tie.
    """
    row = source.read_row()
    left = _pixel(row, 0)
    right = _pixel(row, header.cols - 1)

    if left == right:
        return left

    if header.bilevel:
        black_count = int(np.count_nonzero(row[:, 0] == 0))
        return (0,) if black_count >= header.cols // 2 else (1,)

    return tuple((l + r) // 2 for l, r in zip(left, right))


def background_sides(source, header):
    """
    Background from all four corners of the fully loaded image.

    Three equal corners win, then two equal corners, then the mean of all
    four.
    """
    logger.info("Reading the entire %dx%d image to sample its corners",
                header.cols, header.rows)
    image = np.stack([source.read_row() for _ in range(header.rows)])

    last_row, last_col = header.rows - 1, header.cols - 1
    ul = _pixel(image[0], 0)
    ur = _pixel(image[0], last_col)
    ll = _pixel(image[last_row], 0)
    lr = _pixel(image[last_row], last_col)

    if ul == ur == ll or ul == ur == lr or ul == ll == lr:
        return ul
    if ur == ll == lr:
        return ur
    if ul in (ur, ll, lr):
        return ul
    if ur in (ll, lr):
        return ur
    if ll == lr:
        return ll
    return tuple(sum(c) // 4 for c in zip(ul, ur, ll, lr))


def resolve_background(source, header, options):
    """Determine the background color of the image `source` is positioned at."""
    choice = options.background

    if choice == BG_WHITE:
        return white_color(header)
    if choice == BG_BLACK:
        return black_color(header)
    if choice == BG_COLOR:
        return color_from_name(options.bg_color, header)
    if choice == BG_SIDES:
        return background_sides(source, header)
    if choice == BG_CORNER:
        return background_one_corner(source, header, options.bg_corner)
    if choice == BG_DEFAULT:
        return background_two_corners(source, header)
    raise ValueError(f"unknown background choice {choice!r}")
