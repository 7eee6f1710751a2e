"""
Border scanner: one forward pass over the raster to find how thick the
background border is at each edge.

Detect the background, not the content: a pixel is background when it is
within `closeness` percent of the color cube diagonal from the reference
color.
"""

import math
from collections import namedtuple

import numpy as np


SQRT3 = math.sqrt(3)
EPSILON = 1.0e-5


# Background thickness per edge; indexable by Edge
BorderSet = namedtuple("BorderSet", "left right top bottom")


def allowable_difference(maxval, closeness):
    """Tolerance percentage to an allowable cartesian color distance."""
    return int(SQRT3 * maxval * closeness / 100 + 0.5)


def colors_match(comparand, comparator, allowable_diff):
    if allowable_diff < EPSILON:
        return tuple(comparand) == tuple(comparator)
    distance = sum((int(a) - int(b)) ** 2 for a, b in zip(comparand, comparator))
    return distance <= allowable_diff ** 2


def background_mask(row, color, allowable_diff):
    """Vectorized colors_match over a (cols, depth) row."""
    diff = row.astype(np.int64) - np.asarray(color, dtype=np.int64)
    if allowable_diff < EPSILON:
        return np.all(diff == 0, axis=1)
    return np.sum(diff * diff, axis=1) <= allowable_diff ** 2


def find_borders(source, header, background, closeness):
    """
    Scan every row of `source` once.

    Expects the source at the start of the raster and leaves it after the
    raster.

    Returns:
        BorderSet, or None if the image is entirely background
    """
    cols, rows = header.cols, header.rows
    allowable_diff = allowable_difference(header.maxval, closeness)

    left, right = cols, -1
    top, bottom = rows, -1

    for row in range(rows):
        mask = background_mask(source.read_row(), background, allowable_diff)
        foreground = np.flatnonzero(~mask)
        if foreground.size == 0:
            continue

        row_left = int(foreground[0])
        row_right = int(foreground[-1]) + 1

        left = min(left, row_left)
        right = max(right, row_right)
        if top == rows:
            top = row
        bottom = row + 1

    if right == -1:
        return None
    return BorderSet(left, cols - right, top, rows - bottom)
