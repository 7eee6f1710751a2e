"""
Raster description shared by the readers, writers and the crop engine.

Two pixel representations exist:
  - bilevel (PBM): one bit per pixel, 8 pixels per byte, MSB first,
    bit 1 = black. In sample form a bilevel pixel is 1 for white and 0 for
    black, i.e. an ordinary gray sample with maxval 1.
  - multi-sample (PGM/PPM): `depth` integer samples per pixel in
    [0, maxval].
"""

from collections import namedtuple
from enum import IntEnum

import numpy as np


PBM_PLAIN, PGM_PLAIN, PPM_PLAIN = "P1", "P2", "P3"
PBM_RAW, PGM_RAW, PPM_RAW = "P4", "P5", "P6"

FORMATS = (PBM_PLAIN, PGM_PLAIN, PPM_PLAIN, PBM_RAW, PGM_RAW, PPM_RAW)

MAX_MAXVAL = 65535
MAX_DIMENSION = 2 ** 31 - 1


class Edge(IntEnum):
    LEFT = 0
    RIGHT = 1
    TOP = 2
    BOTTOM = 3


EDGE_NAMES = ("left", "right", "top", "bottom")


class RasterHeader(namedtuple("RasterHeader", "cols rows maxval fmt")):
    __slots__ = ()

    @property
    def bilevel(self):
        return self.fmt in (PBM_PLAIN, PBM_RAW)

    @property
    def plain(self):
        return self.fmt in (PBM_PLAIN, PGM_PLAIN, PPM_PLAIN)

    @property
    def depth(self):
        return 3 if self.fmt in (PPM_PLAIN, PPM_RAW) else 1

    @property
    def raw_fmt(self):
        """The raw variant of this header's format."""
        return FORMATS[FORMATS.index(self.fmt) % 3 + 3]

    @property
    def plain_fmt(self):
        return FORMATS[FORMATS.index(self.fmt) % 3]

    def packed_bytes(self):
        """Bytes in one packed bilevel row."""
        return (self.cols + 7) // 8


def white_color(header):
    return (header.maxval,) * header.depth


def black_color(header):
    return (0,) * header.depth


def sample_dtype(maxval):
    return np.uint8 if maxval < 256 else np.uint16


def to_rgb(color):
    """Expand a 1- or 3-sample color to an (r, g, b) tuple."""
    if len(color) == 1:
        return (color[0],) * 3
    return tuple(color)


def bits_to_samples(bits):
    """Bilevel bits (1 = black) to samples (1 = white), shape (n, 1)."""
    return (1 - np.asarray(bits, dtype=np.uint8)).reshape(-1, 1)


def samples_to_bits(samples):
    return (1 - np.asarray(samples, dtype=np.uint8)).reshape(-1)
