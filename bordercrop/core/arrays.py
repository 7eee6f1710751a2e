"""
In-memory raster source and sink over numpy arrays.

Same row interface as PnmReader / PnmWriter, so the batch mode and the
server can run decoded images (OpenCV / Pillow arrays) through the engine.

Array conventions:
  - bool (h, w): bilevel, True = white
  - integer (h, w): gray
  - integer (h, w, 3): RGB
"""

import numpy as np

from bordercrop.core.errors import RasterFormatError
from bordercrop.core.raster import (
    PBM_RAW, PGM_RAW, PPM_RAW, RasterHeader, bits_to_samples, sample_dtype,
)


def header_for_array(array, maxval=None):
    if array.ndim not in (2, 3) or array.shape[0] == 0 or array.shape[1] == 0:
        raise RasterFormatError(f"Unsupported image array shape {array.shape}")
    rows, cols = array.shape[:2]

    if array.dtype == np.bool_:
        return RasterHeader(cols, rows, 1, PBM_RAW)

    if maxval is None:
        if array.dtype == np.uint8:
            maxval = 255
        elif array.dtype == np.uint16:
            maxval = 65535
        else:
            raise RasterFormatError(f"Unsupported sample type {array.dtype}")

    if array.ndim == 2:
        return RasterHeader(cols, rows, maxval, PGM_RAW)
    if array.shape[2] == 3:
        return RasterHeader(cols, rows, maxval, PPM_RAW)
    raise RasterFormatError(f"Unsupported channel count {array.shape[2]}")


class ArraySource:
    """A single-image raster source backed by an array."""

    def __init__(self, array, maxval=None):
        self.array = np.asarray(array)
        self.header = header_for_array(self.array, maxval)
        self._row = 0

    def read_header(self):
        self._row = 0
        return self.header

    def tell(self):
        return self._row

    def seek(self, pos):
        self._row = pos

    def next_image(self):
        return False

    def _next(self):
        if self._row >= self.header.rows:
            raise RasterFormatError("Premature EOF in raster")
        row = self.array[self._row]
        self._row += 1
        return row

    def read_row(self):
        row = self._next()
        if self.header.bilevel:
            return row.astype(np.uint8).reshape(-1, 1)
        return row.reshape(self.header.cols, self.header.depth)

    def read_packed_row(self):
        return np.packbits(~self._next()).tobytes()

    def skip_rows(self, count):
        for _ in range(count):
            self._next()


class ArraySink:
    """Collects written images as arrays and report lines as strings."""

    def __init__(self):
        self.reports = []
        self._images = []

    def write_header(self, header):
        self._images.append((header, []))

    def write_row(self, samples):
        self._images[-1][1].append(np.array(samples))

    def write_packed_row(self, data):
        header = self._images[-1][0]
        bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8),
                             count=header.cols)
        self.write_row(bits_to_samples(bits))

    def write_report(self, line):
        self.reports.append(line)

    @property
    def arrays(self):
        """Every completed image, in the array conventions of this module."""
        result = []
        for header, rows in self._images:
            image = np.stack(rows) if rows else np.empty((0, header.cols, header.depth))
            if header.bilevel:
                result.append(image[:, :, 0].astype(bool))
            elif header.depth == 1:
                result.append(image[:, :, 0].astype(sample_dtype(header.maxval)))
            else:
                result.append(image.astype(sample_dtype(header.maxval)))
        return result
