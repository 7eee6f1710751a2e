"""
Netpbm stream I/O: row-at-a-time reader and writer for PBM, PGM and PPM.

The reader works on a binary stream and never buffers more than one row.
Analysis needs to seek back to the raster start, so inputs that cannot
seek (pipes, stdin) go through open_seekable() first.
"""

import io
import shutil
import sys
import tempfile

import numpy as np

from bordercrop.core.errors import RasterFormatError
from bordercrop.core.raster import (
    FORMATS, MAX_MAXVAL, RasterHeader, bits_to_samples, samples_to_bits,
)

PLAIN_LINE_WIDTH = 70


def open_seekable(path):
    """
    Open `path` ('-' for stdin) as a seekable binary stream.

    A non-seekable stream is copied to an anonymous temporary file first.
    """
    if path in (None, "-"):
        stream = sys.stdin.buffer
    else:
        stream = open(path, "rb")

    if stream.seekable():
        return stream

    spool = tempfile.TemporaryFile()
    with stream:
        shutil.copyfileobj(stream, spool)
    spool.seek(0)
    return spool


class PnmReader:
    """Sequential reader for a stream of one or more Netpbm images."""

    def __init__(self, stream):
        self.stream = stream
        self.header = None

    # -- header -----------------------------------------------------------

    def _next_significant(self):
        while True:
            c = self.stream.read(1)
            if not c:
                raise RasterFormatError("Premature EOF in image header")
            if c == b"#":
                self.stream.readline()
            elif not c.isspace():
                return c

    def _read_header_int(self, what):
        c = self._next_significant()
        digits = b""
        while c and c.isdigit():
            digits += c
            c = self.stream.read(1)
        if not digits:
            raise RasterFormatError(f"Junk in header where {what} should be")
        if c == b"#":
            self.stream.readline()
        return int(digits)

    def read_header(self):
        magic = self.stream.read(2)
        if len(magic) < 2:
            raise RasterFormatError("Premature EOF reading magic number")
        fmt = magic.decode("latin-1")
        if fmt not in FORMATS:
            raise RasterFormatError(
                f"Bad magic number {magic!r} - not a PPM, PGM, or PBM file")

        cols = self._read_header_int("width")
        rows = self._read_header_int("height")
        if fmt in ("P1", "P4"):
            maxval = 1
        else:
            maxval = self._read_header_int("maxval")

        if cols == 0 or rows == 0:
            raise RasterFormatError(f"Image has zero size: {cols}x{rows}")
        if not 0 < maxval <= MAX_MAXVAL:
            raise RasterFormatError(f"maxval {maxval} is out of range")

        self.header = RasterHeader(cols, rows, maxval, fmt)
        return self.header

    # -- positioning ------------------------------------------------------

    def tell(self):
        return self.stream.tell()

    def seek(self, pos):
        self.stream.seek(pos)

    def next_image(self):
        """Skip to the next image. Returns False at end of stream."""
        while True:
            c = self.stream.read(1)
            if not c:
                return False
            if not c.isspace():
                self.stream.seek(-1, io.SEEK_CUR)
                return True

    # -- raster -----------------------------------------------------------

    def _read_exact(self, size):
        data = self.stream.read(size)
        if len(data) < size:
            raise RasterFormatError("Premature EOF in raster")
        return data

    def _read_plain_sample(self):
        c = self._next_significant_raster()
        digits = b""
        while c and c.isdigit():
            digits += c
            c = self.stream.read(1)
        if not digits:
            raise RasterFormatError("Junk in plain raster where a sample should be")
        return int(digits)

    def _next_significant_raster(self):
        try:
            return self._next_significant()
        except RasterFormatError:
            raise RasterFormatError("Premature EOF in raster") from None

    def _read_plain_bits(self, cols):
        bits = np.empty(cols, dtype=np.uint8)
        for col in range(cols):
            c = self._next_significant_raster()
            if c not in (b"0", b"1"):
                raise RasterFormatError(f"Junk in PBM raster: {c!r}")
            bits[col] = c == b"1"
        return bits

    def _read_bits(self):
        header = self.header
        if header.plain:
            return self._read_plain_bits(header.cols)
        data = self._read_exact(header.packed_bytes())
        return np.unpackbits(np.frombuffer(data, dtype=np.uint8), count=header.cols)

    def read_packed_row(self):
        """One bilevel row as packed PBM bytes."""
        header = self.header
        if header.plain:
            return np.packbits(self._read_plain_bits(header.cols)).tobytes()
        return self._read_exact(header.packed_bytes())

    def read_row(self):
        """One row as samples, shape (cols, depth)."""
        header = self.header
        if header.bilevel:
            return bits_to_samples(self._read_bits())

        count = header.cols * header.depth
        if header.plain:
            samples = np.array([self._read_plain_sample() for _ in range(count)],
                               dtype=np.int64)
        else:
            dtype = np.uint8 if header.maxval < 256 else np.dtype(">u2")
            data = self._read_exact(count * np.dtype(dtype).itemsize)
            samples = np.frombuffer(data, dtype=dtype)

        if samples.max() > header.maxval:
            raise RasterFormatError(
                f"Sample value {int(samples.max())} exceeds maxval {header.maxval}")
        return samples.astype(np.uint16).reshape(header.cols, header.depth)

    def skip_rows(self, count):
        header = self.header
        if header.plain:
            for _ in range(count):
                self.read_row()
            return
        if header.bilevel:
            row_bytes = header.packed_bytes()
        else:
            row_bytes = header.cols * header.depth * (1 if header.maxval < 256 else 2)
        for _ in range(count):
            self._read_exact(row_bytes)


class PnmWriter:
    """Writes Netpbm images, raw unless `plain` is set."""

    def __init__(self, stream, plain=False):
        self.stream = stream
        self.plain = plain
        self.header = None

    def write_header(self, header):
        fmt = header.plain_fmt if self.plain else header.raw_fmt
        self.header = header._replace(fmt=fmt)
        if header.bilevel:
            text = f"{fmt}\n{header.cols} {header.rows}\n"
        else:
            text = f"{fmt}\n{header.cols} {header.rows}\n{header.maxval}\n"
        self.stream.write(text.encode("ascii"))

    def _write_plain(self, tokens, sep):
        line = ""
        for token in tokens:
            candidate = token if not line else line + sep + token
            if len(candidate) > PLAIN_LINE_WIDTH:
                self.stream.write((line + "\n").encode("ascii"))
                line = token
            else:
                line = candidate
        self.stream.write((line + "\n").encode("ascii"))

    def write_packed_row(self, data):
        if not self.plain:
            self.stream.write(bytes(data))
            return
        bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8),
                             count=self.header.cols)
        self._write_plain([str(b) for b in bits], "")

    def write_row(self, samples):
        header = self.header
        if header.bilevel:
            self.write_packed_row(np.packbits(samples_to_bits(samples)).tobytes())
        elif self.plain:
            self._write_plain([str(int(s)) for s in np.ravel(samples)], " ")
        else:
            dtype = np.uint8 if header.maxval < 256 else np.dtype(">u2")
            self.stream.write(np.asarray(samples).astype(dtype).tobytes())

    def write_report(self, line):
        self.stream.write((line + "\n").encode("ascii"))
