"""
Stream rewriter: apply a CropSet to the primary raster in one forward pass.

One working row serves both reading and writing. Its layout:

    | left margin | foreground | right margin |
    0             fg_offset    fg_offset + fg_length        total_length

The left margin is wide enough for the larger of the pixels removed and
the pixels padded on the left, likewise on the right. An input row is
read in at `read_offset` so that its first kept pixel lands on
`fg_offset`; an output row is written from `write_offset` so that it
starts with exactly `pad_left` background pixels. Pad and removal never
share an edge, so the prefilled pad slots are never overwritten by a read.

Bilevel rows go through an unpacked bit buffer: read_bit_span() places a
packed row at any bit offset and pack_bit_span() packs any span with the
unused bits of the final byte cleared.
"""

import numpy as np

from bordercrop.core.raster import RasterHeader, to_rgb


class RowBuffer:
    """Region descriptor for the working row of one image."""

    def __init__(self, crop, cols):
        self.foreground_length = cols - crop.left.remove - crop.right.remove
        self.foreground_offset = max(crop.left.remove, crop.left.pad)
        self.total_length = (self.foreground_offset + self.foreground_length
                             + max(crop.right.remove, crop.right.pad))
        self.read_offset = self.foreground_offset - crop.left.remove
        self.write_offset = self.foreground_offset - crop.left.pad
        self.output_length = self.foreground_length + crop.left.pad + crop.right.pad
        self.cols = cols

        assert self.foreground_length >= 0
        assert self.read_offset + cols <= self.total_length
        assert self.write_offset + self.output_length <= self.total_length

    @property
    def read_span(self):
        return slice(self.read_offset, self.read_offset + self.cols)

    @property
    def write_span(self):
        return slice(self.write_offset, self.write_offset + self.output_length)


# ---------------------------------------------------------------------------
# Bit spans
# ---------------------------------------------------------------------------
def read_bit_span(packed, bits, offset, count):
    """Unpack the first `count` bits of `packed` into bits[offset:offset+count]."""
    bits[offset:offset + count] = np.unpackbits(
        np.frombuffer(bytes(packed), dtype=np.uint8), count=count)


def pack_bit_span(bits, offset, count):
    """PBM bytes for bits[offset:offset+count], trailing pad bits zero."""
    return np.packbits(bits[offset:offset + count]).tobytes()


def fill_bits(count, black):
    return pack_bit_span(np.full(count, 1 if black else 0, dtype=np.uint8), 0, count)


# ---------------------------------------------------------------------------
# Rewriting
# ---------------------------------------------------------------------------
def _write_pbm(source, header, crop, background, sink, rows_out):
    layout = RowBuffer(crop, header.cols)
    black = background[0] == 0

    source.skip_rows(crop.top.remove)

    pad_row = fill_bits(layout.output_length, black)
    for _ in range(crop.top.pad):
        sink.write_packed_row(pad_row)

    bits = np.full(layout.total_length, 1 if black else 0, dtype=np.uint8)
    for _ in range(rows_out):
        read_bit_span(source.read_packed_row(), bits, layout.read_offset, header.cols)
        sink.write_packed_row(pack_bit_span(bits, layout.write_offset, layout.output_length))

    source.skip_rows(crop.bottom.remove)

    for _ in range(crop.bottom.pad):
        sink.write_packed_row(pad_row)


def _write_samples(source, header, crop, background, sink, rows_out):
    layout = RowBuffer(crop, header.cols)
    fill = np.asarray(background, dtype=np.uint16)

    source.skip_rows(crop.top.remove)

    pad_row = np.tile(fill, (layout.output_length, 1))
    for _ in range(crop.top.pad):
        sink.write_row(pad_row)

    buffer = np.empty((layout.total_length, header.depth), dtype=np.uint16)
    fg_end = layout.foreground_offset + layout.foreground_length
    buffer[layout.write_offset:layout.foreground_offset] = fill
    buffer[fg_end:fg_end + crop.right.pad] = fill

    for _ in range(rows_out):
        buffer[layout.read_span] = source.read_row()
        sink.write_row(buffer[layout.write_span])

    source.skip_rows(crop.bottom.remove)

    for _ in range(crop.bottom.pad):
        sink.write_row(pad_row)


def rewrite_image(source, header, crop, background, sink):
    """
    Write the cropped/padded image to `sink`.

    Expects `source` at the start of the raster and leaves it after the
    raster. Only reads forward.

    Returns:
        RasterHeader of the output image
    """
    foreground_rows = header.rows - crop.top.remove - crop.bottom.remove
    out_header = RasterHeader(crop.output_cols(header.cols),
                              crop.output_rows(header.rows),
                              header.maxval, header.fmt)
    sink.write_header(out_header)

    if header.bilevel:
        _write_pbm(source, header, crop, background, sink, foreground_rows)
    else:
        _write_samples(source, header, crop, background, sink, foreground_rows)
    return out_header


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
def report_tokens(crop):
    tokens = []
    for op in crop:
        if op.remove > 0:
            tokens.append(f"-{op.remove}")
        elif op.pad > 0:
            tokens.append(f"+{op.pad}")
        else:
            tokens.append("0")
    return tokens


def report_dimensions(crop, cols, rows):
    """
    Output size as reported. An axis where an edge claims the full
    dimension (blank image, maxcrop) reports the original size.
    """
    if cols in (crop.left.remove, crop.right.remove):
        out_cols = cols
    else:
        out_cols = crop.output_cols(cols)
    if rows in (crop.top.remove, crop.bottom.remove):
        out_rows = rows
    else:
        out_rows = crop.output_rows(rows)
    return out_cols, out_rows


def format_report_size(crop, cols, rows):
    out_cols, out_rows = report_dimensions(crop, cols, rows)
    return " ".join(report_tokens(crop) + [str(out_cols), str(out_rows)])


def format_report_full(crop, header, background, closeness):
    r, g, b = to_rgb(background)
    return (f"{format_report_size(crop, header.cols, header.rows)} "
            f"rgb-{header.maxval}:{r}/{g}/{b} {closeness:f}")
