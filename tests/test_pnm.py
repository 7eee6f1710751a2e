"""Tests for the Netpbm stream reader and writer."""

import io

import numpy as np
import pytest

from bordercrop.core.errors import RasterFormatError
from bordercrop.core.pnm import PnmReader, PnmWriter, open_seekable
from bordercrop.core.raster import RasterHeader

from conftest import pbm_bytes, pgm_bytes, ppm_bytes, read_images, reader_for


class TestHeader:
    """Header parsing."""

    def test_comments_and_whitespace(self):
        """Comments may appear anywhere in the header."""
        data = b"P5\n# a comment\n3 # width done\n2\n255\n" + bytes(6)
        header = reader_for(data).read_header()
        assert header == RasterHeader(3, 2, 255, "P5")

    def test_pbm_has_maxval_one(self):
        header = reader_for(pbm_bytes([[1, 0, 1]])).read_header()
        assert header.maxval == 1
        assert header.bilevel
        assert header.depth == 1

    def test_bad_magic(self):
        with pytest.raises(RasterFormatError, match="magic"):
            reader_for(b"GIF89a").read_header()

    def test_empty_stream(self):
        with pytest.raises(RasterFormatError):
            reader_for(b"").read_header()

    def test_zero_size(self):
        with pytest.raises(RasterFormatError, match="zero size"):
            reader_for(b"P5\n0 3\n255\n").read_header()

    def test_format_variants(self):
        header = RasterHeader(1, 1, 255, "P3")
        assert header.raw_fmt == "P6"
        assert header.plain_fmt == "P3"
        assert RasterHeader(1, 1, 255, "P5").plain_fmt == "P2"


class TestRows:
    """Row reading in every representation."""

    def test_raw_gray(self):
        gray = np.arange(6, dtype=np.uint8).reshape(2, 3)
        reader = reader_for(pgm_bytes(gray))
        reader.read_header()
        assert reader.read_row()[:, 0].tolist() == [0, 1, 2]
        assert reader.read_row()[:, 0].tolist() == [3, 4, 5]

    def test_raw_sixteen_bit(self):
        gray = np.array([[1000, 65535]])
        reader = reader_for(pgm_bytes(gray, maxval=65535))
        reader.read_header()
        assert reader.read_row()[:, 0].tolist() == [1000, 65535]

    def test_raw_color(self):
        rgb = np.array([[[1, 2, 3], [4, 5, 6]]])
        reader = reader_for(ppm_bytes(rgb))
        reader.read_header()
        assert reader.read_row().tolist() == [[1, 2, 3], [4, 5, 6]]

    def test_pbm_samples_are_white_one(self):
        """A black bit reads as sample 0, a white bit as sample 1."""
        reader = reader_for(pbm_bytes([[1, 0, 0, 1, 1, 1, 0, 0, 1]]))
        reader.read_header()
        assert reader.read_row()[:, 0].tolist() == [0, 1, 1, 0, 0, 0, 1, 1, 0]

    def test_plain_pbm_packed(self):
        reader = reader_for(b"P1\n3 1\n1 0\n1\n")
        reader.read_header()
        assert reader.read_packed_row() == bytes([0b10100000])

    def test_plain_pbm_without_separators(self):
        reader = reader_for(b"P1\n4 1\n0110\n")
        reader.read_header()
        assert reader.read_row()[:, 0].tolist() == [1, 0, 0, 1]

    def test_plain_gray(self):
        reader = reader_for(b"P2\n3 1\n15\n0 7\n15\n")
        reader.read_header()
        assert reader.read_row()[:, 0].tolist() == [0, 7, 15]

    def test_sample_above_maxval(self):
        reader = reader_for(b"P2\n1 1\n15\n16\n")
        reader.read_header()
        with pytest.raises(RasterFormatError, match="exceeds maxval"):
            reader.read_row()

    def test_premature_eof(self):
        reader = reader_for(b"P5\n4 4\n255\n" + bytes(5))
        reader.read_header()
        reader.read_row()
        with pytest.raises(RasterFormatError, match="EOF"):
            reader.read_row()

    def test_skip_rows(self):
        gray = np.arange(12, dtype=np.uint8).reshape(4, 3)
        reader = reader_for(pgm_bytes(gray))
        reader.read_header()
        reader.skip_rows(3)
        assert reader.read_row()[:, 0].tolist() == [9, 10, 11]


class TestMultiImage:
    """Streams holding several images."""

    def test_next_image(self):
        data = pgm_bytes([[1]]) + b"\n" + pgm_bytes([[2, 3]])
        images = read_images(data)
        assert [h.cols for h, _ in images] == [1, 2]
        assert images[1][1][0, :, 0].tolist() == [2, 3]

    def test_seek_back_to_raster(self):
        reader = reader_for(pgm_bytes([[7, 8]]))
        reader.read_header()
        pos = reader.tell()
        reader.read_row()
        reader.seek(pos)
        assert reader.read_row()[:, 0].tolist() == [7, 8]
        assert reader.next_image() is False


class TestWriter:
    """Raw and plain output."""

    def test_raw_roundtrip(self):
        out = io.BytesIO()
        writer = PnmWriter(out)
        writer.write_header(RasterHeader(2, 1, 255, "P2"))
        writer.write_row(np.array([[5], [6]]))
        assert out.getvalue() == b"P5\n2 1\n255\n\x05\x06"

    def test_plain_pbm(self):
        out = io.BytesIO()
        writer = PnmWriter(out, plain=True)
        writer.write_header(RasterHeader(3, 1, 1, "P4"))
        writer.write_packed_row(bytes([0b01000000]))
        assert out.getvalue() == b"P1\n3 1\n010\n"

    def test_plain_lines_wrap(self):
        out = io.BytesIO()
        writer = PnmWriter(out, plain=True)
        writer.write_header(RasterHeader(40, 1, 255, "P5"))
        writer.write_row(np.full((40, 1), 100))
        lines = out.getvalue().decode("ascii").splitlines()[3:]
        assert len(lines) > 1
        assert all(len(line) <= 70 for line in lines)

    def test_report_line(self):
        out = io.BytesIO()
        PnmWriter(out).write_report("0 0 0 0 3 3")
        assert out.getvalue() == b"0 0 0 0 3 3\n"


def test_open_seekable_file(tmp_path):
    path = tmp_path / "img.pgm"
    path.write_bytes(pgm_bytes([[1, 2]]))
    with open_seekable(str(path)) as stream:
        assert stream.seekable()
        assert PnmReader(stream).read_header().cols == 2
