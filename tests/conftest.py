"""Shared helpers for building Netpbm byte streams in tests."""

import io

import numpy as np
import pytest

from bordercrop.core.pnm import PnmReader


def pbm_bytes(bits):
    """Raw PBM from a 2-D array of bits (1 = black)."""
    bits = np.asarray(bits, dtype=np.uint8)
    rows, cols = bits.shape
    body = b"".join(np.packbits(row).tobytes() for row in bits)
    return f"P4\n{cols} {rows}\n".encode("ascii") + body


def pgm_bytes(gray, maxval=255):
    gray = np.asarray(gray)
    rows, cols = gray.shape
    dtype = np.uint8 if maxval < 256 else np.dtype(">u2")
    return f"P5\n{cols} {rows}\n{maxval}\n".encode("ascii") + gray.astype(dtype).tobytes()


def ppm_bytes(rgb, maxval=255):
    rgb = np.asarray(rgb)
    rows, cols = rgb.shape[:2]
    dtype = np.uint8 if maxval < 256 else np.dtype(">u2")
    return f"P6\n{cols} {rows}\n{maxval}\n".encode("ascii") + rgb.astype(dtype).tobytes()


def read_images(data):
    """Every image in a Netpbm byte stream as (header, (rows, cols, depth) array)."""
    reader = PnmReader(io.BytesIO(data))
    images = []
    while True:
        header = reader.read_header()
        image = np.stack([reader.read_row() for _ in range(header.rows)])
        images.append((header, image))
        if not reader.next_image():
            return images


def reader_for(data):
    return PnmReader(io.BytesIO(data))


@pytest.fixture
def square_image():
    """10x10 white gray image with a 2x2 black square at rows/cols [4, 6)."""
    gray = np.full((10, 10), 255, dtype=np.uint8)
    gray[4:6, 4:6] = 0
    return gray
