"""Tests for the border scanner."""

import numpy as np
import pytest

from bordercrop.core.arrays import ArraySource
from bordercrop.core.scanner import (
    BorderSet, allowable_difference, background_mask, colors_match, find_borders,
)


def _scan(array, background, closeness=0.0):
    source = ArraySource(array)
    header = source.read_header()
    return find_borders(source, header, background, closeness)


class TestColorMatch:
    """Tolerance rules."""

    def test_allowable_difference(self):
        assert allowable_difference(255, 10) == 44
        assert allowable_difference(255, 0) == 0
        assert allowable_difference(1, 100) == 2

    def test_exact_when_closeness_zero(self):
        assert colors_match((10, 10, 10), (10, 10, 10), 0)
        assert not colors_match((10, 10, 10), (10, 10, 11), 0)

    def test_within_tolerance(self):
        diff = allowable_difference(255, 10)
        assert colors_match((240,), (255,), diff)
        assert not colors_match((200,), (255,), diff)

    def test_reflexive_and_symmetric(self):
        diff = allowable_difference(255, 5)
        a, b = (10, 200, 30), (20, 190, 35)
        assert colors_match(a, a, diff)
        assert colors_match(a, b, diff) == colors_match(b, a, diff)

    def test_mask_agrees_with_scalar_rule(self):
        diff = allowable_difference(255, 8)
        row = np.array([[255, 255, 255], [240, 250, 255], [0, 0, 0], [230, 230, 230]])
        expected = [colors_match(px, (255, 255, 255), diff) for px in row]
        assert background_mask(row, (255, 255, 255), diff).tolist() == expected


class TestFindBorders:
    """One pass over the raster."""

    def test_centered_square(self, square_image):
        assert _scan(square_image, (255,)) == BorderSet(4, 4, 4, 4)

    def test_blank_image(self):
        assert _scan(np.full((3, 4), 7, dtype=np.uint8), (7,)) is None

    def test_content_touching_edges(self):
        image = np.full((4, 5), 255, dtype=np.uint8)
        image[0, 0] = 0
        image[3, 4] = 0
        assert _scan(image, (255,)) == BorderSet(0, 0, 0, 0)

    def test_noise_within_closeness(self):
        image = np.full((6, 6), 255, dtype=np.uint8)
        image[0, 0] = 245
        image[2:4, 3] = 0
        assert _scan(image, (255,), closeness=0) == BorderSet(0, 2, 0, 2)
        assert _scan(image, (255,), closeness=5) == BorderSet(3, 2, 2, 2)

    def test_color_raster(self):
        image = np.zeros((5, 5, 3), dtype=np.uint8)
        image[1, 2] = (10, 0, 0)
        assert _scan(image, (0, 0, 0)) == BorderSet(2, 2, 1, 3)

    def test_bilevel(self):
        image = np.ones((3, 10), dtype=bool)
        image[1, 8] = False
        assert _scan(image, (1,)) == BorderSet(8, 1, 1, 1)

    @pytest.mark.parametrize("closeness", [0.0, 50.0])
    def test_leaves_source_after_raster(self, square_image, closeness):
        source = ArraySource(square_image)
        header = source.read_header()
        find_borders(source, header, (255,), closeness)
        assert source.tell() == header.rows
