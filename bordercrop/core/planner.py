"""
Crop planning: detected borders + margin + edge selection -> CropSet.

A CropOp either removes pixels from an edge or pads it with background,
never both.
"""

import logging
from collections import namedtuple

from bordercrop.core.errors import BlankImageAbort, InvariantViolation, SizeOverflow
from bordercrop.core.options import BLANK_ABORT, BLANK_MAXCROP, BLANK_MINIMIZE, BLANK_PASS
from bordercrop.core.raster import EDGE_NAMES, MAX_DIMENSION, Edge

logger = logging.getLogger(__name__)


CropOp = namedtuple("CropOp", "remove pad")

NO_OP = CropOp(0, 0)


class CropSet(namedtuple("CropSet", "left right top bottom")):
    """One CropOp per edge, indexable by Edge."""

    __slots__ = ()

    def output_cols(self, cols):
        return cols - self.left.remove - self.right.remove + self.left.pad + self.right.pad

    def output_rows(self, rows):
        return rows - self.top.remove - self.bottom.remove + self.top.pad + self.bottom.pad


def _ending(n):
    return "s" if n > 1 else ""


def plan_crops(borders, want_crop, margin):
    """Crops for an image that has content, keeping `margin` pixels of border."""
    ops = []
    for edge in Edge:
        if not want_crop[edge]:
            ops.append(NO_OP)
        elif borders[edge] > margin:
            ops.append(CropOp(borders[edge] - margin, 0))
        else:
            ops.append(CropOp(0, margin - borders[edge]))
    return CropSet(*ops)


def _axis_crops(want_first, want_second, size, full):
    """Removal sizes for one axis of a blank image."""
    if want_first and want_second:
        if full:
            return size, size
        first = size // 2
        return first, size - first - 1
    if want_first:
        return (size if full else size - 1), 0
    if want_second:
        return 0, (size if full else size - 1)
    return 0, 0


def plan_blank(blank_mode, want_crop, margin, cols, rows):
    """
    Crops for an image that is entirely background.

    minimize leaves one row and/or column; maxcrop reports the full
    dimension on every wanted edge and can only be reported, not applied.
    """
    if blank_mode == BLANK_ABORT:
        raise BlankImageAbort("The image is entirely background; there is nothing to crop.")

    if margin > 0:
        logger.warning("--margin value %d ignored", margin)

    if blank_mode == BLANK_PASS:
        logger.info("The image is entirely background; "
                    "there is nothing to crop.  Copying to output.")
        return CropSet(NO_OP, NO_OP, NO_OP, NO_OP)

    if blank_mode == BLANK_MINIMIZE:
        logger.info("Input image has no distinction between border and content")
        full = False
    elif blank_mode == BLANK_MAXCROP:
        full = True
    else:
        raise ValueError(f"unknown blank mode {blank_mode!r}")

    left, right = _axis_crops(want_crop[Edge.LEFT], want_crop[Edge.RIGHT], cols, full)
    top, bottom = _axis_crops(want_crop[Edge.TOP], want_crop[Edge.BOTTOM], rows, full)
    return CropSet(CropOp(left, 0), CropOp(right, 0), CropOp(top, 0), CropOp(bottom, 0))


def validate_crop_set(crop):
    for edge in Edge:
        op = crop[edge]
        if op.remove > 0 and op.pad > 0:
            raise InvariantViolation(
                f"Attempt to add {op.pad} and crop {op.remove} on {EDGE_NAMES[edge]} edge.  "
                "Simultaneous pad and crop is not allowed")


def validate_computable_size(cols, rows, crop):
    new_cols = cols + crop.left.pad + crop.right.pad
    new_rows = rows + crop.top.pad + crop.bottom.pad
    if new_cols > MAX_DIMENSION:
        raise SizeOverflow(f"Output width too large: {new_cols}.")
    if new_rows > MAX_DIMENSION:
        raise SizeOverflow(f"Output height too large: {new_rows}.")


def log_cropping_parameters(crop):
    for edge in Edge:
        op, name = crop[edge], EDGE_NAMES[edge]
        if op == NO_OP:
            logger.info("Not cropping %s edge", name)
        if op.pad > 0:
            logger.info("Adding %d pixel%s to the %s border", op.pad, _ending(op.pad), name)
        if op.remove > 0:
            logger.info("Cropping %d pixel%s from the %s border",
                        op.remove, _ending(op.remove), name)


def plan_image(borders, options, cols, rows):
    """
    CropSet for one image.

    Args:
        borders: BorderSet, or None if the image is entirely background
        options: CropOptions
        cols, rows: image dimensions

    Returns:
        CropSet
    """
    if borders is None:
        crop = plan_blank(options.blank_mode, options.want_crop, options.margin, cols, rows)
    else:
        crop = plan_crops(borders, options.want_crop, options.margin)
        validate_computable_size(cols, rows, crop)
        log_cropping_parameters(crop)

    validate_crop_set(crop)
    return crop
