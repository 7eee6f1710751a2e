"""
Multi-image driver.

For each image in the input stream: read the header, analyze the image
(background color + borders) on the border file if one is given or on the
input itself, plan the crops, then rewrite the input or report the plan.
"""

import logging

from bordercrop.core.background import resolve_background
from bordercrop.core.colors import adapt_color, describe_color
from bordercrop.core.errors import ImageSizeMismatch, StreamCountMismatch
from bordercrop.core.options import MODE_CROP, MODE_REPORT_FULL, MODE_REPORT_SIZE
from bordercrop.core.planner import plan_image
from bordercrop.core.rewriter import format_report_full, format_report_size, rewrite_image
from bordercrop.core.scanner import find_borders

logger = logging.getLogger(__name__)


def analyze_image(source, header, options, rewind):
    """
    Find the background color and the borders of the image at `source`.

    Expects `source` right after the header and seekable. Leaves it at the
    raster start if `rewind`, else after the raster.

    Returns:
        tuple: (background_color, BorderSet or None)
    """
    raster_pos = source.tell()

    background = resolve_background(source, header, options)
    source.seek(raster_pos)

    borders = find_borders(source, header, background, options.closeness)

    if rewind:
        source.seek(raster_pos)
    return background, borders


def crop_one_image(options, source, border_source, sink):
    """
    Crop the image `source` is positioned at and write the result to `sink`.

    Leaves `source` and `border_source` after their images.

    Returns:
        tuple: (input RasterHeader, CropSet)
    """
    header = source.read_header()

    if border_source is not None:
        border_header = border_source.read_header()
        if (border_header.cols, border_header.rows) != (header.cols, header.rows):
            raise ImageSizeMismatch(
                f"Input file image [{header.cols} x {header.rows}] and border file image "
                f"[{border_header.cols} x {border_header.rows}] differ in size")
        analysis_source, analysis_header = border_source, border_header
    else:
        analysis_source, analysis_header = source, header

    rewind = border_source is None and options.mode == MODE_CROP
    background, borders = analyze_image(analysis_source, analysis_header, options, rewind)

    if analysis_header != header:
        background = adapt_color(background, analysis_header, header)

    if logger.isEnabledFor(logging.INFO):
        logger.info("Background color is %s", describe_color(background, header))

    crop = plan_image(borders, options, header.cols, header.rows)

    if options.mode == MODE_CROP:
        rewrite_image(source, header, crop, background, sink)
    elif options.mode == MODE_REPORT_FULL:
        sink.write_report(format_report_full(crop, header, background, options.closeness))
    elif options.mode == MODE_REPORT_SIZE:
        sink.write_report(format_report_size(crop, header.cols, header.rows))
    return header, crop


def run(options, source, sink, border_source=None):
    """
    Crop every image in `source`.

    Returns:
        int: number of images processed
    """
    count = 0
    while True:
        crop_one_image(options, source, border_source, sink)
        count += 1

        more = source.next_image()
        if border_source is not None:
            border_more = border_source.next_image()
            if more and not border_more:
                raise StreamCountMismatch("Input file has more images than border file.")
            if border_more and not more:
                raise StreamCountMismatch("Border file has more images than image file.")
        if not more:
            return count
