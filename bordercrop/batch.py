"""
Batch border crop over a folder of ordinary image files.

Images are decoded with OpenCV, run through the same border crop engine as
Netpbm streams, and saved at full quality next to the originals in
'{folder} - Cropped'.
"""

import os

import cv2
import numpy as np
from PIL import Image

from bordercrop.core.arrays import ArraySink, ArraySource
from bordercrop.core.driver import crop_one_image
from bordercrop.core.errors import BlankImageAbort, ConfigError, CropError
from bordercrop.core.options import CropOptions
from bordercrop.core.planner import NO_OP

VALID_EXTS = ('.jpg', '.jpeg', '.png', '.bmp', '.tif', '.tiff', '.pbm', '.pgm', '.ppm')


# ---------------------------------------------------------------------------
# Image file I/O
# ---------------------------------------------------------------------------
def load_image(path):
    """Read an image as a gray (h, w) or RGB (h, w, 3) array, or None."""
    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        return None
    if img.ndim == 3 and img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)
    if img.ndim == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    return img


def save_image(array, path):
    if array.dtype == np.bool_:
        Image.fromarray(array).save(path)
    elif array.dtype == np.uint16 and array.ndim == 3:
        # Pillow cannot hold 16-bit RGB
        cv2.imwrite(path, cv2.cvtColor(array, cv2.COLOR_RGB2BGR))
    elif os.path.splitext(path)[1].lower() in ('.jpg', '.jpeg'):
        Image.fromarray(array).save(path, quality=100, subsampling=0)
    else:
        Image.fromarray(array).save(path)


# ---------------------------------------------------------------------------
# Crop Engine
# ---------------------------------------------------------------------------
def crop_array(array, options=None):
    """
    Border-crop one decoded image.

    Returns:
        tuple: (cropped array, CropSet)
    """
    options = (options or CropOptions()).validate()
    if options.reporting:
        raise ConfigError("Image files can only be cropped, not reported")
    sink = ArraySink()
    _, crop = crop_one_image(options, ArraySource(array), None, sink)
    return sink.arrays[0], crop


def _result(filename, status, original_size=None, cropped_size=None, error=None):
    return {
        "success": error is None,
        "status": status,
        "filename": filename,
        "original_size": original_size,
        "cropped_size": cropped_size,
        "error": error,
    }


def process_single_image(input_path, output_path, options=None):
    """
    Crop one image file and save it.

    Status is 'cropped' or 'original' on success, 'read_error', 'blank' or
    'error' otherwise; nothing is written on failure.

    Returns:
        dict with keys: success, status, filename, original_size, cropped_size, error
    """
    filename = os.path.basename(input_path)
    img = load_image(input_path)
    if img is None:
        return _result(filename, "read_error", error="could not decode image")

    h, w = img.shape[:2]
    try:
        cropped, crop = crop_array(img, options)
    except BlankImageAbort as e:
        return _result(filename, "blank", (w, h), error=str(e))
    except CropError as e:
        return _result(filename, "error", (w, h), error=str(e))

    save_image(cropped, output_path)

    changed = any(op != NO_OP for op in crop)
    ch, cw = cropped.shape[:2]
    return _result(filename, "cropped" if changed else "original", (w, h), (cw, ch))


def batch_process(input_folder, output_folder=None, options=None):
    """
    Crop every image file in a folder, in name order.

    Args:
        input_folder: Path to folder with images
        output_folder: Path to output (defaults to '{input_folder} - Cropped')
        options: CropOptions shared by every image

    Returns:
        list of result dicts from process_single_image
    """
    if output_folder is None:
        output_folder = input_folder.rstrip("/\\") + " - Cropped"
    os.makedirs(output_folder, exist_ok=True)

    names = sorted(f for f in os.listdir(input_folder) if f.lower().endswith(VALID_EXTS))
    return [process_single_image(os.path.join(input_folder, name),
                                 os.path.join(output_folder, name), options)
            for name in names]


# ---------------------------------------------------------------------------
# CLI Entry Point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    import sys
    from collections import Counter

    if len(sys.argv) < 2:
        print("Usage: python -m bordercrop.batch <input_folder> [output_folder]")
        sys.exit(1)

    input_dir = sys.argv[1]
    output_dir = sys.argv[2] if len(sys.argv) > 2 else None

    print(f"Processing: {input_dir}")
    results = batch_process(input_dir, output_dir, CropOptions(blank_mode="pass"))
    stats = Counter(r["status"] for r in results)

    total = len(results)
    print(f"\n{'='*50}")
    print(f"BATCH RESULTS: {total} images")
    for status, count in stats.most_common():
        print(f"  {status:15}: {count} ({count/total*100:4.1f}%)")
    print(f"{'='*50}")
