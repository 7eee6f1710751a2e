"""
Error taxonomy for the border crop engine.

Every failure is terminal for a run: the CLI prints one diagnostic and
exits non-zero, the batch mode records it per file, the server turns it
into an HTTP error.
"""


class CropError(Exception):
    """Base class for every failure the engine reports."""


class ConfigError(CropError):
    """Conflicting or invalid option combination."""


class UnrepresentableColorError(CropError):
    """Requested background color cannot be expressed in the image."""


class BlankImageAbort(CropError):
    """The image is entirely background and the blank policy is 'abort'."""


class StreamMismatch(CropError):
    """Input stream and border file stream disagree."""


class StreamCountMismatch(StreamMismatch):
    """One of the paired streams ran out of images before the other."""


class ImageSizeMismatch(StreamMismatch):
    """Paired images do not have the same dimensions."""


class SizeOverflow(CropError):
    """Computed output dimensions are too large to represent."""


class InvariantViolation(CropError):
    """An edge would both remove and add pixels. Programming error."""


class RasterFormatError(CropError):
    """Input is not a well-formed Netpbm raster."""
