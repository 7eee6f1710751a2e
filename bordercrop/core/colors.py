"""
Color names and conversion of colors between raster representations.

Names go through Pillow's ImageColor dictionary (CSS / X11 names, #rgb,
#rrggbb, rgb(...), hsl(...)); the X11 forms rgb:h/h/h and rgbi:f/f/f are
parsed here.
"""

from PIL import ImageColor

from bordercrop.core.errors import ConfigError, UnrepresentableColorError
from bordercrop.core.raster import MAX_MAXVAL, to_rgb


def _round(value):
    return int(value + 0.5)


def _parse_x11_hex(spec, name):
    parts = spec.split("/")
    if len(parts) != 3 or not all(1 <= len(p) <= 4 for p in parts):
        raise ConfigError(f"Invalid color specification '{name}'")
    try:
        return tuple(int(p, 16) / (16 ** len(p) - 1) for p in parts)
    except ValueError:
        raise ConfigError(f"Invalid color specification '{name}'") from None


def _parse_x11_intensity(spec, name):
    parts = spec.split("/")
    try:
        rgb = tuple(float(p) for p in parts)
    except ValueError:
        raise ConfigError(f"Invalid color specification '{name}'") from None
    if len(rgb) != 3 or not all(0.0 <= c <= 1.0 for c in rgb):
        raise ConfigError(f"Invalid color specification '{name}'")
    return rgb


def resolve_color_name(name):
    """
    Look up a color name or specification.

    Returns:
        (r, g, b) floats in [0, 1]
    """
    spec = "".join(name.split()).lower()
    if spec.startswith("rgb:"):
        return _parse_x11_hex(spec[4:], name)
    if spec.startswith("rgbi:"):
        return _parse_x11_intensity(spec[5:], name)
    try:
        rgb = ImageColor.getrgb(spec)
    except ValueError:
        raise ConfigError(f"Unknown color name '{name}'") from None
    return tuple(c / 255 for c in rgb[:3])


def color_from_name(name, header):
    """
    The color `name` in the representation described by `header`.

    A bilevel raster can only express black and white, a gray raster only
    grays; anything else raises UnrepresentableColorError.
    """
    rgb = resolve_color_name(name)
    at_maxval = tuple(_round(c * header.maxval) for c in rgb)
    at_max = tuple(_round(c * MAX_MAXVAL) for c in rgb)

    has_color = not (at_max[0] == at_max[1] == at_max[2])
    has_gray = not has_color and at_max[0] not in (0, MAX_MAXVAL)

    if header.depth == 3:
        return at_maxval
    if has_color:
        raise UnrepresentableColorError(
            f"Invalid color specified: '{name}'. Image does not have color.")
    if header.bilevel and has_gray:
        raise UnrepresentableColorError(
            f"Invalid color specified: '{name}'. "
            "Image has no intermediate levels of gray.")
    return (at_maxval[0],)


def adapt_color(color, source, target):
    """Express `color` from raster `source` in the representation of `target`."""
    if source.maxval == target.maxval and source.depth == target.depth:
        return tuple(color)

    r, g, b = (_round(c * target.maxval / source.maxval) for c in to_rgb(color))
    if target.depth == 3:
        return (r, g, b)
    if r == g == b:
        return (r,)
    return (min(target.maxval, _round(0.299 * r + 0.587 * g + 0.114 * b)),)


def describe_color(color, header):
    """A dictionary name for `color` if it has one, else #rrggbb."""
    rgb8 = tuple(_round(c * 255 / header.maxval) for c in to_rgb(color))
    for name in sorted(ImageColor.colormap):
        if ImageColor.getrgb(name)[:3] == rgb8:
            return name
    return "#%02x%02x%02x" % rgb8
