"""
Run configuration for the crop engine.

CropOptions is built once (CLI, batch mode or server form fields),
validated, and then shared read-only by every image of the run.
"""

from dataclasses import dataclass

from bordercrop.core.errors import ConfigError


# Background color choices
BG_DEFAULT = "default"
BG_BLACK = "black"
BG_WHITE = "white"
BG_SIDES = "sides"
BG_CORNER = "corner"
BG_COLOR = "color"
BACKGROUNDS = (BG_DEFAULT, BG_BLACK, BG_WHITE, BG_SIDES, BG_CORNER, BG_COLOR)

# Corner name -> (vertical edge, horizontal edge)
CORNERS = {
    "topleft": ("top", "left"),
    "topright": ("top", "right"),
    "bottomleft": ("bottom", "left"),
    "bottomright": ("bottom", "right"),
}

# Blank image policies
BLANK_ABORT = "abort"
BLANK_PASS = "pass"
BLANK_MINIMIZE = "minimize"
BLANK_MAXCROP = "maxcrop"
BLANK_MODES = (BLANK_ABORT, BLANK_PASS, BLANK_MINIMIZE, BLANK_MAXCROP)

# Output modes
MODE_CROP = "crop"
MODE_REPORT_FULL = "reportfull"
MODE_REPORT_SIZE = "reportsize"
MODES = (MODE_CROP, MODE_REPORT_FULL, MODE_REPORT_SIZE)


@dataclass(frozen=True)
class CropOptions:
    background: str = BG_DEFAULT
    bg_color: str = None
    bg_corner: str = None
    want_crop: tuple = (True, True, True, True)   # left, right, top, bottom
    margin: int = 0
    closeness: float = 0.0
    blank_mode: str = BLANK_ABORT
    mode: str = MODE_CROP
    borderfile: str = None
    verbose: bool = False
    plain: bool = False

    @property
    def reporting(self):
        return self.mode != MODE_CROP

    def validate(self):
        """Raise ConfigError for an invalid or conflicting combination."""
        if self.background not in BACKGROUNDS:
            raise ConfigError(f"Invalid background choice '{self.background}'")
        if self.background == BG_COLOR and not self.bg_color:
            raise ConfigError("A background color name is required")
        if self.background == BG_CORNER and self.bg_corner not in CORNERS:
            raise ConfigError(
                "Invalid value for --bg-corner. Must be one of "
                "'topleft', 'topright', 'bottomleft', 'bottomright'")
        if len(self.want_crop) != 4:
            raise ConfigError("Crop selection needs one flag per edge")
        if self.margin < 0:
            raise ConfigError(f"--margin value {self.margin} is negative")
        if self.closeness < 0.0:
            raise ConfigError(f"--closeness value {self.closeness:f} is negative")
        if self.closeness > 100.0:
            raise ConfigError(f"--closeness value {self.closeness:f} is more than 100%")
        if self.mode not in MODES:
            raise ConfigError(f"Invalid output mode '{self.mode}'")
        if self.blank_mode not in BLANK_MODES:
            raise ConfigError("Invalid value for --blank-image")
        if self.blank_mode == BLANK_MAXCROP and not self.reporting:
            raise ConfigError(
                "Option --blank-image=maxcrop requires --reportfull or --reportsize")
        if self.borderfile and self.reporting:
            raise ConfigError(
                "You cannot specify --reportfull or --reportsize with --borderfile")
        return self
