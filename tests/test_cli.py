"""Tests for the command line front end."""

import io
import logging

import pytest

from bordercrop.cli import build_parser, main, options_from_args
from bordercrop.core.errors import ConfigError

from conftest import pgm_bytes, read_images


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("bordercrop")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def square_file(tmp_path, square_image):
    path = tmp_path / "square.pgm"
    path.write_bytes(pgm_bytes(square_image))
    return str(path)


def _options(*argv):
    return options_from_args(build_parser().parse_args(list(argv)))


class TestOptions:
    """Flags to CropOptions."""

    def test_defaults(self):
        options = _options()
        assert options.background == "default"
        assert options.want_crop == (True, True, True, True)
        assert options.mode == "crop"
        assert options.blank_mode == "abort"

    def test_edges_selected(self):
        assert _options("--left", "--bottom").want_crop == (True, False, False, True)

    def test_background_choices(self):
        assert _options("--white").background == "white"
        assert _options("--bg-color", "blue").bg_color == "blue"
        assert _options("--bg-corner", "topright").background == "corner"

    def test_exclusive_background_flags(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--black", "--white"])

    def test_exclusive_reports(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--reportfull", "--reportsize"])

    def test_closeness_over_100(self):
        with pytest.raises(ConfigError, match="more than 100%"):
            _options("--closeness", "101")

    def test_negative_margin(self):
        with pytest.raises(ConfigError):
            _options("--margin", "-1")

    def test_maxcrop_needs_report(self):
        with pytest.raises(ConfigError, match="maxcrop"):
            _options("--blank-image", "maxcrop")
        assert _options("--blank-image", "maxcrop", "--reportsize").blank_mode == "maxcrop"

    def test_borderfile_with_report(self):
        with pytest.raises(ConfigError, match="--borderfile"):
            _options("--borderfile", "x.pgm", "--reportfull")


class TestMain:
    """Whole runs against files."""

    def test_crop(self, square_file):
        stdout = io.BytesIO()
        assert main([square_file], stdout=stdout) == 0
        [(header, _)] = read_images(stdout.getvalue())
        assert (header.cols, header.rows) == (2, 2)

    def test_reportsize(self, square_file):
        stdout = io.BytesIO()
        assert main(["--reportsize", square_file], stdout=stdout) == 0
        assert stdout.getvalue() == b"-4 -4 -4 -4 2 2\n"

    def test_borderfile(self, tmp_path, square_file):
        other = tmp_path / "other.pgm"
        other.write_bytes(pgm_bytes([[1] * 10] * 10))
        stdout = io.BytesIO()
        assert main(["--borderfile", square_file, str(other)], stdout=stdout) == 0
        [(header, image)] = read_images(stdout.getvalue())
        assert (header.cols, header.rows) == (2, 2)
        assert image.ravel().tolist() == [1, 1, 1, 1]

    def test_config_error_exits_nonzero(self, square_file, capsys):
        assert main(["--closeness", "200", square_file], stdout=io.BytesIO()) == 1
        assert "bordercrop: --closeness value" in capsys.readouterr().err

    def test_blank_image_fails(self, tmp_path, capsys):
        path = tmp_path / "blank.pgm"
        path.write_bytes(pgm_bytes([[0, 0], [0, 0]]))
        assert main([str(path)], stdout=io.BytesIO()) == 1
        assert "entirely background" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "nope.pgm")], stdout=io.BytesIO()) == 1

    def test_verbose(self, square_file, capsys):
        main(["--verbose", square_file], stdout=io.BytesIO())
        err = capsys.readouterr().err
        assert "Background color is white" in err
        assert "Cropping 4 pixels from the left border" in err
