"""Tests for the command-line interface.

The Taichi runtime is initialized once per session by conftest, so tests
that render replace init_taichi with a no-op.
"""

import logging

import pytest

from src.beamline import __version__, cli
from src.beamline.logging_config import LOGGER_NAME

SCENE = """
[Camera]
position = 0 0 5
lookat = 0 0 0

[Ball]
type = sphere
center = 0 0 0
radius = 1
diffuse = 1 0 0

[Light]
type = point
position = 0 0 10
color = 1 1 1

[CameraFrame]
time = 0
position = 0 0 5
lookat = 0 0 0

[CameraFrame]
time = 1
position = 5 0 0
lookat = 0 0 0
"""


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to captured streams after each test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def no_reinit(monkeypatch):
    """Keep the session's Taichi runtime."""
    monkeypatch.setattr(cli, "init_taichi", lambda arch: None)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test defaults come from the configuration module."""
        from src.beamline import config

        settings, _ = cli.parse_args(["scene.beam"])
        assert settings.width == config.DEFAULT_WIDTH
        assert settings.height == config.DEFAULT_HEIGHT
        assert settings.max_depth == config.DEFAULT_MAX_DEPTH
        assert settings.output is None
        assert not settings.info_only
        assert not settings.animate

    def test_size_and_options(self):
        """Test positional size and options are collected."""
        settings, args = cli.parse_args(
            ["scene.beam", "320", "240", "--depth", "2", "-o", "out.png", "--quiet"]
        )
        assert (settings.width, settings.height) == (320, 240)
        assert settings.max_depth == 2
        assert str(settings.output) == "out.png"
        assert args.quiet

    def test_video_implies_animate(self):
        """Test --video turns on animation mode."""
        settings, _ = cli.parse_args(["scene.beam", "--video", "out.mp4"])
        assert settings.animate

    def test_width_without_height(self):
        """Test a lone width is a usage error."""
        with pytest.raises(SystemExit) as exc:
            cli.parse_args(["scene.beam", "320"])
        assert exc.value.code == 2

    def test_non_positive_size(self):
        """Test a zero size is a usage error."""
        with pytest.raises(SystemExit):
            cli.parse_args(["scene.beam", "0", "240"])


class TestMain:
    """Tests for main()."""

    def test_info_mode(self, write_scene, capsys):
        """Test --info prints the banner and summary without rendering."""
        path = write_scene(SCENE)

        assert cli.main([str(path), "640", "480", "--info"]) == 0

        out = capsys.readouterr().out
        assert f"Version {__version__}" in out
        assert "Scene loaded:" in out
        assert "640x480" in out
        assert "1 (1 spheres, 0 planes, 0 cubes, 0 triangles)" in out
        assert "[INFO MODE] No rendering performed." in out
        assert "Rendering" not in out

    def test_missing_file(self, tmp_path, capsys):
        """Test a missing scene file exits with code 1."""
        assert cli.main([str(tmp_path / "nope.beam")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_validation_warnings_on_stderr(self, write_scene, capsys):
        """Test scene warnings are printed to stderr."""
        path = write_scene("[Camera]\nposition = 0 0 5\n")

        assert cli.main([str(path), "--info"]) == 0
        err = capsys.readouterr().err
        assert "[WARNING]" in err
        assert "no lights" in err

    def test_render_to_output(self, write_scene, tmp_path, capsys, no_reinit):
        """Test a full render writes the requested image and timing summary."""
        path = write_scene(SCENE)
        output = tmp_path / "render.ppm"

        assert cli.main([str(path), "3", "3", "-o", str(output)]) == 0

        lines = output.read_text().splitlines()
        assert lines[:3] == ["P3", "3 3", "255"]
        assert lines[3 + 4] == "255 0 0"

        out = capsys.readouterr().out
        assert "--- Timing Summary ---" in out
        assert "Beamline complete." in out

    def test_quiet_hides_progress_only(self, write_scene, tmp_path, capsys, no_reinit):
        """Test --quiet drops progress messages but keeps the summaries."""
        path = write_scene(SCENE)
        output = tmp_path / "render.ppm"

        assert cli.main([str(path), "3", "3", "-o", str(output), "--quiet"]) == 0
        assert output.exists()

        out = capsys.readouterr().out
        assert "Rendering..." not in out
        assert "Saving to:" not in out
        assert "Scene loaded:" in out
        assert "--- Timing Summary ---" in out

    def test_default_output_name(self, write_scene, tmp_path, monkeypatch, no_reinit):
        """Test the default output is a timestamped PPM in the working directory."""
        path = write_scene(SCENE)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(cli, "timestamped_filename", lambda base, ext: f"{base}_stamp.{ext}")

        assert cli.main([str(path), "2", "2", "--quiet"]) == 0
        assert (tmp_path / "output_stamp.ppm").exists()

    def test_unsupported_output_format(self, write_scene, tmp_path, capsys, no_reinit):
        """Test an unsupported extension is reported with exit code 1."""
        path = write_scene(SCENE)

        assert cli.main([str(path), "2", "2", "-o", str(tmp_path / "out.xyz")]) == 1
        assert "Unsupported image format" in capsys.readouterr().err

    def test_animate(self, write_scene, tmp_path, no_reinit):
        """Test animation mode writes numbered frames into the output directory."""
        path = write_scene(SCENE)
        frames = tmp_path / "frames"

        assert cli.main([str(path), "2", "2", "--animate", "--fps", "2", "-o", str(frames)]) == 0
        names = sorted(p.name for p in frames.iterdir())
        assert names == ["frame_0000.ppm", "frame_0001.ppm", "frame_0002.ppm"]

    def test_animate_without_keyframes(self, write_scene, tmp_path, capsys, no_reinit):
        """Test animating a scene without keyframes fails cleanly."""
        path = write_scene("[Ball]\ntype = sphere\ncenter = 0 0 0\nradius = 1\n")

        assert cli.main([str(path), "2", "2", "--animate", "-o", str(tmp_path / "f")]) == 1
        assert "no [CameraFrame]" in capsys.readouterr().err

