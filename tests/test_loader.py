"""Tests for the .beam scene loader.

Tests cover:
- Camera, ambient and keyframe sections
- Every primitive type and point lights
- Optional material keys and vector parsing rules
- Malformed input: bad headers, lines without '=', missing keys, bad
  numbers and unknown types
"""

import logging

import pytest

from src.beamline.scene.loader import SceneParseError, load_scene, loads_scene, parse_vec3
from src.beamline.scene.model import DEFAULT_AMBIENT_LIGHT, Material, PrimitiveKind

FULL_SCENE = """
# A scene using every section type
[Camera]
position = 0 1 5
lookat = 0 0 0

[Ambient]
color = 0.2 0.2 0.2

[Ball]
type = sphere
center = 0 0 0
radius = 1.5
diffuse = 1 0 0
reflectivity = 0.3

[Floor]
type = plane
point = 0 -1 0
normal = 0 1 0

[Box]
type = cube
min = -1 -1 -1
max = 1 1 1
ior = 1.5

[Tri]
type = triangle
v0 = 0 0 0
v1 = 1 0 0
v2 = 0 1 0
emission = 0.5 0.5 0.5

[Key]
type = point
position = 0 5 0
color = 2 2 2

[CameraFrame]
time = 0
position = 0 0 5
lookat = 0 0 0

[CameraFrame]
time = 2.5
position = 5 0 0
lookat = 0 0 0
"""


class TestParseVec3:
    """Tests for vector parsing."""

    def test_three_components(self):
        """Test a full vector."""
        assert parse_vec3("1 -2.5 3e1") == (1.0, -2.5, 30.0)

    def test_missing_components_are_zero(self):
        """Test short vectors are padded with zeros."""
        assert parse_vec3("4") == (4.0, 0.0, 0.0)
        assert parse_vec3("") == (0.0, 0.0, 0.0)

    def test_extra_whitespace(self):
        """Test tabs and repeated spaces separate components."""
        assert parse_vec3("  1\t2   3 ") == (1.0, 2.0, 3.0)

    def test_non_numeric(self):
        """Test non-numeric components raise ValueError."""
        with pytest.raises(ValueError):
            parse_vec3("1 two 3")


class TestLoadsScene:
    """Tests for loads_scene on well-formed input."""

    def test_full_scene(self):
        """Test every section type is loaded."""
        scene = loads_scene(FULL_SCENE)

        assert scene.camera.position == (0.0, 1.0, 5.0)
        assert scene.camera.lookat == (0.0, 0.0, 0.0)
        assert scene.ambient_light == (0.2, 0.2, 0.2)

        kinds = [p.kind for p in scene.primitives]
        assert kinds == [
            PrimitiveKind.SPHERE,
            PrimitiveKind.PLANE,
            PrimitiveKind.CUBE,
            PrimitiveKind.TRIANGLE,
        ]
        assert len(scene.lights) == 1
        assert scene.lights[0].position == (0.0, 5.0, 0.0)
        assert scene.lights[0].color == (2.0, 2.0, 2.0)

        assert [f.time for f in scene.camera_frames] == [0.0, 2.5]
        assert scene.camera_frames[1].position == (5.0, 0.0, 0.0)

    def test_primitive_fields(self):
        """Test geometry values land in the right fields."""
        scene = loads_scene(FULL_SCENE)
        sphere, plane, cube, tri = scene.primitives

        assert sphere.center == (0.0, 0.0, 0.0)
        assert sphere.radius == 1.5
        assert plane.point == (0.0, -1.0, 0.0)
        assert plane.normal == (0.0, 1.0, 0.0)
        assert cube.min_corner == (-1.0, -1.0, -1.0)
        assert cube.max_corner == (1.0, 1.0, 1.0)
        assert tri.v2 == (0.0, 1.0, 0.0)

    def test_materials(self):
        """Test material keys are optional and default per Material."""
        scene = loads_scene(FULL_SCENE)
        sphere, plane, cube, tri = scene.primitives

        assert sphere.material.diffuse == (1.0, 0.0, 0.0)
        assert sphere.material.reflectivity == 0.3
        assert plane.material == Material()
        assert cube.material.ior == 1.5
        assert tri.material.emission == (0.5, 0.5, 0.5)

    def test_defaults_for_empty_input(self):
        """Test an empty file gives an empty scene with defaults."""
        scene = loads_scene("")

        assert scene.primitives == []
        assert scene.lights == []
        assert scene.ambient_light == DEFAULT_AMBIENT_LIGHT
        assert scene.camera_frames == []

    def test_comments_and_blank_lines(self):
        """Test comments and blank lines are ignored anywhere."""
        scene = loads_scene(
            "\n# comment\n[Ball]\n  # indented comment\ntype = sphere\n\ncenter = 1 2 3\nradius = 1\n"
        )
        assert scene.spheres[0].center == (1.0, 2.0, 3.0)

    def test_partial_camera(self):
        """Test a camera section may set only one of its keys."""
        scene = loads_scene("[Camera]\nlookat = 1 1 1\n")
        assert scene.camera.lookat == (1.0, 1.0, 1.0)
        assert scene.camera.position == (0.0, 0.0, 0.0)

    def test_section_without_type_ignored(self):
        """Test non-special sections without a type add nothing."""
        scene = loads_scene("[Notes]\nauthor = someone\n")
        assert scene.primitives == []
        assert scene.lights == []

    def test_values_keep_inner_equals(self):
        """Test only the first '=' splits key and value."""
        scene = loads_scene("[Ball]\ntype=sphere\ncenter=0 0 0\nradius = 2\nnote = a=b\n")
        assert scene.spheres[0].radius == 2.0


class TestMalformedInput:
    """Tests for recovery from malformed input."""

    def test_missing_required_key_skips_object(self, caplog):
        """Test an object missing a required key is skipped with an error."""
        text = "[Ball]\ntype = sphere\ncenter = 0 0 0\n\n[Other]\ntype = sphere\ncenter = 1 1 1\nradius = 1\n"
        with caplog.at_level(logging.ERROR):
            scene = loads_scene(text)

        assert len(scene.primitives) == 1
        assert scene.primitives[0].center == (1.0, 1.0, 1.0)
        assert "missing required property 'radius'" in caplog.text
        assert "[Ball]" in caplog.text

    def test_bad_number_skips_object(self, caplog):
        """Test a non-numeric value skips the object."""
        with caplog.at_level(logging.ERROR):
            scene = loads_scene("[Ball]\ntype = sphere\ncenter = 0 0 0\nradius = big\n")

        assert scene.primitives == []
        assert "Skipping section [Ball]" in caplog.text

    def test_mixed_errors_keep_loading(self, caplog):
        """Test parse errors and bad numbers in one file both skip only their section."""
        assert issubclass(SceneParseError, ValueError)
        text = (
            "[A]\ntype = sphere\ncenter = 0 0 0\n\n"
            "[B]\ntype = cube\nmin = 0 0 0\nmax = x y z\n\n"
            "[C]\ntype = plane\npoint = 0 0 0\nnormal = 0 1 0\n"
        )
        with caplog.at_level(logging.ERROR):
            scene = loads_scene(text)

        assert len(scene.planes) == 1
        assert scene.spheres == []
        assert scene.cubes == []
        assert "Skipping section [A]" in caplog.text
        assert "Skipping section [B]" in caplog.text

    def test_unknown_type_skips_object(self, caplog):
        """Test an unknown type is reported and skipped."""
        with caplog.at_level(logging.ERROR):
            scene = loads_scene("[Thing]\ntype = torus\n")

        assert scene.primitives == []
        assert "unknown object type 'torus'" in caplog.text

    def test_malformed_header(self, caplog):
        """Test a header without ']' clears the section name."""
        text = "[Camera\nposition = 9 9 9\n"
        with caplog.at_level(logging.WARNING):
            scene = loads_scene(text)

        assert "malformed section header" in caplog.text
        # Not treated as a camera section
        assert scene.camera.position == (0.0, 0.0, 0.0)

    def test_line_without_equals(self, caplog):
        """Test a line without '=' is ignored with a warning."""
        text = "[Ball]\ntype = sphere\nthis is not valid\ncenter = 0 0 0\nradius = 1\n"
        with caplog.at_level(logging.WARNING):
            scene = loads_scene(text)

        assert len(scene.primitives) == 1
        assert "malformed key=value line" in caplog.text

    def test_bad_keyframe_skipped(self, caplog):
        """Test a keyframe missing its time is skipped."""
        with caplog.at_level(logging.ERROR):
            scene = loads_scene("[CameraFrame]\nposition = 0 0 5\nlookat = 0 0 0\n")

        assert scene.camera_frames == []
        assert "missing required property 'time'" in caplog.text


class TestLoadScene:
    """Tests for load_scene from disk."""

    def test_load_from_file(self, write_scene):
        """Test a file on disk is parsed."""
        path = write_scene(FULL_SCENE)
        scene = load_scene(path)
        assert len(scene.primitives) == 4

    def test_missing_file(self, tmp_path):
        """Test an unreadable file raises OSError."""
        with pytest.raises(OSError):
            load_scene(tmp_path / "missing.beam")
