"""Unit tests for the pinhole camera.

Tests cover:
- Camera basis construction (forward, right, up)
- Primary ray directions for pixel centers and image corners
- Aspect ratio handling
- Degenerate camera setups
"""

import math

import numpy as np
import taichi as ti

from src.beamline.scene.model import Camera


def _ray_for_pixel(x, y, width, height):
    """Generate the primary ray for one pixel and return (origin, direction)."""
    from src.beamline.camera.pinhole import get_ray

    origin = ti.field(dtype=ti.math.vec3, shape=())
    direction = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel():
        ray = get_ray(x, y, width, height)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel()
    return origin[None].to_numpy(), direction[None].to_numpy()


class TestCameraBasis:
    """Tests for camera_basis."""

    def test_looking_down_negative_z(self):
        """Test the canonical basis for a camera looking along -z."""
        from src.beamline.camera.pinhole import camera_basis

        forward, right, up = camera_basis((0.0, 0.0, 5.0), (0.0, 0.0, 0.0))
        np.testing.assert_allclose(forward, [0.0, 0.0, -1.0], atol=1e-6)
        np.testing.assert_allclose(right, [1.0, 0.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(up, [0.0, 1.0, 0.0], atol=1e-6)

    def test_basis_is_orthonormal(self):
        """Test an oblique camera still has an orthonormal basis."""
        from src.beamline.camera.pinhole import camera_basis

        forward, right, up = camera_basis((3.0, 2.0, 1.0), (-1.0, 0.5, -4.0))
        for v in (forward, right, up):
            assert abs(np.linalg.norm(v) - 1.0) < 1e-5
        assert abs(np.dot(forward, right)) < 1e-5
        assert abs(np.dot(forward, up)) < 1e-5
        assert abs(np.dot(right, up)) < 1e-5

    def test_position_equals_lookat(self):
        """Test identical position and lookat give a zero basis, not NaN."""
        from src.beamline.camera.pinhole import camera_basis

        forward, right, up = camera_basis((1.0, 1.0, 1.0), (1.0, 1.0, 1.0))
        for v in (forward, right, up):
            assert not np.any(np.isnan(v))
            np.testing.assert_array_equal(v, [0.0, 0.0, 0.0])

    def test_looking_straight_up(self):
        """Test a view parallel to world up leaves right and up zero."""
        from src.beamline.camera.pinhole import camera_basis

        forward, right, up = camera_basis((0.0, 0.0, 0.0), (0.0, 10.0, 0.0))
        np.testing.assert_allclose(forward, [0.0, 1.0, 0.0], atol=1e-6)
        np.testing.assert_array_equal(right, [0.0, 0.0, 0.0])
        np.testing.assert_array_equal(up, [0.0, 0.0, 0.0])


class TestRayGeneration:
    """Tests for get_ray."""

    def test_center_pixel_looks_forward(self):
        """Test the middle pixel of an odd-sized image points at lookat."""
        from src.beamline.camera.pinhole import setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 5.0), lookat=(0.0, 0.0, 0.0)), 3, 3)
        origin, direction = _ray_for_pixel(1, 1, 3, 3)

        np.testing.assert_allclose(origin, [0.0, 0.0, 5.0], atol=1e-6)
        np.testing.assert_allclose(direction, [0.0, 0.0, -1.0], atol=1e-6)

    def test_top_left_pixel(self):
        """Test pixel (0, 0) is the top-left of the view."""
        from src.beamline.camera.pinhole import setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 5.0), lookat=(0.0, 0.0, 0.0)), 2, 2)
        _, direction = _ray_for_pixel(0, 0, 2, 2)

        expected = np.array([-0.5, 0.5, -1.0]) / math.sqrt(1.5)
        np.testing.assert_allclose(direction, expected, atol=1e-6)

    def test_bottom_right_pixel(self):
        """Test the last pixel points down and to the right."""
        from src.beamline.camera.pinhole import setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 5.0), lookat=(0.0, 0.0, 0.0)), 2, 2)
        _, direction = _ray_for_pixel(1, 1, 2, 2)

        expected = np.array([0.5, -0.5, -1.0]) / math.sqrt(1.5)
        np.testing.assert_allclose(direction, expected, atol=1e-6)

    def test_aspect_ratio_widens_horizontal_extent(self):
        """Test the horizontal offset scales with width / height."""
        from src.beamline.camera.pinhole import setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0)), 4, 2)
        _, direction = _ray_for_pixel(0, 0, 4, 2)

        # u = (2 * 0.125 - 1) * 2 = -1.5, v = 1 - 2 * 0.25 = 0.5
        expected = np.array([-1.5, 0.5, -1.0])
        expected /= np.linalg.norm(expected)
        np.testing.assert_allclose(direction, expected, atol=1e-6)

    def test_camera_moves_between_setups(self):
        """Test a second setup_camera call replaces the camera."""
        from src.beamline.camera.pinhole import get_camera_info, setup_camera

        camera = Camera(position=(0.0, 0.0, 5.0), lookat=(0.0, 0.0, 0.0))
        setup_camera(camera, 3, 3)
        camera.position = (5.0, 0.0, 0.0)
        setup_camera(camera, 3, 3)

        info = get_camera_info()
        assert info["origin"] == (5.0, 0.0, 0.0)
        np.testing.assert_allclose(info["forward"], [-1.0, 0.0, 0.0], atol=1e-6)

    def test_camera_info_extent(self):
        """Test the view-plane half extents for a 90 degree field of view."""
        from src.beamline.camera.pinhole import get_camera_info, setup_camera

        setup_camera(Camera(position=(0.0, 0.0, 5.0), lookat=(0.0, 0.0, 0.0)), 800, 600)
        half_width, half_height, _ = get_camera_info()["extent"]

        assert abs(half_height - 1.0) < 1e-6
        assert abs(half_width - 800 / 600) < 1e-6
