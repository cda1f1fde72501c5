"""Pinhole camera model for perspective projection ray generation.

This module implements the pinhole camera that generates one primary ray
through the center of every pixel. The camera has a fixed 90 degree
vertical field of view and takes its aspect ratio from the image size.

The camera builds a basis from its position and look-at point:
- forward: normalize(lookat - position)
- right: normalize(cross(forward, world_up)) with world_up = (0, 1, 0)
- up: cross(right, forward)

Pixel (x, y), with y = 0 at the top row, maps to the view-plane offsets
    u = (2 * (x + 0.5) / width - 1) * aspect * scale
    v = (1 - 2 * (y + 0.5) / height) * scale
where scale = tan(fov / 2), and to the direction
normalize(forward + u * right + v * up).

A camera looking straight up or down has forward parallel to world_up; its
right vector is zero and every ray degenerates. This is not checked here.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.beamline.camera.pinhole import setup_camera, get_ray
    >>> from src.beamline.scene.model import Camera
    >>>
    >>> setup_camera(Camera(position=(0.0, 0.0, 5.0), lookat=(0.0, 0.0, 0.0)), 800, 600)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(400, 300, 800, 600)  # Ray near the image center
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.beamline.core.ray import Ray, make_ray, normalize_np, to_array
from src.beamline.scene.model import Camera

# Vertical field of view in degrees
FOV_DEGREES = 90.0

WORLD_UP = (0.0, 1.0, 0.0)

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())

# Horizontal and vertical view-plane half extents (aspect * scale, scale)
_half_width = ti.field(dtype=ti.f32, shape=())
_half_height = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called before each render)
# =============================================================================


def camera_basis(
    position: tuple[float, float, float],
    lookat: tuple[float, float, float],
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32], npt.NDArray[np.float32]]:
    """Compute the camera's (forward, right, up) basis.

    Args:
        position: Camera position.
        lookat: Point the camera looks at.

    Returns:
        Tuple of unit vectors (forward, right, up). If position == lookat, or
        the view direction is parallel to the world up axis, the degenerate
        vectors come back as zero.
    """
    forward = normalize_np(to_array(lookat) - to_array(position))
    right = normalize_np(np.cross(forward, to_array(WORLD_UP)).astype(np.float32))
    up = np.cross(right, forward).astype(np.float32)
    return forward, right, up


def setup_camera(camera: Camera, width: int, height: int) -> None:
    """Initialize camera state for an image of the given size.

    Reads the camera's current position and look-at point, so a camera moved
    between frames takes effect on the next call.

    Args:
        camera: Camera with position and look-at point.
        width: Image width in pixels.
        height: Image height in pixels.

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    scale = math.tan(math.radians(FOV_DEGREES) / 2.0)
    aspect = width / height

    forward, right, up = camera_basis(camera.position, camera.lookat)

    _camera_origin[None] = list(camera.position)
    _camera_forward[None] = forward.tolist()
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _half_width[None] = aspect * scale
    _half_height[None] = scale


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through the center of a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera position with a unit direction.
    """
    fx = (ti.cast(pixel_x, ti.f32) + 0.5) / ti.cast(width, ti.f32)
    fy = (ti.cast(pixel_y, ti.f32) + 0.5) / ti.cast(height, ti.f32)

    u = (2.0 * fx - 1.0) * _half_width[None]
    v = (1.0 - 2.0 * fy) * _half_height[None]

    direction = _camera_forward[None] + u * _camera_right[None] + v * _camera_up[None]
    return make_ray(_camera_origin[None], direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, forward, right, up and the view-plane
        half extents as (half_width, half_height, 0).
    """

    def _tuple(v) -> tuple[float, float, float]:
        return (float(v[0]), float(v[1]), float(v[2]))

    return {
        "origin": _tuple(_camera_origin[None]),
        "forward": _tuple(_camera_forward[None]),
        "right": _tuple(_camera_right[None]),
        "up": _tuple(_camera_up[None]),
        "extent": (float(_half_width[None]), float(_half_height[None]), 0.0),
    }
