"""Whitted-style ray tracing integrator.

This module implements the shading of a single ray and the kernel that
fills the framebuffer with one traced ray per pixel.

The radiance of a ray, traced with a remaining depth d, is defined as:
    - d <= 0: black
    - miss: the flat background color
    - hit: local = diffuse * 0.1 + emission + sum over unshadowed lights of
      diffuse * light_color * max(dot(normal, to_light), 0)
      and, when the material's reflectivity r > 0,
      (1 - r) * local + r * radiance(mirror ray, d - 1)

Taichi functions cannot recurse, so trace() evaluates this definition as a
loop over reflection bounces that carries the product of reflectivities
seen so far. The loop runs at most d times; when it runs out the remaining
weight multiplies black, which is exactly the recursion's base case.

Key features:
    - Hard shadows from point lights (binary visibility, any occluder)
    - Mirror reflection with bounded depth
    - Emissive surfaces
    - Self-intersection avoidance by offsetting secondary rays along the normal

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.beamline.core.integrator import (
    ...     render_frame, setup_render_target, get_framebuffer_numpy
    ... )
    >>> from src.beamline.camera.pinhole import setup_camera
    >>>
    >>> setup_render_target(320, 240)
    >>> setup_camera(scene.camera, 320, 240)
    >>> render_frame(max_depth=4)
    >>> image = get_framebuffer_numpy()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.beamline.camera.pinhole import get_ray
from src.beamline.core.ray import make_ray, normalize, reflect
from src.beamline.materials.surface import (
    eval_ambient_emission,
    eval_lambertian,
    get_material,
)
from src.beamline.scene.intersection import intersect_scene, intersect_scene_any
from src.beamline.scene.lights import light_colors, light_positions, num_lights

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum recursion depth (primary ray plus reflection bounces)
DEFAULT_MAX_DEPTH = 4

# Offset along the normal for shadow and reflection ray origins
RAY_EPSILON = 0.001

# Color returned by rays that miss every primitive
BACKGROUND_COLOR = vec3(0.1, 0.1, 0.1)

# =============================================================================
# Render Target (Framebuffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear color per pixel, indexed [row, column] with row 0 at the top
_framebuffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Result slot for trace_ray
_single_ray_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the framebuffer for an image of the given size.

    The buffer is preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT; this
    sets the active region and clears it.

    Args:
        width: Image width in pixels (1..MAX_IMAGE_WIDTH).
        height: Image height in pixels (1..MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the framebuffer to black."""
    _framebuffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Shading
# =============================================================================


@ti.func
def shade_local(hit_point: vec3, normal: vec3, material_id: ti.i32) -> vec3:
    """Compute local (non-reflected) shading at a surface point.

    Starts from the constant ambient term plus emission, then adds the
    Lambertian contribution of every point light whose shadow ray reaches
    open space. A shadow ray blocked by any primitive, at any distance,
    drops that light entirely.

    Args:
        hit_point: The intersection point.
        normal: The surface normal at the intersection.
        material_id: The material of the hit primitive.

    Returns:
        The local color (unclamped).
    """
    mat = get_material(material_id)
    color = eval_ambient_emission(mat)

    shadow_origin = hit_point + normal * RAY_EPSILON
    for l in range(num_lights[None]):
        to_light = normalize(light_positions[l] - hit_point)
        if intersect_scene_any(shadow_origin, to_light) == 0:
            color += eval_lambertian(mat.diffuse, light_colors[l], normal, to_light)

    return color


@ti.func
def trace(ray_origin: vec3, ray_direction: vec3, max_depth: ti.i32) -> vec3:
    """Trace a ray through the scene with bounded mirror recursion.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (normalized here).
        max_depth: Remaining recursion depth. 0 or less returns black.

    Returns:
        The radiance (RGB, unclamped) carried back along the ray.
    """
    ray = make_ray(ray_origin, ray_direction)
    origin = ray.origin
    direction = ray.direction

    radiance = vec3(0.0, 0.0, 0.0)

    # Product of reflectivities along the mirror chain so far
    weight = 1.0

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(origin, direction)

            if hit_record.hit == 0:
                radiance += weight * BACKGROUND_COLOR
                active = 0
            else:
                hit_point = hit_record.point
                normal = hit_record.normal
                local = shade_local(hit_point, normal, hit_record.material_id)
                reflectivity = get_material(hit_record.material_id).reflectivity

                if reflectivity > 0.0:
                    radiance += weight * (1.0 - reflectivity) * local
                    weight *= reflectivity
                    bounce = make_ray(hit_point + normal * RAY_EPSILON, reflect(direction, normal))
                    origin = bounce.origin
                    direction = bounce.direction
                else:
                    radiance += weight * local
                    active = 0

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Trace one ray through the center of every pixel.

    Each pixel only writes its own framebuffer entry.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum recursion depth.
    """
    for y, x in ti.ndrange(height, width):
        ray = get_ray(x, y, width, height)
        _framebuffer[y, x] = trace(ray.origin, ray.direction, max_depth)


@ti.kernel
def _trace_single(origin: vec3, direction: vec3, max_depth: ti.i32):
    """Trace one ray and store its color in the single-ray slot."""
    # Single-iteration outer loop keeps the scene loops inside trace() serial
    for _ in range(1):
        _single_ray_color[None] = trace(origin, direction, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[float, float, float]:
    """Trace a single ray through the currently loaded scene.

    This is a Python-callable entry point for testing and debugging. For full
    images use render_frame().

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized internally).
        depth: Maximum recursion depth.

    Returns:
        Tuple of (R, G, B) color values.
    """
    _trace_single(vec3(origin[0], origin[1], origin[2]), vec3(direction[0], direction[1], direction[2]), depth)
    color = _single_ray_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_frame(max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Render the active framebuffer region with the current camera and scene.

    Args:
        max_depth: Maximum recursion depth per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_frame(width, height, max_depth)


def get_framebuffer_numpy() -> npt.NDArray[np.float32]:
    """Get a copy of the rendered framebuffer as a NumPy array.

    The array has shape (height, width, 3), row 0 at the top, and holds
    unclamped linear color. Flattening it to (height * width, 3) puts pixel
    (x, y) at index y * width + x.

    Returns:
        A new float32 array; later renders do not modify it.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _framebuffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float32)
