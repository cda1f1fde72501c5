"""Ray data structure and vector utilities for the Whitted ray tracer.

This module provides the fundamental Ray dataclass and the vector helpers
used by every other part of the renderer. Device-side helpers are Taichi
functions (@ti.func) callable from kernels; host-side helpers operate on
NumPy arrays and are used when preparing camera and scene data.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -2.0)
    >>> # Inside a kernel: ray = make_ray(origin, direction)
    >>> # ray.direction is (0, 0, -1)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Normalized by make_ray();
            a zero direction stays zero and produces no meaningful hits.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray, normalizing its direction.

    Args:
        origin: The starting point of the ray.
        direction: Any non-zero direction vector.

    Returns:
        A new Ray instance with a unit direction.
    """
    return Ray(origin=origin, direction=normalize(direction))


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.
        If v is zero-length, returns a zero vector.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_v = tm.length(v)
    if len_v > 0.0:
        result = v / len_v
    return result


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes the mirror direction incident - 2 * dot(incident, normal) * normal.
    The normal should be unit length for correct results.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


# =============================================================================
# Host-side (NumPy) Vector Helpers
# =============================================================================


def to_array(v: tuple[float, float, float]) -> npt.NDArray[np.float32]:
    """Convert an (x, y, z) tuple into a float32 NumPy vector."""
    return np.array(v, dtype=np.float32)


def normalize_np(v: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Normalize a NumPy vector; the zero vector maps to the zero vector."""
    norm = float(np.linalg.norm(v))
    if norm > 0.0:
        return (v / norm).astype(np.float32)
    return np.zeros(3, dtype=np.float32)
