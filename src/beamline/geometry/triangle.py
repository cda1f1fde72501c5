"""Triangle primitive with Moller-Trumbore intersection.

The Moller-Trumbore test solves

    origin + t * direction = (1 - u - v) * v0 + u * v1 + v * v2

directly for (t, u, v) with Cramer's rule, without precomputing the
triangle's plane. The hit is inside the triangle when u >= 0, v >= 0 and
u + v <= 1. Coverage does not depend on winding, but the reported normal
does: it is normalize(cross(v1 - v0, v2 - v0)) and is not flipped toward
the ray.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.beamline.geometry.triangle import Triangle, hit_triangle
    >>> tri = Triangle(
    ...     v0=ti.math.vec3(0, 0, 0),
    ...     v1=ti.math.vec3(1, 0, 0),
    ...     v2=ti.math.vec3(0, 1, 0),
    ... )
    >>> # Use hit_triangle within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.beamline.core.ray import normalize

from .sphere import HitRecord, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Determinants below this magnitude mean the ray is parallel to the triangle;
# hits closer than this distance are rejected as self-intersections.
TRIANGLE_EPSILON = 1e-6


@ti.dataclass
class Triangle:
    """A triangle defined by three vertices.

    Attributes:
        v0: First vertex (vec3).
        v1: Second vertex (vec3).
        v2: Third vertex (vec3).
    """

    v0: vec3
    v1: vec3
    v2: vec3


@ti.func
def triangle_normal(tri: Triangle) -> vec3:
    """Compute the winding-dependent unit normal of a triangle."""
    return normalize(tm.cross(tri.v1 - tri.v0, tri.v2 - tri.v0))


@ti.func
def hit_triangle(ray_origin: vec3, ray_direction: vec3, tri: Triangle) -> HitRecord:
    """Test for ray-triangle intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized).
        tri: The triangle to test intersection against.

    Returns:
        A HitRecord. Points of the triangle's plane outside the triangle
        (u < 0, v < 0 or u + v > 1) report a miss.
    """
    edge1 = tri.v1 - tri.v0
    edge2 = tri.v2 - tri.v0

    pvec = tm.cross(ray_direction, edge2)
    det = tm.dot(edge1, pvec)

    result = make_miss()

    if ti.abs(det) >= TRIANGLE_EPSILON:
        inv_det = 1.0 / det
        tvec = ray_origin - tri.v0
        u = tm.dot(tvec, pvec) * inv_det

        if u >= 0.0 and u <= 1.0:
            qvec = tm.cross(tvec, edge1)
            v = tm.dot(ray_direction, qvec) * inv_det

            if v >= 0.0 and v <= 1.0 and u + v <= 1.0:
                t = tm.dot(edge2, qvec) * inv_det
                if t > TRIANGLE_EPSILON:
                    result = HitRecord(
                        hit=1,
                        t=t,
                        point=ray_origin + t * ray_direction,
                        normal=normalize(tm.cross(edge1, edge2)),
                    )

    return result
