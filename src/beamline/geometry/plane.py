"""Infinite plane primitive with ray-plane intersection.

A plane is defined by a point on the plane and a unit normal. The plane is
two-sided: the stored normal is reported unchanged whichever side the ray
arrives from.

The ray-plane intersection is found by solving:
    dot(origin + t * direction - point, normal) = 0
    t = dot(point - origin, normal) / dot(normal, direction)
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Rays whose direction is this close to perpendicular to the normal are
# treated as parallel to the plane.
PARALLEL_EPSILON = 1e-6


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point on the plane (vec3).
        normal: The plane normal (vec3, expected unit length).
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized).
        plane: The plane to test intersection against.

    Returns:
        A HitRecord. Rays parallel to the plane and planes behind the ray
        origin (t < 0) report a miss.
    """
    denom = tm.dot(plane.normal, ray_direction)

    result = make_miss()

    if ti.abs(denom) >= PARALLEL_EPSILON:
        t = tm.dot(plane.point - ray_origin, plane.normal) / denom
        if t >= 0.0:
            result = HitRecord(
                hit=1,
                t=t,
                point=ray_origin + t * ray_direction,
                normal=plane.normal,
            )

    return result
