"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord shared by all
primitives, and the ray-sphere intersection function.

The intersection solves |origin + t * direction - center|^2 = radius^2 using
the half-b form of the quadratic. The nearer root is preferred when it lies
in front of the ray origin; otherwise the farther root is used, so a ray
starting inside the sphere hits the far wall.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.beamline.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.beamline.core.ray import normalize

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The distance along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point. Primitives
            report their geometric normal; it is not flipped toward the ray.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 0.0, 0.0))


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    Expanding |O + tD - C|^2 = r^2 gives a*t^2 + 2*h*t + c = 0 with
        a = dot(D, D), h = dot(D, O - C), c = |O - C|^2 - r^2

    Root selection:
        - discriminant < 0: miss
        - smaller root > 0: use it
        - else larger root > 0: use it
        - else: miss (sphere entirely behind the ray)

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized).
        sphere: The sphere to test intersection against.

    Returns:
        A HitRecord; the normal points away from the sphere center.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    result = make_miss()

    if discriminant >= 0.0 and a > 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a

        t = t0
        if t <= 0.0:
            t = t1

        if t > 0.0:
            hit_point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=hit_point,
                normal=normalize(hit_point - sphere.center),
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
