"""Axis-aligned box primitive with slab-test intersection.

A cube is the axis-aligned box between two corners, min_corner and
max_corner (component-wise min <= max).

The slab test intersects the ray with the three pairs of axis-aligned
planes. For each axis the ray is inside the slab for

    t in [(min - origin) / d, (max - origin) / d]   (endpoints sorted)

and the box is hit where all three intervals overlap. A zero direction
component means the ray never crosses that slab: it is inside the slab for
every t if its origin lies between the planes, and never otherwise. This is
the limit the IEEE infinities would give, without the NaN that 0/0 produces
when the origin lies exactly on a slab plane.

The face normal is taken from the boundary plane the hit point lies on.
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Distance within which a hit point is considered to lie on a face plane
FACE_EPSILON = 1e-4

# Stand-in for an unbounded slab interval
SLAB_INFINITY = 1e30


@ti.dataclass
class Cube:
    """An axis-aligned box.

    Attributes:
        min_corner: The minimum corner (vec3).
        max_corner: The maximum corner (vec3).
    """

    min_corner: vec3
    max_corner: vec3


@ti.func
def cube_face_normal(point: vec3, cube: Cube) -> vec3:
    """Compute the outward normal of the face containing a surface point.

    Faces are checked in the order -x, +x, -y, +y, -z, +z and the first face
    whose plane lies within FACE_EPSILON of the point wins, so edges and
    corners resolve to the earlier axis. If no face is within FACE_EPSILON
    the face with the nearest plane is used, so the normal is never zero.

    Args:
        point: A point on (or numerically near) the box surface.
        cube: The box.

    Returns:
        A unit axis-aligned normal.
    """
    normal = vec3(0.0, 0.0, 0.0)
    found = 0

    for axis in ti.static(range(3)):
        if found == 0 and ti.abs(point[axis] - cube.min_corner[axis]) < FACE_EPSILON:
            normal[axis] = -1.0
            found = 1
        if found == 0 and ti.abs(point[axis] - cube.max_corner[axis]) < FACE_EPSILON:
            normal[axis] = 1.0
            found = 1

    if found == 0:
        best_distance = SLAB_INFINITY
        for axis in ti.static(range(3)):
            d_min = ti.abs(point[axis] - cube.min_corner[axis])
            if d_min < best_distance:
                best_distance = d_min
                normal = vec3(0.0, 0.0, 0.0)
                normal[axis] = -1.0
            d_max = ti.abs(point[axis] - cube.max_corner[axis])
            if d_max < best_distance:
                best_distance = d_max
                normal = vec3(0.0, 0.0, 0.0)
                normal[axis] = 1.0

    return normal


@ti.func
def hit_cube(ray_origin: vec3, ray_direction: vec3, cube: Cube) -> HitRecord:
    """Test for ray-box intersection using the slab method.

    The overlap of the three slab intervals is [t_near, t_far]. The box is
    missed if the overlap is empty or lies entirely behind the ray. The hit
    distance is t_near when positive (ray starts outside), otherwise t_far
    (ray starts inside).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized).
        cube: The box to test intersection against.

    Returns:
        A HitRecord with the outward face normal.
    """
    t_near = -SLAB_INFINITY
    t_far = SLAB_INFINITY
    inside_all_slabs = 1

    for axis in ti.static(range(3)):
        d = ray_direction[axis]
        o = ray_origin[axis]
        lo = cube.min_corner[axis]
        hi = cube.max_corner[axis]
        if d == 0.0:
            if o < lo or o > hi:
                inside_all_slabs = 0
        else:
            inv_d = 1.0 / d
            t0 = (lo - o) * inv_d
            t1 = (hi - o) * inv_d
            t_near = ti.max(t_near, ti.min(t0, t1))
            t_far = ti.min(t_far, ti.max(t0, t1))

    result = make_miss()

    if inside_all_slabs == 1 and t_near <= t_far and t_far >= 0.0:
        t = t_near
        if t <= 0.0:
            t = t_far
        if t >= 0.0:
            hit_point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=hit_point,
                normal=cube_face_normal(hit_point, cube),
            )

    return result
