"""Scene-level primitive intersection testing.

This module stores every primitive of the scene in a single tagged table
and provides the closest-hit and any-hit queries used by the integrator.

Each table slot holds a kind tag (see PrimitiveKind) plus generic geometry
slots whose meaning depends on the kind:

    kind       slot_a       slot_b       slot_c   radius
    SPHERE     center       -            -        radius
    PLANE      point        normal       -        -
    CUBE       min_corner   max_corner   -        -
    TRIANGLE   v0           v1           v2       -

One loop visits the table in insertion order, so the first primitive added
wins when two hits are at exactly the same distance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.beamline.scene.intersection import (
    ...     add_sphere, add_plane, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> add_plane(vec3(0, -1, 0), vec3(0, 1, 0), material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.beamline.geometry.cube import Cube, hit_cube
from src.beamline.geometry.plane import Plane, hit_plane
from src.beamline.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss
from src.beamline.geometry.triangle import Triangle, hit_triangle
from src.beamline.scene.model import PrimitiveKind

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Upper bound on hit distances
T_MAX = 1e30


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: The distance along the ray to the nearest hit.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal reported by the hit primitive.
            Only valid if hit == 1.
        material_id: The material index of the hit primitive.
            Only valid if hit == 1. -1 indicates a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_PRIMITIVES = 4096

# Primitive storage: Structure of Arrays layout, one tagged table
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_slot_a = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_slot_b = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_slot_c = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_radii = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_material_ids = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive count to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_primitives[None] = 0


def _add_primitive(
    kind: PrimitiveKind,
    material_id: int,
    a: vec3,
    b=None,
    c=None,
    radius: float = 0.0,
) -> int:
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    zero = vec3(0.0, 0.0, 0.0)
    primitive_kinds[idx] = int(kind)
    primitive_slot_a[idx] = a
    primitive_slot_b[idx] = b if b is not None else zero
    primitive_slot_c[idx] = c if c is not None else zero
    primitive_radii[idx] = radius
    primitive_material_ids[idx] = material_id
    num_primitives[None] = idx + 1
    return idx


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material index to associate with this sphere.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    return _add_primitive(PrimitiveKind.SPHERE, material_id, center, radius=radius)


def add_plane(point: vec3, normal: vec3, material_id: int = 0) -> int:
    """Add an infinite plane to the scene.

    Args:
        point: Any point on the plane.
        normal: The plane normal (expected unit length; not normalized here).
        material_id: The material index to associate with this plane.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    return _add_primitive(PrimitiveKind.PLANE, material_id, point, normal)


def add_cube(min_corner: vec3, max_corner: vec3, material_id: int = 0) -> int:
    """Add an axis-aligned box to the scene.

    Args:
        min_corner: The minimum corner.
        max_corner: The maximum corner.
        material_id: The material index to associate with this box.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    return _add_primitive(PrimitiveKind.CUBE, material_id, min_corner, max_corner)


def add_triangle(v0: vec3, v1: vec3, v2: vec3, material_id: int = 0) -> int:
    """Add a triangle to the scene.

    Args:
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        material_id: The material index to associate with this triangle.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    return _add_primitive(PrimitiveKind.TRIANGLE, material_id, v0, v1, v2)


def get_primitive_count() -> int:
    """Get the number of primitives in the scene."""
    return int(num_primitives[None])


@ti.func
def hit_primitive(ray_origin: vec3, ray_direction: vec3, idx: ti.i32) -> HitRecord:
    """Dispatch to the intersection test for the primitive in slot idx.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized).
        idx: The primitive table index.

    Returns:
        The primitive's HitRecord (a miss for unknown kinds).
    """
    kind = primitive_kinds[idx]
    rec = make_miss()

    if kind == int(PrimitiveKind.SPHERE):
        sphere = Sphere(center=primitive_slot_a[idx], radius=primitive_radii[idx])
        rec = hit_sphere(ray_origin, ray_direction, sphere)
    elif kind == int(PrimitiveKind.PLANE):
        plane = Plane(point=primitive_slot_a[idx], normal=primitive_slot_b[idx])
        rec = hit_plane(ray_origin, ray_direction, plane)
    elif kind == int(PrimitiveKind.CUBE):
        cube = Cube(min_corner=primitive_slot_a[idx], max_corner=primitive_slot_b[idx])
        rec = hit_cube(ray_origin, ray_direction, cube)
    elif kind == int(PrimitiveKind.TRIANGLE):
        tri = Triangle(v0=primitive_slot_a[idx], v1=primitive_slot_b[idx], v2=primitive_slot_c[idx])
        rec = hit_triangle(ray_origin, ray_direction, tri)

    return rec


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Test ray against all primitives in the scene.

    Visits every primitive and keeps the hit with the smallest distance.
    Only a strictly smaller distance replaces the current hit.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized).

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no intersection was found.
    """
    closest_t = T_MAX
    result = _make_miss_record()

    for i in range(num_primitives[None]):
        rec = hit_primitive(ray_origin, ray_direction, i)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                material_id=primitive_material_ids[i],
            )

    return result


@ti.func
def intersect_scene_any(ray_origin: vec3, ray_direction: vec3) -> ti.i32:
    """Test if ray hits any primitive in the scene (shadow ray query).

    Every primitive is opaque and there is no maximum distance: a primitive
    beyond the light still occludes it.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized).

    Returns:
        1 if any primitive was hit, 0 otherwise.
    """
    hit_any = 0

    for i in range(num_primitives[None]):
        if hit_any == 0:
            rec = hit_primitive(ray_origin, ray_direction, i)
            if rec.hit == 1:
                hit_any = 1

    return hit_any
