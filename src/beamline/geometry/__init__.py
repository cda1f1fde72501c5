"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive and the shared HitRecord
    plane: Infinite two-sided plane
    cube: Axis-aligned box (slab test)
    triangle: Triangle (Moller-Trumbore)

All intersection routines are implemented as Taichi functions (@ti.func)
and share one calling convention:
    rec = hit_shape(ray_origin, ray_direction, shape)
where rec is a HitRecord (hit, t, point, normal). Each primitive applies
its own acceptance rule for t; the scene layer picks the nearest hit.
"""

from .cube import Cube, cube_face_normal, hit_cube
from .plane import Plane, hit_plane
from .sphere import HitRecord, Sphere, hit_sphere, make_miss, make_sphere
from .triangle import Triangle, hit_triangle, triangle_normal

__all__ = [
    "HitRecord",
    "make_miss",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "Plane",
    "hit_plane",
    "Cube",
    "hit_cube",
    "cube_face_normal",
    "Triangle",
    "hit_triangle",
    "triangle_normal",
]
