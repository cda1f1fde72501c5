"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    integrator: Whitted-style shading and the framebuffer kernel
    renderer: High-level renderer facade over the integrator
    animation: Camera keyframe interpolation and frame sequencing

The integrator evaluates local illumination (ambient, emission, shadowed
Lambertian point lights) and bounded recursive mirror reflection for
every pixel of a pinhole camera.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    make_ray,
    normalize,
    normalize_np,
    ray_at,
    reflect,
    to_array,
    vec3,
)

# Note: integrator, renderer and animation are NOT imported here because they
# declare Taichi fields at import time, which must happen after ti.init().
# Import directly from src.beamline.core.integrator etc. when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "to_array",
    "normalize_np",
]
