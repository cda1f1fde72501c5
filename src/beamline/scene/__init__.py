"""Scene module for scene description, loading and ray-scene queries.

Components:
    model: Host-side dataclasses (primitives, materials, lights, camera)
    loader: Parser for the .beam scene file format
    validation: Advisory checks and console summaries
    intersection: Tagged primitive table and nearest-hit queries
    lights: Point light table
    manager: Uploads a Scene into the device-side tables

Note: intersection, lights and manager declare Taichi fields at import
time and are NOT imported here; import them directly after ti.init().
"""

from .loader import load_scene, loads_scene, parse_vec3
from .model import (
    DEFAULT_AMBIENT_LIGHT,
    Camera,
    CameraFrame,
    Cube,
    Light,
    Material,
    Plane,
    Primitive,
    PrimitiveKind,
    Scene,
    Sphere,
    Triangle,
)
from .validation import scene_summary, validate_scene

__all__ = [
    # Model
    "Scene",
    "Camera",
    "CameraFrame",
    "Light",
    "Material",
    "Primitive",
    "PrimitiveKind",
    "Sphere",
    "Plane",
    "Cube",
    "Triangle",
    "DEFAULT_AMBIENT_LIGHT",
    # Loader
    "load_scene",
    "loads_scene",
    "parse_vec3",
    # Validation
    "validate_scene",
    "scene_summary",
]
