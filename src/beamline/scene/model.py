"""Host-side scene data model.

These plain dataclasses are what the scene loader produces and what the
SceneManager uploads into Taichi fields. They carry no Taichi state, so they
can be created and inspected before ti.init().

All primitives live in one ordered collection, Scene.primitives. Their order
is the order in which the device-side intersection loop visits them, and so
decides which primitive wins when two hits are exactly equally distant.

Example:
    >>> scene = Scene()
    >>> scene.camera = Camera(position=(0.0, 0.0, 5.0), lookat=(0.0, 0.0, 0.0))
    >>> scene.primitives.append(Sphere(center=(0.0, 0.0, 0.0), radius=1.0))
    >>> scene.lights.append(Light(position=(0.0, 5.0, 0.0), color=(1.0, 1.0, 1.0)))
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

Vec3 = tuple[float, float, float]


class PrimitiveKind(IntEnum):
    """Tag identifying the geometry stored in a primitive table slot."""

    SPHERE = 0
    PLANE = 1
    CUBE = 2
    TRIANGLE = 3


@dataclass
class Material:
    """Surface material shared by all primitive kinds.

    Attributes:
        diffuse: Diffuse color. Nominally in [0, 1] per channel; not clamped.
        reflectivity: Fraction of outgoing light taken from the mirror
            bounce, nominally in [0, 1]; not clamped.
        ior: Index of refraction. Stored only; refraction is not rendered.
        emission: Emitted color, added to every hit on the surface.
    """

    diffuse: Vec3 = (1.0, 1.0, 1.0)
    reflectivity: float = 0.0
    ior: float = 1.0
    emission: Vec3 = (0.0, 0.0, 0.0)


@dataclass
class Sphere:
    """A sphere primitive."""

    center: Vec3
    radius: float
    material: Material = field(default_factory=Material)
    kind: PrimitiveKind = field(default=PrimitiveKind.SPHERE, init=False, repr=False)


@dataclass
class Plane:
    """An infinite, two-sided plane through point with the given normal."""

    point: Vec3
    normal: Vec3
    material: Material = field(default_factory=Material)
    kind: PrimitiveKind = field(default=PrimitiveKind.PLANE, init=False, repr=False)


@dataclass
class Cube:
    """An axis-aligned box between min_corner and max_corner."""

    min_corner: Vec3
    max_corner: Vec3
    material: Material = field(default_factory=Material)
    kind: PrimitiveKind = field(default=PrimitiveKind.CUBE, init=False, repr=False)


@dataclass
class Triangle:
    """A triangle with vertices v0, v1, v2 (any winding)."""

    v0: Vec3
    v1: Vec3
    v2: Vec3
    material: Material = field(default_factory=Material)
    kind: PrimitiveKind = field(default=PrimitiveKind.TRIANGLE, init=False, repr=False)


Primitive = Union[Sphere, Plane, Cube, Triangle]


@dataclass
class Light:
    """A point light. Color is an unbounded per-channel intensity."""

    position: Vec3
    color: Vec3 = (1.0, 1.0, 1.0)


@dataclass
class CameraFrame:
    """A camera keyframe for animation.

    Attributes:
        time: Time of the keyframe in seconds.
        position: Camera position at this time.
        lookat: Look-at point at this time.
    """

    time: float = 0.0
    position: Vec3 = (0.0, 0.0, 0.0)
    lookat: Vec3 = (0.0, 0.0, -1.0)


@dataclass
class Camera:
    """A pinhole camera placed at position and looking at lookat.

    The two points must differ; the renderer does not check this.
    """

    position: Vec3 = (0.0, 0.0, 0.0)
    lookat: Vec3 = (0.0, 0.0, -1.0)

    def apply_frame(self, frame: CameraFrame) -> None:
        """Move the camera to a keyframe's position and look-at point."""
        self.position = frame.position
        self.lookat = frame.lookat


DEFAULT_AMBIENT_LIGHT: Vec3 = (0.1, 0.1, 0.1)


@dataclass
class Scene:
    """A complete scene: geometry, lights, ambient light and camera.

    Attributes:
        primitives: All geometric primitives, in intersection order.
        lights: Point lights.
        ambient_light: Scene ambient color. Recorded for input compatibility;
            shading uses a fixed ambient factor instead.
        camera: The camera used for rendering.
        camera_frames: Optional camera keyframes for animation.
    """

    primitives: list[Primitive] = field(default_factory=list)
    lights: list[Light] = field(default_factory=list)
    ambient_light: Vec3 = DEFAULT_AMBIENT_LIGHT
    camera: Camera = field(default_factory=Camera)
    camera_frames: list[CameraFrame] = field(default_factory=list)

    def _of_kind(self, kind: PrimitiveKind) -> list[Primitive]:
        return [p for p in self.primitives if p.kind == kind]

    @property
    def spheres(self) -> list[Primitive]:
        """All spheres, in primitive order."""
        return self._of_kind(PrimitiveKind.SPHERE)

    @property
    def planes(self) -> list[Primitive]:
        """All planes, in primitive order."""
        return self._of_kind(PrimitiveKind.PLANE)

    @property
    def cubes(self) -> list[Primitive]:
        """All cubes, in primitive order."""
        return self._of_kind(PrimitiveKind.CUBE)

    @property
    def triangles(self) -> list[Primitive]:
        """All triangles, in primitive order."""
        return self._of_kind(PrimitiveKind.TRIANGLE)
