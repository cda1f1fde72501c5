"""Scene manager coordinating host scene data and device-side tables.

The SceneManager turns a host-side Scene (see scene.model) into the Taichi
fields read by the integrator:
- one material registry entry per primitive
- one tagged primitive table slot per primitive, in Scene.primitives order
- one point light entry per light
- the recorded ambient light color

The camera is not uploaded here; it is set up per render call so that it
can move between frames.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.beamline.scene.manager import SceneManager
    >>> from src.beamline.scene.model import Light, Material, Scene, Sphere
    >>> scene = Scene()
    >>> scene.primitives.append(Sphere((0, 0, 0), 1.0, Material(diffuse=(1, 0, 0))))
    >>> scene.lights.append(Light((0, 5, 0), (1, 1, 1)))
    >>> manager = SceneManager()
    >>> manager.load(scene)
    >>> manager.get_primitive_count()
    1
"""

from dataclasses import dataclass

import taichi.math as tm

from src.beamline.materials.surface import add_material, clear_materials, get_material_count
from src.beamline.scene.intersection import (
    MAX_PRIMITIVES,
    add_cube,
    add_plane,
    add_sphere,
    add_triangle,
    clear_scene,
    get_primitive_count,
)
from src.beamline.scene.lights import (
    MAX_LIGHTS,
    add_point_light,
    clear_lights,
    get_light_count,
    set_ambient_light,
)
from src.beamline.scene.model import (
    DEFAULT_AMBIENT_LIGHT,
    Light,
    Primitive,
    PrimitiveKind,
    Scene,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# The Scene whose contents are currently in the device tables. The tables
# are module-level, so this is shared by every SceneManager.
_loaded_scene: Scene | None = None


def get_loaded_scene() -> Scene | None:
    """Get the Scene most recently uploaded by any SceneManager, or None."""
    return _loaded_scene


def _vec(v: tuple[float, float, float]) -> vec3:
    return vec3(v[0], v[1], v[2])


@dataclass
class PrimitiveInfo:
    """Bookkeeping for an uploaded primitive.

    Attributes:
        primitive_index: The slot in the primitive table.
        material_id: The material registry index assigned to it.
        kind: The primitive kind.
    """

    primitive_index: int
    material_id: int
    kind: PrimitiveKind


class SceneManager:
    """Uploads host scenes into the device-side primitive, material and light tables.

    Attributes:
        primitives: PrimitiveInfo for each uploaded primitive, in table order.
        scene: The Scene currently in the device tables, or None. The
            tables are shared, so this reflects loads by any manager.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.primitives: list[PrimitiveInfo] = []
        self._clear_all()

    @property
    def scene(self) -> Scene | None:
        """The Scene currently in the device tables, or None."""
        return _loaded_scene

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        global _loaded_scene
        clear_scene()
        clear_materials()
        clear_lights()
        set_ambient_light(DEFAULT_AMBIENT_LIGHT)
        self.primitives.clear()
        _loaded_scene = None

    def clear(self) -> None:
        """Clear the entire scene (primitives, materials and lights)."""
        self._clear_all()

    def load(self, scene: Scene) -> None:
        """Replace the device-side scene with the contents of a host Scene.

        Args:
            scene: The scene to upload.

        Raises:
            RuntimeError: If the scene exceeds the table capacities.
        """
        global _loaded_scene

        self._clear_all()
        for primitive in scene.primitives:
            self.add_primitive(primitive)
        for light in scene.lights:
            self.add_light(light)
        set_ambient_light(scene.ambient_light)
        _loaded_scene = scene

    def add_primitive(self, primitive: Primitive) -> int:
        """Add one primitive together with its own material entry.

        Args:
            primitive: A Sphere, Plane, Cube or Triangle from scene.model.

        Returns:
            The index of the primitive in the table.

        Raises:
            RuntimeError: If the primitive or material table is full.
            ValueError: If the primitive kind is unknown.
        """
        mat = primitive.material
        material_id = add_material(mat.diffuse, mat.reflectivity, mat.ior, mat.emission)

        kind = primitive.kind
        if kind == PrimitiveKind.SPHERE:
            index = add_sphere(_vec(primitive.center), primitive.radius, material_id)
        elif kind == PrimitiveKind.PLANE:
            index = add_plane(_vec(primitive.point), _vec(primitive.normal), material_id)
        elif kind == PrimitiveKind.CUBE:
            index = add_cube(_vec(primitive.min_corner), _vec(primitive.max_corner), material_id)
        elif kind == PrimitiveKind.TRIANGLE:
            index = add_triangle(
                _vec(primitive.v0), _vec(primitive.v1), _vec(primitive.v2), material_id
            )
        else:
            raise ValueError(f"Unknown primitive kind: {kind}")

        self.primitives.append(PrimitiveInfo(index, material_id, kind))
        return index

    def add_light(self, light: Light) -> int:
        """Add a point light. Returns its index."""
        return add_point_light(light.position, light.color)

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return get_primitive_count()

    def get_material_count(self) -> int:
        """Get the number of materials in the scene."""
        return get_material_count()

    def get_light_count(self) -> int:
        """Get the number of point lights in the scene."""
        return get_light_count()

    def get_kind_counts(self) -> dict[PrimitiveKind, int]:
        """Count uploaded primitives per kind."""
        counts = {kind: 0 for kind in PrimitiveKind}
        for info in self.primitives:
            counts[info.kind] += 1
        return counts

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_primitives() -> int:
        """Get the maximum number of primitives supported."""
        return MAX_PRIMITIVES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of point lights supported."""
        return MAX_LIGHTS
