"""Surface material registry and local shading terms.

Every primitive references one entry of this registry. A surface material
combines:
    - a Lambertian diffuse color, lit by point lights without distance falloff
    - a mirror reflectivity blending local shading with a reflected ray
    - an emission color added to every hit regardless of lighting
    - an index of refraction that is stored but not used by shading

Values are not validated or clamped: out-of-range colors and
reflectivities flow into shading unchanged.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.beamline.materials.surface import add_material, get_material
    >>> idx = add_material((0.8, 0.3, 0.3), reflectivity=0.25)
    >>> # Inside a kernel: mat = get_material(idx)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Fraction of the diffuse color returned as constant ambient light
AMBIENT_FACTOR = 0.1


@ti.dataclass
class SurfaceMaterial:
    """Surface material properties.

    Attributes:
        diffuse: The diffuse color (RGB).
        reflectivity: Mirror reflection weight.
        ior: Index of refraction (unused by shading).
        emission: Emitted color (RGB).
    """

    diffuse: vec3
    reflectivity: ti.f32
    ior: ti.f32
    emission: vec3


# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene (one per primitive)
MAX_MATERIALS = 4096

material_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_reflectivity = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_ior = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_emission = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(
    diffuse: tuple[float, float, float] = (1.0, 1.0, 1.0),
    reflectivity: float = 0.0,
    ior: float = 1.0,
    emission: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> int:
    """Add a material to the registry.

    Args:
        diffuse: The diffuse color as (R, G, B).
        reflectivity: Mirror reflection weight.
        ior: Index of refraction (stored only).
        emission: The emitted color as (R, G, B).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_diffuse[idx] = vec3(diffuse[0], diffuse[1], diffuse[2])
    material_reflectivity[idx] = reflectivity
    material_ior[idx] = ior
    material_emission[idx] = vec3(emission[0], emission[1], emission[2])
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material(material_idx: ti.i32) -> SurfaceMaterial:
    """Look up a material by registry index."""
    return SurfaceMaterial(
        diffuse=material_diffuse[material_idx],
        reflectivity=material_reflectivity[material_idx],
        ior=material_ior[material_idx],
        emission=material_emission[material_idx],
    )


@ti.func
def eval_ambient_emission(mat: SurfaceMaterial) -> vec3:
    """Light leaving a surface independent of any light source."""
    return mat.diffuse * AMBIENT_FACTOR + mat.emission


@ti.func
def eval_lambertian(diffuse: vec3, light_color: vec3, normal: vec3, to_light: vec3) -> vec3:
    """Evaluate the diffuse contribution of one unoccluded point light.

    No distance attenuation is applied: a light contributes the same
    irradiance at any range.

    Args:
        diffuse: The surface diffuse color.
        light_color: The light intensity per channel.
        normal: The surface normal (normalized).
        to_light: Unit direction from the surface point toward the light.

    Returns:
        diffuse * light_color * max(dot(normal, to_light), 0)
    """
    cos_theta = ti.max(tm.dot(normal, to_light), 0.0)
    return diffuse * light_color * cos_theta
