"""Point light and ambient light storage.

Point lights are stored in Taichi fields for access from the shading
kernel. The scene's ambient light color is uploaded alongside them so the
device-side scene mirrors the host model, but shading does not read it: the
integrator applies a fixed ambient factor to each material's diffuse color.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of point lights in the scene
MAX_LIGHTS = 256

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

ambient_light = ti.Vector.field(3, dtype=ti.f32, shape=())


def clear_lights() -> None:
    """Remove all point lights."""
    num_lights[None] = 0


def add_point_light(
    position: tuple[float, float, float],
    color: tuple[float, float, float],
) -> int:
    """Add a point light.

    Args:
        position: Light position as (x, y, z).
        color: Light intensity per channel; may exceed 1.0.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = vec3(position[0], position[1], position[2])
    light_colors[idx] = vec3(color[0], color[1], color[2])
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of point lights."""
    return int(num_lights[None])


def set_ambient_light(color: tuple[float, float, float]) -> None:
    """Record the scene ambient light color."""
    ambient_light[None] = vec3(color[0], color[1], color[2])


def get_ambient_light() -> tuple[float, float, float]:
    """Get the recorded scene ambient light color."""
    c = ambient_light[None]
    return (float(c[0]), float(c[1]), float(c[2]))
