"""Directional lights and ambient radiance.

Lights are stored in Taichi fields as a unit direction pointing toward the
light and an emitted radiance Le. The scene-wide ambient radiance La is both
the background returned by rays that escape and the base of matte shading.
"""

import numpy as np
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of directional lights supported in the scene
MAX_LIGHTS = 16

light_directions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_radiances = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

# Ambient radiance La
ambient_radiance = ti.Vector.field(3, dtype=ti.f32, shape=())


def clear_lights() -> None:
    """Remove all lights and reset the ambient radiance to black."""
    num_lights[None] = 0
    ambient_radiance[None] = vec3(0.0, 0.0, 0.0)


def add_light(
    direction: tuple[float, float, float],
    radiance: tuple[float, float, float],
) -> int:
    """Add a directional light to the scene.

    Args:
        direction: Direction toward the light. Normalized on insertion.
        radiance: Emitted radiance Le as (R, G, B).

    Returns:
        The index of the added light.

    Raises:
        ValueError: If the direction has zero length.
        RuntimeError: If the maximum number of lights is exceeded.
    """
    dir_arr = np.asarray(direction, dtype=np.float64)
    norm = float(np.linalg.norm(dir_arr))
    if norm < 1e-12:
        raise ValueError(f"Light direction {tuple(direction)} has zero length")
    dir_arr = dir_arr / norm

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_directions[idx] = dir_arr.tolist()
    light_radiances[idx] = vec3(radiance[0], radiance[1], radiance[2])
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


def set_ambient(radiance: tuple[float, float, float]) -> None:
    """Set the ambient radiance La."""
    ambient_radiance[None] = vec3(radiance[0], radiance[1], radiance[2])


def get_ambient() -> tuple[float, float, float]:
    """Get the ambient radiance La as a Python tuple."""
    la = ambient_radiance[None]
    return (float(la[0]), float(la[1]), float(la[2]))


@ti.func
def get_ambient_radiance() -> vec3:
    """Get the ambient radiance La inside a Taichi kernel."""
    return ambient_radiance[None]
