"""Mirror (ideal specular reflector) material implementation.

A mirror carries only its reflectance at normal incidence, F0, per RGB
channel. F0 is derived once from the complex refractive index (n, kappa):

    F0 = ((n - 1)^2 + kappa^2) / ((n + 1)^2 + kappa^2)

At shading time the angular dependence follows Schlick's approximation and
the incoming ray is reflected as R = d - 2(n . d)n. A mirror contributes no
ambient or diffuse term of its own.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raylet.materials.mirror import add_mirror_material, compute_f0
    >>> compute_f0((0.17, 0.35, 1.5), (3.1, 2.7, 1.9))  # gold
    >>> idx = add_mirror_material(n=(0.17, 0.35, 1.5), kappa=(3.1, 2.7, 1.9))
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from src.raylet.core.ray import reflect, schlick_fresnel

# Type alias for 3D vectors
vec3 = tm.vec3


def compute_f0(
    n: tuple[float, float, float],
    kappa: tuple[float, float, float],
) -> tuple[float, float, float]:
    """Compute the normal-incidence reflectance for each channel.

    Args:
        n: Refractive index per channel.
        kappa: Extinction (absorption) coefficient per channel.

    Returns:
        F0 as an (R, G, B) tuple.
    """
    n_arr = np.asarray(n, dtype=np.float64)
    k_arr = np.asarray(kappa, dtype=np.float64)
    k_sq = k_arr * k_arr
    f0 = ((n_arr - 1.0) ** 2 + k_sq) / ((n_arr + 1.0) ** 2 + k_sq)
    return (float(f0[0]), float(f0[1]), float(f0[2]))


@ti.func
def scatter_mirror(f0: vec3, incident_direction: vec3, normal: vec3):
    """Compute the reflected direction and Fresnel weight for a mirror hit.

    Args:
        f0: Reflectance at normal incidence.
        incident_direction: The incoming ray direction (unit length).
        normal: The surface normal facing the incoming ray (unit length).

    Returns:
        A tuple of (reflected_direction, fresnel) where fresnel is the
        per-channel factor applied to the radiance arriving along the
        reflected direction.
    """
    reflected_direction = reflect(incident_direction, normal)
    cos_alpha = -tm.dot(incident_direction, normal)
    fresnel = schlick_fresnel(f0, cos_alpha)
    return reflected_direction, fresnel


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of mirror materials in the scene
MAX_MIRROR_MATERIALS = 256

# Storage for mirror material properties
mirror_f0s = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MIRROR_MATERIALS)
num_mirror_materials = ti.field(dtype=ti.i32, shape=())


def clear_mirror_materials() -> None:
    """Clear all mirror materials."""
    num_mirror_materials[None] = 0


def add_mirror_material(
    n: tuple[float, float, float],
    kappa: tuple[float, float, float],
) -> int:
    """Add a mirror material to the material registry.

    Args:
        n: Refractive index per channel (positive).
        kappa: Extinction coefficient per channel (non-negative).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If n is not positive or kappa is negative.
    """
    for i, component in enumerate(n):
        if component <= 0.0:
            raise ValueError(f"Refractive index component {i} = {component} must be positive")
    for i, component in enumerate(kappa):
        if component < 0.0:
            raise ValueError(f"Extinction component {i} = {component} must be non-negative")

    idx = num_mirror_materials[None]
    if idx >= MAX_MIRROR_MATERIALS:
        raise RuntimeError(
            f"Maximum number of mirror materials ({MAX_MIRROR_MATERIALS}) exceeded"
        )

    f0 = compute_f0(n, kappa)
    mirror_f0s[idx] = vec3(f0[0], f0[1], f0[2])
    num_mirror_materials[None] = idx + 1
    return idx


def get_mirror_material_count() -> int:
    """Get the number of mirror materials in the registry."""
    return int(num_mirror_materials[None])


@ti.func
def get_mirror_f0(material_idx: ti.i32) -> vec3:
    """Get F0 for a mirror material by index."""
    return mirror_f0s[material_idx]
