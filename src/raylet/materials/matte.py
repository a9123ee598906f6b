"""Matte (rough) material implementation.

A matte surface reflects an ambient term plus, for every directional light
that reaches it, a Lambertian diffuse term and a Blinn-Phong specular term:

    L = ka * La + sum over unoccluded lights with cos(theta) > 0 of
            Le * kd * cos(theta) + Le * ks * max(0, n . h)^shininess

where h = normalize(-ray_direction + light_direction). The ambient
coefficient is not independent: ka = kd * pi.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raylet.materials.matte import add_matte_material
    >>> idx = add_matte_material(kd=(0.8, 0.2, 0.1), ks=(1.0, 1.0, 1.0), shininess=50.0)
"""

import math

import taichi as ti
import taichi.math as tm

from src.raylet.core.ray import normalize

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class MatteMaterial:
    """Matte material properties.

    Attributes:
        ka: Ambient coefficient (RGB), always kd * pi.
        kd: Diffuse coefficient (RGB).
        ks: Specular coefficient (RGB).
        shininess: Blinn-Phong exponent.
    """

    ka: vec3
    kd: vec3
    ks: vec3
    shininess: ti.f32


def ambient_from_diffuse(kd: tuple[float, float, float]) -> tuple[float, float, float]:
    """Derive the ambient coefficient from the diffuse one (ka = kd * pi)."""
    return (kd[0] * math.pi, kd[1] * math.pi, kd[2] * math.pi)


@ti.func
def eval_matte_light(
    kd: vec3,
    ks: vec3,
    shininess: ti.f32,
    normal: vec3,
    ray_direction: vec3,
    light_direction: vec3,
    light_radiance: vec3,
    cos_theta: ti.f32,
) -> vec3:
    """Evaluate the contribution of one unoccluded directional light.

    The caller is responsible for the shadow test and for skipping lights
    with cos_theta <= 0.

    Args:
        kd: Diffuse coefficient.
        ks: Specular coefficient.
        shininess: Blinn-Phong exponent.
        normal: Unit surface normal facing the incoming ray.
        ray_direction: Unit direction of the incoming ray.
        light_direction: Unit direction toward the light.
        light_radiance: Radiance Le emitted by the light.
        cos_theta: normal . light_direction, assumed positive.

    Returns:
        The diffuse plus specular radiance (RGB).
    """
    radiance = light_radiance * kd * cos_theta
    halfway = normalize(-ray_direction + light_direction)
    cos_delta = tm.dot(normal, halfway)
    if cos_delta > 0.0:
        radiance += light_radiance * ks * (cos_delta**shininess)
    return radiance


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of matte materials in the scene
MAX_MATTE_MATERIALS = 256

# Storage for matte material properties
matte_ka = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATTE_MATERIALS)
matte_kd = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATTE_MATERIALS)
matte_ks = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATTE_MATERIALS)
matte_shininess = ti.field(dtype=ti.f32, shape=MAX_MATTE_MATERIALS)
num_matte_materials = ti.field(dtype=ti.i32, shape=())


def clear_matte_materials() -> None:
    """Clear all matte materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_matte_materials[None] = 0


def add_matte_material(
    kd: tuple[float, float, float],
    ks: tuple[float, float, float],
    shininess: float,
) -> int:
    """Add a matte material to the material registry.

    Args:
        kd: Diffuse coefficient as (R, G, B).
        ks: Specular coefficient as (R, G, B).
        shininess: Blinn-Phong exponent (non-negative).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If a coefficient is negative or shininess is negative.
    """
    for name, coeff in (("kd", kd), ("ks", ks)):
        for i, component in enumerate(coeff):
            if component < 0.0:
                raise ValueError(f"{name} component {i} = {component} must be non-negative")
    if shininess < 0.0:
        raise ValueError(f"Shininess = {shininess} must be non-negative")

    idx = num_matte_materials[None]
    if idx >= MAX_MATTE_MATERIALS:
        raise RuntimeError(f"Maximum number of matte materials ({MAX_MATTE_MATERIALS}) exceeded")

    ka = ambient_from_diffuse(kd)
    matte_ka[idx] = vec3(ka[0], ka[1], ka[2])
    matte_kd[idx] = vec3(kd[0], kd[1], kd[2])
    matte_ks[idx] = vec3(ks[0], ks[1], ks[2])
    matte_shininess[idx] = shininess
    num_matte_materials[None] = idx + 1
    return idx


def get_matte_material_count() -> int:
    """Get the number of matte materials in the registry."""
    return int(num_matte_materials[None])


@ti.func
def get_matte_material(material_idx: ti.i32) -> MatteMaterial:
    """Get the matte material with the given registry index."""
    return MatteMaterial(
        ka=matte_ka[material_idx],
        kd=matte_kd[material_idx],
        ks=matte_ks[material_idx],
        shininess=matte_shininess[material_idx],
    )
