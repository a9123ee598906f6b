"""Materials module for the two surface models of the tracer.

Components:
    matte: Ambient + Lambertian diffuse + Blinn-Phong specular under
        directional lights, with ka derived as kd * pi
    mirror: Ideal specular reflector with Schlick Fresnel weighting, F0
        derived from refractive index and extinction coefficient

Material dispatch happens in the integrator on the MaterialType tag stored by
the scene manager; each model keeps its parameters in its own Taichi fields.
"""

from .matte import (
    MatteMaterial,
    add_matte_material,
    ambient_from_diffuse,
    clear_matte_materials,
    eval_matte_light,
    get_matte_material,
    get_matte_material_count,
)
from .mirror import (
    add_mirror_material,
    clear_mirror_materials,
    compute_f0,
    get_mirror_f0,
    get_mirror_material_count,
    scatter_mirror,
)

__all__ = [
    # Matte
    "MatteMaterial",
    "eval_matte_light",
    "ambient_from_diffuse",
    "add_matte_material",
    "clear_matte_materials",
    "get_matte_material_count",
    "get_matte_material",
    # Mirror
    "compute_f0",
    "scatter_mirror",
    "add_mirror_material",
    "clear_mirror_materials",
    "get_mirror_material_count",
    "get_mirror_f0",
]
