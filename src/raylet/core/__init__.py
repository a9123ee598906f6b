"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vec3 utilities
    config: Explicit render configuration (image size, depth cutoff, epsilon)
    integrator: Whitted-style shading, recursive mirror transport and the
        render kernel

The integrator evaluates direct illumination from directional lights with
binary shadow tests, plus ideal mirror reflection weighted by Schlick's
Fresnel approximation, terminating after a fixed recursion depth.
"""

from .config import DEFAULT_EPSILON, DEFAULT_MAX_DEPTH, RenderConfig
from .ray import (
    Ray,
    cross,
    dot,
    length,
    make_ray,
    normalize,
    ray_at,
    reflect,
    schlick_fresnel,
    vec3,
)

# Note: integrator is NOT imported here because it declares Taichi fields
# through its scene imports. Import it directly after ti.init():
#   from src.raylet.core.integrator import render_image

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
    "schlick_fresnel",
    "RenderConfig",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_EPSILON",
]
