"""Geometry module for analytic primitives.

Components:
    ellipsoid: Axis-aligned ellipsoid with an optional upper Y clip plane

Intersection routines are Taichi functions (@ti.func) so that they can be
called from the per-pixel render kernel. They follow the pattern:
    record = hit_shape(ray_origin, ray_direction, shape)
"""

from .ellipsoid import (
    DEGENERATE_EPSILON,
    NO_CLIP,
    Ellipsoid,
    HitRecord,
    hit_ellipsoid,
    make_ellipsoid,
)

__all__ = [
    "Ellipsoid",
    "HitRecord",
    "hit_ellipsoid",
    "make_ellipsoid",
    "NO_CLIP",
    "DEGENERATE_EPSILON",
]
