"""Ray data structure and vector utilities for the Whitted ray tracer.

This module provides the fundamental Ray dataclass and the vec3 helpers used
by intersection and shading. All operations are designed to work within Taichi
kernels.

Rays built through make_ray() always carry a unit direction, so the parametric
distance t returned by intersection routines is a world-space distance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 2.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> # Inside a Taichi kernel:
    >>> # ray = make_ray(origin, direction)
    >>> # point = ray_at(ray, 1.5)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Vectors shorter than this are treated as zero-length by normalize()
NORMALIZE_EPSILON = 1e-12


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Unit length when the ray
            is created through make_ray().
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the length (magnitude) of a vector."""
    return tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Zero-length input would otherwise produce NaN components that silently
    poison every shading computation downstream, so it is returned unchanged.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or v itself if its length
        is below NORMALIZE_EPSILON.
    """
    result = v
    len_v = tm.length(v)
    if len_v > NORMALIZE_EPSILON:
        result = v / len_v
    return result


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction, normalizing the direction.

    Args:
        origin: The starting point of the ray.
        direction: Any non-zero direction vector.

    Returns:
        A new Ray whose direction has unit length.
    """
    return Ray(origin=origin, direction=normalize(direction))


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes d - 2(n . d)n. The normal should be unit length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(normal, incident) * normal


@ti.func
def schlick_fresnel(f0: vec3, cos_alpha: ti.f32) -> vec3:
    """Compute per-channel Fresnel reflectance using Schlick's approximation.

        F = F0 + (1 - F0) * (1 - cos_alpha)^5

    Args:
        f0: Reflectance at normal incidence for each RGB channel.
        cos_alpha: Cosine of the angle between the reversed incident
            direction and the surface normal.

    Returns:
        The Fresnel reflectance for each channel. Lies in [F0, 1] for
        cos_alpha in [0, 1].
    """
    one = vec3(1.0, 1.0, 1.0)
    return f0 + (one - f0) * ((1.0 - cos_alpha) ** 5)
