"""Axis-aligned ellipsoid primitive with analytic ray intersection.

An ellipsoid with center c and semi-axes (A, B, C) is the quadric

    (x - cx)^2 / A^2 + (y - cy)^2 / B^2 + (z - cz)^2 / C^2 = 1

Substituting the ray p(t) = o + t*d yields a scalar quadratic a*t^2 + b*t + c
in the parametric distance. The ellipsoid may be truncated by an upper Y clip
plane (cut_y): hits above the plane are discarded outright rather than falling
back to the far root, which leaves the cap open.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raylet.geometry.ellipsoid import Ellipsoid, hit_ellipsoid
    >>> ellipsoid = Ellipsoid(
    ...     center=ti.math.vec3(0, 0, 0), axes=ti.math.vec3(0.2, 0.1, 0.3), cut_y=1e30
    ... )
    >>> # Use hit_ellipsoid within a Taichi kernel
"""

import math

import taichi as ti
import taichi.math as tm

from src.raylet.core.ray import normalize

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# cut_y value meaning "no clip plane"
NO_CLIP = math.inf

# Quadratic coefficients with |a| below this are treated as degenerate
DEGENERATE_EPSILON = 1e-12


@ti.dataclass
class Ellipsoid:
    """An axis-aligned ellipsoid.

    Attributes:
        center: The center point of the ellipsoid (vec3).
        axes: The semi-axis lengths (A, B, C) along x, y and z. All positive.
        cut_y: Upper Y clip plane. Hits with position.y > cut_y are discarded.
    """

    center: vec3
    axes: vec3
    cut_y: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-ellipsoid intersection.

    Attributes:
        hit: Whether the ray intersected the ellipsoid (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Strictly positive when hit == 1.
        point: The 3D point where the ray intersected the surface.
        normal: The outward unit normal (gradient of the quadric) at point.
            Not corrected for the ray's side; see scene.intersection.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def hit_ellipsoid(
    ray_origin: vec3,
    ray_direction: vec3,
    ellipsoid: Ellipsoid,
) -> HitRecord:
    """Test for ray-ellipsoid intersection.

    The quadratic coefficients are

        a = sum(d_i^2 / ax_i^2)
        b = 2 * sum(oc_i * d_i / ax_i^2)
        c = sum(oc_i^2 / ax_i^2) - 1

    with oc = origin - center. Root selection:
        - discriminant < 0: miss
        - t1 = (-b + sqrt(disc)) / 2a is the larger root; t1 <= 0 means the
          ellipsoid lies behind the origin: miss
        - otherwise t2 = (-b - sqrt(disc)) / 2a if it is positive (origin
          outside), else t1 (origin inside, exit point)

    A hit whose Y coordinate exceeds cut_y is discarded entirely. A degenerate
    quadratic (|a| < DEGENERATE_EPSILON, e.g. a zero direction) is a miss.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        ellipsoid: The ellipsoid to test against.

    Returns:
        A HitRecord. Check the hit field to determine if intersection occurred.
    """
    inv_axes_sq = 1.0 / (ellipsoid.axes * ellipsoid.axes)
    oc = ray_origin - ellipsoid.center

    a = tm.dot(ray_direction * ray_direction, inv_axes_sq)
    b = 2.0 * tm.dot(oc * ray_direction, inv_axes_sq)
    c = tm.dot(oc * oc, inv_axes_sq) - 1.0

    discriminant = b * b - 4.0 * a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = -1.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if ti.abs(a) > DEGENERATE_EPSILON and discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t1 = (-b + sqrt_d) / 2.0 / a
        t2 = (-b - sqrt_d) / 2.0 / a

        if t1 > 0.0:
            t = t1
            if t2 > 0.0:
                t = t2
            point = ray_origin + t * ray_direction

            if point.y <= ellipsoid.cut_y:
                did_hit = 1
                hit_t = t
                hit_point = point
                hit_normal = normalize((point - ellipsoid.center) * inv_axes_sq)

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)


@ti.func
def make_ellipsoid(center: vec3, axes: vec3, cut_y: ti.f32) -> Ellipsoid:
    """Create an ellipsoid within a Taichi kernel."""
    return Ellipsoid(center=center, axes=axes, cut_y=cut_y)
