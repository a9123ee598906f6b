"""Scene-level ray intersection queries.

This module stores the scene's ellipsoids in Taichi fields and provides the
two ray-scene queries used by the integrator:

    first_intersect: closest hit over all ellipsoids, with the normal turned
        to face the incoming ray
    shadow_intersect: whether any ellipsoid is hit at all (binary occlusion
        for directional lights)

Each ellipsoid has an associated material ID for shading.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raylet.scene.intersection import add_ellipsoid, clear_scene
    >>> clear_scene()
    >>> add_ellipsoid((0, 0, 0), (0.2, 0.1, 0.3), material_id=0)
    >>> # Use first_intersect / shadow_intersect within a Taichi kernel
"""

import math

import taichi as ti
import taichi.math as tm

from src.raylet.geometry.ellipsoid import NO_CLIP, Ellipsoid, hit_ellipsoid

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any ellipsoid (1 if hit, 0 if miss).
        t: The distance along the ray to the closest intersection.
            Only valid if hit == 1.
        point: The 3D point of the closest intersection.
            Only valid if hit == 1.
        normal: The unit surface normal, oriented so that
            dot(ray_direction, normal) <= 0. Only valid if hit == 1.
        material_id: The unified material ID of the hit ellipsoid.
            -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of ellipsoids supported in the scene
MAX_ELLIPSOIDS = 256

# Ellipsoid storage: Structure of Arrays layout
ellipsoid_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ELLIPSOIDS)
ellipsoid_axes = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ELLIPSOIDS)
ellipsoid_cut_ys = ti.field(dtype=ti.f32, shape=MAX_ELLIPSOIDS)
ellipsoid_material_ids = ti.field(dtype=ti.i32, shape=MAX_ELLIPSOIDS)
num_ellipsoids = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all ellipsoids from the scene.

    Resets the count to zero. The field data is overwritten when new
    ellipsoids are added.
    """
    num_ellipsoids[None] = 0


def add_ellipsoid(
    center: tuple[float, float, float],
    axes: tuple[float, float, float],
    material_id: int = 0,
    cut_y: float = NO_CLIP,
) -> int:
    """Add an ellipsoid to the scene.

    Args:
        center: The center point of the ellipsoid.
        axes: The semi-axis lengths (A, B, C). Each must be positive.
        material_id: The material ID to associate with this ellipsoid.
        cut_y: Upper Y clip plane. Defaults to no clipping.

    Returns:
        The index of the added ellipsoid.

    Raises:
        ValueError: If any semi-axis is not positive, or cut_y is NaN.
        RuntimeError: If the maximum number of ellipsoids is exceeded.
    """
    for i, axis in enumerate(axes):
        if not axis > 0.0:
            raise ValueError(f"Semi-axis {i} = {axis} must be positive")
    if math.isnan(cut_y):
        raise ValueError("cut_y must not be NaN")

    idx = num_ellipsoids[None]
    if idx >= MAX_ELLIPSOIDS:
        raise RuntimeError(f"Maximum number of ellipsoids ({MAX_ELLIPSOIDS}) exceeded")
    ellipsoid_centers[idx] = vec3(center[0], center[1], center[2])
    ellipsoid_axes[idx] = vec3(axes[0], axes[1], axes[2])
    ellipsoid_cut_ys[idx] = cut_y
    ellipsoid_material_ids[idx] = material_id
    num_ellipsoids[None] = idx + 1
    return idx


def get_ellipsoid_count() -> int:
    """Get the number of ellipsoids in the scene."""
    return int(num_ellipsoids[None])


@ti.func
def _load_ellipsoid(i: ti.i32) -> Ellipsoid:
    return Ellipsoid(
        center=ellipsoid_centers[i],
        axes=ellipsoid_axes[i],
        cut_y=ellipsoid_cut_ys[i],
    )


@ti.func
def first_intersect(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the closest intersection of a ray with the scene.

    Every ellipsoid is tested; the hit with the smallest positive t wins and
    ties keep the first ellipsoid in insertion order. The selected normal is
    then flipped if it points into the same hemisphere as the ray, so that
    shading always sees a normal facing the incoming ray (this matters for
    rays leaving the inside of an ellipsoid).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHitRecord for the closest hit, or a miss record (hit == 0).
    """
    # Track the closest hit so far (Taichi requires outer-scope declaration)
    best_hit = 0
    best_t = -1.0
    best_point = vec3(0.0, 0.0, 0.0)
    best_normal = vec3(0.0, 0.0, 0.0)
    best_material_id = -1

    for i in range(num_ellipsoids[None]):
        rec = hit_ellipsoid(ray_origin, ray_direction, _load_ellipsoid(i))
        if rec.hit == 1 and rec.t > 0.0:
            if best_hit == 0 or rec.t < best_t:
                best_hit = 1
                best_t = rec.t
                best_point = rec.point
                best_normal = rec.normal
                best_material_id = ellipsoid_material_ids[i]

    if best_hit == 1 and tm.dot(ray_direction, best_normal) > 0.0:
        best_normal = -best_normal

    return SceneHitRecord(
        hit=best_hit,
        t=best_t,
        point=best_point,
        normal=best_normal,
        material_id=best_material_id,
    )


@ti.func
def shadow_intersect(ray_origin: vec3, ray_direction: vec3) -> ti.i32:
    """Test if a shadow ray hits any ellipsoid.

    Only binary occlusion is needed for directional lights, so the scan stops
    caring after the first hit with t > 0.

    Args:
        ray_origin: The shadow ray origin, already offset off the surface.
        ray_direction: The unit direction toward the light.

    Returns:
        1 if any ellipsoid was hit, 0 otherwise (including an empty scene).
    """
    hit_any = 0
    for i in range(num_ellipsoids[None]):
        if hit_any == 0:
            rec = hit_ellipsoid(ray_origin, ray_direction, _load_ellipsoid(i))
            if rec.hit == 1 and rec.t > 0.0:
                hit_any = 1
    return hit_any
