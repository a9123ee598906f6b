"""Whitted-style integrator: shading, mirror recursion and the render kernel.

This module turns a primary ray into a radiance value and fills the output
buffer, one independent task per pixel.

For a ray at recursion depth `depth`:
    1. If depth > max_depth, return the ambient radiance La.
    2. Find the closest hit; on a miss return La.
    3. Matte hit: ka * La plus, for each light that is in front of the
       surface and not occluded, a diffuse and a Blinn-Phong specular term.
    4. Mirror hit: F * trace(reflected ray, depth + 1), where F is Schlick's
       Fresnel reflectance. Mirrors add nothing else.

Secondary rays (shadow and reflected) start epsilon along the normal.

Taichi functions cannot recurse, so the bounded recursion is evaluated as a
loop over depths 0..max_depth that carries the product of the mirror Fresnel
factors so far (the throughput). A matte hit or a miss ends the loop with
throughput * local radiance; running out of depth ends it with
throughput * La. This is exactly the value the recursive definition yields.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raylet.core.config import RenderConfig
    >>> from src.raylet.core.integrator import make_image_buffer, render_image
    >>> from src.raylet.scene.manager import Scene
    >>>
    >>> scene = Scene()
    >>> scene.build()
    >>> config = RenderConfig(width=600, height=600)
    >>> image = make_image_buffer(config)
    >>> render_image(image, config)
"""

import logging
import time

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.raylet.camera.pinhole import get_ray, is_camera_initialized
from src.raylet.core.config import RenderConfig
from src.raylet.core.ray import make_ray
from src.raylet.materials.matte import eval_matte_light, get_matte_material
from src.raylet.materials.mirror import get_mirror_f0, scatter_mirror
from src.raylet.scene.intersection import first_intersect, shadow_intersect
from src.raylet.scene.lights import (
    get_ambient_radiance,
    light_directions,
    light_radiances,
    num_lights,
)
from src.raylet.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Number of channels per pixel in the output buffer (RGBA)
CHANNELS = 4


# =============================================================================
# Shading
# =============================================================================


@ti.func
def shade_matte(
    material_idx: ti.i32,
    point: vec3,
    normal: vec3,
    ray_direction: vec3,
    epsilon: ti.f32,
) -> vec3:
    """Compute the radiance leaving a matte surface toward the viewer.

    Args:
        material_idx: Index into the matte material registry.
        point: The hit position.
        normal: Unit normal facing the incoming ray.
        ray_direction: Unit direction of the incoming ray.
        epsilon: Shadow ray origin offset along the normal.

    Returns:
        The outgoing radiance (RGB).
    """
    mat = get_matte_material(material_idx)
    radiance = mat.ka * get_ambient_radiance()
    shadow_origin = point + normal * epsilon

    for i in range(num_lights[None]):
        light_direction = light_directions[i]
        cos_theta = tm.dot(normal, light_direction)
        if cos_theta > 0.0:
            if shadow_intersect(shadow_origin, light_direction) == 0:
                radiance += eval_matte_light(
                    mat.kd,
                    mat.ks,
                    mat.shininess,
                    normal,
                    ray_direction,
                    light_direction,
                    light_radiances[i],
                    cos_theta,
                )

    return radiance


@ti.func
def shade_mirror(
    material_idx: ti.i32,
    point: vec3,
    normal: vec3,
    ray_direction: vec3,
    epsilon: ti.f32,
):
    """Set up the reflected ray for a mirror hit.

    Args:
        material_idx: Index into the mirror material registry.
        point: The hit position.
        normal: Unit normal facing the incoming ray.
        ray_direction: Unit direction of the incoming ray.
        epsilon: Reflected ray origin offset along the normal.

    Returns:
        A tuple of (origin, direction, fresnel) for the reflected ray, where
        fresnel weights the radiance it brings back.
    """
    f0 = get_mirror_f0(material_idx)
    reflected_direction, fresnel = scatter_mirror(f0, ray_direction, normal)
    reflected = make_ray(point + normal * epsilon, reflected_direction)
    return reflected.origin, reflected.direction, fresnel


@ti.func
def trace(
    ray_origin: vec3,
    ray_direction: vec3,
    max_depth: ti.i32,
    epsilon: ti.f32,
) -> vec3:
    """Compute the radiance arriving along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        max_depth: Deepest recursion level that still intersects the scene.
        epsilon: Offset for secondary ray origins.

    Returns:
        The radiance (RGB). Not clamped.
    """
    la = get_ambient_radiance()
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray_origin
    direction = ray_direction

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth + 1):
        if active == 1:
            hit = first_intersect(origin, direction)

            if hit.hit == 0:
                radiance += throughput * la
                active = 0
            else:
                mat_type = get_material_type(hit.material_id)
                type_index = get_material_type_index(hit.material_id)

                if mat_type == int(MaterialType.MATTE):
                    radiance += throughput * shade_matte(
                        type_index, hit.point, hit.normal, direction, epsilon
                    )
                    active = 0
                elif mat_type == int(MaterialType.MIRROR):
                    next_origin, next_direction, fresnel = shade_mirror(
                        type_index, hit.point, hit.normal, direction, epsilon
                    )
                    throughput *= fresnel
                    origin = next_origin
                    direction = next_direction
                else:
                    # Unregistered material: the surface is black
                    active = 0

    # Recursion cutoff reached while still bouncing between mirrors
    if active == 1:
        radiance += throughput * la

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(
    image: ti.types.ndarray(dtype=ti.f32, ndim=2),
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    epsilon: ti.f32,
):
    """Trace one ray per pixel and write RGBA into the row-major buffer."""
    for x, y in ti.ndrange(width, height):
        ray = get_ray(x, y, width, height)
        color = trace(ray.origin, ray.direction, max_depth, epsilon)

        idx = y * width + x
        image[idx, 0] = color.x
        image[idx, 1] = color.y
        image[idx, 2] = color.z
        image[idx, 3] = 1.0


@ti.kernel
def _render_single_pixel(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    epsilon: ti.f32,
) -> vec3:
    """Render the radiance of a single pixel (testing and debugging)."""
    ray = get_ray(pixel_x, pixel_y, width, height)
    return trace(ray.origin, ray.direction, max_depth, epsilon)


@ti.kernel
def _trace_single_ray(
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
    epsilon: ti.f32,
) -> vec3:
    """Trace an arbitrary ray (testing and debugging)."""
    ray = make_ray(origin, direction)
    return trace(ray.origin, ray.direction, max_depth, epsilon)


# =============================================================================
# Public Rendering API
# =============================================================================


def make_image_buffer(config: RenderConfig) -> npt.NDArray[np.float32]:
    """Allocate an output buffer for the given configuration.

    Returns:
        Zeroed float32 array of shape (width * height, 4).
    """
    return np.zeros((config.pixel_count, CHANNELS), dtype=np.float32)


def _check_image_buffer(image: npt.NDArray, config: RenderConfig) -> None:
    """Validate that a buffer can receive a render for config."""
    if not isinstance(image, np.ndarray):
        raise ValueError(f"Image buffer must be a NumPy array, got {type(image).__name__}")
    if image.dtype != np.float32:
        raise ValueError(f"Image buffer must have dtype float32, got {image.dtype}")
    expected = (config.pixel_count, CHANNELS)
    if image.shape != expected:
        raise ValueError(f"Image buffer shape {image.shape} does not match {expected}")
    if not image.flags["C_CONTIGUOUS"]:
        raise ValueError("Image buffer must be C-contiguous")


def _check_camera_initialized() -> None:
    if not is_camera_initialized():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")


def render_image(image: npt.NDArray[np.float32], config: RenderConfig) -> None:
    """Render every pixel into the buffer.

    Pixel (X, Y) is written to row Y * width + X as (r, g, b, 1). Row Y = 0
    is the bottom of the image. Values are linear radiance and are not
    clamped; display mapping is up to the caller.

    Args:
        image: float32 array of shape (width * height, 4), written in place.
        config: Image size, recursion cutoff and ray epsilon.

    Raises:
        RuntimeError: If the camera has not been set up.
        ValueError: If the buffer does not match the configuration.
    """
    _check_camera_initialized()
    _check_image_buffer(image, config)

    start = time.perf_counter()
    _render_kernel(image, config.width, config.height, config.max_depth, config.epsilon)
    ti.sync()
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    logger.info("Rendered %dx%d in %.0f ms", config.width, config.height, elapsed_ms)


def render_pixel(
    pixel_x: int,
    pixel_y: int,
    config: RenderConfig,
) -> tuple[float, float, float]:
    """Render a single pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Raises:
        RuntimeError: If the camera has not been set up.
        ValueError: If the pixel lies outside the image.
    """
    _check_camera_initialized()
    if not (0 <= pixel_x < config.width and 0 <= pixel_y < config.height):
        raise ValueError(
            f"Pixel ({pixel_x}, {pixel_y}) outside {config.width}x{config.height} image"
        )

    color = _render_single_pixel(
        pixel_x, pixel_y, config.width, config.height, config.max_depth, config.epsilon
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    config: RenderConfig | None = None,
) -> tuple[float, float, float]:
    """Trace a single ray through the scene and return its radiance.

    Args:
        origin: Ray origin.
        direction: Ray direction; normalized before tracing.
        config: Supplies max_depth and epsilon. Defaults to RenderConfig().

    Returns:
        Tuple of (R, G, B) radiance.
    """
    if config is None:
        config = RenderConfig()

    color = _trace_single_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        config.max_depth,
        config.epsilon,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def buffer_to_image(
    image: npt.NDArray[np.float32],
    config: RenderConfig,
    *,
    top_left_origin: bool = True,
) -> npt.NDArray[np.float32]:
    """Reshape the row-major buffer into an (height, width, 4) image.

    Args:
        image: Buffer written by render_image().
        config: The configuration used for the render.
        top_left_origin: Flip vertically so row 0 is the top of the picture,
            the layout image files and Matplotlib expect.

    Returns:
        A float32 array of shape (height, width, 4).
    """
    _check_image_buffer(image, config)
    result = image.reshape(config.height, config.width, CHANNELS)
    if top_left_origin:
        result = np.flipud(result)
    return np.ascontiguousarray(result)
