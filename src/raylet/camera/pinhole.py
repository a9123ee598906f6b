"""Pinhole camera model for per-pixel primary ray generation.

The camera is configured with an eye position, a look-at target, an up hint
and a field of view. From these it derives a right/up basis spanning the
virtual image plane through the look-at point:

    w = eye - lookat
    right = normalize(vup x w) * |w| * tan(fov / 2)
    up    = normalize(w x right) * |w| * tan(fov / 2)

The same half-extent is used horizontally and vertically, so non-square
images are stretched rather than aspect-corrected.

Pixel (X, Y) is sampled at its center; Y = 0 is the bottom row:

    dir = lookat + right * (2(X + 0.5)/W - 1) + up * (2(Y + 0.5)/H - 1) - eye

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raylet.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(
    ...     eye=(0.0, 0.0, 2.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     fov=45.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(300, 300, 600, 600)  # Ray through the image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.raylet.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at; lies on the image plane.
        vup: Up hint for camera orientation. Need not be perpendicular to
            the view direction, only not parallel to it.
        fov: Full field of view in degrees.
    """

    eye: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    fov: float


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_lookat = ti.Vector.field(3, dtype=ti.f32, shape=())

# Image plane basis, pre-scaled by focal distance * tan(fov / 2)
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())

_camera_initialized = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def compute_camera_basis(camera: PinholeCamera) -> tuple[np.ndarray, np.ndarray]:
    """Compute the scaled right/up vectors of the image plane.

    Args:
        camera: Camera configuration.

    Returns:
        A tuple (right, up) of float64 arrays.

    Raises:
        ValueError: If eye and lookat coincide, vup is parallel to the view
            direction, or fov is outside (0, 180) degrees.
    """
    if not 0.0 < camera.fov < 180.0:
        raise ValueError(f"Field of view must be in (0, 180) degrees, got {camera.fov}")

    eye = np.array(camera.eye, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = eye - lookat
    focus = float(np.linalg.norm(w))
    if focus < 1e-12:
        raise ValueError("Camera eye and lookat must not coincide")

    half_extent = focus * math.tan(math.radians(camera.fov) / 2.0)

    right = np.cross(vup, w)
    right_len = float(np.linalg.norm(right))
    if right_len < 1e-12:
        raise ValueError("Camera vup must not be parallel to the view direction")
    right = right / right_len * half_extent

    up = np.cross(w, right)
    up = up / np.linalg.norm(up) * half_extent

    return right, up


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    This is the camera's only mutation; afterwards the state is read-only
    during rendering.

    Args:
        camera: Camera configuration with position, orientation, and FOV.
    """
    right, up = compute_camera_basis(camera)

    _camera_eye[None] = list(camera.eye)
    _camera_lookat[None] = list(camera.lookat)
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _camera_initialized[None] = 1


def reset_camera() -> None:
    """Mark the camera as unconfigured."""
    _camera_initialized[None] = 0


def is_camera_initialized() -> bool:
    """Check whether setup_camera() has been called."""
    return bool(_camera_initialized[None])


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through the center of a pixel.

    Args:
        pixel_x: Pixel column in [0, width), 0 = left.
        pixel_y: Pixel row in [0, height), 0 = bottom.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the eye with unit direction.
    """
    sx = 2.0 * (ti.cast(pixel_x, ti.f32) + 0.5) / ti.cast(width, ti.f32) - 1.0
    sy = 2.0 * (ti.cast(pixel_y, ti.f32) + 0.5) / ti.cast(height, ti.f32) - 1.0

    eye = _camera_eye[None]
    direction = _camera_lookat[None] + sx * _camera_right[None] + sy * _camera_up[None] - eye

    return make_ray(eye, direction)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with eye, lookat, right and up.
    """
    info = {}
    for name, fld in (
        ("eye", _camera_eye),
        ("lookat", _camera_lookat),
        ("right", _camera_right),
        ("up", _camera_up),
    ):
        vec = fld[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
