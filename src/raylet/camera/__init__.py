"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole (perspective) camera with look-at positioning

Camera responsibilities:
    - Derive the image plane basis from eye, look-at, up hint and FOV
    - Map integer pixel coordinates to world-space rays through pixel centers

Ray generation is a Taichi function so that the render kernel can create
primary rays for all pixels in parallel.
"""

from .pinhole import (
    PinholeCamera,
    compute_camera_basis,
    get_camera_info,
    get_ray,
    is_camera_initialized,
    reset_camera,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "compute_camera_basis",
    "setup_camera",
    "reset_camera",
    "is_camera_initialized",
    "get_ray",
    "get_camera_info",
]
