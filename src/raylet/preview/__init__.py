"""Preview module for output and visualization.

This module is the presenting side of the renderer: it takes the row-major
RGBA buffer of linear radiance and turns it into something a person can look
at.

Components:
    display: Matplotlib-based preview window and display mapping
    export: PNG export utilities

Features:
    - Clamping of unbounded radiance to [0, 1]
    - Optional tone mapping (Reinhard, exposure-based)
    - Optional gamma correction
    - RMSE comparison between renders

Example:
    >>> from src.raylet.preview import save_png, show_image
    >>> save_png(buffer, config, "output.png")
    >>> show_image(buffer, config)
"""

from src.raylet.preview.display import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    show_image,
    tone_map_exposure,
    tone_map_reinhard,
)
from src.raylet.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    # Display functions
    "show_image",
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "compute_rmse",
]
