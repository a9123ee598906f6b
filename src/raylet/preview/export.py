"""PNG export of rendered buffers.

Files are written as 8-bit RGB through Pillow after the display mapping in
preview.display. The row-major render buffer has row 0 at the bottom; it is
flipped so the saved file reads top to bottom.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.raylet.preview.display import ToneMapMethod, process_image_for_display

if TYPE_CHECKING:
    from src.raylet.core.config import RenderConfig


def save_png(
    buffer: npt.NDArray[np.float32],
    config: RenderConfig,
    filepath: str,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
) -> None:
    """Write a rendered buffer to a PNG file.

    Args:
        buffer: The (width * height, 4) buffer filled by Scene.render().
        config: The configuration the buffer was rendered with.
        filepath: Destination path.
        tone_map: See preview.display.process_image_for_display().
        gamma: See preview.display.process_image_for_display().
        exposure: See preview.display.process_image_for_display().

    Raises:
        ValueError: If the buffer does not match config.
    """
    from src.raylet.core.integrator import buffer_to_image

    save_png_from_array(
        buffer_to_image(buffer, config),
        filepath,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
) -> None:
    """Write an (H, W, 3) or (H, W, 4) linear image, row 0 at the top, to PNG."""
    pixels = image_to_uint8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)
    PILImage.fromarray(pixels, mode="RGB").save(filepath)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Display-map a linear image and quantize it to (H, W, 3) uint8."""
    rgb = process_image_for_display(image, tone_map=tone_map, gamma=gamma, exposure=exposure)
    return (rgb * 255).astype(np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Root mean squared difference between two images of the same shape.

    Raises:
        ValueError: If the shapes differ.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = np.asarray(image_a, dtype=np.float64) - np.asarray(image_b, dtype=np.float64)
    return float(np.sqrt(np.mean(diff * diff)))
