"""Display mapping and the Matplotlib preview window.

The core writes unbounded linear radiance. Before it can be shown or stored in
8 bits it goes through a fixed pipeline:

    RGBA/RGB image -> RGB -> tone map (optional) -> gamma -> clamp to [0, 1]

With the defaults (no tone map, gamma 1) this is a plain clamp, which is how
the buffer looks when uploaded to a texture and drawn as is.

Example:
    >>> from src.raylet.preview.display import show_image
    >>> show_image(buffer, config)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Literal

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.raylet.core.config import RenderConfig


ToneMapMethod = Literal["none", "reinhard", "exposure"]

FloatImage = npt.NDArray[np.float32]


def tone_map_reinhard(image: FloatImage) -> FloatImage:
    """Compress radiance with the Reinhard operator L / (1 + L).

    Negative values are treated as black.
    """
    lum = np.maximum(image, 0.0)
    return (lum / (1.0 + lum)).astype(np.float32)


def tone_map_exposure(image: FloatImage, exposure: float = 1.0) -> FloatImage:
    """Compress radiance with 1 - exp(-L * exposure).

    Larger exposure values brighten the result. Negative values are treated
    as black.
    """
    lum = np.maximum(image, 0.0)
    return (1.0 - np.exp(-lum * exposure)).astype(np.float32)


def apply_gamma(image: FloatImage, gamma: float = 2.2) -> FloatImage:
    """Raise each channel to 1 / gamma.

    Input is clamped to [0, 1] first. A gamma of 1.0 returns the image
    unchanged, without clamping.
    """
    if gamma == 1.0:
        return image
    return np.power(np.clip(image, 0.0, 1.0), 1.0 / gamma).astype(np.float32)


def _no_tone_map(image: FloatImage, exposure: float) -> FloatImage:
    return image


_TONE_MAPS: dict[str, Callable[[FloatImage, float], FloatImage]] = {
    "none": _no_tone_map,
    "reinhard": lambda image, exposure: tone_map_reinhard(image),
    "exposure": tone_map_exposure,
}


def process_image_for_display(
    image: FloatImage,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
) -> FloatImage:
    """Map a linear (H, W, 3) or (H, W, 4) image to displayable RGB.

    Args:
        image: Linear radiance, row 0 at the top. Alpha, if present, is
            dropped.
        tone_map: "none", "reinhard" or "exposure".
        gamma: Display gamma; 1.0 disables gamma correction.
        exposure: Only used by the "exposure" tone map.

    Returns:
        float32 array of shape (H, W, 3) with values in [0, 1].

    Raises:
        ValueError: For an unknown tone map or an image that is not
            (H, W, 3) or (H, W, 4).
    """
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got shape {image.shape}")
    if tone_map not in _TONE_MAPS:
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    rgb = np.asarray(image[:, :, :3], dtype=np.float32)
    rgb = _TONE_MAPS[tone_map](rgb, exposure)
    rgb = apply_gamma(rgb, gamma)
    return np.clip(rgb, 0.0, 1.0).astype(np.float32)


def show_image(
    buffer: FloatImage,
    config: RenderConfig,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Open a Matplotlib window showing a rendered buffer.

    Args:
        buffer: The (width * height, 4) buffer filled by Scene.render().
        config: The configuration the buffer was rendered with.
        tone_map: See process_image_for_display().
        gamma: See process_image_for_display().
        exposure: See process_image_for_display().
        title: Window title; defaults to the resolution.
        figsize: Figure size in inches.
        block: Block until the window is closed.
    """
    import matplotlib.pyplot as plt

    from src.raylet.core.integrator import buffer_to_image

    rgb = process_image_for_display(
        buffer_to_image(buffer, config),
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )

    _, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(rgb)
    ax.axis("off")
    ax.set_title(title if title is not None else f"raylet {config.width}x{config.height}")

    plt.tight_layout()
    plt.show(block=block)
