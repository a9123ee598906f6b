"""Render configuration.

RenderConfig is passed explicitly to the camera and the render kernel; there
is no process-wide image size.
"""

from dataclasses import dataclass

# Recursion cutoff: trace() returns the ambient radiance once depth exceeds this
DEFAULT_MAX_DEPTH = 5

# Offset applied to every secondary ray origin along the surface normal.
# Tuned for scenes of roughly unit scale.
DEFAULT_EPSILON = 1e-4


@dataclass(frozen=True)
class RenderConfig:
    """Parameters for a single render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Deepest recursion level that still intersects the scene.
            Mirror bounces beyond it contribute the ambient radiance.
        epsilon: Offset for shadow and reflected ray origins.
    """

    width: int = 600
    height: int = 600
    max_depth: int = DEFAULT_MAX_DEPTH
    epsilon: float = DEFAULT_EPSILON

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.epsilon <= 0.0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")

    @property
    def pixel_count(self) -> int:
        """Number of pixels in the output buffer."""
        return self.width * self.height
