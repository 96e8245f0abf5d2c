"""Render configuration.

The frame renderer is configured once per session with a fixed resolution,
an antialiasing factor and a recursion depth. ``RenderConfig`` holds those
values, validates them, and round-trips through plain dictionaries so the
surrounding glue can load it from JSON or command-line flags.

Example:
    >>> config = RenderConfig(width=320, height=240)
    >>> config.samples_per_pixel
    4
    >>> RenderConfig.from_dict({"width": 64, "height": 48}).aspect_ratio
    1.3333333333333333
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

# Default session resolution and quality settings
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
DEFAULT_ANTIALIASING = 2
DEFAULT_MAX_DEPTH = 3

# Largest accepted image side
MAX_IMAGE_SIZE = 4096


@dataclass(frozen=True)
class RenderConfig:
    """Resolution and quality settings for a render session.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        antialiasing: Sub-samples per pixel axis (``antialiasing**2`` rays
            per pixel).
        max_depth: Maximum recursion depth for reflection/refraction rays.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    antialiasing: int = DEFAULT_ANTIALIASING
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if not (1 <= self.width <= MAX_IMAGE_SIZE and 1 <= self.height <= MAX_IMAGE_SIZE):
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) must be between "
                f"1 and {MAX_IMAGE_SIZE}"
            )
        if self.antialiasing < 1:
            raise ValueError(f"Antialiasing factor must be >= 1, got {self.antialiasing}")
        if self.max_depth < 0:
            raise ValueError(f"Max depth must be non-negative, got {self.max_depth}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def samples_per_pixel(self) -> int:
        return self.antialiasing * self.antialiasing

    @property
    def rows_per_update(self) -> int:
        """Rows rendered between progress updates (about 1% of the image)."""
        return max(1, self.height // 100)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenderConfig:
        """Create a config from a dictionary, ignoring unknown keys.

        Missing keys fall back to the defaults.
        """
        known = {"width", "height", "antialiasing", "max_depth"}
        return cls(**{key: int(value) for key, value in data.items() if key in known})
