"""Image export utilities for rendered frames.

Supported formats:
    - PNG (8-bit RGB or RGBA via Pillow)

Example:
    >>> from src.whitted.preview.export import save_png
    >>> frame = renderer.render(scene)
    >>> save_png(frame, "cornell_box.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.whitted.preview.display import frame_to_rgb


def save_png(
    frame: npt.NDArray[np.uint8],
    filepath: str | Path,
    *,
    keep_alpha: bool = False,
) -> None:
    """Save a rendered frame as a PNG file.

    The alpha channel is always 255, so it is dropped unless ``keep_alpha``
    is set.

    Args:
        frame: RGBA frame of shape (H, W, 4) from the renderer.
        filepath: Output file path (should end in .png).
        keep_alpha: Write an RGBA PNG instead of RGB.

    Raises:
        ValueError: If the frame has the wrong shape.
    """
    if keep_alpha:
        if frame.ndim != 3 or frame.shape[2] != 4:
            raise ValueError(f"Expected an (H, W, 4) frame, got shape {frame.shape}")
        pil_image = PILImage.fromarray(np.ascontiguousarray(frame, dtype=np.uint8))
    else:
        pil_image = PILImage.fromarray(frame_to_rgb(frame))
    pil_image.save(filepath)


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load a PNG as an RGBA frame of shape (H, W, 4)."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGBA"), dtype=np.uint8).copy()


def image_to_uint8(image: npt.NDArray[np.floating[npt.NBitBase]]) -> npt.NDArray[np.uint8]:
    """Quantize a float RGB image in [0, 1] to an RGBA frame.

    Uses the renderer's quantization, ``min(255, floor(c * 255))``, with
    negative values clamped to zero and alpha set to 255.

    Args:
        image: Float image of shape (H, W, 3).

    Returns:
        RGBA frame of shape (H, W, 4).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    rgb = np.clip(np.floor(image.astype(np.float64) * 255.0), 0.0, 255.0).astype(np.uint8)
    alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=2)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar), in the units of the inputs.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
