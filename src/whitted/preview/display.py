"""Matplotlib-based preview display for rendered frames.

Frames are the renderer's RGBA byte buffers of shape (H, W, 4). They are
already display-ready (clamped and quantized), so no tone mapping or gamma
step is applied here.

Example:
    >>> from src.whitted.preview.display import show_frame
    >>> frame = renderer.render(scene)
    >>> show_frame(frame, title="Cornell box")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def _check_frame(frame: npt.NDArray[np.uint8]) -> None:
    if frame.ndim != 3 or frame.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) frame, got shape {frame.shape}")


def frame_to_rgb(frame: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    """Drop the alpha channel of an RGBA frame.

    Args:
        frame: Frame of shape (H, W, 4) or (H, W, 3).

    Returns:
        A contiguous (H, W, 3) uint8 copy.

    Raises:
        ValueError: If the frame does not have 3 or 4 channels.
    """
    _check_frame(frame)
    return np.ascontiguousarray(frame[:, :, :3], dtype=np.uint8)


def frame_to_float(frame: npt.NDArray[np.uint8]) -> npt.NDArray[np.float32]:
    """Convert a byte frame to float RGB in [0, 1].

    Args:
        frame: Frame of shape (H, W, 4) or (H, W, 3).

    Returns:
        Float image of shape (H, W, 3).
    """
    return frame_to_rgb(frame).astype(np.float32) / 255.0


def show_frame(
    frame: npt.NDArray[np.uint8],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a frame as a Matplotlib figure.

    Args:
        frame: RGBA frame from the renderer.
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    rgb = frame_to_rgb(frame)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(rgb)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {rgb.shape[1]}x{rgb.shape[0]}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    frame_a: npt.NDArray[np.uint8],
    frame_b: npt.NDArray[np.uint8],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two frames side by side with an amplified difference view.

    Args:
        frame_a: First frame.
        frame_b: Second frame (same shape as frame_a).
        labels: Labels for the two frames.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two frames in [0, 1] units.
    """
    import matplotlib.pyplot as plt

    display_a = frame_to_float(frame_a)
    display_b = frame_to_float(frame_b)
    if display_a.shape != display_b.shape:
        raise ValueError(f"Frame shapes must match: {display_a.shape} vs {display_b.shape}")

    diff = display_a.astype(np.float64) - display_b.astype(np.float64)
    rmse = float(np.sqrt(np.mean(diff**2)))
    diff_amplified = np.clip(np.abs(diff) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
