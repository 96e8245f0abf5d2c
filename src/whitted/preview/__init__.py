"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview of rendered frames
    export: PNG export and image comparison utilities

Frames are the renderer's RGBA byte buffers; both modules accept them as-is.

Example:
    >>> from src.whitted.preview import save_png, show_frame
    >>> frame = renderer.render(scene)
    >>> save_png(frame, "output.png")
    >>> show_frame(frame)
"""

from src.whitted.preview.display import (
    frame_to_float,
    frame_to_rgb,
    show_comparison,
    show_frame,
)
from src.whitted.preview.export import (
    compute_rmse,
    image_to_uint8,
    load_png,
    save_png,
)

__all__ = [
    # Display functions
    "show_frame",
    "show_comparison",
    "frame_to_rgb",
    "frame_to_float",
    # Export functions
    "save_png",
    "load_png",
    "image_to_uint8",
    "compute_rmse",
]
