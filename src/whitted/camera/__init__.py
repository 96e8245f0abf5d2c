"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole (perspective) camera with a fixed forward axis by
        default and optional look-at orientation

Camera responsibilities:
    - Map (sub-)pixel image coordinates to world-space ray directions
    - Convert the vertical field of view into an image-plane scale
    - Keep the device-side camera fields in sync with the Camera value

Image coordinates are in pixels with (0, 0) at the top-left corner.
"""

from .pinhole import (
    DEFAULT_FOV,
    Camera,
    compute_ray_direction,
    get_camera_info,
    get_camera_origin,
    primary_ray_direction,
    setup_camera,
)

__all__ = [
    "Camera",
    "DEFAULT_FOV",
    "setup_camera",
    "primary_ray_direction",
    "get_camera_origin",
    "compute_ray_direction",
    "get_camera_info",
]
