"""Pinhole camera model for primary ray generation.

Primary rays start at the camera position and pass through a virtual image
plane at unit distance. For a (sub-)pixel position (px, py) on a
width x height image:

    scale = tan(fov / 2)
    rx = (2 * px / width - 1) * aspect * scale
    ry = (1 - 2 * py / height) * scale
    direction = normalize(rx * u + ry * v - w)

where (u, v, w) is the camera basis. By default the basis is the fixed world
frame (right = +x, up = +y, forward = -z) and ``look_at`` is carried but not
used. Setting ``use_look_at`` derives the basis from position -> look_at
instead.

Row 0 is the top of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.camera.pinhole import Camera, setup_camera, compute_ray_direction
    >>> setup_camera(Camera(position=(0.0, 1.0, 8.0), look_at=(0.0, 1.0, 0.0), fov=60.0))
    >>> compute_ray_direction(400.0, 300.0, 800, 600)
    Vector3(x=0.0, y=0.0, z=-1.0)
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import taichi as ti
import taichi.math as tm

from src.whitted.core.vector import Vector3, as_vector, safe_normalize

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

logger = logging.getLogger(__name__)

DEFAULT_FOV = 60.0

# Fixed world frame used when look-at is not honored
WORLD_RIGHT = Vector3(1.0, 0.0, 0.0)
WORLD_UP = Vector3(0.0, 1.0, 0.0)
WORLD_BACK = Vector3(0.0, 0.0, 1.0)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        position: Camera position in world space.
        look_at: Point the camera is aimed at. Only used for the ray basis
            when ``use_look_at`` is set.
        fov: Vertical field of view in degrees.
        use_look_at: Derive the camera basis from position -> look_at instead
            of the fixed -z forward axis.
        up: Up direction used when ``use_look_at`` is set.
    """

    position: Vector3 = field(default_factory=lambda: Vector3(0.0, 1.0, 8.0))
    look_at: Vector3 = field(default_factory=lambda: Vector3(0.0, 1.0, 0.0))
    fov: float = DEFAULT_FOV
    use_look_at: bool = False
    up: Vector3 = field(default_factory=lambda: WORLD_UP)

    def __post_init__(self) -> None:
        self.position = as_vector(self.position)
        self.look_at = as_vector(self.look_at)
        self.up = as_vector(self.up)
        if not 0.0 < self.fov < 180.0:
            raise ValueError(f"Field of view must be in (0, 180) degrees, got {self.fov}")

    @property
    def scale(self) -> float:
        """Half-height of the image plane at unit distance."""
        return math.tan(math.radians(self.fov) / 2.0)

    def basis(self) -> tuple[Vector3, Vector3, Vector3]:
        """Compute the (right, up, back) camera basis.

        Falls back to the fixed world frame when look-at is disabled or the
        view direction is degenerate (look_at on the camera, or parallel to up).
        """
        if not self.use_look_at:
            return WORLD_RIGHT, WORLD_UP, WORLD_BACK

        w = self.position.subtract(self.look_at).normalize()
        u = self.up.cross(w).normalize()
        if w.length() == 0.0 or u.length() == 0.0:
            logger.warning(
                "Degenerate look-at basis (position=%s, look_at=%s); using fixed axes",
                self.position,
                self.look_at,
            )
            return WORLD_RIGHT, WORLD_UP, WORLD_BACK
        v = w.cross(u)
        return u, v, w

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": list(self.position.to_tuple()),
            "look_at": list(self.look_at.to_tuple()),
            "fov": self.fov,
            "use_look_at": self.use_look_at,
            "up": list(self.up.to_tuple()),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Camera":
        return cls(
            position=data.get("position", (0.0, 1.0, 8.0)),
            look_at=data.get("look_at", (0.0, 1.0, 0.0)),
            fov=float(data.get("fov", DEFAULT_FOV)),
            use_look_at=bool(data.get("use_look_at", False)),
            up=data.get("up", WORLD_UP),
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)
_camera_scale = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload the camera position, basis and image-plane scale to the device.

    Args:
        camera: Camera configuration.
    """
    u, v, w = camera.basis()
    _camera_position[None] = list(camera.position.to_tuple())
    _camera_u[None] = list(u.to_tuple())
    _camera_v[None] = list(v.to_tuple())
    _camera_w[None] = list(w.to_tuple())
    _camera_scale[None] = camera.scale


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera position in world space."""
    return _camera_position[None]


@ti.func
def primary_ray_direction(px: ti.f32, py: ti.f32, width: ti.i32, height: ti.i32) -> vec3:
    """Compute the normalized direction of the ray through image point (px, py).

    Args:
        px: Horizontal image coordinate in pixels (0 = left edge).
        py: Vertical image coordinate in pixels (0 = top edge).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The unit ray direction in world space.
    """
    w_f = ti.cast(width, ti.f32)
    h_f = ti.cast(height, ti.f32)
    scale = _camera_scale[None]
    aspect = w_f / h_f

    rx = (2.0 * px / w_f - 1.0) * aspect * scale
    ry = (1.0 - 2.0 * py / h_f) * scale

    return safe_normalize(rx * _camera_u[None] + ry * _camera_v[None] - _camera_w[None])


@ti.kernel
def _primary_ray_direction_kernel(px: ti.f32, py: ti.f32, width: ti.i32, height: ti.i32) -> vec3:
    return primary_ray_direction(px, py, width, height)


def compute_ray_direction(px: float, py: float, width: int, height: int) -> Vector3:
    """Python-callable primary ray direction for the current camera.

    Args:
        px: Horizontal image coordinate in pixels.
        py: Vertical image coordinate in pixels.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The unit ray direction.
    """
    d = _primary_ray_direction_kernel(px, py, width, height)
    return Vector3(float(d[0]), float(d[1]), float(d[2]))


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current device-side camera state for debugging."""

    def _read(f: Any) -> tuple[float, float, float]:
        vec = f[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "position": _read(_camera_position),
        "u": _read(_camera_u),
        "v": _read(_camera_v),
        "w": _read(_camera_w),
        "scale": float(_camera_scale[None]),
    }
