"""Infinite plane primitive.

A plane is a point and a unit normal; the normal is normalized once on
construction. Rays that are (nearly) parallel to the plane never hit it, and
the reported normal is the plane normal regardless of which side the ray
comes from.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.plane import Plane
    >>> from src.whitted.materials import Material
    >>> floor = Plane((0.0, -2.5, 0.0), (0.0, 1.0, 0.0), Material((0.9, 0.9, 0.9)))
    >>> floor.intersect((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)) is None
    True
"""

from dataclasses import dataclass
from typing import Any, ClassVar

import taichi as ti
import taichi.math as tm

from src.whitted.core.vector import Vector3, as_vector, to_vec3
from src.whitted.materials.phong import Material

from .hit import EPSILON, Hit, HitRecord, PrimitiveKind, hit_vector, pack_hit, unpack_hit

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# |dot(normal, direction)| at or below this counts as parallel
PARALLEL_THRESHOLD = 1e-4


@ti.func
def hit_plane(origin: vec3, direction: vec3, point: vec3, normal: vec3) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        origin: The starting point of the ray.
        direction: The ray direction.
        point: Any point on the plane.
        normal: The unit plane normal.

    Returns:
        A HitRecord for the crossing point if it lies beyond EPSILON.
    """
    rec = HitRecord(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 0.0, 0.0))
    denom = tm.dot(normal, direction)
    if ti.abs(denom) > PARALLEL_THRESHOLD:
        t = tm.dot(point - origin, normal) / denom
        if t > EPSILON:
            rec = HitRecord(hit=1, t=t, point=origin + t * direction, normal=normal)
    return rec


@ti.kernel
def _probe_plane(point: vec3, normal: vec3, origin: vec3, direction: vec3) -> hit_vector:
    return pack_hit(hit_plane(origin, direction, point, normal))


@dataclass(eq=False)
class Plane:
    """An infinite plane through ``point`` with unit ``normal``.

    Attributes:
        point: A point on the plane.
        normal: The plane normal (normalized on construction).
        material: The material owned by this plane.
    """

    point: Vector3
    normal: Vector3
    material: Material

    kind: ClassVar[PrimitiveKind] = PrimitiveKind.PLANE

    def __post_init__(self) -> None:
        self.point = as_vector(self.point)
        self.normal = as_vector(self.normal).normalize()

    def intersect(self, origin: Any, direction: Any) -> Hit | None:
        """Intersect a ray with this plane.

        Args:
            origin: Ray origin (Vector3 or 3-tuple).
            direction: Ray direction (Vector3 or 3-tuple).

        Returns:
            The crossing Hit beyond EPSILON, or None for parallel rays and
            planes behind the origin.
        """
        values = _probe_plane(to_vec3(self.point), to_vec3(self.normal), to_vec3(origin), to_vec3(direction))
        return unpack_hit(values, self)

    def device_params(self) -> tuple[Vector3, Vector3, float]:
        """Return the (a, b, radius) triple stored in scene fields."""
        return self.point, self.normal, 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "plane",
            "point": list(self.point.to_tuple()),
            "normal": list(self.normal.to_tuple()),
            "material": self.material.to_dict(),
        }
