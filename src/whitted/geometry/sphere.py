"""Sphere primitive with ray-sphere intersection.

The intersection solves the quadratic

    |origin + t * direction - center|^2 = radius^2

with the textbook formula. The smaller root is used when it lies beyond
``EPSILON``; otherwise the larger root is tried, which is the case for rays
starting inside the sphere (refraction). A negative discriminant or a
zero-length direction is a miss.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.sphere import Sphere
    >>> from src.whitted.materials import Material
    >>> sphere = Sphere((0.0, 0.0, -5.0), 1.0, Material((0.9, 0.9, 0.2)))
    >>> sphere.intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)).t
    4.0
"""

from dataclasses import dataclass
from typing import Any, ClassVar

import taichi as ti
import taichi.math as tm

from src.whitted.core.vector import Vector3, as_vector, safe_normalize, to_vec3
from src.whitted.materials.phong import Material

from .hit import EPSILON, Hit, HitRecord, PrimitiveKind, hit_vector, pack_hit, unpack_hit

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def hit_sphere(origin: vec3, direction: vec3, center: vec3, radius: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        origin: The starting point of the ray.
        direction: The ray direction. Need not be normalized; a non-unit
            direction only rescales t.
        center: The sphere center.
        radius: The sphere radius.

    Returns:
        A HitRecord for the nearest root beyond EPSILON. The normal points
        from the center to the hit point (zero for a zero-radius sphere).
    """
    oc = origin - center
    a = tm.dot(direction, direction)
    b = 2.0 * tm.dot(oc, direction)
    c = tm.dot(oc, oc) - radius * radius
    discriminant = b * b - 4.0 * a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if a > 0.0 and discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t1 = (-b - sqrt_d) / (2.0 * a)
        t2 = (-b + sqrt_d) / (2.0 * a)

        if t1 > EPSILON:
            did_hit = 1
            hit_t = t1
        elif t2 > EPSILON:
            did_hit = 1
            hit_t = t2

        if did_hit == 1:
            hit_point = origin + hit_t * direction
            hit_normal = safe_normalize(hit_point - center)

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)


@ti.kernel
def _probe_sphere(center: vec3, radius: ti.f32, origin: vec3, direction: vec3) -> hit_vector:
    return pack_hit(hit_sphere(origin, direction, center, radius))


@dataclass(eq=False)
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center of the sphere.
        radius: The radius (zero is allowed and only hit dead-center).
        material: The material owned by this sphere.
    """

    center: Vector3
    radius: float
    material: Material

    kind: ClassVar[PrimitiveKind] = PrimitiveKind.SPHERE

    def __post_init__(self) -> None:
        self.center = as_vector(self.center)
        self.radius = float(self.radius)

    def intersect(self, origin: Any, direction: Any) -> Hit | None:
        """Intersect a ray with this sphere.

        Args:
            origin: Ray origin (Vector3 or 3-tuple).
            direction: Ray direction (Vector3 or 3-tuple).

        Returns:
            The nearest Hit beyond EPSILON, or None.
        """
        values = _probe_sphere(to_vec3(self.center), self.radius, to_vec3(origin), to_vec3(direction))
        return unpack_hit(values, self)

    def device_params(self) -> tuple[Vector3, Vector3, float]:
        """Return the (a, b, radius) triple stored in scene fields."""
        return self.center, Vector3(0.0, 0.0, 0.0), self.radius

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "sphere",
            "center": list(self.center.to_tuple()),
            "radius": self.radius,
            "material": self.material.to_dict(),
        }
