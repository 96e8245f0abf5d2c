"""Axis-aligned box primitive with slab intersection.

The ray is clipped against the three pairs of axis-aligned planes in turn,
shrinking the running [tmin, tmax] interval; the box is missed as soon as two
axes produce disjoint intervals. An axis whose direction component is
(near-)zero never divides: the ray either lies inside that slab for its whole
length or misses the box.

The surface normal is recovered after the fact by checking which face plane
the hit point lies on, in the fixed order -x, +x, -y, +y, -z, +z. Near edges
and corners the first matching face wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.box import Box
    >>> from src.whitted.materials import Material
    >>> box = Box((-1.0, -1.0, -1.0), (1.0, 1.0, 1.0), Material((0.2, 0.3, 0.8)))
    >>> box.intersect((0.0, 0.0, 5.0), (0.0, 0.0, -1.0)).normal
    Vector3(x=0.0, y=0.0, z=1.0)
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

# Tolerance for deciding which face a hit point lies on
FACE_EPSILON = 1e-3

# Direction components below this magnitude are treated as parallel to a slab
PARALLEL_EPSILON = 1e-8

# Stand-in for an unbounded slab interval
T_INFINITY = 1e30


@ti.func
def _slab(origin: ti.f32, direction: ti.f32, lo: ti.f32, hi: ti.f32):
    """Clip a ray against one pair of parallel planes.

    Returns:
        A tuple (t_near, t_far, valid). ``valid`` is 0 when the ray is
        parallel to the slab and starts outside it.
    """
    t_near = -T_INFINITY
    t_far = T_INFINITY
    valid = 1
    if ti.abs(direction) < PARALLEL_EPSILON:
        if origin < lo or origin > hi:
            valid = 0
    else:
        t_near = (lo - origin) / direction
        t_far = (hi - origin) / direction
        if t_near > t_far:
            temp = t_near
            t_near = t_far
            t_far = temp
    return t_near, t_far, valid


@ti.func
def box_face_normal(point: vec3, box_min: vec3, box_max: vec3) -> vec3:
    """Pick the outward normal of the face containing ``point``.

    Faces are tested in the order -x, +x, -y, +y, -z and +z is the fallback.
    """
    normal = vec3(0.0, 0.0, 1.0)
    if ti.abs(point.x - box_min.x) < FACE_EPSILON:
        normal = vec3(-1.0, 0.0, 0.0)
    elif ti.abs(point.x - box_max.x) < FACE_EPSILON:
        normal = vec3(1.0, 0.0, 0.0)
    elif ti.abs(point.y - box_min.y) < FACE_EPSILON:
        normal = vec3(0.0, -1.0, 0.0)
    elif ti.abs(point.y - box_max.y) < FACE_EPSILON:
        normal = vec3(0.0, 1.0, 0.0)
    elif ti.abs(point.z - box_min.z) < FACE_EPSILON:
        normal = vec3(0.0, 0.0, -1.0)
    return normal


@ti.func
def hit_box(origin: vec3, direction: vec3, box_min: vec3, box_max: vec3) -> HitRecord:
    """Test for ray-box intersection using the slab method.

    Args:
        origin: The starting point of the ray.
        direction: The ray direction.
        box_min: The minimum corner of the box.
        box_max: The maximum corner of the box.

    Returns:
        A HitRecord for the entry point of the ray. Rays starting inside the
        box (entry behind the origin) miss.
    """
    t_min, t_max, valid = _slab(origin.x, direction.x, box_min.x, box_max.x)

    ty_min, ty_max, valid_y = _slab(origin.y, direction.y, box_min.y, box_max.y)
    if valid_y == 0 or t_min > ty_max or ty_min > t_max:
        valid = 0
    t_min = tm.max(t_min, ty_min)
    t_max = tm.min(t_max, ty_max)

    tz_min, tz_max, valid_z = _slab(origin.z, direction.z, box_min.z, box_max.z)
    if valid_z == 0 or t_min > tz_max or tz_min > t_max:
        valid = 0
    t_min = tm.max(t_min, tz_min)

    rec = HitRecord(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 0.0, 0.0))
    if valid == 1 and t_min > EPSILON:
        point = origin + t_min * direction
        rec = HitRecord(
            hit=1,
            t=t_min,
            point=point,
            normal=box_face_normal(point, box_min, box_max),
        )
    return rec


@ti.kernel
def _probe_box(box_min: vec3, box_max: vec3, origin: vec3, direction: vec3) -> hit_vector:
    return pack_hit(hit_box(origin, direction, box_min, box_max))


@dataclass(eq=False)
class Box:
    """An axis-aligned box spanned by two corners.

    Attributes:
        min_corner: Corner with the smallest coordinates.
        max_corner: Corner with the largest coordinates.
        material: The material owned by this box.
    """

    min_corner: Vector3
    max_corner: Vector3
    material: Material

    kind: ClassVar[PrimitiveKind] = PrimitiveKind.BOX

    def __post_init__(self) -> None:
        self.min_corner = as_vector(self.min_corner)
        self.max_corner = as_vector(self.max_corner)

    @property
    def center(self) -> Vector3:
        return self.min_corner.add(self.max_corner).multiply(0.5)

    def intersect(self, origin: Any, direction: Any) -> Hit | None:
        """Intersect a ray with this box.

        Args:
            origin: Ray origin (Vector3 or 3-tuple).
            direction: Ray direction (Vector3 or 3-tuple).

        Returns:
            The entry Hit beyond EPSILON, or None.
        """
        values = _probe_box(
            to_vec3(self.min_corner),
            to_vec3(self.max_corner),
            to_vec3(origin),
            to_vec3(direction),
        )
        return unpack_hit(values, self)

    def device_params(self) -> tuple[Vector3, Vector3, float]:
        """Return the (a, b, radius) triple stored in scene fields."""
        return self.min_corner, self.max_corner, 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "box",
            "min": list(self.min_corner.to_tuple()),
            "max": list(self.max_corner.to_tuple()),
            "material": self.material.to_dict(),
        }
