"""Hit records shared by every primitive.

Intersection routines run inside Taichi kernels and return a ``HitRecord``.
The host-side API unpacks a record into an immutable ``Hit`` that carries a
reference to the primitive that was struck, which is how shading finds the
material.

All primitives reject hits at or closer than ``EPSILON`` along the ray, which
keeps secondary rays from re-hitting the surface they start on.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from src.whitted.core.vector import Vector3

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Minimum accepted hit distance (self-intersection / shadow acne guard)
EPSILON = 1e-3

# Packed hit layout returned by probe kernels: hit, t, point.xyz, normal.xyz
hit_vector = ti.types.vector(8, ti.f32)


class PrimitiveKind(IntEnum):
    """Tag identifying a primitive variant on the device."""

    SPHERE = 0
    BOX = 1
    PLANE = 2


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        point: World-space intersection point. Only valid if hit == 1.
        normal: Unit surface normal at the intersection. Only valid if
            hit == 1. Never flipped toward the ray.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def pack_hit(rec: HitRecord) -> hit_vector:
    """Flatten a HitRecord so a kernel can return it to Python."""
    return hit_vector(
        ti.cast(rec.hit, ti.f32),
        rec.t,
        rec.point.x,
        rec.point.y,
        rec.point.z,
        rec.normal.x,
        rec.normal.y,
        rec.normal.z,
    )


@dataclass(frozen=True)
class Hit:
    """Nearest valid intersection of a ray with a primitive.

    Attributes:
        t: Distance along the ray.
        point: World-space intersection point.
        normal: Unit surface normal at the point.
        primitive: The primitive that was hit (owns the material).
    """

    t: float
    point: Vector3
    normal: Vector3
    primitive: Any


def unpack_hit(values: Any, primitive: Any) -> Hit | None:
    """Convert a packed probe result into a Hit, or None for a miss."""
    if float(values[0]) < 0.5:
        return None
    return Hit(
        t=float(values[1]),
        point=Vector3(float(values[2]), float(values[3]), float(values[4])),
        normal=Vector3(float(values[5]), float(values[6]), float(values[7])),
        primitive=primitive,
    )
