"""Geometry module for shape primitives.

This module provides the three primitives a scene is built from:

Components:
    hit: HitRecord (kernel-side) and Hit (host-side) intersection results
    sphere: Sphere with quadratic ray intersection
    box: Axis-aligned box with slab intersection
    plane: Infinite plane
    primitive: Closed Sphere | Box | Plane union and kernel-side dispatch

Every primitive offers ``intersect(origin, direction) -> Hit | None`` on the
host and a ``hit_*`` Taichi function for kernels. Hits at or closer than
EPSILON (0.001) are rejected. There is no acceleration structure; the scene
scans its primitives linearly.
"""

from .box import Box, hit_box
from .hit import (
    EPSILON,
    Hit,
    HitRecord,
    PrimitiveKind,
    make_miss_record,
    pack_hit,
    unpack_hit,
)
from .plane import Plane, hit_plane
from .primitive import (
    PRIMITIVE_TYPES,
    Primitive,
    intersect_primitive,
    is_primitive,
    primitive_from_dict,
)
from .sphere import Sphere, hit_sphere

__all__ = [
    "EPSILON",
    "Hit",
    "HitRecord",
    "PrimitiveKind",
    "make_miss_record",
    "pack_hit",
    "unpack_hit",
    "Sphere",
    "hit_sphere",
    "Box",
    "hit_box",
    "Plane",
    "hit_plane",
    "Primitive",
    "PRIMITIVE_TYPES",
    "intersect_primitive",
    "is_primitive",
    "primitive_from_dict",
]
