"""Closed set of scene primitives and kernel-side dispatch.

A scene holds exactly three kinds of primitives: ``Sphere``, ``Box`` and
``Plane``. On the device every primitive is flattened to a kind tag plus two
vectors and a scalar:

    kind     a          b            radius
    SPHERE   center     (unused)     radius
    BOX      min        max          (unused)
    PLANE    point      unit normal  (unused)

``intersect_primitive`` switches on the tag, so adding a primitive kind means
extending this module rather than subclassing.
"""

from typing import Any, Union

import taichi as ti
import taichi.math as tm

from src.whitted.materials.phong import Material

from .box import Box, hit_box
from .hit import HitRecord, PrimitiveKind, make_miss_record
from .plane import Plane, hit_plane
from .sphere import Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

Primitive = Union[Sphere, Box, Plane]

PRIMITIVE_TYPES = (Sphere, Box, Plane)

# Plain int tags for comparisons inside kernels
SPHERE_KIND = int(PrimitiveKind.SPHERE)
BOX_KIND = int(PrimitiveKind.BOX)
PLANE_KIND = int(PrimitiveKind.PLANE)


@ti.func
def intersect_primitive(
    kind: ti.i32,
    a: vec3,
    b: vec3,
    radius: ti.f32,
    origin: vec3,
    direction: vec3,
) -> HitRecord:
    """Intersect a ray with a flattened primitive.

    Args:
        kind: The PrimitiveKind tag.
        a: Sphere center, box minimum corner or plane point.
        b: Box maximum corner or plane normal (unused for spheres).
        radius: Sphere radius (unused otherwise).
        origin: The starting point of the ray.
        direction: The ray direction.

    Returns:
        The primitive's HitRecord, or a miss record for an unknown tag.
    """
    rec = make_miss_record()
    if kind == SPHERE_KIND:
        rec = hit_sphere(origin, direction, a, radius)
    elif kind == BOX_KIND:
        rec = hit_box(origin, direction, a, b)
    elif kind == PLANE_KIND:
        rec = hit_plane(origin, direction, a, b)
    return rec


def is_primitive(value: Any) -> bool:
    return isinstance(value, PRIMITIVE_TYPES)


def primitive_from_dict(data: dict[str, Any]) -> Primitive:
    """Build a primitive from its dictionary form.

    Args:
        data: A mapping with a ``type`` key ("sphere", "box" or "plane"),
            the shape parameters, and a ``material`` mapping.

    Returns:
        The constructed primitive.

    Raises:
        ValueError: If the type is unknown.
        KeyError: If a required key is missing.
    """
    kind = str(data.get("type", "")).lower()
    material = Material.from_dict(data["material"])
    if kind == "sphere":
        return Sphere(center=data["center"], radius=float(data["radius"]), material=material)
    if kind in ("box", "cube"):
        return Box(min_corner=data["min"], max_corner=data["max"], material=material)
    if kind == "plane":
        return Plane(point=data["point"], normal=data["normal"], material=material)
    raise ValueError(f"Unknown primitive type: {data.get('type')!r}")
