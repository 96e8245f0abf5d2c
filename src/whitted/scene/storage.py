"""Device-side scene storage and ray-scene queries.

The host-side ``Scene`` is uploaded into module-level Taichi fields at the
start of every render. Primitives of all three kinds share one Structure of
Arrays indexed by scene order; each slot carries a ``PrimitiveKind`` tag and
two vector parameters whose meaning depends on the kind:

    SPHERE: a = center,    b = unused,     radius = radius
    BOX:    a = min corner, b = max corner, radius = unused
    PLANE:  a = point,     b = unit normal, radius = unused

Material parameters are stored in parallel arrays under the same index, so a
hit's ``primitive_index`` is all shading needs to find its material.

Intersection is a brute-force linear scan in scene order. The nearest hit
uses a strict ``<`` comparison, so the first primitive wins exact ties.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.storage import upload_scene, get_primitive_count
    >>> from src.whitted.scene.cornell_box import create_cornell_box_scene
    >>> upload_scene(create_cornell_box_scene())
    >>> get_primitive_count()
    8
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import taichi as ti
import taichi.math as tm

from src.whitted.core.vector import to_vec3
from src.whitted.geometry.box import T_INFINITY
from src.whitted.geometry.primitive import intersect_primitive
from src.whitted.materials.phong import PhongMaterial

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

logger = logging.getLogger(__name__)

# Maximum number of primitives and point lights supported in the scene
MAX_PRIMITIVES = 256
MAX_LIGHTS = 2


@ti.dataclass
class SceneHitRecord:
    """Record of the nearest ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: Distance along the ray. Only valid if hit == 1.
        point: World-space intersection point. Only valid if hit == 1.
        normal: Surface normal of the struck primitive. Only valid if hit == 1.
        primitive_index: Scene index of the struck primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    primitive_index: ti.i32


# Primitive storage: Structure of Arrays layout
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_a = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_b = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_radii = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())

# Material storage, indexed like the primitives
material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
material_reflection = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
material_transparency = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
material_ior = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
material_specular = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
material_shininess = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)

# Point light storage
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Host-side Upload
# =============================================================================


def clear_scene_storage() -> None:
    """Reset the primitive and light counts to zero.

    The field data itself is left in place and overwritten by the next upload.
    """
    num_primitives[None] = 0
    num_lights[None] = 0


def add_primitive(primitive: Any) -> int:
    """Append one primitive and its material to device storage.

    Args:
        primitive: A Sphere, Box or Plane.

    Returns:
        The storage index of the primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")

    a, b, radius = primitive.device_params()
    primitive_kinds[idx] = int(primitive.kind)
    primitive_a[idx] = list(a.to_tuple())
    primitive_b[idx] = list(b.to_tuple())
    primitive_radii[idx] = radius

    material = primitive.material
    material_colors[idx] = list(material.color)
    material_reflection[idx] = material.reflection
    material_transparency[idx] = material.transparency
    material_ior[idx] = material.refraction_index
    material_specular[idx] = material.specular
    material_shininess[idx] = material.shininess

    num_primitives[None] = idx + 1
    return idx


def add_light(light: Any) -> int:
    """Append one point light to device storage.

    Args:
        light: A Light with position, color and intensity.

    Returns:
        The storage index of the light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = list(light.position.to_tuple())
    light_colors[idx] = list(light.color)
    light_intensities[idx] = light.intensity
    num_lights[None] = idx + 1
    return idx


def upload_scene(scene: Any) -> None:
    """Replace the device-side scene with the given host-side scene.

    Args:
        scene: A Scene (anything with ``primitives`` and ``lights``).

    Raises:
        RuntimeError: If the scene exceeds the storage capacity.
    """
    if len(scene.primitives) > MAX_PRIMITIVES:
        raise RuntimeError(
            f"Scene has {len(scene.primitives)} primitives, maximum is {MAX_PRIMITIVES}"
        )
    if len(scene.lights) > MAX_LIGHTS:
        raise RuntimeError(f"Scene has {len(scene.lights)} lights, maximum is {MAX_LIGHTS}")

    clear_scene_storage()
    for primitive in scene.primitives:
        add_primitive(primitive)
    for light in scene.lights:
        add_light(light)
    logger.debug(
        "Uploaded scene: %d primitives, %d lights", len(scene.primitives), len(scene.lights)
    )


# Device storage is shared, so only one render may use it at a time
_device_lock = threading.Lock()


@contextmanager
def claim_device(scene: Any) -> Iterator[None]:
    """Lock device storage and the scene, then upload the scene.

    Args:
        scene: The Scene about to be rendered.

    Raises:
        RuntimeError: If another render holds the device, or the scene is
            already being rendered.
    """
    if not _device_lock.acquire(blocking=False):
        raise RuntimeError("Another render is already in progress")
    try:
        with scene.rendering():
            upload_scene(scene)
            yield
    finally:
        _device_lock.release()


def get_primitive_count() -> int:
    """Get the number of primitives in device storage."""
    return int(num_primitives[None])


def get_light_count() -> int:
    """Get the number of lights in device storage."""
    return int(num_lights[None])


# =============================================================================
# Device-side Queries
# =============================================================================


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        primitive_index=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest intersection of a ray with every stored primitive.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.

    Returns:
        The nearest SceneHitRecord, or a miss record.
    """
    closest_t = T_INFINITY
    result = _make_miss_record()

    for i in range(num_primitives[None]):
        rec = intersect_primitive(
            primitive_kinds[i],
            primitive_a[i],
            primitive_b[i],
            primitive_radii[i],
            ray_origin,
            ray_direction,
        )
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                primitive_index=i,
            )

    return result


@ti.func
def is_occluded(ray_origin: vec3, ray_direction: vec3, max_distance: ti.f32) -> ti.i32:
    """Shadow query: does any primitive block the ray before ``max_distance``?

    Every primitive already rejects hits at or below EPSILON, so only the
    upper bound is checked here.

    Args:
        ray_origin: The starting point of the shadow ray.
        ray_direction: Unit direction toward the light.
        max_distance: Distance to the light.

    Returns:
        1 if the ray is blocked, 0 otherwise.
    """
    occluded = 0

    for i in range(num_primitives[None]):
        if occluded == 0:
            rec = intersect_primitive(
                primitive_kinds[i],
                primitive_a[i],
                primitive_b[i],
                primitive_radii[i],
                ray_origin,
                ray_direction,
            )
            if rec.hit == 1 and rec.t < max_distance:
                occluded = 1

    return occluded


@ti.func
def get_material(primitive_index: ti.i32) -> PhongMaterial:
    """Load the material of a stored primitive."""
    return PhongMaterial(
        color=material_colors[primitive_index],
        reflection=material_reflection[primitive_index],
        transparency=material_transparency[primitive_index],
        ior=material_ior[primitive_index],
        specular=material_specular[primitive_index],
        shininess=material_shininess[primitive_index],
    )


# =============================================================================
# Python-side Probes
# =============================================================================

# Kernel results land here
_probe_index = ti.field(dtype=ti.i32, shape=())
_probe_t = ti.field(dtype=ti.f32, shape=())
_probe_occluded = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _probe_scene_kernel(origin: vec3, direction: vec3):
    ti.loop_config(serialize=True)
    for _ in range(1):
        rec = intersect_scene(origin, direction)
        _probe_index[None] = rec.primitive_index
        _probe_t[None] = rec.t


@ti.kernel
def _probe_occlusion_kernel(origin: vec3, direction: vec3, max_distance: ti.f32):
    ti.loop_config(serialize=True)
    for _ in range(1):
        _probe_occluded[None] = is_occluded(origin, direction, max_distance)


def probe_nearest(origin: Any, direction: Any) -> tuple[int, float]:
    """Run the device nearest-hit scan for one ray.

    Returns:
        Tuple of (primitive_index, t); the index is -1 on a miss.
    """
    _probe_scene_kernel(to_vec3(origin), to_vec3(direction))
    return int(_probe_index[None]), float(_probe_t[None])


def probe_occluded(origin: Any, direction: Any, max_distance: float) -> bool:
    """Run the device shadow query for one ray."""
    _probe_occlusion_kernel(to_vec3(origin), to_vec3(direction), max_distance)
    return bool(_probe_occluded[None])
