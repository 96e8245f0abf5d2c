"""Whitted-style recursive ray tracing integrator.

For every ray the integrator finds the nearest surface, shades it locally with
the Phong model (ambient, Lambertian diffuse, specular highlight, hard shadows
from each point light) and blends in a mirror-reflected and a refracted ray:

    color = local * (1 - reflection - transparency)
          + trace(reflected) * reflection
          + trace(refracted) * transparency

clamped to [0, 1] per channel. Rays that miss everything, and rays spawned
past ``max_depth``, return the background color.

Taichi functions cannot recurse, so the recursion is unrolled per requested
depth: ``get_tracer(max_depth)`` builds one ``ti.func`` per level, each
calling the next, down to ``max_depth + 1`` where the chain ends in the
background color. Chains (and the kernels that use them) are cached, so each
depth compiles once. Each level spawns its reflected and refracted rays from a
two-iteration loop around a single child call, so code size grows linearly
with the depth.

Key features:
    - Hard shadows from up to two point lights
    - Mirror reflection and Snell refraction with total internal reflection
    - Late clamping: unclamped children are blended, then the sum is clamped
    - Self-intersection avoidance with a normal offset

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.integrator import trace_ray
    >>> from src.whitted.scene import create_cornell_box_scene
    >>> scene = create_cornell_box_scene()
    >>> r, g, b = trace_ray(scene, (0.0, 1.0, 8.0), (0.0, -0.4, -1.0))
"""

import functools
from typing import Any

import taichi as ti
import taichi.math as tm

from src.whitted.core.config import DEFAULT_MAX_DEPTH
from src.whitted.core.vector import Vector3, as_vector, reflect, safe_normalize, to_vec3
from src.whitted.geometry.hit import EPSILON
from src.whitted.materials.phong import PhongMaterial, diffuse_weight
from src.whitted.scene.storage import (
    claim_device,
    get_material,
    intersect_scene,
    is_occluded,
    light_colors,
    light_intensities,
    light_positions,
    num_lights,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Shading Constants
# =============================================================================

# Fraction of the surface color that is always visible
AMBIENT = 0.15

# Color of rays that leave the room or exceed the recursion depth
BACKGROUND = (0.05, 0.05, 0.1)
BACKGROUND_COLOR = vec3(*BACKGROUND)

# Branch indices of the secondary-ray loop
_REFLECTED = 0
_REFRACTED = 1


# =============================================================================
# Local Shading
# =============================================================================


@ti.func
def shade_local(point: vec3, normal: vec3, ray_origin: vec3, material: PhongMaterial) -> vec3:
    """Compute the Phong color of a surface point from all stored lights.

    Args:
        point: The shaded point.
        normal: The surface normal at the point.
        ray_origin: Origin of the incoming ray (the viewer for this point).
        material: The surface material.

    Returns:
        The unclamped local color.
    """
    color = material.color * AMBIENT
    view_dir = safe_normalize(ray_origin - point)
    shadow_origin = point + normal * EPSILON

    for i in range(num_lights[None]):
        to_light = light_positions[i] - point
        light_dir = safe_normalize(to_light)
        light_distance = tm.length(to_light)

        if is_occluded(shadow_origin, light_dir, light_distance) == 0:
            light_color = light_colors[i]
            intensity = light_intensities[i]

            # Lambertian diffuse
            diffuse = tm.max(0.0, tm.dot(normal, light_dir))
            color += material.color * light_color * (diffuse * intensity)

            # Phong highlight
            reflect_dir = reflect(-light_dir, normal)
            highlight = tm.pow(tm.max(0.0, tm.dot(view_dir, reflect_dir)), material.shininess)
            color += light_color * (material.specular * highlight * intensity)

    return color


@ti.func
def refract_ray(direction: vec3, point: vec3, normal: vec3, ior: ti.f32):
    """Bend a ray through a surface with Snell's law.

    The normal is assumed to face outward. A ray with ``dot(d, n) > 0`` is
    leaving the medium: the normal is flipped, the index ratio inverted and
    the incidence cosine negated so it stays positive.

    Args:
        direction: The unit incident direction.
        point: The hit point.
        normal: The outward surface normal.
        ior: Index of refraction of the medium behind the surface.

    Returns:
        Tuple of (origin, direction, valid). ``valid`` is 0 on total internal
        reflection.
    """
    n = normal
    eta = 1.0 / ior
    cosi = -tm.dot(direction, normal)
    if cosi < 0.0:
        n = -normal
        eta = ior
        cosi = -cosi

    k = 1.0 - eta * eta * (1.0 - cosi * cosi)
    valid = 0
    out_dir = vec3(0.0, 0.0, 0.0)
    if k >= 0.0:
        valid = 1
        out_dir = direction * eta + n * (eta * cosi - ti.sqrt(k))
    return point - n * EPSILON, out_dir, valid


# =============================================================================
# Recursive Trace (unrolled)
# =============================================================================


def _build_tracer(level: int, limit: int):
    """Create the trace function for one level of the recursion tree.

    Args:
        level: Number of parent calls above this one.
        limit: Deepest level of the chain; the level below it is a cutoff.

    Returns:
        A ``ti.func`` with signature
        ``(origin, direction, depth, max_depth) -> vec3``.
    """
    if level > limit:

        @ti.func
        def trace_cutoff(origin: vec3, direction: vec3, depth: ti.i32, max_depth: ti.i32) -> vec3:
            return BACKGROUND_COLOR

        return trace_cutoff

    trace_child = _build_tracer(level + 1, limit)

    @ti.func
    def trace_level(origin: vec3, direction: vec3, depth: ti.i32, max_depth: ti.i32) -> vec3:
        color = BACKGROUND_COLOR

        if depth <= max_depth:
            rec = intersect_scene(origin, direction)
            if rec.hit == 1:
                material = get_material(rec.primitive_index)
                local = shade_local(rec.point, rec.normal, origin, material)

                reflected = vec3(0.0, 0.0, 0.0)
                refracted = vec3(0.0, 0.0, 0.0)
                for branch in range(2):
                    weight = material.reflection
                    if branch == _REFRACTED:
                        weight = material.transparency

                    if weight > 0.0:
                        child_origin = rec.point + rec.normal * EPSILON
                        child_dir = reflect(direction, rec.normal)
                        spawn = 1
                        if branch == _REFRACTED:
                            child_origin, child_dir, spawn = refract_ray(
                                direction, rec.point, rec.normal, material.ior
                            )

                        # Total internal reflection leaves the refracted term black
                        if spawn == 1:
                            child = trace_child(child_origin, child_dir, depth + 1, max_depth)
                            if branch == _REFLECTED:
                                reflected = child
                            else:
                                refracted = child

                color = (
                    local * diffuse_weight(material)
                    + reflected * material.reflection
                    + refracted * material.transparency
                )
                color = tm.clamp(color, 0.0, 1.0)

        return color

    return trace_level


@functools.lru_cache(maxsize=None)
def get_tracer(max_depth: int):
    """Get the trace function unrolled for ``max_depth``.

    Chains are built on first use and cached, so every depth is compiled once.

    Args:
        max_depth: Deepest recursion level that is still shaded.

    Returns:
        A ``ti.func`` ``trace(origin, direction, depth, max_depth) -> vec3``
        returning colors clamped to [0, 1].
    """
    return _build_tracer(0, max_depth)


# =============================================================================
# Python-callable Trace
# =============================================================================

_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@functools.lru_cache(maxsize=None)
def _build_trace_kernel(max_depth: int):
    trace = get_tracer(max_depth)

    @ti.kernel
    def trace_kernel(origin: vec3, direction: vec3, depth: ti.i32, max_depth: ti.i32):
        ti.loop_config(serialize=True)
        for _ in range(1):
            _trace_result[None] = trace(origin, direction, depth, max_depth)

    return trace_kernel


def validate_depth(depth: int, max_depth: int) -> None:
    """Check recursion arguments.

    Raises:
        ValueError: If ``depth`` or ``max_depth`` is negative.
    """
    if depth < 0:
        raise ValueError(f"Depth must be non-negative, got {depth}")
    if max_depth < 0:
        raise ValueError(f"Max depth must be non-negative, got {max_depth}")


def trace_ray(
    scene: Any,
    origin: Vector3 | Any,
    direction: Vector3 | Any,
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[float, float, float]:
    """Trace one ray through ``scene`` and return its color.

    The scene is uploaded to device storage first. The direction is
    normalized before tracing.

    Args:
        scene: The Scene to trace against.
        origin: The ray origin.
        direction: The ray direction.
        depth: Recursion depth to start at.
        max_depth: Deepest recursion level that is still shaded.

    Returns:
        Tuple of (R, G, B) values in [0, 1].

    Raises:
        ValueError: If the depth arguments are out of range.
        RuntimeError: If the scene is being rendered.
    """
    validate_depth(depth, max_depth)
    direction = as_vector(direction).normalize()

    with claim_device(scene):
        _build_trace_kernel(max_depth)(to_vec3(origin), to_vec3(direction), depth, max_depth)

    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))
