"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    vector: Vector3 value type and kernel-side vector functions
    config: Render session configuration
    integrator: Recursive Whitted-style shading (``trace``)
    renderer: Supersampled frame rendering with progress reporting

All compute-intensive operations use Taichi kernels, running on the CPU
backend by default.
"""

from .config import (
    DEFAULT_ANTIALIASING,
    DEFAULT_HEIGHT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_WIDTH,
    RenderConfig,
)
from .vector import (
    Vector3,
    as_vector,
    cross,
    distance,
    dot,
    length,
    reflect,
    safe_normalize,
    to_vec3,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.whitted.core.integrator or src.whitted.core.renderer.

__all__ = [
    "Vector3",
    "as_vector",
    "to_vec3",
    "vec3",
    "dot",
    "cross",
    "length",
    "safe_normalize",
    "distance",
    "reflect",
    "RenderConfig",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_ANTIALIASING",
    "DEFAULT_MAX_DEPTH",
]
