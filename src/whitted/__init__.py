"""Whitted-style recursive raytracer built on Taichi.

This package renders a Cornell-box room on the CPU with:
- Recursive mirror reflection and Snell refraction up to a fixed depth
- Phong local shading with hard shadows from up to two point lights
- Spheres, axis-aligned boxes and infinite planes
- Regular-grid supersampling and banded progress reporting

Subpackages:
    core: Vector math, render configuration, the integrator and the frame renderer
    geometry: Primitive types and ray intersection
    materials: Phong material and the editing presets
    scene: Scene model, device storage, Cornell box factory and editing session
    camera: Pinhole camera with primary ray generation
    preview: PNG export and image display utilities
"""

__version__ = "0.1.0"
