"""Materials module for Phong shading and editing presets.

This module describes how surfaces respond to light:

Components:
    phong: Material (host-side) and PhongMaterial (kernel-side) with ambient,
        diffuse and specular terms plus reflection/transparency weights
    presets: Plain / Mirror / Transparent presets used by the editing surface

Materials do not sample directions; the recursive tracer spawns at most one
reflected and one refracted ray per hit and blends them with the local color.
"""

from .phong import (
    DEFAULT_REFRACTION_INDEX,
    DEFAULT_SHININESS,
    DEFAULT_SPECULAR,
    Color,
    Material,
    PhongMaterial,
    diffuse_weight,
)
from .presets import (
    MIRROR_REFLECTION,
    TRANSPARENT_TRANSPARENCY,
    WALL_MIRROR_COLOR,
    WALL_MIRROR_REFLECTION,
    MaterialPreset,
    Mirror,
    Plain,
    ResolvedPreset,
    Transparent,
    apply_preset,
    preset_from_name,
    resolve_preset,
)

__all__ = [
    "Material",
    "PhongMaterial",
    "Color",
    "diffuse_weight",
    "DEFAULT_SPECULAR",
    "DEFAULT_SHININESS",
    "DEFAULT_REFRACTION_INDEX",
    "MaterialPreset",
    "Plain",
    "Mirror",
    "Transparent",
    "ResolvedPreset",
    "resolve_preset",
    "apply_preset",
    "preset_from_name",
    "MIRROR_REFLECTION",
    "TRANSPARENT_TRANSPARENCY",
    "WALL_MIRROR_REFLECTION",
    "WALL_MIRROR_COLOR",
]
