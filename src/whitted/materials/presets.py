"""Material presets for the editing surface.

Objects in the room are switched between three mutually exclusive looks
rather than tuned with raw sliders:

    Plain                      opaque, no reflection or transparency
    Mirror                     reflection 0.8
    Transparent(index)         transparency 0.8 with the given refraction index

Each preset is resolved into concrete material values when it is applied.
Walls use their own mirror setting (see ``WALL_MIRROR_REFLECTION``), which also swaps the
wall color for a neutral gray.

Example:
    >>> material = Material(color=(0.9, 0.9, 0.2))
    >>> apply_preset(material, Transparent(refraction_index=1.33))
    >>> material.transparency, material.refraction_index
    (0.8, 1.33)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .phong import DEFAULT_REFRACTION_INDEX, Material

# Preset weights for objects
MIRROR_REFLECTION = 0.8
TRANSPARENT_TRANSPARENCY = 0.8

# Mirror wall appearance
WALL_MIRROR_REFLECTION = 0.9
WALL_MIRROR_COLOR = (0.3, 0.3, 0.3)


@dataclass(frozen=True)
class Plain:
    """Opaque, purely locally shaded surface."""


@dataclass(frozen=True)
class Mirror:
    """Mostly reflective surface."""


@dataclass(frozen=True)
class Transparent:
    """Mostly transmissive surface.

    Attributes:
        refraction_index: Index of refraction of the medium.
    """

    refraction_index: float = DEFAULT_REFRACTION_INDEX


MaterialPreset = Union[Plain, Mirror, Transparent]


@dataclass(frozen=True)
class ResolvedPreset:
    """Concrete values a preset writes into a material.

    Attributes:
        reflection: New reflection weight.
        transparency: New transparency weight.
        refraction_index: New index of refraction, or None to keep the
            material's current value.
    """

    reflection: float
    transparency: float
    refraction_index: float | None = None


def resolve_preset(preset: MaterialPreset) -> ResolvedPreset:
    """Resolve a preset into concrete reflection/transparency values.

    Raises:
        ValueError: If ``preset`` is not one of the known presets, or a
            transparent preset has a non-positive refraction index.
    """
    if isinstance(preset, Plain):
        return ResolvedPreset(reflection=0.0, transparency=0.0)
    if isinstance(preset, Mirror):
        return ResolvedPreset(reflection=MIRROR_REFLECTION, transparency=0.0)
    if isinstance(preset, Transparent):
        if preset.refraction_index <= 0.0:
            raise ValueError(
                f"Refraction index must be positive, got {preset.refraction_index}"
            )
        return ResolvedPreset(
            reflection=0.0,
            transparency=TRANSPARENT_TRANSPARENCY,
            refraction_index=preset.refraction_index,
        )
    raise ValueError(f"Unknown material preset: {preset!r}")


def apply_preset(material: Material, preset: MaterialPreset) -> None:
    """Write a preset's values into ``material`` in place."""
    resolved = resolve_preset(preset)
    material.reflection = resolved.reflection
    material.transparency = resolved.transparency
    if resolved.refraction_index is not None:
        material.refraction_index = resolved.refraction_index


def preset_from_name(name: str, refraction_index: float = DEFAULT_REFRACTION_INDEX) -> MaterialPreset:
    """Look up a preset by its lowercase name ("plain", "mirror", "transparent").

    Raises:
        ValueError: If the name is unknown.
    """
    key = name.strip().lower()
    if key == "plain":
        return Plain()
    if key == "mirror":
        return Mirror()
    if key == "transparent":
        return Transparent(refraction_index=refraction_index)
    raise ValueError(f"Unknown material preset: {name!r}")

