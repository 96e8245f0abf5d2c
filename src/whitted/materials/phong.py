"""Phong material with reflection and transparency weights.

Every primitive owns one ``Material``. Local shading uses the classic Phong
terms (ambient, Lambertian diffuse, specular highlight) and the recursive
tracer blends the local color with reflected and refracted rays:

    final = local * (1 - reflection - transparency)
          + reflected * reflection
          + refracted * transparency

``reflection + transparency <= 1`` is assumed but not enforced; the diffuse
weight simply goes negative when it is violated. Colors are not clamped on
construction either, only at the end of each trace.

Example:
    >>> glass = Material(color=(0.9, 0.9, 0.9), transparency=0.8)
    >>> glass.diffuse_weight
    0.19999999999999996
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Fixed Phong parameters shared by every material
DEFAULT_SPECULAR = 0.2
DEFAULT_SHININESS = 32.0
DEFAULT_REFRACTION_INDEX = 1.5

Color = tuple[float, float, float]


@dataclass(eq=False)
class Material:
    """Surface appearance of a primitive.

    Materials are mutable so the editing session can retarget them in place;
    two primitives may share one instance.

    Attributes:
        color: Base RGB color, nominally in [0, 1] per channel.
        reflection: Weight of the mirror-reflected ray.
        transparency: Weight of the refracted ray.
        refraction_index: Index of refraction used for transmitted rays.
        specular: Intensity of the Phong highlight.
        shininess: Phong exponent.
    """

    color: Color
    reflection: float = 0.0
    transparency: float = 0.0
    refraction_index: float = DEFAULT_REFRACTION_INDEX
    specular: float = DEFAULT_SPECULAR
    shininess: float = DEFAULT_SHININESS

    def __post_init__(self) -> None:
        self.color = _as_color(self.color)

    @property
    def diffuse_weight(self) -> float:
        return 1.0 - self.reflection - self.transparency

    def copy(self) -> "Material":
        return Material(
            color=self.color,
            reflection=self.reflection,
            transparency=self.transparency,
            refraction_index=self.refraction_index,
            specular=self.specular,
            shininess=self.shininess,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "color": list(self.color),
            "reflection": self.reflection,
            "transparency": self.transparency,
            "refraction_index": self.refraction_index,
            "specular": self.specular,
            "shininess": self.shininess,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Material":
        return cls(
            color=_as_color(data["color"]),
            reflection=float(data.get("reflection", 0.0)),
            transparency=float(data.get("transparency", 0.0)),
            refraction_index=float(data.get("refraction_index", DEFAULT_REFRACTION_INDEX)),
            specular=float(data.get("specular", DEFAULT_SPECULAR)),
            shininess=float(data.get("shininess", DEFAULT_SHININESS)),
        )


def _as_color(value: Any) -> Color:
    channels = tuple(float(c) for c in value)
    if len(channels) != 3:
        raise ValueError(f"Color must have 3 channels, got {len(channels)}")
    return (channels[0], channels[1], channels[2])


# =============================================================================
# Kernel-side Material
# =============================================================================


@ti.dataclass
class PhongMaterial:
    """Device-side copy of a Material.

    Attributes:
        color: Base RGB color.
        reflection: Reflection weight.
        transparency: Transparency weight.
        ior: Index of refraction.
        specular: Highlight intensity.
        shininess: Highlight exponent.
    """

    color: vec3
    reflection: ti.f32
    transparency: ti.f32
    ior: ti.f32
    specular: ti.f32
    shininess: ti.f32


@ti.func
def diffuse_weight(material: PhongMaterial) -> ti.f32:
    """Weight of the local (Phong) color in the final blend."""
    return 1.0 - material.reflection - material.transparency
