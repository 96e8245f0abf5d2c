"""Host-side scene model: primitives, point lights and the camera.

A ``Scene`` is an explicit value that is built once (usually by the Cornell
box factory), edited in place by the render session and uploaded to device
storage at the start of every render. While a render is in progress the scene
is marked busy and every mutation raises ``RuntimeError``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.model import Light, Scene
    >>> from src.whitted.geometry import Sphere
    >>> from src.whitted.materials import Material
    >>> scene = Scene()
    >>> scene.add_primitive(Sphere((0.0, 0.0, -5.0), 1.0, Material((1.0, 0.0, 0.0))))
    0
    >>> scene.add_light(Light(position=(0.0, 5.0, 0.0)))
    0
    >>> scene.intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)).t
    4.0
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from src.whitted.camera.pinhole import Camera
from src.whitted.core.vector import Vector3, as_vector
from src.whitted.geometry.hit import Hit
from src.whitted.geometry.plane import Plane
from src.whitted.geometry.primitive import Primitive, is_primitive, primitive_from_dict
from src.whitted.materials.phong import Color, _as_color
from src.whitted.scene.storage import MAX_LIGHTS, MAX_PRIMITIVES


@dataclass(eq=False)
class Light:
    """A point light.

    Attributes:
        position: Light position in world space.
        color: RGB color of the light.
        intensity: Scalar brightness multiplier (must be positive).
    """

    position: Vector3
    color: Color = (1.0, 1.0, 1.0)
    intensity: float = 1.0

    def __post_init__(self) -> None:
        self.position = as_vector(self.position)
        self.color = _as_color(self.color)
        self.intensity = float(self.intensity)
        if self.intensity <= 0.0:
            raise ValueError(f"Light intensity must be positive, got {self.intensity}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": list(self.position.to_tuple()),
            "color": list(self.color),
            "intensity": self.intensity,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Light:
        return cls(
            position=data["position"],
            color=data.get("color", (1.0, 1.0, 1.0)),
            intensity=float(data.get("intensity", 1.0)),
        )


@dataclass(eq=False)
class Scene:
    """Ordered primitives, up to two point lights and one camera.

    Primitive order matters: it is the scan order for intersection and
    therefore decides exact ties.

    Attributes:
        primitives: The primitives, in scan order.
        lights: The point lights (at most ``MAX_LIGHTS``).
        camera: The camera descriptor.
    """

    primitives: list[Primitive] = field(default_factory=list)
    lights: list[Light] = field(default_factory=list)
    camera: Camera = field(default_factory=Camera)
    _rendering: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        for primitive in self.primitives:
            if not is_primitive(primitive):
                raise ValueError(f"Not a primitive: {primitive!r}")
        if len(self.primitives) > MAX_PRIMITIVES:
            raise ValueError(
                f"Scene supports at most {MAX_PRIMITIVES} primitives, got {len(self.primitives)}"
            )
        if len(self.lights) > MAX_LIGHTS:
            raise ValueError(f"Scene supports at most {MAX_LIGHTS} lights, got {len(self.lights)}")

    # -------------------------------------------------------------------------
    # Render guard
    # -------------------------------------------------------------------------

    @property
    def is_rendering(self) -> bool:
        return self._rendering

    @contextmanager
    def rendering(self) -> Iterator[Scene]:
        """Mark the scene busy for the duration of a render.

        Raises:
            RuntimeError: If the scene is already being rendered.
        """
        if self._rendering:
            raise RuntimeError("Scene is already being rendered")
        self._rendering = True
        try:
            yield self
        finally:
            self._rendering = False

    def ensure_mutable(self) -> None:
        """Raise if the scene may not be modified right now.

        Raises:
            RuntimeError: If a render is in progress.
        """
        if self._rendering:
            raise RuntimeError("Cannot modify the scene while a render is in progress")

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_primitive(self, primitive: Primitive) -> int:
        """Append a primitive and return its index.

        Raises:
            ValueError: If the value is not a primitive or the scene is full.
            RuntimeError: If a render is in progress.
        """
        self.ensure_mutable()
        if not is_primitive(primitive):
            raise ValueError(f"Not a primitive: {primitive!r}")
        if len(self.primitives) >= MAX_PRIMITIVES:
            raise ValueError(f"Scene supports at most {MAX_PRIMITIVES} primitives")
        self.primitives.append(primitive)
        return len(self.primitives) - 1

    def add_light(self, light: Light) -> int:
        """Append a point light and return its index.

        Raises:
            ValueError: If the scene already has ``MAX_LIGHTS`` lights.
            RuntimeError: If a render is in progress.
        """
        self.ensure_mutable()
        if len(self.lights) >= MAX_LIGHTS:
            raise ValueError(f"Scene supports at most {MAX_LIGHTS} lights")
        self.lights.append(light)
        return len(self.lights) - 1

    def remove_light(self, index: int) -> Light:
        """Remove and return the light at ``index``.

        Raises:
            IndexError: If there is no such light.
            RuntimeError: If a render is in progress.
        """
        self.ensure_mutable()
        return self.lights.pop(index)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def intersect(self, origin: Any, direction: Any) -> Hit | None:
        """Find the nearest primitive hit along a ray.

        Ties are broken by scene order (strict ``<``, first found wins).

        Args:
            origin: Ray origin.
            direction: Ray direction.

        Returns:
            The nearest Hit or None.
        """
        nearest = None
        for primitive in self.primitives:
            hit = primitive.intersect(origin, direction)
            if hit is not None and (nearest is None or hit.t < nearest.t):
                nearest = hit
        return nearest

    def planes(self) -> list[Plane]:
        return [p for p in self.primitives if isinstance(p, Plane)]

    def objects(self) -> list[Primitive]:
        """Primitives that are not planes (the editable objects)."""
        return [p for p in self.primitives if not isinstance(p, Plane)]

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "primitives": [p.to_dict() for p in self.primitives],
            "lights": [light.to_dict() for light in self.lights],
            "camera": self.camera.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Scene:
        """Build a scene from its dictionary form.

        Raises:
            ValueError: On unknown primitive types or too many lights.
        """
        return cls(
            primitives=[primitive_from_dict(p) for p in data.get("primitives", [])],
            lights=[Light.from_dict(light) for light in data.get("lights", [])],
            camera=Camera.from_dict(data.get("camera", {})),
        )
