"""Cornell box scene configuration.

This module provides a factory for the default room rendered by the session:
a 5 x 5 x 5 box centered on the origin and open toward the camera.

The Cornell box consists of:
- 5 infinite planes forming the room (left, right, back, floor, ceiling)
- Left wall: red
- Right wall: green
- Back wall, floor, ceiling: white
- A yellow sphere, a blue box and a purple sphere resting on the floor
- A white main light below the ceiling and an optional bluish second light

Walls are identified by their normals rather than by position in the scene,
which is how the mirror-wall selection finds them after arbitrary edits.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.cornell_box import Wall, create_cornell_box_scene, find_wall
    >>> scene = create_cornell_box_scene()
    >>> len(scene.primitives), len(scene.lights)
    (8, 2)
    >>> find_wall(scene, Wall.FLOOR).point.y
    -2.5
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.whitted.camera.pinhole import Camera
from src.whitted.core.vector import Vector3, as_vector
from src.whitted.geometry.box import Box
from src.whitted.geometry.plane import Plane
from src.whitted.geometry.sphere import Sphere
from src.whitted.materials.phong import Color, Material
from src.whitted.scene.model import Light, Scene

# =============================================================================
# Cornell Box Constants
# =============================================================================

# Half the side length of the room
ROOM_HALF_SIZE = 2.5

# Wall colors
RED_WALL_COLOR = (0.8, 0.1, 0.1)
GREEN_WALL_COLOR = (0.1, 0.8, 0.1)
WHITE_WALL_COLOR = (0.9, 0.9, 0.9)

# Object colors
YELLOW_SPHERE_COLOR = (0.9, 0.9, 0.2)
BLUE_BOX_COLOR = (0.2, 0.3, 0.8)
PURPLE_SPHERE_COLOR = (0.7, 0.2, 0.8)

# Lights
MAIN_LIGHT_POSITION = (0.0, 1.9, 0.0)
MAIN_LIGHT_COLOR = (1.0, 1.0, 1.0)
MAIN_LIGHT_INTENSITY = 1.2
SECOND_LIGHT_POSITION = (1.0, 1.5, -1.0)
SECOND_LIGHT_COLOR = (0.8, 0.8, 1.0)
SECOND_LIGHT_INTENSITY = 0.7

# Camera
CAMERA_POSITION = (0.0, 1.0, 8.0)
CAMERA_LOOK_AT = (0.0, 1.0, 0.0)
CAMERA_FOV = 60.0

# |component| of a unit normal above which a plane counts as axis-facing
WALL_NORMAL_THRESHOLD = 0.9


class Wall(Enum):
    """The five walls of the room, named by where they sit."""

    LEFT = "left"
    RIGHT = "right"
    BACK = "back"
    FLOOR = "floor"
    CEILING = "ceiling"


# Inward-facing normal of each wall
WALL_NORMALS = {
    Wall.LEFT: (1.0, 0.0, 0.0),
    Wall.RIGHT: (-1.0, 0.0, 0.0),
    Wall.BACK: (0.0, 0.0, 1.0),
    Wall.FLOOR: (0.0, 1.0, 0.0),
    Wall.CEILING: (0.0, -1.0, 0.0),
}

WALL_COLORS = {
    Wall.LEFT: RED_WALL_COLOR,
    Wall.RIGHT: GREEN_WALL_COLOR,
    Wall.BACK: WHITE_WALL_COLOR,
    Wall.FLOOR: WHITE_WALL_COLOR,
    Wall.CEILING: WHITE_WALL_COLOR,
}


# =============================================================================
# Cornell Box Parameters
# =============================================================================


@dataclass
class CornellBoxParams:
    """Parameters for configuring a Cornell box scene.

    All parameters default to the standard room.

    Attributes:
        second_light: Whether the scene starts with the second light.
        second_light_position: Where the second light sits.
        look_at: Orient the camera toward its look-at point instead of the
            fixed -z axis.
        wall_colors: Per-wall color overrides.
    """

    second_light: bool = True
    second_light_position: Vector3 = field(default_factory=lambda: Vector3(*SECOND_LIGHT_POSITION))
    look_at: bool = False
    wall_colors: dict[Wall, Color] = field(default_factory=lambda: dict(WALL_COLORS))

    def __post_init__(self) -> None:
        self.second_light_position = as_vector(self.second_light_position)
        self.wall_colors = {Wall(k): tuple(v) for k, v in self.wall_colors.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "second_light": self.second_light,
            "second_light_position": list(self.second_light_position.to_tuple()),
            "look_at": self.look_at,
            "wall_colors": {wall.value: list(color) for wall, color in self.wall_colors.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CornellBoxParams:
        colors = dict(WALL_COLORS)
        colors.update({Wall(k): tuple(v) for k, v in data.get("wall_colors", {}).items()})
        return cls(
            second_light=bool(data.get("second_light", True)),
            second_light_position=data.get("second_light_position", SECOND_LIGHT_POSITION),
            look_at=bool(data.get("look_at", False)),
            wall_colors=colors,
        )


# =============================================================================
# Cornell Box Factory
# =============================================================================


def create_main_light() -> Light:
    return Light(position=MAIN_LIGHT_POSITION, color=MAIN_LIGHT_COLOR, intensity=MAIN_LIGHT_INTENSITY)


def create_second_light(position: Any = SECOND_LIGHT_POSITION) -> Light:
    return Light(position=position, color=SECOND_LIGHT_COLOR, intensity=SECOND_LIGHT_INTENSITY)


def create_camera(use_look_at: bool = False) -> Camera:
    return Camera(
        position=CAMERA_POSITION,
        look_at=CAMERA_LOOK_AT,
        fov=CAMERA_FOV,
        use_look_at=use_look_at,
    )


def create_wall(wall: Wall, color: Color | None = None) -> Plane:
    """Create one wall plane with its own material."""
    normal = Vector3(*WALL_NORMALS[wall])
    # The wall sits half a room away from the origin, against its normal
    point = normal.multiply(-ROOM_HALF_SIZE)
    return Plane(point=point, normal=normal, material=Material(color or WALL_COLORS[wall]))


def create_cornell_box_scene(params: CornellBoxParams | None = None) -> Scene:
    """Create the default Cornell box scene.

    Primitive order is fixed: left, right, back, floor, ceiling walls, then the
    yellow sphere, the blue box and the purple sphere. Every primitive owns a
    distinct Material instance.

    Args:
        params: Optional CornellBoxParams. If None, uses the defaults.

    Returns:
        A freshly built Scene.
    """
    if params is None:
        params = CornellBoxParams()

    scene = Scene(camera=create_camera(params.look_at))

    # Walls
    for wall in Wall:
        scene.add_primitive(create_wall(wall, params.wall_colors.get(wall)))

    # Objects resting on the floor
    scene.add_primitive(
        Sphere(center=(-1.0, -1.8, -1.0), radius=0.7, material=Material(YELLOW_SPHERE_COLOR))
    )
    scene.add_primitive(
        Box(
            min_corner=(0.5, -2.5, 0.0),
            max_corner=(1.5, -1.5, 1.0),
            material=Material(BLUE_BOX_COLOR),
        )
    )
    scene.add_primitive(
        Sphere(center=(-0.5, -2.0, 0.5), radius=0.5, material=Material(PURPLE_SPHERE_COLOR))
    )

    # Lights
    scene.add_light(create_main_light())
    if params.second_light:
        scene.add_light(create_second_light(params.second_light_position))

    return scene


# =============================================================================
# Wall Identification
# =============================================================================


def wall_of(plane: Plane) -> Wall | None:
    """Identify which wall a plane is from its normal.

    Returns:
        The matching Wall, or None for a plane that faces no wall direction.
    """
    n = plane.normal
    if n.x > WALL_NORMAL_THRESHOLD:
        return Wall.LEFT
    if n.x < -WALL_NORMAL_THRESHOLD:
        return Wall.RIGHT
    if n.z > WALL_NORMAL_THRESHOLD:
        return Wall.BACK
    if n.y > WALL_NORMAL_THRESHOLD:
        return Wall.FLOOR
    if n.y < -WALL_NORMAL_THRESHOLD:
        return Wall.CEILING
    return None


def find_wall(scene: Scene, wall: Wall) -> Plane | None:
    """Return the first plane in the scene identified as ``wall``."""
    for plane in scene.planes():
        if wall_of(plane) is wall:
            return plane
    return None


def get_cornell_box_bounds() -> dict[str, tuple[float, float, float]]:
    """Get the bounding box of the room.

    Returns:
        Dictionary with 'min' and 'max' corners.
    """
    h = ROOM_HALF_SIZE
    return {"min": (-h, -h, -h), "max": (h, h, h)}
