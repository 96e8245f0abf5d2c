"""Scene module for scene description, device storage and editing.

Components:
    model: Host-side Scene, Light and the render guard
    storage: Structure-of-Arrays Taichi fields the scene is uploaded into,
        with nearest-hit and shadow queries
    cornell_box: Factory for the default room and wall identification
    session: RenderSession editing entry points (import from
        ``src.whitted.scene.session``)

Scene data is organized for kernel access:
    - One flat primitive array with a kind tag per slot
    - Material parameters stored in parallel arrays under the same index
    - At most two point lights

Note: session is NOT imported here to avoid circular imports with
core.renderer. Import it directly from src.whitted.scene.session.
"""

from .cornell_box import (
    WALL_COLORS,
    CornellBoxParams,
    Wall,
    create_cornell_box_scene,
    create_second_light,
    find_wall,
    get_cornell_box_bounds,
    wall_of,
)
from .model import Light, Scene
from .storage import (
    MAX_LIGHTS,
    MAX_PRIMITIVES,
    SceneHitRecord,
    claim_device,
    clear_scene_storage,
    get_light_count,
    get_material,
    get_primitive_count,
    intersect_scene,
    is_occluded,
    probe_nearest,
    probe_occluded,
    upload_scene,
)

__all__ = [
    # Model
    "Scene",
    "Light",
    # Storage
    "SceneHitRecord",
    "MAX_PRIMITIVES",
    "MAX_LIGHTS",
    "clear_scene_storage",
    "upload_scene",
    "claim_device",
    "get_primitive_count",
    "get_light_count",
    "intersect_scene",
    "is_occluded",
    "get_material",
    "probe_nearest",
    "probe_occluded",
    # Cornell box
    "CornellBoxParams",
    "Wall",
    "WALL_COLORS",
    "create_cornell_box_scene",
    "create_second_light",
    "wall_of",
    "find_wall",
    "get_cornell_box_bounds",
]
