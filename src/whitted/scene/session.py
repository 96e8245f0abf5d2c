"""Render session: scene editing entry points with automatic re-rendering.

A ``RenderSession`` owns the current scene and a ``FrameRenderer``. Every
editing operation mutates the scene in place (or rebuilds it, for a reset)
and then re-renders the whole frame when ``auto_render`` is on. Edits are
refused with ``RuntimeError`` while a render is in progress, and a second
render cannot start before the first one finishes.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.config import RenderConfig
    >>> from src.whitted.materials import Mirror
    >>> from src.whitted.scene.cornell_box import Wall
    >>> from src.whitted.scene.session import RenderSession
    >>>
    >>> session = RenderSession(RenderConfig(width=80, height=60), auto_render=False)
    >>> session.apply_object_preset(Mirror())
    >>> session.select_mirror_wall(Wall.BACK)
    >>> frame = session.render()
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

import numpy as np
import numpy.typing as npt

from src.whitted.core.config import RenderConfig
from src.whitted.core.renderer import FrameRenderer, ProgressCallback
from src.whitted.core.vector import as_vector
from src.whitted.geometry.plane import Plane
from src.whitted.materials.presets import (
    WALL_MIRROR_COLOR,
    WALL_MIRROR_REFLECTION,
    MaterialPreset,
    apply_preset,
)
from src.whitted.scene.cornell_box import (
    WALL_COLORS,
    CornellBoxParams,
    Wall,
    create_cornell_box_scene,
    create_second_light,
    wall_of,
)
from src.whitted.scene.model import Scene

logger = logging.getLogger(__name__)

# Index of the optional second light in Scene.lights
SECOND_LIGHT_INDEX = 1


class RenderSession:
    """Mutable editing session around one scene and one renderer.

    Attributes:
        renderer: The frame renderer (owns the frame buffer).
        scene: The scene being edited.
        params: Parameters used to rebuild the scene on reset.
        auto_render: Re-render after every edit.
        on_progress: Progress callback passed to every render.
    """

    def __init__(
        self,
        config: RenderConfig | None = None,
        scene: Scene | None = None,
        params: CornellBoxParams | None = None,
        auto_render: bool = True,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            config: Render configuration. Defaults to ``RenderConfig()``.
            scene: Initial scene. Defaults to the Cornell box built from
                ``params``.
            params: Cornell box parameters used for the initial scene and
                for ``reset_scene``.
            auto_render: Re-render after every edit.
            on_progress: Optional progress callback for every render.
        """
        self.renderer = FrameRenderer(config)
        # Private copy: moving the second light updates it for later resets
        self.params = (
            replace(params, wall_colors=dict(params.wall_colors))
            if params is not None
            else CornellBoxParams()
        )
        self.scene = scene if scene is not None else create_cornell_box_scene(self.params)
        self.auto_render = auto_render
        self.on_progress = on_progress
        self._mirror_wall: Wall | None = None

    @property
    def config(self) -> RenderConfig:
        return self.renderer.config

    @property
    def mirror_wall(self) -> Wall | None:
        """The wall currently turned into a mirror, if any."""
        return self._mirror_wall

    @property
    def second_light_enabled(self) -> bool:
        return len(self.scene.lights) > SECOND_LIGHT_INDEX

    @property
    def frame(self) -> npt.NDArray[np.uint8]:
        """The most recently rendered frame buffer."""
        return self.renderer.buffer

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> npt.NDArray[np.uint8]:
        """Render the current scene into the frame buffer.

        Raises:
            RuntimeError: If a render is already in progress.
        """
        return self.renderer.render(self.scene, callback=self.on_progress)

    def _after_edit(self) -> None:
        if self.auto_render:
            self.render()

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def reset_scene(self) -> None:
        """Discard all edits and rebuild the default scene.

        Raises:
            RuntimeError: If a render is in progress.
        """
        self.scene.ensure_mutable()
        self.scene = create_cornell_box_scene(self.params)
        self._mirror_wall = None
        logger.info("Scene reset")
        self._after_edit()

    def apply_object_preset(self, preset: MaterialPreset, index: int | None = None) -> None:
        """Apply a material preset to the non-wall objects.

        Args:
            preset: ``Plain()``, ``Mirror()`` or ``Transparent(index)``.
            index: Position of one object in ``scene.objects()``; None applies
                the preset to every object.

        Raises:
            ValueError: If the preset is unknown or the index is out of range.
            RuntimeError: If a render is in progress.
        """
        self.scene.ensure_mutable()
        objects = self.scene.objects()
        if index is None:
            targets = objects
        elif 0 <= index < len(objects):
            targets = [objects[index]]
        else:
            raise ValueError(f"Object index {index} out of range (0..{len(objects) - 1})")

        for primitive in targets:
            apply_preset(primitive.material, preset)
        logger.info("Applied %s to %d object(s)", type(preset).__name__, len(targets))
        self._after_edit()

    def select_mirror_wall(self, wall: Wall | str | None) -> None:
        """Turn exactly one wall into a mirror, or none.

        Every wall is first restored to its default color with no reflection;
        then the selected wall gets the mirror reflection and a gray color.

        Args:
            wall: The wall (or its name) to mirror, or None to clear.

        Raises:
            ValueError: If the wall name is unknown.
            RuntimeError: If a render is in progress.
        """
        self.scene.ensure_mutable()
        selected = Wall(wall) if wall is not None else None

        for primitive in self.scene.primitives:
            if not isinstance(primitive, Plane):
                continue
            which = wall_of(primitive)
            if which is None:
                continue
            material = primitive.material
            if which is selected:
                material.reflection = WALL_MIRROR_REFLECTION
                material.color = WALL_MIRROR_COLOR
            else:
                material.reflection = 0.0
                material.color = self.params.wall_colors.get(which, WALL_COLORS[which])

        self._mirror_wall = selected
        logger.info("Mirror wall: %s", selected.value if selected else "none")
        self._after_edit()

    def enable_second_light(self, position: Any = None) -> None:
        """Add the second light if it is not already present.

        Args:
            position: Where to put the light. Defaults to the position in
                ``params``. Ignored if the light is already enabled.

        Raises:
            RuntimeError: If a render is in progress.
        """
        self.scene.ensure_mutable()
        if self.second_light_enabled:
            return
        if position is None:
            position = self.params.second_light_position
        self.scene.add_light(create_second_light(as_vector(position)))
        logger.info("Second light enabled at %s", position)
        self._after_edit()

    def disable_second_light(self) -> None:
        """Remove the second light if present.

        Raises:
            RuntimeError: If a render is in progress.
        """
        self.scene.ensure_mutable()
        if not self.second_light_enabled:
            return
        self.scene.remove_light(SECOND_LIGHT_INDEX)
        logger.info("Second light disabled")
        self._after_edit()

    def move_second_light(self, position: Any) -> None:
        """Move the second light.

        The new position is remembered for a later ``enable_second_light``;
        the frame is only re-rendered when the light is enabled.

        Args:
            position: New light position.

        Raises:
            RuntimeError: If a render is in progress.
        """
        self.scene.ensure_mutable()
        position = as_vector(position)
        self.params.second_light_position = position
        if not self.second_light_enabled:
            return
        self.scene.lights[SECOND_LIGHT_INDEX].position = position
        self._after_edit()
