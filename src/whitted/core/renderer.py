"""Frame renderer: supersampled primary rays into an RGBA byte buffer.

Each pixel is sampled on a regular ``aa x aa`` grid of sub-pixel offsets
``(x + dx / aa, y + dy / aa)``. Every sample traces a primary ray from the
camera; the samples are averaged and quantized with
``min(255, floor(c * 255))``. Alpha is always 255.

Rows are rendered in bands of ``config.rows_per_update`` rows (about 1% of the
image). After each band the renderer reports a ``RenderProgress`` so the caller
can show the partially finished frame; the last report always has
``rows_done == total_rows``.

The frame buffer is a NumPy ``uint8`` array of shape ``(height, width, 4)``
that the Taichi kernel writes into directly. Progress reports hand out the
live buffer, so callers that keep a frame must copy it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.config import RenderConfig
    >>> from src.whitted.core.renderer import FrameRenderer
    >>> from src.whitted.scene import create_cornell_box_scene
    >>>
    >>> renderer = FrameRenderer(RenderConfig(width=160, height=120))
    >>> image = renderer.render(create_cornell_box_scene())
    >>> image.shape
    (120, 160, 4)
"""

import functools
import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import Any, NamedTuple

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.camera.pinhole import get_camera_origin, primary_ray_direction, setup_camera
from src.whitted.core.config import RenderConfig
from src.whitted.core.integrator import get_tracer
from src.whitted.scene.model import Scene
from src.whitted.scene.storage import claim_device

# Type alias for 3D vectors
vec3 = tm.vec3

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderProgress:
    """Snapshot of a render in progress.

    Attributes:
        rows_done: Number of rows finished so far (from the top).
        total_rows: Image height.
        buffer: The live frame buffer, shape (height, width, 4).
    """

    rows_done: int
    total_rows: int
    buffer: npt.NDArray[np.uint8]

    @property
    def fraction(self) -> float:
        return self.rows_done / self.total_rows

    @property
    def done(self) -> bool:
        return self.rows_done >= self.total_rows


# Type alias for progress callback
ProgressCallback = Callable[[RenderProgress], None]


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def to_byte(value: ti.f32) -> ti.u8:
    """Quantize a [0, 1] channel value to a byte."""
    return ti.cast(tm.min(255.0, tm.floor(value * 255.0)), ti.u8)


_pixel_result = ti.Vector.field(4, dtype=ti.i32, shape=())


class RenderKernels(NamedTuple):
    """Kernels compiled against one unrolled trace chain."""

    render_rows: Any
    render_single_pixel: Any


@functools.lru_cache(maxsize=None)
def build_render_kernels(max_depth: int) -> RenderKernels:
    """Build (once per depth) the band and single-pixel render kernels.

    Args:
        max_depth: Recursion depth the kernels trace to.

    Returns:
        The RenderKernels for that depth.
    """
    trace = get_tracer(max_depth)

    @ti.func
    def shade_pixel(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32, aa: ti.i32, max_depth: ti.i32) -> vec3:
        """Average the traced colors of the ``aa x aa`` sub-samples of a pixel."""
        color = vec3(0.0, 0.0, 0.0)
        origin = get_camera_origin()
        aa_f = ti.cast(aa, ti.f32)

        for dy, dx in ti.ndrange(aa, aa):
            px = ti.cast(x, ti.f32) + ti.cast(dx, ti.f32) / aa_f
            py = ti.cast(y, ti.f32) + ti.cast(dy, ti.f32) / aa_f
            direction = primary_ray_direction(px, py, width, height)
            color += trace(origin, direction, 0, max_depth)

        return color / (aa_f * aa_f)

    @ti.kernel
    def render_rows(
        buffer: ti.types.ndarray(dtype=ti.u8, ndim=3),
        row_start: ti.i32,
        row_end: ti.i32,
        width: ti.i32,
        height: ti.i32,
        aa: ti.i32,
        max_depth: ti.i32,
    ):
        """Render rows [row_start, row_end) into the RGBA buffer."""
        for y, x in ti.ndrange((row_start, row_end), width):
            color = shade_pixel(x, y, width, height, aa, max_depth)
            for c in ti.static(range(3)):
                buffer[y, x, c] = to_byte(color[c])
            buffer[y, x, 3] = ti.cast(255, ti.u8)

    @ti.kernel
    def render_single_pixel(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32, aa: ti.i32, max_depth: ti.i32):
        ti.loop_config(serialize=True)
        for _ in range(1):
            color = shade_pixel(x, y, width, height, aa, max_depth)
            for c in ti.static(range(3)):
                _pixel_result[None][c] = ti.cast(to_byte(color[c]), ti.i32)
            _pixel_result[None][3] = 255

    return RenderKernels(render_rows=render_rows, render_single_pixel=render_single_pixel)


# =============================================================================
# Frame Renderer
# =============================================================================


class FrameRenderer:
    """Renders scenes into a fixed-size RGBA frame buffer.

    The renderer owns its buffer and reuses it across frames; each render
    overwrites every pixel, so rendering an unchanged scene twice produces
    identical bytes.

    Attributes:
        config: The render configuration.
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        """Initialize the renderer.

        Args:
            config: Resolution and quality settings. Defaults to
                ``RenderConfig()`` (800 x 600, 2x2 antialiasing, depth 3).
        """
        self.config = config if config is not None else RenderConfig()
        self._buffer = np.zeros((self.config.height, self.config.width, 4), dtype=np.uint8)
        self._rendering = False

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def buffer(self) -> npt.NDArray[np.uint8]:
        """The frame buffer, shape (height, width, 4)."""
        return self._buffer

    @property
    def is_rendering(self) -> bool:
        return self._rendering

    def render_progressive(self, scene: Scene) -> Generator[RenderProgress, None, None]:
        """Render ``scene`` band by band, yielding progress after each band.

        The scene stays locked against mutation until the generator is
        exhausted or closed.

        Args:
            scene: The scene to render.

        Yields:
            A RenderProgress after every band of rows.

        Raises:
            RuntimeError: If a render is already in progress.
        """
        with claim_device(scene):
            self._rendering = True
            try:
                yield from self._render_bands(scene)
            finally:
                self._rendering = False

    def _render_bands(self, scene: Scene) -> Generator[RenderProgress, None, None]:
        config = self.config
        setup_camera(scene.camera)
        self._buffer.fill(0)

        logger.info(
            "Rendering %dx%d, %d samples/pixel, max depth %d",
            config.width,
            config.height,
            config.samples_per_pixel,
            config.max_depth,
        )
        start_time = time.perf_counter()

        kernels = build_render_kernels(config.max_depth)
        band = config.rows_per_update
        for row_start in range(0, config.height, band):
            row_end = min(config.height, row_start + band)
            kernels.render_rows(
                self._buffer,
                row_start,
                row_end,
                config.width,
                config.height,
                config.antialiasing,
                config.max_depth,
            )
            logger.debug("Rendered rows %d/%d", row_end, config.height)
            yield RenderProgress(rows_done=row_end, total_rows=config.height, buffer=self._buffer)

        logger.info("Render finished in %.3f s", time.perf_counter() - start_time)

    def render(self, scene: Scene, callback: ProgressCallback | None = None) -> npt.NDArray[np.uint8]:
        """Render ``scene`` into the frame buffer.

        Args:
            scene: The scene to render.
            callback: Optional function called with a RenderProgress after
                every band, including the final one.

        Returns:
            The frame buffer, shape (height, width, 4).

        Raises:
            RuntimeError: If a render is already in progress.

        Example:
            >>> def progress(p):
            ...     print(f"{p.rows_done}/{p.total_rows} rows")
            >>> renderer.render(scene, callback=progress)
        """
        for progress in self.render_progressive(scene):
            if callback is not None:
                callback(progress)
        return self._buffer

    def render_pixel(self, scene: Scene, x: int, y: int) -> tuple[int, int, int, int]:
        """Render a single pixel without touching the frame buffer.

        Args:
            scene: The scene to render.
            x: Pixel column (0 = left).
            y: Pixel row (0 = top).

        Returns:
            The (R, G, B, A) bytes the full render would produce.

        Raises:
            ValueError: If the pixel is outside the image.
            RuntimeError: If a render is already in progress.
        """
        config = self.config
        if not (0 <= x < config.width and 0 <= y < config.height):
            raise ValueError(f"Pixel ({x}, {y}) outside {config.width}x{config.height} image")
        kernels = build_render_kernels(config.max_depth)
        with claim_device(scene):
            setup_camera(scene.camera)
            kernels.render_single_pixel(
                x, y, config.width, config.height, config.antialiasing, config.max_depth
            )

        rgba = _pixel_result[None]
        return (int(rgba[0]), int(rgba[1]), int(rgba[2]), int(rgba[3]))

    def frame_bytes(self) -> bytes:
        """Return the frame as flat row-major RGBA bytes."""
        return self._buffer.tobytes()
