"""Tests for the banded frame renderer.

This module tests:
- Frame buffer shape, dtype and alpha
- Banded progress reporting
- Determinism of repeated renders
- Single-pixel rendering
- The one-render-at-a-time guard

Note: Imports are done inside test methods to avoid Taichi initialization issues.
"""

import numpy as np
import pytest


@pytest.fixture
def small_config():
    from src.whitted.core.config import RenderConfig

    return RenderConfig(width=16, height=12, antialiasing=1, max_depth=2)


class TestRenderProgress:
    """Tests for the RenderProgress snapshot."""

    def test_fraction_and_done(self):
        from src.whitted.core.renderer import RenderProgress

        buffer = np.zeros((4, 4, 4), dtype=np.uint8)
        assert RenderProgress(1, 4, buffer).fraction == 0.25
        assert not RenderProgress(1, 4, buffer).done
        assert RenderProgress(4, 4, buffer).done


class TestFrameRenderer:
    """Tests for FrameRenderer.render."""

    def test_buffer_shape_and_alpha(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        renderer = FrameRenderer(small_config)
        frame = renderer.render(cornell_scene)

        assert frame.shape == (12, 16, 4)
        assert frame.dtype == np.uint8
        assert np.all(frame[:, :, 3] == 255)
        # The room is lit; nothing renders pure black
        assert frame[:, :, :3].max() > 0

    def test_default_config(self):
        from src.whitted.core.renderer import FrameRenderer

        renderer = FrameRenderer()
        assert (renderer.width, renderer.height) == (800, 600)
        assert renderer.buffer.shape == (600, 800, 4)
        assert not renderer.is_rendering

    def test_progress_reports_every_band(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        reports = []
        FrameRenderer(small_config).render(cornell_scene, callback=reports.append)

        rows = [p.rows_done for p in reports]
        assert rows == sorted(rows)
        assert rows[-1] == 12
        assert all(p.total_rows == 12 for p in reports)
        assert reports[-1].done
        # 12 rows at one row per band
        assert len(reports) == 12

    def test_progress_buffer_fills_top_down(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        snapshots = []

        def on_progress(progress):
            snapshots.append((progress.rows_done, progress.buffer[:, :, 3].copy()))

        FrameRenderer(small_config).render(cornell_scene, callback=on_progress)

        rows_done, alpha = snapshots[0]
        assert np.all(alpha[:rows_done] == 255)
        assert np.all(alpha[rows_done:] == 0)

    def test_repeated_renders_are_identical(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        renderer = FrameRenderer(small_config)
        first = renderer.render(cornell_scene).copy()
        second = renderer.render(cornell_scene)

        np.testing.assert_array_equal(first, second)

    def test_antialiasing_changes_edges_only_slightly(self, cornell_scene):
        from src.whitted.core.config import RenderConfig
        from src.whitted.core.renderer import FrameRenderer
        from src.whitted.preview.export import compute_rmse

        plain = FrameRenderer(RenderConfig(width=16, height=12, antialiasing=1)).render(cornell_scene).copy()
        smooth = FrameRenderer(RenderConfig(width=16, height=12, antialiasing=2)).render(cornell_scene)

        assert compute_rmse(plain, smooth) < 64.0

    def test_walls_show_their_colors(self, cornell_scene):
        from src.whitted.core.config import RenderConfig
        from src.whitted.core.renderer import FrameRenderer

        renderer = FrameRenderer(RenderConfig(width=80, height=60, antialiasing=1))

        r, g, b, a = renderer.render_pixel(cornell_scene, 2, 30)
        assert r > g and r > b

        r, g, b, a = renderer.render_pixel(cornell_scene, 77, 30)
        assert g > r and g > b
        assert a == 255

    def test_edit_changes_frame(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer
        from src.whitted.scene.cornell_box import Wall, find_wall

        renderer = FrameRenderer(small_config)
        before = renderer.render(cornell_scene).copy()

        find_wall(cornell_scene, Wall.BACK).material.color = (0.1, 0.1, 0.9)
        after = renderer.render(cornell_scene)

        assert not np.array_equal(before, after)

    def test_frame_bytes(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        renderer = FrameRenderer(small_config)
        renderer.render(cornell_scene)

        data = renderer.frame_bytes()
        assert len(data) == 16 * 12 * 4
        assert data[3] == 255

    def test_deep_max_depth_renders(self, cornell_scene):
        """Test a render deeper than the default depth with mirrors in the room."""
        from src.whitted.core.config import RenderConfig
        from src.whitted.core.renderer import FrameRenderer
        from src.whitted.materials import Mirror, apply_preset
        from src.whitted.scene.cornell_box import Wall, find_wall

        for primitive in cornell_scene.objects():
            apply_preset(primitive.material, Mirror())
        find_wall(cornell_scene, Wall.BACK).material.reflection = 0.9

        renderer = FrameRenderer(RenderConfig(width=16, height=12, antialiasing=1, max_depth=6))
        frame = renderer.render(cornell_scene).copy()

        assert np.all(frame[:, :, 3] == 255)
        assert frame[:, :, :3].max() > 0
        pixel = renderer.render_pixel(cornell_scene, 8, 6)
        assert np.abs(np.array(pixel, dtype=int) - frame[6, 8].astype(int)).max() <= 1

    def test_depth_irrelevant_without_mirrors(self, small_config, cornell_scene):
        """Test that a matte room renders the same at any depth."""
        from src.whitted.core.config import RenderConfig
        from src.whitted.core.renderer import FrameRenderer

        shallow = FrameRenderer(small_config).render(cornell_scene).copy()
        deep = FrameRenderer(RenderConfig(width=16, height=12, antialiasing=1, max_depth=7)).render(cornell_scene)

        assert np.array_equal(shallow, deep)

    def test_kernels_cached_per_depth(self):
        from src.whitted.core.renderer import build_render_kernels

        assert build_render_kernels(5) is build_render_kernels(5)


class TestRenderPixel:
    """Tests for FrameRenderer.render_pixel."""

    def test_matches_full_render(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        renderer = FrameRenderer(small_config)
        frame = renderer.render(cornell_scene).copy()

        for x, y in [(0, 0), (8, 6), (15, 11), (3, 9)]:
            pixel = renderer.render_pixel(cornell_scene, x, y)
            assert np.abs(np.array(pixel, dtype=int) - frame[y, x].astype(int)).max() <= 1

    def test_does_not_touch_buffer(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        renderer = FrameRenderer(small_config)
        renderer.render_pixel(cornell_scene, 4, 4)
        assert not renderer.buffer.any()

    @pytest.mark.parametrize("x, y", [(-1, 0), (16, 0), (0, 12)])
    def test_out_of_bounds(self, small_config, cornell_scene, x, y):
        from src.whitted.core.renderer import FrameRenderer

        with pytest.raises(ValueError, match="outside"):
            FrameRenderer(small_config).render_pixel(cornell_scene, x, y)


class TestRenderGuard:
    """Tests for the one-render-at-a-time guard."""

    def test_scene_locked_during_render(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer
        from src.whitted.scene.model import Light

        renderer = FrameRenderer(small_config)
        errors = []

        def on_progress(progress):
            assert renderer.is_rendering
            try:
                cornell_scene.remove_light(0)
            except RuntimeError as e:
                errors.append(e)

        renderer.render(cornell_scene, callback=on_progress)

        assert len(errors) == 12
        assert len(cornell_scene.lights) == 2
        assert not renderer.is_rendering
        # Mutation works again once the render is done
        cornell_scene.remove_light(1)
        cornell_scene.add_light(Light(position=(1.0, 1.5, -1.0)))

    def test_second_render_refused(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        first = FrameRenderer(small_config)
        second = FrameRenderer(small_config)
        refused = []

        def on_progress(progress):
            if not refused:
                with pytest.raises(RuntimeError, match="in progress"):
                    second.render(cornell_scene)
                refused.append(True)

        first.render(cornell_scene, callback=on_progress)
        assert refused == [True]

    def test_error_in_callback_releases_lock(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        renderer = FrameRenderer(small_config)

        def failing(progress):
            raise KeyError("stop")

        with pytest.raises(KeyError):
            renderer.render(cornell_scene, callback=failing)

        assert not cornell_scene.is_rendering
        assert not renderer.is_rendering
        renderer.render(cornell_scene)

    def test_closing_progressive_render_releases_lock(self, small_config, cornell_scene):
        from src.whitted.core.renderer import FrameRenderer

        renderer = FrameRenderer(small_config)
        generator = renderer.render_progressive(cornell_scene)
        first = next(generator)
        assert first.rows_done == 1
        assert cornell_scene.is_rendering

        generator.close()

        assert not cornell_scene.is_rendering
        renderer.render(cornell_scene)


class TestEmptyRoom:
    """End-to-end shading of the bare room (walls and one light only)."""

    def test_floor_center_brighter_than_near_side_wall(self):
        from src.whitted.core.config import RenderConfig
        from src.whitted.core.renderer import FrameRenderer
        from src.whitted.scene.cornell_box import Wall, create_camera, create_wall
        from src.whitted.scene.model import Light, Scene

        scene = Scene(
            primitives=[create_wall(wall) for wall in Wall],
            lights=[Light(position=(0.0, 1.9, 0.0), intensity=0.5)],
            camera=create_camera(),
        )
        renderer = FrameRenderer(RenderConfig(width=80, height=60, antialiasing=1))

        # Row 52 crosses the floor at z = 0, directly below the light
        center = renderer.render_pixel(scene, 40, 52)
        near_wall = renderer.render_pixel(scene, 25, 52)

        ambient = int(0.15 * 0.9 * 255)
        for c in range(3):
            assert center[c] > near_wall[c] > ambient
