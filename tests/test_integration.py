"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete path from scene creation through editing and
rendering to PNG output, the way the command-line example drives it.

Tests are designed to be fast (low resolution, no supersampling) while still
exercising the full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run. The example's
``main`` is not called because it initializes Taichi itself.
"""

from __future__ import annotations

import __future__
import importlib
from pathlib import Path

import numpy as np
import pytest

SIZE = {"width": 32, "height": 24, "antialiasing": 1}


class TestCornellBoxIntegration:
    """Integration tests for Cornell box rendering."""

    def test_render_and_save(self, tmp_path: Path) -> None:
        """Test that the example pipeline writes a PNG of the right size."""
        from examples.render_cornell_box import render_cornell_box
        from src.whitted.preview.export import load_png

        output = render_cornell_box(output_path=str(tmp_path / "box.png"), quiet=True, **SIZE)

        assert output.exists()
        frame = load_png(output)
        assert frame.shape == (24, 32, 4)
        assert frame[:, :, :3].max() > 0

    @pytest.mark.parametrize("preset", ["mirror", "transparent"])
    def test_presets_change_image(self, tmp_path: Path, preset: str) -> None:
        from examples.render_cornell_box import render_cornell_box
        from src.whitted.preview.export import compute_rmse, load_png

        plain = load_png(render_cornell_box(output_path=str(tmp_path / "plain.png"), quiet=True, **SIZE))
        edited = load_png(
            render_cornell_box(output_path=str(tmp_path / f"{preset}.png"), preset=preset, quiet=True, **SIZE)
        )

        assert compute_rmse(plain, edited) > 0.0

    def test_mirror_wall_and_single_light(self, tmp_path: Path) -> None:
        from examples.render_cornell_box import render_cornell_box
        from src.whitted.preview.export import load_png

        both = load_png(render_cornell_box(output_path=str(tmp_path / "a.png"), quiet=True, **SIZE))
        edited = load_png(
            render_cornell_box(
                output_path=str(tmp_path / "b.png"),
                mirror_wall="back",
                second_light=False,
                quiet=True,
                **SIZE,
            )
        )

        assert not np.array_equal(both, edited)

    def test_look_at_matches_fixed_axes_for_default_camera(self, tmp_path: Path) -> None:
        """The default camera looks straight down -z, so both bases agree."""
        from examples.render_cornell_box import render_cornell_box
        from src.whitted.preview.export import compute_rmse, load_png

        fixed = load_png(render_cornell_box(output_path=str(tmp_path / "f.png"), quiet=True, **SIZE))
        aimed = load_png(render_cornell_box(output_path=str(tmp_path / "l.png"), look_at=True, quiet=True, **SIZE))

        assert compute_rmse(fixed, aimed) < 1.0

    def test_progress_output(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        from examples.render_cornell_box import render_cornell_box

        render_cornell_box(output_path=str(tmp_path / "p.png"), **SIZE)

        out = capsys.readouterr().out
        assert "24/24 rows" in out
        assert "Saved to:" in out


class TestCommandLine:
    """Tests for argument parsing in the example script."""

    def test_defaults(self) -> None:
        from examples.render_cornell_box import parse_args

        args = parse_args([])
        assert (args.width, args.height) == (800, 600)
        assert args.antialiasing == 2
        assert args.max_depth == 3
        assert args.preset == "plain"
        assert args.mirror_wall is None
        assert not args.no_second_light

    def test_options(self) -> None:
        from examples.render_cornell_box import parse_args

        args = parse_args(
            ["--width", "64", "--preset", "transparent", "--refraction-index", "1.33", "--mirror-wall", "left"]
        )
        assert args.width == 64
        assert args.preset == "transparent"
        assert args.refraction_index == 1.33
        assert args.mirror_wall == "left"

    def test_invalid_choice(self) -> None:
        from examples.render_cornell_box import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--mirror-wall", "front"])


KERNEL_MODULES = [
    "src.whitted.core.vector",
    "src.whitted.core.integrator",
    "src.whitted.core.renderer",
    "src.whitted.camera.pinhole",
    "src.whitted.geometry.hit",
    "src.whitted.geometry.sphere",
    "src.whitted.geometry.box",
    "src.whitted.geometry.plane",
    "src.whitted.geometry.primitive",
    "src.whitted.materials.phong",
    "src.whitted.scene.storage",
]


class TestKernelModules:
    """Tests that every module declaring Taichi functions imports cleanly."""

    @pytest.mark.parametrize("name", KERNEL_MODULES)
    def test_imports_with_evaluated_annotations(self, name: str) -> None:
        """Taichi reads parameter annotations as types, never as strings."""
        module = importlib.import_module(name)
        assert getattr(module, "annotations", None) is not __future__.annotations
