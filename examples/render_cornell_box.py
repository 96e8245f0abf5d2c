#!/usr/bin/env python3
"""Render the Cornell box scene.

This script renders the default Cornell box room with the Whitted raytracer:
it builds the scene, applies the requested edits (object preset, mirror wall,
second light), renders with banded progress output and saves a PNG.

Usage:
    python -m examples.render_cornell_box [options]

Options:
    --width WIDTH             Image width in pixels (default: 800)
    --height HEIGHT           Image height in pixels (default: 600)
    --antialiasing N          Sub-samples per pixel axis (default: 2)
    --max-depth DEPTH         Reflection/refraction depth (default: 3)
    --output OUTPUT           Output file path (default: cornell_box.png)
    --preset PRESET           Object material: plain, mirror or transparent
    --refraction-index IOR    Index for the transparent preset (default: 1.5)
    --mirror-wall WALL        Mirror wall: left, right, back, floor or ceiling
    --no-second-light         Render with the main light only
    --look-at                 Aim the camera at its look-at point
    --show                    Show the result in a Matplotlib window
    --quiet                   Suppress progress output
    --verbose                 Enable debug logging

Example:
    python -m examples.render_cornell_box --width 320 --height 240 --preset mirror
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

WALL_CHOICES = ("left", "right", "back", "floor", "ceiling")
PRESET_CHOICES = ("plain", "mirror", "transparent")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the Cornell box scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=800,
        help="Image width in pixels (default: 800)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=600,
        help="Image height in pixels (default: 600)",
    )
    parser.add_argument(
        "--antialiasing",
        type=int,
        default=2,
        help="Sub-samples per pixel axis (default: 2)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=3,
        help="Maximum reflection/refraction depth (default: 3)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="cornell_box.png",
        help="Output file path (default: cornell_box.png)",
    )
    parser.add_argument(
        "--preset",
        choices=PRESET_CHOICES,
        default="plain",
        help="Material preset for the objects (default: plain)",
    )
    parser.add_argument(
        "--refraction-index",
        type=float,
        default=1.5,
        help="Refraction index for the transparent preset (default: 1.5)",
    )
    parser.add_argument(
        "--mirror-wall",
        choices=WALL_CHOICES,
        default=None,
        help="Turn one wall into a mirror",
    )
    parser.add_argument(
        "--no-second-light",
        action="store_true",
        help="Render with the main light only",
    )
    parser.add_argument(
        "--look-at",
        action="store_true",
        help="Aim the camera at its look-at point instead of straight down -z",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def render_cornell_box(
    width: int = 800,
    height: int = 600,
    antialiasing: int = 2,
    max_depth: int = 3,
    output_path: str = "cornell_box.png",
    preset: str = "plain",
    refraction_index: float = 1.5,
    mirror_wall: str | None = None,
    second_light: bool = True,
    look_at: bool = False,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the Cornell box scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        antialiasing: Sub-samples per pixel axis.
        max_depth: Maximum reflection/refraction depth.
        output_path: Output file path (PNG).
        preset: Object material preset name.
        refraction_index: Refraction index for the transparent preset.
        mirror_wall: Name of the wall to mirror, or None.
        second_light: Whether the second light is on.
        look_at: Whether the camera honors its look-at point.
        show: Whether to display the result with Matplotlib.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.core.config import RenderConfig
    from src.whitted.core.renderer import RenderProgress
    from src.whitted.materials import preset_from_name
    from src.whitted.preview.export import save_png
    from src.whitted.scene.cornell_box import CornellBoxParams
    from src.whitted.scene.session import RenderSession

    config = RenderConfig(
        width=width, height=height, antialiasing=antialiasing, max_depth=max_depth
    )
    params = CornellBoxParams(second_light=second_light, look_at=look_at)

    if not quiet:
        print(f"Creating Cornell box scene ({width}x{height})...")

    start_time = time.time()

    def progress_callback(progress: RenderProgress) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            print(
                f"\r  Progress: {progress.rows_done}/{progress.total_rows} rows "
                f"({progress.fraction * 100:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    session = RenderSession(
        config, params=params, auto_render=False, on_progress=progress_callback
    )
    session.apply_object_preset(preset_from_name(preset, refraction_index))
    if mirror_wall is not None:
        session.select_mirror_wall(mirror_wall)

    if not quiet:
        print(
            f"Rendering {config.samples_per_pixel} samples per pixel, "
            f"max depth {config.max_depth}..."
        )

    frame = session.render()

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(frame, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show:
        from src.whitted.preview.display import show_frame

        show_frame(frame, title=f"Cornell box - {output_file.name}")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )

    ti.init(arch=ti.cpu)
    if not args.quiet:
        print("Using CPU backend")

    try:
        render_cornell_box(
            width=args.width,
            height=args.height,
            antialiasing=args.antialiasing,
            max_depth=args.max_depth,
            output_path=args.output,
            preset=args.preset,
            refraction_index=args.refraction_index,
            mirror_wall=args.mirror_wall,
            second_light=not args.no_second_light,
            look_at=args.look_at,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
