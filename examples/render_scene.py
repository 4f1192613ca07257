#!/usr/bin/env python3
"""Render a scene with the Whitted mirror tracer.

This script renders either the built-in demo scene or a scene loaded from
a JSON file, tracing one ray per pixel, and saves the result as a binary
PPM or a PNG depending on the output extension.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH         Image width in pixels (default: 1600)
    --height HEIGHT       Image height in pixels (default: 1600)
    --output OUTPUT       Output file path, .ppm or .png (default: render.ppm)
    --scene SCENE         JSON scene file (default: built-in demo scene)
    --max-depth DEPTH     Maximum reflection depth (default: 10)
    --batch-rows ROWS     Rows per progress update (default: 64)
    --cpu                 Force the CPU backend
    --quiet               Suppress progress output

Example:
    python -m examples.render_scene --width 400 --height 400 --output demo.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene with the Whitted mirror tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1600,
        help="Image width in pixels (default: 1600)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=1600,
        help="Image height in pixels (default: 1600)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.ppm",
        help="Output file path, .ppm or .png (default: render.ppm)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=10,
        help="Maximum reflection depth (default: 10)",
    )
    parser.add_argument(
        "--batch-rows",
        type=int,
        default=64,
        help="Rows per progress update (default: 64)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_scene(
    width: int = 1600,
    height: int = 1600,
    output_path: str = "render.ppm",
    scene_path: str | None = None,
    max_depth: int = 10,
    batch_rows: int = 64,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        output_path: Output file path (.ppm or .png).
        scene_path: JSON scene file, or None for the demo scene.
        max_depth: Maximum reflection depth.
        batch_rows: Rows rendered between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from whitted.camera.pinhole import setup_camera
    from whitted.core.renderer import Renderer
    from whitted.core.tracer import TracerConfig, configure_tracer
    from whitted.scene.demo import create_demo_camera, create_demo_scene
    from whitted.scene.manager import SceneManager

    if scene_path is None:
        if not quiet:
            print(f"Creating demo scene ({width}x{height})...")
        scene, camera = create_demo_scene()
    else:
        if not quiet:
            print(f"Loading scene from {scene_path} ({width}x{height})...")
        scene = SceneManager()
        scene.load_json(scene_path)
        camera = create_demo_camera()

    if not quiet:
        print(
            f"  {scene.get_sphere_count()} spheres, {scene.get_plane_count()} planes, "
            f"{scene.get_triangle_count()} triangles, {scene.get_light_count()} lights"
        )

    setup_camera(camera)
    configure_tracer(TracerConfig(max_depth=max_depth))

    renderer = Renderer(width, height)

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows ({progress_pct:.1f}%)",
                end="",
                flush=True,
            )

    renderer.render(callback=progress_callback, batch_rows=batch_rows)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    renderer.save_image(str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.cpu:
        ti.init(arch=ti.cpu)
    else:
        # Use GPU if available, fall back to CPU
        try:
            ti.init(arch=ti.gpu)
        except RuntimeError:
            ti.init(arch=ti.cpu)

    try:
        render_scene(
            width=args.width,
            height=args.height,
            output_path=args.output,
            scene_path=args.scene,
            max_depth=args.max_depth,
            batch_rows=args.batch_rows,
            quiet=args.quiet,
        )
        return 0
    except (OSError, RuntimeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
