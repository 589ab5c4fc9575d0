"""Command-line front end for rendering a scene to an image file.

Usage:
    python -m pathtracer [options]

Options:
    --width WIDTH         Image width in pixels (default: 1920)
    --height HEIGHT       Image height in pixels (default: 1080)
    --aa SAMPLES          Antialiasing samples per pixel (default: 200)
    --depth DEPTH         Maximum bounces per light path (default: 50)
    --out OUTPUT          Output image path (default: renders/render.png)
    --scene NAME          Built-in scene: default or random (default: default)
    --scene-file PATH     Load the scene from a JSON file instead
    --save-scene PATH     Write the rendered scene description as JSON
    --seed SEED           Seed for Taichi and the random scene generator
    --threads N           CPU worker threads (default: all cores)
    --lookfrom X Y Z      Camera position (switches to a look-at camera)
    --lookat X Y Z        Point the camera looks at
    --vfov DEGREES        Vertical field of view of the look-at camera
    --no-jitter           Sample pixel centers only (reproducible output)
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    python -m pathtracer --width 400 --height 200 --aa 50 --out renders/small.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np
import taichi as ti

from pathtracer.camera.pinhole import PinholeCamera
from pathtracer.core.render import RenderConfig, Renderer
from pathtracer.output.export import save_image
from pathtracer.scene.manager import SceneManager
from pathtracer.scene.presets import default_scene, random_scene

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    """argparse type for integers >= 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def non_negative_int(value: str) -> int:
    """argparse type for integers >= 0."""
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {value}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="pathtracer",
        description="Render a sphere scene with Monte Carlo path tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=positive_int,
        default=1920,
        help="Image width in pixels (default: 1920)",
    )
    parser.add_argument(
        "--height",
        type=positive_int,
        default=1080,
        help="Image height in pixels (default: 1080)",
    )
    parser.add_argument(
        "--aa",
        type=positive_int,
        default=200,
        help="Antialiasing samples per pixel (default: 200)",
    )
    parser.add_argument(
        "--depth",
        type=non_negative_int,
        default=50,
        help="Maximum bounces per light path (default: 50)",
    )
    parser.add_argument(
        "--out",
        type=str,
        default="renders/render.png",
        help="Output image path; the extension picks the format (default: renders/render.png)",
    )
    parser.add_argument(
        "--scene",
        choices=("default", "random"),
        default="default",
        help="Built-in scene to render (default: default)",
    )
    parser.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="Load the scene from a JSON file (overrides --scene)",
    )
    parser.add_argument(
        "--save-scene",
        type=str,
        default=None,
        help="Write the rendered scene description to a JSON file",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for Taichi's generator and the random scene",
    )
    parser.add_argument(
        "--threads",
        type=positive_int,
        default=None,
        help="Number of CPU worker threads (default: all cores)",
    )
    parser.add_argument(
        "--lookfrom",
        type=float,
        nargs=3,
        default=None,
        metavar=("X", "Y", "Z"),
        help="Camera position; any look-at option switches from the default camera",
    )
    parser.add_argument(
        "--lookat",
        type=float,
        nargs=3,
        default=None,
        metavar=("X", "Y", "Z"),
        help="Point the camera looks at (default: 0 0 -1)",
    )
    parser.add_argument(
        "--vfov",
        type=float,
        default=None,
        help="Vertical field of view in degrees (default: 90)",
    )
    parser.add_argument(
        "--no-jitter",
        action="store_true",
        help="Sample pixel centers only, for reproducible output",
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


def load_scene(args: argparse.Namespace) -> SceneManager:
    """Build the scene selected on the command line."""
    if args.scene_file is not None:
        return SceneManager.load_json(args.scene_file)
    if args.scene == "random":
        return random_scene(np.random.default_rng(args.seed))
    return default_scene()


def build_camera(args: argparse.Namespace) -> PinholeCamera:
    """Build the camera selected on the command line.

    Without look-at options this is the default camera with its fixed 2:1
    image plane. With any of them, the image plane follows the output aspect
    ratio.
    """
    if args.lookfrom is None and args.lookat is None and args.vfov is None:
        return PinholeCamera.default()
    return PinholeCamera.look_at(
        lookfrom=tuple(args.lookfrom or (0.0, 0.0, 0.0)),
        lookat=tuple(args.lookat or (0.0, 0.0, -1.0)),
        vup=(0.0, 1.0, 0.0),
        vfov=args.vfov if args.vfov is not None else 90.0,
        aspect_ratio=args.width / args.height,
    )


def render_to_file(args: argparse.Namespace) -> Path:
    """Render the configured scene and save it.

    Taichi must already be initialized.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Path to the saved image file.
    """
    quiet = args.quiet

    config = RenderConfig(
        width=args.width,
        height=args.height,
        samples=args.aa,
        depth_limit=args.depth,
        jitter=not args.no_jitter,
    )

    manager = load_scene(args)
    if args.save_scene is not None:
        manager.save_json(args.save_scene)

    renderer = Renderer(manager.build(), build_camera(args), config)

    if not quiet:
        print(
            f"Rendering {len(manager)} object(s) at {config.width}x{config.height}, "
            f"{config.samples} samples per pixel..."
        )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - start_time
        progress_pct = (current / target) * 100 if target > 0 else 0
        print(
            f"\r  Progress: {current}/{target} pixels "
            f"({progress_pct:.1f}%) - {elapsed:.1f}s elapsed",
            end="",
            flush=True,
        )

    buffer = renderer.render(callback=None if quiet else progress_callback)
    render_time = time.time() - start_time

    if not quiet:
        print()  # Newline after progress
        print(f"Render took {render_time:.2f}s")

    write_start = time.time()
    output_file = save_image(buffer, config.width, config.height, args.out)
    write_time = time.time() - write_start

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"File took {write_time:.2f}s to write to disk")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_kwargs = {}
    if args.seed is not None:
        init_kwargs["random_seed"] = args.seed
    if args.threads is not None:
        init_kwargs["cpu_max_num_threads"] = args.threads
    ti.init(arch=ti.cpu, log_level=ti.WARN if args.quiet else ti.INFO, **init_kwargs)

    try:
        render_to_file(args)
        return 0
    except Exception as e:
        if args.verbose:
            logger.exception("Render failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
