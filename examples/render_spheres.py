#!/usr/bin/env python3
"""Render one of the built-in sphere scenes to a PNG file.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH         Image width in pixels (default: 640)
    --height HEIGHT       Image height in pixels (default: 320)
    --samples SAMPLES     Samples per pixel (default: 65)
    --seed SEED           Render and scene seed (default: 0)
    --scene NAME          simple, hollow or random (default: random)
    --arch ARCH           Taichi backend (default: cpu)
    --threads N           CPU worker threads (default: all cores)
    --sequential          Render pixels one at a time
    --band-rows N         Rows per progress update (default: 16)
    --output OUTPUT       Output file path (default: spheres.png)
    --verbose             Log per-band progress

Example:
    python -m examples.render_spheres --scene simple --samples 16 --output simple.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from spheretracer.config import RenderConfig, SUPPORTED_ARCHS, init_taichi

logger = logging.getLogger("render_spheres")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = RenderConfig()
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with the path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=defaults.width,
                        help=f"Image width in pixels (default: {defaults.width})")
    parser.add_argument("--height", type=int, default=defaults.height,
                        help=f"Image height in pixels (default: {defaults.height})")
    parser.add_argument("--samples", type=int, default=defaults.samples_per_pixel,
                        help=f"Samples per pixel (default: {defaults.samples_per_pixel})")
    parser.add_argument("--seed", type=int, default=defaults.seed,
                        help=f"Render and scene seed (default: {defaults.seed})")
    parser.add_argument("--scene", default=defaults.scene,
                        help=f"simple, hollow or random (default: {defaults.scene})")
    parser.add_argument("--arch", choices=SUPPORTED_ARCHS, default=defaults.arch,
                        help=f"Taichi backend (default: {defaults.arch})")
    parser.add_argument("--threads", type=int, default=None,
                        help="CPU worker threads (default: all cores)")
    parser.add_argument("--sequential", action="store_true",
                        help="Render pixels one at a time")
    parser.add_argument("--band-rows", type=int, default=16,
                        help="Rows per progress update (default: 16)")
    parser.add_argument("--output", type=str, default=defaults.output,
                        help=f"Output file path (default: {defaults.output})")
    parser.add_argument("--verbose", action="store_true",
                        help="Log per-band progress")
    return parser.parse_args()


def render(config: RenderConfig) -> Path:
    """Build the configured scene, render it and save the PNG.

    Taichi must already be initialized.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from spheretracer.camera.thin_lens import setup_camera
    from spheretracer.core.renderer import Renderer
    from spheretracer.scene.builders import build_scene, default_camera

    build_scene(config.scene, seed=config.seed)
    setup_camera(default_camera(config.aspect_ratio))

    renderer = Renderer(config.width, config.height)
    renderer.render(
        samples=config.samples_per_pixel,
        seed=config.seed,
        parallel=config.parallel,
        band_rows=config.band_rows,
    )

    output_file = config.output_path
    renderer.save_image(str(output_file))
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = RenderConfig(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            seed=args.seed,
            parallel=not args.sequential,
            scene=args.scene,
            arch=args.arch,
            cpu_threads=args.threads,
            band_rows=args.band_rows,
            output=args.output,
        )
        init_taichi(config.arch, random_seed=config.seed, cpu_threads=config.cpu_threads)
        output_file = render(config)
    except (ValueError, RuntimeError) as e:
        logger.error("%s", e)
        return 1

    logger.info("Saved to: %s", output_file.absolute())
    return 0


if __name__ == "__main__":
    sys.exit(main())
