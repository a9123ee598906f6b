#!/usr/bin/env python3
"""Render an ellipsoid scene.

This script builds one of the preset scenes (or a scene loaded from a JSON
file), renders it once into an RGBA buffer and saves the result as a PNG.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH           Image width in pixels (default: 600)
    --height HEIGHT         Image height in pixels (default: 600)
    --max-depth DEPTH       Mirror recursion cutoff (default: 5)
    --epsilon EPS           Secondary ray origin offset (default: 1e-4)
    --scene NAME            Preset scene: default or single (default: default)
    --config FILE           Load the scene from a JSON file instead
    --output OUTPUT         Output file path (default: render.png)
    --gamma GAMMA           Gamma correction for the PNG (default: 1.0)
    --tone-map METHOD       none, reinhard or exposure (default: none)
    --show                  Also open a Matplotlib preview window
    --arch ARCH             Taichi backend: cpu or gpu (default: cpu)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_scene --scene single --width 300 --height 300
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render an ellipsoid scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=600,
        help="Image width in pixels (default: 600)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=600,
        help="Image height in pixels (default: 600)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=5,
        help="Mirror recursion cutoff (default: 5)",
    )
    parser.add_argument(
        "--epsilon",
        type=float,
        default=1e-4,
        help="Secondary ray origin offset (default: 1e-4)",
    )
    parser.add_argument(
        "--scene",
        choices=["default", "single"],
        default="default",
        help="Preset scene to render (default: default)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON scene file; overrides --scene",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.png",
        help="Output file path (default: render.png)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Gamma correction for the saved image (default: 1.0)",
    )
    parser.add_argument(
        "--tone-map",
        choices=["none", "reinhard", "exposure"],
        default="none",
        help="Tone mapping for the saved image (default: none)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Open a preview window after rendering",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_scene(
    width: int = 600,
    height: int = 600,
    max_depth: int = 5,
    epsilon: float = 1e-4,
    scene_name: str = "default",
    config_path: str | None = None,
    output_path: str = "render.png",
    gamma: float = 1.0,
    tone_map: str = "none",
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Build a scene, render it once and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Mirror recursion cutoff.
        epsilon: Offset for shadow and reflected ray origins.
        scene_name: Name of a preset scene.
        config_path: Optional JSON scene file, used instead of the preset.
        output_path: Output file path (PNG).
        gamma: Gamma correction applied when saving.
        tone_map: Tone mapping applied when saving.
        show: If True, open a Matplotlib window with the result.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.raylet.core.config import RenderConfig
    from src.raylet.core.integrator import make_image_buffer
    from src.raylet.preview.display import show_image
    from src.raylet.preview.export import save_png
    from src.raylet.scene.manager import Scene
    from src.raylet.scene.presets import get_preset

    config = RenderConfig(width=width, height=height, max_depth=max_depth, epsilon=epsilon)

    scene = Scene()
    if config_path is not None:
        if not quiet:
            print(f"Loading scene from {config_path} ({width}x{height})...")
        with open(config_path, encoding="utf-8") as f:
            scene.from_dict(json.load(f))
    else:
        if not quiet:
            print(f"Building '{scene_name}' scene ({width}x{height})...")
        scene.build(get_preset(scene_name))

    image = make_image_buffer(config)

    start_time = time.perf_counter()
    scene.render(image, config)
    elapsed_ms = (time.perf_counter() - start_time) * 1000.0
    print(f"Rendering time: {elapsed_ms:.0f} milliseconds")

    output_file = Path(output_path)
    save_png(image, config, str(output_file), tone_map=tone_map, gamma=gamma)
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")

    if show:
        show_image(image, config, tone_map=tone_map, gamma=gamma)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize Taichi, falling back to CPU if no GPU backend is usable
    if args.arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not args.quiet:
                print("Using CPU backend")
    else:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_scene(
            width=args.width,
            height=args.height,
            max_depth=args.max_depth,
            epsilon=args.epsilon,
            scene_name=args.scene,
            config_path=args.config,
            output_path=args.output,
            gamma=args.gamma,
            tone_map=args.tone_map,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
