"""
Command-line Preview
====================
Loads a scene description, reports its connector routes and draws it.

Why is this file needed?
------------------------
It is the composition root for quick inspection without a host UI. It:
1. Sets up logging.
2. Loads the scene (the bundled demo when no path is given).
3. Optionally simulates the particle streams up to a point in time.
4. Plots the projected scene with matplotlib, on screen or to a file.
"""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

import numpy as np

from isoscene import config
from isoscene.controller.animation import ParticleFrame, build_frame
from isoscene.logging_config import setup_logging
from isoscene.model.io import IOManager
from isoscene.model.particles import ParticleStream
from isoscene.model.scene import Scene
from isoscene.model.transform import AngleConfig

logger = logging.getLogger(__name__)


def simulate_particles(scene: Scene, angles: AngleConfig, seconds: float, fps: float = 60.0) -> Optional[ParticleFrame]:
    """Run the particle streams from t=0 to `seconds` at a fixed frame rate."""
    streams = {cid: ParticleStream(settings=c.particles) for cid, c in scene.connectors.items()}
    frame = None
    for now in np.arange(0.0, seconds + 1e-9, 1.0 / fps):
        frame = build_frame(scene, streams, angles, float(now))
    return frame


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="isoscene", description="Preview an isometric scene.")
    parser.add_argument("scene", nargs="?", default=config.DEMO_SCENE_PATH, help="Scene .json file")
    parser.add_argument("--rotate-x", type=float, default=config.DEFAULT_ROTATE_X)
    parser.add_argument("--rotate-z", type=float, default=config.DEFAULT_ROTATE_Z)
    parser.add_argument("--scale", type=float, help="Override the scene scale (pixels per unit)")
    parser.add_argument("--time", type=float, default=0.0, help="Simulate particles up to this time (s)")
    parser.add_argument("--output", help="Save the preview to this image file instead of showing it")
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)

    scene = IOManager.load_scene(args.scene)
    angles = AngleConfig(rotate_x=args.rotate_x, rotate_z=args.rotate_z)
    if args.scale is not None:
        scene.scale = args.scale

    for cid, route in scene.routes().items():
        logger.info(f"{cid}: {len(route.segments)} segments, length {route.total_length:.1f}")

    frame = simulate_particles(scene, angles, args.time) if args.time > 0 else None

    if args.output:
        import matplotlib
        matplotlib.use("Agg")

    from isoscene.view.preview import plot_scene
    fig = plot_scene(scene, angles, frame=frame, show=not args.output)
    if args.output:
        fig.savefig(args.output, dpi=150)
        logger.info(f"Preview saved to: {args.output}")


if __name__ == "__main__":
    main()
