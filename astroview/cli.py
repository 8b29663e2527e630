"""Command-line entry point: convert an image and report its point cloud."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

from astroview.config import ConversionConfig, load_config
from astroview.decode import BACKENDS
from astroview.plugins import AstroViewerPlugin, PluginContext
from astroview.render import MatplotlibRenderer, RecordingRenderer
from astroview.visualization.backend import configure_matplotlib_backend


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Convert an image to a brightness-based 3D point cloud'
    )
    parser.add_argument('image', type=Path,
                        help='Image file to convert')
    parser.add_argument('--config', type=Path, default=None,
                        help='JSON file with ConversionConfig fields')
    parser.add_argument('--max-points', type=int, default=None,
                        help='Maximum number of points, <= 0 for unbounded (default: 10000)')
    parser.add_argument('--threshold', type=float, default=None,
                        help='Brightness threshold in [0, 1] (default: 0.1)')
    parser.add_argument('--z-scale', type=float, default=None,
                        help='Multiplier for brightness along z (default: 0.05)')
    parser.add_argument('--point-size', type=float, default=None,
                        help='Point size render hint (default: 5.0)')
    parser.add_argument('--backend', choices=BACKENDS, default='pil',
                        help='Image decoder (default: pil)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for point sampling (default: unseeded)')
    parser.add_argument('--preview', type=Path, default=None,
                        help='Save a 3D scatter preview of the points to this file')
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    base = load_config(args.config) if args.config is not None else ConversionConfig()
    config = base.with_overrides(
        max_points=args.max_points,
        brightness_threshold=args.threshold,
        z_scale=args.z_scale,
        point_size=args.point_size,
    )
    # The image comes from the command line, not the startup path
    config = replace(config, image_path=None)

    if args.preview is not None:
        configure_matplotlib_backend()
        renderer = MatplotlibRenderer(output_path=args.preview)
    else:
        renderer = RecordingRenderer()

    plugin = AstroViewerPlugin(config, rng=args.seed, backend=args.backend)
    plugin.initialize(PluginContext(renderer))
    try:
        if not plugin.load(args.image):
            return 1
        plugin.submit()
    finally:
        plugin.teardown()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
