# -*- coding: utf-8 -*-
"""
Command line entry point: watercolor INPUT OUTPUT [options]
"""

import argparse
import logging
import sys

from .core.config import WatercolorConfig
from .core.datatypes import PipelineError
from .core.pipeline import process
from .utils.image_io import load_image, save_image


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Apply a watercolor effect to an image"
    )
    parser.add_argument('input', help='input image (png, jpg, tif, ...)')
    parser.add_argument('output', help='output image, format taken from the extension')
    parser.add_argument('-c', '--config', default=None,
                        help='YAML file with WatercolorConfig fields (optionally under "params")')
    parser.add_argument('--seed', type=int, default=None,
                        help='seed for the random stages, makes the output reproducible')
    parser.add_argument('--lab', action='store_true',
                        help='posterize with K-means in Lab space')
    parser.add_argument('--threads', type=int, default=None,
                        help='run the per-row stages on this many threads')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log every stage')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.seed is not None:
        overrides['seed'] = args.seed
    if args.lab:
        overrides['color_space'] = 'lab'
    if args.threads is not None:
        overrides['multi_thread'] = args.threads > 1
        overrides['workers'] = args.threads

    try:
        config = WatercolorConfig.from_yaml(args.config) if args.config else WatercolorConfig()
        config = config.with_overrides(**overrides).validate()
        buffer = load_image(args.input)
        print(f"Loaded {args.input} ({buffer.width}x{buffer.height})")
        process(buffer, config)
        save_image(buffer, args.output, quality=config.quality)
    except (PipelineError, OSError) as e:
        print(f"[Error] {e}", file=sys.stderr)
        return 1

    print(f"Saved -> {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
