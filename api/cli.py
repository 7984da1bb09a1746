"""
Render an escape-time or Newton fractal to an image file.

Usage examples:
  fractal-render mandelbrot mandel.png 1000x750 -- -1.20,0.35 -1,0.20
  fractal-render newton newton.png 1920x1080 --preset octic -- -1.6,0.9 1.6,-0.9
  fractal-render newton cubic.png 800x600 --offset 1 -- -1.5,1 1.5,-1

Corners with a leading minus sign must follow "--" so they are not read
as options.
"""

import argparse
import logging
import sys
from typing import List, Optional

from api.render_api import NEWTON_PRESETS, RenderAPI
from rendering.errors import RenderError
from utils.coords import point_to_pixel
from utils.enums import DiscriminantPolicy
from utils.image_helpers import PillowImageSink, SinkError
from utils.parsing import parse_complex, parse_dimensions

logger = logging.getLogger(__name__)

_POLICIES = {
    "nearest": DiscriminantPolicy.NEAREST_ROOT,
    "octant": DiscriminantPolicy.OCTANT,
}


def _argtype(parser):
    def convert(token: str):
        try:
            return parser(token)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e)) from e
    convert.__name__ = parser.__name__
    return convert


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fractal-render",
        description="Render a complex-plane fractal to an image file.")

    parser.add_argument('kind', choices=['mandelbrot', 'newton'],
                        help='fractal to render')
    parser.add_argument('file', help='output image path; the extension picks the format (default PNG)')
    parser.add_argument('pixels', type=_argtype(parse_dimensions), metavar='PIXELS',
                        help='raster size, e.g. 1000x750')
    parser.add_argument('upper_left', type=_argtype(parse_complex), metavar='UPPER_LEFT',
                        help='upper-left corner in the complex plane, e.g. -1.20,0.35')
    parser.add_argument('lower_right', type=_argtype(parse_complex), metavar='LOWER_RIGHT',
                        help='lower-right corner in the complex plane, e.g. -1,0.20')

    parser.add_argument('--workers', type=int, default=None, metavar='N',
                        help='number of row bands rendered concurrently (default: one per core)')
    parser.add_argument('--max-iter', type=int, dest='max_iter', default=255, metavar='MAX_ITER',
                        help='iteration budget per pixel')
    parser.add_argument('--epsilon', type=float, default=1e-7,
                        help='Newton convergence threshold on the step size')
    parser.add_argument('--order', type=int, default=3,
                        help='Newton polynomial degree: z**order + offset')
    parser.add_argument('--offset', type=float, default=-1.0,
                        help='Newton polynomial constant term')
    parser.add_argument('--preset', choices=sorted(NEWTON_PRESETS), default=None,
                        help='Newton preset; overrides --order, --offset and --discriminant')
    parser.add_argument('--discriminant', choices=sorted(_POLICIES), default='nearest',
                        help='how convergent Newton points pick their color bucket')
    parser.add_argument('--palette', default=None,
                        help='gradient palette for escape-time renders (RGB output instead of grayscale)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='enable debug logging, including per-band timings')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    api = RenderAPI()
    builder = (api.configure()
               .size(*args.pixels)
               .viewport(args.upper_left, args.lower_right)
               .max_iter(args.max_iter)
               .epsilon(args.epsilon)
               .workers(args.workers)
               .palette(args.palette))
    try:
        if args.kind == 'newton' and args.preset is not None:
            builder.newton_preset(args.preset)
        elif args.kind == 'newton':
            builder.newton(order=args.order, offset=args.offset,
                           policy=_POLICIES[args.discriminant])
        elif args.preset is not None:
            raise ValueError("--preset applies to newton renders only.")
        else:
            builder.mandelbrot()
        job = builder.build()
    except (ValueError, KeyError) as e:
        logger.error("Invalid render configuration: %s", e)
        return 2

    origin = point_to_pixel(job.dims, 0j, job.viewport.upper_left, job.viewport.lower_right)
    logger.debug("Origin of the complex plane falls on pixel %s", origin)

    try:
        api.render_to(job, PillowImageSink(args.file))
    except (RenderError, SinkError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
