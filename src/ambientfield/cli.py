#!/usr/bin/env python3
"""
Command-line entry point for the ambientfield background.

Usage:
    ambientfield                              # interactive window, SPACE pauses
    ambientfield --width 800 --height 600 --dpr 2
    ambientfield --save background.gif --frames 120
    ambientfield --reduced-motion             # gate check: nothing starts
"""

import argparse
import logging

import numpy as np

from . import config
from .background import start_background

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='ambientfield - flow-field particle background',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ambientfield                                   # 1280x720 window
  ambientfield --width 1920 --height 1080        # larger viewport, more particles
  ambientfield --save out.gif --frames 90        # render headlessly to a GIF
        """
    )
    default_w, default_h = config.DEFAULT_WINDOW_SIZE
    parser.add_argument('--width', type=int, default=default_w,
                        help=f'Viewport width in logical pixels (default: {default_w})')
    parser.add_argument('--height', type=int, default=default_h,
                        help=f'Viewport height in logical pixels (default: {default_h})')
    parser.add_argument('--dpr', type=float, default=None,
                        help='Device pixel ratio (clamped to [1, 2]; default: from the canvas)')
    parser.add_argument('--interval', type=int, default=config.FRAME_INTERVAL,
                        help=f'Milliseconds between frames (default: {config.FRAME_INTERVAL})')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for particle placement')
    parser.add_argument('--reduced-motion', action='store_true',
                        help='Report a reduced-motion preference (the background will not start)')
    parser.add_argument('--save', type=str, default=None, metavar='PATH',
                        help='Render headlessly and save the animation to PATH')
    parser.add_argument('--frames', type=int, default=120,
                        help='Number of frames to render with --save (default: 120)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)
    if args.width <= 0 or args.height <= 0:
        parser.error('--width and --height must be positive')
    if args.interval <= 0:
        parser.error('--interval must be positive')
    if args.frames <= 0:
        parser.error('--frames must be positive')
    return args


def main(argv=None):
    """Run the background; returns a process exit code."""
    args = parse_arguments(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s %(name)s: %(message)s')

    rng = np.random.default_rng(args.seed)

    if args.save:
        from .ui.host import OfflineHost, animate
        host = OfflineHost(args.width, args.height, reduced_motion=args.reduced_motion,
                           device_pixel_ratio=args.dpr if args.dpr is not None else 1.0,
                           interval=args.interval)
        loop = start_background(host, rng=rng)
        if loop is None:
            logger.info("background did not start; nothing saved")
            return 1
        animate(host, loop, args.frames, save_path=args.save)
        return 0

    from .ui.host import MatplotlibHost
    import matplotlib.pyplot as plt

    host = MatplotlibHost(size=(args.width, args.height), reduced_motion=args.reduced_motion,
                          device_pixel_ratio=args.dpr, interval=args.interval)
    loop = start_background(host, rng=rng)
    if loop is None:
        logger.info("background did not start")
        plt.close(host.fig)
        return 1

    logger.info("%d particles; press SPACE to pause, close the window to quit",
                len(loop.particles))
    host.show()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
