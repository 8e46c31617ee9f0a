#!/usr/bin/env python3
"""
Basic example running the background in a matplotlib window.

Press SPACE to hide/show the page (pauses the loop), resize the window to
reseed the particles.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import logging

from ambientfield import start_background
from ambientfield.ui.host import MatplotlibHost


def main():
    logging.basicConfig(level=logging.DEBUG)

    host = MatplotlibHost(size=(1024, 640))
    loop = start_background(host)
    if loop is None:
        print("Background did not start")
        return

    print(f"Animating {len(loop.particles)} particles")
    host.show()


if __name__ == "__main__":
    main()
