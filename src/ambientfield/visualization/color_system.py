"""
Color system module for ambientfield.

Canvas-style colors are given as 0-255 RGB triples with a 0-1 alpha; the
drawing backends work with 0-1 RGBA tuples. These helpers convert between
the two.
"""

import numpy as np


def rgba(rgb255, alpha):
    """
    Convert a 0-255 RGB triple and an alpha to a 0-1 RGBA tuple.

    Args:
        rgb255 (tuple): Red, green, blue in 0-255
        alpha (float): Opacity in 0-1

    Returns:
        tuple: (r, g, b, a) floats in 0-1
    """
    r, g, b = (c / 255.0 for c in rgb255)
    return (r, g, b, float(np.clip(alpha, 0.0, 1.0)))


def rgba_array(rgb255, alphas):
    """Build an (N, 4) RGBA array sharing one color with per-row alpha."""
    alphas = np.clip(np.asarray(alphas, dtype=float), 0.0, 1.0)
    colors = np.empty((len(alphas), 4))
    colors[:, :3] = np.asarray(rgb255, dtype=float) / 255.0
    colors[:, 3] = alphas
    return colors
