"""
Frame renderer for ambientfield.

Draws one frame of the background against a DrawingContext: clear, radial
vignette, proximity lines between particles, then the particle dots.
"""

import numpy as np

from .. import config
from ..physics.connections import build_connection_segments
from .color_system import rgba, rgba_array


class RadialGradient:
    """
    Radial gradient between two concentric circles, canvas style.

    Colors outside the [inner_radius, outer_radius] band take the nearest
    stop color.
    """

    def __init__(self, cx, cy, inner_radius, outer_radius):
        self.cx = cx
        self.cy = cy
        self.inner_radius = inner_radius
        self.outer_radius = outer_radius
        self.stops = []  # list of (offset, rgba) kept sorted by offset

    def add_color_stop(self, offset, color):
        if not 0.0 <= offset <= 1.0:
            raise ValueError(f"color stop offset must be in [0, 1], got {offset}")
        self.stops.append((float(offset), tuple(color)))
        self.stops.sort(key=lambda stop: stop[0])

    def color_at(self, px, py):
        """
        Evaluate the gradient at points.

        Args:
            px (np.ndarray): X coordinates
            py (np.ndarray): Y coordinates, same shape as px

        Returns:
            np.ndarray: RGBA values with shape px.shape + (4,)
        """
        px = np.asarray(px, dtype=float)
        py = np.asarray(py, dtype=float)
        if not self.stops:
            return np.zeros(px.shape + (4,))

        span = self.outer_radius - self.inner_radius
        distance = np.hypot(px - self.cx, py - self.cy)
        if span > 0:
            offset = np.clip((distance - self.inner_radius) / span, 0.0, 1.0)
        else:
            offset = np.where(distance <= self.inner_radius, 0.0, 1.0)

        offsets = np.array([stop[0] for stop in self.stops])
        colors = np.array([stop[1] for stop in self.stops])
        result = np.empty(px.shape + (4,))
        for channel in range(4):
            result[..., channel] = np.interp(offset, offsets, colors[:, channel])
        return result

    def render(self, x, y, width, height, samples=128):
        """Sample the gradient over a rectangle at pixel centers, row 0 on top."""
        xs = x + (np.arange(samples) + 0.5) * (width / samples)
        ys = y + (np.arange(samples) + 0.5) * (height / samples)
        grid_x, grid_y = np.meshgrid(xs, ys)
        return self.color_at(grid_x, grid_y)


def make_vignette(width, height):
    """Transparent at the viewport center, fading to dark at the edges."""
    radius = max(width, height) * config.VIGNETTE_RADIUS_FACTOR
    gradient = RadialGradient(width * 0.5, height * 0.5, 0.0, radius)
    gradient.add_color_stop(0.0, rgba((0, 0, 0), 0.0))
    gradient.add_color_stop(1.0, rgba((0, 0, 0), config.VIGNETTE_EDGE_ALPHA))
    return gradient


class VignetteCache:
    """Keeps the vignette gradient for the current viewport size."""

    def __init__(self):
        self._size = None
        self._gradient = None
        self.builds = 0

    def get(self, width, height):
        if self._gradient is None or self._size != (width, height):
            self._gradient = make_vignette(width, height)
            self._size = (width, height)
            self.builds += 1
        return self._gradient


def draw_frame(ctx, particles, width, height, vignette=None):
    """
    Draw one frame of the background.

    Args:
        ctx (DrawingContext): Target context, in logical coordinates
        particles (np.ndarray): Particle records
        width (float): Logical viewport width
        height (float): Logical viewport height
        vignette (VignetteCache, optional): Cache to reuse the gradient; a
            new gradient is built every frame without one
    """
    ctx.clear_rect(0, 0, width, height)

    gradient = vignette.get(width, height) if vignette is not None else make_vignette(width, height)
    ctx.fill_rect(0, 0, width, height, gradient)

    segments, alphas = build_connection_segments(particles)
    if len(segments):
        ctx.stroke_lines(segments, rgba_array(config.LINK_RGB, alphas), config.LINK_WIDTH)

    if len(particles):
        centers = np.column_stack((particles['x'], particles['y']))
        ctx.fill_circles(centers, particles['r'].copy(), rgba(config.DOT_RGB, config.DOT_ALPHA))
