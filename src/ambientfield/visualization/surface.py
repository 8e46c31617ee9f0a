"""
Drawing surfaces for ambientfield.

DrawingContext is the 2D immediate-mode interface the renderer draws with.
MatplotlibContext implements it on a figure: one full-figure axes in logical
(y-down) coordinates, an image for gradient fills, a LineCollection for the
connection lines and an EllipseCollection for the particle dots.
"""

from abc import ABC, abstractmethod

import numpy as np
from matplotlib.collections import EllipseCollection, LineCollection

from .. import config


class DrawingContext(ABC):
    """2D drawing context working in logical coordinates."""

    @abstractmethod
    def set_transform(self, scale):
        """Map logical coordinates to backing-store pixels by a uniform scale."""

    @abstractmethod
    def clear_rect(self, x, y, width, height):
        """Clear a region to transparent."""

    @abstractmethod
    def fill_rect(self, x, y, width, height, gradient):
        """Fill a rectangle with a RadialGradient."""

    @abstractmethod
    def stroke_lines(self, segments, colors, line_width):
        """Stroke (M, 2, 2) line segments with (M, 4) RGBA colors."""

    @abstractmethod
    def fill_circles(self, centers, radii, color):
        """Fill circles at (N, 2) centers with (N,) radii in one RGBA color."""


class MatplotlibContext(DrawingContext):
    """
    DrawingContext backed by a matplotlib figure.

    Matplotlib artists are retained rather than painted, so clearing resets
    the artists of the previous frame instead of erasing pixels.
    """

    def __init__(self, fig, element):
        """
        Args:
            fig: Matplotlib figure used as the canvas
            element: Canvas element owning the backing-store size
        """
        self.fig = fig
        self.element = element
        self.scale = 1.0

        self.ax = fig.add_axes([0, 0, 1, 1])
        self.ax.set_axis_off()
        self.ax.set_autoscale_on(False)

        self.image = None
        self._image_key = None

        self.lines = LineCollection([], linewidths=1.0, zorder=2)
        self.ax.add_collection(self.lines, autolim=False)

        self.dots = None

    def set_transform(self, scale):
        self.scale = float(scale)
        backing_w, backing_h = self.element.backing_size
        width = backing_w / self.scale
        height = backing_h / self.scale
        # Canvas space: origin top-left, y grows downward
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)

    def clear_rect(self, x, y, width, height):
        self.lines.set_segments([])
        if self.dots is not None:
            self.dots.remove()
            self.dots = None
        if self.image is not None:
            self.image.set_visible(False)

    def fill_rect(self, x, y, width, height, gradient):
        extent = (x, x + width, y + height, y)
        key = (id(gradient), extent)
        if self.image is None or self._image_key != key:
            data = gradient.render(x, y, width, height, samples=config.GRADIENT_SAMPLES)
            if self.image is None:
                self.image = self.ax.imshow(data, extent=extent, interpolation='bilinear',
                                            aspect='auto', zorder=0)
            else:
                self.image.set_data(data)
                self.image.set_extent(extent)
            self._image_key = key
        self.image.set_visible(True)

    def stroke_lines(self, segments, colors, line_width):
        self.lines.set_segments(segments)
        self.lines.set_colors(colors)
        # Line widths are in points; logical pixels are 1/LOGICAL_DPI inch
        self.lines.set_linewidth(line_width * 72.0 / config.LOGICAL_DPI)

    def fill_circles(self, centers, radii, color):
        if self.dots is not None:
            self.dots.remove()
        diameters = 2.0 * np.asarray(radii, dtype=float)
        self.dots = EllipseCollection(diameters, diameters, np.zeros(len(diameters)),
                                      units='xy', offsets=centers,
                                      offset_transform=self.ax.transData,
                                      facecolors=[color], edgecolors='none', zorder=3)
        self.ax.add_collection(self.dots, autolim=False)
