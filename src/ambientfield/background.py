"""
Background animation loop for ambientfield.

BackgroundLoop owns the particle set, the viewport state and the handle of
the pending frame request. The host environment drives it through three
entry points: start(), on_resize() and on_visibility_change(). Frames are
requested one at a time; each frame updates, draws and requests the next.
"""

import enum
import logging
import math
from abc import ABC, abstractmethod

import numpy as np

from . import config
from .physics.particle_system import PARTICLE_DTYPE, create_particles, update_particles
from .visualization.renderer import VignetteCache, draw_frame

logger = logging.getLogger(__name__)


class CanvasElement(ABC):
    """Render target the loop mounts on."""

    @abstractmethod
    def client_size(self):
        """Return the rendered (width, height) in logical pixels."""

    @abstractmethod
    def set_backing_size(self, width, height):
        """Resize the backing store to integer device pixels."""

    @abstractmethod
    def get_context(self):
        """Return the DrawingContext for this element."""


class Host(ABC):
    """Environment services the loop consumes."""

    @abstractmethod
    def prefers_reduced_motion(self):
        """True when the user asked for minimal animation."""

    @abstractmethod
    def get_element(self, element_id):
        """Look up a CanvasElement by id, or None when it is absent."""

    @abstractmethod
    def device_pixel_ratio(self):
        """Current device pixel ratio (may be None or 0 when unknown)."""

    @abstractmethod
    def is_hidden(self):
        """True while the page is not visible."""

    @abstractmethod
    def request_frame(self, callback):
        """
        Schedule callback(elapsed_ms) for the next display refresh.

        Returns:
            A handle accepted by cancel_frame
        """

    @abstractmethod
    def cancel_frame(self, handle):
        """Guarantee the callback behind handle will not fire."""

    @abstractmethod
    def on_resize(self, callback):
        """Register callback() for viewport size changes."""

    @abstractmethod
    def on_visibility_change(self, callback):
        """Register callback() for visibility changes."""


class LoopState(enum.Enum):
    STOPPED = 'stopped'
    RUNNING = 'running'


def clamp_device_pixel_ratio(dpr):
    """Treat a missing ratio as 1 and clamp to the configured range."""
    if not dpr:
        dpr = 1.0
    return max(config.MIN_DEVICE_PIXEL_RATIO, min(config.MAX_DEVICE_PIXEL_RATIO, float(dpr)))


class BackgroundLoop:
    """
    Flow-field particle background bound to a host.

    The loop is STOPPED on construction; start() is the only way into
    RUNNING. Hiding the page cancels the pending frame, showing it again
    requests exactly one new frame.
    """

    def __init__(self, host, mount_id=None, rng=None):
        self.host = host
        self.mount_id = mount_id if mount_id is not None else config.MOUNT_ID
        self.rng = rng if rng is not None else np.random.default_rng()

        self.element = None
        self.ctx = None
        self.width = 0.0
        self.height = 0.0
        self.dpr = 1.0
        self.particles = np.zeros(0, dtype=PARTICLE_DTYPE)

        self.frame_handle = None
        self.started = False
        self.frame_count = 0
        self.vignette = VignetteCache()

    @property
    def state(self):
        return LoopState.RUNNING if self.frame_handle is not None else LoopState.STOPPED

    def start(self):
        """
        Mount on the host and request the first frame.

        Returns:
            bool: True when the loop started, False when the mount target is
                missing, reduced motion is preferred, or it already started
        """
        if self.started:
            return False

        element = self.host.get_element(self.mount_id)
        if element is None:
            logger.debug("mount target %r not found; background disabled", self.mount_id)
            return False
        if self.host.prefers_reduced_motion():
            logger.debug("reduced motion preferred; background disabled")
            return False

        self.element = element
        self.ctx = element.get_context()
        self.host.on_resize(self.on_resize)
        self.host.on_visibility_change(self.on_visibility_change)
        self.started = True

        self.on_resize()
        self._request_frame()
        return True

    def on_resize(self):
        """Resize the backing store to the element and reseed the particles."""
        if not self.started:
            return

        self.dpr = clamp_device_pixel_ratio(self.host.device_pixel_ratio())
        width, height = self.element.client_size()
        self.width = float(width)
        self.height = float(height)

        self.element.set_backing_size(int(math.floor(self.width * self.dpr)),
                                      int(math.floor(self.height * self.dpr)))
        self.ctx.set_transform(self.dpr)
        self.reseed()

    def reseed(self):
        self.particles = create_particles(self.width, self.height, self.rng)
        logger.debug("seeded %d particles for %gx%g @%gx",
                     len(self.particles), self.width, self.height, self.dpr)

    def on_visibility_change(self):
        if not self.started:
            return

        if self.host.is_hidden():
            if self.frame_handle is not None:
                self.host.cancel_frame(self.frame_handle)
                self.frame_handle = None
                logger.debug("page hidden; animation suspended")
        elif self.frame_handle is None:
            self._request_frame()
            logger.debug("page visible; animation resumed")

    def step(self, t):
        """Advance the simulation to time t (seconds) and draw it."""
        update_particles(self.particles, t, self.width, self.height)
        draw_frame(self.ctx, self.particles, self.width, self.height, self.vignette)
        self.frame_count += 1

    def _on_frame(self, elapsed_ms):
        # The handle is spent once its callback runs
        self.frame_handle = None
        self.step((elapsed_ms or 0) * 0.001)
        self._request_frame()

    def _request_frame(self):
        self.frame_handle = self.host.request_frame(self._on_frame)


def start_background(host, mount_id=None, rng=None):
    """
    Start the background on a host without ever raising.

    Returns:
        BackgroundLoop or None: The loop when it started, None otherwise
    """
    try:
        loop = BackgroundLoop(host, mount_id=mount_id, rng=rng)
        if loop.start():
            return loop
    except Exception:
        logger.warning("background animation failed to start", exc_info=True)
    return None
