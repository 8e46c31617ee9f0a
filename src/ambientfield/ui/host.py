"""
Matplotlib hosts for the ambientfield background.

MatplotlibHost runs the loop in an interactive figure window: frame
requests become single-shot canvas timers, figure resize events become
resize notifications, and the space key (or closing the window) toggles
page visibility. OfflineHost renders into an Agg figure and fires frames
only when stepped, which is what saving an animation needs.
"""

import itertools
import logging
import time

from matplotlib.animation import FuncAnimation
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from .. import config
from ..background import CanvasElement, Host
from ..visualization.surface import MatplotlibContext

logger = logging.getLogger(__name__)


class MatplotlibCanvasElement(CanvasElement):
    """The whole figure acts as the canvas element."""

    def __init__(self, fig):
        self.fig = fig
        self.backing_size = (0, 0)
        self._context = None

    def client_size(self):
        width_in, height_in = self.fig.get_size_inches()
        return width_in * config.LOGICAL_DPI, height_in * config.LOGICAL_DPI

    def set_backing_size(self, width, height):
        self.backing_size = (int(width), int(height))

    def get_context(self):
        if self._context is None:
            self._context = MatplotlibContext(self.fig, self)
        return self._context


class MatplotlibHost(Host):
    """
    Host backed by a matplotlib figure canvas.

    Args:
        fig: Figure to draw into (a pyplot figure is created when None)
        size (tuple, optional): Logical (width, height) of a created figure
        reduced_motion (bool): Reported reduced-motion preference
        device_pixel_ratio (float, optional): Override for the canvas ratio
        interval (int, optional): Milliseconds between frames
    """

    def __init__(self, fig=None, size=None, reduced_motion=False, device_pixel_ratio=None,
                 interval=None):
        if fig is None:
            import matplotlib.pyplot as plt
            width, height = size if size is not None else config.DEFAULT_WINDOW_SIZE
            fig = plt.figure(figsize=(width / config.LOGICAL_DPI, height / config.LOGICAL_DPI),
                             facecolor=config.BACKGROUND_COLOR)
            try:
                fig.canvas.manager.set_window_title(config.WINDOW_TITLE)
            except AttributeError:
                pass  # headless canvases have no manager
        self.fig = fig
        self.reduced_motion = reduced_motion
        self._dpr_override = device_pixel_ratio
        self.interval = interval if interval is not None else config.FRAME_INTERVAL

        self.element = MatplotlibCanvasElement(fig)
        self.hidden = False
        self.closed = False
        self._handles = itertools.count(1)
        self._timers = {}
        self._resize_callbacks = []
        self._visibility_callbacks = []
        self._t0 = time.perf_counter()

        self.fig.canvas.mpl_connect('resize_event', self._on_resize_event)
        self.fig.canvas.mpl_connect('key_press_event', self._on_key_press)
        self.fig.canvas.mpl_connect('close_event', self._on_close)

    # Host interface

    def prefers_reduced_motion(self):
        return self.reduced_motion

    def get_element(self, element_id):
        return self.element if element_id == config.MOUNT_ID else None

    def device_pixel_ratio(self):
        if self._dpr_override is not None:
            return self._dpr_override
        return getattr(self.fig.canvas, 'device_pixel_ratio', 1)

    def is_hidden(self):
        return self.hidden

    def elapsed_ms(self):
        return (time.perf_counter() - self._t0) * 1000.0

    def request_frame(self, callback):
        handle = next(self._handles)
        timer = self.fig.canvas.new_timer(interval=self.interval)
        timer.single_shot = True
        timer.add_callback(self._fire, handle, callback)
        self._timers[handle] = timer
        timer.start()
        return handle

    def cancel_frame(self, handle):
        timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.stop()

    def on_resize(self, callback):
        self._resize_callbacks.append(callback)

    def on_visibility_change(self, callback):
        self._visibility_callbacks.append(callback)

    # Event plumbing

    def set_hidden(self, hidden):
        """Change page visibility and notify listeners when it changes."""
        hidden = bool(hidden)
        if hidden == self.hidden:
            return
        self.hidden = hidden
        for callback in list(self._visibility_callbacks):
            callback()

    def _fire(self, handle, callback):
        if self._timers.pop(handle, None) is None:
            return  # cancelled after the timer was already queued
        try:
            callback(self.elapsed_ms())
        except Exception:
            logger.exception("background frame failed; animation stopped")
            self._cancel_all()
            return
        self.fig.canvas.draw_idle()

    def _cancel_all(self):
        for handle in list(self._timers):
            self.cancel_frame(handle)

    def _on_resize_event(self, event):
        for callback in list(self._resize_callbacks):
            try:
                callback()
            except Exception:
                logger.exception("background resize failed")

    def _on_key_press(self, event):
        if event.key == ' ':
            self.set_hidden(not self.hidden)

    def _on_close(self, event):
        # Closing the window tears the page down
        self.closed = True
        self.set_hidden(True)
        self._cancel_all()

    def show(self):
        import matplotlib.pyplot as plt
        plt.show()


class OfflineHost(MatplotlibHost):
    """
    Headless host on an Agg figure; frames fire only through step().

    Args:
        width (float): Logical canvas width
        height (float): Logical canvas height
        reduced_motion (bool): Reported reduced-motion preference
        device_pixel_ratio (float, optional): Reported device pixel ratio
        interval (int, optional): Milliseconds per animation frame
    """

    def __init__(self, width=None, height=None, reduced_motion=False,
                 device_pixel_ratio=1.0, interval=None):
        default_w, default_h = config.DEFAULT_WINDOW_SIZE
        width = default_w if width is None else width
        height = default_h if height is None else height
        fig = Figure(figsize=(width / config.LOGICAL_DPI, height / config.LOGICAL_DPI),
                     facecolor=config.BACKGROUND_COLOR)
        FigureCanvasAgg(fig)
        self._pending = {}
        super().__init__(fig, reduced_motion=reduced_motion,
                         device_pixel_ratio=device_pixel_ratio, interval=interval)
        self.clock_ms = 0.0

    def elapsed_ms(self):
        return self.clock_ms

    def request_frame(self, callback):
        handle = next(self._handles)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle):
        self._pending.pop(handle, None)

    @property
    def pending_frames(self):
        return len(self._pending)

    def step(self, elapsed_ms=None):
        """
        Fire the callbacks pending at this moment.

        Args:
            elapsed_ms (float, optional): Clock value passed to the callbacks;
                advances the clock by one interval when omitted

        Returns:
            int: Number of callbacks fired
        """
        self.clock_ms = self.clock_ms + self.interval if elapsed_ms is None else float(elapsed_ms)
        due = list(self._pending.items())
        self._pending.clear()
        for _, callback in due:
            callback(self.clock_ms)
        return len(due)

    def _cancel_all(self):
        self._pending.clear()


def animate(host, loop, frames, save_path=None, fps=None):
    """
    Drive an OfflineHost through FuncAnimation.

    Args:
        host (OfflineHost): Host the loop was started on
        loop (BackgroundLoop): Running loop
        frames (int): Number of frames to render
        save_path (str, optional): Output file (.gif uses Pillow, others ffmpeg)
        fps (int, optional): Playback rate, derived from the host interval by default

    Returns:
        FuncAnimation: The animation object
    """
    if fps is None:
        fps = max(1, int(round(1000.0 / host.interval)))

    ctx = loop.ctx

    def update_frame(frame):
        host.step((frame + 1) * host.interval)
        artists = [ctx.lines]
        if ctx.image is not None:
            artists.append(ctx.image)
        if ctx.dots is not None:
            artists.append(ctx.dots)
        return artists

    # An empty init_func keeps the initial draw from stepping the clock
    anim = FuncAnimation(host.fig, update_frame, frames=frames, init_func=lambda: [],
                         interval=host.interval, blit=False, repeat=False)
    if save_path is not None:
        writer = 'pillow' if str(save_path).lower().endswith('.gif') else None
        anim.save(save_path, writer=writer, fps=fps,
                  dpi=config.LOGICAL_DPI * loop.dpr)
        logger.info("saved %d frames to %s", frames, save_path)
    return anim
