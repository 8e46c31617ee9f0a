import itertools
import os
import sys

# Allow running the suite from a checkout without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from ambientfield import config
from ambientfield.background import CanvasElement, Host
from ambientfield.visualization.surface import DrawingContext


class RecordingContext(DrawingContext):
    """Records every drawing call as (name, args)."""

    def __init__(self):
        self.calls = []

    def set_transform(self, scale):
        self.calls.append(('set_transform', (scale,)))

    def clear_rect(self, x, y, width, height):
        self.calls.append(('clear_rect', (x, y, width, height)))

    def fill_rect(self, x, y, width, height, gradient):
        self.calls.append(('fill_rect', (x, y, width, height, gradient)))

    def stroke_lines(self, segments, colors, line_width):
        self.calls.append(('stroke_lines', (segments, colors, line_width)))

    def fill_circles(self, centers, radii, color):
        self.calls.append(('fill_circles', (centers, radii, color)))

    def names(self):
        return [name for name, _ in self.calls]

    def last(self, name):
        for call_name, args in reversed(self.calls):
            if call_name == name:
                return args
        return None


class FakeElement(CanvasElement):

    def __init__(self, width=800, height=600):
        self.width = width
        self.height = height
        self.backing_size = None
        self.context = RecordingContext()
        self.context_requests = 0

    def client_size(self):
        return self.width, self.height

    def set_backing_size(self, width, height):
        self.backing_size = (width, height)

    def get_context(self):
        self.context_requests += 1
        return self.context


class FakeHost(Host):
    """Host whose frames fire only when the test calls fire()."""

    def __init__(self, element=None, reduced_motion=False, dpr=1.0, hidden=False):
        self.element = element
        self.reduced_motion = reduced_motion
        self.dpr = dpr
        self.hidden = hidden
        self.pending = {}
        self.requested = 0
        self.cancelled = []
        self.resize_callbacks = []
        self.visibility_callbacks = []
        self._handles = itertools.count(1)

    def prefers_reduced_motion(self):
        return self.reduced_motion

    def get_element(self, element_id):
        return self.element if element_id == config.MOUNT_ID else None

    def device_pixel_ratio(self):
        return self.dpr

    def is_hidden(self):
        return self.hidden

    def request_frame(self, callback):
        handle = next(self._handles)
        self.pending[handle] = callback
        self.requested += 1
        return handle

    def cancel_frame(self, handle):
        self.pending.pop(handle, None)
        self.cancelled.append(handle)

    def on_resize(self, callback):
        self.resize_callbacks.append(callback)

    def on_visibility_change(self, callback):
        self.visibility_callbacks.append(callback)

    def fire(self, elapsed_ms=16.0):
        due = list(self.pending.values())
        self.pending.clear()
        for callback in due:
            callback(elapsed_ms)
        return len(due)

    def resize(self, width, height, dpr=None):
        self.element.width = width
        self.element.height = height
        if dpr is not None:
            self.dpr = dpr
        for callback in list(self.resize_callbacks):
            callback()

    def set_hidden(self, hidden):
        self.hidden = hidden
        for callback in list(self.visibility_callbacks):
            callback()


@pytest.fixture
def element():
    return FakeElement(800, 600)


@pytest.fixture
def host(element):
    return FakeHost(element)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
