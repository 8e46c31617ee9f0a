"""
ambientfield: a flow-field particle background for a portfolio page.

This package provides the particle simulation, the frame renderer and the
visibility-aware animation loop, plus matplotlib hosts to run it.
"""

from .background import BackgroundLoop, LoopState, start_background

__version__ = "0.1.0"

__all__ = ['BackgroundLoop', 'LoopState', 'start_background']
