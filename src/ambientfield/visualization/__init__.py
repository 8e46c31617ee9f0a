"""
Visualization components for ambientfield.

This module contains frame rendering, drawing surfaces and color helpers.
"""

__all__ = ['renderer', 'surface', 'color_system']
