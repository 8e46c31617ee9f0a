"""
Physics simulation components for ambientfield.

This module contains the particle system and the connection pair search.
"""

__all__ = ['particle_system', 'connections']
