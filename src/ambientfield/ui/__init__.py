"""
Host environments for ambientfield.
"""

__all__ = ['host']
