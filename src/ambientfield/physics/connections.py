"""
Connection computation module for ambientfield.

This module finds every unordered pair of particles closer than the link
distance and derives the opacity of the line joining them. The pair search
uses a k-d tree so the dense O(n²) sweep is only paid when particles cluster.
"""

import numpy as np
from scipy.spatial import cKDTree

from .. import config


def link_alpha(distance, max_distance=None, max_alpha=None):
    """
    Opacity of a connection line with linear falloff.

    Args:
        distance (float or np.ndarray): Euclidean distance between the pair
        max_distance (float, optional): Link threshold, defaults to LINK_DISTANCE
        max_alpha (float, optional): Opacity at zero distance, defaults to LINK_MAX_ALPHA

    Returns:
        float or np.ndarray: (1 - d / max_distance) * max_alpha, and 0 at or
            beyond the threshold
    """
    if max_distance is None:
        max_distance = config.LINK_DISTANCE
    if max_alpha is None:
        max_alpha = config.LINK_MAX_ALPHA
    alpha = (1.0 - np.asarray(distance, dtype=float) / max_distance) * max_alpha
    alpha = np.where(np.asarray(distance) < max_distance, alpha, 0.0)
    if alpha.ndim == 0:
        return float(alpha)
    return alpha


def find_connections(particles, max_distance=None):
    """
    Find all unordered particle pairs closer than max_distance.

    Args:
        particles (np.ndarray): Particle records
        max_distance (float, optional): Link threshold, defaults to LINK_DISTANCE

    Returns:
        tuple: (pairs, distances) where pairs has shape (M, 2) with i < j
            and distances has shape (M,), every entry strictly below the threshold
    """
    if max_distance is None:
        max_distance = config.LINK_DISTANCE

    if len(particles) < 2:
        return np.empty((0, 2), dtype=int), np.empty(0)

    positions = np.column_stack((particles['x'], particles['y']))
    tree = cKDTree(positions)
    pairs = tree.query_pairs(max_distance, output_type='ndarray')
    if len(pairs) == 0:
        return np.empty((0, 2), dtype=int), np.empty(0)

    deltas = positions[pairs[:, 0]] - positions[pairs[:, 1]]
    distances = np.hypot(deltas[:, 0], deltas[:, 1])

    # query_pairs is inclusive of the radius; links need a strict bound
    keep = distances < max_distance
    pairs = pairs[keep]
    distances = distances[keep]

    # Stable order keeps draw output reproducible for a given state
    order = np.lexsort((pairs[:, 1], pairs[:, 0]))
    return pairs[order], distances[order]


def build_connection_segments(particles, max_distance=None):
    """
    Build line segments and opacities for the connection pass.

    Returns:
        tuple: (segments, alphas) with segments shaped (M, 2, 2)
    """
    pairs, distances = find_connections(particles, max_distance)
    if len(pairs) == 0:
        return np.empty((0, 2, 2)), np.empty(0)

    segments = np.zeros((len(pairs), 2, 2))
    segments[:, 0, 0] = particles['x'][pairs[:, 0]]
    segments[:, 0, 1] = particles['y'][pairs[:, 0]]
    segments[:, 1, 0] = particles['x'][pairs[:, 1]]
    segments[:, 1, 1] = particles['y'][pairs[:, 1]]

    return segments, link_alpha(distances, max_distance)
