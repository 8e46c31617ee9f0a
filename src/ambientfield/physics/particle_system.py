"""
Particle system module for ambientfield.

This module handles particle seeding from the viewport density heuristic,
the closed-form flow field, damped Euler integration and the wraparound of
particles that drift outside the inflated viewport.
"""

import math

import numpy as np

from .. import config

# One fixed-shape record per particle
PARTICLE_DTYPE = np.dtype([
    ('x', np.float64),
    ('y', np.float64),
    ('vx', np.float64),
    ('vy', np.float64),
    ('r', np.float64),
    ('phase', np.float64),
])


def particle_count(width, height):
    """
    Number of particles for a viewport using the density heuristic.

    Args:
        width (float): Logical viewport width
        height (float): Logical viewport height

    Returns:
        int: floor(width * height / DENSITY_AREA) clamped to
            [MIN_PARTICLES, MAX_PARTICLES]
    """
    base = int(math.floor((width * height) / config.DENSITY_AREA))
    return max(config.MIN_PARTICLES, min(config.MAX_PARTICLES, base))


def create_particles(width, height, rng=None):
    """
    Create a fresh particle set scattered uniformly over the viewport.

    Args:
        width (float): Logical viewport width
        height (float): Logical viewport height
        rng (np.random.Generator, optional): Random source, defaults to a
            freshly seeded generator

    Returns:
        np.ndarray: Structured array of PARTICLE_DTYPE records
    """
    if width < 0 or height < 0:
        raise ValueError(f"viewport size must be non-negative, got {width}x{height}")
    if rng is None:
        rng = np.random.default_rng()

    n = particle_count(width, height)
    particles = np.zeros(n, dtype=PARTICLE_DTYPE)
    particles['x'] = rng.uniform(0.0, width, n)
    particles['y'] = rng.uniform(0.0, height, n)
    particles['vx'] = rng.uniform(-config.INITIAL_SPEED, config.INITIAL_SPEED, n)
    particles['vy'] = rng.uniform(-config.INITIAL_SPEED, config.INITIAL_SPEED, n)
    particles['r'] = rng.uniform(*config.RADIUS_RANGE, n)
    particles['phase'] = rng.uniform(*config.PHASE_RANGE, n)
    return particles


def flow_field(particles, t):
    """
    Evaluate the flow field forcing at every particle.

    The field depends only on each particle's own position and phase plus
    the global time, so no state is shared between particles.

    Args:
        particles (np.ndarray): Particle records
        t (float): Animation time in seconds

    Returns:
        tuple: (fx, fy) arrays, each bounded by FLOW_STRENGTH in magnitude
    """
    phase = particles['phase']
    fx = np.sin(particles['y'] / config.FLOW_SCALE_Y + t + phase) * config.FLOW_STRENGTH
    fy = np.cos(particles['x'] / config.FLOW_SCALE_X - t + phase) * config.FLOW_STRENGTH
    return fx, fy


def wrap_positions(particles, width, height):
    """Wrap positions that left the inflated viewport to the opposite edge."""
    margin = config.WRAP_MARGIN
    x = particles['x']
    y = particles['y']

    x[x < -margin] = width + margin
    x[x > width + margin] = -margin
    y[y < -margin] = height + margin
    y[y > height + margin] = -margin


def update_particles(particles, t, width, height):
    """
    Advance every particle by one frame, in place.

    Args:
        particles (np.ndarray): Particle records, mutated in place
        t (float): Animation time in seconds
        width (float): Logical viewport width
        height (float): Logical viewport height

    Returns:
        np.ndarray: The same particle array
    """
    if len(particles) == 0:
        return particles

    fx, fy = flow_field(particles, t)

    # Additive forcing, multiplicative damping
    particles['vx'] = (particles['vx'] + fx) * config.DAMPING
    particles['vy'] = (particles['vy'] + fy) * config.DAMPING

    particles['x'] += particles['vx']
    particles['y'] += particles['vy']

    wrap_positions(particles, width, height)
    return particles


def velocity_bound(initial_speed=None):
    """
    Upper bound on any velocity component over arbitrarily many frames.

    With |f| <= FLOW_STRENGTH and damping d < 1 the recurrence
    v' = (v + f) * d never exceeds max(|v0|, d * FLOW_STRENGTH / (1 - d)).
    """
    if initial_speed is None:
        initial_speed = config.INITIAL_SPEED
    steady = config.DAMPING * config.FLOW_STRENGTH / (1.0 - config.DAMPING)
    return max(abs(initial_speed), steady)
