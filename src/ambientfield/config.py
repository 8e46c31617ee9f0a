"""
Configuration module for the ambientfield background.

This module contains the constants used by the particle simulation, the
renderer and the hosts. Values are read at call time, so tests and the CLI
can override them by assigning to the module attributes.
"""

import math

# Mount target looked up on the host
MOUNT_ID = 'bg-canvas'

# Device pixel ratio clamp for the backing store
MIN_DEVICE_PIXEL_RATIO = 1.0
MAX_DEVICE_PIXEL_RATIO = 2.0

# Density heuristic: one particle per DENSITY_AREA px², clamped
DENSITY_AREA = 22000
MIN_PARTICLES = 55
MAX_PARTICLES = 150  # bounds the O(n²) connection pass (~11k pairs)

# Seeding ranges
INITIAL_SPEED = 0.35  # vx, vy drawn from [-INITIAL_SPEED, INITIAL_SPEED)
RADIUS_RANGE = (1.0, 2.2)
PHASE_RANGE = (0.0, 2 * math.pi)

# Flow field
FLOW_SCALE_X = 220.0   # divides x in the fy term
FLOW_SCALE_Y = 180.0   # divides y in the fx term
FLOW_STRENGTH = 0.04
DAMPING = 0.994

# Particles may drift this far outside the viewport before wrapping
WRAP_MARGIN = 20.0

# Connection lines
LINK_DISTANCE = 140.0
LINK_MAX_ALPHA = 0.18
LINK_WIDTH = 1.0
LINK_RGB = (255, 255, 255)

# Particle dots
DOT_RGB = (255, 255, 255)
DOT_ALPHA = 0.22

# Vignette
VIGNETTE_RADIUS_FACTOR = 0.8
VIGNETTE_EDGE_ALPHA = 0.45
GRADIENT_SAMPLES = 128  # image resolution per axis for gradient fills

# Matplotlib host
FRAME_INTERVAL = 16  # milliseconds between frame callbacks (~60 FPS)
BACKGROUND_COLOR = "#0b0d12"
DEFAULT_WINDOW_SIZE = (1280, 720)  # logical pixels
LOGICAL_DPI = 100  # logical pixels per figure inch
WINDOW_TITLE = "ambientfield"
