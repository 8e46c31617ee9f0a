import math

import numpy as np
import pytest

from ambientfield import config
from ambientfield.physics.particle_system import (
    PARTICLE_DTYPE,
    create_particles,
    flow_field,
    particle_count,
    update_particles,
    velocity_bound,
    wrap_positions,
)


def make_particle(x, y, vx=0.0, vy=0.0, r=1.5, phase=0.0):
    particles = np.zeros(1, dtype=PARTICLE_DTYPE)
    particles[0] = (x, y, vx, vy, r, phase)
    return particles


def assert_inside_inflated_viewport(particles, width, height):
    margin = config.WRAP_MARGIN
    assert np.all(particles['x'] >= -margin)
    assert np.all(particles['x'] <= width + margin)
    assert np.all(particles['y'] >= -margin)
    assert np.all(particles['y'] <= height + margin)


@pytest.mark.parametrize("width, height, expected", [
    (400, 400, 55),      # floor(160000 / 22000) = 7, raised to the minimum
    (2000, 2000, 150),   # floor(4000000 / 22000) = 181, capped
    (1280, 1280, 74),    # floor(1638400 / 22000) = 74
    (0, 0, 55),
])
def test_particle_count_density_heuristic(width, height, expected):
    assert particle_count(width, height) == expected


def test_create_particles_ranges(rng):
    width, height = 1600, 900
    particles = create_particles(width, height, rng)

    assert particles.dtype == PARTICLE_DTYPE
    assert len(particles) == particle_count(width, height)
    assert np.all((particles['x'] >= 0) & (particles['x'] < width))
    assert np.all((particles['y'] >= 0) & (particles['y'] < height))
    assert np.all(np.abs(particles['vx']) <= 0.35)
    assert np.all(np.abs(particles['vy']) <= 0.35)
    assert np.all((particles['r'] >= 1.0) & (particles['r'] < 2.2))
    assert np.all((particles['phase'] >= 0) & (particles['phase'] < 2 * math.pi))


def test_create_particles_rejects_negative_size(rng):
    with pytest.raises(ValueError):
        create_particles(-1, 100, rng)


def test_create_particles_without_rng():
    particles = create_particles(500, 500)
    assert len(particles) == 55


def test_flow_field_closed_form():
    particles = make_particle(x=110.0, y=90.0, phase=0.3)
    t = 1.25

    fx, fy = flow_field(particles, t)

    assert fx[0] == pytest.approx(math.sin(90.0 / 180 + t + 0.3) * 0.04)
    assert fy[0] == pytest.approx(math.cos(110.0 / 220 - t + 0.3) * 0.04)


def test_update_integrates_forcing_then_damping():
    particles = make_particle(x=50.0, y=60.0, vx=0.2, vy=-0.1, phase=1.0)
    t = 0.5
    fx = math.sin(60.0 / 180 + t + 1.0) * 0.04
    fy = math.cos(50.0 / 220 - t + 1.0) * 0.04
    vx = (0.2 + fx) * 0.994
    vy = (-0.1 + fy) * 0.994

    update_particles(particles, t, 400, 300)

    assert particles['vx'][0] == pytest.approx(vx)
    assert particles['vy'][0] == pytest.approx(vy)
    assert particles['x'][0] == pytest.approx(50.0 + vx)
    assert particles['y'][0] == pytest.approx(60.0 + vy)


def test_update_wraps_right_edge_to_left():
    width, height = 400, 300
    particles = make_particle(x=width + 21, y=150.0)

    update_particles(particles, 0.0, width, height)

    assert particles['x'][0] == -20.0
    assert_inside_inflated_viewport(particles, width, height)


def test_update_wraps_top_edge_to_bottom():
    width, height = 400, 300
    particles = make_particle(x=200.0, y=-25.0)

    update_particles(particles, 0.0, width, height)

    assert particles['y'][0] == height + 20.0


def test_wrap_positions_each_axis_independently():
    particles = np.zeros(3, dtype=PARTICLE_DTYPE)
    particles['x'] = [-20.5, 100.0, 420.5]
    particles['y'] = [50.0, 330.0, -20.0]

    wrap_positions(particles, 400, 300)

    assert list(particles['x']) == [420.0, 100.0, -20.0]
    assert list(particles['y']) == [50.0, -20.0, -20.0]


def test_update_empty_set_is_noop():
    particles = np.zeros(0, dtype=PARTICLE_DTYPE)
    assert len(update_particles(particles, 1.0, 100, 100)) == 0


def test_positions_stay_in_inflated_viewport(rng):
    width, height = 640, 480
    particles = create_particles(width, height, rng)

    for frame in range(2000):
        update_particles(particles, frame * 0.016, width, height)
        assert_inside_inflated_viewport(particles, width, height)


def test_velocity_stays_bounded_over_many_frames(rng):
    width, height = 800, 600
    particles = create_particles(width, height, rng)
    bound = velocity_bound()

    for frame in range(10000):
        update_particles(particles, frame * 0.016, width, height)
        assert np.all(np.abs(particles['vx']) <= bound + 1e-9)
        assert np.all(np.abs(particles['vy']) <= bound + 1e-9)

    speeds = np.hypot(particles['vx'], particles['vy'])
    assert np.all(speeds < math.sqrt(2) * bound + 1e-9)


def test_velocity_bound_value():
    assert velocity_bound() == pytest.approx(0.994 * 0.04 / 0.006)
    assert velocity_bound(initial_speed=10.0) == 10.0
