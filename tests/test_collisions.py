import pytest

from mechcore.collisions import (
    advance_blocks,
    elastic_velocities,
    enforce_bounds,
    handle_collisions,
    mass_to_size,
    resolve_wall,
)
from mechcore.data_models import Block, CollisionPair


def make_block(name, mass, x, v=0.0):
    return Block(name=name, mass=mass, x=x, v=v, size=mass_to_size(mass))


def make_pair(moving_x, moving_v, stationary_x, stationary_v=0.0, moving_mass=50.0, stationary_mass=100.0):
    return CollisionPair(
        moving=make_block("moving", moving_mass, moving_x, moving_v),
        stationary=make_block("stationary", stationary_mass, stationary_x, stationary_v),
        wall_x=10.0,
        far_x=1000.0,
    )


def test_mass_to_size():
    assert mass_to_size(100.0) == pytest.approx(100.0)
    assert mass_to_size(1.0) == pytest.approx(10.0)
    assert mass_to_size(0.0) == 0.0


def test_light_block_hits_heavy_block_at_rest():
    v_moving, v_stationary = elastic_velocities(50.0, -3.0, 100.0, 0.0)
    assert v_moving == pytest.approx(1.0)
    assert v_stationary == pytest.approx(-2.0)


@pytest.mark.parametrize("m1,v1,m2,v2", [
    (1.0, 5.0, 1.0, 0.0),
    (3.0, -2.0, 7.0, 4.0),
    (1000.0, -1.0, 1.0, 0.0),
])
def test_elastic_exchange_conserves_momentum_and_energy(m1, v1, m2, v2):
    u1, u2 = elastic_velocities(m1, v1, m2, v2)
    assert m1 * u1 + m2 * u2 == pytest.approx(m1 * v1 + m2 * v2)
    assert 0.5 * m1 * u1 ** 2 + 0.5 * m2 * u2 ** 2 == pytest.approx(0.5 * m1 * v1 ** 2 + 0.5 * m2 * v2 ** 2)


def test_equal_masses_swap_velocities():
    assert elastic_velocities(2.0, 3.0, 2.0, -1.0) == pytest.approx((-1.0, 3.0))


def test_advance_converts_meters_to_pixels():
    pair = make_pair(500.0, -3.0, 200.0)
    advance_blocks(pair, 0.1)
    assert pair.moving.x == pytest.approx(470.0)
    assert pair.stationary.x == pytest.approx(200.0)


def test_wall_reflects_block_moving_into_it():
    block = make_block("b", 100.0, 55.0, -2.0)  # left edge at 5 px, past the wall
    assert resolve_wall(block, 10.0) is True
    assert block.v == pytest.approx(2.0)
    assert block.left == pytest.approx(10.5)


def test_wall_does_not_reflect_block_moving_away():
    block = make_block("b", 100.0, 55.0, 2.0)
    assert resolve_wall(block, 10.0) is False
    assert block.v == pytest.approx(2.0)
    assert block.left == pytest.approx(10.5)


def test_block_contact_exchanges_velocity_and_separates():
    # moving block (size ~70.7) overlaps the right side of the stationary block
    pair = make_pair(moving_x=280.0, moving_v=-3.0, stationary_x=200.0)
    msg = handle_collisions(pair)
    assert msg is not None
    assert pair.collision_count == 1
    assert pair.moving.v == pytest.approx(1.0)
    assert pair.stationary.v == pytest.approx(-2.0)
    assert pair.moving.left == pytest.approx(pair.stationary.right + 0.01)


def test_separation_keeps_left_block_on_the_left():
    # centers decide the side, even when the moving block is moving right
    pair = make_pair(moving_x=150.0, moving_v=3.0, stationary_x=200.0)
    handle_collisions(pair)
    assert pair.moving.right == pytest.approx(pair.stationary.left - 0.01)
    assert pair.moving.x < pair.stationary.x


def test_no_collision_when_apart():
    pair = make_pair(moving_x=800.0, moving_v=-3.0, stationary_x=200.0)
    assert handle_collisions(pair) is None
    assert pair.collision_count == 0


def test_far_boundary_requests_reset():
    pair = make_pair(moving_x=500.0, moving_v=0.0, stationary_x=960.0, stationary_v=2.0)
    assert enforce_bounds(pair) is True
    assert pair.stationary.v == 0.0
    assert pair.stationary.right == pytest.approx(1000.0)


def test_far_boundary_moving_inward_is_only_clamped():
    pair = make_pair(moving_x=500.0, moving_v=0.0, stationary_x=960.0, stationary_v=-2.0)
    assert enforce_bounds(pair) is False
    assert pair.stationary.v == -2.0
    assert pair.stationary.right == pytest.approx(1000.0)


def test_moving_block_stops_at_far_boundary():
    pair = make_pair(moving_x=990.0, moving_v=4.0, stationary_x=200.0)
    assert enforce_bounds(pair) is False
    assert pair.moving.v == 0.0
    assert pair.moving.right == pytest.approx(1000.0)
