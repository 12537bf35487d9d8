import pytest

from mechcore.forces import (
    apply_linear_drag,
    centrifugal_force,
    driven_acceleration,
    driving_direction,
    friction_force,
    gravity_step,
    snap_to_rest,
    spring_acceleration,
    spring_force,
    viscous_drag_force,
)


def test_gravity_step():
    assert gravity_step(10.0, 9.8, 0.1) == pytest.approx(9.02)


def test_linear_drag_is_multiplicative():
    assert apply_linear_drag((10.0, -4.0), 0.5, 0.1) == pytest.approx((9.5, -3.8))


def test_zero_drag_leaves_velocity_alone():
    assert apply_linear_drag((10.0, -4.0), 0.0, 0.1) == (10.0, -4.0)


def test_stretched_spring_pulls_toward_anchor():
    fx, fy = spring_force((0.0, 0.0), (10.0, 0.0), k=2.0, rest_length=5.0)
    assert fx == pytest.approx(10.0)
    assert fy == pytest.approx(0.0)


def test_compressed_spring_pushes_away():
    fx, _ = spring_force((0.0, 0.0), (3.0, 0.0), k=2.0, rest_length=5.0)
    assert fx == pytest.approx(-4.0)


def test_spring_at_anchor_contributes_nothing():
    assert spring_force((1.0, 1.0), (1.0, 1.0), 5.0, 2.0) == (0.0, 0.0)


def test_spring_acceleration_divides_by_mass():
    ax, _ = spring_acceleration((0.0, 0.0), (10.0, 0.0), 2.0, 5.0, mass=4.0)
    assert ax == pytest.approx(2.5)


def test_viscous_drag_opposes_velocity():
    assert viscous_drag_force((2.0, -1.0), 0.5) == (-1.0, 0.5)


def test_friction_opposes_motion_and_vanishes_at_rest():
    assert friction_force(3.0, 0.1, 50.0) == pytest.approx(-49.05)
    assert friction_force(-3.0, 0.1, 50.0) == pytest.approx(49.05)
    assert friction_force(0.0, 0.1, 50.0) == 0.0


def test_driving_direction_defaults_to_negative_at_rest():
    assert driving_direction(2.0) == 1.0
    assert driving_direction(-2.0) == -1.0
    assert driving_direction(0.0) == -1.0


def test_driven_acceleration_combines_force_and_friction():
    # pushed along -x at 200 N, friction 0.1 * 50 * 9.81 against the motion
    assert driven_acceleration(-3.0, 200.0, 0.1, 50.0) == pytest.approx((-200.0 + 49.05) / 50.0)


def test_snap_to_rest():
    assert snap_to_rest(0.005) == 0.0
    assert snap_to_rest(-0.005) == 0.0
    assert snap_to_rest(0.5) == 0.5


def test_centrifugal_force():
    assert centrifugal_force(2.0, 3.0, 4.0) == pytest.approx(72.0)
