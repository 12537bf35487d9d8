import math

import pytest

from mechcore.data_models import Block, CollisionPair, PendulumChain, PendulumSegment, SpringSet
from mechcore.energy import (
    chain_mechanical_energy,
    collision_diagnostics,
    energy_loss,
    kinetic_energy,
    momentum,
    pendulum_potential,
    segment_stats,
    spring_potential,
    spring_set_energy,
)
from mechcore.pendulum import enable_segment


def test_basic_formulas():
    assert kinetic_energy(2.0, 3.0) == pytest.approx(9.0)
    assert spring_potential(4.0, 7.0, 5.0) == pytest.approx(8.0)
    assert spring_potential(4.0, 3.0, 5.0) == pytest.approx(8.0)
    assert momentum((50.0, 100.0), (-3.0, 0.0)) == pytest.approx(-150.0)


def test_pendulum_potential_is_zero_at_bottom():
    assert pendulum_potential(1.0, 9.8, 10.0, 0.0) == 0.0
    assert pendulum_potential(1.0, 9.8, 10.0, math.pi / 2) == pytest.approx(98.0)
    assert pendulum_potential(1.0, 9.8, 10.0, math.pi) == pytest.approx(196.0)


def test_energy_loss_never_negative():
    assert energy_loss(100.0, 60.0, 30.0) == pytest.approx(10.0)
    assert energy_loss(100.0, 80.0, 30.0) == 0.0


def test_segment_stats():
    seg = PendulumSegment(theta=math.pi / 2, omega=2.0, length=10.0, mass=1.0)
    stats = segment_stats(seg, 9.8)
    assert stats["speed"] == pytest.approx(20.0)
    assert stats["kinetic"] == pytest.approx(200.0)
    assert stats["potential"] == pytest.approx(98.0)
    assert stats["total"] == pytest.approx(298.0)
    assert stats["angle_deg"] == pytest.approx(90.0)


def test_hanging_chain_has_no_energy():
    chain = PendulumChain()
    enable_segment(chain, 1)
    enable_segment(chain, 2)
    assert chain_mechanical_energy(chain, 9.8) == pytest.approx(
        {"kinetic": 0.0, "potential": 0.0, "total": 0.0}, abs=1e-12
    )


def test_single_segment_chain_matches_segment_stats():
    chain = PendulumChain()
    seg = chain.segments[0]
    seg.theta, seg.omega = 0.7, -1.3
    stats = segment_stats(seg, 9.8)
    energy = chain_mechanical_energy(chain, 9.8)
    assert energy["total"] == pytest.approx(stats["total"])
    assert energy["kinetic"] == pytest.approx(stats["kinetic"])


def test_lower_bob_inherits_upper_motion():
    chain = PendulumChain()
    enable_segment(chain, 1)
    chain.segments[0].omega = 1.0
    energy = chain_mechanical_energy(chain, 9.8)
    # Both bobs move at L*omega = 10 m/s.
    assert energy["kinetic"] == pytest.approx(2 * 0.5 * 100.0)


def test_spring_set_energy():
    spring_set = SpringSet()
    spring_set.mass.position = (1.0, 0.0)
    spring_set.mass.velocity = (0.0, 2.0)
    energy = spring_set_energy(spring_set)
    assert energy["kinetic"] == pytest.approx(2.0)
    assert energy["potential"] == pytest.approx(0.5)
    assert energy["total"] == pytest.approx(2.5)


def test_collision_diagnostics():
    pair = CollisionPair(
        moving=Block("Moving", 50.0, x=800.0, v=-3.0),
        stationary=Block("Stationary", 100.0, x=200.0),
        wall_x=10.0,
        far_x=1000.0,
        collision_count=2,
    )
    diag = collision_diagnostics(pair)
    assert diag["ke_moving"] == pytest.approx(225.0)
    assert diag["ke_stationary"] == 0.0
    assert diag["total_kinetic"] == pytest.approx(225.0)
    assert diag["momentum"] == pytest.approx(-150.0)
    assert diag["collisions"] == 2
