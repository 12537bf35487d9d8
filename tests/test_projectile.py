import math

import pytest

from mechcore.data_models import ProjectileParameters
from mechcore.projectile import (
    TrajectoryPlayer,
    analytic_range,
    compute_trajectory,
    point_stats,
    trajectory_from_parameters,
)


def test_trajectory_is_deterministic():
    a = compute_trajectory(45.0, 20.0, 9.8, drag=0.15, lateral_ratio=0.1)
    b = compute_trajectory(45.0, 20.0, 9.8, drag=0.15, lateral_ratio=0.1)
    assert a == b


def test_first_sample_is_launch():
    traj = compute_trajectory(30.0, 10.0, 9.8)
    first = traj.points[0]
    assert (first.t, first.x, first.y, first.z) == (0.0, 0.0, 0.0, 0.0)
    assert first.vx == pytest.approx(10.0 * math.cos(math.radians(30.0)))
    assert first.vy == pytest.approx(5.0)


def test_drag_free_range_matches_analytic_within_one_step():
    traj = compute_trajectory(45.0, 20.0, 9.8)
    expected = analytic_range(20.0, 45.0, 9.8)
    assert expected == pytest.approx(400.0 / 9.8)
    vx = 20.0 * math.cos(math.radians(45.0))
    overshoot = traj.landing.x - expected
    assert 0.0 <= overshoot < vx * 0.1 + 1e-9


def test_landing_sample_is_on_the_ground():
    traj = compute_trajectory(60.0, 15.0, 9.8)
    assert traj.landing.y == 0.0
    assert all(p.y > 0 for p in traj.points[1:-1])


def test_time_increases_by_fixed_step():
    traj = compute_trajectory(45.0, 20.0, 9.8)
    times = [p.t for p in traj.points]
    assert all(b > a for a, b in zip(times, times[1:]))
    assert times[1] == pytest.approx(0.1)


def test_zero_gravity_runs_to_step_cap():
    traj = compute_trajectory(45.0, 20.0, 0.0)
    assert len(traj) == 1001
    assert traj.landing.y > 0


def test_horizontal_launch_lands_on_first_step():
    traj = compute_trajectory(0.0, 20.0, 9.8)
    assert len(traj) == 2
    assert traj.landing.y == 0.0


def test_drag_shortens_range():
    free = compute_trajectory(45.0, 20.0, 9.8)
    dragged = compute_trajectory(45.0, 20.0, 9.8, drag=0.15)
    assert dragged.landing.x < free.landing.x


def test_parameters_scale_air_resistance_and_add_lateral_motion():
    params = ProjectileParameters(speed=20.0, drag=1.5, three_d=True)
    traj = trajectory_from_parameters(params)
    assert traj == compute_trajectory(45.0, 20.0, 9.8, drag=1.5 * 0.1, lateral_ratio=0.1)
    first = traj.points[0]
    assert first.vz == pytest.approx(2.0)
    zs = [p.z for p in traj.points]
    assert all(b > a for a, b in zip(zs, zs[1:]))


def test_planar_trajectory_has_no_depth():
    traj = trajectory_from_parameters(ProjectileParameters())
    assert all(p.z == 0.0 for p in traj.points)


def test_no_energy_lost_without_drag():
    traj = compute_trajectory(45.0, 20.0, 9.8)
    assert traj.initial_energy == pytest.approx(200.0)
    for p in traj.points[:-1]:
        stats = point_stats(p, traj)
        assert stats["energy_lost"] == pytest.approx(0.0, abs=1e-9)


def test_drag_loses_energy():
    traj = compute_trajectory(45.0, 20.0, 9.8, drag=0.15)
    stats = point_stats(traj.landing, traj)
    assert stats["energy_lost"] > 0.0
    assert stats["kinetic"] < traj.initial_energy


def test_point_stats_direction():
    traj = compute_trajectory(45.0, 20.0, 9.8)
    stats = point_stats(traj.points[0], traj)
    assert stats["angle_deg"] == pytest.approx(45.0)
    assert stats["speed"] == pytest.approx(20.0)
    assert stats["mass"] == 1.0


def test_player_advances_fractionally():
    player = TrajectoryPlayer(compute_trajectory(45.0, 20.0, 9.8))
    assert player.position == 0
    player.advance(0.5)
    assert player.position == 0
    player.advance(0.5)
    assert player.position == 1
    assert player.current() is player.trajectory.points[1]
    assert len(player.visible_points()) == 2


def test_player_stops_at_last_sample():
    traj = compute_trajectory(45.0, 20.0, 9.8)
    player = TrajectoryPlayer(traj)
    assert player.advance(len(traj) + 10) is False
    assert player.finished
    assert player.current() == traj.landing
    assert player.advance(1.0) is False


def test_player_rewind():
    player = TrajectoryPlayer(compute_trajectory(45.0, 20.0, 9.8))
    player.advance(5)
    player.rewind()
    assert player.position == 0
    assert not player.finished


def test_empty_player():
    player = TrajectoryPlayer()
    assert player.finished
    assert player.current() is None
    assert player.peak() is None
    assert player.visible_points() == ()


def test_peak_tracks_highest_shown_sample():
    traj = compute_trajectory(45.0, 20.0, 9.8)
    player = TrajectoryPlayer(traj)
    player.advance(3)
    assert player.peak() is traj.points[3]
    player.advance(len(traj))
    highest = max(p.y for p in traj.points)
    assert player.peak().y == highest
    assert player.peak().vy == pytest.approx(0.0, abs=0.99)
