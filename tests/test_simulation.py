import math

import pytest

from mechcore.data_models import (
    CollisionParameters,
    PendulumParameters,
    ProjectileParameters,
    RotatingSpringParameters,
    SpringParameters,
)
from mechcore.presets_loader import Preset
from mechcore.simulation import (
    SIMULATION_TYPES,
    CollisionSimulation,
    DemoController,
    PendulumSimulation,
    ProjectileSimulation,
    RotatingSpringSimulation,
    SpringSystemSimulation,
    build_collision_pair,
    create_simulation,
    frame_step,
)


def test_frame_step_scales_with_speed():
    assert frame_step(ProjectileParameters()) == pytest.approx(0.016)
    assert frame_step(ProjectileParameters(sim_speed=2.0)) == pytest.approx(0.032)
    assert frame_step(ProjectileParameters(sim_speed=0.0)) == 0.0


def test_frame_step_clamps_wall_clock_time():
    params = ProjectileParameters(sim_speed=2.0)
    assert frame_step(params, 0.01) == pytest.approx(0.02)
    assert frame_step(params, 1.0) == pytest.approx(0.1)
    assert frame_step(params, -1.0) == 0.0


def test_create_simulation():
    assert set(SIMULATION_TYPES) == {"projectile", "pendulum", "collision", "springs", "rotating_spring"}
    assert isinstance(create_simulation("springs"), SpringSystemSimulation)
    with pytest.raises(ValueError):
        create_simulation("orbits")


def test_wrong_parameter_type_raises():
    sim = PendulumSimulation()
    with pytest.raises(ValueError):
        sim.set_parameters(ProjectileParameters())


def test_tick_does_nothing_while_paused():
    sim = PendulumSimulation()
    theta = sim.chain.segments[0].theta
    assert sim.tick() is False
    assert sim.chain.segments[0].theta == theta
    assert sim.time == 0.0


def test_pause_freezes_state():
    sim = PendulumSimulation()
    sim.play()
    for _ in range(10):
        sim.tick()
    sim.pause()
    snapshot = (sim.chain.segments[0].theta, sim.chain.segments[0].omega, sim.time)
    for _ in range(10):
        sim.tick()
    assert (sim.chain.segments[0].theta, sim.chain.segments[0].omega, sim.time) == snapshot


def test_zero_speed_freezes_running_simulation():
    sim = SpringSystemSimulation(SpringParameters(sim_speed=0.0))
    sim.spring_set.mass.position = (1.0, 0.0)
    sim.play()
    assert sim.tick() is False
    assert sim.spring_set.mass.position == (1.0, 0.0)


def test_reset_is_deterministic():
    def run():
        sim = PendulumSimulation(PendulumParameters(real_physics=True))
        sim.enable_segment(1)
        sim.play()
        for _ in range(200):
            sim.tick()
        return [(s.theta, s.omega) for s in sim.chain.segments]

    assert run() == run()


def test_reset_restores_start_angles():
    sim = PendulumSimulation()
    sim.play()
    for _ in range(50):
        sim.tick()
    sim.reset()
    assert not sim.playing
    assert sim.time == 0.0
    assert sim.chain.segments[0].theta == pytest.approx(math.radians(45.0))
    assert sim.chain.segments[0].omega == 0.0


# ----- projectile -----

def test_projectile_plays_until_landing():
    sim = ProjectileSimulation()
    sim.play()
    for _ in range(1000):
        if not sim.tick():
            break
    assert not sim.playing
    assert sim.last_event == "Projectile landed"
    assert sim.player.current() == sim.player.trajectory.landing
    assert sim.time == pytest.approx(sim.player.trajectory.landing.t)


def test_projectile_replays_after_landing():
    sim = ProjectileSimulation()
    sim.play()
    while sim.tick():
        pass
    assert sim.play()
    assert sim.player.position == 0


def test_projectile_diagnostics():
    sim = ProjectileSimulation()
    stats = sim.diagnostics()
    assert stats["speed"] == pytest.approx(20.0)
    assert stats["peak_height"] == 0.0
    assert (stats["x"], stats["y"]) == (0.0, 0.0)


def test_projectile_uses_new_parameters_on_reset():
    sim = ProjectileSimulation()
    sim.set_parameters(sim.params.updated(speed=10.0))
    sim.reset()
    assert sim.player.trajectory.points[0].vx == pytest.approx(10.0 * math.cos(math.radians(45.0)))


# ----- pendulum -----

def test_editing_one_angle_moves_only_that_segment():
    sim = PendulumSimulation()
    sim.enable_segment(1)
    sim.play()
    for _ in range(20):
        sim.tick()
    second = (sim.chain.segments[1].theta, sim.chain.segments[1].omega)
    sim.set_parameters(sim.params.updated(angles_deg=(30.0, 45.0, 45.0)))
    first = sim.chain.segments[0]
    assert (first.theta, first.omega) == (pytest.approx(math.radians(30.0)), 0.0)
    assert (sim.chain.segments[1].theta, sim.chain.segments[1].omega) == second


def test_rejected_segment_sets_event():
    sim = PendulumSimulation()
    assert sim.enable_segment(2) is False
    assert sim.last_event == "Enable pendulum 2 first"


def test_pendulum_diagnostics_modes():
    sim = PendulumSimulation()
    assert sim.diagnostics()["mode"] == "Simple (Euler)"
    sim.set_parameters(sim.params.updated(real_physics=True))
    diag = sim.diagnostics()
    assert diag["mode"] == "Real physics (RK4)"
    assert len(diag["segments"]) == 1


# ----- collisions -----

def test_collision_start_layout():
    pair = build_collision_pair(CollisionParameters())
    assert pair.stationary.x == 200.0
    assert pair.moving.x == 850.0
    assert pair.moving.v == -3.0
    assert pair.moving.left > pair.stationary.right


def test_collision_start_keeps_gap_for_heavy_blocks():
    pair = build_collision_pair(CollisionParameters(stationary_mass=1000.0, moving_mass=1000.0))
    assert pair.moving.left - pair.stationary.right >= 50.0
    assert pair.moving.right <= pair.far_x


def test_default_collision_exchanges_velocities():
    sim = CollisionSimulation()
    sim.play()
    for _ in range(1000):
        sim.tick()
        if sim.pair.collision_count:
            break
    assert sim.pair.collision_count == 1
    assert sim.pair.moving.v == pytest.approx(1.0)
    assert sim.pair.stationary.v == pytest.approx(-2.0)
    assert sim.last_event.startswith("Elastic collision")


def test_stationary_block_at_far_wall_resets():
    sim = CollisionSimulation()
    st = sim.pair.stationary
    st.x = sim.pair.far_x - st.half_extent - 1.0
    st.v = 5.0
    sim.pair.collision_count = 4
    sim.step()
    assert sim.pair.stationary.x == 200.0
    assert sim.pair.collision_count == 0
    assert sim.time == 0.0
    assert not sim.playing
    assert sim.last_event == "Stationary block reached the far wall"


def test_turning_force_off_restores_launch_speed():
    sim = CollisionSimulation()
    sim.set_parameters(sim.params.updated(force_enabled=True))
    sim.play()
    for _ in range(10):
        sim.tick()
    assert sim.pair.moving.v != -3.0
    sim.set_parameters(sim.params.updated(force_enabled=False))
    assert sim.pair.moving.v == -3.0
    assert sim.pair.moving.a == 0.0


def test_force_speeds_block_up_against_light_friction():
    sim = CollisionSimulation(CollisionParameters(force_enabled=True, force=200.0, friction=0.1))
    sim.play()
    sim.tick()
    # a = -(200 - 0.1*50*9.81)/50 along the motion
    assert sim.pair.moving.a == pytest.approx(-(200.0 - 0.1 * 50.0 * 9.81) / 50.0)
    assert sim.pair.moving.v < -3.0


def test_changing_mass_resets_blocks():
    sim = CollisionSimulation()
    sim.play()
    for _ in range(5):
        sim.tick()
    sim.set_parameters(sim.params.updated(moving_mass=200.0))
    assert not sim.playing
    assert sim.pair.moving.mass == 200.0
    assert sim.pair.moving.size == pytest.approx(math.sqrt(200.0) * 10.0)


# ----- rotating spring -----

def test_requested_speed_is_capped():
    sim = RotatingSpringSimulation()
    sim.set_parameters(sim.params.updated(angular_speed=5.0))
    assert sim.params.angular_speed == pytest.approx(0.99 * math.sqrt(5.0))
    assert not sim.state.broken


def test_softening_spring_breaks_it_and_blocks_play():
    sim = RotatingSpringSimulation()
    sim.play()
    sim.set_parameters(sim.params.updated(spring_constant=3.0))
    assert sim.state.broken
    assert not sim.playing
    assert sim.last_event.startswith("Spring cannot handle this speed!")
    assert sim.play() is False

    sim.set_parameters(sim.params.updated(spring_constant=5.0))
    assert not sim.state.broken
    assert sim.play() is True


def test_rotating_spring_spins():
    sim = RotatingSpringSimulation(RotatingSpringParameters(angular_speed=1.0))
    sim.play()
    for _ in range(10):
        sim.tick()
    assert sim.state.angle == pytest.approx(0.16)
    assert sim.state.length > 5.0
    assert sim.diagnostics()["broken"] is False


# ----- controller -----

def test_controller_clamps_parameter_updates():
    controller = DemoController()
    params = controller.update_parameters(gravity=100.0)
    assert params.gravity == 30.0
    assert controller.active.params.gravity == 30.0


def test_controller_select_keeps_state_per_demo():
    controller = DemoController()
    controller.select("pendulum")
    controller.play()
    controller.tick()
    theta = controller.active.chain.segments[0].theta
    controller.select("springs")
    assert not controller.simulations["pendulum"].playing
    controller.select("pendulum")
    assert controller.active.chain.segments[0].theta == theta


def test_controller_unknown_demo():
    with pytest.raises(ValueError):
        DemoController("orbits")
    with pytest.raises(ValueError):
        DemoController().select("orbits")


def test_step_once_pauses_and_advances():
    controller = DemoController("pendulum")
    controller.play()
    assert controller.step_once()
    assert not controller.active.playing
    assert controller.active.time == pytest.approx(0.016)


def test_apply_parameters_type_mismatch():
    with pytest.raises(ValueError):
        DemoController().apply_parameters("pendulum", SpringParameters())


def test_apply_preset_sets_segments():
    controller = DemoController()
    preset = Preset(
        name="test",
        demo="pendulum",
        description="",
        parameters=PendulumParameters(angles_deg=(10.0, 20.0, 30.0), real_physics=True),
        enabled=(True, True, True),
    )
    controller.apply_preset(preset)
    sim = controller.active
    assert controller.demo == "pendulum"
    assert len(sim.chain.active()) == 3
    assert sim.chain.real_physics
    assert sim.chain.segments[2].theta == pytest.approx(math.radians(30.0))

    controller.apply_preset(preset._replace(enabled=(True, False, False)))
    assert len(sim.chain.active()) == 1


def test_apply_preset_sets_springs():
    controller = DemoController()
    preset = Preset("s", "springs", "", SpringParameters(mass=2.0), (False, True, True))
    controller.apply_preset(preset)
    sim = controller.active
    assert [s.enabled for s in sim.spring_set.springs] == [False, True, True]
    assert sim.spring_set.mass.mass == 2.0


def test_controller_last_event():
    controller = DemoController("pendulum")
    assert controller.last_event() is None
    controller.active.enable_segment(2)
    assert controller.last_event() == "Enable pendulum 2 first"


# ----- stability at the edges of the control ranges -----

@pytest.mark.parametrize("frame_dt", [None, 0.05])
def test_stiff_fast_rotating_spring_stays_bounded(frame_dt):
    params = RotatingSpringParameters().updated(
        spring_constant=50.0, mass=0.1, angular_speed=10.0, sim_speed=5.0
    )
    sim = RotatingSpringSimulation(params)
    assert not sim.state.broken
    sim.play()
    for _ in range(300):
        sim.tick(frame_dt)
        assert params.rest_length <= sim.state.length <= sim.state.target_length
    assert sim.state.length == pytest.approx(sim.state.target_length)


@pytest.mark.parametrize("frame_dt", [None, 0.05])
def test_light_mass_in_thick_air_stays_bounded(frame_dt):
    params = SpringParameters().updated(mass=0.1, drag=10.0, sim_speed=5.0)
    sim = SpringSystemSimulation(params)
    sim.spring_set.mass.position = (1.0, 0.0)
    sim.play()
    for _ in range(200):
        sim.tick(frame_dt)
        x, y = sim.spring_set.mass.position
        assert math.isfinite(x) and math.isfinite(y)
        assert abs(x) <= 1.0
    # Overdamped: the mass creeps back toward the origin without crossing it.
    assert 0.0 < sim.spring_set.mass.position[0] < 1.0


def test_heavy_damping_keeps_pendulum_finite():
    sim = PendulumSimulation(PendulumParameters().updated(drag=10.0, sim_speed=5.0))
    sim.play()
    for _ in range(200):
        sim.tick(0.05)
        seg = sim.chain.segments[0]
        assert abs(seg.theta) <= math.radians(45.0) + 1e-9
    seg = sim.chain.segments[0]
    assert 0.0 < seg.theta < 0.1
    assert abs(seg.omega) < 0.01


@pytest.mark.parametrize("frame_dt", [None, 0.05])
def test_fast_small_blocks_never_pass_through_each_other(frame_dt):
    params = CollisionParameters().updated(
        stationary_mass=1.0, moving_mass=1.0, speed=19.0, sim_speed=5.0
    )
    sim = CollisionSimulation(params)
    sim.play()
    for _ in range(200):
        sim.tick(frame_dt)
        assert sim.pair.moving.left > sim.pair.stationary.right
    assert sim.pair.collision_count > 0
