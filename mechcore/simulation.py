#!/usr/bin/env python3
"""
Per-demo simulations and the controller shared by the renderer and the UI.

Each Simulation owns its state objects and one frozen parameter snapshot. A tick
reads the snapshot once, converts the frame time into a step of
dt = BASE_DT * sim_speed (or the clamped wall-clock frame time scaled the same way)
and advances the state. Configuration changes replace the snapshot between ticks
and never touch the integrators.

Threading model
- DemoController guards the active simulation with a re-entrant lock. The pygame
  thread calls tick() and reads state for drawing under the lock; the Dear PyGui
  thread swaps parameter snapshots and toggles through the controller's methods.
"""
import logging
import math
import threading
from typing import Dict, Optional

from . import collisions, pendulum, rotating_spring, springs
from .constants import (
    BASE_DT,
    MAX_FRAME_DT,
    MAX_SUBSTEPS,
    MOVING_START_GAP,
    MOVING_START_MARGIN,
    PIXELS_PER_METER,
    STATIONARY_START_X,
    WALL_THICKNESS,
    WORLD_WIDTH,
)
from .data_models import (
    PARAMETER_TYPES,
    Block,
    CollisionPair,
    CollisionParameters,
    PendulumChain,
    PendulumParameters,
    ProjectileParameters,
    RotatingSpringParameters,
    RotatingSpringState,
    SimulationParameters,
    SpringParameters,
    SpringSet,
)
from .energy import chain_mechanical_energy, collision_diagnostics, segment_stats, spring_set_energy
from .forces import driven_acceleration, snap_to_rest
from .projectile import TrajectoryPlayer, point_stats, trajectory_from_parameters

logger = logging.getLogger(__name__)


def frame_step(params: SimulationParameters, frame_dt: Optional[float] = None) -> float:
    """
    Simulation time to advance for one frame.

    Without a wall-clock frame time the fixed BASE_DT is used; a measured frame
    time is clamped to MAX_FRAME_DT so a stalled window does not explode the state.
    """
    if frame_dt is None:
        base = BASE_DT
    else:
        base = min(max(frame_dt, 0.0), MAX_FRAME_DT)
    return base * params.sim_speed


class Simulation:
    """Base class: play/pause/reset bookkeeping around a demo-specific advance()."""

    name = ""
    parameter_type = SimulationParameters

    def __init__(self, params: Optional[SimulationParameters] = None):
        self.params = params if params is not None else self.parameter_type()
        self.playing = False
        self.time = 0.0
        self.last_event: Optional[str] = None
        self.reset()

    # ----- lifecycle -----
    def play(self) -> bool:
        self.playing = True
        return True

    def pause(self) -> None:
        self.playing = False

    def toggle(self) -> bool:
        if self.playing:
            self.pause()
            return False
        return self.play()

    def reset(self) -> None:
        """Stop and rebuild state from the current parameters."""
        self.playing = False
        self.time = 0.0
        self.last_event = None
        self._reset_state()

    def _reset_state(self) -> None:
        raise NotImplementedError

    # ----- parameters -----
    def set_parameters(self, params: SimulationParameters) -> None:
        if not isinstance(params, self.parameter_type):
            raise ValueError(
                f"{type(self).__name__} expects {self.parameter_type.__name__}, "
                f"got {type(params).__name__}"
            )
        old = self.params
        self.params = params
        self._parameters_changed(old, params)

    def _parameters_changed(self, old, new) -> None:
        pass

    # ----- stepping -----
    def tick(self, frame_dt: Optional[float] = None) -> bool:
        """Advance one frame if playing. Returns True when state changed."""
        if not self.playing:
            return False
        return self.step(frame_dt)

    def step(self, frame_dt: Optional[float] = None) -> bool:
        """Advance one frame regardless of the play state."""
        params = self.params
        dt = frame_step(params, frame_dt)
        if dt <= 0:
            return False
        self.time += dt
        n = self._substeps(params, dt)
        h = dt / n
        for _ in range(n):
            if self._advance(params, h):
                break
        return True

    def max_substep(self, params, dt: float) -> Optional[float]:
        """Largest stable substep for the current state, or None when dt is always fine."""
        return None

    def _substeps(self, params, dt: float) -> int:
        limit = self.max_substep(params, dt)
        if limit is None or limit <= 0 or dt <= limit:
            return 1
        return min(math.ceil(dt / limit), MAX_SUBSTEPS)

    def _advance(self, params, dt: float) -> Optional[bool]:
        """Advance the demo state by dt. Returning True skips the rest of the frame."""
        raise NotImplementedError

    def diagnostics(self) -> Dict[str, object]:
        return {}


# ============================================================
# Projectile
# ============================================================

class ProjectileSimulation(Simulation):
    """
    Precomputed launch played back sample by sample.

    Playback advances by sim_speed samples per frame, independent of wall-clock
    time. Playing a finished (or never generated) launch regenerates it from the
    current parameters first.
    """

    name = "projectile"
    parameter_type = ProjectileParameters

    def _reset_state(self) -> None:
        self.player = TrajectoryPlayer(trajectory_from_parameters(self.params))

    def regenerate(self) -> None:
        self.player.load(trajectory_from_parameters(self.params))

    def play(self) -> bool:
        if self.player.finished:
            self.regenerate()
        return super().play()

    def step(self, frame_dt: Optional[float] = None) -> bool:
        params = self.params
        moved = self.player.advance(params.sim_speed)
        current = self.player.current()
        if current is not None:
            self.time = current.t
        if self.player.finished:
            self.playing = False
            self.last_event = "Projectile landed"
        return moved

    def diagnostics(self) -> Dict[str, object]:
        current = self.player.current()
        if current is None:
            return {}
        stats = point_stats(current, self.player.trajectory)
        peak = self.player.peak()
        stats["x"] = current.x
        stats["y"] = current.y
        stats["peak_height"] = peak.y if peak is not None else 0.0
        return stats


# ============================================================
# Pendulum
# ============================================================

class PendulumSimulation(Simulation):
    """Chain of up to three segments; drag acts as angular damping."""

    name = "pendulum"
    parameter_type = PendulumParameters

    def __init__(self, params: Optional[PendulumParameters] = None):
        self.chain = PendulumChain()
        super().__init__(params)

    def _reset_state(self) -> None:
        pendulum.reset_chain(self.chain, self.params)

    def _parameters_changed(self, old: PendulumParameters, new: PendulumParameters) -> None:
        self.chain.real_physics = new.real_physics
        for i, seg in enumerate(self.chain.segments):
            seg.mass = new.masses[i]
            seg.length = new.lengths[i]
            if old.angles_deg[i] != new.angles_deg[i]:
                pendulum.set_segment_angle(seg, math.radians(new.angles_deg[i]))

    def enable_segment(self, index: int) -> bool:
        ok = pendulum.enable_segment(self.chain, index)
        if not ok:
            self.last_event = f"Enable pendulum {index} first"
        return ok

    def disable_segment(self, index: int) -> None:
        pendulum.disable_segment(self.chain, index)

    def toggle_segment(self, index: int) -> bool:
        return pendulum.toggle_segment(self.chain, index)

    def max_substep(self, params: PendulumParameters, dt: float) -> Optional[float]:
        # Velocity-first damping is stable while damping * h <= 1.
        if params.drag > 0:
            return min(BASE_DT, 1.0 / params.drag)
        return BASE_DT

    def _advance(self, params: PendulumParameters, dt: float) -> None:
        pendulum.step_chain(self.chain, params.gravity, params.drag, dt)

    def diagnostics(self) -> Dict[str, object]:
        g = self.params.gravity
        return {
            "segments": [segment_stats(seg, g) for seg in self.chain.active()],
            "chain": chain_mechanical_energy(self.chain, g),
            "mode": "Real physics (RK4)" if self.chain.real_physics else "Simple (Euler)",
        }


# ============================================================
# Block collision
# ============================================================

def build_collision_pair(params: CollisionParameters) -> CollisionPair:
    """Blocks at their start positions: stationary at rest, moving heading for it."""
    st_size = collisions.mass_to_size(params.stationary_mass)
    mv_size = collisions.mass_to_size(params.moving_mass)
    stationary = Block(
        name="Stationary block",
        mass=params.stationary_mass,
        x=STATIONARY_START_X,
        size=st_size,
        color=(137, 180, 250),
    )
    moving_x = max(
        WORLD_WIDTH - MOVING_START_MARGIN,
        stationary.right + mv_size / 2.0 + MOVING_START_GAP,
    )
    # Heavy moving blocks would otherwise start past the far boundary.
    moving_x = min(moving_x, WORLD_WIDTH - mv_size / 2.0)
    moving = Block(
        name="Moving block",
        mass=params.moving_mass,
        x=moving_x,
        v=-params.speed,
        size=mv_size,
        color=(243, 139, 168),
    )
    return CollisionPair(moving=moving, stationary=stationary, wall_x=WALL_THICKNESS, far_x=WORLD_WIDTH)


class CollisionSimulation(Simulation):
    """
    Two blocks and a wall.

    With force mode on, the moving block is pushed along its motion against Coulomb
    friction; otherwise both blocks coast.
    """

    name = "collision"
    parameter_type = CollisionParameters

    def _reset_state(self) -> None:
        self.pair = build_collision_pair(self.params)

    def _parameters_changed(self, old: CollisionParameters, new: CollisionParameters) -> None:
        if (old.stationary_mass, old.moving_mass, old.speed) != (
            new.stationary_mass, new.moving_mass, new.speed
        ):
            self.reset()
            return
        if old.force_enabled and not new.force_enabled:
            mv = self.pair.moving
            mv.a = 0.0
            mv.v = -new.speed if mv.v < 0 else new.speed
        elif new.force_enabled:
            mv = self.pair.moving
            mv.a = driven_acceleration(mv.v, new.force, new.friction, mv.mass)

    def max_substep(self, params: CollisionParameters, dt: float) -> Optional[float]:
        """
        Keep each substep's relative block motion under half the smaller block, so
        a fast block cannot pass through a small one between contact checks.

        Elastic bounces only move kinetic energy around, so sqrt(2 E / m) bounds each
        block's speed for the rest of the frame; force mode adds up to a*dt on top.
        """
        mv = self.pair.moving
        st = self.pair.stationary
        energy = collision_diagnostics(self.pair)["total_kinetic"]
        speed = math.sqrt(2.0 * energy / mv.mass) + math.sqrt(2.0 * energy / st.mass)
        if params.force_enabled:
            speed += 2.0 * abs(driven_acceleration(mv.v, params.force, params.friction, mv.mass)) * dt
        if speed <= 0:
            return None
        half = min(mv.half_extent, st.half_extent)
        return half / (speed * PIXELS_PER_METER)

    def _advance(self, params: CollisionParameters, dt: float) -> bool:
        mv = self.pair.moving
        if params.force_enabled:
            mv.a = driven_acceleration(mv.v, params.force, params.friction, mv.mass)
            mv.v = snap_to_rest(mv.v + mv.a * dt)

        collisions.advance_blocks(self.pair, dt)
        msg = collisions.handle_collisions(self.pair)
        if msg:
            self.last_event = msg
        if collisions.enforce_bounds(self.pair):
            self.reset()
            self.last_event = "Stationary block reached the far wall"
            return True
        return False

    def diagnostics(self) -> Dict[str, object]:
        stats: Dict[str, object] = dict(collision_diagnostics(self.pair))
        stats["mode"] = "Force: ON" if self.params.force_enabled else "Force: OFF"
        return stats


# ============================================================
# Springs
# ============================================================

class SpringSystemSimulation(Simulation):
    """One mass between up to three anchored springs; drag is the air resistance."""

    name = "springs"
    parameter_type = SpringParameters

    def __init__(self, params: Optional[SpringParameters] = None):
        self.spring_set = SpringSet()
        super().__init__(params)

    def _reset_state(self) -> None:
        springs.reset(self.spring_set, self.params)

    def _parameters_changed(self, old: SpringParameters, new: SpringParameters) -> None:
        springs.apply_parameters(self.spring_set, new)

    def set_spring_enabled(self, index: int, enabled: bool) -> None:
        springs.set_enabled(self.spring_set, index, enabled)

    def max_substep(self, params: SpringParameters, dt: float) -> Optional[float]:
        # Velocity-first air resistance is stable while c * h / m <= 1.
        if params.drag > 0:
            return min(BASE_DT, params.mass / params.drag)
        return BASE_DT

    def _advance(self, params: SpringParameters, dt: float) -> None:
        springs.step(self.spring_set, params.drag, dt)

    def diagnostics(self) -> Dict[str, object]:
        body = self.spring_set.mass
        stats: Dict[str, object] = dict(spring_set_energy(self.spring_set))
        stats["position"] = body.position
        stats["velocity"] = body.velocity
        stats["lengths"] = springs.spring_lengths(self.spring_set)
        return stats


# ============================================================
# Rotating spring
# ============================================================

class RotatingSpringSimulation(Simulation):
    """
    Spring swung at a prescribed angular speed.

    Requested speeds are capped just below the critical speed, but changing the
    stiffness or mass afterwards can still push the drive past it; the spring then
    breaks, the simulation halts and play() is refused until the parameters are safe.
    """

    name = "rotating_spring"
    parameter_type = RotatingSpringParameters

    def __init__(self, params: Optional[RotatingSpringParameters] = None):
        self.state = RotatingSpringState()
        super().__init__(params)

    def _reset_state(self) -> None:
        rotating_spring.reset(self.state, self.params)
        if self.state.broken:
            self.last_event = self._broken_message()

    def set_parameters(self, params: RotatingSpringParameters) -> None:
        if isinstance(params, RotatingSpringParameters) and params.angular_speed != self.params.angular_speed:
            capped = rotating_spring.cap_angular_speed(
                params.angular_speed, params.spring_constant, params.mass
            )
            if capped != params.angular_speed:
                params = params.updated(angular_speed=capped)
        super().set_parameters(params)

    def _parameters_changed(self, old, new: RotatingSpringParameters) -> None:
        if rotating_spring.update_target(self.state, new):
            self.playing = False
            self.last_event = self._broken_message()

    def _broken_message(self) -> str:
        w_c = rotating_spring.critical_speed(self.params.spring_constant, self.params.mass)
        return f"Spring cannot handle this speed! Reduce angular speed below {w_c:.2f} rad/s"

    def play(self) -> bool:
        if self.state.broken:
            logger.warning("Refusing to run: spring is broken")
            self.last_event = self._broken_message()
            return False
        return super().play()

    def _advance(self, params: RotatingSpringParameters, dt: float) -> None:
        if self.state.broken:
            self.playing = False
            return
        rotating_spring.step(self.state, params, dt)

    def diagnostics(self) -> Dict[str, object]:
        stats = rotating_spring.spring_stats(self.state, self.params)
        stats["broken"] = self.state.broken
        return stats


SIMULATION_TYPES = {
    cls.name: cls
    for cls in (
        ProjectileSimulation,
        PendulumSimulation,
        CollisionSimulation,
        SpringSystemSimulation,
        RotatingSpringSimulation,
    )
}


def create_simulation(demo: str, params: Optional[SimulationParameters] = None) -> Simulation:
    cls = SIMULATION_TYPES.get(demo)
    if cls is None:
        raise ValueError(f"Unknown demo '{demo}'")
    return cls(params)


# ============================================================
# Controller
# ============================================================

class DemoController:
    """
    Shared state between UI thread (Dear PyGui) and rendering thread (pygame).

    One Simulation per demo is kept alive so switching demos preserves each
    demo's state. Every public method takes the lock.
    """

    def __init__(self, demo: str = "projectile"):
        self.lock = threading.RLock()
        self.running = True  # app running
        self.show_stats = True
        self.show_peak = False
        self.show_velocity_vectors = False
        self.simulations: Dict[str, Simulation] = {
            name: create_simulation(name) for name in SIMULATION_TYPES
        }
        if demo not in self.simulations:
            raise ValueError(f"Unknown demo '{demo}'")
        self.demo = demo

    @property
    def active(self) -> Simulation:
        with self.lock:
            return self.simulations[self.demo]

    def select(self, demo: str) -> Simulation:
        with self.lock:
            if demo not in self.simulations:
                raise ValueError(f"Unknown demo '{demo}'")
            if demo != self.demo:
                self.simulations[self.demo].pause()
                self.demo = demo
                logger.debug("Switched to demo %s", demo)
            return self.simulations[demo]

    # ----- parameters -----
    def update_parameters(self, **changes) -> SimulationParameters:
        """Apply clamped changes to the active demo's snapshot and return the new one."""
        with self.lock:
            sim = self.active
            sim.set_parameters(sim.params.updated(**changes))
            return sim.params

    def apply_parameters(self, demo: str, params: SimulationParameters) -> None:
        with self.lock:
            if PARAMETER_TYPES.get(demo) is not type(params):
                raise ValueError(f"Parameters of type {type(params).__name__} do not fit demo '{demo}'")
            self.select(demo)
            sim = self.simulations[demo]
            sim.set_parameters(params)
            sim.reset()

    def apply_preset(self, preset) -> None:
        """Switch to the preset's demo, install its parameters and enabled flags, and reset."""
        with self.lock:
            self.apply_parameters(preset.demo, preset.parameters)
            sim = self.simulations[preset.demo]
            flags = preset.enabled or ()
            if preset.demo == "pendulum":
                for i, flag in enumerate(flags[:len(sim.chain.segments)]):
                    if flag:
                        sim.enable_segment(i)
                    elif i > 0:
                        sim.disable_segment(i)
            elif preset.demo == "springs":
                for i, flag in enumerate(flags[:len(sim.spring_set.springs)]):
                    sim.set_spring_enabled(i, flag)
            logger.info("Loaded preset '%s'", preset.name)

    # ----- demo-specific toggles -----
    def toggle_pendulum_segment(self, index: int) -> bool:
        with self.lock:
            return self.simulations["pendulum"].toggle_segment(index)

    def set_spring_enabled(self, index: int, enabled: bool) -> None:
        with self.lock:
            self.simulations["springs"].set_spring_enabled(index, enabled)

    # ----- lifecycle -----
    def play(self) -> bool:
        with self.lock:
            return self.active.play()

    def pause(self) -> None:
        with self.lock:
            self.active.pause()

    def toggle_play(self) -> bool:
        with self.lock:
            return self.active.toggle()

    def step_once(self) -> bool:
        with self.lock:
            sim = self.active
            sim.pause()
            return sim.step()

    def reset(self) -> None:
        with self.lock:
            self.active.reset()

    def tick(self, frame_dt: Optional[float] = None) -> bool:
        with self.lock:
            return self.active.tick(frame_dt)

    def diagnostics(self) -> Dict[str, object]:
        with self.lock:
            return self.active.diagnostics()

    def last_event(self) -> Optional[str]:
        with self.lock:
            return self.active.last_event
