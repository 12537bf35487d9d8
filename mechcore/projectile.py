#!/usr/bin/env python3
"""
Projectile trajectories and scrub-style playback.

A launch is integrated once, up front, into an immutable Trajectory; the demo then
plays it back by moving a fractional index through the samples. Regenerating is the
only way the samples change.

Step (dt = TRAJECTORY_DT):
    v *= (1 - drag*dt)                  (when drag > 0, every component)
    x += vx*dt
    y += vy*dt - 1/2 g dt^2
    vy -= g*dt
    z += vz*dt

The sequence stops at the first sample with y <= 0 (clamped to the ground) or
after TRAJECTORY_MAX_STEPS steps. Without drag the position update is exact, so the
landing sample overshoots the analytic range by less than one step.
"""
import math
from typing import Dict, Optional

from .constants import (
    AIR_RESISTANCE_TO_DRAG,
    LATERAL_SPEED_RATIO,
    PROJECTILE_MASS,
    TRAJECTORY_DT,
    TRAJECTORY_MAX_STEPS,
)
from .data_models import ProjectileParameters, Trajectory, TrajectoryPoint
from .energy import energy_loss, kinetic_energy
from .forces import apply_linear_drag, gravity_step


def compute_trajectory(angle_deg: float, speed: float, gravity: float, drag: float = 0.0,
                       lateral_ratio: float = 0.0, dt: float = TRAJECTORY_DT,
                       max_steps: int = TRAJECTORY_MAX_STEPS) -> Trajectory:
    """
    Integrate a launch from the origin.

    Args:
        angle_deg: elevation above the horizontal in degrees
        speed: launch speed in m/s
        gravity: downward acceleration in m/s^2
        drag: per-step velocity damping coefficient in 1/s
        lateral_ratio: z-velocity as a fraction of speed (0 for the planar demo)

    Returns:
        Trajectory with at least two samples (launch and landing or step cap).
    """
    angle = math.radians(angle_deg)
    vx = speed * math.cos(angle)
    vy = speed * math.sin(angle)
    vz = speed * lateral_ratio
    x = y = z = 0.0
    t = 0.0

    points = [TrajectoryPoint(t, x, y, z, vx, vy, vz)]
    for _ in range(max_steps):
        vx, vy, vz = apply_linear_drag((vx, vy, vz), drag, dt)

        x += vx * dt
        y += vy * dt - 0.5 * gravity * dt * dt
        vy = gravity_step(vy, gravity, dt)
        z += vz * dt
        t += dt

        if y <= 0:
            points.append(TrajectoryPoint(t, x, 0.0, z, vx, vy, vz))
            break
        points.append(TrajectoryPoint(t, x, y, z, vx, vy, vz))

    # Launch is from y = 0, so all initial energy is kinetic.
    initial_energy = kinetic_energy(PROJECTILE_MASS, speed)
    return Trajectory(points=tuple(points), initial_energy=initial_energy, gravity=gravity)


def trajectory_from_parameters(params: ProjectileParameters) -> Trajectory:
    """Build the trajectory for the current slider values (drag slider scaled to 1/s)."""
    lateral = LATERAL_SPEED_RATIO if params.three_d else 0.0
    return compute_trajectory(
        params.angle_deg,
        params.speed,
        params.gravity,
        drag=params.drag * AIR_RESISTANCE_TO_DRAG,
        lateral_ratio=lateral,
    )


def analytic_range(speed: float, angle_deg: float, gravity: float) -> float:
    """Drag-free range v^2 sin(2 theta) / g on level ground."""
    if gravity <= 0:
        return math.inf
    return speed * speed * math.sin(2.0 * math.radians(angle_deg)) / gravity


def point_stats(point: TrajectoryPoint, trajectory: Trajectory) -> Dict[str, float]:
    """Speed, XY direction and energy split of a 1 kg projectile at one sample."""
    speed = math.sqrt(point.vx * point.vx + point.vy * point.vy + point.vz * point.vz)
    gpe = PROJECTILE_MASS * trajectory.gravity * point.y
    ke = kinetic_energy(PROJECTILE_MASS, speed)
    return {
        "mass": PROJECTILE_MASS,
        "speed": speed,
        "angle_deg": math.degrees(math.atan2(point.vy, point.vx)),
        "potential": gpe,
        "kinetic": ke,
        "energy_lost": energy_loss(trajectory.initial_energy, ke, gpe),
    }


class TrajectoryPlayer:
    """
    Fractional cursor over a Trajectory.

    The index advances by the speed multiplier every frame, so 0.5x shows every
    sample twice and 2x skips every other one. The drawn sample is floor(index).
    """

    def __init__(self, trajectory: Optional[Trajectory] = None):
        self.trajectory = trajectory
        self.index = 0.0

    def load(self, trajectory: Trajectory) -> None:
        self.trajectory = trajectory
        self.index = 0.0

    def rewind(self) -> None:
        self.index = 0.0

    @property
    def last_index(self) -> int:
        if self.trajectory is None:
            return 0
        return len(self.trajectory) - 1

    @property
    def finished(self) -> bool:
        return self.trajectory is None or self.index >= self.last_index

    @property
    def position(self) -> int:
        return min(int(math.floor(self.index)), self.last_index)

    def advance(self, step: float) -> bool:
        """Move forward by step samples. Returns False once the end is reached."""
        if self.finished:
            return False
        self.index = min(self.index + max(step, 0.0), float(self.last_index))
        return not self.finished

    def current(self) -> Optional[TrajectoryPoint]:
        if self.trajectory is None:
            return None
        return self.trajectory.points[self.position]

    def visible_points(self):
        if self.trajectory is None:
            return ()
        return self.trajectory.points[:self.position + 1]

    def peak(self) -> Optional[TrajectoryPoint]:
        """Highest sample shown so far (earliest wins on ties)."""
        shown = self.visible_points()
        if not shown:
            return None
        best = shown[0]
        for p in shown[1:]:
            if p.y > best.y:
                best = p
        return best
