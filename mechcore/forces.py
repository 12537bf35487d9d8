#!/usr/bin/env python3
"""
Force and acceleration models.

Each model is a pure function of the current state and parameters. Vectors are
(x, y) tuples; 1D models take and return floats. Singular geometry (a spring of
zero current length) contributes zero force.
"""
from typing import Sequence, Tuple

from .constants import FRICTION_GRAVITY, STOP_SPEED
from .vector_utils import Vec2, sign, vec_len


# ----- Gravity -----

def gravity_step(vy: float, g: float, dt: float) -> float:
    """Apply gravity to a vertical velocity for one step."""
    return vy - g * dt


# ----- Drag -----

def apply_linear_drag(velocity: Sequence[float], drag: float, dt: float) -> Tuple[float, ...]:
    """
    Scale every velocity component by (1 - drag*dt).

    This multiplicative per-step form is a discretized damping, not an exact
    exponential decay; trajectories depend on it being applied exactly this way.
    """
    if drag <= 0:
        return tuple(velocity)
    factor = 1.0 - drag * dt
    return tuple(v * factor for v in velocity)


def viscous_drag_force(velocity: Vec2, coefficient: float) -> Vec2:
    """Force -c*v opposing the velocity."""
    return (-coefficient * velocity[0], -coefficient * velocity[1])


# ----- Springs -----

def spring_force(mass_pos: Vec2, anchor: Vec2, k: float, rest_length: float) -> Vec2:
    """
    Hookean force on a mass attached to a fixed anchor.

    Magnitude k*(distance - rest_length), directed from the mass toward the anchor:
    a stretched spring pulls the mass in, a compressed one pushes it out.
    """
    dx = anchor[0] - mass_pos[0]
    dy = anchor[1] - mass_pos[1]
    dist = vec_len((dx, dy))
    if dist == 0:
        return (0.0, 0.0)
    f = k * (dist - rest_length)
    return (f * dx / dist, f * dy / dist)


def spring_acceleration(mass_pos: Vec2, anchor: Vec2, k: float, rest_length: float,
                        mass: float) -> Vec2:
    fx, fy = spring_force(mass_pos, anchor, k, rest_length)
    if mass <= 0:
        return (0.0, 0.0)
    return (fx / mass, fy / mass)


# ----- Friction and driving force (1D) -----

def friction_force(velocity: float, mu: float, mass: float) -> float:
    """Coulomb friction mu*m*g opposing the current direction of motion (zero at rest)."""
    return -sign(velocity) * mu * mass * FRICTION_GRAVITY


def driving_direction(velocity: float) -> float:
    """Direction a driving force pushes: along the motion, or toward -x when at rest."""
    if velocity > 0:
        return 1.0
    return -1.0


def driven_acceleration(velocity: float, force: float, mu: float, mass: float) -> float:
    """Net acceleration of a block pushed by force along its motion against friction."""
    if mass <= 0:
        return 0.0
    applied = force * driving_direction(velocity)
    net = applied + friction_force(velocity, mu, mass)
    return net / mass


def snap_to_rest(velocity: float, threshold: float = STOP_SPEED) -> float:
    """Return 0.0 for speeds below threshold to avoid friction jitter around zero."""
    if abs(velocity) < threshold:
        return 0.0
    return velocity


# ----- Rotation -----

def centrifugal_force(mass: float, angular_speed: float, radius: float) -> float:
    """Outward force m*w^2*r felt in the rotating frame."""
    return mass * angular_speed * angular_speed * radius
