#!/usr/bin/env python3
"""
Rotating spring model.

A mass on a spring is swung around the origin at a prescribed angular speed w.
In the rotating frame the spring balances the centrifugal force,
k (L - L0) = m w^2 L, giving the equilibrium length

    L = k L0 / (k - m w^2)

which diverges at the critical speed w_c = sqrt(k / m). At or above w_c the spring
cannot hold the mass: the state is flagged broken, the target is drawn at
BREAK_LENGTH_FACTOR * L0 and the simulation halts.

The length does not follow the ODE; it relaxes toward the target at a rate that
grows with w^2. step() splits dt so that rate * h <= 1 for every substep h, which
keeps each update a convex blend of length and target: it never overshoots.
"""
import logging
import math
from typing import Dict, Tuple

from .constants import (
    ANGULAR_SPEED_CAP,
    BREAK_LENGTH_FACTOR,
    RELAXATION_BASE,
    RELAXATION_SPIN_GAIN,
    SAFETY_AT_REST,
    SAFETY_CAUTION,
    SAFETY_LIMIT,
)
from .data_models import RotatingSpringParameters, RotatingSpringState
from .energy import kinetic_energy, spring_potential
from .forces import centrifugal_force
from .vector_utils import Vec2

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi


def critical_speed(spring_constant: float, mass: float) -> float:
    """Angular speed at which the equilibrium length diverges, sqrt(k/m)."""
    if mass <= 0 or spring_constant <= 0:
        return 0.0
    return math.sqrt(spring_constant / mass)


def equilibrium_length(angular_speed: float, spring_constant: float, rest_length: float,
                       mass: float) -> Tuple[float, bool]:
    """
    Target length for the current drive speed.

    Returns:
        (target_length, broken). The target is always finite and >= rest_length.
    """
    if angular_speed == 0:
        return rest_length, False
    if angular_speed >= critical_speed(spring_constant, mass):
        return rest_length * BREAK_LENGTH_FACTOR, True
    denom = spring_constant - mass * angular_speed * angular_speed
    if denom <= 0:
        # Rounding right below w_c.
        return rest_length * BREAK_LENGTH_FACTOR, True
    return max(spring_constant * rest_length / denom, rest_length), False


def cap_angular_speed(requested: float, spring_constant: float, mass: float) -> float:
    """Limit a requested drive speed to ANGULAR_SPEED_CAP of the critical speed."""
    limit = critical_speed(spring_constant, mass) * ANGULAR_SPEED_CAP
    if requested > limit:
        logger.info("Angular speed capped at %.2f rad/s (critical: %.2f rad/s)",
                    limit, critical_speed(spring_constant, mass))
        return limit
    return requested


def update_target(state: RotatingSpringState, params: RotatingSpringParameters) -> bool:
    """Recompute target length and broken flag from params. Returns the broken flag."""
    target, broken = equilibrium_length(
        params.angular_speed, params.spring_constant, params.rest_length, params.mass
    )
    if broken and not state.broken:
        logger.warning(
            "Spring broke: %.2f rad/s is at or above the critical speed %.2f rad/s",
            params.angular_speed, critical_speed(params.spring_constant, params.mass),
        )
    state.target_length = target
    state.broken = broken
    return broken


def relaxation_rate(angular_speed: float) -> float:
    return RELAXATION_BASE + RELAXATION_SPIN_GAIN * angular_speed * angular_speed


def relaxation_substeps(angular_speed: float, dt: float) -> int:
    """Number of equal substeps that keep relaxation_rate * h <= 1."""
    return max(1, math.ceil(relaxation_rate(angular_speed) * dt))


def step(state: RotatingSpringState, params: RotatingSpringParameters, dt: float) -> None:
    """Relax the length toward its target and advance the angle by w*dt."""
    w = params.angular_speed
    rate = relaxation_rate(w)
    n = relaxation_substeps(w, dt)
    h = dt / n
    for _ in range(n):
        state.length += (state.target_length - state.length) * rate * h
    state.angle = (state.angle + w * dt) % TWO_PI
    state.time += dt


def reset(state: RotatingSpringState, params: RotatingSpringParameters) -> None:
    state.angle = 0.0
    state.length = params.rest_length
    state.time = 0.0
    state.broken = False
    update_target(state, params)


def mass_position(state: RotatingSpringState) -> Vec2:
    return (state.length * math.cos(state.angle), state.length * math.sin(state.angle))


def safety_status(safety_factor: float) -> str:
    if safety_factor < SAFETY_LIMIT:
        return "APPROACHING LIMIT"
    if safety_factor < SAFETY_CAUTION:
        return "CAUTION"
    return "SAFE"


def spring_stats(state: RotatingSpringState, params: RotatingSpringParameters) -> Dict[str, object]:
    """Forces, energies and the terminal-speed analysis for the stats panel."""
    w = params.angular_speed
    stretch = state.length - params.rest_length
    tangential = state.length * w
    ke = kinetic_energy(params.mass, tangential)
    pe = spring_potential(params.spring_constant, state.length, params.rest_length)
    w_c = critical_speed(params.spring_constant, params.mass)
    safety = w_c / w if w > 0 else SAFETY_AT_REST
    return {
        "length": state.length,
        "stretch": stretch,
        "spring_force": params.spring_constant * stretch,
        "centrifugal_force": centrifugal_force(params.mass, w, state.length),
        "tangential_velocity": tangential,
        "angle_deg": math.degrees(state.angle),
        "kinetic": ke,
        "potential": pe,
        "total": ke + pe,
        "critical_speed": w_c,
        "safety_factor": safety,
        "status": safety_status(safety),
        "percent_of_critical": (w / w_c * 100.0) if w_c > 0 else 0.0,
        "danger": w > 0 and params.spring_constant - params.mass * w * w <= 0,
    }
