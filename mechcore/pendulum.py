#!/usr/bin/env python3
"""
Pendulum dynamics for single, double and triple pendulums.

Responsibilities
- Angular accelerations for a chain of up to three segments, in two modes:
  * simple mode: every enabled segment swings as an independent simple pendulum
    (alpha = -(g/L) sin(theta) - damping*omega), advanced velocity-first with Euler;
  * real-physics mode: segments are coupled with the Lagrangian double-pendulum
    equations and advanced with RK4.
- Bob positions for drawing and energy bookkeeping.
- The enable/disable rules of the fixed three-slot chain.

Conventions
- theta is measured from the downward vertical, counter-clockwise positive.
- Segment 0 pivots at the origin; bob i sits at
  x_i = x_{i-1} + L_i sin(theta_i), y_i = y_{i-1} - L_i cos(theta_i).

Numerical notes
- Three coupled segments use the double-pendulum formula twice, once for pair (1, 2)
  and once for pair (2, 3), keeping the lower result of the second pair for segment 3.
  This is an approximation of the three-body Lagrangian and does not conserve energy
  exactly; it is kept because the demo's chaotic look is built on it.
- The double-pendulum denominator 2*m1 + m2 - m2*cos(2*(t1 - t2)) is at least 2*m1,
  so it only vanishes for a massless upper bob, which parameter clamping rules out.
"""
import logging
import math
from typing import List, Sequence, Tuple

from .data_models import PendulumChain, PendulumParameters, PendulumSegment
from .integrators import step_rk4, step_semi_implicit_euler
from .vector_utils import Vec2

logger = logging.getLogger(__name__)


# ============================================================
# Equations of motion
# ============================================================

def single_angular_acceleration(theta: float, omega: float, length: float,
                                g: float, damping: float) -> float:
    if length <= 0:
        return 0.0
    return -(g / length) * math.sin(theta) - damping * omega


def double_angular_accelerations(theta1: float, omega1: float, theta2: float, omega2: float,
                                 length1: float, length2: float, mass1: float, mass2: float,
                                 g: float, damping: float) -> Tuple[float, float]:
    """Coupled angular accelerations of an ideal double pendulum plus linear damping."""
    if length1 <= 0 or length2 <= 0:
        return 0.0, 0.0
    delta = theta1 - theta2
    den = 2.0 * mass1 + mass2 - mass2 * math.cos(2.0 * delta)
    if den == 0:
        return 0.0, 0.0

    num1 = (
        -g * (2.0 * mass1 + mass2) * math.sin(theta1)
        - mass2 * g * math.sin(theta1 - 2.0 * theta2)
        - 2.0 * math.sin(delta) * mass2
        * (omega2 * omega2 * length2 + omega1 * omega1 * length1 * math.cos(delta))
    )
    num2 = (
        2.0 * math.sin(delta)
        * (
            omega1 * omega1 * length1 * (mass1 + mass2)
            + g * (mass1 + mass2) * math.cos(theta1)
            + omega2 * omega2 * length2 * mass2 * math.cos(delta)
        )
    )
    alpha1 = num1 / (length1 * den) - damping * omega1
    alpha2 = num2 / (length2 * den) - damping * omega2
    return alpha1, alpha2


def chain_accelerations(thetas: Sequence[float], omegas: Sequence[float],
                        lengths: Sequence[float], masses: Sequence[float],
                        g: float, damping: float, coupled: bool) -> Tuple[float, ...]:
    """
    Angular accelerations for 1-3 segments.

    With coupled=False every segment is an independent simple pendulum.
    """
    n = len(thetas)
    if n == 0:
        return ()
    if not coupled or n == 1:
        return tuple(
            single_angular_acceleration(thetas[i], omegas[i], lengths[i], g, damping)
            for i in range(n)
        )

    a1, a2 = double_angular_accelerations(
        thetas[0], omegas[0], thetas[1], omegas[1],
        lengths[0], lengths[1], masses[0], masses[1], g, damping,
    )
    if n == 2:
        return (a1, a2)

    _, a3 = double_angular_accelerations(
        thetas[1], omegas[1], thetas[2], omegas[2],
        lengths[1], lengths[2], masses[1], masses[2], g, damping,
    )
    return (a1, a2, a3)


# ============================================================
# Stepping
# ============================================================

def step_chain(chain: PendulumChain, g: float, damping: float, dt: float) -> None:
    """
    Advance every enabled segment of chain by dt (in place).

    Real-physics chains use RK4 on the coupled (theta, omega) state; simple chains
    use the velocity-first Euler update. Each segment's alpha is left at the value
    evaluated at the start of the step.
    """
    active = chain.active()
    n = len(active)
    if n == 0 or dt <= 0:
        return

    lengths = tuple(seg.length for seg in active)
    masses = tuple(seg.mass for seg in active)
    thetas = tuple(seg.theta for seg in active)
    omegas = tuple(seg.omega for seg in active)
    coupled = chain.real_physics

    if coupled:
        def derivative(state):
            th = state[:n]
            om = state[n:]
            return om + chain_accelerations(th, om, lengths, masses, g, damping, True)

        alphas = chain_accelerations(thetas, omegas, lengths, masses, g, damping, True)
        new_state = step_rk4(thetas + omegas, derivative, dt)
        new_thetas, new_omegas = new_state[:n], new_state[n:]
    else:
        new_thetas, new_omegas, alphas = step_semi_implicit_euler(
            thetas, omegas,
            lambda th, om: chain_accelerations(th, om, lengths, masses, g, damping, False),
            dt,
        )

    for seg, th, om, al in zip(active, new_thetas, new_omegas, alphas):
        seg.theta = th
        seg.omega = om
        seg.alpha = al


# ============================================================
# Geometry
# ============================================================

def bob_positions(chain: PendulumChain) -> List[Vec2]:
    """World positions of every enabled bob, cumulative from the origin."""
    positions: List[Vec2] = []
    x, y = 0.0, 0.0
    for seg in chain.active():
        x += seg.length * math.sin(seg.theta)
        y -= seg.length * math.cos(seg.theta)
        positions.append((x, y))
    return positions


def bob_velocities(chain: PendulumChain) -> List[Vec2]:
    """World velocities of every enabled bob (time derivative of bob_positions)."""
    velocities: List[Vec2] = []
    vx, vy = 0.0, 0.0
    for seg in chain.active():
        vx += seg.length * seg.omega * math.cos(seg.theta)
        vy += seg.length * seg.omega * math.sin(seg.theta)
        velocities.append((vx, vy))
    return velocities


# ============================================================
# Chain configuration
# ============================================================

def _check_index(chain: PendulumChain, index: int) -> None:
    if not 0 <= index < len(chain.segments):
        raise ValueError(f"Pendulum segment index {index} out of range")


def enable_segment(chain: PendulumChain, index: int) -> bool:
    """
    Enable segment index. Rejected (returns False) unless every segment above it
    is already enabled.
    """
    _check_index(chain, index)
    if any(not seg.enabled for seg in chain.segments[:index]):
        logger.info("Cannot enable pendulum %d before pendulum %d", index + 1, index)
        return False
    chain.segments[index].enabled = True
    return True


def disable_segment(chain: PendulumChain, index: int) -> None:
    """Disable segment index and every segment hanging below it. Segment 0 always stays on."""
    _check_index(chain, index)
    if index == 0:
        logger.info("The first pendulum cannot be disabled")
        return
    for seg in chain.segments[index:]:
        seg.enabled = False


def toggle_segment(chain: PendulumChain, index: int) -> bool:
    """Flip segment index following the cascade rules. Returns its new enabled state."""
    _check_index(chain, index)
    if chain.segments[index].enabled:
        disable_segment(chain, index)
    else:
        enable_segment(chain, index)
    return chain.segments[index].enabled


def set_segment_angle(segment: PendulumSegment, theta: float) -> None:
    """Place a segment at a new start angle, at rest."""
    segment.theta = theta
    segment.omega = 0.0
    segment.alpha = 0.0


def reset_chain(chain: PendulumChain, params: PendulumParameters) -> None:
    """Reinitialize every segment from params; enabled flags are kept."""
    chain.real_physics = params.real_physics
    for i, seg in enumerate(chain.segments):
        set_segment_angle(seg, math.radians(params.angles_deg[i]))
        seg.mass = params.masses[i]
        seg.length = params.lengths[i]
