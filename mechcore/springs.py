#!/usr/bin/env python3
"""
Multi-spring mass system.

One mass hangs between up to three Hookean springs whose far ends are fixed
world anchors. There is no gravity; the only other force is viscous air
resistance -c*v. The mass is advanced velocity-first (semi-implicit Euler).
"""
from typing import Tuple

from .data_models import SpringParameters, SpringSet
from .forces import spring_force, viscous_drag_force
from .integrators import step_semi_implicit_euler
from .vector_utils import Vec2, vec_add, vec_len, vec_scale


def net_force(spring_set: SpringSet, position: Vec2, velocity: Vec2, air_resistance: float) -> Vec2:
    total = (0.0, 0.0)
    for spring in spring_set.active():
        total = vec_add(total, spring_force(position, spring.anchor, spring.k, spring.rest_length))
    return vec_add(total, viscous_drag_force(velocity, air_resistance))


def acceleration(spring_set: SpringSet, position: Vec2, velocity: Vec2,
                 air_resistance: float) -> Vec2:
    m = spring_set.mass.mass
    if m <= 0:
        return (0.0, 0.0)
    return vec_scale(net_force(spring_set, position, velocity, air_resistance), 1.0 / m)


def step(spring_set: SpringSet, air_resistance: float, dt: float) -> None:
    """Advance the shared mass by dt (in place)."""
    body = spring_set.mass
    pos, vel, acc = step_semi_implicit_euler(
        body.position,
        body.velocity,
        lambda x, v: acceleration(spring_set, x, v, air_resistance),
        dt,
    )
    body.position = (pos[0], pos[1])
    body.velocity = (vel[0], vel[1])
    body.acceleration = (acc[0], acc[1])


def apply_parameters(spring_set: SpringSet, params: SpringParameters) -> None:
    """Copy mass, stiffness and rest lengths from params; enabled flags and anchors are kept."""
    spring_set.mass.mass = params.mass
    for spring, k, rest in zip(spring_set.springs, params.spring_constants, params.rest_lengths):
        spring.k = k
        spring.rest_length = rest


def reset(spring_set: SpringSet, params: SpringParameters) -> None:
    """Put the mass back at the origin, at rest."""
    apply_parameters(spring_set, params)
    body = spring_set.mass
    body.position = (0.0, 0.0)
    body.velocity = (0.0, 0.0)
    body.acceleration = (0.0, 0.0)


def set_enabled(spring_set: SpringSet, index: int, enabled: bool) -> None:
    if not 0 <= index < len(spring_set.springs):
        raise ValueError(f"Spring index {index} out of range")
    spring_set.springs[index].enabled = enabled


def spring_lengths(spring_set: SpringSet) -> Tuple[float, ...]:
    """Current anchor-to-mass distance of every active spring."""
    px, py = spring_set.mass.position
    out = []
    for spring in spring_set.active():
        dx = px - spring.anchor[0]
        dy = py - spring.anchor[1]
        out.append(vec_len((dx, dy)))
    return tuple(out)
