#!/usr/bin/env python3
"""
Energy and momentum diagnostics.

Everything here reads state and returns numbers; nothing mutates the simulation.
Results feed the stats panel, so composite helpers return plain dicts keyed by
the label the panel shows.
"""
import math
from typing import Dict, Sequence

from .data_models import CollisionPair, PendulumChain, PendulumSegment, SpringSet
from .pendulum import bob_positions, bob_velocities
from .vector_utils import vec_len


def kinetic_energy(mass: float, speed: float) -> float:
    """KE = 1/2 m v^2."""
    return 0.5 * mass * speed * speed


def pendulum_potential(mass: float, g: float, length: float, theta: float) -> float:
    """
    Gravitational PE of a bob relative to its lowest point.

    PE = m * g * (L - L cos(theta)), zero when hanging straight down.
    """
    return mass * g * (length - length * math.cos(theta))


def spring_potential(k: float, length: float, rest_length: float) -> float:
    """Elastic PE = 1/2 k (length - rest)^2."""
    stretch = length - rest_length
    return 0.5 * k * stretch * stretch


def momentum(masses: Sequence[float], velocities: Sequence[float]) -> float:
    """Signed 1D momentum sum(m * v)."""
    return sum(m * v for m, v in zip(masses, velocities))


def energy_loss(initial_energy: float, kinetic: float, potential: float) -> float:
    """Energy dissipated so far, never negative."""
    return max(0.0, initial_energy - (kinetic + potential))


# ----- Pendulum -----

def segment_stats(segment: PendulumSegment, g: float) -> Dict[str, float]:
    """
    Per-segment readout, treating the segment as if it swung from a fixed pivot.

    speed = L*|omega|; PE and KE follow the single-pendulum formulas.
    """
    speed = abs(segment.length * segment.omega)
    pe = pendulum_potential(segment.mass, g, segment.length, segment.theta)
    ke = kinetic_energy(segment.mass, speed)
    return {
        "mass": segment.mass,
        "length": segment.length,
        "angle_deg": math.degrees(segment.theta),
        "omega": segment.omega,
        "alpha": segment.alpha,
        "speed": speed,
        "potential": pe,
        "kinetic": ke,
        "total": pe + ke,
    }


def chain_mechanical_energy(chain: PendulumChain, g: float) -> Dict[str, float]:
    """
    Mechanical energy of the whole chain using true bob velocities.

    Heights are measured from the lowest reachable point of each bob, so a chain
    hanging straight down at rest has zero energy.
    """
    active = chain.active()
    kinetic = 0.0
    potential = 0.0
    reach = 0.0
    for seg, pos, vel in zip(active, bob_positions(chain), bob_velocities(chain)):
        reach += seg.length
        kinetic += kinetic_energy(seg.mass, vec_len(vel))
        potential += seg.mass * g * (pos[1] + reach)
    return {"kinetic": kinetic, "potential": potential, "total": kinetic + potential}


# ----- Springs -----

def spring_set_energy(spring_set: SpringSet) -> Dict[str, float]:
    body = spring_set.mass
    kinetic = kinetic_energy(body.mass, vec_len(body.velocity))
    potential = 0.0
    for spring in spring_set.active():
        length = vec_len((body.position[0] - spring.anchor[0], body.position[1] - spring.anchor[1]))
        potential += spring_potential(spring.k, length, spring.rest_length)
    return {"kinetic": kinetic, "potential": potential, "total": kinetic + potential}


# ----- Blocks -----

def collision_diagnostics(pair: CollisionPair) -> Dict[str, float]:
    mv = pair.moving
    st = pair.stationary
    ke_moving = kinetic_energy(mv.mass, mv.v)
    ke_stationary = kinetic_energy(st.mass, st.v)
    return {
        "ke_moving": ke_moving,
        "ke_stationary": ke_stationary,
        "total_kinetic": ke_moving + ke_stationary,
        "momentum": momentum((mv.mass, st.mass), (mv.v, st.v)),
        "collisions": pair.collision_count,
    }
