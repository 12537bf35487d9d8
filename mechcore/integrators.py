#!/usr/bin/env python3
"""
Fixed-step time integrators.

Responsibilities
- Advance a flat state vector (tuple of floats) by one timestep given a derivative function.
- Provide explicit Euler, classical fourth-order Runge–Kutta (RK4), and the velocity-first
  ("semi-implicit") Euler update the demos use for second-order systems.

Conventions
- State vectors are plain tuples; derivative functions take a state tuple and return a tuple
  of the same length. Nothing here mutates its inputs.
- There is no error control or adaptive stepping: dt is whatever the caller supplies,
  typically BASE_DT scaled by the speed multiplier.

Numerical notes
- Explicit Euler gains energy on oscillators (the amplitude grows by roughly
  (1 + w^2 dt^2) per step). The velocity-first variant keeps the energy error bounded,
  which is why the simple-mode demos use it.
- RK4 is not symplectic either, but at the demo time steps its drift is orders of
  magnitude below Euler's.
"""
from typing import Callable, Sequence, Tuple

State = Tuple[float, ...]
DerivativeFn = Callable[[State], Sequence[float]]


def _axpy(a: float, x: Sequence[float], y: Sequence[float]) -> State:
    """Return y + a*x elementwise."""
    return tuple(yi + a * xi for xi, yi in zip(x, y))


def step_euler(state: Sequence[float], derivative_fn: DerivativeFn, dt: float) -> State:
    """One explicit Euler step: state + f(state) * dt."""
    k = derivative_fn(tuple(state))
    return _axpy(dt, k, state)


def step_rk4(state: Sequence[float], derivative_fn: DerivativeFn, dt: float) -> State:
    """
    Perform one Runge-Kutta 4th order integration step.

    Workflow:
    1) k1 at the start of the interval
    2) k2 at the midpoint using k1
    3) k3 at the midpoint using k2
    4) k4 at the end using k3
    Combine state + dt/6 * (k1 + 2*k2 + 2*k3 + k4).

    Args:
        state: current state vector.
        derivative_fn: maps a state vector to its time derivative.
        dt: time step in seconds.

    Returns:
        The advanced state vector.
    """
    s0 = tuple(state)
    half = dt * 0.5

    k1 = derivative_fn(s0)
    k2 = derivative_fn(_axpy(half, k1, s0))
    k3 = derivative_fn(_axpy(half, k2, s0))
    k4 = derivative_fn(_axpy(dt, k3, s0))

    sixth = dt / 6.0
    return tuple(
        s + sixth * (a + 2.0 * b + 2.0 * c + d)
        for s, a, b, c, d in zip(s0, k1, k2, k3, k4)
    )


def step_semi_implicit_euler(position: Sequence[float], velocity: Sequence[float],
                             acceleration_fn: Callable[[State, State], Sequence[float]],
                             dt: float) -> Tuple[State, State, State]:
    """
    Velocity-first Euler step for a second-order system.

    v' = v + a(x, v) * dt, then x' = x + v' * dt.

    Returns:
        (new_position, new_velocity, acceleration) where acceleration is the value
        evaluated at the start of the step.
    """
    x0 = tuple(position)
    v0 = tuple(velocity)
    a = tuple(acceleration_fn(x0, v0))
    v1 = _axpy(dt, a, v0)
    x1 = _axpy(dt, v1, x0)
    return x1, v1, a


INTEGRATORS = {
    "Euler": step_euler,
    "RK4": step_rk4,
}
