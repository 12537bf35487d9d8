#!/usr/bin/env python3
"""
Data models for the mechanics demos.

This module defines the state containers shared between physics, rendering, and UI,
plus the immutable parameter snapshots that configure each demo.

Units and usage
- Pendulum, spring and projectile state is in meters [m], seconds [s], kilograms [kg].
- Block-collision positions are in pixels [px]; block velocities stay in m/s and are
  converted with PIXELS_PER_METER when positions advance.
- State objects are mutated by the simulation tick. Parameter snapshots are frozen and
  replaced wholesale by configuration events; access is coordinated by DemoController
  using a lock.
"""
from dataclasses import dataclass, field, fields, replace
from typing import ClassVar, Dict, List, NamedTuple, Optional, Tuple

from .constants import (
    DEFAULT_GRAVITY,
    DEFAULT_SPRING_ANCHORS,
    MAX_PENDULUM_SEGMENTS,
    MAX_SPRINGS,
)
from .utils import try_float
from .vector_utils import clamp


# ============================================================
# Bodies
# ============================================================

@dataclass
class Body:
    """
    A 2D point mass.

    Fields:
    - name: Identifier for the body
    - mass: Mass in kilograms
    - position: 2D position (x, y) in meters
    - velocity: 2D velocity (vx, vy) in meters/second
    - acceleration: last computed acceleration (ax, ay) in m/s^2
    - color: RGB tuple used for rendering
    """
    name: str
    mass: float
    position: Tuple[float, float] = (0.0, 0.0)
    velocity: Tuple[float, float] = (0.0, 0.0)
    acceleration: Tuple[float, float] = (0.0, 0.0)
    color: Tuple[int, int, int] = (250, 179, 135)


@dataclass
class Block:
    """
    A square block sliding along one axis.

    x is the center in pixels, v the velocity in m/s, a the acceleration in m/s^2,
    size the edge length in pixels (derived from mass at reset).
    """
    name: str
    mass: float
    x: float = 0.0
    v: float = 0.0
    a: float = 0.0
    size: float = 0.0
    color: Tuple[int, int, int] = (205, 214, 244)

    @property
    def half_extent(self) -> float:
        return self.size / 2.0

    @property
    def left(self) -> float:
        return self.x - self.size / 2.0

    @property
    def right(self) -> float:
        return self.x + self.size / 2.0


@dataclass
class CollisionPair:
    """Two blocks between a left wall and a far boundary, plus an event counter."""
    moving: Block
    stationary: Block
    wall_x: float
    far_x: float
    collision_count: int = 0


# ============================================================
# Pendulum chain
# ============================================================

@dataclass
class PendulumSegment:
    theta: float = 0.0  # rad, from the downward vertical
    omega: float = 0.0  # rad/s
    alpha: float = 0.0  # rad/s^2
    length: float = 10.0  # m
    mass: float = 1.0  # kg
    enabled: bool = False
    color: Tuple[int, int, int] = (243, 139, 168)


def _default_segments() -> List[PendulumSegment]:
    colors = [(243, 139, 168), (250, 179, 135), (166, 227, 161)]
    segs = [PendulumSegment(color=c) for c in colors]
    segs[0].enabled = True
    return segs


@dataclass
class PendulumChain:
    """
    Fixed-capacity chain of pendulum segments.

    Segment i hangs from segment i-1's bob; segment 0 hangs from the origin.
    Enabled segments always form a prefix of the list.
    """
    segments: List[PendulumSegment] = field(default_factory=_default_segments)
    real_physics: bool = False

    def active(self) -> List[PendulumSegment]:
        out = []
        for seg in self.segments:
            if not seg.enabled:
                break
            out.append(seg)
        return out


# ============================================================
# Springs
# ============================================================

@dataclass
class Spring:
    k: float = 1.0  # N/m
    rest_length: float = 5.0  # m
    anchor: Tuple[float, float] = (0.0, 0.0)  # fixed world point
    enabled: bool = False
    color: Tuple[int, int, int] = (243, 139, 168)


def _default_springs() -> List[Spring]:
    colors = [(243, 139, 168), (166, 227, 161), (137, 180, 250)]
    springs = [Spring(anchor=a, color=c) for a, c in zip(DEFAULT_SPRING_ANCHORS, colors)]
    springs[0].enabled = True
    return springs


@dataclass
class SpringSet:
    """Up to MAX_SPRINGS springs sharing one mass."""
    mass: Body = field(default_factory=lambda: Body(name="Mass", mass=1.0))
    springs: List[Spring] = field(default_factory=_default_springs)

    def active(self) -> List[Spring]:
        return [s for s in self.springs if s.enabled]


@dataclass
class RotatingSpringState:
    """
    A spring anchored at the origin, spun at a prescribed rate.

    length relaxes toward target_length each tick. broken is set while the drive
    speed is at or above the critical speed and halts the simulation.
    """
    angle: float = 0.0  # rad, kept in [0, 2*pi)
    length: float = 5.0  # m
    target_length: float = 5.0  # m
    broken: bool = False
    time: float = 0.0  # s of simulated time since reset


# ============================================================
# Trajectories
# ============================================================

class TrajectoryPoint(NamedTuple):
    t: float
    x: float
    y: float
    z: float
    vx: float
    vy: float
    vz: float


@dataclass(frozen=True)
class Trajectory:
    """Precomputed ballistic samples; immutable once built."""
    points: Tuple[TrajectoryPoint, ...]
    initial_energy: float
    gravity: float

    def __len__(self) -> int:
        return len(self.points)

    @property
    def landing(self) -> TrajectoryPoint:
        return self.points[-1]


# ============================================================
# Parameter snapshots
# ============================================================

def _clamp_value(value, bounds: Tuple[float, float]):
    lo, hi = bounds
    if isinstance(value, (tuple, list)):
        return tuple(clamp(float(v), lo, hi) for v in value)
    return clamp(float(value), lo, hi)


@dataclass(frozen=True)
class SimulationParameters:
    """
    Externally configured constants, read once per tick.

    drag is the demo's air-resistance control: a per-step velocity damping for
    projectiles (after AIR_RESISTANCE_TO_DRAG scaling), a viscous damping
    coefficient in 1/s for pendulums, and a viscous force coefficient in N*s/m for
    the spring system.
    """
    gravity: float = DEFAULT_GRAVITY
    drag: float = 0.0
    sim_speed: float = 1.0

    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        "gravity": (0.0, 30.0),
        "drag": (0.0, 10.0),
        "sim_speed": (0.0, 5.0),
    }

    def updated(self, **changes) -> "SimulationParameters":
        """Return a copy with changes applied, each clamped to its control range."""
        names = {f.name for f in fields(self)}
        clamped = {}
        for name, value in changes.items():
            if name not in names:
                raise ValueError(f"Unknown parameter '{name}' for {type(self).__name__}")
            bounds = self.RANGES.get(name)
            if bounds is not None and not isinstance(value, bool):
                value = _clamp_value(value, bounds)
            clamped[name] = value
        return replace(self, **clamped)


@dataclass(frozen=True)
class ProjectileParameters(SimulationParameters):
    angle_deg: float = 45.0
    speed: float = 20.0  # m/s launch speed
    three_d: bool = False

    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        **SimulationParameters.RANGES,
        "angle_deg": (0.0, 90.0),
        "speed": (0.0, 100.0),
    }


@dataclass(frozen=True)
class PendulumParameters(SimulationParameters):
    angles_deg: Tuple[float, float, float] = (45.0, 45.0, 45.0)
    masses: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    lengths: Tuple[float, float, float] = (10.0, 10.0, 10.0)
    real_physics: bool = False

    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        **SimulationParameters.RANGES,
        "angles_deg": (-180.0, 180.0),
        "masses": (0.1, 10.0),
        "lengths": (1.0, 20.0),
    }

    def __post_init__(self):
        for name in ("angles_deg", "masses", "lengths"):
            if len(getattr(self, name)) != MAX_PENDULUM_SEGMENTS:
                raise ValueError(f"{name} must have {MAX_PENDULUM_SEGMENTS} entries")
        if min(self.masses) <= 0 or min(self.lengths) <= 0:
            raise ValueError("Pendulum masses and lengths must be positive")


@dataclass(frozen=True)
class CollisionParameters(SimulationParameters):
    stationary_mass: float = 100.0  # kg
    moving_mass: float = 50.0  # kg
    speed: float = 3.0  # m/s, initial speed of the moving block (toward the wall)
    force: float = 200.0  # N
    friction: float = 0.1  # dimensionless coefficient
    force_enabled: bool = False

    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        **SimulationParameters.RANGES,
        "stationary_mass": (1.0, 1000.0),
        "moving_mass": (1.0, 1000.0),
        "speed": (0.0, 20.0),
        "force": (0.0, 1000.0),
        "friction": (0.0, 1.0),
    }

    def __post_init__(self):
        if self.stationary_mass <= 0 or self.moving_mass <= 0:
            raise ValueError("Block masses must be positive")


@dataclass(frozen=True)
class SpringParameters(SimulationParameters):
    mass: float = 1.0  # kg
    spring_constants: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    rest_lengths: Tuple[float, float, float] = (5.0, 5.0, 5.0)

    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        **SimulationParameters.RANGES,
        "mass": (0.1, 10.0),
        "spring_constants": (0.1, 20.0),
        "rest_lengths": (0.5, 20.0),
    }

    def __post_init__(self):
        for name in ("spring_constants", "rest_lengths"):
            if len(getattr(self, name)) != MAX_SPRINGS:
                raise ValueError(f"{name} must have {MAX_SPRINGS} entries")
        if self.mass <= 0:
            raise ValueError("Spring mass must be positive")


@dataclass(frozen=True)
class RotatingSpringParameters(SimulationParameters):
    angular_speed: float = 2.0  # rad/s
    spring_constant: float = 5.0  # N/m
    rest_length: float = 5.0  # m
    mass: float = 1.0  # kg

    RANGES: ClassVar[Dict[str, Tuple[float, float]]] = {
        **SimulationParameters.RANGES,
        "angular_speed": (0.0, 10.0),
        "spring_constant": (0.1, 50.0),
        "rest_length": (1.0, 20.0),
        "mass": (0.1, 10.0),
    }

    def __post_init__(self):
        if self.mass <= 0 or self.spring_constant <= 0:
            raise ValueError("Rotating spring mass and stiffness must be positive")


def _coerce_number(name: str, value):
    if isinstance(value, tuple):
        return tuple(_coerce_number(name, v) for v in value)
    number = try_float(value)
    if number is None:
        raise ValueError(f"Parameter '{name}' must be a finite number, got {value!r}")
    return number


PARAMETER_TYPES: Dict[str, type] = {
    "projectile": ProjectileParameters,
    "pendulum": PendulumParameters,
    "collision": CollisionParameters,
    "springs": SpringParameters,
    "rotating_spring": RotatingSpringParameters,
}


def parameters_from_dict(demo: str, values: Optional[dict]) -> SimulationParameters:
    """Build a clamped parameter snapshot for demo from a plain dict (e.g. JSON)."""
    cls = PARAMETER_TYPES.get(demo)
    if cls is None:
        raise ValueError(f"Unknown demo '{demo}'")
    known = {f.name for f in fields(cls)}
    changes = {}
    for name, value in (values or {}).items():
        if name not in known:
            continue
        if isinstance(value, list):
            value = tuple(value)
        if name in cls.RANGES:
            value = _coerce_number(name, value)
        changes[name] = value
    return cls().updated(**changes)
