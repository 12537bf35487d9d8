#!/usr/bin/env python3
"""
Shared constants for the mechanics demos (SI units unless stated otherwise).

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier. Block-collision positions are the exception
to SI: they live in screen pixels, with PIXELS_PER_METER converting velocities.
"""

# Physical defaults
DEFAULT_GRAVITY = 9.8  # m/s^2, slider default for every demo
FRICTION_GRAVITY = 9.81  # m/s^2, used only for the Coulomb friction normal force

# Time stepping
BASE_DT = 0.016  # seconds of simulation time per display frame (before speed scaling)
MAX_FRAME_DT = 0.05  # clamp for wall-clock driven ticks (backgrounded window, stalls)
MAX_SUBSTEPS = 1000  # upper bound on stability substeps within one tick
TRAJECTORY_DT = 0.1  # fixed step for precomputed projectile trajectories
TRAJECTORY_MAX_STEPS = 1000  # 100 s of simulated flight

# Projectile
AIR_RESISTANCE_TO_DRAG = 0.1  # slider value (N*s/m^2) -> per-step drag coefficient
LATERAL_SPEED_RATIO = 0.1  # 3D variant: forward z-speed as a fraction of launch speed
PROJECTILE_MASS = 1.0  # kg, fixed in the projectile demos
DEFAULT_FOV = 500.0  # distance from camera to projection plane (3D view)

# Block collisions (pixel space)
PIXELS_PER_METER = 100.0  # 1 pixel = 1 cm
DENSITY = 1.0  # kg per pixel^2 (visual only)
MASS_TO_SIZE_SCALE = 10.0  # size = sqrt(mass / DENSITY) * MASS_TO_SIZE_SCALE
WALL_THICKNESS = 10.0  # px, left wall boundary
WORLD_WIDTH = 1000.0  # px, far boundary
WALL_CLEARANCE = 0.5  # px pushed clear of the wall after a bounce
SEPARATION_GAP = 0.01  # px left between two blocks after de-penetration
STOP_SPEED = 0.01  # m/s, below this a friction-driven block snaps to rest
STATIONARY_START_X = 200.0  # px
MOVING_START_MARGIN = 150.0  # px from the far boundary
MOVING_START_GAP = 50.0  # px minimum gap between blocks at reset

# Pendulum
MAX_PENDULUM_SEGMENTS = 3

# Springs
MAX_SPRINGS = 3
DEFAULT_SPRING_ANCHORS = ((5.0, 0.0), (-5.0, 0.0), (0.0, 5.0))

# Rotating spring
ANGULAR_SPEED_CAP = 0.99  # fraction of the critical speed a slider may request
BREAK_LENGTH_FACTOR = 10.0  # broken spring drawn at this multiple of rest length
RELAXATION_BASE = 0.3  # 1/s
RELAXATION_SPIN_GAIN = 0.5  # s, multiplies omega^2
SAFETY_LIMIT = 1.2  # below: approaching limit
SAFETY_CAUTION = 1.5  # below: caution
SAFETY_AT_REST = 999.0  # reported safety factor when not spinning

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
BACKGROUND_COLOR = (30, 30, 46)
GRID_COLOR = (68, 71, 90)
GRID_FINE_COLOR = (49, 50, 68)
AXIS_COLOR = (205, 214, 244)
TEXT_COLOR = (205, 214, 244)
VELOCITY_VECTOR_COLOR = (166, 227, 161)
PEAK_COLOR = (249, 226, 175)

# Camera zoom bounds (pixels-per-meter)
DEFAULT_PIXELS_PER_UNIT = 10.0
MIN_PIXELS_PER_UNIT = 0.5
MAX_PIXELS_PER_UNIT = 400.0

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
