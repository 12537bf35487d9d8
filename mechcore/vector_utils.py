#!/usr/bin/env python3
"""
Vector helper functions for 2D and 3D operations.

These are small, fast functions on plain tuples used throughout the demos.
Degenerate inputs (zero-length vectors) return zero results instead of raising.
"""
import math
from typing import Tuple

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


def sign(x: float) -> float:
    """Return -1.0, 0.0 or 1.0 following the sign of x."""
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return 0.0


def vec_add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def vec_sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def vec_scale(a: Vec2, s: float) -> Vec2:
    return (a[0] * s, a[1] * s)


def vec_len(a: Vec2) -> float:
    return math.hypot(a[0], a[1])


def vec_norm(a: Vec2) -> Vec2:
    l = vec_len(a)
    if l == 0:
        return (0.0, 0.0)
    return (a[0] / l, a[1] / l)


def vec_rotate(a: Vec2, angle: float) -> Vec2:
    """Rotate a counter-clockwise by angle radians."""
    c = math.cos(angle)
    s = math.sin(angle)
    return (a[0] * c - a[1] * s, a[0] * s + a[1] * c)


def vec3_len(a: Vec3) -> float:
    return math.sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


def vec3_norm(a: Vec3) -> Vec3:
    l = vec3_len(a)
    if l == 0:
        return (0.0, 0.0, 0.0)
    return (a[0] / l, a[1] / l, a[2] / l)


def rotate_xyz(p: Vec3, tilt_x: float, tilt_y: float, tilt_z: float) -> Vec3:
    """
    Rotate a point about the X axis, then Y, then Z (angles in radians).

    The Z rotation mixes the Y-rotated x with the X-rotated y.
    """
    x, y, z = p
    # Rotation around X-axis
    y1 = y * math.cos(tilt_x) - z * math.sin(tilt_x)
    z1 = y * math.sin(tilt_x) + z * math.cos(tilt_x)
    # Rotation around Y-axis
    x2 = x * math.cos(tilt_y) + z1 * math.sin(tilt_y)
    z2 = -x * math.sin(tilt_y) + z1 * math.cos(tilt_y)
    # Rotation around Z-axis
    x3 = x2 * math.cos(tilt_z) - y1 * math.sin(tilt_z)
    y3 = x2 * math.sin(tilt_z) + y1 * math.cos(tilt_z)
    return (x3, y3, z2)


def project_perspective(p: Vec3, tilt_x: float, tilt_y: float, tilt_z: float,
                        fov: float) -> Vec2:
    """Rotate p by the view tilts and apply a pinhole perspective divide."""
    x, y, z = rotate_xyz(p, tilt_x, tilt_y, tilt_z)
    denom = fov + z
    if denom == 0:
        return (0.0, 0.0)
    factor = fov / denom
    return (x * factor, y * factor)
