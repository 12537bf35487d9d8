#!/usr/bin/env python3
"""
Collision handling for the block-collision demo.

Two square blocks slide along one axis between a left wall and a far boundary.
Each tick the caller advances positions first and then calls into this module,
so collisions are resolved after the fact rather than predicted:

- Wall: a block whose left edge reaches the wall is pushed clear of it, and its
  velocity is reflected if it was moving into the wall.
- Block-block: overlapping blocks exchange velocity with the 1D elastic formulas
  and the moving block is placed flush against the other one. The side it lands
  on is decided by the current center positions (left center stays left), never
  by the pre-collision velocity sign.
- Bounds: blocks are clamped inside the world. The stationary block reaching the
  far boundary while moving outward is reported so the demo can reset.
"""
import logging
import math
from typing import Optional, Tuple

from .constants import (
    DENSITY,
    MASS_TO_SIZE_SCALE,
    PIXELS_PER_METER,
    SEPARATION_GAP,
    WALL_CLEARANCE,
)
from .data_models import Block, CollisionPair

logger = logging.getLogger(__name__)


def mass_to_size(mass: float) -> float:
    """Edge length in pixels of a square block of the given mass (area = mass / density)."""
    if mass <= 0:
        return 0.0
    return math.sqrt(mass / DENSITY) * MASS_TO_SIZE_SCALE


def elastic_velocities(m1: float, v1: float, m2: float, v2: float) -> Tuple[float, float]:
    """Post-collision velocities for a 1D perfectly elastic collision."""
    total = m1 + m2
    if total <= 0:
        return v1, v2
    new_v1 = ((m1 - m2) * v1 + 2.0 * m2 * v2) / total
    new_v2 = ((m2 - m1) * v2 + 2.0 * m1 * v1) / total
    return new_v1, new_v2


def advance_blocks(pair: CollisionPair, dt: float) -> None:
    """Move both blocks by their current velocities (m/s converted to px)."""
    pair.moving.x += pair.moving.v * PIXELS_PER_METER * dt
    pair.stationary.x += pair.stationary.v * PIXELS_PER_METER * dt


def resolve_wall(block: Block, wall_x: float) -> bool:
    """
    Keep block right of the wall.

    Returns True when the block bounced (it was moving into the wall).
    """
    if block.left > wall_x:
        return False
    block.x = wall_x + block.half_extent + WALL_CLEARANCE
    if block.v < 0:
        block.v = -block.v
        return True
    return False


def blocks_overlap(a: Block, b: Block) -> bool:
    return a.right >= b.left and a.left <= b.right


def separate_blocks(pair: CollisionPair) -> None:
    """Place the moving block flush against the stationary one, on its current side."""
    mv = pair.moving
    st = pair.stationary
    if mv.x < st.x:
        mv.x = st.left - mv.half_extent - SEPARATION_GAP
    else:
        mv.x = st.right + mv.half_extent + SEPARATION_GAP


def resolve_block_contact(pair: CollisionPair) -> bool:
    """Exchange velocities and de-penetrate if the blocks overlap. Returns True on contact."""
    mv = pair.moving
    st = pair.stationary
    if not blocks_overlap(mv, st):
        return False
    mv.v, st.v = elastic_velocities(mv.mass, mv.v, st.mass, st.v)
    separate_blocks(pair)
    return True


def handle_collisions(pair: CollisionPair) -> Optional[str]:
    """
    Detect and resolve wall and block-block collisions after positions advanced.

    Returns a human-readable message if a collision occurred.
    """
    last_msg: Optional[str] = None

    if resolve_wall(pair.moving, pair.wall_x):
        pair.collision_count += 1
        last_msg = f"{pair.moving.name} bounced off the wall"
    if resolve_wall(pair.stationary, pair.wall_x):
        pair.collision_count += 1
        last_msg = f"{pair.stationary.name} bounced off the wall"

    if resolve_block_contact(pair):
        pair.collision_count += 1
        last_msg = f"Elastic collision: {pair.moving.name} ↔ {pair.stationary.name}"

    if last_msg:
        logger.debug("%s (count=%d)", last_msg, pair.collision_count)
    return last_msg


def enforce_bounds(pair: CollisionPair) -> bool:
    """
    Clamp both blocks inside [wall_x, far_x].

    Returns True when the stationary block hit the far boundary while moving
    outward; its velocity is zeroed and the caller is expected to reset.
    """
    st = pair.stationary
    mv = pair.moving

    if st.left < pair.wall_x:
        st.x = pair.wall_x + st.half_extent

    if mv.right > pair.far_x:
        mv.x = pair.far_x - mv.half_extent
        if mv.v > 0:
            mv.v = 0.0

    if st.right > pair.far_x:
        st.x = pair.far_x - st.half_extent
        if st.v > 0:
            st.v = 0.0
            logger.info("%s reached the far wall; resetting", st.name)
            return True
    return False
