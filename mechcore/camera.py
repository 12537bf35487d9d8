#!/usr/bin/env python3
"""
Camera utilities for 2D world-to-screen transforms.

World space is y-up (meters for most demos, pixels for the block demo);
screen space is pygame's y-down pixel grid.
"""
from typing import Optional, Tuple

from .constants import (
    DEFAULT_PIXELS_PER_UNIT,
    MAX_PIXELS_PER_UNIT,
    MIN_PIXELS_PER_UNIT,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from .vector_utils import clamp


class Camera2D:
    """
    Simple 2D camera that maps world coordinates to screen pixels.

    center is the world point drawn at the screen anchor. The anchor defaults to
    the middle of the viewport; demos that live above a ground line move it down.
    """

    def __init__(self, center=(0.0, 0.0), pixels_per_unit=DEFAULT_PIXELS_PER_UNIT,
                 anchor: Tuple[float, float] = (0.5, 0.5)):
        self.center = [center[0], center[1]]
        self.ppu = pixels_per_unit
        self.anchor = anchor
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (w, h)

    def _anchor_px(self) -> Tuple[float, float]:
        return (self.viewport_size[0] * self.anchor[0], self.viewport_size[1] * self.anchor[1])

    def world_to_screen(self, pos: Tuple[float, float]) -> Tuple[int, int]:
        ax, ay = self._anchor_px()
        px = (pos[0] - self.center[0]) * self.ppu + ax
        py = ay - (pos[1] - self.center[1]) * self.ppu
        return (int(px), int(py))

    def screen_to_world(self, screen: Tuple[int, int]) -> Tuple[float, float]:
        ax, ay = self._anchor_px()
        wx = (screen[0] - ax) / self.ppu + self.center[0]
        wy = (ay - screen[1]) / self.ppu + self.center[1]
        return (wx, wy)

    def zoom(self, factor, pivot_screen: Optional[Tuple[int, int]] = None):
        """Scale by factor, keeping the world point under pivot_screen fixed."""
        factor = clamp(factor, 0.05, 20.0)
        before = None
        if pivot_screen is not None:
            before = self.screen_to_world(pivot_screen)
        self.ppu = clamp(self.ppu * factor, MIN_PIXELS_PER_UNIT, MAX_PIXELS_PER_UNIT)
        if before is not None:
            after = self.screen_to_world(pivot_screen)
            self.center[0] += before[0] - after[0]
            self.center[1] += before[1] - after[1]

    def pan_pixels(self, dx_pixels, dy_pixels):
        self.center[0] -= dx_pixels / self.ppu
        self.center[1] += dy_pixels / self.ppu

    def fit(self, center: Tuple[float, float], half_extent: float, margin: float = 1.2) -> None:
        """Center on a point and zoom so a square of the given half-extent fills the view."""
        self.center = [center[0], center[1]]
        if half_extent <= 0:
            return
        view = min(self.viewport_size)
        self.ppu = clamp(view / (2.0 * half_extent * margin), MIN_PIXELS_PER_UNIT, MAX_PIXELS_PER_UNIT)
