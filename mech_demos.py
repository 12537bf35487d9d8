#!/usr/bin/env python3
"""
Mechanics Demos application entry point and UI/renderer coordination.

What this module does
- Starts two event loops: a Pygame rendering thread (viewport) and the Dear PyGui UI
  (running on the main thread).
- Maintains a shared DemoController that owns one simulation per demo (projectile,
  pendulum, block collision, spring system, rotating spring); all access is guarded
  by a re-entrant lock for thread-safety.
- Provides JSON presets, per-demo cameras and drawing, and a Dear PyGui-based control
  panel with sliders, toggles and a periodically refreshed stats readout.

Threading model
- PygameRenderer runs in a background thread and performs: input handling (for the viewport),
  ticking the active simulation, and drawing. It locks the DemoController around short
  critical sections to read/update shared state.
- The UI class runs in the main thread via Dear PyGui. It pushes parameter snapshots
  through DemoController methods (lock-protected) and refreshes its readouts on a
  periodic frame callback.

Units and conventions
- SI units: meters [m], kilograms [kg], seconds [s]. The block demo draws in pixels
  (100 px per meter). World space is y-up.
- Colors are RGB tuples in 0..255.

Running
1) Install: `pip install -e .`
2) Run this module: `python mech_demos.py` (or the `mech-demos` script)
"""

import logging
import math
import threading
import time
from typing import Dict, List, Optional, Tuple

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from mechcore import pendulum, rotating_spring
from mechcore.camera import Camera2D
from mechcore.constants import (
    AXIS_COLOR,
    BACKGROUND_COLOR,
    DEFAULT_FOV,
    GRID_COLOR,
    GRID_FINE_COLOR,
    PEAK_COLOR,
    SAFE_COORD_LIMIT,
    TEXT_COLOR,
    VELOCITY_VECTOR_COLOR,
    VIEW_HEIGHT,
    VIEW_WIDTH,
    WORLD_WIDTH,
)
from mechcore.data_models import PARAMETER_TYPES
from mechcore.presets_loader import list_presets, load_preset
from mechcore.simulation import DemoController
from mechcore.vector_utils import Vec2, project_perspective, vec_len, vec_norm, vec_sub

logger = logging.getLogger(__name__)

DEMO_LABELS = {
    "projectile": "Projectile",
    "pendulum": "Pendulum",
    "collision": "Block collision",
    "springs": "Spring system",
    "rotating_spring": "Rotating spring",
}
LABEL_TO_DEMO = {v: k for k, v in DEMO_LABELS.items()}

# Slider labels for every parameter field; tuple fields get " 1", " 2", " 3" appended.
PARAMETER_LABELS = {
    "gravity": "Gravity (m/s^2)",
    "drag": "Air resistance",
    "sim_speed": "Speed (x)",
    "angle_deg": "Launch angle (deg)",
    "speed": "Speed (m/s)",
    "angles_deg": "Angle (deg)",
    "masses": "Mass (kg)",
    "lengths": "Length (m)",
    "stationary_mass": "Stationary mass (kg)",
    "moving_mass": "Moving mass (kg)",
    "force": "Force (N)",
    "friction": "Friction coefficient",
    "mass": "Mass (kg)",
    "spring_constants": "k (N/m)",
    "rest_lengths": "Rest length (m)",
    "angular_speed": "Angular speed (rad/s)",
    "spring_constant": "Spring constant (N/m)",
    "rest_length": "Rest length (m)",
}
COMMON_FIELDS = ("gravity", "drag", "sim_speed")

# Which common sliders matter for each demo
DEMO_COMMON_FIELDS = {
    "projectile": ("gravity", "drag", "sim_speed"),
    "pendulum": ("gravity", "drag", "sim_speed"),
    "collision": ("sim_speed",),
    "springs": ("drag", "sim_speed"),
    "rotating_spring": ("sim_speed",),
}

# ============================================================
# Rendering
# ============================================================

def _default_cameras() -> Dict[str, Camera2D]:
    return {
        "projectile": Camera2D(center=(0.0, 0.0), pixels_per_unit=10.0, anchor=(0.08, 0.88)),
        "pendulum": Camera2D(center=(0.0, 0.0), pixels_per_unit=12.0, anchor=(0.5, 0.2)),
        "collision": Camera2D(center=(WORLD_WIDTH / 2.0, 0.0), pixels_per_unit=1.0, anchor=(0.5, 0.7)),
        "springs": Camera2D(center=(0.0, 0.0), pixels_per_unit=25.0),
        "rotating_spring": Camera2D(center=(0.0, 0.0), pixels_per_unit=15.0),
    }


class PygameRenderer(threading.Thread):
    """
    Pygame loop: ticks the active demo and draws it with grid, vectors and HUD.
    Handles camera panning and zoom.
    """
    def __init__(self, controller: DemoController):
        super().__init__(daemon=True)
        self.controller = controller
        self.cameras = _default_cameras()
        self.surface = None
        self.clock = None
        self.dragging_background = False
        self.drag_start_screen = (0, 0)
        self.pan_speed_keys = 600  # pixels per second
        self.tilt = [0.0, 0.0, 0.0]  # 3D projectile view rotation (rad)
        self.running = True

    @property
    def camera(self) -> Camera2D:
        return self.cameras[self.controller.demo]

    def reset_camera(self):
        with self.controller.lock:
            demo = self.controller.demo
        size = self.camera.viewport_size
        self.cameras[demo] = _default_cameras()[demo]
        self.cameras[demo].set_viewport_size(*size)

    def run(self):
        pygame.init()
        pygame.display.set_caption("Mechanics Demos - Viewport")
        self.surface = pygame.display.set_mode((VIEW_WIDTH, VIEW_HEIGHT), pygame.RESIZABLE)
        for cam in self.cameras.values():
            cam.set_viewport_size(VIEW_WIDTH, VIEW_HEIGHT)
        self.clock = pygame.time.Clock()

        last_time = time.perf_counter()
        while self.running and self.controller.running:
            now = time.perf_counter()
            real_dt = now - last_time
            last_time = now

            # Input handling
            self.handle_events(real_dt)

            # Physics step (frame time is clamped inside the simulation)
            self.controller.tick(real_dt)

            # Draw
            self.draw()

            # Limit FPS
            self.clock.tick(60)

        pygame.quit()

    def handle_events(self, real_dt):
        keys = pygame.key.get_pressed()
        if keys[pygame.K_LEFT]:
            self.camera.pan_pixels(self.pan_speed_keys * real_dt, 0)
        if keys[pygame.K_RIGHT]:
            self.camera.pan_pixels(-self.pan_speed_keys * real_dt, 0)
        if keys[pygame.K_UP]:
            self.camera.pan_pixels(0, self.pan_speed_keys * real_dt)
        if keys[pygame.K_DOWN]:
            self.camera.pan_pixels(0, -self.pan_speed_keys * real_dt)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.controller.running = False
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                for cam in self.cameras.values():
                    cam.set_viewport_size(event.w, event.h)

            elif event.type == pygame.MOUSEWHEEL:
                factor = 1.1 if event.y > 0 else 1.0 / 1.1
                self.camera.zoom(factor, pygame.mouse.get_pos())

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_SPACE:
                    self.controller.toggle_play()
                elif event.key == pygame.K_r:
                    self.controller.reset()
                elif event.key == pygame.K_c:
                    self.reset_camera()

            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button in (1, 2, 3):
                    self.dragging_background = True
                    self.drag_start_screen = pygame.mouse.get_pos()

            elif event.type == pygame.MOUSEBUTTONUP:
                if event.button in (1, 2, 3):
                    self.dragging_background = False

            elif event.type == pygame.MOUSEMOTION:
                if self.dragging_background:
                    mouse = pygame.mouse.get_pos()
                    dx = mouse[0] - self.drag_start_screen[0]
                    dy = mouse[1] - self.drag_start_screen[1]
                    self.camera.pan_pixels(dx, dy)
                    self.drag_start_screen = mouse

    def draw_grid(self, surf, camera: Camera2D):
        w, h = camera.viewport_size

        # Choose spacing so grid lines are approximately 100 pixels apart
        target_px = 100
        spacing_m = target_px / camera.ppu
        # Round spacing to 1-2-5 sequence
        pow10 = 10 ** math.floor(math.log10(spacing_m)) if spacing_m > 0 else 1
        mant = spacing_m / pow10
        if mant < 2:
            spacing = 1 * pow10
        elif mant < 5:
            spacing = 2 * pow10
        else:
            spacing = 5 * pow10
        fine = spacing / 5

        # World bounds of the screen (y-up: top-left has the largest y)
        top_left = camera.screen_to_world((0, 0))
        bottom_right = camera.screen_to_world((w, h))

        for step, color in ((fine, GRID_FINE_COLOR), (spacing, GRID_COLOR)):
            x = math.floor(top_left[0] / step) * step
            while x <= bottom_right[0]:
                sx, _ = camera.world_to_screen((x, 0))
                pygame.draw.line(surf, color, (sx, 0), (sx, h), 1)
                x += step
            y = math.floor(bottom_right[1] / step) * step
            while y <= top_left[1]:
                _, sy = camera.world_to_screen((0, y))
                pygame.draw.line(surf, color, (0, sy), (w, sy), 1)
                y += step

        # Axes
        ox, oy = camera.world_to_screen((0.0, 0.0))
        if 0 <= oy <= h:
            pygame.draw.line(surf, AXIS_COLOR, (0, oy), (w, oy), 1)
        if 0 <= ox <= w:
            pygame.draw.line(surf, AXIS_COLOR, (ox, 0), (ox, h), 1)

    def draw(self):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        with self.controller.lock:
            demo = self.controller.demo
            sim = self.controller.active
            show_vel = self.controller.show_velocity_vectors
            show_peak = self.controller.show_peak
            playing = sim.playing
            sim_time = sim.time
            sim_speed = sim.params.sim_speed
        camera = self.cameras[demo]

        if demo != "collision":
            self.draw_grid(surf, camera)

        draw_fn = getattr(self, f"draw_{demo}")
        draw_fn(surf, camera, sim, show_vel, show_peak)

        # HUD text
        draw_text(surf, "Drag: pan | Wheel: zoom | Arrows: pan | Space: Play/Pause | R: reset | C: camera", 10, 10, TEXT_COLOR)
        draw_text(
            surf,
            f"{DEMO_LABELS[demo]}  t = {sim_time:.2f} s  Speed: {sim_speed:.2f}x  [{'Playing' if playing else 'Paused'}]",
            10, 30, TEXT_COLOR,
        )

        pygame.display.flip()

    # ----- per-demo drawing -----

    def draw_projectile(self, surf, camera, sim, show_vel, show_peak):
        with self.controller.lock:
            shown = list(sim.player.visible_points())
            peak = sim.player.peak()
            three_d = sim.params.three_d
        if not shown:
            return

        tilt_x, tilt_y, tilt_z = self.tilt

        def to_screen(p) -> Tuple[int, int]:
            if three_d:
                return camera.world_to_screen(project_perspective((p.x, p.y, p.z), tilt_x, tilt_y, tilt_z, DEFAULT_FOV))
            return camera.world_to_screen((p.x, p.y))

        w = camera.viewport_size[0]
        gy = camera.world_to_screen((0.0, 0.0))[1]
        pygame.draw.line(surf, AXIS_COLOR, (0, gy), (w, gy), 2)

        pts = [sp for sp in (_safe_point(to_screen(p)) for p in shown) if sp]
        if len(pts) > 1:
            pygame.draw.aalines(surf, (137, 180, 250), False, pts)

        current = shown[-1]
        head = _safe_point(to_screen(current))
        if head:
            gfxdraw.filled_circle(surf, head[0], head[1], 6, (243, 139, 168))
            gfxdraw.aacircle(surf, head[0], head[1], 6, (0, 0, 0))

        if show_peak and peak is not None:
            peak_s = _safe_point(to_screen(peak))
            base_s = _safe_point(to_screen(peak._replace(y=0.0)))
            axis_s = _safe_point(camera.world_to_screen((0.0, peak.y)))
            if peak_s and base_s and axis_s:
                draw_dashed_line(surf, PEAK_COLOR, axis_s, peak_s)
                draw_dashed_line(surf, PEAK_COLOR, base_s, peak_s)
                draw_text(surf, f"Peak: {peak.y:.2f} m", peak_s[0] + 8, peak_s[1] - 18, PEAK_COLOR)

        if show_vel and head:
            tip = to_screen(current._replace(x=current.x + current.vx * 0.5, y=current.y + current.vy * 0.5))
            draw_vector(surf, head, tip, VELOCITY_VECTOR_COLOR)

    def draw_pendulum(self, surf, camera, sim, show_vel, show_peak):
        with self.controller.lock:
            active = sim.chain.active()
            colors = [seg.color for seg in active]
            masses = [seg.mass for seg in active]
            positions = pendulum.bob_positions(sim.chain)
            velocities = pendulum.bob_velocities(sim.chain)

        pivot = camera.world_to_screen((0.0, 0.0))
        gfxdraw.filled_circle(surf, pivot[0], pivot[1], 4, AXIS_COLOR)
        prev = pivot
        for pos, vel, color, mass in zip(positions, velocities, colors, masses):
            bob = _safe_point(camera.world_to_screen(pos))
            if bob is None:
                prev = None
                continue
            if prev is not None:
                pygame.draw.aaline(surf, AXIS_COLOR, prev, bob)
            r = int(6 + 4 * math.sqrt(mass))
            gfxdraw.filled_circle(surf, bob[0], bob[1], r, color)
            gfxdraw.aacircle(surf, bob[0], bob[1], r, (0, 0, 0))
            if show_vel and vec_len(vel) > 0:
                tip = camera.world_to_screen((pos[0] + vel[0] * 0.3, pos[1] + vel[1] * 0.3))
                draw_vector(surf, bob, tip, VELOCITY_VECTOR_COLOR)
            prev = bob

    def draw_collision(self, surf, camera, sim, show_vel, show_peak):
        with self.controller.lock:
            pair = sim.pair
            blocks = [(b.x, b.size, b.v, b.color) for b in (pair.stationary, pair.moving)]
            wall_x = pair.wall_x
            far_x = pair.far_x
            count = pair.collision_count

        w, h = camera.viewport_size
        gl = camera.world_to_screen((0.0, 0.0))
        pygame.draw.line(surf, AXIS_COLOR, (0, gl[1]), (w, gl[1]), 2)
        # Left wall and far boundary
        wall_top = camera.world_to_screen((0.0, 400.0))
        wall_right = camera.world_to_screen((wall_x, 0.0))
        pygame.draw.rect(surf, GRID_COLOR, pygame.Rect(wall_top[0], wall_top[1], max(1, wall_right[0] - wall_top[0]), gl[1] - wall_top[1]))
        far = camera.world_to_screen((far_x, 0.0))
        pygame.draw.line(surf, GRID_COLOR, (far[0], wall_top[1]), far, 1)

        for x, size, v, color in blocks:
            top_left = _safe_point(camera.world_to_screen((x - size / 2.0, size)))
            bottom_right = _safe_point(camera.world_to_screen((x + size / 2.0, 0.0)))
            if not top_left or not bottom_right:
                continue
            rect = pygame.Rect(top_left[0], top_left[1], bottom_right[0] - top_left[0], bottom_right[1] - top_left[1])
            pygame.draw.rect(surf, color, rect)
            pygame.draw.rect(surf, (0, 0, 0), rect, 1)
            if show_vel and v != 0:
                center = camera.world_to_screen((x, size / 2.0))
                tip = camera.world_to_screen((x + v * 40.0, size / 2.0))
                draw_vector(surf, center, tip, VELOCITY_VECTOR_COLOR)

        draw_text(surf, f"Collisions: {count}", 10, 50, TEXT_COLOR)

    def draw_springs(self, surf, camera, sim, show_vel, show_peak):
        with self.controller.lock:
            body = sim.spring_set.mass
            pos = body.position
            vel = body.velocity
            springs_drawn = [(s.anchor, s.color) for s in sim.spring_set.active()]

        for anchor, color in springs_drawn:
            draw_spring(surf, camera, anchor, pos, color)
            a = _safe_point(camera.world_to_screen(anchor))
            if a:
                gfxdraw.filled_circle(surf, a[0], a[1], 5, AXIS_COLOR)
        m = _safe_point(camera.world_to_screen(pos))
        if m:
            gfxdraw.filled_circle(surf, m[0], m[1], 12, (250, 179, 135))
            gfxdraw.aacircle(surf, m[0], m[1], 12, (0, 0, 0))
            if show_vel and vec_len(vel) > 0:
                tip = camera.world_to_screen((pos[0] + vel[0] * 0.5, pos[1] + vel[1] * 0.5))
                draw_vector(surf, m, tip, VELOCITY_VECTOR_COLOR)

    def draw_rotating_spring(self, surf, camera, sim, show_vel, show_peak):
        with self.controller.lock:
            state = sim.state
            pos = rotating_spring.mass_position(state)
            length = state.length
            broken = state.broken
            w = sim.params.angular_speed

        color = (243, 139, 168) if broken else (166, 227, 161)
        center = camera.world_to_screen((0.0, 0.0))
        radius_px = int(length * camera.ppu)
        if 0 < radius_px < SAFE_COORD_LIMIT:
            pygame.draw.circle(surf, GRID_COLOR, center, radius_px, 1)
        draw_spring(surf, camera, (0.0, 0.0), pos, color)
        gfxdraw.filled_circle(surf, center[0], center[1], 5, AXIS_COLOR)
        m = _safe_point(camera.world_to_screen(pos))
        if m:
            gfxdraw.filled_circle(surf, m[0], m[1], 10, (250, 179, 135))
            gfxdraw.aacircle(surf, m[0], m[1], 10, (0, 0, 0))
            if show_vel and w > 0:
                # Tangential velocity, perpendicular to the spring
                tangent = (-pos[1] * w, pos[0] * w)
                tip = camera.world_to_screen((pos[0] + tangent[0] * 0.2, pos[1] + tangent[1] * 0.2))
                draw_vector(surf, m, tip, VELOCITY_VECTOR_COLOR)
        if broken:
            draw_text(surf, "SPRING BROKEN", 10, 50, (243, 139, 168))


_cached_font = None

def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        _cached_font = pygame.font.SysFont("consolas", 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))


def _safe_point(pt):
    try:
        x, y = int(pt[0]), int(pt[1])
    except (TypeError, ValueError, OverflowError):
        return None
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None


def draw_arrow_head(surface, tip, tail, color):
    # Small triangle for arrow head
    tip_s = _safe_point(tip)
    tail_s = _safe_point(tail)
    if tip_s is None or tail_s is None:
        return
    dx = tip_s[0] - tail_s[0]
    dy = tip_s[1] - tail_s[1]
    ang = math.atan2(dy, dx)
    size = 8
    left = (tip_s[0] - size * math.cos(ang - math.pi / 6), tip_s[1] - size * math.sin(ang - math.pi / 6))
    right = (tip_s[0] - size * math.cos(ang + math.pi / 6), tip_s[1] - size * math.sin(ang + math.pi / 6))
    left_s = _safe_point(left)
    right_s = _safe_point(right)
    if left_s and right_s:
        pygame.draw.polygon(surface, color, [tip_s, left_s, right_s])


def draw_vector(surface, start, end, color):
    start_s = _safe_point(start)
    end_s = _safe_point(end)
    if start_s and end_s and start_s != end_s:
        pygame.draw.line(surface, color, start_s, end_s, 2)
        draw_arrow_head(surface, end_s, start_s, color)


def draw_dashed_line(surface, color, start, end, dash=5):
    length = vec_len(vec_sub(end, start))
    if length == 0:
        return
    ux, uy = vec_norm(vec_sub(end, start))
    n = int(length // (2 * dash)) + 1
    for i in range(n):
        a = i * 2 * dash
        b = min(a + dash, length)
        p0 = (start[0] + ux * a, start[1] + uy * a)
        p1 = (start[0] + ux * b, start[1] + uy * b)
        pygame.draw.line(surface, color, p0, p1, 1)


def spring_polyline(a: Vec2, b: Vec2, coils: int = 12, amplitude: float = 0.3) -> List[Vec2]:
    """Zig-zag points between a and b in world space; coil width stays fixed as it stretches."""
    d = vec_sub(b, a)
    length = vec_len(d)
    if length == 0:
        return [a, b]
    ux, uy = vec_norm(d)
    nx, ny = -uy, ux
    pts = [a]
    segments = coils * 2
    for i in range(1, segments):
        t = i / segments
        side = amplitude if i % 2 else -amplitude
        pts.append((a[0] + d[0] * t + nx * side, a[1] + d[1] * t + ny * side))
    pts.append(b)
    return pts


def draw_spring(surface, camera: Camera2D, a: Vec2, b: Vec2, color):
    pts = [p for p in (_safe_point(camera.world_to_screen(q)) for q in spring_polyline(a, b)) if p]
    if len(pts) > 1:
        pygame.draw.lines(surface, color, False, pts, 2)


# ============================================================
# Stats formatting
# ============================================================

def format_stats(demo: str, stats: dict) -> str:
    """Render a diagnostics dict as the stats panel text."""
    if not stats:
        return ""
    if demo == "projectile":
        return (
            f"Mass: {stats['mass']:.0f} kg\n"
            f"Speed: {stats['speed']:.2f} m/s\n"
            f"Direction: {stats['angle_deg']:.1f} deg\n"
            f"GPE: {stats['potential']:.2f} J\n"
            f"KE: {stats['kinetic']:.2f} J\n"
            f"Energy lost: {stats['energy_lost']:.2f} J\n"
            f"Position: ({stats['x']:.2f}, {stats['y']:.2f}) m\n"
            f"Peak height: {stats['peak_height']:.2f} m"
        )
    if demo == "pendulum":
        lines = [f"Mode: {stats['mode']}"]
        for i, seg in enumerate(stats["segments"]):
            lines.append(
                f"Pendulum {i + 1}: m={seg['mass']:.1f} kg  L={seg['length']:.1f} m\n"
                f"  angle {seg['angle_deg']:.1f} deg  w {seg['omega']:.3f} rad/s  a {seg['alpha']:.3f} rad/s^2\n"
                f"  v {seg['speed']:.2f} m/s  PE {seg['potential']:.2f} J  KE {seg['kinetic']:.2f} J  "
                f"E {seg['total']:.2f} J"
            )
        chain = stats["chain"]
        lines.append(
            f"Chain: KE {chain['kinetic']:.2f} J  PE {chain['potential']:.2f} J  "
            f"Total {chain['total']:.2f} J"
        )
        return "\n".join(lines)
    if demo == "collision":
        return (
            f"{stats['mode']}\n"
            f"KE moving: {stats['ke_moving']:.2f} J\n"
            f"KE stationary: {stats['ke_stationary']:.2f} J\n"
            f"Total KE: {stats['total_kinetic']:.2f} J\n"
            f"Momentum: {stats['momentum']:.2f} kg*m/s\n"
            f"Collisions: {stats['collisions']}"
        )
    if demo == "springs":
        lengths = ", ".join(f"{l:.2f}" for l in stats["lengths"]) or "-"
        return (
            f"Position: ({stats['position'][0]:.2f}, {stats['position'][1]:.2f}) m\n"
            f"Velocity: ({stats['velocity'][0]:.2f}, {stats['velocity'][1]:.2f}) m/s\n"
            f"Spring lengths: {lengths} m\n"
            f"KE: {stats['kinetic']:.2f} J  PE: {stats['potential']:.2f} J\n"
            f"Total: {stats['total']:.2f} J"
        )
    if demo == "rotating_spring":
        text = (
            f"Length: {stats['length']:.2f} m (stretch {stats['stretch']:.2f} m)\n"
            f"Spring force: {stats['spring_force']:.2f} N\n"
            f"Centrifugal force: {stats['centrifugal_force']:.2f} N\n"
            f"Tangential velocity: {stats['tangential_velocity']:.2f} m/s\n"
            f"Angle: {stats['angle_deg']:.1f} deg\n"
            f"KE: {stats['kinetic']:.2f} J  Spring PE: {stats['potential']:.2f} J\n"
            f"Total: {stats['total']:.2f} J\n"
            f"Critical speed: {stats['critical_speed']:.2f} rad/s\n"
            f"Safety factor: {stats['safety_factor']:.2f}x  {stats['status']}\n"
            f"Current: {stats['percent_of_critical']:.1f}% of critical speed"
        )
        if stats["broken"] or stats["danger"]:
            text += "\nSPRING BROKEN: speed exceeds the critical speed"
        return text
    return ""


# ============================================================
# Dear PyGui UI
# ============================================================

class UI:
    """
    Dear PyGui interface: presets, demo selector, simulation controls, per-demo sliders, stats.
    """
    def __init__(self, controller: DemoController, renderer: PygameRenderer):
        self.controller = controller
        self.renderer = renderer
        self.status_msg_id = None
        self.stats_text_id = None
        self._preset_map: Dict[str, str] = {}

        self._build_ui()

        # Periodic UI sync via frame callbacks (approx ~10Hz)
        dpg.set_frame_callback(1, self._post_setup)
        self._schedule_sync()

    def _post_setup(self):
        self._show_demo_controls(self.controller.demo)

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks."""
        current = dpg.get_frame_count()
        # next sync ~ every 6 frames (~100ms at 60 FPS)
        dpg.set_frame_callback(current + 6, self._sync_ui_with_sim)

    # -----------------------
    # UI Construction
    # -----------------------

    def _add_param_slider(self, demo: str, name: str, index: Optional[int] = None, label: Optional[str] = None):
        cls = PARAMETER_TYPES[demo]
        lo, hi = cls.RANGES[name]
        default = getattr(cls(), name)
        if index is not None:
            default = default[index]
        dpg.add_slider_float(
            label=label or PARAMETER_LABELS[name],
            min_value=lo,
            max_value=hi,
            default_value=default,
            width=220,
            callback=lambda s, a, u: self._on_param(u[0], u[1], a),
            user_data=(name, index),
            tag=_param_tag(demo, name, index),
        )

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title="Mechanics Demos - Controls", width=520, height=900)

        with dpg.window(label="Controls", width=500, height=880, pos=(10, 10), tag="main_window"):
            with dpg.group(horizontal=True):
                dpg.add_text("Preset:")
                for fn, display in list_presets():
                    self._preset_map[display] = fn
                preset_items = list(self._preset_map.keys()) or ["No presets found"]
                dpg.add_combo(preset_items, default_value=preset_items[0], width=260, tag="preset_combo")
                dpg.add_button(label="Load", callback=lambda: self.load_preset(dpg.get_value("preset_combo")))

            with dpg.group(horizontal=True):
                dpg.add_text("Demo:")
                dpg.add_combo(list(DEMO_LABELS.values()), default_value=DEMO_LABELS[self.controller.demo],
                              width=260, callback=lambda s, a, u: self._select_demo(LABEL_TO_DEMO[a]),
                              tag="demo_combo")

            dpg.add_separator()

            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Run/Pause", callback=self._toggle_play)
                dpg.add_button(label="Step", callback=self._step_once)
                dpg.add_button(label="Reset", callback=self._reset)
                dpg.add_button(label="Reset Camera", callback=self.renderer.reset_camera)
            with dpg.group(horizontal=True):
                dpg.add_checkbox(label="Stats", default_value=True, callback=lambda s, a, u: self._set_flag("show_stats", a))
                dpg.add_checkbox(label="Velocity vectors", default_value=False,
                                 callback=lambda s, a, u: self._set_flag("show_velocity_vectors", a))
                dpg.add_checkbox(label="Peak", default_value=False, callback=lambda s, a, u: self._set_flag("show_peak", a),
                                 tag="peak_checkbox")
            for name in COMMON_FIELDS:
                lo, hi = PARAMETER_TYPES["projectile"].RANGES[name]
                dpg.add_slider_float(label=PARAMETER_LABELS[name], min_value=lo, max_value=hi,
                                     default_value=getattr(PARAMETER_TYPES["projectile"](), name), width=220,
                                     callback=lambda s, a, u: self._on_param(u, None, a), user_data=name,
                                     tag=f"common:{name}")
            dpg.add_button(label="Reset gravity", callback=lambda: self._reset_gravity())

            dpg.add_separator()

            with dpg.group(tag="controls:projectile", show=False):
                self._add_param_slider("projectile", "angle_deg")
                self._add_param_slider("projectile", "speed")
                dpg.add_checkbox(label="3D view", default_value=False,
                                 callback=lambda s, a, u: self._on_param("three_d", None, bool(a)),
                                 tag=_param_tag("projectile", "three_d"))
                for axis in range(3):
                    dpg.add_slider_float(label=f"Tilt {'XYZ'[axis]} (deg)", min_value=-90.0, max_value=90.0,
                                         default_value=0.0, width=220, user_data=axis,
                                         callback=lambda s, a, u: self._set_tilt(u, a))

            with dpg.group(tag="controls:pendulum", show=False):
                dpg.add_checkbox(label="Real physics (coupled, RK4)", default_value=False,
                                 callback=lambda s, a, u: self._on_param("real_physics", None, bool(a)),
                                 tag=_param_tag("pendulum", "real_physics"))
                for i in range(3):
                    dpg.add_text(f"Pendulum {i + 1}")
                    if i > 0:
                        dpg.add_checkbox(label=f"Enable pendulum {i + 1}", default_value=False,
                                         callback=lambda s, a, u: self._toggle_segment(u), user_data=i,
                                         tag=f"segment_enabled:{i}")
                    for name in ("angles_deg", "masses", "lengths"):
                        self._add_param_slider("pendulum", name, i, f"{PARAMETER_LABELS[name]} {i + 1}")

            with dpg.group(tag="controls:collision", show=False):
                for name in ("stationary_mass", "moving_mass", "speed"):
                    self._add_param_slider("collision", name)
                dpg.add_checkbox(label="Force mode", default_value=False,
                                 callback=lambda s, a, u: self._on_param("force_enabled", None, bool(a)),
                                 tag=_param_tag("collision", "force_enabled"))
                self._add_param_slider("collision", "force")
                self._add_param_slider("collision", "friction")

            with dpg.group(tag="controls:springs", show=False):
                self._add_param_slider("springs", "mass")
                for i in range(3):
                    dpg.add_checkbox(label=f"Spring {i + 1}", default_value=(i == 0),
                                     callback=lambda s, a, u: self.controller.set_spring_enabled(u, bool(a)),
                                     user_data=i, tag=f"spring_enabled:{i}")
                    self._add_param_slider("springs", "spring_constants", i, f"{PARAMETER_LABELS['spring_constants']} {i + 1}")
                    self._add_param_slider("springs", "rest_lengths", i, f"{PARAMETER_LABELS['rest_lengths']} {i + 1}")

            with dpg.group(tag="controls:rotating_spring", show=False):
                for name in ("angular_speed", "spring_constant", "rest_length", "mass"):
                    self._add_param_slider("rotating_spring", name)

            dpg.add_separator()
            self.status_msg_id = dpg.add_text("")
            dpg.add_text("Stats")
            self.stats_text_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=(255, 120, 120))

    def _set_flag(self, name: str, value):
        with self.controller.lock:
            setattr(self.controller, name, bool(value))
        if name == "show_stats" and not value:
            dpg.set_value(self.stats_text_id, "")

    def _set_tilt(self, axis: int, degrees):
        self.renderer.tilt[axis] = math.radians(float(degrees))

    def _on_param(self, name: str, index: Optional[int], value):
        with self.controller.lock:
            if index is not None:
                values = list(getattr(self.controller.active.params, name))
                values[index] = value
                value = tuple(values)
            params = self.controller.update_parameters(**{name: value})
        if name == "angular_speed" and params.angular_speed < value:
            dpg.set_value(_param_tag("rotating_spring", name), params.angular_speed)
            self._set_status(f"Angular speed capped at {params.angular_speed:.2f} rad/s")

    def _reset_gravity(self):
        default = PARAMETER_TYPES["projectile"]().gravity
        self._on_param("gravity", None, default)
        dpg.set_value("common:gravity", default)

    def _toggle_segment(self, index: int):
        requested = bool(dpg.get_value(f"segment_enabled:{index}"))
        enabled = self.controller.toggle_pendulum_segment(index)
        self._refresh_segment_checkboxes()
        if requested and not enabled:
            self._set_error(f"Enable pendulum {index} first.")

    def _refresh_segment_checkboxes(self):
        with self.controller.lock:
            flags = [seg.enabled for seg in self.controller.simulations["pendulum"].chain.segments]
        for i in range(1, len(flags)):
            dpg.set_value(f"segment_enabled:{i}", flags[i])

    def _toggle_play(self):
        playing = self.controller.toggle_play()
        if playing:
            self._set_status("Simulation running.")
        else:
            msg = self.controller.last_event()
            if msg and "cannot" in msg.lower():
                self._set_error(msg)
            else:
                self._set_status("Simulation paused.")

    def _step_once(self):
        self.controller.step_once()
        self._set_status("Stepped one frame.")

    def _reset(self):
        self.controller.reset()
        self._set_status("Simulation reset.")

    def _select_demo(self, demo: str):
        self.controller.select(demo)
        self._show_demo_controls(demo)
        self._set_status(f"Demo: {DEMO_LABELS[demo]}")

    def _show_demo_controls(self, demo: str):
        for name in DEMO_LABELS:
            dpg.configure_item(f"controls:{name}", show=(name == demo))
        for name in COMMON_FIELDS:
            dpg.configure_item(f"common:{name}", show=(name in DEMO_COMMON_FIELDS[demo]))
        dpg.configure_item("peak_checkbox", show=(demo == "projectile"))
        dpg.set_value("demo_combo", DEMO_LABELS[demo])
        self._push_params_to_widgets(demo)

    def _push_params_to_widgets(self, demo: str):
        """Reflect the demo's current snapshot into its sliders and toggles."""
        with self.controller.lock:
            params = self.controller.simulations[demo].params
        for name in COMMON_FIELDS:
            dpg.set_value(f"common:{name}", getattr(params, name))
        for name in PARAMETER_TYPES[demo].RANGES:
            if name in COMMON_FIELDS:
                continue
            value = getattr(params, name)
            if isinstance(value, tuple):
                for i, v in enumerate(value):
                    dpg.set_value(_param_tag(demo, name, i), v)
            else:
                dpg.set_value(_param_tag(demo, name), value)
        for flag in ("three_d", "real_physics", "force_enabled"):
            if hasattr(params, flag):
                dpg.set_value(_param_tag(demo, flag), getattr(params, flag))
        if demo == "pendulum":
            self._refresh_segment_checkboxes()
        if demo == "springs":
            with self.controller.lock:
                flags = [s.enabled for s in self.controller.simulations["springs"].spring_set.springs]
            for i, flag in enumerate(flags):
                dpg.set_value(f"spring_enabled:{i}", flag)

    def load_preset(self, display: str):
        fn = self._preset_map.get(display)
        if fn is None:
            self._set_error(f"Unknown preset: {display}")
            return
        preset = load_preset(fn)
        if preset is None:
            self._set_error(f"Could not load preset: {display}")
            return
        self.controller.apply_preset(preset)
        self._show_demo_controls(preset.demo)
        self.renderer.reset_camera()
        self._set_status(f"Loaded preset: {preset.name}")

    def _sync_ui_with_sim(self):
        """Periodic UI update: stats readout and the latest simulation event."""
        with self.controller.lock:
            demo = self.controller.demo
            show_stats = self.controller.show_stats
            stats = self.controller.diagnostics() if show_stats else None
            sim = self.controller.active
            msg = sim.last_event
            sim.last_event = None
        if show_stats:
            dpg.set_value(self.stats_text_id, format_stats(demo, stats))
        if msg:
            if "broke" in msg.lower() or "cannot" in msg.lower():
                self._set_error(msg)
            else:
                self._set_status(msg)
        # Reschedule next sync
        self._schedule_sync()


def _param_tag(demo: str, name: str, index: Optional[int] = None) -> str:
    if index is None:
        return f"{demo}:{name}"
    return f"{demo}:{name}:{index}"


# ============================================================
# Application Entry
# ============================================================

def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    controller = DemoController()
    renderer = PygameRenderer(controller)

    # Start Pygame renderer thread
    renderer.start()

    ui = UI(controller, renderer)

    # Keyboard shortcut in UI window to toggle play/pause (Space)
    with dpg.handler_registry():
        def key_down(sender, app_data):
            if app_data == dpg.mvKey_Spacebar:
                ui._toggle_play()
        dpg.add_key_press_handler(callback=key_down)

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        # Stop simulation and renderer
        controller.running = False
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()


if __name__ == "__main__":
    main()
