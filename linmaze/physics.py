"""Player input, fixed-rate timing and one tick of player physics."""

from __future__ import annotations

import math
from dataclasses import dataclass

TICK_MS = 30
GROUND_SPEED = 0.05
JET_SPEED = 0.004
AIR_SPEED = 0.0005
JUMP_SPEED = 0.075
THRUST = 0.0055
GRAVITY = 0.005
SAFE_LANDING = -0.2


@dataclass
class Controls:
    """Keys and mouse buttons held during a tick."""

    strafe_left: bool = False
    strafe_right: bool = False
    forward: bool = False
    backward: bool = False
    jump: bool = False
    thrust: bool = False
    quit: bool = False
    hurt: bool = False
    mouse_left: bool = False
    mouse_middle: bool = False
    mouse_right: bool = False
    mouse_x1: bool = False
    mouse_x2: bool = False

    @property
    def clicked(self):
        """True when any mouse button is held."""
        return (
            self.mouse_left
            or self.mouse_middle
            or self.mouse_right
            or self.mouse_x1
            or self.mouse_x2
        )


class FrameClock:
    """Turns wall-clock milliseconds into whole simulation ticks."""

    def __init__(self, start=0, interval=TICK_MS):
        self.interval = interval
        self.previous = start
        self.last = start
        self.pending = 0

    def advance(self, now):
        """Record the time of a new frame and return how many ticks to run."""
        self.previous, self.last = self.last, now
        self.pending += now - self.previous
        ticks, self.pending = divmod(self.pending, self.interval)
        return ticks

    @property
    def remaining(self):
        """Milliseconds until the next tick is due."""
        return self.interval - self.pending

    @property
    def fps(self):
        """Frame rate implied by the last frame's duration, 0 if unknown."""
        elapsed = self.last - self.previous
        return 1000 // elapsed if elapsed > 0 else 0


def apply_mouse(world, dx, dy):
    """Turn the view by a relative mouse motion, wrapping yaw and clamping pitch."""
    world.yaw += dx / 2
    world.pitch += dy / 2
    while world.yaw < -180:
        world.yaw += 360
    while world.yaw > 180:
        world.yaw -= 360
    world.pitch = min(90.0, max(-90.0, world.pitch))


def _steer(world, controls, speed):
    fx, fy = world.facing_x, world.facing_y
    if controls.strafe_left:
        world.dx += fy * speed
        world.dy -= fx * speed
    if controls.strafe_right:
        world.dx -= fy * speed
        world.dy += fx * speed
    if controls.forward or controls.mouse_middle:
        world.dx += fx * speed
        world.dy += fy * speed
    if controls.backward:
        world.dx -= fx * speed
        world.dy -= fy * speed
    if (controls.jump or controls.mouse_right) and world.z <= world.floor_z:
        world.dz = JUMP_SPEED
    if world.jet and (controls.thrust or controls.mouse_x1):
        world.dz += THRUST
    if controls.mouse_left and world.destroyer_anim == 11:
        world.destroyer_anim += 1


def _land(world):
    if world.dz >= SAFE_LANDING:
        world.z = world.floor_z + world.dz
        world.dz = 0.0
        return
    world.dz = -world.dz / 2
    impact = world.dz * 15
    world.health -= min(world.health, int(impact ** 3))
    flash = world.dz * 30
    world.tint = (255, 0, 0)
    world.tint_alpha = min(255, int(flash ** 3))


def step(world, controls, reload):
    """Run one tick: steering, respawn, movement, level rules, gravity and friction.

    ``reload`` is called with no arguments to fetch a fresh level grid when a
    dead player clicks. Raises SystemExit on quit and lets Victory through.
    """
    angle = math.radians(-world.yaw)
    world.facing_x = math.sin(angle)
    world.facing_y = math.cos(angle)
    if world.z <= world.floor_z + 0.1:
        speed = GROUND_SPEED
    elif world.jet:
        speed = JET_SPEED
    else:
        speed = AIR_SPEED
    if world.health:
        _steer(world, controls, speed)
    if controls.quit:
        raise SystemExit(0)
    if controls.clicked and not world.health:
        world.load(reload())
        world.x = world.y = 2.0
        world.dx = world.dy = world.dz = 0.0
        world.health = 100
        world.floor_z = 0.0
        world.jet = False
    world.x += world.dx
    world.y += world.dy
    world.z += world.dz
    world.control()
    if world.z > world.floor_z:
        world.dz -= GRAVITY
    if world.z < world.floor_z:
        _land(world)
    if world.z <= world.floor_z + 0.1:
        world.dx *= 0.75
        world.dy *= 0.75
    else:
        world.dx *= 0.995
        world.dy *= 0.995
        world.dz *= 0.995
    if world.z > world.ceil_z:
        world.z = world.ceil_z
        world.dz = 0.0
    if controls.hurt and world.health:
        world.health -= 1