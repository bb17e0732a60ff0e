"""Window creation, texture loading and the main game loop."""

from __future__ import annotations

import argparse
import functools
import math
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

from linmaze.bitmap import BitmapError, load_bmp, load_bmp_alpha
from linmaze.level import Victory, World, load_level
from linmaze.physics import Controls, FrameClock, apply_mouse, step
from linmaze.scene import build_display_lists, draw_scene

DEFAULT_MAP = "1.map"
WINDOW_TITLE = "Maze3D"
SKY = (0.6, 0.8, 0.9, 1.0)
FIELD_OF_VIEW = 50.0
NEAR_PLANE = 0.05
FAR_PLANE = 100.0
FOG_DENSITY = 0.025

_MOUSE_X1 = 8
_MOUSE_X2 = 16


@dataclass(frozen=True)
class Textures:
    """GL texture names of every image the maze uses."""

    wall: int
    ground: int
    jetpack: int
    key: int
    hudh: int
    font: int
    gr: int
    handles: tuple = field(default=(), repr=False, compare=False)


class _TextureImage(NamedTuple):
    picture: object
    alpha: bool
    mipmap: bool


# (texture name, file, alpha colour or None for RGB, mipmapped)
_TEXTURE_FILES = (
    ("wall", "wl.bmp", None, True),
    ("ground", "grnd.bmp", None, True),
    ("jetpack", "jetp.bmp", None, True),
    ("key", "key.bmp", (255, 255, 0), False),
    ("hudh", "hud-h.bmp", (255, 0, 0), False),
    ("font", "smallfont.bmp", (255, 255, 255), False),
    ("gr", "gr.bmp", None, True),
)


def texture_images(directory="."):
    """Decode every texture image found in a directory, keyed by texture name."""
    base = Path(directory)
    images = {}
    for name, filename, color, mipmap in _TEXTURE_FILES:
        path = base / filename
        if color is None:
            images[name] = _TextureImage(load_bmp(path), False, mipmap)
        else:
            images[name] = _TextureImage(load_bmp_alpha(path, *color), True, mipmap)
    return images


@functools.lru_cache(maxsize=None)
def _gl():
    from pyglet.gl import gl_compat

    return gl_compat


def load_textures(directory="."):
    """Upload every texture image into the current GL context."""
    import pyglet.image

    gl = _gl()
    handles = {}
    for name, image in texture_images(directory).items():
        picture = image.picture
        layout = "RGBA" if image.alpha else "RGB"
        texture = pyglet.image.ImageData(
            picture.width, picture.height, layout, picture.data
        ).get_texture()
        gl.glBindTexture(gl.GL_TEXTURE_2D, texture.id)
        if image.mipmap:
            gl.glGenerateMipmap(gl.GL_TEXTURE_2D)
            min_filter = gl.GL_LINEAR_MIPMAP_LINEAR
        else:
            min_filter = gl.GL_LINEAR
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_WRAP_S, gl.GL_REPEAT)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_WRAP_T, gl.GL_REPEAT)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MAG_FILTER, gl.GL_LINEAR)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MIN_FILTER, min_filter)
        handles[name] = texture
    gl.glTexEnvf(gl.GL_TEXTURE_ENV, gl.GL_TEXTURE_ENV_MODE, gl.GL_MODULATE)
    return Textures(
        **{name: texture.id for name, texture in handles.items()},
        handles=tuple(handles.values()),
    )


def _perspective(gl, fovy, aspect, near, far):
    half_height = math.tan(math.radians(fovy) / 2) * near
    half_width = half_height * aspect
    gl.glFrustum(-half_width, half_width, -half_height, half_height, near, far)


def create_window():
    """Open a fullscreen GL window and set up the fixed-function pipeline."""
    import pyglet

    gl = _gl()
    config = pyglet.gl.Config(
        double_buffer=True, depth_size=24, red_size=8, green_size=8, blue_size=8
    )
    window = pyglet.window.Window(
        caption=WINDOW_TITLE, fullscreen=True, config=config, vsync=True
    )
    window.set_exclusive_mouse(True)

    def on_resize(width, height):
        fb_width, fb_height = window.get_framebuffer_size()
        gl.glViewport(0, 0, fb_width, fb_height)
        return pyglet.event.EVENT_HANDLED

    window.push_handlers(on_resize=on_resize)

    width, height = window.get_framebuffer_size()
    gl.glViewport(0, 0, width, height)
    gl.glClearDepth(1.0)
    gl.glClearColor(*SKY)
    gl.glEnable(gl.GL_DEPTH_TEST)
    gl.glMatrixMode(gl.GL_PROJECTION)
    gl.glLoadIdentity()
    _perspective(gl, FIELD_OF_VIEW, width / max(height, 1), NEAR_PLANE, FAR_PLANE)
    gl.glMatrixMode(gl.GL_MODELVIEW)
    gl.glLoadIdentity()
    gl.glEnable(gl.GL_BLEND)
    gl.glEnable(gl.GL_LINE_SMOOTH)
    gl.glLineWidth(8)
    gl.glEnable(gl.GL_FOG)
    gl.glFogi(gl.GL_FOG_MODE, gl.GL_EXP2)
    gl.glFogf(gl.GL_FOG_DENSITY, FOG_DENSITY)
    gl.glFogfv(gl.GL_FOG_COLOR, (gl.GLfloat * 4)(*SKY))
    gl.glEnable(gl.GL_CULL_FACE)
    gl.glCullFace(gl.GL_BACK)
    gl.glDepthFunc(gl.GL_LEQUAL)
    gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)
    return window


class _Input:
    """Collects key, mouse button and mouse motion state from a window."""

    def __init__(self, window):
        from pyglet.window import key, mouse

        self._key = key
        self._mouse = mouse
        self.buttons = 0
        self.motion_x = 0.0
        self.motion_y = 0.0
        self.closed = False
        window.push_handlers(
            on_mouse_press=self._press,
            on_mouse_release=self._release,
            on_mouse_motion=self._motion,
            on_mouse_drag=self._drag,
            on_close=self._close,
        )
        self.keys = key.KeyStateHandler()
        window.push_handlers(self.keys)

    def _press(self, x, y, button, modifiers):
        self.buttons |= button

    def _release(self, x, y, button, modifiers):
        self.buttons &= ~button

    def _motion(self, x, y, dx, dy):
        # Screen y grows upward here; the view pitch grows as the mouse moves down.
        self.motion_x += dx
        self.motion_y -= dy

    def _drag(self, x, y, dx, dy, buttons, modifiers):
        self._motion(x, y, dx, dy)

    def _close(self):
        self.closed = True
        return True

    def take_motion(self):
        motion = (self.motion_x, self.motion_y)
        self.motion_x = self.motion_y = 0.0
        return motion

    def controls(self, hurt):
        key, mouse, held = self._key, self._mouse, self.keys
        return Controls(
            strafe_left=held[key.A],
            strafe_right=held[key.D],
            forward=held[key.W],
            backward=held[key.S],
            jump=held[key.SPACE],
            thrust=held[key.Q],
            quit=held[key.ESCAPE],
            hurt=hurt and held[key.J],
            mouse_left=bool(self.buttons & mouse.LEFT),
            mouse_middle=bool(self.buttons & mouse.MIDDLE),
            mouse_right=bool(self.buttons & mouse.RIGHT),
            mouse_x1=bool(self.buttons & _MOUSE_X1),
            mouse_x2=bool(self.buttons & _MOUSE_X2),
        )


def _now_ms():
    return int(time.monotonic() * 1000)


def _run(window, world, textures, reload):
    events = _Input(window)
    clock = FrameClock(_now_ms())
    while True:
        ticks = clock.advance(_now_ms())
        while ticks == 0:
            time.sleep(clock.remaining / 1000)
            ticks = clock.advance(_now_ms())
        for tick in range(ticks):
            window.dispatch_events()
            if events.closed:
                return 0
            apply_mouse(world, *events.take_motion())
            step(world, events.controls(hurt=tick == ticks - 1), reload)
        draw_scene(world, textures, clock.fps)
        window.flip()


def main(argv=None):
    """Play a maze level; returns the process exit status."""
    parser = argparse.ArgumentParser(prog="linmaze", description="Walk a 3D maze.")
    parser.add_argument("map", nargs="?", default=DEFAULT_MAP, help="level file")
    parser.add_argument(
        "--data", default=".", help="directory holding the texture images"
    )
    args = parser.parse_args(argv)

    window = create_window()
    try:
        try:
            textures = load_textures(args.data)
        except BitmapError as exc:
            print(f"ERROR!!! {exc}", file=sys.stderr)
            return 1
        build_display_lists(textures)
        world = World(load_level(args.map))
        try:
            return _run(window, world, textures, lambda: load_level(args.map))
        except Victory as win:
            print(win, file=sys.stderr)
            return 0
        except SystemExit as exc:
            return exc.code or 0
    finally:
        window.close()