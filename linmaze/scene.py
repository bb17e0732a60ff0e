"""Geometry of the maze objects, per-tile draw lists and the HUD."""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import NamedTuple

from linmaze.level import HEIGHT, WIDTH, TileKind

BOX = 1
FLOOR = 2
EXTWALL = 3
JETPACK = 4
TRAP = 5
BUTTON = 6
DOOR = 7
KEY = 8
TELEPORTER = 9
ONEPASS = 10
WALLD = 11
EXIT = 12
TW = 13
GR = 14
BOX_OPTIM_CEILONLY = 32

_FONT_PAD_X = 0.00390625
_FONT_PAD_Y = 0.0078125
_GRID = (-0.8, -0.4, 0.0, 0.4, 0.8)
_WHITE = (255, 255, 255)


class _Draw(NamedTuple):
    x: float
    y: float
    z: float
    list_id: int
    alpha: int = 255


def tile_draws(world, x, y):
    """Display lists to draw for one map cell, as (x, y, z, list_id, alpha) tuples."""
    if not (0 <= x < WIDTH and 0 <= y < HEIGHT):
        raise IndexError(f"cell ({x}, {y}) lies outside the map")
    kind = world.tiles[y][x].kind
    moved = world.moved[y][x]
    px = x * 2 + 2
    py = y * 2 + 2

    def at(z, list_id, alpha=255):
        return _Draw(px, py, z, list_id, alpha)

    if kind == TileKind.WALL:
        return [at(0, BOX_OPTIM_CEILONLY if world.optim[y][x] == 1 else BOX)]
    if kind == TileKind.BREAKABLE:
        alpha = (255 - (moved << 5)) & 0xFF if moved > 24 else 255
        list_id = BOX_OPTIM_CEILONLY if world.optim[y][x] == 1 else BOX
        return [at(-(moved * 0.0625), list_id, alpha)]
    if kind == TileKind.JETPACK:
        return [at(0, JETPACK)]
    if kind == TileKind.WALL_DESTROYER:
        return [at(0, WALLD)]
    if kind == TileKind.ONE_PASS:
        draws = [at(moved * 0.2375, ONEPASS)]
        if moved:
            draws.append(at(moved * 0.25 - 2, BOX))
        return draws
    if kind == TileKind.DOOR:
        return [at(-(moved * 0.0625), DOOR)]
    if kind == TileKind.KEY:
        return [at(0, KEY)]
    if kind == TileKind.BUTTON:
        return [at(-(moved * 0.02), BUTTON)]
    if kind == TileKind.TELEPORTER:
        return [at(0, TELEPORTER)]
    if kind in (TileKind.TRAP, TileKind.HIDDEN_TRAP):
        return [at(-1.75, TRAP)]
    if kind == TileKind.TALL_WALL:
        return [at(0, TW)]
    if kind == TileKind.GRATE:
        return [at(0, GR)]
    if kind == TileKind.HIGH_GRATE:
        return [at(2, GR)]
    if kind == TileKind.WALL_GRATE:
        return [at(0, BOX), at(2, GR)]
    if kind == TileKind.EXIT:
        return [at(0, EXIT)]
    if kind == TileKind.SPRUNG_TRAP:
        return [at(0, TRAP)]
    return []


def hud_digits(value):
    """Hundreds, tens and ones shown for a counter; leading places are None."""
    hundreds = value // 100 if value >= 100 else None
    tens = value // 10 % 10 if value >= 10 else None
    return hundreds, tens, value % 10


def health_color(health):
    """Colour of the tens and ones digits of the health counter."""
    return (255 if health < 70 else 0, 0 if health < 30 else 255, 0)


@functools.lru_cache(maxsize=None)
def _gl():
    from pyglet.gl import gl_compat

    return gl_compat


@contextmanager
def _compiled(gl, list_id):
    gl.glNewList(list_id, gl.GL_COMPILE)
    try:
        yield
    finally:
        gl.glEndList()


def _textured(gl, mode, pairs):
    gl.glBegin(mode)
    for (s, t), (x, y, z) in pairs:
        gl.glTexCoord2d(s, t)
        gl.glVertex3d(x, y, z)
    gl.glEnd()


def _colored(gl, mode, items):
    gl.glBegin(mode)
    for color, (x, y, z) in items:
        if color is not None:
            gl.glColor3ub(*color)
        gl.glVertex3d(x, y, z)
    gl.glEnd()


def _use_texture(gl, texture):
    gl.glEnable(gl.GL_TEXTURE_2D)
    gl.glBindTexture(gl.GL_TEXTURE_2D, texture)


_BOX_SIDES = (
    (((0, 0), (-1, -1, -1)), ((0, 1), (-1, 1, -1)), ((1, 0), (1, -1, -1)), ((1, 1), (1, 1, -1))),
    (((1, 0), (-1, -1, 1)), ((0, 0), (1, -1, 1)), ((1, 1), (-1, 1, 1)), ((0, 1), (1, 1, 1))),
    (((1, 0), (1, -1, 1)), ((0, 0), (1, -1, -1)), ((1, 1), (1, 1, 1)), ((0, 1), (1, 1, -1))),
    (((0, 0), (-1, -1, 1)), ((0, 1), (-1, 1, 1)), ((1, 0), (-1, -1, -1)), ((1, 1), (-1, 1, -1))),
)
_BOX_TOP = (((0, 0), (-1, 1, -1)), ((1, 0), (-1, 1, 1)), ((0, 1), (1, 1, -1)), ((1, 1), (1, 1, 1)))

_TALL_WALL = (
    (((0, 0), (-1, -1, -1)), ((0, 2), (-1, 3, -1)), ((1, 0), (1, -1, -1)), ((1, 2), (1, 3, -1))),
    (((1, 0), (-1, -1, 1)), ((0, 0), (1, -1, 1)), ((1, 2), (-1, 3, 1)), ((0, 2), (1, 3, 1))),
    (((1, 0), (1, -1, 1)), ((0, 0), (1, -1, -1)), ((1, 2), (1, 3, 1)), ((0, 2), (1, 3, -1))),
    (((0, 0), (-1, -1, 1)), ((0, 2), (-1, 3, 1)), ((1, 0), (-1, -1, -1)), ((1, 2), (-1, 3, -1))),
    (((0, 0), (-1, 3, -1)), ((1, 0), (-1, 3, 1)), ((0, 2), (1, 3, -1)), ((1, 2), (1, 3, 1))),
)

_OUTER_WALL = (
    ((0, 0), (1, 3, 1)), ((0, 1), (1, 3, -1)), ((82, 1), (-163, 3, -1)), ((82, 0), (-163, 3, 1)),
    ((0, 2), (-1, 3, -1)), ((0, 0), (-1, -1, -1)), ((80, 0), (-161, -1, -1)), ((80, 2), (-161, 3, -1)),
    ((0, 0), (1, 3, -101)), ((0, 1), (1, 3, -103)), ((82, 1), (-163, 3, -103)), ((82, 0), (-163, 3, -101)),
    ((80, 2), (-1, 3, -101)), ((0, 2), (-161, 3, -101)), ((0, 0), (-161, -1, -101)), ((80, 0), (-1, -1, -101)),
    ((0, 0), (1, 3, -1)), ((0, 50), (1, 3, -101)), ((1, 50), (-1, 3, -101)), ((1, 0), (-1, 3, -1)),
    ((50, 2), (-1, 3, -1)), ((0, 2), (-1, 3, -101)), ((0, 0), (-1, -1, -101)), ((50, 0), (-1, -1, -1)),
    ((0, 0), (-161, 3, -1)), ((0, 50), (-161, 3, -101)), ((1, 50), (-163, 3, -101)), ((1, 0), (-163, 3, -1)),
    ((0, 2), (-161, 3, -1)), ((0, 0), (-161, -1, -1)), ((50, 0), (-161, -1, -101)), ((50, 2), (-161, 3, -101)),
)

_JETPACK_FACES = (
    (((0, 0), (-0.2, -0.9, -0.2)), ((1, 0), (-0.2, -0.9, 0.2)), ((0, 1), (0.2, -0.9, -0.2)), ((1, 1), (0.2, -0.9, 0.2))),
    (((0, 0), (0.2, -1, 0.2)), ((1, 0), (0.2, -1, -0.2)), ((0, 0), (0.2, -0.9, 0.2)), ((1, 0), (0.2, -0.9, -0.2))),
    (((0, 0), (-0.2, -1, 0.2)), ((0, 0), (-0.2, -0.9, 0.2)), ((1, 0), (-0.2, -1, -0.2)), ((1, 0), (-0.2, -0.9, -0.2))),
)

_BUTTON = (
    ((0, 0), (-0.3, -0.8, -0.3)), ((1, 0), (-0.3, -0.8, 0.3)), ((1, 1), (0.3, -0.8, 0.3)), ((0, 1), (0.3, -0.8, -0.3)),
    ((0, 0), (0.3, -1, 0.3)), ((1, 0), (0.3, -1, -0.3)), ((1, 0.1), (0.3, -0.8, -0.3)), ((0, 0.1), (0.3, -0.8, 0.3)),
    ((0, 0), (-0.3, -1, 0.3)), ((0.1, 0), (-0.3, -0.8, 0.3)), ((0.1, 1), (-0.3, -0.8, -0.3)), ((0, 1), (-0.3, -1, -0.3)),
    ((0, 0), (-0.3, -1, -0.3)), ((0.1, 0), (-0.3, -0.8, -0.3)), ((0.1, 1), (0.3, -0.8, -0.3)), ((0, 1), (0.3, -1, -0.3)),
    ((0, 0), (-0.3, -1, 0.3)), ((1, 0), (0.3, -1, 0.3)), ((1, 0.1), (0.3, -0.8, 0.3)), ((0, 0.1), (-0.3, -0.8, 0.3)),
)

_KEY = (((0, 0), (-0.2, -0.95, -0.2)), ((1, 0), (-0.2, -0.95, 0.2)), ((0, 1), (0.2, -0.95, -0.2)), ((1, 1), (0.2, -0.95, 0.2)))


def _pad_quads(bright, dark):
    a = 0.9
    return (
        (bright, (-a, -1, -a)), (dark, (-a, -a, -a)), (None, (a, -a, -a)), (bright, (a, -1, -a)),
        (None, (-a, -1, a)), (None, (a, -1, a)), (dark, (a, -a, a)), (None, (-a, -a, a)),
        (bright, (a, -1, a)), (None, (a, -1, -a)), (dark, (a, -a, -a)), (None, (a, -a, a)),
        (bright, (-a, -1, a)), (dark, (-a, -a, a)), (None, (-a, -a, -a)), (bright, (-a, -1, -a)),
        (dark, (-a, -a, -a)), (None, (-a, -a, a)), (None, (a, -a, a)), (None, (a, -a, -a)),
        (bright, (-a, -1, a)), (None, (-a, -1, -a)), (None, (a, -1, -a)), (None, (a, -1, a)),
    )


def _door_post(x, y):
    lo_x, hi_x, lo_y, hi_y = x - 0.1, x + 0.1, y - 0.1, y + 0.1
    return (
        (((0, 0), (lo_x, -1, lo_y)), ((0, 0.5), (lo_x, 1, lo_y)), ((0.05, 0), (hi_x, -1, lo_y)), ((0.05, 0.5), (hi_x, 1, lo_y))),
        (((0.05, 0), (lo_x, -1, hi_y)), ((0, 0), (hi_x, -1, hi_y)), ((0.05, 0.5), (lo_x, 1, hi_y)), ((0, 0.5), (hi_x, 1, hi_y))),
        (((0.05, 0), (hi_x, -1, hi_y)), ((0, 0), (hi_x, -1, lo_y)), ((0.05, 0.5), (hi_x, 1, hi_y)), ((0, 0.5), (hi_x, 1, lo_y))),
        (((0, 0), (lo_x, -1, hi_y)), ((0, 0.5), (lo_x, 1, hi_y)), ((0.05, 0), (lo_x, -1, lo_y)), ((0.05, 0.5), (lo_x, 1, lo_y))),
        (((0, 0), (lo_x, 1, lo_y)), ((0.05, 0), (lo_x, 1, hi_y)), ((0, 0.05), (hi_x, 1, lo_y)), ((0.05, 0.05), (hi_x, 1, hi_y))),
    )


def _spike(x, y):
    return (
        ((100, 0, 0), (x, 0.9, y)),
        ((192, 180, 180), (x - 0.1, -1, y - 0.1)),
        ((160, 160, 160), (x - 0.1, -1, y + 0.1)),
        ((128, 128, 128), (x + 0.1, -1, y + 0.1)),
        ((141, 141, 141), (x + 0.1, -1, y - 0.1)),
        ((192, 180, 180), (x - 0.1, -1, y - 0.1)),
    )


def _floor_steps(start, stop, step, inclusive):
    value = start
    while value >= stop if inclusive else value > stop:
        yield value
        value += step


def _build_floor(gl, texture):
    _use_texture(gl, texture)
    gl.glDisable(gl.GL_CULL_FACE)
    gl.glColor3ub(*_WHITE)
    for y in _floor_steps(2.0, -104.0, -6.625, inclusive=False):
        pairs = []
        for x in _floor_steps(2.0, -164.0, -10.375, inclusive=True):
            pairs.append(((x, 5), (x, -1, y - 6.625)))
            pairs.append(((x, 0), (x, -1, y)))
        _textured(gl, gl.GL_TRIANGLE_STRIP, pairs)
    gl.glEnable(gl.GL_CULL_FACE)


def _build_jetpack(gl, texture):
    _use_texture(gl, texture)
    for face in _JETPACK_FACES:
        _textured(gl, gl.GL_TRIANGLE_STRIP, face)
    gl.glDisable(gl.GL_TEXTURE_2D)
    grey = (160, 160, 160)
    _colored(gl, gl.GL_TRIANGLE_STRIP, (
        (grey, (-0.2, -1, -0.2)), (None, (-0.2, -0.9, -0.2)),
        (None, (0.2, -1, -0.2)), (None, (0.2, -0.9, -0.2)),
    ))
    _colored(gl, gl.GL_TRIANGLE_STRIP, (
        (None, (-0.2, -1, 0.2)), (None, (0.2, -1, 0.2)),
        (None, (-0.2, -0.9, 0.2)), (None, (0.2, -0.9, 0.2)),
    ))


def _build_wall_destroyer(gl):
    gl.glDisable(gl.GL_TEXTURE_2D)
    gl.glPushMatrix()
    gl.glRotated(45, 0, 1, 0)
    _colored(gl, gl.GL_QUADS, (
        ((150, 150, 150), (-0.05, -1, -0.9)), (None, (-0.05, -0.9, -0.9)),
        (None, (0.05, -0.9, -0.9)), (None, (0.05, -1, -0.9)),
        (None, (-0.05, -1, 0.9)), (None, (0.05, -1, 0.9)),
        (None, (0.05, -0.9, 0.9)), (None, (-0.05, -0.9, 0.9)),
        ((160, 160, 160), (0.05, -1, 0.9)), (None, (0.05, -1, -0.9)),
        (None, (0.05, -0.9, -0.9)), (None, (0.05, -0.9, 0.9)),
        (None, (-0.05, -1, 0.9)), (None, (-0.05, -0.9, 0.9)),
        (None, (-0.05, -0.9, -0.9)), (None, (-0.05, -1, -0.9)),
        ((140, 140, 140), (-0.05, -0.9, -0.9)), ((224, 224, 224), (-0.05, -0.9, 0.9)),
        (None, (0.05, -0.9, 0.9)), ((140, 140, 140), (0.05, -0.9, -0.9)),
    ))
    gl.glPopMatrix()


def _build_grate(gl, texture):
    _use_texture(gl, texture)
    gl.glDisable(gl.GL_CULL_FACE)
    pairs = []
    for x in _GRID:
        pairs += [
            ((x - 0.1, -1), (x - 0.1, 1, -1)), ((x - 0.1, 1), (x - 0.1, 1, 1)),
            ((x + 0.1, 1), (x + 0.1, 1, 1)), ((x + 0.1, -1), (x + 0.1, 1, -1)),
        ]
    for x in _GRID:
        pairs += [
            ((-1, x - 0.1), (-1, 1, x - 0.1)), ((-1, x + 0.1), (-1, 1, x + 0.1)),
            ((1, x + 0.1), (1, 1, x + 0.1)), ((1, x - 0.1), (1, 1, x - 0.1)),
        ]
    _textured(gl, gl.GL_QUADS, pairs)
    gl.glEnable(gl.GL_CULL_FACE)


def build_display_lists(textures):
    """Compile the display lists of every maze object into the current GL context."""
    gl = _gl()
    with _compiled(gl, BOX):
        _use_texture(gl, textures.wall)
        for side in (*_BOX_SIDES, _BOX_TOP):
            _textured(gl, gl.GL_TRIANGLE_STRIP, side)
    with _compiled(gl, BOX_OPTIM_CEILONLY):
        _use_texture(gl, textures.wall)
        _textured(gl, gl.GL_TRIANGLE_STRIP, _BOX_TOP)
    with _compiled(gl, FLOOR):
        _build_floor(gl, textures.ground)
    with _compiled(gl, EXTWALL):
        _use_texture(gl, textures.wall)
        _textured(gl, gl.GL_QUADS, _OUTER_WALL)
    with _compiled(gl, JETPACK):
        _build_jetpack(gl, textures.jetpack)
    with _compiled(gl, TRAP):
        gl.glDisable(gl.GL_TEXTURE_2D)
        for y in _GRID:
            for x in _GRID:
                _colored(gl, gl.GL_TRIANGLE_FAN, _spike(x, y))
    with _compiled(gl, BUTTON):
        _use_texture(gl, textures.wall)
        _textured(gl, gl.GL_QUADS, _BUTTON)
    with _compiled(gl, DOOR):
        _use_texture(gl, textures.wall)
        for y in _GRID:
            for x in _GRID:
                for strip in _door_post(x, y):
                    _textured(gl, gl.GL_TRIANGLE_STRIP, strip)
    with _compiled(gl, KEY):
        _use_texture(gl, textures.key)
        _textured(gl, gl.GL_TRIANGLE_STRIP, _KEY)
    for list_id, bright, dark in (
        (TELEPORTER, (0, 255, 0), (0, 192, 0)),
        (ONEPASS, (255, 255, 0), (192, 192, 0)),
        (EXIT, (255, 0, 0), (192, 0, 0)),
    ):
        with _compiled(gl, list_id):
            gl.glDisable(gl.GL_TEXTURE_2D)
            _colored(gl, gl.GL_QUADS, _pad_quads(bright, dark))
    with _compiled(gl, WALLD):
        _build_wall_destroyer(gl)
    with _compiled(gl, TW):
        _use_texture(gl, textures.wall)
        for strip in _TALL_WALL:
            _textured(gl, gl.GL_TRIANGLE_STRIP, strip)
    with _compiled(gl, GR):
        _build_grate(gl, textures.gr)


def render_level(world):
    """Draw the floor, the outer wall and every tile near the player."""
    gl = _gl()
    gl.glCallList(FLOOR)
    gl.glCallList(EXTWALL)
    xs, ys = world.visible_range()
    for y in ys:
        for x in xs:
            for draw in tile_draws(world, x, y):
                gl.glPushMatrix()
                gl.glTranslated(-draw.x, draw.z, -draw.y)
                gl.glColor4ub(255, 255, 255, draw.alpha)
                gl.glCallList(draw.list_id)
                gl.glPopMatrix()


def draw_digit(x, y, digit, color, size, font):
    """Draw one glyph of the digit row of the font texture as a HUD quad."""
    gl = _gl()
    _use_texture(gl, font)
    gl.glDisable(gl.GL_DEPTH_TEST)
    left = digit * 0.0625
    right = (digit + 1) * 0.0625 - _FONT_PAD_X
    _colored_quad = (
        ((left, 0.75 + _FONT_PAD_Y), (x - size, y, -0.51)),
        ((right, 0.75 + _FONT_PAD_Y), (x, y, -0.51)),
        ((right, 0.875), (x, y + size, -0.51)),
        ((left, 0.875), (x - size, y + size, -0.51)),
    )
    gl.glBegin(gl.GL_QUADS)
    gl.glColor3ub(*color)
    for (s, t), (vx, vy, vz) in _colored_quad:
        gl.glTexCoord2d(s, t)
        gl.glVertex3d(vx, vy, vz)
    gl.glEnd()
    gl.glEnable(gl.GL_DEPTH_TEST)


def _overlay(gl, r, g, b, a):
    gl.glDisable(gl.GL_TEXTURE_2D)
    gl.glDisable(gl.GL_DEPTH_TEST)
    gl.glBegin(gl.GL_QUADS)
    gl.glColor4ub(r, g, b, a)
    for vx, vy in ((-2, -2), (2, -2), (2, 2), (-2, 2)):
        gl.glVertex3d(vx, vy, -0.051)
    gl.glEnd()
    gl.glEnable(gl.GL_DEPTH_TEST)


def _icon(gl, texture, left, bottom, right, top):
    _use_texture(gl, texture)
    gl.glDisable(gl.GL_DEPTH_TEST)
    gl.glBegin(gl.GL_QUADS)
    gl.glColor3ub(*_WHITE)
    for (s, t), (vx, vy) in (
        ((0, 0), (left, bottom)),
        ((1, 0), (right, bottom)),
        ((1, 1), (right, top)),
        ((0, 1), (left, top)),
    ):
        gl.glTexCoord2d(s, t)
        gl.glVertex3d(vx, vy, -0.51)
    gl.glEnd()
    gl.glEnable(gl.GL_DEPTH_TEST)


def _counter(value, columns, y, colors, size, font):
    for x, digit, color in zip(columns, hud_digits(value), colors):
        if digit is not None:
            draw_digit(x, y, digit, color, size, font)


def _draw_destroyer(gl, anim):
    lift = min(anim, 10) if anim < 16 else 24 - anim
    angle = 100 + (anim - 11) * 8 if anim > 11 else 100
    gl.glDisable(gl.GL_TEXTURE_2D)
    gl.glDisable(gl.GL_DEPTH_TEST)
    gl.glPushMatrix()
    gl.glTranslated(0.25, -0.6 + lift * 0.105, -1.5)
    gl.glRotated(angle, 0, 1, 0.2)
    gl.glCallList(WALLD)
    gl.glPopMatrix()
    gl.glEnable(gl.GL_DEPTH_TEST)


def draw_scene(world, textures, fps):
    """Draw the maze from the player's eye and the HUD on top of it."""
    gl = _gl()
    gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
    gl.glPushMatrix()
    if not world.health:
        gl.glRotated(90, 0, 0, 1)
    gl.glRotated(world.pitch, 1, 0, 0)
    gl.glRotated(world.yaw, 0, 1, 0)
    eye = 0.8 - world.z if world.health == 0 else -world.z
    gl.glTranslated(world.x, eye, world.y)
    render_level(world)
    gl.glPopMatrix()

    if not world.health:
        _overlay(gl, 255, 0, 0, 160)
    gl.glEnable(gl.GL_DEPTH_TEST)
    _icon(gl, textures.hudh, -0.22, -0.2, -0.2, -0.18)

    digit_color = health_color(world.health)
    _counter(
        world.health,
        (-0.16, -0.14, -0.12),
        -0.2,
        ((0, 255, 0), digit_color, digit_color),
        0.02,
        textures.font,
    )
    _counter(fps, (-0.26, -0.25, -0.24), 0.19, (_WHITE,) * 3, 0.01, textures.font)

    if world.jet:
        _icon(gl, textures.jetpack, 0.21, -0.2, 0.26, -0.15)
    if world.tint_alpha:
        _overlay(gl, *world.tint, world.tint_alpha)
    if world.destroyer_anim:
        _draw_destroyer(gl, world.destroyer_anim)
    gl.glFlush()