"""Maze level data, tile rules and the per-tick world simulation."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, replace
from enum import IntEnum
from pathlib import Path

WIDTH = 80
HEIGHT = 50
TILE_BYTES = 4
LEVEL_BYTES = WIDTH * HEIGHT * TILE_BYTES + 2
OUT_OF_MAP = 255
NO_CEILING = 1_000_000_000.0
VIEW_RADIUS = 41


class TileKind(IntEnum):
    """Tile codes used in level files."""

    EMPTY = 0
    WALL = 1
    BREAKABLE = 2
    PIT = 3
    JETPACK = 4
    WALL_DESTROYER = 5
    ONE_PASS = 6
    DOOR = 7
    KEY = 8
    BUTTON = 9
    TELEPORTER = 10
    JET_REMOVER = 11
    TRAP = 12
    HIDDEN_TRAP = 13
    TALL_WALL = 14
    GRATE = 15
    HIGH_GRATE = 16
    WALL_GRATE = 17
    EXIT = 100
    SPRUNG_TRAP = 130


@dataclass
class Tile:
    """One map cell: its kind, a target cell (1-based) and the door-unlocked flag."""

    kind: int = TileKind.EMPTY
    vx: int = 0
    vy: int = 0
    dst: bool = False


class Victory(Exception):
    """Raised when the player reaches the exit."""


def parse_level(data):
    """Decode a level file image into rows of tiles, marking the exit cell."""
    if len(data) < LEVEL_BYTES:
        raise ValueError(f"level data too short: {len(data)} bytes, need {LEVEL_BYTES}")
    cells = [
        Tile(data[i], data[i + 1], data[i + 2], data[i + 3] != 0)
        for i in range(0, WIDTH * HEIGHT * TILE_BYTES, TILE_BYTES)
    ]
    rows = [cells[row * WIDTH:(row + 1) * WIDTH] for row in range(HEIGHT)]
    (exit_index,) = struct.unpack_from("<H", data, WIDTH * HEIGHT * TILE_BYTES)
    if not 1 <= exit_index <= WIDTH * HEIGHT:
        raise ValueError(f"exit position {exit_index} lies outside the map")
    exit_index -= 1
    rows[exit_index // WIDTH][exit_index % WIDTH].kind = TileKind.EXIT
    return rows


def load_level(path):
    """Read and decode a level file."""
    return parse_level(Path(path).read_bytes())


def _inside(x, y):
    return 0 <= x < WIDTH and 0 <= y < HEIGHT


class World:
    """The level grid together with the player's position, motion and inventory."""

    def __init__(self, tiles=None):
        self.x = 2.0
        self.y = 2.0
        self.z = 0.0
        self.dx = 0.0
        self.dy = 0.0
        self.dz = 0.0
        self.yaw = 0.0
        self.pitch = 0.0
        self.facing_x = 0.0
        self.facing_y = 0.0
        self.floor_z = 0.0
        self.ceil_z = NO_CEILING
        self.health = 100
        self.jet = False
        self.tint = (0, 255, 0)
        self.tint_alpha = 0
        self.wall_destroyers = 0
        self.destroyer_anim = 0
        self.tiles = [[Tile() for _ in range(WIDTH)] for _ in range(HEIGHT)]
        self.moved = [[0] * WIDTH for _ in range(HEIGHT)]
        self.optim = [[0] * WIDTH for _ in range(HEIGHT)]
        self.moving = []
        if tiles is not None:
            self.load(tiles)

    def load(self, tiles):
        """Install a level grid and reset the level's moving parts."""
        if len(tiles) != HEIGHT or any(len(row) != WIDTH for row in tiles):
            raise ValueError(f"a level must be {HEIGHT} rows of {WIDTH} tiles")
        self.tiles = [[replace(tile) for tile in row] for row in tiles]
        self.moved = [[0] * WIDTH for _ in range(HEIGHT)]
        self.moving = []
        self.build_optim()
        self.wall_destroyers = 0
        self.tint_alpha = 0

    def _cell(self, x, y):
        if _inside(x, y):
            return self.tiles[y][x]
        return Tile()

    def tile_at(self, x, y):
        """Tile kind at a cell, or 255 outside the map."""
        if not _inside(x, y):
            return OUT_OF_MAP
        return self.tiles[y][x].kind

    def _height_class(self, x, y):
        kind = self.tiles[y][x].kind
        if kind in (TileKind.TALL_WALL, TileKind.HIGH_GRATE, TileKind.WALL_GRATE):
            return 2
        if kind == TileKind.WALL:
            return 1
        if kind == TileKind.BREAKABLE:
            return 1 if self.moved[y][x] == 0 else 0
        return 0

    def solid_level(self, x, y):
        """How tall a cell is for face culling: 0 open, 1 box, 2 tall; outside is 2."""
        if not _inside(x, y):
            return 2
        return self._height_class(x, y)

    def build_optim(self):
        """Mark cells whose four neighbours are at least as tall as they are."""
        for y in range(HEIGHT):
            for x in range(WIDTH):
                own = self.solid_level(x, y)
                neighbours = (
                    self.solid_level(x - 1, y),
                    self.solid_level(x + 1, y),
                    self.solid_level(x, y - 1),
                    self.solid_level(x, y + 1),
                )
                self.optim[y][x] = 1 if all(n >= own for n in neighbours) else 0

    def _unoptim(self, x, y):
        for nx, ny in ((x - 1, y), (x, y - 1), (x + 1, y), (x, y + 1)):
            if _inside(nx, ny):
                self.optim[ny][nx] = 0

    def start_move(self, x, y):
        """Begin the animation of a cell."""
        if not _inside(x, y):
            raise IndexError(f"cell ({x}, {y}) lies outside the map")
        self.moved[y][x] = 1
        self.moving.append((x, y))

    def destroy_wall(self, x, y):
        """Turn a cell into a crumbling wall."""
        if not _inside(x, y):
            raise IndexError(f"cell ({x}, {y}) lies outside the map")
        self.tiles[y][x].kind = TileKind.BREAKABLE
        self.start_move(x, y)
        self._unoptim(x, y)

    def _advance_cell(self, x, y):
        """Advance one animated cell; return False once it is finished."""
        tile = self.tiles[y][x]
        moved = self.moved[y][x]
        if tile.kind == TileKind.BREAKABLE and moved > 0:
            self.moved[y][x] = moved + 1
            if moved + 1 == 32:
                self.moved[y][x] = 0
                tile.kind = TileKind.EMPTY
                return False
        elif tile.kind == TileKind.ONE_PASS and moved > 0:
            self.moved[y][x] = moved + 1
            if moved + 1 == 8:
                self.moved[y][x] = 0
                tile.kind = TileKind.WALL
                self.optim[y][x] = 0
                return False
        elif tile.kind == TileKind.DOOR and moved > 0:
            if moved < 31:
                self.moved[y][x] = moved + 1
            else:
                return False
        elif tile.kind == TileKind.BUTTON and moved > 0:
            if moved < 8:
                self.moved[y][x] = moved + 1
            else:
                return False
        return True

    def process_moving(self):
        """Advance every animated cell by one tick."""
        self.moving = [cell for cell in self.moving if self._advance_cell(*cell)]

    def check_wall(self, xf, yf, x, y):
        """Resolve contact with one neighbouring cell; True when the player was pushed back."""
        if not _inside(xf, yf):
            return False
        ahead_x = x + self.dx * 0.5
        ahead_y = y + self.dy * 0.5
        if not (xf - 0.6 < ahead_x < xf + 0.6 and yf - 0.6 < ahead_y < yf + 0.6):
            return False
        tile = self.tiles[yf][xf]
        if tile.kind == TileKind.GRATE and self.z >= self.floor_z:
            self.ceil_z = min(self.ceil_z, 0.8)
        if tile.kind == TileKind.HIGH_GRATE and self.z >= self.floor_z:
            self.ceil_z = min(self.ceil_z, 2.8)
        blocking = tile.kind in (
            TileKind.WALL,
            TileKind.BREAKABLE,
            TileKind.TALL_WALL,
            TileKind.WALL_GRATE,
        ) or (tile.kind == TileKind.DOOR and self.moved[yf][xf] != 31)
        if not blocking:
            return False
        if tile.kind == TileKind.BREAKABLE and self.moved[yf][xf] == 0:
            self.destroy_wall(xf, yf)
        if tile.kind == TileKind.DOOR and tile.dst and self.moved[yf][xf] == 0:
            self.start_move(xf, yf)
        if x <= xf - 0.599:
            self.x = (xf - 0.6) * 2 + 2
            self.dx = 0.0
            return True
        if x >= xf + 0.599:
            self.x = (xf + 0.6) * 2 + 2
            self.dx = 0.0
            return True
        if y <= yf - 0.599:
            self.y = (yf - 0.6) * 2 + 2
            self.dy = 0.0
            return True
        if y >= yf + 0.599:
            self.y = (yf + 0.6) * 2 + 2
            self.dy = 0.0
            return True
        moved = self.moved[yf][xf]
        if moved == 0 or tile.kind not in (TileKind.BREAKABLE, TileKind.DOOR):
            self.floor_z = max(self.floor_z, 2.0)
        elif self.floor_z == 0:
            self.floor_z = 2 - moved * 0.0625
        if tile.kind == TileKind.TALL_WALL:
            self.floor_z = max(self.floor_z, 4.0)
        return False

    def _tick_destroyer(self):
        if 0 < self.destroyer_anim < 11:
            self.destroyer_anim += 1
        if 11 < self.destroyer_anim < 22:
            self.destroyer_anim += 1
        if self.destroyer_anim == 22:
            self.destroyer_anim = 0 if self.wall_destroyers == 0 else 1

    def _clamp_position(self):
        if self.x < 1.2:
            self.x, self.dx = 1.2, 0.0
        if self.y < 1.2:
            self.y, self.dy = 1.2, 0.0
        if self.x > 160.8:
            self.x, self.dx = 160.8, 0.0
        if self.y > 100.8:
            self.y, self.dy = 100.8, 0.0

    def _pass_one_way(self, x, y, xf, yf):
        """Seal a row of one-way tiles behind the player; True if the player was moved."""
        if int(x - self.dx + 0.5) < xf:
            while self._cell(xf, yf).kind == TileKind.ONE_PASS:
                self.start_move(xf, yf)
                xf += 1
            self.x = float((xf + 1) * 2)
        elif int(x - self.dx + 0.5) > xf:
            while self._cell(xf, yf).kind == TileKind.ONE_PASS:
                self.start_move(xf, yf)
                xf -= 1
            self.x = float((xf + 1) * 2)
        elif int(y - self.dy + 0.5) < yf:
            while self._cell(xf, yf).kind == TileKind.ONE_PASS:
                self.start_move(xf, yf)
                yf += 1
            self.y = float((yf + 1) * 2)
        elif int(y - self.dy + 0.5) > yf:
            while self._cell(xf, yf).kind == TileKind.ONE_PASS:
                self.start_move(xf, yf)
                yf -= 1
            self.y = float((yf + 1) * 2)
        else:
            return False
        self.z = 2.0 if self._cell(xf, yf).kind == TileKind.WALL else 0.0
        return True

    def control(self):
        """Run one simulation tick of the level against the player's position."""
        self.process_moving()
        self._tick_destroyer()
        if self.tint_alpha:
            self.tint_alpha = 0 if self.tint_alpha < 8 else self.tint_alpha - 8
        self._clamp_position()
        x = (self.x - self.dx - 2) * 0.5
        y = (self.y - self.dy - 2) * 0.5
        xf = int(x + 0.5)
        yf = int(y + 0.5)

        if self.wall_destroyers and self.destroyer_anim == 16 and self.z < 0.2:
            xm = xf + math.floor(self.facing_x + 0.5)
            ym = yf + math.floor(self.facing_y + 0.5)
            if self.tile_at(xm, ym) == TileKind.WALL:
                self.wall_destroyers -= 1
                self.destroy_wall(xm, ym)

        tile = self._cell(xf, yf)
        near = abs(x - xf) < 0.2 and abs(y - yf) < 0.2

        if self.z < 1.7 and tile.kind == TileKind.ONE_PASS:
            self.tint, self.tint_alpha = (255, 255, 0), 64
            if not self.moved[yf][xf]:
                if self._pass_one_way(x, y, xf, yf):
                    return
            else:
                self.floor_z = max(self.floor_z, 0.25 * self.moved[yf][xf])
        if self.z < 0.2 and tile.kind == TileKind.WALL_DESTROYER:
            tile.kind = TileKind.EMPTY
            self.wall_destroyers += 1
            if self.destroyer_anim == 0:
                self.destroyer_anim = 1
        if self.z < 1.7 and tile.kind == TileKind.EXIT:
            raise Victory("you win")
        if tile.kind == TileKind.JET_REMOVER and self.jet:
            self.jet = False
            if self.z > self.floor_z:
                self.dx = self.dy = 0.0
            if self.dz > 0:
                self.dz = -0.05
        if self.z < 1.7 and tile.kind == TileKind.TELEPORTER:
            self.x = float(tile.vx * 2)
            self.y = float(tile.vy * 2)
            target = self._cell(tile.vx - 1, tile.vy - 1)
            self.z = 2.0 if target.kind == TileKind.WALL else 0.0
            self.tint, self.tint_alpha = (0, 255, 0), 255
            self.dx = self.dy = self.dz = 0.0
            return
        if self.z < 1.7 and tile.kind in (TileKind.PIT, TileKind.TRAP):
            tile.kind = TileKind.SPRUNG_TRAP
            self.health = 0
            self.jet = False
            self.wall_destroyers = 0
            self.destroyer_anim = 0
            self.z += 1
            self.dx *= 0.1
            self.dy *= 0.1
            self.dz = 0.1
        if self.z < 0.2 and tile.kind == TileKind.JETPACK and near:
            self.jet = True
            tile.kind = TileKind.EMPTY
        if self.z < 0.2 and tile.kind == TileKind.KEY and near:
            tile.kind = TileKind.EMPTY
            self._cell(tile.vx - 1, tile.vy - 1).dst = True
        on_button = abs(x - xf) < 0.3 and abs(y - yf) < 0.3
        if (
            self.z < 0.2
            and tile.kind == TileKind.BUTTON
            and self.moved[yf][xf] == 0
            and on_button
        ):
            if _inside(tile.vx - 1, tile.vy - 1):
                self.destroy_wall(tile.vx - 1, tile.vy - 1)
            self.start_move(xf, yf)

        if self.z >= self.floor_z:
            self.floor_z = 0.0
        self.ceil_z = NO_CEILING

        if self.z < 2:
            self._collide_low(x, y)
        elif self.z < 4:
            self._collide_middle(x, y)
        else:
            self._collide_high(x, y)

    def _collide_low(self, x, y):
        xf = int(x + 0.5)
        yf = int(y + 0.5)
        self.check_wall(xf, yf, x, y)
        collided = False
        for nx, ny in ((xf - 1, yf), (xf + 1, yf), (xf, yf - 1), (xf, yf + 1)):
            collided |= self.check_wall(nx, ny, x, y)
        if not collided:
            for nx, ny in ((xf - 1, yf - 1), (xf + 1, yf - 1), (xf - 1, yf + 1), (xf + 1, yf + 1)):
                self.check_wall(nx, ny, x, y)
        if (
            self._cell(xf, yf).kind == TileKind.BUTTON
            and abs(x - xf) < 0.3
            and abs(y - yf) < 0.3
        ):
            self.floor_z = 0.2 - self.moved[yf][xf] * 0.02

    def _touched_cells(self, x, y):
        for yf in range(int(y) - 1, int(y) + 2):
            for xf in range(int(x) - 1, int(x) + 2):
                if not _inside(xf, yf):
                    continue
                if xf - 0.6 < x < xf + 0.6 and yf - 0.6 < y < yf + 0.6:
                    yield xf, yf

    def _collide_middle(self, x, y):
        for xf, yf in self._touched_cells(x, y):
            kind = self.tiles[yf][xf].kind
            if kind in (TileKind.WALL, TileKind.GRATE, TileKind.WALL_GRATE):
                self.floor_z = max(self.floor_z, 2.0)
            if kind in (TileKind.HIGH_GRATE, TileKind.WALL_GRATE) and self.z >= self.floor_z:
                self.ceil_z = min(self.ceil_z, 2.8)
            if kind == TileKind.TALL_WALL:
                if x - self.dx < xf - 0.6 and self._cell(xf - 1, yf).kind != TileKind.TALL_WALL:
                    self.x = (xf - 0.6) * 2 + 2
                elif x - self.dx > xf + 0.6 and self._cell(xf + 1, yf).kind != TileKind.TALL_WALL:
                    self.x = (xf + 0.6) * 2 + 2
                elif y - self.dy < yf - 0.6:
                    self.y = (yf - 0.6) * 2 + 2
                elif y - self.dy > yf + 0.6:
                    self.y = (yf + 0.6) * 2 + 2
                else:
                    return

    def _collide_high(self, x, y):
        for xf, yf in self._touched_cells(x, y):
            kind = self.tiles[yf][xf].kind
            if kind in (TileKind.WALL, TileKind.GRATE):
                self.floor_z = max(self.floor_z, 2.0)
            if kind in (TileKind.TALL_WALL, TileKind.HIGH_GRATE, TileKind.WALL_GRATE):
                self.floor_z = max(self.floor_z, 4.0)

    def visible_range(self):
        """Columns and rows of the map drawn around the player."""
        cx = int((self.x - 1) * 0.5) & 0xFF
        cy = int((self.y - 1) * 0.5) & 0xFF
        xs = range(max(0, cx - VIEW_RADIUS), min(WIDTH - 1, cx + VIEW_RADIUS) + 1)
        ys = range(max(0, cy - VIEW_RADIUS), min(HEIGHT - 1, cy + VIEW_RADIUS) + 1)
        return xs, ys