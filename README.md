# linmaze

A first-person 3D maze game. Find your way through an 80 × 50 tile level to
the red exit pad. Along the way you meet breakable walls, one-way passes,
doors opened by keys, pressure buttons, teleporters, spike traps, grates,
tall walls, wall destroyers and a jetpack.

## Installing

```
pip install .
```

## Playing

```
linmaze [MAP] [--data DIRECTORY]
```

`MAP` is the level file to play and defaults to `1.map`. `--data` names the
directory holding the textures `wl.bmp`, `grnd.bmp`, `jetp.bmp`, `key.bmp`,
`hud-h.bmp`, `smallfont.bmp` and `gr.bmp` (24-bit BMP files); it defaults to
the current directory. If a texture cannot be read the command prints an
error and exits with status 1.

The game opens full screen and captures the mouse.

| Control                    | Action                                  |
|----------------------------|-----------------------------------------|
| mouse                      | look around                             |
| `W` / middle mouse button  | move forward                            |
| `S`                        | move back                               |
| `A` / `D`                  | strafe left / right                     |
| `Space` / right mouse      | jump                                    |
| `Q` / mouse button 4       | fire the jetpack (once picked up)       |
| left mouse                 | use a wall destroyer you are carrying   |
| `J`                        | lose one point of health                |
| `Esc`                      | quit                                    |

Hard landings cost health and spike traps kill outright. When health reaches
zero, click any mouse button to restart the level. Reaching the exit prints
`you win` and ends the game.

## Level files

A level file holds 80 × 50 tiles, row by row, four bytes each: the tile kind
(see `linmaze.level.TileKind`), a 1-based target column and row (used by
teleporters, keys and buttons), and a non-zero byte marking a door as
unlocked. Two more bytes follow: the 1-based position of the exit cell as a
little-endian number. `linmaze.level.parse_level` and `load_level` raise
`ValueError` for data that is too short or an exit outside the map.

## Using the library

The game rules have no dependency on a display and can be driven directly:

```python
from linmaze.level import Victory, World, load_level
from linmaze.physics import Controls, step

world = World(load_level("1.map"))
try:
    step(world, Controls(forward=True), reload=lambda: load_level("1.map"))
except Victory:
    print("exit reached")
```

- `linmaze.level` — `Tile`, `World` (position, motion, inventory and the
  per-tick level rules in `World.control`) and `Victory`.
- `linmaze.physics` — `Controls`, `FrameClock` (30 ms fixed ticks),
  `apply_mouse` and `step`, one tick of steering, gravity, landing and
  friction. `step` raises `SystemExit` when `Controls.quit` is set.
- `linmaze.bitmap` — `load_bmp` and `load_bmp_alpha` (and `decode_bmp`,
  `decode_bmp_alpha` for bytes) read 24-bit BMP images into `Picture`
  objects, raising `BitmapError` otherwise.
- `linmaze.scene` and `linmaze.app` — drawing with pyglet's OpenGL bindings
  and the window and main loop.

## What it does not include

No level files or texture images come with the package, and there is no
level editor; levels and textures must be supplied in the formats above.

## Running the tests

```
pip install .[test]
pytest
```