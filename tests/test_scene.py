import pytest

from linmaze import scene
from linmaze.level import HEIGHT, WIDTH, TileKind, World


def _world_with(x, y, kind, moved=0):
    world = World()
    world.tiles[y][x].kind = kind
    world.moved[y][x] = moved
    return world


def test_empty_tile_draws_nothing():
    assert scene.tile_draws(World(), 5, 5) == []


def test_wall_is_a_box_at_cell_centre():
    world = _world_with(3, 4, TileKind.WALL)
    assert scene.tile_draws(world, 3, 4) == [(8, 10, 0, scene.BOX, 255)]


def test_surrounded_wall_draws_only_its_top():
    world = _world_with(3, 4, TileKind.WALL)
    world.optim[4][3] = 1
    [draw] = scene.tile_draws(world, 3, 4)
    assert draw[3] == scene.BOX_OPTIM_CEILONLY


def test_crumbling_wall_sinks_and_fades():
    still = scene.tile_draws(_world_with(1, 1, TileKind.BREAKABLE), 1, 1)
    assert still[0][2] == 0
    assert still[0][4] == 255
    moving = scene.tile_draws(_world_with(1, 1, TileKind.BREAKABLE, moved=28), 1, 1)
    assert moving[0][2] == pytest.approx(-28 * 0.0625)
    assert 0 <= moving[0][4] <= 255


@pytest.mark.parametrize("moved", range(0, 32))
def test_crumbling_wall_alpha_is_a_byte(moved):
    [draw] = scene.tile_draws(_world_with(0, 0, TileKind.BREAKABLE, moved=moved), 0, 0)
    assert 0 <= draw[4] <= 255
    assert draw[2] <= 0


def test_one_way_tile_adds_a_rising_box_while_closing():
    idle = scene.tile_draws(_world_with(2, 2, TileKind.ONE_PASS), 2, 2)
    assert [draw[3] for draw in idle] == [scene.ONEPASS]
    closing = scene.tile_draws(_world_with(2, 2, TileKind.ONE_PASS, moved=4), 2, 2)
    assert [draw[3] for draw in closing] == [scene.ONEPASS, scene.BOX]
    assert closing[1][2] == pytest.approx(4 * 0.25 - 2)


def test_wall_grate_draws_box_then_grate_on_top():
    draws = scene.tile_draws(_world_with(6, 7, TileKind.WALL_GRATE), 6, 7)
    assert [(d[2], d[3]) for d in draws] == [(0, scene.BOX), (2, scene.GR)]


@pytest.mark.parametrize(
    "kind, list_id",
    [
        (TileKind.JETPACK, scene.JETPACK),
        (TileKind.WALL_DESTROYER, scene.WALLD),
        (TileKind.KEY, scene.KEY),
        (TileKind.TELEPORTER, scene.TELEPORTER),
        (TileKind.TALL_WALL, scene.TW),
        (TileKind.GRATE, scene.GR),
        (TileKind.EXIT, scene.EXIT),
        (TileKind.SPRUNG_TRAP, scene.TRAP),
    ],
)
def test_single_object_tiles(kind, list_id):
    [draw] = scene.tile_draws(_world_with(10, 20, kind), 10, 20)
    assert draw[3] == list_id
    assert draw[:2] == (22, 42)


def test_hidden_traps_sit_below_the_floor():
    for kind in (TileKind.TRAP, TileKind.HIDDEN_TRAP):
        [draw] = scene.tile_draws(_world_with(0, 0, kind), 0, 0)
        assert draw[3] == scene.TRAP
        assert draw[2] == -1.75


def test_pit_is_invisible():
    assert scene.tile_draws(_world_with(0, 0, TileKind.PIT), 0, 0) == []


def test_tile_draws_outside_map_raises():
    with pytest.raises(IndexError):
        scene.tile_draws(World(), WIDTH, 0)
    with pytest.raises(IndexError):
        scene.tile_draws(World(), 0, HEIGHT)
    with pytest.raises(IndexError):
        scene.tile_draws(World(), -1, 0)


@pytest.mark.parametrize("value", [0, 5, 9, 10, 42, 99, 100, 250, 999])
def test_hud_digits_reassemble_the_value(value):
    hundreds, tens, ones = scene.hud_digits(value)
    total = ones + 10 * (tens or 0) + 100 * (hundreds or 0)
    assert total == value
    assert (hundreds is None) == (value < 100)
    assert (tens is None) == (value < 10)


def test_hud_digits_full_health():
    assert scene.hud_digits(100) == (1, 0, 0)


def test_health_colour_thresholds():
    assert scene.health_color(100) == (0, 255, 0)
    assert scene.health_color(70) == (0, 255, 0)
    assert scene.health_color(69) == (255, 255, 0)
    assert scene.health_color(30) == (255, 255, 0)
    assert scene.health_color(29) == (255, 0, 0)
    assert scene.health_color(0) == (255, 0, 0)