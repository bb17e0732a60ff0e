import pytest

from linmaze.level import HEIGHT, WIDTH, Tile, TileKind, Victory, World
from linmaze.physics import Controls, FrameClock, apply_mouse, step


def empty_grid():
    return [[Tile() for _ in range(WIDTH)] for _ in range(HEIGHT)]


def no_reload():
    raise AssertionError("reload should not be called")


def test_controls_clicked_reflects_any_button():
    assert not Controls().clicked
    assert Controls(mouse_x2=True).clicked
    assert Controls(mouse_left=True).clicked


def test_clock_accumulates_whole_ticks():
    clock = FrameClock(start=0)
    ticks = clock.advance(65)
    assert ticks * clock.interval + clock.pending == 65
    assert 0 <= clock.pending < clock.interval
    assert clock.remaining == clock.interval - clock.pending


def test_clock_fps_from_last_frame():
    clock = FrameClock(start=100)
    assert clock.fps == 0
    clock.advance(120)
    assert clock.fps == 50


def test_clock_carries_remainder():
    clock = FrameClock(start=0)
    first = clock.advance(20)
    second = clock.advance(40)
    assert first == 0
    assert first + second == 1


def test_mouse_wraps_yaw_and_clamps_pitch():
    world = World()
    world.yaw = 170.0
    apply_mouse(world, 40, 400)
    assert world.yaw == pytest.approx(-170.0)
    assert world.pitch == 90.0
    apply_mouse(world, 0, -1000)
    assert world.pitch == -90.0


def test_idle_tick_keeps_player_still():
    world = World(empty_grid())
    step(world, Controls(), no_reload)
    assert (world.x, world.y, world.z) == (2.0, 2.0, 0.0)
    assert world.health == 100


def test_forward_moves_along_facing():
    world = World(empty_grid())
    step(world, Controls(forward=True), no_reload)
    assert world.y > 2.0
    assert world.x == pytest.approx(2.0)
    assert world.facing_y == pytest.approx(1.0)


def test_turned_player_moves_sideways():
    world = World(empty_grid())
    world.x = world.y = 10.0
    world.yaw = 90.0
    step(world, Controls(forward=True), no_reload)
    assert world.x < 10.0
    assert world.y == pytest.approx(10.0)


def test_jump_lifts_player():
    world = World(empty_grid())
    step(world, Controls(jump=True), no_reload)
    assert world.z > 0.0
    assert 0.0 < world.dz < 0.075


def test_thrust_needs_jetpack():
    world = World(empty_grid())
    step(world, Controls(thrust=True), no_reload)
    assert world.z == 0.0
    world.jet = True
    step(world, Controls(thrust=True), no_reload)
    assert world.z > 0.0


def test_quit_raises_system_exit():
    world = World(empty_grid())
    with pytest.raises(SystemExit):
        step(world, Controls(quit=True), no_reload)


def test_exit_tile_wins():
    grid = empty_grid()
    grid[0][0].kind = TileKind.EXIT
    world = World(grid)
    with pytest.raises(Victory):
        step(world, Controls(), no_reload)


def test_hard_landing_hurts():
    world = World(empty_grid())
    world.dz = -0.5
    step(world, Controls(), no_reload)
    assert 0 < world.health < 100
    assert world.tint == (255, 0, 0)
    assert world.dz > 0


def test_dead_player_click_respawns():
    world = World(empty_grid())
    world.health = 0
    world.x = world.y = 30.0
    world.jet = True
    calls = []

    def reload():
        calls.append(True)
        return empty_grid()

    step(world, Controls(mouse_left=True), reload)
    assert calls == [True]
    assert world.health == 100
    assert (world.x, world.y) == (2.0, 2.0)
    assert not world.jet


def test_dead_player_cannot_steer():
    world = World(empty_grid())
    world.health = 0
    step(world, Controls(forward=True), no_reload)
    assert (world.x, world.y) == (2.0, 2.0)


def test_hurt_key_costs_health():
    world = World(empty_grid())
    step(world, Controls(hurt=True), no_reload)
    assert world.health == 99


def test_left_click_throws_wall_destroyer():
    world = World(empty_grid())
    world.destroyer_anim = 11
    step(world, Controls(), no_reload)
    assert world.destroyer_anim == 11
    step(world, Controls(mouse_left=True), no_reload)
    assert world.destroyer_anim > 11