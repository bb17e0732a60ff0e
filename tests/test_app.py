import dataclasses
import struct

import pytest

from linmaze.app import Textures, texture_images
from linmaze.bitmap import BitmapError

FILES = ("wl.bmp", "grnd.bmp", "jetp.bmp", "key.bmp", "hud-h.bmp", "smallfont.bmp", "gr.bmp")
WIDTH = 4
HEIGHT = 2


def _bmp(width, height, pixel, bit_count=24):
    row = bytes(pixel) * width
    pixels = row * height
    header = struct.pack("<HIHHI", 19778, 54 + len(pixels), 0, 0, 54)
    info = struct.pack("<IIIHHIIIIII", 40, width, height, 1, bit_count, 0, len(pixels), 0, 0, 0, 0)
    return header + info + pixels


@pytest.fixture
def data_dir(tmp_path):
    for index, name in enumerate(FILES):
        (tmp_path / name).write_bytes(_bmp(WIDTH, HEIGHT, (10, 20, 30 + index)))
    return tmp_path


def test_every_texture_field_has_an_image(data_dir):
    images = texture_images(data_dir)
    names = {f.name for f in dataclasses.fields(Textures)} - {"handles"}
    assert set(images) == names


def test_rgb_images_are_swapped_to_rgb(data_dir):
    images = texture_images(data_dir)
    wall = images["wall"].picture
    assert (wall.width, wall.height) == (WIDTH, HEIGHT)
    assert len(wall.data) == WIDTH * HEIGHT * 3
    assert wall.data[:3] == bytes((30, 20, 10))
    assert images["gr"].picture.data[:3] == bytes((36, 20, 10))
    assert not images["wall"].alpha


@pytest.mark.parametrize(
    "name, color, red",
    [
        ("key", (255, 255, 0), 33),
        ("hudh", (255, 0, 0), 34),
        ("font", (255, 255, 255), 35),
    ],
)
def test_alpha_images_use_fixed_colour(data_dir, name, color, red):
    image = texture_images(data_dir)[name]
    assert image.alpha
    data = image.picture.data
    assert len(data) == WIDTH * HEIGHT * 4
    assert data[:4] == bytes((*color, red))
    assert data[-4:] == bytes((*color, red))


def test_mipmapped_textures(data_dir):
    images = texture_images(data_dir)
    mipmapped = {name for name, image in images.items() if image.mipmap}
    assert mipmapped == {"wall", "ground", "jetpack", "gr"}


def test_missing_image_raises(data_dir):
    (data_dir / "key.bmp").unlink()
    with pytest.raises(BitmapError, match="key.bmp"):
        texture_images(data_dir)


def test_wrong_bit_depth_raises(data_dir):
    (data_dir / "wl.bmp").write_bytes(_bmp(WIDTH, HEIGHT, (1, 2, 3), bit_count=8))
    with pytest.raises(BitmapError, match="bit depth"):
        texture_images(data_dir)


def test_textures_equality_ignores_handles():
    first = Textures(1, 2, 3, 4, 5, 6, 7, handles=("a",))
    second = Textures(1, 2, 3, 4, 5, 6, 7)
    assert first == second
    assert first.gr == 7