import struct

import pytest

from linmaze.bitmap import (
    BitmapError,
    Picture,
    decode_bmp,
    decode_bmp_alpha,
    load_bmp,
    load_bmp_alpha,
)


def make_bmp(width, height, pixels, bits=24, magic=b"BM", off_bits=54):
    file_header = magic + struct.pack("<IHHI", 54 + len(pixels), 0, 0, off_bits)
    info = struct.pack("<IIIHHIIIIII", 40, width, height, 1, bits, 0, 0, 0, 0, 0, 0)
    return file_header + info + bytes(pixels)


def test_decode_swaps_bgr_to_rgb():
    data = make_bmp(2, 1, [1, 2, 3, 4, 5, 6])
    picture = decode_bmp(data)
    assert picture == Picture(2, 1, bytes([3, 2, 1, 6, 5, 4]))


def test_decode_honours_pixel_offset():
    data = make_bmp(1, 1, [0, 0, 9, 8, 7], off_bits=56)
    assert decode_bmp(data).data == bytes([7, 8, 9])


def test_decode_rejects_bad_magic():
    with pytest.raises(BitmapError):
        decode_bmp(make_bmp(1, 1, [0, 0, 0], magic=b"XY"))


def test_decode_rejects_other_depths():
    with pytest.raises(BitmapError):
        decode_bmp(make_bmp(1, 1, [0, 0, 0, 0], bits=32))


def test_decode_rejects_truncated_header():
    with pytest.raises(BitmapError):
        decode_bmp(b"BM\x00\x00")


def test_short_pixel_data_is_zero_padded_with_warning():
    data = make_bmp(1, 2, [10, 20, 30])
    with pytest.warns(UserWarning):
        picture = decode_bmp(data)
    assert picture.data == bytes([30, 20, 10, 0, 0, 0])


def test_alpha_uses_red_channel_and_given_colour():
    # one pixel wide rows are padded to four bytes
    data = make_bmp(1, 2, [1, 2, 200, 0, 4, 5, 50, 0])
    picture = decode_bmp_alpha(data, 255, 255, 0)
    assert picture.width == 1 and picture.height == 2
    assert picture.data == bytes([255, 255, 0, 200, 255, 255, 0, 50])


def test_alpha_ignores_offset_field():
    data = make_bmp(1, 1, [0, 0, 77, 0], off_bits=500)
    assert decode_bmp_alpha(data, 1, 2, 3).data == bytes([1, 2, 3, 77])


def test_alpha_rejects_bad_magic():
    with pytest.raises(BitmapError):
        decode_bmp_alpha(make_bmp(1, 1, [0, 0, 0, 0], magic=b"PK"), 0, 0, 0)


def test_rgba_length_matches_dimensions():
    data = make_bmp(3, 2, bytes(24))
    picture = decode_bmp_alpha(data, 9, 9, 9)
    assert len(picture.data) == picture.width * picture.height * 4


def test_load_round_trip(tmp_path):
    path = tmp_path / "img.bmp"
    path.write_bytes(make_bmp(1, 1, [11, 22, 33]))
    assert load_bmp(path).data == bytes([33, 22, 11])
    assert load_bmp_alpha(path, 0, 0, 255).data == bytes([0, 0, 255, 33])


def test_load_missing_file(tmp_path):
    with pytest.raises(BitmapError):
        load_bmp(tmp_path / "missing.bmp")
    with pytest.raises(BitmapError):
        load_bmp_alpha(tmp_path / "missing.bmp", 1, 1, 1)