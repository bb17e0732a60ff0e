"""Reading of uncompressed 24-bit BMP images into packed pixel buffers."""

from __future__ import annotations

import struct
import warnings
from dataclasses import dataclass
from pathlib import Path

BMP_MAGIC = 19778
FILE_HEADER_BYTES = 14
INFO_HEADER_BYTES = 40
HEADER_BYTES = FILE_HEADER_BYTES + INFO_HEADER_BYTES
ALPHA_PIXEL_OFFSET = 0x36


class BitmapError(Exception):
    """Raised when an image cannot be opened or is not a 24-bit BMP."""


@dataclass(frozen=True)
class Picture:
    """Decoded image: rows in file order, packed RGB or RGBA bytes."""

    width: int
    height: int
    data: bytes


def _read_headers(data):
    if len(data) < HEADER_BYTES:
        raise BitmapError(f"truncated header: {len(data)} bytes")
    bf_type, _size, _res1, _res2, off_bits = struct.unpack_from("<HIHHI", data, 0)
    if bf_type != BMP_MAGIC:
        raise BitmapError(f"bfType {bf_type} is incorrect")
    _bi_size, width, height, _planes, bit_count = struct.unpack_from(
        "<IIIHH", data, FILE_HEADER_BYTES
    )
    if bit_count != 24:
        raise BitmapError(f"bit depth {bit_count} is incorrect")
    return off_bits, width, height


def decode_bmp(data):
    """Decode a 24-bit BMP into RGB bytes; rows are taken as unpadded."""
    off_bits, width, height = _read_headers(data)
    row_bytes = width * 3
    wanted = row_bytes * height
    raw = bytes(data[off_bits:off_bits + wanted])
    if len(raw) < wanted:
        lines = len(raw) // row_bytes if row_bytes else 0
        warnings.warn(f"only {lines} lines were read", stacklevel=2)
        raw = raw + bytes(wanted - len(raw))
    pixels = bytearray(raw)
    pixels[0::3] = raw[2::3]
    pixels[2::3] = raw[0::3]
    return Picture(width, height, bytes(pixels))


def decode_bmp_alpha(data, r, g, b):
    """Decode a 24-bit BMP into a solid-colour RGBA image whose alpha is the red channel."""
    _off_bits, width, height = _read_headers(data)
    row_bytes = (width * 3 + 3) & ~3
    wanted = row_bytes * height
    raw = bytes(data[ALPHA_PIXEL_OFFSET:ALPHA_PIXEL_OFFSET + wanted])
    raw = raw + bytes(wanted - len(raw))
    count = width * height
    pixels = bytearray(count * 4)
    pixels[0::4] = bytes([r]) * count
    pixels[1::4] = bytes([g]) * count
    pixels[2::4] = bytes([b]) * count
    alpha = b"".join(
        raw[row * row_bytes + 2:row * row_bytes + width * 3:3] for row in range(height)
    )
    pixels[3::4] = alpha
    return Picture(width, height, bytes(pixels))


def _read(path):
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise BitmapError(f"can't open {path}") from exc


def load_bmp(path):
    """Read and decode a 24-bit BMP file into RGB."""
    return decode_bmp(_read(path))


def load_bmp_alpha(path, r, g, b):
    """Read a 24-bit BMP file as a coloured alpha mask."""
    return decode_bmp_alpha(_read(path), r, g, b)