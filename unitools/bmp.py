"""Reading and writing uncompressed Windows bitmaps."""

from __future__ import annotations

import struct
from pathlib import Path
from typing import Union

from unitools.grid import ConvertError, ConvertOptions, Grid

FILE_HEADER = struct.Struct("<2sIHHI")
DATA_HEADER = struct.Struct("<IiiHHIIiiII")

COMPRESSION_NONE = 0

COLORS = {
    "black": 0x00000000,
    "blue": 0x000000AA,
    "green": 0x0000AA00,
    "cyan": 0x0000AAAA,
    "red": 0x00AA0000,
    "magenta": 0x00AA00AA,
    "brown": 0x00AA5500,
    "light_gray": 0x00AAAAAA,
    "dark_gray": 0x00555555,
    "light_blue": 0x005555FF,
    "light_green": 0x0055FF55,
    "light_cyan": 0x0055FFFF,
    "light_red": 0x00FF5555,
    "light_magenta": 0x00FF55FF,
    "yellow": 0x00FFFF55,
    "white": 0x00FFFFFF,
}

_PALETTE_MONO = (0x00000000, 0x00FFFFFF)
_PALETTE_CGA = (0x00000000, 0x0000FFFF, 0x00FF00FF, 0x00FFFFFF)
_PALETTE_16 = tuple(COLORS.values())

_SUPPORTED_BPP = (1, 2, 4, 8)

PathLike = Union[str, Path]


def colors_count(bpp: int) -> int:
    """Number of palette entries written for the given bit depth."""
    if bpp == 1:
        return 2
    if bpp == 2:
        return 4
    return 16


def _palette(bpp: int) -> tuple:
    if bpp == 1:
        return _PALETTE_MONO
    if bpp == 2:
        return _PALETTE_CGA
    return _PALETTE_16


def _cga_to_16(color: int) -> int:
    return {0: 0, 1: 11, 2: 13, 3: 15}.get(color, 0)


def _to_mono(color: int, reverse: bool) -> int:
    if reverse:
        return 1 if color == 0 else 0
    return 0 if color == 0 else 1


def grid_size(grid: Grid, options: ConvertOptions) -> int:
    """Byte size of ``grid`` written as a bitmap; records the data size in options."""
    row_size = (grid.width * options.bpp) // 8
    if row_size % 4:
        row_size += 4 - (row_size % 4)
    options.bmp_data_sz = grid.height * row_size
    return (
        FILE_HEADER.size
        + DATA_HEADER.size
        + 4 * colors_count(options.bpp)
        + options.bmp_data_sz
    )


def write_bmp(grid: Grid, options: ConvertOptions) -> bytes:
    """Encode ``grid`` as bitmap bytes at ``options.bpp`` bits per pixel."""
    bpp = options.bpp
    if bpp not in _SUPPORTED_BPP:
        raise ConvertError(f"unsupported bitmap depth: {bpp}")
    if len(grid.data) < grid.width * grid.height:
        raise ConvertError("grid data is smaller than its dimensions")

    palette = _palette(bpp)
    colors = colors_count(bpp)
    data_header = DATA_HEADER.pack(
        DATA_HEADER.size,
        grid.width,
        grid.height,
        1,
        bpp,
        COMPRESSION_NONE,
        (grid.width * grid.height) // (8 // bpp),
        72,
        72,
        colors,
        0,
    )
    palette_bytes = b"".join(struct.pack("<I", entry) for entry in palette)

    header_sz = 0 if options.bmp_no_file_header else FILE_HEADER.size
    data_offset = header_sz + len(data_header) + len(palette_bytes)
    options.bmp_data_offset_out = data_offset

    mask_out = (1 << bpp) - 1
    pixels = bytearray()
    byte_buffer = 0
    bit_idx = 0
    for y in reversed(range(grid.height)):
        row_bytes = 0
        row = grid.data[y * grid.width:(y + 1) * grid.width]
        for value in row:
            byte_buffer = (byte_buffer << bpp) & 0xFF
            if bpp == 1:
                byte_buffer |= _to_mono(value, options.reverse)
            else:
                byte_buffer |= _cga_to_16(value) & mask_out
            bit_idx += bpp
            if bit_idx % 8 == 0:
                pixels.append(byte_buffer)
                byte_buffer = 0
                row_bytes += 1
                bit_idx = 0
        while row_bytes % 4:
            pixels.append(0)
            row_bytes += 1

    body = data_header + palette_bytes + bytes(pixels)
    if options.bmp_no_file_header:
        return body
    file_sz = data_offset + len(pixels)
    return FILE_HEADER.pack(b"BM", file_sz, 0, 0, data_offset) + body


def read_bmp(data: bytes, options: ConvertOptions) -> Grid:
    """Decode bitmap bytes into a grid holding one palette index per pixel."""
    if len(data) < FILE_HEADER.size + DATA_HEADER.size:
        raise ConvertError("bitmap is too short for its headers")
    magic, file_sz, _, _, data_offset = FILE_HEADER.unpack_from(data, 0)
    if magic != b"BM":
        raise ConvertError("not a bitmap file")
    if file_sz != len(data):
        raise ConvertError(f"bitmap size {file_sz} does not match data size {len(data)}")
    header_sz, width, height, _, bpp = struct.unpack_from("<IiiHH", data, FILE_HEADER.size)
    if header_sz != DATA_HEADER.size:
        raise ConvertError(f"unsupported bitmap header size: {header_sz}")
    (compression,) = struct.unpack_from("<H", data, 30)
    if compression != COMPRESSION_NONE:
        raise ConvertError("compressed bitmaps are not supported")
    if bpp not in _SUPPORTED_BPP:
        raise ConvertError(f"unsupported bitmap depth: {bpp}")
    if width <= 0 or height <= 0:
        raise ConvertError(f"unsupported bitmap size {width}x{height}")

    data_size = len(data) - data_offset
    grid = Grid.blank(width, height, bpp)

    # Rows are stored bottom-up; pixels are taken from the low bits first.
    y = height - 1
    x = 0
    byte_idx = 0
    bit_idx = 0
    current = 0
    while byte_idx < data_size and y >= 0:
        if bit_idx % 8 == 0:
            current = data[data_offset + byte_idx]
            byte_idx += 1
            bit_idx = 0
        value = 0
        for _ in range(bpp):
            value |= current & (1 << bit_idx)
            bit_idx += 1
        grid.data[y * width + x] = (value >> (bit_idx - bpp)) & 0xFF

        x += 1
        if x >= width:
            y -= 1
            x = 0
            while byte_idx % 4:
                byte_idx += 1
    return grid


def write_bmp_file(path: PathLike, grid: Grid, options: ConvertOptions) -> int:
    """Write ``grid`` to ``path`` as a bitmap and return the number of bytes written."""
    expected = grid_size(grid, options)
    encoded = write_bmp(grid, options)
    if len(encoded) != expected:
        raise ConvertError(
            f"encoded bitmap is {len(encoded)} bytes, expected {expected}"
        )
    Path(path).write_bytes(encoded)
    return len(encoded)


def read_bmp_file(path: PathLike, options: ConvertOptions) -> Grid:
    """Read a bitmap file into a grid."""
    return read_bmp(Path(path).read_bytes(), options)