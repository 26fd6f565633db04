"""Writing and reading small monochrome Apple icon (icns) files."""

from __future__ import annotations

import struct
from pathlib import Path
from typing import Union

from unitools.grid import ConvertError, ConvertOptions, Grid

FILE_HEADER_SIZE = 8
DATA_HEADER_SIZE = 8

_READ_SIZE = 16

PathLike = Union[str, Path]


def grid_size(grid: Grid, options: ConvertOptions) -> int:
    """Byte size of ``grid`` written as an icns file (mask included at 1 bpp)."""
    canvas = (grid.width * grid.height * options.bpp) // 8
    if options.bpp == 1:
        canvas *= 2
    return FILE_HEADER_SIZE + DATA_HEADER_SIZE + canvas


def icon_type(grid: Grid, options: ConvertOptions) -> bytes:
    """The four-byte icon type code for this grid size and depth."""
    square16 = grid.width == 16 and grid.height == 16
    square32 = grid.width == 32 and grid.height == 32
    if options.bpp == 1 and square16:
        return b"ics#"
    if options.bpp == 4 and square16:
        return b"ics4"
    if options.bpp == 8 and square16:
        return b"ics8"
    if options.bpp == 1 and square32:
        return b"ICN#"
    if grid.bpp == 8 and square32:
        return b"icl8"
    return b"\x00\x00\x00\x00"


def write_icns(grid: Grid, options: ConvertOptions) -> bytes:
    """Encode ``grid`` as a 1 bpp icns image followed by its mask."""
    if options.bpp != 1:
        raise ConvertError(f"icns output supports only 1 bpp, not {options.bpp}")
    if len(grid.data) < grid.width * grid.height:
        raise ConvertError("grid data is smaller than its dimensions")

    buffer = bytearray(grid_size(grid, options))
    buffer[0:4] = b"icns"
    buffer[FILE_HEADER_SIZE:FILE_HEADER_SIZE + 4] = icon_type(grid, options)

    file_byte_idx = FILE_HEADER_SIZE + DATA_HEADER_SIZE
    data_byte_idx = 0
    byte_buffer = 0
    bit_idx = 0
    pixels = grid.data[:grid.width * grid.height]

    # The image is written twice: once as the picture, once as its mask.
    for _ in range(2):
        for value in pixels:
            byte_buffer = (byte_buffer << 1) & 0xFF
            if options.reverse:
                byte_buffer |= 0x01
                byte_buffer &= ~(value & 0x01) & 0xFF
            elif value:
                byte_buffer |= 0x01
            bit_idx += 1
            if bit_idx >= 8:
                buffer[file_byte_idx] = byte_buffer
                file_byte_idx += 1
                data_byte_idx += 1
                bit_idx = 0
                byte_buffer = 0

    struct.pack_into(">I", buffer, 4, file_byte_idx)
    struct.pack_into(">I", buffer, FILE_HEADER_SIZE + 4, data_byte_idx + DATA_HEADER_SIZE)
    return bytes(buffer)


def read_icns(data: bytes, options: ConvertOptions) -> Grid:
    """Decode the first 16x16 1 bpp image of an icns file into a grid."""
    start = FILE_HEADER_SIZE + DATA_HEADER_SIZE
    pixel_count = _READ_SIZE * _READ_SIZE
    if len(data) < start + pixel_count // 8:
        raise ConvertError("icns data is too short")
    (data_sz,) = struct.unpack_from(">I", data, FILE_HEADER_SIZE + 4)

    grid = Grid.blank(_READ_SIZE, _READ_SIZE, 1)
    for i in range(pixel_count):
        byte_idx, bit_idx = divmod(i, 8)
        if byte_idx >= data_sz:
            raise ConvertError("icns data block is shorter than a 16x16 icon")
        grid.data[i] = (data[start + byte_idx] >> (7 - bit_idx)) & 0x01
    return grid


def write_icns_file(path: PathLike, grid: Grid, options: ConvertOptions) -> int:
    """Write ``grid`` to ``path`` as icns and return the number of bytes written."""
    encoded = write_icns(grid, options)
    Path(path).write_bytes(encoded)
    return len(encoded)


def read_icns_file(path: PathLike, options: ConvertOptions) -> Grid:
    """Read an icns file into a grid."""
    return read_icns(Path(path).read_bytes(), options)