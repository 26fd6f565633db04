"""Reading and writing raw and headered CGA screen images (2 bits per pixel)."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from unitools.grid import ConvertError, ConvertOptions, Grid

HEADER_SIZE = 30
PX_PER_BYTE = 4

_HEADER = struct.Struct("<2s14H")

PathLike = Union[str, Path]


@dataclass
class CgaHeader:
    """The 30-byte header optionally placed in front of CGA image planes."""

    version: int = 2
    width: int = 0
    height: int = 0
    bpp: int = 2
    plane1_offset: int = 0
    plane1_sz: int = 0
    plane2_offset: int = 0
    plane2_sz: int = 0
    palette: int = 1
    endian: int = 0
    reserved1: int = 0
    reserved2: int = 0
    reserved3: int = 0
    reserved4: int = 0
    id: bytes = b"CG"

    def pack(self) -> bytes:
        """Encode the header into its on-disk form."""
        try:
            return _HEADER.pack(
                self.id,
                self.version,
                self.width,
                self.height,
                self.bpp,
                self.plane1_offset,
                self.plane1_sz,
                self.plane2_offset,
                self.plane2_sz,
                self.palette,
                self.endian,
                self.reserved1,
                self.reserved2,
                self.reserved3,
                self.reserved4,
            )
        except struct.error as exc:
            raise ConvertError(f"CGA header field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> "CgaHeader":
        """Decode a header from the start of ``data``."""
        if len(data) < HEADER_SIZE:
            raise ConvertError("CGA data is too short for its header")
        (ident, *fields) = _HEADER.unpack_from(data, 0)
        return cls(*fields, id=ident)


def verify_options(options: ConvertOptions) -> None:
    """Raise ConvertError unless the options give dimensions or a header."""
    if (options.w == 0 or options.h == 0) and not options.cga_use_header:
        raise ConvertError("CGA format requires width/height or header input")


def grid_size(grid: Grid, options: ConvertOptions) -> int:
    """Byte size of ``grid`` written as CGA; forces 2 bpp and sets plane padding."""
    options.bpp = 2
    size = (grid.width * grid.height) // PX_PER_BYTE + 2 * options.line_padding
    options.plane_padding = size // 2
    if options.cga_use_header:
        size += HEADER_SIZE + 1
    return size


def write_cga(grid: Grid, options: ConvertOptions) -> bytes:
    """Encode ``grid`` as interlaced CGA planes, with a header if requested."""
    size = grid_size(grid, options)
    width, height = grid.width, grid.height
    if len(grid.data) < width * height:
        raise ConvertError("grid data is smaller than its dimensions")

    buffer = bytearray(size)
    bpp = options.bpp
    plane_sz = ((height // 2) * width) // PX_PER_BYTE
    plane1_start = 0

    if options.cga_use_header:
        plane1_start = HEADER_SIZE
        header = CgaHeader(
            width=width,
            height=height,
            bpp=bpp,
            plane1_offset=plane1_start,
            plane1_sz=plane_sz,
            plane2_offset=plane1_start + plane_sz,
            plane2_sz=plane_sz,
            palette=1,
            endian=int(bool(options.little_endian)),
        )
        buffer[:HEADER_SIZE] = header.pack()

    try:
        for y in range(0, height - 1, 2):
            even_base = (y // 2) * width
            odd_base = ((height + y) // 2) * width
            for x in range(width):
                pos = even_base + x
                bit_idx = 6 - (pos % PX_PER_BYTE) * bpp
                even_idx = y * width + x
                buffer[plane1_start + pos // PX_PER_BYTE] |= (
                    grid.data[even_idx] << bit_idx
                ) & 0xFF
                odd_byte = (odd_base + x) // PX_PER_BYTE + options.line_padding
                buffer[plane1_start + odd_byte] |= (
                    grid.data[even_idx + width] << bit_idx
                ) & 0xFF
    except IndexError as exc:
        raise ConvertError("grid does not fit the CGA buffer") from exc

    return bytes(buffer)


def read_cga(data: bytes, options: ConvertOptions) -> Grid:
    """Decode interlaced CGA planes into a 2 bpp grid."""
    header = None
    if options.cga_use_header:
        header = CgaHeader.unpack(data)
        width, height = header.width, header.height
        plane1_offset = header.plane1_offset
    else:
        width, height = options.w, options.h
        plane1_offset = 0

    if width <= 0 or height <= 0:
        raise ConvertError(f"invalid CGA size {width}x{height}")
    if height % 2:
        raise ConvertError("CGA images must have an even number of lines")

    grid = Grid.blank(width, height, 2)
    options.plane_padding = ((options.w * options.h * options.bpp) // PX_PER_BYTE) // 2

    byte_idx_even = 0
    try:
        for y in range(0, height, 2):
            even_base = (y // 2) * width
            odd_base = ((height + y) // 2) * width
            for x in range(width):
                pos = even_base + x
                byte_idx_even = pos // PX_PER_BYTE
                bit_idx = 6 - (pos % PX_PER_BYTE) * grid.bpp
                even_idx = y * width + x
                grid.data[even_idx] |= (data[plane1_offset + byte_idx_even] >> bit_idx) & 0x03
                odd_byte = (odd_base + x) // PX_PER_BYTE + options.line_padding
                grid.data[even_idx + width] |= (data[plane1_offset + odd_byte] >> bit_idx) & 0x03
    except IndexError as exc:
        raise ConvertError("CGA data is too short for its dimensions") from exc

    if header is not None and header.plane1_sz != byte_idx_even + 1:
        raise ConvertError(
            f"CGA plane size {header.plane1_sz} does not match image ({byte_idx_even + 1})"
        )
    return grid


def write_cga_file(path: PathLike, grid: Grid, options: ConvertOptions) -> int:
    """Write ``grid`` to ``path`` as CGA and return the number of bytes written."""
    encoded = write_cga(grid, options)
    Path(path).write_bytes(encoded)
    return len(encoded)


def read_cga_file(path: PathLike, options: ConvertOptions) -> Grid:
    """Read a CGA file into a grid."""
    return read_cga(Path(path).read_bytes(), options)