"""Pixel grids, conversion options and format identifiers shared by the codecs."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional


class ConvertError(Exception):
    """Raised when an image cannot be read, written or converted."""


@dataclass
class Grid:
    """A width x height array of palette indexes, one byte per pixel, row-major."""

    width: int
    height: int
    bpp: int
    data: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        self.data = bytearray(self.data)

    @classmethod
    def blank(cls, width: int, height: int, bpp: int) -> "Grid":
        """Create a grid of the given size with every pixel set to 0."""
        if width < 0 or height < 0:
            raise ConvertError(f"invalid grid size {width}x{height}")
        return cls(width, height, bpp, bytearray(width * height))


@dataclass
class ConvertOptions:
    """Options steering how a grid is read from or written to a format."""

    reverse: bool = False
    bpp: int = 0
    w: int = 0
    h: int = 0
    line_padding: int = 0
    plane_padding: int = 0
    bmp_data_sz: int = 0
    cga_use_header: bool = False
    little_endian: bool = False
    bmp_no_file_header: bool = False
    bmp_data_offset_out: int = 0


class Format(enum.IntEnum):
    """Image formats the converter understands."""

    BMP = 0
    CGA = 1
    ICNS = 2

    @property
    def token(self) -> str:
        """The command-line token naming this format."""
        return self.name.lower()


def parse_format(token: str) -> Optional[Format]:
    """Return the format whose token starts ``token``, or None if none does."""
    for fmt in Format:
        if token.startswith(fmt.token):
            return fmt
    return None