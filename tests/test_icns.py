import struct

import pytest

from unitools.grid import ConvertError, ConvertOptions, Grid
from unitools.icns import (
    DATA_HEADER_SIZE,
    FILE_HEADER_SIZE,
    grid_size,
    icon_type,
    read_icns,
    read_icns_file,
    write_icns,
    write_icns_file,
)


def _mono_grid(size=16):
    return Grid(size, size, 1, bytearray((i * 5 + i // 3) % 2 for i in range(size * size)))


def test_grid_size_includes_mask_at_one_bpp():
    grid = _mono_grid()
    expected = FILE_HEADER_SIZE + DATA_HEADER_SIZE + 2 * (16 * 16 // 8)
    assert grid_size(grid, ConvertOptions(bpp=1)) == expected
    assert grid_size(grid, ConvertOptions(bpp=4)) == FILE_HEADER_SIZE + DATA_HEADER_SIZE + 16 * 16 * 4 // 8


def test_icon_types():
    assert icon_type(_mono_grid(16), ConvertOptions(bpp=1)) == b"ics#"
    assert icon_type(_mono_grid(16), ConvertOptions(bpp=4)) == b"ics4"
    assert icon_type(_mono_grid(16), ConvertOptions(bpp=8)) == b"ics8"
    assert icon_type(_mono_grid(32), ConvertOptions(bpp=1)) == b"ICN#"
    assert icon_type(Grid.blank(32, 32, 8), ConvertOptions(bpp=4)) == b"icl8"
    assert icon_type(_mono_grid(8), ConvertOptions(bpp=1)) == b"\x00\x00\x00\x00"


def test_write_headers():
    grid = _mono_grid()
    out = write_icns(grid, ConvertOptions(bpp=1))
    assert len(out) == grid_size(grid, ConvertOptions(bpp=1))
    assert out[:4] == b"icns"
    assert out[FILE_HEADER_SIZE:FILE_HEADER_SIZE + 4] == b"ics#"
    (file_sz,) = struct.unpack_from(">I", out, 4)
    (data_sz,) = struct.unpack_from(">I", out, FILE_HEADER_SIZE + 4)
    assert file_sz == len(out)
    assert data_sz == file_sz - FILE_HEADER_SIZE


def test_mask_matches_image():
    out = write_icns(_mono_grid(), ConvertOptions(bpp=1))
    start = FILE_HEADER_SIZE + DATA_HEADER_SIZE
    half = (len(out) - start) // 2
    assert out[start:start + half] == out[start + half:]


def test_round_trip():
    grid = _mono_grid()
    back = read_icns(write_icns(grid, ConvertOptions(bpp=1)), ConvertOptions())
    assert (back.width, back.height, back.bpp) == (16, 16, 1)
    assert back.data == grid.data


def test_reverse_inverts_pixels():
    grid = _mono_grid()
    back = read_icns(write_icns(grid, ConvertOptions(bpp=1, reverse=True)), ConvertOptions())
    assert back.data == bytearray(1 - v for v in grid.data)


def test_nonzero_values_become_set_bits():
    grid = Grid(16, 16, 2, bytearray([2] * 256))
    back = read_icns(write_icns(grid, ConvertOptions(bpp=1)), ConvertOptions())
    assert back.data == bytearray([1] * 256)


def test_write_rejects_other_depths():
    with pytest.raises(ConvertError):
        write_icns(_mono_grid(), ConvertOptions(bpp=4))


def test_read_short_data():
    with pytest.raises(ConvertError):
        read_icns(b"icns" + bytes(10), ConvertOptions())


def test_file_round_trip(tmp_path):
    grid = _mono_grid()
    path = tmp_path / "icon.icns"
    written = write_icns_file(path, grid, ConvertOptions(bpp=1))
    assert written == path.stat().st_size
    assert read_icns_file(path, ConvertOptions()).data == grid.data