import pytest

from unitools.cga import (
    HEADER_SIZE,
    CgaHeader,
    grid_size,
    read_cga,
    read_cga_file,
    verify_options,
    write_cga,
    write_cga_file,
)
from unitools.grid import ConvertError, ConvertOptions, Grid


def _pattern_grid(width, height):
    return Grid(width, height, 2, bytearray((i * 7 + i // width) % 4 for i in range(width * height)))


def test_header_round_trip():
    header = CgaHeader(width=8, height=4, plane1_offset=HEADER_SIZE, plane1_sz=4)
    packed = header.pack()
    assert len(packed) == HEADER_SIZE
    assert packed[:2] == b"CG"
    assert CgaHeader.unpack(packed) == header


def test_header_unpack_too_short():
    with pytest.raises(ConvertError):
        CgaHeader.unpack(b"CG")


def test_verify_options_requires_dimensions_or_header():
    with pytest.raises(ConvertError):
        verify_options(ConvertOptions())
    with pytest.raises(ConvertError):
        verify_options(ConvertOptions(w=8))


def test_grid_size_forces_two_bpp_and_header_adds_bytes():
    grid = _pattern_grid(8, 4)
    plain = ConvertOptions(bpp=4)
    size = grid_size(grid, plain)
    assert plain.bpp == 2
    assert plain.plane_padding == size // 2
    headed = ConvertOptions(cga_use_header=True)
    assert grid_size(grid, headed) == size + HEADER_SIZE + 1


def test_line_padding_grows_size():
    grid = _pattern_grid(8, 4)
    base = grid_size(grid, ConvertOptions())
    assert grid_size(grid, ConvertOptions(line_padding=3)) == base + 6


def test_wire_bytes_even_and_odd_lines():
    grid = Grid(4, 2, 2, bytearray([3, 0, 0, 0, 1, 0, 0, 0]))
    out = write_cga(grid, ConvertOptions())
    assert out == bytes([0xC0, 0x40])


def test_round_trip_with_header():
    grid = _pattern_grid(8, 4)
    out = write_cga(grid, ConvertOptions(cga_use_header=True))
    back = read_cga(out, ConvertOptions(cga_use_header=True))
    assert (back.width, back.height, back.bpp) == (8, 4, 2)
    assert back.data == grid.data


def test_header_fields_written():
    grid = _pattern_grid(8, 4)
    out = write_cga(grid, ConvertOptions(cga_use_header=True, little_endian=True))
    header = CgaHeader.unpack(out)
    assert (header.width, header.height, header.bpp) == (8, 4, 2)
    assert header.version == 2
    assert header.palette == 1
    assert header.endian == 1
    assert header.plane1_offset == HEADER_SIZE
    assert header.plane2_offset == header.plane1_offset + header.plane1_sz
    assert header.plane1_sz == header.plane2_sz


def test_round_trip_without_header():
    grid = _pattern_grid(8, 4)
    out = write_cga(grid, ConvertOptions())
    back = read_cga(out, ConvertOptions(w=8, h=4, bpp=2))
    assert back.data == grid.data


def test_round_trip_with_line_padding():
    grid = _pattern_grid(8, 6)
    out = write_cga(grid, ConvertOptions(line_padding=5))
    back = read_cga(out, ConvertOptions(w=8, h=6, bpp=2, line_padding=5))
    assert back.data == grid.data


def test_read_requires_dimensions():
    with pytest.raises(ConvertError):
        read_cga(bytes(16), ConvertOptions())


def test_read_rejects_odd_height():
    with pytest.raises(ConvertError):
        read_cga(bytes(16), ConvertOptions(w=4, h=3, bpp=2))


def test_read_short_data():
    with pytest.raises(ConvertError):
        read_cga(bytes(1), ConvertOptions(w=8, h=4, bpp=2))


def test_file_round_trip(tmp_path):
    grid = _pattern_grid(8, 4)
    path = tmp_path / "image.cga"
    written = write_cga_file(path, grid, ConvertOptions(cga_use_header=True))
    assert written == path.stat().st_size
    back = read_cga_file(path, ConvertOptions(cga_use_header=True))
    assert back.data == grid.data