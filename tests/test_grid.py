import pytest

from unitools.grid import ConvertError, ConvertOptions, Format, Grid, parse_format


def test_blank_grid_is_zeroed():
    grid = Grid.blank(4, 3, 2)
    assert grid.width == 4
    assert grid.height == 3
    assert grid.bpp == 2
    assert grid.data == bytearray(4 * 3)


def test_blank_rejects_negative_size():
    with pytest.raises(ConvertError):
        Grid.blank(-1, 2, 1)


def test_grid_data_is_copied_into_bytearray():
    grid = Grid(2, 1, 1, b"\x01\x00")
    grid.data[1] = 1
    assert grid.data == bytearray([1, 1])


def test_format_tokens_parse_back_in_order():
    parsed = [parse_format(token) for token in ("bmp", "cga", "icns")]
    assert parsed == [Format.BMP, Format.CGA, Format.ICNS]
    assert [parse_format(fmt.token) for fmt in Format] == list(Format)


@pytest.mark.parametrize(
    "token, expected",
    [("bmp", Format.BMP), ("cga", Format.CGA), ("icns", Format.ICNS), ("cgafile", Format.CGA)],
)
def test_parse_format_prefix(token, expected):
    assert parse_format(token) is expected


def test_parse_format_unknown():
    assert parse_format("png") is None
    assert parse_format("bm") is None


def test_options_defaults():
    options = ConvertOptions()
    assert options.bpp == 0
    assert options.reverse is False
    assert options.cga_use_header is False