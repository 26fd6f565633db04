import pytest

from unitools.config import (
    COMPILERS,
    ERROR_STRING_TOO_LONG,
    FMT_MASK,
    FMT_TABLE,
    GFX_MASK,
    GFX_TABLE,
    MISC_MASK,
    MISC_TABLE,
    PLAT_MASK,
    PLAT_TABLE,
    StringTooLongError,
    UnimakeError,
    find_compiler,
    flag_name,
    lookup_flag,
)


def test_find_compiler_watcom():
    compiler = find_compiler("wcc")
    assert compiler.ld == "wcl"
    assert compiler.obj_out == "-fo=$FILE$"
    assert compiler.lib_target == "-l" and compiler.lib_replacement == "-l="


def test_find_compiler_unknown():
    assert find_compiler("clang") is None


def test_default_compiler_is_gcc():
    compiler = find_compiler("gcc")
    assert compiler.cc == "gcc"
    assert compiler.dbg_replacement == "-g -pg"
    assert COMPILERS[0].cc == compiler.cc


def test_lookup_flag_platform():
    spec = lookup_flag(PLAT_TABLE, "w16")
    assert spec.defines == "-DPLATFORM_WIN16"
    assert spec.libs == "-lwindows"


def test_lookup_flag_compares_three_chars():
    assert lookup_flag(GFX_TABLE, "vgaextra").name == "vga"
    assert lookup_flag(GFX_TABLE, "vg") is None
    assert lookup_flag(FMT_TABLE, "xyz") is None


def test_flag_name_selected():
    options = 0x04000000 | 0x00000002 | 0x00000010
    assert flag_name(options, PLAT_TABLE, PLAT_MASK) == "w16"
    assert flag_name(options, GFX_TABLE, GFX_MASK) == "vga"
    assert flag_name(options, FMT_TABLE, FMT_MASK) == "jsn"


def test_flag_name_defaults():
    assert flag_name(0, GFX_TABLE, GFX_MASK) == "cga"
    assert flag_name(0, FMT_TABLE, FMT_MASK) == "hdr"
    assert flag_name(0, PLAT_TABLE, PLAT_MASK) == ""


def test_flag_name_unknown_bit_raises():
    with pytest.raises(UnimakeError):
        flag_name(0x0F, GFX_TABLE, GFX_MASK)


@pytest.mark.parametrize(
    "table,mask",
    [(PLAT_TABLE, PLAT_MASK), (GFX_TABLE, GFX_MASK), (FMT_TABLE, FMT_MASK),
     (MISC_TABLE, MISC_MASK)],
)
def test_table_bits_within_mask(table, mask):
    assert all(spec.bit & ~mask == 0 for spec in table)
    assert len({spec.name for spec in table}) == len(table)


def test_categories_combine_without_interfering():
    options = (
        lookup_flag(PLAT_TABLE, "dos").bit
        | lookup_flag(GFX_TABLE, "mno").bit
        | lookup_flag(FMT_TABLE, "asn").bit
        | lookup_flag(MISC_TABLE, "dbg").bit
    )
    assert flag_name(options, PLAT_TABLE, PLAT_MASK) == "dos"
    assert flag_name(options, GFX_TABLE, GFX_MASK) == "mno"
    assert flag_name(options, FMT_TABLE, FMT_MASK) == "asn"
    assert flag_name(options, MISC_TABLE, MISC_MASK) == "dbg"


def test_string_too_long_code():
    err = StringTooLongError()
    assert isinstance(err, UnimakeError)
    assert err.code == ERROR_STRING_TOO_LONG == -0x10