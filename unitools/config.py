"""Compiler and build-flag tables and limits for the unimake build tool."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

ERROR_INVALID_ARG = 0x01
ERROR_BAD_UNIFILE_PATH = 0x02
ERROR_TOO_MANY_CODE_FILES = 0x04
ERROR_TOO_MANY_ASSET_FILES = 0x08
ERROR_STRING_TOO_LONG = -0x10

UNIFILE_LINE_SZ = 64
ASSETS_DIR = "assets"
SRC_DIR = "src"
OBJ_DIR = "obj"
BIN_DIR = "bin"
GEN_DIR = "gen"
UNIFILE_PATH_DEFAULT = "Unifile"
UNIFILE_PATHS_MAX = 32
UNIFILE_PATH_SZ_MAX = UNIFILE_LINE_SZ
UNIFILE_DEFINES_SZ_MAX = 255
UNIFILE_INCLUDES_SZ_MAX = 127
UNIFILE_LIBS_SZ_MAX = 64
UNIFILE_CFLAGS_SZ_MAX = 32
CLI_SZ_MAX = 1024

DEBUG_TOKEN = "$DEBUG$"
FILE_TOKEN = "$FILE$"


class UnimakeError(Exception):
    """A build failure, carrying the numeric error code of the build tool."""

    def __init__(self, message: str, code: int = ERROR_INVALID_ARG) -> None:
        super().__init__(message)
        self.code = code


class StringTooLongError(UnimakeError):
    """A string did not fit the buffer it was being written into."""

    def __init__(self, message: str = "line buffer exceeded") -> None:
        super().__init__(message, ERROR_STRING_TOO_LONG)


@dataclass(frozen=True)
class Compiler:
    """How to drive one compiler: commands and argument token replacements."""

    cc: str
    ld: str
    rc: str
    inc_target: str
    inc_replacement: str
    def_target: str
    def_replacement: str
    lib_target: str
    lib_replacement: str
    ldr_target: str
    ldr_replacement: str
    dbg_replacement: str
    obj_out: str
    exe_out: str


COMPILERS = (
    Compiler("gcc", "gcc", "", "", "", "", "", "", "", "", "", "-g -pg",
             "-o $FILE$", "-o $FILE$"),
    Compiler("wcc", "wcl", "wrc", "-I", "-i=", "", "", "-l", "-l=", "", "", "",
             "-fo=$FILE$", "-fe=$FILE$"),
    Compiler("m68k-gcc-palmos", "m68k-gcc-palmos", "", "", "", "", "", "", "",
             "", "", "-g", "-o $FILE$", "-o $FILE$"),
)


@dataclass(frozen=True)
class FlagSpec:
    """A selectable build option and the compiler arguments it contributes."""

    name: str
    bit: int
    cflags: str = ""
    defines: str = ""
    includes: str = ""
    ldflags: str = ""
    libs: str = ""
    libdirs: str = ""


PLAT_MASK = 0xFF000000
PLAT_TABLE = (
    FlagSpec("sdl", 0x01000000, "", "-DPLATFORM_SDL", "", "", "-lsdl", ""),
    FlagSpec("wsm", 0x02000000, "", "-DPLATFORM_SDL", "", "", "", ""),
    FlagSpec("w16", 0x04000000, "-bt=windows -bw -zp=1", "-DPLATFORM_WIN16",
             "-I$INCLUDE/win", "", "-lwindows", ""),
    FlagSpec("w32", 0x08000000, "", "-DPLATFORM_WIN32"),
    FlagSpec("dos", 0x10000000, "", "-DPLATFORM_DOS"),
    FlagSpec("plm", 0x20000000, "", "-DPLATFORM_PALM"),
)

GFX_MASK = 0x0000000F
GFX_TABLE = (
    FlagSpec("cga", 0x00000000, "", "-DDEPTH_CGA"),
    FlagSpec("mno", 0x00000001, "", "-DDEPTH_MONO"),
    FlagSpec("vga", 0x00000002, "", "-DDEPTH_VGA"),
)

FMT_MASK = 0x000000F0
FMT_TABLE = (
    FlagSpec("hdr", 0x00000000),
    FlagSpec("jsn", 0x00000010, "", "-DNO_RESEXT"),
    FlagSpec("asn", 0x00000020, "", "-DNO_RESEXT"),
)

MISC_MASK = 0x00FF0000
MISC_TABLE = (
    FlagSpec("dbg", 0x00010000, DEBUG_TOKEN, "", "", DEBUG_TOKEN, "", ""),
)


def find_compiler(name: str) -> Optional[Compiler]:
    """The first compiler whose command starts with ``name``, or None."""
    return next((c for c in COMPILERS if c.cc.startswith(name)), None)


def lookup_flag(table: Sequence[FlagSpec], name: str) -> Optional[FlagSpec]:
    """The option in ``table`` whose three-letter name starts ``name``, or None."""
    return next((spec for spec in table if spec.name[:3] == name[:3]), None)


def flag_name(options: int, table: Sequence[FlagSpec], mask: int) -> str:
    """Name of the option from ``table`` selected in ``options``; "" if none is."""
    selected = options & mask
    for spec in table:
        if spec.bit == selected:
            return spec.name
    if selected == 0:
        return ""
    raise UnimakeError(f"no option for flags {selected:#010x}")