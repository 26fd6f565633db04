"""Build driver that compiles and links a project described by a Unifile."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from unitools.config import (
    BIN_DIR,
    CLI_SZ_MAX,
    COMPILERS,
    DEBUG_TOKEN,
    ERROR_INVALID_ARG,
    FILE_TOKEN,
    FMT_MASK,
    FMT_TABLE,
    GFX_MASK,
    GFX_TABLE,
    MISC_TABLE,
    OBJ_DIR,
    PLAT_MASK,
    PLAT_TABLE,
    UNIFILE_CFLAGS_SZ_MAX,
    UNIFILE_DEFINES_SZ_MAX,
    UNIFILE_INCLUDES_SZ_MAX,
    UNIFILE_LIBS_SZ_MAX,
    UNIFILE_PATH_SZ_MAX,
    Compiler,
    FlagSpec,
    UnimakeError,
    find_compiler,
    flag_name,
    lookup_flag,
)
from unitools.unifile import ArgBuffer, parse_compiler_args, parse_paths

logger = logging.getLogger(__name__)

_DIR_MODE = 0o775

# Option categories tried in order, with the bits that forbid a second choice.
_CATEGORIES = (
    (PLAT_TABLE, PLAT_MASK),
    (FMT_TABLE, FMT_MASK),
    (GFX_TABLE, GFX_MASK),
    (MISC_TABLE, 0),
)


@dataclass
class BuildState:
    """Selected compiler, build options and the arguments collected for them."""

    compiler: Compiler = COMPILERS[0]
    options: int = 0
    code_files: List[str] = field(default_factory=list)
    defines: ArgBuffer = field(
        default_factory=lambda: ArgBuffer(UNIFILE_DEFINES_SZ_MAX)
    )
    includes: ArgBuffer = field(
        default_factory=lambda: ArgBuffer(UNIFILE_INCLUDES_SZ_MAX)
    )
    libs: ArgBuffer = field(default_factory=lambda: ArgBuffer(UNIFILE_LIBS_SZ_MAX))
    cflags: ArgBuffer = field(
        default_factory=lambda: ArgBuffer(UNIFILE_CFLAGS_SZ_MAX)
    )


def apply_flag(state: BuildState, spec: FlagSpec) -> None:
    """Add the defines, includes, libs and debug flags of ``spec`` to ``state``."""
    compiler = state.compiler
    if len(spec.defines) > 1:
        state.defines.append_char(" ")
        state.defines.concat(spec.defines)
    if len(spec.includes) > 1:
        state.includes.append_char(" ")
        state.includes.concat(
            spec.includes, compiler.inc_target, compiler.inc_replacement
        )
    if len(spec.libs) > 1:
        state.libs.append_char(" ")
        state.libs.concat(spec.libs, compiler.lib_target, compiler.lib_replacement)

    debug = lookup_flag(MISC_TABLE, "dbg")
    if (
        debug is not None
        and spec.bit == debug.bit
        and len(compiler.dbg_replacement) > 1
    ):
        state.cflags.append_char(" ")
        state.cflags.concat(spec.cflags, DEBUG_TOKEN, compiler.dbg_replacement)


def parse_args(argv: Sequence[str]) -> BuildState:
    """Build state from command-line options (without the program name)."""
    state = BuildState()
    for arg in argv:
        compiler = find_compiler(arg)
        if compiler is not None:
            state.compiler = compiler
            break
    logger.debug("selected compiler: %s", state.compiler.cc)

    for arg in argv:
        if find_compiler(arg) is not None:
            continue
        for table, dupe_mask in _CATEGORIES:
            spec = lookup_flag(table, arg)
            if spec is None or state.options & dupe_mask:
                continue
            logger.debug("enabled option: %s", spec.name)
            state.options |= spec.bit
            apply_flag(state, spec)
            break
        else:
            raise UnimakeError(f"invalid argument: {arg}", ERROR_INVALID_ARG)

    if not state.options & GFX_MASK:
        logger.debug("applying default graphics: %s", GFX_TABLE[0].name)
        apply_flag(state, GFX_TABLE[0])
    if not state.options & FMT_MASK:
        logger.debug("applying default format: %s", FMT_TABLE[0].name)
        apply_flag(state, FMT_TABLE[0])
    return state


def build_dir(path: str) -> str:
    """Create directory ``path`` and any missing parents; return the path."""
    if os.path.isdir(path):
        logger.debug("directory %s exists", path)
    else:
        os.makedirs(path, mode=_DIR_MODE, exist_ok=True)
        logger.debug("created %s", path)
    return path


def obj_path(src_path: str, options: int, root: str) -> str:
    """Output path for ``src_path`` under ``root``/platform/graphics/format."""
    path = ArgBuffer(UNIFILE_PATH_SZ_MAX)
    path.concat(root)
    path.append_char("/")
    for table, mask in ((PLAT_TABLE, PLAT_MASK), (GFX_TABLE, GFX_MASK),
                        (FMT_TABLE, FMT_MASK)):
        path.concat(flag_name(options, table, mask))
        path.append_char("/")
    path.concat(src_path, ".c", ".o")
    return str(path)


def obj_command(state: BuildState, src_path: str) -> str:
    """The compiler command line turning ``src_path`` into an object file."""
    compiler = state.compiler
    cmd = ArgBuffer(CLI_SZ_MAX)
    cmd.concat(compiler.cc)
    cmd.concat(str(state.defines))
    cmd.concat(str(state.includes))
    cmd.concat(str(state.cflags))
    cmd.append_char(" ")
    cmd.concat(compiler.obj_out, FILE_TOKEN, obj_path(src_path, state.options, OBJ_DIR))
    cmd.append_char(" ")
    cmd.concat(src_path)
    return str(cmd)


def exe_command(state: BuildState) -> str:
    """The linker command line joining every object into the executable."""
    compiler = state.compiler
    cmd = ArgBuffer(CLI_SZ_MAX)
    cmd.concat(compiler.ld)
    cmd.append_char(" ")
    cmd.concat(compiler.exe_out, FILE_TOKEN, obj_path("a.exe", state.options, BIN_DIR))
    for code_file in state.code_files:
        cmd.append_char(" ")
        cmd.concat(obj_path(code_file, state.options, OBJ_DIR))
    return str(cmd)


def _run(command: str) -> int:
    logger.debug("%s", command)
    return subprocess.run(command, shell=True, check=False).returncode


def build_obj(state: BuildState, src_path: str) -> int:
    """Compile ``src_path``, creating its object directory; return the exit status."""
    command = obj_command(state, src_path)
    directory = obj_path(src_path, state.options, OBJ_DIR).rpartition("/")[0]
    if directory:
        build_dir(directory)
    return _run(command)


def build_exe(state: BuildState) -> int:
    """Link the compiled objects into the executable; return the exit status."""
    return _run(exe_command(state))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse options and the Unifile, then compile and link the project."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        state = parse_args(argv)
    except UnimakeError as exc:
        print(f"invalid argument specified! {exc}", file=sys.stderr)
        return exc.code

    compiler = state.compiler
    try:
        plat_type = flag_name(state.options, PLAT_TABLE, PLAT_MASK)
        parse_paths(None, state.code_files, "code", None)
        parse_paths(None, state.code_files, "code", plat_type)
        parse_compiler_args(None, state.defines, "defines", plat_type)
        parse_compiler_args(
            None, state.libs, "libs", plat_type,
            compiler.lib_target, compiler.lib_replacement,
        )
        parse_compiler_args(
            None, state.includes, "includes", None,
            compiler.inc_target, compiler.inc_replacement,
        )
        parse_compiler_args(
            None, state.includes, "includes", plat_type,
            compiler.inc_target, compiler.inc_replacement,
        )
        logger.debug(
            "unifile parsed. flags: %08x, defines: %s, libs: %s",
            state.options, state.defines, state.libs,
        )

        for code_file in state.code_files:
            status = build_obj(state, code_file)
            if status < 0:
                return status
        return build_exe(state)
    except UnimakeError as exc:
        print(exc, file=sys.stderr)
        return exc.code
    except OSError as exc:
        print(exc, file=sys.stderr)
        return -1


if __name__ == "__main__":
    sys.exit(main())