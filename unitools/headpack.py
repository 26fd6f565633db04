"""Pack resource files into a C header as hex-encoded constant arrays."""

from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO

from unitools.grid import Format, parse_format

logger = logging.getLogger(__name__)

INCLUDE_GUARD = "RESEMB_H"
RES_C_DEF = "RESOURCE_C"
RES_TYPE = "unsigned char"

DEFS_MAX = 255
HEADERS_MAX = 255
TYPE_MAX = 8
RESOURCE_NAME_MAX = 31

Writer = Callable[[str, TextIO], int]
Indexer = Callable[[Sequence[str], TextIO], object]


class PathType(enum.IntEnum):
    """Whether a resource path holds binary data or text."""

    BIN = 0
    TXT = 1


@dataclass
class HeadpackDef:
    """A plug-in handling resources whose file names start with ``prefix_``."""

    prefix: str
    writer: Optional[Writer]
    indexer: Optional[Indexer]
    type_name: str


def path_bin_or_txt(path: str) -> PathType:
    """Classify ``path`` by extension: JSON files are text, everything else binary."""
    for i, char in enumerate(path):
        if char == "." and "json".startswith(path[i + 1:]):
            return PathType.TXT
    return PathType.BIN


def path_to_define(path: str) -> str:
    """The base name of ``path`` with its directory and extension stripped."""
    last_sep = path.rfind("/")
    start = last_sep + 1 if last_sep > 0 else 0
    return path[start:].split(".", 1)[0]


def _basename(path: str) -> str:
    return path[path.rfind("/") + 1:]


def encode_binary_buffer(data: bytes, res_path: str, res_id: int) -> str:
    """C source declaring ``data`` as a constant array plus its resource handle."""
    parts = [
        f"static RES_CONST {RES_TYPE} gsc_resource_{res_id}[] = {{\n   ",
        f"   /* {res_path} */\n",
    ]
    parts.extend(f"0x{byte:02x}, " for byte in data)
    if path_bin_or_txt(res_path) is PathType.TXT:
        parts.append("0x00")
    parts.append("\n};\n\n")
    parts.append(
        "static RES_CONST struct RESOURCE_HEADER_HANDLE "
        f"gsc_resource_handle_{res_id}[] = {{\n   "
    )
    parts.append(f"gsc_resource_{res_id},\n   {len(data)},\n   0")
    parts.append("\n};\n\n")
    return "".join(parts)


@dataclass
class Headpack:
    """Registry of plug-ins and extra includes used when writing a resource header."""

    name_max: int = RESOURCE_NAME_MAX
    defs: List[HeadpackDef] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)

    def register(
        self,
        prefix: str,
        writer: Optional[Writer],
        indexer: Optional[Indexer],
        type_name: str,
    ) -> HeadpackDef:
        """Register a plug-in for files named ``<prefix>_...``."""
        if len(self.defs) + 1 >= DEFS_MAX:
            raise ValueError("too many headpack plug-ins registered")
        definition = HeadpackDef(prefix, writer, indexer, type_name[:TYPE_MAX])
        self.defs.append(definition)
        return definition

    def register_header(self, header: str) -> None:
        """Add a header to include at the top of the generated file."""
        if len(self.headers) + 1 >= HEADERS_MAX:
            raise ValueError("too many headpack headers registered")
        self.headers.append(header)

    def get_def(self, filename: str) -> Optional[HeadpackDef]:
        """The plug-in whose prefix matches ``filename``, if any."""
        if len(filename) < 2 or filename[1] != "_":
            return None
        return next((d for d in self.defs if d.prefix == filename[0]), None)

    def write_header(
        self,
        out: TextIO,
        paths: Sequence[str],
        in_fmt: Optional[Format] = None,
        out_fmt: Optional[Format] = None,
    ) -> None:
        """Write a header embedding every file in ``paths`` to ``out``."""
        out.write(f"#ifndef {INCLUDE_GUARD}\n#define RESEMB_H\n\n")
        for header in self.headers:
            out.write(f'#include "{header}"\n')
        out.write("#ifdef RESOURCE_FILE\n")
        out.write('#include "../../unilayer/src/resource/header.h"\n')
        out.write("#endif /* RESOURCE_FILE */\n")
        out.write("\n")

        for res_id, path in enumerate(paths, start=1):
            out.write(f"#define {path_to_define(path)} {res_id}\n")

        out.write("\n")
        out.write("#ifdef PLATFORM_PALM\n")
        out.write("#define RES_CONST\n")
        out.write("#else\n")
        out.write("#define RES_CONST const\n")
        out.write("#endif\n")

        out.write(f"\n#ifdef {RES_C_DEF}\n\n")

        generic: List[tuple] = []
        for res_id, path in enumerate(paths, start=1):
            filename = _basename(path)
            definition = self.get_def(filename)
            if definition is not None:
                logger.debug("encoding %s: %s", definition.type_name, filename)
                result = definition.writer(path, out) if definition.writer else 0
                if result:
                    logger.error("unable to write file %s", path)
                continue

            logger.debug("encoding resource: %s", filename)
            data = Path(path).read_bytes() if in_fmt is None else b""
            out.write(encode_binary_buffer(data, path, res_id))
            generic.append((res_id, path, filename))

        out.write(
            "static RES_CONST struct RESOURCE_HEADER_HANDLE* gsc_resources[] = {\n"
            "   NULL,\n"
        )
        for res_id, _, _ in generic:
            out.write(f"   gsc_resource_handle_{res_id},\n")
        out.write("};\n\n")

        out.write("static RES_CONST char* gsc_resource_names[] = {\n   NULL,\n")
        for _, path, filename in generic:
            dot = filename.rfind(".")
            name = filename[:dot] if dot >= 0 else filename
            if self.name_max <= len(name):
                raise ValueError(
                    f"name {path} too long: {len(name)} longer than {self.name_max}"
                )
            out.write(f'   "{name}",\n')
        out.write('   "",\n')
        out.write("};\n\n")

        for definition in self.defs:
            if definition.indexer is not None:
                definition.indexer(paths, out)

        out.write(f"#endif /* {RES_C_DEF} */\n\n")
        out.write("#endif /* !RESEMB_H */\n\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Write a resource header: ``headpack <header path> <files to encode>``."""
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)
    if len(argv) < 2:
        print("usage: headpack <header path> <paths to files to encode>")
        return 1

    in_fmt: Optional[Format] = None
    out_name = ""
    args_end = -1
    expecting_fmt = False
    for i, arg in enumerate(argv):
        if arg.startswith("-i"):
            expecting_fmt = True
            args_end = i
        elif expecting_fmt:
            fmt = parse_format(arg)
            if fmt is not None:
                in_fmt = fmt
                args_end = i
            expecting_fmt = False
        elif not out_name:
            out_name = arg
            args_end = i

    if not out_name:
        print("usage: headpack <header path> <paths to files to encode>")
        return 1

    try:
        with open(out_name, "w", encoding="utf-8") as header:
            Headpack().write_header(header, argv[args_end + 1:], in_fmt, None)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())