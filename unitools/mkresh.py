"""Generate resource index headers and resource scripts for a list of files."""

from __future__ import annotations

import enum
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

PathLike = Union[str, Path]

FILE_LIST_MAX = 255

WIN_RES_BITMAP = "BITMAP"
PALM_RES_BITMAP = "BITMAP"
PALM_RES_DATA_MISC = 'DATA "misc"'


class ResFormat(enum.IntEnum):
    """Target platforms for the generated resource files."""

    PALM = 1
    WIN16 = 2
    FILE = 3


@dataclass
class MkreshArgs:
    """Settings gathered from the mkresh command line."""

    files: List[str] = field(default_factory=list)
    stypes: List[str] = field(default_factory=list)
    header_path: str = ""
    arrays_path: str = ""
    res_path: str = ""
    fmt: Optional[ResFormat] = None
    id_start: int = 0


def basename_list(paths: Sequence[str]) -> List[str]:
    """Strip the directory and the extension from each path."""
    names = []
    for path in paths:
        name = path[path.rfind("/") + 1:]
        dot = name.rfind(".")
        if dot > 0:
            name = name[:dot]
        names.append(name)
    return names


def write_header(
    path: PathLike,
    id_start: int,
    fmt: ResFormat,
    files: Sequence[str],
    basenames: Sequence[str],
) -> None:
    """Write a header defining each resource as an ID, or as its path for FILE."""
    lines = ["\n#ifndef RESIDX_H\n#define RESIDX_H\n\n"]
    for offset, (file_path, name) in enumerate(zip(files, basenames)):
        if fmt == ResFormat.FILE:
            lines.append(f'#define {name} "{file_path}"\n')
        else:
            lines.append(f"#define {name} {id_start + offset}\n")
    lines.append("\n#endif /* RESIDX_H */\n")
    Path(path).write_text("".join(lines), encoding="utf-8")


def write_arrays(
    path: PathLike,
    id_start: int,
    files: Sequence[str],
    basenames: Sequence[str],
) -> None:
    """Write a header holding arrays of resource names and resource IDs."""
    lines = [
        "\n#ifndef RESARRAY_H\n#define RESARRAY_H\n",
        "\n#ifdef RESOURCE_C\n",
        "\nstatic char* g_resource_names[] = {\n",
    ]
    lines.extend(f'   "{name}",\n' for name in basenames)
    lines.append('   ""\n')
    lines.append("};\n")
    lines.append("\nstatic uint32_t g_resource_ids[] = {\n")
    lines.extend(f"   {id_start + offset},\n" for offset in range(len(files)))
    lines.append("};\n")
    lines.append("\n#endif /* RESOURCE_C */\n")
    lines.append("\n#endif /* RESARRAY_H */\n")
    Path(path).write_text("".join(lines), encoding="utf-8")


def write_res(
    path: PathLike,
    fmt: ResFormat,
    files: Sequence[str],
    basenames: Sequence[str],
) -> None:
    """Write a resource script listing each file for the Palm or Win16 compiler."""
    is_bitmap = False
    res_type: Optional[str] = None
    lines = []
    for file_path, name in zip(files, basenames):
        extension = file_path[file_path.rfind(".") + 1:]
        if extension.startswith("bmp"):
            is_bitmap = True
        else:
            print("invalid resource type", file=sys.stderr)

        if is_bitmap:
            if fmt == ResFormat.PALM:
                res_type = PALM_RES_BITMAP
            elif fmt == ResFormat.WIN16:
                res_type = WIN_RES_BITMAP
        elif fmt == ResFormat.PALM:
            res_type = PALM_RES_DATA_MISC

        if fmt not in (ResFormat.PALM, ResFormat.WIN16):
            continue
        if res_type is None:
            raise ValueError(f"no resource type known for {file_path}")
        if fmt == ResFormat.PALM:
            lines.append(f'{res_type} ID {name} "{file_path}"\n')
        else:
            lines.append(f'{name} {res_type} "{file_path}"\n')
    Path(path).write_text("".join(lines), encoding="utf-8")


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _parse_format(text: str) -> Optional[ResFormat]:
    if text.startswith("file"):
        return ResFormat.FILE
    if text.startswith("palm"):
        return ResFormat.PALM
    if text.startswith("win16"):
        return ResFormat.WIN16
    return None


_OPTIONS = (
    ("-if", "files"),
    ("-or", "res"),
    ("-oh", "header"),
    ("-oa", "arrays"),
    ("-f", "fmt"),
    ("-i", "id"),
    ("-s", "stypes"),
)


def parse_args(argv: Sequence[str]) -> MkreshArgs:
    """Parse the mkresh command line (without the program name)."""
    args = MkreshArgs()
    state: Optional[str] = None

    for arg in argv:
        if state in ("files", "stypes"):
            if arg.startswith("-"):
                state = None
            else:
                target = args.files if state == "files" else args.stypes
                if len(target) >= FILE_LIST_MAX:
                    raise ValueError(f"too many files: at most {FILE_LIST_MAX}")
                target.append(arg)
        elif state is not None:
            if state == "header":
                args.header_path = arg
            elif state == "arrays":
                args.arrays_path = arg
            elif state == "res":
                args.res_path = arg
            elif state == "fmt":
                fmt = _parse_format(arg)
                if fmt is not None:
                    args.fmt = fmt
            elif state == "id":
                args.id_start = _atoi(arg)
            state = None

        if state is None:
            state = next(
                (name for prefix, name in _OPTIONS if arg.startswith(prefix)), None
            )

    if args.fmt is None:
        raise ValueError("a resource format (-f file|palm|win16) is required")
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run mkresh; return the process exit status."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        args = parse_args(argv)
        basenames = basename_list(args.files)
        if args.header_path:
            write_header(args.header_path, args.id_start, args.fmt, args.files, basenames)
        if args.arrays_path:
            write_arrays(args.arrays_path, args.id_start, args.files, basenames)
        if args.res_path:
            write_res(args.res_path, args.fmt, args.files, basenames)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())