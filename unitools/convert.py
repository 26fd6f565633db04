"""Command-line converter between BMP, CGA and icns images."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Union

from unitools import bmp, cga, icns
from unitools.grid import ConvertError, ConvertOptions, Format, Grid, parse_format

PathLike = Union[str, Path]

USAGE = """usage:

{prog} [options] -ic <in_fmt> -oc <out_fmt> -if <in_file> -of <out_file>

options:

-ic [in format]
-oc [out format]

CGA options:

these options only apply to raw CGA files:

-ib [in bpp] (defaults to 2)
-ob [out bpp] (defaults to input bpp)
-iw [in width] (requried for CGA in)
-ih [in height] (required for CGA in)
-il [in line padding] (full-screen uses 192)
-ol [out line padding]
"""

_READERS: Dict[Format, Callable[[PathLike, ConvertOptions], Grid]] = {
    Format.BMP: bmp.read_bmp_file,
    Format.CGA: cga.read_cga_file,
    Format.ICNS: icns.read_icns_file,
}

_WRITERS: Dict[Format, Callable[[PathLike, Grid, ConvertOptions], int]] = {
    Format.BMP: bmp.write_bmp_file,
    Format.CGA: cga.write_cga_file,
    Format.ICNS: icns.write_icns_file,
}


class _UsageError(ConvertError):
    """The command line lacks something the conversion needs."""


def _default_input_options() -> ConvertOptions:
    # Input defaults to 2-bit CGA.
    return ConvertOptions(bpp=2)


@dataclass
class ConvertRequest:
    """Everything needed to convert one image file into another format."""

    in_path: str = ""
    out_path: str = ""
    fmt_in: Optional[Format] = None
    fmt_out: Optional[Format] = None
    options_in: ConvertOptions = field(default_factory=_default_input_options)
    options_out: ConvertOptions = field(default_factory=ConvertOptions)


def read_grid_file(fmt: Format, path: PathLike, options: ConvertOptions) -> Grid:
    """Read the image at ``path`` in format ``fmt`` into a grid."""
    return _READERS[Format(fmt)](path, options)


def write_grid_file(
    fmt: Format, path: PathLike, grid: Grid, options: ConvertOptions
) -> int:
    """Write ``grid`` to ``path`` in format ``fmt``; return the bytes written."""
    return _WRITERS[Format(fmt)](path, grid, options)


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _set_in_path(req: ConvertRequest, arg: str) -> None:
    req.in_path = arg


def _set_out_path(req: ConvertRequest, arg: str) -> None:
    req.out_path = arg


def _set_in_bpp(req: ConvertRequest, arg: str) -> None:
    req.options_in.bpp = _atoi(arg)


def _set_out_bpp(req: ConvertRequest, arg: str) -> None:
    req.options_out.bpp = _atoi(arg)


def _set_in_fmt(req: ConvertRequest, arg: str) -> None:
    fmt = parse_format(arg)
    if fmt is not None:
        req.fmt_in = fmt


def _set_out_fmt(req: ConvertRequest, arg: str) -> None:
    fmt = parse_format(arg)
    if fmt is not None:
        req.fmt_out = fmt


def _set_in_w(req: ConvertRequest, arg: str) -> None:
    req.options_in.w = _atoi(arg)


def _set_in_h(req: ConvertRequest, arg: str) -> None:
    req.options_in.h = _atoi(arg)


def _set_in_lp(req: ConvertRequest, arg: str) -> None:
    req.options_in.line_padding = _atoi(arg)


def _set_out_lp(req: ConvertRequest, arg: str) -> None:
    req.options_out.line_padding = _atoi(arg)


_VALUE_OPTIONS = (
    ("-if", _set_in_path),
    ("-of", _set_out_path),
    ("-ib", _set_in_bpp),
    ("-ob", _set_out_bpp),
    ("-ic", _set_in_fmt),
    ("-oc", _set_out_fmt),
    ("-iw", _set_in_w),
    ("-ih", _set_in_h),
    ("-il", _set_in_lp),
    ("-ol", _set_out_lp),
)


def parse_args(argv: Sequence[str]) -> ConvertRequest:
    """Build a conversion request from command-line arguments (without program name)."""
    request = ConvertRequest()
    pending: Optional[Callable[[ConvertRequest, str], None]] = None

    for arg in argv:
        if pending is not None:
            pending(request, arg)
            pending = None
            continue

        handler = next(
            (setter for prefix, setter in _VALUE_OPTIONS if arg.startswith(prefix)),
            None,
        )
        if handler is not None:
            pending = handler
        elif arg == "-r":
            request.options_out.reverse = True
        elif arg.startswith("-ig"):
            request.options_in.cga_use_header = True
        elif arg.startswith("-og"):
            request.options_out.cga_use_header = True
        elif arg.startswith("-"):
            raise ConvertError("invalid command specified")

    opts_in = request.options_in
    if not request.in_path or not request.out_path:
        raise _UsageError("input and output files are required")
    if request.fmt_in is None or request.fmt_out is None:
        raise _UsageError("input and output formats are required")
    if (
        request.fmt_in is Format.CGA
        and (opts_in.w == 0 or opts_in.h == 0)
        and not opts_in.cga_use_header
    ):
        raise _UsageError("CGA input requires width and height or a header")
    return request


def convert(request: ConvertRequest) -> int:
    """Perform the conversion described by ``request``; return the bytes written."""
    if request.fmt_in is None or request.fmt_out is None:
        raise ConvertError("input and output formats are required")
    opts_in, opts_out = request.options_in, request.options_out

    if opts_in.bpp == 0 and Format.CGA in (request.fmt_in, request.fmt_out):
        opts_out.bpp = 2

    try:
        grid = read_grid_file(request.fmt_in, request.in_path, opts_in)
    except OSError as exc:
        raise ConvertError(f"unable to open {request.in_path}") from exc

    if opts_out.bpp == 0:
        opts_out.bpp = grid.bpp

    try:
        return write_grid_file(request.fmt_out, request.out_path, grid, opts_out)
    except OSError as exc:
        raise ConvertError(f"unable to write {request.out_path}") from exc


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the converter; return the process exit status."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        request = parse_args(argv)
    except _UsageError:
        sys.stderr.write(USAGE.format(prog="convert"))
        return 1
    except ConvertError as exc:
        print(exc, file=sys.stderr)
        return 1

    print(
        f"{request.in_path} (fmt {int(request.fmt_in)}) to "
        f"{request.out_path} (fmt {int(request.fmt_out)})"
    )
    try:
        convert(request)
    except ConvertError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())