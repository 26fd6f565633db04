# unitools

Command-line tools and a small library for preparing assets and building
C projects aimed at old and constrained platforms (DOS, Win16, Palm OS,
SDL):

- **unitools-convert** converts pixel grids between Windows BMP, raw or
  headered CGA, and Mac `icns` icons.
- **unitools-headpack** packs resource files into a single C header as
  hex-encoded byte arrays, with an index of handles and names.
- **unitools-mkresh** writes resource index headers, name/ID arrays and
  resource scripts for Palm OS and Win16 resource compilers.
- **unitools-unimake** reads a `Unifile` and drives a compiler and linker
  for the chosen platform, graphics depth and asset format.

It needs nothing beyond the Python standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Converting images

```
unitools-convert -ic bmp -oc cga -if sprite.bmp -of sprite.cga
```

| Option | Meaning |
| ------ | ------- |
| `-ic <fmt>` | input format: `bmp`, `cga` or `icns` |
| `-oc <fmt>` | output format: `bmp`, `cga` or `icns` |
| `-if <file>` | input file |
| `-of <file>` | output file |
| `-ib <bpp>` | input bits per pixel (defaults to 2) |
| `-ob <bpp>` | output bits per pixel (defaults to the input grid's) |
| `-iw <w>` / `-ih <h>` | input width and height (required for raw CGA input) |
| `-il <n>` / `-ol <n>` | input / output CGA line padding (full-screen uses 192) |
| `-ig` / `-og` | read / write the 30-byte CGA file header |
| `-r` | invert pixels when writing 1-bit BMP or icns output |

Missing files or formats, or raw CGA input without a width and height,
print a usage summary and exit with status 1. An unknown option starting
with `-` also exits with status 1.

Format limits:

- BMP: uncompressed files with a 40-byte info header at 1, 2, 4 or 8 bits
  per pixel are read. Written files use a 2-, 4- or 16-entry palette; at
  1 bit, every non-zero pixel becomes white.
- CGA: always written at 2 bits per pixel as two interlaced planes; the
  image height must be even.
- icns: only 1-bit images are written (`ics#` for 16x16, `ICN#` for
  32x32), followed by a mask that repeats the image. Reading takes the
  first 16x16 1-bit icon.

## Packing resources into a header

```
unitools-headpack resources.h assets/t_title.bmp assets/m_level1.json
```

The first argument is the header to write; every following path is
embedded. Each file gets a `#define` named after its base name, a
`gsc_resource_<n>` byte array (`.json` files get a trailing `0x00`) and an
entry in the `gsc_resources` and `gsc_resource_names` index arrays.
A resource name of 31 characters or more is reported as an error and
the header is left unfinished.

From Python, `unitools.headpack.Headpack` can be given writers for file
names of the form `<prefix>_...` with `Headpack.register`, and extra
`#include` lines with `Headpack.register_header`, before calling
`Headpack.write_header`. `encode_binary_buffer`, `path_to_define` and
`path_bin_or_txt` are available on their own.

## Resource indexes and scripts

```
unitools-mkresh -f palm -i 5000 -if a.bmp b.bmp -oh residx.h -oa resarray.h -or app.rcp
```

- `-f file|palm|win16` selects the target format (required).
- `-i <n>` is the first resource ID.
- `-if <files...>` lists the input files, up to the next option.
- `-oh`, `-oa` and `-or` name the index header, the name/ID array header
  and the resource script to write; each is written only if given.

With `-f file` the index header defines each name as its file path rather
than an ID. Resource scripts list `.bmp` files as `BITMAP` resources.

## Building with a Unifile

```
unitools-unimake wcc dos vga dbg
```

Arguments pick a compiler (`gcc`, `wcc`, `m68k-gcc-palmos`; `gcc` by
default), a platform (`sdl`, `wsm`, `w16`, `w32`, `dos`, `plm`), a graphics
depth (`cga`, `mno`, `vga`; `cga` by default), an asset format (`hdr`,
`jsn`, `asn`; `hdr` by default) and `dbg` for debug flags. Any other
argument is an error.

The `Unifile` in the current directory lists code files and compiler
arguments in sections; lines starting with `#` or `;` are comments.
The sections read are `[code]`, `[code_<platform>]`,
`[defines_<platform>]`, `[libs_<platform>]`, `[includes]` and
`[includes_<platform>]`:

```
[code]
src/main.c

[code_dos]
src/dos.c

[defines_dos]
-DSCREEN_W=320

[includes]
-Isrc
```

Objects are compiled into `obj/<platform>/<graphics>/<format>/` and the
program is linked into `bin/<platform>/<graphics>/<format>/a.exe`. The
compiler and linker commands are run through the shell. Argument strings
and paths have fixed size limits (see `unitools.config`); exceeding one
raises `StringTooLongError`.

## Library use

```python
from unitools.bmp import read_bmp_file
from unitools.cga import write_cga_file
from unitools.grid import ConvertOptions

grid = read_bmp_file("sprite.bmp", ConvertOptions())
write_cga_file("sprite.cga", grid, ConvertOptions())
```

`unitools.grid.parse_format` turns a format token such as `"bmp"` into a
`Format`, and `unitools.convert.read_grid_file` and
`unitools.convert.write_grid_file` dispatch on it. Malformed input raises
`ConvertError`.

## What it does not do

- `unitools-headpack -i <fmt>` does not convert resources; with it, files
  are not read and their arrays are written empty. No prefix writers are
  registered by the command itself.
- `unitools-unimake` compiles only code files; it does not process asset
  files or pass linker flags.