"""Parsing of Unifile build descriptions and bounded compiler-argument buffers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Union

from unitools.config import (
    ERROR_BAD_UNIFILE_PATH,
    ERROR_TOO_MANY_CODE_FILES,
    UNIFILE_PATH_DEFAULT,
    UNIFILE_PATH_SZ_MAX,
    UNIFILE_PATHS_MAX,
    StringTooLongError,
    UnimakeError,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_COMMENT_STARTS = ("#", ";", "\n", "\r")


def replace_token(
    text: str, target: Optional[str], replacement: Optional[str], room: int
) -> int:
    """Number of characters of ``text`` consumed by replacing a leading ``target``.

    Returns 0 when no replacement applies. Tokens of one character or less never
    match. Raises StringTooLongError if the replacement does not fit ``room``.
    """
    if target is None or replacement is None:
        return 0
    if len(target) <= 1 or len(replacement) <= 1:
        return 0
    if len(target) >= room:
        return 0
    if not text.startswith(target):
        return 0
    if len(replacement) >= room:
        raise StringTooLongError(
            f'replacement token "{replacement}" too long for string: {text}'
        )
    return len(target)


@dataclass
class ArgBuffer:
    """A string of compiler arguments that may not grow beyond ``max_size``."""

    max_size: int
    text: str = ""

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text

    def append_char(self, char: str) -> None:
        """Append one character, raising StringTooLongError if there is no room."""
        if self.max_size > len(self.text) + 1:
            self.text += char
        else:
            raise StringTooLongError("line buffer exceeded")

    def concat(
        self,
        text: str,
        target: Optional[str] = None,
        replacement: Optional[str] = None,
    ) -> None:
        """Append ``text`` without line breaks, replacing ``target`` tokens."""
        parts: List[str] = []
        length = len(self.text)
        i = 0
        while i < len(text):
            char = text[i]
            if char in "\r\n":
                i += 1
                continue
            consumed = replace_token(
                text[i:], target, replacement, self.max_size - length
            )
            if consumed:
                parts.append(replacement)
                length += len(replacement)
                i += consumed
            else:
                parts.append(char)
                length += 1
                i += 1
            if length > self.max_size:
                raise StringTooLongError(
                    f"string exceeds {self.max_size} characters: {self.text}{''.join(parts)}"
                )
        self.text += "".join(parts)


def line_start(line: str) -> Optional[str]:
    """The line without leading blanks, or None for comments and empty lines."""
    stripped = line.lstrip(" \t")
    if not stripped or stripped.startswith(_COMMENT_STARTS):
        return None
    return stripped


def is_section_header(
    line: str, header_type: str, header_plat: Optional[str]
) -> bool:
    """Whether ``line`` opens section ``[header_type]`` or ``[header_type plat]``."""
    if not line.startswith("["):
        return False
    if not line[1:].startswith(header_type):
        return False
    after = len(header_type) + 1
    if header_plat is None:
        return line[after:after + 1] == "]"
    if len(line) <= len(header_plat) + len(header_type) + 2:
        return False
    return line[after + 1:].startswith(header_plat)


def _unifile_lines(path: Optional[PathLike]) -> Iterator[str]:
    unifile = Path(UNIFILE_PATH_DEFAULT if path is None else path)
    try:
        with unifile.open("r", encoding="utf-8") as handle:
            lines = handle.readlines()
    except OSError as exc:
        raise UnimakeError(
            f"unable to open unifile {unifile}", ERROR_BAD_UNIFILE_PATH
        ) from exc
    yield from lines


def parse_compiler_args(
    path: Optional[PathLike],
    buffer: ArgBuffer,
    args_type: str,
    args_plat: Optional[str],
    target: Optional[str] = None,
    replacement: Optional[str] = None,
) -> ArgBuffer:
    """Append every argument line of the matching Unifile section to ``buffer``."""
    logger.debug("parsing unifile compiler args...")
    parsing = False
    for line in _unifile_lines(path):
        start = line_start(line)
        if start is None:
            continue
        if is_section_header(start, args_type, args_plat):
            parsing = True
            logger.debug("unifile section [%s %s] found", args_type, args_plat)
        elif start.startswith("["):
            parsing = False
        elif parsing:
            buffer.append_char(" ")
            buffer.concat(line, target, replacement)
    return buffer


def _is_paths_header(start: str, files_type: str, files_plat: Optional[str]) -> bool:
    if not start.startswith("[") or files_type[:4] != start[1:5]:
        return False
    if files_plat is None:
        return start[5:6] == "]"
    return len(start) > 10 and files_plat[:3] == start[6:9]


def parse_paths(
    path: Optional[PathLike],
    files: List[str],
    files_type: str,
    files_plat: Optional[str],
) -> List[str]:
    """Append the paths listed in the matching Unifile section to ``files``."""
    logger.debug("parsing unifile paths...")
    parsing = False
    for line in _unifile_lines(path):
        start = line_start(line)
        if start is None:
            continue
        if _is_paths_header(start, files_type, files_plat):
            parsing = True
            logger.debug("unifile section [%s %s] found", files_type, files_plat)
        elif start.startswith("["):
            parsing = False
        elif parsing:
            entry = start.rstrip("\r\n")
            if len(files) + 1 >= UNIFILE_PATHS_MAX:
                raise UnimakeError("too many code files", ERROR_TOO_MANY_CODE_FILES)
            if len(entry) > UNIFILE_PATH_SZ_MAX:
                raise StringTooLongError(f"code path too long: {entry}")
            files.append(entry)
            logger.debug(
                "%d %s files for %s (added %s)",
                len(files), files_type, files_plat, entry,
            )
    return files