import pytest

from unitools.config import (
    ERROR_BAD_UNIFILE_PATH,
    ERROR_STRING_TOO_LONG,
    ERROR_TOO_MANY_CODE_FILES,
    UNIFILE_PATHS_MAX,
    StringTooLongError,
    UnimakeError,
)
from unitools.unifile import (
    ArgBuffer,
    is_section_header,
    line_start,
    parse_compiler_args,
    parse_paths,
    replace_token,
)


@pytest.fixture
def unifile(tmp_path):
    path = tmp_path / "Unifile"
    path.write_text(
        "# comment\n"
        "[code]\n"
        "  src/main.c\n"
        "; another comment\n"
        "src/util.c\n"
        "[code sdl]\n"
        "src/plat.c\n"
        "[libs]\n"
        "-lfoo\n"
        "[libs sdl]\n"
        "-lbar\n"
        "[other]\n"
        "ignored.c\n",
        encoding="utf-8",
    )
    return path


def test_line_start_strips_blanks():
    assert line_start(" \t src/a.c\n") == "src/a.c\n"


@pytest.mark.parametrize("line", ["# c\n", "; c\n", "\n", "\r\n", "   \n", ""])
def test_line_start_skips_comments_and_blank_lines(line):
    assert line_start(line) is None


def test_section_header_without_platform():
    assert is_section_header("[defines]\n", "defines", None) is True
    assert is_section_header("[defines sdl]\n", "defines", None) is False


def test_section_header_with_platform():
    assert is_section_header("[defines sdl]\n", "defines", "sdl") is True
    assert is_section_header("[defines dos]\n", "defines", "sdl") is False


def test_section_header_rejects_other_lines():
    assert is_section_header("[libs]\n", "defines", None) is False
    assert is_section_header("defines\n", "defines", None) is False


def test_replace_token_matches_leading_target():
    assert replace_token("-Iinclude", "-I", "-i=", 50) == len("-I")


def test_replace_token_no_match():
    assert replace_token("src", "-I", "-i=", 50) == 0
    assert replace_token("-Isrc", None, None, 50) == 0


def test_replace_token_ignores_single_char_tokens():
    assert replace_token("-Isrc", "-", "-i=", 50) == 0
    assert replace_token("-Isrc", "-I", "", 50) == 0


def test_replace_token_target_longer_than_room():
    assert replace_token("-Isrc", "-I", "-i=", 2) == 0


def test_replace_token_replacement_too_long():
    with pytest.raises(StringTooLongError) as info:
        replace_token("-Isrc", "-I", "-i=", 3)
    assert info.value.code == ERROR_STRING_TOO_LONG


def test_concat_replaces_tokens_and_drops_newlines():
    buf = ArgBuffer(64)
    buf.concat("-Iinc -Isrc\r\n", "-I", "-i=")
    assert buf.text == "-i=inc -i=src"


def test_concat_without_tokens_copies_text():
    buf = ArgBuffer(64, "gcc")
    buf.concat(" -DX\n")
    assert str(buf) == "gcc -DX"
    assert len(buf) == len("gcc -DX")


def test_concat_overflow_raises_and_keeps_text():
    buf = ArgBuffer(4, "ab")
    with pytest.raises(StringTooLongError):
        buf.concat("cdef")
    assert buf.text == "ab"


def test_append_char_respects_limit():
    buf = ArgBuffer(3)
    buf.append_char("a")
    buf.append_char("b")
    assert buf.text == "ab"
    with pytest.raises(StringTooLongError):
        buf.append_char("c")


def test_parse_paths_common_section(unifile):
    assert parse_paths(unifile, [], "code", None) == ["src/main.c", "src/util.c"]


def test_parse_paths_platform_section_appends(unifile):
    files = ["existing.c"]
    result = parse_paths(unifile, files, "code", "sdl")
    assert result is files
    assert files == ["existing.c", "src/plat.c"]


def test_parse_paths_missing_file(tmp_path):
    with pytest.raises(UnimakeError) as info:
        parse_paths(tmp_path / "missing", [], "code", None)
    assert info.value.code == ERROR_BAD_UNIFILE_PATH


def test_parse_paths_too_many_files(tmp_path):
    path = tmp_path / "Unifile"
    body = "".join(f"f{i}.c\n" for i in range(UNIFILE_PATHS_MAX))
    path.write_text("[code]\n" + body, encoding="utf-8")
    with pytest.raises(UnimakeError) as info:
        parse_paths(path, [], "code", None)
    assert info.value.code == ERROR_TOO_MANY_CODE_FILES


def test_parse_paths_path_too_long(tmp_path):
    path = tmp_path / "Unifile"
    path.write_text("[code]\n" + "a" * 80 + ".c\n", encoding="utf-8")
    with pytest.raises(StringTooLongError):
        parse_paths(path, [], "code", None)


def test_parse_compiler_args_with_replacement(unifile):
    buf = ArgBuffer(64)
    result = parse_compiler_args(unifile, buf, "libs", None, "-l", "-l=")
    assert result is buf
    assert buf.text == " -l=foo"


def test_parse_compiler_args_platform_section(unifile):
    buf = ArgBuffer(64, "-lbase")
    parse_compiler_args(unifile, buf, "libs", "sdl")
    assert buf.text == "-lbase -lbar"


def test_parse_compiler_args_overflow(unifile):
    buf = ArgBuffer(4)
    with pytest.raises(StringTooLongError):
        parse_compiler_args(unifile, buf, "libs", None)


def test_parse_compiler_args_missing_file(tmp_path):
    with pytest.raises(UnimakeError) as info:
        parse_compiler_args(tmp_path / "nope", ArgBuffer(64), "libs", None)
    assert info.value.code == ERROR_BAD_UNIFILE_PATH