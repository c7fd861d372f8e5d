import pytest

from moonkit.formatting import chunk_id, format_message


def test_format_message_mixed():
    assert format_message("%s:%d: %s", "file", 3, "msg") == "file:3: msg"


def test_format_message_null_string():
    assert format_message("%s", None) == "(null)"


def test_format_message_float_keeps_point():
    assert format_message("%f", 2.0) == "2.0"


def test_format_message_integer():
    assert format_message("%I", 123456789) == "123456789"


def test_format_message_printable_char():
    assert format_message("[%c]", 65) == "[" + chr(65) + "]"


def test_format_message_non_printable_char():
    assert format_message("%c", 1) == "<\\1>"


def test_format_message_percent():
    assert format_message("100%%") == "100%"


def test_format_message_utf8():
    assert format_message("%U", 0x20AC) == chr(0x20AC)


def test_format_message_pointer():
    assert format_message("%p", 255) == hex(255)


def test_format_message_without_directives():
    assert format_message("plain text") == "plain text"


def test_format_message_invalid_option():
    with pytest.raises(ValueError):
        format_message("%q", 1)


def test_format_message_trailing_percent():
    with pytest.raises(ValueError):
        format_message("abc%")


def test_format_message_missing_argument():
    with pytest.raises(TypeError):
        format_message("%s and %s", "one")


def test_chunk_id_literal():
    assert chunk_id("=stdin") == "stdin"


def test_chunk_id_literal_truncated():
    result = chunk_id("=" + "x" * 100, 20)
    assert result == "x" * 19


def test_chunk_id_file_name():
    assert chunk_id("@foo.lua") == "foo.lua"


def test_chunk_id_long_file_name_keeps_tail():
    name = "a" * 80 + "tail.lua"
    result = chunk_id("@" + name)
    assert result.startswith("...")
    assert result.endswith("tail.lua")
    assert len(result) == 60 - 1
    assert name.endswith(result[3:])


def test_chunk_id_short_source():
    assert chunk_id("print(1)") == '[string "print(1)"]'


def test_chunk_id_stops_at_newline():
    assert chunk_id("local x\nreturn x") == '[string "local x..."]'


def test_chunk_id_long_source_truncated():
    source = "y" * 200
    result = chunk_id(source)
    assert result.startswith('[string "')
    assert result.endswith('..."]')
    assert len(result) <= 60 - 1


def test_chunk_id_rejects_tiny_buffer():
    with pytest.raises(ValueError):
        chunk_id("code", 5)