import io

import pytest

from esetools.buffer import CharReader, format_dump, read_hex, write_dump


def reader_for(text):
    return CharReader(io.StringIO(text))


def test_char_reader_read_and_unread():
    reader = reader_for("ab")
    assert reader.read() == "a"
    reader.unread("a")
    assert reader.read() == "a"
    assert reader.read() == "b"
    assert reader.read() == ""
    assert reader.at_eof()


def test_char_reader_unread_clears_eof():
    reader = reader_for("")
    assert reader.read() == ""
    assert reader.at_eof()
    reader.unread("x")
    assert not reader.at_eof()
    assert reader.read() == "x"


def test_read_hex_line_fields():
    reader = reader_for("00A4040000 9000\n")
    assert read_hex(reader, 64, True) == bytes.fromhex("00A4040000")
    assert read_hex(reader, 64, False) == bytes.fromhex("9000")
    assert read_hex(reader, 64, False) is None


def test_read_hex_stops_at_newline_without_consuming_flag():
    reader = reader_for("  \n0102")
    assert read_hex(reader, 64, False) is None
    assert read_hex(reader, 64, False) == bytes.fromhex("0102")


def test_read_hex_skips_newlines_when_allowed():
    reader = reader_for("\n\n\t 0a0b\n")
    assert read_hex(reader, 64, True) == bytes.fromhex("0a0b")


def test_read_hex_empty_input():
    reader = reader_for("")
    assert read_hex(reader, 64, True) is None
    assert reader.at_eof()


def test_read_hex_odd_length():
    assert read_hex(reader_for("abc"), 64, True) == b"\xab\x0c"


def test_read_hex_non_hex_field_gives_empty_bytes():
    assert read_hex(reader_for("zz\n"), 64, True) == b""


def test_read_hex_stops_at_first_non_hex_digit():
    assert read_hex(reader_for("0g12"), 64, True) == b"\x00"


def test_read_hex_capacity_limits_characters():
    reader = reader_for("0102030405")
    assert read_hex(reader, 4, True) == bytes.fromhex("0102")
    assert reader.read() == "0"


def test_read_hex_leaves_delimiter_in_stream():
    reader = reader_for("ff;")
    assert read_hex(reader, 64, True) == b"\xff"
    assert reader.read() == ";"


def test_format_dump_small_buffer():
    expected = "Response {\n  .length = 2\n  .size = 8\n  .buffer = {\n    01 02 \n}\n"
    assert format_dump(b"\x01\x02", 8, "", "Response", 240) == expected


def test_format_dump_prefix_on_every_line():
    text = format_dump(bytes(range(20)), 32, "  ", "Transmit", 240)
    lines = text.splitlines()
    assert all(line.startswith("  ") for line in lines)
    assert lines[0] == "  Transmit {"


def test_format_dump_wraps_after_sixteen_bytes():
    data = bytes(range(17))
    lines = format_dump(data, 32, "", "Buf", 240).splitlines()
    assert lines[4].split() == [f"{b:02x}" for b in data[:16]]
    assert lines[5].split() == [f"{data[16]:02x}"]


def test_format_dump_truncates_past_limit():
    data = bytes(300)
    text = format_dump(data, 300, "", "Big", 240)
    assert ". . ." in text
    body = text.split(".buffer = {\n", 1)[1]
    tokens = [t for t in body.split() if t == "00"]
    assert len(tokens) == 241


@pytest.mark.parametrize("data", [b"", b"\x90\x00", bytes(range(40))])
def test_write_dump_matches_format(data):
    out = io.StringIO()
    write_dump(data, 64, "> ", "Name", 240, out)
    assert out.getvalue() == format_dump(data, 64, "> ", "Name", 240)