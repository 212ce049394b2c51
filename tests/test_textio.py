"""Tests for radix text conversion and line streams."""

from __future__ import annotations

import io

import pytest

from bigint import Integer
from numerrors import InvalidRadixError
from textio import format_integer, parse_integer


class TestParse:

    def test_from_string_base_16(self):
        assert Integer.from_string("ff", 16) == 255
        assert Integer.from_string("FF", 16) == 255

    def test_from_string_malformed(self):
        assert Integer.from_string("12g", 16) is None
        assert Integer.from_string("", 10) is None
        assert Integer.from_string("-", 10) is None
        assert Integer.from_string("+5", 10) is None

    def test_whitespace_is_ignored(self):
        assert Integer.from_string(" 1 000 000\n") == 1000000
        assert Integer.from_string("- 42") == -42

    @pytest.mark.parametrize("text, expected", [
        ("0x1f", 31),
        ("0X1F", 31),
        ("0b101", 5),
        ("0o17", 15),
        ("017", 15),
        ("0", 0),
        ("-0x10", -16),
        ("99", 99),
    ])
    def test_base_zero_detects_prefix(self, text, expected):
        assert Integer.from_string(text, 0) == expected

    def test_base_zero_rejects_bad_octal(self):
        assert Integer.from_string("09", 0) is None

    def test_base_62_is_case_sensitive(self):
        assert parse_integer("a", 62) == 36
        assert parse_integer("A", 62) == 10
        assert parse_integer("z", 62) == 61

    @pytest.mark.parametrize("base", [1, 63, -2])
    def test_invalid_input_base(self, base):
        with pytest.raises(InvalidRadixError):
            Integer.from_string("1", base)


class TestFormat:

    def test_to_string_base_16(self):
        assert Integer(255).to_string(16) == "ff"
        assert Integer(-255).to_string(16) == "-ff"

    def test_to_string_upper_case(self):
        assert Integer(255).to_string(-16) == "FF"

    def test_small_bases(self):
        assert Integer(5).to_string(2) == "101"
        assert Integer(8).to_string(8) == "10"
        assert Integer(0).to_string(2) == "0"

    def test_base_62_alphabet(self):
        assert format_integer(61, 62) == "z"
        assert format_integer(36, 62) == "a"
        assert format_integer(10, 62) == "A"

    @pytest.mark.parametrize("base", [0, 1, 63, -1, -37])
    def test_invalid_output_base(self, base):
        with pytest.raises(InvalidRadixError):
            Integer(1).to_string(base)

    def test_size_in_base(self, big):
        assert Integer(255).size_in_base(16) == 2
        assert Integer(0).size_in_base(10) == 1
        digits = len(str(big))
        assert Integer(big).size_in_base(10) in (digits, digits + 1)

    def test_size_in_base_invalid(self):
        with pytest.raises(InvalidRadixError):
            Integer(1).size_in_base(1)


class TestLineStreams:

    def test_write_line(self):
        out = io.StringIO()
        assert Integer(-255).write_line(out, 16) == 4
        assert out.getvalue() == "-ff\n"

    def test_read_line(self):
        stream = io.StringIO("123\nzz\n")
        assert Integer.read_line(stream) == 123
        assert Integer.read_line(stream) is None
        assert Integer.read_line(stream) is None

    def test_round_trip_through_stream(self, big):
        stream = io.StringIO()
        Integer(big).write_line(stream, 36)
        Integer(-big).write_line(stream, 36)
        stream.seek(0)
        assert Integer.read_line(stream, 36) == big
        assert Integer.read_line(stream, 36) == -big
