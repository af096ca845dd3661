"""Tests for ``name = definition`` parsing."""

import os

import pytest

from nbinterp.engine.definitions import LINE_SEPARATOR, parse_block, parse_line


def test_line_separator_is_platform_separator():
    assert LINE_SEPARATOR == os.linesep


@pytest.mark.parametrize(
    "line, expected",
    [
        ("ticks = time | log", ("ticks", "time | log")),
        ("  ticks=time | log  ", ("ticks", "time | log")),
        ("job1 = timestampfile --directory=/tmp", ("job1", "timestampfile --directory=/tmp")),
        ("s = a = b", ("s", "a = b")),
    ],
)
def test_parse_line(line, expected):
    assert parse_line(line) == expected


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   ",
        "no equals sign here",
        "= http | log",
        "name =",
        "name =    ",
        "two words = http | log",
        "my-stream = http | log",
    ],
)
def test_parse_line_rejects(line):
    assert parse_line(line) is None


def test_parse_block_skips_bad_lines():
    text = LINE_SEPARATOR.join(["a = time | log", "garbage", "", "b = http | file"])
    assert parse_block(text) == [("a", "time | log"), ("b", "http | file")]


def test_parse_block_blank():
    assert parse_block("") == []
    assert parse_block("   ") == []


def test_parse_block_roundtrip():
    pairs = [("s1", "time | log"), ("s2", "http --port=9000 | hdfs")]
    text = LINE_SEPARATOR.join(f"{name} = {definition}" for name, definition in pairs)
    assert parse_block(text) == pairs
