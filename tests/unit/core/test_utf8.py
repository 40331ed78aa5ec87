"""Unit tests for core/utils/utf8.py"""

import pytest

from macaroni.core.utils.utf8 import is_continuation_byte


@pytest.mark.parametrize("byte,expected", [
    (0x00, False),
    (ord("a"), False),
    (0x7F, False),
    (0x80, True),
    (0xBF, True),
    (0xC3, False),      # lead byte of a 2-byte sequence
    (0xF0, False),      # lead byte of a 4-byte sequence
])
def test_is_continuation_byte(byte, expected):
    """Only bytes of the form 0b10xxxxxx are continuation bytes."""
    assert is_continuation_byte(byte) is expected


def test_continuation_bytes_of_emoji():
    """A 4-byte emoji has exactly one non-continuation byte."""
    data = "😀".encode("utf-8")
    assert [is_continuation_byte(b) for b in data] == [False, True, True, True]
