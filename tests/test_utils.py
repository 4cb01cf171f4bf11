"""Unit tests for utils.py functions."""

from __future__ import annotations

import binascii
import re

import pytest

from ocsexec.utils import b64decode, b64encode, compact_json, strip_0x, utc_now_rfc3339


class TestBase64:
    def test_encode_standard_alphabet(self) -> None:
        assert b64encode(b"\xfb\xff") == "+/8="

    def test_decode_adds_missing_padding(self) -> None:
        assert b64decode("+/8") == b"\xfb\xff"

    def test_decode_rejects_garbage(self) -> None:
        with pytest.raises(binascii.Error):
            b64decode("not base64!")


class TestCompactJson:
    def test_no_whitespace_and_order_kept(self) -> None:
        assert compact_json({"b": 1, "a": [1, 2]}) == '{"b":1,"a":[1,2]}'

    def test_non_ascii_kept(self) -> None:
        assert compact_json({"k": "ü"}) == '{"k":"ü"}'


class TestMisc:
    def test_rfc3339_utc(self) -> None:
        ts = utc_now_rfc3339()
        assert ts.endswith("Z")
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}", ts)

    @pytest.mark.parametrize("value,expected", [("0xab", "ab"), ("0XAB", "AB"), ("ab", "ab")])
    def test_strip_0x(self, value: str, expected: str) -> None:
        assert strip_0x(value) == expected
