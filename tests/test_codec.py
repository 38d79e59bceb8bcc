"""Tests for waypost.uri.codec — percent-encoding and decoding."""

import pytest

from waypost.errors import URISyntaxError
from waypost.uri import codec


class TestEncode:
    def test_space_is_percent_20(self) -> None:
        assert codec.encode(" ") == "%20"

    def test_reserved_characters_escaped(self) -> None:
        assert codec.encode("a b&c=d/e:f") == "a%20b%26c%3Dd%2Fe%3Af"

    def test_unreserved_untouched(self) -> None:
        assert codec.encode("AZaz09-._~*") == "AZaz09-._~*"

    def test_plus_and_percent_escaped(self) -> None:
        assert codec.encode("1+1=2%") == "1%2B1%3D2%25"

    def test_utf8_by_default(self) -> None:
        assert codec.encode("é") == "%C3%A9"

    def test_explicit_charset(self) -> None:
        assert codec.encode("é", "latin-1") == "%E9"

    def test_unencodable_raises(self) -> None:
        with pytest.raises(URISyntaxError, match="Cannot encode"):
            codec.encode("é", "ascii")


class TestDecode:
    def test_plus_is_space(self) -> None:
        assert codec.decode("a+b") == "a b"

    def test_escapes(self) -> None:
        assert codec.decode("a%20b%26c") == "a b&c"

    def test_encoded_plus_survives(self) -> None:
        assert codec.decode("1%2B1") == "1+1"

    def test_utf8_by_default(self) -> None:
        assert codec.decode("%C3%A9") == "é"

    def test_malformed_escape_raises(self) -> None:
        with pytest.raises(URISyntaxError) as exc_info:
            codec.decode("abc%zz")
        assert exc_info.value.index == 3
        assert exc_info.value.reason == "Malformed escape pair"

    def test_truncated_escape_raises(self) -> None:
        with pytest.raises(URISyntaxError):
            codec.decode("abc%2")

    def test_undecodable_bytes_raise(self) -> None:
        with pytest.raises(URISyntaxError, match="Cannot decode"):
            codec.decode("%FF", "utf-8")

    def test_roundtrip(self) -> None:
        value = "name=Jane Doe & co/100%"
        assert codec.decode(codec.encode(value)) == value


class TestComponentVariants:
    def test_unquote_leaves_plus(self) -> None:
        assert codec.unquote_component("a+b%20c") == "a+b c"

    def test_quote_respects_safe(self) -> None:
        assert codec.quote_component("a:b@c/d", ":@") == "a:b@c%2Fd"

    def test_quote_always_escapes_percent(self) -> None:
        assert codec.quote_component("%41", "%") == "%2541"

    def test_check_escapes_accepts_valid(self) -> None:
        codec.check_escapes("%41%2f")


class TestSequences:
    def test_encode_all(self) -> None:
        assert codec.encode_all(["a b", "c&d"]) == ["a%20b", "c%26d"]

    def test_decode_all(self) -> None:
        assert codec.decode_all(["a+b", "c%26d"]) == ["a b", "c&d"]

    def test_empty(self) -> None:
        assert codec.encode_all([]) == []
