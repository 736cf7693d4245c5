"""Tests for the users-file line grammar."""

from __future__ import annotations

import pytest

from propsrealm.domain.errors import LineDecodeError, LoadError
from propsrealm.domain.lines import decode_line, escape_value, is_comment, parse_realm_marker


class TestDecodeLine:
    def test_simple_pair(self) -> None:
        assert decode_line("alice=s3cr3t") == ("alice", "s3cr3t")

    def test_colon_delimiter(self) -> None:
        assert decode_line("alice:s3cr3t") == ("alice", "s3cr3t")

    def test_first_unescaped_delimiter_wins(self) -> None:
        assert decode_line("alice=a=b:c") == ("alice", "a=b:c")

    def test_escaped_delimiters(self) -> None:
        assert decode_line(r"bob\:smith=pa\=ss") == ("bob:smith", "pa=ss")

    def test_escaped_backslash(self) -> None:
        assert decode_line(r"c\\d=x") == ("c\\d", "x")

    def test_unicode_escape(self) -> None:
        assert decode_line(r"carol=caf\u00e9") == ("carol", "café")

    def test_unicode_escape_in_username(self) -> None:
        assert decode_line(r"\u0041lice=pw") == ("Alice", "pw")

    def test_whitespace_around_fields_trimmed(self) -> None:
        assert decode_line("  alice   =   s3cr3t  ") == ("alice", "s3cr3t")

    def test_no_delimiter(self) -> None:
        assert decode_line("no delimiter here") == (None, "no delimiter here")

    def test_empty_secret(self) -> None:
        assert decode_line("alice=") == ("alice", "")

    def test_trailing_backslash_kept(self) -> None:
        assert decode_line("alice=pw\\") == ("alice", "pw\\")

    def test_truncated_unicode_escape(self) -> None:
        with pytest.raises(LineDecodeError) as exc_info:
            decode_line(r"alice=\u00")
        assert exc_info.value.partial == "00"
        assert "\\u00" in str(exc_info.value)

    def test_non_hex_unicode_escape(self) -> None:
        with pytest.raises(LineDecodeError) as exc_info:
            decode_line(r"alice=\uZZZZ")
        assert exc_info.value.partial == "ZZZZ"
        assert "not a hexadecimal number" in str(exc_info.value)

    @pytest.mark.parametrize("digits", ["0x41", " 41 ", "1_23", "+041", "-041"])
    def test_unicode_escape_needs_four_hex_digits(self, digits: str) -> None:
        with pytest.raises(LineDecodeError) as exc_info:
            decode_line(f"alice=\\u{digits}")
        assert exc_info.value.partial == digits

    def test_decode_error_is_load_error(self) -> None:
        with pytest.raises(LoadError):
            decode_line("a=\\u1")


class TestEscapeValue:
    @pytest.mark.parametrize(
        "text",
        [
            "plain",
            "bob:smith",
            "pa=ss",
            "back\\slash",
            "#hash",
            "!bang",
            "caf\u00e9",
            "\u65e5\u672c",
            "two\nlines",
            "cr\rlf",
            "tab\tin",
        ],
    )
    def test_decode_reproduces_escaped_text(self, text: str) -> None:
        line = f"{escape_value(text)}={escape_value(text)}"
        assert decode_line(line) == (text, text)

    def test_non_ascii_becomes_unicode_escape(self) -> None:
        assert escape_value("é") == "\\u00e9"

    def test_control_characters_escaped(self) -> None:
        escaped = escape_value("a\nb\r")
        assert escaped == "a\\u000ab\\u000d"
        assert "\n" not in escaped

    def test_inner_hash_not_escaped(self) -> None:
        assert escape_value("a#b") == "a#b"


class TestComments:
    @pytest.mark.parametrize("line", ["# comment", "!comment", "#$REALM_NAME=X$"])
    def test_comment_lines(self, line: str) -> None:
        assert is_comment(line)

    def test_data_line_is_not_comment(self) -> None:
        assert not is_comment("alice=#notacomment")


class TestRealmMarker:
    def test_marker_with_trailing_text(self) -> None:
        line = "#$REALM_NAME=ManagementRealm$ This line is used by the add-user utility"
        assert parse_realm_marker(line) == "ManagementRealm"

    def test_marker_after_text(self) -> None:
        assert parse_realm_marker("# realm: $REALM_NAME=Test$") == "Test"

    def test_empty_realm_name(self) -> None:
        assert parse_realm_marker("#$REALM_NAME=$") == ""

    def test_missing_closing_dollar(self) -> None:
        assert parse_realm_marker("#$REALM_NAME=Test") is None

    def test_bang_comment_not_a_marker(self) -> None:
        assert parse_realm_marker("!$REALM_NAME=Test$") is None

    def test_plain_comment(self) -> None:
        assert parse_realm_marker("# nothing here") is None
