"""Tests for theme selection."""

import io

import pytest
from rich.console import Console

from ccexp.interactive.theme import ASCII_THEME, UNICODE_THEME, detect_theme, supports_unicode
from ccexp.types import FileKind


class AsciiStream(io.StringIO):
    encoding = "ascii"


class Utf8Stream(io.StringIO):
    encoding = "utf-8"


class TestDetectTheme:
    def test_auto_unicode_terminal(self):
        console = Console(file=Utf8Stream())
        assert supports_unicode(console)
        assert detect_theme(console) is UNICODE_THEME

    def test_auto_ascii_terminal(self):
        console = Console(file=AsciiStream())
        assert not supports_unicode(console)
        assert detect_theme(console) is ASCII_THEME

    @pytest.mark.parametrize("preference, expected", [("ascii", ASCII_THEME), ("unicode", UNICODE_THEME)])
    def test_explicit_preference_wins(self, preference, expected):
        assert detect_theme(Console(file=Utf8Stream()), preference) is expected
        assert detect_theme(Console(file=AsciiStream()), preference) is expected


class TestTheme:
    def test_ascii_icons_are_ascii(self):
        icons = [
            ASCII_THEME.cursor_icon,
            ASCII_THEME.expanded_icon,
            ASCII_THEME.collapsed_icon,
            ASCII_THEME.separator,
            ASCII_THEME.search_icon,
            ASCII_THEME.nav_hint,
        ]
        assert all(icon.isascii() for icon in icons)

    def test_themes_are_immutable(self):
        with pytest.raises(AttributeError):
            UNICODE_THEME.cursor_icon = "*"

    def test_every_kind_has_a_style(self):
        assert all(UNICODE_THEME.kind_style(kind) for kind in FileKind)
