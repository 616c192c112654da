"""Immutable visual theme for the browser, chosen once from terminal capabilities."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console

from ..types import FileKind


@dataclass(frozen=True)
class Theme:
    """Semantic palette tokens and icons for the browser view.

    Colors use Rich markup style names. Icons differ between the unicode and
    ascii variants; the palette is shared.
    """

    name: str
    accent: str = "color(130)"  # warm rust
    info: str = "color(24)"
    success: str = "color(28)"
    warning: str = "color(136)"
    error: str = "color(124)"
    muted: str = "grey50"
    border: str = "color(130)"

    cursor_icon: str = "❯"
    expanded_icon: str = "▾"
    collapsed_icon: str = "▸"
    separator: str = "─"
    hint_separator: str = " · "
    search_icon: str = "⌕"
    scroll_up_icon: str = "↑"
    scroll_down_icon: str = "↓"
    nav_hint: str = "↑↓ nav"

    def kind_style(self, kind: FileKind) -> str:
        return _KIND_STYLES.get(kind, self.muted)


_KIND_STYLES = {
    FileKind.PROJECT_CONFIG: "color(28)",
    FileKind.LOCAL_OVERRIDE: "color(136)",
    FileKind.GLOBAL_CONFIG: "color(24)",
    FileKind.COMMAND_DEFINITION: "color(130)",
    FileKind.SETTINGS: "color(95)",
    FileKind.SETTINGS_LOCAL: "color(101)",
}

UNICODE_THEME = Theme(name="unicode")

ASCII_THEME = Theme(
    name="ascii",
    cursor_icon=">",
    expanded_icon="v",
    collapsed_icon=">",
    separator="-",
    hint_separator=" | ",
    search_icon="/",
    scroll_up_icon="^",
    scroll_down_icon="v",
    nav_hint="up/down nav",
)

THEMES = {"unicode": UNICODE_THEME, "ascii": ASCII_THEME}


def supports_unicode(console: Console) -> bool:
    encoding = (console.encoding or "").lower().replace("-", "")
    return encoding.startswith("utf") and not console.legacy_windows


def detect_theme(console: Console, preference: str = "auto") -> Theme:
    """Pick a theme for this terminal.

    Args:
        console: Console the browser renders to.
        preference: "unicode", "ascii" or "auto" (probe the console encoding).
    """
    if preference in THEMES:
        return THEMES[preference]
    return UNICODE_THEME if supports_unicode(console) else ASCII_THEME
