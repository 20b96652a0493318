"""Colour themes for the review screen."""

from dataclasses import dataclass

RESET = "\x1b[0m"


@dataclass(frozen=True)
class Theme:
    """ANSI SGR sequences for each style role."""
    name: str
    normal: str
    title: str
    highlight: str
    warning: str
    success: str
    muted: str
    border: str
    selected: str

    def paint(self, text: str, role: str) -> str:
        """Wrap text in the sequence for `role` (e.g. "muted")."""
        code = getattr(self, role)
        if not code or not text:
            return text
        return f"{code}{text}{RESET}"

    @classmethod
    def from_name(cls, name: str) -> "Theme":
        """Look up a theme by name; unknown names get the default theme."""
        return THEMES.get(name, DEFAULT_THEME)


DEFAULT_THEME = Theme(
    name="default",
    normal="",
    title="\x1b[1;36m",
    highlight="\x1b[1;36m",
    warning="\x1b[33m",
    success="\x1b[32m",
    muted="\x1b[90m",
    border="\x1b[37m",
    selected="\x1b[1;97;44m",
)

MINIMAL_THEME = Theme(
    name="minimal",
    normal="",
    title="\x1b[1m",
    highlight="\x1b[1;97m",
    warning="\x1b[33m",
    success="\x1b[32m",
    muted="\x1b[90m",
    border="\x1b[90m",
    selected="\x1b[7m",
)

COLORFUL_THEME = Theme(
    name="colorful",
    normal="",
    title="\x1b[1;35m",
    highlight="\x1b[1;35m",
    warning="\x1b[93m",
    success="\x1b[92m",
    muted="\x1b[37m",
    border="\x1b[36m",
    selected="\x1b[1;97;104m",
)

THEMES = {theme.name: theme for theme in (DEFAULT_THEME, MINIMAL_THEME, COLORFUL_THEME)}
