"""UI theme definitions and selection helpers.

Themes are ANSI palettes for the tree, title, flash line, and dialogs.
Syntax highlighting style for detail views remains a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    reverse: str
    tree_fg: str
    tree_graphic: str
    tree_cursor: str
    tree_status_bad: str
    tree_placeholder: str
    title: str
    title_namespace: str
    title_count: str
    title_filter: str
    flash_info: str
    flash_error: str
    prompt: str
    dialog_border: str
    dim: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    reverse="\033[7m",
    tree_fg="\033[38;5;252m",
    tree_graphic="\033[38;5;68m",
    tree_cursor="\033[1;38;5;81m",
    tree_status_bad="\033[38;5;203m",
    tree_placeholder="\033[2;38;5;250m",
    title="\033[1;38;5;81m",
    title_namespace="\033[1;38;5;213m",
    title_count="\033[1;38;5;229m",
    title_filter="\033[1;38;5;45m",
    flash_info="\033[38;5;42m",
    flash_error="\033[1;38;5;203m",
    prompt="\033[1;38;5;81m",
    dialog_border="\033[38;5;45m",
    dim="\033[2;38;5;250m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    reverse="\033[7m",
    tree_fg="\033[38;5;153m",
    tree_graphic="\033[2;38;5;31m",
    tree_cursor="\033[1;38;5;45m",
    tree_status_bad="\033[38;5;215m",
    tree_placeholder="\033[2;38;5;110m",
    title="\033[1;38;5;45m",
    title_namespace="\033[1;38;5;117m",
    title_count="\033[1;38;5;153m",
    title_filter="\033[1;38;5;39m",
    flash_info="\033[38;5;84m",
    flash_error="\033[1;38;5;215m",
    prompt="\033[1;38;5;39m",
    dialog_border="\033[38;5;39m",
    dim="\033[2;38;5;110m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    reverse="",
    tree_fg="",
    tree_graphic="",
    tree_cursor="",
    tree_status_bad="",
    tree_placeholder="",
    title="",
    title_namespace="",
    title_count="",
    title_filter="",
    flash_info="",
    flash_error="",
    prompt="",
    dialog_border="",
    dim="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES.get(normalize_theme_name(name), DEFAULT_THEME)


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
