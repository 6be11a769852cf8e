"""Theme system: color palettes and Textual theme builders.

Each palette is registered as a Textual theme whose ``variables`` expose
every color key as ``$th-<key>`` (underscores become dashes) for the app TCSS.
Rich markup built outside TCSS reads the active palette from THEME_COLORS.
"""

from __future__ import annotations

from textual.theme import Theme as TextualTheme

from issue_browser.models import DEFAULT_THEME_NAME

GITPOD_DARK_THEME: dict[str, str] = {
    "background": "#161616",
    "panel": "#1f1f1f",
    "panel_alt": "#2e2e2e",
    "text": "#e8e6e3",
    "muted": "#8c8a87",
    "accent": "#ffae33",
    "accent_alt": "#f9f9f9",
    "green": "#84cc16",
    "yellow": "#fde047",
    "gold": "#ffae33",
    "orange": "#fb923c",
    "pink": "#f87171",
    "purple": "#a78bfa",
    "highlight": "#2e2e2e",
    "highlight_focus": "#3d3d3d",
    "scrollbar": "#575757",
    "scrollbar_background": "#1f1f1f",
    "scrollbar_active": "#ffae33",
    "scrollbar_hover": "#8c8a87",
}

GITPOD_LIGHT_THEME: dict[str, str] = {
    "background": "#f9f9f9",
    "panel": "#ffffff",
    "panel_alt": "#ececec",
    "text": "#12100c",
    "muted": "#6b6b6b",
    "accent": "#c46f00",
    "accent_alt": "#1f1f1f",
    "green": "#3f7d0a",
    "yellow": "#9a6b00",
    "gold": "#c46f00",
    "orange": "#c2410c",
    "pink": "#b91c1c",
    "purple": "#6d28d9",
    "highlight": "#ececec",
    "highlight_focus": "#dcdcdc",
    "scrollbar": "#b5b5b5",
    "scrollbar_background": "#ececec",
    "scrollbar_active": "#c46f00",
    "scrollbar_hover": "#8c8a87",
}

MONOKAI_THEME: dict[str, str] = {
    **GITPOD_DARK_THEME,
    "background": "#272822",
    "panel": "#1e1e1e",
    "panel_alt": "#3e3d32",
    "text": "#f8f8f2",
    "muted": "#75715e",
    "accent": "#66d9ef",
    "accent_alt": "#e6db74",
    "green": "#a6e22e",
    "yellow": "#e6db74",
    "orange": "#fd971f",
    "pink": "#f92672",
    "purple": "#ae81ff",
    "highlight": "#49483e",
    "highlight_focus": "#5a5950",
    "scrollbar": "#75715e",
    "scrollbar_background": "#3e3d32",
    "scrollbar_active": "#66d9ef",
    "scrollbar_hover": "#a8a8a2",
}

THEMES: dict[str, dict[str, str]] = {
    "gitpod-dark": GITPOD_DARK_THEME,
    "gitpod-light": GITPOD_LIGHT_THEME,
    "monokai": MONOKAI_THEME,
}
THEME_NAMES: list[str] = list(THEMES.keys())
DEFAULT_THEME = THEMES[DEFAULT_THEME_NAME]

_LIGHT_THEMES = frozenset({"gitpod-light"})


def _css_variables(colors: dict[str, str]) -> dict[str, str]:
    return {f"th-{key.replace('_', '-')}": value for key, value in colors.items()}


def _build_textual_theme(name: str, colors: dict[str, str]) -> TextualTheme:
    return TextualTheme(
        name=name,
        primary=colors["accent"],
        secondary=colors["accent_alt"],
        accent=colors["gold"],
        foreground=colors["text"],
        background=colors["background"],
        surface=colors["panel"],
        panel=colors["panel_alt"],
        warning=colors["orange"],
        error=colors["pink"],
        success=colors["green"],
        dark=name not in _LIGHT_THEMES,
        variables=_css_variables(colors),
    )


TEXTUAL_THEMES: dict[str, TextualTheme] = {
    name: _build_textual_theme(name, colors) for name, colors in THEMES.items()
}

# Active palette for Rich markup; mutated by apply_theme()
THEME_COLORS = DEFAULT_THEME.copy()


def apply_theme(name: str) -> str:
    """Make ``name`` the active markup palette. Unknown names fall back to the default.

    Returns the name of the theme that was applied.
    """
    if name not in THEMES:
        name = DEFAULT_THEME_NAME
    THEME_COLORS.clear()
    THEME_COLORS.update(THEMES[name])
    return name


def theme_color(key: str) -> str:
    """Return the active color for ``key``, falling back to the text color."""
    return THEME_COLORS.get(key, THEME_COLORS["text"])


__all__ = [
    "DEFAULT_THEME",
    "GITPOD_DARK_THEME",
    "GITPOD_LIGHT_THEME",
    "MONOKAI_THEME",
    "TEXTUAL_THEMES",
    "THEMES",
    "THEME_COLORS",
    "THEME_NAMES",
    "apply_theme",
    "theme_color",
]
