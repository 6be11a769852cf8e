"""Internal UI constants for the IssueBrowser app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_CSS = """
Screen {
    background: $th-background;
}

Header {
    background: $th-panel-alt;
    color: $th-text;
}

#main-container {
    height: 1fr;
}

#left-pane {
    width: 2fr;
    min-width: 50;
    height: 100%;
    border: tall $th-highlight;
    background: $th-panel;
}

#left-pane:focus-within {
    border: tall $th-accent;
}

#right-pane {
    width: 3fr;
    height: 100%;
    border: tall $th-highlight;
    background: $th-panel;
    display: none;
}

#right-pane.visible {
    display: block;
}

#list-header {
    padding: 0 1;
    background: $th-panel;
    color: $th-accent;
    text-style: bold;
}

#issue-list {
    height: 1fr;
    scrollbar-gutter: stable;
}

#details-scroll {
    height: 1fr;
    padding: 0 1;
}

#search-container {
    height: auto;
    padding: 0 1;
    background: $th-panel;
    display: none;
}

#search-container.visible {
    display: block;
}

#search-input {
    width: 100%;
    border: tall $th-accent;
    background: $th-background;
}

#search-input:focus {
    border: tall $th-accent-alt;
}

#issue-list > .option-list--option-highlighted {
    background: $th-highlight;
}

#issue-list:focus > .option-list--option-highlighted {
    background: $th-highlight-focus;
}

#issue-list > .option-list--option-hover {
    background: $th-panel-alt;
}

VerticalScroll {
    scrollbar-background: $th-scrollbar-background;
    scrollbar-color: $th-scrollbar;
    scrollbar-color-hover: $th-scrollbar-hover;
    scrollbar-color-active: $th-scrollbar-active;
}

#status-bar {
    padding: 0 1;
    color: $th-muted;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit", show=False),
    Binding("slash", "toggle_search", "Search", show=False),
    Binding("escape", "cancel_search", "Cancel", show=False),
    Binding("j", "cursor_down", "Down", show=False),
    Binding("k", "cursor_up", "Up", show=False),
    Binding("v", "toggle_view", "Live/Recents"),
    # Row actions; visibility follows the highlighted row's action set
    Binding("g", "open_in_workspace", "Open in Gitpod"),
    Binding("o", "view_in_browser", "View in GitHub"),
    Binding("right", "show_preview", "Show Preview"),
    Binding("left", "hide_preview", "Hide Preview"),
    Binding("r", "add_to_recents", "Add to Recents"),
    Binding("d", "remove_from_recents", "Remove from Recents"),
    Binding("w", "configure_workspace", "Configure"),
    Binding("ctrl+t", "cycle_theme", "Theme", show=False),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
]
