"""List rendering helpers for issue rows."""

from __future__ import annotations

from datetime import UTC, datetime

from issue_browser.presenter import Accessory, IssueRowPresenter
from issue_browser.projection import format_relative_date
from issue_browser.query import escape_rich_text
from issue_browser.themes import theme_color

_ICON_SETS: dict[str, dict[str, str]] = {
    "unicode": {
        "issue-open": "\u25cb",  # ○
        "issue-reopened": "\u21bb",  # ↻
        "issue-closed": "\u2714",  # ✔
        "issue-skipped": "\u2298",  # ⊘
        "issue-unknown": "?",
        "unknown-author": "?",
        "comments": "\u2709",  # ✉
        "editor-class": "\u25a3",  # ▣
    },
    "ascii": {
        "issue-open": "o",
        "issue-reopened": "r",
        "issue-closed": "x",
        "issue-skipped": "-",
        "issue-unknown": "?",
        "unknown-author": "?",
        "comments": "c",
        "editor-class": "#",
    },
}
_ACTIVE_ICON_SET = _ICON_SETS["unicode"]


def set_ascii_icons(enabled: bool) -> None:
    """Switch row icons between Unicode and ASCII modes."""
    global _ACTIVE_ICON_SET
    _ACTIVE_ICON_SET = _ICON_SETS["ascii"] if enabled else _ICON_SETS["unicode"]


def icon_glyph(icon: str) -> str:
    """Resolve an icon name to a glyph; author initials pass through unchanged."""
    return _ACTIVE_ICON_SET.get(icon, icon)


def _render_accessory(accessory: Accessory, now: datetime) -> str:
    color = theme_color(accessory.color)
    if accessory.kind == "updated" and accessory.date is not None:
        return f"[{theme_color('muted')}]{format_relative_date(accessory.date, now)}[/]"
    text = escape_rich_text(accessory.text)
    if accessory.kind == "author":
        return f"[{color}]{escape_rich_text(icon_glyph(accessory.icon))}[/] {text}"
    glyph = icon_glyph(accessory.icon)
    return f"[{color}]{glyph} {text}[/]" if glyph else f"[{color}]{text}[/]"


def render_accessories(presenter: IssueRowPresenter, now: datetime | None = None) -> str:
    """Render the accessory strip as Rich markup."""
    now = now or datetime.now(UTC)
    return "  ".join(_render_accessory(accessory, now) for accessory in presenter.accessories())


def render_issue_option(presenter: IssueRowPresenter, now: datetime | None = None) -> str:
    """Render an issue row as Rich markup for OptionList display."""
    icon = presenter.icon()
    subtitle = presenter.subtitle()
    status = f"[{theme_color(icon.color)}]{icon_glyph(icon.text)}[/]"
    title = presenter.title()
    repository = escape_rich_text(presenter.issue.repository)
    meta = f"[{theme_color('muted')}]{escape_rich_text(subtitle.text)}  {repository}[/]"
    if title:
        first_line = f"{status} [bold]{escape_rich_text(title)}[/]"
    else:
        # Title moves to the preview pane while the body is visible
        first_line = f"{status} {meta}"
        meta = ""
    lines = [first_line]
    if meta:
        lines.append(meta)
    lines.append(render_accessories(presenter, now))
    return "\n".join(lines)


def row_tooltips(presenter: IssueRowPresenter) -> list[str]:
    """Collect the row's tooltip texts (status, repository, accessories)."""
    tooltips = [presenter.icon().tooltip, presenter.subtitle().tooltip]
    tooltips.extend(accessory.tooltip for accessory in presenter.accessories())
    return [tooltip for tooltip in tooltips if tooltip]


__all__ = [
    "icon_glyph",
    "render_accessories",
    "render_issue_option",
    "row_tooltips",
    "set_ascii_icons",
]
