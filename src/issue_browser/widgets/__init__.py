"""Widget classes and row rendering helpers."""

from issue_browser.widgets.details import EMPTY_PREVIEW_TEXT, IssueDetails
from issue_browser.widgets.listing import (
    icon_glyph,
    render_accessories,
    render_issue_option,
    row_tooltips,
    set_ascii_icons,
)

__all__ = [
    "EMPTY_PREVIEW_TEXT",
    "IssueDetails",
    "icon_glyph",
    "render_accessories",
    "render_issue_option",
    "row_tooltips",
    "set_ascii_icons",
]
