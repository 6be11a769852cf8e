"""Display-only facets derived from an Issue (author, status, timestamps).

Every function here is pure and total: missing or unknown data maps to a
fallback badge instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo

from issue_browser.models import Issue

# Icon names resolved to glyphs by the list widget (see widgets.listing)
ICON_ISSUE_OPEN = "issue-open"
ICON_ISSUE_REOPENED = "issue-reopened"
ICON_ISSUE_CLOSED = "issue-closed"
ICON_ISSUE_SKIPPED = "issue-skipped"
ICON_ISSUE_UNKNOWN = "issue-unknown"
ICON_UNKNOWN_AUTHOR = "unknown-author"


@dataclass(slots=True, frozen=True)
class Badge:
    """An icon + label pair. ``color`` is a THEME_COLORS key."""

    icon: str
    text: str
    color: str = "text"


@dataclass(slots=True, frozen=True)
class UpdatedAt:
    """Timestamp accessory: the raw instant plus a long-form tooltip."""

    display_date: datetime
    tooltip: str


UNKNOWN_AUTHOR = Badge(icon=ICON_UNKNOWN_AUTHOR, text="Unknown author", color="muted")
UNKNOWN_STATUS = Badge(icon=ICON_ISSUE_UNKNOWN, text="Unknown status", color="muted")

# (state, state_reason) -> badge; a None reason matches any reason not listed
_STATUS_TABLE: dict[tuple[str, str | None], Badge] = {
    ("OPEN", None): Badge(ICON_ISSUE_OPEN, "Open", "green"),
    ("OPEN", "REOPENED"): Badge(ICON_ISSUE_REOPENED, "Reopened", "green"),
    ("CLOSED", None): Badge(ICON_ISSUE_CLOSED, "Closed as completed", "purple"),
    ("CLOSED", "NOT_PLANNED"): Badge(ICON_ISSUE_SKIPPED, "Closed as not planned", "muted"),
}


def project_author(issue: Issue) -> Badge:
    """Return the author badge, or UNKNOWN_AUTHOR for ghost/missing accounts."""
    author = issue.author
    if author is None or not author.login:
        return UNKNOWN_AUTHOR
    text = f"{author.name} ({author.login})" if author.name else author.login
    return Badge(icon=author.login[0].upper(), text=text, color="accent")


def project_status(issue: Issue) -> Badge:
    """Map the issue lifecycle state to a fixed badge."""
    state = (issue.state or "").upper()
    reason = (issue.state_reason or "").upper() or None
    badge = _STATUS_TABLE.get((state, reason))
    if badge is None:
        badge = _STATUS_TABLE.get((state, None))
    return badge or UNKNOWN_STATUS


def format_long_date(moment: datetime) -> str:
    """Render ``Monday 15 January 2024 at 09:30`` (24h clock)."""
    return f"{moment:%A} {moment.day} {moment:%B %Y} at {moment:%H:%M}"


def format_updated_at(issue: Issue, tz: tzinfo | None = None) -> UpdatedAt:
    """Build the timestamp accessory.

    The tooltip is rendered in ``tz`` (local time when omitted); the
    display date stays the raw instant for the row widget to shorten.
    """
    local = issue.updated_at.astimezone(tz)
    return UpdatedAt(
        display_date=issue.updated_at,
        tooltip=f"Updated: {format_long_date(local)}",
    )


_RELATIVE_STEPS: list[tuple[int, str]] = [
    (365 * 86400, "y"),
    (30 * 86400, "mo"),
    (7 * 86400, "w"),
    (86400, "d"),
    (3600, "h"),
    (60, "m"),
]


def format_relative_date(moment: datetime, now: datetime) -> str:
    """Return a compact age label such as ``5m``, ``3d`` or ``2y``.

    Future timestamps (clock skew) render as ``now``.
    """
    seconds = int((now - moment).total_seconds())
    for step, suffix in _RELATIVE_STEPS:
        if seconds >= step:
            return f"{seconds // step}{suffix}"
    return "now"


__all__ = [
    "ICON_ISSUE_CLOSED",
    "ICON_ISSUE_OPEN",
    "ICON_ISSUE_REOPENED",
    "ICON_ISSUE_SKIPPED",
    "ICON_ISSUE_UNKNOWN",
    "ICON_UNKNOWN_AUTHOR",
    "UNKNOWN_AUTHOR",
    "UNKNOWN_STATUS",
    "Badge",
    "UpdatedAt",
    "format_long_date",
    "format_relative_date",
    "format_updated_at",
    "project_author",
    "project_status",
]
