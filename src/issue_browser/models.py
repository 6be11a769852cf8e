"""Data models and constants for the issue browser application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

# Application identity, the single source of truth for platformdirs config paths
CONFIG_APP_NAME = "issue-browser"

# Entity types understood by the workspace launcher
ENTITY_ISSUE = "Issue"
ENTITY_REPOSITORY = "Repository"

# Gitpod workspace classes
EDITOR_CLASS_SMALL = "g1-standard"
EDITOR_CLASS_LARGE = "g1-large"
EDITOR_CLASSES = (EDITOR_CLASS_SMALL, EDITOR_CLASS_LARGE)

DEFAULT_EDITOR = "code"
DEFAULT_EDITOR_CLASS = EDITOR_CLASS_SMALL
DEFAULT_GITPOD_BASE_URL = "https://gitpod.io"
DEFAULT_THEME_NAME = "gitpod-dark"

# Recents persistence cap (oldest entries are dropped on save/load)
MAX_RECENT_ISSUES = 30

VIEW_LIVE = "live"
VIEW_RECENTS = "recents"
VIEW_MODES = (VIEW_LIVE, VIEW_RECENTS)


@dataclass(slots=True, frozen=True)
class IssueAuthor:
    """GitHub account that opened an issue."""

    login: str
    name: str = ""
    avatar_url: str = ""


@dataclass(slots=True, frozen=True)
class Issue:
    """Represents a GitHub issue as supplied by the issue source."""

    id: str
    number: int
    title: str
    url: str
    repository: str  # nameWithOwner, e.g. "gitpod-io/gitpod"
    updated_at: datetime
    body: str = ""
    author: IssueAuthor | None = None
    comment_count: int = 0
    state: str = "OPEN"  # "OPEN" | "CLOSED"
    state_reason: str | None = None  # "COMPLETED" | "NOT_PLANNED" | "REOPENED"


@dataclass(slots=True, frozen=True)
class PreferenceRecord:
    """Saved editor choice and workspace class for a context."""

    preferred_editor: str = DEFAULT_EDITOR
    preferred_editor_class: str = DEFAULT_EDITOR_CLASS

    @property
    def is_large(self) -> bool:
        return self.preferred_editor_class == EDITOR_CLASS_LARGE


@dataclass(slots=True)
class SessionState:
    """State to restore on next run (view, filter, scroll position)."""

    view: str = VIEW_LIVE
    current_filter: str = ""
    scroll_index: int = 0

    def __post_init__(self) -> None:
        """Fall back to the live view for unknown view names."""
        if self.view not in VIEW_MODES:
            self.view = VIEW_LIVE


@dataclass(slots=True)
class UserConfig:
    """Complete user configuration including session state and recents."""

    recent_issues: list[Issue] = field(default_factory=list)  # most-recent-first
    session: SessionState = field(default_factory=SessionState)
    default_editor: str = DEFAULT_EDITOR
    default_editor_class: str = DEFAULT_EDITOR_CLASS
    gitpod_base_url: str = DEFAULT_GITPOD_BASE_URL
    ascii_icons: bool = False
    theme_name: str = DEFAULT_THEME_NAME
    version: int = 1
    config_defaulted: bool = False  # runtime only: set when a corrupt file was replaced

    def default_preferences(self) -> PreferenceRecord:
        return PreferenceRecord(
            preferred_editor=self.default_editor,
            preferred_editor_class=self.default_editor_class,
        )


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_EDITOR",
    "DEFAULT_EDITOR_CLASS",
    "DEFAULT_GITPOD_BASE_URL",
    "DEFAULT_THEME_NAME",
    "EDITOR_CLASSES",
    "EDITOR_CLASS_LARGE",
    "EDITOR_CLASS_SMALL",
    "ENTITY_ISSUE",
    "ENTITY_REPOSITORY",
    "MAX_RECENT_ISSUES",
    "VIEW_LIVE",
    "VIEW_MODES",
    "VIEW_RECENTS",
    "Issue",
    "IssueAuthor",
    "PreferenceRecord",
    "SessionState",
    "UserConfig",
]
