"""Row presenter: one issue row's accessories, actions and preview state.

The presenter combines the issue's context key, its (possibly still
resolving) preference record, the display projections, and whether the row
comes from the recents cache. It owns the row's preview state machine::

    HIDDEN --show_preview--> VISIBLE --hide_preview--> HIDDEN

Both transitions are disabled for recents rows (``from_cache=True``).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum

from issue_browser.action_messages import (
    build_recents_added_message,
    build_recents_removed_message,
)
from issue_browser.context_keys import ContextKey, build_context_key
from issue_browser.models import ENTITY_ISSUE, Issue, PreferenceRecord
from issue_browser.preferences import PreferenceStore
from issue_browser.projection import format_updated_at, project_author, project_status
from issue_browser.services.interfaces import NotificationStyle, RowServices

logger = logging.getLogger(__name__)

ACTION_OPEN_IN_WORKSPACE = "open_in_workspace"
ACTION_VIEW_IN_BROWSER = "view_in_browser"
ACTION_SHOW_PREVIEW = "show_preview"
ACTION_HIDE_PREVIEW = "hide_preview"
ACTION_ADD_TO_RECENTS = "add_to_recents"
ACTION_REMOVE_FROM_RECENTS = "remove_from_recents"
ACTION_CONFIGURE_WORKSPACE = "configure_workspace"

ICON_COMMENTS = "comments"
ICON_EDITOR_CLASS = "editor-class"


class PreviewState(Enum):
    """Whether the row's body is shown in the preview pane."""

    HIDDEN = "hidden"
    VISIBLE = "visible"


@dataclass(slots=True, frozen=True)
class RowAction:
    """An action offered for a row."""

    id: str
    title: str
    shortcut: str | None = None


@dataclass(slots=True, frozen=True)
class Accessory:
    """One element of the row's accessory strip."""

    kind: str  # "comments" | "updated" | "editor" | "author"
    text: str = ""
    icon: str = ""
    tooltip: str = ""
    date: datetime | None = None
    color: str = "text"


@dataclass(slots=True, frozen=True)
class RowLabel:
    """Text with an optional tooltip (row subtitle and status icon)."""

    text: str
    tooltip: str = ""
    color: str = "text"


class ActionUnavailableError(ValueError):
    """Raised when an action is not offered for the row."""


# (action, offered for live rows, offered for recents rows), in panel order
_ACTION_TABLE: list[tuple[RowAction, bool, bool]] = [
    (RowAction(ACTION_OPEN_IN_WORKSPACE, "Open Issue in Gitpod", "g"), True, True),
    (RowAction(ACTION_VIEW_IN_BROWSER, "View Issue in GitHub", "o"), True, True),
    (RowAction(ACTION_SHOW_PREVIEW, "Show Issue Preview", "right"), True, False),
    (RowAction(ACTION_HIDE_PREVIEW, "Hide Issue Preview", "left"), True, False),
    (RowAction(ACTION_ADD_TO_RECENTS, "Add Issue to Recents", "r"), True, False),
    (RowAction(ACTION_REMOVE_FROM_RECENTS, "Remove from Recents", "d"), False, True),
    (RowAction(ACTION_CONFIGURE_WORKSPACE, "Configure Workspace", "w"), True, True),
]

IssueHook = Callable[[Issue], None]
ChangeHook = Callable[["IssueRowPresenter"], None]


class IssueRowPresenter:
    """Compose display state and legal actions for a single issue row."""

    def __init__(
        self,
        issue: Issue,
        *,
        preference_store: PreferenceStore,
        services: RowServices,
        from_cache: bool = False,
        visit_issue: IssueHook | None = None,
        remove_issue: IssueHook | None = None,
        on_change: ChangeHook | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self.issue = issue
        self.from_cache = from_cache
        self.key: ContextKey = build_context_key(ENTITY_ISSUE, issue.repository, issue.title)
        self._store = preference_store
        self._services = services
        self._visit_issue = visit_issue
        self._remove_issue = remove_issue
        self._on_change = on_change
        self._tz = tz
        self._state = PreviewState.HIDDEN
        self._unsubscribe: Callable[[], None] | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def preview_state(self) -> PreviewState:
        return self._state

    @property
    def body_visible(self) -> bool:
        return self._state is PreviewState.VISIBLE

    @property
    def preferences(self) -> PreferenceRecord:
        """Current record for the row: cached, or the defaults while resolving."""
        return self._store.peek(self.key)

    def show_preview(self) -> bool:
        """Move HIDDEN -> VISIBLE. Returns True if the state changed."""
        return self._transition(PreviewState.VISIBLE)

    def hide_preview(self) -> bool:
        """Move VISIBLE -> HIDDEN. Returns True if the state changed."""
        return self._transition(PreviewState.HIDDEN)

    def _transition(self, target: PreviewState) -> bool:
        if self.from_cache or self._state is target:
            return False
        self._state = target
        self._changed()
        return True

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def accessories(self) -> list[Accessory]:
        """Return the accessory strip, highest priority first."""
        accessories: list[Accessory] = []
        if self.issue.comment_count > 0 and not self.body_visible:
            accessories.append(
                Accessory(kind="comments", text=str(self.issue.comment_count), icon=ICON_COMMENTS)
            )

        updated = format_updated_at(self.issue, self._tz)
        accessories.append(
            Accessory(kind="updated", date=updated.display_date, tooltip=updated.tooltip)
        )

        preferences = self.preferences
        accessories.append(
            Accessory(
                kind="editor",
                text="L" if preferences.is_large else "S",
                icon=ICON_EDITOR_CLASS,
                tooltip=(
                    f"Editor: {preferences.preferred_editor}, "
                    f"Class: {preferences.preferred_editor_class}"
                ),
                color="yellow",
            )
        )

        author = project_author(self.issue)
        accessories.append(
            Accessory(
                kind="author",
                text=author.text,
                icon=author.icon,
                tooltip=f"Author: {author.text}",
                color=author.color,
            )
        )
        return accessories

    def title(self) -> str:
        """Row title; empty while the preview pane shows the full issue."""
        return "" if self.body_visible else self.issue.title

    def subtitle(self) -> RowLabel:
        return RowLabel(
            text=f"#{self.issue.number}",
            tooltip=f"Repository: {self.issue.repository}",
        )

    def icon(self) -> RowLabel:
        status = project_status(self.issue)
        return RowLabel(text=status.icon, tooltip=f"Status: {status.text}", color=status.color)

    def keywords(self) -> list[str]:
        """Extra search terms: the issue number and the author's login."""
        keywords = [str(self.issue.number)]
        if self.issue.author is not None and self.issue.author.login:
            keywords.append(self.issue.author.login)
        return keywords

    def detail_markdown(self) -> str:
        return f"## {self.issue.title}\n\n {self.issue.body}"

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def actions(self) -> list[RowAction]:
        """Return the actions offered for this row, in panel order."""
        return [
            action
            for action, live, cached in _ACTION_TABLE
            if (cached if self.from_cache else live)
        ]

    def is_available(self, action_id: str) -> bool:
        return any(action.id == action_id for action in self.actions())

    async def perform(self, action_id: str) -> None:
        """Run an offered action.

        Raises ActionUnavailableError for actions this row does not offer.
        Failures of external effects (browser, workspace launch) propagate.
        """
        if not self.is_available(action_id):
            raise ActionUnavailableError(
                f"{action_id!r} is not available for issue #{self.issue.number}"
            )
        logger.debug("Row action %s on %s#%d", action_id, self.issue.repository, self.issue.number)
        if action_id == ACTION_OPEN_IN_WORKSPACE:
            self._visit()
            await self._services.launcher.open_workspace(self.issue.url, self.key)
        elif action_id == ACTION_VIEW_IN_BROWSER:
            self._visit()
            self._services.browser.open(self.issue.url)
        elif action_id == ACTION_SHOW_PREVIEW:
            self.show_preview()
        elif action_id == ACTION_HIDE_PREVIEW:
            self.hide_preview()
        elif action_id == ACTION_ADD_TO_RECENTS:
            self._visit()
            self._services.notifier.notify(
                build_recents_added_message(self.issue.number), NotificationStyle.SUCCESS
            )
        elif action_id == ACTION_REMOVE_FROM_RECENTS:
            if self._remove_issue is not None:
                self._remove_issue(self.issue)
            self._services.notifier.notify(
                build_recents_removed_message(self.issue.number), NotificationStyle.SUCCESS
            )
        elif action_id == ACTION_CONFIGURE_WORKSPACE:
            self._services.configuration.open(
                self.issue.repository,
                ENTITY_ISSUE,
                self.issue.title,
                self.revalidate,
            )

    def _visit(self) -> None:
        if self._visit_issue is not None:
            self._visit_issue(self.issue)

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    def bind(self) -> None:
        """Subscribe to republished preferences for this row's key."""
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(self.key, self._on_preferences)

    def unbind(self) -> None:
        """Stop receiving preference updates (row left the list)."""
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    def _on_preferences(self, _record: PreferenceRecord) -> None:
        self._changed()

    async def load_preferences(self) -> PreferenceRecord:
        """Resolve this row's preferences; subscribers are notified."""
        return await self._store.resolve(self.key)

    async def revalidate(self) -> PreferenceRecord:
        """Re-read this row's preferences after they were edited."""
        return await self._store.revalidate(self.key)


__all__ = [
    "ACTION_ADD_TO_RECENTS",
    "ACTION_CONFIGURE_WORKSPACE",
    "ACTION_HIDE_PREVIEW",
    "ACTION_OPEN_IN_WORKSPACE",
    "ACTION_REMOVE_FROM_RECENTS",
    "ACTION_SHOW_PREVIEW",
    "ACTION_VIEW_IN_BROWSER",
    "ICON_COMMENTS",
    "ICON_EDITOR_CLASS",
    "Accessory",
    "ActionUnavailableError",
    "IssueRowPresenter",
    "PreviewState",
    "RowAction",
    "RowLabel",
]
