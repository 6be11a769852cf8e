"""Textual application: browse issues, preview them and open workspaces.

Each visible row is backed by an IssueRowPresenter. The app owns the
RecentsCache, the PreferenceStore and the row services, renders presenters
into an OptionList, and forwards key bindings to the highlighted row's
actions. Bindings a row does not offer are hidden via ``check_action``.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from textual import on
from textual.app import App, ComposeResult, ScreenStackError
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widgets import Footer, Header, Input, Label, OptionList
from textual.widgets.option_list import Option, OptionDoesNotExist

from issue_browser.action_messages import (
    build_actionable_error,
    build_preferences_saved_message,
)
from issue_browser.config import save_config
from issue_browser.context_keys import ContextKey, build_context_key, repository_key
from issue_browser.modals import ContextPreferencesModal, PreferencesResult
from issue_browser.models import (
    MAX_RECENT_ISSUES,
    VIEW_LIVE,
    VIEW_MODES,
    VIEW_RECENTS,
    Issue,
    PreferenceRecord,
    SessionState,
    UserConfig,
)
from issue_browser.preferences import PreferenceStore, get_preferences_db_path
from issue_browser.presenter import (
    ACTION_ADD_TO_RECENTS,
    ACTION_CONFIGURE_WORKSPACE,
    ACTION_HIDE_PREVIEW,
    ACTION_OPEN_IN_WORKSPACE,
    ACTION_REMOVE_FROM_RECENTS,
    ACTION_SHOW_PREVIEW,
    ACTION_VIEW_IN_BROWSER,
    ActionUnavailableError,
    IssueRowPresenter,
)
from issue_browser.query import escape_rich_text, filter_rows
from issue_browser.recents import RecentsCache
from issue_browser.services.interfaces import (
    NotificationStyle,
    RowServices,
    build_default_row_services,
)
from issue_browser.themes import TEXTUAL_THEMES, THEME_COLORS, THEME_NAMES, apply_theme
from issue_browser.ui_constants import APP_BINDINGS, APP_CSS
from issue_browser.widgets import IssueDetails, render_issue_option, row_tooltips, set_ascii_icons

logger = logging.getLogger(__name__)

SEARCH_DEBOUNCE_DELAY = 0.3  # seconds

ROW_ACTION_IDS = frozenset(
    {
        ACTION_OPEN_IN_WORKSPACE,
        ACTION_VIEW_IN_BROWSER,
        ACTION_SHOW_PREVIEW,
        ACTION_HIDE_PREVIEW,
        ACTION_ADD_TO_RECENTS,
        ACTION_REMOVE_FROM_RECENTS,
        ACTION_CONFIGURE_WORKSPACE,
    }
)

# action id -> (what failed, next step) for the error boundary
_ACTION_ERROR_COPY: dict[str, tuple[str, str]] = {
    ACTION_OPEN_IN_WORKSPACE: (
        "open the issue in Gitpod",
        "check gitpod_base_url in config.json, or press o to open the issue in GitHub",
    ),
    ACTION_VIEW_IN_BROWSER: (
        "open the issue in your browser",
        "set the BROWSER environment variable and try again",
    ),
}

_SEVERITY_BY_STYLE = {
    NotificationStyle.SUCCESS: "information",
    NotificationStyle.INFO: "information",
    NotificationStyle.FAILURE: "error",
}


def build_list_empty_message(*, query: str, view: str) -> str:
    """Build the placeholder shown when the current list has no rows."""
    if query:
        return (
            f"[dim italic]No issues match [bold]{escape_rich_text(query)}[/bold].[/]\n"
            "[dim]Next step: press Esc to clear the filter.[/]"
        )
    if view == VIEW_RECENTS:
        return (
            "[dim italic]No recent issues yet.[/]\n"
            "[dim]Next step: press v for the live list and r to add an issue.[/]"
        )
    return (
        "[dim italic]No issues loaded.[/]\n"
        "[dim]Next step: press v for recents or restart with -i issues.json.[/]"
    )


class AppNotifier:
    """Notifier adapter that maps notification styles onto Textual toasts."""

    def __init__(self, app: App) -> None:
        self._app = app

    def notify(self, title: str, style: NotificationStyle) -> None:
        self._app.notify(title, severity=_SEVERITY_BY_STYLE[style])


class ModalConfigurationView:
    """ConfigurationView adapter backed by ContextPreferencesModal."""

    def __init__(self, app: IssueBrowser) -> None:
        self._app = app

    def open(
        self,
        repository: str,
        entity_type: str,
        context: str,
        revalidate: Callable[[], Awaitable[Any]],
    ) -> None:
        store = self._app.preference_store
        current = store.peek(build_context_key(entity_type, repository, context))

        def on_result(result: PreferencesResult | None) -> None:
            if result is None:
                return
            if result.repository_wide:
                key = repository_key(repository)
            else:
                key = build_context_key(entity_type, repository, context)
            self._app._track_task(
                self._app._save_preferences(key, result.record, revalidate, context or repository)
            )

        self._app.push_screen(ContextPreferencesModal(repository, context, current), on_result)


class IssueBrowser(App):
    """A TUI application to browse GitHub issues and open them in Gitpod."""

    TITLE = "Issue Browser"

    CSS = APP_CSS

    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        issues: list[Issue],
        config: UserConfig | None = None,
        restore_session: bool = True,
        ascii_icons: bool = False,
        start_view: str | None = None,
        preference_store: PreferenceStore | None = None,
        row_services: RowServices | None = None,
        save_config_fn: Callable[[UserConfig], bool] = save_config,
    ) -> None:
        super().__init__()
        # Register all Textual themes so $th-* CSS variables resolve before compose()
        for textual_theme in TEXTUAL_THEMES.values():
            self.register_theme(textual_theme)
        self.all_issues = issues
        self._config = config or UserConfig()
        self._restore_session = restore_session
        self._save_config_fn = save_config_fn
        self._config.theme_name = apply_theme(self._config.theme_name)
        self.theme = self._config.theme_name

        self._view = VIEW_LIVE
        if restore_session and self._config.session.view in VIEW_MODES:
            self._view = self._config.session.view
        if start_view in VIEW_MODES:
            self._view = start_view

        self._recents = RecentsCache(self._config.recent_issues)
        self._store = preference_store or PreferenceStore(
            get_preferences_db_path(), defaults=self._config.default_preferences()
        )
        self._services = row_services or build_default_row_services(
            self._store,
            base_url=self._config.gitpod_base_url,
            notifier=AppNotifier(self),
            configuration=ModalConfigurationView(self),
        )

        self._presenters: list[IssueRowPresenter] = []
        self.filtered_rows: list[IssueRowPresenter] = []
        self._row_index: dict[str, int] = {}
        self._search_timer: Timer | None = None
        self._pending_query: str = ""
        self._render_now: datetime = datetime.now(UTC)

        # Background task tracking (prevent GC of fire-and-forget tasks)
        self._background_tasks: set[asyncio.Task[Any]] = set()

        set_ascii_icons(ascii_icons or self._config.ascii_icons)

    # ------------------------------------------------------------------
    # Public state
    # ------------------------------------------------------------------

    @property
    def view(self) -> str:
        return self._view

    @property
    def recents(self) -> RecentsCache:
        return self._recents

    @property
    def preference_store(self) -> PreferenceStore:
        return self._store

    @property
    def presenters(self) -> list[IssueRowPresenter]:
        """All rows of the current view, before filtering."""
        return self._presenters

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-container"):
            with Vertical(id="left-pane"):
                yield Label("", id="list-header")
                with Vertical(id="search-container"):
                    yield Input(placeholder=" Filter: title, #number or author", id="search-input")
                yield OptionList(id="issue-list")
                yield Label("", id="status-bar")
            with Vertical(id="right-pane"):
                with VerticalScroll(id="details-scroll"):
                    yield IssueDetails(id="issue-details")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted. Restores session state if enabled."""
        if self._config.config_defaulted:
            self.notify(
                "Config file was corrupt and has been backed up. Using defaults.",
                severity="warning",
                timeout=8,
            )

        self.sub_title = f"{len(self.all_issues)} issues loaded"

        session = self._config.session
        if self._restore_session and session.current_filter:
            self._get_search_input_widget().value = session.current_filter
            self._pending_query = session.current_filter
        self._rebuild_rows()
        if self._restore_session:
            option_list = self._get_issue_list_widget()
            if self.filtered_rows:
                option_list.highlighted = min(session.scroll_index, len(self.filtered_rows) - 1)

        logger.debug(
            "App mounted: %d issues, %d recents, view=%s",
            len(self.all_issues),
            len(self._recents),
            self._view,
        )
        self._get_issue_list_widget().focus()

    async def on_unmount(self) -> None:
        """Save session state, drop subscriptions and cancel pending loads."""
        self._save_session_state()

        timer = self._search_timer
        self._search_timer = None
        if timer is not None:
            timer.stop()

        for presenter in self._presenters:
            presenter.unbind()

        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=0.5)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()

    def _track_task(self, coro: Any) -> asyncio.Task[Any]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[Any]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    # ------------------------------------------------------------------
    # Widget lookups
    # ------------------------------------------------------------------

    def _get_issue_list_widget(self) -> OptionList:
        return self.query_one("#issue-list", OptionList)

    def _get_search_input_widget(self) -> Input:
        return self.query_one("#search-input", Input)

    def _get_search_container_widget(self) -> Vertical:
        return self.query_one("#search-container", Vertical)

    def _get_issue_details_widget(self) -> IssueDetails:
        return self.query_one("#issue-details", IssueDetails)

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def _issues_for_view(self) -> list[Issue]:
        if self._view == VIEW_RECENTS:
            return self._recents.list()
        return list(self.all_issues)

    def _build_presenter(self, issue: Issue) -> IssueRowPresenter:
        return IssueRowPresenter(
            issue,
            preference_store=self._store,
            services=self._services,
            from_cache=self._view == VIEW_RECENTS,
            visit_issue=self._visit_issue,
            remove_issue=self._remove_issue,
            on_change=self._on_presenter_changed,
        )

    def _rebuild_rows(self, keep_issue_id: str | None = None) -> None:
        """Recreate presenters for the current view and re-apply the filter."""
        for presenter in self._presenters:
            presenter.unbind()
        self._presenters = [self._build_presenter(issue) for issue in self._issues_for_view()]
        for presenter in self._presenters:
            presenter.bind()
            self._track_task(self._load_row_preferences(presenter))
        self._apply_filter(self._pending_query, keep_issue_id=keep_issue_id)

    async def _load_row_preferences(self, presenter: IssueRowPresenter) -> None:
        await presenter.load_preferences()

    def _apply_filter(self, query: str, keep_issue_id: str | None = None) -> None:
        self._pending_query = query
        self.filtered_rows = filter_rows(query, self._presenters)
        self._row_index = {row.issue.id: i for i, row in enumerate(self.filtered_rows)}
        self._refresh_list_view(keep_issue_id)
        self._update_list_header()
        self._update_status_bar()

    def _refresh_list_view(self, keep_issue_id: str | None = None) -> None:
        """Refresh the option list with the current filtered rows."""
        option_list = self._get_issue_list_widget()
        option_list.clear_options()
        if self.filtered_rows:
            self._render_now = datetime.now(UTC)
            option_list.add_options(
                [
                    Option(render_issue_option(row, self._render_now), id=row.issue.id)
                    for row in self.filtered_rows
                ]
            )
            index = self._row_index.get(keep_issue_id, 0) if keep_issue_id else 0
            option_list.highlighted = min(index, len(self.filtered_rows) - 1)
        else:
            option_list.add_option(
                Option(
                    build_list_empty_message(query=self._pending_query.strip(), view=self._view),
                    disabled=True,
                )
            )
        self._refresh_detail_pane()
        self.refresh_bindings()

    def _update_option_at_index(self, index: int) -> None:
        """Re-render a single option at the given index."""
        if index < 0 or index >= len(self.filtered_rows):
            return
        markup = render_issue_option(self.filtered_rows[index], self._render_now)
        try:
            self._get_issue_list_widget().replace_option_prompt_at_index(index, markup)
        except (NoMatches, OptionDoesNotExist):
            pass

    def _on_presenter_changed(self, presenter: IssueRowPresenter) -> None:
        index = self._row_index.get(presenter.issue.id)
        if index is None or self.filtered_rows[index] is not presenter:
            return
        self._update_option_at_index(index)
        if presenter is self.current_presenter():
            self._refresh_detail_pane()
            self._update_status_bar()
            self.refresh_bindings()

    def current_presenter(self) -> IssueRowPresenter | None:
        """Return the highlighted row's presenter."""
        try:
            option_list = self._get_issue_list_widget()
        except NoMatches:
            return None
        idx = option_list.highlighted
        if idx is not None and 0 <= idx < len(self.filtered_rows):
            return self.filtered_rows[idx]
        return None

    def _refresh_detail_pane(self) -> None:
        """Show the preview pane only while the highlighted row is VISIBLE."""
        try:
            details = self._get_issue_details_widget()
            right_pane = self.query_one("#right-pane")
        except NoMatches:
            return
        presenter = self.current_presenter()
        if presenter is not None and presenter.body_visible:
            details.show_issue(presenter)
            right_pane.add_class("visible")
        else:
            details.show_issue(None)
            right_pane.remove_class("visible")

    def _update_list_header(self) -> None:
        label = "Recents" if self._view == VIEW_RECENTS else "Issues"
        total = len(self._presenters)
        if self._pending_query.strip():
            count = f"{len(self.filtered_rows)}/{total}"
        else:
            count = f"{total} total"
        try:
            self.query_one("#list-header", Label).update(f" {label} ({count})")
        except NoMatches:
            pass

    def _update_status_bar(self) -> None:
        presenter = self.current_presenter()
        if presenter is None:
            text = f"[{THEME_COLORS['muted']}]No issue selected[/]"
        else:
            text = escape_rich_text(" · ".join(row_tooltips(presenter)))
        try:
            self.query_one("#status-bar", Label).update(text)
        except NoMatches:
            pass

    @on(OptionList.OptionHighlighted, "#issue-list")
    def on_issue_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        self._refresh_detail_pane()
        self._update_status_bar()
        self.refresh_bindings()

    # ------------------------------------------------------------------
    # Recents
    # ------------------------------------------------------------------

    def _visit_issue(self, issue: Issue) -> None:
        self._recents.add(issue)
        self._persist_recents()
        if self._view == VIEW_RECENTS:
            self._rebuild_rows(keep_issue_id=issue.id)

    def _remove_issue(self, issue: Issue) -> None:
        index = self._row_index.get(issue.id, 0)
        self._recents.remove(issue)
        self._persist_recents()
        if self._view == VIEW_RECENTS:
            self._rebuild_rows()
            if self.filtered_rows:
                self._get_issue_list_widget().highlighted = min(index, len(self.filtered_rows) - 1)

    def _persist_recents(self) -> None:
        self._config.recent_issues = self._recents.list()[:MAX_RECENT_ISSUES]
        self._save_config_or_warn("recent issues")

    def _save_config_or_warn(self, context: str) -> bool:
        """Save config and notify the user on failure.

        Returns True on success, False on failure.
        """
        if not self._save_config_fn(self._config):
            self.notify(f"Failed to save {context}.", severity="warning")
            return False
        return True

    def _save_session_state(self) -> None:
        """Save current session state to config.

        Handles the case where DOM widgets may already be destroyed during unmount.
        """
        try:
            option_list = self._get_issue_list_widget()
            search_input = self._get_search_input_widget()
            self._config.session = SessionState(
                view=self._view,
                current_filter=search_input.value.strip(),
                scroll_index=option_list.highlighted if option_list.highlighted is not None else 0,
            )
        except (NoMatches, ScreenStackError):
            self._config.session = SessionState(view=self._view)

        if not self._save_config_fn(self._config):
            logger.warning("Failed to save session state to config file")

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    async def _save_preferences(
        self,
        key: ContextKey,
        record: PreferenceRecord,
        revalidate: Callable[[], Awaitable[Any]],
        label: str,
    ) -> None:
        if not await self._store.save(key, record):
            self.notify(
                build_actionable_error(
                    "save workspace preferences",
                    why="the preferences database could not be written",
                    next_step="check permissions on the config directory and try again",
                ),
                severity="error",
                timeout=8,
            )
            return
        if key.is_repository_wide:
            await self._store.revalidate(key)
        await revalidate()
        self.notify(build_preferences_saved_message(label), title="Workspace")

    # ------------------------------------------------------------------
    # Row actions
    # ------------------------------------------------------------------

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Hide row bindings the highlighted row does not offer."""
        if action not in ROW_ACTION_IDS:
            return True
        presenter = self.current_presenter()
        return presenter is not None and presenter.is_available(action)

    async def _run_row_action(self, action_id: str) -> None:
        """Perform a row action with an error boundary around external effects."""
        presenter = self.current_presenter()
        if presenter is None:
            return
        try:
            await presenter.perform(action_id)
        except ActionUnavailableError as e:
            logger.debug("Ignoring unavailable action: %s", e)
            self.notify("That action is not available for this issue.", severity="warning")
        except (webbrowser.Error, OSError, ValueError) as e:
            logger.warning("Row action %s failed", action_id, exc_info=True)
            what, next_step = _ACTION_ERROR_COPY.get(
                action_id, ("complete the action", "try again")
            )
            self.notify(
                build_actionable_error(what, why=str(e), next_step=next_step),
                severity="error",
                timeout=8,
            )

    async def action_open_in_workspace(self) -> None:
        await self._run_row_action(ACTION_OPEN_IN_WORKSPACE)

    async def action_view_in_browser(self) -> None:
        await self._run_row_action(ACTION_VIEW_IN_BROWSER)

    async def action_show_preview(self) -> None:
        await self._run_row_action(ACTION_SHOW_PREVIEW)

    async def action_hide_preview(self) -> None:
        await self._run_row_action(ACTION_HIDE_PREVIEW)

    async def action_add_to_recents(self) -> None:
        await self._run_row_action(ACTION_ADD_TO_RECENTS)

    async def action_remove_from_recents(self) -> None:
        await self._run_row_action(ACTION_REMOVE_FROM_RECENTS)

    async def action_configure_workspace(self) -> None:
        await self._run_row_action(ACTION_CONFIGURE_WORKSPACE)

    # ------------------------------------------------------------------
    # Navigation, search and view
    # ------------------------------------------------------------------

    def action_toggle_view(self) -> None:
        """Switch between the live list and the recents list."""
        self._view = VIEW_RECENTS if self._view == VIEW_LIVE else VIEW_LIVE
        logger.debug("Switched to %s view", self._view)
        self._rebuild_rows()

    def action_cursor_down(self) -> None:
        self._get_issue_list_widget().action_cursor_down()

    def action_cursor_up(self) -> None:
        self._get_issue_list_widget().action_cursor_up()

    def action_toggle_search(self) -> None:
        container = self._get_search_container_widget()
        if container.has_class("visible"):
            container.remove_class("visible")
            self._get_issue_list_widget().focus()
        else:
            container.add_class("visible")
            self._get_search_input_widget().focus()

    def action_cancel_search(self) -> None:
        container = self._get_search_container_widget()
        search_input = self._get_search_input_widget()
        if not container.has_class("visible") and not search_input.value:
            return
        container.remove_class("visible")
        search_input.value = ""
        self._apply_filter("")
        self._get_issue_list_widget().focus()

    @on(Input.Submitted, "#search-input")
    def on_search_submitted(self, event: Input.Submitted) -> None:
        self._cancel_search_timer()
        self._apply_filter(event.value)
        self._get_search_container_widget().remove_class("visible")
        self._get_issue_list_widget().focus()

    @on(Input.Changed, "#search-input")
    def on_search_changed(self, event: Input.Changed) -> None:
        """Handle search input change with debouncing."""
        self._pending_query = event.value
        self._cancel_search_timer()
        self._search_timer = self.set_timer(SEARCH_DEBOUNCE_DELAY, self._debounced_filter)

    def _cancel_search_timer(self) -> None:
        # Atomic swap: capture and clear before stopping
        timer = self._search_timer
        self._search_timer = None
        if timer is not None:
            timer.stop()

    def _debounced_filter(self) -> None:
        self._search_timer = None
        self._apply_filter(self._pending_query)

    def action_cycle_theme(self) -> None:
        """Cycle through available color themes."""
        try:
            idx = THEME_NAMES.index(self._config.theme_name)
        except ValueError:
            idx = 0
        name = apply_theme(THEME_NAMES[(idx + 1) % len(THEME_NAMES)])
        self._config.theme_name = name
        self.theme = name
        current = self.current_presenter()
        self._refresh_list_view(current.issue.id if current else None)
        self._save_config_or_warn("theme preference")
        self.notify(f"Theme: {name}", title="Theme")


__all__ = [
    "ROW_ACTION_IDS",
    "SEARCH_DEBOUNCE_DELAY",
    "AppNotifier",
    "IssueBrowser",
    "ModalConfigurationView",
    "build_list_empty_message",
]
