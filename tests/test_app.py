"""Integration tests for IssueBrowser using Textual's run_test() / Pilot API."""

from __future__ import annotations

import asyncio
import webbrowser
from unittest.mock import MagicMock

import pytest
from textual.widgets import OptionList

import issue_browser.app as app_module
from issue_browser.app import IssueBrowser, build_list_empty_message
from issue_browser.context_keys import build_context_key
from issue_browser.models import (
    DEFAULT_THEME_NAME,
    ENTITY_ISSUE,
    VIEW_LIVE,
    VIEW_RECENTS,
    SessionState,
    UserConfig,
)
from issue_browser.modals import ContextPreferencesModal
from issue_browser.widgets import IssueDetails


async def _wait_until(pilot, predicate, timeout: float = 2.0) -> None:
    """Poll until ``predicate()`` is truthy or the timeout expires."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate() and asyncio.get_running_loop().time() < deadline:
        await pilot.pause(0.05)
    assert predicate()


@pytest.fixture
def make_app(make_issue, make_store, make_services):
    """Factory fixture for an IssueBrowser with injected store, services and saver."""

    def _make(issues=None, config=None, **kwargs):
        if issues is None:
            issues = [
                make_issue(number=3, title="Crash when opening workspace"),
                make_issue(number=2, title="Prebuild logs are truncated", comment_count=4),
                make_issue(number=1, title="Dark theme contrast", state="CLOSED"),
            ]
        kwargs.setdefault("restore_session", False)
        kwargs.setdefault("preference_store", make_store())
        kwargs.setdefault("row_services", make_services())
        kwargs.setdefault("save_config_fn", MagicMock(return_value=True))
        return IssueBrowser(issues, config=config, **kwargs)

    return _make


def test_build_list_empty_message():
    assert "No issues match" in build_list_empty_message(query="[x]", view=VIEW_LIVE)
    assert "\\[x]" in build_list_empty_message(query="[x]", view=VIEW_LIVE)
    assert "No recent issues" in build_list_empty_message(query="", view=VIEW_RECENTS)
    assert "No issues loaded" in build_list_empty_message(query="", view=VIEW_LIVE)


class TestRendering:
    @pytest.mark.asyncio
    async def test_app_renders_issue_list(self, make_app):
        app = make_app()
        async with app.run_test():
            option_list = app.query_one("#issue-list", OptionList)
            assert option_list.option_count == 3
            assert option_list.highlighted == 0
            assert app.current_presenter().issue.number == 3

    @pytest.mark.asyncio
    async def test_empty_live_list_shows_placeholder(self, make_app):
        app = make_app(issues=[])
        async with app.run_test():
            option_list = app.query_one("#issue-list", OptionList)
            assert option_list.option_count == 1
            assert option_list.get_option_at_index(0).disabled
            assert app.current_presenter() is None

    @pytest.mark.asyncio
    async def test_row_bindings_follow_action_matrix(self, make_app):
        app = make_app()
        async with app.run_test():
            assert app.check_action("open_in_workspace", ()) is True
            assert app.check_action("add_to_recents", ()) is True
            assert app.check_action("remove_from_recents", ()) is False
            assert app.check_action("toggle_view", ()) is True

    @pytest.mark.asyncio
    async def test_single_row_rerender_shares_list_timestamp(self, make_app, monkeypatch):
        stamps = []
        render = app_module.render_issue_option

        def _recording_render(presenter, now=None):
            stamps.append(now)
            return render(presenter, now)

        monkeypatch.setattr(app_module, "render_issue_option", _recording_render)
        app = make_app()
        async with app.run_test():
            stamps.clear()
            app._refresh_list_view()
            app._update_option_at_index(1)
            assert len(stamps) == 4
            assert stamps[0] is not None
            assert all(stamp is stamps[0] for stamp in stamps)


class TestPreview:
    @pytest.mark.asyncio
    async def test_right_shows_and_left_hides_preview(self, make_app):
        app = make_app()
        async with app.run_test() as pilot:
            right_pane = app.query_one("#right-pane")
            details = app.query_one("#issue-details", IssueDetails)
            presenter = app.current_presenter()
            assert not right_pane.has_class("visible")

            await pilot.press("right")
            await pilot.pause(0.05)
            assert presenter.body_visible
            assert right_pane.has_class("visible")
            assert details.markdown == presenter.detail_markdown()

            await pilot.press("left")
            await pilot.pause(0.05)
            assert not presenter.body_visible
            assert not right_pane.has_class("visible")
            assert details.markdown == ""

    @pytest.mark.asyncio
    async def test_preview_is_per_row(self, make_app):
        app = make_app()
        async with app.run_test() as pilot:
            await pilot.press("right")
            await pilot.press("j")
            await pilot.pause(0.05)
            assert app.filtered_rows[0].body_visible
            assert not app.current_presenter().body_visible
            assert not app.query_one("#right-pane").has_class("visible")
            assert app.query_one("#issue-details", IssueDetails).markdown == ""


class TestRecents:
    @pytest.mark.asyncio
    async def test_add_to_recents_persists(self, make_app):
        saver = MagicMock(return_value=True)
        app = make_app(save_config_fn=saver)
        async with app.run_test() as pilot:
            await pilot.press("r")
            await pilot.pause(0.05)
            assert [issue.number for issue in app.recents.list()] == [3]
            saved = saver.call_args[0][0]
            assert [issue.number for issue in saved.recent_issues] == [3]

    @pytest.mark.asyncio
    async def test_toggle_view_to_recents(self, make_app, make_issue):
        config = UserConfig(recent_issues=[make_issue(number=9, title="Recently opened")])
        app = make_app(config=config)
        async with app.run_test() as pilot:
            await pilot.press("v")
            await pilot.pause(0.05)
            assert app.view == VIEW_RECENTS
            assert [row.issue.number for row in app.filtered_rows] == [9]
            assert all(row.from_cache for row in app.presenters)
            assert app.check_action("remove_from_recents", ()) is True
            assert app.check_action("show_preview", ()) is False

    @pytest.mark.asyncio
    async def test_remove_from_recents(self, make_app, make_issue):
        saver = MagicMock(return_value=True)
        config = UserConfig(recent_issues=[make_issue(number=9)])
        app = make_app(config=config, start_view=VIEW_RECENTS, save_config_fn=saver)
        async with app.run_test() as pilot:
            await pilot.press("d")
            await pilot.pause(0.05)
            assert len(app.recents) == 0
            assert app.filtered_rows == []
            assert saver.call_args[0][0].recent_issues == []

    @pytest.mark.asyncio
    async def test_cached_rows_ignore_preview_key(self, make_app, make_issue):
        config = UserConfig(recent_issues=[make_issue(number=9)])
        app = make_app(config=config, start_view=VIEW_RECENTS)
        async with app.run_test() as pilot:
            await pilot.press("right")
            await pilot.pause(0.05)
            assert not app.current_presenter().body_visible


class TestErrorBoundary:
    @pytest.mark.asyncio
    async def test_browser_failure_notifies_error(self, make_app, make_services):
        services = make_services()
        services.browser.open.side_effect = webbrowser.Error("no runnable browser")
        app = make_app(row_services=services)
        async with app.run_test():
            app.notify = MagicMock()
            await app.action_view_in_browser()
            app.notify.assert_called_once()
            message = app.notify.call_args[0][0]
            assert "no runnable browser" in message
            assert app.notify.call_args.kwargs["severity"] == "error"

    @pytest.mark.asyncio
    async def test_unavailable_action_warns(self, make_app):
        app = make_app()
        async with app.run_test():
            app.notify = MagicMock()
            await app.action_remove_from_recents()
            assert app.notify.call_args.kwargs["severity"] == "warning"


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_filters_rows(self, make_app):
        app = make_app()
        async with app.run_test() as pilot:
            await pilot.press("slash")
            await pilot.press(*"prebuild")
            option_list = app.query_one("#issue-list", OptionList)
            await _wait_until(pilot, lambda: option_list.option_count == 1)
            assert app.filtered_rows[0].issue.number == 2

            await pilot.press("escape")
            await _wait_until(pilot, lambda: option_list.option_count == 3)


class TestSession:
    @pytest.mark.asyncio
    async def test_session_saved_on_unmount(self, make_app):
        saver = MagicMock(return_value=True)
        app = make_app(save_config_fn=saver)
        async with app.run_test() as pilot:
            await pilot.press("v")
            await pilot.pause(0.05)
        saver.assert_called()
        assert saver.call_args[0][0].session.view == VIEW_RECENTS

    @pytest.mark.asyncio
    async def test_session_state_captures_filter_and_cursor(self, make_app):
        saver = MagicMock(return_value=True)
        app = make_app(save_config_fn=saver)
        async with app.run_test() as pilot:
            await pilot.press("j")
            await pilot.pause(0.05)
            app._save_session_state()
            saved = saver.call_args[0][0]
            assert saved.session == SessionState(view=VIEW_LIVE, current_filter="", scroll_index=1)

    @pytest.mark.asyncio
    async def test_session_restored(self, make_app):
        config = UserConfig(session=SessionState(view=VIEW_LIVE, scroll_index=2))
        app = make_app(config=config, restore_session=True)
        async with app.run_test():
            assert app.query_one("#issue-list", OptionList).highlighted == 2


class TestConfigureWorkspace:
    @pytest.mark.asyncio
    async def test_modal_saves_preferences(self, make_app, make_store):
        store = make_store()
        app = make_app(preference_store=store, row_services=None)
        async with app.run_test() as pilot:
            presenter = app.current_presenter()
            await pilot.press("w")
            await _wait_until(pilot, lambda: isinstance(app.screen, ContextPreferencesModal))
            modal = app.screen

            modal.query_one("#prefs-editor").value = "vim"
            modal.action_save()
            key = build_context_key(ENTITY_ISSUE, presenter.issue.repository, presenter.issue.title)
            await _wait_until(pilot, lambda: store.peek(key).preferred_editor == "vim")
            assert not isinstance(app.screen, ContextPreferencesModal)


class TestThemes:
    def test_configured_theme_active_before_mount(self, make_app):
        app = make_app(config=UserConfig(theme_name="monokai"))
        assert app.theme == "monokai"

    def test_unknown_theme_falls_back_to_default(self, make_app):
        app = make_app(config=UserConfig(theme_name="no-such-theme"))
        assert app.theme == DEFAULT_THEME_NAME

    @pytest.mark.asyncio
    async def test_cycle_theme_persists(self, make_app):
        saver = MagicMock(return_value=True)
        app = make_app(save_config_fn=saver)
        async with app.run_test() as pilot:
            assert app.theme == DEFAULT_THEME_NAME
            await pilot.press("ctrl+t")
            await pilot.pause(0.05)
            assert app.theme == "gitpod-light"
            assert saver.call_args[0][0].theme_name == "gitpod-light"
