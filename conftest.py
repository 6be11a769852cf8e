"""Shared test fixtures for Issue Browser tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from issue_browser.models import Issue, IssueAuthor, PreferenceRecord, UserConfig
from issue_browser.preferences import PreferenceStore
from issue_browser.presenter import IssueRowPresenter
from issue_browser.services.interfaces import RowServices
from issue_browser.themes import DEFAULT_THEME, THEME_COLORS
from issue_browser.widgets import set_ascii_icons

# ── Module-level state isolation ─────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Restore THEME_COLORS and the icon set after each test.

    IssueBrowser.__init__ mutates both; without this fixture tests that
    instantiate the app would pollute later tests.
    """
    yield
    THEME_COLORS.clear()
    THEME_COLORS.update(DEFAULT_THEME)
    set_ascii_icons(False)


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_issue():
    """Factory fixture for creating Issue instances with sensible defaults."""

    def _make(
        number: int = 42,
        title: str = "Crash when opening workspace",
        repository: str = "gitpod-io/gitpod",
        issue_id: str | None = None,
        updated_at: datetime | None = None,
        body: str = "Steps to reproduce:\n\n1. Open a workspace",
        author: IssueAuthor | None = IssueAuthor(login="octocat", name="The Octocat"),
        comment_count: int = 0,
        state: str = "OPEN",
        state_reason: str | None = None,
        url: str | None = None,
    ) -> Issue:
        return Issue(
            id=issue_id or f"I_{repository.replace('/', '_')}_{number}",
            number=number,
            title=title,
            url=url or f"https://github.com/{repository}/issues/{number}",
            repository=repository,
            updated_at=updated_at or datetime(2024, 1, 15, 9, 30, tzinfo=UTC),
            body=body,
            author=author,
            comment_count=comment_count,
            state=state,
            state_reason=state_reason,
        )

    return _make


@pytest.fixture
def make_store(tmp_path):
    """Factory fixture for a PreferenceStore backed by a temp SQLite file."""

    def _make(defaults: PreferenceRecord | None = None, name: str = "preferences.db"):
        return PreferenceStore(tmp_path / name, defaults=defaults)

    return _make


@pytest.fixture
def make_services():
    """Factory fixture for RowServices built from mocks."""

    def _make() -> RowServices:
        launcher = MagicMock()
        launcher.open_workspace = AsyncMock()
        return RowServices(
            launcher=launcher,
            browser=MagicMock(),
            notifier=MagicMock(),
            configuration=MagicMock(),
        )

    return _make


@pytest.fixture
def make_presenter(make_issue, make_store, make_services):
    """Factory fixture for an IssueRowPresenter wired to mocks."""

    def _make(issue: Issue | None = None, **kwargs: Any) -> IssueRowPresenter:
        kwargs.setdefault("preference_store", make_store())
        kwargs.setdefault("services", make_services())
        return IssueRowPresenter(issue or make_issue(), **kwargs)

    return _make


@pytest.fixture
def sample_config():
    """Factory fixture for creating UserConfig with optional overrides."""

    def _make(**kwargs: Any) -> UserConfig:
        return UserConfig(**kwargs)

    return _make
