"""Tests for workspace URL building and the default service adapters."""

from __future__ import annotations

import webbrowser
from unittest.mock import MagicMock, patch

import httpx
import pytest

from issue_browser.context_keys import build_context_key, repository_key
from issue_browser.models import EDITOR_CLASS_LARGE, ENTITY_ISSUE, PreferenceRecord
from issue_browser.services import build_workspace_url, open_in_gitpod
from issue_browser.services.interfaces import (
    BrowserOpener,
    ConfigurationView,
    GitpodWorkspaceLauncher,
    Notifier,
    RowServices,
    WebBrowserOpener,
    WorkspaceLauncher,
    build_default_row_services,
)

ISSUE_URL = "https://github.com/acme/app/issues/7"
ISSUE_KEY = build_context_key(ENTITY_ISSUE, "acme/app", "Crash on start")


class TestBuildWorkspaceUrl:
    def test_query_and_fragment(self):
        url = httpx.URL(
            build_workspace_url(
                "https://gitpod.io", ISSUE_URL, PreferenceRecord("intellij", EDITOR_CLASS_LARGE)
            )
        )
        assert url.host == "gitpod.io"
        assert url.path == "/"
        assert url.params["editor"] == "intellij"
        assert url.params["workspaceClass"] == EDITOR_CLASS_LARGE
        assert url.fragment == ISSUE_URL

    def test_base_path_is_kept(self):
        url = httpx.URL(
            build_workspace_url("https://example.com/gitpod/", ISSUE_URL, PreferenceRecord())
        )
        assert url.path == "/gitpod/"

    @pytest.mark.parametrize("base_url", ["gitpod.io", "ftp://gitpod.io", "", "https://"])
    def test_invalid_base_url(self, base_url):
        with pytest.raises(ValueError):
            build_workspace_url(base_url, ISSUE_URL, PreferenceRecord())


class TestOpenInGitpod:
    @pytest.mark.asyncio
    async def test_resolves_preferences_before_opening(self, make_store):
        store = make_store()
        await store.save(ISSUE_KEY, PreferenceRecord("vim", EDITOR_CLASS_LARGE))
        opened: list[str] = []

        url = await open_in_gitpod(
            ISSUE_URL, ISSUE_KEY, store=store, base_url="https://gitpod.io", open_url=opened.append
        )

        assert opened == [url]
        assert httpx.URL(url).params["editor"] == "vim"
        assert store.is_resolved(ISSUE_KEY)

    @pytest.mark.asyncio
    async def test_repository_fallback(self, make_store):
        store = make_store()
        await store.save(repository_key("acme/app"), PreferenceRecord("goland"))
        url = await open_in_gitpod(
            ISSUE_URL, ISSUE_KEY, store=store, base_url="https://gitpod.io", open_url=MagicMock()
        )
        assert httpx.URL(url).params["editor"] == "goland"

    @pytest.mark.asyncio
    async def test_launcher_adapter_uses_browser(self, make_store):
        browser = MagicMock()
        launcher = GitpodWorkspaceLauncher(
            make_store(), base_url="https://gitpod.io", browser=browser
        )
        await launcher.open_workspace(ISSUE_URL, ISSUE_KEY)
        (opened_url,), _ = browser.open.call_args
        assert httpx.URL(opened_url).fragment == ISSUE_URL


class TestWebBrowserOpener:
    def test_open_success(self):
        with patch("issue_browser.services.interfaces.webbrowser.open", return_value=True) as m:
            WebBrowserOpener().open(ISSUE_URL)
        m.assert_called_once_with(ISSUE_URL)

    def test_open_failure_raises(self):
        with (
            patch("issue_browser.services.interfaces.webbrowser.open", return_value=False),
            pytest.raises(webbrowser.Error),
        ):
            WebBrowserOpener().open(ISSUE_URL)


def test_default_row_services_satisfy_protocols(make_store):
    services = build_default_row_services(
        make_store(),
        base_url="https://gitpod.io",
        notifier=MagicMock(spec=["notify"]),
        configuration=MagicMock(spec=["open"]),
    )
    assert isinstance(services, RowServices)
    assert isinstance(services.launcher, WorkspaceLauncher)
    assert isinstance(services.browser, BrowserOpener)
    assert isinstance(services.notifier, Notifier)
    assert isinstance(services.configuration, ConfigurationView)
