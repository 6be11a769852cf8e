"""Service interfaces + default adapters for the row presenter's side effects."""

from __future__ import annotations

import webbrowser
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from issue_browser.context_keys import ContextKey
from issue_browser.preferences import PreferenceStore
from issue_browser.services import workspace_service as _workspace


class NotificationStyle(Enum):
    """Presentation style of a transient notification."""

    SUCCESS = "success"
    FAILURE = "failure"
    INFO = "info"


@runtime_checkable
class WorkspaceLauncher(Protocol):
    """Interface for opening a context in an external development workspace."""

    async def open_workspace(self, url: str, key: ContextKey) -> None:
        """Open ``url`` in a workspace configured for ``key``."""
        ...


@runtime_checkable
class BrowserOpener(Protocol):
    """Interface for opening a URL in the user's browser."""

    def open(self, url: str) -> None:
        """Open ``url``; the result is not observed."""
        ...


@runtime_checkable
class Notifier(Protocol):
    """Interface for transient, fire-and-forget user notifications."""

    def notify(self, title: str, style: NotificationStyle) -> None:
        """Display ``title`` with the given style."""
        ...


@runtime_checkable
class ConfigurationView(Protocol):
    """Interface for the per-context preferences editor."""

    def open(
        self,
        repository: str,
        entity_type: str,
        context: str,
        revalidate: Callable[[], Awaitable[Any]],
    ) -> None:
        """Present the editor; call ``revalidate`` after a successful save."""
        ...


class WebBrowserOpener:
    """Default adapter backed by the ``webbrowser`` module.

    Failures propagate to the caller's error boundary.
    """

    def open(self, url: str) -> None:
        if not webbrowser.open(url):
            raise webbrowser.Error(f"No browser could open {url}")


class GitpodWorkspaceLauncher:
    """Default adapter that opens Gitpod with the context's preferences."""

    def __init__(
        self,
        store: PreferenceStore,
        *,
        base_url: str,
        browser: BrowserOpener | None = None,
    ) -> None:
        self._store = store
        self._base_url = base_url
        self._browser = browser or WebBrowserOpener()

    async def open_workspace(self, url: str, key: ContextKey) -> None:
        await _workspace.open_in_gitpod(
            url,
            key,
            store=self._store,
            base_url=self._base_url,
            open_url=self._browser.open,
        )


@dataclass(slots=True)
class RowServices:
    """Aggregated capabilities consumed by row presenters."""

    launcher: WorkspaceLauncher
    browser: BrowserOpener
    notifier: Notifier
    configuration: ConfigurationView


def build_default_row_services(
    store: PreferenceStore,
    *,
    base_url: str,
    notifier: Notifier,
    configuration: ConfigurationView,
) -> RowServices:
    """Build row services backed by Gitpod and the system browser."""
    browser = WebBrowserOpener()
    return RowServices(
        launcher=GitpodWorkspaceLauncher(store, base_url=base_url, browser=browser),
        browser=browser,
        notifier=notifier,
        configuration=configuration,
    )


__all__ = [
    "BrowserOpener",
    "ConfigurationView",
    "GitpodWorkspaceLauncher",
    "NotificationStyle",
    "Notifier",
    "RowServices",
    "WebBrowserOpener",
    "WorkspaceLauncher",
    "build_default_row_services",
]
