"""Internal Gitpod workspace service (URL building + launch)."""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from issue_browser.context_keys import ContextKey
from issue_browser.models import PreferenceRecord
from issue_browser.preferences import PreferenceStore

logger = logging.getLogger(__name__)


def build_workspace_url(base_url: str, context_url: str, record: PreferenceRecord) -> str:
    """Build ``<base>/?editor=..&workspaceClass=..#<context_url>``.

    Raises ValueError when ``base_url`` is not an absolute http(s) URL.
    """
    try:
        base = httpx.URL(base_url.strip())
    except httpx.InvalidURL as exc:
        raise ValueError(f"Invalid Gitpod base URL: {base_url!r}") from exc
    if base.scheme not in ("http", "https") or not base.host:
        raise ValueError(f"Invalid Gitpod base URL: {base_url!r}")
    url = base.copy_with(
        path=base.path.rstrip("/") + "/",
        params={
            "editor": record.preferred_editor,
            "workspaceClass": record.preferred_editor_class,
        },
        fragment=context_url,
    )
    return str(url)


async def open_in_gitpod(
    context_url: str,
    key: ContextKey,
    *,
    store: PreferenceStore,
    base_url: str,
    open_url: Callable[[str], None],
) -> str:
    """Resolve preferences for ``key`` and open the workspace URL.

    Returns the URL that was opened.
    """
    record = await store.resolve(key)
    workspace_url = build_workspace_url(base_url, context_url, record)
    logger.debug("Opening workspace for %s: %s", key.storage_key, workspace_url)
    open_url(workspace_url)
    return workspace_url


__all__ = [
    "build_workspace_url",
    "open_in_gitpod",
]
