"""Internal service layer for row side effects."""

from issue_browser.services.workspace_service import (
    build_workspace_url,
    open_in_gitpod,
)

__all__ = [
    "build_workspace_url",
    "open_in_gitpod",
]
