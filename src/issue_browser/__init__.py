"""Issue Browser TUI - browse GitHub issues and open them in Gitpod workspaces.

Usage:
    issue-browser                      # Use ./issues.json
    issue-browser -i export.json       # Use custom file
    issue-browser --recents            # Start in the recents view
    issue-browser --no-restore         # Start fresh session

Key bindings:
    g       - Open issue in Gitpod
    o       - View issue in GitHub
    →/←     - Show/hide issue preview
    r       - Add issue to recents
    d       - Remove issue from recents (recents view)
    w       - Configure workspace (editor and workspace class)
    v       - Toggle live/recents view
    /       - Toggle search (fuzzy matching)
    j/k     - Navigate down/up (vim-style)
    Ctrl+t  - Cycle theme
    q       - Quit
"""

from issue_browser.context_keys import ContextKey, build_context_key, repository_key
from issue_browser.models import (
    Issue,
    IssueAuthor,
    PreferenceRecord,
    SessionState,
    UserConfig,
)
from issue_browser.preferences import PreferenceStore
from issue_browser.presenter import ActionUnavailableError, IssueRowPresenter, PreviewState
from issue_browser.recents import RecentsCache

__version__ = "0.1.0"

__all__ = [
    "ActionUnavailableError",
    "ContextKey",
    "Issue",
    "IssueAuthor",
    "IssueRowPresenter",
    "PreferenceRecord",
    "PreferenceStore",
    "PreviewState",
    "RecentsCache",
    "SessionState",
    "UserConfig",
    "build_context_key",
    "repository_key",
]
