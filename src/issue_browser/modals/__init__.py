"""Modal screens."""

from issue_browser.modals.preferences import ContextPreferencesModal, PreferencesResult

__all__ = ["ContextPreferencesModal", "PreferencesResult"]
