"""Notification copy: recents confirmations and actionable error messages."""

from __future__ import annotations

_SENTENCE_END = (".", "!", "?")


def _as_sentence(text: str) -> str:
    text = text.strip()
    if text and not text.endswith(_SENTENCE_END):
        text += "."
    return text


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build an error toast body: what failed, why (optional), what to do next.

    >>> print(build_actionable_error("open the issue", why="no browser", next_step="retry"))
    Could not open the issue.
    Why: no browser.
    Next step: retry.
    """
    lines = [f"Could not {action.strip()}."]
    if why and why.strip():
        lines.append(f"Why: {_as_sentence(why)}")
    lines.append(f"Next step: {_as_sentence(next_step)}")
    return "\n".join(lines)


def build_recents_added_message(issue_number: int) -> str:
    return f'Added Issue "#{issue_number}" to Recents'


def build_recents_removed_message(issue_number: int) -> str:
    return f"Removed Issue #{issue_number} from Recents"


def build_preferences_saved_message(context: str) -> str:
    """Confirmation shown after the Configure Workspace modal saves."""
    return f"Saved workspace preferences for {context}"


__all__ = [
    "build_actionable_error",
    "build_preferences_saved_message",
    "build_recents_added_message",
    "build_recents_removed_message",
]
