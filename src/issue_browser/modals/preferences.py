"""Workspace preferences modal: editor and workspace class for a context."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Checkbox, Input, Label, Select, Static

from issue_browser.models import (
    EDITOR_CLASS_LARGE,
    EDITOR_CLASS_SMALL,
    EDITOR_CLASSES,
    PreferenceRecord,
)
from issue_browser.query import escape_rich_text

logger = logging.getLogger(__name__)

_CLASS_LABELS = {
    EDITOR_CLASS_SMALL: "Standard (S)",
    EDITOR_CLASS_LARGE: "Large (L)",
}


@dataclass(slots=True, frozen=True)
class PreferencesResult:
    """Choice returned by ContextPreferencesModal."""

    record: PreferenceRecord
    repository_wide: bool = False


class ContextPreferencesModal(ModalScreen[PreferencesResult | None]):
    """Modal dialog for editing a context's workspace preferences."""

    BINDINGS = [
        Binding("ctrl+s", "save", "Save"),
        Binding("escape", "cancel", "Cancel"),
    ]

    CSS = """
    ContextPreferencesModal {
        align: center middle;
    }

    #prefs-dialog {
        width: 60;
        height: auto;
        background: $th-background;
        border: tall $th-accent;
        padding: 0 2;
    }

    #prefs-title {
        text-style: bold;
        color: $th-accent-alt;
        margin-bottom: 1;
    }

    #prefs-context {
        color: $th-muted;
        margin-bottom: 1;
    }

    #prefs-editor, #prefs-class {
        width: 100%;
        background: $th-panel;
        border: none;
        margin-bottom: 1;
    }

    #prefs-editor:focus {
        border-left: tall $th-accent;
    }

    #prefs-error {
        color: $error;
        height: auto;
    }

    #prefs-buttons {
        height: auto;
        margin-top: 1;
        align: right middle;
    }

    #prefs-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(
        self,
        repository: str,
        context: str,
        current: PreferenceRecord,
    ) -> None:
        super().__init__()
        self._repository = repository
        self._context_title = context
        self._current = current

    def compose(self) -> ComposeResult:
        with Vertical(id="prefs-dialog"):
            yield Label("Configure Workspace", id="prefs-title")
            yield Static(
                f"{escape_rich_text(self._repository)}\n{escape_rich_text(self._context_title)}",
                id="prefs-context",
            )
            yield Label("Editor")
            yield Input(
                value=self._current.preferred_editor,
                placeholder="e.g. code, intellij, vim",
                id="prefs-editor",
            )
            yield Label("Workspace class")
            yield Select(
                [(_CLASS_LABELS[name], name) for name in EDITOR_CLASSES],
                value=self._initial_class(),
                allow_blank=False,
                id="prefs-class",
            )
            yield Checkbox("Apply to the whole repository", id="prefs-repository-wide")
            yield Static("", id="prefs-error")
            with Horizontal(id="prefs-buttons"):
                yield Button("Cancel", variant="default", id="cancel-btn")
                yield Button("Save (Ctrl+S)", variant="primary", id="save-btn")

    def _initial_class(self) -> str:
        current = self._current.preferred_editor_class
        return current if current in EDITOR_CLASSES else EDITOR_CLASS_SMALL

    def on_mount(self) -> None:
        self.query_one("#prefs-editor", Input).focus()

    def action_save(self) -> None:
        editor = self.query_one("#prefs-editor", Input).value.strip()
        if not editor:
            self.query_one("#prefs-error", Static).update("Editor must not be empty")
            return
        editor_class = self.query_one("#prefs-class", Select).value
        if editor_class not in EDITOR_CLASSES:
            editor_class = self._current.preferred_editor_class
        repository_wide = self.query_one("#prefs-repository-wide", Checkbox).value
        logger.debug(
            "Workspace preferences for %s: editor=%s class=%s repository_wide=%s",
            self._repository,
            editor,
            editor_class,
            repository_wide,
        )
        self.dismiss(
            PreferencesResult(
                record=PreferenceRecord(
                    preferred_editor=editor,
                    preferred_editor_class=str(editor_class),
                ),
                repository_wide=repository_wide,
            )
        )

    def action_cancel(self) -> None:
        self.dismiss(None)

    @on(Input.Submitted, "#prefs-editor")
    def on_editor_submitted(self) -> None:
        self.action_save()

    @on(Button.Pressed, "#save-btn")
    def on_save_pressed(self) -> None:
        self.action_save()

    @on(Button.Pressed, "#cancel-btn")
    def on_cancel_pressed(self) -> None:
        self.action_cancel()


__all__ = ["ContextPreferencesModal", "PreferencesResult"]
