"""Preview pane widget for the highlighted issue."""

from __future__ import annotations

from rich.console import Group
from rich.markdown import Markdown
from rich.text import Text
from textual.widgets import Static

from issue_browser.presenter import IssueRowPresenter
from issue_browser.widgets.listing import row_tooltips

EMPTY_PREVIEW_TEXT = "Press → on an issue to preview it"


class IssueDetails(Static):
    """Widget to display the full issue body as Markdown."""

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__(id=id)
        self._presenter: IssueRowPresenter | None = None
        self._markdown: str = ""

    @property
    def presenter(self) -> IssueRowPresenter | None:
        return self._presenter

    @property
    def markdown(self) -> str:
        """The Markdown source currently displayed (empty when cleared)."""
        return self._markdown

    def show_issue(self, presenter: IssueRowPresenter | None) -> None:
        """Display ``presenter``'s issue, or the placeholder when None."""
        self._presenter = presenter
        if presenter is None:
            self._markdown = ""
            self.update(Text(EMPTY_PREVIEW_TEXT, style="dim italic"))
            return
        self._markdown = presenter.detail_markdown()
        metadata = Text("\n".join(row_tooltips(presenter)), style="dim")
        self.update(Group(Markdown(self._markdown), Text(""), metadata))


__all__ = ["EMPTY_PREVIEW_TEXT", "IssueDetails"]
