"""Focused tests for list rendering helpers/widgets."""

from __future__ import annotations

from datetime import UTC, datetime

from issue_browser.models import IssueAuthor
from issue_browser.widgets.listing import (
    icon_glyph,
    render_accessories,
    render_issue_option,
    row_tooltips,
    set_ascii_icons,
)

NOW = datetime(2024, 1, 18, 9, 30, tzinfo=UTC)


def test_set_ascii_icons_changes_status_glyph(make_presenter):
    presenter = make_presenter()

    set_ascii_icons(True)
    assert render_issue_option(presenter, NOW).startswith("[")
    assert icon_glyph("issue-open") == "o"
    assert icon_glyph("comments") == "c"

    set_ascii_icons(False)
    assert icon_glyph("issue-open") == "○"


def test_author_initial_passes_through():
    assert icon_glyph("M") == "M"


def test_option_lines(make_presenter, make_issue):
    presenter = make_presenter(make_issue(number=7, title="Crash", repository="acme/app"))
    lines = render_issue_option(presenter, NOW).split("\n")
    assert len(lines) == 3
    assert "[bold]Crash[/]" in lines[0]
    assert "#7  acme/app" in lines[1]
    assert "3d" in lines[2]


def test_option_without_title_moves_meta_up(make_presenter, make_issue):
    presenter = make_presenter(make_issue(number=7, repository="acme/app"))
    presenter.show_preview()
    lines = render_issue_option(presenter, NOW).split("\n")
    assert len(lines) == 2
    assert "#7  acme/app" in lines[0]
    assert "[bold]" not in lines[0]


def test_markup_in_title_is_escaped(make_presenter, make_issue):
    presenter = make_presenter(make_issue(title="[red]boom[/red]"))
    assert "\\[red]boom" in render_issue_option(presenter, NOW)


def test_accessory_strip(make_presenter, make_issue):
    presenter = make_presenter(
        make_issue(comment_count=5, author=IssueAuthor(login="octocat", name="Mona"))
    )
    strip = render_accessories(presenter, NOW)
    assert "✉ 5" in strip
    assert "▣ S" in strip
    assert "O[/] Mona (octocat)" in strip


def test_unknown_author_glyph(make_presenter, make_issue):
    strip = render_accessories(make_presenter(make_issue(author=None)), NOW)
    assert "?[/] Unknown author" in strip


def test_row_tooltips(make_presenter, make_issue):
    tooltips = row_tooltips(make_presenter(make_issue(repository="acme/app", comment_count=2)))
    assert tooltips[0] == "Status: Open"
    assert tooltips[1] == "Repository: acme/app"
    assert any(t.startswith("Updated: ") for t in tooltips)
    assert "Author: The Octocat (octocat)" in tooltips

