"""Search filtering and text formatting utilities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rapidfuzz import fuzz
from rich.markup import escape as escape_markup

if TYPE_CHECKING:
    from issue_browser.presenter import IssueRowPresenter

FUZZY_SCORE_CUTOFF = 60  # Minimum score (0-100) to include in results
FUZZY_LIMIT = 100  # Maximum number of results to return


def escape_rich_text(text: str) -> str:
    """Escape text for safe Rich markup rendering."""
    return escape_markup(text) if text else ""


def score_row(query: str, presenter: IssueRowPresenter) -> int:
    """Score a row against a query.

    An exact keyword match (issue number, author login, or ``#number``)
    always scores 100; otherwise the title and repository are fuzzy matched.
    """
    query_lower = query.strip().lower()
    if not query_lower:
        return 100
    keywords = {keyword.lower() for keyword in presenter.keywords()}
    if query_lower in keywords or query_lower.lstrip("#") in keywords:
        return 100
    text = f"{presenter.issue.title} {presenter.issue.repository}"
    return int(fuzz.WRatio(query_lower, text.lower()))


def filter_rows(query: str, presenters: Sequence[IssueRowPresenter]) -> list[IssueRowPresenter]:
    """Return rows matching ``query``, best match first.

    An empty query keeps every row in its original order.
    """
    if not query.strip():
        return list(presenters)
    scored = []
    for presenter in presenters:
        score = score_row(query, presenter)
        if score >= FUZZY_SCORE_CUTOFF:
            scored.append((presenter, score))
    # Stable sort keeps source order among equal scores
    scored.sort(key=lambda item: item[1], reverse=True)
    return [presenter for presenter, _ in scored[:FUZZY_LIMIT]]


__all__ = [
    "FUZZY_LIMIT",
    "FUZZY_SCORE_CUTOFF",
    "escape_rich_text",
    "filter_rows",
    "score_row",
]
