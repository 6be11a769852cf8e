"""Recently visited issues, kept most-recent-first with set semantics on id."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from issue_browser.models import Issue


class RecentsCache:
    """Ordered set of issues.

    ``_order`` holds ids most-recent-first; ``_issues`` is the membership
    index and stores the latest snapshot of each issue. Both always hold
    exactly the same ids.
    """

    def __init__(self, issues: Iterable[Issue] = ()) -> None:
        self._order: list[str] = []
        self._issues: dict[str, Issue] = {}
        # Input is most-recent-first; keep the first occurrence of each id
        for issue in issues:
            if issue.id not in self._issues:
                self._order.append(issue.id)
                self._issues[issue.id] = issue

    def add(self, issue: Issue) -> None:
        """Insert ``issue`` or promote it to the most-recent position."""
        if issue.id in self._issues:
            self._order.remove(issue.id)
        self._order.insert(0, issue.id)
        self._issues[issue.id] = issue

    def remove(self, issue: Issue) -> None:
        """Remove ``issue`` by id. Removing a non-member does nothing."""
        if self._issues.pop(issue.id, None) is None:
            return
        self._order.remove(issue.id)

    def contains(self, issue_id: str) -> bool:
        return issue_id in self._issues

    def list(self) -> list[Issue]:
        """Return the issues most-recent-first."""
        return [self._issues[issue_id] for issue_id in self._order]

    def __contains__(self, issue_id: object) -> bool:
        return issue_id in self._issues

    def __iter__(self) -> Iterator[Issue]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._order)


__all__ = ["RecentsCache"]
