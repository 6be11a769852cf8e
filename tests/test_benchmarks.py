"""Performance guards. Run with `pytest -m slow -v -s`.

Each test verifies that a core operation completes within a generous time
budget at realistic scale (a few hundred issues). They guard against
quadratic regressions, not micro-level speed.
"""

from __future__ import annotations

import json
import time

import pytest

from issue_browser.parsing import issue_to_dict, parse_issues_file
from issue_browser.query import filter_rows
from issue_browser.recents import RecentsCache


def _assert_within(fn, max_seconds: float, label: str = "") -> float:
    """Run fn() and assert it completes within max_seconds. Returns elapsed time."""
    t0 = time.perf_counter()
    fn()
    elapsed = time.perf_counter() - t0
    assert elapsed < max_seconds, f"{label} took {elapsed:.3f}s (budget {max_seconds}s)"
    return elapsed


@pytest.fixture
def many_issues(make_issue):
    return [
        make_issue(number=n, title=f"Workspace issue number {n}", repository=f"org/repo{n % 7}")
        for n in range(500)
    ]


@pytest.mark.slow
def test_parse_500_issues(tmp_path, many_issues):
    path = tmp_path / "issues.json"
    path.write_text(json.dumps([issue_to_dict(i) for i in many_issues]), encoding="utf-8")
    _assert_within(lambda: parse_issues_file(path), 1.0, "parse 500 issues")


@pytest.mark.slow
def test_filter_500_rows(make_presenter, many_issues):
    rows = [make_presenter(issue) for issue in many_issues]
    _assert_within(lambda: filter_rows("workspace 42", rows), 1.0, "filter 500 rows")


@pytest.mark.slow
def test_recents_add_500(many_issues):
    cache = RecentsCache()

    def _fill() -> None:
        for issue in many_issues:
            cache.add(issue)

    _assert_within(_fill, 1.0, "add 500 recents")
    assert len(cache) == 500
