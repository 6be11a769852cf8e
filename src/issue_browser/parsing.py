"""Issue payload parsing: GraphQL-shaped JSON to Issue objects and back."""

from __future__ import annotations

import json
import logging
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from issue_browser.models import Issue, IssueAuthor

logger = logging.getLogger(__name__)


def parse_iso_datetime(raw: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp such as ``2024-01-15T09:30:00Z``.

    Naive timestamps are treated as UTC. Returns None for malformed input.
    """
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_author(raw: Any) -> IssueAuthor | None:
    """Parse the ``author`` object. Deleted (ghost) accounts arrive as null."""
    if not isinstance(raw, dict):
        return None
    login = raw.get("login")
    if not isinstance(login, str) or not login:
        return None
    name = raw.get("name")
    avatar_url = raw.get("avatarUrl")
    return IssueAuthor(
        login=login,
        name=name if isinstance(name, str) else "",
        avatar_url=avatar_url if isinstance(avatar_url, str) else "",
    )


def _parse_comment_count(raw: Any) -> int:
    if isinstance(raw, dict):
        raw = raw.get("totalCount", 0)
    if isinstance(raw, bool) or not isinstance(raw, int):
        return 0
    return max(0, raw)


def issue_from_dict(data: Any) -> Issue | None:
    """Build an Issue from an ``IssueFields``-shaped dict.

    Returns None if any identity field (id, number, title, url,
    repository.nameWithOwner, updatedAt) is missing or malformed.
    """
    if not isinstance(data, dict):
        return None
    issue_id = data.get("id")
    number = data.get("number")
    title = data.get("title")
    url = data.get("url")
    repository = data.get("repository")
    name_with_owner = repository.get("nameWithOwner") if isinstance(repository, dict) else None
    updated_at = parse_iso_datetime(data.get("updatedAt"))

    if not isinstance(issue_id, str) or not issue_id:
        return None
    if isinstance(number, bool) or not isinstance(number, int):
        return None
    if not isinstance(title, str) or not isinstance(url, str):
        return None
    if not isinstance(name_with_owner, str) or not name_with_owner:
        return None
    if updated_at is None:
        return None

    body = data.get("body")
    state = data.get("state")
    state_reason = data.get("stateReason")
    return Issue(
        id=issue_id,
        number=number,
        title=title,
        url=url,
        repository=name_with_owner,
        updated_at=updated_at,
        body=body if isinstance(body, str) else "",
        author=_parse_author(data.get("author")),
        comment_count=_parse_comment_count(data.get("comments")),
        state=state.upper() if isinstance(state, str) and state else "OPEN",
        state_reason=state_reason.upper() if isinstance(state_reason, str) else None,
    )


def issue_to_dict(issue: Issue) -> dict[str, Any]:
    """Serialize an Issue back to the ``IssueFields`` shape."""
    author = None
    if issue.author is not None:
        author = {
            "login": issue.author.login,
            "name": issue.author.name,
            "avatarUrl": issue.author.avatar_url,
        }
    return {
        "id": issue.id,
        "number": issue.number,
        "title": issue.title,
        "url": issue.url,
        "body": issue.body,
        "state": issue.state,
        "stateReason": issue.state_reason,
        "updatedAt": issue.updated_at.isoformat(),
        "repository": {"nameWithOwner": issue.repository},
        "author": author,
        "comments": {"totalCount": issue.comment_count},
    }


def extract_issue_nodes(payload: Any) -> list[Any]:
    """Locate the list of issue objects inside a JSON export.

    Accepts a bare list, ``{"issues": [...]}``, or a raw GraphQL search
    response (``{"data": {"search": {"nodes": [...]}}}``, edges also work).
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    if isinstance(payload.get("issues"), list):
        return payload["issues"]
    data = payload.get("data")
    search = data.get("search") if isinstance(data, dict) else None
    if not isinstance(search, dict):
        return []
    if isinstance(search.get("nodes"), list):
        return search["nodes"]
    edges = search.get("edges")
    if isinstance(edges, list):
        return [edge.get("node") for edge in edges if isinstance(edge, dict)]
    return []


def parse_issues(payload: Any) -> list[Issue]:
    """Parse issues from a decoded JSON payload.

    Malformed entries are skipped. Duplicate ids keep the most recently
    updated copy, in first-seen order.
    """
    issues_by_id: dict[str, Issue] = {}
    skipped = 0
    for node in extract_issue_nodes(payload):
        issue = issue_from_dict(node)
        if issue is None:
            skipped += 1
            continue
        existing = issues_by_id.get(issue.id)
        if existing is None or issue.updated_at > existing.updated_at:
            issues_by_id[issue.id] = issue
    if skipped:
        logger.warning("Skipped %d malformed issue entries", skipped)
    return list(issues_by_id.values())


def parse_issues_file(filepath: Path) -> list[Issue]:
    """Read a JSON issue export from disk.

    Raises ValueError when the file is not valid JSON.
    """
    t0 = time.monotonic()
    content = filepath.read_text(encoding="utf-8", errors="replace")
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {filepath.name}: {exc.msg}") from exc
    issues = parse_issues(payload)
    elapsed = time.monotonic() - t0
    logger.debug("Parsed %d issues from %s in %.3fs", len(issues), filepath.name, elapsed)
    return issues


__all__ = [
    "extract_issue_nodes",
    "issue_from_dict",
    "issue_to_dict",
    "parse_iso_datetime",
    "parse_issues",
    "parse_issues_file",
]
