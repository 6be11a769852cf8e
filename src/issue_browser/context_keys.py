"""Helpers for addressing preference records by logical context."""

from __future__ import annotations

from dataclasses import dataclass

from issue_browser.models import ENTITY_REPOSITORY

KEY_SEPARATOR = "%"


@dataclass(slots=True, frozen=True)
class ContextKey:
    """Addressing triple for a preference record.

    The context is the issue title, not its id: two issues in the same
    repository with the same title share preferences, and renaming an
    issue orphans its record.
    """

    entity_type: str
    repository: str
    context: str = ""

    @property
    def storage_key(self) -> str:
        """Return the flat string form used as the storage primary key."""
        return KEY_SEPARATOR.join((self.entity_type, self.repository, self.context))

    @property
    def is_repository_wide(self) -> bool:
        return self.entity_type == ENTITY_REPOSITORY and not self.context


def build_context_key(entity_type: str, repository: str, context: str) -> ContextKey:
    """Return the key for an (entity type, repository, context) triple."""

    return ContextKey(entity_type=entity_type, repository=repository, context=context)


def repository_key(repository: str) -> ContextKey:
    """Return the key of the repository-wide record used as a fallback."""

    return ContextKey(entity_type=ENTITY_REPOSITORY, repository=repository, context="")


__all__ = [
    "KEY_SEPARATOR",
    "ContextKey",
    "build_context_key",
    "repository_key",
]
