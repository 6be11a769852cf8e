"""Per-context workspace preferences: SQLite persistence and async accessor.

Records are keyed by ContextKey. Reads follow a fallback chain:
context record, then the repository-wide record, then the global defaults
from UserConfig. A missing record is never an error.

The accessor is cache-aside: ``peek()`` answers immediately from the
in-memory cache (or the defaults) so rows can render before ``resolve()``
finishes, and every resolution is republished to the key's subscribers.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from platformdirs import user_config_dir

from issue_browser.context_keys import ContextKey, repository_key
from issue_browser.models import CONFIG_APP_NAME, PreferenceRecord

logger = logging.getLogger(__name__)

PREFERENCES_DB_FILENAME = "preferences.db"

PreferenceListener = Callable[[PreferenceRecord], None]


# ============================================================================
# SQLite persistence
# ============================================================================


@contextmanager
def _connect(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Open a connection that commits on success and is always closed."""
    conn = sqlite3.connect(str(db_path))
    try:
        with conn:
            yield conn
    finally:
        conn.close()


def get_preferences_db_path() -> Path:
    """Get the path to the preferences SQLite database."""
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / PREFERENCES_DB_FILENAME


def init_preferences_db(db_path: Path) -> None:
    """Create the preferences table if it doesn't exist."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with _connect(db_path) as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS context_preferences ("
            "  context_key TEXT PRIMARY KEY,"
            "  entity_type TEXT NOT NULL,"
            "  repository TEXT NOT NULL,"
            "  context TEXT NOT NULL,"
            "  preferred_editor TEXT NOT NULL,"
            "  preferred_editor_class TEXT NOT NULL,"
            "  updated_at TEXT NOT NULL"
            ")"
        )


def load_preference_record(db_path: Path, key: ContextKey) -> PreferenceRecord | None:
    """Load the record stored for exactly ``key``, or None."""
    if not db_path.exists():
        return None
    try:
        with _connect(db_path) as conn:
            row = conn.execute(
                "SELECT preferred_editor, preferred_editor_class "
                "FROM context_preferences WHERE context_key = ?",
                (key.storage_key,),
            ).fetchone()
    except sqlite3.Error:
        logger.warning("Failed to load preferences for %s", key.storage_key, exc_info=True)
        return None
    if row is None:
        return None
    editor, editor_class = row
    return PreferenceRecord(preferred_editor=editor, preferred_editor_class=editor_class)


def save_preference_record(db_path: Path, key: ContextKey, record: PreferenceRecord) -> bool:
    """Persist a record for ``key``. Returns True on success."""
    try:
        init_preferences_db(db_path)
        now = datetime.now(UTC).isoformat()
        with _connect(db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO context_preferences "
                "(context_key, entity_type, repository, context, "
                "preferred_editor, preferred_editor_class, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    key.storage_key,
                    key.entity_type,
                    key.repository,
                    key.context,
                    record.preferred_editor,
                    record.preferred_editor_class,
                    now,
                ),
            )
        return True
    except (sqlite3.Error, OSError):
        logger.warning("Failed to save preferences for %s", key.storage_key, exc_info=True)
        return False


# ============================================================================
# Accessor
# ============================================================================


class PreferenceStore:
    """Resolve, cache and republish preference records by ContextKey."""

    def __init__(self, db_path: Path, defaults: PreferenceRecord | None = None) -> None:
        self._db_path = db_path
        self._defaults = defaults or PreferenceRecord()
        self._cache: dict[ContextKey, PreferenceRecord] = {}
        self._listeners: dict[ContextKey, list[PreferenceListener]] = {}

    @property
    def defaults(self) -> PreferenceRecord:
        return self._defaults

    def peek(self, key: ContextKey) -> PreferenceRecord:
        """Return the cached record for ``key`` or the defaults, without I/O."""
        return self._cache.get(key, self._defaults)

    def is_resolved(self, key: ContextKey) -> bool:
        return key in self._cache

    def _lookup(self, key: ContextKey) -> PreferenceRecord:
        """Blocking read through the fallback chain."""
        record = load_preference_record(self._db_path, key)
        if record is None and not key.is_repository_wide:
            record = load_preference_record(self._db_path, repository_key(key.repository))
        return record if record is not None else self._defaults

    async def resolve(self, key: ContextKey) -> PreferenceRecord:
        """Read the record for ``key`` off the event loop and publish it."""
        record = await asyncio.to_thread(self._lookup, key)
        self._cache[key] = record
        self._publish(key, record)
        return record

    async def revalidate(self, key: ContextKey) -> PreferenceRecord:
        """Re-read the record for ``key`` and republish it.

        The cached record stays visible to ``peek`` until the re-read
        replaces it. Revalidating a repository-wide key also refreshes
        every cached context of that repository, since they may fall
        back to it.
        """
        if key.is_repository_wide:
            dependents = [
                cached
                for cached in self._cache
                if cached.repository == key.repository and cached != key
            ]
            await asyncio.gather(*(self.resolve(cached) for cached in dependents))
        return await self.resolve(key)

    async def save(self, key: ContextKey, record: PreferenceRecord) -> bool:
        """Persist ``record`` for ``key``. Callers revalidate afterwards."""
        return await asyncio.to_thread(save_preference_record, self._db_path, key, record)

    def subscribe(self, key: ContextKey, listener: PreferenceListener) -> Callable[[], None]:
        """Register ``listener`` for republished records of ``key``.

        Returns a callable that removes the registration.
        """
        listeners = self._listeners.setdefault(key, [])
        listeners.append(listener)

        def _unsubscribe() -> None:
            registered = self._listeners.get(key)
            if registered is None or listener not in registered:
                return
            registered.remove(listener)
            if not registered:
                del self._listeners[key]

        return _unsubscribe

    def subscriber_count(self, key: ContextKey) -> int:
        return len(self._listeners.get(key, ()))

    def _publish(self, key: ContextKey, record: PreferenceRecord) -> None:
        for listener in list(self._listeners.get(key, ())):
            listener(record)


__all__ = [
    "PREFERENCES_DB_FILENAME",
    "PreferenceStore",
    "get_preferences_db_path",
    "init_preferences_db",
    "load_preference_record",
    "save_preference_record",
]
