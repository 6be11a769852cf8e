"""Configuration persistence: load and save."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from issue_browser.models import (
    CONFIG_APP_NAME,
    DEFAULT_EDITOR,
    DEFAULT_EDITOR_CLASS,
    DEFAULT_GITPOD_BASE_URL,
    DEFAULT_THEME_NAME,
    EDITOR_CLASSES,
    MAX_RECENT_ISSUES,
    VIEW_LIVE,
    VIEW_MODES,
    Issue,
    SessionState,
    UserConfig,
)
from issue_browser.parsing import issue_from_dict, issue_to_dict

logger = logging.getLogger(__name__)

# _dict_to_config() never raises; each field falls back to its default:
#   recent_issues: parseable entries, unique ids, at most MAX_RECENT_ISSUES
#   default_editor_class: one of EDITOR_CLASSES
#   session.view: one of VIEW_MODES
#   other scalars: type-checked with _safe_get()

CONFIG_FILENAME = "config.json"
CORRUPT_SUFFIX = ".corrupt"


def get_config_path() -> Path:
    """Return the config.json location under the platform config directory:

    - Linux: ~/.config/issue-browser/config.json
    - macOS: ~/Library/Application Support/issue-browser/config.json
    - Windows: %APPDATA%/issue-browser/config.json
    """
    return Path(user_config_dir(CONFIG_APP_NAME)) / CONFIG_FILENAME


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    return {
        "version": config.version,
        "default_editor": config.default_editor,
        "default_editor_class": config.default_editor_class,
        "gitpod_base_url": config.gitpod_base_url,
        "ascii_icons": config.ascii_icons,
        "theme_name": config.theme_name,
        "session": {
            "view": config.session.view,
            "current_filter": config.session.current_filter,
            "scroll_index": config.session.scroll_index,
        },
        "recent_issues": [
            issue_to_dict(issue) for issue in config.recent_issues[:MAX_RECENT_ISSUES]
        ],
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Return ``data[key]`` if it is an ``expected_type``, else ``default``."""
    value = data.get(key, default)
    return value if isinstance(value, expected_type) else default


def _parse_editor_class(value: Any) -> str:
    """Validate the default workspace class."""
    if value in EDITOR_CLASSES:
        return value
    if value is not None:
        logger.warning("Invalid default_editor_class %r, using %r", value, DEFAULT_EDITOR_CLASS)
    return DEFAULT_EDITOR_CLASS


def _parse_session_state(data: dict[str, Any]) -> SessionState:
    session_data = _safe_get(data, "session", {}, dict)

    view = _safe_get(session_data, "view", VIEW_LIVE, str)
    if view not in VIEW_MODES:
        view = VIEW_LIVE

    return SessionState(
        view=view,
        current_filter=_safe_get(session_data, "current_filter", "", str),
        scroll_index=max(0, _safe_get(session_data, "scroll_index", 0, int)),
    )


def _parse_recent_issues(data: dict[str, Any]) -> list[Issue]:
    """Parse persisted recents (most-recent-first), dropping malformed entries."""
    raw_recents = data.get("recent_issues", [])
    if not isinstance(raw_recents, list):
        return []
    result: list[Issue] = []
    seen: set[str] = set()
    for entry in raw_recents:
        issue = issue_from_dict(entry)
        if issue is None or issue.id in seen:
            continue
        seen.add(issue.id)
        result.append(issue)
        if len(result) >= MAX_RECENT_ISSUES:
            break
    return result


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    default_editor = _safe_get(data, "default_editor", DEFAULT_EDITOR, str).strip()
    base_url = _safe_get(data, "gitpod_base_url", DEFAULT_GITPOD_BASE_URL, str).strip()
    return UserConfig(
        recent_issues=_parse_recent_issues(data),
        session=_parse_session_state(data),
        default_editor=default_editor or DEFAULT_EDITOR,
        default_editor_class=_parse_editor_class(data.get("default_editor_class")),
        gitpod_base_url=base_url or DEFAULT_GITPOD_BASE_URL,
        ascii_icons=_safe_get(data, "ascii_icons", False, bool),
        theme_name=_safe_get(data, "theme_name", DEFAULT_THEME_NAME, str),
        version=_safe_get(data, "version", 1, int),
    )


def _backup_corrupt_config(config_path: Path) -> None:
    """Move an unreadable config aside so the next save starts clean."""
    backup_path = config_path.with_name(config_path.name + CORRUPT_SUFFIX)
    try:
        os.replace(config_path, backup_path)
        logger.warning("Backed up corrupt config to %s", backup_path)
    except OSError as e:
        logger.warning("Could not back up corrupt config: %s", e)


def _defaulted_config() -> UserConfig:
    config = UserConfig()
    config.config_defaulted = True
    return config


def load_config() -> UserConfig:
    """Read config.json, falling back to defaults when it is missing.

    An unparseable file is moved to ``config.json.corrupt`` and the defaults
    come back with ``config_defaulted`` set so the UI can warn the user.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        _backup_corrupt_config(config_path)
        return _defaulted_config()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return UserConfig()

    if not isinstance(data, dict):
        logger.warning(
            "Config file root is %s, not an object; using defaults", type(data).__name__
        )
        _backup_corrupt_config(config_path)
        return _defaulted_config()
    return _dict_to_config(data)


def _write_atomic(path: Path, text: str) -> None:
    """Write ``text`` to a sibling temp file, then swap it into place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".config-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def save_config(config: UserConfig) -> bool:
    """Persist ``config``; returns False (and logs) when the file cannot be written."""
    config_path = get_config_path()
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        _write_atomic(config_path, json.dumps(_config_to_dict(config), indent=2, ensure_ascii=False))
    except OSError as e:
        logger.error("Failed to save config to %s: %s", config_path, e)
        return False
    return True


__all__ = [
    "CONFIG_FILENAME",
    "CORRUPT_SUFFIX",
    "get_config_path",
    "load_config",
    "save_config",
]
