"""CLI/bootstrap helpers for the issue browser application."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from issue_browser.action_messages import build_actionable_error
from issue_browser.config import load_config
from issue_browser.models import CONFIG_APP_NAME, VIEW_RECENTS, Issue, UserConfig
from issue_browser.parsing import parse_issues_file

logger = logging.getLogger(__name__)

DEFAULT_INPUT_FILENAME = "issues.json"


def _resolve_input_file(input_path: Path) -> list[Issue] | int:
    """Validate and parse an issues file. Returns issues or exit code."""
    issues_file = input_path.resolve()
    if not issues_file.exists():
        print(
            build_actionable_error(
                "load issues",
                why=f"{issues_file} was not found",
                next_step="pass an exported issues file with -i, or start with --recents",
            ),
            file=sys.stderr,
        )
        return 1
    if issues_file.is_dir():
        print(f"Error: {issues_file} is a directory, not a file", file=sys.stderr)
        return 1
    if not os.access(issues_file, os.R_OK):
        print(f"Error: {issues_file} is not readable (permission denied)", file=sys.stderr)
        return 1
    try:
        return parse_issues_file(issues_file)
    except OSError as e:
        print(f"Error: Failed to read {issues_file}: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(
            build_actionable_error(
                "load issues",
                why=str(e),
                next_step="export the issues again as JSON (a list or a GraphQL search result)",
            ),
            file=sys.stderr,
        )
        return 1


def _resolve_issues(args: argparse.Namespace, base_dir: Path) -> list[Issue] | int:
    """Pick the issues source for startup. Returns issues or exit code.

    Without ``-i`` the default ``issues.json`` is optional when starting
    in the recents view.
    """
    if args.input is not None:
        return _resolve_input_file(args.input)
    default_file = base_dir / DEFAULT_INPUT_FILENAME
    if args.recents and not default_file.exists():
        return []
    return _resolve_input_file(default_file)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(color_mode: str) -> None:
    """Configure environment hints for terminal color behavior."""
    if color_mode == "never":
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)
        return
    if color_mode == "always":
        os.environ["FORCE_COLOR"] = "1"
        os.environ.pop("NO_COLOR", None)
        return
    # auto
    os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="issue-browser",
        description="Browse GitHub issues in a TUI and open them in Gitpod workspaces",
    )
    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        default=None,
        help=f"JSON file with exported issues (default: ./{DEFAULT_INPUT_FILENAME})",
    )
    parser.add_argument(
        "--recents",
        action="store_true",
        help="Start in the recents view (the issues file becomes optional)",
    )
    parser.add_argument(
        "--no-restore",
        action="store_true",
        help="Start with fresh session (ignore saved view, filter and scroll position)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/issue-browser/debug.log)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode for terminal UI (default: auto)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors (equivalent to --color never)",
    )
    parser.add_argument(
        "--ascii",
        action="store_true",
        help="Use ASCII-only row icons for compatibility with limited terminals",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    resolve_issues_fn: Callable[[argparse.Namespace, Path], list[Issue] | int] = _resolve_issues,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    args = _build_parser().parse_args(argv)

    color_mode = "never" if args.no_color else args.color
    configure_color_mode_fn(color_mode)
    configure_logging_fn(args.debug)
    logger.debug("issue-browser starting, cwd=%s", Path.cwd())

    config = load_config_fn()

    result = resolve_issues_fn(args, Path.cwd())
    if isinstance(result, int):
        return result
    issues = result

    if not issues and not args.recents:
        print(
            build_actionable_error(
                "start issue-browser",
                why="the selected source contained no issues",
                next_step="choose another input file or start with --recents",
            ),
            file=sys.stderr,
        )
        return 1

    if not validate_interactive_tty_fn():
        print(
            "Error: issue-browser requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run issue-browser directly in a terminal session", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    # Most recently updated first
    issues.sort(key=lambda issue: issue.updated_at, reverse=True)

    if app_factory is None:
        from issue_browser.app import IssueBrowser as _IssueBrowser

        app_factory = _IssueBrowser

    app = app_factory(
        issues,
        config=config,
        restore_session=not args.no_restore,
        ascii_icons=args.ascii,
        start_view=VIEW_RECENTS if args.recents else None,
    )
    app.run()
    return 0


__all__ = [
    "DEFAULT_INPUT_FILENAME",
    "_configure_color_mode",
    "_configure_logging",
    "_resolve_input_file",
    "_resolve_issues",
    "_validate_interactive_tty",
    "main",
]
