"""Logging setup for command-line entry points."""

import logging
import sys

from rich.logging import RichHandler

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def resolve_log_level(level_str: str) -> int:
    """
    Convert a level name to a logging constant.

    Unknown names fall back to DEFAULT_LOG_LEVEL with a note on stderr,
    since logging is not configured yet at this point.
    """
    level = getattr(logging, level_str.upper(), None)
    if not isinstance(level, int):
        print(
            f"WARNING: Invalid log level '{level_str}', "
            f"falling back to {DEFAULT_LOG_LEVEL}",
            file=sys.stderr,
        )
        level = getattr(logging, DEFAULT_LOG_LEVEL)
    return level


def create_log_handler() -> logging.Handler:
    """Rich output on a terminal, plain lines otherwise (pipes, containers)."""
    if sys.stderr.isatty():
        return RichHandler(rich_tracebacks=True, show_path=False)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    return handler


def configure_logging(level_str: str = DEFAULT_LOG_LEVEL) -> None:
    """Install a single handler on the root logger."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(create_log_handler())
    root.setLevel(resolve_log_level(level_str))
