"""Logging setup for the ``pageguide`` command.

The CLI is quiet by default: only warnings reach stderr, as ``name: message``.
``--debug`` (or ``debug: true`` in the config file) switches to DEBUG with
timestamps, which shows classifier scores, chosen routes and guidance steps.

Environment overrides, for CI runs where flags are awkward to thread through:

- ``PAGEGUIDE_LOG_LEVEL``: any level name or number; wins over everything
  except an explicit ``level`` argument
- ``PAGEGUIDE_DEBUG``: ``true``/``1``/``yes`` behaves like ``--debug``
"""

import logging
import os
import sys
from typing import TextIO

_DEBUG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
_DEFAULT_FORMAT = "%(name)s: %(message)s"

# The guidance executor polls the DOM through asyncio; its debug chatter is not ours.
_QUIET_LOGGERS = ("asyncio",)


def resolve_level(*, debug: bool = False, level: int | str | None = None) -> int:
    """Pick the effective level from the argument, the environment and ``debug``."""
    if level is not None:
        return _parse_level(level)
    if env_level := os.environ.get("PAGEGUIDE_LOG_LEVEL"):
        return _parse_level(env_level)
    if debug or os.environ.get("PAGEGUIDE_DEBUG", "").lower() in ("true", "1", "yes"):
        return logging.DEBUG
    return logging.WARNING


def configure_logging(
    *,
    debug: bool = False,
    level: int | str | None = None,
    stream: TextIO | None = None,
) -> int:
    """Install a single stderr handler on the root logger.

    Replaces any handlers already installed, so calling it twice (once per CLI
    invocation in tests) does not duplicate output. Returns the level used.
    """
    resolved = resolve_level(debug=debug, level=level)
    fmt = _DEBUG_FORMAT if resolved <= logging.DEBUG else _DEFAULT_FORMAT

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt))

    root = logging.getLogger()
    root.setLevel(resolved)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("pageguide logging at %s", logging.getLevelName(resolved))
    return resolved


def _parse_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.strip().upper())
    if isinstance(numeric, int):
        return numeric
    try:
        return int(level)
    except ValueError:
        return logging.WARNING
