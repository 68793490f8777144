"""Process-wide logging setup driven by an environment variable."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

ENV_VAR = "DRAKN_LOG"
DEFAULT_LEVEL = logging.DEBUG
TRACE = 5
OFF = logging.CRITICAL + 10
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": OFF,
}


class LoggingAlreadyInitialized(RuntimeError):
    """Raised when logging has already been set up for this process."""


class _AppHandler(logging.StreamHandler):
    """Marker type for the handler installed by initialize_logging."""


def parse_directives(spec: str) -> tuple[int | None, dict[str, int]]:
    """Parse ``level`` and ``target=level`` directives separated by commas.

    Directives that cannot be understood are skipped.
    """
    root_level: int | None = None
    targets: dict[str, int] = {}
    for raw in spec.split(","):
        directive = raw.strip()
        if not directive:
            continue
        target, sep, level_name = directive.rpartition("=")
        level = _LEVELS.get(level_name.strip().lower())
        if level is None:
            continue
        if sep:
            target = target.strip()
            if target:
                targets[target] = level
        else:
            root_level = level
    return root_level, targets


def initialize_logging(environ: Mapping[str, str] | None = None) -> logging.Handler:
    """Install the application's log handler on the root logger and return it."""
    env = os.environ if environ is None else environ
    root = logging.getLogger()
    if any(isinstance(handler, _AppHandler) for handler in root.handlers):
        raise LoggingAlreadyInitialized("logging has already been initialized")

    logging.addLevelName(TRACE, "TRACE")
    root_level, targets = parse_directives(env.get(ENV_VAR, ""))

    handler = _AppHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(DEFAULT_LEVEL if root_level is None else root_level)
    for target, level in targets.items():
        logging.getLogger(target).setLevel(level)

    return handler