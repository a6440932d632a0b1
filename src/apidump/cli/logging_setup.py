"""Diagnostic logging for apidump.

Log records are for troubleshooting the relaunch (which interpreter,
which manifests, which argv); they are silent unless
``APIDUMP_LOG_LEVEL`` asks for them.  The child process inherits the
variable, so one setting covers both halves of a ``tofile`` run.
"""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV: str = "APIDUMP_LOG_LEVEL"
_DEF_LEVEL = logging.WARNING


def resolve_level(raw: str | None) -> int:
    """Map a level name such as ``"debug"`` to a :mod:`logging` level."""
    if not raw:
        return _DEF_LEVEL
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else _DEF_LEVEL


def setup_logging(level: int | None = None) -> None:
    """Attach a stderr handler to the ``apidump`` logger once per process."""
    logger = logging.getLogger("apidump")
    if logger.handlers:
        return
    if level is None:
        level = resolve_level(os.getenv(LOG_LEVEL_ENV))

    handler: logging.Handler
    try:
        from rich.console import Console
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    else:
        # stdout may carry the document; keep log records on stderr.
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
