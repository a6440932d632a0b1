"""Subprocess-backed implementation of :class:`~apidump.core.protocols.ProcessLauncher`.

This module is the **only** place in the codebase that starts a child
process.  The child inherits the environment, the working directory and
the standard streams; nothing else is shared.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Mapping, Sequence

from apidump.exceptions import ProcessSpawnError

logger = logging.getLogger(__name__)


class SubprocessLauncher:
    """Concrete :class:`ProcessLauncher` built on :class:`subprocess.Popen`.

    A child killed by signal *N* is reported as ``128 + N``, the shell
    convention, so the parent can still exit with a meaningful status.
    """

    def run(
        self,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Start *command*, block until it exits and return its exit code.

        The child inherits this process's environment unless *env* is given.

        Raises
        ------
        ProcessSpawnError
            When the executable cannot be started.
        """
        argv = list(command)
        try:
            process = subprocess.Popen(argv, env=None if env is None else dict(env))
        except OSError as exc:
            raise ProcessSpawnError(
                f"Could not start child process {argv[0]!r}: {exc}",
                hint="Check that the Python interpreter running apidump still exists.",
            ) from exc

        logger.debug("Started child pid=%d", process.pid)
        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            # The child received the same SIGINT; let it finish first.
            process.wait()
            raise

        if returncode < 0:
            return 128 + (-returncode)
        return returncode
