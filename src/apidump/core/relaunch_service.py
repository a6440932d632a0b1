"""Outer half of ``tofile``: relaunch under the target's manifests.

Code imported under the tool's own ``sys.path`` may fail to resolve the
target application's transitive dependencies, so the public command
never imports the target.  It derives the manifest paths, starts one
child interpreter through the runtime host with those manifests bound,
forwards its own arguments verbatim after the hidden inner command name,
and waits.

Guarantees
----------
* Exactly one child per call, no retries, no timeout.
* The child's exit code is returned unchanged.
* The child finds apidump through ``PYTHONPATH`` even when it is not
  installed: the directory holding the tool package is put first.
* No output beyond debug log records.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from apidump.core.models import TargetApplicationDescriptor
from apidump.core.protocols import ProcessLauncher
from apidump.exceptions import ApidumpError, ProcessSpawnError

logger = logging.getLogger(__name__)

RUNTIME_HOST_MODULE: str = "apidump.cli.runtime_host"
INNER_COMMAND: str = "_tofile"


class RelaunchService:
    """Builds and runs the child command line.

    Parameters
    ----------
    launcher:
        Any object satisfying the :class:`ProcessLauncher` protocol.
    interpreter:
        Python executable for the child, normally ``sys.executable``.
    tool_image:
        Path of the script the runtime host executes
        (``apidump/__main__.py``).
    """

    def __init__(
        self,
        launcher: ProcessLauncher,
        *,
        interpreter: str,
        tool_image: str,
        inner_command: str = INNER_COMMAND,
    ) -> None:
        self._launcher: ProcessLauncher = launcher
        self._interpreter = interpreter
        self._tool_image = tool_image
        self._inner_command = inner_command

    # ------------------------------------------------------------------
    # Command construction (pure)
    # ------------------------------------------------------------------

    def build_command(
        self,
        target: TargetApplicationDescriptor,
        raw_args: Sequence[str],
    ) -> list[str]:
        """Return the child argv for *target*, forwarding *raw_args* as-is."""
        return [
            self._interpreter,
            "-m",
            RUNTIME_HOST_MODULE,
            "--depsfile",
            target.deps_path,
            "--runtimeconfig",
            target.runtime_config_path,
            self._tool_image,
            self._inner_command,
            *raw_args,
        ]

    def build_environment(self, base: Mapping[str, str]) -> dict[str, str]:
        """Return *base* with the tool's package root leading ``PYTHONPATH``."""
        package_root = str(Path(self._tool_image).parent.parent)
        entries = [e for e in base.get("PYTHONPATH", "").split(os.pathsep) if e]
        env = dict(base)
        env["PYTHONPATH"] = os.pathsep.join(
            [package_root] + [e for e in entries if e != package_root]
        )
        return env

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def relaunch(self, assembly_path: str, raw_args: Sequence[str]) -> int:
        """Run the inner command in a child process and return its exit code.

        Raises
        ------
        ProcessSpawnError
            When the child cannot be started.
        """
        target = TargetApplicationDescriptor.from_assembly_path(assembly_path)
        command = self.build_command(target, raw_args)
        logger.debug("Relaunching: %s", command)

        try:
            exit_code = self._launcher.run(command, self.build_environment(os.environ))
        except ApidumpError:
            raise
        except Exception as exc:
            raise ProcessSpawnError(
                f"Unexpected error while running the child process: {exc}",
            ) from exc

        logger.debug("Child exited with code %d", exit_code)
        return exit_code
