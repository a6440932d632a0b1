"""Runtime host for the relaunched child: ``python -m apidump.cli.runtime_host``.

Command line::

    python -m apidump.cli.runtime_host --depsfile app.deps.json \\
        --runtimeconfig app.runtimeconfig.json /path/to/apidump/__main__.py \\
        _tofile app.py v1 --output openapi.json

The host loads both manifests, applies them to this interpreter and then
runs the tool image as ``__main__`` with the remaining arguments.  Only
the leading ``--depsfile`` / ``--runtimeconfig`` options belong to the
host; everything after the image path is forwarded untouched.
"""

from __future__ import annotations

import logging
import runpy
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from apidump.cli import exit_codes
from apidump.cli.app import run_guarded
from apidump.cli.console import console, escape
from apidump.cli.logging_setup import setup_logging
from apidump.exceptions import UsageError
from apidump.infra.manifests import DependencyManifest, RuntimeConfig

logger = logging.getLogger(__name__)

HOST_USAGE: str = (
    "python -m apidump.cli.runtime_host --depsfile PATH --runtimeconfig PATH "
    "IMAGE [ARGS...]"
)


@dataclass(frozen=True, slots=True)
class HostInvocation:
    deps_path: str
    runtime_config_path: str
    image: str
    args: tuple[str, ...]


def parse_host_args(argv: Sequence[str]) -> HostInvocation:
    """Split *argv* into host options, the image and forwarded arguments."""
    options: dict[str, str] = {}
    i = 0
    while i < len(argv) and argv[i] in ("--depsfile", "--runtimeconfig"):
        if i + 1 >= len(argv):
            raise UsageError(f"Option '{argv[i]}' expects a value.")
        options[argv[i]] = argv[i + 1]
        i += 2

    for required in ("--depsfile", "--runtimeconfig"):
        if required not in options:
            raise UsageError(f"Missing required option '{required}'.")
    if i >= len(argv):
        raise UsageError("Missing the image to execute.")

    return HostInvocation(
        deps_path=options["--depsfile"],
        runtime_config_path=options["--runtimeconfig"],
        image=argv[i],
        args=tuple(argv[i + 1 :]),
    )


def _exit_code(code: object) -> int:
    """Translate a :class:`SystemExit` payload the way the interpreter does."""
    if code is None:
        return exit_codes.SUCCESS
    if isinstance(code, int):
        return code
    print(code, file=sys.stderr)
    return exit_codes.GENERAL_ERROR


def run_image(image: str, args: Sequence[str]) -> int:
    """Execute *image* as ``__main__`` with ``sys.argv[1:] == args``."""
    sys.argv = [image, *args]
    try:
        runpy.run_path(image, run_name="__main__")
    except SystemExit as exc:
        return _exit_code(exc.code)
    return exit_codes.SUCCESS


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    try:
        invocation = parse_host_args(sys.argv[1:] if argv is None else argv)
    except UsageError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        console.print(f"Usage: {escape(HOST_USAGE)}")
        return exit_codes.USAGE_ERROR

    dependencies = DependencyManifest.load(invocation.deps_path)
    runtime_config = RuntimeConfig.load(invocation.runtime_config_path)
    dependencies.apply()
    runtime_config.apply()

    logger.debug("Running %s with %s", invocation.image, list(invocation.args))
    return run_image(invocation.image, invocation.args)


if __name__ == "__main__":
    run_guarded(main)
