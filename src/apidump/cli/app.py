"""CLI application entry point and command routing for apidump.

This module is the **sole error boundary** for the entire application.
It catches :class:`~apidump.exceptions.ApidumpError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering messages on stderr and
returning well-defined exit codes.

Commands
--------
* ``apidump tofile <startupassembly> <swaggerdoc> [options]`` — public;
  relaunches itself through the runtime host so the target's manifests
  govern the process that imports it.
* ``apidump _tofile ...`` — hidden; does the actual load-and-serialize
  inside that child process.

Architecture notes
------------------
* No business logic lives here — work is delegated to the core services
  with infrastructure adapters injected.
* The registry is built fresh by :func:`build_runner` for every run.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import NoReturn

from apidump.cli import exit_codes
from apidump.cli.command_runner import (
    CommandRegistry,
    CommandRunner,
    ParsedInvocation,
    SubCommandBuilder,
)
from apidump.cli.console import console, escape
from apidump.cli.logging_setup import setup_logging
from apidump.core.models import DocumentRequest
from apidump.core.protocols import LoadedTarget
from apidump.core.relaunch_service import INNER_COMMAND
from apidump.exceptions import ApidumpError
from apidump.version import __version__

PROG: str = "apidump"
PUBLIC_COMMAND: str = "tofile"

ARG_TARGET: str = "startupassembly"
ARG_DOCUMENT: str = "swaggerdoc"
OPT_OUTPUT: str = "--output"
OPT_HOST: str = "--host"
OPT_BASEPATH: str = "--basepath"
OPT_FORMAT: str = "--format"


# ---------------------------------------------------------------------------
# Command declarations
# ---------------------------------------------------------------------------

def _declare_tofile(c: SubCommandBuilder) -> None:
    c.argument(ARG_TARGET, "relative path to the application's entry module or package")
    c.argument(ARG_DOCUMENT, "name of the API document to retrieve, as configured by the application")
    c.option(OPT_OUTPUT, "relative path where the document will be written, defaults to stdout")
    c.option(OPT_HOST, "a specific host to include in the document")
    c.option(OPT_BASEPATH, "a specific base path to include in the document")
    c.option(OPT_FORMAT, "overrides the JSON format of the document, can be Indented or None")
    c.on_run(_handle_tofile)


def _declare_inner_tofile(c: SubCommandBuilder) -> None:
    c.argument(ARG_TARGET)
    c.argument(ARG_DOCUMENT)
    c.option(OPT_OUTPUT)
    c.option(OPT_HOST)
    c.option(OPT_BASEPATH)
    c.option(OPT_FORMAT)
    c.on_run(_handle_inner_tofile)


def build_runner() -> CommandRunner:
    """Construct the registry and runner for one process."""
    runner = CommandRunner(
        PROG,
        "apidump - API description command line tools",
        CommandRegistry(),
        version=__version__,
    )
    runner.register(
        PUBLIC_COMMAND,
        "retrieves the API description from an application and writes it to file",
        _declare_tofile,
    )
    # Only reached through the runtime host, see RelaunchService.
    runner.register(INNER_COMMAND, "", _declare_inner_tofile)
    return runner


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def tool_image_path() -> str:
    """Absolute path of ``apidump/__main__.py``, the script the child runs."""
    import apidump

    return str(Path(apidump.__file__).resolve().parent / "__main__.py")


def _handle_tofile(invocation: ParsedInvocation) -> int:
    """Outer state: relaunch under the target's manifests and wait."""
    from apidump.core.relaunch_service import RelaunchService
    from apidump.infra.process_launcher import SubprocessLauncher

    service = RelaunchService(
        SubprocessLauncher(),
        interpreter=sys.executable,
        tool_image=tool_image_path(),
    )
    return service.relaunch(invocation[ARG_TARGET], invocation.raw_args)


def _document_request(invocation: ParsedInvocation) -> DocumentRequest:
    return DocumentRequest(
        target_path=invocation[ARG_TARGET],
        document_name=invocation[ARG_DOCUMENT],
        output_path=invocation.get(OPT_OUTPUT),
        host=invocation.get(OPT_HOST),
        base_path=invocation.get(OPT_BASEPATH),
        format=invocation.get(OPT_FORMAT),
    )


def _report_target(target: LoadedTarget, startup_types: list[type]) -> None:
    console.print(
        f"[bold]Target module:[/bold] {escape(target.name)} ({escape(target.location)})"
    )
    console.print("Startup classes detected (marked by @startup):")
    for cls in startup_types:
        console.print(f"* {escape(cls.__module__)}.{escape(cls.__qualname__)}")


def _handle_inner_tofile(invocation: ParsedInvocation) -> int:
    """Inner state: load the target, fetch its document and write it."""
    from apidump.core.document_service import DocumentService
    from apidump.infra.document_provider import resolve_json_options, resolve_provider
    from apidump.infra.json_sink import JsonDocumentSink
    from apidump.infra.target_loader import ModuleTargetLoader

    service = DocumentService(
        ModuleTargetLoader(),
        resolve_provider=resolve_provider,
        resolve_json_options=resolve_json_options,
        sink=JsonDocumentSink(),
    )
    output_path = service.write_document(
        _document_request(invocation),
        on_target_loaded=_report_target,
    )

    if output_path is not None:
        console.print(
            f"[bold green]API description written to[/bold green] {escape(str(output_path))}"
        )
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the apidump CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code; for ``tofile`` this is the child's code.
    """
    setup_logging()
    runner = build_runner()
    return runner.run(sys.argv[1:] if argv is None else argv)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def run_guarded(entry: Callable[[], int]) -> NoReturn:
    """Run *entry* and exit the process with its code or a rendered error.

    Shared by the console script and the runtime host.
    """
    try:
        code = entry()
        sys.exit(code)
    except ApidumpError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red]\n"
            f"  {escape(type(exc).__name__)}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)


def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point."""
    run_guarded(main)
