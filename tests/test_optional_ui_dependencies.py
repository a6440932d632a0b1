"""Regression tests for running without Rich.

The relaunched child imports with the target's ``sys.path`` in front,
where Rich may be missing.  Help, errors, diagnostics and the document
itself must all still work with plain stderr output.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

from apidump.cli import exit_codes
from apidump.cli.app import main, run_guarded
from apidump.cli.logging_setup import setup_logging
from apidump.exceptions import TargetLoadError


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("rich", "rich.console", "rich.markup", "rich.table", "rich.logging"):
        monkeypatch.setitem(sys.modules, name, None)


def test_help_works_without_rich(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _hide_rich(monkeypatch)

    assert main(["--help"]) == exit_codes.SUCCESS
    err = capsys.readouterr().err
    assert "tofile" in err
    assert "[bold]" not in err


def test_version_works_without_rich(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _hide_rich(monkeypatch)

    assert main(["--version"]) == exit_codes.SUCCESS
    assert "apidump" in capsys.readouterr().err


def test_usage_error_plain_text(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _hide_rich(monkeypatch)

    assert main(["tofile", "app.py"]) == exit_codes.USAGE_ERROR
    err = capsys.readouterr().err
    assert "Error: Missing required argument(s): <swaggerdoc>." in err
    assert "[--output <value>]" in err


def test_error_boundary_without_rich(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _hide_rich(monkeypatch)

    def entry() -> int:
        raise TargetLoadError("Target not found: [app].py", hint="Check the path.")

    with pytest.raises(SystemExit) as exc_info:
        run_guarded(entry)

    assert exc_info.value.code == exit_codes.GENERAL_ERROR
    err = capsys.readouterr().err
    assert "Error: Target not found: [app].py" in err
    assert "Hint: Check the path." in err


@pytest.mark.usefixtures("isolated_imports")
def test_inner_command_without_rich(
    sample_app: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _hide_rich(monkeypatch)
    monkeypatch.chdir(sample_app.parent)

    assert main(["_tofile", sample_app.name, "v1"]) == exit_codes.SUCCESS
    captured = capsys.readouterr()
    assert json.loads(captured.out)["swagger"] == "2.0"
    assert "Target module: sampleapp" in captured.err


def test_logging_falls_back_to_stream_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    logger = logging.getLogger("apidump")
    monkeypatch.setattr(logger, "handlers", [])
    monkeypatch.setattr(logger, "level", logger.level)
    monkeypatch.setattr(logger, "propagate", logger.propagate)

    setup_logging(logging.DEBUG)

    assert len(logger.handlers) == 1
    assert type(logger.handlers[0]) is logging.StreamHandler
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
