"""End-to-end tests: ``apidump tofile`` with a real child process.

The outer command relaunches ``python -m apidump.cli.runtime_host``.
``PYTHONPATH`` is cleared first: the relaunch itself must make apidump
importable in the child whether or not the package is installed.

Coverage:
* Document on stdout, diagnostics on stderr.
* ``--output`` writes the file and prints the confirmation.
* Manifests shape the child: import roots and environment.
* Failures in the child become a non-zero exit and write nothing.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from apidump.cli import exit_codes
from apidump.cli.app import main

from conftest import write_manifests

OPENAPI_APP_SOURCE = '''\
import os

from docs_helpers import TAGS


class OpenApiApp:
    openapi_document_name = "public"

    def openapi(self):
        return {
            "openapi": "3.0.1",
            "info": {"title": os.environ["DOCS_TITLE"], "version": "1.0"},
            "tags": TAGS,
        }


app = OpenApiApp()
'''


@pytest.fixture(autouse=True)
def _child_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PYTHONPATH", raising=False)
    monkeypatch.chdir(tmp_path)


class TestToFile:
    def test_document_on_stdout(
        self, sample_app: Path, capfd: pytest.CaptureFixture[str]
    ) -> None:
        code = main(["tofile", sample_app.name, "v1"])

        captured = capfd.readouterr()
        assert code == exit_codes.SUCCESS, captured.err
        assert json.loads(captured.out)["info"]["title"] == "Sample API"
        assert "Target module: sampleapp" in captured.err
        assert "sampleapp.Startup" in captured.err

    def test_output_file_with_overrides(
        self, sample_app: Path, capfd: pytest.CaptureFixture[str]
    ) -> None:
        code = main(
            [
                "tofile", sample_app.name, "v1",
                "--output", "swagger.json",
                "--host", "example.com",
                "--basepath", "/api",
                "--format", "Indented",
            ]
        )

        captured = capfd.readouterr()
        assert code == exit_codes.SUCCESS, captured.err
        assert captured.out == ""
        assert "API description written to" in captured.err
        text = (sample_app.parent / "swagger.json").read_text(encoding="utf-8")
        document = json.loads(text)
        assert document["host"] == "example.com"
        assert document["basePath"] == "/api"
        assert text.startswith('{\n  "swagger"')

    def test_manifests_shape_the_child(
        self, tmp_path: Path, capfd: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib" / "docs_helpers.py").write_text(
            "TAGS = [{'name': 'pets'}]\n", encoding="utf-8",
        )
        entry = tmp_path / "openapiapp.py"
        entry.write_text(OPENAPI_APP_SOURCE, encoding="utf-8")
        write_manifests(
            entry,
            deps={"paths": ["lib"]},
            runtime={"environment": {"DOCS_TITLE": "Pets Service"}},
        )

        code = main(["tofile", entry.name, "public", "--host", "api.example.com"])

        captured = capfd.readouterr()
        assert code == exit_codes.SUCCESS, captured.err
        document = json.loads(captured.out)
        assert document["info"]["title"] == "Pets Service"
        assert document["tags"] == [{"name": "pets"}]
        assert document["servers"] == [{"url": "//api.example.com"}]


class TestFailures:
    def test_missing_target(self, tmp_path: Path, capfd: pytest.CaptureFixture[str]) -> None:
        code = main(["tofile", "missing.py", "v1", "--output", "swagger.json"])

        assert code == exit_codes.GENERAL_ERROR
        assert "not found" in capfd.readouterr().err
        assert not (tmp_path / "swagger.json").exists()

    def test_unknown_document(
        self, sample_app: Path, capfd: pytest.CaptureFixture[str]
    ) -> None:
        code = main(["tofile", sample_app.name, "v2", "--output", "swagger.json"])

        assert code != exit_codes.SUCCESS
        assert "Unknown Swagger document - v2" in capfd.readouterr().err
        assert not (sample_app.parent / "swagger.json").exists()

    def test_usage_error_never_spawns(
        self, monkeypatch: pytest.MonkeyPatch, capfd: pytest.CaptureFixture[str]
    ) -> None:
        from apidump.infra import process_launcher

        def fail(*args: object, **kwargs: object) -> None:
            raise AssertionError("child process started")

        monkeypatch.setattr(process_launcher.subprocess, "Popen", fail)
        assert main(["tofile", "app.py"]) == exit_codes.USAGE_ERROR
