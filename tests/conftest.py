"""Shared pytest fixtures and configuration for the apidump test suite.

Guidelines
----------
* No network access in any test.
* Target applications are small modules written into ``tmp_path``.
* Tests that import a target must use ``isolated_imports`` so the
  module and its ``sys.path`` entry do not leak into other tests.
* Only the end-to-end tests start real child processes.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

SAMPLE_MODULE = "sampleapp"

SAMPLE_APP_SOURCE = '''\
from apidump.markers import startup

DOCUMENT = {
    "swagger": "2.0",
    "info": {"title": "Sample API", "version": "v1"},
    "paths": {"/pets": {"get": {"responses": {"200": {"description": "OK"}}}}},
}


class UnknownSwaggerDocumentError(LookupError):
    pass


@startup
class Startup:
    pass


class PetsController:
    pass


class SampleApp:
    json_options = {"formatting": "None"}

    def __init__(self):
        self.calls = []

    def get_document(self, document_name, host=None, base_path=None, schemes=None):
        self.calls.append((document_name, host, base_path, schemes))
        if document_name != "v1":
            raise UnknownSwaggerDocumentError(
                f"Unknown Swagger document - {document_name}"
            )
        document = dict(DOCUMENT)
        if host is not None:
            document["host"] = host
        if base_path is not None:
            document["basePath"] = base_path
        return document


def create_app():
    return SampleApp()
'''


def write_manifests(entry: Path, deps: dict | None = None, runtime: dict | None = None) -> None:
    """Write ``<stem>.deps.json`` and ``<stem>.runtimeconfig.json`` beside *entry*."""
    base = entry.with_suffix("")
    Path(f"{base}.deps.json").write_text(json.dumps(deps or {}), encoding="utf-8")
    Path(f"{base}.runtimeconfig.json").write_text(
        json.dumps(runtime or {}), encoding="utf-8",
    )


@pytest.fixture
def sample_app(tmp_path: Path) -> Path:
    """A target module with a ``get_document`` provider plus empty manifests."""
    entry = tmp_path / f"{SAMPLE_MODULE}.py"
    entry.write_text(SAMPLE_APP_SOURCE, encoding="utf-8")
    write_manifests(entry)
    return entry


@pytest.fixture
def isolated_imports(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Restore ``sys.path`` and drop modules imported from ``tmp_path``."""
    monkeypatch.setattr(sys, "path", list(sys.path))
    before = set(sys.modules)
    yield
    roots = (str(tmp_path), str(tmp_path.resolve()))
    for name in set(sys.modules) - before:
        origin = getattr(sys.modules.get(name), "__file__", None) or ""
        if origin.startswith(roots):
            sys.modules.pop(name, None)
