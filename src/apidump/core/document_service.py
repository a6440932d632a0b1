"""Inner half of ``tofile``: load the target, fetch and write its document.

This runs inside the relaunched child, whose ``sys.path`` and environment
were already shaped by the target's manifests.  Every collaborator is
injected, so the pipeline is unit-testable without importing real web
applications:

1. Load the target code through a :class:`TargetLoader`.
2. Report classes carrying the startup marker (diagnostic only).
3. Compose the app through the loader's entry-point convention.
4. Ask the app's :class:`DocumentProvider` for the named document.
5. Resolve the app's JSON preferences, apply any ``--format`` override.
6. Serialize into a scoped destination (file or stdout).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from apidump.core.models import DocumentRequest, JsonOptions
from apidump.core.protocols import DocumentProvider, DocumentSink, LoadedTarget, TargetLoader
from apidump.markers import STARTUP_MARKER

logger = logging.getLogger(__name__)

TargetLoadedCallback = Callable[[LoadedTarget, list[type]], None]


class DocumentService:
    """Drives the load → compose → fetch → serialize pipeline.

    Parameters
    ----------
    loader:
        Imports the target application.
    resolve_provider:
        Maps the composed app to its :class:`DocumentProvider`.
    resolve_json_options:
        Maps the composed app to its serializer preferences.
    sink:
        Opens the destination and serializes into it.
    """

    def __init__(
        self,
        loader: TargetLoader,
        *,
        resolve_provider: Callable[[Any], DocumentProvider],
        resolve_json_options: Callable[[Any], JsonOptions],
        sink: DocumentSink,
    ) -> None:
        self._loader = loader
        self._resolve_provider = resolve_provider
        self._resolve_json_options = resolve_json_options
        self._sink = sink

    def write_document(
        self,
        request: DocumentRequest,
        *,
        on_target_loaded: TargetLoadedCallback | None = None,
    ) -> Path | None:
        """Write the requested document and return the file path, if any.

        Returns ``None`` when the document went to standard output.
        Errors from the loader, the target application or the provider
        propagate unchanged; a file opened before the failure may remain.
        """
        target = self._loader.load(request.target_path)
        startup_types = target.types_with_marker(STARTUP_MARKER)
        if on_target_loaded is not None:
            on_target_loaded(target, startup_types)

        app = target.compose()
        provider = self._resolve_provider(app)
        document = provider.get_document(
            request.document_name,
            request.host,
            request.base_path,
            None,
        )

        options = self._resolve_json_options(app)
        override = request.formatting_override
        if override is not None:
            options = options.with_formatting(override)

        output_path = (
            Path.cwd() / request.output_path if request.output_path else None
        )
        logger.debug(
            "Writing document %r to %s (%s)",
            request.document_name,
            output_path or "<stdout>",
            options.formatting.value,
        )
        with self._sink.open(output_path) as stream:
            self._sink.serialize(document, stream, options)
        return output_path
