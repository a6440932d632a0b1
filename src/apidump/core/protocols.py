"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters and target
applications must satisfy.  Core code depends ONLY on these protocols —
never on concrete implementations.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, Protocol, TextIO, runtime_checkable

from apidump.core.models import JsonOptions


@runtime_checkable
class DocumentProvider(Protocol):
    """Capability, owned by the target application, that builds a document.

    This is the shape a target exposes either on the composed app itself
    or as its ``document_provider`` attribute.
    """

    def get_document(
        self,
        document_name: str,
        host: str | None = None,
        base_path: str | None = None,
        schemes: Sequence[str] | None = None,
    ) -> Mapping[str, Any]:
        """Return the API description named *document_name*.

        *host* and *base_path* are optional overrides; ``None`` means the
        provider decides.  *schemes* is reserved and always ``None``.

        Raises
        ------
        Exception
            An application-defined error when *document_name* is not
            configured.
        """
        ...  # pragma: no cover


class LoadedTarget(Protocol):
    """The target application's code, imported into this process."""

    @property
    def name(self) -> str:
        """Declared identity of the loaded code (the module name)."""
        ...  # pragma: no cover

    @property
    def location(self) -> str:
        """Filesystem location the code was loaded from."""
        ...  # pragma: no cover

    def declared_types(self) -> list[type]:
        """Classes defined by the loaded code itself, in source order."""
        ...  # pragma: no cover

    def types_with_marker(self, marker: str) -> list[type]:
        """Subset of :meth:`declared_types` carrying the *marker* attribute."""
        ...  # pragma: no cover

    def compose(self) -> Any:
        """Build the application object through the entry-point convention."""
        ...  # pragma: no cover


class TargetLoader(Protocol):
    """Imports target application code from a path."""

    def load(self, path: str) -> LoadedTarget:
        """Load the code at *path* (relative paths resolve against cwd).

        Raises
        ------
        TargetLoadError
            When *path* does not exist or the import fails.
        """
        ...  # pragma: no cover


class ProcessLauncher(Protocol):
    """Starts a child process and waits for it synchronously."""

    def run(
        self,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Run *command* to completion and return its exit code.

        *env* replaces the inherited environment when given.

        Raises
        ------
        ProcessSpawnError
            When the process cannot be started.
        """
        ...  # pragma: no cover


class DocumentSink(Protocol):
    """Scoped output destination plus the serializer that writes into it."""

    def open(self, output_path: Path | None) -> AbstractContextManager[TextIO]:
        """Open *output_path* for writing, or standard output when ``None``.

        The returned context manager flushes and releases the stream on
        every exit path.  Standard output is flushed but never closed.
        """
        ...  # pragma: no cover

    def serialize(
        self,
        document: Mapping[str, Any],
        stream: TextIO,
        options: JsonOptions,
    ) -> None:
        """Write *document* to *stream* according to *options*."""
        ...  # pragma: no cover
