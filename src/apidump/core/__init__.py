"""Core / service layer — relaunch orchestration and the document pipeline.

Rules
-----
* No ``print()`` calls.
* No imports from ``cli`` or ``infra``.
* Collaborators are injected and typed by :mod:`apidump.core.protocols`.
"""

from apidump.core.document_service import DocumentService
from apidump.core.models import (
    DocumentRequest,
    Formatting,
    JsonOptions,
    TargetApplicationDescriptor,
    parse_formatting,
)
from apidump.core.protocols import (
    DocumentProvider,
    DocumentSink,
    LoadedTarget,
    ProcessLauncher,
    TargetLoader,
)
from apidump.core.relaunch_service import RelaunchService

__all__: list[str] = [
    "DocumentProvider",
    "DocumentRequest",
    "DocumentService",
    "DocumentSink",
    "Formatting",
    "JsonOptions",
    "LoadedTarget",
    "ProcessLauncher",
    "RelaunchService",
    "TargetApplicationDescriptor",
    "TargetLoader",
    "parse_formatting",
]
