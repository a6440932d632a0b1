"""Infrastructure layer — processes, manifests, imports and serialization.

This layer wraps all interaction with the operating system and with the
target application's code.  Raw exceptions are caught here and
re-raised as :class:`~apidump.exceptions.ApidumpError` subclasses.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from apidump.infra.document_provider import (
    OpenApiAppProvider,
    resolve_json_options,
    resolve_provider,
)
from apidump.infra.json_sink import JsonDocumentSink
from apidump.infra.manifests import DependencyManifest, RuntimeConfig
from apidump.infra.process_launcher import SubprocessLauncher
from apidump.infra.target_loader import LoadedModule, ModuleTargetLoader

__all__: list[str] = [
    "DependencyManifest",
    "JsonDocumentSink",
    "LoadedModule",
    "ModuleTargetLoader",
    "OpenApiAppProvider",
    "RuntimeConfig",
    "SubprocessLauncher",
    "resolve_json_options",
    "resolve_provider",
]
