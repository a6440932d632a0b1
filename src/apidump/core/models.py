"""Domain models for apidump.

All models are **frozen** dataclasses or enums — immutable value objects
with no I/O.  Path derivation in :class:`TargetApplicationDescriptor` is
purely textual and never touches the filesystem.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import PurePath
from typing import Any

DEPS_SUFFIX: str = ".deps.json"
RUNTIME_CONFIG_SUFFIX: str = ".runtimeconfig.json"

ApiDescriptionDocument = Mapping[str, Any]
"""Opaque JSON-compatible document produced by the target application."""


# ---------------------------------------------------------------------------
# Target application
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TargetApplicationDescriptor:
    """The target's entry path plus its two derived manifest paths.

    All three share the same directory and base name.
    """

    assembly_path: str
    """Path exactly as given on the command line."""

    deps_path: str
    """Dependency manifest, e.g. ``app.deps.json`` for ``app.dll``."""

    runtime_config_path: str
    """Runtime-configuration manifest, e.g. ``app.runtimeconfig.json``."""

    @classmethod
    def from_assembly_path(cls, assembly_path: str) -> TargetApplicationDescriptor:
        """Derive the manifest paths by replacing the final suffix.

        ``bin/app.dll`` → ``bin/app.deps.json`` and
        ``bin/app.runtimeconfig.json``.  A path without a suffix simply
        gets the manifest suffix appended, so a package directory
        ``src/app/`` maps to ``src/app.deps.json``.
        """
        base = assembly_path.rstrip("/\\") or assembly_path
        suffix = PurePath(base).suffix
        if suffix:
            base = base[: -len(suffix)]
        return cls(
            assembly_path=assembly_path,
            deps_path=base + DEPS_SUFFIX,
            runtime_config_path=base + RUNTIME_CONFIG_SUFFIX,
        )


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

class Formatting(enum.Enum):
    """JSON layout modes accepted by ``--format``."""

    NONE = "None"
    """Compact output, no insignificant whitespace."""

    INDENTED = "Indented"
    """Two-space indentation."""


DEFAULT_FORMATTING: Formatting = Formatting.NONE


def parse_formatting(value: str) -> Formatting:
    """Parse ``--format`` case-insensitively.

    Modes are accepted by name or by ordinal (``0`` = None, ``1`` =
    Indented).  Anything else falls back to :data:`DEFAULT_FORMATTING`
    instead of failing.
    """
    normalized = value.strip().lower()
    for ordinal, member in enumerate(Formatting):
        if normalized in (member.value.lower(), member.name.lower(), str(ordinal)):
            return member
    return DEFAULT_FORMATTING


@dataclass(frozen=True, slots=True)
class JsonOptions:
    """Serializer preferences, usually supplied by the target application."""

    formatting: Formatting = DEFAULT_FORMATTING
    sort_keys: bool = False
    ensure_ascii: bool = False

    def with_formatting(self, formatting: Formatting) -> JsonOptions:
        return replace(self, formatting=formatting)


# ---------------------------------------------------------------------------
# Inner command request
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DocumentRequest:
    """Typed view of one ``_tofile`` invocation."""

    target_path: str
    document_name: str
    output_path: str | None = None
    host: str | None = None
    base_path: str | None = None
    format: str | None = None
    """Raw ``--format`` token; parsed late so bad values can fall back."""

    @property
    def formatting_override(self) -> Formatting | None:
        if self.format is None:
            return None
        return parse_formatting(self.format)
