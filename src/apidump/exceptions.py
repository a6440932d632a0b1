"""Custom exception hierarchy for apidump.

All exceptions that cross layer boundaries must inherit from
:class:`ApidumpError`.  Raw exceptions raised while reading manifests,
importing the target application or spawning the child process are
caught in the infrastructure layer and re-raised as a typed subclass
defined here.

Hierarchy
---------
ApidumpError
├── CommandConfigurationError
│   └── DuplicateCommandError
├── UsageError
├── ManifestError
├── TargetLoadError
├── EntryPointNotFoundError
├── ProviderNotFoundError
├── DocumentNotFoundError
└── ProcessSpawnError
"""

from __future__ import annotations


class ApidumpError(Exception):
    """Base exception for all apidump errors.

    The process-level error boundary in :mod:`apidump.cli.app` renders
    the message and the optional hint, then exits with
    ``GENERAL_ERROR``.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command framework -----------------------------------------------------

class CommandConfigurationError(ApidumpError):
    """Raised when a sub-command is declared incorrectly."""


class DuplicateCommandError(CommandConfigurationError):
    """Raised when two sub-commands are registered under the same name."""


class UsageError(ApidumpError):
    """Raised by the parser when argv does not match a sub-command.

    :class:`~apidump.cli.command_runner.CommandRunner` catches it and
    turns it into help text plus ``USAGE_ERROR``; it never reaches the
    error boundary.
    """


# --- Target resolution -----------------------------------------------------

class ManifestError(ApidumpError):
    """Raised when a dependency or runtime-configuration manifest is unusable."""


class TargetLoadError(ApidumpError):
    """Raised when the target application cannot be found or imported."""


class EntryPointNotFoundError(ApidumpError):
    """Raised when the target exposes neither ``create_app`` nor ``app``."""


# --- Target application ----------------------------------------------------

class ProviderNotFoundError(ApidumpError):
    """Raised when the composed application cannot produce a document."""


class DocumentNotFoundError(ApidumpError):
    """Raised when the requested document name is not configured."""


# --- Process relaunch ------------------------------------------------------

class ProcessSpawnError(ApidumpError):
    """Raised when the child interpreter cannot be started."""
