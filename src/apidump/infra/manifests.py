"""Infrastructure: the target's dependency and runtime-configuration manifests.

Both manifests are JSON objects sitting next to the target entry module
(see :class:`~apidump.core.models.TargetApplicationDescriptor`).

``<name>.deps.json``::

    {
        "paths": ["src", "../shared"],
        "sitePackages": [".venv/lib/python3.12/site-packages"]
    }

``<name>.runtimeconfig.json``::

    {
        "environment": {"APP_ENV": "docs"},
        "recursionLimit": 5000
    }

Relative entries resolve against the manifest's own directory.  Every key
is optional, but both files must exist and parse: a missing or malformed
manifest is a target-resolution error.

Rules
-----
* Raw ``OSError`` / ``ValueError`` never escape — they become
  :class:`~apidump.exceptions.ManifestError`.
* No user-facing output.
"""

from __future__ import annotations

import importlib
import json
import logging
import os
import site
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from apidump.exceptions import ManifestError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _read_json_object(path: Path, kind: str) -> dict[str, Any]:
    """Parse *path* and insist on a top-level JSON object."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ManifestError(
            f"{kind} not found: {path}",
            hint="Create it next to the target module; an empty object {} is enough.",
        ) from exc
    except OSError as exc:
        raise ManifestError(f"Cannot read {kind} {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"{kind} {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestError(f"{kind} {path} must contain a JSON object.")
    return data


def _string_list(data: Mapping[str, Any], key: str, path: Path) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ManifestError(f"'{key}' in {path} must be a list of strings.")
    return value


def _resolve_entries(entries: list[str], base: Path) -> tuple[Path, ...]:
    return tuple((base / entry).resolve() for entry in entries)


# ---------------------------------------------------------------------------
# Dependency manifest
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DependencyManifest:
    """Import roots the target needs ahead of the tool's own ``sys.path``."""

    source: Path
    paths: tuple[Path, ...] = ()
    site_packages: tuple[Path, ...] = ()

    @classmethod
    def load(cls, path: str | Path) -> DependencyManifest:
        manifest_path = Path(path)
        data = _read_json_object(manifest_path, "Dependency manifest")
        base = manifest_path.resolve().parent
        return cls(
            source=manifest_path,
            paths=_resolve_entries(_string_list(data, "paths", manifest_path), base),
            site_packages=_resolve_entries(
                _string_list(data, "sitePackages", manifest_path), base,
            ),
        )

    def apply(self) -> list[str]:
        """Put the manifest's entries in front of ``sys.path``.

        Site directories go through :func:`site.addsitedir` so their
        ``.pth`` files are honoured.  Entries already on ``sys.path`` are
        moved forward too.  Returns the entries now leading ``sys.path``,
        in order.
        """
        original = list(sys.path)
        for site_dir in self.site_packages:
            site.addsitedir(str(site_dir))
        from_pth = [entry for entry in sys.path if entry not in original]

        declared = [str(p) for p in self.paths] + [str(s) for s in self.site_packages]
        front: list[str] = []
        for entry in declared + from_pth:
            if entry not in front:
                front.append(entry)
        sys.path[:] = front + [entry for entry in original if entry not in front]
        importlib.invalidate_caches()

        logger.debug("Dependency manifest %s prepended %s", self.source, front)
        return front


# ---------------------------------------------------------------------------
# Runtime-configuration manifest
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Process-level settings the target expects."""

    source: Path
    environment: Mapping[str, str] = field(default_factory=dict)
    recursion_limit: int | None = None

    @classmethod
    def load(cls, path: str | Path) -> RuntimeConfig:
        config_path = Path(path)
        data = _read_json_object(config_path, "Runtime configuration")

        environment = data.get("environment", {})
        if not isinstance(environment, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in environment.items()
        ):
            raise ManifestError(
                f"'environment' in {config_path} must map strings to strings.",
            )

        recursion_limit = data.get("recursionLimit")
        if recursion_limit is not None and (
            isinstance(recursion_limit, bool)
            or not isinstance(recursion_limit, int)
            or recursion_limit <= 0
        ):
            raise ManifestError(
                f"'recursionLimit' in {config_path} must be a positive integer.",
            )

        return cls(
            source=config_path,
            environment=dict(environment),
            recursion_limit=recursion_limit,
        )

    def apply(self) -> None:
        """Export the environment and interpreter settings to this process."""
        os.environ.update(self.environment)
        if self.recursion_limit is not None:
            sys.setrecursionlimit(self.recursion_limit)
        logger.debug(
            "Runtime configuration %s set %d environment variable(s)",
            self.source,
            len(self.environment),
        )
