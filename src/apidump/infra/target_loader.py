"""Infrastructure: import the target application from a filesystem path.

The target is either a single ``.py`` module or a package directory
containing ``__init__.py``.  Its parent directory is put at the front of
``sys.path`` so the target's own absolute imports resolve, and the module
is registered in :data:`sys.modules` under its file name.

Entry-point convention
----------------------
The application object is built from the loaded module itself: a
module-level ``create_app()`` factory wins, otherwise the module-level
``app`` object is used.  Classes carrying the startup marker are only
*reported*; they never select the entry point.
"""

from __future__ import annotations

import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from apidump.exceptions import EntryPointNotFoundError, TargetLoadError
from apidump.markers import has_marker

logger = logging.getLogger(__name__)

FACTORY_NAME: str = "create_app"
APP_NAME: str = "app"


class LoadedModule:
    """Concrete :class:`~apidump.core.protocols.LoadedTarget` for a module."""

    def __init__(self, module: ModuleType, location: Path) -> None:
        self._module = module
        self._location = location

    @property
    def module(self) -> ModuleType:
        return self._module

    @property
    def name(self) -> str:
        return self._module.__name__

    @property
    def location(self) -> str:
        return str(self._location)

    def declared_types(self) -> list[type]:
        # Module dicts keep definition order; imported classes are skipped.
        return [
            obj
            for obj in vars(self._module).values()
            if isinstance(obj, type) and obj.__module__ == self._module.__name__
        ]

    def types_with_marker(self, marker: str) -> list[type]:
        return [cls for cls in self.declared_types() if has_marker(cls, marker)]

    def compose(self) -> Any:
        factory = getattr(self._module, FACTORY_NAME, None)
        if callable(factory):
            logger.debug("Composing %s via %s()", self.name, FACTORY_NAME)
            return factory()

        app = getattr(self._module, APP_NAME, None)
        if app is not None:
            logger.debug("Using %s.%s", self.name, APP_NAME)
            return app

        raise EntryPointNotFoundError(
            f"{self.name} defines neither {FACTORY_NAME}() nor '{APP_NAME}'.",
            hint=f"Expose a module-level '{APP_NAME}' object or a "
            f"'{FACTORY_NAME}()' factory in {self.location}.",
        )


class ModuleTargetLoader:
    """Concrete :class:`~apidump.core.protocols.TargetLoader`.

    Parameters
    ----------
    working_dir:
        Base for relative target paths.  Defaults to the current working
        directory at load time.
    """

    def __init__(self, working_dir: Path | None = None) -> None:
        self._working_dir = working_dir

    def load(self, path: str) -> LoadedModule:
        """Import the module or package at *path*.

        Raises
        ------
        TargetLoadError
            When *path* does not exist, is not importable, clashes with an
            already-imported module, or raises while importing.
        """
        base = self._working_dir if self._working_dir is not None else Path.cwd()
        resolved = (base / path).resolve()
        module_name, spec = self._find_spec(resolved)

        existing = sys.modules.get(module_name)
        if existing is not None and getattr(existing, "__file__", None) != spec.origin:
            raise TargetLoadError(
                f"Module name '{module_name}' is already in use by {existing!r}.",
                hint="Rename the target module so it does not shadow another import.",
            )

        parent = str(resolved.parent)
        if parent not in sys.path:
            sys.path.insert(0, parent)

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)  # type: ignore[union-attr]
        except Exception as exc:
            sys.modules.pop(module_name, None)
            raise TargetLoadError(
                f"Importing {resolved} failed: {type(exc).__name__}: {exc}",
                hint="Check the dependency manifest lists every import root the target needs.",
            ) from exc

        logger.debug("Loaded target %s from %s", module_name, resolved)
        return LoadedModule(module, resolved)

    @staticmethod
    def _find_spec(resolved: Path) -> tuple[str, importlib.machinery.ModuleSpec]:
        if resolved.is_dir():
            init_file = resolved / "__init__.py"
            if not init_file.is_file():
                raise TargetLoadError(
                    f"{resolved} is a directory without __init__.py.",
                    hint="Point at a module file or a package directory.",
                )
            spec = importlib.util.spec_from_file_location(
                resolved.name,
                init_file,
                submodule_search_locations=[str(resolved)],
            )
            module_name = resolved.name
        elif resolved.is_file():
            module_name = resolved.stem
            spec = importlib.util.spec_from_file_location(module_name, resolved)
        else:
            raise TargetLoadError(
                f"Target not found: {resolved}",
                hint="Paths are resolved relative to the current working directory.",
            )

        if spec is None or spec.loader is None:
            raise TargetLoadError(f"{resolved} is not an importable Python module.")
        return module_name, spec
