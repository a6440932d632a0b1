"""Markers that target applications may apply to their own classes.

Usage in a target application::

    from apidump.markers import startup

    @startup
    class Startup:
        ...

The inner ``_tofile`` command lists marked classes as a diagnostic.  The
marker does not influence which entry point is used to build the app.
"""

from __future__ import annotations

from typing import TypeVar

STARTUP_MARKER: str = "__apidump_startup__"

_T = TypeVar("_T", bound=type)


def startup(cls: _T) -> _T:
    """Class decorator that tags *cls* with :data:`STARTUP_MARKER`."""
    setattr(cls, STARTUP_MARKER, True)
    return cls


def has_marker(cls: type, marker: str = STARTUP_MARKER) -> bool:
    """Return whether *cls* (or a base class) carries *marker*."""
    return getattr(cls, marker, False) is True
