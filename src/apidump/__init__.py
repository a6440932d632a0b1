"""apidump — write a web application's API description to a file.

The public ``tofile`` command relaunches itself under the target
application's own dependency and runtime manifests before importing it.
"""

from apidump.version import __version__

__all__: list[str] = ["__version__"]
