"""Allow ``python -m apidump`` invocation.

This file is also the tool *image* that the runtime host executes in the
relaunched child process, so it must stay runnable via
:func:`runpy.run_path`.
"""

from __future__ import annotations

from apidump.cli.app import cli

if __name__ == "__main__":
    cli()
