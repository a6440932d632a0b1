"""Tests for the subprocess launcher (infra/process_launcher.py)."""

from __future__ import annotations

import os
import sys

import pytest

from apidump.exceptions import ProcessSpawnError
from apidump.infra.process_launcher import SubprocessLauncher


class TestSubprocessLauncher:
    def test_success(self) -> None:
        assert SubprocessLauncher().run([sys.executable, "-c", "pass"]) == 0

    def test_exit_code_returned(self) -> None:
        assert SubprocessLauncher().run([sys.executable, "-c", "raise SystemExit(3)"]) == 3

    def test_env_replaces_inherited_environment(self) -> None:
        code = SubprocessLauncher().run(
            [sys.executable, "-c", "import os; raise SystemExit(int(os.environ['APIDUMP_EXIT']))"],
            env={**os.environ, "APIDUMP_EXIT": "5"},
        )
        assert code == 5

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_signal_maps_to_shell_convention(self) -> None:
        code = SubprocessLauncher().run(
            [sys.executable, "-c", "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"]
        )
        assert code == 128 + 15

    def test_missing_executable(self, tmp_path: object) -> None:
        with pytest.raises(ProcessSpawnError, match="Could not start") as exc_info:
            SubprocessLauncher().run([f"{tmp_path}/no-such-python", "-c", "pass"])
        assert isinstance(exc_info.value.__cause__, OSError)
        assert exc_info.value.hint is not None
