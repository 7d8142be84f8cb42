# tests/unit/tools/test_command.py — v1
"""Tests for tools/command.py — async subprocess execution."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from jekyllbuild.tools.command import CommandFailedError, CommandRunner


class TestCommandRunner:
    @pytest.mark.asyncio
    async def test_success(self, tmp_path: Path):
        runner = CommandRunner(tmp_path)
        assert await runner.run([sys.executable, "-c", "pass"]) == 0

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, tmp_path: Path):
        runner = CommandRunner(tmp_path)
        with pytest.raises(CommandFailedError, match="exit code 3") as exc_info:
            await runner.run([sys.executable, "-c", "import sys; sys.exit(3)"])
        assert exc_info.value.returncode == 3

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path: Path):
        runner = CommandRunner(tmp_path)
        with pytest.raises(CommandFailedError) as exc_info:
            await runner.run(["definitely-not-a-real-binary-xyz"])
        assert exc_info.value.returncode == 127

    @pytest.mark.asyncio
    async def test_cwd_and_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("BASE_VAR", "base")
        runner = CommandRunner(tmp_path)
        script = (
            "import os, pathlib; "
            "pathlib.Path('out.txt').write_text("
            "os.environ['BASE_VAR'] + ':' + os.environ['CALL_VAR'])"
        )
        await runner.run([sys.executable, "-c", script], env={"CALL_VAR": "call"})
        assert (tmp_path / "out.txt").read_text() == "base:call"

    @pytest.mark.asyncio
    async def test_env_not_leaked_to_process(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("CALL_VAR", raising=False)
        runner = CommandRunner(tmp_path)
        await runner.run([sys.executable, "-c", "pass"], env={"CALL_VAR": "x"})
        import os
        assert "CALL_VAR" not in os.environ
