# src/tools/command.py — v1
"""Async subprocess execution for external tools.

Output is inherited from the parent process and never interpreted; only the
exit status matters.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
from collections.abc import Mapping, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


class CommandFailedError(Exception):
    """An external command exited non-zero or could not be started."""

    def __init__(self, args: Sequence[str], returncode: int) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        super().__init__(
            f"The process '{args[0]}' failed with exit code {returncode}"
        )


class CommandRunner:
    """Run commands in a fixed working directory with the parent environment."""

    def __init__(self, cwd: Path) -> None:
        self._cwd = Path(cwd)

    async def run(
        self, args: Sequence[str], env: Mapping[str, str] | None = None
    ) -> int:
        """Run ``args`` to completion.

        Args:
            args: Program and arguments.
            env: Extra variables for this invocation only.

        Returns:
            The exit code (always 0).

        Raises:
            CommandFailedError: On a non-zero exit or a missing executable.
        """
        merged = {**os.environ, **(env or {})}
        logger.info("[command]%s", shlex.join(args))
        try:
            proc = await asyncio.create_subprocess_exec(
                *args, cwd=str(self._cwd), env=merged,
            )
        except FileNotFoundError as e:
            raise CommandFailedError(args, 127) from e

        returncode = await proc.wait()
        if returncode != 0:
            raise CommandFailedError(args, returncode)
        return returncode
