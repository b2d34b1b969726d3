"""Command execution for the reference terminal endpoint.

Runs one command at a time through a shell subprocess and streams its
stdout and stderr back line by line.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], Awaitable[None]]


class ShellCommandRunner:
    """Executes commands with ``<shell> -c <command>``.

    Each command runs in a fresh subprocess; the only state carried
    between commands is the working directory the caller passes in.
    """

    def __init__(
        self,
        shell_command: str = "/bin/sh",
        timeout: float = 30.0,
    ) -> None:
        self._shell_command = shell_command
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def run(
        self,
        command: str,
        on_stdout: LineCallback,
        on_stderr: LineCallback,
        cwd: str | None = None,
    ) -> int | None:
        """Run a command, streaming output lines to the callbacks.

        Returns:
            The exit code, or None if the command timed out and was killed.

        Raises:
            ShellError: If the subprocess cannot be started.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self._shell_command, "-c", command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=os.environ.copy(),
            )
        except OSError as e:
            raise ShellError(f"Failed to start {self._shell_command}: {e}") from e

        logger.info("Running %r (pid=%d)", command, process.pid)
        pumps = asyncio.gather(
            _pump(process.stdout, on_stdout),
            _pump(process.stderr, on_stderr),
        )
        try:
            await asyncio.wait_for(pumps, timeout=self._timeout)
            return await process.wait()
        except asyncio.TimeoutError:
            logger.warning("Command %r timed out after %.0fs", command, self._timeout)
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
            return None


async def _pump(stream: asyncio.StreamReader | None, callback: LineCallback) -> None:
    if stream is None:
        return
    while True:
        line = await stream.readline()
        if not line:
            break
        await callback(line.decode("utf-8", errors="replace").rstrip("\r\n"))


class ShellError(Exception):
    """Raised when a command cannot be executed."""
