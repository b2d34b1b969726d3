"""Line-oriented console host for a termbridge session.

Hosts one terminal on stdin/stdout: transcript spans are written as they
arrive, and each line read from stdin is submitted through the session
controller. The session ends on EOF or when the backend closes.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Awaitable, Callable, TextIO

from termbridge.domain.models import OutputSpan
from termbridge.session.registry import SessionRegistry
from termbridge.session.surface import SessionHandle

logger = logging.getLogger(__name__)

LineReader = Callable[[], Awaitable[str | None]]

_CLEAR_SCREEN = "\x1b[2J\x1b[H"


async def stdin_line_reader() -> LineReader:
    """Build a line reader over stdin that does not block the event loop."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)

    async def read_line() -> str | None:
        data = await reader.readline()
        if not data:
            return None
        return data.decode("utf-8", errors="replace").rstrip("\r\n")

    return read_line


class ConsoleTerminal:
    """Runs one terminal session against the console."""

    def __init__(
        self,
        registry: SessionRegistry,
        session_id: str | None = None,
        read_line: LineReader | None = None,
        out: TextIO | None = None,
    ) -> None:
        self._registry = registry
        self._session_id = session_id
        self._read_line = read_line
        self._out = out or sys.stdout
        self._removed = False

    @property
    def removed(self) -> bool:
        """Whether the session asked its host to remove it."""
        return self._removed

    async def run(self) -> None:
        read_line = self._read_line or await stdin_line_reader()

        ids = {"session_id": self._session_id} if self._session_id else {}
        handle = SessionHandle(on_close=self._on_close, **ids)
        handle.transcript.subscribe(on_span=self._write_span, on_clear=self._clear)

        session = self._registry.create(handle)
        await session.attach()
        closed = asyncio.create_task(session.channel.wait_closed())
        try:
            while not closed.done():
                line_task = asyncio.create_task(read_line())
                done, _ = await asyncio.wait(
                    {line_task, closed}, return_when=asyncio.FIRST_COMPLETED
                )
                if closed in done:
                    line_task.cancel()
                    break
                line = line_task.result()
                if line is None:
                    logger.debug("EOF on input, closing terminal %s", session.session_id)
                    break
                session.input_line.set_value(line)
                await session.submit_current_input()
        finally:
            closed.cancel()
            await session.close()

    def _write_span(self, span: OutputSpan) -> None:
        self._out.write(span.text.replace("\r\n", "\n"))
        self._out.flush()

    def _clear(self) -> None:
        if self._out.isatty():
            self._out.write(_CLEAR_SCREEN)
            self._out.flush()

    def _on_close(self, session_id: str) -> None:
        self._removed = True
        if not self._out.closed:
            self._out.write("\n")
            self._out.flush()
        logger.info("Console terminal %s removed", session_id)
