"""WebSocket transport channel.

Connects a terminal session to ``<ws-scheme>://<host>/ws/terminal`` using
the ``websockets`` asyncio client. The socket scheme mirrors the security
of the base URL: ``http`` maps to ``ws`` and ``https`` maps to ``wss``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable
from urllib.parse import urlencode, urlsplit, urlunsplit

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from termbridge.domain.models import ChannelState, TerminalMessage
from termbridge.protocol.codec import encode_message
from termbridge.transport.base import TerminalChannel, TransportError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT_PATH = "/ws/terminal"

_SCHEME_MAP = {
    "http": "ws",
    "https": "wss",
    "ws": "ws",
    "wss": "wss",
}

Connector = Callable[[str], Awaitable[Any]]


def build_endpoint_url(
    base_url: str,
    session_id: str,
    path: str = DEFAULT_ENDPOINT_PATH,
) -> str:
    """Derive the websocket endpoint for a session.

    Only the scheme and host of ``base_url`` are used, the same way a page
    derives its socket address from its own location.

    Raises:
        ValueError: If the base URL has no host or an unsupported scheme.
    """
    parts = urlsplit(base_url)
    scheme = _SCHEME_MAP.get(parts.scheme.lower())
    if scheme is None:
        raise ValueError(f"Unsupported URL scheme in {base_url!r}")
    if not parts.netloc:
        raise ValueError(f"No host in {base_url!r}")
    if not path.startswith("/"):
        path = "/" + path
    query = urlencode({"sessionId": session_id})
    return urlunsplit((scheme, parts.netloc, path, query, ""))


def _default_connector(url: str) -> Awaitable[Any]:
    # no handshake timeout: a stalled backend leaves the channel CONNECTING
    return connect(url, open_timeout=None)


class WebSocketChannel(TerminalChannel):
    """Terminal channel backed by a websocket connection.

    A single reader task delivers inbound text frames in receipt order.
    """

    def __init__(
        self,
        session_id: str,
        base_url: str = "http://localhost:8080",
        path: str = DEFAULT_ENDPOINT_PATH,
        connector: Connector | None = None,
    ) -> None:
        super().__init__(session_id)
        self._url = build_endpoint_url(base_url, session_id, path)
        self._connector = connector or _default_connector
        self._ws: Any = None
        self._read_task: asyncio.Task[None] | None = None
        self._open_called = False

    @property
    def url(self) -> str:
        return self._url

    async def open(self) -> None:
        """Connect and start the reader task."""
        if self._open_called or self.state is not ChannelState.CONNECTING:
            logger.debug("Terminal %s: open() ignored, channel is %s", self.session_id, self.state.value)
            return
        self._open_called = True

        logger.info("Connecting terminal %s to %s", self.session_id, self._url)
        try:
            ws = await self._connector(self._url)
        except (OSError, WebSocketException) as e:
            self._fail(TransportError(f"Failed to connect to {self._url}: {e}", session_id=self.session_id))
            return

        if not self._mark_connected(ws):
            # closed while the handshake was in flight
            await self._close_socket(ws)
            return
        self._read_task = asyncio.create_task(self._read_loop())

    async def send(self, message: TerminalMessage) -> None:
        """Send one message as a text frame. No-op unless OPEN."""
        if not self.is_open or self._ws is None:
            logger.warning(
                "Terminal %s: dropping %s message, channel is %s",
                self.session_id, message.kind.value, self.state.value,
            )
            return
        try:
            await self._ws.send(encode_message(message))
            logger.debug("Terminal %s sent %s: %s", self.session_id, message.kind.value, message.content[:50])
        except ConnectionClosed as e:
            self._on_connection_closed(e)
        except (OSError, WebSocketException) as e:
            self._fail(TransportError(f"Send failed: {e}", session_id=self.session_id))

    async def close(self) -> None:
        """Close the socket and stop the reader task. Idempotent."""
        was_open = self._mark_closed()
        ws, self._ws = self._ws, None
        if ws is not None:
            await self._close_socket(ws)

        task, self._read_task = self._read_task, None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if was_open:
            logger.debug("Terminal %s closed by client", self.session_id)

    # -- internals ----------------------------------------------------------

    def _mark_connected(self, ws: Any) -> bool:
        if self.state is not ChannelState.CONNECTING:
            return False
        self._ws = ws
        self._set_open()
        return True

    async def _read_loop(self) -> None:
        ws = self._ws
        try:
            async for raw in ws:
                if isinstance(raw, bytes):
                    raw = raw.decode("utf-8", errors="replace")
                logger.debug("Terminal %s received: %s", self.session_id, raw[:200])
                self._deliver(raw)
        except ConnectionClosed as e:
            self._on_connection_closed(e)
        except (OSError, WebSocketException) as e:
            self._fail(TransportError(f"Receive failed: {e}", session_id=self.session_id))
        else:
            if self.is_open:
                logger.info("Terminal %s closed by remote", self.session_id)
        finally:
            self._ws = None
            self._mark_closed()

    def _on_connection_closed(self, exc: ConnectionClosed) -> None:
        if isinstance(exc, ConnectionClosedOK):
            logger.info("Terminal %s closed by remote: %s", self.session_id, exc)
            self._mark_closed()
        else:
            self._fail(TransportError(f"Connection lost: {exc}", session_id=self.session_id))

    async def _close_socket(self, ws: Any) -> None:
        try:
            await ws.close()
        except (OSError, WebSocketException) as e:
            logger.debug("Terminal %s: error while closing socket: %s", self.session_id, e)


async def open_channel(
    session_id: str,
    base_url: str = "http://localhost:8080",
    path: str = DEFAULT_ENDPOINT_PATH,
    connector: Connector | None = None,
) -> WebSocketChannel:
    """Create a websocket channel for a session and open it."""
    channel = WebSocketChannel(session_id, base_url=base_url, path=path, connector=connector)
    await channel.open()
    return channel
